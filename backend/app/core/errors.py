"""
Error codes and user-facing error bodies for the HTTP layer.

The layout engine itself never raises for bad input; these errors cover
what only the service can get wrong: unknown ids, missing prerequisites and
request limits.
"""
from typing import Dict, Optional

from fastapi import HTTPException


class ErrorCodes:
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    VISUAL_NOT_FOUND = "VISUAL_NOT_FOUND"
    LAYOUT_NOT_FOUND = "LAYOUT_NOT_FOUND"
    NO_ANALYSIS = "NO_ANALYSIS"
    INVALID_DATASET = "INVALID_DATASET"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    TIMEOUT = "TIMEOUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    ErrorCodes.PROJECT_NOT_FOUND: {
        "message": "We couldn't find that dashboard",
        "detail": "The project id doesn't match any open workspace. Workspaces live in memory and disappear when the server restarts.",
        "suggestion": "💡 Create a new project and load your data again."
    },
    ErrorCodes.VISUAL_NOT_FOUND: {
        "message": "That visual isn't on the canvas",
        "detail": "The visual may have been deleted or replaced when a layout was applied.",
        "suggestion": "💡 Refresh the project to get the current list of visuals."
    },
    ErrorCodes.LAYOUT_NOT_FOUND: {
        "message": "That layout isn't available",
        "detail": "The layout id doesn't match any of the layouts suggested for this dataset.",
        "suggestion": "💡 Pick one of the layouts returned by the last analysis."
    },
    ErrorCodes.NO_ANALYSIS: {
        "message": "Let's look at your data first",
        "detail": "A layout can only be applied after a dataset has been analyzed for this project.",
        "suggestion": "💡 Send your rows to the auto-layout analyze endpoint, then apply a layout."
    },
    ErrorCodes.INVALID_DATASET: {
        "message": "We can't analyze this dataset",
        "detail": "Rows must be a list of objects mapping column names to values.",
        "suggestion": "💡 Check that every row is an object and that the dataset stays within the row limit."
    },
    ErrorCodes.RATE_LIMIT_EXCEEDED: {
        "message": "Whoa there! Slow down a bit",
        "detail": "You're sending datasets faster than we can keep up! We limit requests to keep the service fast for everyone.",
        "suggestion": "💡 Take a quick break and try again in about a minute."
    },
    ErrorCodes.TIMEOUT: {
        "message": "This is taking longer than expected",
        "detail": "The request didn't finish in time. This usually happens with very large datasets.",
        "suggestion": "💡 Try analyzing a sample of your rows; the first few thousand are usually enough to pick a layout."
    },
    ErrorCodes.UNKNOWN_ERROR: {
        "message": "Hmm, something unexpected happened",
        "detail": "We encountered an issue we weren't expecting. Don't worry - it's not your fault!",
        "suggestion": "💡 Give it another try in a moment."
    },
}


def get_error_response(
    error_code: str,
    additional_detail: Optional[str] = None,
    correlation_id: Optional[str] = None,
) -> Dict[str, str]:
    """
    Build the error body for an error code.

    Unknown codes fall back to the UNKNOWN_ERROR text but keep their code.
    """
    error_info = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCodes.UNKNOWN_ERROR])

    response = {
        "code": error_code,
        "message": error_info["message"],
        "detail": error_info["detail"],
        "suggestion": error_info["suggestion"],
    }

    if additional_detail:
        response["detail"] = f"{response['detail']} {additional_detail}"
    if correlation_id:
        response["correlation_id"] = correlation_id

    return response


def api_error(
    status_code: int,
    error_code: str,
    additional_detail: Optional[str] = None,
    correlation_id: Optional[str] = None,
) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail=get_error_response(error_code, additional_detail, correlation_id),
    )
