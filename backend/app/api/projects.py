"""
Project workspace endpoints: auto-layout, visual editing, selection,
geometry and undo/redo.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Request
from app.core.errors import ErrorCodes, api_error
from app.core.rate_limit import analysis_rate_limit, limiter
from app.core.sanitization import sanitize_project_name
from app.core.schemas import (
    AddVisualRequest,
    AlignRequest,
    DatasetRequest,
    DistributeRequest,
    HistoryResponse,
    MatchSizeRequest,
    ProjectResponse,
    ProjectUpdateRequest,
    SelectionBoxRequest,
    SelectionRequest,
    SelectLayoutRequest,
    SnapRequest,
    UpdateVisualRequest,
    Visual,
)
from app.api.routes import validate_dataset
from app.services.workspaces import Workspace, get_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects")


def _correlation_id(request: Request):
    return getattr(request.state, 'correlation_id', None)


def _get_workspace(project_id: str, request: Request) -> Workspace:
    workspace = get_registry().get(project_id)
    if workspace is None:
        raise api_error(404, ErrorCodes.PROJECT_NOT_FOUND, correlation_id=_correlation_id(request))
    return workspace


def _require_visual(workspace: Workspace, visual_id: str, request: Request) -> None:
    if workspace.project.state.get_visual(visual_id) is None:
        raise api_error(404, ErrorCodes.VISUAL_NOT_FOUND, correlation_id=_correlation_id(request))


def _snapshot(workspace: Workspace) -> ProjectResponse:
    project = workspace.project
    auto_layout = workspace.auto_layout.state
    return ProjectResponse(
        id=workspace.id,
        project_name=project.state.project_name,
        visuals=project.state.visuals,
        selected_visual_ids=project.state.selected_visual_ids,
        canvas_size=project.state.canvas_size,
        can_undo=project.can_undo(),
        can_redo=project.can_redo(),
        analysis_result=auto_layout.analysis_result,
        layout_suggestions=auto_layout.layout_suggestions,
        selected_layout_id=auto_layout.selected_layout_id,
    )


def _history(workspace: Workspace, visuals) -> HistoryResponse:
    return HistoryResponse(
        visuals=visuals,
        can_undo=workspace.project.can_undo(),
        can_redo=workspace.project.can_redo(),
    )


# Workspaces

@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project():
    return _snapshot(get_registry().create())


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: str, request: Request):
    return _snapshot(_get_workspace(project_id, request))


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(project_id: str, body: ProjectUpdateRequest, request: Request):
    workspace = _get_workspace(project_id, request)
    async with workspace.lock:
        if body.project_name is not None:
            workspace.project.set_project_name(sanitize_project_name(body.project_name))
        if body.canvas_size is not None:
            workspace.project.set_canvas_size(body.canvas_size.width, body.canvas_size.height)
        return _snapshot(workspace)


@router.delete("/{project_id}")
async def delete_project(project_id: str, request: Request):
    if not get_registry().delete(project_id):
        raise api_error(404, ErrorCodes.PROJECT_NOT_FOUND, correlation_id=_correlation_id(request))
    return {"deleted": True}


# Auto-layout

@router.post("/{project_id}/auto-layout/analyze", response_model=ProjectResponse)
@limiter.limit(analysis_rate_limit)
async def analyze_project_data(project_id: str, request: Request, body: DatasetRequest):
    """Analyze rows for this project, generate layouts and select the first."""
    workspace = _get_workspace(project_id, request)
    validate_dataset(body.rows, request)
    async with workspace.lock:
        await workspace.auto_layout.analyze_data(body.rows)
        return _snapshot(workspace)


@router.post("/{project_id}/auto-layout/select", response_model=ProjectResponse)
async def select_layout(project_id: str, body: SelectLayoutRequest, request: Request):
    workspace = _get_workspace(project_id, request)
    async with workspace.lock:
        if not workspace.auto_layout.select_layout(body.layout_id):
            raise api_error(404, ErrorCodes.LAYOUT_NOT_FOUND, correlation_id=_correlation_id(request))
        return _snapshot(workspace)


@router.post("/{project_id}/auto-layout/apply", response_model=ProjectResponse)
async def apply_layout(project_id: str, request: Request):
    """Replace the canvas with the selected layout. Undoes as a single step."""
    workspace = _get_workspace(project_id, request)
    async with workspace.lock:
        if workspace.auto_layout.apply_layout(workspace.project) is None:
            raise api_error(409, ErrorCodes.NO_ANALYSIS, correlation_id=_correlation_id(request))
        return _snapshot(workspace)


# Visuals

@router.post("/{project_id}/visuals", response_model=Visual, status_code=201)
async def add_visual(project_id: str, body: AddVisualRequest, request: Request):
    workspace = _get_workspace(project_id, request)
    async with workspace.lock:
        return workspace.project.add_visual(body.type, body.x, body.y)


@router.patch("/{project_id}/visuals/{visual_id}", response_model=Visual)
async def update_visual(project_id: str, visual_id: str, body: UpdateVisualRequest, request: Request):
    workspace = _get_workspace(project_id, request)
    async with workspace.lock:
        _require_visual(workspace, visual_id, request)
        updates = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
        return workspace.project.update_visual(visual_id, updates)


@router.delete("/{project_id}/visuals/{visual_id}", response_model=ProjectResponse)
async def remove_visual(project_id: str, visual_id: str, request: Request):
    workspace = _get_workspace(project_id, request)
    async with workspace.lock:
        _require_visual(workspace, visual_id, request)
        workspace.project.remove_visual(visual_id)
        return _snapshot(workspace)


@router.post("/{project_id}/visuals/{visual_id}/duplicate", response_model=Visual, status_code=201)
async def duplicate_visual(project_id: str, visual_id: str, request: Request):
    workspace = _get_workspace(project_id, request)
    async with workspace.lock:
        _require_visual(workspace, visual_id, request)
        return workspace.project.duplicate_visual(visual_id)


# Selection

@router.post("/{project_id}/selection", response_model=ProjectResponse)
async def select_visuals(project_id: str, body: SelectionRequest, request: Request):
    workspace = _get_workspace(project_id, request)
    async with workspace.lock:
        workspace.project.select_visuals(body.ids, additive=body.additive)
        return _snapshot(workspace)


@router.post("/{project_id}/selection/box", response_model=ProjectResponse)
async def select_in_box(project_id: str, body: SelectionBoxRequest, request: Request):
    workspace = _get_workspace(project_id, request)
    async with workspace.lock:
        workspace.project.select_in_box(body.rect, additive=body.additive)
        return _snapshot(workspace)


# Geometry on the selection

@router.post("/{project_id}/align", response_model=ProjectResponse)
async def align(project_id: str, body: AlignRequest, request: Request):
    workspace = _get_workspace(project_id, request)
    async with workspace.lock:
        workspace.project.align_selected(body.alignment)
        return _snapshot(workspace)


@router.post("/{project_id}/distribute", response_model=ProjectResponse)
async def distribute(project_id: str, body: DistributeRequest, request: Request):
    workspace = _get_workspace(project_id, request)
    async with workspace.lock:
        workspace.project.distribute_selected(body.axis)
        return _snapshot(workspace)


@router.post("/{project_id}/match-size", response_model=ProjectResponse)
async def match_size(project_id: str, body: MatchSizeRequest, request: Request):
    workspace = _get_workspace(project_id, request)
    async with workspace.lock:
        workspace.project.match_selected_size(body.dimension, body.value)
        return _snapshot(workspace)


@router.post("/{project_id}/snap", response_model=ProjectResponse)
async def snap(project_id: str, request: Request, body: Optional[SnapRequest] = None):
    workspace = _get_workspace(project_id, request)
    async with workspace.lock:
        workspace.project.snap_selected_to_grid(body.grid_size if body else None)
        return _snapshot(workspace)


# History

@router.post("/{project_id}/undo", response_model=HistoryResponse)
async def undo(project_id: str, request: Request):
    workspace = _get_workspace(project_id, request)
    async with workspace.lock:
        return _history(workspace, workspace.project.undo())


@router.post("/{project_id}/redo", response_model=HistoryResponse)
async def redo(project_id: str, request: Request):
    workspace = _get_workspace(project_id, request)
    async with workspace.lock:
        return _history(workspace, workspace.project.redo())
