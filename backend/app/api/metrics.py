"""
Metrics endpoint for performance monitoring.
"""
from fastapi import APIRouter
from app.core.performance import PerformanceMonitor
from app.services.workspaces import get_registry

router = APIRouter()


@router.get("/metrics")
async def get_metrics():
    """
    Timing statistics for every tracked operation (analysis, layout
    generation, request duration) and the number of open workspaces.
    """
    return {
        'performance': PerformanceMonitor.get_all_metrics(),
        'workspaces': get_registry().size(),
    }
