"""
Auto-layout store: analysis result, layout suggestions and the chosen layout.

``apply_layout`` is the only place suggestions turn into placed visuals; the
whole set is committed to the project in one step so it undoes as a unit.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from app.core.config import Settings, get_settings
from app.core.schemas import DataAnalysisResult, LayoutSuggestion, Visual
from app.services.analyzer import analyze_dataset
from app.services.classifier import ColumnRoleClassifier
from app.services.layout_generator import generate_layouts
from app.services.project_store import ProjectStore
from app.services.visual_defaults import build_visual

logger = logging.getLogger(__name__)


class AutoLayoutState(BaseModel):
    analysis_result: Optional[DataAnalysisResult] = None
    is_analyzing: bool = False
    layout_suggestions: List[LayoutSuggestion] = []
    selected_layout_id: Optional[str] = None
    is_generating: bool = False


class AutoLayoutStore:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        role_classifier: Optional[ColumnRoleClassifier] = None,
    ):
        self.settings = settings or get_settings()
        self.role_classifier = role_classifier
        self.state = AutoLayoutState()

    @property
    def selected_layout(self) -> Optional[LayoutSuggestion]:
        return next(
            (l for l in self.state.layout_suggestions if l.id == self.state.selected_layout_id),
            None,
        )

    async def analyze_data(self, rows: List[Dict[str, Any]]) -> DataAnalysisResult:
        """
        Analyze a dataset, generate layouts for it and select the first one.

        The work itself is synchronous; the flag is cleared even if analysis
        fails so the store never stays stuck in the analyzing state.
        """
        self.state.is_analyzing = True
        try:
            analysis = analyze_dataset(rows, self.role_classifier)
            self.state.analysis_result = analysis
            self.generate_layouts(analysis)
        finally:
            self.state.is_analyzing = False

        if self.state.layout_suggestions:
            self.state.selected_layout_id = self.state.layout_suggestions[0].id

        logger.info(
            f"Auto-layout analysis done: {analysis.total_rows} rows, "
            f"{len(self.state.layout_suggestions)} layouts"
        )
        return analysis

    def generate_layouts(self, analysis: DataAnalysisResult) -> List[LayoutSuggestion]:
        self.state.is_generating = True
        try:
            self.state.layout_suggestions = generate_layouts(analysis)
        finally:
            self.state.is_generating = False
        return self.state.layout_suggestions

    def select_layout(self, layout_id: str) -> bool:
        """Select a layout by id. Unknown ids leave the selection unchanged."""
        if not any(l.id == layout_id for l in self.state.layout_suggestions):
            return False
        self.state.selected_layout_id = layout_id
        return True

    def apply_layout(self, project_store: ProjectStore) -> Optional[List[Visual]]:
        layout = self.selected_layout
        if layout is None or self.state.analysis_result is None:
            return None

        canvas = project_store.state.canvas_size
        visuals = [
            build_visual(
                suggestion,
                layout,
                canvas,
                padding=self.settings.grid_padding,
                gap=self.settings.grid_gap,
            )
            for suggestion in layout.visuals
        ]

        project_store.set_visuals(visuals)
        project_store.set_project_name(self.state.analysis_result.suggested_title)
        logger.info(f"Applied layout '{layout.id}' with {len(visuals)} visuals")
        return visuals

    def reset(self) -> None:
        self.state = AutoLayoutState()
