"""
Project store: the placed-visual collection, selection and canvas.

State changes are expressed as actions applied by the pure ``reduce_project``
function. ``ProjectStore`` is an explicitly constructed holder around that
reducer which also owns the undo/redo history and exposes the geometry
operations on the current selection.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel

from app.core.config import Settings, get_settings
from app.core.schemas import CanvasSize, SelectionRect, Visual, VisualType
from app.services import geometry
from app.services.history import HistoryRecorder, HistoryStack
from app.services.visual_defaults import create_default_visual, new_visual_id

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME = 'Untitled Dashboard'
DUPLICATE_OFFSET = 20
MIN_VISUAL_WIDTH = 100
MIN_VISUAL_HEIGHT = 80
MIN_SELECTION_BOX = 5


class ProjectState(BaseModel):
    project_name: str = DEFAULT_PROJECT_NAME
    visuals: List[Visual] = []
    selected_visual_ids: List[str] = []
    canvas_size: CanvasSize = CanvasSize()

    def get_visual(self, visual_id: str) -> Optional[Visual]:
        return next((v for v in self.visuals if v.id == visual_id), None)

    @property
    def selected_visuals(self) -> List[Visual]:
        selected = set(self.selected_visual_ids)
        return [v for v in self.visuals if v.id in selected]


# Actions

@dataclass(frozen=True)
class SetProjectName:
    name: str


@dataclass(frozen=True)
class AddVisual:
    visual: Visual


@dataclass(frozen=True)
class UpdateVisual:
    visual_id: str
    updates: Dict[str, Any]


@dataclass(frozen=True)
class RemoveVisual:
    visual_id: str


@dataclass(frozen=True)
class DuplicateVisual:
    visual_id: str
    new_id: str


@dataclass(frozen=True)
class MoveVisual:
    visual_id: str
    dx: float
    dy: float


@dataclass(frozen=True)
class ResizeVisual:
    visual_id: str
    width: float
    height: float


@dataclass(frozen=True)
class SetVisuals:
    visuals: List[Visual]


@dataclass(frozen=True)
class ReplaceVisuals:
    """Swap in changed copies of existing visuals, matched by id."""
    visuals: List[Visual]


@dataclass(frozen=True)
class SelectVisuals:
    visual_ids: List[str]
    additive: bool = False


@dataclass(frozen=True)
class ToggleVisualSelection:
    visual_id: str


@dataclass(frozen=True)
class SelectAllVisuals:
    pass


@dataclass(frozen=True)
class ClearSelection:
    pass


@dataclass(frozen=True)
class SetCanvasSize:
    canvas_size: CanvasSize


@dataclass(frozen=True)
class ClearProject:
    pass


@dataclass(frozen=True)
class LoadProject:
    project_name: str
    visuals: List[Visual]
    canvas_size: CanvasSize = field(default_factory=CanvasSize)


# Actions that change the visual collection and therefore the history
HISTORY_ACTIONS = (
    AddVisual, UpdateVisual, RemoveVisual, DuplicateVisual, MoveVisual,
    ResizeVisual, SetVisuals, ReplaceVisuals, ClearProject, LoadProject,
)


def _update_one(state: ProjectState, visual_id: str, change: Callable[[Visual], Visual]) -> ProjectState:
    visuals = [change(v) if v.id == visual_id else v for v in state.visuals]
    return state.model_copy(update={'visuals': visuals})


def _apply_updates(visual: Visual, updates: Dict[str, Any]) -> Visual:
    changes = dict(updates)
    changes.pop('id', None)
    changes.pop('type', None)
    if 'position' in changes and isinstance(changes['position'], dict):
        changes['position'] = visual.position.model_copy(update=changes['position'])
    return visual.model_copy(update=changes)


def _dedupe(ids: List[str]) -> List[str]:
    return list(dict.fromkeys(ids))


def reduce_project(state: ProjectState, action) -> ProjectState:
    """Apply one action to a project state and return the new state."""
    if isinstance(action, SetProjectName):
        return state.model_copy(update={'project_name': action.name})

    if isinstance(action, AddVisual):
        return state.model_copy(update={
            'visuals': state.visuals + [action.visual],
            'selected_visual_ids': [action.visual.id],
        })

    if isinstance(action, UpdateVisual):
        return _update_one(state, action.visual_id, lambda v: _apply_updates(v, action.updates))

    if isinstance(action, RemoveVisual):
        return state.model_copy(update={
            'visuals': [v for v in state.visuals if v.id != action.visual_id],
            'selected_visual_ids': [i for i in state.selected_visual_ids if i != action.visual_id],
        })

    if isinstance(action, DuplicateVisual):
        original = state.get_visual(action.visual_id)
        if original is None:
            return state
        copy = original.model_copy(deep=True, update={'id': action.new_id})
        copy.position = copy.position.model_copy(update={
            'x': original.position.x + DUPLICATE_OFFSET,
            'y': original.position.y + DUPLICATE_OFFSET,
        })
        return state.model_copy(update={
            'visuals': state.visuals + [copy],
            'selected_visual_ids': [copy.id],
        })

    if isinstance(action, MoveVisual):
        return _update_one(state, action.visual_id, lambda v: v.model_copy(update={
            'position': v.position.model_copy(update={
                'x': max(0, v.position.x + action.dx),
                'y': max(0, v.position.y + action.dy),
            }),
        }))

    if isinstance(action, ResizeVisual):
        return _update_one(state, action.visual_id, lambda v: v.model_copy(update={
            'position': v.position.model_copy(update={
                'width': max(MIN_VISUAL_WIDTH, action.width),
                'height': max(MIN_VISUAL_HEIGHT, action.height),
            }),
        }))

    if isinstance(action, SetVisuals):
        ids = {v.id for v in action.visuals}
        return state.model_copy(update={
            'visuals': list(action.visuals),
            'selected_visual_ids': [i for i in state.selected_visual_ids if i in ids],
        })

    if isinstance(action, ReplaceVisuals):
        changed = {v.id: v for v in action.visuals}
        return state.model_copy(update={'visuals': [changed.get(v.id, v) for v in state.visuals]})

    if isinstance(action, SelectVisuals):
        known = {v.id for v in state.visuals}
        ids = [i for i in action.visual_ids if i in known]
        if action.additive:
            ids = state.selected_visual_ids + ids
        return state.model_copy(update={'selected_visual_ids': _dedupe(ids)})

    if isinstance(action, ToggleVisualSelection):
        if action.visual_id in state.selected_visual_ids:
            ids = [i for i in state.selected_visual_ids if i != action.visual_id]
        elif state.get_visual(action.visual_id) is not None:
            ids = state.selected_visual_ids + [action.visual_id]
        else:
            return state
        return state.model_copy(update={'selected_visual_ids': ids})

    if isinstance(action, SelectAllVisuals):
        return state.model_copy(update={'selected_visual_ids': [v.id for v in state.visuals]})

    if isinstance(action, ClearSelection):
        return state.model_copy(update={'selected_visual_ids': []})

    if isinstance(action, SetCanvasSize):
        return state.model_copy(update={'canvas_size': action.canvas_size})

    if isinstance(action, ClearProject):
        return state.model_copy(update={
            'project_name': DEFAULT_PROJECT_NAME,
            'visuals': [],
            'selected_visual_ids': [],
        })

    if isinstance(action, LoadProject):
        return ProjectState(
            project_name=action.project_name,
            visuals=list(action.visuals),
            canvas_size=action.canvas_size,
        )

    raise TypeError(f"Unknown project action: {type(action).__name__}")


class ProjectStore:
    """
    Holder for one project's state.

    Every visual-changing action is recorded into history through a
    coalescing recorder, so a burst of edits becomes one undo step. The
    initial state is pushed on construction so the first edit can be undone.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        history: Optional[HistoryStack] = None,
        state: Optional[ProjectState] = None,
    ):
        self.settings = settings or get_settings()
        self.state = state or ProjectState(
            canvas_size=CanvasSize(width=self.settings.canvas_width, height=self.settings.canvas_height)
        )
        self.history = history or HistoryStack(max_history=self.settings.max_history)
        self.recorder = HistoryRecorder(self.history, self.settings.history_debounce_seconds)
        self.history.push_state(self.state.visuals)

    @property
    def visuals(self) -> List[Visual]:
        return self.state.visuals

    @property
    def selected_visual_ids(self) -> List[str]:
        return self.state.selected_visual_ids

    def dispatch(self, action) -> ProjectState:
        self.state = reduce_project(self.state, action)
        if isinstance(action, HISTORY_ACTIONS):
            self.recorder.record(self.state.visuals)
        return self.state

    # Project and visual editing

    def set_project_name(self, name: str) -> None:
        self.dispatch(SetProjectName(name))

    def add_visual(self, visual_type: VisualType, x: Optional[float] = None, y: Optional[float] = None) -> Visual:
        visual = create_default_visual(visual_type, x, y)
        self.dispatch(AddVisual(visual))
        return visual

    def update_visual(self, visual_id: str, updates: Dict[str, Any]) -> Optional[Visual]:
        if self.state.get_visual(visual_id) is None:
            return None
        self.dispatch(UpdateVisual(visual_id, updates))
        return self.state.get_visual(visual_id)

    def remove_visual(self, visual_id: str) -> bool:
        if self.state.get_visual(visual_id) is None:
            return False
        self.dispatch(RemoveVisual(visual_id))
        return True

    def duplicate_visual(self, visual_id: str) -> Optional[Visual]:
        if self.state.get_visual(visual_id) is None:
            return None
        new_id = new_visual_id()
        self.dispatch(DuplicateVisual(visual_id, new_id))
        return self.state.get_visual(new_id)

    def move_visual(self, visual_id: str, dx: float, dy: float) -> None:
        self.dispatch(MoveVisual(visual_id, dx, dy))

    def resize_visual(self, visual_id: str, width: float, height: float) -> None:
        self.dispatch(ResizeVisual(visual_id, width, height))

    def set_visuals(self, visuals: List[Visual]) -> None:
        self.dispatch(SetVisuals(visuals))

    def set_canvas_size(self, width: float, height: float) -> None:
        self.dispatch(SetCanvasSize(CanvasSize(width=width, height=height)))

    def clear_project(self) -> None:
        self.dispatch(ClearProject())

    def load_project(self, project_name: str, visuals: List[Visual], canvas_size: Optional[CanvasSize] = None) -> None:
        self.dispatch(LoadProject(project_name, visuals, canvas_size or CanvasSize()))

    # Selection

    def select_visual(self, visual_id: str, additive: bool = False) -> None:
        self.dispatch(SelectVisuals([visual_id], additive=additive))

    def select_visuals(self, visual_ids: List[str], additive: bool = False) -> None:
        self.dispatch(SelectVisuals(visual_ids, additive=additive))

    def toggle_visual_selection(self, visual_id: str) -> None:
        self.dispatch(ToggleVisualSelection(visual_id))

    def select_all_visuals(self) -> None:
        self.dispatch(SelectAllVisuals())

    def clear_selection(self) -> None:
        self.dispatch(ClearSelection())

    def select_in_box(self, rect: SelectionRect, additive: bool = False) -> List[str]:
        """
        Rubber-band selection. Boxes under 5px on both axes are treated as a
        click and leave the selection alone.
        """
        if abs(rect.width) <= MIN_SELECTION_BOX and abs(rect.height) <= MIN_SELECTION_BOX:
            return self.selected_visual_ids

        hits = geometry.get_visuals_in_selection_box(self.state.visuals, rect)
        self.dispatch(SelectVisuals(hits, additive=additive))
        return self.selected_visual_ids

    # Geometry on the current selection

    def _apply_to_selection(self, operation: Callable[[List[Visual]], List[Visual]]) -> List[Visual]:
        selected = self.state.selected_visuals
        changed = operation(selected)
        if changed is not selected:
            self.dispatch(ReplaceVisuals(changed))
        return self.state.selected_visuals

    def align_selected(self, alignment: Literal['left', 'center', 'right', 'top', 'middle', 'bottom']) -> List[Visual]:
        if alignment in ('left', 'center', 'right'):
            return self._apply_to_selection(lambda vs: geometry.align_visuals_horizontal(vs, alignment))
        return self._apply_to_selection(lambda vs: geometry.align_visuals_vertical(vs, alignment))

    def distribute_selected(self, axis: Literal['horizontal', 'vertical']) -> List[Visual]:
        if axis == 'horizontal':
            return self._apply_to_selection(geometry.distribute_visuals_horizontal)
        return self._apply_to_selection(geometry.distribute_visuals_vertical)

    def match_selected_size(
        self,
        dimension: Literal['width', 'height', 'both'],
        value: Optional[float] = None,
    ) -> List[Visual]:
        if dimension == 'width':
            return self._apply_to_selection(lambda vs: geometry.match_width(vs, value))
        if dimension == 'height':
            return self._apply_to_selection(lambda vs: geometry.match_height(vs, value))
        return self._apply_to_selection(lambda vs: geometry.match_size(vs, value))

    def snap_selected_to_grid(self, grid_size: Optional[float] = None) -> List[Visual]:
        size = grid_size or self.settings.snap_grid_size

        def _snap(visuals: List[Visual]) -> List[Visual]:
            return [
                v.model_copy(update={'position': geometry.snap_position_to_grid(v.position, size)})
                for v in visuals
            ]

        return self._apply_to_selection(_snap)

    # History

    def undo(self) -> Optional[List[Visual]]:
        """Restore the previous snapshot. Returns None when at the oldest state."""
        self.recorder.flush()
        visuals = self.history.undo()
        if visuals is None:
            return None
        with self.recorder.suppressed():
            self.dispatch(SetVisuals(visuals))
        logger.debug(f"Undo applied: {len(visuals)} visuals")
        return visuals

    def redo(self) -> Optional[List[Visual]]:
        self.recorder.flush()
        visuals = self.history.redo()
        if visuals is None:
            return None
        with self.recorder.suppressed():
            self.dispatch(SetVisuals(visuals))
        logger.debug(f"Redo applied: {len(visuals)} visuals")
        return visuals

    def can_undo(self) -> bool:
        return self.history.can_undo() or self.recorder.has_pending

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def clear_history(self) -> None:
        self.recorder.cancel()
        self.history.clear_history()
        self.history.push_state(self.state.visuals)

    def close(self) -> None:
        self.recorder.close()
