"""
In-memory registry of open dashboard workspaces.

A workspace pairs a project store with its auto-layout store. Nothing is
persisted; workspaces live as long as the process. Each workspace carries an
asyncio lock the HTTP layer holds while mutating it.
"""
import uuid
import asyncio
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

from app.core.config import Settings, get_settings
from app.services.auto_layout import AutoLayoutStore
from app.services.project_store import ProjectStore

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    id: str
    project: ProjectStore
    auto_layout: AutoLayoutStore
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    # serializes request handlers; they all run on the event loop thread
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)


class WorkspaceRegistry:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._workspaces: Dict[str, Workspace] = {}
        self._lock = threading.Lock()

    def create(self) -> Workspace:
        workspace = Workspace(
            id=uuid.uuid4().hex,
            project=ProjectStore(self.settings),
            auto_layout=AutoLayoutStore(self.settings),
        )
        with self._lock:
            self._workspaces[workspace.id] = workspace
        logger.info(f"Workspace created: {workspace.id}")
        return workspace

    def get(self, workspace_id: str) -> Optional[Workspace]:
        with self._lock:
            return self._workspaces.get(workspace_id)

    def delete(self, workspace_id: str) -> bool:
        with self._lock:
            workspace = self._workspaces.pop(workspace_id, None)
        if workspace is None:
            return False
        workspace.project.close()
        logger.info(f"Workspace deleted: {workspace_id}")
        return True

    def clear(self) -> None:
        with self._lock:
            workspaces, self._workspaces = list(self._workspaces.values()), {}
        for workspace in workspaces:
            workspace.project.close()

    def size(self) -> int:
        with self._lock:
            return len(self._workspaces)


_registry: Optional[WorkspaceRegistry] = None


def get_registry() -> WorkspaceRegistry:
    """Process-wide registry (singleton pattern)."""
    global _registry
    if _registry is None:
        _registry = WorkspaceRegistry()
    return _registry


def reset_registry() -> WorkspaceRegistry:
    """Drop all workspaces and start over (useful for testing)."""
    global _registry
    if _registry is not None:
        _registry.clear()
    _registry = None
    return get_registry()
