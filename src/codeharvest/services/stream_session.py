"""
Caller-side state for a live generation stream.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional, Set, List

from ..models.project import ProjectStructure, FolderNode, ProjectFile
from .structure_service import ProjectStructureService

logger = logging.getLogger(__name__)


@dataclass
class TreeState:
    """Display state that has to survive wholesale tree rebuilds, tracked by node key."""
    collapsed: Set[str] = field(default_factory=set)
    selected_key: Optional[str] = None

    def apply(self, structure: ProjectStructure):
        for folder in structure.folders():
            folder.expanded = folder.key not in self.collapsed
        if self.selected_key is not None and structure.find(self.selected_key) is None:
            logger.debug(f"Selected node {self.selected_key} no longer present, clearing selection")
            self.selected_key = None


class StreamSession:
    """
    Owns the append-only buffer of one generation stream.

    Every chunk triggers exactly one extraction over the whole buffer and one
    tree rebuild; the extraction itself keeps no state between calls. The last
    result stays available after the stream stops.
    """

    def __init__(self, service: Optional[ProjectStructureService] = None):
        self.service = service or ProjectStructureService()
        self.state = TreeState()
        self._chunks: List[str] = []
        self.structure: Optional[ProjectStructure] = None
        self.passes = 0

    @property
    def buffer(self) -> str:
        return "".join(self._chunks)

    @property
    def files(self) -> List[ProjectFile]:
        return self.structure.files if self.structure else []

    def feed(self, chunk: str) -> Optional[ProjectStructure]:
        if chunk:
            self._chunks.append(chunk)
        return self.refresh()

    def refresh(self) -> Optional[ProjectStructure]:
        structure = self.service.parse(self.buffer)
        self.passes += 1
        if structure is not None:
            self.state.apply(structure)
        elif self.state.selected_key is not None:
            self.state.selected_key = None
        self.structure = structure
        return structure

    def select(self, key: Optional[str]) -> bool:
        """Selects a node by key; returns False when no such node is displayed."""
        if key is not None and (self.structure is None or self.structure.find(key) is None):
            return False
        self.state.selected_key = key
        return True

    def selected_file(self) -> Optional[ProjectFile]:
        if self.structure is None or self.state.selected_key is None:
            return None
        node = self.structure.find(self.state.selected_key)
        return None if node is None or isinstance(node, FolderNode) else node.file

    def toggle(self, key: str) -> bool:
        """Flips a folder's expansion flag; returns the new flag."""
        node = self.structure.find(key) if self.structure else None
        if not isinstance(node, FolderNode):
            return False
        node.expanded = not node.expanded
        if node.expanded:
            self.state.collapsed.discard(key)
        else:
            self.state.collapsed.add(key)
        return node.expanded

    def reset(self):
        self._chunks.clear()
        self.structure = None
        self.state = TreeState()
        self.passes = 0
