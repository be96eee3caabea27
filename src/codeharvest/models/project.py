"""
Project models produced by the extractor and the tree builder
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union, Iterator, Tuple

FILE_TYPE = "file"
FOLDER_TYPE = "folder"

ROOT_KEY = "root"
ROOT_LABEL = "Project"


@dataclass(frozen=True)
class ProjectFile:
    """A single file recovered from generated text."""
    path: str  # Normalized, forward-slash separated, relative.
    content: str
    language: str = "text"

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def type(self) -> str:
        return FILE_TYPE

    def to_dict(self) -> Dict[str, str]:
        """Flat representation with no tree linkage, safe to serialize."""
        return {
            "path": self.path,
            "name": self.name,
            "content": self.content,
            "language": self.language,
            "type": self.type,
        }


@dataclass
class FileNode:
    label: str
    key: str
    file: ProjectFile

    @property
    def type(self) -> str:
        return FILE_TYPE

    @property
    def content(self) -> str:
        return self.file.content

    @property
    def language(self) -> str:
        return self.file.language


@dataclass
class FolderNode:
    label: str
    key: str
    children: List["TreeNode"] = field(default_factory=list)
    expanded: bool = True

    @property
    def type(self) -> str:
        return FOLDER_TYPE


TreeNode = Union[FolderNode, FileNode]


@dataclass
class ProjectStructure:
    """
    Result of one extraction pass: the flat file list plus its folder tree.

    Nodes only point down to their children. Lookups that need to go up the
    tree use `parents`, which maps every node key to its parent's key.
    """
    files: List[ProjectFile]
    root: FolderNode
    index: Dict[str, TreeNode] = field(default_factory=dict)
    parents: Dict[str, str] = field(default_factory=dict)

    def find(self, key: str) -> Optional[TreeNode]:
        return self.index.get(key)

    def ancestors(self, key: str) -> List[str]:
        """Keys of all folders above `key`, nearest first, ending with the root."""
        chain = []
        current = self.parents.get(key)
        while current is not None:
            chain.append(current)
            current = self.parents.get(current)
        return chain

    def keys(self) -> List[str]:
        return list(self.index.keys())

    def edges(self) -> List[Tuple[str, str]]:
        """(parent_key, child_key) pairs in display order."""
        return [(parent.key, child.key) for parent, child in self._walk_pairs(self.root)]

    def folders(self) -> Iterator[FolderNode]:
        for node in self.index.values():
            if isinstance(node, FolderNode):
                yield node

    @property
    def file_count(self) -> int:
        return len(self.files)

    def _walk_pairs(self, folder: FolderNode):
        for child in folder.children:
            yield folder, child
            if isinstance(child, FolderNode):
                yield from self._walk_pairs(child)
