"""
Builds the folder tree for extracted files and the payloads derived from it.
"""
import logging
from typing import Dict, Iterable, List, Optional, Union

from ..core.config import Config, ExtractorConfig
from ..core.exceptions import ArchivePayloadError
from ..models.project import (
    ProjectFile, ProjectStructure, FolderNode, FileNode, TreeNode, ROOT_KEY, ROOT_LABEL,
)
from ..utils.parsing_utils import extract_project_files

logger = logging.getLogger(__name__)


def build_tree(files: Iterable[ProjectFile]) -> ProjectStructure:
    """
    Builds the folder/file tree for a flat file list.

    Files are listed in path order (plain code point comparison), so equal
    file sets always yield the same node keys in the same positions no matter
    what order they arrive in. Folder keys are the '/'-joined segments leading
    to them; file keys are the full path.

    Every file with a usable path stays in the flat list. A file whose key
    would clash with an existing node (a top-level `root/` folder, or a file
    standing where a folder is needed) is left out of the tree only.
    """
    ordered = sorted(files, key=lambda f: f.path)
    root = FolderNode(label=ROOT_LABEL, key=ROOT_KEY)
    folder_map: Dict[str, FolderNode] = {"": root}
    index: Dict[str, TreeNode] = {ROOT_KEY: root}
    parents: Dict[str, str] = {}
    listed: List[ProjectFile] = []

    for file in ordered:
        parts = [p for p in (file.path or "").split("/") if p.strip()]
        if not parts:
            logger.warning(f"Skipping file with no valid path parts: {file.path!r}")
            continue
        listed.append(file)
        if _collides(parts, index, folder_map):
            logger.warning(f"Not showing file whose path collides with an existing tree node: {file.path}")
            continue

        parent = root
        current_path = ""
        for part in parts[:-1]:
            current_path = f"{current_path}/{part}" if current_path else part
            folder = folder_map.get(current_path)
            if folder is None:
                folder = FolderNode(label=part, key=current_path)
                folder_map[current_path] = folder
                index[current_path] = folder
                parents[current_path] = parent.key
                parent.children.append(folder)
            parent = folder

        key = "/".join(parts)
        node = FileNode(label=parts[-1], key=key, file=file)
        index[key] = node
        parents[key] = parent.key
        parent.children.append(node)

    return ProjectStructure(files=listed, root=root, index=index, parents=parents)


def _collides(parts: List[str], index: Dict[str, TreeNode], folder_map: Dict[str, FolderNode]) -> bool:
    key = "/".join(parts)
    if key in index:
        return True
    prefix = ""
    for part in parts[:-1]:
        prefix = f"{prefix}/{part}" if prefix else part
        if prefix in index and prefix not in folder_map:
            return True
    return False


def to_archive_payload(source: Union[ProjectStructure, List[ProjectFile], None]) -> List[Dict[str, str]]:
    """
    Reduces a structure (or its file list) to plain dicts for archiving.

    Only the flat records cross this boundary, never tree nodes. An empty or
    malformed structure is a caller error: archiving nothing would hand the
    user an empty download.
    """
    if source is None:
        raise ArchivePayloadError("Project structure is empty")
    files = source.files if isinstance(source, ProjectStructure) else source
    if not isinstance(files, (list, tuple)):
        raise ArchivePayloadError(f"Expected a list of files, got {type(files).__name__}", item=files)
    if not files:
        raise ArchivePayloadError("Project structure is empty")

    payload = []
    for item in files:
        if not isinstance(item, ProjectFile):
            raise ArchivePayloadError(f"Invalid file entry: {item!r}", item=item)
        payload.append(item.to_dict())
    logger.debug(f"Prepared archive payload with {len(payload)} files")
    return payload


class ProjectStructureService:
    """Runs one extraction pass and builds the tree for it."""

    def __init__(self, config: Optional[Config] = None, extractor: Optional[ExtractorConfig] = None):
        self.extractor_config = extractor or (config.extractor if config else ExtractorConfig())

    def extract(self, text: Optional[str]) -> List[ProjectFile]:
        return extract_project_files(text, self.extractor_config)

    def parse(self, text: Optional[str]) -> Optional[ProjectStructure]:
        """Structure for the text so far, or None when there is nothing to show yet."""
        files = self.extract(text)
        if not files:
            return None
        structure = build_tree(files)
        logger.debug(f"Parsed {structure.file_count} files from {len(text)} chars")
        return structure

    def archive_payload(self, structure: Optional[ProjectStructure]) -> List[Dict[str, str]]:
        return to_archive_payload(structure)
