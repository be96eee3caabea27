import logging
import aiofiles
from pathlib import Path
from typing import Dict, List, Optional, Union
from ..core.config import Config
from ..core.exceptions import FileServiceError
from ..models.project import ProjectStructure, ProjectFile
from .structure_service import to_archive_payload

logger = logging.getLogger(__name__)

class FileService:
    """Service for asynchronous file operations."""

    def __init__(self, config: Optional[Config] = None, work_dir: Optional[Path] = None):
        self.config = config
        self.work_dir = Path(work_dir or (config.work_dir if config else Path.cwd())).resolve()

    def _resolve(self, file_path: Union[Path, str]) -> Path:
        full_path = self.work_dir.joinpath(file_path).resolve()
        try:
            # Security check to prevent touching files outside the output directory
            full_path.relative_to(self.work_dir)
        except ValueError:
            raise FileServiceError(f"Security error: Attempted to access file outside of output directory: {full_path}")
        return full_path

    async def write_file(self, file_path: Union[Path, str], content: str) -> Path:
        """Write content to file asynchronously."""
        full_path = self._resolve(file_path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(full_path, 'w', encoding='utf-8') as f:
                await f.write(content)
            logger.info(f"Successfully wrote file: {full_path}")
            return full_path
        except OSError as e:
            logger.error(f"Error writing to file {full_path}: {e}")
            raise FileServiceError(f"Error writing file {full_path}: {e}")

    async def write_project(self, source: Union[ProjectStructure, List[ProjectFile], None]) -> List[Path]:
        """Write every extracted file under the work directory; returns the written paths."""
        payload: List[Dict[str, str]] = to_archive_payload(source)
        written = []
        for entry in payload:
            written.append(await self.write_file(entry['path'], entry['content']))
        return written
