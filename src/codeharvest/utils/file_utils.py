import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Optional

from ..core.config import ContextConfig
from ..models.project import ProjectFile

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "text"

LANGUAGES = (
    "html", "css", "javascript", "typescript", "json", "markdown",
    "java", "python", "xml", "yaml", "properties", "text",
)

EXTENSION_LANGUAGES = {
    '.html': 'html', '.css': 'css', '.js': 'javascript', '.json': 'json',
    '.md': 'markdown', '.java': 'java', '.ts': 'typescript', '.tsx': 'typescript',
    '.py': 'python', '.xml': 'xml', '.yml': 'yaml', '.yaml': 'yaml',
    '.properties': 'properties',
}

# Fence annotations a model commonly writes, mapped onto LANGUAGES.
LANGUAGE_ALIASES = {
    **{name: name for name in LANGUAGES},
    'htm': 'html',
    'js': 'javascript', 'jsx': 'javascript', 'mjs': 'javascript', 'cjs': 'javascript',
    'ts': 'typescript', 'tsx': 'typescript',
    'py': 'python', 'python3': 'python',
    'yml': 'yaml',
    'md': 'markdown',
    'txt': 'text', 'plaintext': 'text',
}


class FileUtils:
    """Utility functions for file languages"""

    @staticmethod
    def get_language_from_extension(ext: str) -> str:
        """Get language tag from a file extension such as '.tsx'"""
        return EXTENSION_LANGUAGES.get(ext.lower(), DEFAULT_LANGUAGE)

    @staticmethod
    def detect_language(path: str) -> str:
        """Infer the language of a forward-slash path from its extension."""
        name = path.rsplit('/', 1)[-1]
        if '.' not in name.strip('.'):
            return DEFAULT_LANGUAGE
        return FileUtils.get_language_from_extension('.' + name.rsplit('.', 1)[-1])

    @staticmethod
    def normalize_language(annotation: Optional[str]) -> Optional[str]:
        """Map a fence annotation onto a known language, or None when unrecognized."""
        if not annotation:
            return None
        return LANGUAGE_ALIASES.get(annotation.strip().lower())


def build_repo_context(repo_path: Path, config: Optional[ContextConfig] = None) -> Dict[str, str]:
    """
    Collect the content of files with a known language under a directory.
    Skips excluded directories, empty files and files above the size limit, and
    stops once the total size or file count limit would be exceeded.
    Keys are forward-slash paths relative to `repo_path`.
    """
    config = config or ContextConfig()
    excluded_dirs = {d.lower() for d in config.excluded_dirs}
    context = {}
    total_size = 0

    for root, dirs, files in os.walk(repo_path, topdown=True):
        dirs[:] = sorted(d for d in dirs if d.lower() not in excluded_dirs)

        for file in sorted(files):
            file_path = Path(root) / file
            if FileUtils.get_language_from_extension(file_path.suffix) == DEFAULT_LANGUAGE:
                continue
            try:
                size = file_path.stat().st_size
                if size == 0 or size > config.max_file_size:
                    logger.debug(f"Skipping empty or large file: {file_path} ({size} bytes)")
                    continue
                if total_size + size > config.max_total_size or len(context) >= config.max_files:
                    logger.warning(f"Reached size/file limit. Total: {total_size} bytes, Files: {len(context)}")
                    return context

                with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
                    content = f.read()
            except (IOError, OSError) as e:
                logger.warning(f"Error reading file {file_path}: {e}")
                continue

            relative_path_str = file_path.relative_to(repo_path).as_posix()
            context[relative_path_str] = content
            total_size += size
            logger.debug(f"Read file: {relative_path_str} ({size} bytes)")

    return context


def format_files_for_context(files: Iterable[ProjectFile], header: bool = True) -> str:
    """Render files in the FILE: marker format the extractor reads back."""
    parts = []
    for file in files:
        content = file.content if file.content.endswith('\n') else file.content + '\n'
        parts.append(f"FILE: {file.path}\n```{file.language}\n{content}```\n")

    if not parts:
        return ""
    body = "\n".join(parts)
    if header:
        body = "EXISTING PROJECT FILES:\nThe following files already exist in the project:\n\n" + body
    return body


def files_from_context(context: Dict[str, str]) -> list:
    """Wrap a path -> content mapping as ProjectFile records."""
    return [
        ProjectFile(path=path, content=content, language=FileUtils.detect_language(path))
        for path, content in context.items()
    ]
