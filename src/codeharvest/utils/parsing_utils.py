import logging
import re
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from ..core.config import ExtractorConfig
from ..models.project import ProjectFile
from .file_utils import FileUtils, DEFAULT_LANGUAGE

logger = logging.getLogger(__name__)

FENCE = "```"

# Opening fence at the start of a section body. Group 2 is empty when the
# fence line has not been terminated yet (the buffer ends inside it).
_OPEN_FENCE = re.compile(r'```[ \t]*([\w+#.-]*)[^\n]*?(\r?\n|\Z)')
_TRAILING_FENCE = re.compile(r'(?:\A|\n)[ \t]*`+[ \t]*\s*\Z')
_LEADING_BLANK_LINES = re.compile(r'\A(?:[ \t]*\r?\n)+')

_ILLEGAL_PATH_CHARS = re.compile(r'[<>:"|?*`\x00-\x1f\x7f]')
_CODE_SMELL = re.compile(r'\b(?:package|import|class|interface)\s+\S|xmlns', re.IGNORECASE)


@lru_cache(maxsize=8)
def _marker_pattern(marker: str) -> "re.Pattern":
    # Line-anchored; tolerates markdown emphasis or quoting such as "**FILE:**" or "> FILE:".
    return re.compile(
        r'^[ \t]*(?:[>*]+[ \t]*)?' + re.escape(marker) + r'([^\r\n]*)',
        re.IGNORECASE | re.MULTILINE,
    )


def extract_project_files(text: Optional[str], config: Optional[ExtractorConfig] = None) -> List[ProjectFile]:
    """
    Segments generated text into files announced by "FILE: <path>" lines.

    Always re-run on the whole accumulated buffer: a section without its
    closing fence is returned with whatever content it has so far and is
    superseded by the longer version on a later pass. Malformed markup never
    raises; it only yields fewer files, or the single fallback file when the
    text holds no usable section at all.
    """
    config = config or ExtractorConfig()
    if not text or not text.strip():
        return []

    records: Dict[str, ProjectFile] = {}

    for raw_line, body, terminated in _split_sections(text, config.marker):
        if not terminated:
            continue
        path_part, inline_fence, annotation = raw_line.partition(FENCE)
        path = clean_path(path_part, config.max_path_length)
        if path is None:
            continue

        content, annotation = _parse_body(body, bool(inline_fence), annotation if inline_fence else None)
        if not content:
            # Path announced but no body streamed in yet.
            continue

        language = FileUtils.normalize_language(annotation) or FileUtils.detect_language(path)
        existing = records.get(path)
        if existing is None or len(content) > len(existing.content):
            records[path] = ProjectFile(path=path, content=content, language=language)
            logger.debug(f"Parsed file: {path} ({language}, {len(content)} chars)")

    if records:
        return list(records.values())

    stripped = text.strip()
    if len(stripped) > config.fallback_threshold:
        logger.debug("No files extracted, treating entire text as a single file")
        return [ProjectFile(path=config.fallback_path, content=stripped, language=DEFAULT_LANGUAGE)]
    return []


def _split_sections(text: str, marker: str) -> List[Tuple[str, str, bool]]:
    """
    (marker line remainder, body, terminated) for every marker, body running
    to the next marker. A marker line without its newline yet is unterminated.
    """
    matches = list(_marker_pattern(marker).finditer(text))
    sections = []
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        body = text[match.end():end]
        terminated = body.startswith(("\n", "\r\n"))
        sections.append((match.group(1), body.split("\n", 1)[1] if terminated else "", terminated))
    return sections


def clean_path(raw: str, max_length: int = 200) -> Optional[str]:
    """
    Normalizes a captured path, or returns None when it is not usable as one.
    Rejected: empty paths, paths over `max_length`, paths escaping with '..',
    and captures that spilled into code (declarations, XML namespaces).
    """
    path = _ILLEGAL_PATH_CHARS.sub('', raw.replace(FENCE, '')).strip().replace('\\', '/')
    segments = [segment for segment in path.split('/') if segment not in ('', '.')]
    path = '/'.join(segments)

    if not path:
        return None
    if len(path) > max_length:
        logger.debug(f"Skipping overlong path candidate: {path[:50]}")
        return None
    if '..' in segments:
        logger.debug(f"Skipping path leaving the project root: {path}")
        return None
    if _CODE_SMELL.search(path):
        logger.debug(f"Skipping invalid path (likely captured content): {path[:50]}")
        return None
    return path


def _parse_body(body: str, opened: bool, annotation: Optional[str]) -> Tuple[str, Optional[str]]:
    if not opened:
        candidate = body.lstrip(' \t\r\n')
        match = _OPEN_FENCE.match(candidate)
        if match:
            if not match.group(2):
                return "", match.group(1)
            opened = True
            annotation = match.group(1)
            body = candidate[match.end():]

    content = _take_fenced(body) if opened else body
    content = _TRAILING_FENCE.sub('', content)
    content = _LEADING_BLANK_LINES.sub('', content).rstrip()
    return content, annotation


def _take_fenced(body: str) -> str:
    """Body up to the fence closing the file, skipping fenced blocks nested inside it."""
    depth = 0
    pos = 0
    for line in body.splitlines(keepends=True):
        stripped = line.strip()
        if stripped.startswith(FENCE):
            if stripped.lstrip('`').strip():
                depth += 1
            elif depth:
                depth -= 1
            else:
                return body[:pos]
        pos += len(line)
    return body
