"""Tests for language detection and repository context formatting."""

from __future__ import annotations

from pathlib import Path

from codeharvest.core.config import ContextConfig
from codeharvest.models.project import ProjectFile
from codeharvest.utils.file_utils import (
    FileUtils,
    build_repo_context,
    files_from_context,
    format_files_for_context,
)
from codeharvest.utils.parsing_utils import extract_project_files


class TestLanguageDetection:
    def test_extension_table(self) -> None:
        assert FileUtils.detect_language("index.html") == "html"
        assert FileUtils.detect_language("a/b/style.css") == "css"
        assert FileUtils.detect_language("app.js") == "javascript"
        assert FileUtils.detect_language("App.TSX") == "typescript"
        assert FileUtils.detect_language("README.md") == "markdown"
        assert FileUtils.detect_language("application.properties") == "properties"
        assert FileUtils.detect_language("docker-compose.yml") == "yaml"

    def test_missing_or_unknown_extension(self) -> None:
        assert FileUtils.detect_language("Makefile") == "text"
        assert FileUtils.detect_language(".gitignore") == "text"
        assert FileUtils.detect_language("main.go") == "text"

    def test_normalize_language(self) -> None:
        assert FileUtils.normalize_language("TSX") == "typescript"
        assert FileUtils.normalize_language("py") == "python"
        assert FileUtils.normalize_language("java") == "java"
        assert FileUtils.normalize_language("") is None
        assert FileUtils.normalize_language(None) is None
        assert FileUtils.normalize_language("cobol") is None


class TestRepoContext:
    def test_reads_supported_files(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "App.java").write_text("class App {}\n")
        (tmp_path / "pom.xml").write_text("<project/>\n")
        (tmp_path / "notes.bin").write_text("ignored\n")

        context = build_repo_context(tmp_path)
        assert context == {"pom.xml": "<project/>\n", "src/App.java": "class App {}\n"}

    def test_skips_excluded_and_empty(self, tmp_path: Path) -> None:
        (tmp_path / "node_modules").mkdir()
        (tmp_path / "node_modules" / "lib.js").write_text("x\n")
        (tmp_path / "empty.py").write_text("")
        (tmp_path / "main.py").write_text("print(1)\n")

        assert list(build_repo_context(tmp_path)) == ["main.py"]

    def test_limits(self, tmp_path: Path) -> None:
        for i in range(5):
            (tmp_path / f"f{i}.py").write_text("x = 1\n")
        (tmp_path / "big.py").write_text("x" * 500)

        context = build_repo_context(tmp_path, ContextConfig(max_file_size=100, max_files=3))
        assert len(context) == 3
        assert "big.py" not in context

    def test_formatted_context_extracts_back(self) -> None:
        files = [
            ProjectFile(path="README.md", content="# Demo\n```bash\nnpm start\n```", language="markdown"),
            ProjectFile(path="src/main.py", content="print(1)\n", language="python"),
        ]
        text = format_files_for_context(files)
        assert text.startswith("EXISTING PROJECT FILES:")

        extracted = {f.path: f for f in extract_project_files(text)}
        assert extracted["README.md"].content == "# Demo\n```bash\nnpm start\n```"
        assert extracted["src/main.py"].content == "print(1)"
        assert extracted["src/main.py"].language == "python"

    def test_format_nothing(self) -> None:
        assert format_files_for_context([]) == ""

    def test_files_from_context(self) -> None:
        files = files_from_context({"a/b.ts": "let x;"})
        assert files == [ProjectFile(path="a/b.ts", content="let x;", language="typescript")]
