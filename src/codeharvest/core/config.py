# src/codeharvest/core/config.py

import os
from pathlib import Path
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field, fields
import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError

# Define the project root to find the configs directory
try:
    PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent
except Exception:
    PROJECT_ROOT = Path.cwd()

ENV_PREFIX = "CODEHARVEST_"

@dataclass
class ExtractorConfig:
    marker: str = "FILE:"
    fallback_threshold: int = 50
    max_path_length: int = 200
    fallback_path: str = "generated-code.txt"

    def validate(self):
        if not self.marker or not self.marker.strip():
            raise ConfigurationError("'marker' must be a non-empty string")
        if any(ch in self.marker for ch in "\r\n"):
            raise ConfigurationError("'marker' must fit on a single line")
        if self.fallback_threshold < 0:
            raise ConfigurationError("'fallback_threshold' must not be negative")
        if self.max_path_length <= 0:
            raise ConfigurationError("'max_path_length' must be positive")
        if not self.fallback_path:
            raise ConfigurationError("'fallback_path' must not be empty")

@dataclass
class ContextConfig:
    max_file_size: int = 100_000
    max_total_size: int = 500_000
    max_files: int = 50
    excluded_dirs: List[str] = field(default_factory=lambda: [
        '.git', 'node_modules', '__pycache__', 'venv', '.venv', '.idea', '.vscode',
        'build', 'dist', 'target'
    ])

    def validate(self):
        for name in ('max_file_size', 'max_total_size', 'max_files'):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"'{name}' must be positive")

@dataclass
class Config:
    """Main configuration class"""
    config_path: Optional[Path] = None
    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)
    context: ContextConfig = field(default_factory=ContextConfig)
    work_dir: Path = field(default_factory=Path.cwd)

    def __post_init__(self):
        """Post-initialization logic to load configs."""
        load_dotenv()

        if self.config_path is not None:
            if not Path(self.config_path).exists():
                raise ConfigurationError(f"Config file not found: {self.config_path}")
            self._load_from_file(Path(self.config_path))
        else:
            default_path = PROJECT_ROOT / "configs/codeharvest.yaml"
            if not default_path.exists():
                default_path = Path.cwd() / "configs/codeharvest.yaml"
            if default_path.exists():
                self._load_from_file(default_path)

        self._load_from_env()
        self.extractor.validate()
        self.context.validate()

    def _load_from_file(self, path: Path):
        """Load extractor and context settings from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Error reading config file {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        self.extractor = _build_section(ExtractorConfig, data.get('extractor') or {}, path)
        self.context = _build_section(ContextConfig, data.get('context') or {}, path)

    def _load_from_env(self):
        """Load configuration overrides from environment variables."""
        overrides = {
            'MARKER': (self.extractor, 'marker', str),
            'FALLBACK_THRESHOLD': (self.extractor, 'fallback_threshold', int),
            'MAX_PATH_LENGTH': (self.extractor, 'max_path_length', int),
            'FALLBACK_PATH': (self.extractor, 'fallback_path', str),
            'MAX_FILE_SIZE': (self.context, 'max_file_size', int),
            'MAX_TOTAL_SIZE': (self.context, 'max_total_size', int),
            'MAX_FILES': (self.context, 'max_files', int),
        }
        for suffix, (section, attr, cast) in overrides.items():
            raw = os.getenv(ENV_PREFIX + suffix)
            if raw is None:
                continue
            try:
                setattr(section, attr, cast(raw))
            except ValueError:
                raise ConfigurationError(f"Invalid value for {ENV_PREFIX + suffix}: {raw!r}")


def _build_section(cls, values: Dict[str, Any], path: Path):
    if not isinstance(values, dict):
        raise ConfigurationError(f"Section for {cls.__name__} in {path} must be a mapping")

    known = {f.name: f for f in fields(cls)}
    unknown = set(values) - set(known)
    if unknown:
        raise ConfigurationError(f"Unknown keys in {path}: {', '.join(sorted(unknown))}")

    kwargs = {}
    for name, value in values.items():
        default = getattr(cls(), name)
        try:
            if isinstance(default, list):
                kwargs[name] = [str(v) for v in value]
            else:
                kwargs[name] = type(default)(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid value for '{name}' in {path}: {value!r}")
    return cls(**kwargs)
