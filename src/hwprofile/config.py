"""
Detector Configuration

Manages configuration for a classification run: where system information is
read from, how probes are scheduled, and the caps used by the
recommendation mapper.

Configuration is loaded from (in order of precedence):
1. Environment variables (HWPROFILE_ROOT, HWPROFILE_COMMAND_TIMEOUT, ...)
2. User config file (~/.config/hwprofile/config.json)
3. Project config file (.hwprofile/config.json in the project root)
4. Defaults

Command-line flags are applied on top by the CLI.
"""

import os
import json
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any

from .core.confidence import ConfidenceTier
from .core.errors import ConfigError


@dataclass
class DetectorConfig:
    """Configuration for a hardware classification run."""

    # Filesystem root that sysfs/procfs paths are resolved against
    root: Path = field(default_factory=lambda: Path('/'))
    """Root directory; tests point this at a fake tree."""

    # Per-command timeout for probes that shell out
    command_timeout: float = 5.0
    """Seconds before an external command is treated as unavailable."""

    # Probe scheduling
    parallel: bool = True
    """Run probes concurrently in a thread pool."""

    max_workers: int = 8
    """Thread pool size when parallel is True."""

    # Virtualization cascade
    min_virt_confidence: ConfidenceTier = ConfidenceTier.LOW
    """Stage results below this tier are skipped by the cascade."""

    # Recommendation caps
    max_build_jobs: int = 8
    """Upper bound on suggested build parallelism."""

    max_guest_build_jobs: int = 4
    """Upper bound on suggested build parallelism inside a VM guest."""

    def __post_init__(self):
        if not isinstance(self.root, (str, Path)):
            raise ConfigError(f"root must be a path, got {self.root!r}")
        self.root = Path(self.root)
        if isinstance(self.min_virt_confidence, str):
            try:
                self.min_virt_confidence = ConfidenceTier.parse(self.min_virt_confidence)
            except ValueError as e:
                raise ConfigError(str(e)) from None
        elif not isinstance(self.min_virt_confidence, ConfidenceTier):
            raise ConfigError(f"min_virt_confidence must be a tier name, got {self.min_virt_confidence!r}")

        # JSON files and the environment may carry numbers as strings
        self.command_timeout = _as_number('command_timeout', self.command_timeout, float)
        self.max_workers = _as_number('max_workers', self.max_workers, int)
        self.max_build_jobs = _as_number('max_build_jobs', self.max_build_jobs, int)
        self.max_guest_build_jobs = _as_number('max_guest_build_jobs', self.max_guest_build_jobs, int)
        if isinstance(self.parallel, str):
            self.parallel = _parse_bool(self.parallel)
        elif not isinstance(self.parallel, bool):
            raise ConfigError(f"parallel must be true or false, got {self.parallel!r}")

        if self.command_timeout <= 0:
            raise ConfigError(f"command_timeout must be positive, got {self.command_timeout}")
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.max_build_jobs < 1 or self.max_guest_build_jobs < 1:
            raise ConfigError("build job caps must be >= 1")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = asdict(self)
        result['root'] = str(self.root)
        result['min_virt_confidence'] = self.min_virt_confidence.value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DetectorConfig':
        """Create from dictionary, ignoring unknown keys."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


def _find_project_root() -> Optional[Path]:
    """Find the project root by looking for pyproject.toml or setup.py."""
    current = Path.cwd()
    for parent in [current] + list(current.parents):
        if (parent / 'pyproject.toml').exists() or (parent / 'setup.py').exists():
            return parent
    return None


def _user_config_dir() -> Path:
    if os.name == 'nt':
        return Path(os.environ.get('APPDATA', Path.home() / 'AppData' / 'Roaming'))
    return Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config'))


def _load_config_file(path: Path) -> Optional[Dict[str, Any]]:
    """
    Load configuration from a JSON file.

    Raises:
        ConfigError: if the file parses but is not a JSON object
    """
    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError):
            return None
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a JSON object, got {type(data).__name__}")
        return data
    return None


def _as_number(name: str, value: Any, kind: type):
    """Coerce a config value to ``kind`` (int or float); bools are rejected."""
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    if kind is int and isinstance(value, float) and not value.is_integer():
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, (int, float)):
        return kind(value)
    if isinstance(value, str):
        try:
            return kind(value.strip())
        except ValueError:
            pass
    raise ConfigError(f"{name} must be {'an integer' if kind is int else 'a number'}, got {value!r}")


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ('1', 'true', 'yes', 'on'):
        return True
    if lowered in ('0', 'false', 'no', 'off'):
        return False
    raise ConfigError(f"Expected a boolean, got {value!r}")


# Environment variable -> (field name, converter)
_ENV_OVERRIDES = {
    'HWPROFILE_ROOT': ('root', Path),
    'HWPROFILE_COMMAND_TIMEOUT': ('command_timeout', float),
    'HWPROFILE_PARALLEL': ('parallel', _parse_bool),
    'HWPROFILE_MAX_WORKERS': ('max_workers', int),
}


def get_config(config_file: Optional[Path] = None) -> DetectorConfig:
    """
    Get the detector configuration.

    Loads configuration from config files and environment variables,
    with sensible defaults.

    Args:
        config_file: Explicit config file, applied after the project and
            user files and before environment variables

    Returns:
        DetectorConfig instance
    """
    config_data: Dict[str, Any] = {}

    # 1. Project config (.hwprofile/config.json)
    project_root = _find_project_root()
    if project_root:
        project_config = _load_config_file(project_root / '.hwprofile' / 'config.json')
        if project_config:
            config_data.update(project_config)

    # 2. User config (~/.config/hwprofile/config.json)
    user_config = _load_config_file(_user_config_dir() / 'hwprofile' / 'config.json')
    if user_config:
        config_data.update(user_config)

    # 3. Explicit file
    if config_file is not None:
        explicit = _load_config_file(Path(config_file))
        if explicit is None:
            raise ConfigError(f"Cannot read config file: {config_file}")
        config_data.update(explicit)

    # 4. Environment variables (highest precedence)
    for env_name, (key, convert) in _ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if raw:
            try:
                config_data[key] = convert(raw)
            except ValueError as e:
                raise ConfigError(f"{env_name}: {e}") from None

    return DetectorConfig.from_dict(config_data)


def save_config(config: DetectorConfig, path: Optional[Path] = None):
    """
    Save configuration to a file.

    Args:
        config: Configuration to save
        path: Path to save to (default: user config directory)
    """
    if path is None:
        path = _user_config_dir() / 'hwprofile' / 'config.json'

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)
