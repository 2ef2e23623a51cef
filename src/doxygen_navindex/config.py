"""TOML settings loader."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE = "navindex.toml"
_SECTION = "navindex"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    """Settings read from ``navindex.toml``."""

    html_dir: Path | None = None
    database: Path = Path("navindex.db")
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    Without an explicit path, ``navindex.toml`` in the working directory is
    read when it exists. Relative paths in the file resolve against the
    file's directory.

    Args:
        config_path: Optional path to the TOML file.

    Returns:
        Settings instance, defaults when no file is found.

    Raises:
        ValueError: If the file is missing, malformed or holds unknown keys.
    """
    if config_path is None:
        config_path = Path(CONFIG_FILE)
        if not config_path.exists():
            return Settings()
    elif not config_path.exists():
        msg = f"Config file does not exist: {config_path}"
        raise ValueError(msg)

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {config_path}: {exc}"
            raise ValueError(msg) from exc

    section = data.get(_SECTION, {})
    if not isinstance(section, dict):
        msg = f"[{_SECTION}] in {config_path} must be a table, got {type(section).__name__}"
        raise ValueError(msg)

    unknown = set(section) - {"html_dir", "database", "log_level"}
    if unknown:
        msg = f"Unknown keys in [{_SECTION}]: {', '.join(sorted(unknown))}"
        raise ValueError(msg)

    base = config_path.parent
    settings = Settings()
    if "html_dir" in section:
        settings.html_dir = base / _require_str(section, "html_dir")
    if "database" in section:
        settings.database = base / _require_str(section, "database")
    if "log_level" in section:
        level = _require_str(section, "log_level").upper()
        if level not in _LOG_LEVELS:
            msg = f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {level!r}"
            raise ValueError(msg)
        settings.log_level = level
    return settings


def _require_str(section: dict, key: str) -> str:
    value = section[key]
    if not isinstance(value, str):
        msg = f"[{_SECTION}] {key} must be a string, got {type(value).__name__}"
        raise ValueError(msg)
    return value
