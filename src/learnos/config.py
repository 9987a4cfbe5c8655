"""Settings loading and logging setup."""
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

import yaml
from dotenv import load_dotenv
from rich.logging import RichHandler

from learnos.errors import ConfigError

DEFAULT_CONFIG_PATH = str(Path.home() / ".learnos" / "config.yaml")

# Environment variable -> settings field
ENV_OVERRIDES = {
    "LEARNOS_MODEL": "model",
    "LEARNOS_TIMEOUT": "timeout",
    "LEARNOS_ORIGIN": "origin",
    "LEARNOS_PATH": "path",
    "LEARNOS_QUIZ_LENGTH": "quiz_length",
    "LEARNOS_LOG_LEVEL": "log_level",
}

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class Settings:
    api_key: str = ""
    model: str = "gemini-2.5-flash"
    timeout: float = 60.0
    origin: str = "https://learnos.app"
    path: str = "/"
    quiz_length: int = 5
    log_level: str = "WARNING"


def _read_config_file(config_path: str) -> dict:
    path = Path(config_path)
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: expected a mapping at the top level")
    return data


def _positive(name: str, value, cast):
    try:
        number = cast(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}") from None
    if number <= 0:
        raise ConfigError(f"{name} must be positive, got {value!r}")
    return number


def load_settings(config_path: str = DEFAULT_CONFIG_PATH, environ=None) -> Settings:
    """Build settings from defaults, the YAML config file and the environment.

    Environment variables win over the file; ``.env`` is loaded first but never
    overrides variables that are already set.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ
    values = {}
    fields = set(Settings.__dataclass_fields__)
    for key, value in _read_config_file(config_path).items():
        if key in fields:
            values[key] = value
    api_key = environ.get("GEMINI_API_KEY") or environ.get("API_KEY")
    if api_key:
        values["api_key"] = api_key
    for var, name in ENV_OVERRIDES.items():
        if environ.get(var):
            values[name] = environ[var]
    if "timeout" in values:
        values["timeout"] = _positive("timeout", values["timeout"], float)
    if "quiz_length" in values:
        values["quiz_length"] = _positive("quiz_length", values["quiz_length"], int)
    if "log_level" in values:
        level = str(values["log_level"]).upper()
        if level not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {values['log_level']!r}")
        values["log_level"] = level
    return replace(Settings(), **values)


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
