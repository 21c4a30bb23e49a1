"""Settings for approvable.

Values come from ``APPROVABLE_*`` environment variables, a ``.env`` file, or
a YAML file read by ``load_settings``. ``configure_logging`` turns the
logging fields into handlers on the ``approvable`` logger; library modules
themselves only call ``logging.getLogger(__name__)``.
"""

import logging
import logging.handlers
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal, Union

import yaml
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOGGER_NAME = "approvable"
LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Key under which an application's own YAML file may nest these settings
YAML_SECTION = "approvable"


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./approvable.db"
    echo_sql: bool = False

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"
    file_logging: bool = False
    console_logging: bool = True
    log_max_bytes: int = 10 * 1024 * 1024
    log_backup_count: int = 5

    # Resolution of fresh_timestamp(); "seconds" matches most DATETIME columns
    timestamp_precision: Literal["seconds", "microseconds"] = "seconds"

    model_config = SettingsConfigDict(
        env_prefix="APPROVABLE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LEVELS)}")
        return value

    @property
    def log_file(self) -> Path:
        return Path(self.log_dir) / f"{LOGGER_NAME}.log"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def read_settings_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Read raw settings values from a YAML file.

    The values may sit at the document root or under an ``approvable:`` key,
    so an application can keep them inside its own config file. ``$VAR`` and
    ``${VAR}`` in string values are expanded from the environment. An empty
    file or section yields an empty dict.

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If the file is not valid YAML
        TypeError: If the document or the section is not a mapping
    """
    config_file = Path(config_path)
    if not config_file.is_file():
        raise FileNotFoundError(f"Settings file not found: {config_path}")

    document = yaml.safe_load(config_file.read_text()) or {}
    if not isinstance(document, dict):
        raise TypeError(f"Settings file root must be a mapping, got {type(document).__name__}")

    values = document
    if YAML_SECTION in document:
        values = document[YAML_SECTION] or {}
        if not isinstance(values, dict):
            raise TypeError(f"'{YAML_SECTION}' section must be a mapping, got {type(values).__name__}")

    return {key: _expand_env_vars(value) for key, value in values.items()}


def _expand_env_vars(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    if isinstance(value, dict):
        return {key: _expand_env_vars(item) for key, item in value.items()}
    return value


def load_settings(config_path: Union[str, Path]) -> Settings:
    """Build Settings from a YAML file; environment variables still apply for missing keys."""
    return Settings(**read_settings_file(config_path))


def configure_logging(settings: Settings = None) -> logging.Logger:
    """Attach handlers to the ``approvable`` logger according to settings.

    Handlers installed by an earlier call are closed and replaced, so calling
    again with different settings takes effect. Handlers added by the
    application are left alone.
    """
    settings = settings or get_settings()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(settings.log_level)

    for handler in list(logger.handlers):
        if getattr(handler, "_approvable", False):
            logger.removeHandler(handler)
            handler.close()

    handlers = []
    if settings.file_logging:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                settings.log_file,
                maxBytes=settings.log_max_bytes,
                backupCount=settings.log_backup_count,
            )
        )
    if settings.console_logging:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler._approvable = True
        logger.addHandler(handler)

    return logger
