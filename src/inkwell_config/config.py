"""Configuration loading for the Inkwell API.

Reads the XML configuration record from a file and falls back to the
CONFIG_XML environment variable, which pydantic-settings also picks up from a
.env file. The outcome of the first load is cached process-wide and exposed
through get_config().
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from inkwell_config.exceptions import ConfigError, ConfigFileError, ConfigNotFoundError
from inkwell_config.models import APIConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.xml"

# Module-level singleton state guarded by _lock
_lock = threading.Lock()
_attempted = False
_config: APIConfig | None = None
_failure: ConfigNotFoundError | None = None


class LoaderSettings(BaseSettings):
    """Loader settings sourced from environment variables and .env."""

    config_xml: str | None = Field(None, alias="CONFIG_XML")
    config_path: str = Field(DEFAULT_CONFIG_PATH, alias="CONFIG_PATH")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value!r}")
        return level


def load_settings() -> LoaderSettings:
    """Read LoaderSettings from the environment and .env.

    Raises:
        ConfigError: If a loader setting has an invalid value.
    """
    try:
        return LoaderSettings()
    except ValidationError as exc:
        problems = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in exc.errors())
        raise ConfigError(
            f"Invalid loader settings: {problems}",
            details={"errors": exc.errors(include_url=False, include_context=False)},
        ) from exc


def parse_config(document: str | bytes) -> APIConfig:
    """Parse an XML document into an APIConfig without touching the singleton."""
    return APIConfig.from_xml(document)


def read_config_file(xml_path: str | Path) -> APIConfig:
    """Read and parse a configuration file.

    Args:
        xml_path: Path to the XML document.

    Returns:
        The parsed APIConfig.

    Raises:
        ConfigFileError: If the file does not exist or cannot be read.
        ConfigParseError: If the file content is not a valid configuration.
    """
    path = Path(xml_path)
    try:
        data = path.read_bytes()
    except (OSError, ValueError) as exc:
        raise ConfigFileError(
            f"Cannot read config file {path}: {getattr(exc, 'strerror', None) or exc}",
            details={"path": str(path)},
        ) from exc
    return parse_config(data)


def read_config_env(settings: LoaderSettings | None = None) -> APIConfig:
    """Parse the configuration held in the CONFIG_XML environment variable.

    Raises:
        ConfigNotFoundError: If CONFIG_XML is unset or empty.
        ConfigParseError: If its content is not a valid configuration.
    """
    settings = settings or load_settings()
    if not settings.config_xml:
        raise ConfigNotFoundError("CONFIG_XML is not set", details={"variable": "CONFIG_XML"})
    return parse_config(settings.config_xml)


def _load_with_fallback(xml_path: str | Path | None, settings: LoaderSettings | None) -> APIConfig:
    if settings is None:
        try:
            settings = load_settings()
        except ConfigError as exc:
            logger.error("Cannot read loader settings: %s", exc)
            raise ConfigNotFoundError(
                "No usable configuration found",
                details={"errors": {"settings": str(exc)}},
            ) from exc
    path = Path(xml_path) if xml_path is not None else Path(settings.config_path)
    errors: dict[str, str] = {}

    try:
        config = read_config_file(path)
    except ConfigError as exc:
        errors["file"] = str(exc)
        logger.warning("Config file %s not usable (%s), attempting to load from environment", path, exc)
    else:
        logger.info("Loaded configuration from %s", path)
        return config

    try:
        config = read_config_env(settings)
    except ConfigError as exc:
        errors["env"] = str(exc)
    else:
        logger.info("Loaded configuration from CONFIG_XML")
        return config

    logger.error("No XML configuration found in %s or the environment", path)
    raise ConfigNotFoundError(
        "No usable configuration found",
        details={"path": str(path), "errors": errors},
    )


def load_config(xml_path: str | Path | None = None, settings: LoaderSettings | None = None) -> APIConfig:
    """Load the configuration once per process and return it.

    The first call tries ``xml_path`` (or ``CONFIG_PATH``) and then the
    CONFIG_XML environment variable. Concurrent callers block until that
    attempt finishes. Later calls return the cached record and ignore their
    arguments; a failed first attempt is never retried.

    Args:
        xml_path: Path to the XML file. Defaults to ``settings.config_path``.
        settings: Loader settings. Read from the environment when omitted.

    Returns:
        The process-wide APIConfig.

    Raises:
        ConfigNotFoundError: If no source produced a usable configuration.
    """
    global _attempted, _config, _failure  # noqa: PLW0603
    with _lock:
        if not _attempted:
            try:
                _config = _load_with_fallback(xml_path, settings)
            except ConfigNotFoundError as exc:
                _failure = exc
            finally:
                _attempted = True
        config, failure = _config, _failure

    if config is None:
        if failure is None:
            raise ConfigNotFoundError("Configuration load did not complete")
        raise ConfigNotFoundError(str(failure), details=failure.details) from failure
    return config


def get_config() -> APIConfig | None:
    """Return the loaded configuration, or None if no load has succeeded."""
    return _config


def reset_config() -> None:
    """Forget the cached load outcome so the next load_config() runs again."""
    global _attempted, _config, _failure  # noqa: PLW0603
    with _lock:
        _attempted = False
        _config = None
        _failure = None
