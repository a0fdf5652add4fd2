"""Adapter settings read from an INI configuration file."""

from __future__ import annotations

from configparser import ConfigParser
from logging import Logger
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ArgumentError
from .logging import create_logger

__all__ = [
    "AdapterSettings",
    "read_settings",
    "configure_logging",
]

ADAPTER_SECTION = "adapter"
LOGGING_SECTION = "logging"

LogLevel = Literal["debug", "info", "warning", "error", "critical"]


class AdapterSettings(BaseModel):
    """Settings of an adapter instance.

    ``dice`` is the default dice flag used when a read does not pass one
    explicitly. The logging options are consumed by `configure_logging`.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    dice: bool = Field(True, description="Default dice flag for group reads")
    log_level: LogLevel | None = Field(None, description="Logger level name")
    log_path: str | None = Field(None, description="Log file, stderr if not set")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        if v is None:
            return v
        return str(v).strip().lower()


def read_settings(source: str | Path | ConfigParser) -> AdapterSettings:
    """Read adapter settings from an INI file path or a loaded
    `ConfigParser`. Missing sections or options fall back to defaults.

    Raises `ArgumentError` when the file can not be read or contains
    invalid values.
    """
    if isinstance(source, ConfigParser):
        config = source
    else:
        config = ConfigParser()
        if not config.read(source):
            raise ArgumentError(f"Unable to read settings file '{source}'")

    values = {}

    if config.has_section(ADAPTER_SECTION):
        if config.has_option(ADAPTER_SECTION, "dice"):
            try:
                values["dice"] = config.getboolean(ADAPTER_SECTION, "dice")
            except ValueError as e:
                raise ArgumentError(f"Invalid 'dice' option: {e}") from e

    if config.has_section(LOGGING_SECTION):
        if config.has_option(LOGGING_SECTION, "level"):
            values["log_level"] = config.get(LOGGING_SECTION, "level")
        if config.has_option(LOGGING_SECTION, "path"):
            values["log_path"] = config.get(LOGGING_SECTION, "path")

    try:
        return AdapterSettings(**values)
    except ValidationError as e:
        raise ArgumentError(f"Invalid adapter settings: {e}") from e


def configure_logging(settings: AdapterSettings) -> Logger:
    """Configure the package logger from `settings`."""
    return create_logger(level=settings.log_level, path=settings.log_path)
