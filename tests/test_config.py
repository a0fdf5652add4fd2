"""
Tests for adapter settings.
"""

import logging
from configparser import ConfigParser

import pytest

from cubefilter.config import AdapterSettings, configure_logging, read_settings
from cubefilter.errors import ArgumentError
from cubefilter.logging import create_logger, get_logger


class TestReadSettings:
    def write(self, tmp_path, content):
        path = tmp_path / "cubefilter.ini"
        path.write_text(content)
        return path

    def test_defaults(self):
        settings = AdapterSettings()
        assert settings.dice is True
        assert settings.log_level is None
        assert settings.log_path is None

    def test_read_file(self, tmp_path):
        path = self.write(
            tmp_path,
            "[adapter]\ndice = no\n\n[logging]\nlevel = DEBUG\npath = /tmp/cf.log\n",
        )
        settings = read_settings(path)
        assert settings.dice is False
        assert settings.log_level == "debug"
        assert settings.log_path == "/tmp/cf.log"

    def test_missing_sections(self, tmp_path):
        path = self.write(tmp_path, "[other]\nkey = value\n")
        assert read_settings(path) == AdapterSettings()

    def test_config_parser(self):
        config = ConfigParser()
        config.read_dict({"adapter": {"dice": "true"}})
        assert read_settings(config).dice is True

    def test_invalid_values(self, tmp_path):
        with pytest.raises(ArgumentError):
            read_settings(self.write(tmp_path, "[adapter]\ndice = maybe\n"))

        with pytest.raises(ArgumentError):
            read_settings(self.write(tmp_path, "[logging]\nlevel = loud\n"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ArgumentError):
            read_settings(tmp_path / "missing.ini")


class TestLogging:
    def teardown_method(self):
        create_logger()

    def test_configure_logging_to_file(self, tmp_path):
        log_path = tmp_path / "cubefilter.log"
        logger = configure_logging(AdapterSettings(log_level="info", log_path=str(log_path)))

        assert logger is get_logger()
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.FileHandler)

        logger.info("cache invalidated")
        logger.handlers[0].flush()
        assert "INFO cache invalidated" in log_path.read_text()

    def test_repeated_configuration(self):
        create_logger()
        logger = create_logger(level="warning")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)
