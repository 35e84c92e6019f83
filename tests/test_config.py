import logging
import os

import pytest
import yaml

from qrthis.config import Config
from qrthis.logger import LOGGER_NAME, parse_size, setup_logger

ENV_VARS = (
    "LOVABLE_API_KEY",
    "QRTHIS_AI_GATEWAY_URL",
    "QRTHIS_AI_MODEL",
    "QRTHIS_ART_BACKEND",
    "QRTHIS_DATA_DIR",
    "QRTHIS_LOG_LEVEL",
    "QRTHIS_LOG_FILE",
    "QRTHIS_CONFIG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # No stray .env file gets picked up
    monkeypatch.chdir(tmp_path)


def test_defaults():
    config = Config.load("missing.yaml")
    assert config.generator.max_characters == 2000
    assert config.art.backend == "gateway"
    assert config.art.api_key == ""
    assert config.storage.store_path.name == "local_store.json"
    assert config.security.signup_max_requests == 3


def test_yaml_overrides(tmp_path):
    path = tmp_path / "qrthis.yaml"
    path.write_text(yaml.safe_dump({
        "generator": {"width": 300, "unknown": 1},
        "storage": {"data_dir": str(tmp_path / "data")},
        "logging": {"level": "WARNING"},
    }), encoding="utf-8")

    config = Config.load(str(path))
    assert config.generator.width == 300
    assert not hasattr(config.generator, "unknown")
    assert config.storage.signups_path == tmp_path / "data" / "signups.db"
    assert config.logging.level == "WARNING"


def test_environment_wins(tmp_path, monkeypatch):
    path = tmp_path / "qrthis.yaml"
    path.write_text(yaml.safe_dump({"art": {"backend": "local"}}), encoding="utf-8")
    monkeypatch.setenv("QRTHIS_ART_BACKEND", "huggingface")
    monkeypatch.setenv("LOVABLE_API_KEY", "secret")
    monkeypatch.setenv("QRTHIS_LOG_LEVEL", "debug")

    config = Config.load(str(path))
    assert config.art.backend == "huggingface"
    assert config.art.api_key == "secret"
    assert config.logging.level == "DEBUG"


def test_config_file_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    path.write_text(yaml.safe_dump({"generator": {"margin": 6}}), encoding="utf-8")
    monkeypatch.setenv("QRTHIS_CONFIG", str(path))
    assert Config.load().generator.margin == 6


def test_dotenv_file(tmp_path):
    (tmp_path / ".env").write_text("LOVABLE_API_KEY=from-dotenv\n", encoding="utf-8")
    try:
        assert Config.load("missing.yaml").art.api_key == "from-dotenv"
    finally:
        os.environ.pop("LOVABLE_API_KEY", None)


def test_save_masks_api_key(tmp_path, monkeypatch):
    monkeypatch.setenv("LOVABLE_API_KEY", "secret")
    config = Config.load("missing.yaml")
    out = tmp_path / "saved.yaml"
    config.save(str(out))

    saved = yaml.safe_load(out.read_text(encoding="utf-8"))
    assert saved["art"]["api_key"] == "***"
    assert saved["generator"]["width"] == 512


@pytest.mark.parametrize("text,expected", [("10MB", 10 * 1024 ** 2), ("1gb", 1024 ** 3), ("512KB", 512 * 1024), ("100", 100)])
def test_parse_size(text, expected):
    assert parse_size(text) == expected


def test_setup_logger(tmp_path):
    config = Config.load("missing.yaml")
    config.logging.level = "DEBUG"
    config.logging.file = str(tmp_path / "logs" / "qrthis.log")

    logger = setup_logger(config)
    first_handlers = list(logger.handlers)
    try:
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2

        logging.getLogger("qrthis.generator").info("hello from a module")
        for handler in logger.handlers:
            handler.flush()
        assert "hello from a module" in (tmp_path / "logs" / "qrthis.log").read_text(encoding="utf-8")

        # Calling again replaces handlers instead of stacking them
        config.logging.file = ""
        assert len(setup_logger(config).handlers) == 1
    finally:
        for handler in first_handlers + list(logger.handlers):
            handler.close()
        logger.handlers.clear()
