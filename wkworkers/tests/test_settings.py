import pytest

from wkworkers.config import WorkersSettings
from wkworkers.config.settings import get_settings


def test_defaults(settings):
    assert settings.worker_closed_message == "Most likely the worker has been closed."
    assert settings.enable_console is True
    assert settings.log_level == "INFO"
    assert settings.config_path is None


def test_yaml_file_seeds_settings(monkeypatch, tmp_path):
    config = tmp_path / "workers.yaml"
    config.write_text("worker_closed_message: worker went away\nlog_level: debug\n", encoding="utf-8")
    monkeypatch.setenv("WKWORKERS_CONFIG_FILE", str(config))

    settings = WorkersSettings()

    assert settings.worker_closed_message == "worker went away"
    assert settings.log_level == "DEBUG"
    assert settings.config_path == config


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.delenv("WKWORKERS_CONFIG_FILE", raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("WKWORKERS_ENABLE_CONSOLE", "false")

    assert WorkersSettings().enable_console is False


def test_non_mapping_config_is_rejected(tmp_path):
    config = tmp_path / "workers.yml"
    config.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        WorkersSettings._load_file(config)


def test_get_settings_is_memoized(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()


def test_configure_logging_uses_settings(monkeypatch, settings):
    import logging

    from wkworkers.log import configure_logging

    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging(settings.model_copy(update={"log_level": "DEBUG"}))

    assert calls == [{"level": logging.DEBUG, "format": settings.log_format}]
