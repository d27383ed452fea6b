from pathlib import Path

import pytest

from winterolympics.config import AppConfig, build_store
from winterolympics.exceptions import InvalidConfigurationException
from winterolympics.storage.store import JsonFileStore, MemoryStore


def test_defaults_from_empty_environment():
    config = AppConfig.from_env({})
    assert config.data_dir == Path.home() / ".winterolympics"
    assert config.storage_backend == "json"
    assert config.log_level == "INFO"


def test_values_from_environment(tmp_path):
    config = AppConfig.from_env(
        {
            "WINTEROLYMPICS_HOME": str(tmp_path),
            "WINTEROLYMPICS_STORAGE": "Memory",
            "WINTEROLYMPICS_LOG_LEVEL": "debug",
        }
    )
    assert config.data_dir == tmp_path
    assert config.storage_backend == "memory"
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize(
    "environ",
    [
        {"WINTEROLYMPICS_STORAGE": "sqlite"},
        {"WINTEROLYMPICS_LOG_LEVEL": "LOUD"},
    ],
)
def test_invalid_values_are_rejected(environ):
    with pytest.raises(InvalidConfigurationException):
        AppConfig.from_env(environ)


def test_dict_round_trip(tmp_path):
    config = AppConfig(data_dir=tmp_path, storage_backend="memory", log_level="WARNING")
    assert AppConfig.from_dict(config.to_dict()) == config


def test_build_store(tmp_path):
    assert isinstance(build_store(AppConfig(storage_backend="memory")), MemoryStore)

    store = build_store(AppConfig(data_dir=tmp_path))
    assert isinstance(store, JsonFileStore)
    assert store.directory == tmp_path
