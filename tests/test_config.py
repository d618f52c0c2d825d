import json
import pytest

from wowhead import config
from wowhead.config import Settings, load_settings
from wowhead.errors import ConfigError, InvalidSemantics
from wowhead.schemas import Locale, QueryType


def write(tmp_path, data):
    path = tmp_path / "settings.json"
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path


def test_defaults():
    s = Settings()
    assert s.query_type is QueryType.Insert
    assert s.allow_empty_values is False
    assert s.append_delete_query is False
    assert s.locale is Locale.English


def test_load_from_file(tmp_path):
    path = write(tmp_path, {
        "query_type": "insert-ignore",
        "allow_empty_values": True,
        "append_delete_query": True,
        "locale": "French",
        "threads": 2,
    })
    s = load_settings(path)
    assert s.query_type is QueryType.InsertIgnore
    assert s.allow_empty_values and s.append_delete_query
    assert s.locale is Locale.French
    assert s.threads == 2


def test_legacy_numeric_query_type(tmp_path):
    assert load_settings(write(tmp_path, {"query_type": 1})).query_type is QueryType.Update


@pytest.mark.parametrize("bad", ["upsert", 0, 5])
def test_bad_query_type_raises_invalid_semantics(tmp_path, bad):
    with pytest.raises(InvalidSemantics):
        load_settings(write(tmp_path, {"query_type": bad}))


@pytest.mark.parametrize("bad", ["upsert", 0, 5, None])
def test_settings_model_raises_invalid_semantics(bad):
    with pytest.raises(InvalidSemantics):
        Settings(query_type=bad)
    with pytest.raises(InvalidSemantics):
        Settings.model_validate({"query_type": bad, "locale": "german"})


def test_env_variable(tmp_path, monkeypatch):
    monkeypatch.setenv(config.SETTINGS_ENV, str(write(tmp_path, {"query_type": "replace"})))
    assert load_settings().query_type is QueryType.Replace


def test_missing_default_file_means_defaults(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "SETTINGS_PATH", tmp_path / "absent.json")
    assert load_settings() == Settings()


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "absent.json")


@pytest.mark.parametrize("data", [
    "{not json",
    "[1, 2]",
    {"threads": 0},
    {"locale": "klingon"},
    {"timeout": -1},
])
def test_invalid_files(tmp_path, data):
    with pytest.raises(ConfigError):
        load_settings(write(tmp_path, data))


def test_project_settings_file_is_valid():
    s = load_settings(config.PROJECT_ROOT / "settings.json")
    assert s.query_type is QueryType.Replace
