import logging

import pytest

from config import _database_url, _flag


@pytest.fixture
def no_database_env(monkeypatch):
    for key in ("DATABASE_URL", "MONGODB_URI", "MONGO_URI"):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_database_url_preferred(no_database_env, caplog):
    no_database_env.setenv("DATABASE_URL", "mongodb://primary:27017")
    no_database_env.setenv("MONGODB_URI", "mongodb://legacy:27017")
    with caplog.at_level(logging.WARNING):
        assert _database_url() == "mongodb://primary:27017"
    assert "deprecated" not in caplog.text


@pytest.mark.parametrize("key", ["MONGODB_URI", "MONGO_URI"])
def test_legacy_key_warns(no_database_env, caplog, key):
    no_database_env.setenv(key, "mongodb://legacy:27017")
    with caplog.at_level(logging.WARNING):
        assert _database_url() == "mongodb://legacy:27017"
    assert f"{key} is deprecated" in caplog.text


def test_no_database_configured(no_database_env):
    assert _database_url() is None


@pytest.mark.parametrize("raw,expected", [("true", True), (" YES ", True), ("1", True), ("off", False), ("", False)])
def test_flag(monkeypatch, raw, expected):
    monkeypatch.setenv("SOME_FLAG", raw)
    assert _flag("SOME_FLAG") is expected


def test_flag_default(monkeypatch):
    monkeypatch.delenv("SOME_FLAG", raising=False)
    assert _flag("SOME_FLAG", default=True) is True
