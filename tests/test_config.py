import logging

from grammatical_relations import config


def test_default_table_ships_with_package():
    assert config.DEFAULT_RELATIONS_FILE.exists()
    assert config.DEFAULT_RELATIONS_FILE.suffix == ".yaml"


def test_setup_logging(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    config.setup_logging("debug")
    config.setup_logging("nonsense")

    assert calls[0]["level"] == logging.DEBUG
    assert calls[1]["level"] == logging.INFO
    assert calls[0]["format"] == config.LOG_FORMAT
