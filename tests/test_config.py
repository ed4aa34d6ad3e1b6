from pathlib import Path

import pytest

from credkit.config import DEFAULT_NOTES, Settings


def test_defaults():
    s = Settings.from_env({})
    assert s.output_dir == Path(".")
    assert s.log_level == "WARNING"
    assert s.notes == DEFAULT_NOTES


def test_values_from_environment(tmp_path):
    s = Settings.from_env(
        {
            "CREDKIT_OUTPUT_DIR": str(tmp_path),
            "CREDKIT_LOG_LEVEL": "debug",
            "CREDKIT_NOTES": "Alpha Coin Banking System",
        }
    )
    assert s.output_dir == tmp_path
    assert s.log_level == "DEBUG"
    assert s.notes == "Alpha Coin Banking System"


def test_invalid_log_level():
    with pytest.raises(ValueError):
        Settings.from_env({"CREDKIT_LOG_LEVEL": "chatty"})


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("CREDKIT_NOTES", "from env")
    assert Settings.from_env().notes == "from env"
