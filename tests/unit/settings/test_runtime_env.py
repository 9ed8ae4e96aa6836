import orjson
import pytest

from pricesync.config import ConfigurationError, runtime
from pricesync.config.defaults_loader import collect_defaults, read_dotenv, read_json_defaults


def test_file_defaults_fill_unset_variables(monkeypatch, tmp_path):
    dotenv_path = tmp_path / ".env"
    dotenv_path.write_text("PRICESYNC_PROFILE=performance\nexport SHARED='env'\n# comment\nnot a pair\n")

    json_path = tmp_path / "pricesync_env.json"
    json_path.write_bytes(orjson.dumps({"SHARED": "json", "PRICESYNC_HISTORY_DAYS": 60, "LOG_APPEND": True}))

    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", (dotenv_path,))
    monkeypatch.setattr(runtime, "_JSON_ENV_CANDIDATES", (json_path,))
    runtime.reset_default_values()

    defaults = runtime._load_default_values()
    assert defaults == {
        "PRICESYNC_PROFILE": "performance",
        "SHARED": "env",
        "PRICESYNC_HISTORY_DAYS": "60",
        "LOG_APPEND": "true",
    }
    assert runtime._load_default_values() is defaults

    monkeypatch.delenv("PRICESYNC_HISTORY_DAYS", raising=False)
    monkeypatch.delenv("LOG_APPEND", raising=False)
    assert runtime.env_int("PRICESYNC_HISTORY_DAYS") == 60
    assert runtime.env_bool("LOG_APPEND") is True

    monkeypatch.setenv("PRICESYNC_HISTORY_DAYS", "7")
    assert runtime.env_int("PRICESYNC_HISTORY_DAYS") == 7


def test_env_str_required_and_blank(monkeypatch):
    monkeypatch.setenv("BLANK_VALUE", "  ")
    assert runtime.env_str("BLANK_VALUE", or_value="fallback") == "fallback"

    monkeypatch.delenv("MISSING_REQUIRED", raising=False)
    with pytest.raises(ConfigurationError):
        runtime.env_str("MISSING_REQUIRED", required=True)


def test_env_numbers_and_bools(monkeypatch):
    monkeypatch.setenv("INT_VALUE", "7")
    monkeypatch.setenv("FLOAT_VALUE", "2.5")
    monkeypatch.setenv("BOOL_VALUE", "YeS")
    monkeypatch.setenv("BOOL_INVALID", "perhaps")
    monkeypatch.setenv("INT_INVALID", "seven")

    assert runtime.env_int("INT_VALUE") == 7
    assert runtime.env_float("FLOAT_VALUE") == 2.5
    assert runtime.env_bool("BOOL_VALUE") is True
    with pytest.raises(ConfigurationError):
        runtime.env_bool("BOOL_INVALID")
    with pytest.raises(ConfigurationError):
        runtime.env_int("INT_INVALID")


def test_env_list_and_seconds(monkeypatch):
    monkeypatch.setenv("LIST_VALUES", "a, b ,,a")
    assert runtime.env_list("LIST_VALUES") == ("a", "b")

    monkeypatch.setenv("LIST_BLANK", " , ")
    assert runtime.env_list("LIST_BLANK", ("x",)) == ("x",)
    assert runtime.env_list("LIST_BLANK") is None
    with pytest.raises(ConfigurationError):
        runtime.env_list("LIST_BLANK", required=True)

    monkeypatch.setenv("SECONDS_NEGATIVE", "-2")
    with pytest.raises(ConfigurationError):
        runtime.env_seconds("SECONDS_NEGATIVE")


def test_loaders_handle_missing_and_invalid_files(tmp_path):
    assert read_dotenv(tmp_path / "absent.env") == {}
    assert read_json_defaults(tmp_path / "absent.json") == {}

    nested = tmp_path / "nested.json"
    nested.write_bytes(orjson.dumps({"KEY": {"nested": True}}))
    with pytest.raises(ConfigurationError):
        read_json_defaults(nested)

    broken = tmp_path / "broken.json"
    broken.write_text("{not-json")
    with pytest.raises(ConfigurationError):
        read_json_defaults(broken)

    top_level_list = tmp_path / "list.json"
    top_level_list.write_text("[1, 2]")
    with pytest.raises(ConfigurationError):
        read_json_defaults(top_level_list)


def test_first_source_wins(tmp_path):
    first = tmp_path / "first.env"
    first.write_text("KEY=\"quoted value\"\n")
    second = tmp_path / "second.env"
    second.write_text("KEY=other\nEXTRA=1\n")

    assert collect_defaults([first, second], []) == {"KEY": "quoted value", "EXTRA": "1"}
