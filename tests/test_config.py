from pathlib import Path

import yaml

from lazytask.config import DEFAULT_DATA_FILE, Settings, load_settings, set_user_value


def test_defaults_without_file(tmp_path: Path):
    settings = load_settings(tmp_path / "missing.yaml", environ={})
    assert settings == Settings()
    assert settings.data_file == DEFAULT_DATA_FILE


def test_values_from_yaml(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("data_file: ~/todo.json\nui: plain\nfuzzy_threshold: 0.55\nlog_file: /tmp/lazytask.log\n",
                    encoding="utf-8")
    settings = load_settings(path, environ={})
    assert settings.data_file == "~/todo.json"
    assert settings.ui == "plain"
    assert settings.fuzzy_threshold == 0.55
    assert settings.log_file == "/tmp/lazytask.log"


def test_environment_overrides_file(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("data_file: a.json\ntheme: dark-olive\n", encoding="utf-8")
    env = {"LAZYTASK_FILE": "b.json", "LAZYTASK_THEME": "dark-contrast", "LAZYTASK_UI": "plain"}
    settings = load_settings(path, environ=env)
    assert (settings.data_file, settings.theme, settings.ui) == ("b.json", "dark-contrast", "plain")


def test_invalid_yaml_is_ignored(tmp_path: Path, caplog):
    path = tmp_path / "config.yaml"
    path.write_text("ui: [unclosed\n", encoding="utf-8")
    assert load_settings(path, environ={}) == Settings()
    assert "Ignoring unreadable config" in caplog.text


def test_non_mapping_yaml_is_ignored(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    assert load_settings(path, environ={}) == Settings()


def test_threshold_is_clamped_and_validated(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("fuzzy_threshold: 3\n", encoding="utf-8")
    assert load_settings(path, environ={}).fuzzy_threshold == 1.0
    path.write_text("fuzzy_threshold: lots\n", encoding="utf-8")
    assert load_settings(path, environ={}).fuzzy_threshold == 0.7


def test_set_user_value_writes_and_removes(tmp_path: Path):
    path = tmp_path / "config.yaml"
    set_user_value("ui", "plain", path)
    set_user_value("theme", "dark-contrast", path)
    assert yaml.safe_load(path.read_text(encoding="utf-8")) == {"ui": "plain", "theme": "dark-contrast"}

    set_user_value("ui", "", path)
    assert yaml.safe_load(path.read_text(encoding="utf-8")) == {"theme": "dark-contrast"}

    set_user_value("theme", None, path)
    assert not path.exists()
