# config_manager.py
import os
from pathlib import Path
import json

config_json = Path(__file__).resolve().parent / "config.json"
ui_strings = Path(__file__).resolve().parent / "ui_strings.json"

# Used when config.json is missing, unreadable or lacks a key
DEFAULT_SETTINGS = {
    "decimal_places": 10,
    "decimal_precision": 50,
    "max_parse_depth": 100,
    "max_substitution_depth": 32,
    "degree_mode": False,
    "debug": False,
    "darkmode": False,
    "show_equation": True,
    "after_paste_enter": False,
    "show_latex": True,
}


def config_path():
    """Return the settings file in use; MATHAST_CONFIG points to an alternative file."""
    override = os.environ.get("MATHAST_CONFIG")
    if override:
        return Path(override)
    return config_json


def load_setting_value(key_value):
    settings_dict = dict(DEFAULT_SETTINGS)
    try:
        with open(config_path(), 'r', encoding= 'utf-8') as f:
            settings_dict.update(json.load(f))

    except (FileNotFoundError, json.JSONDecodeError):
        pass

    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value, 0)


def load_setting_description(key_value):
    try:
        with open(ui_strings, 'r', encoding= 'utf-8') as f:
            settings_dict = json.load(f)

    except (FileNotFoundError, json.JSONDecodeError):
        return {}

    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value, 0)


def save_setting(settings_dict):
    try:
        with open(config_path(), 'w', encoding= 'utf-8') as f:
            json.dump(settings_dict, f, indent=4)
            return settings_dict

    except OSError:
        return {}
