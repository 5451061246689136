# config_manager.py
"""""
Settings provider for NovaCalc.

config.json holds the setting values, ui_strings.json a human description
per key (used by the settings dialog). Settings is the validated value
object the host passes around; the engine never reads it directly.
"""""
import re
import sys
import json
import logging
from dataclasses import dataclass, asdict, fields, replace as dataclass_replace
from pathlib import Path

from . import error as E

logger = logging.getLogger(__name__)

# Resolve project root depending on run mode (Script or .exe)
if getattr(sys, 'frozen', False):
    PROJECT_ROOT = Path(sys._MEIPASS)
else:
    PROJECT_ROOT = Path(__file__).resolve().parent.parent

config_json = PROJECT_ROOT / "config.json"
ui_strings = PROJECT_ROOT / "ui_strings.json"
history_json = PROJECT_ROOT / "history.json"

LAYOUTS = ("standard", "scientific")
BUTTON_SIZES = ("sm", "md", "lg")
ANGLE_UNITS = ("rad", "deg")

Setting_Choices = {
    "layout": LAYOUTS,
    "button_size": BUTTON_SIZES,
    "angle_unit": ANGLE_UNITS,
}

COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


@dataclass(frozen=True)
class Settings:
    precision: int = 2
    layout: str = "standard"
    button_size: str = "md"
    theme_color: str = "#6366f1"
    darkmode: bool = True
    digit_grouping: bool = True
    angle_unit: str = "rad"
    save_history: bool = False
    shift_to_copy: bool = True

    def __post_init__(self):
        for setting in fields(self):
            validate_setting(setting.name, getattr(self, setting.name))

    @property
    def degrees(self):
        return self.angle_unit == "deg"

    @classmethod
    def from_dict(cls, values):
        """Build Settings from a dict; unknown keys are ignored."""
        known = {setting.name for setting in fields(cls)}
        return cls(**{key: value for key, value in values.items() if key in known})

    def to_dict(self):
        return asdict(self)

    def replace(self, **changes):
        return dataclass_replace(self, **changes)


def validate_setting(key, value):
    """Raise ConfigurationError (5001) if value is not allowed for key."""
    default = getattr(Settings, key)
    if isinstance(default, bool):
        valid = isinstance(value, bool)
    elif isinstance(default, int):
        valid = isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 8
    elif key in Setting_Choices:
        valid = value in Setting_Choices[key]
    elif key == "theme_color":
        valid = isinstance(value, str) and COLOR_PATTERN.match(value) is not None
    else:
        valid = isinstance(value, str)

    if not valid:
        raise E.ConfigurationError(f"{key}={value!r}", code="5001")


def load_setting_value(key_value, path=None):
    path = path or config_json
    try:
        with open(path, 'r', encoding='utf-8') as f:
            settings_dict = json.load(f)

    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return {} if key_value == "all" else None


    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value)


def load_setting_description(key_value, path=None):
    path = path or ui_strings
    try:
        with open(path, 'r', encoding='utf-8') as f:
            descriptions = json.load(f)

    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return {} if key_value == "all" else key_value


    if key_value == "all":
        return descriptions

    else:
        return descriptions.get(key_value, key_value)


def save_setting(settings_dict, path=None):
    path = path or config_json
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(settings_dict, f, indent=4)
            return settings_dict

    except OSError as e:
        logger.error("Could not write %s: %s", path, e)
        return {}


def load_settings(path=None):
    """Load Settings from config.json; every invalid or missing key falls back to its default."""
    stored = load_setting_value("all", path)
    if not isinstance(stored, dict):
        logger.warning("Configuration is not a JSON object, using defaults")
        return Settings()

    values = {}
    for setting in fields(Settings):
        if setting.name not in stored:
            continue
        try:
            validate_setting(setting.name, stored[setting.name])
        except E.ConfigurationError as e:
            logger.warning("Ignoring %s, using default %r", e, setting.default)
            continue
        values[setting.name] = stored[setting.name]
    return Settings(**values)


def save_settings(settings, path=None):
    """Write settings to config.json. Raises ConfigurationError (5002) on failure."""
    path = path or config_json
    if save_setting(settings.to_dict(), path) == {}:
        raise E.ConfigurationError(str(path), code="5002")
    return settings


def load_history(path=None):
    """Return the persisted history entries (opaque list) or [] if there are none."""
    path = path or history_json
    try:
        with open(path, 'r', encoding='utf-8') as f:
            entries = json.load(f)
    except FileNotFoundError:
        return []
    except json.JSONDecodeError as e:
        logger.warning("Could not read %s: %s", path, e)
        return []

    if not isinstance(entries, list):
        logger.warning("History file %s does not hold a list", path)
        return []
    return entries


def save_history(entries, path=None):
    path = path or history_json
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(entries, f, indent=4, ensure_ascii=False)
    except OSError as e:
        logger.error("Could not write %s: %s", path, e)
        return False
    return True
