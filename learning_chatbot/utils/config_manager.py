# config_manager.py - JSON config manager

import json
import os

from learning_chatbot.core.chatbot_brain import BrainConfig
from learning_chatbot.utils.logger_utils import Log

DEFAULTS = {
    "brain_file": os.path.join("data", "brain.json"),
    "autosave": False,     # save the brain after every turn
    "decay_rate": 0.10,    # topic decay per turn
    "timeout_ms": 5000,    # thinking budget per reply
    "seed": None,          # fixed seed for reproducible replies
    "show_timing": False,  # print ingest/generate timings after each reply
}


class Config:
    def __init__(self, path="config.json", create=True):
        self.path = path
        self.data = dict(DEFAULTS)
        self._load(create)

    def _load(self, create):
        if os.path.exists(self.path):
            try:
                with open(self.path, "r", encoding="utf8") as f:
                    loaded = json.load(f)
                if isinstance(loaded, dict):
                    self.data.update({k: v for k, v in loaded.items() if k in DEFAULTS})
                else:
                    Log.write(f"[Config] {self.path} is not a JSON object, using defaults", "WARNING")
            except (OSError, ValueError) as e:
                Log.write(f"[Config] load failed, using defaults: {e}", "WARNING")
        elif create:
            self.save()

    def save(self):
        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(self.path, "w", encoding="utf8") as f:
            json.dump(self.data, f, indent=2)

    def show(self):
        return "\n".join(f"{k:15} = {v}" for k, v in self.data.items())

    def get(self, key, default=None):
        return self.data.get(key, default)

    def set(self, key, val):
        """
        Set a known option, coercing `val` to the type of its default.
        Raises KeyError for unknown options and ValueError for bad values.
        """
        if key not in DEFAULTS:
            raise KeyError(f"No such option: {key}")
        self.data[key] = _coerce(DEFAULTS[key], val)
        self.save()

    def brain_config(self) -> BrainConfig:
        """Engine settings derived from this config (validated by BrainConfig)."""
        return BrainConfig(
            decay_rate=float(self.data["decay_rate"]),
            timeout_ms=int(self.data["timeout_ms"]),
        )


def _coerce(default, val):
    if isinstance(val, str):
        if isinstance(default, bool):
            low = val.strip().lower()
            if low in ("1", "true", "yes", "on"):
                return True
            if low in ("0", "false", "no", "off"):
                return False
            raise ValueError(f"not a boolean: {val!r}")
        if default is None:
            return None if val.strip().lower() in ("", "none", "null") else int(val)
        return type(default)(val)
    return val
