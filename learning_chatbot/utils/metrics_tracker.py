# metrics_tracker.py - running sum/count per metric, optionally persisted as JSON

import json
import os
from collections import defaultdict

from learning_chatbot.utils.logger_utils import Log


class Metrics:
    def __init__(self, path=None):
        self.path = path  # None keeps everything in memory
        self.m = defaultdict(float)
        self.n = defaultdict(int)
        self._load()

    def _load(self):
        if self.path and os.path.exists(self.path):
            try:
                with open(self.path, "r", encoding="utf8") as f:
                    d = json.load(f)
                for k, v in d.items():
                    self.m[k] = float(v["sum"])
                    self.n[k] = int(v["count"])
            except (OSError, ValueError, KeyError, TypeError) as e:
                Log.write(f"[Metrics] load failed: {e}", "WARNING")

    def save(self):
        if not self.path:
            return
        d = {k: {"sum": self.m[k], "count": self.n[k]} for k in self.m}
        with open(self.path, "w", encoding="utf8") as f:
            json.dump(d, f, indent=2)

    def record(self, key, val):
        self.m[key] += val
        self.n[key] += 1

    def avg(self, key):
        if self.n[key] == 0:
            return 0.0
        return self.m[key] / self.n[key]

    def count(self, key):
        return self.n[key]

    def summary(self):
        """{metric: (count, average)}"""
        return {k: (self.n[k], self.avg(k)) for k in self.m}
