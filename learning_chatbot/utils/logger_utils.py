# logger_utils.py - for logging messages and timing metrics, timestamps etc

import os
import time
from datetime import datetime

# Directory where log files are stored, override with LEARNING_CHATBOT_LOG_DIR
LOG_DIR = os.environ.get("LEARNING_CHATBOT_LOG_DIR", "logs")

# Path to the default log file, can be overriden
LOG_PATH = os.path.join(LOG_DIR, "chatbot.log")


class Log:
    """
    Lightweight logger for writing messages and tracking metrics.
    Everything goes to LOG_PATH; set Log.echo = True to mirror lines to stdout.
    """
    echo = False

    @staticmethod
    def write(msg: str, level: str = "INFO") -> None:
        """
        Append a message to the log file with a timestamp.
        Each entry is written as: [YYYY-MM-DD HH:MM:SS] LEVEL   | message
        """
        ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        line = f"[{ts}] {level:<7} | {msg}"
        path = LOG_PATH
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)  # created on first write, not at import
        with open(path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
        if Log.echo:
            print(line)

    @staticmethod
    def metric(tag: str, value, unit: str = "") -> None:
        """
        Record a metric (timing, counts, ...).
        Example line: [12:45:02] generate done: 0.123s
        """
        ts = datetime.now().strftime("%H:%M:%S")
        Log.write(f"[{ts}] {tag}: {value}{unit}", level="METRIC")

    @staticmethod
    def time_block(label: str) -> "_Timer":
        """
        Helper for measuring execution time of a code block.
        To use:
            with Log.time_block("generate") as t:
                do_some_work()
            t.elapsed  # seconds
        """
        return _Timer(label)


class _Timer:
    """Context manager used internally to measure time for a code block."""
    def __init__(self, label: str):
        self.label = label
        self.start = time.perf_counter()
        self.elapsed = 0.0

    def __enter__(self):
        self.start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb):
        """Record how long the block took, even when it raised."""
        self.elapsed = time.perf_counter() - self.start
        Log.metric(f"{self.label} done", round(self.elapsed, 3), "s")
        return False
