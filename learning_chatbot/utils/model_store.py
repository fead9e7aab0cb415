# model_store.py - persistence layer for the chatbot brain

# handles saving and loading the learned word graph:
# - the brain hands over an opaque snapshot (ChatbotBrain.save_state)
# - snapshots are written as JSON, atomically (tmp file + os.replace)
# - loading rebuilds the rank structures through ChatbotBrain.from_state
# failures are logged and reported through the return value, they never crash the chat

import json
import os
import random
from datetime import datetime
from typing import Optional

from learning_chatbot.core.chatbot_brain import BrainConfig, ChatbotBrain
from learning_chatbot.utils.logger_utils import Log


# Helper Functions ---------------
def ts() -> str:
    """Return timestamp for logging."""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


# Brain Persistence -------------------------
def save_brain(brain: ChatbotBrain, path: str, overwrite: bool = True) -> bool:
    """
    Save the brain's full state to disk, in JSON format.
    Args:
        brain: the ChatbotBrain to snapshot
        path: target file
        overwrite: when False, refuse to replace an existing file
    Returns:
        bool: True if the file was written.
    """
    if not overwrite and os.path.exists(path):
        Log.write(f"[{ts()}] save_brain refused, file already exists: {path}", "WARNING")
        return False

    state = brain.save_state()
    tmp_path = path + ".tmp"
    try:
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False)
        os.replace(tmp_path, path)
    except (OSError, TypeError, ValueError) as e:
        Log.write(f"[{ts()}] save_brain error: {e}", "ERROR")
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        return False

    Log.write(f"[{ts()}] Saved brain ({brain.vocabulary_size()} words) to {path}")
    return True


def load_brain(path: str,
               config: Optional[BrainConfig] = None,
               rng: Optional[random.Random] = None) -> Optional[ChatbotBrain]:
    """
    Load a brain from where it's saved on disk.
    Returns:
        ChatbotBrain, or None if the file is missing or doesn't hold a valid brain.
    """
    if not os.path.exists(path):
        Log.write(f"[{ts()}] load_brain: file does not exist: {path}", "WARNING")
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        brain = ChatbotBrain.from_state(data, config=config, rng=rng)
    except OSError as e:
        Log.write(f"[{ts()}] load_brain: could not access {path}: {e}", "ERROR")
        return None
    except ValueError as e:
        # json.JSONDecodeError is a ValueError too
        Log.write(f"[{ts()}] load_brain: {path} does not contain a valid brain: {e}", "ERROR")
        return None

    Log.write(f"[{ts()}] Loaded brain ({brain.vocabulary_size()} words) from {path}")
    return brain
