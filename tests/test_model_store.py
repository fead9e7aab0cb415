# tests/test_model_store.py
import json
import random

from learning_chatbot.core.chatbot_brain import BrainConfig, ChatbotBrain
from learning_chatbot.utils.model_store import load_brain, save_brain


def trained_brain():
    b = ChatbotBrain(rng=random.Random(0), clock=lambda: 0.0)
    b.ingest("This is a test.")
    b.ingest("This was never going to work!")
    return b


def test_save_then_load(tmp_path):
    path = tmp_path / "brains" / "brain.json"
    brain = trained_brain()
    assert save_brain(brain, str(path))
    assert path.exists()
    assert not (tmp_path / "brains" / "brain.json.tmp").exists()

    loaded = load_brain(str(path), rng=random.Random(0))
    assert loaded is not None
    assert sorted(loaded.words()) == sorted(brain.words())
    assert loaded.node("test").punctuation_rank(".") == 1
    assert loaded.start_node.successor_rank("This") == 2


def test_saved_file_is_plain_json(tmp_path):
    path = tmp_path / "brain.json"
    save_brain(trained_brain(), str(path))
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["version"] == 1
    assert "This" in data["words"]


def test_refuses_to_overwrite_when_asked(tmp_path):
    path = tmp_path / "brain.json"
    path.write_text("keep me", encoding="utf-8")
    assert save_brain(trained_brain(), str(path), overwrite=False) is False
    assert path.read_text(encoding="utf-8") == "keep me"


def test_load_missing_file_returns_none(tmp_path):
    assert load_brain(str(tmp_path / "nope.json")) is None


def test_load_garbage_returns_none(tmp_path):
    path = tmp_path / "brain.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_brain(str(path)) is None


def test_load_inconsistent_state_returns_none(tmp_path):
    path = tmp_path / "brain.json"
    state = trained_brain().save_state()
    state["words"]["ghost"] = {"successors": [["nowhere", 1]]}
    path.write_text(json.dumps(state), encoding="utf-8")
    assert load_brain(str(path)) is None


def test_load_with_explicit_config(tmp_path):
    path = tmp_path / "brain.json"
    save_brain(trained_brain(), str(path))
    loaded = load_brain(str(path), config=BrainConfig(decay_rate=0.5))
    assert loaded.decay_rate == 0.5


def test_failures_are_logged(tmp_path):
    from learning_chatbot.utils import logger_utils
    load_brain(str(tmp_path / "nope.json"))
    log = open(logger_utils.LOG_PATH, encoding="utf-8").read()
    assert "does not exist" in log
