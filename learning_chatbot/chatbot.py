# chatbot.py
# LearningChatbot - one conversation with one brain.
# A turn is: decay old topics, learn from the user's line, answer from the graph.
# Wraps ChatbotBrain with persistence, config and timing metrics.

from __future__ import annotations

import random
from typing import List, Optional, Tuple

from learning_chatbot.core.chatbot_brain import BrainConfig, ChatbotBrain
from learning_chatbot.utils.config_manager import Config
from learning_chatbot.utils.logger_utils import Log
from learning_chatbot.utils.metrics_tracker import Metrics
from learning_chatbot.utils.model_store import load_brain, save_brain


class LearningChatbot:
    """
    Conversation facade used by the CLI.

    Public API:
      respond(text) -> reply        (decay + learn + generate)
      learn(text)                   (decay + learn, no reply)
      reply() -> str                (generate only)
      topics(n) -> [(word, score)]
      save(path=None) -> bool
      LearningChatbot.load(path, ...) -> LearningChatbot
    """

    def __init__(self,
                 brain: Optional[ChatbotBrain] = None,
                 config: Optional[Config] = None,
                 brain_file: Optional[str] = None,
                 seed: Optional[int] = None,
                 metrics: Optional[Metrics] = None):
        self.cfg = config
        if seed is None and config is not None:
            seed = config.get("seed")
        if brain is None:
            brain_cfg = config.brain_config() if config is not None else BrainConfig()
            brain = ChatbotBrain(config=brain_cfg, rng=random.Random(seed))
        self.brain = brain
        self.brain_file = brain_file or (config.get("brain_file") if config is not None else None)
        self.metrics = metrics or Metrics()
        self.turns = 0

    @classmethod
    def load(cls,
             path: str,
             config: Optional[Config] = None,
             seed: Optional[int] = None,
             metrics: Optional[Metrics] = None) -> "LearningChatbot":
        """
        Restore a saved brain from `path`. Falls back to a fresh brain (and
        logs why) when the file is missing or unreadable.
        """
        if seed is None and config is not None:
            seed = config.get("seed")
        brain_cfg = config.brain_config() if config is not None else None
        brain = load_brain(path, config=brain_cfg, rng=random.Random(seed))
        if brain is None:
            Log.write(f"[Chatbot] starting with a fresh brain instead of {path}")
        return cls(brain=brain, config=config, brain_file=path, seed=seed, metrics=metrics)

    # conversation ---------------------------------------------------------------
    def learn(self, text: str) -> None:
        with Log.time_block("ingest") as t:
            self.brain.decay()
            self.brain.ingest(text)
        self.metrics.record("ingest_time", t.elapsed)
        self.turns += 1

    def reply(self) -> str:
        with Log.time_block("generate") as t:
            out = self.brain.generate()
        self.metrics.record("generate_time", t.elapsed)
        return out

    def respond(self, text: str) -> str:
        """One conversational turn. Blank input only decays and replies."""
        self.learn(text)
        out = self.reply()
        if self.cfg is not None and self.cfg.get("autosave") and self.brain_file:
            self.save()
        return out

    def topics(self, n: int = 10) -> List[Tuple[str, float]]:
        return self.brain.top_topics(n)

    # persistence ----------------------------------------------------------------
    def save(self, path: Optional[str] = None, overwrite: bool = True) -> bool:
        target = path or self.brain_file
        if not target:
            Log.write("[Chatbot] save requested but no brain file is configured", "WARNING")
            return False
        return save_brain(self.brain, target, overwrite=overwrite)
