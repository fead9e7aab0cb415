# chatbot_brain.py
# The learning/generation engine.
# Owns every WordNode (keyed by surface word), a decaying global topic score per
# word, a per-utterance score map, and the recursive sentence search.

from __future__ import annotations

import math
import random
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from .ranked_multimap import RankedMultimap
from .sentence_builder import SentenceBuilder
from .tokenizer import split_words
from .word_node import END_TOKEN, START_TOKEN, WordNode

Clock = Callable[[], float]

STATE_VERSION = 1


@dataclass(frozen=True)
class BrainConfig:
    """
    Knobs for learning and for the sentence search.
    Chances are integer percentages out of 100.
    """
    nominal_length: int = 10          # target sentence depth
    max_length: int = 25              # depth is drawn from [nominal, max)
    timeout_ms: int = 5000            # wall-clock budget per generate()
    topics: int = 7                   # topic words matched against
    topic_split: float = 0.48         # share of topics taken from global scores
    min_branches: int = 2
    max_branches: int = 6             # branches per node drawn from [min, max)
    skip_chance: int = 30             # chance to skip a fresh word (or the end marker)
    loop_chance: int = 5              # chance to take a word already in the sentence
    punctuation_chance: int = 40      # chance punctuation is considered at all
    punctuation_skip_chance: int = 50 # chance a given punctuation mark is passed over
    topic_skip_percent: float = 1.0   # % of word sightings skipped off the top of the topics
    breadth_assurance_chance: int = 50
    decay_rate: float = 0.10

    def __post_init__(self) -> None:
        if self.nominal_length < 1 or self.max_length <= self.nominal_length:
            raise ValueError("need 1 <= nominal_length < max_length")
        if self.timeout_ms < 0:
            raise ValueError("timeout_ms must be >= 0")
        if self.topics < 0 or not 0.0 <= self.topic_split <= 1.0:
            raise ValueError("bad topic settings")
        if self.min_branches < 1 or self.max_branches <= self.min_branches:
            raise ValueError("need 1 <= min_branches < max_branches")
        for name in ("skip_chance", "loop_chance", "punctuation_chance",
                     "punctuation_skip_chance", "breadth_assurance_chance"):
            if not 0 <= getattr(self, name) <= 100:
                raise ValueError(f"{name} must be a percentage in [0, 100]")
        if self.topic_skip_percent < 0:
            raise ValueError("topic_skip_percent must be >= 0")
        if not 0.0 <= self.decay_rate < 1.0:
            raise ValueError("decay_rate must be in [0, 1)")


class ChatbotBrain:
    """
    Word-transition graph that learns from utterances and builds replies.

    Public API:
      ingest(utterance)
      decay()
      topic_words(max_topics)
      generate() -> str
      search(sentence, topics, cur_value, cur_depth, max_depth, deadline)
      save_state() / load_state(data) / from_state(data)

    Randomness comes from one injected random.Random and time from one
    injected clock (seconds), so a seeded brain with a fake clock is fully
    reproducible. Not safe for concurrent use; give every session its own brain.
    """

    def __init__(self,
                 config: Optional[BrainConfig] = None,
                 rng: Optional[random.Random] = None,
                 clock: Optional[Clock] = None) -> None:
        self.cfg = config or BrainConfig()
        self.random = rng or random.Random()
        self.clock: Clock = clock or time.monotonic
        self.decay_rate = self.cfg.decay_rate
        self._reset_graph()

    def _reset_graph(self) -> None:
        self.start_node = WordNode(START_TOKEN)
        self.end_node = WordNode(END_TOKEN)
        self._words: Dict[str, WordNode] = {
            END_TOKEN: self.end_node,
            START_TOKEN: self.start_node,
        }
        # global topic scores, only shrunk by decay()
        self.topic_frequency: RankedMultimap[float, WordNode] = RankedMultimap()
        # rebuilt on every ingest()
        self.last_utterance: RankedMultimap[float, WordNode] = RankedMultimap()
        self.word_count = 0
        self.word_value = 0.0

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------
    def ingest(self, utterance: str) -> None:
        """
        Cut an utterance into words, link them in order from the start node,
        and terminate the chain on the end node. Blank text is a no-op.
        """
        if not isinstance(utterance, str):
            raise TypeError(f"utterance must be str, not {type(utterance).__name__}")

        self.last_utterance.clear()
        prior: Optional[WordNode] = None
        for word, punc in split_words(utterance):
            current = self._words.get(word)
            if current is None:
                current = WordNode(word)
                self._words[word] = current

            self.last_utterance.put(self.value_word(current), current)
            self.increment_word(current)

            if punc is not None:
                current.record_punctuation(punc)

            if prior is None:
                self.start_node.record_successor(current)
            else:
                prior.record_successor(current)
            prior = current

        if prior is not None:
            prior.record_successor(self.end_node)

    def train_many(self, utterances: Iterable[str]) -> None:
        for u in utterances:
            self.ingest(u)

    @staticmethod
    def value_word(node: WordNode) -> float:
        """Log-base-4 of the word length; longer words are worth a little more."""
        n = len(node.word)
        return math.log(n) / math.log(4) if n > 0 else 0.0

    def increment_word(self, node: WordNode) -> None:
        """Catalogue one more sighting of `node` in the global topic scores."""
        value = self.value_word(node)
        current = self.topic_frequency.frequency_of(node) or 0.0
        self.topic_frequency.put(current + value, node)
        self.word_count += 1
        self.word_value += value

    # ------------------------------------------------------------------
    # Topic decay
    # ------------------------------------------------------------------
    def decay_word(self, node: WordNode) -> None:
        current = self.topic_frequency.frequency_of(node)
        if current is None:
            return
        nxt = current - current * self.decay_rate
        self.word_value += nxt - current
        self.topic_frequency.put(nxt, node)

    def decay(self) -> None:
        """Shrink every topic score by decay_rate. Called once per turn, before ingest()."""
        for node, _score in self.topic_frequency.items():
            self.decay_word(node)

    # ------------------------------------------------------------------
    # Topics
    # ------------------------------------------------------------------
    def topic_words(self, max_topics: int) -> Set[WordNode]:
        """
        Words to steer the search towards: the strongest global topics (after
        skipping the most dominant words overall) topped up with the strongest
        words of the last utterance.
        """
        topics: Set[WordNode] = set()
        if max_topics <= 0:
            return topics

        max_global = int(max_topics * self.cfg.topic_split)
        skip = int(self.word_count * self.cfg.topic_skip_percent / 100.0)
        taken = 0

        if max_global > 0:
            for node in self.topic_frequency.descending_items():
                if skip > 0:
                    skip -= 1
                    continue
                topics.add(node)
                taken += 1
                if taken >= max_global:
                    break

        if taken < max_topics:
            for node in self.last_utterance.descending_items():
                topics.add(node)
                taken += 1
                if taken >= max_topics:
                    break
        return topics

    def top_topics(self, n: int = 10) -> List[Tuple[str, float]]:
        """(word, score) for the `n` highest topic scores."""
        out: List[Tuple[str, float]] = []
        for node in self.topic_frequency.descending_items():
            out.append((node.word, self.topic_frequency.frequency_of(node)))
            if len(out) >= n:
                break
        return out

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    def generate(self) -> str:
        """Build one sentence by searching the graph from the start node."""
        cfg = self.cfg
        max_depth = cfg.nominal_length + self.random.randrange(cfg.max_length - cfg.nominal_length)
        deadline = self.clock() + cfg.timeout_ms / 1000.0
        sentence = SentenceBuilder(self.start_node)
        self.search(sentence, self.topic_words(cfg.topics), 0.0, 0, max_depth, deadline)
        return sentence.render()

    def suppression(self, cur_depth: int, max_depth: int) -> float:
        """Logistic factor in (0, 1) that shrinks word values as the sentence grows."""
        half = (self.cfg.nominal_length + max_depth) / 2.0
        return 1.0 / (1.0 + math.exp(math.e * (cur_depth - half) / half))

    def search(self,
               sentence: SentenceBuilder,
               topics: Set[WordNode],
               cur_value: float,
               cur_depth: int,
               max_depth: int,
               deadline: float) -> float:
        """
        Recursive, randomized, branch-capped best-first search.

        Explores a few successors of the sentence's last word, recursing into
        each accepted one, and copies the best scoring branch back into
        `sentence`. Returns the best value found (cur_value if nothing beat it).
        """
        if cur_depth >= max_depth or self.clock() > deadline:
            return cur_value

        roots = sentence.last_word().successors
        if not len(roots):
            return cur_value

        cfg = self.cfg
        rng = self.random
        max_branches = cfg.min_branches + rng.randrange(cfg.max_branches - cfg.min_branches)
        suppress = self.suppression(cur_depth, max_depth)

        best_value = cur_value
        best: Optional[SentenceBuilder] = None
        branches = 0

        while branches < cfg.min_branches:
            for key in roots.descending_items():
                candidate = self._words[key]
                chance = rng.randrange(100)

                if candidate.is_terminal:
                    if chance >= cfg.skip_chance:
                        end_value = rng.random() * self._top_score() * suppress
                        if cur_value + end_value > best_value:
                            best_value = cur_value + end_value
                            best = sentence.snapshot()
                            self.maybe_attach_punctuation(best)
                            best.append_word(candidate)
                        branches += 1
                else:
                    loop = sentence.contains_word(candidate)
                    if (not loop and chance >= cfg.skip_chance) or (loop and chance < cfg.loop_chance):
                        weight = 1.0 if candidate in topics else 0.25
                        word_value = suppress * (self.topic_frequency.frequency_of(candidate) or 0.0) * weight
                        branch = sentence.snapshot()
                        branch.append_word(candidate)
                        self.maybe_attach_punctuation(branch)
                        branch_value = self.search(branch, topics, cur_value + word_value,
                                                   cur_depth + 1, max_depth, deadline)
                        if branch_value > best_value:
                            best_value = branch_value
                            best = branch
                        branches += 1

                if branches >= max_branches:
                    break

            if rng.randrange(100) >= cfg.breadth_assurance_chance or self.clock() > deadline:
                break

        if best is not None:
            sentence.replace_with(best)
        return best_value

    def maybe_attach_punctuation(self, sentence: SentenceBuilder) -> Optional[str]:
        """
        Possibly follow the last word with punctuation seen after it.
        Two gates: whether to punctuate at all, then a coin flip per mark in
        descending rank. Returns the mark attached, if any.
        """
        punc = sentence.last_word().punctuation
        if not len(punc) or self.random.randrange(100) >= self.cfg.punctuation_chance:
            return None
        for mark in punc.descending_items():
            if self.random.randrange(100) >= self.cfg.punctuation_skip_chance:
                sentence.append_punctuation(mark)
                return mark
        return None

    def _top_score(self) -> float:
        if not len(self.topic_frequency):
            return 0.0
        return self.topic_frequency.last_key()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def node(self, word: str) -> Optional[WordNode]:
        return self._words.get(word)

    def words(self) -> List[str]:
        """Learned surface words, without the start/end nodes."""
        return [w for w in self._words if w not in (START_TOKEN, END_TOKEN)]

    def vocabulary_size(self) -> int:
        return len(self._words) - 2

    def __contains__(self, word: object) -> bool:
        return word in self._words and word not in (START_TOKEN, END_TOKEN)

    def __repr__(self) -> str:
        return f"ChatbotBrain(words={self.vocabulary_size()}, sightings={self.word_count})"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def save_state(self) -> Dict[str, Any]:
        """
        Full snapshot as plain JSON-friendly data. Only lookups and counters
        are stored; rank buckets are rebuilt on load.
        """
        return {
            "version": STATE_VERSION,
            "config": asdict(self.cfg),
            "decay_rate": self.decay_rate,
            "word_count": self.word_count,
            "word_value": self.word_value,
            "words": {w: n.to_state() for w, n in self._words.items()},
            "topic": [[n.word, s] for n, s in self.topic_frequency.entries()],
            "last_utterance": [[n.word, s] for n, s in self.last_utterance.entries()],
        }

    def load_state(self, data: Dict[str, Any]) -> None:
        """
        Replace this brain's graph with a snapshot from save_state().
        Raises ValueError on malformed or inconsistent data; the brain is left
        untouched in that case.
        """
        if not isinstance(data, dict):
            raise ValueError("state must be a mapping")
        version = data.get("version", STATE_VERSION)
        if version != STATE_VERSION:
            raise ValueError(f"unsupported state version {version!r}")

        try:
            words = {w: WordNode.from_state(w, d) for w, d in data.get("words", {}).items()}
            words.setdefault(START_TOKEN, WordNode(START_TOKEN))
            words.setdefault(END_TOKEN, WordNode(END_TOKEN))
            for node in words.values():
                for succ, _rank in node.successors.entries():
                    if succ not in words:
                        raise ValueError(f"{node.word!r} links to unknown word {succ!r}")
            topic = _scores_from_state(data.get("topic", []), words)
            last = _scores_from_state(data.get("last_utterance", []), words)
            word_count = int(data.get("word_count", 0))
            word_value = float(data.get("word_value", 0.0))
            decay_rate = float(data.get("decay_rate", self.cfg.decay_rate))
        except (TypeError, KeyError, AttributeError) as e:
            raise ValueError(f"malformed brain state: {e}") from e

        self._words = words
        self.start_node = words[START_TOKEN]
        self.end_node = words[END_TOKEN]
        self.topic_frequency = topic
        self.last_utterance = last
        self.word_count = word_count
        self.word_value = word_value
        self.decay_rate = decay_rate

    @classmethod
    def from_state(cls,
                   data: Dict[str, Any],
                   config: Optional[BrainConfig] = None,
                   rng: Optional[random.Random] = None,
                   clock: Optional[Clock] = None) -> "ChatbotBrain":
        """
        Build a brain from a snapshot. An explicit `config` wins over the
        settings stored in the snapshot, decay rate included.
        """
        explicit = config is not None
        if not explicit and isinstance(data, dict) and isinstance(data.get("config"), dict):
            try:
                config = BrainConfig(**data["config"])
            except TypeError as e:
                raise ValueError(f"malformed brain config: {e}") from e
        brain = cls(config=config, rng=rng, clock=clock)
        brain.load_state(data)
        if explicit:
            brain.decay_rate = brain.cfg.decay_rate
        return brain


def _scores_from_state(pairs: Iterable[Any], words: Dict[str, WordNode]) -> RankedMultimap[float, WordNode]:
    scores: RankedMultimap[float, WordNode] = RankedMultimap()
    for word, score in pairs:
        node = words.get(word)
        if node is None:
            raise ValueError(f"score recorded for unknown word {word!r}")
        scores.put(float(score), node)
    return scores
