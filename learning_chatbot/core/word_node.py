# word_node.py
# A single vertex of the transition graph: one distinct surface word.
# Tracks which words (and which punctuation marks) have been seen right after it,
# ranked by how many times each specific transition was reinforced.
# Edges are stored as surface-string keys; the owning brain resolves them to nodes.

from __future__ import annotations

from typing import Any, Dict, Optional

from .ranked_multimap import RankedMultimap

START_TOKEN = ""     # synthetic node every utterance starts from
END_TOKEN = "\n"     # synthetic node every utterance ends on, never has successors


class WordNode:
    """
    Graph vertex keyed by its surface word (case-sensitive).

    successors:  rank -> successor words (keys into the brain's word table)
    punctuation: rank -> punctuation characters seen after this word

    Two nodes are equal iff their words are equal. Nodes are never compared
    to raw strings, compare `node.word` instead.
    """

    __slots__ = ("word", "successors", "successor_count", "punctuation", "punctuation_count")

    def __init__(self, word: str) -> None:
        if word is None or not isinstance(word, str):
            raise ValueError("WordNode needs a string word")
        self.word = word
        self.successors: RankedMultimap[int, str] = RankedMultimap()
        self.successor_count = 0
        self.punctuation: RankedMultimap[int, str] = RankedMultimap()
        self.punctuation_count = 0

    @property
    def is_terminal(self) -> bool:
        return self.word == END_TOKEN

    @property
    def is_start(self) -> bool:
        return self.word == START_TOKEN

    # learning ------------------------------------------------------------------
    def record_successor(self, nxt: Optional["WordNode"]) -> None:
        """
        Record one more sighting of `nxt` straight after this word.
        First sighting lands at rank 1, each later one moves it up by one.
        """
        if nxt is None:
            return
        if self.is_terminal:
            raise ValueError("the end node cannot have successors")
        self.successor_count += 1
        _reinforce(self.successors, nxt.word)

    def record_punctuation(self, punc: Optional[str]) -> None:
        """Same ranking as record_successor, over trailing punctuation marks."""
        if punc is None:
            return
        if not isinstance(punc, str) or len(punc) != 1:
            raise ValueError(f"punctuation must be a single character, got {punc!r}")
        self.punctuation_count += 1
        _reinforce(self.punctuation, punc)

    # queries -------------------------------------------------------------------
    def successor_rank(self, word: str) -> Optional[int]:
        return self.successors.frequency_of(word)

    def punctuation_rank(self, punc: str) -> Optional[int]:
        return self.punctuation.frequency_of(punc)

    def has_successors(self) -> bool:
        return len(self.successors) > 0

    # persistence ---------------------------------------------------------------
    def to_state(self) -> Dict[str, Any]:
        return {
            "successors": [[w, r] for w, r in self.successors.entries()],
            "successor_count": self.successor_count,
            "punctuation": [[p, r] for p, r in self.punctuation.entries()],
            "punctuation_count": self.punctuation_count,
        }

    @classmethod
    def from_state(cls, word: str, data: Dict[str, Any]) -> "WordNode":
        """Rebuild a node; rank buckets are reconstituted from the stored lookups."""
        node = cls(word)
        for succ, rank in data.get("successors", []):
            node.successors.put(_rank(rank), str(succ))
        for punc, rank in data.get("punctuation", []):
            if not isinstance(punc, str) or len(punc) != 1:
                raise ValueError(f"bad punctuation entry for {word!r}: {punc!r}")
            node.punctuation.put(_rank(rank), punc)
        node.successor_count = int(data.get("successor_count", 0))
        node.punctuation_count = int(data.get("punctuation_count", 0))
        if node.is_terminal and len(node.successors):
            raise ValueError("the end node cannot have successors")
        return node

    # identity --------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if isinstance(other, WordNode):
            return other.word == self.word
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.word)

    def __repr__(self) -> str:
        return f"WordNode({self.word!r}, successors={len(self.successors)}, punctuation={len(self.punctuation)})"


def _reinforce(ranks: RankedMultimap[int, str], key: str) -> None:
    """Move `key` one rank up, or start it at rank 1."""
    current = ranks.frequency_of(key)
    ranks.put(1 if current is None else current + 1, key)


def _rank(value: Any) -> int:
    rank = int(value)
    if rank < 1:
        raise ValueError(f"ranks start at 1, got {value!r}")
    return rank
