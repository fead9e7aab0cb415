# sentence_builder.py
# Appendable sequence of WordNodes with punctuation marks in between.
# Keeps a membership set next to the list for O(1) loop checks during search.

from __future__ import annotations

from typing import List, Set, Union

from .word_node import WordNode

Element = Union[WordNode, str]


class SentenceBuilder:
    """
    Sentence under construction. Starts anchored on one word (normally the
    brain's start node). Candidates are branched off with snapshot() and the
    winner is copied back with replace_with(), so the anchored instance held
    by the caller always ends up with the final sentence.
    """

    __slots__ = ("_elements", "_members")

    def __init__(self, anchor: WordNode) -> None:
        if anchor is None:
            raise ValueError("anchor must not be None")
        self._elements: List[Element] = [anchor]
        self._members: Set[str] = {anchor.word}

    # building ----------------------------------------------------------------
    def append_word(self, word: WordNode) -> "SentenceBuilder":
        if word is None:
            raise ValueError("can't add a None word")
        self._elements.append(word)
        self._members.add(word.word)
        return self

    def append_punctuation(self, punc: str) -> "SentenceBuilder":
        if not punc:
            raise ValueError("can't add empty punctuation")
        self._elements.append(punc)
        return self

    def replace_with(self, other: "SentenceBuilder") -> "SentenceBuilder":
        """Replace this sentence's contents with `other`'s, keeping this instance."""
        if other is self:
            return self
        self._elements = list(other._elements)
        self._members = set(other._members)
        return self

    def snapshot(self) -> "SentenceBuilder":
        """Independent copy; nodes are shared, the sequence and member set are not."""
        clone = SentenceBuilder.__new__(SentenceBuilder)
        clone._elements = list(self._elements)
        clone._members = set(self._members)
        return clone

    # queries -----------------------------------------------------------------
    def last_word(self) -> WordNode:
        for el in reversed(self._elements):
            if isinstance(el, WordNode):
                return el
        raise RuntimeError("sentence holds no words")

    def contains_word(self, word: WordNode) -> bool:
        return word.word in self._members

    def word_count(self) -> int:
        return sum(1 for el in self._elements if isinstance(el, WordNode))

    def words(self) -> List[WordNode]:
        return [el for el in self._elements if isinstance(el, WordNode)]

    def elements(self) -> List[Element]:
        return list(self._elements)

    def render(self) -> str:
        parts: List[str] = []
        for el in self._elements:
            if isinstance(el, WordNode):
                parts.append(" ")
                parts.append(el.word)
            else:
                parts.append(el)
        return "".join(parts).strip()

    def __len__(self) -> int:
        return len(self._elements)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"SentenceBuilder({self.render()!r})"
