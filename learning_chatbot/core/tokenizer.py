# tokenizer.py
# Splits raw input into (word, trailing punctuation) pairs for the brain.
# Word characters are letters, digits, hyphen, underscore and apostrophe, so
# hyphenated words, possessives and contractions survive as one word.

from __future__ import annotations

import re
from typing import List, Optional, Tuple

Pair = Tuple[str, Optional[str]]

_WORD_PUNC_RE = re.compile(r"([A-Za-z0-9\-_']+)([^A-Za-z0-9\-_']?)")


def split_words(text: str) -> List[Pair]:
    """
    Return (word, punctuation) pairs, left to right.
    punctuation is the single non-word character right after the word, or None.
    Glued tokens are split too, e.g. "So,bob" -> [("So", ","), ("bob", None)].
    """
    if not text:
        return []
    out: List[Pair] = []
    for token in text.split():
        for word, punc in _WORD_PUNC_RE.findall(token):
            out.append((word, punc or None))
    return out
