"""
learning_chatbot.core

The learning/generation engine behind the chatbot.
Contains:
 - RankedMultimap: score -> items map with relocation and lazy compaction
 - WordNode: graph vertex with ranked successors and trailing punctuation
 - SentenceBuilder: sentence under construction, cheap to branch and adopt
 - split_words: word/punctuation splitting of raw input
 - ChatbotBrain: ingestion, topic decay and the recursive sentence search
"""

from .ranked_multimap import RankedMultimap
from .word_node import WordNode, START_TOKEN, END_TOKEN
from .sentence_builder import SentenceBuilder
from .tokenizer import split_words
from .chatbot_brain import BrainConfig, ChatbotBrain

__all__ = [
    "RankedMultimap",
    "WordNode",
    "START_TOKEN",
    "END_TOKEN",
    "SentenceBuilder",
    "split_words",
    "BrainConfig",
    "ChatbotBrain",
]
