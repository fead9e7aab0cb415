"""
learning_chatbot

A "zero"-knowledge chatbot: it learns which words follow which from what it
is told, and answers by searching that word graph for an on-topic sentence.
"""

from .core import BrainConfig, ChatbotBrain
from .chatbot import LearningChatbot

__all__ = ["BrainConfig", "ChatbotBrain", "LearningChatbot"]

__version__ = "0.1.0"
