# learning_chatbot/cli - interactive front end

from .cli import CLI, main

__all__ = ["CLI", "main"]
