"""AI Studio: provider management and assistant workflows for LLM chats."""

__version__ = "0.1.0"
