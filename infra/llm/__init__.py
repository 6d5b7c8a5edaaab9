from .openai_chat_client import LLMClientError, OpenAIChatClient

__all__ = ["LLMClientError", "OpenAIChatClient"]
