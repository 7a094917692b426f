"""LLM infrastructure package."""
from .openai_client import OpenAITextGenerator, create_text_generator

__all__ = [
    "OpenAITextGenerator",
    "create_text_generator",
]
