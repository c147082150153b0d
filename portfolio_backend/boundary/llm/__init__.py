"""
Generative model boundary layer.

Dependencies: langchain_google_genai
System role: LLM adapter
"""

from portfolio_backend.boundary.llm.gemini_client import GeminiChatClient, GenerationResult

__all__ = ["GeminiChatClient", "GenerationResult"]
