"""
Portfolio assistant prompt.

Defines the persona prompt template and the helpers that fill it: recent
history, optional intent instructions and retrieved context.

Dependencies: langchain_core.prompts
System role: Prompt template for the chat orchestrator
"""

from typing import Iterable

from langchain_core.prompts import PromptTemplate

from portfolio_backend.models.chat import HistoryTurn

NO_CONTEXT_MARKER = "No relevant information found in the portfolio."

LANGUAGE_NAMES = {
    "en": "English",
    "tr": "Turkish (Türkçe)",
}

SYSTEM_PROMPT = """You are {assistant_name}, an intelligent assistant embedded in {owner_name}'s portfolio website.

## Role & Restrictions
1. Answer ONLY questions about {owner_name}'s projects, blog posts, skills, work experience and profile
2. Politely decline off-topic requests and steer the visitor back to the portfolio
3. Never fabricate facts. If the context does not contain the answer, say "I don't have that information in my knowledge base."
4. Never invent URLs. Link only to URLs that appear in the portfolio context
5. Use Markdown for formatting; link projects and posts through their URL field
6. Source cards are shown to the visitor by the interface, do not list them again
7. Answer in: {language_name}
{history_section}{intent_section}{context_section}
USER QUESTION:
{question}"""

CHAT_PROMPT = PromptTemplate.from_template(SYSTEM_PROMPT)


def language_name(language: str) -> str:
    """Human-readable name of a response language."""
    return LANGUAGE_NAMES.get(language, LANGUAGE_NAMES["en"])


def format_history(turns: Iterable[HistoryTurn], assistant_name: str = "AutumnAI") -> str:
    """Render turns as 'User: ...' / '<assistant>: ...' lines."""
    lines = []
    for turn in turns:
        speaker = "User" if turn.role == "user" else assistant_name
        lines.append(f"{speaker}: {turn.content}")
    return "\n".join(lines)


def build_chat_prompt(
    question: str,
    language: str,
    history: Iterable[HistoryTurn] = (),
    context_blocks: list[str] | None = None,
    intent_instructions: str | None = None,
    include_context: bool = True,
    assistant_name: str = "AutumnAI",
    owner_name: str = "Kadir",
) -> str:
    """
    Assemble the full generation prompt.

    Args:
        question: Current visitor message
        language: Response language code
        history: Recent turns, oldest first
        context_blocks: Fused context blocks; empty or None yields the no-context marker
        intent_instructions: Extra instructions for a classified intent
        include_context: False drops the context section (greetings, refusals)
        assistant_name: Persona name
        owner_name: Portfolio owner

    Returns:
        Prompt text
    """
    history_text = format_history(history, assistant_name)
    history_section = f"\nCONVERSATION HISTORY:\n{history_text}\n" if history_text else ""
    intent_section = (
        f"\nCURRENT INTENT INSTRUCTIONS:\n{intent_instructions}\n" if intent_instructions else ""
    )
    context_section = ""
    if include_context:
        context_text = "\n\n".join(context_blocks or []) or NO_CONTEXT_MARKER
        context_section = f"\nPORTFOLIO CONTEXT (use ONLY this to answer):\n{context_text}\n"

    return CHAT_PROMPT.format(
        assistant_name=assistant_name,
        owner_name=owner_name,
        language_name=language_name(language),
        history_section=history_section,
        intent_section=intent_section,
        context_section=context_section,
        question=question,
    )
