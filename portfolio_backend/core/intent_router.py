"""
Intent routing for chat messages.

Optional first model call that classifies a message and rewrites it into a
standalone search query. Greetings, refusals and general chat get tailored
instructions; only portfolio questions get retrieved context.

Dependencies: langchain_core.prompts, pydantic, portfolio_backend.boundary.llm
System role: Pre-retrieval message classification
"""

import json
import logging
import re
from enum import Enum

from langchain_core.prompts import PromptTemplate
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from portfolio_backend.boundary.llm.gemini_client import GeminiChatClient

logger = logging.getLogger(__name__)


class Intent(str, Enum):
    """Kinds of visitor message."""

    GREETING = "greeting"
    INAPPROPRIATE = "inappropriate"
    GENERAL_CHAT = "general_chat"
    PORTFOLIO_QUERY = "portfolio_query"


class IntentDecision(BaseModel):
    """Classifier verdict."""

    model_config = ConfigDict(populate_by_name=True)

    intent: Intent
    refined_query: str = Field(alias="refinedQuery")


INTENT_PROMPT = PromptTemplate.from_template(
    """Classify the visitor message sent to the assistant of {owner_name}'s portfolio website.

Intents:
- greeting: hello, thanks, small talk openers
- inappropriate: offensive, harmful or abusive requests
- general_chat: questions unrelated to {owner_name}, their work or their writing
- portfolio_query: anything about {owner_name}'s projects, blog posts, skills, experience or contact details

Also rewrite the message into a standalone search query, resolving references to the conversation history.

CONVERSATION HISTORY:
{history}

MESSAGE:
{message}

Return ONLY a JSON object: {{"intent": "<intent>", "refinedQuery": "<query>"}}"""
)

INTENT_INSTRUCTIONS = {
    Intent.GREETING: (
        "Respond warmly and briefly, then ask how you can help them explore {owner_name}'s portfolio."
    ),
    Intent.INAPPROPRIATE: (
        "Firmly but politely state that you cannot help with this request."
    ),
    Intent.GENERAL_CHAT: (
        "Politely explain that you are specialized in {owner_name}'s portfolio and suggest "
        "asking about projects, blog posts or experience instead."
    ),
}

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def parse_intent(raw_text: str, message: str) -> IntentDecision:
    """
    Parse classifier output, tolerating code fences.

    Unparseable output counts as a portfolio question about the raw message.
    """
    cleaned = _FENCE.sub("", (raw_text or "").strip())
    try:
        decision = IntentDecision.model_validate(json.loads(cleaned))
    except (ValueError, PydanticValidationError) as e:
        logger.warning(f"{__name__}:parse_intent - Unparseable classifier output: {e}")
        return IntentDecision(intent=Intent.PORTFOLIO_QUERY, refined_query=message)
    if not decision.refined_query.strip():
        decision.refined_query = message
    return decision


def intent_instructions(intent: Intent, owner_name: str) -> str | None:
    """Instructions added to the answer prompt for a classified intent."""
    template = INTENT_INSTRUCTIONS.get(intent)
    return template.format(owner_name=owner_name) if template else None


class IntentRouter:
    """Message classifier backed by the chat model."""

    def __init__(self, llm: GeminiChatClient, owner_name: str = "Kadir") -> None:
        """
        Initialize router.

        Args:
            llm: Generative model client
            owner_name: Portfolio owner named in the prompt
        """
        self.llm = llm
        self.owner_name = owner_name

    async def classify(self, message: str, history_text: str = "") -> IntentDecision:
        """
        Classify a message.

        Raises:
            ModelGenerationError: If the classifier call itself fails
        """
        prompt = INTENT_PROMPT.format(
            owner_name=self.owner_name,
            history=history_text or "(none)",
            message=message,
        )
        result = await self.llm.generate(prompt)
        decision = parse_intent(result.text, message)
        logger.info(f"{__name__}:classify - intent={decision.intent.value}")
        return decision
