"""
Chat service for the portfolio assistant.

Orchestrates one visitor message end to end: quota and session bookkeeping,
optional intent routing, retrieval, context fusion, prompt assembly,
generation and persistence of the answer with its sources.

Dependencies: portfolio_backend.core, portfolio_backend.application, portfolio_backend.boundary
System role: Chat service orchestration layer
"""

import logging
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_backend.application.embedder import GeminiEmbedder
from portfolio_backend.application.services.session_service import ChatSessionController
from portfolio_backend.boundary.llm.gemini_client import GeminiChatClient
from portfolio_backend.configs.chat import ChatSettings
from portfolio_backend.configs.embeddings import EmbeddingSettings
from portfolio_backend.core.context_fusion import ContextFusion, FusedContext
from portfolio_backend.core.intent_router import (
    Intent,
    IntentDecision,
    IntentRouter,
    intent_instructions,
)
from portfolio_backend.core.prompt_builder import build_chat_prompt, format_history
from portfolio_backend.core.retriever import SimilaritySearch
from portfolio_backend.models.chat import ChatOutcome, HistoryTurn, SourceItem

logger = logging.getLogger(__name__)

SEARCHABLE_INTENTS = {Intent.GENERAL_CHAT, Intent.PORTFOLIO_QUERY}


def normalize_language(locale: str | None, supported: Sequence[str], default: str = "en") -> str:
    """Map a request locale ('tr', 'tr-TR', 'EN') to a supported language code."""
    language = (locale or "").strip().lower().replace("_", "-").split("-")[0]
    return language if language in supported else default


def select_sources(
    sources: Sequence[SourceItem],
    shown_urls: set[str],
    threshold: float = 0.0,
    max_sources: int | None = None,
) -> list[SourceItem]:
    """
    Source cards to return for this answer.

    Drops cards below the display threshold and cards whose URL was already
    shown in the session (or earlier in this list), then applies the cap.
    """
    selected: list[SourceItem] = []
    seen = set(shown_urls)
    for source in sources:
        if source.similarity < threshold or source.url in seen:
            continue
        seen.add(source.url)
        selected.append(source)
    if threshold > 0:
        selected.sort(key=lambda source: source.similarity, reverse=True)
    if max_sources is not None:
        selected = selected[:max_sources]
    return selected


class ChatService:
    """
    Chat orchestrator.

    Coordinates the session controller, embedder, similarity search,
    context fusion and the generative model for single-turn answers over
    the portfolio index.
    """

    def __init__(
        self,
        db: AsyncSession,
        embedder: GeminiEmbedder,
        llm: GeminiChatClient,
        settings: ChatSettings | None = None,
        embedding_settings: EmbeddingSettings | None = None,
        controller: ChatSessionController | None = None,
    ) -> None:
        """
        Initialize chat service.

        Args:
            db: AsyncSession for database operations
            embedder: Query embedding generator
            llm: Generative model client
            settings: Chat settings
            embedding_settings: Embedding settings (supported languages)
            controller: Session controller (defaults to one on db)
        """
        self.db = db
        self.embedder = embedder
        self.llm = llm
        self.settings = settings or ChatSettings()
        self.embedding_settings = embedding_settings or EmbeddingSettings()
        self.controller = controller or ChatSessionController(db, self.settings)
        self.search = SimilaritySearch(db)
        self.fusion = ContextFusion(db)
        self.intent_router = IntentRouter(llm, owner_name=self.settings.owner_name)

    async def handle_message(
        self,
        caller_address: str,
        message: str,
        locale: str | None = None,
        history: Sequence[HistoryTurn] = (),
        is_privileged: bool = False,
    ) -> ChatOutcome:
        """
        Answer one visitor message.

        Flow:
        1. Enforce quota, resolve session, record the user message (committed)
        2. Optionally classify intent and refine the search query
        3. Embed, search and fuse context
        4. Build the prompt and generate the answer
        5. Record the answer with prompt, usage and shown sources (committed)

        Args:
            caller_address: Network address of the caller
            message: Visitor message
            locale: Requested response language
            history: Caller-supplied recent turns
            is_privileged: Site owner (no quota)

        Returns:
            ChatOutcome: Answer, source cards and session info

        Raises:
            QuotaExceededError: If the caller used up today's requests
            EmbeddingProviderError: If the query cannot be embedded
            ModelGenerationError: If generation fails
        """
        language = normalize_language(
            locale,
            self.embedding_settings.languages,
            self.embedding_settings.default_language,
        )
        logger.info(f"{__name__}:handle_message - START caller={caller_address}, language={language}")

        await self.controller.enforce_quota(caller_address, is_privileged)
        chat_session, is_new = await self.controller.resolve_session(caller_address)
        await self.controller.record_user_message(chat_session.id, message)
        await self.db.commit()

        turns = self.controller.trim_history(list(history))

        decision: IntentDecision | None = None
        if self.settings.intent_routing_enabled:
            decision = await self.intent_router.classify(
                message, format_history(turns, self.settings.assistant_name)
            )

        fused = FusedContext()
        if decision is None or decision.intent in SEARCHABLE_INTENTS:
            query = decision.refined_query if decision else message
            query_vector = await self.embedder.embed(query)
            hits = await self.search.search(
                query_vector,
                language,
                k=self.settings.search_top_k,
                min_similarity=self.settings.min_similarity,
            )
            if (
                decision is not None
                and decision.intent == Intent.GENERAL_CHAT
                and any(hit.similarity >= self.settings.intent_upgrade_threshold for hit in hits)
            ):
                logger.info(f"{__name__}:handle_message - Upgrading general_chat to portfolio_query")
                decision = decision.model_copy(update={"intent": Intent.PORTFOLIO_QUERY})
            if decision is None or decision.intent == Intent.PORTFOLIO_QUERY:
                fused = await self.fusion.fuse(hits, language)

        include_context = decision is None or decision.intent == Intent.PORTFOLIO_QUERY
        prompt = build_chat_prompt(
            question=message,
            language=language,
            history=turns,
            context_blocks=fused.blocks,
            intent_instructions=(
                intent_instructions(decision.intent, self.settings.owner_name) if decision else None
            ),
            include_context=include_context,
            assistant_name=self.settings.assistant_name,
            owner_name=self.settings.owner_name,
        )

        generation = await self.llm.generate(prompt)

        shown = await self.controller.shown_source_urls(chat_session.id)
        sources = select_sources(
            fused.sources,
            shown,
            threshold=self.settings.source_display_threshold,
            max_sources=self.settings.max_sources,
        )

        await self.controller.record_assistant_message(
            chat_session.id,
            generation.text,
            metadata={
                "prompt": prompt,
                "usage": generation.usage,
                "sources": [source.url for source in sources],
            },
        )
        await self.db.commit()

        logger.info(
            f"{__name__}:handle_message - END session={chat_session.id}, sources={len(sources)}"
        )
        return ChatOutcome(
            response=generation.text,
            sources=sources,
            session_id=chat_session.id,
            new_session=is_new,
        )
