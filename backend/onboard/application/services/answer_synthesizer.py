"""Answer synthesizer — one grounded completion per question, plus per-document attributions."""

import logging
import time

import httpx

from onboard.application.interfaces.chat_provider import ChatProvider
from onboard.application.interfaces.resource_repository import ResourceRepository
from onboard.domain.entities import (
    ChatMessage,
    RankedChunks,
    RetrievedChunk,
    ResourceDescriptor,
    SourceAttribution,
)
from onboard.domain.exceptions import ChatProviderError, SynthesisError, TenantMismatchError

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 200
CHUNK_SEPARATOR = "\n\n---\n\n"

# ── System prompt ────────────────────────────────────────────────────

SYSTEM_PROMPT = """\
You are the onboarding assistant of a company. You help employees find answers
in their company's own documents.

## Rules

1. Answer ONLY with information found in the reference material below the question.
2. If the material does not contain the answer, say plainly that you could not find
   this in the company's documents. Do not guess and do not use outside knowledge.
3. Never mention "context", "chunks", "excerpts" or "reference material" in your answer.
   Speak as if you simply know the company's documents.
4. For broad or overview questions, combine information from all relevant documents
   into one coherent answer instead of summarizing a single document.
5. Ignore repeated fragments that look like website or application chrome
   (menus, buttons, keyboard shortcuts, cookie notices).
6. Answer in the language of the question. Be concise and well structured.
"""

_USER_PROMPT_TEMPLATE = """\
{context}

---

Question: {question}"""


class AnswerSynthesizer:
    """Builds the grounded prompt, calls the completion provider once, and attributes sources."""

    def __init__(
        self,
        chat_provider: ChatProvider,
        resource_repository: ResourceRepository,
        *,
        model: str,
        max_tokens: int = 1000,
        temperature: float = 0.3,
    ):
        self._chat_provider = chat_provider
        self._resource_repo = resource_repository
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def synthesize(
        self,
        query_text: str,
        ranked: RankedChunks,
        tenant_id: str,
    ) -> tuple[str, list[SourceAttribution]]:
        """Answer ``query_text`` from the ranked chunks.

        Returns:
            ``(answer_text, attributions)`` with one attribution per
            contributing resource, ordered by score.

        Raises:
            SynthesisError: the completion call failed or returned nothing.
        """
        messages = [
            ChatMessage(role="system", content=SYSTEM_PROMPT),
            ChatMessage(role="user", content=build_user_prompt(query_text, ranked.chunks)),
        ]

        start = time.monotonic()
        try:
            result = await self._chat_provider.complete(
                messages=messages,
                model=self._model,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except (ChatProviderError, httpx.HTTPError) as e:
            logger.error("Completion failed for tenant %s: %s", tenant_id, e)
            raise SynthesisError(f"Answer generation failed: {e}") from e

        duration_ms = int((time.monotonic() - start) * 1000)
        content = (result.content or "").strip()
        if not content:
            raise SynthesisError(
                f"Completion provider returned an empty answer (finish_reason={result.finish_reason})"
            )
        logger.info(
            "Synthesized answer from %d chunks in %dms (model=%s, tokens=%d)",
            len(ranked.chunks),
            duration_ms,
            result.model or self._model,
            result.usage.total_tokens,
        )

        sources = await self.attribute(ranked.chunks, tenant_id)
        return content, sources

    async def attribute(self, chunks: list[RetrievedChunk], tenant_id: str) -> list[SourceAttribution]:
        """One attribution per resource, taken from that resource's best-scoring chunk."""
        best: dict[str, RetrievedChunk] = {}
        for hit in chunks:
            if hit.tenant_id != tenant_id:
                raise TenantMismatchError(
                    expected_tenant=tenant_id,
                    actual_tenant=hit.tenant_id,
                    subject=f"chunk of resource {hit.resource_id}",
                )
            current = best.get(hit.resource_id)
            if current is None or hit.score > current.score:
                best[hit.resource_id] = hit

        if not best:
            return []

        resources = await self._resource_repo.get_many(list(best), tenant_id)
        descriptors: dict[str, ResourceDescriptor] = {}
        for resource in resources:
            if resource.tenant_id != tenant_id:
                raise TenantMismatchError(
                    expected_tenant=tenant_id,
                    actual_tenant=resource.tenant_id,
                    subject=f"resource {resource.id}",
                )
            descriptors[resource.id] = ResourceDescriptor(
                resource_id=resource.id,
                title=resource.title,
                kind=resource.kind.value,
                location=resource.location,
            )

        attributions: list[SourceAttribution] = []
        for resource_id, hit in sorted(best.items(), key=lambda item: item[1].score, reverse=True):
            descriptor = descriptors.get(resource_id)
            if descriptor is None:
                logger.warning("Resource %s cited by a chunk no longer exists", resource_id)
            attributions.append(
                SourceAttribution(
                    resource_id=resource_id,
                    score=hit.score,
                    preview=hit.content[:PREVIEW_LENGTH],
                    resource=descriptor,
                )
            )
        return attributions


def build_user_prompt(query_text: str, chunks: list[RetrievedChunk]) -> str:
    context = CHUNK_SEPARATOR.join(hit.content for hit in chunks)
    return _USER_PROMPT_TEMPLATE.format(context=context, question=query_text)
