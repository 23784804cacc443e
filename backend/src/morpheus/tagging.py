"""LLM-assisted tag suggestions and auto-tagging."""

import json
import logging
import re
import zlib
from typing import Optional

from pydantic import Field

from morpheus.constants.llm import JSON_TEMPERATURE
from morpheus.constants.tagging import AUTO_TAG_COLORS, MAX_SUGGESTED_TAGS
from morpheus.knowledge.schemas import ApiModel, Tag
from morpheus.llm.client import LLMClient, LLMError
from morpheus.search.scoring import html_to_text
from morpheus.search.tags import find_relevant_tags
from morpheus.storage.base import DuplicateTagError, KnowledgeStore

logger = logging.getLogger(__name__)

SUGGEST_SYSTEM_PROMPT = (
    "You are a tag recommendation system that suggests the most relevant tags "
    "for a query based on the tags available in a knowledge base."
)

SUGGEST_PROMPT_TEMPLATE = """I'm looking for relevant tags for this query: "{query}"

Here are all available tags in the system:
{all_tags}

Here are tags already associated with related content:
{existing_tags}

Suggest the 3-5 most relevant tags from the available tags.
Respond with JSON of the form {{"tags": ["name", ...]}} and nothing else."""

AUTO_TAG_SYSTEM_PROMPT = (
    "You are a tag extraction system. Analyze the provided text and suggest 3-5 "
    "relevant tags that would be useful for categorizing it in a knowledge "
    'management system. Respond with JSON of the form {"tags": ["name", ...]}.'
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


class AutoTagResult(ApiModel):
    """Tags proposed for a piece of content."""

    suggested_tags: list[str] = Field(default_factory=list)
    new_tags: list[Tag] = Field(default_factory=list)


class AutoTagRequest(ApiModel):
    content: str


def parse_tag_names(text: str) -> list[str]:
    """Extract tag names from an LLM JSON reply.

    Accepts ``{"tags": [...]}`` or a bare JSON list, optionally wrapped in a
    Markdown code fence.

    Raises:
        ValueError: If the reply is not JSON of either shape.
    """
    payload = json.loads(_FENCE_RE.sub("", text.strip()))
    if isinstance(payload, dict):
        payload = payload.get("tags", [])
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of tags, got {type(payload).__name__}")
    return [name.strip() for name in payload if isinstance(name, str) and name.strip()]


def tag_color(name: str) -> str:
    """Pick a palette color for a new tag, stable for a given name."""
    return AUTO_TAG_COLORS[zlib.crc32(name.lower().encode("utf-8")) % len(AUTO_TAG_COLORS)]


class TaggingService:
    """Suggests tags for queries and content.

    Without an LLM (or when ``use_llm_for_queries`` is off) query
    suggestions use plain name matching. LLM failures always degrade to the
    non-LLM behavior rather than failing the request.
    """

    def __init__(
        self,
        store: KnowledgeStore,
        llm: Optional[LLMClient] = None,
        use_llm_for_queries: bool = False,
        json_temperature: float = JSON_TEMPERATURE,
    ) -> None:
        self._store = store
        self._llm = llm
        self._use_llm_for_queries = use_llm_for_queries
        self._json_temperature = json_temperature

    async def suggest_for_query(
        self,
        query: str,
        existing_tags: list[Tag],
        limit: int = MAX_SUGGESTED_TAGS,
    ) -> list[Tag]:
        """Suggest existing tags relevant to a search query.

        Args:
            query: The search text.
            existing_tags: Tags already on the matched items (LLM hint only).
            limit: Maximum number of tags to return.
        """
        all_tags = self._store.get_tags()
        if self._llm is None or not self._use_llm_for_queries or not all_tags:
            return find_relevant_tags(query, all_tags, limit)

        prompt = SUGGEST_PROMPT_TEMPLATE.format(
            query=query,
            all_tags=", ".join(t.name for t in all_tags),
            existing_tags=", ".join(dict.fromkeys(t.name for t in existing_tags)) or "None",
        )
        try:
            reply = await self._llm.generate(
                prompt,
                system_prompt=SUGGEST_SYSTEM_PROMPT,
                temperature=self._json_temperature,
            )
            names = parse_tag_names(reply)
        except (LLMError, ValueError) as e:
            logger.warning(f"LLM tag suggestion failed, using name matching: {e}")
            return find_relevant_tags(query, all_tags, limit)

        by_name = {tag.name.lower(): tag for tag in all_tags}
        suggested: dict[int, Tag] = {}
        for name in names:
            tag = by_name.get(name.lower())
            if tag is not None:
                suggested.setdefault(tag.id, tag)
        return list(suggested.values())[:limit]

    async def auto_tag(self, content: str) -> AutoTagResult:
        """Ask the LLM for tags describing ``content`` and create missing ones.

        Tag names are compared case-insensitively with the existing tags;
        only unknown names are created.
        """
        text = html_to_text(content).strip()
        if not text or self._llm is None:
            return AutoTagResult()

        try:
            reply = await self._llm.generate(
                text,
                system_prompt=AUTO_TAG_SYSTEM_PROMPT,
                temperature=self._json_temperature,
            )
            suggested = parse_tag_names(reply)
        except (LLMError, ValueError) as e:
            logger.warning(f"Auto-tagging failed: {e}")
            return AutoTagResult()

        known = {tag.name.lower() for tag in self._store.get_tags()}
        new_tags: list[Tag] = []
        for name in suggested:
            if name.lower() in known:
                continue
            try:
                new_tags.append(self._store.create_tag(name, tag_color(name)))
            except DuplicateTagError:
                logger.debug(f"Tag {name!r} was created concurrently")
            known.add(name.lower())

        return AutoTagResult(suggested_tags=suggested, new_tags=new_tags)
