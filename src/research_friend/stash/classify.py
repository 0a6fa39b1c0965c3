"""Topic classification of documents via a model call."""

import json
import logging
import re
from typing import Any, Iterable

from research_friend.ask import extract_response_text
from research_friend.config import ClassificationOptions
from research_friend.errors import NoStructuredResponseError
from research_friend.models import Classification
from research_friend.protocols import ModelClient
from research_friend.stash.sampling import sample_text_for_classification

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You classify documents. Respond only with valid JSON."

CLASSIFICATION_PROMPT = """You are classifying a document into topics for a research stash.

## Existing Topics
{existing_topics}

## Rules
- Use existing topics when the document fits reasonably well
- Create new topics only when no existing topic is appropriate
- Topic names: lowercase-kebab-case, 1-3 words, descriptive
- Choose ONE primary topic and 0-3 secondary topics
- Primary topic = where you'd look for this document first

## Document
Filename: {filename}

Sampled content (up to ~{max_chars} chars):
---
{text}
---

Respond with JSON only:
{
  "summary": "1-2 sentence summary",
  "primaryTopic": "existing-or-new-topic",
  "secondaryTopics": ["optional", "additional"],
  "newTopics": [{"name": "new-topic", "description": "Brief description"}]
}"""

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def format_existing_topics(topics: Iterable[dict[str, Any]]) -> str:
    lines = [
        f"- {t['name']} ({t.get('doc_count', 0)} docs): {t.get('description') or 'No description'}"
        for t in topics
    ]
    return "\n".join(lines) if lines else "(none yet)"


def build_classification_prompt(
    filename: str,
    sampled_text: str,
    existing_topics: Iterable[dict[str, Any]],
    max_chars: int,
) -> str:
    # str.replace, not format: the JSON example is full of braces.
    # The sampled text goes in last so its own placeholders stay untouched.
    return (
        CLASSIFICATION_PROMPT.replace("{existing_topics}", format_existing_topics(existing_topics))
        .replace("{filename}", filename)
        .replace("{max_chars}", str(max_chars))
        .replace("{text}", sampled_text)
    )


def validate_topic_name(name: Any) -> str:
    """Reject topic names that are empty or could escape the store directory."""
    if not isinstance(name, str) or not name.strip():
        raise NoStructuredResponseError("Classification response is missing a topic name")
    name = name.strip()
    if "/" in name or "\\" in name or ".." in name:
        raise NoStructuredResponseError(f"Invalid topic name: {name!r}")
    return name


def parse_classification(response_text: str) -> Classification:
    """Parse the first JSON object in a model reply into a Classification.

    Raises:
        NoStructuredResponseError: If there is no parseable JSON object or
            it lacks a valid primary topic
    """
    match = _JSON_OBJECT_RE.search(response_text)
    if not match:
        raise NoStructuredResponseError("No JSON found in classification response")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise NoStructuredResponseError(f"Invalid JSON in classification response: {e}") from e
    if not isinstance(data, dict):
        raise NoStructuredResponseError("Classification response is not a JSON object")

    new_topics = [
        {"name": validate_topic_name(t.get("name")), "description": t.get("description") or ""}
        for t in data.get("newTopics") or []
        if isinstance(t, dict)
    ]
    return Classification(
        summary=str(data.get("summary") or ""),
        primary_topic=validate_topic_name(data.get("primaryTopic")),
        secondary_topics=[validate_topic_name(t) for t in data.get("secondaryTopics") or []],
        new_topics=new_topics,
    )


async def classify_document(
    filename: str,
    text: str,
    existing_topics: list[dict[str, Any]],
    model_client: ModelClient,
    options: ClassificationOptions = ClassificationOptions(),
) -> Classification:
    """Ask the model to file a document under existing or new topics.

    Args:
        filename: Original filename, shown to the model
        text: Full extracted text; sampled down to the character budget
        existing_topics: Topics with ``name``, ``description``, ``doc_count``
        model_client: Model-call capability
        options: Sampling budget and model limits

    Returns:
        Parsed classification
    """
    sampled = sample_text_for_classification(
        text, max_chars=options.max_chars, chunk_count=options.chunk_count
    )
    prompt = build_classification_prompt(filename, sampled, existing_topics, options.max_chars)
    logger.debug(f"Classifying {filename}: {len(text):,} chars sampled to {len(sampled):,}")

    reply = await model_client.create_message(
        prompt=prompt,
        system_prompt=SYSTEM_PROMPT,
        max_tokens=options.max_output_tokens,
        timeout_ms=options.timeout_ms,
    )
    return parse_classification(extract_response_text(reply.content))
