"""Knowledge chunk types shared by the knowledge base and the retriever."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


class ChunkCategory(str, Enum):
    PERSON_PROFILE = "person-profile"
    ORGANIZATION_PROFILE = "organization-profile"
    SERVICE = "service"
    BUSINESS_UNIT = "business-unit"
    CONTACT_INFO = "contact-info"


# Metadata key holding the entity name that earns the name bonus
NAME_KEY = "name"


@dataclass(frozen=True)
class KnowledgeChunk:
    """A single retrievable passage of knowledge-base text.

    ``metadata`` only feeds keyword ranking and UI attribution.  Embeddings
    are not stored on the chunk; the retriever caches them by ``id``.
    """

    id: str
    text: str
    category: ChunkCategory
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def name(self) -> str | None:
        value = self.metadata.get(NAME_KEY)
        return value if isinstance(value, str) and value else None


def metadata_text(value: Any) -> str:
    """Render a metadata value the way keyword matching sees it."""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def build_context(chunks: list[KnowledgeChunk]) -> str:
    """Render chunks as grounding context for the answer composer."""
    return "\n\n".join(
        f"[{chunk.category.value.upper()}] {chunk.text}" for chunk in chunks
    )
