"""Value objects returned by the search engine.

Following the same conventions as the rest of the domain layer:
- Value Objects are immutable (frozen=True)
- Field names are snake_case in Python and camelCase on the wire
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """Serialize with the camelCase field names used by HTTP clients."""
        return self.model_dump(by_alias=True)


class SearchHit(_WireModel):
    """A single ranked document.

    ``title`` is the display title; ``raw_title`` is the stored title as
    loaded. ``preview`` is a window of content around the first match.
    """

    id: int
    title: str
    raw_title: str
    path: str
    source_path: str
    rank: int
    preview: str
    content: str
    category: str


class SearchPage(_WireModel):
    """One page of a sorted result list plus totals for the whole list."""

    results: list[SearchHit] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    total_pages: int = 0
    page_size: int


class DocumentContent(_WireModel):
    """Full stored text of one document."""

    content: str
    title: str
    path: str


class CategoryListing(_WireModel):
    categories: list[str]
    default_category: str


class EngineStats(_WireModel):
    """Sizes of the currently published corpus snapshot."""

    documents: int
    tokens: int
    categories: int
    cached_queries: int
    generation: int
