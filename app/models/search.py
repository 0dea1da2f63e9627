"""Search result models for the two content variants and the merged response."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel, to_pascal

from app.models.facet import Facet
from app.processing.excerpts import get_content_excerpt, get_title


class SourceType(str, Enum):
    """Content type a result item was fetched from."""

    ARTICLE_PAGE = "ArticlePage"
    EXPERIENCE = "Experience"


class ContentUrl(BaseModel):
    """URL block of the content metadata."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    base: str | None = None
    default: str | None = None
    hierarchical: str | None = None


class ContentMetadata(BaseModel):
    """Content graph ``_metadata`` block."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    key: str | None = None
    display_name: str | None = None
    locale: str | None = None
    url: ContentUrl | None = None
    published: str | None = None
    last_modified: str | None = None
    types: list[str] = Field(default_factory=list)


class SeoSettings(BaseModel):
    """SEO meta fields used as display fallbacks."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, extra="allow")

    meta_title: str | None = None
    meta_description: str | None = None


class RichText(BaseModel):
    """Rich text field; only the rendered HTML is used."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    html: str | None = None


class ContentItem(BaseModel):
    """Fields shared by both result variants.

    Unknown backend fields are kept as extras so items serialize back
    with their original payload intact.
    """

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, extra="allow")

    metadata: ContentMetadata | None = Field(default=None, alias="_metadata")
    score: float | None = Field(default=None, alias="_score")
    url: str | None = Field(default=None, alias="url", description="Absolute item URL")

    @property
    def id(self) -> str | None:
        return self.metadata.key if self.metadata else None

    @property
    def display_name(self) -> str | None:
        return self.metadata.display_name if self.metadata else None

    @property
    def raw_url(self) -> str | None:
        """URL as delivered by the backend, preferring the default route."""
        if self.metadata and self.metadata.url:
            return self.metadata.url.default or self.metadata.url.hierarchical
        return None

    @computed_field(alias="title")
    @property
    def title(self) -> str:
        return get_title(self)

    @computed_field(alias="excerpt")
    @property
    def excerpt(self) -> str:
        return get_content_excerpt(self)


class ArticlePageItem(ContentItem):
    """Blog/news style article page."""

    source_type: Literal["ArticlePage"] = Field(default="ArticlePage", alias="sourceType")
    heading: str | None = None
    sub_heading: str | None = None
    author: str | None = None
    body: RichText | None = None
    seo_settings: SeoSettings | None = None

    @property
    def sort_date(self) -> str | None:
        if not self.metadata:
            return None
        return self.metadata.published or self.metadata.last_modified


class ExperienceItem(ContentItem):
    """Composed landing-page style experience."""

    source_type: Literal["Experience"] = Field(default="Experience", alias="sourceType")
    seo_settings: SeoSettings | None = Field(default=None, alias="BlankExperienceSeoSettings")
    fulltext: list[str] | str | None = Field(default=None, alias="_fulltext")

    @property
    def sort_date(self) -> str | None:
        if not self.metadata:
            return None
        return self.metadata.last_modified or self.metadata.published


SearchResultItem = Annotated[
    ArticlePageItem | ExperienceItem,
    Field(discriminator="source_type"),
]


@dataclass
class SourceResultBlock:
    """One content type's block of a content graph search response.

    Attributes:
        items: Raw item payloads in backend order
        total: Total number of matches reported by the backend
        facets: Facets computed by the backend for this content type
    """

    items: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0
    facets: list[Facet] = field(default_factory=list)


@dataclass
class FacetedSearchResult:
    """Both content type blocks returned by one combined backend call."""

    articles: SourceResultBlock = field(default_factory=SourceResultBlock)
    experiences: SourceResultBlock = field(default_factory=SourceResultBlock)


class MergedSearchResponse(BaseModel):
    """Merged, paginated and faceted search response."""

    items: list[SearchResultItem] = Field(default_factory=list)
    total: int = Field(default=0, ge=0, description="Sum of both source totals")
    facets: list[Facet] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Serialize using the wire field names."""
        return self.model_dump(mode="json", by_alias=True)
