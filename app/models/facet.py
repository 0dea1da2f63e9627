"""Facet models shared by the content graph adapter and the facet merger."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FacetValue(BaseModel):
    """A single countable value of a facet, possibly with nested children."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    key: str
    doc_count: int = Field(default=0, ge=0, description="Number of matching documents")
    label: str | None = Field(default=None, description="Display label")
    is_selected: bool | None = Field(default=None, description="Whether the value is active")
    thumbnail: str | None = None
    children: list["FacetValue"] = Field(default_factory=list)


class FacetConfig(BaseModel):
    """Opaque facet configuration passed through to the client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    parameter_name: str | None = Field(default=None, description="Query parameter name")
    type: str | None = Field(default=None, description="Facet widget type")
    is_multi_value: bool = Field(default=False, description="Whether several values may be active")


class Facet(BaseModel):
    """A named filter dimension with per-value document counts."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: str
    localized_name: str | None = None
    doc_count: int = Field(default=0, ge=0)
    config: FacetConfig | None = None
    values: list[FacetValue] = Field(default_factory=list)
