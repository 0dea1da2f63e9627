"""Merging of per-content-type facet counts."""

import logging

from app.models.facet import Facet, FacetValue

logger = logging.getLogger(__name__)


def _combine_values(value: FacetValue, other: FacetValue) -> FacetValue:
    """Fold ``other`` into ``value``; ``value`` wins for display fields."""
    is_selected = value.is_selected
    if value.is_selected is not None or other.is_selected is not None:
        is_selected = bool(value.is_selected) or bool(other.is_selected)

    return value.model_copy(
        update={
            "doc_count": value.doc_count + other.doc_count,
            "label": value.label if value.label is not None else other.label,
            "is_selected": is_selected,
            "thumbnail": value.thumbnail or other.thumbnail,
            "children": merge_facet_values(value.children, other.children),
        }
    )


def _fold_values(values: list[FacetValue] | None) -> dict[str, FacetValue]:
    # Repeated keys within one side collapse into their first occurrence
    folded: dict[str, FacetValue] = {}
    for value in values or []:
        existing = folded.get(value.key)
        folded[value.key] = value if existing is None else _combine_values(existing, value)
    return folded


def merge_facet_values(
    article_values: list[FacetValue] | None,
    experience_values: list[FacetValue] | None,
) -> list[FacetValue]:
    """Merge two value lists by ``key``, summing counts.

    Each key appears once in the result and every source value is counted
    exactly once. Children are merged the same way. Article-side values keep
    their order and come first; experience-only values follow in their own
    order.
    """
    merged = _fold_values(article_values)
    for key, other in _fold_values(experience_values).items():
        existing = merged.get(key)
        merged[key] = other if existing is None else _combine_values(existing, other)
    return list(merged.values())


def _combine_facets(facet: Facet, other: Facet) -> Facet:
    if facet.config is not None and other.config is not None and facet.config != other.config:
        logger.debug(f"Facet '{facet.name}' has conflicting configs, keeping article config")

    return facet.model_copy(
        update={
            "localized_name": facet.localized_name or other.localized_name,
            "doc_count": facet.doc_count + other.doc_count,
            "config": facet.config if facet.config is not None else other.config,
            "values": merge_facet_values(facet.values, other.values),
        }
    )


def _fold_facets(facets: list[Facet] | None) -> dict[str, Facet]:
    folded: dict[str, Facet] = {}
    for facet in facets or []:
        existing = folded.get(facet.name)
        folded[facet.name] = facet if existing is None else _combine_facets(existing, facet)
    return folded


def merge_facets(
    article_facets: list[Facet] | None,
    experience_facets: list[Facet] | None,
) -> list[Facet]:
    """Combine both facet sets into one, matching facets by ``name``.

    Matched facets sum their ``docCount`` and merge their values. When both
    sides carry a ``config`` the article side wins; otherwise whichever side
    has one is used. Facets present on one side only pass through unchanged.
    A name repeated within one side is folded together before matching.

    Args:
        article_facets: Facets computed for the ArticlePage query
        experience_facets: Facets computed for the Experience query

    Returns:
        Merged facets, article-side facets first
    """
    merged = _fold_facets(article_facets)
    for name, other in _fold_facets(experience_facets).items():
        existing = merged.get(name)
        merged[name] = other if existing is None else _combine_facets(existing, other)
    return list(merged.values())
