"""Optimizely Graph client for the combined faceted search query."""

import asyncio
import logging
from typing import Any

import httpx

from app.models.facet import Facet, FacetConfig, FacetValue
from app.models.search import FacetedSearchResult, SourceResultBlock

logger = logging.getLogger(__name__)

_METADATA_FIELDS = """
      _metadata {
        key
        displayName
        locale
        published
        lastModified
        types
        url { base default hierarchical }
      }"""

FACETED_SEARCH_QUERY = f"""
query FacetedSearch(
  $searchTerm: String
  $locale: [Locales]
  $domain: String
  $limit: Int
  $offset: Int
  $articleOrderBy: ArticlePageOrderByInput
  $experienceOrderBy: BlankExperienceOrderByInput
  $authorFilters: [String]
  $typeFilters: [String]
  $includeExperiences: Boolean!
) {{
  ArticlePage(
    where: {{
      _fulltext: {{ match: $searchTerm }}
      Author: {{ in: $authorFilters }}
      _metadata: {{ types: {{ in: $typeFilters }}, url: {{ base: {{ eq: $domain }} }} }}
    }}
    locale: $locale
    limit: $limit
    offset: $offset
    orderBy: $articleOrderBy
  ) {{
    total
    items {{
      _score{_METADATA_FIELDS}
      Heading
      SubHeading
      Author
      Body {{ html }}
      SeoSettings {{ MetaTitle MetaDescription }}
    }}
    facets {{
      Author {{ name count }}
      _metadata {{ types {{ name count }} }}
    }}
  }}
  BlankExperience(
    where: {{
      _fulltext: {{ match: $searchTerm }}
      _metadata: {{ types: {{ in: $typeFilters }}, url: {{ base: {{ eq: $domain }} }} }}
    }}
    locale: $locale
    limit: $limit
    offset: $offset
    orderBy: $experienceOrderBy
  ) @include(if: $includeExperiences) {{
    total
    items {{
      _score{_METADATA_FIELDS}
      BlankExperienceSeoSettings {{ MetaTitle MetaDescription }}
      _fulltext
    }}
    facets {{
      _metadata {{ types {{ name count }} }}
    }}
  }}
}}
"""

# facet name -> (path inside the graph "facets" block, query parameter, display name)
FACET_FIELDS: dict[str, tuple[tuple[str, ...], str, str]] = {
    "authors": (("Author",), "authors[]", "Author"),
    "types": (("_metadata", "types"), "types[]", "Content type"),
}


class GraphQueryError(Exception):
    """Raised when a content graph request fails.

    Attributes:
        status_code: HTTP status of the failed response, if any
        retryable: Whether repeating the request may succeed
    """

    def __init__(self, message: str, status_code: int | None = None, retryable: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


def facets_from_graph(
    raw_facets: dict[str, Any] | None,
    total: int = 0,
    selected: dict[str, list[str]] | None = None,
) -> list[Facet]:
    """Adapt a graph ``facets`` block into Facet models.

    Entries without a name are skipped. Facets missing from the block are
    omitted entirely.

    Args:
        raw_facets: Graph facets, e.g. ``{"Author": [{"name": ..., "count": ...}]}``
        total: Document total of the block, used as the facet docCount
        selected: Active filter values per facet name

    Returns:
        List of facets in FACET_FIELDS order
    """
    if not raw_facets:
        return []

    selected = selected or {}
    facets: list[Facet] = []

    for name, (path, parameter_name, localized_name) in FACET_FIELDS.items():
        node: Any = raw_facets
        for part in path:
            node = node.get(part) if isinstance(node, dict) else None
        if node is None:
            continue

        active = set(selected.get(name, []))
        values = [
            FacetValue(
                key=entry["name"],
                label=entry["name"],
                doc_count=entry.get("count") or 0,
                is_selected=entry["name"] in active,
            )
            for entry in node
            if entry and entry.get("name")
        ]
        facets.append(
            Facet(
                name=name,
                localized_name=localized_name,
                doc_count=total,
                config=FacetConfig(
                    parameter_name=parameter_name,
                    type="checkbox",
                    is_multi_value=True,
                ),
                values=values,
            )
        )

    return facets


def _block_from_graph(raw_block: dict[str, Any] | None, selected: dict[str, list[str]]) -> SourceResultBlock:
    if not raw_block:
        return SourceResultBlock()

    total = raw_block.get("total") or 0
    return SourceResultBlock(
        items=[item for item in raw_block.get("items") or [] if item],
        total=total,
        facets=facets_from_graph(raw_block.get("facets"), total=total, selected=selected),
    )


class GraphClient:
    """Async client for the Optimizely Graph content endpoint.

    Requests are authenticated with the single key. Transport failures and
    5xx responses are retried with exponential backoff up to ``max_retries``
    attempts; GraphQL errors and 4xx responses fail immediately.
    """

    def __init__(
        self,
        gateway: str,
        single_key: str | None,
        timeout: float = 10.0,
        max_retries: int = 1,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the content graph client.

        Args:
            gateway: Base URL of the graph gateway
            single_key: Single key for public content access
            timeout: Request timeout in seconds
            max_retries: Maximum number of attempts per request
            http_client: Optional preconfigured httpx client
        """
        self.endpoint = f"{gateway.rstrip('/')}/content/v2"
        self.single_key = single_key
        self.timeout = timeout
        self.max_retries = max(max_retries, 1)
        self.client = http_client or httpx.AsyncClient(timeout=timeout)

    async def _retry_with_backoff(self, func, *args, **kwargs) -> Any:
        """Execute ``func`` retrying retryable failures with delays of 1s, 2s, 4s ..."""
        last_exception: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                return await func(*args, **kwargs)
            except GraphQueryError as e:
                if not e.retryable:
                    raise
                last_exception = e
            except httpx.TransportError as e:
                last_exception = GraphQueryError(
                    f"Content graph request failed: {type(e).__name__}: {e}",
                    retryable=True,
                )

            if attempt < self.max_retries - 1:
                delay = 2**attempt
                logger.warning(
                    f"Content graph call failed (attempt {attempt + 1}/{self.max_retries}): "
                    f"{last_exception}. Retrying in {delay}s..."
                )
                await asyncio.sleep(delay)

        logger.error(f"Content graph call failed after {self.max_retries} attempt(s): {last_exception}")
        raise last_exception

    async def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a GraphQL query and return its ``data`` block.

        Raises:
            GraphQueryError: On transport failure, non-2xx status, GraphQL
                errors or a response without data
        """
        if not self.single_key:
            raise GraphQueryError("Optimizely Graph single key is not configured")

        payload = {"query": query, "variables": variables or {}}

        async def _post() -> dict[str, Any]:
            response = await self.client.post(
                self.endpoint,
                params={"auth": self.single_key},
                json=payload,
                headers={"Content-Type": "application/json"},
            )
            if response.status_code >= 400:
                raise GraphQueryError(
                    f"GraphQL query failed: {response.status_code} "
                    f"{response.reason_phrase} - {response.text[:500]}",
                    status_code=response.status_code,
                    retryable=response.status_code >= 500,
                )

            try:
                body = response.json()
            except ValueError as e:
                raise GraphQueryError(f"Invalid JSON from content graph: {e}") from e

            if body.get("errors"):
                messages = ", ".join(
                    str(error.get("message", error)) if isinstance(error, dict) else str(error)
                    for error in body["errors"]
                )
                raise GraphQueryError(f"GraphQL errors: {messages}")

            if body.get("data") is None:
                raise GraphQueryError("GraphQL response contained no data")

            return body["data"]

        return await self._retry_with_backoff(_post)

    async def faceted_search(
        self,
        search_term: str | None,
        locale: str,
        domain: str | None,
        limit: int,
        article_order_by: dict[str, Any],
        experience_order_by: dict[str, Any],
        author_filters: list[str] | None = None,
        type_filters: list[str] | None = None,
        include_experiences: bool = True,
        offset: int = 0,
    ) -> FacetedSearchResult:
        """Fetch articles and experiences with one combined query.

        Args:
            search_term: Full-text term, None for no text match
            locale: Locale in content graph format
            domain: Site domain the items must belong to
            limit: Items requested per content type
            article_order_by: orderBy directive for ArticlePage
            experience_order_by: orderBy directive for BlankExperience
            author_filters: Author values to filter articles by
            type_filters: Content type values to filter both types by
            include_experiences: Whether to query experiences at all
            offset: Offset applied to both sub-queries

        Returns:
            FacetedSearchResult with one block per content type
        """
        variables = {
            "searchTerm": search_term,
            "locale": [locale],
            "domain": domain,
            "limit": limit,
            "offset": offset,
            "articleOrderBy": article_order_by,
            "experienceOrderBy": experience_order_by,
            "authorFilters": author_filters or None,
            "typeFilters": type_filters or None,
            "includeExperiences": include_experiences,
        }

        data = await self.execute(FACETED_SEARCH_QUERY, variables)

        selected = {"authors": author_filters or [], "types": type_filters or []}
        result = FacetedSearchResult(
            articles=_block_from_graph(data.get("ArticlePage"), selected),
            experiences=(
                _block_from_graph(data.get("BlankExperience"), selected)
                if include_experiences
                else SourceResultBlock()
            ),
        )

        logger.info(
            f"Content graph returned {len(result.articles.items)}/{result.articles.total} articles, "
            f"{len(result.experiences.items)}/{result.experiences.total} experiences"
        )
        return result

    async def close(self):
        """Close the underlying HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
