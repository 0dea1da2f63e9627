"""Faceted search service merging article and experience results."""

from app.clients.graph_client import GraphClient
from app.clients.locale import to_graph_locale
from app.config import Settings, get_settings
from app.logging_config import get_logger, log_timing
from app.models.query import FacetedSearchRequest
from app.models.search import MergedSearchResponse
from app.retrieval.facet_merger import merge_facets
from app.retrieval.pagination import compute_fetch_limit, paginate
from app.retrieval.result_merger import merge_and_sort
from app.retrieval.sort_order import build_sort_order
from app.storage.result_cache import ResultCache

logger = get_logger(__name__)


class FacetedSearchService:
    """Service running the faceted search pipeline for one request.

    The pipeline:
    1. Build ordering directives for both content types
    2. Over-fetch both types from offset 0 in one backend call
    3. Merge and globally re-sort all fetched items
    4. Slice the requested page out of the merged list
    5. Merge the per-type facets

    An author filter excludes experiences entirely, since experiences have
    no author. Backend failures propagate to the caller; nothing is
    retried or partially merged here.
    """

    def __init__(
        self,
        graph_client: GraphClient,
        cache: ResultCache | None = None,
        settings: Settings | None = None,
    ):
        """Initialize the search service.

        Args:
            graph_client: Content graph client
            cache: Optional cache for merged responses
            settings: Application settings
        """
        self.graph_client = graph_client
        self.cache = cache
        self.settings = settings or get_settings()

        logger.info(
            f"FacetedSearchService initialized: cache={'on' if cache is not None else 'off'}, "
            f"fetch_multiplier={self.settings.fetch_multiplier}, "
            f"min_fetch_limit={self.settings.min_fetch_limit}"
        )

    async def search(self, request: FacetedSearchRequest) -> MergedSearchResponse:
        """Run a faceted search.

        Args:
            request: Normalized search parameters

        Returns:
            MergedSearchResponse for the requested page

        Raises:
            GraphQueryError: If the backend call fails
        """
        cache_key = request.fingerprint()
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.info("Faceted search served from cache")
                return cached

        sort_order = build_sort_order(
            request.sort,
            request.search_term,
            request.use_semantic_search,
            request.semantic_weight,
        )
        fetch_limit = compute_fetch_limit(
            request.limit,
            multiplier=self.settings.fetch_multiplier,
            minimum=self.settings.min_fetch_limit,
        )
        include_experiences = not request.excludes_experiences

        logger.info(
            f"Faceted search: term={request.search_term!r} sort={sort_order.key} "
            f"offset={request.offset} limit={request.limit} fetch_limit={fetch_limit} "
            f"experiences={'on' if include_experiences else 'off'}"
        )

        with log_timing(logger, "Content graph search", fetch_limit=fetch_limit):
            result = await self.graph_client.faceted_search(
                search_term=request.search_term,
                locale=to_graph_locale(request.locale),
                domain=request.domain,
                limit=fetch_limit,
                offset=0,
                article_order_by=sort_order.article_order_by,
                experience_order_by=sort_order.experience_order_by,
                author_filters=request.author_filters,
                type_filters=request.type_filters,
                include_experiences=include_experiences,
            )

        articles = result.articles
        experiences = result.experiences if include_experiences else None

        merged_items = merge_and_sort(
            articles.items,
            experiences.items if experiences else None,
            sort_order.key,
            request.domain,
        )
        page = paginate(merged_items, request.offset, request.limit)

        response = MergedSearchResponse(
            items=page,
            total=articles.total + (experiences.total if experiences else 0),
            facets=merge_facets(articles.facets, experiences.facets if experiences else None),
        )

        if self.cache is not None:
            self.cache.set(cache_key, response)

        logger.info(
            f"Faceted search completed: {len(response.items)} items of {response.total}, "
            f"{len(response.facets)} facets"
        )
        return response
