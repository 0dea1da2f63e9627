"""FastAPI application entry point."""

import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.clients.graph_client import GraphClient
from app.config import get_settings
from app.logging_config import get_logger, request_context, setup_logging
from app.models.error import ErrorResponse
from app.models.query import FacetedSearchRequest
from app.services.search_service import FacetedSearchService
from app.storage.result_cache import TTLCache

# Setup logging configuration
setup_logging()
logger = get_logger(__name__)

# Load and validate configuration at startup
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown."""
    logger.info("Starting Faceted Search Service...")
    logger.info(
        f"Configuration: gateway={settings.optimizely_graph_gateway}, "
        f"timeout={settings.graph_timeout}s, result_cache_ttl={settings.result_cache_ttl}s"
    )

    graph_client = GraphClient(
        gateway=settings.optimizely_graph_gateway,
        single_key=settings.optimizely_graph_single_key,
        timeout=settings.graph_timeout,
        max_retries=settings.graph_max_retries,
    )
    cache = (
        TTLCache(ttl=settings.result_cache_ttl, max_entries=settings.result_cache_max_entries)
        if settings.result_cache_ttl > 0
        else None
    )
    app.state.search_service = FacetedSearchService(
        graph_client=graph_client,
        cache=cache,
        settings=settings,
    )

    logger.info("Faceted Search Service started successfully")

    yield

    logger.info("Shutting down Faceted Search Service...")
    await graph_client.close()
    logger.info("Faceted Search Service shut down successfully")


app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Merged, paginated and faceted search over articles and experiences",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# Request ID and error handling middleware
@app.middleware("http")
async def request_middleware(request: Request, call_next):
    """Add request ID tracking and error handling."""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id

    with request_context(request_id, request.url.path):
        try:
            logger.info(f"Request started: {request.method} {request.url.path}")
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled exception: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=ErrorResponse.from_exception(
                    "Internal Server Error", e, request_id
                ).model_dump(mode="json"),
                headers={"X-Request-ID": request_id},
            )

        response.headers["X-Request-ID"] = request_id
        logger.info(
            f"Request completed: {request.method} {request.url.path} - Status: {response.status_code}"
        )
        return response


def get_search_service(request: Request) -> FacetedSearchService:
    """Provide the search service created at startup."""
    service = getattr(request.app.state, "search_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Search service not initialized",
        )
    return service


# API Endpoints


@app.get("/health")
async def health_check():
    """Health check endpoint.

    Returns:
        dict: Health status and service version
    """
    return {
        "status": "healthy",
        "service": settings.api_title,
        "version": settings.api_version,
    }


@app.get(
    "/api/faceted-search.json",
    summary="Faceted search over articles and experiences",
    description=(
        "Search articles and experiences, merge both result sets into one ranked list, "
        "and return the requested page with combined facet counts."
    ),
)
async def faceted_search(
    request: Request,
    search_service: FacetedSearchService = Depends(get_search_service),
) -> JSONResponse:
    """Run a faceted search.

    Query parameters: ``q``, ``locale``, ``domain``, ``limit``, ``offset``,
    ``sort``, ``useSemanticSearch``, ``semanticWeight`` and the repeatable
    ``authors[]`` and ``types[]``. Malformed values fall back to defaults.

    Args:
        request: FastAPI request object
        search_service: Faceted search service

    Returns:
        JSONResponse with ``items``, ``total`` and ``facets``, or a 500
        error body if the search fails
    """
    request_id = getattr(request.state, "request_id", str(uuid.uuid4()))

    try:
        origin = f"{request.url.scheme}://{request.url.netloc}"
        search_request = FacetedSearchRequest.from_query_params(
            request.query_params, origin=origin, settings=settings
        )
        result = await search_service.search(search_request)

    except Exception as e:
        logger.error(f"Faceted search API error: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse.from_exception(
                "Failed to perform faceted search", e, request_id
            ).model_dump(mode="json"),
        )

    return JSONResponse(
        content=result.to_payload(),
        headers={"Cache-Control": settings.cache_control_header},
    )
