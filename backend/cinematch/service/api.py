"""FastAPI service for the movie recommendation engine."""

import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Depends, Query
from fastapi.middleware.cors import CORSMiddleware
import structlog
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from .schemas import (
    TasteRequest, FusionRequest, MovieItem, RecommendationMeta,
    RecommendationResponse, HealthResponse, ErrorResponse
)
from .config import config
from .formatting import format_movie, format_recommendations
from .validation import parse_weights
from ..data.catalog import Catalog
from ..data.loaders import catalog_loader
from ..exceptions import CineMatchError, DimensionMismatch, NotFound
from ..models.similarity import Metric
from ..pipeline.ranking import RankingEngine, RankingResult

VERSION = "1.0.0"

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

# Prometheus metrics
REQUEST_COUNT = Counter('cinematch_requests_total', 'Total recommendation requests', ['endpoint'])
REQUEST_LATENCY = Histogram('cinematch_request_duration_seconds', 'Request latency', ['endpoint'])
ERROR_COUNT = Counter('cinematch_errors_total', 'Total errors', ['endpoint', 'error_type'])

# The engine (and the catalog it wraps) is replaced as a whole, never mutated
state: Dict[str, Optional[RankingEngine]] = {'engine': None}

app = FastAPI(
    title="CineMatch",
    description="Movie recommendations from genre and rating feature vectors",
    version=VERSION
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def install_catalog(catalog: Catalog) -> RankingEngine:
    """Swap in a new catalog snapshot."""
    engine = RankingEngine(catalog)
    state['engine'] = engine
    logger.info("Catalog installed", movies=len(catalog), dimensions=catalog.dimensions)
    return engine

def load_catalog(path: Optional[Path] = None) -> RankingEngine:
    """Load the catalog from disk and install it."""
    catalog = catalog_loader.load_catalog(path)
    return install_catalog(catalog)

@app.on_event("startup")
async def startup_event():
    """Initialize the application on startup."""
    logger.info("Starting recommendation service")

    if state['engine'] is None:
        try:
            load_catalog()
        except Exception as e:
            logger.error("Failed to load catalog", error=str(e))
            ERROR_COUNT.labels(endpoint='startup', error_type='load_error').inc()

    logger.info("Recommendation service started")

def get_engine() -> RankingEngine:
    """Dependency returning the current engine."""
    engine = state['engine']
    if engine is None:
        raise HTTPException(status_code=503, detail="Movie catalog not loaded")
    return engine

def _http_error(error: CineMatchError, endpoint: str) -> HTTPException:
    """Map a core error to an HTTP error response."""
    ERROR_COUNT.labels(endpoint=endpoint, error_type=type(error).__name__).inc()

    if isinstance(error, NotFound):
        status_code = 404
    elif isinstance(error, DimensionMismatch):
        status_code = 500
    else:
        status_code = 400

    if status_code >= 500:
        logger.error("Error processing request", endpoint=endpoint, error=str(error))
    else:
        logger.warning("Rejected request", endpoint=endpoint, error=str(error))

    body = ErrorResponse(
        error=error.error_code,
        message=str(error),
        suggestions=getattr(error, 'suggestions', []),
    )
    return HTTPException(status_code=status_code, detail=body.model_dump(mode='json'))

def _internal_error(error: Exception, endpoint: str) -> HTTPException:
    ERROR_COUNT.labels(endpoint=endpoint, error_type='exception').inc()
    logger.error("Unexpected error", endpoint=endpoint, error=str(error), exc_info=True)
    body = ErrorResponse(error="PROCESSING_ERROR", message=f"Failed to process {endpoint} request")
    return HTTPException(status_code=500, detail=body.model_dump(mode='json'))

def _build_response(result: RankingResult,
                    metric: Metric,
                    algorithm: str,
                    query: Any,
                    start_time: float,
                    endpoint: str,
                    explanation_fn=None,
                    query_count: Optional[int] = None) -> RecommendationResponse:
    latency = time.perf_counter() - start_time
    REQUEST_LATENCY.labels(endpoint=endpoint).observe(latency)

    data = format_recommendations(result.recommendations, metric.value, explanation_fn)
    return RecommendationResponse(
        meta=RecommendationMeta(
            query=query,
            algorithm=algorithm,
            execution_time=f"{latency * 1000:.2f} ms",
            target_vector=result.query_vector.tolist(),
            total_results=len(data),
            query_count=query_count,
        ),
        data=data,
    )

@app.get("/healthz", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    engine = state['engine']
    catalog = engine.catalog if engine else None

    return HealthResponse(
        status="healthy" if catalog is not None else "degraded",
        timestamp=datetime.now(),
        version=VERSION,
        catalog_loaded=catalog is not None,
        movies=len(catalog) if catalog is not None else 0,
        dimensions=catalog.dimensions if catalog is not None else 0,
    )

@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

@app.get("/genres", response_model=List[str])
def get_genres(engine: RankingEngine = Depends(get_engine)):
    """Genre dimension order of the feature space."""
    return list(engine.catalog.genre_dimensions)

@app.get("/movies", response_model=List[MovieItem])
def get_movies(search: Optional[str] = Query(None, description="Substring of the title"),
               limit: int = Query(config.MAX_LIMIT, ge=1, le=config.MAX_LIMIT),
               engine: RankingEngine = Depends(get_engine)):
    """List catalog movies, e.g. to pick a taste profile."""
    REQUEST_COUNT.labels(endpoint='movies').inc()
    return [format_movie(entry) for entry in engine.catalog.search(search, limit)]

@app.get("/recommend", response_model=RecommendationResponse)
def recommend_by_title(title: str = Query(..., min_length=1, description="Movie title"),
                       metric: str = Query(config.DEFAULT_METRIC),
                       limit: int = Query(config.TITLE_LIMIT, ge=1, le=config.MAX_LIMIT),
                       engine: RankingEngine = Depends(get_engine)):
    """Movies similar to a given title."""
    start_time = time.perf_counter()
    endpoint = 'recommend'
    REQUEST_COUNT.labels(endpoint=endpoint).inc()

    try:
        selected = Metric.parse(metric)
        result = engine.recommend_by_title(title.strip(), limit=limit, metric=selected)
        return _build_response(result, selected, selected.value.upper(), title, start_time, endpoint)
    except CineMatchError as e:
        raise _http_error(e, endpoint)
    except Exception as e:
        raise _internal_error(e, endpoint)

@app.get("/recommend/mood", response_model=RecommendationResponse)
def recommend_by_mood(weights: str = Query(..., description='JSON object, e.g. {"Action":10,"Comedy":5}'),
                      metric: str = Query(config.DEFAULT_METRIC),
                      limit: int = Query(config.MOOD_LIMIT, ge=1, le=config.MAX_LIMIT),
                      engine: RankingEngine = Depends(get_engine)):
    """Movies matching a weighted genre mood."""
    start_time = time.perf_counter()
    endpoint = 'mood'
    REQUEST_COUNT.labels(endpoint=endpoint).inc()

    try:
        selected = Metric.parse(metric)
        genre_weights = parse_weights(weights)
        result = engine.recommend_by_mood(genre_weights, limit=limit, metric=selected)
        return _build_response(result, selected, selected.value.upper(), genre_weights, start_time, endpoint)
    except CineMatchError as e:
        raise _http_error(e, endpoint)
    except Exception as e:
        raise _internal_error(e, endpoint)

@app.post("/recommend/taste", response_model=RecommendationResponse)
def recommend_by_taste(request: TasteRequest, engine: RankingEngine = Depends(get_engine)):
    """Movies matching the average of several liked movies."""
    start_time = time.perf_counter()
    endpoint = 'taste'
    REQUEST_COUNT.labels(endpoint=endpoint).inc()

    try:
        selected = Metric.parse(request.metric)
        result = engine.recommend_by_taste(request.movie_ids, limit=request.limit, metric=selected)
        return _build_response(
            result, selected,
            f"Vector Centroid (Average), {selected.value.upper()}",
            request.movie_ids, start_time, endpoint,
            explanation_fn=lambda entry, score: (
                f"This movie scores {score:.4f} against the average of your selected movies."
            ),
            query_count=len(set(request.movie_ids)),
        )
    except CineMatchError as e:
        raise _http_error(e, endpoint)
    except Exception as e:
        raise _internal_error(e, endpoint)

@app.post("/recommend/fusion", response_model=RecommendationResponse)
def recommend_by_fusion(request: FusionRequest, engine: RankingEngine = Depends(get_engine)):
    """Movies matching a blend of two titles."""
    start_time = time.perf_counter()
    endpoint = 'fusion'
    REQUEST_COUNT.labels(endpoint=endpoint).inc()

    try:
        selected = Metric.parse(request.metric)
        result = engine.recommend_by_fusion(
            request.title_a.strip(), request.title_b.strip(), request.ratio,
            limit=request.limit, metric=selected,
        )
        query = {
            'film_a': request.title_a,
            'film_b': request.title_b,
            'ratio': f"{request.ratio * 100:.0f}% : {(1 - request.ratio) * 100:.0f}%",
        }
        return _build_response(
            result, selected,
            f"Linear Combination (Vector Fusion), {selected.value.upper()}",
            query, start_time, endpoint,
            explanation_fn=lambda entry, score: (
                f'This movie scores {score:.4f} against the fusion of '
                f'"{request.title_a}" and "{request.title_b}".'
            ),
        )
    except CineMatchError as e:
        raise _http_error(e, endpoint)
    except Exception as e:
        raise _internal_error(e, endpoint)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=config.API_HOST,
        port=config.API_PORT,
        log_level=config.LOG_LEVEL.lower()
    )
