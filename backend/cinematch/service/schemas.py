"""Pydantic schemas for API requests and responses."""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field
from datetime import datetime

from .config import config

class TasteRequest(BaseModel):
    """Request for recommendations from a set of liked movies."""
    movie_ids: List[int] = Field(..., min_length=1, description="Selected movie IDs")
    metric: str = Field(default=config.DEFAULT_METRIC, description="cosine, euclidean or manhattan")
    limit: int = Field(default=config.DEFAULT_LIMIT, ge=1, le=config.MAX_LIMIT, description="Number of recommendations")

class FusionRequest(BaseModel):
    """Request for recommendations from a blend of two movies."""
    title_a: str = Field(..., min_length=1, description="First movie title")
    title_b: str = Field(..., min_length=1, description="Second movie title")
    ratio: float = Field(..., ge=0, le=1, description="Weight of the first movie")
    metric: str = Field(default=config.DEFAULT_METRIC, description="cosine, euclidean or manhattan")
    limit: int = Field(default=config.DEFAULT_LIMIT, ge=1, le=config.MAX_LIMIT, description="Number of recommendations")

class MovieItem(BaseModel):
    """Catalog movie."""
    id: int = Field(..., description="Movie ID")
    title: str = Field(..., description="Movie title")
    overview: str = Field(default="", description="Plot overview")
    genres: List[str] = Field(default_factory=list, description="Genre labels")
    poster: str = Field(default="", description="Poster URL")
    rating: float = Field(default=0.0, description="Average rating 0-10")
    vector: List[float] = Field(default_factory=list, description="Feature vector")

class RecommendationItem(MovieItem):
    """Individual recommendation item."""
    score: float = Field(..., ge=0, le=1, description="Similarity score")
    similarity_score: str = Field(..., description="Score with 4 decimals")
    math_explanation: str = Field(..., description="How the score was obtained")

class RecommendationMeta(BaseModel):
    """Query details returned with recommendations."""
    query: Any = Field(default=None, description="Query as received")
    algorithm: str = Field(..., description="Ranking method")
    execution_time: str = Field(..., description="Processing time")
    target_vector: List[float] = Field(default_factory=list, description="Vector the catalog was ranked against")
    total_results: int = Field(..., description="Number of recommendations")
    query_count: Optional[int] = Field(default=None, description="Number of selected movies")

class RecommendationResponse(BaseModel):
    """Response for recommendations."""
    meta: RecommendationMeta
    data: List[RecommendationItem]

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="Service version")
    catalog_loaded: bool = Field(..., description="Whether the catalog is loaded")
    movies: int = Field(default=0, description="Catalog size")
    dimensions: int = Field(default=0, description="Feature vector length")

class ErrorResponse(BaseModel):
    """Error response."""
    error: str = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    suggestions: List[str] = Field(default_factory=list, description="Close title matches")
    timestamp: datetime = Field(default_factory=datetime.now, description="Error timestamp")
