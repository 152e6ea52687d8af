"""Ranking pipeline: score catalog entries against a query vector and keep the top N."""

import time
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import structlog

from ..data.catalog import Catalog, CatalogEntry
from ..exceptions import DimensionMismatch, EmptySelection, InvalidInput, NotFound
from ..models.similarity import Metric, SimilarityCalculator, similarity_calculator
from ..models.vector_math import as_vector

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ScoredCandidate:
    """A catalog entry paired with its similarity score."""
    entry: CatalogEntry
    score: float


@dataclass(frozen=True)
class RankingResult:
    """Ranked recommendations plus the vector they were ranked against."""
    recommendations: List[ScoredCandidate]
    query_vector: np.ndarray


def compute_centroid(vectors: Sequence[np.ndarray]) -> np.ndarray:
    """Arithmetic mean of equal-length vectors."""
    if not vectors:
        raise EmptySelection("Cannot compute a centroid of zero vectors")

    dimensions = len(vectors[0])
    total = np.zeros(dimensions, dtype=float)
    for vector in vectors:
        if len(vector) != dimensions:
            raise DimensionMismatch(dimensions, len(vector))
        total += vector

    return total / len(vectors)


def compute_fusion(vector_a: np.ndarray, vector_b: np.ndarray, ratio: float) -> np.ndarray:
    """Linear blend a * ratio + b * (1 - ratio)."""
    a = as_vector(vector_a)
    b = as_vector(vector_b)
    if a.shape[0] != b.shape[0]:
        raise DimensionMismatch(a.shape[0], b.shape[0])
    if not 0.0 <= ratio <= 1.0:
        raise InvalidInput(f"Ratio must be between 0 and 1, got: {ratio}")

    return a * ratio + b * (1.0 - ratio)


class RankingEngine:
    """Runs the four query modes over an immutable catalog snapshot."""

    def __init__(self, catalog: Catalog, calculator: Optional[SimilarityCalculator] = None):
        """Initialize ranking engine."""
        self.catalog = catalog
        self.calculator = calculator or similarity_calculator

    def rank(self,
             query_vector: np.ndarray,
             candidates: Iterable[CatalogEntry],
             metric: Union[Metric, str] = Metric.COSINE,
             limit: int = 12) -> List[ScoredCandidate]:
        """Score every candidate, sort by score descending and keep ``limit``.

        The sort is stable, so equal scores keep catalog order.
        """
        if limit < 1:
            raise InvalidInput(f"Limit must be a positive integer, got: {limit}")
        metric = Metric.parse(metric)

        start_time = time.time()
        candidates = list(candidates)
        scores = self.calculator.calculate_batch_similarity(
            query_vector, (entry.vector for entry in candidates), metric
        )
        scored = [ScoredCandidate(entry=entry, score=score) for entry, score in zip(candidates, scores)]
        ranked = sorted(scored, key=lambda candidate: candidate.score, reverse=True)[:limit]

        logger.debug("Ranking completed",
                     metric=metric.value,
                     candidates=len(scored),
                     returned=len(ranked),
                     latency_ms=(time.time() - start_time) * 1000)
        return ranked

    def _find_title(self, title: str) -> Optional[CatalogEntry]:
        return self.catalog.find_by_title(title)

    def _not_found(self, *titles: str) -> NotFound:
        suggestions = []
        for title in titles:
            for suggestion in self.catalog.suggest_titles(title):
                if suggestion not in suggestions:
                    suggestions.append(suggestion)
        quoted = ', '.join(f'"{title}"' for title in titles)
        return NotFound(f"Movie not found: {quoted}", suggestions=suggestions)

    def recommend_by_title(self,
                           title: str,
                           limit: int = 12,
                           metric: Union[Metric, str] = Metric.COSINE) -> RankingResult:
        """Movies most similar to the movie with the given title."""
        metric = Metric.parse(metric)
        target = self._find_title(title)
        if target is None:
            raise self._not_found(title)

        logger.info("Recommending by title", title=target.title, metric=metric.value)

        candidates = (entry for entry in self.catalog if entry.id != target.id)
        recommendations = self.rank(target.vector, candidates, metric, limit)
        return RankingResult(recommendations=recommendations, query_vector=target.vector.copy())

    def recommend_by_mood(self,
                          genre_weights: Mapping[str, float],
                          limit: int = 21,
                          metric: Union[Metric, str] = Metric.COSINE) -> RankingResult:
        """Movies closest to a weighted genre mood."""
        metric = Metric.parse(metric)
        query_vector = self.catalog.builder.build_weighted_vector(genre_weights)

        logger.info("Recommending by mood", weights=dict(genre_weights), metric=metric.value)

        recommendations = self.rank(query_vector, self.catalog, metric, limit)
        return RankingResult(recommendations=recommendations, query_vector=query_vector)

    def recommend_by_taste(self,
                           movie_ids: Iterable[int],
                           limit: int = 12,
                           metric: Union[Metric, str] = Metric.COSINE) -> RankingResult:
        """Movies closest to the centroid of the selected movies."""
        metric = Metric.parse(metric)
        selected_ids = set(movie_ids)
        selected = [entry for entry in self.catalog if entry.id in selected_ids]

        if not selected:
            raise EmptySelection("None of the selected movie ids exist in the catalog")

        unresolved = selected_ids - {entry.id for entry in selected}
        if unresolved:
            logger.warning("Ignoring unknown movie ids", movie_ids=sorted(unresolved))

        logger.info("Analysing taste profile", movies=len(selected), metric=metric.value)

        centroid = compute_centroid([entry.vector for entry in selected])

        candidates = (entry for entry in self.catalog if entry.id not in selected_ids)
        recommendations = self.rank(centroid, candidates, metric, limit)
        return RankingResult(recommendations=recommendations, query_vector=centroid)

    def recommend_by_fusion(self,
                            title_a: str,
                            title_b: str,
                            ratio: float,
                            limit: int = 12,
                            metric: Union[Metric, str] = Metric.COSINE) -> RankingResult:
        """Movies closest to a linear blend of two movies."""
        metric = Metric.parse(metric)
        movie_a = self._find_title(title_a)
        movie_b = self._find_title(title_b)

        missing = [title for title, movie in ((title_a, movie_a), (title_b, movie_b)) if movie is None]
        if missing:
            raise self._not_found(*missing)

        logger.info("Recommending by fusion",
                    title_a=movie_a.title,
                    title_b=movie_b.title,
                    ratio=ratio,
                    metric=metric.value)

        fusion_vector = compute_fusion(movie_a.vector, movie_b.vector, ratio)

        excluded = {movie_a.id, movie_b.id}
        candidates = (entry for entry in self.catalog if entry.id not in excluded)
        recommendations = self.rank(fusion_vector, candidates, metric, limit)
        return RankingResult(recommendations=recommendations, query_vector=fusion_vector)
