"""Response formatting for ranked recommendations."""

from typing import Callable, List, Optional

from ..data.catalog import CatalogEntry
from ..pipeline.ranking import ScoredCandidate
from .schemas import MovieItem, RecommendationItem

ExplanationFn = Callable[[CatalogEntry, float], str]


def format_movie(entry: CatalogEntry) -> MovieItem:
    return MovieItem(**entry.to_dict())


def format_recommendation(candidate: ScoredCandidate,
                          metric: str,
                          explanation: Optional[str] = None) -> RecommendationItem:
    """Convert a scored candidate to a response item."""
    score_text = f"{candidate.score:.4f}"
    return RecommendationItem(
        **candidate.entry.to_dict(),
        score=candidate.score,
        similarity_score=score_text,
        math_explanation=explanation or f"Score {score_text} using the {metric} method.",
    )


def format_recommendations(candidates: List[ScoredCandidate],
                           metric: str,
                           explanation_fn: Optional[ExplanationFn] = None) -> List[RecommendationItem]:
    """Format a ranked list, optionally with a custom explanation per item."""
    return [
        format_recommendation(
            candidate,
            metric,
            explanation_fn(candidate.entry, candidate.score) if explanation_fn else None,
        )
        for candidate in candidates
    ]
