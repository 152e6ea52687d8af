"""Feature vector construction from genre lists and mood weights."""

from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

import numpy as np
import structlog

from ..service.config import config
from .vector_math import DTYPE

logger = structlog.get_logger(__name__)


def derive_genre_dimensions(genre_lists: Iterable[Iterable[str]]) -> Tuple[str, ...]:
    """Collect the sorted, deduplicated genre labels seen across a catalog."""
    unique_genres = set()
    for genres in genre_lists:
        for genre in genres:
            if genre and genre.strip():
                unique_genres.add(genre.strip())
    return tuple(sorted(unique_genres))


class VectorBuilder:
    """Encodes genres (plus rating) against a fixed genre dimension order.

    Every vector has ``len(genre_dimensions) + 1`` components; the last one
    holds the normalized rating.
    """

    def __init__(self, genre_dimensions: Sequence[str], rating_preference: Optional[float] = None):
        """Initialize vector builder."""
        self.genre_dimensions = tuple(genre_dimensions)
        self.genre_index: Dict[str, int] = {genre: idx for idx, genre in enumerate(self.genre_dimensions)}
        if rating_preference is None:
            rating_preference = config.RATING_PREFERENCE
        self.rating_preference = float(rating_preference)

    @property
    def dimensions(self) -> int:
        """Vector length, genres plus the rating slot."""
        return len(self.genre_dimensions) + 1

    def build_catalog_vector(self, genres: Iterable[str], rating: float = 0.0) -> np.ndarray:
        """Build a binary genre membership vector with rating / 10 appended."""
        vector = np.zeros(self.dimensions, dtype=DTYPE)

        for genre in genres:
            idx = self.genre_index.get(genre)
            # Stray labels outside the dimension order are skipped
            if idx is not None:
                vector[idx] = 1.0

        vector[-1] = float(rating) / 10.0
        return vector

    def build_weighted_vector(self, genre_weights: Mapping[str, float]) -> np.ndarray:
        """Build a query vector from user mood weights.

        Weights are kept on their own scale. The rating slot is set to the
        configured rating preference.
        """
        vector = np.zeros(self.dimensions, dtype=DTYPE)
        unknown = []

        for genre, weight in genre_weights.items():
            idx = self.genre_index.get(genre)
            if idx is None:
                unknown.append(genre)
                continue
            vector[idx] = float(weight)

        if unknown:
            logger.debug("Ignoring unknown genres in weights", genres=unknown)

        vector[-1] = self.rating_preference
        return vector
