"""Metric-dispatching similarity scores on a common 0-1 scale."""

from enum import Enum
from typing import Iterable, List, Union

from ..exceptions import DimensionMismatch, UnsupportedMetric
from . import vector_math
from .vector_math import VectorLike


class Metric(str, Enum):
    """Supported similarity metrics."""
    COSINE = "cosine"
    EUCLIDEAN = "euclidean"
    MANHATTAN = "manhattan"

    @classmethod
    def parse(cls, value: Union["Metric", str]) -> "Metric":
        """Resolve a metric from an enum member or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for metric in cls:
                if metric.value == normalized:
                    return metric
        raise UnsupportedMetric(value)


class SimilarityCalculator:
    """Scores vector pairs so that a larger score always means more similar."""

    def calculate_similarity(self,
                             vector_a: VectorLike,
                             vector_b: VectorLike,
                             metric: Union[Metric, str] = Metric.COSINE) -> float:
        """Similarity of two vectors in [0, 1] under the chosen metric.

        An empty vector on either side scores 0. Distances are mapped
        through 1 / (1 + distance).
        """
        metric = Metric.parse(metric)
        a = vector_math.as_vector(vector_a)
        b = vector_math.as_vector(vector_b)

        if a.size == 0 or b.size == 0:
            return 0.0

        if a.shape[0] != b.shape[0]:
            raise DimensionMismatch(a.shape[0], b.shape[0])

        if metric is Metric.COSINE:
            score = vector_math.cosine_similarity(a, b)
        elif metric is Metric.EUCLIDEAN:
            score = 1.0 / (1.0 + vector_math.euclidean_distance(a, b))
        else:
            score = 1.0 / (1.0 + vector_math.manhattan_distance(a, b))

        # Floating point can overshoot 1.0 for identical vectors
        return float(min(1.0, max(0.0, score)))

    def calculate_batch_similarity(self,
                                   query: VectorLike,
                                   vectors: Iterable[VectorLike],
                                   metric: Union[Metric, str] = Metric.COSINE) -> List[float]:
        """Score one query vector against many candidates, preserving order."""
        metric = Metric.parse(metric)
        query = vector_math.as_vector(query)
        return [self.calculate_similarity(query, vector, metric) for vector in vectors]


similarity_calculator = SimilarityCalculator()
