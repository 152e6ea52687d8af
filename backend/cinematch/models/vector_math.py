"""Vector math operations for similarity calculations."""

from typing import Sequence, Tuple, Union

import numpy as np

from ..exceptions import DimensionMismatch

VectorLike = Union[Sequence[float], np.ndarray]

DTYPE = np.float64


def as_vector(values: VectorLike) -> np.ndarray:
    """Convert a sequence of numbers to a 1-D float array."""
    vector = np.asarray(values, dtype=DTYPE)
    if vector.ndim != 1:
        raise ValueError(f"Expected a 1-D vector, got shape {vector.shape}")
    return vector


def _as_pair(vec_a: VectorLike, vec_b: VectorLike) -> Tuple[np.ndarray, np.ndarray]:
    a = as_vector(vec_a)
    b = as_vector(vec_b)
    if a.shape[0] != b.shape[0]:
        raise DimensionMismatch(a.shape[0], b.shape[0])
    return a, b


def dot_product(vec_a: VectorLike, vec_b: VectorLike) -> float:
    """Sum of element-wise products: a1*b1 + a2*b2 + ... + an*bn."""
    a, b = _as_pair(vec_a, vec_b)
    return float(np.dot(a, b))


def magnitude(vec: VectorLike) -> float:
    """Euclidean norm ||v||. The zero vector has magnitude 0."""
    return float(np.linalg.norm(as_vector(vec)))


def cosine_similarity(vec_a: VectorLike, vec_b: VectorLike) -> float:
    """
    Cosine of the angle between two vectors: (a . b) / (||a|| * ||b||).

    Returns 0 when either vector has zero magnitude, so an empty profile
    ranks last instead of raising.
    """
    a, b = _as_pair(vec_a, vec_b)
    mag_a = magnitude(a)
    mag_b = magnitude(b)

    if mag_a == 0 or mag_b == 0:
        return 0.0

    return float(np.dot(a, b)) / (mag_a * mag_b)


def euclidean_distance(vec_a: VectorLike, vec_b: VectorLike) -> float:
    """Straight-line distance sqrt(sum((a_i - b_i)^2)). Smaller is more similar."""
    a, b = _as_pair(vec_a, vec_b)
    return float(np.sqrt(np.sum((a - b) ** 2)))


def manhattan_distance(vec_a: VectorLike, vec_b: VectorLike) -> float:
    """City-block distance sum(|a_i - b_i|). Smaller is more similar."""
    a, b = _as_pair(vec_a, vec_b)
    return float(np.sum(np.abs(a - b)))
