"""Parsing of query-string inputs that pydantic does not cover."""

import json
import math
from typing import Any, Dict

from ..exceptions import InvalidInput


class InvalidJSON(InvalidInput):
    error_code = "INVALID_JSON"


def parse_weights(raw: str) -> Dict[str, float]:
    """Parse a JSON object of genre -> non-negative weight, e.g. ``{"Action":10,"Comedy":5}``."""
    try:
        weights = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise InvalidJSON(f"Invalid weights format: {e}. Expected a JSON object.") from e

    if not isinstance(weights, dict) or not weights:
        raise InvalidInput('Weights must be a non-empty object, e.g. {"Action":10,"Comedy":5}')

    validated = {}
    for genre, weight in weights.items():
        # Catalog genres are stored stripped
        name = genre.strip()
        if not name:
            raise InvalidInput(f"Invalid genre name: {genre!r}")
        validated[name] = _parse_weight(name, weight)

    return validated


def _parse_weight(genre: str, weight: Any) -> float:
    if isinstance(weight, bool):
        raise InvalidInput(f"Invalid weight for genre {genre!r}: {weight}")
    try:
        value = float(weight)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Invalid weight for genre {genre!r}: {weight}") from e
    if math.isnan(value) or math.isinf(value) or value < 0:
        raise InvalidInput(f"Invalid weight for genre {genre!r}: {weight}. Weight must be >= 0.")
    return value
