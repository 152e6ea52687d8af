"""In-memory movie catalog with precomputed feature vectors."""

import difflib
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import numpy as np
import structlog

from ..models.vector_builder import VectorBuilder, derive_genre_dimensions
from ..service.config import config

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, eq=False)
class CatalogEntry:
    """A movie and its feature vector. Never mutated after load."""
    id: int
    title: str
    overview: str
    poster_ref: str
    genres: Tuple[str, ...]
    rating: float
    vector: np.ndarray
    keywords: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation for responses."""
        return {
            'id': self.id,
            'title': self.title,
            'overview': self.overview,
            'poster': self.poster_ref,
            'genres': list(self.genres),
            'rating': self.rating,
            'vector': self.vector.tolist(),
        }


class Catalog:
    """Immutable snapshot of catalog entries sharing one genre dimension order."""

    def __init__(self, entries: Iterable[CatalogEntry], builder: VectorBuilder):
        """Initialize catalog."""
        self.entries: Tuple[CatalogEntry, ...] = tuple(entries)
        self.builder = builder
        self._by_id: Dict[int, CatalogEntry] = {}
        self._by_title: Dict[str, CatalogEntry] = {}

        for entry in self.entries:
            self._by_id.setdefault(entry.id, entry)
            # First entry in load order wins on colliding titles
            self._by_title.setdefault(self._title_key(entry.title), entry)

    @classmethod
    def from_records(cls,
                     records: Iterable[Mapping[str, Any]],
                     rating_preference: Optional[float] = None) -> "Catalog":
        """Build a catalog from raw loader records.

        Each record needs ``id``, ``title``, ``overview``, ``poster_ref``,
        ``genres`` and ``rating``; ``keywords`` is optional. The genre
        dimension order is derived from all records before any vector is built.
        """
        records = cls._unique_by_id(records)
        genre_dimensions = derive_genre_dimensions(record['genres'] for record in records)
        builder = VectorBuilder(genre_dimensions, rating_preference)

        entries = []
        for record in records:
            genres = tuple(g.strip() for g in record['genres'] if g and g.strip())
            rating = float(record.get('rating') or 0.0)
            vector = builder.build_catalog_vector(genres, rating)
            vector.setflags(write=False)

            entries.append(CatalogEntry(
                id=int(record['id']),
                title=str(record['title']),
                overview=str(record.get('overview') or ''),
                poster_ref=str(record.get('poster_ref') or ''),
                genres=genres,
                rating=rating,
                vector=vector,
                keywords=tuple(record.get('keywords') or ()),
            ))

        catalog = cls(entries, builder)
        logger.info("Catalog built",
                    movies=len(catalog),
                    genres=len(genre_dimensions),
                    dimensions=builder.dimensions)
        return catalog

    @staticmethod
    def _unique_by_id(records: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
        """Keep the first record for each id, in load order."""
        seen = set()
        unique = []
        duplicates = 0
        for record in records:
            movie_id = int(record['id'])
            if movie_id in seen:
                duplicates += 1
                continue
            seen.add(movie_id)
            unique.append(record)

        if duplicates:
            logger.warning("Dropped records with duplicate ids", duplicates=duplicates)
        return unique

    @staticmethod
    def _title_key(title: str) -> str:
        return title.strip().lower()

    @property
    def genre_dimensions(self) -> Tuple[str, ...]:
        return self.builder.genre_dimensions

    @property
    def dimensions(self) -> int:
        return self.builder.dimensions

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries)

    def get(self, movie_id: int) -> Optional[CatalogEntry]:
        """Look up an entry by id."""
        return self._by_id.get(movie_id)

    def find_by_title(self, title: str) -> Optional[CatalogEntry]:
        """Case-insensitive exact title lookup."""
        return self._by_title.get(self._title_key(title))

    def suggest_titles(self, title: str, limit: Optional[int] = None) -> List[str]:
        """Closest catalog titles for a title that did not match."""
        if limit is None:
            limit = config.MAX_SUGGESTIONS
        matches = difflib.get_close_matches(self._title_key(title), list(self._by_title), n=limit, cutoff=0.6)
        return [self._by_title[key].title for key in matches]

    def search(self, query: Optional[str] = None, limit: Optional[int] = None) -> List[CatalogEntry]:
        """Entries whose title contains ``query``, in catalog order."""
        if query:
            needle = query.strip().lower()
            matches = [entry for entry in self.entries if needle in entry.title.lower()]
        else:
            matches = list(self.entries)
        return matches[:limit] if limit is not None else matches
