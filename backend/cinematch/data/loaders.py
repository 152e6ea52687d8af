"""Catalog loading and preprocessing utilities."""

from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import structlog

from ..service.config import config
from .catalog import Catalog

logger = structlog.get_logger(__name__)

class SchemaMapper:
    """Maps different CSV schemas to standard format."""

    # Standard column names
    STANDARD_COLUMNS = {
        'id': ['id', 'movie_id', 'movieid', 'tmdb_id'],
        'title': ['title', 'name', 'movie_title'],
        'overview': ['overview', 'description', 'summary', 'plot'],
        'genres': ['genres', 'genre'],
        'keywords': ['keywords', 'keyword', 'tags'],
        'poster_path': ['poster_path', 'poster', 'poster_url'],
        'rating': ['vote_average', 'rating', 'score'],
        'vote_count': ['vote_count', 'num_votes', 'votes'],
    }

    @classmethod
    def infer_schema(cls, df: pd.DataFrame) -> Dict[str, str]:
        """Infer schema mapping from DataFrame columns."""
        mapping = {}
        df_columns = [col.lower() for col in df.columns]

        for standard_col, possible_names in cls.STANDARD_COLUMNS.items():
            for possible_name in possible_names:
                if possible_name.lower() in df_columns:
                    # Find the actual column name (preserve case)
                    for col in df.columns:
                        if col.lower() == possible_name.lower():
                            mapping[standard_col] = col
                            break
                    break

        return mapping

    @classmethod
    def standardize_dataframe(cls, df: pd.DataFrame) -> pd.DataFrame:
        """Rename known columns to standard names; missing columns become empty."""
        mapping = cls.infer_schema(df)
        logger.info("Schema mapping", mapping=mapping)

        std_df = pd.DataFrame(index=df.index)
        for std_col in cls.STANDARD_COLUMNS:
            if std_col in mapping:
                std_df[std_col] = df[mapping[std_col]]
            else:
                std_df[std_col] = None

        return std_df

    @staticmethod
    def split_labels(raw: Any, separator: Optional[str] = None) -> List[str]:
        """Split a separator-joined label string such as ``Action-Drama``."""
        if separator is None:
            separator = config.GENRE_SEPARATOR
        if raw is None or (isinstance(raw, float) and pd.isna(raw)):
            return []
        return [label.strip() for label in str(raw).split(separator) if label.strip()]

    @staticmethod
    def is_blank(value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, float) and pd.isna(value):
            return True
        return str(value).strip() == ''

class CatalogLoader:
    """Reads the movie CSV into a vectorized in-memory catalog."""

    def __init__(self, data_dir: str = None, min_vote_count: int = None):
        """Initialize catalog loader."""
        self._data_dir = data_dir
        self._min_vote_count = min_vote_count

    @property
    def data_dir(self) -> Path:
        return Path(self._data_dir or config.DATA_DIR)

    @property
    def min_vote_count(self) -> int:
        return config.MIN_VOTE_COUNT if self._min_vote_count is None else self._min_vote_count

    @property
    def catalog_path(self) -> Path:
        return self.data_dir / config.CATALOG_FILE

    def load_catalog(self, path: Optional[Path] = None) -> Catalog:
        """Load, filter and vectorize the movie catalog."""
        path = Path(path) if path else self.catalog_path
        logger.info("Loading movie catalog", path=str(path))

        if not path.exists():
            raise FileNotFoundError(f"Catalog file not found: {path}")

        try:
            df = pd.read_csv(path, encoding='utf-8')
        except UnicodeDecodeError:
            df = pd.read_csv(path, encoding='latin-1')

        records = self.to_records(df)
        catalog = Catalog.from_records(records)

        logger.info("Movie catalog loaded",
                    rows=len(df),
                    movies=len(catalog),
                    genres=len(catalog.genre_dimensions))
        return catalog

    def to_records(self, df: pd.DataFrame) -> List[Dict[str, Any]]:
        """Clean a raw movies DataFrame into catalog records."""
        std_df = SchemaMapper.standardize_dataframe(df)
        std_df = self._clean_movies_data(std_df)

        records = []
        for row in std_df.itertuples(index=False):
            genres = SchemaMapper.split_labels(row.genres)
            if not genres:
                continue

            poster_path = '' if SchemaMapper.is_blank(row.poster_path) else str(row.poster_path).strip()
            records.append({
                'id': int(row.id),
                'title': str(row.title).strip(),
                'overview': str(row.overview).strip(),
                'poster_ref': config.POSTER_BASE_URL + poster_path if poster_path else '',
                'genres': genres,
                'keywords': SchemaMapper.split_labels(row.keywords),
                'rating': float(row.rating),
            })

        return records

    def _clean_movies_data(self, df: pd.DataFrame) -> pd.DataFrame:
        """Drop unpopular, incomplete and duplicate rows."""
        initial = len(df)

        # Popularity filter
        df['vote_count'] = pd.to_numeric(df['vote_count'], errors='coerce')
        df = df[df['vote_count'].notna() & (df['vote_count'] >= self.min_vote_count)]

        # Required text fields
        for col in ['title', 'overview', 'genres']:
            blank = df[col].apply(SchemaMapper.is_blank).astype(bool)
            df = df[~blank]

        # Integer ids only
        ids = pd.to_numeric(df['id'], errors='coerce')
        df = df[ids.notna() & (ids == ids.round())].copy()
        df['id'] = pd.to_numeric(df['id']).astype(int)

        df['rating'] = pd.to_numeric(df['rating'], errors='coerce').fillna(0.0)

        # Remove duplicates
        df = df.drop_duplicates(subset=['id'])

        logger.info("Movies data cleaned", kept=len(df), dropped=initial - len(df))
        return df

# Global catalog loader instance
catalog_loader = CatalogLoader()
