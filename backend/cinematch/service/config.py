"""Configuration settings for the recommendation service."""

import os
from dataclasses import dataclass

@dataclass
class Config:
    """Main configuration class."""

    # Data paths
    DATA_DIR: str = "dataset"
    CATALOG_FILE: str = "movies_dataset.csv"

    # Catalog ingestion
    MIN_VOTE_COUNT: int = 100
    GENRE_SEPARATOR: str = "-"
    POSTER_BASE_URL: str = "https://image.tmdb.org/t/p/w500"

    # Vector space
    RATING_PREFERENCE: float = 0.8  # rating slot of mood query vectors

    # Ranking
    DEFAULT_METRIC: str = "cosine"
    DEFAULT_LIMIT: int = 12
    TITLE_LIMIT: int = 9
    MOOD_LIMIT: int = 21
    MAX_LIMIT: int = 50
    MAX_SUGGESTIONS: int = 3

    # API settings
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Logging
    LOG_LEVEL: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables."""
        config = cls()

        for field in config.__dataclass_fields__:
            env_var = f"CINEMATCH_{field}"
            if env_var in os.environ:
                value = os.environ[env_var]
                field_type = type(getattr(config, field))
                if field_type == int:
                    setattr(config, field, int(value))
                elif field_type == float:
                    setattr(config, field, float(value))
                elif field_type == bool:
                    setattr(config, field, value.lower() == "true")
                else:
                    setattr(config, field, value)

        return config

# Global config instance
config = Config.from_env()
