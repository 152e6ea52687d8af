"""Shared fixtures for the test suite."""

import pytest

from cinematch.data.catalog import Catalog


SAMPLE_RECORDS = [
    {'id': 1, 'title': 'Inception', 'overview': 'A thief steals secrets through dream-sharing.',
     'poster_ref': '/inception.jpg', 'genres': ['Action', 'Science Fiction', 'Adventure'], 'rating': 8.4},
    {'id': 2, 'title': 'Interstellar', 'overview': 'Explorers travel through a wormhole.',
     'poster_ref': '/interstellar.jpg', 'genres': ['Adventure', 'Drama', 'Science Fiction'], 'rating': 8.6},
    {'id': 3, 'title': 'The Dark Knight', 'overview': 'Batman faces the Joker.',
     'poster_ref': '/dark_knight.jpg', 'genres': ['Drama', 'Action', 'Crime', 'Thriller'], 'rating': 8.5},
    {'id': 4, 'title': 'The Notebook', 'overview': 'A summer romance remembered.',
     'poster_ref': '/notebook.jpg', 'genres': ['Romance', 'Drama'], 'rating': 7.9},
    {'id': 5, 'title': 'Superbad', 'overview': 'Two friends try to enjoy their last weeks of school.',
     'poster_ref': '/superbad.jpg', 'genres': ['Comedy'], 'rating': 7.2},
    {'id': 6, 'title': 'Crazy, Stupid, Love.', 'overview': 'A newly single father learns to date.',
     'poster_ref': '', 'genres': ['Comedy', 'Drama', 'Romance'], 'rating': 7.0},
]


@pytest.fixture
def sample_records():
    """Raw catalog records as produced by the loader."""
    return [dict(record) for record in SAMPLE_RECORDS]


@pytest.fixture
def sample_catalog(sample_records):
    """Small vectorized catalog."""
    return Catalog.from_records(sample_records)
