"""Tests for the HTTP service."""

import json

import pytest
from fastapi.testclient import TestClient

from cinematch.service import api
from cinematch.service.api import app, install_catalog
from cinematch.service.config import config

client = TestClient(app)

@pytest.fixture(autouse=True)
def installed_catalog(sample_catalog):
    """Install the sample catalog for each test and clear it afterwards."""
    install_catalog(sample_catalog)
    yield sample_catalog
    api.state['engine'] = None

class TestCatalogEndpoints:
    """Test health, genre and movie listing endpoints."""

    def test_health(self, installed_catalog):
        response = client.get("/healthz")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["catalog_loaded"] is True
        assert data["movies"] == len(installed_catalog)
        assert data["dimensions"] == installed_catalog.dimensions

    def test_health_without_catalog(self):
        api.state['engine'] = None
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json()["catalog_loaded"] is False

    def test_startup_with_unreadable_catalog(self, tmp_path, monkeypatch):
        (tmp_path / config.CATALOG_FILE).write_text("")
        monkeypatch.setattr(config, "DATA_DIR", str(tmp_path))
        api.state['engine'] = None

        with TestClient(app) as started:
            response = started.get("/healthz")
            assert response.status_code == 200
            assert response.json()["catalog_loaded"] is False
            assert started.get("/genres").status_code == 503

    def test_genres(self, installed_catalog):
        response = client.get("/genres")
        assert response.status_code == 200
        assert response.json() == list(installed_catalog.genre_dimensions)

    def test_movies_search(self):
        response = client.get("/movies", params={"search": "the"})
        assert response.status_code == 200
        assert [movie["id"] for movie in response.json()] == [3, 4]

    def test_catalog_not_loaded(self):
        api.state['engine'] = None
        response = client.get("/genres")
        assert response.status_code == 503

    def test_metrics(self):
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "cinematch_requests_total" in response.text

class TestRecommendByTitle:
    """Test GET /recommend."""

    def test_recommend(self, installed_catalog):
        response = client.get("/recommend", params={"title": "Inception"})
        assert response.status_code == 200
        data = response.json()

        titles = [item["title"] for item in data["data"]]
        assert "Inception" not in titles
        assert titles[0] == "Interstellar"
        assert data["meta"]["algorithm"] == "COSINE"
        assert data["meta"]["total_results"] == len(titles)
        assert len(data["meta"]["target_vector"]) == installed_catalog.dimensions

        scores = [item["score"] for item in data["data"]]
        assert scores == sorted(scores, reverse=True)
        first = data["data"][0]
        assert first["similarity_score"] == f"{first['score']:.4f}"

    def test_metric_and_limit(self):
        response = client.get("/recommend", params={"title": "inception", "metric": "Manhattan", "limit": 2})
        assert response.status_code == 200
        data = response.json()
        assert len(data["data"]) == 2
        assert data["meta"]["algorithm"] == "MANHATTAN"

    def test_not_found(self):
        response = client.get("/recommend", params={"title": "Inceptoin"})
        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["error"] == "MOVIE_NOT_FOUND"
        assert "Inception" in detail["suggestions"]

    def test_unsupported_metric(self):
        response = client.get("/recommend", params={"title": "Inception", "metric": "jaccard"})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "UNSUPPORTED_METRIC"

    def test_limit_out_of_range(self):
        response = client.get("/recommend", params={"title": "Inception", "limit": 500})
        assert response.status_code == 422

class TestRecommendByMood:
    """Test GET /recommend/mood."""

    def test_mood(self):
        weights = json.dumps({"Comedy": 10, "Romance": 2})
        response = client.get("/recommend/mood", params={"weights": weights})
        assert response.status_code == 200
        data = response.json()

        assert data["meta"]["query"] == {"Comedy": 10.0, "Romance": 2.0}
        assert data["meta"]["target_vector"][-1] == pytest.approx(0.8)
        assert len(data["data"]) == 6

    def test_genre_names_are_stripped(self, installed_catalog):
        weights = json.dumps({" Drama ": 1})
        response = client.get("/recommend/mood", params={"weights": weights})
        assert response.status_code == 200
        data = response.json()

        assert data["meta"]["query"] == {"Drama": 1.0}
        drama = installed_catalog.genre_dimensions.index("Drama")
        assert data["meta"]["target_vector"][drama] == pytest.approx(1.0)

    def test_invalid_json(self):
        response = client.get("/recommend/mood", params={"weights": "{Comedy: 10"})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "INVALID_JSON"

    @pytest.mark.parametrize("weights", ['{}', '[1, 2]', '{"Comedy": -1}', '{"Comedy": "lots"}'])
    def test_invalid_weights(self, weights):
        response = client.get("/recommend/mood", params={"weights": weights})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "INVALID_INPUT"

class TestRecommendByTaste:
    """Test POST /recommend/taste."""

    def test_taste(self):
        response = client.post("/recommend/taste", json={"movie_ids": [1, 2], "metric": "euclidean"})
        assert response.status_code == 200
        data = response.json()

        ids = [item["id"] for item in data["data"]]
        assert 1 not in ids and 2 not in ids
        assert data["meta"]["query_count"] == 2
        assert "Centroid" in data["meta"]["algorithm"]

    def test_unknown_ids(self):
        response = client.post("/recommend/taste", json={"movie_ids": [404, 405]})
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "INVALID_INPUT"

    def test_empty_ids(self):
        response = client.post("/recommend/taste", json={"movie_ids": []})
        assert response.status_code == 422

class TestRecommendByFusion:
    """Test POST /recommend/fusion."""

    def test_fusion(self):
        response = client.post("/recommend/fusion", json={
            "title_a": "Superbad", "title_b": "The Notebook", "ratio": 0.5
        })
        assert response.status_code == 200
        data = response.json()

        titles = [item["title"] for item in data["data"]]
        assert titles[0] == "Crazy, Stupid, Love."
        assert "Superbad" not in titles and "The Notebook" not in titles
        assert data["meta"]["query"]["ratio"] == "50% : 50%"

    def test_missing_title(self):
        response = client.post("/recommend/fusion", json={
            "title_a": "Superbad", "title_b": "Nope", "ratio": 0.5
        })
        assert response.status_code == 404

    def test_ratio_validated(self):
        response = client.post("/recommend/fusion", json={
            "title_a": "Superbad", "title_b": "The Notebook", "ratio": 2
        })
        assert response.status_code == 422
