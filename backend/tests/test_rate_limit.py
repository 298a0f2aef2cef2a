"""
Tests for the rate limiting middleware.

Validates:
1. Model-backed routes get the stricter per-minute limit
2. Other routes share the general limit; health checks are never limited
3. Limited requests get a 429 JSON body instead of an unhandled error
"""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from fastapi import FastAPI
from fastapi.testclient import TestClient

from backend.middleware.rate_limit import RateLimitMiddleware


def _client(general=5, ai=2):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, requests_per_minute=general, ai_requests_per_minute=ai)

    @app.post("/api/generate")
    async def generate():
        return {"ok": True}

    @app.get("/api/providers")
    async def list_providers():
        return []

    @app.get("/api/health")
    async def health():
        return {"status": "healthy"}

    return TestClient(app)


class TestRateLimit:
    """Sliding one-minute windows per client."""

    def test_ai_limit(self):
        client = _client()
        assert client.post("/api/generate").status_code == 200
        assert client.post("/api/generate").status_code == 200
        resp = client.post("/api/generate")
        assert resp.status_code == 429
        assert "AI request rate limit" in resp.json()["detail"]
        assert resp.headers["retry-after"] == "60"

    def test_general_limit(self):
        client = _client(general=3)
        codes = [client.get("/api/providers").status_code for _ in range(4)]
        assert codes == [200, 200, 200, 429]

    def test_ai_requests_count_toward_general(self):
        client = _client(general=2, ai=5)
        client.post("/api/generate")
        client.post("/api/generate")
        assert client.get("/api/providers").status_code == 429

    def test_health_never_limited(self):
        client = _client(general=1)
        for _ in range(5):
            assert client.get("/api/health").status_code == 200

    def test_clients_tracked_separately(self):
        client = _client(ai=1)
        assert client.post("/api/generate", headers={"x-forwarded-for": "10.0.0.1"}).status_code == 200
        assert client.post("/api/generate", headers={"x-forwarded-for": "10.0.0.1"}).status_code == 429
        assert client.post("/api/generate", headers={"x-forwarded-for": "10.0.0.2"}).status_code == 200
