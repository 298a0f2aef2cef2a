"""INFERA Backend: FastAPI application entry point."""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.routes import generation, providers
from backend.middleware.rate_limit import RateLimitMiddleware
from backend.providers.errors import ProviderError

load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    from backend.database import init_db
    init_db()

    from backend.providers.store import SQLProviderStore, seed_providers_from_env
    from backend.providers.registry import ProviderRegistry
    store = SQLProviderStore()
    seeded = await seed_providers_from_env(store)
    if seeded:
        logger.info("Seeded %d provider(s) from environment", seeded)
    registry = ProviderRegistry(store)
    app.state.registry = registry

    from backend.generation.assistant import CodeAssistant
    from backend.generation.builder import WebsiteBuilder
    from backend.generation.pipeline import GenerationPipeline
    from backend.generation.planner import WebsitePlanner
    app.state.pipeline = GenerationPipeline(WebsitePlanner(registry), WebsiteBuilder(registry))
    app.state.assistant = CodeAssistant(registry)
    yield


app = FastAPI(
    title="INFERA API",
    description="AI website generation with multi-provider fallback",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS: allow frontend origins
_frontend_url = os.getenv("FRONTEND_URL")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[_frontend_url] if _frontend_url else [],
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 60 req/min general, 10 req/min for routes that call a model
app.add_middleware(RateLimitMiddleware, requests_per_minute=60, ai_requests_per_minute=10)

app.include_router(generation.router, prefix="/api", tags=["Generation"])
app.include_router(providers.router, prefix="/api", tags=["Providers"])


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    logger.error("Provider error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "AI service temporarily unavailable"})


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "infera-backend"}
