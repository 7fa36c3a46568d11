from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from qdrant_client import AsyncQdrantClient

from citeflow.api.routes import ping, search
from citeflow.core.config import get_settings
from citeflow.core.logging import configure_logging, init_tracer, shutdown_tracer
from citeflow.dependencies import build_pipeline, build_registry
from citeflow.generation import build_client


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - executed by framework
    settings = get_settings()
    logger = configure_logging(settings)
    tracer_provider = init_tracer(settings)

    http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    qdrant_client = AsyncQdrantClient(
        host=settings.qdrant_host,
        port=settings.qdrant_port,
        api_key=settings.qdrant_api_key,
    )
    llm_client = build_client(settings.llm_provider, settings.llm_api_key, base_url=settings.llm_base_url)

    app.state.logger = logger
    app.state.tracer_provider = tracer_provider
    app.state.registry = build_registry(settings, http_client=http_client, qdrant_client=qdrant_client)
    app.state.pipeline = build_pipeline(settings, llm_client=llm_client)
    logger.info("Serving corpora: %s", ", ".join(app.state.registry.corpora))
    try:
        yield
    finally:
        await http_client.aclose()
        await qdrant_client.close()
        await llm_client.close()
        shutdown_tracer(tracer_provider)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.include_router(ping.router)
    app.include_router(search.router)
    return app


app = create_app()
