"""FastAPI application exposing question answering and ingestion as a REST API."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel

from vector_qa.config import Settings, get_settings
from vector_qa.exceptions import VectorQAError
from vector_qa.factory import ServiceContainer
from vector_qa.ingestion.loader import load_directory
from vector_qa.ingestion.pipeline import IngestionReport

logger = logging.getLogger(__name__)


# ── Request / Response schemas ────────────────────────────────────────
class ReadRequest(BaseModel):
    """Incoming question from the user."""

    question: str


class ReadResponse(BaseModel):
    """Answer text, or ``None`` when nothing in the index matched."""

    data: str | None = None


class SetupRequest(BaseModel):
    """Directory of ``.txt`` documents to ingest (defaults to the configured one)."""

    directory: str | None = None


class SetupResponse(BaseModel):
    index_created: bool
    report: IngestionReport


# ── App factory ───────────────────────────────────────────────────────
def create_app(
    settings: Settings | None = None,
    services: ServiceContainer | None = None,
) -> FastAPI:
    """Build the API; tests pass a pre-wired :class:`ServiceContainer`."""
    settings = settings or (services.settings if services else get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logging.basicConfig(level=settings.log_level)
        app.state.services = services or ServiceContainer(settings)
        logger.info("Question-answering service started (index=%s)", settings.index_name)
        yield
        await app.state.services.shutdown()
        logger.info("Question-answering service stopped")

    app = FastAPI(
        title="Vector QA API",
        version="0.1.0",
        description="Answer questions from documents stored in a vector index.",
        lifespan=lifespan,
    )

    def get_services(request: Request) -> ServiceContainer:
        return request.app.state.services

    # ── Routes ────────────────────────────────────────────────────────
    @app.get("/health")
    async def health(services: ServiceContainer = Depends(get_services)) -> dict[str, str]:
        """Report whether the vector index backend is reachable."""
        if not await services.index.health_check():
            raise HTTPException(status_code=503, detail="Vector index is unreachable")
        return {"status": "ok"}

    @app.post("/read", response_model=ReadResponse)
    async def read(
        request: ReadRequest,
        services: ServiceContainer = Depends(get_services),
    ) -> ReadResponse:
        """Answer a question from the indexed documents."""
        try:
            result = await services.query.answer(request.question)
        except (VectorQAError, httpx.HTTPError) as exc:
            logger.exception("Failed to answer question")
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return ReadResponse(data=result.answer)

    @app.post("/setup", response_model=SetupResponse)
    async def setup(
        request: SetupRequest,
        services: ServiceContainer = Depends(get_services),
    ) -> SetupResponse:
        """Create the index if needed and ingest a directory of text files."""
        directory = request.directory or services.settings.documents_dir
        try:
            documents = await asyncio.to_thread(load_directory, directory)
        except FileNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

        try:
            created = await services.provision()
            report = await services.ingestion.ingest(services.settings.index_name, documents)
        except (VectorQAError, httpx.HTTPError) as exc:
            logger.exception("Failed to ingest %s", directory)
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return SetupResponse(index_created=created, report=report)

    return app
