# bibliography/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .catalog import catalog_router
from .catalog.store import load_manifest
from .config import Settings, configure_logging, get_settings
from .quiz import quiz_router
from .quiz.bank import load_question_bank
from .quiz.sink import SqlSubmissionSink, SubmissionSink

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, sink: Optional[SubmissionSink] = None) -> FastAPI:
    """Build the API. ``sink`` replaces the SQL submission sink when given."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        # Snapshots are loaded once; nothing mutates them while serving.
        app.state.catalog = load_manifest(settings.manifest_file)
        app.state.quiz_bank = load_question_bank(settings.quiz_bank_file)

        owned_sink: Optional[SqlSubmissionSink] = None
        if sink is None:
            owned_sink = SqlSubmissionSink(settings.database_url)
            try:
                owned_sink.create_tables()
            except Exception:
                logger.exception("Could not prepare the quiz_submissions table")
            app.state.submission_sink = owned_sink
        else:
            app.state.submission_sink = sink
        try:
            yield
        finally:
            if owned_sink is not None:
                owned_sink.dispose()

    app = FastAPI(
        title="Bibliography",
        description=(
            "Catalogue of downloadable documents with cover art, plus a short "
            "trivia quiz whose results are logged for statistics."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def health_check():
        return {"status": "ok", "books": len(getattr(app.state, "catalog", ()) or ())}

    app.include_router(catalog_router)
    app.include_router(quiz_router)
    return app


app = create_app()
