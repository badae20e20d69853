"""
DocPilot API

Guided legal document generation with reviewable, section-scoped edits.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docpilot import __version__
from docpilot.config import Settings
from docpilot.engine import TemplateRegistry
from docpilot.logging_config import configure_logging
from docpilot.storage import DocumentStore, create_store

from api.routes import documents, interviews, templates
from api.workspace import Workspace, get_workspace, set_workspace


logger = logging.getLogger("docpilot.api")


def create_app(settings: Optional[Settings] = None, store: Optional[DocumentStore] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        settings: Defaults to Settings.from_env()
        store: Defaults to a file store under DP_STORE_DIR, or in-memory
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load templates and open the document store on startup."""
        configure_logging(settings.log_level)
        registry = TemplateRegistry.default(extra_dir=settings.templates_dir)
        workspace = Workspace(
            settings=settings,
            registry=registry,
            store=store if store is not None else create_store(settings.store_dir),
        )
        set_workspace(workspace)
        logger.info(
            "DocPilot API ready: %d templates (%s)",
            len(registry.list_types()), ", ".join(t.value for t in registry.list_types()),
        )
        yield
        logger.info("Shutting down")

    app = FastAPI(
        title="DocPilot API",
        description="""
**Guided legal document generation for app developers.**

DocPilot interviews you about your app, compiles a privacy policy, terms of
service or FAQ from your answers, and lets you refine it by asking for
changes in plain language. Every change is proposed as a diff you apply or
dismiss.

## Quick Start

1. `GET /templates` - See available documents
2. `POST /interviews` - Start an interview
3. `POST /interviews/{id}/answers` and `/advance` - Answer each step
4. `POST /documents/{type}/propose` - Ask for changes
5. `POST /documents/{type}/apply` - Accept the proposed diff

Generated documents are not legal advice.
        """,
        version=__version__,
        docs_url="/docs" if settings.docs_enabled else None,
        redoc_url="/redoc" if settings.docs_enabled else None,
        openapi_url="/openapi.json" if settings.docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:3001"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(templates.router)
    app.include_router(interviews.router)
    app.include_router(documents.router)

    @app.get("/health", tags=["Health"])
    async def health():
        """Health check endpoint."""
        workspace = get_workspace()
        return {
            "healthy": True,
            "version": __version__,
            "templates_loaded": len(workspace.registry.list_types()),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
