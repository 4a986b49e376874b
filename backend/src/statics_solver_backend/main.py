from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from statics_solver_backend.api.routes import router as solver_router
from statics_solver_backend.services.logging_setup import setup_logging, teardown_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Handlers exist only while the server runs
    setup_logging()
    try:
        yield
    finally:
        teardown_logging()


def create_app() -> FastAPI:
    """Create and configure the FastAPI instance for the statics solver."""
    app = FastAPI(title="Statics Solver API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(solver_router, prefix="/api", tags=["solver"])

    @app.get("/health", tags=["health"])  # basit sağlık kontrolü
    async def health():
        """Return a minimal health payload for uptime checks."""
        return {"status": "ok"}

    return app


app = create_app()
