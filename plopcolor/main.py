"""
PlopColor API application.

Run with ``uvicorn plopcolor.main:app``.
"""
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Environment must be loaded before config is imported
load_dotenv()

from plopcolor import __version__  # noqa: E402
from plopcolor.api.palette import router as palette_router  # noqa: E402
from plopcolor.config import config  # noqa: E402
from plopcolor.schemas import HealthResponse  # noqa: E402
from plopcolor.utils.logging import get_logger  # noqa: E402


def create_app() -> FastAPI:
    """Build the FastAPI app with CORS, health check and palette routes."""
    get_logger()

    app = FastAPI(
        title="PlopColor",
        description="Dominant color and palette extraction for dropped images",
        version=__version__,
    )

    origins = config.allowed_origins()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=False,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )

    @app.get("/healthz", response_model=HealthResponse)
    def health_check():
        """Service health check."""
        return HealthResponse(ok=True, version=__version__, service="plopcolor")

    app.include_router(palette_router)
    return app


app = create_app()
