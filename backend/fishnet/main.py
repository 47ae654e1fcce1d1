from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fishnet.api.routes import router as api_router
from fishnet.core.config import get_settings
from fishnet.core.logging import configure_logging

settings = get_settings()
configure_logging(settings.log_level)


def create_app() -> FastAPI:
    """Build the FishNet API with CORS and the /api/analyze routes mounted."""
    application = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        description=(
            "Fish photo analysis: species identification, disease risk and an "
            "estimated freshness score from two image classifiers."
        ),
    )

    # Origins come from FISHNET_CORS_ORIGINS; the default "*" suits local frontend development.
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Analysis endpoints live under /api/analyze/...
    application.include_router(api_router, prefix=settings.api_prefix)
    return application


app = create_app()


@app.get("/", tags=["health"])
async def health_check() -> dict:
    """Simple health-check endpoint used by the frontend and tests."""
    return {
        "status": "ok",
        "message": "FishNet backend is running.",
    }
