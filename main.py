"""
FastAPI Application Entry Point

Integrates:
  - LINE webhook handler (POST /callback)
  - Health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --host 0.0.0.0 --port 5000
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from agent.dispatcher import EventDispatcher
from config import Config, ConfigurationError
from transport.line.webhook import router as line_router

# Setup logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    config: Optional[Config] = None,
    dispatcher: Optional[EventDispatcher] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        config: Configuration (read from the environment at startup if omitted)
        dispatcher: Event dispatcher (built from config at startup if omitted)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan: startup and shutdown handlers.

        Invalid configuration raises here and aborts startup.
        """
        # Startup
        cfg = config or Config.from_env()
        try:
            cfg.validate()
        except ConfigurationError as e:
            logger.critical(f"Configuration error: {e}")
            raise

        app.state.config = cfg
        app.state.dispatcher = dispatcher or EventDispatcher(
            model_backend=cfg.create_llm_backend(),
            messaging=cfg.create_messaging_client(),
        )

        logger.info("=" * 60)
        logger.info("Gemini LINE bot starting up...")
        logger.info(f"LLM Backend: {cfg.llm_backend} ({cfg.gemini_model})")
        logger.info(f"Environment: {cfg.environment}")
        logger.info(f"http://localhost:{cfg.port}/")
        logger.info("=" * 60)

        yield

        # Shutdown
        logger.info("Gemini LINE bot shutting down...")

    app = FastAPI(
        title="Gemini LINE Bot",
        description="LINE webhook that answers with Google Gemini",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Middleware for logging
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests."""
        logger.debug(f"{request.method} {request.url.path}")
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            logger.error(f"Request error: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error"},
            )

    app.include_router(line_router)

    @app.get("/health/live")
    async def health_live():
        """Live health check (Kubernetes liveness probe)."""
        return {"status": "alive"}

    @app.get("/health/ready")
    async def health_ready(request: Request):
        """Readiness health check (Kubernetes readiness probe)."""
        try:
            request.app.state.config.validate()
            return {"status": "ready"}
        except (AttributeError, ConfigurationError) as e:
            return {"status": "not_ready", "reason": str(e)}

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Gemini LINE Bot",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "line_callback": "POST /callback",
                "health_live": "GET /health/live",
                "health_ready": "GET /health/ready",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT") or "5000")
    uvicorn.run(app, host="0.0.0.0", port=port)
