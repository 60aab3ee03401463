"""Application factory for the FastAPI service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import Settings, get_settings
from .logging_handlers import DateStampedFileHandler, cleanup_old_logs
from .routers.discovery import SERVICE_NAME
from .routers.discovery import router as discovery_router
from .routers.tts import router as tts_router
from .routers.voice import router as voice_router
from .services.tts import ProviderRegistry, SynthesisOrchestrator
from .services.voice_session import VoiceConnectionManager

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configure_logging(settings: Settings) -> None:
    """Configure logging from LOG_LEVEL and the optional LOG_DIR."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT)

    handlers: list[logging.Handler] = []

    if settings.log_dir is not None:
        file_handler = DateStampedFileHandler(settings.log_dir, prefix="relay")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    # Always add console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True,  # Override any existing configuration
    )

    logging.getLogger("voice_relay").setLevel(log_level)
    logging.getLogger("uvicorn").setLevel(log_level)
    logging.getLogger("uvicorn.access").setLevel(log_level)
    logging.getLogger("uvicorn.error").setLevel(log_level)

    # Quiet down noisy HTTP client logs unless debugging
    if log_level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    if settings.log_dir is not None:
        cleanup_old_logs(
            settings.log_dir,
            settings.log_retention_hours,
            logging.getLogger("voice_relay.logging"),
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    # Load .env before settings so LOG_* values are visible to logging
    load_dotenv()
    settings = settings or get_settings()
    _configure_logging(settings)
    logger = logging.getLogger("voice_relay.app")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        http_client = httpx.AsyncClient(timeout=settings.tts_request_timeout)
        registry = ProviderRegistry(settings, http_client=http_client)
        app.state.provider_registry = registry
        app.state.synthesis_orchestrator = SynthesisOrchestrator(registry)
        app.state.voice_manager = VoiceConnectionManager()

        providers = registry.get_available_providers()
        logger.info(f"TTS providers available: {', '.join(providers)}")
        try:
            yield
        finally:
            await app.state.voice_manager.close_all()
            await http_client.aclose()
            logger.info("Closed TTS HTTP client")

    app = FastAPI(
        title="Voice Relay",
        version=__version__,
        description="Text-to-speech relay for desktop assistant clients.",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(tts_router)
    app.include_router(discovery_router)
    app.include_router(voice_router)

    @app.get("/health", tags=["health"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/discovery", tags=["health"])
    async def discovery() -> dict[str, object]:
        return {
            "name": SERVICE_NAME,
            "version": __version__,
            "capabilities": ["text-to-speech"],
            "protocols": ["websocket", "http"],
            "status": "available",
        }

    return app


__all__ = ["create_app"]
