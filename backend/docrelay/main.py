"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docrelay.config import Settings
from docrelay.exceptions import MissingField, MissingFile, RelayError
from docrelay.logger import logger, setup_logging
from docrelay.routers import frontend, translation
from docrelay.services.job_poller import JobPoller
from docrelay.services.papago_client import PapagoDocumentClient
from docrelay.services.uploads import UploadReceiver


def _validation_message(exc: RequestValidationError) -> str:
    """Describe a rejected form the same way the upload receiver does."""
    fields = {str(error["loc"][-1]) for error in exc.errors() if error.get("loc")}
    if fields & {"source", "target"}:
        return MissingField().message
    if "file" in fields:
        return MissingFile().message
    return "Invalid request: " + "; ".join(error.get("msg", "") for error in exc.errors())


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the application.

    Settings are read from the environment when not given; missing
    credentials raise a validation error here, before the server starts.
    ``transport`` replaces the network layer of the remote client.
    """
    if settings is None:
        settings = Settings()

    setup_logging(settings.log_level, settings.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        # Startup
        logger.info("Starting application", api_base=settings.api_base)
        try:
            app.state.upload_receiver.ensure_directory()
            logger.info("Upload directory ready", path=str(settings.upload_dir))
        except OSError as e:
            logger.error("Failed to create upload directory", error=str(e))
            raise

        yield

        # Shutdown
        logger.info("Shutting down application")
        await app.state.papago_client.aclose()

    app = FastAPI(
        title="Document Translation Relay",
        description="Relays documents to a remote translation job API and streams the result back",
        version="1.0.0",
        lifespan=lifespan,
    )

    client = PapagoDocumentClient(settings, transport=transport)
    app.state.settings = settings
    app.state.papago_client = client
    app.state.upload_receiver = UploadReceiver(settings.upload_dir)
    app.state.job_poller = JobPoller(
        client,
        poll_interval=settings.poll_interval_seconds,
        deadline=settings.job_deadline_seconds,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _validation_message(exc)},
        )

    # Health check
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    # Include routers
    app.include_router(translation.router, prefix="/api")
    app.include_router(frontend.router)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = Settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )
