"""Main application entrypoint for the image metadata service."""

import os

from fastapi import FastAPI

from imagemeta.api.v1 import routes_health
from imagemeta.api.v1.routes_image_meta import router as image_meta_router
from imagemeta.core.config import settings
from imagemeta.core.logging import setup_logging
from imagemeta.core.middleware import HTTPErrorLoggingMiddleware


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    # Initialize logging first
    setup_logging()

    app = FastAPI(
        title=settings.SERVICE_NAME,
        description="Computes shape and orientation metadata for images in Cloud Storage",
        version=settings.SERVICE_VERSION,
    )

    app.add_middleware(HTTPErrorLoggingMiddleware)

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(image_meta_router, tags=["image-meta"])

    return app


# Export app instance for ASGI servers
app = create_app()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8080"))
    uvicorn.run(app, host="0.0.0.0", port=port)
