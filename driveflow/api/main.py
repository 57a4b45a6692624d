"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from driveflow.api.middleware import RequestIDMiddleware, MetricsMiddleware
from driveflow.api.v1 import bookings, catalog, customers, extensions, fleet, site
from driveflow.infrastructure.observability.logging import setup_logging
from driveflow.config import settings

setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Driveflow Booking Service",
        description="Trip extensions, customer CRM and back-office data for the rental platform",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Order matters: last added = first executed
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(extensions.router, prefix="/v1", tags=["extensions"])
    app.include_router(bookings.router, prefix="/v1/admin", tags=["bookings"])
    app.include_router(customers.router, prefix="/v1/admin", tags=["customers"])
    app.include_router(fleet.router, prefix="/v1/admin", tags=["fleet"])
    app.include_router(catalog.router, prefix="/v1/admin", tags=["catalog"])
    app.include_router(site.router, prefix="/v1/admin", tags=["site"])

    return app


app = create_app()
