"""FastAPI app serving every route locally.

Requests are translated into API Gateway proxy events so the exact same
handlers run here and in the serverless deployment.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Request, Response

from brandboffin import __version__, config
from brandboffin.adapter import ApiHandler

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

ROUTE_PATHS = {
    "check_domain": "/api/domains/check",
    "check_domains": "/api/domains/check-batch",
    "domain_suggestions": "/api/domains/suggestions",
    "tld_prices": "/api/tlds/prices",
    "brand_names": "/api/brands/suggest",
}


async def request_to_event(request: Request) -> Dict[str, Any]:
    body = await request.body()
    return {
        "httpMethod": request.method,
        "path": request.url.path,
        "headers": dict(request.headers),
        "queryStringParameters": dict(request.query_params) or None,
        "pathParameters": dict(request.path_params) or None,
        "body": body.decode("utf-8", errors="replace") if body else None,
        "isBase64Encoded": False,
    }


def create_app(routes: Optional[Dict[str, ApiHandler]] = None) -> FastAPI:
    """Build the app; without `routes` the process-wide handlers are used."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Injected routes own their clients
        if routes is None:
            from brandboffin.lambdas import close_clients

            await close_clients()

    app = FastAPI(
        title="BrandBoffin API",
        description="Brand name generation, domain availability, suggestions and TLD pricing",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    def resolve(name: str) -> ApiHandler:
        if routes is not None:
            return routes[name]
        from brandboffin.lambdas import get_routes

        return get_routes()[name]

    def make_endpoint(name: str) -> Callable:
        async def endpoint(request: Request) -> Response:
            result = await resolve(name)(await request_to_event(request))
            return Response(
                content=result["body"],
                status_code=result["statusCode"],
                headers=result["headers"],
            )

        endpoint.__name__ = name
        return endpoint

    for name, path in ROUTE_PATHS.items():
        app.add_api_route(path, make_endpoint(name), methods=ALL_METHODS)

    @app.get("/api/health")
    async def health_check():
        """API status and which upstreams are configured."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc),
            "version": __version__,
            "model_provider": config.MODEL_PROVIDER,
            "model": config.MODEL_ID,
            "brand_output_format": config.BRAND_OUTPUT_FORMAT,
            "model_key_configured": bool(config.ANTHROPIC_API_KEY or config.MODEL_SECRET_NAME),
            "registry_region": config.REGISTRY_REGION,
            "routes": ROUTE_PATHS,
        }

    return app


app = create_app()
