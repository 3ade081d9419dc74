# productapi/main.py
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from productapi.config import Settings, get_settings
from productapi.database import ProductStore
from productapi.handlers import VERSION, ProductHandlers
from productapi.log import configure_logging
from productapi.pipeline import Pipeline, PipelineRequest, default_stages

logger = logging.getLogger(__name__)


def build_pipeline(store: ProductStore, settings: Settings) -> Pipeline:
    pipeline = Pipeline(default_stages(settings.api_key), debug=settings.debug)
    ProductHandlers(store).register(pipeline)
    return pipeline


def create_app(settings: Optional[Settings] = None, store: Optional[ProductStore] = None) -> FastAPI:
    """
    Build the HTTP app around one store and one pipeline.

    FastAPI only parses the request and relays the pipeline's response;
    routing, auth, validation and error handling all live in the pipeline.
    """
    settings = settings or get_settings()
    store = store if store is not None else ProductStore()

    configure_logging(settings.log_level)
    if settings.using_default_api_key:
        logger.warning("Using the built-in default API key; set PRODUCTAPI_API_KEY in production")

    app = FastAPI(title="Product Catalog API (in-memory)", version=VERSION)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.store = store
    app.state.pipeline = build_pipeline(store, settings)

    @app.api_route("/{path:path}", methods=["GET", "HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
                   include_in_schema=False)
    async def relay(request: Request):
        pipeline_request = PipelineRequest(
            method=request.method,
            path=request.url.path,
            query=dict(request.query_params),
            headers=dict(request.headers),
            body=await request.body(),
        )
        response = await request.app.state.pipeline.handle(pipeline_request)
        return Response(content=response.content, status_code=response.status_code, media_type="application/json")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "productapi.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
