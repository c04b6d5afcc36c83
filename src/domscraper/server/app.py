"""
domscraper API - FastAPI application exposing the scrape and metadata handlers.

Routes:
    GET /api/scrape?url=&selector=&time=&deep=&complete=&collision=
    GET /api/meta?url=
    GET /health
"""

import logging
from contextlib import asynccontextmanager
from functools import partial

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import domscraper
from domscraper.browser import BrowserConfig, BrowserSession
from domscraper.config import DEFAULT_SELECTOR, DEFAULT_SETTLE_MS, Settings
from domscraper.dom import CollisionPolicy
from domscraper.exceptions import (
    BrowserError,
    ConversionError,
    InvalidRequestError,
    MetadataError,
)
from domscraper.metadata import MetadataFetcher, MetadataService, MetadataSource
from domscraper.models import ScrapeRequest
from domscraper.scrape import ScrapeService, SessionFactory
from domscraper.utils.url import decode_param, decode_selector, validate_url

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
    metadata_fetcher: MetadataSource | None = None,
) -> FastAPI:
    """
    Application factory.

    Args:
        settings: Runtime settings (defaults to the environment)
        session_factory: Builds one page driver per scrape (defaults to BrowserSession)
        metadata_fetcher: Metadata source (defaults to MetadataFetcher)
    """
    settings = settings or Settings.from_env()

    if session_factory is None:
        browser_config = BrowserConfig(
            cdp_url=settings.cdp_url,
            navigation_timeout=settings.navigation_timeout,
        )
        session_factory = partial(BrowserSession, config=browser_config)

    if metadata_fetcher is None:
        metadata_fetcher = MetadataFetcher(
            timeout=settings.metadata_timeout,
            user_agent=settings.user_agent,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        browser = settings.cdp_url or "launch"
        logger.info(f"domscraper v{domscraper.__version__} ready (browser: {browser})")
        yield

    app = FastAPI(title="domscraper", version=domscraper.__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.scrape_service = ScrapeService(
        session_factory, navigation_timeout=settings.navigation_timeout
    )
    app.state.metadata_service = MetadataService(metadata_fetcher)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)
    _register_routes(app)
    return app


def _error_payload(exc: Exception) -> dict:
    return {"error": {"type": exc.__class__.__name__, "message": str(exc)}}


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(BrowserError)
    async def browser_error_handler(request: Request, exc: BrowserError) -> JSONResponse:
        logger.error(f"Cannot scrape with browser: {exc}")
        return JSONResponse(status_code=400, content=_error_payload(exc))

    @app.exception_handler(ConversionError)
    async def conversion_error_handler(request: Request, exc: ConversionError) -> JSONResponse:
        logger.warning(f"Conversion failed: {exc}")
        return JSONResponse(status_code=400, content=_error_payload(exc))

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError) -> JSONResponse:
        return JSONResponse(status_code=400, content=_error_payload(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        return JSONResponse(
            status_code=400,
            content={"error": {"type": "InvalidRequestError", "message": message}},
        )

    @app.exception_handler(MetadataError)
    async def metadata_error_handler(request: Request, exc: MetadataError) -> JSONResponse:
        return JSONResponse(status_code=exc.status or 400, content=exc.to_dict())


def _register_routes(app: FastAPI) -> None:
    @app.get("/health")
    async def health():
        return {"status": "ok", "version": domscraper.__version__}

    @app.get("/api/scrape")
    async def scrape(
        request: Request,
        url: str = Query("", description="Page URL, percent-encoded"),
        selector: str = Query(DEFAULT_SELECTOR, description="CSS selectors, $ instead of #"),
        time: int = Query(DEFAULT_SETTLE_MS, ge=0, description="Settle delay in ms"),
        deep: bool = False,
        complete: bool = False,
        collision: CollisionPolicy = CollisionPolicy.OVERWRITE,
    ):
        """Scrape a rendered page and convert the selected elements."""
        scrape_request = ScrapeRequest(
            url=validate_url(decode_param(url)),
            selector=decode_selector(selector),
            settle_ms=time,
            deep=deep,
            complete=complete,
            collision=collision.value,
        )
        result = await request.app.state.scrape_service.scrape(scrape_request)
        return result.model_dump()

    @app.get("/api/meta")
    async def meta(request: Request, url: str = Query("", description="Page URL, percent-encoded")):
        """Fetch page metadata, falling back to http on an https gateway timeout."""
        page_url = validate_url(decode_param(url))
        return await request.app.state.metadata_service.fetch(page_url)
