"""HTTP API over the aggregation service.

`create_app` builds the FastAPI application. The store handle is opened in
the lifespan hook and closed on shutdown unless the caller injected its own
store (tests, the dashboard), in which case the caller owns it.

Errors are caught at the route boundary, logged, and answered with a short
plain-text body; internal details never reach the client.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, TypeVar

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from roxiler_stats import __version__
from roxiler_stats.aggregate.service import AggregationService
from roxiler_stats.config import Settings, get_settings
from roxiler_stats.errors import InvalidMonth, InvalidRequest, SeedSourceUnavailable, StoreError
from roxiler_stats.ingest.load_seed import initialize_from_source
from roxiler_stats.models import CategoryCount, CombinedReport, PriceRangeCount, Statistics, TransactionPage
from roxiler_stats.store import build_store
from roxiler_stats.store.base import TransactionStore

log = logging.getLogger(__name__)

T = TypeVar("T")

WELCOME_TEXT = "Welcome to Roxiler API!"
MONTH_REQUIRED = "Month is required"


def _bind(app: FastAPI, settings: Settings, store: TransactionStore) -> None:
    app.state.settings = settings
    app.state.store = store
    app.state.service = AggregationService(store)


def get_service(request: Request) -> AggregationService:
    return request.app.state.service


def _month_report(month: str | None, build: Callable[[str], T], failure: str) -> T:
    if month is None or not month.strip():
        raise HTTPException(status_code=400, detail=MONTH_REQUIRED)
    try:
        return build(month)
    except InvalidMonth:
        log.info("Rejected month=%r", month)
        raise HTTPException(status_code=400, detail="Invalid month")
    except InvalidRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        log.exception("%s (month=%r): %s", failure, month, exc)
        raise HTTPException(status_code=500, detail=failure)


def create_app(
    settings: Settings | None = None,
    store: TransactionStore | None = None,
) -> FastAPI:
    """Build the API application.

    Args:
        settings: Service settings; read from the environment when omitted.
        store: Pre-built store. When omitted, one is built from `settings`
            at startup and closed at shutdown.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned: TransactionStore | None = None
        if getattr(app.state, "store", None) is None:
            owned = build_store(settings)
            _bind(app, settings, owned)
        try:
            yield
        finally:
            if owned is not None:
                owned.close()
                app.state.store = None
                log.info("Store closed")

    app = FastAPI(title="Roxiler Stats API", version=__version__, lifespan=lifespan)
    app.state.store = None
    if store is not None:
        _bind(app, settings, store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request, call_next):
        log.info("Request: %s %s", request.method, request.url)
        try:
            response = await call_next(request)
            log.info("Response: %s", response.status_code)
            return response
        except Exception as e:
            log.error("Request failed: %s", e)
            raise

    @app.exception_handler(StarletteHTTPException)
    async def plain_text_http_error(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def plain_text_validation_error(request: Request, exc: RequestValidationError) -> PlainTextResponse:
        log.info("Rejected parameters on %s: %s", request.url.path, exc.errors())
        return PlainTextResponse("Invalid request parameters", status_code=400)

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return WELCOME_TEXT

    @app.get("/health")
    def health(request: Request) -> dict[str, str]:
        try:
            request.app.state.store.ping()
        except StoreError as exc:
            log.warning("Health check failed: %s", exc)
            return {"status": "degraded"}
        return {"status": "ok"}

    @app.get("/initialize", response_class=PlainTextResponse)
    def initialize(request: Request) -> str:
        try:
            inserted = initialize_from_source(request.app.state.store, request.app.state.settings)
        except SeedSourceUnavailable as exc:
            log.error(
                "Error initializing database: %s (status=%s, response=%r)",
                exc,
                exc.status_code,
                exc.response_body,
            )
            raise HTTPException(status_code=500, detail="Error initializing database")
        except Exception as exc:
            log.exception("Error initializing database: %s", exc)
            raise HTTPException(status_code=500, detail="Error initializing database")
        log.info("Database initialized with %d transactions", inserted)
        return "Database initialized with seed data"

    @app.get("/transactions", response_model=TransactionPage)
    def transactions(
        search: str | None = None,
        page: int = Query(1, ge=1),
        per_page: int = Query(10, ge=1, alias="perPage"),
        service: AggregationService = Depends(get_service),
    ) -> TransactionPage:
        try:
            return service.list_transactions(search=search, page=page, per_page=per_page)
        except InvalidRequest as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except Exception as exc:
            log.exception("Error fetching transactions: %s", exc)
            raise HTTPException(status_code=500, detail="Error fetching transactions")

    @app.get("/statistics", response_model=Statistics)
    def statistics(
        month: str | None = None,
        service: AggregationService = Depends(get_service),
    ) -> Statistics:
        return _month_report(month, service.compute_statistics, "Error fetching statistics")

    @app.get("/bar-chart", response_model=list[PriceRangeCount])
    def bar_chart(
        month: str | None = None,
        service: AggregationService = Depends(get_service),
    ) -> list[PriceRangeCount]:
        return _month_report(month, service.compute_histogram, "Error fetching bar chart data")

    @app.get("/pie-chart", response_model=list[CategoryCount])
    def pie_chart(
        month: str | None = None,
        service: AggregationService = Depends(get_service),
    ) -> list[CategoryCount]:
        return _month_report(month, service.compute_distribution, "Error fetching pie chart data")

    @app.get("/combined", response_model=CombinedReport)
    def combined(
        month: str | None = None,
        service: AggregationService = Depends(get_service),
    ) -> CombinedReport:
        return _month_report(month, service.compute_combined, "Error fetching combined data")

    return app
