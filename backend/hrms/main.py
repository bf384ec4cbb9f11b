# This file bootstraps the FastAPI app: it builds the dispatch pipeline
# (route table + middleware registry), wires CORS, preflight handling and
# request logging, and forwards every API request to the dispatcher.
# Errors escaping business handlers are turned into the JSON envelope here.

import json
import logging
import os
from typing import Any, Callable, Iterable, Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from hrms.api.routes import build_routes
from hrms.core.config import settings
from hrms.core.db import Base, SessionLocal, engine
from hrms.core.errors import ApiError, ErrorCode
from hrms.core.logging import CATCH_ALL_PATH, RequestLoggingMiddleware
from hrms.crud.users import SqlIdentityStore
from hrms.dispatch.context import build_context
from hrms.dispatch.dispatcher import Dispatcher
from hrms.dispatch.registry import MiddlewareRegistry
from hrms.dispatch.responses import JSON_MEDIA_TYPE, ApiResponse
from hrms.dispatch.routes import RouteSpec, RouteTable, register_routes
from hrms.tenancy.authentication import AuthenticationMiddleware
from hrms.tenancy.constants import AUTH_MIDDLEWARE, RBAC_MIDDLEWARE, TENANT_MIDDLEWARE
from hrms.tenancy.identity import IdentityStore
from hrms.tenancy.middleware import TenantMiddleware
from hrms.tenancy.rbac import RBACMiddleware
from hrms.tenancy.sessions import SessionStore, build_session_store

logger = logging.getLogger(__name__)

DISPATCHED_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD"]
CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization", "X-Requested-With"]


def build_pipeline(
    *,
    session_factory: Callable[[], Session],
    session_store: SessionStore,
    identity_store: Optional[IdentityStore] = None,
    route_specs: Optional[Iterable[RouteSpec]] = None,
    global_middleware: Sequence[str] = (),
    extra_middleware: Optional[dict[str, Any]] = None,
) -> Dispatcher:
    registry = MiddlewareRegistry()
    registry.register(
        AUTH_MIDDLEWARE,
        AuthenticationMiddleware(session_store, identity_store or SqlIdentityStore(session_factory)),
    )
    registry.register(TENANT_MIDDLEWARE, TenantMiddleware())
    registry.register(RBAC_MIDDLEWARE, RBACMiddleware())
    for name, middleware in (extra_middleware or {}).items():
        registry.register(name, middleware)

    if route_specs is None:
        route_specs = build_routes(session_factory, session_store)
    table = register_routes(RouteTable(), route_specs)

    dispatcher = Dispatcher(table, registry, global_middleware=global_middleware)
    dispatcher.validate()
    return dispatcher


class PreflightMiddleware(BaseHTTPMiddleware):
    """
    Answers every OPTIONS request with 200 JSON before CORS or the
    dispatcher see it, adding the CORS allow headers for permitted origins.
    """

    def __init__(
        self,
        app,
        *,
        allow_origins: Sequence[str] = ("*",),
        allow_credentials: bool = False,
        allow_methods: Sequence[str] = CORS_METHODS,
        allow_headers: Sequence[str] = CORS_HEADERS,
        max_age: int = 600,
    ) -> None:
        super().__init__(app)
        self.allow_origins = list(allow_origins)
        self.allow_credentials = allow_credentials
        self.allow_methods = ", ".join(allow_methods)
        self.allow_headers = ", ".join(allow_headers)
        self.max_age = str(max_age)

    def _allow_origin(self, origin: Optional[str]) -> Optional[str]:
        if not origin:
            return None
        if "*" in self.allow_origins:
            # A wildcard cannot be combined with credentials.
            return origin if self.allow_credentials else "*"
        return origin if origin in self.allow_origins else None

    async def dispatch(self, request: Request, call_next):
        if request.method != "OPTIONS":
            return await call_next(request)
        response = Response(status_code=200, media_type=JSON_MEDIA_TYPE)
        allow_origin = self._allow_origin(request.headers.get("origin"))
        if allow_origin is not None:
            response.headers["Access-Control-Allow-Origin"] = allow_origin
            response.headers["Access-Control-Allow-Methods"] = self.allow_methods
            response.headers["Access-Control-Allow-Headers"] = self.allow_headers
            response.headers["Access-Control-Max-Age"] = self.max_age
            if self.allow_credentials:
                response.headers["Access-Control-Allow-Credentials"] = "true"
            if allow_origin != "*":
                response.headers["Vary"] = "Origin"
        return response


async def _read_json_body(request: Request) -> Any:
    if "application/json" not in request.headers.get("content-type", ""):
        return {}
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        return {}


def _apply_session_cookie(http_response: Response, response: ApiResponse) -> None:
    if response.session_id:
        http_response.set_cookie(
            settings.SESSION_COOKIE_NAME,
            response.session_id,
            max_age=settings.SESSION_TTL_SECONDS,
            path="/",
            httponly=True,
            samesite="lax",
            secure=settings.SESSION_COOKIE_SECURE,
        )
    elif response.clear_session:
        http_response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")


def create_app(
    *,
    session_factory: Optional[Callable[[], Session]] = None,
    session_store: Optional[SessionStore] = None,
    identity_store: Optional[IdentityStore] = None,
    route_specs: Optional[Iterable[RouteSpec]] = None,
    global_middleware: Sequence[str] = (),
    extra_middleware: Optional[dict[str, Any]] = None,
) -> FastAPI:
    if session_factory is None:
        session_factory = SessionLocal
        # Create tables right away for the default engine so the app doesn't
        # hit a missing schema later.
        if os.getenv("SKIP_CREATE_ALL") != "1":
            Base.metadata.create_all(bind=engine)
    if session_store is None:
        session_store = build_session_store(session_factory)

    dispatcher = build_pipeline(
        session_factory=session_factory,
        session_store=session_store,
        identity_store=identity_store,
        route_specs=route_specs,
        global_middleware=global_middleware,
        extra_middleware=extra_middleware,
    )

    app = FastAPI(title="HRMS API", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.dispatcher = dispatcher
    app.state.session_store = session_store

    @app.exception_handler(ApiError)
    def handle_api_error(_request, exc: ApiError):
        return ApiResponse.from_exception(exc).to_starlette()

    @app.exception_handler(StarletteHTTPException)
    def handle_http_error(_request, exc: StarletteHTTPException):
        # Routing misses (unsupported methods included) use the dispatcher's 404.
        if exc.status_code in (404, 405):
            return ApiResponse.not_found("Endpoint not found").to_starlette()
        code = ErrorCode.SERVER_ERROR if exc.status_code >= 500 else ErrorCode.BAD_REQUEST
        return ApiResponse.error(exc.status_code, code, str(exc.detail)).to_starlette()

    @app.exception_handler(SQLAlchemyError)
    def handle_database_error(request, exc: SQLAlchemyError):
        logger.error(
            "request.database_error",
            exc_info=exc,
            extra={"request_id": getattr(request.state, "request_id", None)},
        )
        return ApiResponse.error(500, ErrorCode.SERVER_ERROR, "A database error occurred").to_starlette()

    @app.exception_handler(Exception)
    def handle_unexpected_error(request, exc: Exception):
        logger.error(
            "request.unhandled_error",
            exc_info=exc,
            extra={"request_id": getattr(request.state, "request_id", None)},
        )
        return ApiResponse.server_error().to_starlette()

    # /ping health check and /metrics for Prometheus scraping. Registered
    # before the catch-all so they never go through the dispatcher.
    @app.get("/ping")
    def ping():
        return {"message": "pong"}

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.api_route(CATCH_ALL_PATH, methods=DISPATCHED_METHODS, include_in_schema=False)
    async def dispatch_request(request: Request) -> Response:
        ctx = build_context(
            request.method,
            request.url.path,
            query=dict(request.query_params),
            body=await _read_json_body(request),
            headers=dict(request.headers),
            session_id=request.cookies.get(settings.SESSION_COOKIE_NAME),
            request_id=getattr(request.state, "request_id", None),
        )
        try:
            response = await run_in_threadpool(dispatcher.dispatch, ctx)
        finally:
            request.state.route = ctx.route_pattern
            request.state.company_id = ctx.company_id
            request.state.user_id = ctx.user_id()
        http_response = response.to_starlette()
        _apply_session_cookie(http_response, response)
        return http_response

    # Middleware added last runs first: request logging -> preflight -> CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
        max_age=settings.CORS_MAX_AGE,
    )
    app.add_middleware(
        PreflightMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        max_age=settings.CORS_MAX_AGE,
    )
    app.add_middleware(RequestLoggingMiddleware)
    return app


app = create_app()
