import os
import logging
import uvicorn
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth import TokenService
from auth_router import auth_router
from chat_router import chat_router
from config import Settings, get_settings
from database import build_engine, build_session_factory, create_database_tables
from errors import AppError
from responders import MockResponseGenerator, MockTranscriber, ResponseGenerator, Transcriber

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Process-wide collaborators, built once per app and read by the dependencies."""

    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    tokens: TokenService
    response_generator: ResponseGenerator
    transcriber: Transcriber


def build_context(
    settings: Settings,
    response_generator: Optional[ResponseGenerator] = None,
    transcriber: Optional[Transcriber] = None,
) -> AppContext:
    engine = build_engine(settings.database_url)
    return AppContext(
        settings=settings,
        engine=engine,
        session_factory=build_session_factory(engine),
        tokens=TokenService(
            settings.secret_key,
            algorithm=settings.algorithm,
            expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
        ),
        response_generator=response_generator or MockResponseGenerator(),
        transcriber=transcriber or MockTranscriber(),
    )


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Every failure leaves the API as {"error": <message>}."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return error_response(exc.status_code, exc.message, exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info("Rejected request body on %s: %s", request.url.path, exc.errors())
        return error_response(400, "Invalid request body")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s: %s", request.url.path, exc)
        return error_response(500, "Internal server error")


def create_app(
    settings: Optional[Settings] = None,
    response_generator: Optional[ResponseGenerator] = None,
    transcriber: Optional[Transcriber] = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    context = build_context(settings, response_generator, transcriber)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Initializing database tables...")
        create_database_tables(context.engine)
        logger.info("Database ready")
        yield
        context.engine.dispose()

    app = FastAPI(title="TeenMe Chat API", lifespan=lifespan)
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/health")
    def check_health():
        """Simple health check endpoint."""
        return {"status": "ok"}

    app.include_router(auth_router)
    app.include_router(chat_router)

    # Mounted last so the API routes take precedence over files at "/".
    if settings.static_dir and os.path.isdir(settings.static_dir):
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
        logger.info("Serving static files from %s", settings.static_dir)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=get_settings().port)
