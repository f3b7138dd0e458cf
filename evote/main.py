# main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from evote.config import Settings, load_settings
from evote.database import AppContext
from evote.errors import InternalFailure, VotingError
from evote.routes.candidate_routes import router as candidate_router
from evote.routes.user_routes import router as user_router

logger = logging.getLogger(__name__)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": code, "message": message},
    )


async def voting_error_handler(request: Request, exc: VotingError):
    return _error_response(exc.status_code, exc.code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid input"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", message)
    return _error_response(400, "validation_error", message)


async def store_error_handler(request: Request, exc: PyMongoError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    failure = InternalFailure()
    return _error_response(failure.status_code, failure.code, failure.message)


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Server error on {request.method} {request.url.path}")
    failure = InternalFailure()
    return _error_response(failure.status_code, failure.code, failure.message)


@asynccontextmanager
async def lifespan(app: FastAPI):
    owns_context = getattr(app.state, "context", None) is None
    if owns_context:
        app.state.context = AppContext(app.state.settings)
    yield
    if owns_context:
        app.state.context.close()
        app.state.context = None


def create_app(settings: Optional[Settings] = None, context: Optional[AppContext] = None) -> FastAPI:
    """Build the API. Pass ``context`` to reuse an existing store handle."""
    if settings is None:
        settings = context.settings if context is not None else load_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="eVote - Online Voting API", lifespan=lifespan)
    app.state.settings = settings
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(VotingError, voting_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(PyMongoError, store_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.include_router(user_router)
    app.include_router(candidate_router)

    @app.get("/api/health", tags=["Health"])
    def health_check():
        return {"ok": True, "ts": datetime.now(timezone.utc).isoformat()}

    return app


app = create_app()
