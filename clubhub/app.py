"""
FastAPI application entry point for the club backend.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from clubhub.config import get_settings
from clubhub.dependencies import get_upload_storage
from clubhub.errors import BadRequest, ClubError, ServerError
from clubhub.routes import router
from clubhub.storage import LocalDiskStorage

logger = logging.getLogger(__name__)


async def club_error_handler(request: Request, exc: ClubError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = [
        ".".join(str(part) for part in err.get("loc", ())[1:])
        for err in exc.errors()
    ]
    fields = [f for f in fields if f]
    message = BadRequest.default_message
    if fields:
        message = f"Missing or invalid fields: {', '.join(fields)}"
    return JSONResponse(
        status_code=BadRequest.status_code,
        content={"message": message, "detail": jsonable_encoder(exc.errors())},
    )


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Store error on %s %s", request.method, request.url.path)
    error = ServerError()
    return JSONResponse(status_code=error.status_code, content={"message": error.message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": ServerError.default_message})


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Clubhub Backend", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ClubError, club_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/")
    def read_root():
        return {"message": "clubhub API is running"}

    app.include_router(router, prefix=settings.api_prefix)

    # Serve local uploads from the same directory the storage writes to.
    storage = get_upload_storage()
    if isinstance(storage, LocalDiskStorage):
        app.mount(
            storage.url_prefix,
            StaticFiles(directory=storage.upload_dir),
            name="uploads",
        )
    return app


app = create_app()
