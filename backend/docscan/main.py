# backend/docscan/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import documents_router, pages_router, scans_router
from .config import settings
from .database import Database
from .errors import (
    ConfigurationError,
    DocScanError,
    InvariantViolation,
    NotFoundError,
    StorageIOError,
    ValidationError,
)
from .services import DocumentAssembler, ExportRenderer, ImagePipeline, StorageEngine
from .utils.logging import api_logger

ERROR_STATUS = {
    NotFoundError: 404,
    ValidationError: 400,
    InvariantViolation: 409,
    ConfigurationError: 400,
    StorageIOError: 500,
}


def create_app(database_url: str | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(database_url or settings.DATABASE_URL).open()
        storage = StorageEngine(database)
        app.state.database = database
        app.state.assembler = DocumentAssembler(storage, ImagePipeline())
        app.state.renderer = ExportRenderer(storage)
        try:
            yield
        finally:
            database.close()

    app = FastAPI(title="DocScan API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(scans_router)
    app.include_router(documents_router)
    app.include_router(pages_router)

    @app.exception_handler(DocScanError)
    async def docscan_error_handler(request: Request, exc: DocScanError):
        status_code = next(
            (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
            500
        )
        log = api_logger.error if status_code >= 500 else api_logger.warning
        log(f"{type(exc).__name__}: {exc.message}", extra={
            "path": request.url.path,
            "status_code": status_code,
            **exc.context
        })
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "error": type(exc).__name__}
        )

    @app.get("/")
    async def root():
        return {"message": "DocScan API is running"}

    return app


app = create_app()
