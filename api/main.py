# api/main.py
import logging
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from lending import __version__
from lending.config import settings, configure_logging
from lending.exceptions import LibraryError, NotFoundError, InvalidArgumentError, ConflictError
from lending.sa.database import get_database
from api.routes import books, patrons, borrowings

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

app = FastAPI(title="Library Lending API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(books.router, prefix=API_PREFIX)
app.include_router(patrons.router, prefix=API_PREFIX)
app.include_router(borrowings.router, prefix=API_PREFIX)


# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    configure_logging()
    get_database().init_db()


def _error_response(status_code: int, error: LibraryError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": error.message, "code": error.code})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(InvalidArgumentError)
async def invalid_argument_handler(request: Request, exc: InvalidArgumentError):
    return _error_response(status.HTTP_400_BAD_REQUEST, exc)


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return _error_response(status.HTTP_409_CONFLICT, exc)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error while handling %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected database error occurred", "code": "database_error"},
    )


@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.main:app", host=settings.api_host, port=settings.api_port, reload=True)
