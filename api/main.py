"""
FastAPI main application for the Bookshelf catalog API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.handlers import BookHandlers
from api.models import BookMutationResponse, ErrorResponse, HealthResponse, MessageResponse
from catalog.database import BookStore
from catalog.errors import CatalogError
from catalog.models import Book, BookQueryParams
from utilities.config import config
from utilities.logger import CatalogLogger, get_logger, setup_logging

API_VERSION = "1.0.0"

logger = get_logger(__name__)

# Process-wide store, opened in the lifespan
book_store: Optional[BookStore] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )
    logger.info("Starting Bookshelf API")

    global book_store
    store = BookStore(
        connection_url=config.get_mongodb_url(),
        database_name=config.mongodb_database,
        collection_name=config.mongodb_collection
    )
    try:
        await store.connect()
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        raise
    book_store = store

    yield

    logger.info("Shutting down Bookshelf API")
    await store.disconnect()
    book_store = None


app = FastAPI(
    title="Bookshelf API",
    description="""
    A REST API for managing a catalog of books.

    ## Features

    * **Listing**: filter by author, availability, genre and minimum rating
    * **Sorting**: by rating or year, ascending or descending
    * **Management**: create, update and delete books
    """,
    version=API_VERSION,
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT",
    },
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_book_handlers() -> BookHandlers:
    """Provide request handlers bound to the shared store."""
    if book_store is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database service not available"
        )
    return BookHandlers(book_store, CatalogLogger("api.handlers"))


# Exception handlers
@app.exception_handler(CatalogError)
async def catalog_exception_handler(request, exc: CatalogError):
    """Render catalog outcomes as error responses."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.message,
            error_code=exc.code,
            status_code=exc.status_code
        ).model_dump()
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=str(exc.detail),
            status_code=exc.status_code
        ).model_dump(),
        headers=exc.headers
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request, exc: RequestValidationError):
    """Reject request bodies that are not a JSON object."""
    logger.warning("Rejected malformed request body", path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            error="Request body must be a JSON object",
            error_code="InvalidPayload",
            detail="; ".join(str(error.get("msg")) for error in exc.errors()),
            status_code=status.HTTP_400_BAD_REQUEST
        ).model_dump()
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal server error",
            detail=str(exc) if config.debug else None,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        ).model_dump()
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    db_status = "unavailable"
    if book_store:
        health_info = await book_store.health_check()
        db_status = health_info.get("status", "unknown")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=API_VERSION,
        database_status=db_status
    )


@app.get("/books", response_model=List[Book], tags=["Books"])
async def list_books(
    author: Optional[str] = None,
    available: Optional[str] = None,
    genre: Optional[str] = None,
    min_rating: Optional[str] = Query(None, alias="minRating"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    order: str = "asc",
    handlers: BookHandlers = Depends(get_book_handlers)
):
    """
    List books with optional filters and sorting.

    - **author**: Exact author match
    - **available**: `true` or `false`
    - **genre**: Genre the book must list
    - **minRating**: Minimum rating (inclusive)
    - **sortBy**: Sort field (rating, year)
    - **order**: Sort order (asc, desc)
    """
    params = BookQueryParams(
        author=author,
        available=available,
        genre=genre,
        min_rating=min_rating,
        sort_by=sort_by,
        order=order
    )
    return await handlers.list_books(params)


@app.get("/books/{book_id}", response_model=Book, tags=["Books"])
async def get_book(book_id: str, handlers: BookHandlers = Depends(get_book_handlers)):
    """Get a single book by ID."""
    return await handlers.get_book(book_id)


@app.post(
    "/books",
    response_model=BookMutationResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Books"]
)
async def create_book(
    payload: Dict[str, Any] = Body(...),
    handlers: BookHandlers = Depends(get_book_handlers)
):
    """
    Create a book.

    - **title**, **author**: required
    - **year**: integer, 1800 or later
    - **rating**: number between 0 and 5
    - **genres**: list of strings
    """
    book = await handlers.create_book(payload)
    return BookMutationResponse(message="Book created successfully", book=book)


@app.put("/books/{book_id}", response_model=BookMutationResponse, tags=["Books"])
async def update_book(
    book_id: str,
    payload: Dict[str, Any] = Body(...),
    handlers: BookHandlers = Depends(get_book_handlers)
):
    """Update some fields of a book. The identifier cannot be changed."""
    book = await handlers.update_book(book_id, payload)
    return BookMutationResponse(message="Book updated successfully", book=book)


@app.delete("/books/{book_id}", response_model=MessageResponse, tags=["Books"])
async def delete_book(book_id: str, handlers: BookHandlers = Depends(get_book_handlers)):
    """Delete a book by ID."""
    return await handlers.delete_book(book_id)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
