# app.py
# FastAPI backend for the book review API
# - Reviews CRUD over flat JSON files (data/reviews.json)
# - Static API keys from data/users.json guard the mutating routes
# - Domain errors map to HTTP statuses in one place (see exception handlers below)

import logging
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import FRONT_ORIGIN, LOG_LEVEL, PORT
from errors import ReviewApiError

# --- Configure structlog + stdlib logging
logging.basicConfig(format="%(message)s", level=getattr(logging, LOG_LEVEL, logging.INFO),)
structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, LOG_LEVEL, logging.INFO)),processors=[structlog.processors.TimeStamper(fmt="iso"),structlog.processors.format_exc_info,structlog.processors.JSONRenderer(), ],)
logger = structlog.get_logger("app")

import stores  # noqa: E402
from routes.health import router as health_router  # noqa: E402
from routes.home import router as home_router  # noqa: E402
from routes.reviews import router as reviews_router  # noqa: E402


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Warm the users cache so the first authenticated request skips the disk read
    stores.FILE_STORE.ensure_data_dir()
    stores.USERS_CACHE.warm()
    logger.info("Book Review API ready", port=PORT, data_dir=str(stores.FILE_STORE.data_dir))
    yield


# ----------------------------
# FastAPI app
# ----------------------------

app = FastAPI(title="Book Review API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONT_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ----------------------------
# Error mapping
# ----------------------------

@app.exception_handler(ReviewApiError)
async def review_api_error_handler(request: Request, exc: ReviewApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected malformed request", path=request.url.path, errors=str(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "Request body must be a JSON object"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Details stay in the logs, never in the response
    logger.exception("Unhandled error", method=request.method, path=request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app.include_router(home_router)
app.include_router(health_router)
app.include_router(reviews_router)


def main() -> None:
    uvicorn.run(app, host="0.0.0.0", port=PORT)


if __name__ == "__main__":
    main()
