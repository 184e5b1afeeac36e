"""
FastAPI application entry point.

Sets up the app, lifespan (DB connect/disconnect), CORS, logging, the action
error handler, and includes the page and API routers.
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from threads_app.api import communities, pages, threads, users
from threads_app.config import get_settings
from threads_app.database import close_mongo_connection, connect_to_mongo
from threads_app.errors import ActionError, http_status_for

# Configure logging - single place for log format and level
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to MongoDB at startup and disconnect at shutdown."""
    await connect_to_mongo()
    settings = get_settings()
    if not settings.supabase_jwt_secret and "your-project" in settings.supabase_url:
        logger.warning("Neither SUPABASE_JWT_SECRET nor SUPABASE_URL is set; every authenticated request will fail.")
    yield
    await close_mongo_connection()


async def action_error_handler(request: Request, exc: ActionError) -> JSONResponse:
    """Turn a failed action into a JSON error; status follows the root cause."""
    status_code = http_status_for(exc)
    if status_code >= 500:
        logger.exception("Action failed on %s %s", request.method, request.url.path, exc_info=exc)
    else:
        logger.info("Action rejected on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_application() -> FastAPI:
    """Factory for the FastAPI app. Keeps main.py clean and testable."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Post threads, reply, join communities, and follow reply activity.",
        version="1.0.0",
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ActionError, action_error_handler)

    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(threads.router, prefix="/api/threads", tags=["threads"])
    app.include_router(communities.router, prefix="/api/communities", tags=["communities"])
    app.include_router(pages.router, tags=["pages"])

    return app


app = create_application()
