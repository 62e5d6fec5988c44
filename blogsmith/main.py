from blogsmith.core.logging import init_logging
init_logging()

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from blogsmith.core.config import settings
from blogsmith.core.database import engine, Base
from blogsmith.api.errors import register_exception_handlers
from blogsmith.api.routes import auth, generate, posts

# Register models on Base.metadata before create_all runs
from blogsmith.models import post, user  # noqa: F401

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = "your-secret-key-change-in-production"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage app lifecycle events.

    Startup: check configuration and create tables if they don't exist
    (in production, prefer migrations over create_all)
    """
    if settings.ENVIRONMENT == "production" and settings.SECRET_KEY == DEFAULT_SECRET_KEY:
        logger.warning("SECRET_KEY is the default placeholder; tokens can be forged")
    Base.metadata.create_all(bind=engine)
    logger.info(f"Blogsmith API started in {settings.ENVIRONMENT} mode")
    yield


app = FastAPI(
    title="Blogsmith API",
    description="AI-assisted blog content generator",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware - allows the web client to make requests to backend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),  # List of allowed frontend URLs
    allow_credentials=True,  # Allow auth headers
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(posts.router)
app.include_router(generate.router)


@app.get("/")
async def root():
    """Root endpoint - API information"""
    return {"message": "Blogsmith API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Health check endpoint - used by monitoring/deployment tools"""
    return {"status": "ok"}
