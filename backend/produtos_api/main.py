import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from produtos_api.config import get_settings
from produtos_api.database import init_db
from produtos_api.exceptions import register_exception_handlers
from produtos_api.routers.produtos import router as produtos_router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Static files directory for uploaded images
STATIC_DIR = Path(settings.static_dir)
(STATIC_DIR / settings.upload_subdir).mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    logger.info("Starting up... Initializing database")
    init_db()
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="Produtos API",
    description="Product catalog with image upload",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount static files for uploaded images
app.mount(settings.static_url, StaticFiles(directory=str(STATIC_DIR)), name="static")

register_exception_handlers(app)

# Include routers
app.include_router(produtos_router, prefix=settings.api_prefix)


@app.get("/")
def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": "Produtos API",
        "version": "1.0.0"
    }
