# main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import LOG_LEVEL
from app.core.db import init_models
from app.routers import activity_router, announcements_router, catalog_router, pricing_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Bookstore Catalog API",
    description="FastAPI backend for the bookstore catalog, discounts and announcements",
    version="0.1.0"
)
# CORS setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # adjust for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint
@app.get("/", tags=["Health"])
async def health_check():
    return {"status": "ok", "message": "Catalog is running"}

# Register routers
app.include_router(catalog_router)
app.include_router(pricing_router)
app.include_router(announcements_router)
app.include_router(activity_router)


@app.on_event("startup")
async def on_startup():
    await init_models()
    logger.info("Catalog tables ready")
