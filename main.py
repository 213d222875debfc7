import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import Base, engine, settings
from app.core.exceptions import register_exception_handlers
from app.api.routers import auth, wellness, watch, ai

# =====================================================================
# LOGGING
# =====================================================================

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# =====================================================================
# CREATE APP
# =====================================================================

app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    description="Student wellness tracking API",
    version="1.0.0",
)

# =====================================================================
# CORS MIDDLEWARE
# =====================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)
logger.info(f"CORS allowed origins: {settings.CORS_ORIGINS}")

register_exception_handlers(app)

# =====================================================================
# DATABASE INITIALIZATION
# =====================================================================

Base.metadata.create_all(bind=engine)

# =====================================================================
# HEALTH CHECK
# =====================================================================


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"success": True, "message": "Student Wellness API is running"}


# =====================================================================
# ROUTES
# =====================================================================

app.include_router(auth.router)
app.include_router(wellness.router)
app.include_router(watch.router)
app.include_router(ai.router)


@app.get("/")
def root():
    """API root endpoint."""
    return {
        "success": True,
        "data": {
            "name": settings.APP_NAME,
            "version": "1.0.0",
            "docs": "/docs",
            "endpoints": {
                "auth": "/auth",
                "wellness": "/wellness",
                "watch": "/watch",
                "ai": "/ai",
            },
        },
    }
