import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from verifyx.config import settings
from verifyx.database import init_db
from verifyx.api import routes

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"🚀 Starting {settings.APP_NAME} {settings.VERSION}...")
    init_db()
    yield
    # Shutdown
    logger.info(f"👋 Shutting down {settings.APP_NAME}...")

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(routes.router, prefix=settings.API_PREFIX, tags=["Verification"])

@app.get("/")
def root():
    return {
        "message": f"{settings.APP_NAME} backend is running. Use POST {settings.API_PREFIX}/verify "
                   f"or GET {settings.API_PREFIX}/verify?value=...",
        "version": settings.VERSION,
        "docs": "/docs"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("verifyx.main:app", host="0.0.0.0", port=8000, reload=False)
