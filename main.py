import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
import uvicorn

from core.config import APP_NAME, APP_DEBUG, ALLOWED_ORIGINS
from database import AsyncSessionLocal, create_tables
from routers import auth_router, contact_router, dashboard_router, feedback_router
from utils.file_utils import upload_path

logging.basicConfig(level=logging.DEBUG if APP_DEBUG else logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    logger.info("Starting up application...")
    await create_tables()
    yield
    logger.info("Shutting down application...")


app = FastAPI(title=f"{APP_NAME} API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/uploads", StaticFiles(directory=str(upload_path())), name="uploads")

app.include_router(auth_router.router)
app.include_router(feedback_router.router)
app.include_router(dashboard_router.router)
app.include_router(contact_router.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/")
def root():
    return {"message": f"Welcome to {APP_NAME} API", "docs": "/docs", "version": app.version}


@app.get("/health")
async def health_check():
    db_status = "connected"
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Health check database query failed: {e}")
        db_status = "disconnected"
    return {
        "status": "OK",
        "database": db_status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
