# /formify-backend/app/main.py

# --- Core FastAPI Imports ---
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .config import CORS_ORIGINS, LOG_LEVEL

# --- Application-specific Router Imports ---
from .routers import (
    student_router,
    teacher_router,
    admin_router,
)

# --- Database Imports for Startup Logic ---
from .db import base  # noqa: F401  (registers every model on Base.metadata)
from .db.base_class import Base
from .db.database import engine

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    # This code runs ONCE when the application starts up.
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready.")
    yield
    # This code runs ONCE when the application shuts down.


# --- FastAPI Application Instance Creation ---
app = FastAPI(
    title="Formify Backend API",
    description="Project group formation and capacity-constrained supervisor allocation.",
    version="1.0.0",
    lifespan=lifespan
)

# --- Middleware Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- API Router Inclusion ---
app.include_router(student_router.router, prefix="/api/student", tags=["Student"])
app.include_router(teacher_router.router, prefix="/api/teacher", tags=["Teacher"])
app.include_router(admin_router.router, prefix="/api/admin", tags=["Admin"])


# --- Root / Health Check Endpoints ---
@app.get("/", tags=["Health Check"])
async def read_root():
    """A simple health check endpoint to confirm the API is online."""
    return {"status": "Formify Backend is running!", "version": app.version}


@app.get("/api/health", tags=["Health Check"])
async def health():
    return {"ok": True}
