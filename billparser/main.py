import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from billparser import __version__
from billparser.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="BillParser API",
    description="Structured invoices from noisy bill text",
    version=__version__
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    return {
        "message": "BillParser API",
        "version": __version__,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}

# Import routers
from billparser.routers import parse, export  # noqa: E402

# Include routers
app.include_router(parse.router)
app.include_router(export.router)
