"""
StudyBuddy Server - FastAPI application for AI exam papers and cheatsheets.

Provides:
- Question paper generation from textbook PDFs (Gemini), optionally matching a sample paper
- English and Hindi cheatsheet generation
- LaTeX sanitization and remote PDF compilation for downloads
- Question card preview of generated papers
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
import logging
import os

# Import lib modules
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from lib.generator import get_generator
from lib.latex_compiler import get_latex_compiler
from lib.logger import request_logger
from api.papers import router as papers_router
from api.cheatsheets import router as cheatsheets_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Report configuration at startup and close HTTP clients on shutdown."""
    print("[Startup] StudyBuddy server starting...")
    if not (os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")):
        print("[Startup] WARNING: GEMINI_API_KEY not set, only mode=mock requests will work")
    print(f"[Startup] LaTeX build server: {get_latex_compiler().url}")
    print("[Startup] Ready!")

    yield

    print("[Shutdown] Cleaning up...")
    await get_generator().close()
    await get_latex_compiler().close()


app = FastAPI(
    title="StudyBuddy Server",
    description="AI question paper and cheatsheet generation with LaTeX PDF export",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(papers_router)
app.include_router(cheatsheets_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "studybuddy-server",
        "version": "1.0.0"
    }


@app.get("/logs")
async def get_logs(limit: int = Query(default=100, ge=1, le=1000)):
    """Recent generation and download requests, most recent first."""
    logs = request_logger.get_logs(limit=limit)
    return {"logs": logs, "count": len(logs)}
