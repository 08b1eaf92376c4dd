"""
Who Am I? Backend - FastAPI Application Entry Point
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from whoami import __version__
from whoami.api import classic, oracle, reverse
from whoami.engine.errors import NotReadyError, NotStartedError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Who Am I?",
    description="LLM-mediated character guessing game",
    version=__version__,
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:4200", "http://127.0.0.1:4200"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(oracle.router, prefix="/api/oracle", tags=["oracle"])
app.include_router(classic.router, prefix="/api/classic", tags=["classic"])
app.include_router(reverse.router, prefix="/api/reverse", tags=["reverse"])


@app.exception_handler(NotReadyError)
async def not_ready_handler(request: Request, exc: NotReadyError):
    """Oracle not loaded yet: the client should wait and retry"""
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(NotStartedError)
async def not_started_handler(request: Request, exc: NotStartedError):
    """Play operation before start"""
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"status": "ok", "name": "Who Am I?", "version": __version__}
