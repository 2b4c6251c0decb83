"""FastAPI backend for X12 EDI claim generation and remittance parsing."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from . import __version__
from .config import CORS_ORIGINS
from .rate_limit import limiter
from .remittance.reason_codes import CodeKind, load_code_table
from .routes import edi_router

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Healthcare EDI Backend",
    description="837P and 270 generation, 835 remittance parsing and payment posting",
    version=__version__,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(edi_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "code_tables": {kind.value: len(load_code_table(kind)) for kind in CodeKind},
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080)
