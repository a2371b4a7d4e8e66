"""CinemaVault FastAPI application.

Single-domain web server: review writes go through the lifecycle facade,
catalogue writes are processed as Protean commands synchronously. Every
request runs inside the cinemavault domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import uuid

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay when a domain.toml is present.
from cinemavault.domain import cinemavault  # noqa: E402
from cinemavault.utils.logging import bind_request, clear_request, configure_logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

configure_logging()
cinemavault.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="CinemaVault API",
    description="Movie catalogue, reviews and rating statistics",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the cinemavault domain context and bind request fields for logging."""
    bind_request(
        request.headers.get("x-request-id") or str(uuid.uuid4()),
        actor_id=request.headers.get("x-actor-id"),
        role=request.headers.get("x-actor-role"),
    )
    try:
        with cinemavault.domain_context():
            response = await call_next(request)
    finally:
        clear_request()
    return response


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
from cinemavault.api import movie_router, register_error_handlers, review_router  # noqa: E402

app.include_router(review_router)
app.include_router(movie_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": cinemavault.name}})
