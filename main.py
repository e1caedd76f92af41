"""
Road Hazard Map FastAPI Application

Main entry point for the Road Hazard Map application, serving the map page,
the hazard REST API and real-time hazard and proximity notifications.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-01-15
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from starlette.middleware.sessions import SessionMiddleware

# Load environment variables
load_dotenv()

from logic.config import BASE_DIR, LOG_LEVEL, UPLOAD_DIR, UPLOAD_URL_PREFIX  # noqa: E402

logging.basicConfig(
    stream=sys.stdout,
    level=LOG_LEVEL,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)

from database import engine, init_db  # noqa: E402
from server.auth import SESSION_SECRET_KEY, router as auth_router  # noqa: E402
from server.broadcast import event_generator, subscribe  # noqa: E402
from server.hazards import router as hazards_router  # noqa: E402
from server.proximity import monitor, router as proximity_router  # noqa: E402
from server.routes import router as routes_router  # noqa: E402

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    log.info("Road Hazard Map started")
    yield
    await monitor.shutdown()


app = FastAPI(title="Road Hazard Map", lifespan=lifespan)

# Authlib keeps the OAuth state in the Starlette session during sign-in
app.add_middleware(SessionMiddleware, secret_key=SESSION_SECRET_KEY, session_cookie="oauth_state")

# Include all routers
app.include_router(routes_router)
app.include_router(hazards_router)
app.include_router(proximity_router)
app.include_router(auth_router, prefix="/auth")

# ============================================================
# SSE Endpoint
# ============================================================


@app.get("/api/stream")
async def stream(request: Request, client_id: Optional[str] = None):
    """Server-Sent Events (SSE) endpoint for real-time updates.

    Every client receives new hazards as they are reported. Clients that pass
    their client_id also receive their own proximity alerts and toasts.

    Args:
        request: FastAPI request object.
        client_id: ID the page uses for its location updates.

    Returns:
        StreamingResponse with text/event-stream content type.
    """
    queue = subscribe(client_id)
    return StreamingResponse(event_generator(queue, client_id), media_type="text/event-stream")


@app.get("/healthz", tags=["ops"])
def healthz():
    status = {"ok": True, "db": False, "error": None}
    try:
        with engine.connect() as conn:
            conn.execute(text("select 1"))
        status["db"] = True
    except Exception as e:
        status["error"] = str(e)
    return JSONResponse(status, headers={"Cache-Control": "no-store"})


# ============================================================
# Static Files
# ============================================================

os.makedirs(UPLOAD_DIR, exist_ok=True)
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=UPLOAD_DIR), name="uploads")
app.mount("/static", StaticFiles(directory=os.path.join(BASE_DIR, "static")), name="static")


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
