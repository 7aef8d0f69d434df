"""FastAPI service for the Tinder Statistics Dashboard.

Serves a Chart.js dashboard for a Tinder data export that the user uploads
from the browser.  The export is parsed in memory and never written to disk;
each successful upload replaces the previous session wholesale.

Deployment: uvicorn app:app --host 127.0.0.1 --port 8204
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import HTMLResponse

from analytics import build_dashboard_payload
from usage_export import UsageExportError, decode_export, parse_usage

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------
TEMPLATE_PATH = Path(__file__).parent / "dashboard_template.html"
MAX_UPLOAD_BYTES = 20 * 1024 * 1024  # 20 MiB

# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------
app = FastAPI(title="Tinder Statistics Dashboard")


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Session:
    """One successfully loaded export and everything derived from it."""

    filename: str
    payload: dict[str, Any]
    loaded_at: datetime


_session_lock = threading.Lock()
_state: dict[str, Session | None] = {"session": None}


def _current_session() -> Session | None:
    with _session_lock:
        return _state["session"]


def _replace_session(session: Session | None) -> None:
    with _session_lock:
        _state["session"] = session


def load_session(filename: str, raw: bytes) -> Session:
    """Decode, validate and aggregate an uploaded export.

    Raises:
        UsageExportError: If the upload is not a usable Tinder export.
    """
    history = parse_usage(decode_export(raw))
    return Session(
        filename=filename,
        payload=build_dashboard_payload(history),
        loaded_at=datetime.now(),
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/health")
@app.get("/healthz")
def healthz():
    return {"status": "ok"}


@app.get("/", response_class=HTMLResponse)
def dashboard_html():
    """Serve the dashboard HTML with the current payload injected.

    With no export loaded the payload is ``null`` and the page shows the
    upload prompt.
    """
    if not TEMPLATE_PATH.exists():
        raise HTTPException(status_code=500, detail="Template not found")

    session = _current_session()
    data = session.payload if session is not None else None
    template = TEMPLATE_PATH.read_text(encoding="utf-8")
    data_json = json.dumps(data, ensure_ascii=False)
    data_json = data_json.replace("</", r"<\/")
    html = template.replace(
        "const DASHBOARD_DATA = null;",
        f"const DASHBOARD_DATA = {data_json};",
    )
    return HTMLResponse(content=html)


@app.post("/api/upload")
def api_upload(file: UploadFile = File(...)):
    """Load an uploaded export and return its dashboard payload.

    On failure the previous session, if any, stays in place.
    """
    raw = file.file.read(MAX_UPLOAD_BYTES + 1)
    if len(raw) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File too large")

    filename = file.filename or "upload.json"
    try:
        session = load_session(filename, raw)
    except UsageExportError as exc:
        logger.warning("Rejected upload %s: %s", filename, exc)
        raise HTTPException(
            status_code=400,
            detail={"error": exc.kind, "message": str(exc)},
        ) from exc

    _replace_session(session)
    logger.info("Loaded export %s", filename)
    return session.payload


@app.get("/api/data")
def api_data():
    """Return the payload of the currently loaded export."""
    session = _current_session()
    if session is None:
        raise HTTPException(status_code=404, detail="No export loaded")
    return session.payload


@app.delete("/api/data")
def api_clear():
    """Forget the loaded export and return to the upload prompt."""
    _replace_session(None)
    return {"status": "cleared"}


@app.get("/api/session")
def api_session():
    """Describe the currently loaded export."""
    session = _current_session()
    if session is None:
        raise HTTPException(status_code=404, detail="No export loaded")
    return {
        "filename": session.filename,
        "loaded_at": session.loaded_at.isoformat(),
        "generated_at": session.payload["generated_at"],
    }
