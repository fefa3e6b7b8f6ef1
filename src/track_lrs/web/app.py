"""FastAPI query service over one LRS payload."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException

from track_lrs import __version__
from track_lrs.errors import MalformedData, UnknownAnchor, UnknownLrm
from track_lrs.web.schemas import (
    AnchorsResponse,
    HealthResponse,
    LookupRequest,
    LookupResponse,
    LrmDetail,
    LrmsResponse,
    ResolveRangeRequest,
    ResolveRangeResponse,
    ResolveRequest,
    ResolveResponse,
)
from track_lrs.web.service import LrsService

load_dotenv()  # loads .env from project root; must run before env vars are consumed

_logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

app = FastAPI(title="Track LRS", version=__version__)

_DEFAULT_DATA = os.environ.get("TRACK_LRS_DATA", "")


@lru_cache(maxsize=4)
def _load_service(path: str) -> LrsService:
    return LrsService.from_path(path)


def _service(data_path: str | None = None) -> LrsService:
    path = data_path or _DEFAULT_DATA
    if not path:
        raise HTTPException(status_code=503, detail="No LRS data loaded (TRACK_LRS_DATA is unset)")
    try:
        return _load_service(path)
    except (OSError, MalformedData) as exc:
        _logger.warning("Cannot load LRS data from %s: %s", path, exc)
        raise HTTPException(status_code=503, detail=f"LRS data unavailable: {exc}") from exc


@contextmanager
def _domain_errors() -> Iterator[None]:
    """Translate engine errors into HTTP errors."""
    try:
        yield
    except (UnknownLrm, UnknownAnchor) as exc:
        _logger.warning("Rejected request: %s", exc)
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        _logger.warning("Rejected request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


@app.get("/api/lrms", response_model=LrmsResponse)
def list_lrms() -> LrmsResponse:
    """Every LRM with its curve length and anchor count."""
    return _service().list_lrms()


@app.get("/api/lrms/{lrm_id}", response_model=LrmDetail)
def lrm_detail(lrm_id: str) -> LrmDetail:
    """Geometry and properties of one LRM, for drawing it on a map."""
    svc = _service()
    with _domain_errors():
        return svc.lrm_detail(lrm_id)


@app.get("/api/lrms/{lrm_id}/anchors", response_model=AnchorsResponse)
def lrm_anchors(lrm_id: str) -> AnchorsResponse:
    svc = _service()
    with _domain_errors():
        return svc.anchors(lrm_id)


@app.post("/api/lookup", response_model=LookupResponse)
def lookup(req: LookupRequest) -> LookupResponse:
    """Project a coordinate on an LRM and express it as a measure."""
    svc = _service()
    with _domain_errors():
        return svc.lookup(req)


@app.post("/api/resolve", response_model=ResolveResponse)
def resolve(req: ResolveRequest) -> ResolveResponse:
    """Coordinate of an anchor-relative measure."""
    svc = _service()
    with _domain_errors():
        return svc.resolve(req)


@app.post("/api/resolve_range", response_model=ResolveRangeResponse)
def resolve_range(req: ResolveRangeRequest) -> ResolveRangeResponse:
    """Polyline between two measures, in the order they are given."""
    svc = _service()
    with _domain_errors():
        return svc.resolve_range(req)
