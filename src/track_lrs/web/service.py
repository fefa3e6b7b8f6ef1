"""LrsService: turns loaded LRS queries into API response models."""

from __future__ import annotations

import logging
from pathlib import Path

from track_lrs.geometry.models import Point
from track_lrs.lrs.container import Lrs, load
from track_lrs.lrs.models import Projection
from track_lrs.scale.models import LrmScaleMeasure
from track_lrs.web.schemas import (
    AnchorRecord,
    AnchorsResponse,
    LookupRequest,
    LookupResponse,
    LrmDetail,
    LrmsResponse,
    LrmSummary,
    MeasureModel,
    PointModel,
    ProjectionRecord,
    ResolveRangeRequest,
    ResolveRangeResponse,
    ResolveRequest,
    ResolveResponse,
)

_logger = logging.getLogger(__name__)


def _point(p: Point) -> PointModel:
    return PointModel(x=p.x, y=p.y)


def _measure(m: MeasureModel) -> LrmScaleMeasure:
    return LrmScaleMeasure(m.anchor_name, m.scale_offset)


def _projection(pr: Projection) -> ProjectionRecord:
    return ProjectionRecord(
        lrm_id=pr.lrm_id,
        point=_point(pr.point),
        measure=MeasureModel(
            anchor_name=pr.measure.anchor_name, scale_offset=pr.measure.scale_offset
        ),
        label=str(pr.measure),
        distance=pr.distance,
        offset=pr.offset,
        curve_position=pr.curve_position,
    )


class LrsService:
    """Query front for one loaded :class:`~track_lrs.lrs.container.Lrs`.

    Domain errors (``UnknownLrm``, ``UnknownAnchor``, ``OutOfRange``) are
    left to propagate; the HTTP layer maps them to status codes.
    """

    def __init__(self, lrs: Lrs) -> None:
        self._lrs = lrs

    @classmethod
    def from_path(cls, path: str | Path) -> LrsService:
        """Read and load the payload at *path*.

        The file is read into an owned ``bytes`` object, so the service does
        not keep the file open.
        """
        data = Path(path).read_bytes()
        lrs = load(data)
        _logger.info("Loaded %d LRMs from %s", lrs.lrm_count(), path)
        return cls(lrs)

    @property
    def lrs(self) -> Lrs:
        return self._lrs

    def list_lrms(self) -> LrmsResponse:
        return LrmsResponse(
            lrms=[
                LrmSummary(
                    id=lrm_id,
                    length=self._lrs.curve(lrm_id).length,
                    anchor_count=len(self._lrs.anchors(lrm_id)),
                )
                for lrm_id in self._lrs.lrm_ids()
            ]
        )

    def lrm_detail(self, lrm_id: str) -> LrmDetail:
        curve = self._lrs.curve(lrm_id)
        return LrmDetail(
            id=lrm_id,
            length=curve.length,
            geometry=[_point(p) for p in self._lrs.geometry(lrm_id)],
            properties=self._lrs.lrm_properties(lrm_id),
        )

    def anchors(self, lrm_id: str) -> AnchorsResponse:
        records = [
            AnchorRecord(
                name=a.name,
                curve_position=a.curve_position,
                scale_position=a.scale_position,
                point=_point(self._lrs.anchor_point(lrm_id, i)),
                properties=a.properties,
            )
            for i, a in enumerate(self._lrs.anchors(lrm_id))
        ]
        return AnchorsResponse(lrm_id=lrm_id, anchors=records)

    def lookup(self, req: LookupRequest) -> LookupResponse:
        projections = self._lrs.lookup((req.x, req.y), req.lrm_id)
        return LookupResponse(projections=[_projection(pr) for pr in projections])

    def resolve(self, req: ResolveRequest) -> ResolveResponse:
        point = self._lrs.resolve(
            req.lrm_id, LrmScaleMeasure(req.anchor_name, req.scale_offset)
        )
        return ResolveResponse(lrm_id=req.lrm_id, point=_point(point))

    def resolve_range(self, req: ResolveRangeRequest) -> ResolveRangeResponse:
        points = self._lrs.resolve_range(req.lrm_id, _measure(req.start), _measure(req.end))
        return ResolveRangeResponse(lrm_id=req.lrm_id, points=[_point(p) for p in points])
