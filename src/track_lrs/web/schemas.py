"""Pydantic request/response schemas for the query API."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field

FiniteFloat = Annotated[float, Field(allow_inf_nan=False)]


class PointModel(BaseModel):
    x: float
    y: float


class MeasureModel(BaseModel):
    anchor_name: str
    scale_offset: FiniteFloat = 0.0


class HealthResponse(BaseModel):
    status: str
    version: str


class LrmSummary(BaseModel):
    id: str
    length: float
    anchor_count: int


class LrmsResponse(BaseModel):
    lrms: list[LrmSummary]


class LrmDetail(BaseModel):
    id: str
    length: float
    geometry: list[PointModel]
    properties: dict[str, str] = Field(default_factory=dict)


class AnchorRecord(BaseModel):
    name: str
    curve_position: float
    scale_position: float
    point: PointModel
    properties: dict[str, str] = Field(default_factory=dict)


class AnchorsResponse(BaseModel):
    lrm_id: str
    anchors: list[AnchorRecord]


class LookupRequest(BaseModel):
    x: FiniteFloat
    y: FiniteFloat
    lrm_id: str


class ProjectionRecord(BaseModel):
    lrm_id: str
    point: PointModel
    measure: MeasureModel
    label: str
    distance: float
    offset: float
    curve_position: float


class LookupResponse(BaseModel):
    projections: list[ProjectionRecord]


class ResolveRequest(BaseModel):
    lrm_id: str
    anchor_name: str
    scale_offset: FiniteFloat = 0.0


class ResolveResponse(BaseModel):
    lrm_id: str
    point: PointModel


class ResolveRangeRequest(BaseModel):
    lrm_id: str
    start: MeasureModel
    end: MeasureModel


class ResolveRangeResponse(BaseModel):
    lrm_id: str
    points: list[PointModel]
