"""GET /api/lrms and per-LRM detail endpoints."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from track_lrs.web import app as app_module


def test_list_lrms(served):
    resp = served.get("/api/lrms")
    assert resp.status_code == 200
    lrms = resp.json()["lrms"]
    assert [lrm["id"] for lrm in lrms] == ["up", "down", "spur"]
    assert lrms[0]["length"] == pytest.approx(200.0)
    assert lrms[0]["anchor_count"] == 3
    assert lrms[2]["anchor_count"] == 1


def test_lrm_detail(served):
    data = served.get("/api/lrms/spur").json()
    assert data["id"] == "spur"
    assert data["length"] == pytest.approx(50.0)
    assert data["geometry"] == [{"x": 300.0, "y": 0.0}, {"x": 350.0, "y": 0.0}]
    assert data["properties"] == {}


def test_lrm_detail_unknown_returns_404(served):
    resp = served.get("/api/lrms/missing")
    assert resp.status_code == 404
    assert "missing" in resp.json()["detail"]


def test_anchors(served):
    data = served.get("/api/lrms/down/anchors").json()
    assert data["lrm_id"] == "down"
    names = [a["name"] for a in data["anchors"]]
    assert names == ["K9", "K8"]
    assert data["anchors"][1]["point"] == {"x": 100.0, "y": 0.0}
    assert data["anchors"][1]["scale_position"] == pytest.approx(800.0)


def test_anchors_unknown_returns_404(served):
    assert served.get("/api/lrms/missing/anchors").status_code == 404


def test_no_data_returns_503(client):
    with patch("track_lrs.web.app._DEFAULT_DATA", ""):
        resp = client.get("/api/lrms")
    assert resp.status_code == 503


def test_unreadable_data_returns_503(client, tmp_path):
    missing = tmp_path / "absent.bin"
    with patch("track_lrs.web.app._DEFAULT_DATA", str(missing)):
        resp = client.get("/api/lrms")
    assert resp.status_code == 503


def test_loads_payload_from_configured_path(client, tmp_path, network_bytes):
    path = tmp_path / "network.bin"
    path.write_bytes(network_bytes)
    app_module._load_service.cache_clear()
    with patch("track_lrs.web.app._DEFAULT_DATA", str(path)):
        resp = client.get("/api/lrms")
    app_module._load_service.cache_clear()
    assert resp.status_code == 200
    assert len(resp.json()["lrms"]) == 3
