"""Tests for the step catalog endpoint."""

from fastapi.testclient import TestClient

from copychain.domain.entities.steps import STEPS
from copychain.main import app

client = TestClient(app)


def test_steps_in_pipeline_order(container):
    response = client.get("/steps")
    assert response.status_code == 200
    steps = response.json()["steps"]
    assert [s["id"] for s in steps] == [s.id for s in STEPS]
    assert [s["index"] for s in steps] == list(range(len(STEPS)))


def test_steps_expose_display_fields(container):
    first = client.get("/steps").json()["steps"][0]
    assert first["id"] == "avatar"
    assert first["label"]
    assert first["icon"]
    assert first["agent"]
