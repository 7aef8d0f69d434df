"""Shared fixtures for tinder_stats tests."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from helpers import make_export


@pytest.fixture()
def sample_export() -> dict:
    """A small export spanning two months and several weekdays.

    2021-01-03 is a Sunday, 2021-01-04 a Monday, 2021-02-06 a Saturday.
    """
    return make_export(
        app_opens={"2021-01-03": 5, "2021-01-04": 3, "2021-02-06": 7},
        swipes_likes={"2021-01-03": 10, "2021-01-04": 5, "2021-02-06": 1},
        swipes_passes={"2021-01-03": 3, "2021-01-04": 7, "2021-02-06": 0},
        matches={"2021-01-03": 2, "2021-01-04": 1, "2021-02-06": 1},
        messages_sent={"2021-01-03": 4, "2021-01-04": 4},
        messages_received={"2021-01-03": 3, "2021-01-04": 0},
    )


@pytest.fixture()
def sample_bytes(sample_export) -> bytes:
    """The sample export serialised as an uploaded file body."""
    return json.dumps(sample_export).encode("utf-8")


@pytest.fixture()
def client():
    """TestClient for app.py with an empty session.

    Replaces the module-level session slot so tests never see each
    other's uploads.
    """
    import app as app_module

    with patch.object(app_module, "_state", {"session": None}):
        with TestClient(app_module.app) as tc:
            yield tc
