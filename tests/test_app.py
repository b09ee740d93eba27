from __future__ import annotations

from dataclasses import replace

from fastapi.testclient import TestClient

from app import create_app
from bookings.utils.config import get_settings


def test_create_app_initializes_storage_on_startup(tmp_path):
    settings = replace(get_settings(), database_path=tmp_path / "startup.db")
    app = create_app(settings)

    with TestClient(app) as client:
        search = client.post(
            "/search-availability",
            data={"start": "2030-01-01", "end": "2030-01-02"},
        )
        chosen = client.get("/choose-room/2", follow_redirects=False)
        form_page = client.get("/make-reservation")

    assert search.status_code == 200
    assert [room["room_name"] for room in search.json()["rooms"]] == [
        "General's Quarters",
        "Major's Suite",
    ]
    assert chosen.status_code == 303
    assert form_page.json()["reservation"]["room"]["room_id"] == 2
    assert app.state.repository.count_reservations() == 0
