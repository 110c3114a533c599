def test_ping(client):
    assert client.get("/ping").json() == {"message": "pong"}


def test_db_health_lists_tables(client):
    body = client.get("/health/db").json()
    assert body["ok"] is True
    assert body["dialect"] == "sqlite"
    for table in ("users", "appliances", "diagnoses", "technicians", "bookings", "reviews"):
        assert body["tables"][table] is True


def test_cors_preflight(client):
    r = client.options(
        "/api/appliances",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "POST"},
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "http://localhost:5173"
