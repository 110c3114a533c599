from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from smartassist.stats import compute_stats


def _book(client, technician_id, days, status="pending"):
    r = client.post("/api/bookings", json={
        "technicianId": technician_id,
        "scheduledDate": (datetime.now(timezone.utc) + timedelta(days=days)).isoformat(),
        "serviceType": "maintenance",
        "problemDescription": "Annual service",
        "status": status,
        "estimatedCost": "170.00",
    })
    assert r.status_code == 201, r.text
    return r.json()


def test_create_booking_defaults(client, technicians):
    b = _book(client, technicians["sarah.chen@example.com"], 5)
    assert b["status"] == "pending"
    assert b["paymentStatus"] == "unpaid"
    assert b["userId"] == "temp-user-001"
    assert b["estimatedCost"] == "170.00"
    assert client.get(f"/api/bookings/{b['id']}").json()["id"] == b["id"]
    assert [x["id"] for x in client.get("/api/bookings").json()] == [b["id"]]


def test_booking_validation(client, technicians):
    tid = technicians["sarah.chen@example.com"]
    r = client.post("/api/bookings", json={"technicianId": tid, "serviceType": "repair"})
    assert r.status_code == 400
    r = client.post("/api/bookings", json={
        "technicianId": tid, "scheduledDate": "2030-01-01T10:00:00",
        "serviceType": "repair", "problemDescription": "x", "status": "teleported",
    })
    assert r.status_code == 400


def test_booking_for_unknown_technician_is_400(client):
    r = client.post("/api/bookings", json={
        "technicianId": "ghost", "scheduledDate": "2030-01-01T10:00:00",
        "serviceType": "repair", "problemDescription": "x",
    })
    assert r.status_code == 400


def test_server_accepts_past_scheduled_date(client, technicians):
    # only the booking page refuses past dates
    b = _book(client, technicians["sarah.chen@example.com"], -10)
    assert b["status"] == "pending"


def test_patch_booking_status_and_payment(client, technicians):
    b = _book(client, technicians["sarah.chen@example.com"], 5)
    r = client.patch(f"/api/bookings/{b['id']}", json={"status": "confirmed", "paymentStatus": "paid", "actualCost": 150})
    assert r.status_code == 200
    body = r.json()
    assert (body["status"], body["paymentStatus"], body["actualCost"]) == ("confirmed", "paid", "150.00")
    assert client.patch("/api/bookings/missing", json={"status": "confirmed"}).status_code == 404
    assert client.patch(f"/api/bookings/{b['id']}", json={"paymentStatus": "lost"}).status_code == 400


def test_stats_example(client, technicians, fake_ai):
    tid = technicians["john.martinez@example.com"]
    client.post("/api/appliances", json={"name": "Fridge", "type": "refrigerator"})
    client.post("/api/appliances", json={"name": "Oven", "type": "oven"})
    client.post("/api/diagnose", json={"issue": "Fridge warm"})
    resolved = client.post("/api/diagnose", json={"issue": "Oven door"}).json()
    client.patch(f"/api/diagnoses/{resolved['diagnosisId']}", json={"status": "resolved", "resolved": True})
    _book(client, tid, 7, status="pending")
    _book(client, tid, -7, status="completed")

    assert client.get("/api/stats").json() == {
        "totalDevices": 2,
        "activeDiagnoses": 1,
        "upcomingBookings": 1,
    }


def test_stats_empty(client):
    assert client.get("/api/stats").json() == {"totalDevices": 0, "activeDiagnoses": 0, "upcomingBookings": 0}


def test_compute_stats_rules():
    now = datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc)
    b = lambda status, when: SimpleNamespace(status=status, scheduled_date=when)
    bookings = [
        b("pending", now + timedelta(hours=1)),
        b("confirmed", datetime(2030, 6, 2)),          # naive -> UTC
        b("cancelled", now + timedelta(days=1)),
        b("completed", now + timedelta(days=1)),
        b("pending", now),                             # not strictly after now
        b("pending", now - timedelta(days=1)),
    ]
    diagnoses = [SimpleNamespace(status=s) for s in ("open", "escalated", "resolved", "open")]
    stats = compute_stats([object()] * 3, diagnoses, bookings, now=now)
    assert stats == {"totalDevices": 3, "activeDiagnoses": 2, "upcomingBookings": 2}


def test_me_returns_placeholder_user(client):
    me = client.get("/api/me").json()
    assert me["username"] == "demo_user"
    assert "password" not in me
