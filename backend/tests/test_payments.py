import httpx
import pytest

from smartassist.config import Settings
from smartassist.payments import PaymentError, PaymentGateway, StripeClient, to_minor_units


@pytest.mark.parametrize("body", [{"amount": 0}, {"amount": -5}, {"amount": -0.01}, {}])
def test_non_positive_or_missing_amount_rejected_before_processor(client, fake_payments, body):
    r = client.post("/api/create-payment-intent", json=body)
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid amount"
    assert fake_payments.calls == []


@pytest.mark.parametrize("raw", [b'{"amount": Infinity}', b'{"amount": -Infinity}', b'{"amount": NaN}'])
def test_non_finite_amount_rejected_before_processor(client, fake_payments, raw):
    r = client.post("/api/create-payment-intent", content=raw, headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid amount"
    assert fake_payments.calls == []


@pytest.mark.parametrize("amount", [float("inf"), float("nan")])
def test_to_minor_units_refuses_non_finite(amount):
    with pytest.raises(PaymentError, match="finite"):
        to_minor_units(amount)


def test_non_numeric_amount_is_400(client, fake_payments):
    r = client.post("/api/create-payment-intent", json={"amount": "lots"})
    assert r.status_code == 400
    assert fake_payments.calls == []


def test_positive_amount_returns_client_secret(client, fake_payments):
    r = client.post("/api/create-payment-intent", json={"amount": 170.5})
    assert r.status_code == 200
    assert r.json() == {"clientSecret": "pi_test_1_secret_abc"}
    assert fake_payments.calls == [170.5]


def test_intent_id_is_stored_on_booking(client, fake_payments, technicians):
    booking = client.post("/api/bookings", json={
        "technicianId": technicians["john.martinez@example.com"],
        "scheduledDate": "2031-02-03T09:00:00",
        "serviceType": "repair", "problemDescription": "AC broken",
    }).json()
    r = client.post("/api/create-payment-intent", json={"amount": 85, "bookingId": booking["id"]})
    assert r.status_code == 200
    assert client.get(f"/api/bookings/{booking['id']}").json()["stripePaymentIntentId"] == "pi_test_1"

    assert client.post("/api/create-payment-intent", json={"amount": 85, "bookingId": "missing"}).status_code == 404


def test_processor_failure_is_500_with_message(client, fake_payments):
    fake_payments.fail_with = "HTTP 402: Your card was declined."
    r = client.post("/api/create-payment-intent", json={"amount": 10})
    assert r.status_code == 500
    assert "Your card was declined." in r.json()["detail"]


def test_missing_key_surfaces_on_first_use(client):
    # no override: the real gateway, built without STRIPE_SECRET_KEY
    r = client.post("/api/create-payment-intent", json={"amount": 10})
    assert r.status_code == 500
    assert "STRIPE_SECRET_KEY is not configured" in r.json()["detail"]


@pytest.mark.parametrize("amount,cents", [(170.5, 17050), (19.99, 1999), (0.01, 1), (10.005, 1001), (85, 8500)])
def test_to_minor_units(amount, cents):
    assert to_minor_units(amount) == cents


def test_gateway_builds_client_once():
    gw = PaymentGateway(Settings(stripe_secret_key="sk_test_123"))
    first = gw.client()
    assert gw.client() is first
    assert first.secret_key == "sk_test_123"


def test_gateway_without_key_raises():
    with pytest.raises(PaymentError):
        PaymentGateway(Settings(stripe_secret_key=None)).client()


class _FakeHttp:
    calls = []
    response = None

    def __init__(self, timeout=None):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def post(self, url, data=None, auth=None):
        _FakeHttp.calls.append({"url": url, "data": data, "auth": auth})
        return _FakeHttp.response


def test_stripe_client_posts_form(monkeypatch):
    _FakeHttp.calls = []
    _FakeHttp.response = httpx.Response(200, json={
        "id": "pi_1", "client_secret": "pi_1_secret", "amount": 2500, "currency": "usd",
    })
    monkeypatch.setattr(httpx, "Client", _FakeHttp)

    intent = StripeClient("sk_test", "https://api.stripe.test/v1").create_payment_intent(2500, "usd")

    assert intent.client_secret == "pi_1_secret"
    call = _FakeHttp.calls[0]
    assert call["url"] == "https://api.stripe.test/v1/payment_intents"
    assert call["data"]["amount"] == "2500"
    assert call["data"]["automatic_payment_methods[enabled]"] == "true"
    assert call["auth"] == ("sk_test", "")


def test_stripe_client_error_message(monkeypatch):
    _FakeHttp.response = httpx.Response(400, json={"error": {"message": "Amount must be at least $0.50 usd"}})
    monkeypatch.setattr(httpx, "Client", _FakeHttp)
    with pytest.raises(PaymentError, match="at least"):
        StripeClient("sk_test", "https://api.stripe.test/v1").create_payment_intent(10, "usd")


@pytest.mark.parametrize("response", [
    httpx.Response(200, text="<html>proxy</html>"),
    httpx.Response(200, json={"id": "pi_1"}),
    httpx.Response(200, json=["not", "an", "object"]),
])
def test_stripe_client_malformed_success_body(monkeypatch, response):
    _FakeHttp.response = response
    monkeypatch.setattr(httpx, "Client", _FakeHttp)
    with pytest.raises(PaymentError, match="unexpected response format"):
        StripeClient("sk_test", "https://api.stripe.test/v1").create_payment_intent(2500, "usd")


def test_malformed_processor_reply_is_500_with_message(client, monkeypatch):
    _FakeHttp.response = httpx.Response(200, text="<html>proxy</html>")
    monkeypatch.setattr(httpx, "Client", _FakeHttp)
    gateway = PaymentGateway(Settings(stripe_secret_key="sk_test", stripe_api_base="https://api.stripe.test/v1"))
    monkeypatch.setattr(client.app.state, "payments", gateway)

    r = client.post("/api/create-payment-intent", json={"amount": 25})
    assert r.status_code == 500
    assert "unexpected response format" in r.json()["detail"]
