import hashlib
import hmac
import json
import re
import time

import pytest
import stripe

from utils.mail import mail
from utils.payment_gateway import stripe_value


def _invoice_event(interval="week", email="guest@example.com", customer="cus_1"):
    return {
        "type": "invoice.payment_succeeded",
        "data": {"object": {
            "customer_email": email,
            "customer": customer,
            "lines": {"data": [{"price": {"recurring": {"interval": interval}}}]},
        }},
    }


@pytest.fixture
def fake_event(monkeypatch):
    holder = {}

    def construct(payload, signature):
        if signature != "t=1,v1=good":
            raise stripe.SignatureVerificationError("No signatures found matching the expected signature", signature)
        return holder["event"]

    monkeypatch.setattr("routes.webhook.construct_webhook_event", construct)
    return holder


def test_webhook_config_check(client):
    body = client.get("/api/webhook").get_json()
    assert body == {"ok": True, "route": "/api/webhook", "hasWebhookSecret": True, "hasStripeSecret": True}


def test_missing_signature(client):
    resp = client.post("/api/webhook", data=b"{}")
    assert resp.status_code == 400


def test_missing_webhook_secret(app, client):
    app.config["STRIPE_WEBHOOK_SECRET"] = None
    resp = client.post("/api/webhook", data=b"{}", headers={"Stripe-Signature": "t=1,v1=good"})
    assert resp.status_code == 400


def test_bad_signature(client, fake_event):
    fake_event["event"] = _invoice_event()
    resp = client.post("/api/webhook", data=b"{}", headers={"Stripe-Signature": "t=1,v1=bad"})
    assert resp.status_code == 400
    assert resp.get_json()["message"].startswith("Webhook Error:")


def test_real_signature_check_rejects_forgery(client):
    resp = client.post("/api/webhook", data=b'{"type": "invoice.payment_succeeded"}',
                       headers={"Stripe-Signature": "t=1,v1=deadbeef"})
    assert resp.status_code == 400


def test_paid_invoice_emails_door_code(client, fake_event):
    fake_event["event"] = _invoice_event(interval="month")
    with mail.record_messages() as outbox:
        resp = client.post("/api/webhook", data=b"{}", headers={"Stripe-Signature": "t=1,v1=good"})
    assert resp.status_code == 200
    assert resp.get_json() == {"received": True}
    assert len(outbox) == 1
    assert outbox[0].recipients == ["guest@example.com"]
    assert re.search(r"door code is: \d{6}", outbox[0].body)


def test_paid_invoice_looks_up_customer_email(client, fake_event, monkeypatch):
    fake_event["event"] = _invoice_event(email=None, customer="cus_42")
    monkeypatch.setattr("routes.webhook.get_customer_email", lambda cid: "found@example.com")
    with mail.record_messages() as outbox:
        resp = client.post("/api/webhook", data=b"{}", headers={"Stripe-Signature": "t=1,v1=good"})
    assert resp.status_code == 200
    assert outbox[0].recipients == ["found@example.com"]


def test_door_code_email_failure_still_acknowledged(client, fake_event, monkeypatch):
    fake_event["event"] = _invoice_event()

    def boom(*args, **kwargs):
        raise OSError("smtp down")

    monkeypatch.setattr("utils.mail.mail.send", boom)
    resp = client.post("/api/webhook", data=b"{}", headers={"Stripe-Signature": "t=1,v1=good"})
    assert resp.status_code == 200


@pytest.mark.parametrize("event_type", ["invoice.payment_failed", "customer.subscription.deleted", "charge.refunded"])
def test_other_events_are_acknowledged(client, fake_event, event_type):
    fake_event["event"] = {"type": event_type, "data": {"object": {}}}
    with mail.record_messages() as outbox:
        resp = client.post("/api/webhook", data=b"{}", headers={"Stripe-Signature": "t=1,v1=good"})
    assert resp.get_json() == {"received": True}
    assert outbox == []


def _signed_post(client, event, secret="whsec_dummy"):
    payload = json.dumps(event)
    timestamp = int(time.time())
    signature = hmac.new(secret.encode(), f"{timestamp}.{payload}".encode(), hashlib.sha256).hexdigest()
    return client.post(
        "/api/webhook",
        data=payload,
        content_type="application/json",
        headers={"Stripe-Signature": f"t={timestamp},v1={signature}"},
    )


def _stripe_invoice_event(interval="month", email="guest@example.com", customer="cus_1"):
    return {
        "id": "evt_test_1",
        "object": "event",
        "type": "invoice.payment_succeeded",
        "data": {"object": {
            "id": "in_test_1",
            "object": "invoice",
            "customer_email": email,
            "customer": customer,
            "lines": {
                "object": "list",
                "data": [{
                    "id": "il_test_1",
                    "object": "line_item",
                    "price": {"id": "price_monthly", "object": "price", "recurring": {"interval": interval}},
                }],
            },
        }},
    }


def test_signed_invoice_event_emails_door_code(client):
    with mail.record_messages() as outbox:
        resp = _signed_post(client, _stripe_invoice_event())
    assert resp.status_code == 200
    assert resp.get_json() == {"received": True}
    assert len(outbox) == 1
    assert outbox[0].recipients == ["guest@example.com"]
    assert re.search(r"door code is: \d{6}", outbox[0].body)


def test_signed_invoice_event_looks_up_customer(client, monkeypatch):
    monkeypatch.setattr(
        stripe.Customer, "retrieve",
        lambda customer_id, **kw: stripe.Customer.construct_from(
            {"id": customer_id, "object": "customer", "email": "found@example.com"}, "sk_test_dummy"
        ),
    )
    with mail.record_messages() as outbox:
        resp = _signed_post(client, _stripe_invoice_event(email=None, customer="cus_42"))
    assert resp.status_code == 200
    assert outbox[0].recipients == ["found@example.com"]


def test_signed_with_another_secret_is_rejected(client):
    resp = _signed_post(client, _stripe_invoice_event(), secret="whsec_other")
    assert resp.status_code == 400


def test_stripe_value_walks_stripe_objects():
    invoice = stripe.Invoice.construct_from(_stripe_invoice_event("week")["data"]["object"], "sk_test_dummy")
    assert stripe_value(invoice, "lines", "data", 0, "price", "recurring", "interval") == "week"
    assert stripe_value(invoice, "lines", "data", 3, "price") is None
    assert stripe_value(invoice, "subscription_details", "metadata") is None
    assert stripe_value(invoice, "customer", "email") is None
