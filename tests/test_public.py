from utils.mail import mail


def test_pages_render(client):
    for path in ("/", "/apply", "/terms", "/thank-you?session_id=cs_test_1"):
        resp = client.get(path)
        assert resp.status_code == 200, path


def test_apply_page_wires_the_wizard(client):
    html = client.get("/apply").get_data(as_text=True)
    assert "/api/otp/start" in html
    assert "/api/otp/verify" in html
    assert "/api/identity/status" in html
    assert "/api/checkout" in html


def test_ok(client):
    assert client.get("/api/ok").get_json() == {"ok": True}


def test_test_email_info(client):
    body = client.get("/api/test-email", query_string={"to": "Ops <ops@relaxinn.test>"}).get_json()
    assert body["senderDomain"] == "relaxinn.test"
    assert body["testRecipient"] == "ops@relaxinn.test"
    assert "sendAttempted" not in body


def test_test_email_without_recipient(client):
    resp = client.get("/api/test-email?send=1")
    assert resp.status_code == 400
    assert resp.get_json()["sendAttempted"] is False


def test_test_email_send(client):
    with mail.record_messages() as outbox:
        body = client.get("/api/test-email?send=1&to=ops@relaxinn.test").get_json()
    assert body["sent"] is True
    assert outbox[0].recipients == ["ops@relaxinn.test"]
    assert outbox[0].reply_to == "desk@relaxinn.test"


def test_apply_page_drops_failed_identity_session(client):
    html = client.get("/apply").get_data(as_text=True)
    assert "j.status === 'requires_input' || j.status === 'canceled'" in html
    assert "state.idSession = '';" in html
