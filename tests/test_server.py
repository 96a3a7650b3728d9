"""HTTP surface over the engine."""

import pytest

from flowstream.server import create_app


@pytest.fixture
def http(engine):
    app = create_app(engine)
    app.config["TESTING"] = True
    return app.test_client()


def test_health(http):
    assert http.get("/health").get_json() == {"status": "ok"}


def test_start_requires_user_pubkey(http):
    resp = http.post("/start", json={})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "missing_user_pubkey"


def test_start_status_logs_stop(http, engine, payer, uploader):
    resp = http.post("/start", json={"userPubkey": payer, "uploaderPubkey": uploader})
    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True, "status": "starting"}

    engine.execute_transfer()

    status = http.get("/status").get_json()
    assert status == {"active": True, "firstTransferConfirmed": True, "transferCount": 1}

    logs = http.get("/logs").get_json()
    assert logs[0] == {"text": "▶ Stream started"}
    assert logs[1]["txId"] == engine.last_signature

    assert http.post("/stop").get_json() == {"ok": True}
    assert http.get("/status").get_json()["active"] is False


def test_second_start_conflicts(http, payer):
    http.post("/start", json={"userPubkey": payer})
    resp = http.post("/start", json={"userPubkey": payer})

    assert resp.status_code == 409
    assert resp.get_json()["error"] == "already_running"


def test_invalid_wallet_is_bad_request(http):
    resp = http.post("/start", json={"userPubkey": "nope!"})

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "invalid_account"
    assert body["role"] == "payer"
