import os
import time

import pytest
from fastapi.testclient import TestClient

from textify.config import Settings
from textify.infrastructure.kv.memory_kv_store import InMemoryKeyValueStore
from textify.main import create_app


PHONE = "+15551234567"


class FakeSMS:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send(self, body: str, from_: str, to: str) -> str:
        if self.fail:
            raise RuntimeError("Twilio 21211: invalid 'To' number")
        self.sent.append((body, from_, to))
        return "SM123"


def make_settings(tmp_path, **overrides):
    values = dict(
        UPLOAD_DIR=str(tmp_path / "uploads"),
        PUBLIC_DIR=str(tmp_path / "public"),
        TWILIO_ACCOUNT_SID="AC123",
        TWILIO_AUTH_TOKEN="token",
        TWILIO_PHONE_NUMBER="+15550000000",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def sms():
    return FakeSMS()


@pytest.fixture
def otp_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def client(tmp_path, sms, otp_store):
    app = create_app(settings=make_settings(tmp_path), sms_sender=sms, otp_store=otp_store)
    with TestClient(app) as c:
        yield c


def test_health(client):
    res = client.get("/api")
    assert res.status_code == 200
    assert res.json() == {"message": "Textify backend API is running."}


def test_send_and_verify_otp(client, sms, otp_store):
    res = client.post("/api/send-otp", json={"phoneNumber": PHONE})
    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "OTP sent successfully."}

    code = otp_store.get(PHONE)["code"]
    assert sms.sent[0][2] == PHONE
    assert code in sms.sent[0][0]

    res = client.post("/api/verify-otp", json={"phoneNumber": PHONE, "otp": code})
    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "Phone number verified successfully."}

    res = client.post("/api/verify-otp", json={"phoneNumber": PHONE, "otp": code})
    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "OTP not found. Please request a new one."}


def test_send_otp_requires_phone(client):
    res = client.post("/api/send-otp", json={})
    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "Phone number is required."}


def test_verify_otp_requires_both_fields(client):
    res = client.post("/api/verify-otp", json={"phoneNumber": PHONE})
    assert res.status_code == 400
    assert res.json()["message"] == "Phone number and OTP are required."


def test_verify_wrong_code(client, otp_store):
    client.post("/api/send-otp", json={"phoneNumber": PHONE})
    wrong = "100000" if otp_store.get(PHONE)["code"] != "100000" else "100001"

    res = client.post("/api/verify-otp", json={"phoneNumber": PHONE, "otp": wrong})

    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "Invalid OTP."}


def test_delivery_failure_hides_provider_details(tmp_path, otp_store):
    app = create_app(settings=make_settings(tmp_path), sms_sender=FakeSMS(fail=True), otp_store=otp_store)
    with TestClient(app) as c:
        res = c.post("/api/send-otp", json={"phoneNumber": PHONE})

    assert res.status_code == 500
    body = res.json()
    assert body == {
        "success": False,
        "message": "Failed to send OTP. Please check the phone number and try again.",
    }
    assert "21211" not in res.text
    assert otp_store.get(PHONE) is not None


def test_profile_create_get_update(client):
    res = client.post("/api/profile", data={"name": "A", "phoneNumber": "+1"})
    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "Profile updated successfully."}

    res = client.get("/api/profile/+1")
    assert res.status_code == 200
    assert res.json() == {"success": True, "user": {"name": "A", "about": None, "profilePicture": None}}

    res = client.put("/api/profile/+1", data={"about": "hi"})
    assert res.status_code == 200
    assert res.json()["user"] == {"name": "A", "about": "hi", "profilePicture": None}

    res = client.get("/api/profile/+1")
    assert res.json()["user"] == {"name": "A", "about": "hi", "profilePicture": None}


def test_profile_create_requires_name_and_phone(client):
    res = client.post("/api/profile", data={"name": "A"})
    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "Name and phone number are required."}


def test_profile_picture_is_saved_and_served(client, tmp_path):
    res = client.post(
        "/api/profile",
        data={"name": "A", "phoneNumber": "+1"},
        files={"profilePicture": ("me.png", b"pngbytes", "image/png")},
    )
    assert res.status_code == 200

    path = client.get("/api/profile/+1").json()["user"]["profilePicture"]
    assert path.startswith(str(tmp_path / "uploads"))
    assert path.endswith(".png")

    served = client.get(f"/uploads/{os.path.basename(path)}")
    assert served.status_code == 200
    assert served.content == b"pngbytes"


def test_profile_update_replaces_picture(client):
    client.post("/api/profile", data={"name": "A", "phoneNumber": "+1"})

    res = client.put(
        "/api/profile/+1",
        data={"name": "B"},
        files={"profilePicture": ("new.jpg", b"jpg", "image/jpeg")},
    )

    user = res.json()["user"]
    assert user["name"] == "B"
    assert user["profilePicture"].endswith(".jpg")


def test_profile_unknown_phone_is_404(client):
    res = client.get("/api/profile/+999")
    assert res.status_code == 404
    assert res.json() == {"success": False, "message": "User not found."}

    res = client.put("/api/profile/+999", data={"name": "X"})
    assert res.status_code == 404


def test_cors_allows_listed_origin_only(client):
    res = client.get("/api", headers={"Origin": "http://localhost:3000"})
    assert res.headers.get("access-control-allow-origin") == "http://localhost:3000"

    res = client.get("/api", headers={"Origin": "https://evil.example"})
    assert "access-control-allow-origin" not in res.headers


def test_startup_fails_without_twilio_credentials(tmp_path):
    settings = make_settings(tmp_path, TWILIO_ACCOUNT_SID="", TWILIO_PHONE_NUMBER="")
    app = create_app(settings=settings)

    with pytest.raises(RuntimeError, match="TWILIO_ACCOUNT_SID"):
        with TestClient(app):
            pass


def test_public_dir_is_served_when_present(tmp_path, sms):
    public = tmp_path / "public"
    public.mkdir()
    (public / "index.html").write_text("<h1>Textify</h1>")
    app = create_app(settings=make_settings(tmp_path), sms_sender=sms)

    with TestClient(app) as c:
        res = c.get("/")
        assert res.status_code == 200
        assert "Textify" in res.text
        assert c.get("/api").status_code == 200


class Ticker:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_background_sweep_evicts_expired_entries(tmp_path, sms):
    otp_store = InMemoryKeyValueStore(clock=Ticker())
    otp_store.set(PHONE, {"code": "123456", "expires_at": "2024-01-01T00:00:00"}, ttl_seconds=0)
    otp_store.set("+1999", {"code": "654321", "expires_at": "2024-01-01T00:00:00"}, ttl_seconds=3600)
    assert len(otp_store) == 2
    app = create_app(settings=make_settings(tmp_path, STORE_SWEEP_INTERVAL_SEC=0), sms_sender=sms, otp_store=otp_store)

    with TestClient(app):
        assert wait_until(lambda: len(otp_store) == 1)
        assert otp_store.get("+1999") is not None


class FlakyStore(InMemoryKeyValueStore):
    def __init__(self, clock):
        super().__init__(clock=clock)
        self.calls = 0

    def purge_expired(self) -> int:
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("sweep blew up")
        return super().purge_expired()


def test_background_sweep_survives_a_failing_store(tmp_path, sms):
    clock = Ticker()
    otp_store = FlakyStore(clock)
    otp_store.set(PHONE, {"code": "123456", "expires_at": "2024-01-01T00:00:00"}, ttl_seconds=0)
    profile_store = InMemoryKeyValueStore(clock=clock)
    profile_store.set("+1", {"name": "A", "about": None, "picture_path": None}, ttl_seconds=0)
    app = create_app(
        settings=make_settings(tmp_path, STORE_SWEEP_INTERVAL_SEC=0),
        sms_sender=sms,
        otp_store=otp_store,
        profile_store=profile_store,
    )

    with TestClient(app):
        assert wait_until(lambda: otp_store.calls >= 2 and len(otp_store) == 0)
        assert len(profile_store) == 0


def test_upload_dir_is_created_at_startup_not_on_build(tmp_path, sms):
    settings = make_settings(tmp_path)
    app = create_app(settings=settings, sms_sender=sms)
    assert not os.path.exists(settings.UPLOAD_DIR)

    with TestClient(app):
        assert os.path.isdir(settings.UPLOAD_DIR)


def test_send_otp_accepts_numeric_phone(client, sms, otp_store):
    res = client.post("/api/send-otp", json={"phoneNumber": 15551234567})

    assert res.status_code == 200
    assert sms.sent[0][2] == "15551234567"
    code = otp_store.get("15551234567")["code"]

    res = client.post("/api/verify-otp", json={"phoneNumber": 15551234567, "otp": code})
    assert res.status_code == 200
