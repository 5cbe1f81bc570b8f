"""Integration tests for the user and device routers via TestClient."""

import io

from openpyxl import load_workbook


def _register_user(client, username="alice"):
    resp = client.post(
        "/user/register",
        json={"username": username, "password": "S3cret!pw", "email": f"{username}@x.com"},
    )
    assert resp.status_code == 201
    return resp.json()["id"]


def _register_device(client, device_id="dev-001", **extra):
    body = {"device_id": device_id, "name": f"Device {device_id}", "os": "android", **extra}
    return client.post("/device", json=body)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


# ---------------------------------------------------------------------------
# /user
# ---------------------------------------------------------------------------


def test_register_and_lookup_user(client):
    user_id = _register_user(client)

    resp = client.get("/user/alice")
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == user_id
    assert body["is_locked"] == "LOCKED"
    assert body["scopes"] == ["web"]
    assert "password" not in body


def test_register_duplicate_user_conflicts(client):
    _register_user(client)
    resp = client.post(
        "/user/register",
        json={"username": "alice", "password": "x", "email": "other@x.com"},
    )
    assert resp.status_code == 409


def test_unknown_user_404(client):
    assert client.get("/user/nobody").status_code == 404


# ---------------------------------------------------------------------------
# /device
# ---------------------------------------------------------------------------


def test_register_device_with_grants_and_user(client):
    user_id = _register_user(client)
    resp = _register_device(client, grants=["read", "write"], user_id=user_id)

    assert resp.status_code == 201
    created = resp.json()
    assert set(created) == {"id", "device_secret"}

    detail = client.get(f"/device/{created['id']}").json()
    assert set(detail["grants"]) == {"read", "write"}
    assert detail["is_online"] == "ONLINE"
    assert detail["is_locked"] == "UNLOCKED"
    assert "device_secret" not in detail


def test_register_device_duplicate_conflicts(client):
    assert _register_device(client).status_code == 201
    assert _register_device(client).status_code == 409


def test_register_device_unknown_user(client):
    resp = _register_device(client, grants=["read"], user_id=9999)
    assert resp.status_code == 400

    # Nothing from the failed registration is left behind
    assert client.get("/device").json()["total"] == 0

    retry = _register_device(client, grants=["read"])
    assert retry.status_code == 201
    assert retry.json()["device_secret"]
    detail = client.get(f"/device/{retry.json()['id']}").json()
    assert detail["grants"] == ["read"]


def test_register_device_rejects_empty_fields(client):
    assert client.post("/device", json={"device_id": "", "name": "X"}).status_code == 422
    assert client.post("/device", json={"device_id": "dev-001", "name": ""}).status_code == 422
    assert client.get("/device").json()["total"] == 0


def test_device_detail_404(client):
    assert client.get("/device/9999").status_code == 404


def test_list_devices_paginates_and_filters(client):
    for i in range(12):
        _register_device(client, f"dev-{i:03d}")

    page = client.get("/device", params={"page_number": 2, "page_size": 5}).json()
    assert page["total"] == 12
    assert len(page["data"]) == 5
    assert (page["page_number"], page["page_size"]) == (2, 5)
    assert all("device_secret" not in row for row in page["data"])

    filtered = client.get("/device", params={"name": "dev-01"}).json()
    assert filtered["total"] == 2


def test_list_devices_bad_page_size(client):
    assert client.get("/device", params={"page_size": 0}).status_code == 400


def test_lock_and_unlock(client):
    device_pk = _register_device(client).json()["id"]

    assert client.put(f"/device/{device_pk}/lock").status_code == 200
    assert client.get(f"/device/{device_pk}").json()["is_locked"] == "LOCKED"

    assert client.put(f"/device/{device_pk}/unlock").status_code == 200
    assert client.get(f"/device/{device_pk}").json()["is_locked"] == "UNLOCKED"

    assert client.put("/device/9999/lock").status_code == 404


def test_update_device(client):
    device_pk = _register_device(client).json()["id"]

    resp = client.put("/device", json={"id": device_pk, "is_online": "OFFLINE", "engine": "blink"})
    assert resp.json() == {"id": device_pk}

    detail = client.get(f"/device/{device_pk}").json()
    assert detail["is_online"] == "OFFLINE"
    assert detail["engine"] == "blink"
    assert detail["os"] == "android"

    assert client.put("/device", json={"id": 9999, "os": "ios"}).status_code == 404


def test_link_user_twice(client):
    user_id = _register_user(client)
    device_pk = _register_device(client).json()["id"]

    assert client.post(f"/device/{device_pk}/users/{user_id}").status_code == 200
    assert client.post(f"/device/{device_pk}/users/{user_id}").status_code == 200


def test_batch_delete(client):
    user_id = _register_user(client)
    keep = _register_device(client, "dev-keep").json()["id"]
    gone = _register_device(client, "dev-gone", grants=["read"], user_id=user_id).json()["id"]

    resp = client.request("DELETE", "/device", json={"ids": [gone, 9999]})
    assert resp.status_code == 200
    assert resp.json() == {}

    assert client.get(f"/device/{gone}").status_code == 404
    assert client.get(f"/device/{keep}").status_code == 200


def test_export_devices(client):
    _register_device(client, "dev-001")
    _register_device(client, "dev-002")

    resp = client.get("/device/export")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )

    ws = load_workbook(io.BytesIO(resp.content)).active
    rows = list(ws.iter_rows(values_only=True))
    assert rows[0][1] == "Device ID"
    assert [r[1] for r in rows[1:]] == ["dev-001", "dev-002"]
