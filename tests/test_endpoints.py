from __future__ import annotations

from fastapi.testclient import TestClient


def test_missing_or_wrong_auth_is_401(app):
    client = TestClient(app)
    for headers in ({}, {"auth": "wrong"}):
        r = client.get("/table/", headers=headers)
        assert r.status_code == 401
        assert r.json() == {"code": 401, "message": "Unauthorized"}

    r = client.post("/backup/", json={"method": "create"}, headers={"auth": "wrong"})
    assert r.status_code == 401


def test_overview_and_table_listing(http):
    r = http.get("/")
    assert r.status_code == 200
    assert r.json() == {"code": 200, "tables": {"main": {}, "test": {}}, "backups": {}}

    r = http.get("/table/")
    assert r.json() == {"code": 200, "data": {"main": {}, "test": {}}}


def test_set_get_delete_path(http):
    r = http.post("/table/main", json={"id": "a.b", "value": 5})
    assert r.status_code == 200
    assert r.json() == {"table": "main", "data": {"a": {"b": 5}}}

    r = http.get("/table/main", params={"id": "a.b"})
    assert r.json() == {"table": "main", "id": "a.b", "value": 5}

    r = http.get("/table/main")
    assert r.json() == {"a": {"b": 5}}

    r = http.request("DELETE", "/table/main", json={"id": "a"})
    assert r.json() == {"table": "main", "data": {}, "success": True}

    r = http.get("/table/main", params={"id": "a.b"})
    assert r.status_code == 404
    assert r.json()["code"] == 404


def test_delete_whole_table(http):
    http.post("/table/test", json={"id": "x", "value": [1, 2]})
    r = http.request("DELETE", "/table/test")
    assert r.json() == {"table": "test", "data": {}, "success": True}
    assert http.get("/table/test").json() == {}


def test_delete_missing_path_reports_false(http):
    r = http.request("DELETE", "/table/main", json={"id": "ghost"})
    assert r.json() == {"table": "main", "data": {}, "success": False}


def test_zero_reads_as_absent(http):
    http.post("/table/main", json={"id": "n", "value": 0})
    assert http.get("/table/main", params={"id": "n"}).status_code == 404


def test_unknown_table_and_bad_input(http):
    assert http.get("/table/ghost").status_code == 404
    assert http.post("/table/ghost", json={"id": "a", "value": 1}).status_code == 404

    r = http.post("/table/main", json={"value": 1})
    assert r.status_code == 400
    assert r.json()["code"] == 400

    r = http.post("/table/main", json={"id": "a..b", "value": 1})
    assert r.status_code == 400


def test_backup_lifecycle(http):
    http.post("/table/main", json={"id": "x", "value": 1})

    r = http.post("/backup/", json={"method": "create"})
    body = r.json()
    assert body["code"] == 200
    assert body["success"] is True
    backup_id = body["id"]

    r = http.get(f"/backup/{backup_id}")
    assert r.json() == {"code": 200, "id": backup_id, "tables": {"main": {"x": 1}, "test": {}}}

    r = http.get(f"/backup/{backup_id}", params={"table": "main"})
    assert r.json() == {"code": 200, "id": backup_id, "table": "main", "data": {"x": 1}}

    http.post("/table/main", json={"id": "x", "value": 2})
    r = http.post(f"/backup/{backup_id}", json={"method": "restore"})
    assert r.json() == {"code": 200, "message": "Restore from backup was successfully", "success": True}
    assert http.get("/table/main").json() == {"x": 1}

    r = http.post(f"/backup/{backup_id}", json={"method": "restore", "table": "test"})
    assert r.json()["table"] == "test"

    assert http.get("/").json()["backups"] == {backup_id: {"main": {"x": 1}, "test": {}}}
    assert http.get("/backup/").json()["data"] == {backup_id: {"main": {"x": 1}, "test": {}}}

    r = http.delete(f"/backup/{backup_id}", params={"table": "test"})
    assert r.json()["success"] is True
    assert r.json()["table"] == "test"

    r = http.delete(f"/backup/{backup_id}")
    assert r.json() == {
        "code": 200,
        "message": f'Backup "{backup_id}" was deleted successfully',
        "id": backup_id,
        "success": True,
    }
    assert http.get(f"/backup/{backup_id}").status_code == 404


def test_backup_method_errors(http):
    assert http.post("/backup/", json={"method": "restore"}).status_code == 400
    assert http.post("/backup/", json={}).status_code == 400

    backup_id = http.post("/backup/", json={"method": "create"}).json()["id"]
    r = http.post(f"/backup/{backup_id}", json={"method": "create"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid usage"

    r = http.post(f"/backup/{backup_id}", json={"method": "explode"})
    assert r.json() == {"code": 400, "message": "Invalid method"}

    assert http.post("/backup/nope", json={"method": "restore"}).status_code == 404
    r = http.post(f"/backup/{backup_id}", json={"method": "restore", "table": "ghost"})
    assert r.status_code == 404
    assert http.delete("/backup/nope").status_code == 404


def test_delete_all_backups(http):
    ids = [http.post("/backup/", json={"method": "create"}).json()["id"] for _ in range(2)]
    r = http.delete("/backup/")
    assert r.json()["id"] == sorted(ids)
    assert http.get("/backup/").json()["data"] == {}


def test_non_ascii_digit_segment_reads_as_absent(http):
    http.post("/table/main", json={"id": "a", "value": [1, 2]})
    r = http.get("/table/main", params={"id": "a.²"})
    assert r.status_code == 404
    assert r.json()["code"] == 404


def test_restore_from_corrupt_snapshot_reports_failure(http, memory_storage):
    http.post("/table/main", json={"id": "x", "value": 1})
    backup_id = http.post("/backup/", json={"method": "create"}).json()["id"]
    http.post("/table/main", json={"id": "x", "value": 2})
    memory_storage.store_raw(f"backups/{backup_id}/main.json", "{not json")

    r = http.post(f"/backup/{backup_id}", json={"method": "restore"})
    assert r.status_code == 200
    assert r.json() == {"code": 200, "message": "Restore from backup failed", "success": False}
    assert http.get("/table/main").json() == {"x": 2}


def test_backup_table_delete_cannot_reach_live_tables(settings):
    from app import create_app

    with TestClient(create_app(settings), headers={"auth": settings.auth}) as client:
        client.post("/table/main", json={"id": "x", "value": 1})
        backup_id = client.post("/backup/", json={"method": "create"}).json()["id"]

        r = client.delete(f"/backup/{backup_id}", params={"table": "../../tables/main"})
        assert r.status_code == 200
        assert r.json()["success"] is False

        r = client.get("/table/main")
        assert r.status_code == 200
        assert r.json() == {"x": 1}
        assert client.get(f"/backup/{backup_id}").json()["tables"] == {"main": {"x": 1}, "test": {}}
