"""
delete-test-users admin function: request validation and the HTTP server.
"""

from __future__ import annotations

import http.client
import json
import threading
from http.server import HTTPServer

from functions.delete_test_users import (
    FUNCTION_PATH,
    SECRET_KEY,
    DeleteTestUsersHandler,
    handle_delete_request,
    request_deletion,
)


def _body(**payload) -> bytes:
    return json.dumps(payload).encode("utf-8")


def test_rejects_bad_secret_and_missing_ids() -> None:
    deleted: list[str] = []
    status, payload = handle_delete_request(_body(userIds=["a"], secretKey="wrong"), deleted.append)
    assert (status, payload) == (403, {"error": "Invalid secret key"})
    status, payload = handle_delete_request(_body(secretKey=SECRET_KEY), deleted.append)
    assert (status, payload) == (400, {"error": "userIds array required"})
    status, _ = handle_delete_request(_body(userIds=[], secretKey=SECRET_KEY), deleted.append)
    assert status == 400
    assert deleted == []


def test_reports_each_user_in_order() -> None:
    deleted: list[str] = []

    def delete_user(user_id: str) -> None:
        if user_id == "missing":
            raise RuntimeError("User not found")
        deleted.append(user_id)

    status, payload = handle_delete_request(
        _body(userIds=["u1", "missing", "u2"], secretKey=SECRET_KEY), delete_user
    )
    assert status == 200
    assert payload["results"] == [
        {"userId": "u1", "success": True},
        {"userId": "missing", "success": False, "error": "User not found"},
        {"userId": "u2", "success": True},
    ]
    assert deleted == ["u1", "u2"]


def test_malformed_body_is_a_server_error() -> None:
    assert handle_delete_request(b"{not json", lambda _: None)[0] == 500
    assert handle_delete_request(b"", lambda _: None)[0] == 500


def test_non_object_body_has_no_secret() -> None:
    deleted: list[str] = []
    for body in (b"[1, 2]", b"5", b"\"userIds\""):
        assert handle_delete_request(body, deleted.append) == (403, {"error": "Invalid secret key"})
    assert deleted == []


def test_http_round_trip() -> None:
    deleted: list[str] = []
    handler = type("Handler", (DeleteTestUsersHandler,), {"delete_user": staticmethod(deleted.append)})
    server = HTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    base = f"http://127.0.0.1:{server.server_port}"
    try:
        status, payload = request_deletion(["u1"], SECRET_KEY, url=base + FUNCTION_PATH)
        assert status == 200
        assert payload["results"] == [{"userId": "u1", "success": True}]
        assert deleted == ["u1"]

        status, payload = request_deletion(["u1"], "nope", url=base + FUNCTION_PATH)
        assert (status, payload) == (403, {"error": "Invalid secret key"})

        status, _ = request_deletion(["u1"], SECRET_KEY, url=base + "/elsewhere")
        assert status == 404

        conn = http.client.HTTPConnection("127.0.0.1", server.server_port, timeout=10)
        try:
            conn.putrequest("POST", FUNCTION_PATH)
            conn.putheader("Content-Length", "abc")
            conn.endheaders()
            resp = conn.getresponse()
            assert resp.status == 400
            assert json.loads(resp.read()) == {"error": "Invalid Content-Length"}
        finally:
            conn.close()
        assert deleted == ["u1"]
    finally:
        server.shutdown()
        server.server_close()


if __name__ == "__main__":
    test_rejects_bad_secret_and_missing_ids()
    test_reports_each_user_in_order()
    test_malformed_body_is_a_server_error()
    test_non_object_body_has_no_secret()
    test_http_round_trip()
    print("PASS")
