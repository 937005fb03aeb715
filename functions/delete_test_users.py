"""
One-off admin endpoint that deletes test accounts by id.

POST {"userIds": [...], "secretKey": "..."} and get back one result per
id in input order. Run it next to the app with the service-role key in
the environment:

    python -m functions.delete_test_users --port 8002
"""

from __future__ import annotations

import argparse
import json
import sys
import urllib.error
import urllib.request
from collections.abc import Callable
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from logs import get_logger  # noqa: E402
from supabase_client import get_admin_client, get_secret  # noqa: E402

SECRET_KEY = "delete-test-accounts-2025"
FUNCTION_PATH = "/delete-test-users"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

LOGGER = get_logger("delete_test_users")


def handle_delete_request(
    body: bytes | str,
    delete_user: Callable[[str], Any],
) -> tuple[int, dict[str, Any]]:
    """Validate the request and delete each account. Returns (status, payload)."""
    try:
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        payload = json.loads(body or "null")
        if payload is None:
            raise ValueError("Request body is required")
        if not isinstance(payload, dict):
            payload = {}
        if payload.get("secretKey") != SECRET_KEY:
            return 403, {"error": "Invalid secret key"}
        user_ids = payload.get("userIds")
        if not isinstance(user_ids, list) or not user_ids:
            return 400, {"error": "userIds array required"}

        results: list[dict[str, Any]] = []
        for user_id in user_ids:
            LOGGER.info(f"Deleting user: {user_id}")
            try:
                delete_user(str(user_id))
            except Exception as err:
                LOGGER.error(f"Failed to delete {user_id}: {err}")
                results.append({"userId": user_id, "success": False, "error": str(err)})
            else:
                LOGGER.info(f"Successfully deleted: {user_id}")
                results.append({"userId": user_id, "success": True})
        return 200, {"results": results}
    except Exception as err:
        LOGGER.error(f"Error: {err}")
        return 500, {"error": str(err) or "Unknown error"}


class DeleteTestUsersHandler(BaseHTTPRequestHandler):
    function_path = FUNCTION_PATH
    delete_user: Callable[[str], Any] | None = None

    def _send(self, code: int, body: bytes, content_type: str) -> None:
        self.send_response(code)
        for key, value in CORS_HEADERS.items():
            self.send_header(key, value)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_json(self, code: int, payload: dict[str, Any]) -> None:
        self._send(code, json.dumps(payload).encode("utf-8"), "application/json")

    def do_OPTIONS(self) -> None:
        self._send(200, b"ok", "text/plain")

    def do_POST(self) -> None:
        if urlparse(self.path).path != self.function_path:
            self._send_json(404, {"error": "not_found"})
            return
        try:
            length = int(self.headers.get("Content-Length", "0"))
        except ValueError:
            length = -1
        if length < 0:
            self._send_json(400, {"error": "Invalid Content-Length"})
            return
        body = self.rfile.read(length)
        delete_user = type(self).delete_user
        if delete_user is None:
            self._send_json(500, {"error": "Admin client is not configured"})
            return
        code, payload = handle_delete_request(body, delete_user)
        self._send_json(code, payload)

    def log_message(self, format: str, *args: Any) -> None:
        LOGGER.debug(format % args)


def request_deletion(user_ids: list[str], secret_key: str, *, url: str | None = None) -> tuple[int, dict[str, Any]]:
    """Call a running delete-test-users server and return (status, payload)."""
    url = url or get_secret("DELETE_TEST_USERS_URL", f"http://localhost:8002{FUNCTION_PATH}")
    body = json.dumps({"userIds": user_ids, "secretKey": secret_key}).encode("utf-8")
    req = urllib.request.Request(
        url,
        data=body,
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    try:
        with urllib.request.urlopen(req, timeout=30) as resp:
            raw = resp.read().decode("utf-8")
            status = resp.getcode()
    except urllib.error.HTTPError as exc:
        raw = exc.read().decode("utf-8")
        status = exc.code
    try:
        payload = json.loads(raw or "{}")
    except json.JSONDecodeError:
        payload = {"error": raw}
    return status, payload if isinstance(payload, dict) else {"error": raw}


def admin_delete_user() -> Callable[[str], Any]:
    client = get_admin_client()
    return lambda user_id: client.auth.admin.delete_user(user_id)


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the delete-test-users admin function.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=int(get_secret("DELETE_TEST_USERS_PORT", "8002")))
    parser.add_argument("--path", default=FUNCTION_PATH)
    args = parser.parse_args()

    DeleteTestUsersHandler.function_path = args.path
    DeleteTestUsersHandler.delete_user = staticmethod(admin_delete_user())
    server = HTTPServer((args.host, args.port), DeleteTestUsersHandler)
    LOGGER.info(f"delete-test-users listening on http://{args.host}:{args.port}{args.path}")
    server.serve_forever()


if __name__ == "__main__":
    main()
