"""Unit tests for app.clients.user_api with httpx.MockTransport: paths, bodies and error mapping."""

import json
import unittest

import httpx

from app.clients.user_api import ApiError, UserApiClient

USER = {
    "id": "65a1f0c2e4b0a1b2c3d4e5f6",
    "user_id": "alice",
    "email": "a@x.com",
    "created_at": "2024-01-01T00:00:00Z",
    "updated_at": "2024-01-01T00:00:00Z",
}


class RecordingTransport:
    """Build a MockTransport that records requests and replies with a fixed response."""

    def __init__(self, status_code: int = 200, body: object = None) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = status_code
        self.body = USER if body is None else body

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    def client(self) -> UserApiClient:
        return UserApiClient(
            base_url="http://users.test", transport=httpx.MockTransport(self.handler)
        )


class TestRequests(unittest.TestCase):
    """Each method hits the right method and path."""

    def test_create_posts_json(self) -> None:
        rec = RecordingTransport(201)
        with rec.client() as client:
            out = client.create_user("alice", "a@x.com", "secret1")
        self.assertEqual(out["user_id"], "alice")
        req = rec.requests[0]
        self.assertEqual(req.method, "POST")
        self.assertEqual(req.url.path, "/api/v1/users")
        self.assertEqual(
            json.loads(req.content),
            {"user_id": "alice", "email": "a@x.com", "password": "secret1"},
        )

    def test_search_paths_encode_parameters(self) -> None:
        rec = RecordingTransport()
        with rec.client() as client:
            client.get_user_by_user_id("al ice")
            client.get_user_by_email("a+b@x.com")
        self.assertEqual(rec.requests[0].url.path, "/api/v1/users/search")
        self.assertEqual(rec.requests[0].url.params["user_id"], "al ice")
        self.assertEqual(rec.requests[1].url.path, "/api/v1/users/search/email")
        self.assertEqual(rec.requests[1].url.params["email"], "a+b@x.com")

    def test_update_sends_only_given_fields(self) -> None:
        rec = RecordingTransport()
        with rec.client() as client:
            client.update_user(USER["id"], email="new@x.com")
        req = rec.requests[0]
        self.assertEqual(req.method, "PUT")
        self.assertEqual(req.url.path, f"/api/v1/users/{USER['id']}")
        self.assertEqual(json.loads(req.content), {"email": "new@x.com"})

    def test_update_without_changes_makes_no_request(self) -> None:
        rec = RecordingTransport()
        with rec.client() as client:
            with self.assertRaises(ValueError):
                client.update_user(USER["id"], email="")
        self.assertEqual(rec.requests, [])

    def test_list_delete_and_health(self) -> None:
        rec = RecordingTransport(body={"users": [USER], "count": 1})
        with rec.client() as client:
            self.assertEqual(client.get_users()["count"], 1)
            client.delete_user(USER["id"])
            client.check_health()
        self.assertEqual(
            [(r.method, r.url.path) for r in rec.requests],
            [
                ("GET", "/api/v1/users"),
                ("DELETE", f"/api/v1/users/{USER['id']}"),
                ("GET", "/health"),
            ],
        )


class TestErrors(unittest.TestCase):
    """Non-2xx responses and transport failures raise ApiError."""

    def test_server_error_message_is_used(self) -> None:
        rec = RecordingTransport(409, {"error": "user with this user_id already exists"})
        with rec.client() as client:
            with self.assertRaises(ApiError) as ctx:
                client.create_user("alice", "a@x.com", "secret1")
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(ctx.exception.message, "user with this user_id already exists")

    def test_error_without_body_falls_back_to_status(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(503, content=b""))
        with UserApiClient(base_url="http://users.test", transport=transport) as client:
            with self.assertRaises(ApiError) as ctx:
                client.get_users()
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(ctx.exception.message, "HTTP 503: Service Unavailable")

    def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with UserApiClient(base_url="http://users.test", transport=httpx.MockTransport(handler)) as client:
            with self.assertRaises(ApiError) as ctx:
                client.get_users()
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.message, "Network error occurred")


if __name__ == "__main__":
    unittest.main()
