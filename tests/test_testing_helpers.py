"""Tests for junction.testing: TestClient."""

from junction.http.request import Request
from junction.routing.router import Router
from junction.testing import TestClient


def _echo(request: Request) -> dict[str, object]:
    return {
        "method": request.method,
        "path": request.path,
        "input": request.all(),
        "content_type": request.content_type,
        "ip": request.ip,
    }


def _router() -> Router:
    router = Router()
    router.any("/echo", _echo)
    return router


class TestTestClient:
    def test_enter_compiles_router(self) -> None:
        router = _router()
        with TestClient(router):
            assert router.is_frozen

    def test_get_with_query(self) -> None:
        with TestClient(_router()) as client:
            response = client.get("/echo", query={"q": "x"})
        assert response.status == 200
        assert response.json_body()["input"] == {"q": "x"}

    def test_post_json(self) -> None:
        with TestClient(_router()) as client:
            body = client.post("/echo", json={"name": "Ada"}).json_body()
        assert body["method"] == "POST"
        assert body["input"] == {"name": "Ada"}
        assert body["content_type"] == "application/json"

    def test_post_form(self) -> None:
        with TestClient(_router()) as client:
            body = client.post("/echo", form={"name": "Ada"}).json_body()
        assert body["content_type"] == "application/x-www-form-urlencoded"

    def test_explicit_content_type_kept(self) -> None:
        with TestClient(_router()) as client:
            body = client.put(
                "/echo",
                json={"a": 1},
                headers={"Content-Type": "application/vnd.api+json"},
            ).json_body()
        assert body["content_type"] == "application/vnd.api+json"

    def test_other_verbs(self) -> None:
        with TestClient(_router()) as client:
            assert client.patch("/echo", json={}).json_body()["method"] == "PATCH"
            assert client.delete("/echo").json_body()["method"] == "DELETE"
            assert client.options("/echo").status == 405

    def test_client_address(self) -> None:
        with TestClient(_router(), client_address=("192.0.2.1", 4000)) as client:
            assert client.get("/echo").json_body()["ip"] == "192.0.2.1"
