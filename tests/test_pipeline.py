"""Tests for junction.middleware.pipeline: onion composition."""

from junction.http.request import Request
from junction.http.response import Response
from junction.middleware.pipeline import MiddlewarePipeline
from junction.middleware.protocol import Next


def _recorder(calls: list[str], name: str):
    def mw(request: Request, next: Next) -> Response:
        calls.append(f"before-{name}")
        response = next(request)
        calls.append(f"after-{name}")
        return response

    return mw


def _terminal(calls: list[str]) -> Next:
    def handler(request: Request) -> Response:
        calls.append("H")
        return Response("done")

    return handler


class TestOrdering:
    def test_onion_order(self) -> None:
        calls: list[str] = []
        pipeline = MiddlewarePipeline([_recorder(calls, "m1"), _recorder(calls, "m2")])
        response = pipeline.process(Request.build("GET", "/"), _terminal(calls))
        assert response.text == "done"
        assert calls == ["before-m1", "before-m2", "H", "after-m2", "after-m1"]

    def test_empty_pipeline_calls_terminal(self) -> None:
        calls: list[str] = []
        pipeline = MiddlewarePipeline()
        assert len(pipeline) == 0
        pipeline.process(Request.build("GET", "/"), _terminal(calls))
        assert calls == ["H"]

    def test_handler_runs_once(self) -> None:
        calls: list[str] = []
        pipeline = MiddlewarePipeline([_recorder(calls, "a"), _recorder(calls, "b")])
        pipeline.process(Request.build("GET", "/"), _terminal(calls))
        assert calls.count("H") == 1


class TestShortCircuit:
    def test_short_circuit_skips_downstream(self) -> None:
        calls: list[str] = []

        def deny(request: Request, next: Next) -> Response:
            calls.append("deny")
            return Response.json({"error": "Unauthorized"}, status=401)

        pipeline = MiddlewarePipeline([deny, _recorder(calls, "later")])
        response = pipeline.process(Request.build("GET", "/"), _terminal(calls))
        assert response.status == 401
        assert calls == ["deny"]

    def test_outer_middleware_sees_short_circuit_response(self) -> None:
        calls: list[str] = []

        def deny(request: Request, next: Next) -> Response:
            return Response("nope", status=403)

        pipeline = MiddlewarePipeline([_recorder(calls, "outer"), deny])
        response = pipeline.process(Request.build("GET", "/"), _terminal(calls))
        assert response.status == 403
        assert calls == ["before-outer", "after-outer"]


class TestMutation:
    def test_request_mutation_visible_downstream(self) -> None:
        def tag(request: Request, next: Next) -> Response:
            request.state["user"] = "ada"
            return next(request)

        def handler(request: Request) -> Response:
            return Response(request.state["user"])

        pipeline = MiddlewarePipeline([tag])
        assert pipeline.process(Request.build("GET", "/"), handler).text == "ada"

    def test_response_modification(self) -> None:
        def stamp(request: Request, next: Next) -> Response:
            return next(request).with_header("X-Stamp", "1")

        pipeline = MiddlewarePipeline([stamp])
        response = pipeline.process(Request.build("GET", "/"), lambda request: Response("ok"))
        assert response.header("X-Stamp") == "1"


class TestClassEntries:
    def test_class_instantiated_per_build(self) -> None:
        instances: list[object] = []

        class Counting:
            def __init__(self) -> None:
                instances.append(self)
                self.seen = 0

            def __call__(self, request: Request, next: Next) -> Response:
                self.seen += 1
                return next(request).with_header("X-Seen", str(self.seen))

        pipeline = MiddlewarePipeline([Counting])
        first = pipeline.process(Request.build("GET", "/"), lambda request: Response("ok"))
        second = pipeline.process(Request.build("GET", "/"), lambda request: Response("ok"))
        assert len(instances) == 2
        assert first.header("X-Seen") == "1"
        assert second.header("X-Seen") == "1"

    def test_building_has_no_side_effects(self) -> None:
        calls: list[str] = []
        pipeline = MiddlewarePipeline([_recorder(calls, "m")])
        pipeline.then(_terminal(calls))
        assert calls == []

    def test_middleware_property(self) -> None:
        def a(request: Request, next: Next) -> Response:
            return next(request)

        pipeline = MiddlewarePipeline([a])
        assert pipeline.middleware == (a,)
