"""
Unit tests for services.generation_client module.

The remote service is simulated with httpx.MockTransport.
"""

import json

import httpx
import pytest

from conftest import run
from quizgen.models.generation import BatchSpec, QuestionType, Strategy
from quizgen.services.generation_client import (
    GenerationServiceClient,
    ServiceNetworkError,
    ServiceResponseError,
    build_payload,
)


def make_client(handler):
    return GenerationServiceClient(
        base_url="http://quiz-service.test/",
        transport=httpx.MockTransport(handler),
    )


async def call_and_close(client, method_name, *args):
    try:
        return await getattr(client, method_name)(*args)
    finally:
        await client.close()


class TestBuildPayload:
    """Tests for build_payload()."""

    def test_build_payload_optimized(self, make_request):
        payload = build_payload(Strategy.OPTIMIZED, make_request(20, difficulty=2, use_cache=False))
        assert payload == {
            "questionType": "mixed",
            "count": 20,
            "difficulty": 2,
            "fastMode": True,
            "useCache": False,
        }

    def test_build_payload_quick(self, make_request):
        payload = build_payload(Strategy.QUICK, make_request(10))
        assert payload == {
            "count": 10,
            "questionType": "mixed",
            "difficulty": 1,
            "fastMode": True,
            "useCache": True,
        }

    def test_build_payload_batch(self, make_request):
        batches = [
            BatchSpec(type=QuestionType.MULTIPLE_CHOICE, count=20, difficulty=1),
            BatchSpec(type=QuestionType.ESSAY, count=8, difficulty=2),
        ]
        payload = build_payload(Strategy.BATCH, make_request(28), batches)
        assert payload == {
            "batches": [
                {"type": "multiple-choice", "count": 20, "difficulty": 1},
                {"type": "essay", "count": 8, "difficulty": 2},
            ]
        }


class TestRequestGeneration:
    """Tests for GenerationServiceClient.request_generation()."""

    def test_request_generation_posts_to_strategy_endpoint(self, make_request):
        seen = {}

        def handler(request: httpx.Request):
            seen["path"] = request.url.path
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "data": {"questions": []}})

        client = make_client(handler)
        result = run(call_and_close(client, "request_generation", Strategy.OPTIMIZED, make_request(20)))

        assert seen["method"] == "POST"
        assert seen["path"] == "/api/quiz-optimized/generate-optimized/material-1"
        assert seen["body"]["count"] == 20
        assert result["success"] is True

    @pytest.mark.parametrize(
        "strategy, suffix",
        [(Strategy.QUICK, "generate-quick"), (Strategy.BATCH, "generate-batch")],
    )
    def test_request_generation_paths(self, make_request, strategy, suffix):
        seen = {}

        def handler(request: httpx.Request):
            seen["path"] = request.url.path
            return httpx.Response(200, json={"success": True, "data": {"questions": []}})

        batches = [BatchSpec(type=QuestionType.MULTIPLE_CHOICE, count=5)]
        client = make_client(handler)
        run(call_and_close(client, "request_generation", strategy, make_request(5), batches))

        assert seen["path"] == f"/api/quiz-optimized/{suffix}/material-1"

    def test_request_generation_when_error_status_then_response_error(self, make_request):
        def handler(request):
            return httpx.Response(408, json={"success": False, "message": "AI处理超时"})

        client = make_client(handler)

        with pytest.raises(ServiceResponseError, match="AI处理超时"):
            run(call_and_close(client, "request_generation", Strategy.QUICK, make_request(5)))

    def test_request_generation_when_body_not_json_then_response_error(self, make_request):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        client = make_client(handler)

        with pytest.raises(ServiceResponseError):
            run(call_and_close(client, "request_generation", Strategy.QUICK, make_request(5)))

    def test_request_generation_when_unreachable_then_network_error(self, make_request):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(ServiceNetworkError):
            run(call_and_close(client, "request_generation", Strategy.QUICK, make_request(5)))

    def test_request_generation_when_fallback_then_value_error(self, make_request):
        client = make_client(lambda request: httpx.Response(200, json={}))

        with pytest.raises(ValueError):
            run(call_and_close(client, "request_generation", Strategy.FALLBACK, make_request(5)))


class TestAdminCalls:
    """Tests for health and cache admin pass-through calls."""

    @pytest.mark.parametrize(
        "method_name, http_method, path",
        [
            ("check_health", "GET", "/api/quiz/health-check"),
            ("clear_cache", "POST", "/api/quiz-optimized/cache/clear"),
            ("get_cache_stats", "GET", "/api/quiz-optimized/cache/stats"),
        ],
    )
    def test_admin_call_routes(self, method_name, http_method, path):
        seen = {}

        def handler(request: httpx.Request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            return httpx.Response(200, json={"success": True, "data": {"size": 3}})

        result = run(call_and_close(make_client(handler), method_name))

        assert seen == {"method": http_method, "path": path}
        assert result["success"] is True
