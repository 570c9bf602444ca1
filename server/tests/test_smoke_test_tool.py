from __future__ import annotations

from collections.abc import Callable

import httpx

from tools.smoke_test import (
    CheckResult,
    check_health,
    check_note_generate,
    check_publish_guard,
    check_reviews_generate,
    summarize_results,
)


def _client_with_handler(
    handler: Callable[[httpx.Request], httpx.Response],
) -> httpx.Client:
    transport = httpx.MockTransport(handler)
    return httpx.Client(transport=transport, base_url="http://test")


def _envelope(data: dict | None, *, ok: bool = True, code: str = "OK") -> dict:
    return {"ok": ok, "code": code, "message": "", "data": data, "request_id": "r1"}


def test_check_health_pass() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET" and request.url.path == "/health":
            return httpx.Response(200, json=_envelope({"status": "ok"}))
        return httpx.Response(404, json={})

    with _client_with_handler(handler) as client:
        result = check_health(client)

    assert result.status == "pass"


def test_check_health_fail_on_non_json() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html></html>")

    with _client_with_handler(handler) as client:
        result = check_health(client)

    assert result.status == "fail"
    assert "JSON" in result.message


def test_check_publish_guard_pass() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path == "/api/xhs/publish":
            return httpx.Response(
                400,
                json=_envelope(None, ok=False, code="INVALID_INPUT"),
            )
        return httpx.Response(404, json={})

    with _client_with_handler(handler) as client:
        result = check_publish_guard(client)

    assert result.status == "pass"


def test_check_publish_guard_reports_missing_key() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json=_envelope(None, ok=False, code="DEPENDENCY_MISSING"))

    with _client_with_handler(handler) as client:
        result = check_publish_guard(client)

    assert result.status == "fail"
    assert "XHS_API_KEY" in result.message


def test_check_note_generate_pass() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path == "/api/generate":
            return httpx.Response(
                200,
                json=_envelope(
                    {
                        "title": "好店",
                        "body": "正文",
                        "tagsLine": "#咖啡",
                        "content": "## 好店\n\n正文\n\n#咖啡",
                    }
                ),
            )
        return httpx.Response(404, json={})

    with _client_with_handler(handler) as client:
        result = check_note_generate(client)

    assert result.status == "pass"


def test_check_note_generate_fail_on_missing_fields() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_envelope({"content": "x"}))

    with _client_with_handler(handler) as client:
        result = check_note_generate(client)

    assert result.status == "fail"
    assert "tagsLine" in result.message


def test_check_reviews_generate_pass() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path == "/api/reviews/generate":
            return httpx.Response(200, json=_envelope({"reviews": ["a", "b", "c"]}))
        return httpx.Response(404, json={})

    with _client_with_handler(handler) as client:
        result = check_reviews_generate(client)

    assert result.status == "pass"


def test_check_reviews_generate_fail_on_empty_result() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, json=_envelope(None, ok=False, code="EMPTY_RESULT"))

    with _client_with_handler(handler) as client:
        result = check_reviews_generate(client)

    assert result.status == "fail"
    assert "EMPTY_RESULT" in result.message


def test_summarize_results_counts() -> None:
    results = [
        CheckResult(name="a", status="pass", message=""),
        CheckResult(name="b", status="fail", message=""),
        CheckResult(name="c", status="pass", message=""),
    ]
    assert summarize_results(results) == (2, 1)
