"""Tests for structured error logging helpers."""

import logging

import httpx

from newsreader.utils.error_logger import log_error, log_http_error


def test_log_error_attaches_structured_fields(caplog):
    with caplog.at_level(logging.ERROR):
        log_error("notifications", RuntimeError("boom"), operation="register_push_token")

    record = caplog.records[-1]
    assert record.name == "error.notifications"
    assert record.component == "notifications"
    assert record.operation == "register_push_token"
    assert record.error_type == "RuntimeError"
    assert "boom" in record.getMessage()


def test_log_http_error_includes_response_details(caplog):
    request = httpx.Request("GET", "https://your-ghost-site.com/ghost/api/content/posts/")
    response = httpx.Response(503, text="Service Unavailable", request=request)

    with caplog.at_level(logging.ERROR):
        log_http_error("ghost_api", str(request.url), response=response, operation="list_posts")

    record = caplog.records[-1]
    assert record.context_data == {"url": str(request.url)}
    assert record.http_details["status_code"] == 503
    assert record.http_details["method"] == "GET"
    assert record.http_details["response_body"] == "Service Unavailable"
