"""Tests for the Response Normalizer."""

from __future__ import annotations

import json
import logging
import time

import pytest

from smart_proxy.gateway.normalizer import (
    build_completion,
    new_completion_id,
    normalize_response,
    parse_local_response,
)
from smart_proxy.gateway.types import Provider
from smart_proxy.schemas.chat import ChatCompletionResponse, OllamaChatResponse


def _ollama_body(**overrides) -> bytes:
    data = {
        "model": "llama3.1:70b",
        "created_at": "2024-08-01T12:00:00Z",
        "message": {"role": "assistant", "content": "hi"},
        "done": True,
        "done_reason": "stop",
        "prompt_eval_count": 3,
        "eval_count": 2,
    }
    data.update(overrides)
    return json.dumps(data).encode("utf-8")


class TestParseLocalResponse:
    def test_valid(self):
        result = parse_local_response(_ollama_body())
        assert result.ok
        assert result.error is None
        assert result.value.message.content == "hi"
        assert result.value.done is True

    def test_invalid_json(self):
        result = parse_local_response(b"<html>oops</html>")
        assert not result.ok
        assert result.value is None
        assert result.error

    def test_not_an_object(self):
        assert not parse_local_response(b"[1, 2, 3]").ok

    def test_wrong_message_type(self):
        assert not parse_local_response(b'{"message": "hi", "done": true}').ok

    def test_minimal_object(self):
        result = parse_local_response(b"{}")
        assert result.ok
        assert result.value.message is None
        assert result.value.done is None

    def test_null_done_is_accepted(self):
        result = parse_local_response(b'{"message": {"content": "hi"}, "done": null}')
        assert result.ok
        assert result.value.done is None

    @pytest.mark.parametrize("counter", ["prompt_eval_count", "eval_count"])
    @pytest.mark.parametrize("value", ["true", "\"3\"", "2.5"])
    def test_non_integer_counter_rejected(self, counter, value):
        body = f'{{"message": {{"content": "hi"}}, "done": true, "{counter}": {value}}}'
        assert not parse_local_response(body.encode()).ok


class TestBuildCompletion:
    def test_maps_fields(self):
        parsed = OllamaChatResponse.model_validate_json(_ollama_body())
        completion = build_completion(parsed, "llama3.1:405b")
        assert completion.model == "llama3.1:405b"
        assert completion.object == "chat.completion"
        assert completion.choices[0].index == 0
        assert completion.choices[0].message.role == "assistant"
        assert completion.choices[0].message.content == "hi"
        assert completion.choices[0].finish_reason == "stop"
        assert completion.usage.prompt_tokens == 3
        assert completion.usage.completion_tokens == 2
        assert completion.usage.total_tokens == 5

    def test_missing_counters_are_zero(self):
        parsed = OllamaChatResponse.model_validate({"message": {"content": "x"}, "done": True})
        completion = build_completion(parsed, "m")
        assert completion.usage.prompt_tokens == 0
        assert completion.usage.completion_tokens == 0
        assert completion.usage.total_tokens == 0

    def test_null_content_is_empty(self):
        parsed = OllamaChatResponse.model_validate({"message": {"content": None}, "done": True})
        assert build_completion(parsed, "m").choices[0].message.content == ""

    def test_missing_message_is_empty(self):
        parsed = OllamaChatResponse.model_validate({"done": False})
        completion = build_completion(parsed, "m")
        assert completion.choices[0].message.content == ""
        assert completion.choices[0].finish_reason is None

    def test_ids_unique(self):
        ids = {new_completion_id() for _ in range(1000)}
        assert len(ids) == 1000
        assert all(i.startswith("chatcmpl-") for i in ids)


class TestNormalizeResponse:
    def test_local_round_trip(self):
        before = int(time.time())
        status, body = normalize_response(Provider.LOCAL, 200, _ollama_body(), "llama3.1:70b")
        assert status == 200

        data = json.loads(body)
        ChatCompletionResponse.model_validate(data)
        assert data["object"] == "chat.completion"
        assert data["model"] == "llama3.1:70b"
        assert data["created"] >= before
        assert data["choices"] == [
            {
                "index": 0,
                "message": {"role": "assistant", "content": "hi"},
                "finish_reason": "stop",
            }
        ]
        assert data["usage"] == {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5}

    def test_requested_model_wins_over_backend_model(self):
        _, body = normalize_response(Provider.LOCAL, 200, _ollama_body(model="llama3.1:8b"), "llama3.1:70b")
        assert json.loads(body)["model"] == "llama3.1:70b"

    def test_not_done_has_null_finish_reason(self):
        _, body = normalize_response(Provider.LOCAL, 200, _ollama_body(done=False), "m")
        assert json.loads(body)["choices"][0]["finish_reason"] is None

    def test_null_done_still_converts(self):
        raw = b'{"message": {"content": "hi"}, "done": null}'
        status, body = normalize_response(Provider.LOCAL, 200, raw, "m")
        data = json.loads(body)
        assert status == 200
        assert data["object"] == "chat.completion"
        assert data["choices"][0]["message"]["content"] == "hi"
        assert data["choices"][0]["finish_reason"] is None

    def test_boolean_counter_is_not_counted(self):
        raw = _ollama_body(prompt_eval_count=True)
        assert normalize_response(Provider.LOCAL, 200, raw, "m") == (200, raw)

    def test_fresh_id_per_call(self):
        _, first = normalize_response(Provider.LOCAL, 200, _ollama_body(), "m")
        _, second = normalize_response(Provider.LOCAL, 200, _ollama_body(), "m")
        assert json.loads(first)["id"] != json.loads(second)["id"]

    @pytest.mark.parametrize("provider", [Provider.LOCAL, Provider.REMOTE])
    def test_error_status_passes_through(self, provider):
        raw = b'{"error": "model not found"}'
        assert normalize_response(provider, 500, raw, "m") == (500, raw)

    def test_local_404_passes_through(self):
        raw = _ollama_body()
        assert normalize_response(Provider.LOCAL, 404, raw, "m") == (404, raw)

    def test_remote_passes_through(self):
        raw = json.dumps({"id": "x", "object": "chat.completion", "choices": []}).encode()
        assert normalize_response(Provider.REMOTE, 200, raw, "grok-4-fast-reasoning") == (200, raw)

    def test_remote_pass_through_is_stable(self):
        raw = b'{"id": "chatcmpl-1", "choices": []}'
        once = normalize_response(Provider.REMOTE, 200, raw, "m")
        twice = normalize_response(Provider.REMOTE, once[0], once[1], "m")
        assert once == twice == (200, raw)

    def test_remote_non_json_passes_through(self):
        assert normalize_response(Provider.REMOTE, 200, b"not json", "m") == (200, b"not json")

    def test_malformed_local_body_passes_through(self):
        raw = b"this is not json"
        assert normalize_response(Provider.LOCAL, 200, raw, "m") == (200, raw)

    def test_empty_local_body_passes_through(self):
        assert normalize_response(Provider.LOCAL, 200, b"", "m") == (200, b"")

    def test_malformed_local_body_is_logged(self, caplog):
        with caplog.at_level(logging.ERROR, logger="smart_proxy.gateway.normalizer"):
            normalize_response(Provider.LOCAL, 200, b"{broken", "m")
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "MalformedUpstreamResponse" in errors[0].getMessage()
        assert errors[0].provider == "ollama"
