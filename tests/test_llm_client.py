import json

import httpx
import pytest
from pydantic import SecretStr

from search_ai.core.errors import CompletionError, ConfigurationError, NoResponseError
from search_ai.llm.client import LLMClient


def make_client(handler):
    return LLMClient(
        SecretStr("sk-test-key"),
        base_url="https://api.test/v1/",
        transport=httpx.MockTransport(handler),
    )


def test_missing_api_key():
    with pytest.raises(ConfigurationError):
        LLMClient(None)


@pytest.mark.asyncio
async def test_chat_sends_system_prompt_first():
    captured = {}

    def handler(request):
        captured["url"] = str(request.url)
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"choices": [{"message": {"role": "assistant", "content": "Findings."}}]},
        )

    message = await make_client(handler).chat(
        "You are helpful.",
        [{"role": "user", "content": "Question?"}],
    )

    assert message == {"role": "assistant", "content": "Findings."}
    assert captured["url"] == "https://api.test/v1/chat/completions"
    assert captured["body"]["model"] == "gpt-4o"
    assert captured["body"]["messages"][0] == {"role": "system", "content": "You are helpful."}
    assert captured["body"]["messages"][1]["content"] == "Question?"
    assert "temperature" not in captured["body"]


@pytest.mark.asyncio
async def test_temperature_is_forwarded():
    captured = {}

    def handler(request):
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

    await make_client(handler).chat("sys", [], temperature=0.2)
    assert captured["body"]["temperature"] == 0.2


@pytest.mark.asyncio
async def test_no_choices_raises_no_response():
    def handler(request):
        return httpx.Response(200, json={"choices": []})

    with pytest.raises(NoResponseError):
        await make_client(handler).chat("sys", [])


@pytest.mark.asyncio
async def test_http_error_becomes_completion_error():
    def handler(request):
        return httpx.Response(401, json={"error": {"message": "bad key"}})

    with pytest.raises(CompletionError):
        await make_client(handler).chat("sys", [])


@pytest.mark.asyncio
async def test_invalid_json_becomes_completion_error():
    def handler(request):
        return httpx.Response(200, content=b"<html>gateway</html>")

    with pytest.raises(CompletionError):
        await make_client(handler).chat("sys", [])


@pytest.mark.parametrize(
    "body",
    [
        {"choices": ["not a choice"]},
        {"choices": {"0": {"message": {"content": "x"}}}},
    ],
)
@pytest.mark.asyncio
async def test_malformed_choices_raise_no_response(body):
    def handler(request):
        return httpx.Response(200, json=body)

    with pytest.raises(NoResponseError):
        await make_client(handler).chat("sys", [])
