import httpx
import pytest

from smartassist.ai import (
    DIAGNOSIS_SYSTEM_PROMPT, AIClient, AIError, extract_identified_issues,
)
from smartassist.config import Settings


def test_extract_identified_issues():
    assert extract_identified_issues("There is WATER DAMAGE and a Leak; Error Code F21.") == [
        "Error code detected", "Visible damage", "Potential leak",
    ]
    assert extract_identified_issues("Everything looks fine.") == []
    assert extract_identified_issues("") == []


class _FakeHttp:
    calls = []
    response = None
    raise_exc = None

    def __init__(self, timeout=None):
        self.timeout = timeout

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def post(self, url, headers=None, json=None):
        _FakeHttp.calls.append({"url": url, "headers": headers, "json": json})
        if _FakeHttp.raise_exc:
            raise _FakeHttp.raise_exc
        return _FakeHttp.response


@pytest.fixture
def http(monkeypatch):
    _FakeHttp.calls = []
    _FakeHttp.raise_exc = None
    _FakeHttp.response = httpx.Response(200, json={"choices": [{"message": {"content": "Reset the breaker."}}]})
    monkeypatch.setattr(httpx, "Client", _FakeHttp)
    return _FakeHttp


def _client(**kw):
    return AIClient(Settings(openai_api_key="sk-test", openai_base_url="https://llm.test/v1", **kw))


def test_diagnose_message_order_and_model(http):
    history = [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hello"}]
    result = _client(openai_model="gpt-test").diagnose_issue(
        "Washer won't drain", appliance_type="washing_machine", brand="LG", conversation_history=history,
    )

    assert result.diagnosis == result.solution == result.conversation_response == "Reset the breaker."
    call = http.calls[0]
    assert call["url"] == "https://llm.test/v1/chat/completions"
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    payload = call["json"]
    assert payload["model"] == "gpt-test"
    messages = payload["messages"]
    assert messages[0] == {"role": "system", "content": DIAGNOSIS_SYSTEM_PROMPT}
    assert messages[1:3] == history
    assert messages[3]["role"] == "user"
    assert "Appliance: washing_machine" in messages[3]["content"]
    assert "Brand: LG" in messages[3]["content"]
    assert "Model: Unknown" in messages[3]["content"]
    assert "Issue: Washer won't drain" in messages[3]["content"]


def test_image_request_is_multimodal(http):
    result = _client().analyze_appliance_image("QUJD", appliance_type="oven", user_description="E3 blinking")
    content = http.calls[0]["json"]["messages"][0]["content"]
    assert content[0]["type"] == "text"
    assert "image of a oven" in content[0]["text"]
    assert "E3 blinking" in content[0]["text"]
    assert content[1] == {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,QUJD"}}
    assert result.identified_issues == []


def test_upstream_error_is_wrapped(http):
    http.response = httpx.Response(500, text="upstream exploded")
    with pytest.raises(AIError, match=r"^Failed to get AI diagnosis: HTTP 500: upstream exploded"):
        _client().diagnose_issue("x")


def test_transport_error_is_wrapped(http):
    http.raise_exc = httpx.ConnectError("connection refused")
    with pytest.raises(AIError, match="Failed to analyze image: ConnectError"):
        _client().analyze_appliance_image("QUJD")


def test_malformed_body_is_wrapped(http):
    http.response = httpx.Response(200, json={"unexpected": True})
    with pytest.raises(AIError, match="unexpected response format"):
        _client().diagnose_issue("x")


def test_missing_key_fails_without_network(http):
    with pytest.raises(AIError, match="OPENAI_API_KEY"):
        AIClient(Settings(openai_api_key=None)).diagnose_issue("x")
    assert http.calls == []


def test_no_retry_on_failure(http):
    http.response = httpx.Response(503, text="busy")
    with pytest.raises(AIError):
        _client().diagnose_issue("x")
    assert len(http.calls) == 1
