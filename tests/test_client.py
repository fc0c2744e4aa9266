"""Tests for client construction, configuration and error wrapping."""

import logging

import httpx
import openai
import pytest
from anthropic import Anthropic
from openai import OpenAI
from openai.types import CreateEmbeddingResponse
from openai.types.chat import ChatCompletion

from gptease import Chat, Embedding, Provider, embed, get_api_key, make_tool
from gptease._exceptions import (
    CompletionError,
    ConfigurationError,
    UnexpectedResponseError,
    classify_error,
)
from gptease.client import (
    DEFAULT_CHAT_MODEL,
    AnthropicLLM,
    GeminiLLM,
    OpenAILLM,
    create_llm,
    default_llm,
    set_default_llm,
)

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


@pytest.fixture
def no_keys(monkeypatch):
    for var in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GEMINI_API_KEY"):
        monkeypatch.delenv(var, raising=False)


def completion(message: dict, finish_reason: str) -> ChatCompletion:
    return ChatCompletion.model_validate(
        {
            "id": "cmpl-1",
            "object": "chat.completion",
            "created": 0,
            "model": "gpt-4",
            "choices": [
                {"index": 0, "finish_reason": finish_reason, "message": {"role": "assistant", **message}}
            ],
        }
    )


class TestConfiguration:
    def test_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert get_api_key(Provider.OPENAI) == "sk-test"

    def test_missing_api_key(self, no_keys):
        with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
            get_api_key(Provider.OPENAI)

    def test_empty_api_key_counts_as_missing(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "")
        with pytest.raises(ConfigurationError):
            get_api_key(Provider.ANTHROPIC)


class TestFactory:
    @pytest.mark.parametrize(
        "provider, cls",
        [
            (Provider.OPENAI, OpenAILLM),
            (Provider.ANTHROPIC, AnthropicLLM),
            (Provider.GEMINI, GeminiLLM),
        ],
    )
    def test_create_with_explicit_key(self, provider, cls):
        llm = create_llm(provider, "some-model", api_key="key")
        assert isinstance(llm, cls)
        assert llm.model == "some-model"

    def test_default_model(self):
        assert create_llm(Provider.OPENAI, api_key="key").model == DEFAULT_CHAT_MODEL

    def test_create_from_environment(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "g-key")
        assert isinstance(create_llm(Provider.GEMINI), GeminiLLM)

    def test_create_without_key_fails(self, no_keys):
        with pytest.raises(ConfigurationError):
            create_llm(Provider.ANTHROPIC, "claude")

    def test_from_client(self):
        sdk = OpenAI(api_key="key")
        llm = create_llm(Provider.OPENAI, "gpt-4o", client=sdk)
        assert llm._client is sdk
        assert llm.model == "gpt-4o"

    def test_from_client_requires_model(self):
        with pytest.raises(ValueError):
            create_llm(Provider.OPENAI, client=OpenAI(api_key="key"))

    def test_from_client_type_check(self):
        with pytest.raises(TypeError):
            OpenAILLM.from_client("gpt-4o", Anthropic(api_key="key"))
        with pytest.raises(TypeError):
            AnthropicLLM.from_client("claude", OpenAI(api_key="key"))

    def test_context_manager_closes(self):
        with create_llm(Provider.OPENAI, api_key="key") as llm:
            assert isinstance(llm, OpenAILLM)


class TestDefaultClient:
    def test_built_once_from_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        first = default_llm()
        assert isinstance(first, OpenAILLM)
        assert default_llm() is first

    def test_missing_key_surfaces_on_first_use(self, no_keys):
        chat = Chat()
        with pytest.raises(ConfigurationError):
            chat.exchange("hello")
        assert len(chat.dialogue) == 0

    def test_set_default(self):
        llm = create_llm(Provider.OPENAI, api_key="key")
        set_default_llm(llm)
        assert default_llm() is llm
        assert Chat().llm is llm


class TestClassifyError:
    def test_rate_limit(self):
        exc = openai.RateLimitError(
            "slow down", response=httpx.Response(429, request=_REQUEST), body=None
        )
        wrapped = classify_error(exc)
        assert isinstance(wrapped, CompletionError)
        assert wrapped.original_exc is exc
        assert str(wrapped).startswith("Rate-limit exceeded")

    def test_connection(self):
        exc = openai.APIConnectionError(request=_REQUEST)
        assert str(classify_error(exc)).startswith("Connection problem")

    def test_status_error_mentions_status(self):
        exc = openai.InternalServerError(
            "oops", response=httpx.Response(500, request=_REQUEST), body=None
        )
        assert "500" in str(classify_error(exc))

    def test_unknown_exception(self, caplog):
        with caplog.at_level(logging.WARNING):
            wrapped = classify_error(ValueError("weird"))
        assert str(wrapped) == "ValueError: weird"
        assert wrapped.__cause__ is not None
        assert "Wrapping provider exception" in caplog.text


class TestOpenAIRoundTrip:
    """The completion loop running against the real adapter and SDK types."""

    def test_tool_round_trip(self, monkeypatch):
        sdk = OpenAI(api_key="key")
        responses = [
            completion(
                {
                    "content": None,
                    "tool_calls": [
                        {
                            "id": "call_1",
                            "type": "function",
                            "function": {"name": "double", "arguments": "21"},
                        }
                    ],
                },
                "tool_calls",
            ),
            completion({"content": "It is 42."}, "stop"),
        ]
        sent = []

        def create(**kwargs):
            sent.append(kwargs)
            return responses.pop(0)

        monkeypatch.setattr(sdk.chat.completions, "create", create)

        def double(n: int) -> int:
            return n * 2

        chat = Chat(
            OpenAILLM.from_client("gpt-4o", sdk),
            tools=[make_tool(double, "double", "Doubles a number.")],
        )
        assert chat.exchange("Double 21") == "It is 42."

        assert sent[0]["model"] == "gpt-4o"
        assert sent[0]["tools"][0]["function"]["parameters"] == {"type": "integer"}
        assert sent[1]["messages"][-1] == {
            "role": "tool",
            "content": "42",
            "tool_call_id": "call_1",
        }

    def test_sdk_error_rolls_back(self, monkeypatch):
        sdk = OpenAI(api_key="key")

        def create(**kwargs):
            raise openai.APIConnectionError(request=_REQUEST)

        monkeypatch.setattr(sdk.chat.completions, "create", create)
        chat = Chat(OpenAILLM.from_client("gpt-4o", sdk))

        with pytest.raises(CompletionError):
            chat.exchange("hello")
        assert len(chat.dialogue) == 0


class TestEmbeddings:
    @pytest.fixture
    def llm(self, monkeypatch):
        sdk = OpenAI(api_key="key")
        calls = []

        def create(**kwargs):
            calls.append(kwargs)
            return CreateEmbeddingResponse.model_validate(
                {
                    "data": [{"embedding": [0.6, 0.8], "index": 0, "object": "embedding"}],
                    "model": kwargs["model"],
                    "object": "list",
                    "usage": {"prompt_tokens": 3, "total_tokens": 3},
                }
            )

        monkeypatch.setattr(sdk.embeddings, "create", create)
        llm = OpenAILLM.from_client("gpt-4o", sdk)
        llm.calls = calls
        return llm

    def test_embed(self, llm):
        vector, tokens = embed("hello world", llm=llm)
        assert vector == Embedding([0.6, 0.8])
        assert tokens == 3
        assert llm.calls[0] == {"model": "text-embedding-ada-002", "input": ["hello world"]}

    def test_embed_uses_default_client(self, llm):
        set_default_llm(llm)
        vector, _ = embed("hi")
        assert vector.dot(vector) == pytest.approx(1.0)

    def test_empty_response(self, monkeypatch):
        sdk = OpenAI(api_key="key")
        monkeypatch.setattr(
            sdk.embeddings,
            "create",
            lambda **kwargs: CreateEmbeddingResponse.model_validate(
                {
                    "data": [],
                    "model": "m",
                    "object": "list",
                    "usage": {"prompt_tokens": 0, "total_tokens": 0},
                }
            ),
        )
        with pytest.raises(UnexpectedResponseError):
            OpenAILLM.from_client("gpt-4o", sdk).embed("x")

    def test_anthropic_has_no_embeddings(self):
        with pytest.raises(NotImplementedError):
            create_llm(Provider.ANTHROPIC, "claude", api_key="key").embed("x")


class TestEmbeddingVector:
    def test_dot(self):
        a = Embedding([1.0, 2.0, 3.0])
        b = Embedding([4.0, 5.0, 6.0])
        assert a.dot(b) == 32.0

    def test_dot_rejects_length_mismatch(self):
        with pytest.raises(ValueError):
            Embedding([1.0, 2.0]).dot(Embedding([1.0]))

    def test_normalized_self_dot_is_one(self):
        v = Embedding([0.6, 0.8])
        assert v.dot(v) == pytest.approx(1.0)

    def test_is_immutable_sequence(self):
        v = Embedding([1, 2])
        assert v == (1.0, 2.0)
        with pytest.raises(TypeError):
            v[0] = 3.0  # type: ignore[index]
