"""Tests for the OpenAI-backed providers, with the HTTP client stubbed out."""

import json
from types import SimpleNamespace

import httpx
import numpy as np
import openai
import pytest
from construction_docs_qa.embeddings import OpenAIEmbedder, SentenceTransformerEmbedder
from construction_docs_qa.exceptions import ProviderUnavailableError
from construction_docs_qa.llm import OPENROUTER_BASE_URL, ChatLLM
from construction_docs_qa.retriever import NOT_FOUND_ANSWER


def timeout_error():
    return openai.APITimeoutError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))


class FakeCompletions:
    """Stands in for client.chat.completions."""

    def __init__(self, content="Slab is 4 in. [#1]", error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=message)],
            usage=SimpleNamespace(total_tokens=42)
        )


def make_llm(completions):
    llm = ChatLLM(api_key="test-key")
    llm.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return llm


class TestChatLLM:
    """Tests for ChatLLM class."""

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(ValueError):
            ChatLLM()

    def test_openrouter_key_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "or-key")
        llm = ChatLLM(model="openai/gpt-4o-mini", base_url=OPENROUTER_BASE_URL)
        assert llm.api_key == "or-key"

    def test_answer(self):
        completions = FakeCompletions()
        llm = make_llm(completions)

        answer = llm.answer("What is the slab thickness?", "[#1] FILE: spec.txt\nSlab thickness is 4 inches.")

        assert answer == "Slab is 4 in. [#1]"
        call = completions.calls[0]
        assert call["model"] == "gpt-4o-mini"
        assert NOT_FOUND_ANSWER in call["messages"][0]["content"]
        assert "Slab thickness is 4 inches." in call["messages"][1]["content"]
        assert llm.get_stats() == {"total_calls": 1, "total_tokens": 42, "model": "gpt-4o-mini"}

    def test_answer_empty_context_skips_api(self):
        completions = FakeCompletions()
        llm = make_llm(completions)

        assert llm.answer("What is the slab thickness?", "  ") == NOT_FOUND_ANSWER
        assert completions.calls == []

    def test_answer_empty_reply_refuses(self):
        llm = make_llm(FakeCompletions(content=None))
        assert llm.answer("Slab?", "[#1] FILE: a\nb") == NOT_FOUND_ANSWER

    def test_timeout_is_unavailable(self):
        llm = make_llm(FakeCompletions(error=timeout_error()))
        with pytest.raises(ProviderUnavailableError) as exc:
            llm.answer("Slab?", "[#1] FILE: a\nb")
        assert exc.value.retryable

    def test_summarize_project_json(self):
        completions = FakeCompletions(content=json.dumps({"executive_summary": "Fit-out"}))
        llm = make_llm(completions)

        assert llm.summarize_project("### FILE: a.txt\ntext") == {"executive_summary": "Fit-out"}
        assert completions.calls[0]["response_format"] == {"type": "json_object"}

    def test_summarize_project_bad_json(self, capsys):
        llm = make_llm(FakeCompletions(content="not json"))
        assert llm.summarize_project("corpus") == {}


class FakeEmbeddings:
    def __init__(self, error=None):
        self.error = error

    def create(self, model, input):
        if self.error:
            raise self.error
        # returned out of order on purpose
        data = [SimpleNamespace(index=i, embedding=[float(i), 1.0]) for i in range(len(input))]
        return SimpleNamespace(data=list(reversed(data)))


class TestOpenAIEmbedder:
    """Tests for OpenAIEmbedder class."""

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(ValueError):
            OpenAIEmbedder()

    def test_embed_batch_keeps_input_order(self):
        embedder = OpenAIEmbedder(api_key="test-key")
        embedder.client = SimpleNamespace(embeddings=FakeEmbeddings())

        vectors = embedder.embed_batch(["a", "b", "c"])

        assert vectors == [[0.0, 1.0], [1.0, 1.0], [2.0, 1.0]]
        assert embedder.embed("a") == [0.0, 1.0]

    def test_empty_batch(self):
        embedder = OpenAIEmbedder(api_key="test-key")
        assert embedder.embed_batch([]) == []

    def test_timeout_is_unavailable(self):
        embedder = OpenAIEmbedder(api_key="test-key")
        embedder.client = SimpleNamespace(embeddings=FakeEmbeddings(error=timeout_error()))
        with pytest.raises(ProviderUnavailableError):
            embedder.embed("slab")


class FakeSentenceModel:
    def __init__(self, name):
        self.name = name

    def get_sentence_embedding_dimension(self):
        return 3

    def encode(self, texts):
        return np.array([[float(len(t)), 0.0, 1.0] for t in texts])


class TestSentenceTransformerEmbedder:
    """Tests for SentenceTransformerEmbedder class, with the model stubbed out."""

    def test_embed(self, monkeypatch):
        monkeypatch.setattr("sentence_transformers.SentenceTransformer", FakeSentenceModel)
        embedder = SentenceTransformerEmbedder()

        assert embedder.model_name == "all-MiniLM-L6-v2"
        assert embedder.embedding_dimension == 3
        assert embedder.embed_batch(["ab", "abcd"]) == [[2.0, 0.0, 1.0], [4.0, 0.0, 1.0]]
        assert embedder.embed_batch([]) == []
