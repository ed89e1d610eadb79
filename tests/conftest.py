"""Shared fixtures: offline stand-ins for the embedding and LLM providers."""

import pytest

from construction_docs_qa.embeddings import BaseEmbedder
from construction_docs_qa.models import DocumentChunk
from construction_docs_qa.retriever import NOT_FOUND_ANSWER


VOCABULARY = ["slab", "thickness", "paint", "color", "door", "fire", "rating", "roof"]


class KeywordEmbedder(BaseEmbedder):
    """Bag-of-words embedder over a fixed construction vocabulary."""

    model_name = "keyword-test"

    def __init__(self):
        self.calls = 0

    def embed_batch(self, texts):
        self.calls += 1
        vectors = []
        for text in texts:
            words = text.lower().replace(".", " ").replace("?", " ").split()
            vectors.append([float(words.count(w)) for w in VOCABULARY])
        return vectors


class RecordingLLM:
    """Returns a canned answer and records what it was asked."""

    model = "fake-llm"

    def __init__(self, reply="Slab thickness is 4 inches [#1].", summary=None):
        self.reply = reply
        self.summary = summary if summary is not None else {}
        self.questions = []
        self.contexts = []
        self.corpora = []

    def answer(self, question, context_text):
        if not context_text.strip():
            return NOT_FOUND_ANSWER
        self.questions.append(question)
        self.contexts.append(context_text)
        return self.reply

    def summarize_project(self, corpus):
        self.corpora.append(corpus)
        return self.summary


@pytest.fixture
def embedder():
    return KeywordEmbedder()


@pytest.fixture
def llm():
    return RecordingLLM()


@pytest.fixture
def spec_chunks():
    """The two chunks from the slab/paint example."""
    return [
        DocumentChunk(source_id="spec.txt", text="Slab thickness is 4 inches.", embedding=[1, 0]),
        DocumentChunk(source_id="spec.txt", text="Paint color is eggshell white.", embedding=[0, 1], position=1),
    ]
