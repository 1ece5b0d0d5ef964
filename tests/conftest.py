"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
No fixture touches the network: model, embedding and index adapters are
replaced with in-process fakes.
"""
import json
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (fake models, full pipeline)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


# ========================================
# Fakes
# ========================================


class FakeTextModel:
    """
    Scripted TextModel.

    Each call pops the next scripted response. A response that is an
    Exception instance is raised instead of returned; a callable is called
    with the prompt. Every call is recorded in ``calls``.
    """

    def __init__(self, responses=None, model_name="fake-model", default=None):
        self.model_name = model_name
        self.responses = list(responses or [])
        self.default = default
        self.calls = []

    def complete(self, prompt, system_prompt=None, temperature=0.3, structured=False):
        self.calls.append(
            {
                "prompt": prompt,
                "system_prompt": system_prompt,
                "temperature": temperature,
                "structured": structured,
            }
        )
        if self.responses:
            response = self.responses.pop(0)
        elif self.default is not None:
            response = self.default
        else:
            raise RuntimeError("FakeTextModel has no scripted response left")

        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(prompt)
        return response


class FakeEmbedder:
    """Deterministic bag-of-letters embedding, 26 dimensions."""

    def __init__(self):
        self.calls = []
        self.batches = []

    def embed(self, text):
        self.calls.append(text)
        vector = [0.0] * 26
        for ch in text.lower():
            if "a" <= ch <= "z":
                vector[ord(ch) - ord("a")] += 1.0
        return vector

    def embed_batch(self, texts):
        self.batches.append(list(texts))
        return [self.embed(text) for text in texts]


def make_question(
    qid="q-1",
    qtype="multiple-choice",
    text="Which organelle produces ATP?",
    options=("Mitochondria", "Nucleus", "Ribosome", "Golgi apparatus"),
    answer="Mitochondria",
    explanation="Mitochondria run cellular respiration.",
    **extra,
):
    """Raw question dict as a model would emit it (camelCase)."""
    question = {
        "id": qid,
        "type": qtype,
        "questionText": text,
        "correctAnswer": answer,
        "explanation": explanation,
    }
    if options is not None:
        question["options"] = list(options)
    question.update(extra)
    return question


def as_json(items):
    return json.dumps(items)


# ========================================
# Fixtures
# ========================================


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def fake_model_factory():
    """Build FakeTextModel instances."""
    return FakeTextModel


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def in_memory_index():
    from src.semantic.vector_index import InMemorySemanticIndex

    return InMemorySemanticIndex()


@pytest.fixture
def question_factory():
    """Build raw question dicts."""
    return make_question


@pytest.fixture
def sample_study_text():
    """A few paragraphs of study notes."""
    return (
        "Photosynthesis converts light energy into chemical energy. "
        "It takes place in the chloroplasts of plant cells. "
        "The light-dependent reactions occur in the thylakoid membranes and produce ATP and NADPH. "
        "The Calvin cycle uses ATP and NADPH to fix carbon dioxide into glucose. "
        "Chlorophyll absorbs mostly blue and red light and reflects green light."
    )


@pytest.fixture
def valid_semantic_reply():
    """Build a semantic validator reply marking ``n`` questions valid."""

    def _reply(n):
        return json.dumps([{"valid": True, "reasons": []} for _ in range(n)])

    return _reply
