"""Shared fixtures: isolated settings and a scripted text generator."""

from typing import List, Optional

import pytest

from vidmind.core.config import Settings


class FakeGenerator:
    """Returns a canned reply (or raises) and records every prompt."""

    name = "Fake"

    def __init__(self, reply: str = "", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def make_settings(**overrides) -> Settings:
    values = {
        "GENERATION_PROVIDER": "deepseek",
        "DEEPSEEK_API_KEY": "test-deepseek-key",
        "BIBIGPT_API_KEY": "bibi-key",
        "RENDER_TIMEOUT_SECONDS": 1,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def sample_inputs() -> dict:
    return {
        "keywords": ["k1", "k2"],
        "summary": "A talk about data pipelines and model training.",
        "key_timepoints": [
            {"title": "Intro", "summary": "Why pipelines matter", "start": 0, "end": 30},
            {"title": "Training", "summary": "How models are trained", "start": 30, "end": 95},
        ],
    }
