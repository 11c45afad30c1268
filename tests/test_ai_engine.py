"""Tests for the mindmap builder (prompt, provider selection, fallback policy)."""

import asyncio
import json
from types import SimpleNamespace

import pytest

from conftest import FakeGenerator, make_settings
from vidmind.ai_engine import (
    DeepSeekGenerator,
    build_mindmap_prompt,
    create_text_generator,
    generate_mindmap_json,
)
from vidmind.core.errors import ConfigurationError, GenerationError, MissingParameterError
from vidmind.services.fallback_tree import build_fallback_mindmap

MODEL_REPLY = json.dumps({
    "meta": {"name": "Pipelines", "author": "AI Assistant", "version": "1.0"},
    "format": "node_tree",
    "data": {
        "id": "root",
        "topic": "Data pipelines",
        "children": [
            {"id": "ingest", "topic": "Ingest", "direction": "right"},
            {"id": "train", "topic": "Training", "direction": "left"},
        ],
    },
})


def _build(inputs: dict, generator, settings=None):
    return asyncio.run(
        generate_mindmap_json(
            inputs["keywords"],
            inputs["summary"],
            inputs["key_timepoints"],
            settings=settings or make_settings(),
            generator=generator,
        )
    )


class TestGenerateMindmapJson:
    def test_model_document_returned(self, sample_inputs: dict) -> None:
        generator = FakeGenerator(reply=f"Here it is:\n```json\n{MODEL_REPLY}\n```")
        document = _build(sample_inputs, generator)
        assert document.data.topic == "Data pipelines"
        assert document.node_ids() == ["root", "ingest", "train"]
        assert len(generator.prompts) == 1

    def test_prompt_embeds_sanitized_inputs(self) -> None:
        generator = FakeGenerator(reply=MODEL_REPLY)
        inputs = {
            "keywords": ['deep "learning"'],
            "summary": "line one\nline two",
            "key_timepoints": [{"title": "Intro", "summary": "hi", "start": 5, "end": 2}],
        }
        _build(inputs, generator)
        prompt = generator.prompts[0]
        assert "[\"deep 'learning'\"]" in prompt
        assert '"line one line two"' in prompt
        assert '"start": 5.0' in prompt
        assert '"format": "node_tree"' in prompt

    def test_provider_error_falls_back(self, sample_inputs: dict) -> None:
        generator = FakeGenerator(error=RuntimeError("quota exceeded"))
        document = _build(sample_inputs, generator)
        expected = build_fallback_mindmap(
            sample_inputs["keywords"],
            sample_inputs["summary"],
            sample_inputs["key_timepoints"],
            "quota exceeded",
        )
        assert document.to_jsmind() == expected.to_jsmind()

    def test_unparseable_reply_falls_back(self, sample_inputs: dict) -> None:
        document = _build(sample_inputs, FakeGenerator(reply="I cannot draw mind maps."))
        error_node = document.data.children[0]
        assert error_node.id == "error"
        assert error_node.topic.startswith("解析错误: ")

    def test_invalid_structure_falls_back(self, sample_inputs: dict) -> None:
        reply = json.dumps({"format": "node_tree", "data": {"id": "root", "topic": ""}})
        document = _build(sample_inputs, FakeGenerator(reply=reply))
        assert document.data.children[0].id == "error"

    @pytest.mark.parametrize(
        "reply",
        [
            "",
            "{",
            "}{",
            "null",
            "[]",
            '{"format": "node_tree"}',
            '{"format": "node_tree", "data": {"id": "root", "topic": "x", "children": "nope"}}',
            '{"format": "node_tree", "data": {"id": "a", "topic": "x", "children": [{"id": "a"}]}}',
            MODEL_REPLY[:-10],
            "```json\n{\"a\": 1}\n```",
        ],
    )
    def test_always_returns_valid_document(self, sample_inputs: dict, reply: str) -> None:
        document = _build(sample_inputs, FakeGenerator(reply=reply))
        assert document.format == "node_tree"
        assert document.data.id and document.data.topic
        ids = document.node_ids()
        assert len(ids) == len(set(ids))

    def test_deeply_nested_reply_falls_back(self, sample_inputs: dict) -> None:
        reply = '{"format": "node_tree", "data": ' + "[" * 100000 + "]" * 100000 + "}"
        document = _build(sample_inputs, FakeGenerator(reply=reply))
        assert document.data.children[0].id == "error"
        assert "nested too deeply" in document.data.children[0].topic

    def test_missing_inputs(self, sample_inputs: dict) -> None:
        generator = FakeGenerator(reply=MODEL_REPLY)
        for missing in ({"summary": ""}, {"keywords": None}, {"key_timepoints": None}):
            with pytest.raises(MissingParameterError):
                _build({**sample_inputs, **missing}, generator)
        assert generator.prompts == []

    def test_missing_api_key_fails_fast(self, sample_inputs: dict) -> None:
        settings = make_settings(DEEPSEEK_API_KEY=None)
        with pytest.raises(ConfigurationError, match="DEEPSEEK_API_KEY"):
            _build(sample_inputs, None, settings=settings)

    def test_empty_lists_are_accepted(self) -> None:
        inputs = {"keywords": [], "summary": "Only a summary", "key_timepoints": []}
        document = _build(inputs, FakeGenerator(reply=MODEL_REPLY))
        assert document.data.id == "root"


class TestProviders:
    def test_deepseek_selected_by_default(self) -> None:
        assert isinstance(create_text_generator(make_settings()), DeepSeekGenerator)

    def test_missing_key_for_selected_provider(self) -> None:
        settings = make_settings(GENERATION_PROVIDER="groq", GROQ_API_KEY=None)
        with pytest.raises(ConfigurationError, match="GROQ_API_KEY"):
            create_text_generator(settings)

    def test_prompt_mentions_colour_families(self) -> None:
        prompt = build_mindmap_prompt(["k"], "s", [])
        assert "#3DA0FF" in prompt
        assert '"root"' in prompt

    def test_sdk_errors_become_generation_errors(self) -> None:
        async def create(**kwargs):
            raise RuntimeError("401 invalid key")

        generator = DeepSeekGenerator(make_settings())
        generator._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
        with pytest.raises(GenerationError, match="DeepSeek request failed: 401 invalid key"):
            asyncio.run(generator.complete("prompt"))
