"""Tests for prompt construction, response parsing and generative fallbacks."""

import asyncio
import json
from types import SimpleNamespace

import pytest

from conftest import FakeLLM, region_at
from score_metadata.config import Config
from score_metadata.contracts import DocumentAttributes, GenerativeResult
from score_metadata.extractors.llm_extractor import (
    OpenAIMetadataModel,
    build_prompt,
    format_pdf_metadata,
    format_regions_for_prompt,
    horizontal_band,
    parse_response,
    refine_with_llm,
    refine_with_llm_async,
    size_band,
    vertical_band,
)


# ═══════════════════════════════════════════════════════════════════════════════
# PROMPT
# ═══════════════════════════════════════════════════════════════════════════════

class TestBands:
    @pytest.mark.parametrize("mid_y,expected", [(0.9, "Top"), (0.5, "Middle"), (0.1, "Bottom")])
    def test_vertical(self, mid_y, expected):
        assert vertical_band(mid_y) == expected

    @pytest.mark.parametrize("mid_x,expected", [(0.1, "Left"), (0.5, "Center"), (0.9, "Right")])
    def test_horizontal(self, mid_x, expected):
        assert horizontal_band(mid_x) == expected

    def test_size_relative_to_median(self):
        assert size_band(0.05, 0.02) == "Large"
        assert size_band(0.01, 0.02) == "Small"
        assert size_band(0.02, 0.02) == "Medium"
        assert size_band(0.05, 0.0) == "Medium"


def test_regions_formatted_top_down_with_median_size():
    regions = [
        region_at("1", 0.5, 0.05, height=0.02),
        region_at("Moonlight Sonata", 0.5, 0.85, height=0.1),
        region_at("Beethoven", 0.8, 0.78, height=0.02),
        region_at("Violin", 0.1, 0.5, height=0.02),
        region_at("cresc.", 0.3, 0.4, height=0.01),
    ]
    lines = format_regions_for_prompt(regions).splitlines()
    assert lines == [
        '[Top, Center, Large] "Moonlight Sonata"',
        '[Top, Right, Medium] "Beethoven"',
        '[Middle, Left, Medium] "Violin"',
        '[Middle, Left, Small] "cresc."',
        '[Bottom, Center, Medium] "1"',
    ]


def test_regions_capped_at_configured_count():
    regions = [region_at(f"line {i}", 0.5, i / 100) for i in range(80)]
    lines = format_regions_for_prompt(regions, Config(llm_max_regions=50)).splitlines()
    assert len(lines) == 50
    assert lines[0].endswith('"line 79"')


def test_pdf_metadata_lines():
    assert format_pdf_metadata(DocumentAttributes()) == "Title: not available\nAuthor: not available"
    text = format_pdf_metadata(DocumentAttributes(title="Sonata", subject="Piano", creator="MuseScore"))
    assert text.splitlines() == [
        "Title: Sonata",
        "Author: not available",
        "Subject: Piano",
        "Creator App: MuseScore",
    ]


def test_build_prompt_prepends_pdf_metadata():
    prompt = build_prompt([region_at("Etude", 0.5, 0.9)], DocumentAttributes(author="Chopin"))
    assert prompt.index("Author: Chopin") < prompt.index('"Etude"')


# ═══════════════════════════════════════════════════════════════════════════════
# RESPONSE PARSING
# ═══════════════════════════════════════════════════════════════════════════════

class TestParseResponse:
    def test_plain_json(self):
        result = parse_response('{"title": "Clair de Lune", "composer": null, "instruments": ["Piano"]}')
        assert result == GenerativeResult(title="Clair de Lune", composer=None, instruments=["Piano"])

    def test_fenced_json(self):
        text = '```json\n{"title": null, "composer": "Debussy", "instruments": []}\n```'
        assert parse_response(text).composer == "Debussy"

    def test_missing_instruments_is_empty(self):
        assert parse_response('{"title": "Etude"}').instruments == []

    @pytest.mark.parametrize("text", [
        "not json",
        '["Piano"]',
        '{"title": 12, "composer": null, "instruments": []}',
        '{"title": null, "composer": null, "instruments": "Piano"}',
        "",
    ])
    def test_malformed_raises(self, text):
        with pytest.raises(ValueError):
            parse_response(text)


# ═══════════════════════════════════════════════════════════════════════════════
# OPENAI BACKEND (fake client)
# ═══════════════════════════════════════════════════════════════════════════════

class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeModels:
    """Local-server style model listing: only GET /models is routed."""

    def __init__(self, served=("m",), error=None):
        self.served = served
        self.error = error
        self.list_calls = 0

    def list(self):
        self.list_calls += 1
        if self.error:
            raise self.error
        return [SimpleNamespace(id=model_id) for model_id in self.served]

    def retrieve(self, model):
        raise LookupError("404: no per-model route")


def fake_client(content="{}", served=("m",), models_error=None):
    return SimpleNamespace(
        chat=SimpleNamespace(completions=FakeCompletions(content)),
        models=FakeModels(served, models_error),
    )


class TestOpenAIMetadataModel:
    def test_generate_uses_schema_and_parses(self):
        payload = {"title": "Nocturne", "composer": "Chopin", "instruments": ["Piano"]}
        client = fake_client(json.dumps(payload))
        model = OpenAIMetadataModel(Config(llm_model="local-model"), client=client)

        result = model.generate("prompt text")

        assert result == GenerativeResult(title="Nocturne", composer="Chopin", instruments=["Piano"])
        kwargs = client.chat.completions.kwargs
        assert kwargs["model"] == "local-model"
        assert kwargs["response_format"]["type"] == "json_schema"
        assert kwargs["messages"][-1] == {"role": "user", "content": "prompt text"}

    def test_empty_content_raises(self):
        model = OpenAIMetadataModel(client=fake_client(content=None))
        with pytest.raises(ValueError):
            model.generate("prompt")

    def test_available_when_model_is_listed(self):
        client = fake_client(served=("other", "m"))
        assert OpenAIMetadataModel(Config(llm_model="m"), client=client).is_available()
        assert client.models.list_calls == 1

    def test_unavailable_when_model_not_listed(self):
        client = fake_client(served=("other",))
        assert not OpenAIMetadataModel(Config(llm_model="m"), client=client).is_available()

    def test_unavailable_when_listing_fails(self):
        client = fake_client(models_error=ConnectionError("refused"))
        assert not OpenAIMetadataModel(Config(llm_model="m"), client=client).is_available()

    def test_disabled_by_config(self):
        client = fake_client()
        assert not OpenAIMetadataModel(Config(use_llm=False), client=client).is_available()
        assert client.models.list_calls == 0


# ═══════════════════════════════════════════════════════════════════════════════
# REFINEMENT FALLBACKS
# ═══════════════════════════════════════════════════════════════════════════════

REGIONS = [region_at("Moonlight Sonata", 0.5, 0.85)]


class TestRefineWithLLM:
    def test_returns_model_result(self):
        llm = FakeLLM(GenerativeResult(title="Moonlight Sonata"))
        assert refine_with_llm(REGIONS, DocumentAttributes(), llm).title == "Moonlight Sonata"
        assert len(llm.prompts) == 1

    def test_skipped_without_regions(self):
        llm = FakeLLM(GenerativeResult(title="X"))
        assert refine_with_llm([], DocumentAttributes(), llm) is None
        assert llm.prompts == []

    def test_skipped_when_unavailable(self):
        llm = FakeLLM(GenerativeResult(title="X"), available=False)
        assert refine_with_llm(REGIONS, None, llm) is None
        assert llm.prompts == []

    def test_skipped_without_model(self):
        assert refine_with_llm(REGIONS, None, None) is None

    def test_error_gives_none(self):
        llm = FakeLLM(error=RuntimeError("model crashed"))
        assert refine_with_llm(REGIONS, None, llm) is None

    def test_timeout_gives_none(self):
        llm = FakeLLM(GenerativeResult(title="Too late"), delay=0.5)
        assert refine_with_llm(REGIONS, None, llm, Config(llm_timeout_seconds=0.05)) is None


class TestRefineWithLLMAsync:
    def test_returns_model_result(self):
        llm = FakeLLM(GenerativeResult(composer="Satie"))
        result = asyncio.run(refine_with_llm_async(REGIONS, None, llm))
        assert result.composer == "Satie"

    def test_timeout_gives_none(self):
        llm = FakeLLM(GenerativeResult(title="Too late"), delay=0.5)
        config = Config(llm_timeout_seconds=0.05)
        assert asyncio.run(refine_with_llm_async(REGIONS, None, llm, config)) is None

    def test_error_gives_none(self):
        llm = FakeLLM(error=ValueError("bad json"))
        assert asyncio.run(refine_with_llm_async(REGIONS, None, llm)) is None
