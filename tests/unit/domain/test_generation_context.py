"""Tests for GenerationContext."""

import pytest
from pydantic import ValidationError

from copychain.domain.entities.generation_context import (
    DEFAULT_GENERATION_CONTEXT,
    REGIONS_BY_LANGUAGE,
    VALID_REGIONS,
    GenerationContext,
    ToneFormality,
)


class TestGenerationContext:
    """Defaults, coercion and serialization."""

    def test_defaults(self):
        ctx = GenerationContext()
        assert ctx.language_code == "pt-BR"
        assert ctx.cultural_region == "auto"
        assert ctx.tone_formality is ToneFormality.NEUTRAL
        assert ctx.avoid_real_names is True
        assert DEFAULT_GENERATION_CONTEXT == ctx

    def test_immutable(self):
        with pytest.raises(ValidationError):
            DEFAULT_GENERATION_CONTEXT.language_code = "en"

    def test_from_raw_valid(self):
        ctx = GenerationContext.from_raw(
            {
                "language_code": "es",
                "cultural_region": "es-MX",
                "tone_formality": "casual",
                "avoid_real_names": False,
            }
        )
        assert ctx == GenerationContext(
            language_code="es",
            cultural_region="es-MX",
            tone_formality=ToneFormality.CASUAL,
            avoid_real_names=False,
        )

    def test_from_raw_unknown_values_fall_back(self):
        ctx = GenerationContext.from_raw(
            {
                "language_code": "de",
                "cultural_region": "de-DE",
                "tone_formality": "shouty",
                "avoid_real_names": "no",
            }
        )
        assert ctx == DEFAULT_GENERATION_CONTEXT

    @pytest.mark.parametrize("raw", [None, {}, {"language_code": ["en"]}])
    def test_from_raw_empty_or_odd(self, raw):
        assert GenerationContext.from_raw(raw) == DEFAULT_GENERATION_CONTEXT

    def test_to_wire(self):
        assert GenerationContext(language_code="en", tone_formality="formal").to_wire() == {
            "language_code": "en",
            "cultural_region": "auto",
            "tone_formality": "formal",
            "avoid_real_names": True,
        }

    def test_regions_by_language_are_valid(self):
        for regions in REGIONS_BY_LANGUAGE.values():
            assert set(regions) <= set(VALID_REGIONS)
