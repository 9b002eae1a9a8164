"""Generation context - language, region, tone and name policy for every request."""

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class ToneFormality(str, Enum):
    """Register of the generated copy."""

    CASUAL = "casual"
    NEUTRAL = "neutral"
    FORMAL = "formal"


VALID_LANGUAGES = ("pt-BR", "es", "en")

VALID_REGIONS = (
    "auto",
    "pt-BR",
    "es-ES",
    "es-MX",
    "es-AR",
    "es-CO",
    "es-CL",
    "en-US",
    "en-GB",
    "en-CA",
    "en-AU",
)

# Regions offered per language; "auto" lets the model infer from the product.
REGIONS_BY_LANGUAGE: dict[str, tuple[str, ...]] = {
    "pt-BR": ("auto", "pt-BR"),
    "es": ("auto", "es-ES", "es-MX", "es-AR", "es-CO", "es-CL"),
    "en": ("auto", "en-US", "en-GB", "en-CA", "en-AU"),
}


class GenerationContext(BaseModel):
    """Immutable configuration value copied into every generation request."""

    model_config = ConfigDict(frozen=True)

    language_code: str = "pt-BR"
    cultural_region: str = "auto"
    tone_formality: ToneFormality = ToneFormality.NEUTRAL
    avoid_real_names: bool = True

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any] | None) -> "GenerationContext":
        """Coerce untrusted input. Unknown values fall back to defaults.

        avoid_real_names stays on unless explicitly False.
        """
        raw = raw or {}
        language = raw.get("language_code")
        region = raw.get("cultural_region")
        tone = raw.get("tone_formality")
        return cls(
            language_code=language if language in VALID_LANGUAGES else "pt-BR",
            cultural_region=region if region in VALID_REGIONS else "auto",
            tone_formality=(
                ToneFormality(tone)
                if tone in tuple(t.value for t in ToneFormality)
                else ToneFormality.NEUTRAL
            ),
            avoid_real_names=raw.get("avoid_real_names") is not False,
        )

    def to_wire(self) -> dict[str, Any]:
        """Serialize for the generation request body."""
        return self.model_dump(mode="json")


DEFAULT_GENERATION_CONTEXT = GenerationContext()
