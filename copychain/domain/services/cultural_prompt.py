"""Cultural system prompt derived from the generation context."""

from copychain.domain.entities.generation_context import GenerationContext, ToneFormality

LANGUAGE_LABELS = {
    "pt-BR": "Brazilian Portuguese",
    "es": "Spanish",
    "en": "English",
}

REGION_GUIDANCE = {
    "pt-BR": "Use Brazilian vocabulary, rhythm and references: Brazilian cities, local institutions, Brazilian consumer habits.",
    "es-ES": "Use Iberian vocabulary where appropriate ('vosotros', 'ordenador'). Reference Spanish cities and institutions and local expressions.",
    "es-MX": "Use Mexican vocabulary ('ustedes', 'computadora', 'chido'). Reference Mexican cities, schools and culture.",
    "es-AR": "Use Argentine vocabulary ('vos', 'che'). Reference Argentina and porteño expressions.",
    "es-CO": "Use Colombian vocabulary. Reference Colombian cities and culture.",
    "es-CL": "Use Chilean vocabulary. Reference Chile and local expressions.",
    "en-US": "Use American spelling and vocabulary (color, organize). Reference US institutions, sports (NFL, NBA), the SAT, American cities.",
    "en-GB": "Use British spelling (colour, organise). Reference the UK: the NHS, British cities, British expressions.",
    "en-CA": "Use Canadian vocabulary. Reference Canada.",
    "en-AU": "Use Australian vocabulary. Reference Australia.",
}

FORMALITY_GUIDANCE = {
    ToneFormality.CASUAL: "Use an informal, relaxed and close tone. Light slang is welcome. Treat the reader as a friend.",
    ToneFormality.NEUTRAL: "Balance professional and approachable. Neither overly formal nor too colloquial.",
    ToneFormality.FORMAL: "Use a formal, professional tone. Avoid slang and colloquialisms. Keep the language respectful.",
}

NAMES_RULE = (
    "NAMES: Do NOT use names of real people (celebrities, doctors, authors). "
    "Use generic roles such as 'a nutritionist', 'a researcher', 'an entrepreneur'. "
    "Fictional names for avatars and characters are allowed."
)

SAFETY_RULE = (
    "CULTURAL SAFETY: Never use stereotypes of protected classes or sensitive assumptions. "
    "Use supporting, not dominant, cultural references. Do not invent endorsements from "
    "institutions or universities. Keep references as analogies, not endorsement claims."
)


def language_label(code: str) -> str:
    return LANGUAGE_LABELS.get(code, code)


def build_cultural_system_prompt(ctx: GenerationContext) -> str:
    """Render language, region, formality, name and safety rules as prompt text."""
    lines = [f"MANDATORY OUTPUT LANGUAGE: Write ALL content in {language_label(ctx.language_code)}."]

    if ctx.cultural_region and ctx.cultural_region != "auto":
        lines.append(
            "CULTURAL LOCALIZATION: Adapt cultural references, idioms, humor, examples of places, "
            f'institutions and consumer habits to the region "{ctx.cultural_region}".'
        )
        guidance = REGION_GUIDANCE.get(ctx.cultural_region, "")
        if guidance:
            lines.append(guidance)
    else:
        lines.append(
            "CULTURAL LOCALIZATION: Pick the region that best fits the target audience inferred "
            "from the product. If unsure, keep the text idiomatic but culturally neutral within "
            "the chosen language."
        )

    lines.append(f"FORMALITY: {FORMALITY_GUIDANCE[ctx.tone_formality]}")

    if ctx.avoid_real_names:
        lines.append(NAMES_RULE)

    lines.append(SAFETY_RULE)
    return "\n\n".join(lines)
