"""Step catalog - the fixed, ordered stages of the copy pipeline."""

from pydantic import BaseModel, ConfigDict


class StepDefinition(BaseModel):
    """One stage of the pipeline. Catalog order defines precedence."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    icon: str
    description: str
    agent: str


STEPS: tuple[StepDefinition, ...] = (
    StepDefinition(
        id="avatar",
        label="Avatar",
        icon="🧠",
        description="Consumer psychologist - deep buyer profile",
        agent="Consumer Psychologist",
    ),
    StepDefinition(
        id="usp",
        label="USP",
        icon="💎",
        description="Positioning strategist - unique selling proposition",
        agent="Positioning Strategist",
    ),
    StepDefinition(
        id="oferta",
        label="Offer",
        icon="📦",
        description="Offer architect - irresistible offer stack",
        agent="Offer Architect",
    ),
    StepDefinition(
        id="pagina_vendas",
        label="Sales Page",
        icon="📄",
        description="High-conversion copywriter - full sales page",
        agent="Sales Page Copywriter",
    ),
    StepDefinition(
        id="upsells",
        label="Upsells",
        icon="🔥",
        description="LTV specialist - order bumps and upsells",
        agent="LTV Specialist",
    ),
    StepDefinition(
        id="vsl_longa",
        label="VSL 60min",
        icon="🎬",
        description="VSL scriptwriter - long-form video sales letter",
        agent="VSL Scriptwriter",
    ),
    StepDefinition(
        id="vsl_curta",
        label="VSL 15min",
        icon="🎥",
        description="VSL scriptwriter - short attention-first cut",
        agent="VSL Scriptwriter",
    ),
    StepDefinition(
        id="pagina_upsell",
        label="Upsell Page",
        icon="🛒",
        description="Post-purchase copywriter - upsell page",
        agent="Post-Purchase Copywriter",
    ),
    StepDefinition(
        id="vsl_upsell",
        label="Upsell VSL",
        icon="📹",
        description="Post-purchase VSL specialist",
        agent="Post-Purchase VSL Specialist",
    ),
    StepDefinition(
        id="anuncios",
        label="Ads",
        icon="📢",
        description="Paid traffic creative - ad arsenal",
        agent="Paid Traffic Creative",
    ),
)

_BY_ID = {step.id: step for step in STEPS}


def get_step(step_id: str) -> StepDefinition | None:
    """Return the step with this id, or None."""
    return _BY_ID.get(step_id)


def step_index(step_id: str) -> int:
    """Catalog position of step_id; -1 if unknown."""
    for i, step in enumerate(STEPS):
        if step.id == step_id:
            return i
    return -1
