"""Upstream context assembly for a step request."""

from collections.abc import Mapping, Sequence

from copychain.domain.entities.steps import STEPS, StepDefinition

CONTEXT_SEPARATOR = "\n\n---\n\n"


def build_previous_context(
    step_index: int,
    results: Mapping[str, str],
    steps: Sequence[StepDefinition] = STEPS,
) -> str:
    """Join labeled results of all steps strictly before step_index.

    Order follows catalog position, not completion time. Steps without a
    committed result are skipped. Returns "" when nothing precedes.
    """
    blocks = [
        f"## {step.label}\n{results[step.id]}"
        for step in steps[: max(step_index, 0)]
        if results.get(step.id)
    ]
    return CONTEXT_SEPARATOR.join(blocks)
