"""Pipeline navigation policy - which steps the user may open."""

from collections.abc import Mapping, Sequence

from copychain.domain.entities.steps import STEPS, StepDefinition


def is_step_selectable(
    index: int,
    results: Mapping[str, str],
    current_step_index: int,
    is_generating: bool,
    steps: Sequence[StepDefinition] = STEPS,
) -> bool:
    """A step is selectable if it has a committed result, or nothing is
    generating and it is at most one past the current step.

    Forward progress is strictly sequential; completed steps can always be
    revisited.
    """
    if not 0 <= index < len(steps):
        return False
    if steps[index].id in results:
        return True
    return not is_generating and index <= current_step_index + 1


def selectable_steps(
    results: Mapping[str, str],
    current_step_index: int,
    is_generating: bool,
    steps: Sequence[StepDefinition] = STEPS,
) -> list[bool]:
    """Selectability flag for every catalog entry (sidebar rendering)."""
    return [
        is_step_selectable(i, results, current_step_index, is_generating, steps)
        for i in range(len(steps))
    ]
