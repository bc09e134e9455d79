# Breadcrumb trail shown in the title bar
from dataclasses import dataclass

from mcpwire.tui.theme import Theme


@dataclass(frozen=True)
class BreadcrumbStep:
    """One wizard step.

    ABOUTME: label is shown while active, value once completed
    """
    label: str
    value: str = ""
    active: bool = False
    completed: bool = False
    visible: bool = True


def render_breadcrumb(theme: Theme, steps: list[BreadcrumbStep]) -> str:
    """Join visible steps with a › separator.

    Completed steps show their value (or label) with a check mark; the
    active step shows its label. Invisible steps are omitted.
    """
    parts = []
    for step in steps:
        if not step.visible:
            continue
        if step.completed:
            parts.append(theme.completed.render(f"{step.value or step.label} ✓"))
        elif step.active:
            parts.append(theme.active.render(step.label))
        else:
            parts.append(theme.dim.render(step.label))

    if not parts:
        return ""
    return theme.bread_sep.render(" › ").join(parts)
