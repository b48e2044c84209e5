"""Terminal notifier rendering outcomes with Typer styling."""

from __future__ import annotations

import typer

from digisign.app.ports import Outcome, OutcomeKind, ResultNotifierPort

_COLORS = {
    OutcomeKind.SIGNED: typer.colors.GREEN,
    OutcomeKind.ACCEPTED: typer.colors.GREEN,
    OutcomeKind.REJECTED: typer.colors.YELLOW,
    OutcomeKind.FAILED: typer.colors.RED,
}


class EchoNotifier(ResultNotifierPort):
    """Print one line per outcome; failures go to stderr."""

    def notify(self, outcome: Outcome) -> None:
        line = outcome.message
        if outcome.artifact:
            line = f"{line} -> {outcome.artifact}"
        typer.secho(
            line,
            fg=_COLORS[outcome.kind],
            err=outcome.kind is OutcomeKind.FAILED,
        )


class CollectingNotifier(ResultNotifierPort):
    """Keep outcomes in memory for callers that render them later."""

    def __init__(self) -> None:
        self.outcomes: list[Outcome] = []

    def notify(self, outcome: Outcome) -> None:
        self.outcomes.append(outcome)
