"""Human-in-the-loop script approval."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.text import Text

from core import ReviewDecision
from utils.logger import console as default_console


logger = logging.getLogger(__name__)

DEFAULT_FEEDBACK = "Make the hook punchier"
FAILED_FEEDBACK = "Script generation failed."


def is_reviewable(script: Optional[str]) -> bool:
    return bool(script) and not script.startswith("Error:")


class ConsoleReviewer:
    """Shows the draft and asks the operator to approve or give feedback."""

    def __init__(
        self,
        *,
        console: Optional[Console] = None,
        confirm: Optional[Callable[..., bool]] = None,
        ask: Optional[Callable[..., str]] = None,
    ) -> None:
        self.console = console or default_console
        self._confirm = confirm or Confirm.ask
        self._ask = ask or Prompt.ask

    def review(self, script: Optional[str]) -> ReviewDecision:
        logger.info("--- HUMAN REVIEW STARTED ---")
        if not is_reviewable(script):
            logger.error("No valid script was generated.")
            return ReviewDecision(approved=False, feedback=FAILED_FEEDBACK)

        # Text keeps bracketed stage directions literal
        self.console.print(Panel(Text(script), title="Script draft", expand=False))

        approved = self._confirm("Is this script good enough?", default=False)
        if approved:
            return ReviewDecision(approved=True)

        feedback = self._ask("What should be changed?", default=DEFAULT_FEEDBACK)
        return ReviewDecision(approved=False, feedback=(feedback or DEFAULT_FEEDBACK).strip())


class AutoApproveReviewer:
    """Approves every valid draft; for unattended runs."""

    def review(self, script: Optional[str]) -> ReviewDecision:
        if not is_reviewable(script):
            return ReviewDecision(approved=False, feedback=FAILED_FEEDBACK)
        logger.info("Auto-approving script")
        return ReviewDecision(approved=True)
