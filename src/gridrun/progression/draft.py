"""Draft engine -- deals option windows from the front of the remaining deck.

Initial draft (nothing drafted yet): the first 5 cards are offered and
exactly 3 must be picked.  Every later draft offers ``min(3, remaining)``
cards and takes 1 pick.  Every offered card leaves the front of
the deck; the unpicked ones are appended to its tail, so a 12-card deck
drains completely over one initial and nine post-battle drafts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from gridrun.config import DraftConfig
from gridrun.core.models import Card, Run
from gridrun.errors import DraftNotAvailable, InvalidDraftPick, RunAlreadyCompleted

if TYPE_CHECKING:
    from gridrun.progression.runs import RunService

logger = logging.getLogger(__name__)


def _nothing_drafted(run: Run) -> bool:
    """True until the initial draft; drafted cards only ever sit in hand or field."""
    return not run.hand and not run.field


@dataclass
class DraftOptions:
    cards: list[Card]
    is_initial: bool
    required_picks: int
    remaining_in_deck: int


@dataclass
class DraftResult:
    run: Run
    picked: list[Card]
    returned_to_deck: list[Card]


@dataclass
class DraftAvailability:
    available: bool
    is_initial: bool
    reason: str | None = None


class DraftService:
    def __init__(self, runs: RunService, config: DraftConfig | None = None) -> None:
        self.runs = runs
        self.config = config or runs.config.draft

    # -- window computation ---------------------------------------------------

    def _window(self, run: Run) -> DraftOptions:
        """Compute the current window or raise :class:`DraftNotAvailable`."""
        remaining = len(run.remaining_deck)
        if _nothing_drafted(run):
            if remaining < self.config.initial_options:
                raise DraftNotAvailable(
                    run.id,
                    f"initial draft needs {self.config.initial_options} cards, "
                    f"{remaining} remain",
                )
            size = self.config.initial_options
            picks = self.config.initial_picks
            is_initial = True
        else:
            if remaining == 0:
                raise DraftNotAvailable(run.id, "no cards left in deck")
            size = min(self.config.post_battle_options, remaining)
            picks = min(self.config.post_battle_picks, size)
            is_initial = False

        return DraftOptions(
            cards=[c.model_copy() for c in run.remaining_deck[:size]],
            is_initial=is_initial,
            required_picks=picks,
            remaining_in_deck=remaining - size,
        )

    # -- public API -----------------------------------------------------------

    def get_options(self, run_id: str, player_id: str) -> DraftOptions:
        run = self.runs.load_active(run_id, player_id)
        return self._window(run)

    def is_available(self, run_id: str, player_id: str) -> DraftAvailability:
        """Non-mutating availability check for UI polling.

        A completed run reports unavailable instead of raising.
        """
        try:
            run = self.runs.load_active(run_id, player_id)
        except RunAlreadyCompleted as exc:
            return DraftAvailability(
                available=False, is_initial=False, reason=f"run is {exc.context['status']}",
            )
        try:
            options = self._window(run)
        except DraftNotAvailable as exc:
            return DraftAvailability(
                available=False, is_initial=_nothing_drafted(run), reason=exc.context["reason"],
            )
        return DraftAvailability(available=True, is_initial=options.is_initial)

    def submit_picks(self, run_id: str, player_id: str, picks: Sequence[str]) -> DraftResult:
        """Move the picked cards to hand and recycle the rest of the window.

        Raises
        ------
        InvalidDraftPick
            Wrong pick count, a pick outside the offered window, or a
            duplicate pick (checked in that order).
        DraftNotAvailable
            If no draft window can be offered.
        """
        run = self.runs.load_active(run_id, player_id)
        options = self._window(run)
        picks = list(picks)

        if len(picks) != options.required_picks:
            raise InvalidDraftPick(
                f"Expected {options.required_picks} picks, got {len(picks)}", picks,
            )
        offered = {c.instance_id for c in options.cards}
        outside = [p for p in picks if p not in offered]
        if outside:
            raise InvalidDraftPick("Picks are not in the offered window", outside)
        if len(set(picks)) != len(picks):
            duplicates = sorted({p for p in picks if picks.count(p) > 1})
            raise InvalidDraftPick("Duplicate picks", duplicates)

        window = run.remaining_deck[:len(options.cards)]
        picked = [c for c in window if c.instance_id in picks]
        returned = [c for c in window if c.instance_id not in picks]

        run.hand = run.hand + picked
        run.remaining_deck = run.remaining_deck[len(window):] + returned
        saved = self.runs.commit(run)

        logger.info(
            "Run %s drafted %s (%s draft), %d returned to deck",
            run_id, [c.instance_id for c in picked],
            "initial" if options.is_initial else "post-battle", len(returned),
        )
        return DraftResult(run=saved, picked=picked, returned_to_deck=returned)
