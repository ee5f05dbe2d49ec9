"""Run aggregate, cards, field placements, snapshots and opponents.

The :class:`Run` model is the aggregate root.  Its validator re-checks the
numeric bounds, card conservation and grid exclusivity every time a run is
constructed or re-validated, so services persist a run only after passing
it back through ``Run.model_validate``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, ClassVar, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

GRID_WIDTH = 8
GRID_HEIGHT = 2
MAX_FIELD_UNITS = GRID_WIDTH * GRID_HEIGHT

MAX_WINS = 9
MAX_LOSSES = 4
DECK_SIZE = 12
MAX_HAND_SIZE = 12


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


class RunStatus(str, Enum):
    ACTIVE = "active"
    WON = "won"
    LOST = "lost"


class SpellTiming(str, Enum):
    """When during a battle a leader spell fires."""

    EARLY = "early"
    MID = "mid"
    LATE = "late"


# ---------------------------------------------------------------------------
# Cards and placements
# ---------------------------------------------------------------------------

class Position(BaseModel):
    """A cell on the player's half of the battle line."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int

    def in_bounds(self) -> bool:
        return 0 <= self.x < GRID_WIDTH and 0 <= self.y < GRID_HEIGHT


class Card(BaseModel):
    """A unit instance.  ``instance_id`` is stable across deck/hand/field."""

    unit_id: str
    tier: int = Field(default=1, ge=1, le=3)
    instance_id: str


class FieldUnit(Card):
    position: Position
    has_battled: bool = False
    """Set once the unit has fought; it can then only be repositioned."""

    def to_card(self) -> Card:
        return Card(unit_id=self.unit_id, tier=self.tier, instance_id=self.instance_id)


class PlacedUnit(BaseModel):
    """A unit in a snapshot or bot team (no instance identity)."""

    unit_id: str
    tier: int = Field(default=1, ge=1, le=3)
    position: Position


class SpellCard(BaseModel):
    spell_id: str
    timing: SpellTiming | None = None


class SpellTimingConfig(BaseModel):
    spell_id: str
    timing: SpellTiming


def _check_positions(positions: list[Position], what: str) -> None:
    seen: set[tuple[int, int]] = set()
    for pos in positions:
        if not pos.in_bounds():
            raise ValueError(f"{what} position ({pos.x}, {pos.y}) is outside the grid")
        key = (pos.x, pos.y)
        if key in seen:
            raise ValueError(f"{what} position ({pos.x}, {pos.y}) is used twice")
        seen.add(key)


# ---------------------------------------------------------------------------
# Battle history
# ---------------------------------------------------------------------------

class OpponentSummary(BaseModel):
    name: str = "Unknown"
    faction: str = "unknown"
    rating: int = 1000


class BattleHistoryEntry(BaseModel):
    battle_id: str
    result: Literal["win", "loss"]
    round: int
    gold_earned: int
    rating_change: int = 0
    opponent: OpponentSummary = Field(default_factory=OpponentSummary)
    timestamp: datetime = Field(default_factory=utcnow)


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------

class Run(BaseModel):
    """One attempt at the roguelike mode, bounded by 9 wins or 4 losses."""

    id: str = Field(default_factory=new_id)
    player_id: str
    faction: str
    leader_id: str

    deck: list[Card]
    remaining_deck: list[Card]
    """Undrafted cards; the front is the next draft window."""
    hand: list[Card] = Field(default_factory=list, max_length=MAX_HAND_SIZE)
    field: list[FieldUnit] = Field(default_factory=list, max_length=MAX_FIELD_UNITS)
    spells: list[SpellCard] = Field(default_factory=list)

    wins: int = Field(default=0, ge=0, le=MAX_WINS)
    losses: int = Field(default=0, ge=0, le=MAX_LOSSES)
    consecutive_wins: int = Field(default=0, ge=0)
    consecutive_losses: int = Field(default=0, ge=0)
    gold: int = Field(ge=0)
    rating: int = Field(default=1000, ge=0)
    status: RunStatus = RunStatus.ACTIVE
    battle_history: list[BattleHistoryEntry] = Field(default_factory=list)

    version: int = 0
    """Bumped by the repository on every successful save."""

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _check_invariants(self) -> Run:
        located = [c.instance_id for c in self.remaining_deck]
        located += [c.instance_id for c in self.hand]
        located += [u.instance_id for u in self.field]
        if len(located) != len(self.deck):
            raise ValueError(
                f"Card conservation violated: deck has {len(self.deck)} cards, "
                f"remaining+hand+field has {len(located)}"
            )
        if sorted(located) != sorted(c.instance_id for c in self.deck):
            raise ValueError("Card conservation violated: instance ids do not match deck")

        _check_positions([u.position for u in self.field], "Field")

        # Only an active run flips; won/lost are terminal.
        if self.status is RunStatus.ACTIVE:
            if self.wins >= MAX_WINS:
                self.status = RunStatus.WON
            elif self.losses >= MAX_LOSSES:
                self.status = RunStatus.LOST
        return self

    # -- queries --------------------------------------------------------------

    @property
    def round(self) -> int:
        """Index of the battle about to be fought."""
        return self.wins + self.losses + 1

    @property
    def is_active(self) -> bool:
        return self.status is RunStatus.ACTIVE

    def card_count(self) -> int:
        return len(self.remaining_deck) + len(self.hand) + len(self.field)

    def remaining_battles(self) -> tuple[int, int]:
        """Return ``(wins_needed, losses_allowed)`` before the run ends."""
        return MAX_WINS - self.wins, MAX_LOSSES - self.losses - 1

    def find_in_hand(self, instance_id: str) -> Card | None:
        return next((c for c in self.hand if c.instance_id == instance_id), None)

    def find_on_field(self, instance_id: str) -> FieldUnit | None:
        return next((u for u in self.field if u.instance_id == instance_id), None)

    def occupant(self, position: Position) -> FieldUnit | None:
        return next((u for u in self.field if u.position == position), None)

    def summary(self) -> dict[str, object]:
        wins_needed, losses_allowed = self.remaining_battles()
        return {
            "id": self.id,
            "faction": self.faction,
            "leader_id": self.leader_id,
            "status": self.status.value,
            "wins": self.wins,
            "losses": self.losses,
            "round": self.round,
            "gold": self.gold,
            "rating": self.rating,
            "wins_needed": wins_needed,
            "losses_allowed": losses_allowed,
            "hand_size": len(self.hand),
            "field_size": len(self.field),
            "remaining_deck": len(self.remaining_deck),
        }


# ---------------------------------------------------------------------------
# Snapshots and opponents
# ---------------------------------------------------------------------------

class Snapshot(BaseModel):
    """Immutable copy of a deployed team, used as matchmaking bait."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    run_id: str
    player_id: str
    wins: int = Field(ge=0, le=MAX_WINS)
    round: int = Field(ge=1)
    rating: int = Field(ge=0)
    team: list[PlacedUnit] = Field(min_length=1, max_length=MAX_FIELD_UNITS)
    spell_timings: list[SpellTimingConfig] = Field(default_factory=list)
    faction: str
    leader_id: str
    created_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _check_team(self) -> Snapshot:
        _check_positions([u.position for u in self.team], "Team")
        return self


class HumanOpponent(BaseModel):
    kind: Literal["human"] = "human"
    snapshot: Snapshot

    is_bot: ClassVar[bool] = False

    @property
    def id(self) -> str:
        return self.snapshot.player_id

    @property
    def display_name(self) -> str:
        return f"Player {self.snapshot.player_id}"

    @property
    def team(self) -> list[PlacedUnit]:
        return self.snapshot.team

    @property
    def spell_timings(self) -> list[SpellTimingConfig]:
        return self.snapshot.spell_timings

    @property
    def faction(self) -> str:
        return self.snapshot.faction

    @property
    def leader_id(self) -> str:
        return self.snapshot.leader_id

    @property
    def rating(self) -> int:
        return self.snapshot.rating

    def summary(self) -> OpponentSummary:
        return OpponentSummary(name=self.display_name, faction=self.faction, rating=self.rating)


class BotOpponent(BaseModel):
    """Generated opponent; never persisted."""

    kind: Literal["bot"] = "bot"
    id: str
    name: str
    faction: str
    leader_id: str
    team: list[PlacedUnit]
    spell_timings: list[SpellTimingConfig]
    difficulty: float = Field(ge=0.0, le=1.0)
    rating: int = 1000
    variant: int | None = None
    """Curated composition variant, or ``None`` for a budget-filled team."""

    is_bot: ClassVar[bool] = True

    @property
    def display_name(self) -> str:
        return self.name

    def summary(self) -> OpponentSummary:
        return OpponentSummary(name=self.name, faction=self.faction, rating=self.rating)


Opponent = Annotated[Union[HumanOpponent, BotOpponent], Field(discriminator="kind")]
