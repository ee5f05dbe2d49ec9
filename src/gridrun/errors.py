"""Exception taxonomy for run progression and matchmaking.

Every error carries a ``context`` dict with the ids and values a caller
needs to render a message (``required`` vs ``available`` gold, the offending
pick ids, ...).  Category base classes let callers map whole families to a
response without enumerating every subclass:

- :class:`NotFoundError` -- run, faction, leader or unit id unresolved.
- :class:`AccessDeniedError` -- requester does not own the run.
- :class:`AlreadyCompletedError` -- mutation attempted on a finished run.
- :class:`ConflictError` -- second active run, or a stale write.
- :class:`InvalidInputError` -- malformed picks, positions, pairings.
- :class:`InsufficientResourceError` -- not enough gold.
- :class:`DomainRuleError` -- the request is well-formed but the rules forbid it.
- :class:`UnavailableError` -- nothing to draft, nobody to fight.
"""

from __future__ import annotations

from typing import Any


class GridRunError(Exception):
    """Base class for all caller-facing errors raised by gridrun."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "context": dict(self.context),
        }


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

class NotFoundError(GridRunError):
    pass


class AccessDeniedError(GridRunError):
    pass


class AlreadyCompletedError(GridRunError):
    pass


class ConflictError(GridRunError):
    pass


class InvalidInputError(GridRunError):
    pass


class InsufficientResourceError(GridRunError):
    pass


class DomainRuleError(GridRunError):
    pass


class UnavailableError(GridRunError):
    pass


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------

class RunNotFound(NotFoundError):
    def __init__(self, run_id: str) -> None:
        super().__init__(f"Run {run_id} not found", run_id=run_id)


class FactionNotFound(NotFoundError):
    def __init__(self, faction: str) -> None:
        super().__init__(f"Faction {faction!r} not found", faction=faction)


class LeaderNotFound(NotFoundError):
    def __init__(self, leader_id: str) -> None:
        super().__init__(f"Leader {leader_id!r} not found", leader_id=leader_id)


class UnitNotFound(NotFoundError):
    def __init__(self, unit_id: str) -> None:
        super().__init__(f"Unit {unit_id!r} not found", unit_id=unit_id)


# ---------------------------------------------------------------------------
# Ownership / lifecycle / conflicts
# ---------------------------------------------------------------------------

class RunAccessDenied(AccessDeniedError):
    def __init__(self, run_id: str, player_id: str) -> None:
        super().__init__(
            f"Player {player_id} does not own run {run_id}",
            run_id=run_id,
            player_id=player_id,
        )


class RunAlreadyCompleted(AlreadyCompletedError):
    def __init__(self, run_id: str, status: str) -> None:
        super().__init__(
            f"Run {run_id} is already completed with status {status!r}",
            run_id=run_id,
            status=status,
        )


class ActiveRunExists(ConflictError):
    def __init__(self, player_id: str, existing_run_id: str) -> None:
        super().__init__(
            f"Player {player_id} already has an active run",
            player_id=player_id,
            existing_run_id=existing_run_id,
        )


class VersionConflict(ConflictError):
    """A run was modified by someone else between load and save."""

    def __init__(self, run_id: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Run {run_id} was modified concurrently "
            f"(expected version {expected}, found {actual})",
            run_id=run_id,
            expected=expected,
            actual=actual,
        )


# ---------------------------------------------------------------------------
# Invalid input
# ---------------------------------------------------------------------------

class InvalidDraftPick(InvalidInputError):
    def __init__(self, reason: str, invalid_picks: list[str] | None = None) -> None:
        super().__init__(reason, invalid_picks=list(invalid_picks or []))


class InvalidPosition(InvalidInputError):
    def __init__(self, x: int, y: int) -> None:
        super().__init__(f"Position ({x}, {y}) is outside the grid", x=x, y=y)


class PositionOccupied(InvalidInputError):
    def __init__(self, x: int, y: int, occupant: str) -> None:
        super().__init__(
            f"Position ({x}, {y}) is occupied by {occupant}",
            x=x,
            y=y,
            occupant=occupant,
        )


class CardNotInHand(InvalidInputError):
    def __init__(self, instance_id: str) -> None:
        super().__init__(f"Card {instance_id} is not in hand", instance_id=instance_id)


class UnitNotOnField(InvalidInputError):
    def __init__(self, instance_id: str) -> None:
        super().__init__(f"Unit {instance_id} is not on the field", instance_id=instance_id)


class InvalidFactionLeader(InvalidInputError):
    def __init__(self, faction: str, leader_id: str) -> None:
        super().__init__(
            f"Leader {leader_id!r} does not belong to faction {faction!r}",
            faction=faction,
            leader_id=leader_id,
        )


class InvalidSpellTiming(InvalidInputError):
    def __init__(self, spell_id: str) -> None:
        super().__init__(f"Spell {spell_id!r} is not available in this run", spell_id=spell_id)


class InvalidSnapshot(InvalidInputError):
    def __init__(self, reason: str, run_id: str | None = None) -> None:
        super().__init__(f"Invalid snapshot: {reason}", run_id=run_id)


# ---------------------------------------------------------------------------
# Resources and domain rules
# ---------------------------------------------------------------------------

class InsufficientGold(InsufficientResourceError):
    def __init__(self, required: int, available: int, action: str) -> None:
        super().__init__(
            f"Not enough gold to {action}: need {required}, have {available}",
            required=required,
            available=available,
            action=action,
        )


class UnitAlreadyBattled(DomainRuleError):
    def __init__(self, instance_id: str) -> None:
        super().__init__(
            f"Unit {instance_id} has already battled and cannot return to hand",
            instance_id=instance_id,
        )


class InvalidUpgrade(DomainRuleError):
    def __init__(self, reason: str, instance_id: str) -> None:
        super().__init__(reason, instance_id=instance_id)


# ---------------------------------------------------------------------------
# Unavailable
# ---------------------------------------------------------------------------

class DraftNotAvailable(UnavailableError):
    def __init__(self, run_id: str, reason: str) -> None:
        super().__init__(f"Draft not available: {reason}", run_id=run_id, reason=reason)


class NoOpponentFound(UnavailableError):
    def __init__(self, run_id: str, wins: int) -> None:
        super().__init__(
            f"No opponent found for run {run_id} at {wins} wins",
            run_id=run_id,
            wins=wins,
        )
