"""
Turn continuity and follow resolution.

Reports hide most locations early in the game: the grid letters print as
``##`` and only the column/row digits are real. The resolver carries known
locations forward from turn to turn and from parent units to the units
they created, resolves ``Follows`` and ``Goes to`` lines, and then hands
each unit to the ``HexWalker``.

Order of work inside a turn:

1. derive each unit's starting hex;
2. pin followers and goes-to units, queue followers whose leader is not
   yet placed;
3. walk everyone else and check the computed ending against the report;
4. walk scouts from their unit's ending hex;
5. drain the follow queue;
6. check nothing is left hidden;
7. carry each ending into the next turn as its start.
"""

from __future__ import annotations

import logging

from tribemap.core.config import MapperConfig
from tribemap.core.coords import (
    NOT_AVAILABLE,
    is_known,
    is_obscured,
    parse_grid,
    same_digits,
    with_grid,
)
from tribemap.core.errors import (
    ContinuityError,
    FinalDestinationMismatch,
    InvariantViolation,
    LocationMismatchError,
    ObscuredLocationError,
    UnresolvedFollowError,
)
from tribemap.core.models import MovementResult, Turn, is_clan
from tribemap.engine.walker import HexWalker

logger = logging.getLogger(__name__)


class TurnResolver:
    """Resolves every unit's location across an ordered list of turns.

    Args:
        walker: Walk engine (owns the hex map).
        config: Mapping run configuration.
    """

    def __init__(self, walker: HexWalker, config: MapperConfig | None = None) -> None:
        self.walker = walker
        self.config = config or walker.config
        # Most recent resolved movement per unit, across turns.
        self.last_seen: dict[str, MovementResult] = {}

    def resolve(self, turns: list[Turn]) -> None:
        """Resolve ``turns`` in ascending turn order.

        Raises:
            ContinuityError: Locations that cannot be reconciled.
            InvariantViolation: Observations that contradict the map.
        """
        ordered = sorted(turns, key=lambda t: t.id)
        for index, turn in enumerate(ordered):
            next_turn = ordered[index + 1] if index + 1 < len(ordered) else None
            self.resolve_turn(turn, next_turn)

    def resolve_turn(self, turn: Turn, next_turn: Turn | None = None) -> None:
        queue: dict[str, list[MovementResult]] = {}
        for movement in turn.ordered_units():
            self._derive_start(movement, turn)
            if movement.follows:
                self._resolve_follower(movement, turn, queue)
            elif movement.goes_to:
                self._resolve_goes_to(movement)
            else:
                self._walk(movement)

        self._drain_follow_queue(turn, queue)

        for movement in turn.ordered_units():
            if not is_known(movement.starting_coords) or not is_known(movement.ending_coords):
                raise ObscuredLocationError(
                    f"location still hidden after resolution "
                    f"(start {movement.starting_coords}, end {movement.ending_coords})",
                    turn_id=turn.id, unit_id=movement.unit_id,
                )
            self.last_seen[movement.unit_id] = movement

        if next_turn is not None:
            self._propagate(turn, next_turn)
        logger.info("turn %s resolved: %d units", turn.id, len(turn.movements))

    # ---- Starting hex ----

    def _derive_start(self, movement: MovementResult, turn: Turn) -> None:
        start = movement.starting_coords
        if is_known(start):
            return
        context = {"turn_id": turn.id, "unit_id": movement.unit_id}
        prior = self.last_seen.get(movement.unit_id)
        parent = None if is_clan(movement.unit_id) else turn.movements.get(movement.parent_id)

        if start == NOT_AVAILABLE:
            # Created this turn: it starts where its parent started.
            if parent is not None and is_known(parent.starting_coords):
                movement.starting_coords = parent.starting_coords
                return
            self._unresolved_start(movement, "new unit has no placed parent", **context)
            return

        if prior is not None:
            if not same_digits(prior.ending_coords, start):
                raise LocationMismatchError(
                    f"previous hex {start} does not match last known hex {prior.ending_coords}",
                    **context,
                )
            movement.starting_coords = prior.ending_coords
            return

        if parent is not None:
            for candidate in (parent.ending_coords, parent.starting_coords):
                if is_known(candidate) and same_digits(candidate, start):
                    movement.starting_coords = with_grid(candidate[:2], start)
                    return

        self._unresolved_start(movement, f"cannot derive grid for {start}", **context)

    def _unresolved_start(self, movement: MovementResult, reason: str, **context) -> None:
        if self.config.quit_on_invalid_grid:
            raise ObscuredLocationError(reason, **context)
        start = movement.starting_coords
        if start == NOT_AVAILABLE:
            raise ObscuredLocationError(reason, **context)
        movement.starting_coords = with_grid(self.config.origin_grid, start)
        if self.config.warn_on_invalid_grid:
            logger.warning(
                "turn %s unit %s: %s, assuming grid %s",
                context["turn_id"], context["unit_id"], reason, self.config.origin_grid,
            )

    # ---- Follows / goes to ----

    def _resolve_follower(
        self, movement: MovementResult, turn: Turn, queue: dict[str, list[MovementResult]],
    ) -> None:
        context = {"turn_id": turn.id, "unit_id": movement.unit_id}
        if movement.follows == movement.unit_id:
            raise InvariantViolation("unit follows itself", **context)
        leader = turn.movements.get(movement.follows)
        if leader is None:
            raise UnresolvedFollowError(
                f"follows {movement.follows}, which is not in this turn's report", **context,
            )
        if is_known(movement.ending_coords):
            self._pin(movement, movement.ending_coords)
            leader.follower_links.append(movement.unit_id)
            return
        target = self._leader_location(leader)
        if target:
            self._pin(movement, target)
            leader.follower_links.append(movement.unit_id)
            return
        queue.setdefault(leader.unit_id, []).append(movement)

    @staticmethod
    def _leader_location(leader: MovementResult) -> str:
        if is_known(leader.ending_coords):
            return leader.ending_coords
        if is_known(leader.goes_to):
            return leader.goes_to
        return ""

    def _drain_follow_queue(self, turn: Turn, queue: dict[str, list[MovementResult]]) -> None:
        for _ in range(self.config.max_follow_passes):
            if not queue:
                return
            for leader_id in list(queue):
                target = self._leader_location(turn.movements[leader_id])
                if not target:
                    continue
                for follower in queue.pop(leader_id):
                    self._pin(follower, target)
                    turn.movements[leader_id].follower_links.append(follower.unit_id)
        if queue:
            stuck = sorted(f.unit_id for followers in queue.values() for f in followers)
            raise UnresolvedFollowError(
                f"follow chain did not resolve after {self.config.max_follow_passes} passes: "
                f"{', '.join(stuck)}",
                turn_id=turn.id,
            )

    def _resolve_goes_to(self, movement: MovementResult) -> None:
        context = {"turn_id": movement.turn_id, "unit_id": movement.unit_id}
        if movement.goes_to == NOT_AVAILABLE:
            self._pin(movement, movement.starting_coords)
            return
        if movement.goes_to != movement.reported_ending:
            raise LocationMismatchError(
                f"goes to {movement.goes_to} but report shows {movement.reported_ending}",
                **context,
            )
        if is_obscured(movement.goes_to):
            raise ObscuredLocationError(f"goes to hidden hex {movement.goes_to}", **context)
        self._pin(movement, movement.goes_to)

    def _pin(self, movement: MovementResult, grid_text: str) -> None:
        location = parse_grid(grid_text)
        movement.ending_coords = grid_text
        self.walker.pin(movement, location)
        self.walker.walk_scouts(movement, location)

    # ---- Walking ----

    def _walk(self, movement: MovementResult) -> None:
        context = {"turn_id": movement.turn_id, "unit_id": movement.unit_id}
        start = parse_grid(movement.starting_coords)
        end = self.walker.walk(movement, start).to_grid_text()
        reported = movement.reported_ending
        agrees = same_digits(end, reported) if is_obscured(reported) else end == reported
        if reported and reported != NOT_AVAILABLE and not agrees:
            error = FinalDestinationMismatch(
                f"walk ends in {end} but report shows {reported}", **context,
            )
            if self.config.final_destination_policy == "fatal":
                raise error
            logger.warning("%s", error)
        movement.ending_coords = end
        self.walker.walk_scouts(movement, parse_grid(end))

    # ---- Next turn ----

    def _propagate(self, turn: Turn, next_turn: Turn) -> None:
        for unit_id, movement in turn.movements.items():
            upcoming = next_turn.movements.get(unit_id)
            if upcoming is None or upcoming.starting_coords == NOT_AVAILABLE:
                continue
            if not same_digits(upcoming.starting_coords, movement.ending_coords):
                raise ContinuityError(
                    f"turn {next_turn.id} starts in {upcoming.starting_coords} "
                    f"but turn {turn.id} ended in {movement.ending_coords}",
                    turn_id=next_turn.id, unit_id=unit_id,
                )
            upcoming.starting_coords = movement.ending_coords
