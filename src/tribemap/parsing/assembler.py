"""
Fold the tokens of one step into a ``Step``.

A step starts with exactly one result-defining token (a move, a failed
move, a status terrain, or a vanished scout) and may then carry any
number of observations. Observations before the result, or a second
result, mean the report text is not what the parser thinks it is.
"""

from __future__ import annotations

import logging
from typing import Callable

from tribemap.core.enums import Direction, StepResult
from tribemap.core.errors import InvariantViolation, MappingError
from tribemap.core.models import (
    BlockedBy,
    CrowsNest,
    DirectionTerrain,
    EdgeList,
    Exhausted,
    FoundItems,
    FoundNothing,
    FoundUnits,
    MissingEdge,
    Neighbor,
    NeighborList,
    ProhibitedFrom,
    ResourceFound,
    Settlement,
    StatusTerrain,
    Step,
    StepToken,
    TokenKind,
    Vanished,
)
from tribemap.parsing.grammar import StepGrammar
from tribemap.parsing.tokenizer import ClauseTokenizer

logger = logging.getLogger(__name__)

RESULT_KINDS = frozenset({
    TokenKind.DIRECTION_TERRAIN,
    TokenKind.BLOCKED_BY,
    TokenKind.MISSING_EDGE,
    TokenKind.EXHAUSTED,
    TokenKind.PROHIBITED_FROM,
    TokenKind.STATUS_TERRAIN,
    TokenKind.VANISHED,
})

OBSERVATION_KINDS = frozenset({
    TokenKind.EDGES,
    TokenKind.NEIGHBORS,
    TokenKind.RESOURCE,
    TokenKind.SETTLEMENT,
    TokenKind.FOUND_UNITS,
    TokenKind.FOUND_ITEMS,
    TokenKind.CROWS_NEST,
})


class StepAssembler:
    """Builds ``Step`` objects from clause text.

    Args:
        grammar: Shared clause grammar.
        tokenizer: Shared clause tokenizer.
    """

    def __init__(self, grammar: StepGrammar, tokenizer: ClauseTokenizer) -> None:
        self.grammar = grammar
        self.tokenizer = tokenizer
        self._handlers: dict[TokenKind, Callable[[Step, StepToken], None]] = {
            TokenKind.DIRECTION_TERRAIN: self._on_direction_terrain,
            TokenKind.BLOCKED_BY: self._on_blocked,
            TokenKind.MISSING_EDGE: self._on_missing_edge,
            TokenKind.EXHAUSTED: self._on_exhausted,
            TokenKind.PROHIBITED_FROM: self._on_prohibited,
            TokenKind.STATUS_TERRAIN: self._on_status_terrain,
            TokenKind.VANISHED: self._on_vanished,
            TokenKind.EDGES: self._on_edges,
            TokenKind.NEIGHBORS: self._on_neighbors,
            TokenKind.RESOURCE: self._on_resource,
            TokenKind.SETTLEMENT: self._on_settlement,
            TokenKind.FOUND_UNITS: self._on_found_units,
            TokenKind.FOUND_ITEMS: self._on_found_items,
            TokenKind.CROWS_NEST: self._on_crows_nest,
            TokenKind.FOUND_NOTHING: self._on_found_nothing,
        }
        missing = set(TokenKind) - set(self._handlers)
        if missing:
            raise RuntimeError(f"no step handler for token kinds {sorted(missing)}")

    def assemble(
        self,
        text: str,
        *,
        turn_id: str,
        unit_id: str,
        line_no: int = 0,
        step_no: int = 0,
        status: bool = False,
    ) -> Step:
        """Tokenize, parse and fold one step's text.

        Args:
            text: Raw step text (one ``\\``-separated segment of a line).
            turn_id: Turn being parsed, for error context.
            unit_id: Unit being parsed, for error context.
            line_no: Report line, for error context.
            step_no: One-based step position on the line.
            status: Whether the text is the body of a status line.

        Raises:
            GrammarError: A clause matches no form.
            InvariantViolation: The clauses contradict each other.
        """
        step = Step(turn_id=turn_id, unit_id=unit_id, line_no=line_no, step_no=step_no, text=text)
        has_result = False
        try:
            for index, clause in enumerate(self.tokenizer.tokenize(text)):
                if status and index == 0:
                    token: StepToken = self.grammar.parse_status_terrain(clause)
                else:
                    token = self.grammar.parse_clause(
                        clause, allow_settlement=has_result and step.settlement is None,
                    )
                if token.kind in RESULT_KINDS:
                    if has_result:
                        raise InvariantViolation(
                            "step has more than one result", clause=clause,
                        )
                    if token.kind is TokenKind.STATUS_TERRAIN and not status:
                        raise InvariantViolation(
                            "status terrain outside of a status line", clause=clause,
                        )
                    has_result = True
                elif token.kind in OBSERVATION_KINDS and not has_result:
                    raise InvariantViolation(
                        "observation before the step result", clause=clause,
                    )
                try:
                    self._handlers[token.kind](step, token)
                except MappingError as exc:
                    raise exc.add_context(clause=clause)
        except MappingError as exc:
            raise exc.add_context(
                turn_id=turn_id, unit_id=unit_id, line_no=line_no, step_no=step_no,
            )
        if not has_result:
            step.result = StepResult.STATUS_LINE if status else StepResult.STAYED_IN_PLACE
        if status and step.result is not StepResult.STATUS_LINE:
            raise InvariantViolation(
                "status line without a status terrain",
                turn_id=turn_id, unit_id=unit_id, line_no=line_no, step_no=step_no, clause=text,
            )
        logger.debug(
            "%s %s step %d: %s %s %s",
            turn_id, unit_id, step_no, step.result.value, step.attempted.value, step.terrain.value,
        )
        return step

    # ---- Fleet rings ----

    def add_ring_neighbors(self, step: Step, observations: list[Neighbor]) -> None:
        """Merge inner-ring deck observations into ``step.neighbors``.

        An observation that repeats a land observation with the same
        terrain is dropped.

        Raises:
            InvariantViolation: If a direction is reported with two terrains.
        """
        known = {n.direction: n for n in step.neighbors}
        for obs in observations:
            previous = known.get(obs.direction)
            if previous is None:
                step.neighbors.append(obs)
                known[obs.direction] = obs
            elif previous.terrain is not obs.terrain:
                raise InvariantViolation(
                    f"neighbor {obs.direction.value} reported as both "
                    f"{previous.terrain.value} and {obs.terrain.value}",
                    turn_id=step.turn_id, unit_id=step.unit_id,
                    line_no=step.line_no, step_no=step.step_no,
                )

    def add_crows_nest(self, step: Step, sightings: list[CrowsNest]) -> None:
        seen = {c.point for c in step.crows_nest}
        for sighting in sightings:
            if sighting.point in seen:
                raise InvariantViolation(
                    f"crow's nest point {sighting.point.value} reported twice",
                    turn_id=step.turn_id, unit_id=step.unit_id,
                    line_no=step.line_no, step_no=step.step_no,
                )
            step.crows_nest.append(sighting)
            seen.add(sighting.point)

    # ---- Result tokens ----

    def _on_direction_terrain(self, step: Step, token: DirectionTerrain) -> None:
        step.attempted = token.direction
        step.result = StepResult.SUCCEEDED
        step.terrain = token.terrain
        if token.settlement:
            step.settlement = Settlement(name=token.settlement)

    def _on_blocked(self, step: Step, token: BlockedBy) -> None:
        step.attempted = token.direction
        step.result = StepResult.BLOCKED
        step.blocked_by = token

    def _on_missing_edge(self, step: Step, token: MissingEdge) -> None:
        step.attempted = token.direction
        step.result = StepResult.BLOCKED

    def _on_exhausted(self, step: Step, token: Exhausted) -> None:
        step.attempted = token.direction
        step.result = StepResult.EXHAUSTED_MOVEMENT_POINTS
        step.terrain = token.terrain
        step.exhausted = token

    def _on_prohibited(self, step: Step, token: ProhibitedFrom) -> None:
        step.attempted = token.direction
        step.result = StepResult.PROHIBITED
        step.terrain = token.terrain
        step.prohibited_from = token

    def _on_status_terrain(self, step: Step, token: StatusTerrain) -> None:
        step.result = StepResult.STATUS_LINE
        step.terrain = token.terrain

    def _on_vanished(self, step: Step, token: Vanished) -> None:
        step.result = StepResult.VANISHED

    # ---- Observation tokens ----

    def _on_edges(self, step: Step, token: EdgeList) -> None:
        seen = {(e.direction, e.edge) for e in step.edges}
        for obs in token.edges:
            if (obs.direction, obs.edge) in seen:
                raise InvariantViolation(f"duplicate {obs.edge.value} edge {obs.direction.value}")
            seen.add((obs.direction, obs.edge))
            step.edges.append(obs)

    def _on_neighbors(self, step: Step, token: NeighborList) -> None:
        seen: set[Direction] = {n.direction for n in step.neighbors}
        for obs in token.neighbors:
            if obs.direction in seen:
                raise InvariantViolation(f"duplicate neighbor direction {obs.direction.value}")
            seen.add(obs.direction)
            step.neighbors.append(obs)

    def _on_resource(self, step: Step, token: ResourceFound) -> None:
        if token.resource not in step.resources:
            step.resources.append(token.resource)

    def _on_settlement(self, step: Step, token: Settlement) -> None:
        if step.settlement is not None:
            raise InvariantViolation("step names more than one settlement")
        step.settlement = token

    def _on_found_units(self, step: Step, token: FoundUnits) -> None:
        for unit_id in token.unit_ids:
            if unit_id not in step.found_units:
                step.found_units.append(unit_id)

    def _on_found_items(self, step: Step, token: FoundItems) -> None:
        step.found_items.extend(token.items)

    def _on_crows_nest(self, step: Step, token: CrowsNest) -> None:
        self.add_crows_nest(step, [token])

    def _on_found_nothing(self, step: Step, token: FoundNothing) -> None:
        pass
