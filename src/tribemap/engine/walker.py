"""
Hex walk engine.

Replays a unit's parsed steps from a known starting hex, writing what the
unit saw into the ``HexMap`` and stamping each step with the hex the unit
ended up in.
"""

from __future__ import annotations

import logging

from tribemap.core.config import MapperConfig
from tribemap.core.coords import MapCoordinate
from tribemap.core.enums import StepResult
from tribemap.core.errors import MappingError
from tribemap.core.hex_map import HexMap
from tribemap.core.models import MovementResult, Step

logger = logging.getLogger(__name__)


class HexWalker:
    """Walks movement results across a shared hex map.

    Attributes:
        hex_map: Map that every walk records into.
        config: Mapping run configuration.
    """

    def __init__(self, hex_map: HexMap, config: MapperConfig | None = None) -> None:
        self.hex_map = hex_map
        self.config = config or MapperConfig()

    def walk(self, movement: MovementResult, start: MapCoordinate) -> MapCoordinate:
        """Replay ``movement.steps`` and its status line from ``start``.

        Returns:
            The hex the unit is in after its last step.

        Raises:
            InvariantViolation: If an observation contradicts the map.
        """
        location = start
        self.hex_map.visit(start, movement.turn_id)
        for step in movement.all_steps():
            location = self.apply_step(step, location)
        return location

    def walk_scouts(self, movement: MovementResult, start: MapCoordinate) -> None:
        """Replay every scout report of ``movement`` from ``start``."""
        for report in movement.scout_reports:
            location = start
            for step in report.steps:
                location = self.apply_step(step, location, scout=True)

    def pin(self, movement: MovementResult, location: MapCoordinate) -> None:
        """Place every step of ``movement`` on ``location`` without moving."""
        grid_hex = location.to_grid_text()
        self.hex_map.visit(location, movement.turn_id)
        for step in movement.steps:
            step.grid_hex = grid_hex
        if movement.status_step is not None:
            self.apply_step(movement.status_step, location)

    def apply_step(self, step: Step, location: MapCoordinate, *, scout: bool = False) -> MapCoordinate:
        """Apply one step at ``location`` and return where the unit ends up."""
        try:
            return self._apply(step, location, scout)
        except MappingError as exc:
            raise exc.add_context(
                turn_id=step.turn_id, unit_id=step.unit_id,
                line_no=step.line_no, step_no=step.step_no,
            )

    def _apply(self, step: Step, location: MapCoordinate, scout: bool) -> MapCoordinate:
        turn_id, unit_id = step.turn_id, step.unit_id
        hex_map = self.hex_map

        if step.result is StepResult.SUCCEEDED:
            location = location.add(step.attempted)
            hex_map.observe_terrain(location, step.terrain, turn_id, unit_id)
            hex_map.visit(location, turn_id, scout=scout)
        elif step.result in (StepResult.STATUS_LINE, StepResult.STAYED_IN_PLACE):
            hex_map.observe_terrain(location, step.terrain, turn_id, unit_id)
            hex_map.visit(location, turn_id, scout=scout)
        elif step.result is StepResult.BLOCKED:
            hex_map.fetch(location.add(step.attempted), turn_id)
            if step.blocked_by is not None:
                hex_map.fetch(location, turn_id).add_edge(step.attempted, step.blocked_by.edge)
        elif step.result in (StepResult.PROHIBITED, StepResult.EXHAUSTED_MOVEMENT_POINTS):
            hex_map.observe_terrain(location.add(step.attempted), step.terrain, turn_id, unit_id)
        # Follows and Vanished leave the unit where it is.

        current = hex_map.fetch(location, turn_id)
        for neighbor in step.neighbors:
            hex_map.observe_neighbor(location, neighbor.direction, neighbor.terrain, turn_id, unit_id)
        for edge in step.edges:
            current.add_edge(edge.direction, edge.edge)
        for resource in step.resources:
            current.add_resource(resource)
        if step.settlement is not None:
            current.settlement = step.settlement.name
        if step.found_units:
            current.add_encounters(turn_id, step.found_units)
        for sighting in step.crows_nest:
            first, second = sighting.point.steps
            hex_map.observe_sighting(location.add(first).add(second), sighting.sighted, turn_id)
        if step.edges or step.resources or step.settlement or step.found_units:
            current.updated = turn_id

        step.grid_hex = location.to_grid_text()
        if self.config.debug_enabled("walk"):
            logger.debug(
                "%s %s step %d: %s %s -> %s",
                turn_id, unit_id, step.step_no, step.result.value, step.attempted.value, step.grid_hex,
            )
        return location
