"""Tests for folding step clauses into Step objects."""

import pytest

from tribemap.core.enums import Direction, Edge, Resource, StepResult, Terrain
from tribemap.core.errors import GrammarError, InvariantViolation
from tribemap.core.models import Neighbor


def _assemble(assembler, text, **kwargs):
    kwargs.setdefault("turn_id", "0900-01")
    kwargs.setdefault("unit_id", "0138")
    kwargs.setdefault("line_no", 3)
    kwargs.setdefault("step_no", 1)
    return assembler.assemble(text, **kwargs)


class TestMoves:
    def test_successful_move_with_observations(self, assembler):
        step = _assemble(assembler, "NW-GH, River S, 0190")
        assert step.result is StepResult.SUCCEEDED
        assert step.attempted is Direction.NORTH_WEST
        assert step.terrain is Terrain.GRASSY_HILLS
        assert [(e.direction, e.edge) for e in step.edges] == [(Direction.SOUTH, Edge.RIVER)]
        assert step.found_units == ["0190"]

    def test_neighbors_resources_and_units(self, assembler):
        step = _assemble(assembler, "N-RH,  O NW,  N, Find Iron Ore, 1190,  0138c2,  0138c3")
        assert step.neighbors == [
            Neighbor(Direction.NORTH_WEST, Terrain.OCEAN),
            Neighbor(Direction.NORTH, Terrain.OCEAN),
        ]
        assert step.resources == [Resource.IRON_ORE]
        assert step.found_units == ["1190", "0138c2", "0138c3"]

    def test_settlement_on_move(self, assembler):
        step = _assemble(assembler, "SW-PR The Dirty Squirrel")
        assert step.settlement.name == "The Dirty Squirrel"

    def test_settlement_fallback_after_result(self, assembler):
        step = _assemble(assembler, "N-LCM,  Lcm NE, SE,  Ensalada sin Tomate")
        assert step.settlement.name == "Ensalada sin Tomate"
        assert len(step.neighbors) == 2

    def test_blocked(self, assembler):
        step = _assemble(assembler, "No Ford on River to NW of HEX")
        assert step.result is StepResult.BLOCKED
        assert step.attempted is Direction.NORTH_WEST
        assert step.blocked_by.edge is Edge.RIVER
        assert step.terrain is Terrain.BLANK

    def test_missing_river_blocks_without_edge(self, assembler):
        step = _assemble(assembler, "No River Adjacent to Hex to NE of HEX")
        assert step.result is StepResult.BLOCKED
        assert step.attempted is Direction.NORTH_EAST
        assert step.blocked_by is None
        assert step.edges == []

    def test_exhausted(self, assembler):
        step = _assemble(
            assembler, "Not enough M.P's to move to N into CONIFER HILLS,  Nothing of interest found",
        )
        assert step.result is StepResult.EXHAUSTED_MOVEMENT_POINTS
        assert step.exhausted.terrain is Terrain.CONIFER_HILLS

    def test_prohibited(self, assembler):
        step = _assemble(assembler, "Can't Move on Lake to SE of HEX")
        assert step.result is StepResult.PROHIBITED
        assert step.prohibited_from.direction is Direction.SOUTH_EAST
        assert step.terrain is Terrain.LAKE

    def test_empty_step_stays_in_place(self, assembler):
        step = _assemble(assembler, "")
        assert step.result is StepResult.STAYED_IN_PLACE
        assert step.attempted is Direction.UNKNOWN

    def test_vanished(self, assembler):
        step = _assemble(assembler, "Did Not Return")
        assert step.result is StepResult.VANISHED


class TestStatusLines:
    def test_status_line(self, assembler):
        step = _assemble(assembler, "PRAIRIE, O S,Ford SE, 2138, 0138", status=True)
        assert step.result is StepResult.STATUS_LINE
        assert step.attempted is Direction.UNKNOWN
        assert step.terrain is Terrain.PRAIRIE
        assert step.neighbors == [Neighbor(Direction.SOUTH, Terrain.OCEAN)]
        assert [(e.direction, e.edge) for e in step.edges] == [(Direction.SOUTH_EAST, Edge.FORD)]
        assert step.found_units == ["2138", "0138"]

    def test_status_line_needs_terrain_first(self, assembler):
        with pytest.raises(GrammarError):
            _assemble(assembler, "O S, PRAIRIE", status=True)

    def test_status_terrain_outside_status_line(self, assembler):
        with pytest.raises(InvariantViolation):
            _assemble(assembler, "PRAIRIE")


class TestOrderingRules:
    def test_observation_before_result(self, assembler):
        with pytest.raises(InvariantViolation) as excinfo:
            _assemble(assembler, "O NW, N-PR")
        assert excinfo.value.clause == "O NW"

    def test_two_results(self, assembler):
        with pytest.raises(InvariantViolation):
            _assemble(assembler, "N-PR, S-PR")

    def test_duplicate_neighbor_within_clause(self, assembler):
        with pytest.raises(InvariantViolation):
            _assemble(assembler, "N-PR, O NW, NW")

    def test_duplicate_neighbor_across_clauses(self, assembler):
        with pytest.raises(InvariantViolation):
            _assemble(assembler, "N-PR, O NW, PR NW")

    def test_duplicate_edge(self, assembler):
        with pytest.raises(InvariantViolation):
            _assemble(assembler, "N-PR, River S, River S")

    def test_settlement_not_allowed_before_result(self, assembler):
        with pytest.raises(GrammarError):
            _assemble(assembler, "Ensalada sin Tomate")


class TestErrorContext:
    def test_grammar_error_carries_context(self, assembler):
        with pytest.raises(GrammarError) as excinfo:
            _assemble(assembler, "N-PR, xyzzy", step_no=4, line_no=12, unit_id="0138e1")
        err = excinfo.value
        assert err.turn_id == "0900-01"
        assert err.unit_id == "0138e1"
        assert err.line_no == 12
        assert err.step_no == 4
        assert err.clause == "xyzzy"
        assert "step 4" in str(err)


class TestDirectionInvariant:
    @pytest.mark.parametrize("text,status", [
        ("NW-GH", False),
        ("No Ford on River to NW of HEX", False),
        ("No River Adjacent to Hex to NE of HEX", False),
        ("Can't Move on Ocean to N of HEX", False),
        ("Not enough M.P's to move to N into SWAMP", False),
        ("", False),
        ("Did Not Return", False),
        ("PRAIRIE", True),
    ])
    def test_direction_only_on_attempted_moves(self, assembler, text, status):
        step = _assemble(assembler, text, status=status)
        assert (step.attempted is not Direction.UNKNOWN) == step.result.has_direction


class TestFleetRings:
    def test_ring_repeats_are_dropped(self, assembler):
        step = _assemble(assembler, "NE-LCM, Lcm NE, SE")
        assembler.add_ring_neighbors(step, [
            Neighbor(Direction.NORTH_EAST, Terrain.LOW_CONIFER_MOUNTAINS),
            Neighbor(Direction.NORTH, Terrain.OCEAN),
        ])
        assert [n.direction for n in step.neighbors] == [
            Direction.NORTH_EAST, Direction.SOUTH_EAST, Direction.NORTH,
        ]

    def test_ring_contradiction(self, assembler):
        step = _assemble(assembler, "NE-LCM, Lcm NE")
        with pytest.raises(InvariantViolation):
            assembler.add_ring_neighbors(step, [Neighbor(Direction.NORTH_EAST, Terrain.OCEAN)])
