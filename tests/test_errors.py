"""Tests for error context and the error hierarchy."""

import pytest

from tribemap.core.errors import (
    ContinuityError,
    FinalDestinationMismatch,
    GrammarError,
    InvalidGridCoordinates,
    LocationMismatchError,
    MappingError,
    ObscuredLocationError,
    UnresolvedFollowError,
)


class TestContext:
    def test_add_context_fills_only_empty_fields(self):
        err = GrammarError("bad clause", step_no=2, clause="N-XYZ")
        returned = err.add_context(turn_id="0900-01", unit_id="0138", line_no=5, step_no=9)
        assert returned is err
        assert err.context() == {
            "turn_id": "0900-01",
            "unit_id": "0138",
            "line_no": 5,
            "step_no": 2,
            "clause": "N-XYZ",
        }

    def test_add_context_rejects_unknown_fields(self):
        with pytest.raises(TypeError):
            GrammarError("x").add_context(column=3)

    def test_str_includes_location(self):
        err = GrammarError("unrecognized clause", turn_id="0900-01", unit_id="0138",
                           line_no=5, step_no=2, clause="xyzzy")
        assert str(err) == "turn 0900-01: unit 0138: line 5: step 2: unrecognized clause: 'xyzzy'"

    def test_str_without_context(self):
        assert str(MappingError("nothing to map")) == "nothing to map"

    def test_to_dict(self):
        d = LocationMismatchError("moved", unit_id="0138").to_dict()
        assert d["error"] == "LocationMismatchError"
        assert d["message"] == "moved"
        assert d["unit_id"] == "0138"


class TestHierarchy:
    @pytest.mark.parametrize("cls", [
        ObscuredLocationError, LocationMismatchError, UnresolvedFollowError, FinalDestinationMismatch,
    ])
    def test_continuity_errors(self, cls):
        assert issubclass(cls, ContinuityError)
        assert issubclass(cls, MappingError)

    def test_invalid_grid_is_value_error(self):
        err = InvalidGridCoordinates("OO 9999", "column out of range")
        assert isinstance(err, ValueError)
        assert err.text == "OO 9999"
        assert err.clause == "OO 9999"
        assert err.message == "column out of range"
