"""Tests for models.py"""

from timelight.models import TargetState, UpdateResult


class TestTargetState:
    def test_absent_fields(self):
        state = TargetState()
        assert not state.has_brightness
        assert not state.has_color_temp

    def test_absent_never_equals_present(self):
        assert TargetState(brightness=50.0) != TargetState()
        assert TargetState(brightness=50.0) != TargetState(brightness=50.0, color_temp_mirek=300)

    def test_equality(self):
        assert TargetState(50.0, 300) == TargetState(brightness=50.0, color_temp_mirek=300)

    def test_with_helpers_return_copies(self):
        state = TargetState(brightness=50.0)
        updated = state.with_color_temp(300).with_brightness(None)
        assert updated == TargetState(color_temp_mirek=300)
        assert state == TargetState(brightness=50.0)

    def test_restrict(self):
        state = TargetState(brightness=50.0, color_temp_mirek=300)
        assert state.restrict(True, True) == state
        assert state.restrict(True, False) == TargetState(brightness=50.0)
        assert state.restrict(False, True) == TargetState(color_temp_mirek=300)
        assert state.restrict(False, False) == TargetState()

    def test_str(self):
        assert str(TargetState(brightness=42.5, color_temp_mirek=300)) == "brightness=42.5 temp_mirek=300"
        assert str(TargetState()) == "brightness=N/A temp_mirek=N/A"


def test_update_result_commands():
    result = UpdateResult(successes=2, errors=1, skipped=4)
    assert result.commands == 3
