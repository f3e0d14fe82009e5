"""
Unit tests for InputValidator.
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.core.validation.input_validator import InputValidator
from src.database.models.enums import EquipmentSlot, SkillType
from src.modules.shared.exceptions import UnknownSkillTypeError, ValidationError


class TestStrings:
    def test_strips_whitespace(self):
        assert InputValidator.validate_string("  ore  ", "item") == "ore"

    def test_none_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            InputValidator.validate_string(None, "item")

        assert exc_info.value.field == "item"
        assert exc_info.value.error_code == "VALIDATION_ITEM"

    @pytest.mark.parametrize("value", ["player-1", "abc_DEF_123", "a" * 64])
    def test_valid_player_ids(self, value):
        assert InputValidator.validate_player_id(value) == value

    @pytest.mark.parametrize("value", ["", "   ", "a b", "ünïcode", "a" * 65])
    def test_invalid_player_ids(self, value):
        with pytest.raises(ValidationError):
            InputValidator.validate_player_id(value)

    def test_player_name_allows_spaces(self):
        assert InputValidator.validate_player_name(" Sir Fish ") == "Sir Fish"


class TestChoices:
    @pytest.mark.parametrize("value", ["mining", "MINING", " Mining ", SkillType.MINING])
    def test_skill_type(self, value):
        assert InputValidator.validate_skill_type(value) is SkillType.MINING

    def test_unknown_skill_type(self):
        with pytest.raises(UnknownSkillTypeError) as exc_info:
            InputValidator.validate_skill_type("alchemy")

        assert exc_info.value.error_code == "UNKNOWN_SKILL_TYPE"
        assert isinstance(exc_info.value, ValidationError)

    def test_equipment_slot(self):
        assert InputValidator.validate_equipment_slot("Gloves") is EquipmentSlot.GLOVES
        assert InputValidator.validate_equipment_slot(EquipmentSlot.TOOL) is EquipmentSlot.TOOL

    def test_unknown_slot(self):
        with pytest.raises(ValidationError):
            InputValidator.validate_equipment_slot("ring")


class TestTimestamps:
    def test_aware_datetime_accepted(self):
        value = datetime(2025, 1, 1, tzinfo=timezone(timedelta(hours=2)))
        assert InputValidator.validate_timestamp(value) is value

    def test_naive_datetime_rejected(self):
        with pytest.raises(ValidationError):
            InputValidator.validate_timestamp(datetime(2025, 1, 1))

    def test_non_datetime_rejected(self):
        with pytest.raises(ValidationError):
            InputValidator.validate_timestamp("2025-01-01T00:00:00Z")
