"""
Tests for configuration loading.
"""

import pytest
from pydantic import ValidationError

from bookingslots.config import AppConfig, SlotSettings


class TestSlotSettings:
    """Tests for SlotSettings validation."""

    def test_defaults(self):
        settings = SlotSettings()

        assert settings.frequency_minutes == 30
        assert settings.event_length_minutes == 30
        assert settings.minimum_booking_notice_minutes == 0
        assert settings.offset_start_minutes == 0
        assert settings.default_interval_minutes == 1
        assert settings.strict is False

    @pytest.mark.parametrize(
        "field", ["frequency_minutes", "event_length_minutes", "default_interval_minutes"]
    )
    def test_durations_must_be_positive(self, field):
        with pytest.raises(ValidationError, match="greater than zero"):
            SlotSettings(**{field: 0})

    def test_strict_passes_durations_to_the_generator(self):
        """In strict mode the generator, not the config, rejects negative durations."""
        settings = SlotSettings(frequency_minutes=-5, event_length_minutes=0, strict=True)

        assert settings.frequency_minutes == -5
        assert settings.event_length_minutes == 0

    def test_negative_frequency_rejected_without_strict(self):
        with pytest.raises(ValidationError, match="frequency_minutes must be greater than zero"):
            SlotSettings(frequency_minutes=-5)

    def test_notice_must_not_be_negative(self):
        with pytest.raises(ValidationError, match="must not be negative"):
            SlotSettings(minimum_booking_notice_minutes=-5)


class TestAppConfig:
    """Tests for AppConfig loading."""

    def test_load_from_yaml(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "timezone: Europe/Berlin\n"
            "slots:\n"
            "  frequency_minutes: 45\n"
            "  minimum_booking_notice_minutes: 120\n",
            encoding="utf-8",
        )

        config = AppConfig.load_from_yaml(config_path)

        assert config.timezone == "Europe/Berlin"
        assert config.slots.frequency_minutes == 45
        assert config.slots.minimum_booking_notice_minutes == 120
        assert config.slots.event_length_minutes == 30

    def test_empty_file_gives_defaults(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("", encoding="utf-8")

        config = AppConfig.load_from_yaml(config_path)

        assert config.timezone == "UTC"
        assert config.slots == SlotSettings()

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            AppConfig.load_from_yaml(tmp_path / "config.yaml")

    def test_invalid_yaml_raises(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("slots: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(config_path)

    def test_non_mapping_root_raises(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(config_path)

    def test_unknown_timezone_raises(self):
        with pytest.raises(ValidationError, match="Unknown timezone"):
            AppConfig(timezone="Nowhere/Land")
