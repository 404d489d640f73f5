from types import SimpleNamespace

from onboarding.services.pricing import (
    DEFAULT,
    CustomRate,
    GearRequirement,
    gear_override_from_row,
    parse_decimal_or_zero,
    rate_override_from_row,
    resolve_flat_service_rate,
    resolve_gear_notes,
    resolve_gear_required,
    resolve_tiered_rate,
)


def _service(rate):
    return SimpleNamespace(rate=rate)


def _gear(is_custom=False, is_required=True, notes=None):
    return SimpleNamespace(is_custom=is_custom, is_required=is_required, notes=notes)


class TestParseDecimal:
    def test_plain_numbers(self):
        assert parse_decimal_or_zero("120") == 120.0
        assert parse_decimal_or_zero("99.50") == 99.5
        assert parse_decimal_or_zero(75) == 75.0

    def test_leading_prefix_is_used(self):
        assert parse_decimal_or_zero("99.5/hr") == 99.5
        assert parse_decimal_or_zero("  42 CAD") == 42.0

    def test_unparseable_is_zero(self):
        assert parse_decimal_or_zero("$120") == 0.0
        assert parse_decimal_or_zero("abc") == 0.0
        assert parse_decimal_or_zero("") == 0.0
        assert parse_decimal_or_zero(None) == 0.0
        assert parse_decimal_or_zero(float("nan")) == 0.0


class TestRateResolution:
    def test_no_override_uses_base_rate(self):
        assert resolve_flat_service_rate(_service("150")) == 150.0
        assert resolve_flat_service_rate(_service("150"), DEFAULT) == 150.0

    def test_enabled_positive_override_wins(self):
        assert resolve_flat_service_rate(_service("150"), CustomRate(rate=175)) == 175.0

    def test_disabled_override_falls_back(self):
        assert resolve_flat_service_rate(_service("150"), CustomRate(rate=175, enabled=False)) == 150.0

    def test_zero_override_falls_back(self):
        assert resolve_tiered_rate(_service("80"), CustomRate(rate=0)) == 80.0

    def test_bad_base_rate_is_zero(self):
        assert resolve_tiered_rate(_service("call us")) == 0.0

    def test_override_from_row(self):
        assert rate_override_from_row(None) is DEFAULT
        row = SimpleNamespace(custom_rate=200.0, is_enabled=True)
        assert rate_override_from_row(row) == CustomRate(rate=200.0, enabled=True)


class TestGearResolution:
    def test_catalog_item_defaults_to_required(self):
        assert resolve_gear_required(_gear(is_required=False)) is True

    def test_catalog_override_controls_requirement(self):
        override = GearRequirement(required=False, notes="Rental approved")
        assert resolve_gear_required(_gear(), override) is False
        assert resolve_gear_notes(_gear(notes="Own kit"), override) == "Rental approved"

    def test_custom_item_uses_own_flag(self):
        item = _gear(is_custom=True, is_required=False, notes="Bring spare")
        assert resolve_gear_required(item, GearRequirement(required=True)) is False
        assert resolve_gear_notes(item) == "Bring spare"

    def test_notes_without_override(self):
        assert resolve_gear_notes(_gear()) == ""
        assert resolve_gear_notes(_gear(notes="Full frame")) == "Full frame"

    def test_override_from_row(self):
        assert gear_override_from_row(None) is DEFAULT
        row = SimpleNamespace(is_required=False, notes=None)
        assert gear_override_from_row(row) == GearRequirement(required=False, notes="")
