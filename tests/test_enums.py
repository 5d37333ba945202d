"""Tests for selector name to enum code translation."""
from ado_mcp.enums import (
    create_enum_mapping,
    get_enum_keys,
    map_string_array_to_enum,
    map_string_to_enum,
    safe_enum_convert,
)
from ado_mcp.models import AlertType, Confidence, PullRequestStatus, Severity, State

# Shape of a compiled enum object with reverse-lookup entries
ALERT_TYPE_TABLE = {
    "Unknown": 0, "Dependency": 1, "Secret": 2, "Code": 3,
    "0": "Unknown", "1": "Dependency", "2": "Secret", "3": "Code",
}


class TestCreateEnumMapping:
    """Test building the lower-cased name table."""

    def test_reverse_entries_are_skipped(self):
        assert create_enum_mapping(ALERT_TYPE_TABLE) == {
            "unknown": 0, "dependency": 1, "secret": 2, "code": 3,
        }

    def test_enum_class(self):
        mapping = create_enum_mapping(State)
        assert mapping["auto_dismissed"] == 8
        assert set(mapping) == {"unknown", "active", "dismissed", "fixed", "auto_dismissed"}

    def test_non_integer_values_are_skipped(self):
        assert create_enum_mapping({"A": 1, "B": "x", "C": True, "D": None}) == {"a": 1}


class TestMapStringToEnum:
    """Test single-value translation."""

    def test_case_insensitive(self):
        assert map_string_to_enum("Secret", AlertType) == 2
        assert map_string_to_enum("SECRET", ALERT_TYPE_TABLE) == 2

    def test_blank_returns_default(self):
        assert map_string_to_enum(None, AlertType) is None
        assert map_string_to_enum("", AlertType) is None
        assert map_string_to_enum("   ", AlertType, 7) == 7

    def test_miss_returns_default(self):
        assert map_string_to_enum("nope", AlertType) is None
        assert map_string_to_enum("nope", PullRequestStatus, PullRequestStatus.ACTIVE) == 1

    def test_surrounding_whitespace_is_not_trimmed(self):
        """Single values are matched as given, only lower-cased."""
        assert map_string_to_enum(" secret", AlertType) is None
        assert map_string_to_enum("secret ", AlertType) is None

    def test_numeric_string_does_not_match(self):
        assert map_string_to_enum("2", ALERT_TYPE_TABLE) is None


class TestMapStringArrayToEnum:
    """Test list translation."""

    def test_none_is_empty(self):
        assert map_string_array_to_enum(None, AlertType) == []

    def test_misses_are_dropped_and_order_kept(self):
        assert map_string_array_to_enum(["code", "bogus", "SECRET"], AlertType) == [3, 2]

    def test_elements_are_trimmed(self):
        """Unlike single values, list elements are trimmed."""
        assert map_string_array_to_enum([" High ", "other"], Confidence) == [0, 1]

    def test_duplicates_are_kept(self):
        assert map_string_array_to_enum(["low", "LOW"], Severity) == [0, 0]

    def test_blank_elements_are_dropped(self):
        assert map_string_array_to_enum(["  ", "", "code"], AlertType) == [3]


class TestKeysAndSafeConvert:
    """Test schema choices and exact conversion."""

    def test_get_enum_keys(self):
        assert get_enum_keys(AlertType) == ["unknown", "dependency", "secret", "code"]
        assert get_enum_keys(ALERT_TYPE_TABLE) == ["unknown", "dependency", "secret", "code"]

    def test_every_key_round_trips(self):
        for key in get_enum_keys(Severity):
            assert map_string_to_enum(key, Severity) == Severity[key.upper()]

    def test_safe_enum_convert(self):
        assert safe_enum_convert(AlertType, "secret") == 2
        assert safe_enum_convert(AlertType, None) is None
        assert safe_enum_convert(AlertType, "missing") is None
