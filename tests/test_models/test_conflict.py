"""Unit tests for kiwiko.models.conflict module.

Test Coverage:
- ConflictingDeclarer display and serialization
- ConflictRecord construction, immutability and derived properties
- Display strings with and without a recommended version
- JSON serialization
"""

from __future__ import annotations

import dataclasses
import json

import pytest

from kiwiko.models.conflict import ConflictingDeclarer, ConflictRecord


@pytest.fixture
def record() -> ConflictRecord:
    return ConflictRecord(
        package="react",
        top_level_range="^17.0.0",
        conflicting_declarers=[
            ConflictingDeclarer("react-dom", "^18.0.0"),
            ConflictingDeclarer("next", ">=18.2.0"),
        ],
    )


@pytest.mark.unit
class TestConflictingDeclarer:
    """Tests for ConflictingDeclarer."""

    def test_display_string(self) -> None:
        declarer = ConflictingDeclarer("a", "^2.0.0")

        assert declarer.to_display_string() == "a requires ^2.0.0"
        assert str(declarer) == "a requires ^2.0.0"

    def test_to_json(self) -> None:
        declarer = ConflictingDeclarer("a", "^2.0.0")

        assert declarer.to_json() == {"declarer": "a", "required_range": "^2.0.0"}

    def test_frozen(self) -> None:
        declarer = ConflictingDeclarer("a", "^2.0.0")

        with pytest.raises(dataclasses.FrozenInstanceError):
            declarer.declarer = "b"  # type: ignore[misc]

    def test_equality_and_hash(self) -> None:
        first = ConflictingDeclarer("a", "^2.0.0")
        second = ConflictingDeclarer("a", "^2.0.0")

        assert first == second
        assert len({first, second}) == 1


@pytest.mark.unit
class TestConflictRecord:
    """Tests for ConflictRecord."""

    def test_declarers_coerced_to_tuple(self, record: ConflictRecord) -> None:
        assert isinstance(record.conflicting_declarers, tuple)
        assert [d.declarer for d in record] == ["react-dom", "next"]
        assert len(record) == 2

    def test_defaults(self) -> None:
        empty = ConflictRecord("lodash", "^4.0.0")

        assert empty.conflicting_declarers == ()
        assert empty.recommended_version is None
        assert empty.has_solution is False

    def test_frozen(self, record: ConflictRecord) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.recommended_version = "18.0.0"  # type: ignore[misc]

    def test_ranges(self, record: ConflictRecord) -> None:
        assert record.ranges == ("^17.0.0", "^18.0.0", ">=18.2.0")

    def test_display_without_solution(self, record: ConflictRecord) -> None:
        assert record.to_display_string() == (
            "react@^17.0.0 conflicts with react-dom requires ^18.0.0, "
            "next requires >=18.2.0; no common version found"
        )
        assert str(record) == record.to_display_string()

    def test_display_with_solution(self) -> None:
        solved = ConflictRecord(
            "x",
            "^1.0.0",
            (ConflictingDeclarer("a", ">=1.5.0"),),
            recommended_version="1.19.4",
        )

        assert solved.has_solution is True
        assert solved.to_display_string() == (
            "x@^1.0.0 conflicts with a requires >=1.5.0; recommended 1.19.4"
        )

    def test_to_json(self, record: ConflictRecord) -> None:
        data = record.to_json()

        assert data == {
            "package": "react",
            "top_level_range": "^17.0.0",
            "conflicting_declarers": [
                {"declarer": "react-dom", "required_range": "^18.0.0"},
                {"declarer": "next", "required_range": ">=18.2.0"},
            ],
            "recommended_version": None,
        }
        assert json.loads(json.dumps(data)) == data

    def test_equal_records(self) -> None:
        declarers = [ConflictingDeclarer("a", "^2.0.0")]

        assert ConflictRecord("x", "^1.0.0", declarers) == ConflictRecord(
            "x", "^1.0.0", tuple(declarers)
        )
