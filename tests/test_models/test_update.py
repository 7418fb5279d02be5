from __future__ import annotations

import pytest

from kiwiko.models.update import PackageUpdate


@pytest.mark.unit
class TestPackageUpdate:
    """Tests for PackageUpdate."""

    @pytest.mark.parametrize(
        "current,available,expected",
        [
            ("1.0.0", "2.0.0", "major"),
            ("1.0.0", "1.4.0", "minor"),
            ("1.0.0", "1.0.9", "patch"),
        ],
    )
    def test_update_type(self, current: str, available: str, expected: str) -> None:
        update = PackageUpdate("lodash", current, available)

        assert update.update_type == expected

    def test_defaults(self) -> None:
        update = PackageUpdate("lodash", "4.17.20", "4.17.21")

        assert update.is_safe is False
        assert update.changes == []

    def test_to_json(self) -> None:
        update = PackageUpdate(
            "lodash",
            "4.17.20",
            "4.17.21",
            is_safe=True,
            changes=["Bug fixes and performance improvements"],
        )

        assert update.to_json() == {
            "package": "lodash",
            "current_version": "4.17.20",
            "available_version": "4.17.21",
            "update_type": "patch",
            "is_safe": True,
            "changes": ["Bug fixes and performance improvements"],
        }

    def test_to_json_copies_changes(self) -> None:
        update = PackageUpdate("a", "1.0.0", "2.0.0", changes=["note"])

        update.to_json()["changes"].append("extra")

        assert update.changes == ["note"]

    def test_str(self) -> None:
        assert str(PackageUpdate("a", "1.0.0", "2.0.0")) == "a: 1.0.0 → 2.0.0"
