"""Unit tests for the declarative wire format."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import UUID

import pytest

from vaultsync.models.wire import WireModel, wire_field


@dataclass
class Sample(WireModel):
    """Small model exercising each conversion."""

    uuid: UUID = wire_field("Id")
    when: datetime = wire_field("RevisionDate")
    count: int = wire_field("Count")
    label: Optional[str] = wire_field("Label", default=None)
    tags: list[str] = wire_field("Tags", default_factory=list)
    extra: Optional[Any] = wire_field("Extra", default=None)
    scratch: Optional[str] = wire_field(default=None, persist=False, compare=False)


class TestParseDatetime:
    """Tests for timestamp parsing."""

    def test_seven_fraction_digits(self):
        """Service timestamps carry 100ns precision."""
        from vaultsync.models import parse_datetime

        dt = parse_datetime("2024-03-01T12:30:45.1234567Z")

        assert dt == datetime(2024, 3, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)

    def test_short_fraction(self):
        """Short fractions are padded, not misread."""
        from vaultsync.models import parse_datetime

        assert parse_datetime("2024-03-01T12:30:45.5Z").microsecond == 500000

    def test_naive_is_utc(self):
        """Timestamps without offset are taken as UTC."""
        from vaultsync.models import parse_datetime

        dt = parse_datetime("2024-03-01T12:30:45")

        assert dt.tzinfo == timezone.utc

    def test_explicit_offset(self):
        """Explicit offsets are kept."""
        from vaultsync.models import parse_datetime

        dt = parse_datetime("2024-03-01T12:30:45+02:00")

        assert dt.utcoffset() == timedelta(hours=2)
        assert dt == datetime(2024, 3, 1, 10, 30, 45, tzinfo=timezone.utc)

    def test_invalid(self):
        """Garbage is rejected."""
        from vaultsync.models import parse_datetime

        with pytest.raises(ValueError):
            parse_datetime("yesterday")


class TestFromDict:
    """Tests for reading documents."""

    def test_aliases(self):
        """Capitalized aliases are accepted."""
        sample = Sample.from_dict({
            "Id": "5e8bd0ea-3c2d-4f8a-9a51-0b1f2d3c4e5f",
            "RevisionDate": "2024-03-01T12:30:45Z",
            "Count": 3,
            "Tags": ["a", "b"],
        })

        assert sample.uuid == UUID("5e8bd0ea-3c2d-4f8a-9a51-0b1f2d3c4e5f")
        assert sample.when.tzinfo is not None
        assert sample.count == 3
        assert sample.label is None
        assert sample.tags == ["a", "b"]

    def test_canonical_names_and_aliases_agree(self):
        """Either spelling yields an equal model."""
        aliased = Sample.from_dict({
            "Id": "5e8bd0ea-3c2d-4f8a-9a51-0b1f2d3c4e5f",
            "RevisionDate": "2024-03-01T12:30:45Z",
            "Count": 3,
            "Label": "x",
        })
        canonical = Sample.from_dict({
            "uuid": "5e8bd0ea-3c2d-4f8a-9a51-0b1f2d3c4e5f",
            "when": "2024-03-01T12:30:45+00:00",
            "count": 3,
            "label": "x",
        })

        assert aliased == canonical

    def test_missing_required_field(self):
        """Missing required fields name both spellings."""
        from vaultsync.models import WireFormatError

        with pytest.raises(WireFormatError, match="'count' \\(alias 'Count'\\)"):
            Sample.from_dict({
                "Id": "5e8bd0ea-3c2d-4f8a-9a51-0b1f2d3c4e5f",
                "RevisionDate": "2024-03-01T12:30:45Z",
            })

    def test_null_required_field(self):
        """Null is not accepted for required fields."""
        from vaultsync.models import WireFormatError

        with pytest.raises(WireFormatError, match="Sample.count"):
            Sample.from_dict({
                "Id": "5e8bd0ea-3c2d-4f8a-9a51-0b1f2d3c4e5f",
                "RevisionDate": "2024-03-01T12:30:45Z",
                "Count": None,
            })

    def test_wrong_type(self):
        """Booleans are not integers."""
        from vaultsync.models import WireFormatError

        with pytest.raises(WireFormatError):
            Sample.from_dict({
                "Id": "5e8bd0ea-3c2d-4f8a-9a51-0b1f2d3c4e5f",
                "RevisionDate": "2024-03-01T12:30:45Z",
                "Count": True,
            })

    def test_bad_uuid(self):
        """Malformed identifiers are rejected."""
        from vaultsync.models import WireFormatError

        with pytest.raises(WireFormatError, match="Sample.uuid"):
            Sample.from_dict({
                "Id": "not-a-uuid",
                "RevisionDate": "2024-03-01T12:30:45Z",
                "Count": 1,
            })

    def test_not_an_object(self):
        """Documents must be JSON objects."""
        from vaultsync.models import WireFormatError

        with pytest.raises(WireFormatError):
            Sample.from_dict(["not", "an", "object"])

    def test_non_persisted_field_ignored(self):
        """Fields marked persist=False are never read."""
        sample = Sample.from_dict({
            "Id": "5e8bd0ea-3c2d-4f8a-9a51-0b1f2d3c4e5f",
            "RevisionDate": "2024-03-01T12:30:45Z",
            "Count": 1,
            "scratch": "ignored",
        })

        assert sample.scratch is None


class TestToDict:
    """Tests for writing documents."""

    def test_canonical_names(self):
        """Output uses attribute names and string encodings."""
        sample = Sample(
            uuid=UUID("5e8bd0ea-3c2d-4f8a-9a51-0b1f2d3c4e5f"),
            when=datetime(2024, 3, 1, 12, 30, 45, 123456, tzinfo=timezone.utc),
            count=2,
            extra={"Type": 0},
            scratch="in memory",
        )

        assert sample.to_dict() == {
            "uuid": "5e8bd0ea-3c2d-4f8a-9a51-0b1f2d3c4e5f",
            "when": "2024-03-01T12:30:45.123456+00:00",
            "count": 2,
            "label": None,
            "tags": [],
            "extra": {"Type": 0},
        }

    def test_round_trip(self):
        """to_dict output reads back to an equal model."""
        sample = Sample(
            uuid=UUID("5e8bd0ea-3c2d-4f8a-9a51-0b1f2d3c4e5f"),
            when=datetime(2024, 3, 1, 12, 30, 45, 123456, tzinfo=timezone.utc),
            count=2,
            label="x",
            tags=["t"],
        )

        assert Sample.from_dict(sample.to_dict()) == sample
