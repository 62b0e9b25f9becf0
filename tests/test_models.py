"""Tests for letter domain models and timestamp handling."""

from datetime import datetime, timezone

import pytest

from factories import at
from papyrus.core.models import FeedKind, FilterSpec, Letter
from papyrus.core.validation import Timestamps
from papyrus.utils.errors import ValidationError


def make_letter(**overrides):
    fields = dict(
        id="l1",
        author_id="bob",
        recipient_id="alice",
        content="Hello\n  there",
        created_at=at(0),
        updated_at=at(0),
    )
    fields.update(overrides)
    return Letter(**fields)


class TestLetter:
    def test_as_read_returns_new_copy(self):
        letter = make_letter()

        read = letter.as_read(at(5))

        assert read.is_read and read.read_at == at(5)
        assert not letter.is_read

    def test_as_read_keeps_first_timestamp(self):
        read = make_letter().as_read(at(5))

        assert read.as_read(at(9)) is read

    def test_preview_collapses_whitespace(self):
        assert make_letter().get_preview() == "Hello there"
        assert make_letter(content="x" * 100).get_preview(10) == "xxxxxxx..."


class TestFilterSpec:
    def test_empty(self):
        assert FilterSpec().is_empty()
        assert not FilterSpec.create(contact_ids=["bob"]).is_empty()
        assert not FilterSpec(after_date=at(0)).is_empty()

    def test_contact_ids_are_frozen(self):
        spec = FilterSpec(contact_ids=["bob", "bob", "carol"])

        assert spec.contact_ids == frozenset({"bob", "carol"})
        assert hash(spec) == hash(FilterSpec.create(contact_ids=["carol", "bob"]))


class TestFeedKind:
    def test_from_string(self):
        assert FeedKind.from_string("Inbox") is FeedKind.INBOX

    def test_invalid(self):
        with pytest.raises(ValueError):
            FeedKind.from_string("drafts")


class TestTimestamps:
    def test_iso_strings_sort_like_instants(self):
        values = [at(0), at(1).replace(microsecond=5), at(1), at(60 * 24)]

        assert sorted(values) == sorted(values, key=Timestamps.to_iso)
        assert sorted(Timestamps.to_iso(v) for v in values) == [
            Timestamps.to_iso(v) for v in sorted(values)
        ]

    def test_naive_values_are_utc(self):
        naive = datetime(2024, 6, 1, 12, 0)

        assert Timestamps.to_iso(naive) == "2024-06-01T12:00:00.000000+00:00"

    def test_parse_round_trips_z_suffix(self):
        assert Timestamps.parse("2024-06-01T12:00:00Z") == at(0)
        assert Timestamps.parse(None) is None

    def test_parse_user_date(self):
        assert Timestamps.parse_user_date("2024-06-01") == datetime(
            2024, 6, 1, tzinfo=timezone.utc
        )
        with pytest.raises(ValidationError):
            Timestamps.parse_user_date("yesterday")
