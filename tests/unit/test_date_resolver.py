"""Unit tests for calendarseal.calendar.date_resolver."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from calendarseal.calendar.date_resolver import combine_tzid, parse_date_text, resolve
from calendarseal.calendar.models import RawDateField
from calendarseal.exceptions import MissingDateError, UnparsableDateError

pytestmark = pytest.mark.unit


class TestCombineTzid:
    def test_combine_tzid_when_tzid_present_then_prefixes_value(self) -> None:
        field = RawDateField(value="20250624T090000", tzid="Europe/Berlin")
        assert combine_tzid(field) == "TZID=Europe/Berlin:20250624T090000"

    def test_combine_tzid_when_no_tzid_then_returns_bare_value(self) -> None:
        assert combine_tzid(RawDateField(value="20250624T090000")) == "20250624T090000"


class TestParseDateText:
    def test_parse_when_utc_suffix_then_zone_is_utc(self, reference_zone: ZoneInfo) -> None:
        moment, zone = parse_date_text("20250624T160000Z", reference_zone)
        assert zone is timezone.utc
        assert moment == datetime(2025, 6, 24, 16, 0, tzinfo=timezone.utc)

    def test_parse_when_floating_then_uses_default_zone(self, reference_zone: ZoneInfo) -> None:
        moment, zone = parse_date_text("20250624T090000", reference_zone)
        assert zone is reference_zone
        assert moment == datetime(2025, 6, 24, 9, 0, tzinfo=reference_zone)

    def test_parse_when_date_only_then_midnight(self, reference_zone: ZoneInfo) -> None:
        moment, _zone = parse_date_text("20250624", reference_zone)
        assert moment == datetime(2025, 6, 24, 0, 0, tzinfo=reference_zone)

    def test_parse_when_tzid_prefix_then_uses_named_zone(self, reference_zone: ZoneInfo) -> None:
        moment, zone = parse_date_text("TZID=Asia/Tokyo:20250624T090000", reference_zone)
        assert zone == ZoneInfo("Asia/Tokyo")
        assert moment.astimezone(timezone.utc) == datetime(2025, 6, 24, 0, 0, tzinfo=timezone.utc)

    def test_parse_when_windows_zone_name_then_maps_to_iana(
        self, reference_zone: ZoneInfo
    ) -> None:
        moment, zone = parse_date_text(
            "TZID=W. Europe Standard Time:20250624T090000", reference_zone
        )
        assert zone == ZoneInfo("Europe/Berlin")
        assert moment.hour == 9

    @pytest.mark.parametrize(
        "text",
        [
            "not-a-date",
            "2025-06-24T09:00:00",
            "20250230T090000",
            "20251324",
            "20250624T250000",
            "TZID=:20250624T090000",
            "TZID=Mars/Olympus_Mons:20250624T090000",
        ],
    )
    def test_parse_when_invalid_then_raises(self, text: str, reference_zone: ZoneInfo) -> None:
        with pytest.raises(UnparsableDateError):
            parse_date_text(text, reference_zone)


class TestResolve:
    def test_resolve_when_field_missing_then_raises(self, reference_zone: ZoneInfo) -> None:
        with pytest.raises(MissingDateError):
            resolve(None, reference_zone)

    def test_resolve_when_value_empty_then_raises(self, reference_zone: ZoneInfo) -> None:
        with pytest.raises(MissingDateError):
            resolve(RawDateField(value="  ", tzid="Europe/Berlin"), reference_zone)

    def test_resolve_when_tzid_then_expressed_in_reference_zone(
        self, reference_zone: ZoneInfo
    ) -> None:
        instant = resolve(
            RawDateField(value="20250624T090000", tzid="Europe/Berlin"), reference_zone
        )

        assert instant.when.tzinfo is reference_zone
        # 09:00 CEST is 00:00 PDT
        assert instant.when == datetime(2025, 6, 24, 0, 0, tzinfo=reference_zone)
        assert instant.zone == ZoneInfo("Europe/Berlin")
        assert instant.local.hour == 9

    def test_resolve_when_utc_value_then_same_instant(self, reference_zone: ZoneInfo) -> None:
        instant = resolve(RawDateField(value="20250624T160000Z"), reference_zone)
        assert instant.utc == datetime(2025, 6, 24, 16, 0, tzinfo=timezone.utc)
        assert instant.when.hour == 9

    def test_resolve_when_unparsable_then_raises(self, reference_zone: ZoneInfo) -> None:
        with pytest.raises(UnparsableDateError):
            resolve(RawDateField(value="tomorrow"), reference_zone)

    @pytest.mark.parametrize(
        "field, zone_name",
        [
            (RawDateField(value="00010101T000000", tzid="Asia/Tokyo"), "America/Los_Angeles"),
            (RawDateField(value="99991231T235959Z"), "Asia/Tokyo"),
            (RawDateField(value="99991231T230000"), "America/Los_Angeles"),
        ],
    )
    def test_resolve_when_instant_outside_datetime_range_then_raises(
        self, field: RawDateField, zone_name: str
    ) -> None:
        with pytest.raises(UnparsableDateError):
            resolve(field, ZoneInfo(zone_name))
