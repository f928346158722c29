"""Tests for the reading domain model."""

from datetime import datetime

import pytest

from climate.lib.exceptions import MalformedReadingError
from climate.lib.reading import Reading
from climate.lib.utils import floor_to_minute, to_naive_utc


class TestFromStatus:
    """Tests for building readings from a device status payload."""

    def test_temperature_is_divided_by_ten(self, device_status, frozen_time):
        reading = Reading.from_status(device_status, frozen_time)

        assert reading.temperature == 21.5
        assert reading.humidity == 48.0

    def test_timestamp_is_floored_to_minute(self, device_status, frozen_time):
        reading = Reading.from_status(device_status, frozen_time)

        assert reading.created_at == datetime(2024, 3, 1, 10, 2, 0)

    def test_id_is_unassigned(self, device_status, frozen_time):
        assert Reading.from_status(device_status, frozen_time).id is None

    def test_humidity_out_of_range_is_kept(self, frozen_time):
        status = [
            {"code": "va_temperature", "value": 200},
            {"code": "va_humidity", "value": 104},
        ]

        assert Reading.from_status(status, frozen_time).humidity == 104.0

    @pytest.mark.parametrize("missing", ["va_temperature", "va_humidity"])
    def test_missing_field_raises(self, device_status, frozen_time, missing):
        status = [item for item in device_status if item["code"] != missing]

        with pytest.raises(MalformedReadingError) as exc_info:
            Reading.from_status(status, frozen_time)

        assert exc_info.value.code == missing
        assert "missing" in str(exc_info.value)

    def test_null_value_counts_as_missing(self, frozen_time):
        status = [
            {"code": "va_temperature", "value": None},
            {"code": "va_humidity", "value": 50},
        ]

        with pytest.raises(MalformedReadingError):
            Reading.from_status(status, frozen_time)

    def test_non_numeric_value_raises(self, frozen_time):
        status = [
            {"code": "va_temperature", "value": "warm"},
            {"code": "va_humidity", "value": 50},
        ]

        with pytest.raises(MalformedReadingError, match="not a number"):
            Reading.from_status(status, frozen_time)

    def test_empty_status_raises(self, frozen_time):
        with pytest.raises(MalformedReadingError):
            Reading.from_status([], frozen_time)


class TestRowConversion:
    """Tests for database row conversion and JSON output."""

    def test_from_row_parses_timestamp(self):
        row = {
            "id": 7,
            "temperature": 22.1,
            "humidity": 51.0,
            "created_at": "2024-03-01 10:02:00",
        }

        reading = Reading.from_row(row)

        assert reading.id == 7
        assert reading.created_at == datetime(2024, 3, 1, 10, 2)

    def test_to_json_uses_dashboard_keys(self, sample_reading):
        data = sample_reading.to_json()

        assert data == {
            "id": None,
            "temperature": 21.5,
            "humidity": 48.0,
            "createdAt": "2024-03-01T10:02:00",
        }


class TestTimeHelpers:
    def test_floor_to_minute_drops_seconds_and_microseconds(self):
        dt = datetime(2024, 3, 1, 10, 2, 59, 999999)

        assert floor_to_minute(dt) == datetime(2024, 3, 1, 10, 2)

    def test_to_naive_utc_converts_aware(self):
        dt = datetime.fromisoformat("2024-03-01T12:30:00+02:00")

        assert to_naive_utc(dt) == datetime(2024, 3, 1, 10, 30)

    def test_to_naive_utc_keeps_naive(self):
        dt = datetime(2024, 3, 1, 10, 30)

        assert to_naive_utc(dt) is dt
