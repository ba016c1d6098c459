"""Record parser for TG Reporter.

Turns a region's raw CSV export into MessageRecord objects. Parsing is
best-effort: a bad timestamp falls back to the current time and short rows
are salvaged with empty fields, so one broken line never aborts a batch.
"""

import csv
import io
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from .models import MessageRecord, ParseStats

logger = logging.getLogger(__name__)


# id, timestamp, body, group, region
EXPECTED_FIELDS = 5

# Formats tried after ISO 8601 fails
FALLBACK_DATE_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%d.%m.%Y %H:%M:%S",
    "%d.%m.%Y %H:%M",
    "%d.%m.%Y",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
)

# First Sunday of year 1
EARLIEST_DATE = date(1, 1, 7)


class MalformedRecordError(Exception):
    """Raised in strict mode when a row does not have enough fields."""

    def __init__(self, line_number: int, line: str, reason: str):
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"Malformed record at line {line_number}: {reason} ({line[:80]!r})")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> Optional[datetime]:
    """
    Parse a timestamp string into an aware UTC datetime.

    Naive values are taken to be UTC.

    Returns:
        The parsed datetime, or None if the value is not a recognizable date
        or lies outside the range a weekly bucket can represent
    """
    value = (value or "").strip()
    if not value:
        return None

    parsed = None
    iso_value = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        parsed = datetime.fromisoformat(iso_value)
    except ValueError:
        for fmt in FALLBACK_DATE_FORMATS:
            try:
                parsed = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    else:
        try:
            parsed = parsed.astimezone(timezone.utc)
        except OverflowError:
            return None

    # The week bucket of anything earlier would start before date.min
    if parsed.date() < EARLIEST_DATE:
        return None
    return parsed


class RecordParser:
    """Parses raw region CSV text into message records."""

    def __init__(
        self,
        strict: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize parser.

        Args:
            strict: Raise MalformedRecordError for short rows instead of salvaging them
            clock: Source of the fallback timestamp (defaults to current UTC time)
        """
        self.strict = strict
        self.clock = clock or _utc_now
        self.stats = ParseStats()

    def parse(self, raw_text: str, region: str) -> list[MessageRecord]:
        """
        Parse raw CSV text into MessageRecord objects.

        The first row is a header and is discarded. Quoted fields may contain
        commas and line breaks.

        Args:
            raw_text: Raw CSV text for one region
            region: Region code the batch belongs to

        Returns:
            List of parsed MessageRecord objects, in source order

        Raises:
            MalformedRecordError: In strict mode, for rows with too few fields
        """
        self.stats = ParseStats()
        records = []

        reader = csv.reader(io.StringIO(raw_text))
        header_seen = False

        for fields in reader:
            if not header_seen:
                header_seen = True
                continue

            self.stats.total_lines += 1

            # Only blank lines are skipped; a row of empty fields is still a record
            if not fields or (len(fields) == 1 and not fields[0].strip()):
                self.stats.skipped_empty += 1
                continue

            record = self._build_record(fields, region, reader.line_num)
            records.append(record)

        self.stats.parsed_records = len(records)

        if self.stats.timestamp_fallbacks:
            logger.warning(
                f"{region}: {self.stats.timestamp_fallbacks} records had unparseable "
                f"timestamps and were dated now"
            )
        if self.stats.malformed_rows:
            logger.warning(f"{region}: salvaged {self.stats.malformed_rows} malformed rows")

        logger.info(f"Parsed {len(records)} records for {region}")
        return records

    def parse_file(self, filepath: str, region: str) -> list[MessageRecord]:
        """Parse records from a CSV file."""
        path = Path(filepath)
        with open(path, "r", encoding="utf-8", newline="") as f:
            return self.parse(f.read(), region)

    def _build_record(self, fields: list[str], region: str, line_number: int) -> MessageRecord:
        """Map a row's fields to a record, salvaging short rows."""
        if len(fields) >= EXPECTED_FIELDS:
            record_id = fields[0]
            raw_timestamp = fields[1]
            # Unquoted bodies may have been split on their own commas
            body = ",".join(fields[2:-2])
            group = fields[-2]
            record_region = fields[-1]
        else:
            reason = f"expected {EXPECTED_FIELDS} fields, got {len(fields)}"
            if self.strict:
                raise MalformedRecordError(line_number, ",".join(fields), reason)

            self.stats.malformed_rows += 1
            logger.debug(f"Line {line_number}: {reason}")
            padded = fields + [""] * (EXPECTED_FIELDS - len(fields))
            record_id, raw_timestamp, body, group, record_region = padded

        timestamp = parse_timestamp(raw_timestamp)
        if timestamp is None:
            self.stats.timestamp_fallbacks += 1
            timestamp = self.clock()

        return MessageRecord(
            id=record_id.strip(),
            timestamp=timestamp,
            body=body,
            group=group.strip(),
            region=record_region.strip() or region,
        )
