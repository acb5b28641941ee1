"""Parsing of user-supplied dates into epoch seconds."""

from datetime import datetime

import click


def parse_date(value: str) -> int:
    """Parse `@<epoch-seconds>` or an ISO 8601 date/time.

    ISO values without a UTC offset are taken as local time.

    Raises:
        ValueError: If the value is neither form
    """
    text = value.strip()
    if text.startswith("@"):
        digits = text[1:]
        if not digits.isdigit():
            raise ValueError(f"Invalid epoch date {value!r}: expected @<seconds>")
        return int(digits)

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(
            f"Invalid date {value!r}: use ISO 8601 (2024-05-01T09:30:00) or @<epoch-seconds>"
        ) from None
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return int(parsed.timestamp())


def date_option_callback(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> int | None:
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from None


def format_timestamp(timestamp: int) -> str:
    """Local-time display form of epoch seconds."""
    return datetime.fromtimestamp(timestamp).astimezone().strftime("%Y-%m-%d %H:%M:%S %z")
