"""Duration parsing for time-window settings such as the recency window."""

import re

SECONDS_PER_DAY = 86400

_UNIT_SECONDS = {
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": SECONDS_PER_DAY,
    "w": 7 * SECONDS_PER_DAY,
}


class DurationParseError(ValueError):
    """Raised when a duration string cannot be parsed."""

    pass


def parse_duration(duration_str: str) -> int:
    """
    Parse a duration string to seconds.

    Supports human-readable values ("30d", "2w", "12h", "1d12h") and
    ISO-8601 durations ("P30D", "PT12H", "P1DT12H").

    Args:
        duration_str: Duration string to parse

    Returns:
        Duration in seconds

    Raises:
        DurationParseError: If the duration string is invalid

    Examples:
        >>> parse_duration("30d")
        2592000
        >>> parse_duration("P30D")
        2592000
        >>> parse_duration("PT1H")
        3600
    """
    if not isinstance(duration_str, str):
        raise DurationParseError(f"Duration must be a string, got: {duration_str!r}")

    duration_str = duration_str.strip()
    if not duration_str:
        raise DurationParseError("Duration string cannot be empty")

    if duration_str.upper().startswith("P"):
        return _parse_iso8601_duration(duration_str)

    return _parse_human_readable_duration(duration_str)


def _parse_iso8601_duration(duration_str: str) -> int:
    """Parse the ``P[n]W`` / ``P[n]DT[n]H[n]M[n]S`` subset of ISO-8601."""
    duration_str = duration_str.upper()

    pattern = r"^P(?:(\d+)W)?(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$"
    match = re.match(pattern, duration_str)
    if not match or duration_str in ("P", "PT") or duration_str.endswith("T"):
        raise DurationParseError(
            f"Invalid ISO-8601 duration format: '{duration_str}'. "
            "Expected format like 'P30D', 'P2W', 'PT12H' or 'P1DT12H'"
        )

    weeks, days, hours, minutes, seconds = match.groups()

    total_seconds = 0
    if weeks:
        total_seconds += int(weeks) * _UNIT_SECONDS["w"]
    if days:
        total_seconds += int(days) * SECONDS_PER_DAY
    if hours:
        total_seconds += int(hours) * 3600
    if minutes:
        total_seconds += int(minutes) * 60
    if seconds:
        total_seconds += int(float(seconds))

    if total_seconds == 0:
        raise DurationParseError(f"Duration cannot be zero: '{duration_str}'")

    return total_seconds


def _parse_human_readable_duration(duration_str: str) -> int:
    """Parse ``<number><unit>`` sequences where unit is one of s, m, h, d, w."""
    matches = re.findall(r"(\d+)\s*([smhdw])", duration_str.lower())
    if not matches:
        raise DurationParseError(
            f"Invalid duration format: '{duration_str}'. "
            "Expected format like '30d', '2w', '12h', or combinations like '1d12h'"
        )

    parsed_str = "".join(f"{num}{unit}" for num, unit in matches)
    if parsed_str != re.sub(r"\s+", "", duration_str.lower()):
        raise DurationParseError(
            f"Invalid characters in duration: '{duration_str}'. "
            "Use only digits and units: s, m, h, d, w"
        )

    total_seconds = sum(int(num) * _UNIT_SECONDS[unit] for num, unit in matches)
    if total_seconds == 0:
        raise DurationParseError(f"Duration cannot be zero: '{duration_str}'")

    return total_seconds


def validate_duration_range(
    duration_seconds: int,
    min_seconds: int = 3600,
    max_seconds: int = 365 * SECONDS_PER_DAY,
    label: str = "Duration",
) -> None:
    """
    Validate that a duration is within an acceptable range.

    Raises:
        DurationParseError: If duration is outside the valid range
    """
    if duration_seconds < min_seconds:
        raise DurationParseError(
            f"{label} too short: {seconds_to_human_readable(duration_seconds)}. "
            f"Minimum is {seconds_to_human_readable(min_seconds)}."
        )

    if duration_seconds > max_seconds:
        raise DurationParseError(
            f"{label} too long: {seconds_to_human_readable(duration_seconds)}. "
            f"Maximum is {seconds_to_human_readable(max_seconds)}."
        )


def seconds_to_human_readable(seconds: int) -> str:
    """Convert seconds to a coarse human-readable string ("3 hours", "30 days")."""
    if seconds < 60:
        return f"{seconds} second{'s' if seconds != 1 else ''}"
    if seconds < 3600:
        minutes = seconds // 60
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    if seconds < SECONDS_PER_DAY:
        hours = seconds // 3600
        return f"{hours} hour{'s' if hours != 1 else ''}"
    days = seconds // SECONDS_PER_DAY
    return f"{days} day{'s' if days != 1 else ''}"
