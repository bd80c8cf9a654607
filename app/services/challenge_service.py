"""
Challenge generation and freshness checks.

A challenge is 8 lowercase hex characters holding the Unix time (seconds) it
was minted at, followed by a random alphanumeric part:

    6720f1a3 kP3xQ9mZ2bLwE7rT1yUoA5sD
    |------| |----------------------|
    timestamp        random part

The timestamp only bounds replay by time. Challenges are not recorded, so the
same challenge may be answered more than once inside the window.
"""

import re
import secrets
import string
import time
from datetime import UTC, datetime

from app.config import settings
from app.schemas.integrity import FreshnessResult, TimestampInfo

TIMESTAMP_HEX_LENGTH = 8
RANDOM_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits

_TIMESTAMP_PATTERN = re.compile(r"[0-9a-fA-F]{8}")


class MalformedChallengeError(ValueError):
    """Raised when a challenge has no parseable timestamp prefix."""


def _now_seconds(now: float | None) -> int:
    return int(time.time() if now is None else now)


def _random_part(length: int) -> str:
    return "".join(secrets.choice(RANDOM_ALPHABET) for _ in range(length))


def generate_challenge(now: float | None = None, random_length: int | None = None) -> str:
    """
    Generate a new challenge for an outbound request.

    Timestamps past 0xffffffff (year 2106) produce more than 8 hex digits and
    are not supported.
    """
    if random_length is None:
        random_length = settings.challenge_random_length
    if random_length < 0:
        raise ValueError("random_length must be non-negative")

    timestamp = _now_seconds(now)
    return f"{timestamp:08x}{_random_part(random_length)}"


def generate_expired_challenge(
    offset_seconds: int | None = None,
    now: float | None = None,
    random_length: int | None = None,
) -> str:
    """Generate a well-formed challenge whose timestamp lies in the past."""
    if offset_seconds is None:
        offset_seconds = settings.expired_challenge_offset_seconds
    return generate_challenge(
        now=_now_seconds(now) - offset_seconds,
        random_length=random_length,
    )


def parse_challenge_timestamp(challenge: str) -> int:
    """Extract the Unix timestamp embedded in the first 8 characters."""
    if len(challenge) < TIMESTAMP_HEX_LENGTH:
        raise MalformedChallengeError(
            f"Challenge must be at least {TIMESTAMP_HEX_LENGTH} characters"
        )

    timestamp_hex = challenge[:TIMESTAMP_HEX_LENGTH]
    if not _TIMESTAMP_PATTERN.fullmatch(timestamp_hex):
        raise MalformedChallengeError("Challenge timestamp is not hexadecimal")

    return int(timestamp_hex, 16)


def describe_challenge(challenge: str, now: float | None = None) -> TimestampInfo:
    """Break a challenge into its parts for display and debugging."""
    timestamp = parse_challenge_timestamp(challenge)
    readable = datetime.fromtimestamp(timestamp, UTC).replace(tzinfo=None)

    return TimestampInfo(
        timestamp=timestamp,
        timestamp_hex=challenge[:TIMESTAMP_HEX_LENGTH],
        random_part=challenge[TIMESTAMP_HEX_LENGTH:],
        full_challenge=challenge,
        readable_time=readable.isoformat() + "Z",
        age_seconds=_now_seconds(now) - timestamp,
    )


def check_freshness(
    challenge: str,
    now_seconds: float | None = None,
    window_seconds: int | None = None,
) -> FreshnessResult:
    """
    Check whether a challenge was minted within the validity window.

    The window is inclusive: a challenge exactly ``window_seconds`` old is
    still fresh. Challenges from the future are never fresh, and their
    negative age is reported unchanged.

    Raises MalformedChallengeError if the timestamp prefix cannot be parsed.
    """
    if window_seconds is None:
        window_seconds = settings.challenge_freshness_window_seconds

    timestamp = parse_challenge_timestamp(challenge)
    age = _now_seconds(now_seconds) - timestamp

    return FreshnessResult(
        valid=0 <= age <= window_seconds,
        age_seconds=age,
        timestamp=timestamp,
        window_seconds=window_seconds,
    )
