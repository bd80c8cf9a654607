import hmac
from dataclasses import dataclass

import structlog

from app.config import settings
from app.schemas.integrity import FreshnessResult, VerificationResult
from app.services.challenge_service import MalformedChallengeError, check_freshness
from app.services.integrity_service import compute_response_hash, transform_challenge

logger = structlog.get_logger()


@dataclass(frozen=True)
class ChallengedRequest:
    """The exact request body string that was sent, and the challenge sent with it."""

    body: str
    challenge: str


@dataclass(frozen=True)
class CapturedResponse:
    """The raw response body as received, and the digest header (None if absent)."""

    body: str
    digest_header: str | None


def _freshness_or_error(
    challenge: str, now_seconds: float | None, window_seconds: int | None
) -> FreshnessResult:
    if window_seconds is None:
        window_seconds = settings.challenge_freshness_window_seconds
    try:
        return check_freshness(challenge, now_seconds, window_seconds)
    except MalformedChallengeError as e:
        return FreshnessResult(
            valid=False,
            window_seconds=window_seconds,
            error=str(e),
        )


def verify_response(
    request: ChallengedRequest,
    response: CapturedResponse,
    now_seconds: float | None = None,
    window_seconds: int | None = None,
) -> VerificationResult:
    """
    Recompute the digest of a response and compare it with the one received.

    ``valid`` reflects integrity only. Freshness of the challenge is reported
    separately in ``freshness`` and does not change ``valid``; callers that
    want to reject stale responses must check both.
    """
    salt = transform_challenge(request.challenge, request.body)
    expected = compute_response_hash(response.body, request.challenge, request.body)
    freshness = _freshness_or_error(request.challenge, now_seconds, window_seconds)

    if response.digest_header is None:
        error = "missing_digest"
        valid = False
    else:
        valid = hmac.compare_digest(
            expected.encode("utf-8"), response.digest_header.encode("utf-8")
        )
        error = None if valid else "digest_mismatch"

    if not valid:
        logger.warning(
            "response_verification_failed",
            reason=error,
            challenge_prefix=request.challenge[:8],
            fresh=freshness.valid,
        )

    return VerificationResult(
        valid=valid,
        expected_digest=expected,
        received_digest=response.digest_header,
        salt=salt,
        freshness=freshness,
        error=error,
    )
