from pydantic import BaseModel, ConfigDict


class TimestampInfo(BaseModel):
    """Decoded view of a challenge. Informational only."""

    timestamp: int
    timestamp_hex: str
    random_part: str
    full_challenge: str
    readable_time: str  # ISO 8601, UTC
    age_seconds: int


class FreshnessResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    age_seconds: int | None = None
    timestamp: int | None = None
    window_seconds: int
    error: str | None = None


class VerificationResult(BaseModel):
    """Outcome of checking a response digest, with everything needed to debug it."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    expected_digest: str
    received_digest: str | None = None
    salt: str
    freshness: FreshnessResult
    error: str | None = None  # "digest_mismatch" | "missing_digest"


class ChallengeIssueResponse(BaseModel):
    challenge: str
    timestamp_info: TimestampInfo
    window_seconds: int
    algorithm: str = "sha256"
