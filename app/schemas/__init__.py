from app.schemas.integrity import (
    ChallengeIssueResponse,
    FreshnessResult,
    TimestampInfo,
    VerificationResult,
)
from app.schemas.license import (
    LicenseResponse,
    ValidateLicenseRequest,
    ValidateLicenseResponse,
)

__all__ = [
    "ChallengeIssueResponse",
    "FreshnessResult",
    "LicenseResponse",
    "TimestampInfo",
    "ValidateLicenseRequest",
    "ValidateLicenseResponse",
    "VerificationResult",
]
