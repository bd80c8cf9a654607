import structlog
from fastapi import APIRouter, Query, Request

from app.config import settings
from app.middleware.rate_limit import limiter
from app.schemas.integrity import ChallengeIssueResponse
from app.services.challenge_service import (
    describe_challenge,
    generate_challenge,
    generate_expired_challenge,
)
from app.services.integrity_service import HASH_ALGORITHM

router = APIRouter()
logger = structlog.get_logger()


@router.get("/challenges", response_model=ChallengeIssueResponse)
@limiter.limit(settings.rate_limit_challenges)
async def issue_challenge(
    request: Request,
    expired: bool = Query(False, description="Backdate the challenge past the window"),
):
    """
    Issue a challenge stamped with the server clock.

    Clients may also mint their own; this endpoint exists for clients whose
    clocks cannot be trusted. ``expired=true`` returns a challenge that the
    secure validation endpoint will refuse, for testing the rejection path.
    """
    challenge = generate_expired_challenge() if expired else generate_challenge()

    logger.info("challenge_issued", challenge_prefix=challenge[:8], expired=expired)

    return ChallengeIssueResponse(
        challenge=challenge,
        timestamp_info=describe_challenge(challenge),
        window_seconds=settings.challenge_freshness_window_seconds,
        algorithm=HASH_ALGORITHM,
    )
