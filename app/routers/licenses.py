import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.middleware.rate_limit import get_license_holder_key, limiter
from app.schemas.license import (
    LicenseResponse,
    ValidateLicenseRequest,
    ValidateLicenseResponse,
)
from app.services.challenge_service import MalformedChallengeError, check_freshness
from app.services.integrity_service import (
    CHALLENGE_HEADER,
    RESPONSE_HASH_HEADER,
    sign_response,
)
from app.services.license_service import (
    get_user_license,
    list_user_licenses,
    validate_user_license,
)
from app.services.session_service import SessionState, decode_access_token

router = APIRouter()
logger = structlog.get_logger()


def get_current_session(authorization: str = Header(...)) -> SessionState:
    """Resolve the bearer access token into a session."""
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header format")

    try:
        return decode_access_token(authorization[7:])
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e))


@router.post("/license/validate", response_model=ValidateLicenseResponse)
@limiter.limit(settings.rate_limit_validations, key_func=get_license_holder_key)
async def validate_license(
    request: Request,
    payload: ValidateLicenseRequest,
    session: SessionState = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Check whether the current user holds a usable license for a service."""
    result = validate_user_license(db, session.subject, payload.service_name)
    return ValidateLicenseResponse(**result)


@router.post("/license/validate-secure", response_model=ValidateLicenseResponse)
@limiter.limit(settings.rate_limit_validations, key_func=get_license_holder_key)
async def validate_license_secure(
    request: Request,
    payload: ValidateLicenseRequest,
    x_challenge: str | None = Header(None, alias=CHALLENGE_HEADER),
    session: SessionState = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Validate a license and sign the response against the caller's challenge.

    The response body is returned exactly as hashed, with the digest in
    X-Response-Hash. Challenges outside the freshness window are refused.
    """
    if not x_challenge:
        raise HTTPException(status_code=400, detail=f"Missing {CHALLENGE_HEADER} header")

    try:
        freshness = check_freshness(x_challenge)
    except MalformedChallengeError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not freshness.valid:
        logger.info(
            "challenge_rejected",
            challenge_prefix=x_challenge[:8],
            age_seconds=freshness.age_seconds,
            window_seconds=freshness.window_seconds,
        )
        raise HTTPException(status_code=401, detail="Challenge expired")

    # The salt depends on the body length exactly as the client sent it
    request_body = (await request.body()).decode("utf-8")

    result = validate_user_license(db, session.subject, payload.service_name)
    response_data = ValidateLicenseResponse(**result).model_dump(mode="json", exclude_none=True)
    signed = sign_response(response_data, x_challenge, request_body)

    logger.info(
        "license_validated_secure",
        service_name=payload.service_name,
        valid=result["valid"],
        challenge_age_seconds=freshness.age_seconds,
    )

    return Response(
        content=signed.body,
        media_type="application/json",
        headers={RESPONSE_HASH_HEADER: signed.digest},
    )


@router.get("/license/licenses", response_model=list[LicenseResponse])
@limiter.limit(settings.rate_limit_validations, key_func=get_license_holder_key)
async def get_licenses(
    request: Request,
    session: SessionState = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """List the current user's licenses."""
    return [LicenseResponse.model_validate(lic) for lic in list_user_licenses(db, session.subject)]


@router.get("/license/licenses/{service_name}", response_model=LicenseResponse)
@limiter.limit(settings.rate_limit_validations, key_func=get_license_holder_key)
async def get_license_by_service(
    request: Request,
    service_name: str,
    session: SessionState = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    license_ = get_user_license(db, session.subject, service_name)
    if not license_:
        raise HTTPException(status_code=404, detail="License not found")
    return LicenseResponse.model_validate(license_)
