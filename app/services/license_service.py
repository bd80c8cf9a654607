from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from app.models.license import License

ACTIVATION_TYPES = ("immediate", "fixed")


def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def get_user_license(db: Session, user_uuid: str, service_name: str) -> License | None:
    return (
        db.query(License)
        .filter(License.user_uuid == user_uuid, License.service_name == service_name)
        .first()
    )


def list_user_licenses(db: Session, user_uuid: str) -> list[License]:
    return (
        db.query(License)
        .filter(License.user_uuid == user_uuid)
        .order_by(License.service_name)
        .all()
    )


def create_license(
    db: Session,
    user_uuid: str,
    service_name: str,
    service_duration_days: int,
    activation_type: str = "immediate",
    service_start_time: datetime | None = None,
) -> License:
    """
    Record a license for a user.

    Immediate licenses start now; fixed licenses require an explicit start.
    """
    if activation_type not in ACTIVATION_TYPES:
        raise ValueError(f"Invalid activation type: {activation_type}")
    if service_duration_days <= 0:
        raise ValueError("Service duration must be positive")

    if activation_type == "fixed":
        if service_start_time is None:
            raise ValueError("Fixed licenses need a service start time")
        start = service_start_time
    else:
        start = service_start_time or utcnow()

    license_ = License(
        user_uuid=user_uuid,
        service_name=service_name,
        activation_type=activation_type,
        service_start_time=start,
        service_duration=service_duration_days,
        service_end_time=start + timedelta(days=service_duration_days),
    )

    db.add(license_)
    db.commit()
    db.refresh(license_)

    return license_


def validate_user_license(
    db: Session, user_uuid: str, service_name: str, now: datetime | None = None
) -> dict:
    """
    Check whether a user may use a service right now.

    Returns a dict with valid, message, service_name and, when a license
    exists, start_time, end_time and days_left (negative once expired).
    """
    license_ = get_user_license(db, user_uuid, service_name)

    if license_ is None:
        return {
            "valid": False,
            "message": "No license found for service",
            "service_name": service_name,
        }

    if now is None:
        now = utcnow()

    result = {
        "service_name": service_name,
        "start_time": license_.service_start_time,
        "end_time": license_.service_end_time,
        "days_left": (license_.service_end_time - now).days,
    }

    if now < license_.service_start_time:
        result.update(valid=False, message="License not yet active")
    elif now >= license_.service_end_time:
        result.update(valid=False, message="License expired")
    else:
        result.update(valid=True, message="License is valid")

    return result
