"""
HTTP client for license validation with response verification.

Works with any ``httpx.Client`` pointed at the service, including FastAPI's
``TestClient``:

    with httpx.Client(base_url="https://licenses.example.com") as http:
        client = LicenseValidationClient(http, access_token=token)
        result = client.validate_secure("ocr")
        if result.verification.valid and result.verification.freshness.valid:
            ...

The request body is serialized once and sent as raw content, and the digest
is checked against ``response.text``. Parsing and re-serializing the response
would change key order or spacing and break verification.
"""

from dataclasses import dataclass
from typing import Any

import httpx

from app.logging_config import get_logger
from app.schemas.integrity import TimestampInfo, VerificationResult
from app.services.challenge_service import (
    MalformedChallengeError,
    describe_challenge,
    generate_challenge,
)
from app.services.integrity_service import (
    CHALLENGE_HEADER,
    RESPONSE_HASH_HEADER,
    canonical_json,
)
from app.services.verification_service import (
    CapturedResponse,
    ChallengedRequest,
    verify_response,
)

API_PREFIX = "/api/v1"

logger = get_logger("license_client")


class IntegrityClientError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


@dataclass(frozen=True)
class SecureValidationResult:
    status_code: int
    data: dict | None
    verification: VerificationResult
    timestamp_info: TimestampInfo | None
    request_body: str
    response_body: str


def _error_detail(response: httpx.Response) -> Any:
    try:
        return response.json().get("detail", response.text)
    except (ValueError, AttributeError):
        return response.text


class LicenseValidationClient:
    def __init__(self, http_client: httpx.Client, access_token: str | None = None):
        self.http = http_client
        self.access_token = access_token

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    def _post(self, path: str, body: str, headers: dict[str, str]) -> httpx.Response:
        try:
            response = self.http.post(
                f"{API_PREFIX}{path}", content=body.encode("utf-8"), headers=headers
            )
        except httpx.RequestError as e:
            raise IntegrityClientError(f"Request failed: {e}") from e

        if response.is_error:
            detail = _error_detail(response)
            raise IntegrityClientError(
                f"API error {response.status_code}: {detail}",
                status_code=response.status_code,
                detail=detail,
            )
        return response

    def validate(self, service_name: str) -> dict:
        """Plain license validation, without a challenge."""
        body = canonical_json({"service_name": service_name})
        return self._post("/license/validate", body, self._headers()).json()

    def validate_secure(
        self,
        service_name: str,
        challenge: str | None = None,
        now_seconds: float | None = None,
    ) -> SecureValidationResult:
        """
        Validate a license and verify the signed response.

        A fresh challenge is generated when none is given. HTTP errors raise
        IntegrityClientError; a bad or missing digest does not raise, it is
        reported in ``verification``. A body that is not JSON leaves ``data``
        as None.
        """
        if challenge is None:
            challenge = generate_challenge(now=now_seconds)

        request_body = canonical_json({"service_name": service_name})
        headers = self._headers()
        headers[CHALLENGE_HEADER] = challenge

        response = self._post("/license/validate-secure", request_body, headers)

        verification = verify_response(
            ChallengedRequest(body=request_body, challenge=challenge),
            CapturedResponse(
                body=response.text,
                digest_header=response.headers.get(RESPONSE_HASH_HEADER),
            ),
            now_seconds=now_seconds,
        )

        try:
            timestamp_info = describe_challenge(challenge, now=now_seconds)
        except MalformedChallengeError:
            timestamp_info = None

        try:
            data = response.json()
        except ValueError:
            data = None

        logger.info(
            "secure_validation_checked",
            service_name=service_name,
            hash_valid=verification.valid,
            fresh=verification.freshness.valid,
        )

        return SecureValidationResult(
            status_code=response.status_code,
            data=data,
            verification=verification,
            timestamp_info=timestamp_info,
            request_body=request_body,
            response_body=response.text,
        )
