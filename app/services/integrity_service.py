"""
Response integrity hashing shared by the signer and the verifier.

    salt   = transform_challenge(challenge, request_body)
    digest = sha256(utf8(response_body + salt)).hexdigest()

Both sides must produce bit-identical results, so two conventions are fixed
here and nowhere else:

- Lengths and slicing are measured in UTF-16 code units, which is what
  browser verifiers count with ``String.length``. Lone surrogates produced by
  slicing are encoded as U+FFFD when hashed, the same as ``TextEncoder``.
- Bodies are serialized once with ``canonical_json`` and the resulting string
  is both transmitted and hashed. Never hash a re-serialized parse.
"""

import hashlib
import json
from dataclasses import dataclass
from typing import Any

import structlog

CHALLENGE_HEADER = "X-Challenge"
RESPONSE_HASH_HEADER = "X-Response-Hash"
HASH_ALGORITHM = "sha256"
MAX_SALT_LENGTH = 16

_UTF16 = "utf-16-le"
_UNIT = 2  # bytes per UTF-16 code unit

logger = structlog.get_logger()


@dataclass(frozen=True)
class SignedResponse:
    body: str
    digest: str


def _utf16(text: str) -> bytes:
    return text.encode(_UTF16, "surrogatepass")


def utf16_length(text: str) -> int:
    """Length of ``text`` in UTF-16 code units (astral characters count twice)."""
    return len(_utf16(text)) // _UNIT


def transform_challenge(challenge: str, request_body: str) -> str:
    """
    Derive the salt for a request.

    Rotates the challenge left by ``len(request_body) % len(challenge)`` and
    keeps at most the first 16 code units. An empty challenge gives an empty
    salt.
    """
    units = _utf16(challenge)
    challenge_length = len(units) // _UNIT
    if challenge_length == 0:
        return ""

    rotate_pos = utf16_length(request_body) % challenge_length
    split = rotate_pos * _UNIT
    rotated = units[split:] + units[:split]

    return rotated[: MAX_SALT_LENGTH * _UNIT].decode(_UTF16, "surrogatepass")


def compute_response_hash(response_body: str, challenge: str, request_body: str) -> str:
    """Compute the hex digest a signer attaches to ``response_body``."""
    salt = transform_challenge(challenge, request_body)
    # Joined as UTF-16 so surrogate halves pair back up; lone ones hash as U+FFFD
    material = (_utf16(response_body) + _utf16(salt)).decode(_UTF16, "replace")
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


def _reject_floats(value: Any) -> None:
    if isinstance(value, float):
        raise TypeError("Floats are not allowed in signed payloads")
    if isinstance(value, dict):
        for item in value.values():
            _reject_floats(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _reject_floats(item)


def canonical_json(payload: Any) -> str:
    """
    Serialize ``payload`` the way ``JSON.stringify`` would.

    Compact separators, insertion key order, non-ASCII left unescaped. Only
    str, int, bool, None, lists and dicts are accepted; float formatting
    differs between runtimes so floats raise TypeError.
    """
    _reject_floats(payload)
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def sign_response(payload: Any, challenge: str, request_body: str) -> SignedResponse:
    """Serialize a response payload once and compute its digest."""
    body = canonical_json(payload)
    digest = compute_response_hash(body, challenge, request_body)

    logger.debug(
        "response_signed",
        challenge_prefix=challenge[:8],
        request_length=utf16_length(request_body),
        response_length=utf16_length(body),
    )

    return SignedResponse(body=body, digest=digest)
