"""
Admin token hashing and resolution from HTTP requests.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

BEARER_PREFIX = "Bearer "


def hash_token(token: str) -> str:
    """SHA-256 hex digest of the token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def tokens_match(stored_hash: str, submitted_token: str) -> bool:
    return hmac.compare_digest(stored_hash, hash_token(submitted_token))


class BodyState(Enum):
    PRESENT = "present"
    ABSENT = "absent"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ParsedBody:
    state: BodyState
    payload: Any = None

    def field(self, name: str) -> Any:
        if self.state is not BodyState.PRESENT or not isinstance(self.payload, dict):
            return None
        return self.payload.get(name)


def parse_json_body(raw: bytes | str | None) -> ParsedBody:
    """
    Parse a request body without raising.

    Empty bodies are ABSENT; bodies that are not valid UTF-8 JSON are MALFORMED.
    """
    if raw is None:
        return ParsedBody(BodyState.ABSENT)
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return ParsedBody(BodyState.MALFORMED)
    if not raw.strip():
        return ParsedBody(BodyState.ABSENT)
    try:
        return ParsedBody(BodyState.PRESENT, json.loads(raw))
    except ValueError:
        return ParsedBody(BodyState.MALFORMED)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):]
    return token or None


def resolve_admin_token(
    authorization: Optional[str], body: ParsedBody
) -> Optional[str]:
    """
    Return the admin token from the Bearer header, falling back to the body's
    ``adminToken`` field. None when neither yields a non-empty string.
    """
    token = bearer_token(authorization)
    if token:
        return token
    candidate = body.field("adminToken")
    if isinstance(candidate, str) and candidate:
        return candidate
    return None
