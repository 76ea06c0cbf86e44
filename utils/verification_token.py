"""
Stateless email OTP tokens.

The issuer signs {email, expiresAt, codeHash} with the server secret and hands the
plain code to a notifier; the caller keeps the token and presents it back with the
code the user typed. No server-side storage: tampering is caught by the HMAC,
staleness by expiresAt, and the code by recomputing its hash.

Token format: base64url(payload_json) + "." + hex(HMAC-SHA256(secret, payload_json))
"""
import base64
import binascii
import hashlib
import hmac
import json
import logging
import string
from dataclasses import dataclass

from utils.otp_helper import OTP_EXPIRY_MINUTES, OTP_LENGTH, generate_otp, hash_otp, verify_otp, now_ms

logger = logging.getLogger(__name__)

TOKEN_DELIMITER = "."
B64URL_ALPHABET = frozenset(string.ascii_letters + string.digits + "-_")


class OTPError(Exception):
    """Base class for OTP issue/verify failures. `error` is the machine-readable kind."""
    error = "otp_error"
    message = "Verification failed."

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        return {"success": False, "error": self.error, "message": self.message}


class InvalidInput(OTPError):
    error = "invalid_input"
    message = "Missing email"


class MissingFields(OTPError):
    error = "missing_fields"
    message = "Missing fields"


class MalformedToken(OTPError):
    error = "malformed_token"
    message = "Bad token"


class InvalidSignature(OTPError):
    error = "invalid_signature"
    message = "Invalid token signature"


class EmailMismatch(OTPError):
    error = "email_mismatch"
    message = "Email mismatch"


class Expired(OTPError):
    error = "expired"
    message = "Code expired"


class InvalidCode(OTPError):
    error = "invalid_code"
    message = "Invalid code"


@dataclass(frozen=True)
class OTPConfig:
    secret: str
    ttl_seconds: int = OTP_EXPIRY_MINUTES * 60
    code_length: int = OTP_LENGTH

    @property
    def ttl_minutes(self) -> int:
        return self.ttl_seconds // 60


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64url_decode(data: str) -> bytes:
    """Unpadded base64url only; anything else raises binascii.Error."""
    if not B64URL_ALPHABET.issuperset(data):
        raise binascii.Error("non-base64url character in token payload")
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def _sign(secret: str, payload: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


class OTPIssuer:
    """Generates a code, mails it via `notifier` and returns the signed token."""

    def __init__(self, config: OTPConfig, notifier=None, clock=now_ms):
        self.config = config
        self.notifier = notifier
        self.clock = clock

    def issue(self, email):
        if not isinstance(email, str) or not email.strip():
            raise InvalidInput()

        code = generate_otp(self.config.code_length)
        expires_at = self.clock() + self.config.ttl_seconds * 1000
        payload = {
            "email": email,
            "expiresAt": expires_at,
            "codeHash": hash_otp(code, email, self.config.secret),
        }
        payload_bytes = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        token = f"{_b64url_encode(payload_bytes)}{TOKEN_DELIMITER}{_sign(self.config.secret, payload_bytes)}"

        self._dispatch(email, code)
        return {"token": token, "expiresAt": expires_at}

    def _dispatch(self, email, code):
        if self.notifier is None:
            logger.warning("No OTP notifier configured; code for %s was not delivered", email)
            return
        try:
            self.notifier.send_otp(email, code, self.config.ttl_minutes)
        except Exception as e:
            # Delivery failures do not fail issuance
            logger.error("Failed to deliver OTP to %s: %s", email, e, exc_info=True)


class OTPVerifier:
    """Checks signature, email binding, expiry and code, in that order."""

    def __init__(self, config: OTPConfig, clock=now_ms):
        self.config = config
        self.clock = clock

    def verify(self, email, code, token):
        if not email or not code or not token:
            raise MissingFields()

        payload_b64, sep, sig = token.partition(TOKEN_DELIMITER)
        if not sep or not payload_b64 or not sig:
            raise MalformedToken()
        try:
            payload_bytes = _b64url_decode(payload_b64)
        except (binascii.Error, ValueError):
            raise MalformedToken()
        # Only the exact encoding the issuer produced is accepted
        if _b64url_encode(payload_bytes) != payload_b64:
            raise InvalidSignature()

        expected = _sign(self.config.secret, payload_bytes)
        if not hmac.compare_digest(expected.encode("utf-8"), sig.encode("utf-8")):
            raise InvalidSignature()

        try:
            payload = json.loads(payload_bytes.decode("utf-8"))
            token_email = payload["email"]
            expires_at = int(payload["expiresAt"])
            code_hash = payload["codeHash"]
        except (ValueError, TypeError, KeyError):
            raise MalformedToken()

        if token_email != email:
            raise EmailMismatch()
        if self.clock() > expires_at:
            raise Expired()
        if not verify_otp(code, email, self.config.secret, code_hash):
            raise InvalidCode()

        return {"verified": True}
