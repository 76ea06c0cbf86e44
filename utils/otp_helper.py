"""
OTP generation and hashing for email verification.
The plain code is never embedded in a token; only its hash keyed with email and secret.
"""
import secrets
import hashlib
import time

# OTP length and expiry
OTP_LENGTH = 6
OTP_EXPIRY_MINUTES = 10


def generate_otp(length: int = OTP_LENGTH) -> str:
    """Generate a secure numeric OTP, left-zero-padded (000000-999999 for 6 digits)."""
    return str(secrets.randbelow(10 ** length)).zfill(length)


def hash_otp(otp: str, email: str, secret: str) -> str:
    """Hash OTP bound to one email and the server secret."""
    return hashlib.sha256(f"{otp}.{email}.{secret}".encode('utf-8')).hexdigest()


def verify_otp(plain_otp: str, email: str, secret: str, otp_hash: str) -> bool:
    """Verify a plain OTP against the hash carried in a token."""
    return hash_otp(plain_otp, email, secret) == otp_hash


def now_ms() -> int:
    return int(time.time() * 1000)
