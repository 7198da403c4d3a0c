from __future__ import annotations

import hashlib
import secrets

OTP_MIN = 100000
OTP_MAX = 999999


def hash_value(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def hash_ip(ip: str) -> str:
    return hash_value(ip)


def generate_otp() -> str:
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def generate_session_token() -> str:
    return secrets.token_urlsafe(32)


def generate_verification_token() -> str:
    return secrets.token_urlsafe(32)


def generate_claim_token() -> str:
    return secrets.token_urlsafe(24)


def generate_gift_code() -> str:
    return secrets.token_urlsafe(6)
