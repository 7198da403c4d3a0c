from __future__ import annotations

import hashlib
import re

_PUNCTUATION_PATTERN = re.compile(r"[^A-Za-z0-9_\s]")
_WHITESPACE_PATTERN = re.compile(r"\s")

_US_POSTAL_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")
_CA_POSTAL_PATTERN = re.compile(r"^[A-Za-z]\d[A-Za-z][ -]?\d[A-Za-z]\d$")
_UK_POSTAL_PATTERN = re.compile(r"^[A-Z]{1,2}\d{1,2}[A-Z]?\s?\d[A-Z]{2}$", re.IGNORECASE)


def _normalize_street(address1: str) -> str:
    return _PUNCTUATION_PATTERN.sub("", address1.strip().lower())


def _normalize_postal_code(postal_code: str) -> str:
    return _WHITESPACE_PATTERN.sub("", postal_code.strip())


def _location_parts(
    *,
    address1: str,
    city: str,
    region: str,
    postal_code: str,
    country: str,
) -> list[str]:
    return [
        _normalize_street(address1),
        city.strip().lower(),
        region.strip().lower(),
        _normalize_postal_code(postal_code),
        country.strip().upper(),
    ]


def _digest(parts: list[str]) -> str:
    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()


def address_fingerprint(
    *,
    first_name: str,
    last_name: str,
    address1: str,
    city: str,
    region: str,
    postal_code: str,
    country: str,
) -> str:
    """Identity of a recipient at an address; punctuation and case variants collide."""
    parts = [first_name.strip().lower(), last_name.strip().lower()]
    parts.extend(
        _location_parts(
            address1=address1,
            city=city,
            region=region,
            postal_code=postal_code,
            country=country,
        )
    )
    return _digest(parts)


def location_fingerprint(
    *,
    address1: str,
    city: str,
    region: str,
    postal_code: str,
    country: str,
) -> str:
    return _digest(
        _location_parts(
            address1=address1,
            city=city,
            region=region,
            postal_code=postal_code,
            country=country,
        )
    )


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_postal_code(postal_code: str, country: str) -> bool:
    candidate = postal_code.strip()
    if country == "US":
        return _US_POSTAL_PATTERN.match(candidate) is not None
    if country == "CA":
        return _CA_POSTAL_PATTERN.match(candidate) is not None
    if country in {"GB", "UK"}:
        return _UK_POSTAL_PATTERN.match(candidate) is not None
    return len(candidate) > 0
