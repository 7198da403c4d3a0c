from __future__ import annotations

import ipaddress
from functools import lru_cache

from fastapi import Request

UNKNOWN_CLIENT_IP = "unknown"


@lru_cache(maxsize=32)
def _parse_trusted_networks(
    trusted_proxies: str,
) -> tuple[ipaddress.IPv4Network | ipaddress.IPv6Network, ...]:
    networks: list[ipaddress.IPv4Network | ipaddress.IPv6Network] = []
    for raw_entry in trusted_proxies.split(","):
        entry = raw_entry.strip()
        if not entry:
            continue

        try:
            networks.append(ipaddress.ip_network(entry, strict=False))
        except ValueError:
            continue

    return tuple(networks)


def _parse_ip(value: str | None) -> str | None:
    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    try:
        return str(ipaddress.ip_address(candidate))
    except ValueError:
        return None


def is_trusted_proxy(*, proxy_ip: str | None, trusted_proxies: str) -> bool:
    if proxy_ip is None:
        return False

    networks = _parse_trusted_networks(trusted_proxies)
    if not networks:
        return False

    parsed_ip = ipaddress.ip_address(proxy_ip)
    return any(parsed_ip in network for network in networks)


def extract_client_ip(request: Request, *, trusted_proxies: str = "") -> str:
    """Forwarding headers are honoured only when the peer is a trusted proxy."""
    client_host = _parse_ip(request.client.host if request.client is not None else None)
    if is_trusted_proxy(proxy_ip=client_host, trusted_proxies=trusted_proxies):
        for header_name in ("CF-Connecting-IP", "X-Real-IP"):
            candidate = _parse_ip(request.headers.get(header_name))
            if candidate is not None:
                return candidate

        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            candidate = _parse_ip(forwarded_for.split(",", maxsplit=1)[0])
            if candidate is not None:
                return candidate

    return client_host or UNKNOWN_CLIENT_IP


def extract_user_agent(request: Request) -> str | None:
    user_agent = request.headers.get("User-Agent")
    if user_agent is None:
        return None
    return user_agent.strip() or None
