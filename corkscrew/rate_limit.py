"""Per-client rate limits for the sign-in, sign-up and session callback endpoints.

Clients are keyed by IP. ``X-Forwarded-For`` is only believed for hops added
by proxies in ``Settings.trusted_proxy_cidrs``; the client is the nearest hop
that is not one of them.
"""

import ipaddress
from functools import lru_cache

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import get_settings
from .logging_config import get_logger

logger = get_logger("corkscrew.rate_limit")

Network = ipaddress.IPv4Network | ipaddress.IPv6Network


@lru_cache
def parse_networks(cidrs: str) -> tuple[Network, ...]:
    """Parse a comma separated CIDR list. Bad entries are logged and skipped."""
    networks = []
    for cidr in filter(None, (part.strip() for part in cidrs.split(","))):
        try:
            networks.append(ipaddress.ip_network(cidr, strict=False))
        except ValueError:
            logger.warning(f"Ignoring invalid trusted proxy CIDR: {cidr}")
    return tuple(networks)


def is_trusted_proxy(ip: str, networks: tuple[Network, ...]) -> bool:
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return False
    return any(addr in network for network in networks)


def resolve_client_ip(peer: str, forwarded_for: str | None, networks: tuple[Network, ...]) -> str:
    """Walk the proxy chain back from ``peer`` to the first untrusted address."""
    hops = [hop.strip() for hop in (forwarded_for or "").split(",") if hop.strip()]
    client = peer
    while is_trusted_proxy(client, networks) and hops:
        client = hops.pop()
    return client


def client_key(request) -> str:
    """slowapi key function: the caller's IP as seen through trusted proxies."""
    networks = parse_networks(get_settings().trusted_proxy_cidrs)
    return resolve_client_ip(
        get_remote_address(request), request.headers.get("x-forwarded-for"), networks
    )


def sign_in_limit() -> str:
    return get_settings().sign_in_rate_limit


def sign_up_limit() -> str:
    return get_settings().sign_up_rate_limit


def callback_limit() -> str:
    return get_settings().callback_rate_limit


limiter = Limiter(key_func=client_key)
