"""Host name helpers for certificate requests."""

from __future__ import annotations

import socket
from collections.abc import Iterable

from devcert.logging_config import get_logger

logger = get_logger(__name__)


def get_local_ipv4_addresses() -> list[str]:
    """IPv4 addresses of this machine, loopback first."""
    addresses = ["127.0.0.1"]
    try:
        infos = socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET)
    except OSError as e:
        logger.debug("Could not resolve local addresses", error=str(e))
        return addresses

    for info in infos:
        address = info[4][0]
        if address not in addresses:
            addresses.append(address)
    return addresses


def get_default_hosts() -> list[str]:
    return ["localhost", *get_local_ipv4_addresses()]


def merge_hosts(*groups: Iterable[str]) -> list[str]:
    """Concatenate host groups, dropping blanks and duplicates, keeping order."""
    merged: list[str] = []
    for group in groups:
        for host in group:
            host = host.strip()
            if host and host not in merged:
                merged.append(host)
    return merged
