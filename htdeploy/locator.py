"""Hometoucher domain lookup over mDNS.

Each servers manager announces itself as ``<domain>._HtVncConf._udp.local.``;
the record's address and port are what a device queries for its server.
"""

from __future__ import annotations

import asyncio
import logging

from zeroconf import ServiceBrowser, Zeroconf

logger = logging.getLogger(__name__)

HT_MANAGER_SERVICE = "_HtVncConf._udp.local."
RESOLVE_TIMEOUT = 5.0


def _address(info) -> str | None:
    if info and info.parsed_addresses() and info.port:
        return f"{info.parsed_addresses()[0]}:{info.port}"
    return None


class _DomainCollector:
    """Zeroconf service listener collecting domain → address."""

    def __init__(self) -> None:
        self.found: dict[str, str] = {}

    def add_service(self, zc, type_: str, name: str) -> None:
        address = _address(zc.get_service_info(type_, name))
        if address is None:
            logger.debug("No address for %s", name)
            return
        self.found[name.replace(f".{HT_MANAGER_SERVICE}", "")] = address

    def remove_service(self, zc, type_: str, name: str) -> None:
        self.found.pop(name.replace(f".{HT_MANAGER_SERVICE}", ""), None)

    def update_service(self, zc, type_: str, name: str) -> None:
        self.add_service(zc, type_, name)


async def list_domains(timeout: float = RESOLVE_TIMEOUT) -> dict[str, str]:
    """Browse for servers managers for ``timeout`` seconds."""
    collector = _DomainCollector()
    zc = Zeroconf()
    try:
        ServiceBrowser(zc, HT_MANAGER_SERVICE, collector)
        await asyncio.sleep(timeout)
    finally:
        zc.close()
    return dict(collector.found)


async def locate_manager(domain: str, timeout: float = RESOLVE_TIMEOUT) -> str | None:
    """Resolve one domain's servers manager to ``address:port``."""
    zc = Zeroconf()
    try:
        loop = asyncio.get_running_loop()
        info = await loop.run_in_executor(
            None,
            lambda: zc.get_service_info(
                HT_MANAGER_SERVICE,
                f"{domain}.{HT_MANAGER_SERVICE}",
                int(timeout * 1000),
            ),
        )
    finally:
        zc.close()
    return _address(info)
