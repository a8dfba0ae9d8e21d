"""Tests for mDNS domain lookup."""

from __future__ import annotations

import pytest

from htdeploy import locator
from htdeploy.locator import HT_MANAGER_SERVICE


class _FakeInfo:
    def __init__(self, address: str, port: int) -> None:
        self._address = address
        self.port = port

    def parsed_addresses(self):
        return [self._address]


class _FakeZeroconf:
    records = {
        f"Beit Zait House.{HT_MANAGER_SERVICE}": _FakeInfo("10.0.99.100", 60000),
        f"Tel-Aviv Apt.{HT_MANAGER_SERVICE}": _FakeInfo("192.168.1.7", 60001),
        f"Broken.{HT_MANAGER_SERVICE}": None,
    }

    def __init__(self) -> None:
        self.closed = False

    def get_service_info(self, type_, name, timeout=3000):
        return self.records.get(name)

    def close(self) -> None:
        self.closed = True


class _FakeBrowser:
    def __init__(self, zc, type_, listener) -> None:
        for name in zc.records:
            listener.add_service(zc, type_, name)


@pytest.fixture
def fake_zeroconf(monkeypatch):
    monkeypatch.setattr(locator, "Zeroconf", _FakeZeroconf)
    monkeypatch.setattr(locator, "ServiceBrowser", _FakeBrowser)


class TestLocator:
    @pytest.mark.asyncio
    async def test_list_domains(self, fake_zeroconf):
        domains = await locator.list_domains(timeout=0)
        assert domains == {
            "Beit Zait House": "10.0.99.100:60000",
            "Tel-Aviv Apt": "192.168.1.7:60001",
        }

    @pytest.mark.asyncio
    async def test_locate_manager(self, fake_zeroconf):
        assert await locator.locate_manager("Tel-Aviv Apt", timeout=0.1) == "192.168.1.7:60001"

    @pytest.mark.asyncio
    async def test_locate_unknown_domain(self, fake_zeroconf):
        assert await locator.locate_manager("Nowhere", timeout=0.1) is None

    def test_collector_remove(self):
        collector = locator._DomainCollector()
        zc = _FakeZeroconf()
        collector.add_service(zc, HT_MANAGER_SERVICE, f"Tel-Aviv Apt.{HT_MANAGER_SERVICE}")
        collector.remove_service(zc, HT_MANAGER_SERVICE, f"Tel-Aviv Apt.{HT_MANAGER_SERVICE}")
        assert collector.found == {}
