"""pytest configuration for hometoucher deploy tests."""

import pytest

from htdeploy.config import DeployConfig


# Configure asyncio mode for pytest-asyncio
def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@pytest.fixture
def deploy_config(tmp_path):
    """Config whose local artifacts all live under tmp_path."""
    binary = tmp_path / "hometoucher"
    binary.write_bytes(b"\x7fELF fake binary")
    return DeployConfig(
        binary_path=str(binary),
        rendered_service=str(tmp_path / "hometoucher.service"),
        connect_timeout=0.1,
    )
