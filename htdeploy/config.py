"""Configuration for a hometoucher deployment."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

RESOURCES_DIR = Path(__file__).parent / "resources"

# Environment variable naming a JSON config file
CONFIG_ENV = "HTDEPLOY_CONFIG"


@dataclass
class DeployConfig:
    """Deployment settings — loaded from a JSON file, overridden by CLI flags."""

    manager_address: str = "10.0.99.100:60000"
    user: str = "yuval"

    # Local artifacts
    binary_path: str = "target/arm-unknown-linux-gnueabihf/release/hometoucher"
    service_template: str = str(RESOURCES_DIR / "hometoucher.service.template")
    network_file: str = str(RESOURCES_DIR / "local.network")
    remote_script: str = str(RESOURCES_DIR / "install_on_pi.sh")
    rendered_service: str = "hometoucher.service"  # overwritten on every run

    # SSH
    ssh_port: int = 22
    ssh_key_path: str = ""
    ssh_password: str = ""
    connect_timeout: float = 5.0

    @classmethod
    def load(cls, path: str | Path) -> DeployConfig:
        path = Path(path)
        if path.exists():
            with open(path) as f:
                data = json.load(f)
            known = {k for k in cls.__dataclass_fields__}
            filtered = {k: v for k, v in data.items() if k in known}
            return cls(**filtered)
        logger.warning("Config not found at %s, using defaults", path)
        return cls()

    @classmethod
    def from_env(cls) -> DeployConfig:
        """Load the file named by HTDEPLOY_CONFIG, or use defaults."""
        path = os.environ.get(CONFIG_ENV)
        if path:
            return cls.load(path)
        return cls()

    def save(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(dict(self.__dict__), f, indent=2)
