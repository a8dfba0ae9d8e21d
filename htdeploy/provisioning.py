"""Two-stage hometoucher deployment.

Local stage:
  1. Render the device's service unit from the template
  2. Check the Pi's SSH port is reachable
  3. Connect via SSH as the configured user
  4. Copy binary, service unit, network config and stage script to ~

Remote stage:
  5. Run install_on_pi.sh: install and enable the unit, enable networkd,
     remove getty, create ~/logs, reboot

No retries and no rollback: a failed remote step leaves the Pi as it is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from htdeploy.config import DeployConfig
from htdeploy.ssh import (
    RemoteDisconnected,
    SSHConnection,
    connect_ssh,
    probe_ssh,
)
from htdeploy.template import TemplateError, render_service_file

logger = logging.getLogger(__name__)

REMOTE_BINARY = "hometoucher"
REMOTE_SERVICE = "hometoucher.service"
REMOTE_NETWORK = "local.network"
REMOTE_SCRIPT = "install_on_pi.sh"

REMOTE_STAGE_COMMAND = f"bash {REMOTE_SCRIPT}"


class DeployError(Exception):
    pass


@dataclass
class DeviceTarget:
    ip_address: str
    name: str


@dataclass
class ProvisionStep:
    name: str
    status: str = "pending"  # pending, running, done, failed, skipped
    detail: str = ""


@dataclass
class ProvisionResult:
    success: bool = False
    steps: list[ProvisionStep] = field(default_factory=list)
    error: str = ""


def remote_artifacts(config: DeployConfig) -> list[tuple[Path, str]]:
    """Local path → remote name for the four files copied to the Pi."""
    return [
        (Path(config.binary_path), REMOTE_BINARY),
        (Path(config.rendered_service), REMOTE_SERVICE),
        (Path(config.network_file), REMOTE_NETWORK),
        (Path(config.remote_script), REMOTE_SCRIPT),
    ]


class ProvisioningEngine:
    """Deploys hometoucher to a Pi via SSH."""

    def __init__(self) -> None:
        self._progress_callbacks: list[Callable[[str, ProvisionStep], None]] = []

    def on_progress(self, callback: Callable[[str, ProvisionStep], None]) -> None:
        """Register a callback for provisioning progress updates."""
        self._progress_callbacks.append(callback)

    def render(self, target: DeviceTarget, config: DeployConfig) -> Path:
        """Write the device's service unit to ``config.rendered_service``."""
        return render_service_file(
            config.service_template,
            config.rendered_service,
            manager=config.manager_address,
            name=target.name,
            user=config.user,
        )

    def plan(self, target: DeviceTarget, config: DeployConfig) -> list[str]:
        """Describe what provision() would do, without touching the network."""
        dest = f"{config.user}@{target.ip_address}"
        actions = [
            f"render {config.service_template} -> {config.rendered_service}",
        ]
        for local, remote in remote_artifacts(config):
            actions.append(f"copy {local} -> {dest}:{remote}")
        actions.append(f"run '{REMOTE_STAGE_COMMAND}' on {dest} (reboots the device)")
        return actions

    async def provision(self, target: DeviceTarget, config: DeployConfig) -> ProvisionResult:
        """Run the full deployment sequence."""
        result = ProvisionResult()
        steps = [
            ProvisionStep("render", detail="Rendering service unit"),
            ProvisionStep("probe", detail="Checking SSH reachability"),
            ProvisionStep("ssh_connect", detail="Connecting via SSH"),
            ProvisionStep("upload", detail="Copying artifacts"),
            ProvisionStep("remote_setup", detail="Running remote stage"),
        ]
        result.steps = steps

        ssh: SSHConnection | None = None
        try:
            # Step 1: Render
            self._update_step(target.name, steps[0], "running")
            self.render(target, config)
            self._update_step(target.name, steps[0], "done")

            # Step 2: Probe
            self._update_step(target.name, steps[1], "running")
            if not await probe_ssh(target.ip_address, config.ssh_port, config.connect_timeout):
                raise DeployError(
                    f"SSH port {config.ssh_port} on {target.ip_address} is not reachable"
                )
            self._update_step(target.name, steps[1], "done")

            # Step 3: SSH connect
            self._update_step(target.name, steps[2], "running")
            ssh = await connect_ssh(
                target.ip_address,
                username=config.user,
                password=config.ssh_password or None,
                key_path=config.ssh_key_path or None,
                port=config.ssh_port,
                timeout=config.connect_timeout,
            )
            self._update_step(target.name, steps[2], "done")

            # Step 4: Upload
            self._update_step(target.name, steps[3], "running")
            await self._upload(ssh, config)
            self._update_step(target.name, steps[3], "done")

            # Step 5: Remote stage
            self._update_step(target.name, steps[4], "running")
            await self._run_remote_stage(ssh, target)
            self._update_step(target.name, steps[4], "done")

            result.success = True

        except Exception as e:
            result.error = str(e) or type(e).__name__
            if isinstance(e, (TemplateError, DeployError)):
                logger.error(
                    "Deployment failed for %s (%s): %s",
                    target.name, target.ip_address, result.error,
                )
            else:
                logger.exception("Deployment failed for %s (%s)", target.name, target.ip_address)
            for step in steps:
                if step.status == "running":
                    self._update_step(target.name, step, "failed", result.error)
                elif step.status == "pending":
                    step.status = "skipped"
        finally:
            if ssh:
                await ssh.close()

        return result

    # ── Deployment steps ───────────────────────────────────────────

    async def _upload(self, ssh: SSHConnection, config: DeployConfig) -> None:
        artifacts = remote_artifacts(config)
        missing = [str(local) for local, _ in artifacts if not local.is_file()]
        if missing:
            raise DeployError(f"Missing local artifacts: {', '.join(missing)}")

        for local, remote in artifacts:
            logger.info("Copying %s -> %s", local, remote)
            await ssh.put(local, remote)

    async def _run_remote_stage(self, ssh: SSHConnection, target: DeviceTarget) -> None:
        try:
            res = await ssh.run(REMOTE_STAGE_COMMAND)
        except RemoteDisconnected:
            logger.info("%s dropped the connection while rebooting", target.ip_address)
            return
        if res.returncode != 0:
            raise DeployError(
                f"Remote stage exited with status {res.returncode}: {res.stderr.strip()}"
            )

    def _update_step(
        self,
        device_name: str,
        step: ProvisionStep,
        status: str,
        detail: str = "",
    ) -> None:
        """Update step status and notify callbacks."""
        step.status = status
        if detail:
            step.detail = detail
        for cb in self._progress_callbacks:
            try:
                cb(device_name, step)
            except Exception:
                logger.exception("Error in provision progress callback")
