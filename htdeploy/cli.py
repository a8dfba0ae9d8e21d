"""Command line entry points.

Usage::

    install-on-pi <ip> <name> [--manager ADDR] [--user USER] [--binary PATH]
                  [--config PATH] [--dry-run] [--debug]
    ht-domains [domain] [--timeout SECONDS]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from htdeploy.config import CONFIG_ENV, DeployConfig
from htdeploy.provisioning import DeviceTarget, ProvisioningEngine, ProvisionStep
from htdeploy.template import TemplateError

logger = logging.getLogger(__name__)


class _UsageParser(argparse.ArgumentParser):
    """Argument errors print the usage line and exit with status 1."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _print(msg: str = "") -> None:
    print(msg, flush=True)


def _setup_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _print_step(device_name: str, step: ProvisionStep) -> None:
    if step.status == "running":
        _print(f"[{device_name}] {step.detail}...")
    elif step.status == "failed":
        _print(f"[{device_name}] ✗ {step.name}: {step.detail}")


def build_parser() -> argparse.ArgumentParser:
    parser = _UsageParser(
        prog="install-on-pi",
        description="Deploy hometoucher to a Raspberry Pi and reboot it",
        epilog="Put a device name that starts with '-' after '--': "
               "install-on-pi 10.0.99.21 -- -kiosk",
    )
    parser.add_argument("ip", help="Pi IP address")
    parser.add_argument(
        "name",
        help="Device name passed to hometoucher (after '--' if it starts with '-')",
    )
    parser.add_argument(
        "--manager",
        default=None,
        help="Manager address:port (overrides config)",
    )
    parser.add_argument(
        "--user",
        default=None,
        help="Remote account (overrides config)",
    )
    parser.add_argument(
        "--binary",
        default=None,
        help="Path to the pre-built hometoucher binary (overrides config)",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help=f"Path to config.json (default: ${CONFIG_ENV} or built-in defaults)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Render the service unit and print the plan without connecting",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    _setup_logging(args.debug)

    config = DeployConfig.load(args.config) if args.config else DeployConfig.from_env()
    if args.manager:
        config.manager_address = args.manager
    if args.user:
        config.user = args.user
    if args.binary:
        config.binary_path = args.binary

    target = DeviceTarget(ip_address=args.ip, name=args.name)
    engine = ProvisioningEngine()

    if args.dry_run:
        try:
            path = engine.render(target, config)
        except TemplateError as e:
            _print(f"✗ {e}")
            sys.exit(1)
        _print(f"Rendered {path}")
        for action in engine.plan(target, config):
            _print(f"  {action}")
        return

    engine.on_progress(_print_step)
    result = asyncio.run(engine.provision(target, config))
    if not result.success:
        _print(f"✗ Deployment of {target.name} to {target.ip_address} failed: {result.error}")
        sys.exit(1)
    _print(f"✓ {target.name} deployed to {target.ip_address}; the device is rebooting")


def domains_main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="ht-domains",
        description="List Hometoucher domains (_HtVncConf._udp.local)",
    )
    parser.add_argument(
        "domain",
        nargs="?",
        default=None,
        help="Resolve a single domain (e.g. 'Beit Zait House')",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Seconds to wait for mDNS answers",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    from htdeploy.locator import list_domains, locate_manager

    if args.domain:
        address = asyncio.run(locate_manager(args.domain, args.timeout))
        if address is None:
            _print(f"Could not locate domain '{args.domain}'")
            sys.exit(1)
        _print(f"{args.domain} -> {address}")
        return

    domains = asyncio.run(list_domains(args.timeout))
    _print(f"Found {len(domains)} domains:")
    for name, address in sorted(domains.items()):
        _print(f"{name} -> {address}")
