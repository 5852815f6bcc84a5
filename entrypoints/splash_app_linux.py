"""Linux entrypoint for the splash-gated web app.

This entrypoint injects Linux OS interface implementations.
"""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from entrypoints.splash_app_core import run_splash_app
from os_interfaces.base import OSImplementations
from os_interfaces.linux import (
  LinuxConfigStorage,
  LinuxNetworkMonitor,
  env_token_provider,
  linux_cache_dir,
  open_external_url,
)
from splash_gate.config import config
from splash_gate.models import LaunchContext


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
  parser = argparse.ArgumentParser(prog="splash-gate")
  parser.add_argument("--url", help="Deep link to open instead of the home page")
  parser.add_argument(
    "--offline",
    action="store_true",
    help="Behave as if no network were available",
  )
  return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
  args = parse_args(argv)
  os_impl = OSImplementations(
    config_storage_cls=LinuxConfigStorage,
    network_monitor_cls=LinuxNetworkMonitor,
    token_provider_factory=env_token_provider,
    open_external_url=open_external_url,
    cache_dir=linux_cache_dir(config.APP_NAME),
    storage_kwargs={"app_name": config.APP_NAME, "config_name": "state"},
  )
  context = LaunchContext(deep_link=args.url, network_available=not args.offline)
  run_splash_app(os_impl=os_impl, context=context, config=config)


if __name__ == "__main__":
  main()
