"""Entry point for vmware collector module."""

from __future__ import annotations

from apps.vmware_collector.main import main

if __name__ == "__main__":
    raise SystemExit(main())
