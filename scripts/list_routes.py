"""
Utility to inventory the dispatcher's route table and persist it for audit docs.

It builds the route configuration, resolves each route's middleware chain
and writes a tab-separated list to docs/route_inventory.txt.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterable, Tuple


ROOT = Path(__file__).resolve().parents[1]

# Ensure required settings exist so imports succeed even outside docker/env files.
os.environ.setdefault("DATABASE_URL", f"sqlite:///{(ROOT / 'backend' / 'hrms.db').as_posix()}")
os.environ.setdefault("SECRET_KEY", "route-listing-placeholder")

# Make backend package importable when running from repo root.
sys.path.append(str(ROOT / "backend"))

from hrms.api.routes import build_routes  # noqa: E402
from hrms.core.db import SessionLocal  # noqa: E402
from hrms.dispatch.dispatcher import assemble_chain  # noqa: E402
from hrms.dispatch.routes import RouteTable, register_routes  # noqa: E402
from hrms.tenancy.sessions import InMemorySessionStore  # noqa: E402


def load_table() -> RouteTable:
    return register_routes(RouteTable(), build_routes(SessionLocal, InMemorySessionStore()))


def iter_routes(table: RouteTable) -> Iterable[Tuple[str, str, str, str]]:
    """Yield (method, path, permission, chain) for every registered route."""
    for route in table:
        chain = ",".join(assemble_chain((), route)) or "-"
        yield (route.method, route.path, route.permission or "-", chain)


def write_routes(out_path: Path, table: RouteTable) -> list[str]:
    """Write route inventory to ``out_path`` and return written lines."""
    lines = ["\t".join(row) for row in iter_routes(table)]
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text("\n".join(lines), encoding="utf-8")
    return lines


def main() -> None:
    out_path = ROOT / "docs" / "route_inventory.txt"
    lines = write_routes(out_path, load_table())
    print(f"Wrote {len(lines)} routes to {out_path}")


if __name__ == "__main__":
    main()
