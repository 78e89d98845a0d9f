# File: src/ganttboard/tools/board.py
# Usage examples:
#   python -m ganttboard.tools.board sql
#   python -m ganttboard.tools.board check
#   python -m ganttboard.tools.board dump --store /tmp/board.db
#   python -m ganttboard.tools.board link https://board.example/app
#
# Notes:
# - Remote target comes from SUPABASE_URL/SUPABASE_KEY (or VITE_*, or .env),
#   else from the config stored by a previous session
# - `check` exits 2 when the remote tables are not provisioned

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Optional

from ..app_context import AppContext
from ..errors import TablesNotProvisionedError
from ..models.mapping import dataset_to_json
from ..services.bootstrap import shareable_link
from ..services.provisioning import PROVISIONING_SQL, check_connection_and_seed
from ..utils.logging_setup import setup_logging


async def _check(ctx: AppContext) -> int:
    if not await ctx.connection.resume():
        print("No remote configuration; local mode.", file=sys.stderr)
        return 1
    try:
        seeded = await check_connection_and_seed(ctx.connection)
    except TablesNotProvisionedError as e:
        print(f"Remote tables missing ({e.table}). Run this in the SQL editor:\n", file=sys.stderr)
        print(PROVISIONING_SQL)
        return 2
    print("seeded" if seeded else "ok")
    return 0


async def _dump(ctx: AppContext) -> int:
    await ctx.connection.resume()
    data = await ctx.data.read_dataset()
    print(json.dumps(dataset_to_json(data), indent=2, ensure_ascii=False))
    return 0


def _link(ctx: AppContext, base: str) -> int:
    config = ctx.connection.current_config()
    if config is None:
        print("No remote configuration to share.", file=sys.stderr)
        return 1
    print(shareable_link(base, config))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="ganttboard-board", description="ganttboard data tools")
    ap.add_argument("--store", help="local store path (default: XDG data dir or GANTTBOARD_STORE)")
    ap.add_argument("--log", action="store_true", help="write logs to the XDG state dir")
    sub = ap.add_subparsers(dest="cmd", required=True)
    sub.add_parser("sql", help="print the remote provisioning SQL")
    sub.add_parser("check", help="probe remote tables and seed an empty database")
    sub.add_parser("dump", help="print the current board as JSON")
    p_link = sub.add_parser("link", help="print a shareable connection link")
    p_link.add_argument("base", help="base URL the link should open")
    args = ap.parse_args(argv)

    if args.cmd == "sql":
        print(PROVISIONING_SQL)
        return 0

    if args.log:
        setup_logging()
    ctx = AppContext.create(db_path=args.store)
    try:
        if args.cmd == "check":
            return asyncio.run(_check(ctx))
        if args.cmd == "dump":
            return asyncio.run(_dump(ctx))
        return _link(ctx, args.base)
    finally:
        ctx.db.close()


if __name__ == "__main__":
    sys.exit(main())
