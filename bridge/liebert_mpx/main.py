# Liebert MPX Bridge
# Created by Matthew Valancy, Valpatel Software LLC
# Copyright 2026 GPL-3.0 License
# https://github.com/mvalancy/CyberPower-PDU

"""Command line front-end for a Liebert MPX rack PDU.

Read commands print JSON; write commands post the form and report the
target. Connection settings come from MPX_* environment variables and
can be overridden with --host/--username/--password/--timeout.
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys

from .commands import BranchCmd, PDUCmd, ReceptacleCmd
from .config import Config, ConfigError
from .errors import MPXError
from .pdu_model import Location, as_dict
from .web_client import MPXClient

logger = logging.getLogger("mpx_bridge")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mpx-bridge",
        description="Read and control a Liebert MPX rack PDU over its web interface",
    )
    parser.add_argument("--host", help="PDU address (default: $MPX_HOST)")
    parser.add_argument("--username", help="Web interface user (default: $MPX_USERNAME)")
    parser.add_argument("--password", help="Web interface password (default: $MPX_PASSWORD)")
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("events", help="List active alarms")
    sub.add_parser("receptacles", help="List all receptacles")

    p = sub.add_parser("pdu", help="Show PDU info")
    p.add_argument("pdu", type=int)

    p = sub.add_parser("branch", help="Show branch info")
    p.add_argument("pdu", type=int)
    p.add_argument("branch", type=int)

    p = sub.add_parser("receptacle", help="Show receptacle info")
    p.add_argument("pdu", type=int)
    p.add_argument("branch", type=int)
    p.add_argument("receptacle", type=int)

    p = sub.add_parser("pdu-cmd", help="Send a PDU command")
    p.add_argument("pdu", type=int)
    p.add_argument("action", choices=[c.value for c in PDUCmd])

    p = sub.add_parser("branch-cmd", help="Send a branch command")
    p.add_argument("pdu", type=int)
    p.add_argument("branch", type=int)
    p.add_argument("action", choices=[c.value for c in BranchCmd])

    p = sub.add_parser("receptacle-cmd", help="Send a receptacle command")
    p.add_argument("pdu", type=int)
    p.add_argument("branch", type=int)
    p.add_argument("receptacle", type=int)
    p.add_argument("action", choices=[c.value for c in ReceptacleCmd])

    p = sub.add_parser(
        "set-label",
        help="Rename a PDU (B=R=0), branch (R=0) or receptacle",
    )
    p.add_argument("pdu", type=int)
    p.add_argument("branch", type=int)
    p.add_argument("receptacle", type=int)
    p.add_argument("label")

    return parser


async def _set_label(client: MPXClient, location: Location, label: str):
    """Read the current settings, replace the label and write them back."""
    pdu, branch, receptacle = location.pdu, location.branch, location.receptacle
    if branch == 0 and receptacle == 0:
        info = await client.get_info_pdu(pdu)
        await client.set_pdu_settings(
            pdu, dataclasses.replace(info.settings, label=label))
    elif receptacle == 0:
        info = await client.get_info_branch(pdu, branch)
        await client.set_branch_settings(
            pdu, branch, dataclasses.replace(info.settings, label=label))
    else:
        info = await client.get_info_receptacle(pdu, branch, receptacle)
        await client.set_receptacle_settings(
            pdu, branch, receptacle,
            dataclasses.replace(info.settings, label=label))
    logger.info("Label of %s changed from %r to %r",
                location, info.settings.label, label)


async def run(args: argparse.Namespace, client: MPXClient):
    """Execute one CLI command. Returns a record to print, or None."""
    cmd = args.command

    if cmd == "events":
        return await client.get_events()
    if cmd == "receptacles":
        return await client.get_receptacles()
    if cmd == "pdu":
        return await client.get_info_pdu(args.pdu)
    if cmd == "branch":
        return await client.get_info_branch(args.pdu, args.branch)
    if cmd == "receptacle":
        return await client.get_info_receptacle(
            args.pdu, args.branch, args.receptacle)

    if cmd == "pdu-cmd":
        await client.pdu_command(args.pdu, PDUCmd(args.action))
    elif cmd == "branch-cmd":
        await client.branch_command(args.pdu, args.branch,
                                    BranchCmd(args.action))
    elif cmd == "receptacle-cmd":
        await client.receptacle_command(args.pdu, args.branch,
                                        args.receptacle,
                                        ReceptacleCmd(args.action))
    elif cmd == "set-label":
        await _set_label(
            client, Location(args.pdu, args.branch, args.receptacle),
            args.label)
    else:
        raise ValueError(f"unknown command {cmd!r}")
    return None


async def _main_async(args: argparse.Namespace, config: Config):
    async with MPXClient.from_config(config) as client:
        result = await run(args, client)
    if result is not None:
        print(json.dumps(as_dict(result), indent=2))
    else:
        print(f"{args.command}: ok")


def main(argv: list[str] | None = None):
    args = build_parser().parse_args(argv)

    try:
        config = Config()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.host:
        config.host = args.host
    if args.username:
        config.username = args.username
    if args.password is not None:
        config.password = args.password
    if args.timeout is not None:
        config.http_timeout = args.timeout

    if not config.host:
        print("Configuration error: no PDU host (set MPX_HOST or --host)",
              file=sys.stderr)
        sys.exit(1)

    try:
        asyncio.run(_main_async(args, config))
    except MPXError as e:
        logger.error("%s failed: %s", args.command, e)
        sys.exit(1)


if __name__ == "__main__":
    main()
