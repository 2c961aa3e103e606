#!/usr/bin/env python3
"""
Invoke an action tool from the command line.

Usage:
    python main.py --list
    python main.py --schema wordpress
    python main.py openweather '{"action": "help"}'
    python main.py wordpress            # then type one JSON request per line
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from action_tools.registry import build_provider
from action_tools.tools import envelope
from action_tools.tools.exceptions import ToolCredentialsMissingError, ToolNotFoundError
from utils.cli import print_envelope, read_request
from utils.load_config import config_path, load_config
from utils.logger import get_logger, init_logger

logger = get_logger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Invoke agent action tools from the command line.")
    parser.add_argument("tool", nargs="?", help="Tool id, e.g. wordpress, flux, openweather, portdox.")
    parser.add_argument("request", nargs="?", help="Action request as a JSON object.")
    parser.add_argument("--config", "-c", type=Path, default=None, help="Path to config.toml.")
    parser.add_argument("--list", action="store_true", help="List the configured tools.")
    parser.add_argument("--schema", metavar="TOOL", help="Print the parameter JSON Schema of a tool.")
    args = parser.parse_args(argv)

    load_dotenv()
    path = args.config or config_path()
    init_logger(path if path.is_file() else None)
    config = load_config(path)

    try:
        if args.list:
            for tool in build_provider(config):
                print(tool.get_summary())
            return 0

        if args.schema:
            tool = build_provider(config, [args.schema]).get(args.schema)
            print(json.dumps(tool.get_parameters(), indent=2))
            return 0

        if not args.tool:
            parser.print_help()
            return 2

        tool = build_provider(config, [args.tool]).get(args.tool)
    except (ToolCredentialsMissingError, ToolNotFoundError) as exc:
        print(f"ERROR: {exc.message}", file=sys.stderr)
        return 3

    if args.request is not None:
        result = tool.invoke(args.request)
        print_envelope(result)
        return 1 if envelope.is_failure(result) else 0

    logger.info("tool_ready", tool_id=tool.id, actions=tool.actions)
    while True:
        try:
            request = read_request()
            if not request:
                continue
            print_envelope(tool.invoke(request))
        except KeyboardInterrupt:
            logger.info("bye")
            return 0


if __name__ == "__main__":
    sys.exit(main())
