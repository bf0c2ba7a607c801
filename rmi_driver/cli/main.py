# rmi_driver/cli/main.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from rmi_driver.core.errors import RmiDriverError

from rmi_driver.cli.args import parse_args
from rmi_driver.cli.commands import (
    configure_logging,
    cmd_handlers,
    cmd_translate,
    cmd_check_response,
)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level, Path(args.log_file) if args.log_file else None)

    try:
        if args.cmd == "handlers":
            return cmd_handlers(config=args.config)
        if args.cmd == "translate":
            return cmd_translate(config=args.config, message=args.message, trace=args.trace)
        if args.cmd == "check-response":
            return cmd_check_response(response=args.response)

        return 2
    except RmiDriverError as e:
        print(f"ERROR: {e.message}")
        if e.hint:
            print(f"Hint: {e.hint}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
