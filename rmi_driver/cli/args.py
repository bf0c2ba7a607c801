# rmi_driver/cli/args.py
from __future__ import annotations

import argparse
from typing import Optional

DEFAULT_CONFIG = "config/driver.yml"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rmi-driver")
    parser.add_argument("--log-level", default="WARNING", help="Root log level (DEBUG, INFO, ...).")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file.")

    sub = parser.add_subparsers(dest="cmd", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=DEFAULT_CONFIG, help="Path to driver.yml.")

    sub.add_parser("handlers", parents=[common], help="Dump registered handler criteria.")

    p_translate = sub.add_parser("translate", parents=[common], help="Translate one message to wire text.")
    p_translate.add_argument(
        "--message",
        required=True,
        help="Command message as a JSON/YAML mapping, e.g. '{command_type: PTP, pose: [1, 2]}'.",
    )
    p_translate.add_argument("--trace", default=None, help="Append dispatch events to this JSONL file.")

    p_check = sub.add_parser("check-response", help="Classify a controller response string.")
    p_check.add_argument("response", nargs="?", default="")

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
