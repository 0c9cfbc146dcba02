from __future__ import annotations

import argparse


def main() -> None:
    p = argparse.ArgumentParser(prog="chatcmd", description="Chat command line parser")
    sub = p.add_subparsers(dest="cmd", required=True)

    # parse
    p_parse = sub.add_parser("parse", help="Parse one line and print it as JSON", add_help=False)
    p_parse.set_defaults(_entry="chatcmd.cli.run_parse")

    # batch
    p_batch = sub.add_parser("batch", help="Parse a file of lines into an event log", add_help=False)
    p_batch.set_defaults(_entry="chatcmd.cli.run_batch")

    args, rest = p.parse_known_args()

    if args._entry == "chatcmd.cli.run_parse":
        from chatcmd.cli.run_parse import main as _m

        raise SystemExit(_m(rest))

    if args._entry == "chatcmd.cli.run_batch":
        from chatcmd.cli.run_batch import main as _m

        raise SystemExit(_m(rest))

    raise SystemExit(2)
