from __future__ import annotations

import argparse
import json
import sys

from chatcmd.cli.options import add_parser_args, build_parser
from chatcmd.config import load_settings
from chatcmd.logging_setup import configure_logging


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Parse a single chat command line.")
    p.add_argument("line", help="Raw command line, e.g. '!foo bar -opt '")
    add_parser_args(p)
    args = p.parse_args(argv)

    try:
        s = load_settings()
        configure_logging(s.log_level)
        parser = build_parser(args, s)
    except ValueError as e:
        p.error(str(e))

    cmd, error = parser.try_parse(args.line)
    if error is not None:
        print(json.dumps({"ok": False, **error.to_dict()}, ensure_ascii=False))
        return 1
    print(json.dumps({"ok": True, "command": cmd.to_dict()}, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
