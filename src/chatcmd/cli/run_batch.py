from __future__ import annotations

import argparse
import json
import sys
from collections import Counter
from pathlib import Path
from typing import Iterable, Iterator, Tuple

from chatcmd.cli.options import add_parser_args, build_parser
from chatcmd.common.time import utc_ts_compact
from chatcmd.config import load_settings
from chatcmd.logging_setup import configure_logging
from chatcmd.parser import Parser
from chatcmd.reporting.event_log import EventLog, ParseEvent


def _iter_lines(lines: Iterable[str]) -> Iterator[Tuple[int, str]]:
    for n, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        if not line.strip():
            continue
        yield n, line


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Parse every line of a file (or stdin) and log the outcomes.")
    p.add_argument("--input", default="-", help="Path to a text file, or '-' for stdin")
    p.add_argument("--out-dir", default="", help="Output directory (default runs/<run_id>)")
    add_parser_args(p)
    args = p.parse_args(argv)

    try:
        s = load_settings()
        configure_logging(s.log_level)
        parser = build_parser(args, s)
    except ValueError as e:
        p.error(str(e))

    run_id = utc_ts_compact()
    out_dir = Path(args.out_dir) if args.out_dir else Path("runs") / run_id
    log = EventLog(out_dir)

    total = 0
    by_error: Counter = Counter()
    by_name: Counter = Counter()

    if args.input == "-":
        for line_no, raw in _iter_lines(sys.stdin):
            total += 1
            _record(parser, log, run_id, line_no, raw, by_error, by_name)
    else:
        with Path(args.input).open("r", encoding="utf-8") as f:
            for line_no, raw in _iter_lines(f):
                total += 1
                _record(parser, log, run_id, line_no, raw, by_error, by_name)

    summary = {
        "run_id": run_id,
        "total": total,
        "parsed": total - sum(by_error.values()),
        "failed": sum(by_error.values()),
        "by_error_code": dict(sorted(by_error.items())),
        "by_command": dict(sorted(by_name.items())),
    }
    (out_dir / "summary.json").write_text(json.dumps(summary, indent=2), encoding="utf-8")
    print(json.dumps(summary, indent=2))
    return 0


def _record(parser: Parser, log: EventLog, run_id: str, line_no: int, raw: str, by_error: Counter, by_name: Counter) -> None:
    cmd, error = parser.try_parse(raw)
    if error is not None:
        by_error[error.code] += 1
    else:
        by_name[cmd.name] += 1
    log.log(ParseEvent.from_outcome(run_id=run_id, line_no=line_no, raw=raw, command=cmd, error=error))


if __name__ == "__main__":
    sys.exit(main())
