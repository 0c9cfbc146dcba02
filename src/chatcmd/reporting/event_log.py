from __future__ import annotations

import csv
import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from chatcmd.command import Command
from chatcmd.common.time import utc_now_iso
from chatcmd.errors import ParseError

LOG_SCHEMA_VERSION = 1

# Stable CSV column order (append-only evolution: only add new columns at the end)
CSV_COLUMNS: List[str] = [
    "schema_version",
    "timestamp",
    "run_id",
    "line_no",
    "raw",
    "passed",
    "error_code",
    "position",
    "char",
    "name",
    "n_arguments",
    "n_options",
    "n_parameters",
    "message",
]


@dataclass(frozen=True)
class ParseEvent:
    # Meta
    schema_version: int
    timestamp: str
    run_id: str
    line_no: int
    raw: str

    # Outcome
    passed: bool
    error_code: Optional[str]
    position: Optional[int]
    char: Optional[str]

    # Summary of the parsed command
    name: Optional[str]
    n_arguments: int
    n_options: int
    n_parameters: int

    message: str

    # Full command for replay/debug (kept in JSONL only)
    data: Dict[str, Any]

    @staticmethod
    def from_outcome(
        *,
        run_id: str,
        line_no: int,
        raw: str,
        command: Optional[Command],
        error: Optional[ParseError],
    ) -> "ParseEvent":
        if error is not None:
            return ParseEvent(
                schema_version=LOG_SCHEMA_VERSION,
                timestamp=utc_now_iso(),
                run_id=run_id,
                line_no=line_no,
                raw=raw,
                passed=False,
                error_code=error.code,
                position=error.position,
                char=error.char,
                name=None,
                n_arguments=0,
                n_options=0,
                n_parameters=0,
                message=str(error),
                data={},
            )
        if command is None:
            raise ValueError("either command or error is required")
        return ParseEvent(
            schema_version=LOG_SCHEMA_VERSION,
            timestamp=utc_now_iso(),
            run_id=run_id,
            line_no=line_no,
            raw=raw,
            passed=True,
            error_code=None,
            position=None,
            char=None,
            name=command.name,
            n_arguments=len(command.arguments),
            n_options=len(command.options),
            n_parameters=len(command.parameters),
            message="",
            data=command.to_dict(),
        )

    def to_jsonl_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_csv_row(self) -> Dict[str, Any]:
        d = asdict(self)
        d.pop("data", None)  # CSV is flat
        return d


class EventLog:
    """Append-only log: one JSONL row per parsed line + mirrored CSV row."""

    def __init__(self, out_dir: Path) -> None:
        self.out_dir = out_dir
        self.out_dir.mkdir(parents=True, exist_ok=True)
        self.jsonl_path = self.out_dir / "events.jsonl"
        self.csv_path = self.out_dir / "events.csv"

        # Initialize CSV header once
        if not self.csv_path.exists():
            with self.csv_path.open("w", newline="", encoding="utf-8") as f:
                writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
                writer.writeheader()

    def log(self, ev: ParseEvent) -> None:
        with self.jsonl_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(ev.to_jsonl_dict(), ensure_ascii=False) + "\n")

        with self.csv_path.open("a", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
            row = ev.to_csv_row()
            writer.writerow({k: row.get(k, "") for k in CSV_COLUMNS})


def read_events_jsonl(path: Path) -> List[Dict[str, Any]]:
    """Read events.jsonl back into a list of dicts."""
    rows: List[Dict[str, Any]] = []
    if not path.exists():
        return rows
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            rows.append(json.loads(line))
    return rows
