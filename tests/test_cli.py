import io
import json
from pathlib import Path

import pytest

from chatcmd.cli import run_batch, run_parse


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)


def test_parse_prints_command(capsys):
    code = run_parse.main(['!foo arg1 "long arg 2" -opt -key:val '])
    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert out["ok"] is True
    assert out["command"]["name"] == "foo"
    assert out["command"]["arguments"] == ["arg1", "long arg 2"]
    assert out["command"]["options"] == ["opt"]
    assert out["command"]["parameters"] == {"key": "val"}


def test_parse_error_exit_code(capsys):
    code = run_parse.main(["just a normal sentence"])
    out = json.loads(capsys.readouterr().out)
    assert code == 1
    assert out["ok"] is False
    assert (out["error_code"], out["position"], out["char"]) == ("E_PREFIX", 0, "j")


def test_parse_flags_override(capsys):
    code = run_parse.main(["/roll +loud", "--prefix", "/", "--option-prefix", "+", "--flush-trailing"])
    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert out["command"]["options"] == ["loud"]


def test_parse_bad_prefix_flag_exits(capsys):
    with pytest.raises(SystemExit) as ei:
        run_parse.main(["!x", "--prefix", "ab"])
    assert ei.value.code == 2


def test_parse_uses_profile(tmp_path: Path, capsys):
    prof = tmp_path / "p.yaml"
    prof.write_text('profile: {name: p}\nparser: {prefix: "?", option_prefix: "-", flush_trailing: true}\n', encoding="utf-8")
    code = run_parse.main(["?x -f", "--profile", str(prof)])
    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert out["command"]["options"] == ["f"]


def test_batch_writes_events_and_summary(tmp_path: Path, capsys):
    src = tmp_path / "lines.txt"
    src.write_text(
        "\n".join(
            [
                "!ping",
                "hello world",
                "",
                "! oops",
                '!echo "a b" -loud ',
                "!ping again ",
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    out_dir = tmp_path / "out"
    code = run_batch.main(["--input", str(src), "--out-dir", str(out_dir)])
    assert code == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary["total"] == 5
    assert summary["parsed"] == 3
    assert summary["failed"] == 2
    assert summary["by_error_code"] == {"E_NAME": 1, "E_PREFIX": 1}
    assert summary["by_command"] == {"echo": 1, "ping": 2}

    assert json.loads((out_dir / "summary.json").read_text(encoding="utf-8")) == summary
    lines = (out_dir / "events.jsonl").read_text(encoding="utf-8").splitlines()
    assert [json.loads(l)["line_no"] for l in lines] == [1, 2, 4, 5, 6]


def test_batch_reads_stdin(tmp_path: Path, monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("!a x y\n!b -f \n"))
    code = run_batch.main(["--out-dir", str(tmp_path / "o"), "--flush-trailing"])
    summary = json.loads(capsys.readouterr().out)
    assert code == 0
    assert summary["by_command"] == {"a": 1, "b": 1}
    rows = [json.loads(l) for l in (tmp_path / "o" / "events.jsonl").read_text(encoding="utf-8").splitlines()]
    assert rows[0]["data"]["arguments"] == ["x", "y"]


def test_profile_replaces_env_parser_settings(tmp_path: Path, monkeypatch, capsys):
    prof = tmp_path / "p.yaml"
    prof.write_text('profile: {name: p}\nparser: {prefix: "!", option_prefix: "-"}\n', encoding="utf-8")
    monkeypatch.setenv("CHATCMD_PREFIX", "/")

    assert run_parse.main(["/x a ", "--profile", str(prof)]) == 1
    assert json.loads(capsys.readouterr().out)["error_code"] == "E_PREFIX"

    assert run_parse.main(["!x a ", "--profile", str(prof)]) == 0
    assert json.loads(capsys.readouterr().out)["command"]["arguments"] == ["a"]

    # explicit flags still win over the profile
    assert run_parse.main(["?x a ", "--profile", str(prof), "--prefix", "?"]) == 0
    capsys.readouterr()


def test_env_settings_used_without_profile(monkeypatch, capsys):
    monkeypatch.setenv("CHATCMD_PREFIX", "/")
    assert run_parse.main(["/x a "]) == 0
    assert json.loads(capsys.readouterr().out)["command"]["name"] == "x"
