import logging
from pathlib import Path

import pytest

from chatcmd.config import Settings, load_settings
from chatcmd import profile_loader
from chatcmd.profile_loader import load_profile, parser_from_profile, parser_from_settings


def _write(tmp_path: Path, text: str, name: str = "profile.yaml") -> Path:
    p = tmp_path / name
    p.write_text(text.lstrip(), encoding="utf-8")
    return p


def test_valid_profile_builds_parser(tmp_path: Path):
    path = _write(
        tmp_path,
        """
profile: {name: bot, version: 2}
parser: {prefix: "/", option_prefix: "+", flush_trailing: true}
commands:
  - {name: roll, usage: "/roll <dice>", description: "Roll dice", min_args: 1, max_args: 1}
""",
    )
    prof = load_profile(path)
    assert prof.profile.name == "bot"
    assert [c.name for c in prof.commands] == ["roll"]

    parser = parser_from_profile(prof)
    assert (parser.prefix, parser.option_prefix, parser.flush_trailing) == ("/", "+", True)
    assert parser.parse("/roll 2d6 +loud").options == frozenset({"loud"})


def test_parser_section_defaults(tmp_path: Path):
    prof = load_profile(_write(tmp_path, "profile: {name: x}\n"))
    assert (prof.parser.prefix, prof.parser.option_prefix, prof.parser.flush_trailing) == ("!", "-", False)
    assert prof.commands == []


def test_quote_option_prefix_rejected(tmp_path: Path):
    path = _write(tmp_path, """profile: {name: x}\nparser: {prefix: "!", option_prefix: '"'}\n""")
    with pytest.raises(ValueError):
        load_profile(path)


def test_multi_char_prefix_rejected(tmp_path: Path):
    path = _write(tmp_path, """profile: {name: x}\nparser: {prefix: "!!"}\n""")
    with pytest.raises(ValueError):
        load_profile(path)


def test_same_prefixes_rejected(tmp_path: Path):
    path = _write(tmp_path, """profile: {name: x}\nparser: {prefix: "-", option_prefix: "-"}\n""")
    with pytest.raises(ValueError):
        load_profile(path)


def test_duplicate_command_names_rejected(tmp_path: Path):
    path = _write(
        tmp_path,
        """
profile: {name: x}
commands:
  - {name: a}
  - {name: a}
""",
    )
    with pytest.raises(ValueError):
        load_profile(path)


def test_bad_arity_and_name_rejected(tmp_path: Path):
    bad_arity = _write(tmp_path, "profile: {name: x}\ncommands: [{name: a, min_args: 2, max_args: 1}]\n", "a.yaml")
    bad_name = _write(tmp_path, "profile: {name: x}\ncommands: [{name: 'a b'}]\n", "b.yaml")
    with pytest.raises(ValueError):
        load_profile(bad_arity)
    with pytest.raises(ValueError):
        load_profile(bad_name)


def test_missing_explicit_path(tmp_path: Path):
    with pytest.raises(ValueError):
        load_profile(tmp_path / "nope.yaml")


def test_env_profile_then_cwd_fallback(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(tmp_path, "profile: {name: local}\n", "chatcmd.yaml")
    env_file = _write(tmp_path, "profile: {name: from_env}\n", "env.yaml")

    assert load_profile().profile.name == "local"

    monkeypatch.setenv("CHATCMD_PROFILE", str(env_file))
    assert load_profile().profile.name == "from_env"


def test_packaged_default_profile(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    prof = load_profile()
    assert prof.profile.name == "default"
    assert {c.name for c in prof.commands} == {"help", "ping", "echo"}


def test_builtin_profile_when_package_data_missing(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    def missing(package):
        raise ModuleNotFoundError(package)

    monkeypatch.setattr(profile_loader.importlib_resources, "files", missing)
    prof = load_profile()
    assert prof.profile.name == "builtin"
    assert prof.commands == []
    assert parser_from_profile(prof).prefix == "!"


def test_space_prefix_warns(caplog):
    caplog.set_level(logging.WARNING, logger="chatcmd")
    s = load_settings()
    parser_from_settings(s)
    assert not caplog.records

    parser = parser_from_settings(Settings(" ", "-", False, "INFO", None))
    assert parser.prefix == " "
    assert any("space" in r.getMessage() for r in caplog.records)
