import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from artifactcheck.cli.main import main

ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture(autouse=True)
def _no_options_file(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


def _dirs(make_tree, tmp_path, prev, curr):
    make_tree(tmp_path / "prev", prev)
    make_tree(tmp_path / "curr", curr)
    return str(tmp_path / "prev"), str(tmp_path / "curr")


def test_identical_directories_exit_zero(make_tree, tmp_path, capsys):
    a, b = _dirs(make_tree, tmp_path, {"x.dll": b"1", "s/y.dll": b"2"}, {"x.dll": b"1", "s/y.dll": b"2"})
    assert main(["compare", a, b]) == 0
    out = capsys.readouterr().out
    assert "Artifacts are identical." in out


def test_changed_content_exit_one_with_hash_diff_line(make_tree, tmp_path, capsys):
    a, b = _dirs(make_tree, tmp_path, {"x.dll": b"1"}, {"x.dll": b"2"})
    assert main(["compare", a, b]) == 1
    out = capsys.readouterr().out
    assert "Hash diff:" in out
    assert "Artifacts differ: 1 discrepancies." in out


def test_json_output_owns_stdout(make_tree, tmp_path, capsys):
    a, b = _dirs(make_tree, tmp_path, {"a.txt": "a", "b.txt": "b"}, {"b.txt": "b", "c.txt": "c"})
    assert main(["compare", a, b, "--json", "--pairing", "keyed"]) == 1
    captured = capsys.readouterr()
    doc = json.loads(captured.out)
    assert doc["matches"] is False
    assert [d["kind"] for d in doc["diagnostics"]] == ["missing", "added"]
    assert "Missing file" in captured.err


def test_table_output(make_tree, tmp_path, capsys):
    a, b = _dirs(make_tree, tmp_path, {"a.txt": "a"}, {"a.txt": "a"})
    assert main(["compare", a, b, "--table", "--quiet"]) == 0
    header, sep, row = capsys.readouterr().out.splitlines()
    assert header.split() == ["kind", "previous", "current", "detail"]
    assert set(sep) == {"-", " "}
    assert row.split() == ["-", "-", "-", "identical"]


def test_stop_early_flag_reports_one_discrepancy(make_tree, tmp_path, capsys):
    a, b = _dirs(make_tree, tmp_path, {"a": "1", "b": "2"}, {"a": "x", "b": "y"})
    assert main(["compare", a, b, "--json", "--stop-early"]) == 1
    assert len(json.loads(capsys.readouterr().out)["diagnostics"]) == 1
    assert main(["compare", a, b, "--json"]) == 1
    assert len(json.loads(capsys.readouterr().out)["diagnostics"]) == 2


def test_options_file_knobs_apply(make_tree, tmp_path, capsys):
    a, b = _dirs(make_tree, tmp_path, {"a": "1", "b": "2"}, {"a": "x", "b": "y"})
    cfg = tmp_path / "opts.yaml"
    cfg.write_text("verbose: false\nalgorithm: sha256\n", encoding="utf-8")
    assert main(["compare", a, b, "--json", "-c", str(cfg)]) == 1
    diags = json.loads(capsys.readouterr().out)["diagnostics"]
    assert len(diags) == 1
    assert len(diags[0]["previous_digest"]) == 64


def test_missing_explicit_options_file_fails(make_tree, tmp_path, capsys):
    a, b = _dirs(make_tree, tmp_path, {"a": "1"}, {"a": "1"})
    assert main(["compare", a, b, "-c", str(tmp_path / "absent.yaml")]) == 1
    assert "ConfigError: options file not found" in capsys.readouterr().out


def test_not_a_directory_is_a_cli_error(tmp_path, capsys):
    (tmp_path / "prev").mkdir()
    assert main(["compare", str(tmp_path / "prev"), str(tmp_path / "nope")]) == 1
    assert "CLIError: not a directory" in capsys.readouterr().out


def test_unreadable_artifact_fails_with_typed_error(make_tree, tmp_path, capsys, monkeypatch):
    a, b = _dirs(make_tree, tmp_path, {"a": "1"}, {"a": "1"})
    import artifactcheck.engine.compare as mod
    from artifactcheck.errors import ArtifactIOError

    def deny(path, algorithm="sha1"):
        raise ArtifactIOError(path, "Permission denied")

    monkeypatch.setattr(mod, "file_digest", deny)
    assert main(["compare", a, b]) == 1
    assert "ArtifactIOError: cannot read artifact" in capsys.readouterr().out


def test_usage_error_exits_two(capsys):
    with pytest.raises(SystemExit) as ei:
        main(["compare", "only-one"])
    assert ei.value.code == 2


def test_module_entry_point_exit_codes(make_tree, tmp_path):
    a, b = _dirs(make_tree, tmp_path, {"x": "1"}, {"x": "2"})
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join([str(ROOT), env.get("PYTHONPATH", "")])
    env["XDG_CONFIG_HOME"] = str(tmp_path / "xdg")
    p = subprocess.run(
        [sys.executable, "-m", "artifactcheck", "compare", a, b],
        cwd=tmp_path,
        env=env,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    assert p.returncode == 1, p.stderr
    assert "Hash diff:" in p.stdout

    p = subprocess.run(
        [sys.executable, "-m", "artifactcheck", "--version"],
        cwd=tmp_path,
        env=env,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    assert p.returncode == 0
    assert p.stdout.startswith("artifactcheck ")
