import json

from typer.testing import CliRunner

from point_expander.cli import app

runner = CliRunner()


def test_cli_check_passes():
    r = runner.invoke(app, ["check", "examples/calls.yaml"])
    assert r.exit_code == 0, r.output
    assert "calls[0]: pair i32 [1, 1]" in r.stdout
    assert "calls[3]: typed-list f32 [1.0, 1.0, 1.0, 1.0, 2.0]" in r.stdout
    assert "OK: 9 calls expanded" in r.stdout


def test_cli_check_json_file():
    r = runner.invoke(app, ["check", "examples/calls.json", "--format", "json"])
    assert r.exit_code == 0, r.output
    payload = json.loads(r.stdout)
    assert payload["ok"] is True
    assert payload["results"][1]["values"] == [255, 0, 3]


def test_cli_check_reports_failures():
    r = runner.invoke(app, ["check", "examples/calls-failing.yaml", "--format", "json"])
    assert r.exit_code == 2
    payload = json.loads(r.stdout)
    assert payload["ok"] is False
    by_path = {e["path"]: e["code"] for e in payload["errors"]}
    assert by_path == {
        "calls[1]": "E_SHAPE_MISMATCH",
        "calls[2].args[0]": "E_ARG_TYPE",
        "calls[3]": "E_UNKNOWN_TYPE",
        "calls[4]": "E_EXPECT_MISMATCH",
    }
    assert payload["results"][0]["ok"] is True


def test_cli_check_text_failures_go_to_stderr():
    r = runner.invoke(app, ["check", "examples/calls-failing.yaml"])
    assert r.exit_code == 2
    assert "examples/calls-failing.yaml:calls[1]: E_SHAPE_MISMATCH" in r.output


def test_cli_check_missing_file():
    r = runner.invoke(app, ["check", "examples/nope.yaml"])
    assert r.exit_code == 1
    assert "E_FILE_NOT_FOUND" in r.output


def test_cli_check_points_at_bad_argument(tmp_path):
    p = tmp_path / "calls.yaml"
    p.write_text('calls:\n  - "1, 1"\n  - "1, , 2"\n', encoding="utf-8")
    r = runner.invoke(app, ["check", str(p), "--format", "json"])
    assert r.exit_code == 2
    payload = json.loads(r.stdout)
    assert [e["path"] for e in payload["errors"]] == ["calls[1].args[1]"]
    assert payload["errors"][0]["code"] == "E_CALL_PARSE"


def test_cli_check_json_encodes_infinity_as_string(tmp_path):
    p = tmp_path / "calls.yaml"
    p.write_text("calls:\n  - list: [1, 1.0e+300]\n    type: f32\n", encoding="utf-8")
    r = runner.invoke(app, ["check", str(p), "--format", "json"])
    assert r.exit_code == 0, r.output
    assert "Infinity" not in r.stdout
    payload = json.loads(r.stdout)
    assert payload["results"][0]["values"] == [1.0, "inf"]
