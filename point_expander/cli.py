from __future__ import annotations

import json
import logging
import math
from typing import Any, Optional

import typer

from point_expander.core.bind.binder import bind
from point_expander.core.convert.cast import TypeTag, cast
from point_expander.core.errors import CallLoadError, ExpandError
from point_expander.core.expand.expander import expand, resolve_element_type
from point_expander.core.io.load_calls import call_site_from_entry, load_calls
from point_expander.core.io.parse_call import parse_call, parse_literal
from point_expander.core.match.matcher import match
from point_expander.core.model import CallSite, TypedSequence
from point_expander.core.rules.rule_table import RULE_TABLE

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def _callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Point expansion CLI."""
    _setup_logging(verbose)


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(name)-30s  %(levelname)-7s  %(message)s",
    )


def _to_item(e: ExpandError) -> dict:
    return {
        "code": e.code,
        "message": e.message,
        "file": e.file,
        "path": e.path,
        "severity": "error",
        "source": "load" if isinstance(e, CallLoadError) else "expand",
    }


def _check_format(format: str, code: str) -> None:
    if format not in ("text", "json"):
        err = ExpandError(
            code=code,
            message=f"unknown format: {format} (choose one of: text, json)",
            file=None,
            path="format",
        )
        _print_errors([err])
        raise typer.Exit(code=2)


def _expand_site(site: CallSite) -> tuple[str, TypedSequence]:
    m = match(site)
    bindings = bind(m.rule, site)
    seq = expand(m.rule, bindings, resolve_element_type(m.rule, site))
    return m.rule.name, seq


def _anchor(loc: str, path: Optional[str]) -> str:
    if not path:
        return loc
    if path == loc or path.startswith(loc + "."):
        return path
    return f"{loc}.{path}"


def _json_values(values: list[Any]) -> list[Any]:
    # JSON has no inf/nan; emit them as strings.
    return [repr(v) if isinstance(v, float) and not math.isfinite(v) else v for v in values]


def _format_values(values: list[Any]) -> str:
    return "[" + ", ".join(repr(v) for v in values) + "]"


@app.command("expand")
def expand_cmd(
    call: str = typer.Argument(..., help='Invocation, e.g. "1, 1, 1, f32" or "[1, 2]: f32"'),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Expand a single invocation into a typed sequence."""
    _check_format(format, "E_EXPAND_UNKNOWN_FORMAT")

    try:
        site = parse_call(call)
        rule_name, seq = _expand_site(site)
    except ExpandError as e:
        if format == "json":
            payload = {
                "tool": "pointx",
                "command": "expand",
                "ok": False,
                "error_count": 1,
                "errors": [_to_item(e)],
            }
            typer.echo(json.dumps(payload, indent=2, sort_keys=True, allow_nan=False))
            raise typer.Exit(code=2)
        _print_errors([e])
        raise typer.Exit(code=2)

    if format == "text":
        typer.echo(_format_values(list(seq)))
        return

    payload = {
        "tool": "pointx",
        "command": "expand",
        "ok": True,
        "error_count": 0,
        "errors": [],
        "rule": rule_name,
        "element_type": seq.element_type.name,
        "values": _json_values(list(seq)),
    }
    typer.echo(json.dumps(payload, indent=2, sort_keys=True, allow_nan=False))


@app.command("check")
def check(
    path: str = typer.Argument(..., help="Path to a calls file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Expand every call in a batch file and compare against expectations."""
    _check_format(format, "E_CHECK_UNKNOWN_FORMAT")

    try:
        doc = load_calls(path)
    except CallLoadError as e:
        if format == "json":
            payload = {
                "tool": "pointx",
                "command": "check",
                "ok": False,
                "error_count": 1,
                "errors": [_to_item(e)],
                "results": [],
            }
            typer.echo(json.dumps(payload, indent=2, sort_keys=True, allow_nan=False))
            raise typer.Exit(code=1)
        _print_errors([e])
        raise typer.Exit(code=1)

    file = doc["__file__"]
    results: list[dict] = []
    errors: list[ExpandError] = []

    for i, entry in enumerate(doc["calls"]):
        loc = f"calls[{i}]"
        expect = entry.get("expect") if isinstance(entry, dict) else None
        expect_error = entry.get("expect_error") if isinstance(entry, dict) else None

        try:
            site = call_site_from_entry(entry, file=file, path=loc)
            rule_name, seq = _expand_site(site)
        except ExpandError as e:
            if expect_error is not None and e.code == expect_error:
                results.append({"path": loc, "ok": True, "error": e.code})
                continue
            err = type(e)(code=e.code, message=e.message, file=file, path=_anchor(loc, e.path))
            errors.append(err)
            results.append({"path": loc, "ok": False, "error": e.code})
            continue

        values = list(seq)
        if expect_error is not None:
            err = ExpandError(
                code="E_EXPECT_MISMATCH",
                message=f"expected error {expect_error}, got {_format_values(values)}",
                file=file,
                path=loc,
            )
        elif expect is not None and expect != values:
            err = ExpandError(
                code="E_EXPECT_MISMATCH",
                message=f"expected {_format_values(expect)}, got {_format_values(values)}",
                file=file,
                path=loc,
            )
        else:
            err = None

        if err is not None:
            errors.append(err)
        results.append(
            {
                "path": loc,
                "ok": err is None,
                "rule": rule_name,
                "element_type": seq.element_type.name,
                "values": _json_values(values),
            }
        )

    if format == "json":
        payload = {
            "tool": "pointx",
            "command": "check",
            "ok": not errors,
            "error_count": len(errors),
            "errors": [_to_item(e) for e in errors],
            "results": results,
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True, allow_nan=False))
        raise typer.Exit(code=2 if errors else 0)

    for r in results:
        if "values" in r:
            typer.echo(f"{r['path']}: {r['rule']} {r['element_type']} {_format_values(r['values'])}")
    if errors:
        _print_errors(errors)
        raise typer.Exit(code=2)
    typer.echo(f"OK: {len(results)} calls expanded")


@app.command("rules")
def rules() -> None:
    """List the expansion rules in precedence order."""
    typer.echo("Rules:")
    for i, rule in enumerate(RULE_TABLE, start=1):
        tag = rule.element_type.name if rule.element_type is not None else "<type>"
        typer.echo(f"{i}. {rule.name}: {rule.shape.describe()} -> {tag}")


@app.command("cast")
def cast_cmd(
    value: str = typer.Argument(..., help="Literal value, e.g. 9223372036854775807 or -1.5"),
    type_name: str = typer.Argument(..., metavar="TYPE", help="Target type, e.g. i32|u8|f32"),
) -> None:
    """Convert one literal with wrapping `as` semantics."""
    try:
        tag = TypeTag.parse(type_name)
        result = cast(parse_literal(value), tag)
    except ExpandError as e:
        _print_errors([e])
        raise typer.Exit(code=2)
    typer.echo(repr(result))


def _print_errors(errors: list[ExpandError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="pointx")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
