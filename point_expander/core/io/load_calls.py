from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from point_expander.core.convert.cast import TypeTag
from point_expander.core.errors import CallLoadError, CallParseError, ExpandError
from point_expander.core.io.parse_call import parse_call
from point_expander.core.model import CallSite

logger = logging.getLogger(__name__)


def load_calls(path: str) -> dict[str, Any]:
    """Load a YAML/JSON batch of call sites.

    Returns a dict with keys: calls, __file__.
    Entries are not converted here; see call_site_from_entry.
    """

    p = Path(path)
    if not p.exists():
        raise CallLoadError(
            code="E_FILE_NOT_FOUND",
            message="file does not exist",
            file=str(p),
        )

    suffix = p.suffix.lower()
    try:
        raw_text = p.read_text(encoding="utf-8")
    except Exception as e:  # pragma: no cover
        raise CallLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    try:
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(raw_text)
        elif suffix == ".json":
            data = json.loads(raw_text)
        else:
            raise CallLoadError(
                code="E_UNSUPPORTED_FORMAT",
                message="supported formats are .yaml/.yml and .json",
                file=str(p),
            )
    except CallLoadError:
        raise
    except Exception as e:
        code = "E_YAML_PARSE" if suffix in {".yaml", ".yml"} else "E_JSON_PARSE"
        raise CallLoadError(code=code, message=str(e), file=str(p)) from e

    if not isinstance(data, dict) or not isinstance(data.get("calls"), list):
        raise CallLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping with a 'calls' list",
            file=str(p),
        )

    logger.debug("loaded %d calls from %s", len(data["calls"]), p)
    return {"calls": data["calls"], "__file__": str(p)}


def call_site_from_entry(entry: Any, *, file: Optional[str] = None, path: Optional[str] = None) -> CallSite:
    """Turn one batch entry into a CallSite.

    An entry is either a string in the call syntax, or a mapping with
    `args` (bare expressions) or `list` (bracketed), plus an optional `type`.
    """
    try:
        if isinstance(entry, str):
            return parse_call(entry)
        if isinstance(entry, dict):
            return _from_mapping(entry)
    except ExpandError as e:
        # re-anchor at the batch entry, keeping any inner location
        inner = f"{path}.{e.path}" if path and e.path else (e.path or path)
        raise type(e)(code=e.code, message=e.message, file=file, path=inner) from e

    raise CallParseError(
        code="E_CALL_PARSE",
        message="call entry must be a string or a mapping",
        file=file,
        path=path,
    )


def _from_mapping(entry: dict[str, Any]) -> CallSite:
    has_args = "args" in entry
    has_list = "list" in entry
    if has_args == has_list:
        raise CallParseError(code="E_CALL_PARSE", message="call entry needs exactly one of 'args' or 'list'")

    values = entry["list"] if has_list else entry["args"]
    if not isinstance(values, list):
        key = "list" if has_list else "args"
        raise CallParseError(code="E_CALL_PARSE", message=f"'{key}' must be an array")

    type_name = entry.get("type")
    type_tag: Optional[TypeTag] = None
    if type_name is not None:
        if not isinstance(type_name, str):
            raise CallParseError(code="E_CALL_PARSE", message="'type' must be a string")
        type_tag = TypeTag.parse(type_name)

    return CallSite(args=tuple(values), bracketed=has_list, type_tag=type_tag)
