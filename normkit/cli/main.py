from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, List, Tuple

from normkit.core.data import NormalizedData, NormalizerError
from normkit.core.normalization import NormalizationConfig, Normalizer, merge_overrides
from normkit.utils.json_safe import to_jsonable

log = logging.getLogger("normkit.cli")


def _read_json(path: str) -> Any:
    """Read JSON from a file, or from stdin when path is ``-``."""

    if path == "-":
        return json.load(sys.stdin)
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _print_json(obj: Any, *, pretty: bool = False) -> None:
    if isinstance(obj, NormalizedData):
        print(obj.to_json(pretty=pretty))
        return
    indent = 4 if pretty else None
    separators = None if pretty else (",", ":")
    print(json.dumps(obj, indent=indent, separators=separators, ensure_ascii=False, default=to_jsonable))


def _config_from_args(args: argparse.Namespace) -> NormalizationConfig:
    """Environment settings, overridden by explicit flags."""

    overrides = {
        "na_match_mode": args.na_mode,
        "na_values": args.na_value,
        "treat_empty_string_as_null": False if args.keep_empty else None,
        "treat_whitespace_as_empty": False if args.keep_whitespace else None,
    }
    return merge_overrides(NormalizationConfig.from_env(), overrides)


def _load_normalized(args: argparse.Namespace) -> Tuple[int, Any]:
    """Read and normalize the input document. Returns (exit_code, result)."""

    try:
        raw = _read_json(args.path)
        return 0, Normalizer(_config_from_args(args)).normalize(raw)
    except FileNotFoundError:
        return _fail(f"file not found: {args.path}"), None
    except json.JSONDecodeError as e:
        return _fail(f"invalid JSON in {args.path}: {e}"), None
    except NormalizerError as e:
        return _fail(str(e)), None


def _fail(message: str) -> int:
    print(f"error: {message}", file=sys.stderr)
    return 2


def cmd_normalize(args: argparse.Namespace) -> int:
    """Normalize a JSON document and print the result."""

    code, result = _load_normalized(args)
    if code:
        return code
    _print_json(result, pretty=args.pretty)
    return 0


def cmd_get(args: argparse.Namespace) -> int:
    """Resolve an exact key or dot-path against a normalized JSON document.

    Exit codes: 0 found, 1 missing, 2 error.
    """

    code, result = _load_normalized(args)
    if code:
        return code
    if not isinstance(result, NormalizedData) or not result.has(args.key):
        log.debug("path not found: %s", args.key)
        return 1
    _print_json(to_jsonable(result.get(args.key)), pretty=args.pretty)
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the normkit API server (binds to 127.0.0.1 by default)."""

    try:
        import uvicorn
    except ImportError as e:
        print(f"error: uvicorn is required to serve the API: {e}", file=sys.stderr)
        return 2

    from normkit.api.server import create_app

    app = create_app()
    uvicorn.run(app, host=args.host, port=int(args.port), log_level=args.log_level.lower())
    return 0


def _add_normalization_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("path", help="Path to a JSON file, or - for stdin")
    p.add_argument("--pretty", action="store_true", help="Indent the JSON output")
    p.add_argument("--na-mode", choices=["compressed", "exact"], default=None, help="N/A comparison mode")
    p.add_argument(
        "--na-value",
        action="append",
        default=None,
        help="N/A sentinel (repeatable; replaces the default list)",
    )
    p.add_argument("--keep-empty", action="store_true", help="Do not turn empty strings into null")
    p.add_argument(
        "--keep-whitespace",
        action="store_true",
        help="Only the exact empty string counts as empty",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    p = argparse.ArgumentParser(prog="normkit", description="normkit CLI")
    p.add_argument("--log-level", default="WARNING", help="Logging level (default WARNING)")
    sub = p.add_subparsers(dest="cmd", required=True)

    np = sub.add_parser("normalize", help="Normalize a JSON document")
    _add_normalization_flags(np)
    np.set_defaults(func=cmd_normalize)

    gp = sub.add_parser("get", help="Print the value at a key or dot-path")
    _add_normalization_flags(gp)
    gp.add_argument("key", help="Exact key or dot-path (escape literal dots as \\.)")
    gp.set_defaults(func=cmd_get)

    sp = sub.add_parser("serve", help="Run the HTTP API")
    sp.add_argument("--host", default="127.0.0.1")
    sp.add_argument("--port", default=8000, type=int)
    sp.set_defaults(func=cmd_serve)

    return p


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
