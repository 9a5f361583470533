from __future__ import annotations

import argparse
import sys
from importlib import metadata
from pathlib import Path

import tomllib
import uvicorn
from rich.console import Console
from rich.table import Table

from .arrays import remove_matching
from .core import (
    MODE_CASCADE,
    MODE_DISTINCT,
    build_token_tree,
    set_debug_logging,
)
from .rules import RuleSet, load_rules
from .tokens import TokenTree, serialize_token_tree
from .web import WebConfig, create_app

NULL_TOKEN = "NULL"


def _read_local_version() -> str | None:
    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    except IndexError:  # pragma: no cover - installed without a source tree
        return None
    try:
        with pyproject_path.open("rb") as fh:
            data = tomllib.load(fh)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return data.get("project", {}).get("version")


try:
    __version__ = metadata.version("strtranslate")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


def _add_version_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"strtranslate {__version__}",
    )


def _add_debug_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print skipped pairs and per-pattern hit counts to stderr.",
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="strtranslate",
        description=(
            "Multi-pattern literal substitution. Use `strtranslate remove` for array "
            "difference and `strtranslate web` to serve the HTTP API."
        ),
    )
    _add_version_flag(ap)
    ap.add_argument(
        "text",
        nargs="?",
        help="Input text. Falls back to --file, then stdin.",
    )
    ap.add_argument("-f", "--file", help="Read the input text from this UTF-8 file.")
    ap.add_argument(
        "-s",
        "--search",
        action="append",
        default=[],
        help="Search term; pair each -s with a -r in the same order.",
    )
    ap.add_argument(
        "-r",
        "--replace",
        action="append",
        default=[],
        help="Replacement for the search term at the same position.",
    )
    ap.add_argument(
        "-c",
        "--rules",
        help="JSON rules file; its rules run before any -s/-r pairs.",
    )
    mode_group = ap.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--cascade",
        dest="mode",
        action="store_const",
        const=MODE_CASCADE,
        help="Let later patterns match text produced by earlier replacements.",
    )
    mode_group.add_argument(
        "--distinct",
        dest="mode",
        action="store_const",
        const=MODE_DISTINCT,
        help="Never re-scan replaced text (default unless the rules file says otherwise).",
    )
    ap.add_argument("-o", "--output", help="Write the result to this file instead of stdout.")
    ap.add_argument(
        "--explain",
        action="store_true",
        help="Show the final partition of the text (distinct mode only).",
    )
    _add_debug_flag(ap)
    return ap


def build_remove_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="strtranslate remove",
        description=(
            f"Print ITEMs that do not exactly match any removal value. Use {NULL_TOKEN} "
            "for a null element."
        ),
    )
    ap.add_argument("items", nargs="*", help="Source elements, in order.")
    ap.add_argument(
        "-x",
        "--remove",
        action="append",
        default=[],
        help="Value to remove (repeatable).",
    )
    return ap


def build_web_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="strtranslate web",
        description="Serve the translate/remove HTTP API.",
    )
    ap.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1).")
    ap.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000).")
    ap.add_argument("-c", "--rules", help="JSON rules file used when a request omits its own pairs.")
    ap.add_argument(
        "--max-length",
        type=int,
        default=None,
        help="Reject translate requests whose text is longer than this many characters.",
    )
    _add_debug_flag(ap)
    return ap


def _read_input_text(args: argparse.Namespace) -> str:
    if args.text is not None:
        return args.text
    if args.file:
        return Path(args.file).expanduser().read_text(encoding="utf-8")
    return sys.stdin.read()


def _build_ruleset(args: argparse.Namespace) -> RuleSet:
    if args.rules:
        ruleset = load_rules(Path(args.rules).expanduser())
    else:
        ruleset = RuleSet()
    ruleset.extend(args.search, args.replace)
    if args.mode:
        ruleset.mode = args.mode
    return ruleset


def _render_partition(console: Console, tree: TokenTree) -> None:
    table = Table(title="Partition")
    table.add_column("#", justify="right")
    table.add_column("Span")
    table.add_column("Solved")
    table.add_column("Text", overflow="fold")
    for index, entry in enumerate(serialize_token_tree(tree)):
        table.add_row(
            str(index),
            f"{entry['start']}-{entry['end']}",
            "yes" if entry["solved"] else "",
            repr(entry["text"]),
        )
    console.print(table)


def _run_translate(args: argparse.Namespace) -> int:
    console = Console(stderr=True)
    set_debug_logging(bool(getattr(args, "debug", False)))
    explain = args.explain
    try:
        ruleset = _build_ruleset(args)
        text = _read_input_text(args)
        if explain and ruleset.cascade:
            console.print("--explain is only available in distinct mode.", highlight=False)
            explain = False
        if explain:
            tree = build_token_tree(text, ruleset.searches, ruleset.replacements)
            _render_partition(console, tree)
            result = tree.compose()
        else:
            result = ruleset.apply(text)
    except (ValueError, OSError) as exc:
        console.print(f"error: {exc}", style="red", markup=False, highlight=False)
        return 2
    if args.output:
        Path(args.output).expanduser().write_text(result, encoding="utf-8")
    else:
        sys.stdout.write(result)
        sys.stdout.flush()
    return 0


def _from_cli_value(value: str) -> str | None:
    return None if value == NULL_TOKEN else value


def _run_remove(args: argparse.Namespace) -> int:
    source = [_from_cli_value(item) for item in args.items]
    removals = [_from_cli_value(item) for item in args.remove]
    for item in remove_matching(source, removals):
        print(NULL_TOKEN if item is None else item)
    return 0


def _run_web(args: argparse.Namespace) -> int:
    console = Console(stderr=True)
    set_debug_logging(bool(getattr(args, "debug", False)))
    try:
        ruleset = load_rules(Path(args.rules).expanduser()) if args.rules else RuleSet()
    except (ValueError, OSError) as exc:
        console.print(f"error: {exc}", style="red", markup=False, highlight=False)
        return 2
    app = create_app(WebConfig(rules=ruleset, max_text_length=args.max_length))
    print(f"Serving strtranslate on http://{args.host}:{args.port}/")
    print(f"Preset rules: {len(ruleset.rules)} ({ruleset.mode})")
    print("Press Ctrl+C to stop.\n")
    uvicorn.run(app, host=args.host, port=args.port, log_level="debug" if args.debug else "info")
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] == "remove":
        remove_parser = build_remove_parser()
        remove_args = remove_parser.parse_args(argv[1:])
        return _run_remove(remove_args)
    if argv and argv[0] == "web":
        web_parser = build_web_parser()
        web_args = web_parser.parse_args(argv[1:])
        return _run_web(web_args)
    if argv and argv[0] == "translate":
        argv = argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)
    return _run_translate(args)


if __name__ == "__main__":
    raise SystemExit(main())
