from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List, Optional

from .languages import DEFAULT_LANGUAGE, get_language, parse
from .types import EvalError, EvalResult, HostInt, HostString, HostValue, ParsingError, UnknownLanguageError
from .utils import stringify

USAGE = "usage: evalbridge [--lang PREFIX] [--value TEXT] [--row-index N] (EXPR | FILE | -) | --repl"

def make_bindings(value: Optional[str] = None, row_index: Optional[int] = None) -> Dict[str, HostValue]:
    bindings: Dict[str, HostValue] = {}

    if value is not None:
        bindings["value"] = HostString(value)

    if row_index is not None:
        bindings["rowIndex"] = HostInt(row_index)

    return bindings

def evaluate_text(expression: str, bindings: Dict[str, HostValue], lang: Optional[str] = None) -> EvalResult:
    """Compile ``expression`` (prefix-tagged unless ``lang`` is given) and evaluate it once."""
    if lang is not None:
        evaluable = get_language(lang).parser(expression, lang)
    else:
        evaluable = parse(expression)

    return evaluable.evaluate(bindings)

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    try:
        if candidate.is_file():
            return candidate.read_text(encoding="utf-8")
    except OSError:
        # Expression text too long or otherwise not a usable path.
        pass

    return arg

def _take_value(token: str, flag: str, it) -> Optional[str]:
    if token.startswith(flag + "="):
        return token.split("=", 1)[1]

    if token == flag:
        try:
            return next(it)
        except StopIteration:
            raise SystemExit(f"{flag} flag requires a value") from None

    return None

def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    lang: Optional[str] = None
    value: Optional[str] = None
    row_index: Optional[int] = None
    start_repl = False
    arg = None
    it = iter(args)

    for token in it:
        if token in ("-h", "--help"):
            print(USAGE)
            return 0

        if token == "--repl":
            start_repl = True
            continue

        taken = _take_value(token, "--lang", it)
        if taken is not None:
            lang = taken
            continue

        taken = _take_value(token, "--value", it)
        if taken is not None:
            value = taken
            continue

        taken = _take_value(token, "--row-index", it)
        if taken is not None:
            try:
                row_index = int(taken)
            except ValueError:
                raise SystemExit(f"--row-index expects an integer, got {taken!r}") from None
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    if start_repl or (arg is None and sys.stdin.isatty()):
        from .repl import repl
        repl(lang or DEFAULT_LANGUAGE, value)
        return 0

    source = _load_source(arg)

    try:
        result = evaluate_text(source, make_bindings(value, row_index), lang)
    except (ParsingError, UnknownLanguageError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if isinstance(result, EvalError):
        print(f"Error: {result.message}", file=sys.stderr)
        if result.traceback:
            print(result.traceback, file=sys.stderr, end="")
        return 1

    print(stringify(result))
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
