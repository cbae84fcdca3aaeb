"""Interactive expression playground, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
from typing import Dict, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .languages import get_language
from .runner import make_bindings
from .types import EvalError, HostValue, ParsingError
from .utils import DEBUG_PY_TRACE_ENV, debug_py_trace_enabled, stringify

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/bindings": ("Show the current bindings", ""),
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/value": ("Set the string bound to `value`", "<text>"),
}


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def _handle_slash(line: str, bindings: Dict[str, HostValue]) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/value":
        bindings.clear()
        bindings.update(make_bindings(arg))
        print(f"value = {arg!r}")
        return True

    if cmd == "/bindings":
        for name, val in bindings.items():
            print(f"{name} = {val!r}")
        return True

    if cmd == "/py-traceback":
        if arg.lower() in ("on", "1", "true", "yes"):
            os.environ[DEBUG_PY_TRACE_ENV] = "1"
        elif arg.lower() in ("off", "0", "false", "no"):
            os.environ.pop(DEBUG_PY_TRACE_ENV, None)
        elif arg == "":
            # Toggle.
            if debug_py_trace_enabled():
                os.environ.pop(DEBUG_PY_TRACE_ENV, None)
            else:
                os.environ[DEBUG_PY_TRACE_ENV] = "1"
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def _is_block_header(line: str) -> bool:
    return line.rstrip().endswith(":") and not line.lstrip().startswith("#")


def _compute_indent(text: str) -> str:
    """Compute the auto-indent prefix for the next continuation line."""
    last = text.split("\n")[-1]

    if _is_block_header(last):
        existing = len(last) - len(last.lstrip())
        return " " * (existing + 4)

    # Preserve indent of the last line.
    if last.strip():
        return " " * (len(last) - len(last.lstrip()))

    return ""


def repl(lang: str = "python", value: Optional[str] = None) -> None:
    """Read expressions, evaluate each against the current bindings, print the result."""
    info = get_language(lang)
    bindings: Dict[str, HostValue] = make_bindings(value if value is not None else "")

    keys = KeyBindings()

    @keys.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        # Single line that doesn't open a block => accept.
        if "\n" not in text and not _is_block_header(text):
            buf.validate_and_handle()
            return

        # Multiline: an empty last line submits.
        lines = text.split("\n")
        if lines[-1].strip() == "":
            buf.text = "\n".join(lines[:-1])
            buf.cursor_position = len(buf.text)
            buf.validate_and_handle()
            return

        buf.insert_text("\n" + _compute_indent(text))

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=keys,
        multiline=True,
        prompt_continuation="... ",
    )

    print(f"evalbridge {info.name} repl, Ctrl-D to exit, / for commands")
    print(f"e.g. {info.default_expression}")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        if _handle_slash(text, bindings):
            continue

        try:
            evaluable = info.parser(text, info.prefix)
        except ParsingError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            continue

        result = evaluable.evaluate(bindings)
        if isinstance(result, EvalError):
            print(f"Error: {result.message}", file=sys.stderr)
            if result.traceback:
                print("\nPython traceback:", file=sys.stderr)
                print(result.traceback, file=sys.stderr, end="")
            continue

        print(stringify(result))
