"""
Console output for the sync and extract scripts.

Library modules log through ``logging``; scripts report steps and totals
through these helpers. Styling is only applied when the target stream is a
TTY, so redirected output stays plain.
"""

import sys
from enum import Enum
from typing import TextIO

RULE_WIDTH = 60


class Style(Enum):
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"


def _is_tty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def colorize(text: str, *styles: Style, stream: TextIO | None = None) -> str:
    if not styles or not _is_tty(stream or sys.stdout):
        return text
    return "".join(style.value for style in styles) + text + Style.RESET.value


def _emit(text: str, *styles: Style, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(colorize(text, *styles, stream=stream), file=stream)


def info(message: str) -> None:
    _emit(message)


def success(message: str) -> None:
    _emit(f"✓ {message}", Style.GREEN)


def warning(message: str) -> None:
    _emit(f"⚠ {message}", Style.YELLOW)


def error(message: str) -> None:
    _emit(f"✗ {message}", Style.RED, stream=sys.stderr)


def section_header(title: str) -> None:
    rule = "=" * RULE_WIDTH
    _emit("")
    _emit(rule, Style.BLUE)
    _emit(title, Style.BOLD, Style.CYAN)
    _emit(rule, Style.BLUE)


def step(current: int, total: int, message: str) -> None:
    print(f"{colorize(f'[{current}/{total}]', Style.CYAN)} {message}")


def key_value(key: str, value: object, indent: int = 2) -> None:
    print(f"{' ' * indent}{colorize(f'{key}:', Style.WHITE)} {value}")


def counts(title: str, values: dict[str, int]) -> None:
    """Print a block of right-aligned counters, e.g. records per family."""
    _emit("")
    _emit(title, Style.BOLD)
    if not values:
        _emit("  (none)", Style.DIM)
        return
    width = max(len(key) for key in values)
    for key, value in values.items():
        print(f"  {key.ljust(width)}  {colorize(f'{value:>7}', Style.WHITE)}")


def error_with_context(
    message: str,
    context: dict[str, str] | None = None,
    suggestions: list[str] | None = None,
) -> None:
    error(message)
    for key, value in (context or {}).items():
        _emit(f"  {key}: {value}", stream=sys.stderr)
    if suggestions:
        _emit("Suggestions:", Style.YELLOW, stream=sys.stderr)
        for suggestion in suggestions:
            _emit(f"  → {suggestion}", stream=sys.stderr)
