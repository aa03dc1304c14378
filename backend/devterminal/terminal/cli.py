"""Interactive entry point for the DevTerminal client."""
from __future__ import annotations

import argparse
import asyncio
import sys

from devterminal.core.config import get_settings
from devterminal.core.logging_config import setup_logging

from .client import ApiClient
from .terminal import CommandHistory, OutputKind, OutputLine, Terminal

try:
    import readline
except ImportError:  # Windows has no readline; arrows just won't recall history
    readline = None

_COLORS = {
    OutputKind.ERROR: "\033[31m",
    OutputKind.SUCCESS: "\033[32m",
}
_RESET = "\033[0m"
_PROMPT_COLOR = "\033[32m"


def render_line(line: OutputLine, color: bool = True) -> str:
    code = _COLORS.get(line.kind)
    if not color or code is None:
        return line.text
    return f"{code}{line.text}{_RESET}"


def _clear_screen() -> None:
    sys.stdout.write("\033[2J\033[H")
    sys.stdout.flush()


async def run_repl(api_url: str, color: bool = True) -> int:
    async with ApiClient(api_url) as client:
        history = CommandHistory()
        if readline is not None:
            # readline owns up/down recall; feed it only the lines the terminal records
            readline.set_auto_history(False)
            history = CommandHistory(on_record=readline.add_history)
        terminal = Terminal(client, on_clear=_clear_screen, history=history)

        for line in terminal.lines:
            print(render_line(line, color))

        while True:
            # \001/\002 tell readline the escape codes take no width
            prompt = f"\001{_PROMPT_COLOR}\002{terminal.prompt}\001{_RESET}\002 " if color else f"{terminal.prompt} "
            # Blocking read: one command is in flight at a time
            try:
                raw = input(prompt)
            except (EOFError, KeyboardInterrupt):
                print()
                return 0

            # The prompt line was already echoed by input(); skip the echo line
            for out in (await terminal.execute(raw))[1:]:
                print(render_line(out, color))


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="devterminal", description="Terminal client for the DevTerminal API")
    parser.add_argument("--api-url", default=settings.api_url, help="Base URL of the API (default: %(default)s)")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors")
    parser.add_argument("--log-level", default="WARNING", help="Client log level (default: %(default)s)")
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    color = not args.no_color and sys.stdout.isatty()
    return asyncio.run(run_repl(args.api_url, color=color))


if __name__ == "__main__":
    sys.exit(main())
