"""Example prompt for pi-lineedit: ``python -m pi.lineedit``."""

from __future__ import annotations

import argparse
import logging

from pi.lineedit.config import LineEditConfig
from pi.lineedit.errors import EndOfInput, InputInterrupted, PersistenceError
from pi.lineedit.session import LineEditor

GREETINGS = ["hello", "hi", "hey", "howzit"]


def complete_greeting(typed: str) -> list[str]:
    if typed.startswith("h"):
        return list(GREETINGS)
    return []


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="pi-lineedit example prompt")
    parser.add_argument("--multiline", action="store_true", help="Enable multi-row editing")
    parser.add_argument("--history-file", default="history.txt", help="History file (default: history.txt)")
    parser.add_argument("--log-level", default="warning", choices=["debug", "info", "warning", "error"])
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config = LineEditConfig.from_env()
    if args.multiline:
        config.multiline = True
        print("Multi-line mode enabled.")

    editor = LineEditor(config)
    editor.set_completion_callback(complete_greeting)
    try:
        editor.load_history(args.history_file)
    except PersistenceError as exc:
        print(f"Error loading history: {exc}")

    while True:
        try:
            line = editor.read_line("hello> ")
        except (EndOfInput, InputInterrupted):
            return 0

        if line and not line.startswith("/"):
            editor.add_history(line)
            try:
                editor.save_history(args.history_file)
            except PersistenceError as exc:
                print(f"Error saving history: {exc}")
        elif line.startswith("/historylen"):
            try:
                editor.set_history_max_len(int(line[len("/historylen"):]))
            except ValueError:
                print(f"Invalid history length: {line}")
        elif line.startswith("/"):
            print(f"Unrecognized command: {line}")


if __name__ == "__main__":
    raise SystemExit(main())
