# proxmenux_installer/ui.py
"""Terminal output and prompts: colored status lines, spinner, menus."""
from __future__ import annotations

import itertools
import sys
import threading
import time

YW = "\033[33m"
YWB = "\033[1;33m"
GN = "\033[1;92m"
RD = "\033[01;31m"
BL = "\033[36m"
CL = "\033[m"
BOLD = "\033[1m"
BFR = "\r\033[K"
TAB = "    "
CM = f"{GN}✓ {CL}"

_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"


class Spinner:
    """Cosmetic progress indicator drawn while a blocking call runs.

    Used as a context manager; the thread is stopped and the cursor
    restored when the block exits, whether it succeeded or raised.
    """

    def __init__(self, message: str, interval: float = 0.1, stream=None):
        self.message = message
        self.interval = interval
        self.stream = stream or sys.stdout
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def _spin(self):
        for frame in itertools.cycle(_FRAMES):
            if self._stop.is_set():
                break
            self.stream.write(f"{BFR}{TAB}{YW}-{self.message} {frame}{CL}")
            self.stream.flush()
            time.sleep(self.interval)

    def start(self):
        if not self.stream.isatty():
            self.stream.write(f"{TAB}{YW}-{self.message}{CL}\n")
            return
        self.stream.write("\033[?25l")
        self._thread = threading.Thread(target=self._spin, daemon=True)
        self._thread.start()

    def stop(self):
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
            self.stream.write(f"{BFR}\033[?25h")
            self.stream.flush()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False


def msg_info(msg: str):
    print(f"{TAB}{BOLD}{YW}-{msg}{CL}")


def msg_ok(msg: str):
    print(f"{BFR}{TAB}{CM}{GN}{msg}{CL}")


def msg_warn(msg: str):
    print(f"{BFR}{TAB}{CL} {YWB}{msg}{CL}")


def msg_error(msg: str):
    print(f"{BFR}{TAB}{RD}[ERROR] {msg}{CL}", file=sys.stderr)


def msg_title(msg: str):
    print(f"\n\n{TAB}{BOLD}- | {msg} | -{CL}\n\n")


def show_progress(step: int, total: int, message: str):
    print(f"\n{BOLD}{BL}{TAB}Installing ProxMenux: Step {step} of {total}{CL}\n")
    msg_info(message)


def confirm(message: str, default_yes: bool = True) -> bool:
    suffix = "[Y/n]" if default_yes else "[y/N]"
    try:
        answer = input(f"{message} {suffix}: ").strip().lower()
    except EOFError:
        return False
    if not answer:
        return default_yes
    return answer.startswith("y")


def choose(title: str, options: list[tuple[str, str]]) -> str | None:
    """Show a numbered menu and return the chosen key, or None on empty input."""
    print(f"\n{BOLD}{title}{CL}\n")
    for i, (_, label) in enumerate(options, start=1):
        print(f"  {i}) {label}")
    while True:
        try:
            answer = input("\nSelect an option (empty to cancel): ").strip()
        except EOFError:
            return None
        if not answer:
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(options):
            return options[int(answer) - 1][0]
        keys = [key for key, _ in options]
        if answer in keys:
            return answer
        print("  Invalid choice.")


def checklist(title: str, options: list[tuple[str, str]]) -> list[str]:
    """Prompt for any subset of options. Returns the selected keys in menu order."""
    print(f"\n{BOLD}{title}{CL}\n")
    for i, (key, label) in enumerate(options, start=1):
        print(f"  {i}) {key:15s} {label}")
    try:
        answer = input("\nNumbers to select, comma-separated (empty for none): ")
    except EOFError:
        return []
    picked = set()
    for part in answer.split(","):
        part = part.strip()
        if part.isdigit() and 1 <= int(part) <= len(options):
            picked.add(int(part) - 1)
    return [options[i][0] for i in sorted(picked)]


def type_text(text: str, delay: float = 0.05):
    for ch in text:
        sys.stdout.write(ch)
        sys.stdout.flush()
        time.sleep(delay)
    sys.stdout.write("\n")
