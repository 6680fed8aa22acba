"""
Interactive, inline fuzzy selector for AWS profiles.

The selector draws a prompt line, a window of matching profiles and a help
line directly below the cursor (no alternate screen). Every frame erases the
lines drawn by the previous one, and the whole region is erased again when
the session ends, so the terminal is left as it was found.
"""

import contextlib
import signal
import sys
import termios
import tty
from collections import namedtuple

import readchar
from rich.console import Console
from rich.control import Control
from rich.segment import ControlType
from rich.text import Text

from .matcher import candidates_from_profiles, rank

PROMPT = "? Select AWS Profile: "
HELP_MESSAGE = "↑↓ to move, enter to select, type to filter, esc or q to cancel"
NO_MATCHES_MESSAGE = "No matching profiles"
DEFAULT_PAGE_SIZE = 10

# Lines drawn around the candidate rows: the prompt and the help line
FRAME_CHROME_LINES = 2

RUNNING = "running"
SELECTED = "selected"
CANCELLED = "cancelled"

ENTER_KEYS = (readchar.key.CR, readchar.key.LF)
BACKSPACE_KEYS = (readchar.key.BACKSPACE, readchar.key.CTRL_H)


class TerminalError(Exception):
    """Raised when the terminal cannot be put into interactive mode."""


class TerminalResized(Exception):
    """Raised by a key read when the terminal changed size since the last read."""


class SessionOutcome(namedtuple("SessionOutcome", ["state", "name"])):
    """Terminal result of a selector session: SELECTED with a name, or CANCELLED."""

    @classmethod
    def selected(cls, name):
        return cls(SELECTED, name)

    @classmethod
    def cancelled(cls):
        return cls(CANCELLED, None)

    @property
    def is_selected(self):
        return self.state == SELECTED


class Viewport:
    """Window of `size` consecutive rows that follows the selection."""

    def __init__(self, size):
        self.size = max(1, size)
        self.top = 0

    def resize(self, size):
        self.size = max(1, size)

    def follow(self, index, total):
        """Scroll the window so that row `index` of `total` rows is visible."""
        if total <= self.size:
            self.top = 0
            return
        if index < self.top:
            self.top = index
        elif index >= self.top + self.size:
            self.top = index - self.size + 1
        self.top = max(0, min(self.top, total - self.size))

    def rows(self, total):
        return range(self.top, min(total, self.top + self.size))


class InlineRenderer:
    """
    Draw selector frames in place on a rich Console.

    The renderer remembers how many lines the last frame occupied and erases
    exactly those lines before drawing the next one. Lines are truncated to
    the console width so that one logical line is always one terminal row.
    """

    def __init__(self, console, page_size=DEFAULT_PAGE_SIZE):
        self.console = console
        self.page_size = page_size
        self.viewport = Viewport(self._viewport_size())
        self.height = 0

    def _viewport_size(self):
        return min(self.page_size, self.console.size.height - FRAME_CHROME_LINES)

    def resize(self):
        """Recompute the viewport size from the current terminal height."""
        self.viewport.resize(self._viewport_size())

    def build_frame(self, ranked, index, query):
        """Return the list of Text lines for one frame."""
        lines = [Text.assemble((PROMPT, "bold green"), query)]

        if ranked:
            self.viewport.follow(index, len(ranked))
            for row in self.viewport.rows(len(ranked)):
                label = ranked[row].candidate.display_text
                if row == index:
                    lines.append(Text(f"> {label}", style="bold cyan"))
                else:
                    lines.append(Text(f"  {label}"))
        else:
            lines.append(Text(f"  {NO_MATCHES_MESSAGE}", style="dim"))

        lines.append(Text(HELP_MESSAGE, style="dim"))

        # Leave the last column free so the terminal never auto-wraps
        width = max(1, self.console.size.width - 1)
        for line in lines:
            line.truncate(width, overflow="ellipsis")
        return lines

    def erase(self):
        """Erase the lines drawn by the previous frame, leaving the cursor at its start."""
        if not self.height:
            return
        self.console.control(
            Control(
                ControlType.CARRIAGE_RETURN,
                (ControlType.ERASE_IN_LINE, 2),
                *(((ControlType.CURSOR_UP, 1), (ControlType.ERASE_IN_LINE, 2)) * (self.height - 1)),
            )
        )
        self.height = 0

    def draw(self, ranked, index, query):
        lines = self.build_frame(ranked, index, query)
        with self.console:
            self.erase()
            self.console.print(Text("\n").join(lines), end="", soft_wrap=True, highlight=False)
        self.height = len(lines)

    def close(self):
        self.erase()
        self.console.show_cursor(True)


class KeyReader:
    """
    Blocking key source built on readchar.

    A SIGWINCH delivered to on_resize while a read is blocked calls
    resize_listener in place and lets the read carry on, so no key is lost.
    A resize that arrives between reads, or with no listener set, is reported
    by the next call as TerminalResized.
    """

    def __init__(self, read=readchar.readkey, resize_listener=None):
        self._read = read
        self.resize_listener = resize_listener
        self._reading = False
        self._resized = False
        self._redrawing = False

    def __call__(self):
        if self._resized:
            self._resized = False
            raise TerminalResized()
        self._reading = True
        try:
            return self._read()
        finally:
            self._reading = False

    def on_resize(self, signum, frame):
        self._resized = True
        if not self._reading or self._redrawing or self.resize_listener is None:
            return
        self._redrawing = True
        try:
            # A resize during the redraw is folded into another pass
            while self._resized:
                self._resized = False
                self.resize_listener()
        finally:
            self._redrawing = False


@contextlib.contextmanager
def terminal_session(renderer, key_reader=None, stream=None):
    """
    Hold the terminal in cbreak, no-echo mode with a hidden cursor.

    The saved terminal attributes are restored and the drawn region is erased
    on every exit path, including exceptions raised inside the block.

    Raises:
        TerminalError: if stream (default stdin) or the console is not a
            terminal, or its mode cannot be changed
    """
    if stream is None:
        stream = sys.stdin
    if not stream.isatty() or not renderer.console.is_terminal:
        raise TerminalError("Interactive selection requires a terminal")

    fd = stream.fileno()
    try:
        saved_attributes = termios.tcgetattr(fd)
    except termios.error as e:
        raise TerminalError(f"Unable to read terminal attributes: {e}")

    try:
        tty.setcbreak(fd)
    except termios.error as e:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved_attributes)
        raise TerminalError(f"Unable to switch terminal to cbreak mode: {e}")

    previous_handler = None
    try:
        renderer.console.show_cursor(False)
        if key_reader is not None and hasattr(signal, "SIGWINCH"):
            previous_handler = signal.signal(signal.SIGWINCH, key_reader.on_resize)
        yield
    finally:
        try:
            if previous_handler is not None:
                signal.signal(signal.SIGWINCH, previous_handler)
            renderer.close()
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved_attributes)


class ProfileSelector:
    """
    One interactive selection session.

    State moves from RUNNING to exactly one of SELECTED or CANCELLED; a
    finished selector cannot be run again.
    """

    def __init__(self, candidates, renderer, read_key):
        self.candidates = list(candidates)
        self.renderer = renderer
        self.read_key = read_key
        self.query = ""
        self.ranked = rank(self.candidates, self.query)
        self.index = 0
        self.state = RUNNING
        self.outcome = None

    def _set_query(self, query):
        self.query = query
        self.ranked = rank(self.candidates, query)
        self.index = 0

    def handle_resize(self):
        """Recompute the viewport for the new terminal size and redraw without re-ranking."""
        self.renderer.resize()
        self.renderer.draw(self.ranked, self.index, self.query)

    def _finish(self, outcome):
        self.state = outcome.state
        self.outcome = outcome

    def handle_key(self, key):
        """
        Apply one key press to the session.

        Returns:
            True if the frame needs to be redrawn
        """
        if key in ENTER_KEYS:
            if not self.ranked:
                return False
            self._finish(SessionOutcome.selected(self.ranked[self.index].candidate.sort_key))
            return False

        # readchar reports a lone Esc together with the key that followed it
        if not key or key == readchar.key.ESC or (key.startswith(readchar.key.ESC) and len(key) == 2):
            self._finish(SessionOutcome.cancelled())
            return False
        if key == "q":
            self._finish(SessionOutcome.cancelled())
            return False

        if key == readchar.key.DOWN:
            if self.ranked:
                self.index = min(self.index + 1, len(self.ranked) - 1)
            return True
        if key == readchar.key.UP:
            self.index = max(self.index - 1, 0)
            return True

        if key in BACKSPACE_KEYS:
            if self.query:
                self._set_query(self.query[:-1])
            return True

        if len(key) == 1 and key.isprintable():
            self._set_query(self.query + key)
            return True

        return False

    def run(self):
        """Run the input loop until the user selects or cancels; return the SessionOutcome."""
        if self.state != RUNNING:
            raise RuntimeError("Selector session has already finished")

        self.renderer.draw(self.ranked, self.index, self.query)
        while self.state == RUNNING:
            try:
                key = self.read_key()
            except TerminalResized:
                self.handle_resize()
                continue
            except (KeyboardInterrupt, EOFError):
                self._finish(SessionOutcome.cancelled())
                break

            if self.handle_key(key):
                self.renderer.draw(self.ranked, self.index, self.query)

        return self.outcome


def select_profile(profiles, page_size=DEFAULT_PAGE_SIZE, console=None):
    """
    Let the user pick one of profiles interactively.

    Args:
        profiles: list[Profile] in display order
        page_size: Maximum number of profile rows shown at once
        console: rich Console to draw on (defaults to stderr)

    Returns:
        SessionOutcome

    Raises:
        TerminalError: if stdin/stderr is not an interactive terminal
    """
    if console is None:
        console = Console(stderr=True, highlight=False)

    renderer = InlineRenderer(console, page_size=page_size)
    key_reader = KeyReader()
    selector = ProfileSelector(candidates_from_profiles(profiles), renderer, key_reader)
    key_reader.resize_listener = selector.handle_resize
    with terminal_session(renderer, key_reader):
        return selector.run()
