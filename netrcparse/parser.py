"""Event-driven parser for .authinfo / .netrc credential files.

Format: whitespace separated keyword/value pairs, one entry per line.

    machine <host> login <user> password <pass> port <protocol> force yes
    default login <user> password <pass>

Lines starting with # are comments. A line starting with `macdef` opens a
macro definition whose body runs up to the next empty line and is skipped
without being looked at.

The parser never raises on malformed input. Every record and every error is
handed to a caller-supplied callback; a callback returning a true value
stops parsing right away.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable
import logging
import re

from .errors import ParseError, ParseErrorKind

logger = logging.getLogger(__name__)

# Token buffer size including the terminator: values are at most 127 bytes.
TOKEN_SIZE_MAX = 128

_SPACES = re.compile(r"[ \t]*")
# TODO: quoted tokens ("my secret") are split on whitespace like any other.
_TOKEN = re.compile(r"[^ \t\n]*")


class ParseState(Enum):
    LINE_START = auto()
    WAITING_NEXT_PAIR = auto()
    WAITING_HOST = auto()
    WAITING_PROTOCOL = auto()
    WAITING_USER = auto()
    WAITING_PASSWORD = auto()
    WAITING_FORCE = auto()
    LINE_END = auto()


_KEYWORD_STATES = {
    "machine": ParseState.WAITING_HOST,
    "host": ParseState.WAITING_HOST,
    "login": ParseState.WAITING_USER,
    "user": ParseState.WAITING_USER,
    "account": ParseState.WAITING_USER,
    "password": ParseState.WAITING_PASSWORD,
    "force": ParseState.WAITING_FORCE,
    "port": ParseState.WAITING_PROTOCOL,
    "protocol": ParseState.WAITING_PROTOCOL,
}

_STATE_FIELDS = {
    ParseState.WAITING_HOST: "host",
    ParseState.WAITING_PROTOCOL: "protocol",
    ParseState.WAITING_USER: "user",
    ParseState.WAITING_PASSWORD: "password",
}


@dataclass
class Record:
    """One credential entry.

    `host` is None when no host was given and "" for the `default` entry,
    which matches any host not matched by another entry.
    """
    host: str | None = None
    protocol: str | None = None
    user: str | None = None
    password: str | None = field(default=None, repr=False)
    force: bool = False

    @property
    def is_default(self) -> bool:
        return self.host == ""


RecordHandler = Callable[[Record], bool | None]
ErrorHandler = Callable[[ParseErrorKind, int, int], bool | None]


def _byte_size(text: str) -> int:
    """Size of text in bytes of the underlying file.

    Escaped surrogates left by undecodable input bytes count as the single
    byte they stand for. Any other surrogate counts as its UTF-8 form.
    """
    if text.isascii():
        return len(text)
    return sum(
        1 if 0xDC80 <= ord(ch) <= 0xDCFF else len(ch.encode("utf-8", "surrogatepass"))
        for ch in text
    )


class _Session:
    """State of a single parse: cursor, position, state and pending record."""

    def __init__(self, text: str, on_record: RecordHandler, on_error: ErrorHandler):
        self.text = text
        self.on_record = on_record
        self.on_error = on_error
        self.pos = 0
        self.line = 1
        self.column = 0
        self.state = ParseState.LINE_START
        self.record = Record()

    # Position tracking

    def skip_spaces(self) -> None:
        end = _SPACES.match(self.text, self.pos).end()
        self.column += end - self.pos
        self.pos = end

    def at_eol(self) -> bool:
        return self.pos >= len(self.text) or self.text[self.pos] == "\n"

    def at_eof(self) -> bool:
        return self.pos >= len(self.text)

    def skip_line(self) -> None:
        newline = self.text.find("\n", self.pos)
        self.pos = len(self.text) if newline == -1 else newline + 1
        self.line += 1
        self.column = 0

    # Tokenizing

    def scan_token(self) -> tuple[str, int]:
        """Return the token at the cursor and where it ends, without moving."""
        match = _TOKEN.match(self.text, self.pos)
        return match.group(), match.end()

    def next_token(self) -> str | None:
        """Consume the token at the cursor.

        Returns None when the token does not fit in TOKEN_SIZE_MAX. The
        cursor is moved past the token either way.
        """
        token, end = self.scan_token()
        size = _byte_size(token)
        self.column += size
        self.pos = end
        if size >= TOKEN_SIZE_MAX:
            logger.debug("Token of %d bytes at %d:%d is too long",
                         size, self.line, self.column)
            return None
        return token

    # Line structure

    def skip_comment(self) -> bool:
        if self.text.startswith("#", self.pos):
            logger.debug("Skipping comment at line %d", self.line)
            self.skip_line()
            return True
        return False

    def skip_macdef(self) -> bool:
        token, end = self.scan_token()
        if token != "macdef":
            return False

        start_line = self.line
        self.column += end - self.pos
        self.pos = end

        # The body ends at a line whose very first character is a newline.
        # A line holding only spaces does not count.
        while True:
            self.skip_line()
            if self.at_eof() or self.text[self.pos] == "\n":
                break

        logger.debug("Skipped macdef on lines %d-%d", start_line, self.line)
        return True

    # Reporting

    def report_error(self, kind: ParseErrorKind, column: int) -> bool:
        stop = bool(self.on_error(kind, self.line, column))
        logger.debug("Reported an error: %s => %s",
                     ParseError(kind, self.line, column),
                     "stopping" if stop else "continuing")
        return stop

    def report_record(self) -> bool:
        if self.record.host is None:
            return self.report_error(ParseErrorKind.MISSING_HOST, 0)

        stop = bool(self.on_record(self.record))
        logger.debug("Reported an entry: %r => %s", self.record,
                     "stopping" if stop else "continuing")
        return stop

    # State machine

    def run(self) -> None:
        while True:
            self.skip_spaces()
            token_column = self.column
            logger.debug("State %s at %d:%d", self.state.name, self.line, self.column)

            if self.at_eol():
                if self.state is ParseState.LINE_START:
                    if self.at_eof():
                        logger.debug("Reached end of input at line %d", self.line)
                        return
                    self.skip_line()
                    continue

                waiting_value = self.state is not ParseState.WAITING_NEXT_PAIR
                self.state = ParseState.LINE_END
                if waiting_value and self.report_error(
                    ParseErrorKind.MISSING_VALUE, token_column
                ):
                    return

            if self.step(token_column):
                return

    def step(self, token_column: int) -> bool:
        """Run one state and return True if a callback asked to stop."""
        if self.state is ParseState.LINE_START:
            self.record = Record()
            if not (self.skip_comment() or self.skip_macdef()):
                self.state = ParseState.WAITING_NEXT_PAIR
            return False

        if self.state is ParseState.LINE_END:
            stop = self.report_record()
            self.skip_line()
            self.state = ParseState.LINE_START
            return stop

        if self.state is ParseState.WAITING_NEXT_PAIR:
            return self.read_keyword(token_column)

        return self.read_value(token_column)

    def read_keyword(self, token_column: int) -> bool:
        keyword = self.next_token()
        logger.debug("Read keyword %r", keyword)

        if keyword == "default":
            duplicate = self.record.host is not None
            if not duplicate:
                self.record.host = ""
        elif keyword in _KEYWORD_STATES:
            self.state = _KEYWORD_STATES[keyword]
            if self.state is ParseState.WAITING_FORCE:
                duplicate = self.record.force
            else:
                duplicate = getattr(self.record, _STATE_FIELDS[self.state]) is not None
        else:
            return self.report_error(ParseErrorKind.BAD_KEYWORD, token_column)

        if duplicate:
            return self.report_error(ParseErrorKind.DUPLICATED_KEYWORD, token_column)
        return False

    def read_value(self, token_column: int) -> bool:
        state = self.state
        self.state = ParseState.WAITING_NEXT_PAIR

        value = self.next_token()
        if value is None:
            return self.report_error(ParseErrorKind.VALUE_TOO_LONG, token_column)

        if state is ParseState.WAITING_FORCE:
            if value != "yes":
                return self.report_error(ParseErrorKind.BAD_VALUE, token_column)
            self.record.force = True
            return False

        name = _STATE_FIELDS[state]
        if getattr(self.record, name) is None:
            setattr(self.record, name, value)
        return False


def parse(text: str | bytes, on_record: RecordHandler, on_error: ErrorHandler) -> None:
    """Parse authinfo text, reporting records and errors as they are found.

    Args:
        text: File contents. Bytes are decoded as UTF-8, keeping undecodable
            bytes as surrogates so that byte counts are preserved.
        on_record: Called with each Record that has a host, in file order.
        on_error: Called with (kind, line, column) for each malformed
            construct. Lines are 1-based, columns 0-based and counted in bytes.

    Either callback may return True to stop parsing immediately.
    """
    if isinstance(text, bytes):
        text = text.decode("utf-8", "surrogateescape")
    _Session(text, on_record, on_error).run()


def collect(text: str | bytes, stop_on_error: bool = False) -> tuple[list[Record], list[ParseError]]:
    """Parse text and return all records and errors.

    With stop_on_error, parsing ends at the first error.
    """
    records: list[Record] = []
    errors: list[ParseError] = []

    def on_record(record: Record) -> bool:
        records.append(record)
        return False

    def on_error(kind: ParseErrorKind, line: int, column: int) -> bool:
        errors.append(ParseError(kind, line, column))
        return stop_on_error

    parse(text, on_record, on_error)
    return records, errors
