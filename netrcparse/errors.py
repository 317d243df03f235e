"""Result codes, parse error kinds and their human-readable forms."""

from dataclasses import dataclass
from enum import IntEnum
import errno


class AuthinfoResult(IntEnum):
    """Outcome of locating or reading an authinfo file."""
    OK = 0
    EACCESS = 1
    ENOENT = 2
    ENOMEM = 3
    TOOBIG = 4
    EUNKNOWN = 5


class ParseErrorKind(IntEnum):
    """Kinds of malformed constructs reported by the parser."""
    MISSING_HOST = 0
    MISSING_VALUE = 1
    VALUE_TOO_LONG = 2
    BAD_VALUE = 3
    BAD_KEYWORD = 4
    DUPLICATED_KEYWORD = 5


_RESULT_MESSAGES = {
    AuthinfoResult.OK: "Success",
    AuthinfoResult.EACCESS: "Permission denied",
    AuthinfoResult.ENOENT: "File or directory not found",
    AuthinfoResult.ENOMEM: "Could not allocate memory",
    AuthinfoResult.TOOBIG: "Authinfo file is too big",
    AuthinfoResult.EUNKNOWN: "Unknown error happened",
}

_PARSE_ERROR_MESSAGES = {
    ParseErrorKind.MISSING_HOST: "Host not specified",
    ParseErrorKind.MISSING_VALUE: "Expected a value",
    ParseErrorKind.VALUE_TOO_LONG: "Value is too long",
    ParseErrorKind.BAD_VALUE: "Invalid value",
    ParseErrorKind.BAD_KEYWORD: "Unknown keyword used",
    ParseErrorKind.DUPLICATED_KEYWORD: "Duplicate or synonymous keyword",
}


def strerror(result) -> str:
    """Describe a discovery/read result code.

    Anything that is not a known result code yields a generic message
    instead of raising.
    """
    try:
        return _RESULT_MESSAGES[AuthinfoResult(result)]
    except (ValueError, TypeError):
        return "Got unexpected status code"


def parse_strerror(kind) -> str:
    """Describe a parse error kind, or return "Unknown"."""
    try:
        return _PARSE_ERROR_MESSAGES[ParseErrorKind(kind)]
    except (ValueError, TypeError):
        return "Unknown"


def result_from_errno(errnum: int | None) -> AuthinfoResult:
    """Map an OS errno value onto an AuthinfoResult."""
    if errnum == errno.EACCES:
        return AuthinfoResult.EACCESS
    if errnum in (errno.ENOENT, errno.ENOTDIR, errno.ELOOP):
        return AuthinfoResult.ENOENT
    if errnum == errno.ENOMEM:
        return AuthinfoResult.ENOMEM
    return AuthinfoResult.EUNKNOWN


@dataclass(frozen=True)
class ParseError:
    """A syntax error at a given position."""
    kind: ParseErrorKind
    line: int
    column: int

    def __str__(self):
        return f"{self.line}:{self.column}: {parse_strerror(self.kind)}"


class AuthinfoError(Exception):
    """Locating or reading an authinfo file failed."""

    def __init__(self, result: AuthinfoResult, path=None):
        self.result = result
        self.path = path
        message = strerror(result)
        if path is not None:
            message = f"{message}: {path}"
        super().__init__(message)


class AuthinfoSyntaxError(Exception):
    """Raised by strict collection on the first syntax error."""

    def __init__(self, error: ParseError, path=None):
        self.error = error
        self.path = path
        prefix = f"{path}:" if path is not None else ""
        super().__init__(f"{prefix}{error}")
