"""netrcparse - parse .authinfo / .netrc credential files."""

from .authinfo import find_credential, find_file, load, parse_authinfo, read_file
from .errors import (
    AuthinfoError,
    AuthinfoResult,
    AuthinfoSyntaxError,
    ParseError,
    ParseErrorKind,
    parse_strerror,
    strerror,
)
from .parser import Record, collect, parse

__all__ = [
    "AuthinfoError",
    "AuthinfoResult",
    "AuthinfoSyntaxError",
    "ParseError",
    "ParseErrorKind",
    "Record",
    "collect",
    "find_credential",
    "find_file",
    "load",
    "parse",
    "parse_authinfo",
    "parse_strerror",
    "read_file",
    "strerror",
]
