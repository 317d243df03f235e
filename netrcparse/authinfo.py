"""Locate, read and query .authinfo / .netrc files."""

from pathlib import Path
import logging
import os

from .errors import (
    AuthinfoError,
    AuthinfoResult,
    AuthinfoSyntaxError,
    ParseError,
    ParseErrorKind,
    result_from_errno,
    strerror,
)
from .parser import Record, parse

logger = logging.getLogger(__name__)

SYSCONF_DIR = "/etc"
DEFAULT_BUFFER_SIZE = 64 * 1024

# Searched in this order: dotted names under $HOME, then plain names under
# the system configuration directory.
HOME_NAMES = (".authinfo", ".netrc")
SYSCONF_NAMES = ("authinfo", "netrc")


def _error_result(e: BaseException) -> AuthinfoResult:
    if isinstance(e, MemoryError):
        return AuthinfoResult.ENOMEM
    return result_from_errno(getattr(e, "errno", None))


def probe_path(path: Path) -> AuthinfoResult:
    """Check that path exists and is readable."""
    try:
        path.stat()
    except OSError as e:
        return result_from_errno(e.errno)

    if not os.access(path, os.R_OK):
        return AuthinfoResult.EACCESS
    return AuthinfoResult.OK


def find_file(home: Path | str | None = None, sysconf_dir: Path | str | None = None) -> Path:
    """Find the first readable authinfo file.

    Tries ~/.authinfo, ~/.netrc, <sysconf>/authinfo and <sysconf>/netrc.
    Only "not found" moves on to the next candidate; any other failure,
    such as a file that exists but cannot be read, ends the search.

    Args:
        home: Home directory. Defaults to $HOME; skipped if unset.
        sysconf_dir: System configuration directory. Defaults to
            $AUTHINFO_SYSCONF_DIR or /etc.

    Raises:
        AuthinfoError: ENOENT if no candidate exists, or the first other
            failure encountered.
    """
    if home is None:
        home = os.environ.get("HOME")
    if sysconf_dir is None:
        sysconf_dir = os.environ.get("AUTHINFO_SYSCONF_DIR", SYSCONF_DIR)

    candidates = []
    if home:
        candidates.extend(Path(home) / name for name in HOME_NAMES)
    candidates.extend(Path(sysconf_dir) / name for name in SYSCONF_NAMES)

    for path in candidates:
        result = probe_path(path)
        logger.debug("Probed %s: %s", path, strerror(result))
        if result == AuthinfoResult.OK:
            return path
        if result != AuthinfoResult.ENOENT:
            raise AuthinfoError(result, path)

    raise AuthinfoError(AuthinfoResult.ENOENT)


def read_file(path: Path | str, size: int = DEFAULT_BUFFER_SIZE) -> str:
    """Read a whole authinfo file.

    The file must fit in a buffer of `size` bytes that also holds a
    terminator, so at most size - 1 bytes are accepted.

    Raises:
        AuthinfoError: TOOBIG if the file does not fit, or the mapped OS
            error if it cannot be opened or read.
    """
    try:
        with open(path, "rb") as f:
            data = f.read(size)
    except (OSError, MemoryError) as e:
        logger.debug("Could not read authinfo file %s: %s", path, e)
        raise AuthinfoError(_error_result(e), path) from e

    if len(data) >= size:
        raise AuthinfoError(AuthinfoResult.TOOBIG, path)

    return data.decode("utf-8", "surrogateescape")


def resolve_path(path: Path | None = None) -> Path:
    """Use path if given, else $AUTHINFO_FILE, else search with find_file."""
    if path is not None:
        return path
    if env_path := os.environ.get("AUTHINFO_FILE"):
        return Path(env_path).expanduser()
    return find_file()


def load(path: Path | None = None, size: int = DEFAULT_BUFFER_SIZE) -> str:
    """Resolve and read the authinfo file."""
    return read_file(resolve_path(path), size)


def parse_authinfo(
    path: Path | None = None, strict: bool = False, size: int = DEFAULT_BUFFER_SIZE
) -> list[Record]:
    """Parse an authinfo file into a list of records.

    In lenient mode every syntax error is logged and skipped. In strict mode
    the first syntax error raises AuthinfoSyntaxError.
    """
    path = resolve_path(path)
    text = read_file(path, size)
    records = []

    def on_record(record: Record) -> bool:
        records.append(record)
        return False

    def on_error(kind: ParseErrorKind, line: int, column: int) -> bool:
        error = ParseError(kind, line, column)
        if strict:
            raise AuthinfoSyntaxError(error, path)
        logger.warning("%s:%s", path, error)
        return False

    parse(text, on_record, on_error)
    return records


def _matches(record: Record, user: str | None, protocol: str | None) -> bool:
    if user is not None and record.user is not None and record.user != user:
        return False
    if protocol is not None and record.protocol is not None and record.protocol != protocol:
        return False
    return True


def find_credential(
    host: str,
    user: str | None = None,
    protocol: str | None = None,
    path: Path | None = None,
    size: int = DEFAULT_BUFFER_SIZE,
) -> Record | None:
    """Find the credential for a host.

    An entry naming the host wins over the default entry, regardless of
    order. Among candidates of the same kind the first one in the file is
    used. A field missing from an entry matches any requested value.

    Args:
        host: Host to look up
        user: Only consider entries for this user (or without a user)
        protocol: Only consider entries for this port/protocol (or without one)
        path: Path to the authinfo file. Defaults to $AUTHINFO_FILE or the
            first file found by find_file.
        size: Largest accepted file size, as for read_file

    Returns:
        Record if found, None otherwise
    """
    fallback = None

    for record in parse_authinfo(path, size=size):
        if not _matches(record, user, protocol):
            continue
        if record.host == host:
            return record
        if record.is_default and fallback is None:
            fallback = record

    return fallback
