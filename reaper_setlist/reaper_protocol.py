"""Wire details of Reaper's web control interface.

Reaper answers every request with a short plain-text body whose shape depends
on the request. The helpers here build request URLs and turn those bodies
into Python values; nothing in this module performs I/O.
"""
import math
import re
from urllib.parse import quote

SECTION = 'WebAppControl'

GO_TO_START = '40042'
GO_TO_END = '40043'
NEW_TAB = '40859'
GET_TRANSPORT = 'TRANSPORT'

PROJECT_ROOT_FOLDER = 'project_root_folder'
PROJECT_FILE_LIST = 'project_file_list'
TEMP_LOAD_PROJECT_PATH = 'temp_load_project_path'
TEST_NONCE_IN = 'test_nonce_in'
TEST_NONCE_OUT = 'test_nonce_out'
DUMMY_MODE = 'dummy_mode'

PATH_SEPARATORS = '/\\'


class ReaperError(Exception):
    """Base class for everything that can go wrong talking to Reaper."""


class HttpError(ReaperError):
    pass


class CommandError(ReaperError):
    pass


class ParseError(ReaperError):
    pass


class ConfigError(ReaperError):
    pass


class NonceMismatch(ReaperError):
    pass


def _segment(value):
    return quote(str(value), safe='')


def command_url(base_url, code):
    return f"{base_url.rstrip('/')}/_/{_segment(code)}"


def set_ext_state_url(base_url, section, key, value):
    return (f"{base_url.rstrip('/')}/_/SET/EXTSTATEPERSIST/"
            f"{_segment(section)}/{_segment(key)}/{_segment(value)}")


def get_ext_state_url(base_url, section, key):
    return f"{base_url.rstrip('/')}/_/GET/EXTSTATE/{_segment(section)}/{_segment(key)}"


class ExtStateReply:
    VALUE = 'value'
    EMPTY = 'empty'
    UNRECOGNIZED = 'unrecognized'

    def __init__(self, kind, value=None):
        self.kind = kind
        self.value = value

    @classmethod
    def of(cls, value):
        return cls(cls.VALUE, value) if value else cls(cls.EMPTY, '')

    def as_optional(self):
        """'' for an empty entry, None when the body said nothing usable."""
        if self.kind == self.UNRECOGNIZED:
            return None
        return self.value

    def __eq__(self, other):
        return isinstance(other, ExtStateReply) and (self.kind, self.value) == (other.kind, other.value)

    def __repr__(self):
        return f"ExtStateReply({self.kind!r}, {self.value!r})"


_ESCAPES = {'t': '\t', 'n': '\n', '\\': '\\'}
_ESCAPE_RE = re.compile(r'\\([tn\\])')


def unescape_ext_value(value):
    """Undoes the \\t, \\n and \\\\ escaping Reaper applies to EXTSTATE values."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(1)], value)


def _first_line(body):
    for line in (body or '').splitlines():
        if line.strip():
            return line.rstrip('\r\n')
    return ''


def parse_ext_state(body):
    """Parses a GET/EXTSTATE reply.

    Reaper answers ``EXTSTATE\\t<section>\\t<key>\\t<value>`` for a stored
    value and a bare ``VALUE`` line when the key exists but is empty. Anything
    else, including an empty body, is unrecognized rather than an error.
    """
    line = _first_line(body)
    if line.startswith('EXTSTATE\t'):
        parts = line.split('\t', 3)
        if len(parts) == 4:
            return ExtStateReply.of(unescape_ext_value(parts[3]))
        if len(parts) == 3:
            return ExtStateReply.of('')
    elif line == 'VALUE':
        return ExtStateReply.of('')
    elif line.startswith('VALUE\t'):
        return ExtStateReply.of(unescape_ext_value(line.split('\t', 1)[1]))
    return ExtStateReply(ExtStateReply.UNRECOGNIZED)


def parse_transport_seconds(body):
    """Returns the play position in seconds from a TRANSPORT status line."""
    line = _first_line(body)
    parts = line.split('\t')
    if len(parts) < 3:
        raise ParseError(f"Transport string format unexpected: {line!r}")
    try:
        seconds = float(parts[2])
    except ValueError as e:
        raise ParseError(f"Failed to parse transport seconds: {parts[2]!r}") from e
    if not math.isfinite(seconds) or seconds < 0:
        raise ParseError(f"Transport seconds out of range: {parts[2]!r}")
    return seconds


def strip_root_prefix(entry, root_folder):
    if not root_folder:
        return entry
    root = root_folder.rstrip(PATH_SEPARATORS)
    if not entry.startswith(root):
        return entry
    rest = entry[len(root):]
    if rest and rest[0] not in PATH_SEPARATORS:
        # A sibling folder sharing the root's name as a prefix.
        return entry
    return rest.lstrip(PATH_SEPARATORS)


def parse_project_list(value, root_folder=''):
    if not value:
        return []
    if value.startswith('ERROR'):
        raise CommandError(f"Reaper script error: {value}")
    return [strip_root_prefix(entry.strip(), root_folder)
            for entry in value.split(',') if entry.strip()]
