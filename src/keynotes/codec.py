"""Encodes and decodes the individual lines of a keynotes file.

A file is a sequence of section header lines, each followed by the entry lines that belong to it::

    <SectionName>
    \t<key>value<~>
    \t<otherkey>other value<~>
    <AnotherSection>

There is no escaping, so keys may not contain ``>`` and values may not contain ``<~>``. Neither may contain
line breaks. :func:`encode_entry` raises :exc:`keynotes.errors.FormatError` rather than writing a line that
would not decode back to the same pair.
"""

from typing import Optional, Tuple

from keynotes.errors import FormatError

ENTRY_PREFIX = '\t<'
KEY_END = '>'
ENTRY_END = '<~>'
HEADER_START = '<'
HEADER_END = '>'

_LINE_BREAKS = ('\n', '\r')


def _strip_newline(line: str) -> str:
    if line.endswith('\r\n'):
        return line[:-2]
    if line.endswith('\n'):
        return line[:-1]
    return line


def _encodable(text: str) -> bool:
    try:
        text.encode('utf-8')
    except UnicodeEncodeError:
        return False
    return True


def ensure_newline(line: str) -> str:
    """Returns the line with a trailing newline, adding one if it is missing."""
    return line if line.endswith('\n') else f'{line}\n'


def is_valid_section_name(name: str) -> bool:
    """Section names must be non-empty and consist only of alphabetic characters."""
    return bool(name) and name.isalpha()


def encode_header(name: str) -> str:
    return f'{HEADER_START}{name}{HEADER_END}\n'


def decode_header(line: str) -> Optional[str]:
    """Returns the section name if the line is a section header, or None if it is not.

    A header starts with ``<``, contains ``>``, and contains no tab characters. The tab check is what keeps
    entry lines (which always start with a tab, and also contain ``<`` and ``>``) from being mistaken for headers.
    """
    if not line.startswith(HEADER_START) or HEADER_END not in line or '\t' in line:
        return None
    line = _strip_newline(line)
    return line[len(HEADER_START):line.index(HEADER_END)]


def validate_entry(key: str, value: str) -> None:
    """Raises :exc:`FormatError` if the pair cannot be written as an entry line and read back unchanged."""
    # undecodable command-line bytes arrive as lone surrogates, which UTF-8 cannot encode
    if not _encodable(key):
        raise FormatError(f'key {key!r} is not valid UTF-8 text')
    if not _encodable(value):
        raise FormatError(f'value for key {key!r} is not valid UTF-8 text')
    if KEY_END in key:
        raise FormatError(f"key '{key}' must not contain '{KEY_END}'")
    if ENTRY_END in value:
        raise FormatError(f"value for key '{key}' must not contain '{ENTRY_END}'")
    if any(c in key for c in _LINE_BREAKS):
        raise FormatError(f'key {key!r} must not contain line breaks')
    if any(c in value for c in _LINE_BREAKS):
        raise FormatError(f"value for key '{key}' must not contain line breaks")


def encode_entry(key: str, value: str) -> str:
    validate_entry(key, value)
    return f'{ENTRY_PREFIX}{key}{KEY_END}{value}{ENTRY_END}\n'


def decode_entry(line: str) -> Optional[Tuple[str, str]]:
    """Returns the (key, value) pair if the line is an entry, or None if it is not.

    An entry starts with a tab and contains ``>``. The key runs from the character after ``\\t<`` up to the
    first ``>``, and the value from there up to the ``<~>`` terminator.
    """
    if not line.startswith('\t') or KEY_END not in line:
        return None
    line = _strip_newline(line)
    i = line.index(KEY_END)
    key = line[len(ENTRY_PREFIX):i]
    value = line[i + 1:]
    if value.endswith(ENTRY_END):
        value = value[:-len(ENTRY_END)]
    return key, value
