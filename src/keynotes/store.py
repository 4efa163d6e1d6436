"""Provides :class:`KeynoteFile`, which keeps a keynotes data file and its in-memory representation in sync."""

from collections import namedtuple
import logging
import os
import os.path
import shutil
from tempfile import mkstemp
from typing import Callable, Dict, Iterable, Iterator, Optional, Tuple

from keynotes.codec import decode_entry, decode_header, encode_entry, encode_header, ensure_newline,\
    is_valid_section_name, validate_entry
from keynotes.errors import CorruptedFormatError, DuplicateKeyError, DuplicateSectionError, Error, FormatError,\
    InvalidNameError, KeyNotFoundError, SectionNotFoundError, StorageError
from keynotes.models import Section

logger = logging.getLogger('keynotes.store')

TEMP_PREFIX = '.kntemp-'

ScanLine = namedtuple('ScanLine', ['number', 'text', 'section', 'header', 'entry'])
"""One line of a data file, along with the name of the section it falls under (None before the first header).

``header`` is the decoded section name if the line is a header, and ``entry`` is the decoded (key, value) pair if
it is an entry; a line that is neither has both set to None.
"""


def scan(lines: Iterable[str]) -> Iterator[ScanLine]:
    """Classifies each line and tracks which section it belongs to."""
    section = None
    for number, text in enumerate(lines, start=1):
        header = decode_header(text)
        entry = None
        if header is not None:
            section = header
        else:
            entry = decode_entry(text)
        yield ScanLine(number, text, section, header, entry)


class KeynoteFile:
    """A data file holding sections of key-value entries.

    The instance reads the whole file into :attr:`sections` on :meth:`load`. Every method that reads or changes
    data calls :meth:`load` first if it has not been called yet. Afterward the instance assumes it is the only
    writer; changes made to the file by something else are not noticed until :meth:`load` is called again.

    Each change is written to disk before the method returns. Adding a section appends a header line; the other
    changes rewrite the whole file into a temporary file in the same directory and then move it over the
    original with :func:`os.replace`, so the data file is never missing or half-written. If writing fails, the
    in-memory data is left as it was before the call.

    .. attribute:: path
       :type: str

    .. attribute:: sections
       :type: Dict[str, keynotes.models.Section]
    """
    def __init__(self, path: str):
        self.path = path
        self.sections: Dict[str, Section] = {}
        self._loaded = False

    def load(self) -> None:
        """Replaces :attr:`sections` with the current contents of the file.

        The file (and its directory) will be created if it does not exist. Lines that are neither section headers
        nor entries are ignored.

        Raises :exc:`CorruptedFormatError` if an entry appears before any section header, in which case
        :attr:`sections` is not changed. Raises :exc:`StorageError` if the file cannot be opened or read.
        """
        sections = {}
        try:
            self._create()
            with open(self.path, 'r', encoding='utf-8') as file:
                for line in scan(file):
                    if line.header is not None:
                        sections[line.header] = Section(line.header)
                    elif line.entry is not None:
                        if line.section is None:
                            raise CorruptedFormatError('entry found before any section header',
                                                       self.path, line.number)
                        sections[line.section].add_entry(*line.entry)
        except UnicodeDecodeError as e:
            raise CorruptedFormatError('data file is not valid UTF-8', self.path) from e
        except OSError as e:
            raise StorageError(f'unable to read data file {self.path}', self.path, e) from e
        self.sections = sections
        self._loaded = True
        logger.debug('loaded %d sections from %s', len(sections), self.path)

    def add_section(self, name: str) -> None:
        """Creates a new, empty section at the end of the file.

        Raises :exc:`InvalidNameError` unless the name is non-empty and entirely alphabetic, and
        :exc:`DuplicateSectionError` if the section already exists.
        """
        if not is_valid_section_name(name):
            raise InvalidNameError(name)
        self._ensure_loaded()
        if name in self.sections:
            raise DuplicateSectionError(name)
        self.sections[name] = Section(name)
        try:
            self._append(encode_header(name))
        except Error:
            del self.sections[name]
            raise
        logger.debug('added section %s to %s', name, self.path)

    def add_entry(self, section_name: str, key: str, value: str) -> None:
        """Adds the pair to the named section.

        Keys are unique across the whole file, not just within a section.

        Raises :exc:`FormatError` if the key or value contains characters the file format cannot hold,
        :exc:`DuplicateKeyError` if the key exists in any section, and :exc:`SectionNotFoundError` if there is
        no such section.
        """
        validate_entry(key, value)
        self._ensure_loaded()
        owner = self._section_containing(key)
        if owner is not None:
            raise DuplicateKeyError(key, owner.name)
        section = self.sections.get(section_name)
        if section is None:
            raise SectionNotFoundError(section_name)

        entry_line = encode_entry(key, value)
        section.add_entry(key, value)

        def insert(lines: Iterator[ScanLine]) -> Iterator[str]:
            found = False
            for line in lines:
                yield ensure_newline(line.text)
                if line.header == section_name:
                    found = True
                    yield entry_line
            if not found:
                raise CorruptedFormatError(f"section '{section_name}' is missing from the data file", self.path)

        try:
            self._rewrite(insert)
        except Error:
            section.remove_entry(key)
            raise
        logger.debug('added key %s to section %s in %s', key, section_name, self.path)

    def remove_entry(self, key: str) -> None:
        """Deletes the entry with the given key, whichever section it is in.

        Raises :exc:`KeyNotFoundError` if no section contains the key.
        """
        self._ensure_loaded()
        section = self._section_containing(key)
        if section is None:
            raise KeyNotFoundError(key)

        def omit(lines: Iterator[ScanLine]) -> Iterator[str]:
            for line in lines:
                if line.entry is not None and line.entry[0] == key:
                    continue
                yield ensure_newline(line.text)

        self._rewrite(omit)
        section.remove_entry(key)
        logger.debug('removed key %s from section %s in %s', key, section.name, self.path)

    def remove_section(self, name: str) -> None:
        """Deletes the section and every entry in it.

        Raises :exc:`SectionNotFoundError` if there is no such section.
        """
        self._ensure_loaded()
        if name not in self.sections:
            raise SectionNotFoundError(name)

        def omit(lines: Iterator[ScanLine]) -> Iterator[str]:
            for line in lines:
                if line.section == name:
                    continue
                yield ensure_newline(line.text)

        self._rewrite(omit)
        del self.sections[name]
        logger.debug('removed section %s from %s', name, self.path)

    def get_sections(self) -> Dict[str, Section]:
        self._ensure_loaded()
        return self.sections

    def get_section(self, name: str) -> Optional[Section]:
        self._ensure_loaded()
        return self.sections.get(name)

    def get_value(self, key: str) -> Optional[str]:
        """Returns the value stored under the key in any section, or None."""
        self._ensure_loaded()
        section = self._section_containing(key)
        return section.entries[key] if section else None

    def contains_key(self, key: str) -> bool:
        self._ensure_loaded()
        return self._section_containing(key) is not None

    def keys(self) -> Iterator[Tuple[str, str]]:
        """Yields a (section name, key) pair for every entry in the file."""
        self._ensure_loaded()
        for section in self.sections.values():
            for key in section.entries:
                yield section.name, key

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def _section_containing(self, key: str) -> Optional[Section]:
        for section in self.sections.values():
            if key in section.entries:
                return section
        return None

    def _create(self) -> None:
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(self.path, 'a', encoding='utf-8'):
            pass

    def _needs_separator(self) -> bool:
        if not os.path.exists(self.path) or os.path.getsize(self.path) == 0:
            return False
        with open(self.path, 'rb') as file:
            file.seek(-1, os.SEEK_END)
            return file.read(1) != b'\n'

    def _append(self, text: str) -> None:
        try:
            if self._needs_separator():
                text = '\n' + text
            with open(self.path, 'a', encoding='utf-8') as file:
                file.write(text)
                file.flush()
                os.fsync(file.fileno())
        except OSError as e:
            raise StorageError(f'unable to write to data file {self.path}', self.path, e) from e

    def _rewrite(self, transform: Callable[[Iterator[ScanLine]], Iterator[str]]) -> None:
        """Writes transform's output to a temporary file, then moves it over the data file.

        transform receives the scanned lines of the current file. If it raises, or if any IO fails, the
        temporary file is deleted and the data file is left untouched.
        """
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        replaced = False
        try:
            with open(self.path, 'r', encoding='utf-8') as original:
                fd, tmp_path = mkstemp(prefix=TEMP_PREFIX, suffix='.dat', dir=directory)
                with os.fdopen(fd, 'w', encoding='utf-8') as tmp:
                    for text in transform(scan(original)):
                        tmp.write(text)
                    tmp.flush()
                    os.fsync(tmp.fileno())
            shutil.copymode(self.path, tmp_path)
            os.replace(tmp_path, self.path)
            replaced = True
            logger.debug('rewrote %s', self.path)
        except UnicodeDecodeError as e:
            raise CorruptedFormatError('data file is not valid UTF-8', self.path) from e
        except UnicodeEncodeError as e:
            raise FormatError('new contents are not valid UTF-8 text') from e
        except OSError as e:
            raise StorageError(f'unable to rewrite data file {self.path}', self.path, e) from e
        finally:
            if tmp_path and not replaced:
                self._discard(tmp_path)
        if replaced:
            self._sync_directory(directory)

    @staticmethod
    def _discard(tmp_path: str) -> None:
        try:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        except OSError:
            logger.warning('unable to delete temporary file %s', tmp_path, exc_info=True)

    @staticmethod
    def _sync_directory(directory: str) -> None:
        """Flushes the directory entry so the rename itself survives a crash. Only possible on POSIX."""
        if os.name != 'posix':
            return
        try:
            fd = os.open(directory, os.O_RDONLY)
            try:
                os.fsync(fd)
            finally:
                os.close(fd)
        except OSError:
            # the data file is already replaced at this point
            logger.warning('unable to sync directory %s', directory, exc_info=True)
