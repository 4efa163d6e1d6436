"""Exceptions raised by the keynotes library.

Everything derives from :class:`Error`, so callers that only want to report a problem can catch that.
:class:`CorruptedFormatError`, :class:`StorageError` and :class:`ConfigError` indicate the operation could not
be completed at all; the rest are expected conditions caused by the caller's input.
"""


class Error(Exception):
    """Base class for all keynotes errors."""
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidNameError(Error):
    """Raised when a section name is empty or contains non-alphabetic characters."""
    def __init__(self, name: str):
        super().__init__(f'{name!r} is not a valid section name')
        self.name = name


class DuplicateSectionError(Error):
    def __init__(self, name: str):
        super().__init__(f"section named '{name}' already exists")
        self.name = name


class SectionNotFoundError(Error):
    def __init__(self, name: str):
        super().__init__(f"section '{name}' does not exist")
        self.name = name


class DuplicateKeyError(Error):
    """Raised when adding a key that already exists anywhere in the file.

    :attr:`section` is the section that already holds the key.
    """
    def __init__(self, key: str, section: str):
        super().__init__(f"key '{key}' already exists in section '{section}'")
        self.key = key
        self.section = section


class KeyNotFoundError(Error):
    def __init__(self, key: str):
        super().__init__(f"key '{key}' does not exist")
        self.key = key


class FormatError(Error):
    """Raised when a key or value cannot be represented in the keynotes file format."""


class CorruptedFormatError(Error):
    """Raised when the data file cannot be interpreted, e.g. an entry appears before any section header."""
    def __init__(self, message: str, path: str, line_number: int = None):
        if line_number is not None:
            message = f'{message} ({path}, line {line_number})'
        else:
            message = f'{message} ({path})'
        super().__init__(message)
        self.path = path
        self.line_number = line_number


class StorageError(Error):
    """Raised when the data file or its temporary replacement cannot be created, read, written or renamed."""
    def __init__(self, message: str, path: str, cause: BaseException = None):
        super().__init__(message)
        self.path = path
        self.cause = cause


class ConfigError(Error):
    """Raised when the user config script exists but does not define a usable configuration."""
    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path
