"""Keeps key-value notes, organized into named sections, in a plain text file.

If you installed via ``pip``, run ``keynotes -h`` to get help.

To use the Python API, look at :class:`keynotes.store.KeynoteFile`
"""
