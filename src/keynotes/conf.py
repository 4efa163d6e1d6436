"""Configuration for the keynotes command-line tool.

By default, notes are kept in ``~/.keynotes/keynotes.dat``. To change that, create ``~/.keynotes.conf.py``
and assign an instance of :class:`KeynotesConf` to the variable ``conf``:

.. code-block:: python

   from keynotes.conf import *
   conf = KeynotesConf(data_path='~/Dropbox/keynotes/work.dat')
"""

from __future__ import annotations
from dataclasses import dataclass, replace
import logging
import os.path

from keynotes.errors import ConfigError

logger = logging.getLogger('keynotes.conf')

DEFAULT_DIR = '.keynotes'
DEFAULT_FILENAME = 'keynotes.dat'


def default_data_path() -> str:
    return os.path.join('~', DEFAULT_DIR, DEFAULT_FILENAME)


@dataclass
class KeynotesConf:
    data_path: str = None
    """Path of the data file. ``~`` is expanded.

    The file and its parent directory are created the first time they are needed.
    If None, ``~/.keynotes/keynotes.dat`` is used.
    """

    @classmethod
    def user_config_path(cls) -> str:
        return os.path.expanduser(os.path.join('~', '.keynotes.conf.py'))

    @classmethod
    def for_user(cls) -> KeynotesConf:
        """Loads the config from ``~/.keynotes.conf.py``, or returns the defaults if that file does not exist.

        Raises :exc:`keynotes.errors.ConfigError` if the file exists but does not assign an instance of this
        class to ``conf``.
        """
        path = cls.user_config_path()
        if not os.path.exists(path):
            logger.debug('no config file at %s, using defaults', path)
            return cls()
        with open(path, 'r') as file:
            conf_script = file.read()
        context = {}
        exec(conf_script, context)
        if 'conf' not in context or not isinstance(context['conf'], cls):
            raise ConfigError('You need to assign an instance of KeynotesConf to the variable `conf` '
                              f'in your config file: {path}', path)
        return context['conf']

    def standardize(self) -> KeynotesConf:
        return replace(
            self,
            data_path=os.path.abspath(os.path.expanduser(self.data_path or default_data_path()))
        )

    def instantiate(self):
        from keynotes.store import KeynoteFile
        return KeynoteFile(self.standardize().data_path)
