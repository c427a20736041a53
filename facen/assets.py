"""
Image file names and the folder the image files live in.
"""
from __future__ import annotations

import enum
import logging
import os

from .errors import AssetError

g_logger = logging.getLogger(__name__)

DODGY_CHARS = '/\\|?*<>:"'
RESERVED_NAMES = {'CON', 'PRN', 'AUX', 'NUL'} \
    | {'COM%d' % i for i in range(1, 10)} \
    | {'LPT%d' % i for i in range(1, 10)}


def sane_file_name(file_name) -> bool:
    """
    Check a file name taken from the editable model before using it.

    :param file_name: bare file name, no directories
    :return: True if it is safe to join onto the asset folder
    """
    if not file_name:
        return False
    if any(c in DODGY_CHARS for c in file_name):
        return False
    if any(ord(c) < 32 for c in file_name):
        return False
    if file_name[-1] in ' .':
        return False
    if file_name.upper() in RESERVED_NAMES:
        return False
    return True


class DumpFormat(enum.Enum):
    BIN = 'bin'     # compressed row table + payload, as stored in the face
    RAW = 'raw'     # decompressed ARGB8565
    BMP = 'bmp'
    PNG = 'png'

    @property
    def ext(self):
        return '.' + self.value

    @classmethod
    def from_file_name(cls, file_name):
        ext = os.path.splitext(file_name)[1].lower().lstrip('.')
        for fmt in cls:
            if fmt.value == ext:
                return fmt
        g_logger.warning("Unrecognised file extension '%s' for [%s], assuming BMP.", ext, file_name)
        return cls.BMP


def gen_name(prefix, numbers=(), fmt=DumpFormat.BMP):
    """gen_name('day_name', [0, 3]) -> 'day_name_0_3.bmp'"""
    return '_'.join([prefix] + [str(n) for n in numbers]) + fmt.ext


class AssetFolder:
    """The directory holding the image files of a dumped face."""

    def __init__(self, path):
        self.path = os.path.abspath(path)

    def __repr__(self):
        return 'AssetFolder(%r)' % self.path

    def create(self):
        if not os.path.isdir(self.path):
            os.makedirs(self.path)

    def path_of(self, file_name):
        if not sane_file_name(file_name):
            raise AssetError('Unsafe image file name: %r' % (file_name,))
        return os.path.join(self.path, file_name)

    def read(self, file_name) -> bytes:
        path = self.path_of(file_name)
        try:
            with open(path, 'rb') as in_f:
                return in_f.read()
        except OSError as e:
            raise AssetError('Unable to read [%s]: %s' % (path, e)) from e

    def write(self, file_name, data: bytes):
        path = self.path_of(file_name)
        try:
            with open(path, 'wb') as out_f:
                out_f.write(data)
        except OSError as e:
            raise AssetError('Unable to save [%s]: %s' % (path, e)) from e
