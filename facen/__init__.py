"""
Read, dump and rebuild "new" Mo Young / Da Fit (FaceN) binary watch faces.
"""
from .assets import AssetFolder, DumpFormat, gen_name, sane_file_name
from .blob import BlobWriter
from .bmp import read_bmp, write_bmp
from .digits import DigitSet
from .elements import ELEMENT_TYPES, XY, Element
from .errors import (AssetError, BmpFormatError, DigitIndexError, ElementSizeError, FaceError, FaceFormatError,
                     RleCorruptError, RleError, RleRangeError, UnknownElementError)
from .face import WATCHFACE_JSON, Face
from .img_data import ImgData
from .pixels import Img, ImgFormat

__version__ = '0.3.0'

__all__ = [
    'AssetFolder', 'DumpFormat', 'gen_name', 'sane_file_name',
    'BlobWriter',
    'read_bmp', 'write_bmp',
    'DigitSet',
    'ELEMENT_TYPES', 'XY', 'Element',
    'AssetError', 'BmpFormatError', 'DigitIndexError', 'ElementSizeError', 'FaceError', 'FaceFormatError',
    'RleCorruptError', 'RleError', 'RleRangeError', 'UnknownElementError',
    'WATCHFACE_JSON', 'Face',
    'ImgData',
    'Img', 'ImgFormat',
]
