"""Error types for the FaceN container tool.

Two families: FaceFormatError and its subclasses abort the whole operation,
AssetError only affects the one image it was raised for.
"""


class FaceError(Exception):
    """Base class of every error raised by this package."""


class FaceFormatError(FaceError):
    """The input is not a valid FaceN container, or the model cannot be encoded."""


class UnknownElementError(FaceFormatError):
    def __init__(self, e_type, offset):
        super().__init__('Unknown element type %d at offset 0x%X' % (e_type, offset))
        self.e_type = e_type
        self.offset = offset


class ElementSizeError(FaceFormatError):
    """An element produced a different number of bytes than its bin_size()."""


class DigitIndexError(FaceFormatError):
    pass


class BmpFormatError(FaceFormatError):
    pass


class RleError(FaceFormatError):
    pass


class RleRangeError(RleError):
    """Row offset or length does not fit in the packed row header."""


class RleCorruptError(RleError):
    pass


class AssetError(FaceError):
    """Import/export of a single image failed; other images are unaffected."""
