"""BlobWriter: the image area at the end of a face, built while the headers are emitted."""
from __future__ import annotations

from .util import align_diff, pad_it


class BlobWriter:
    """
    Collects image payloads and hands out their file offsets.

    Offsets are absolute (from the start of the face file), starting at
    base_offset, and advance once per payload in the order payloads arrive.
    """

    def __init__(self, base_offset: int = 0):
        if align_diff(base_offset):
            raise ValueError('Blob must start on a 4-byte boundary, not 0x%X' % base_offset)
        self.base_offset = base_offset
        self._buf = bytearray()

    @property
    def offset(self) -> int:
        """File offset the next payload will get."""
        return self.base_offset + len(self._buf)

    def __len__(self):
        return len(self._buf)

    def reserve(self, length: int) -> int:
        """Reserve length bytes (0xFF filled) and return their offset."""
        offset = self.offset
        self._buf.extend(b'\xff' * length)
        return offset

    def append(self, data: bytes) -> int:
        offset = self.offset
        self._buf.extend(data)
        return offset

    def pad(self):
        pad_it(self._buf)

    def write_img(self, img_data) -> int:
        """Append an ImgData payload, keep the blob aligned, and return the payload's offset."""
        offset = self.append(img_data.to_bin())
        self.pad()
        return offset

    def getvalue(self) -> bytes:
        return bytes(self._buf)
