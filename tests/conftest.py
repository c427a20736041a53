"""
pytest fixtures shared by the facen tests.
"""
from __future__ import annotations

import random
import struct

import pytest

from facen import DigitSet, Face, Img, ImgData, ImgFormat
from facen import elements as el


def random_pixels(count, seed=0, colours=3):
    """ARGB8565 pixels drawn from a small palette, so rows have runs and literals."""
    rnd = random.Random(seed)
    palette = [bytes((0xFF, rnd.randrange(256), rnd.randrange(256))) for _ in range(colours)]
    return b''.join(rnd.choice(palette) for _ in range(count))


def build_bmp(width, height, bpp, rows, *, compression=0, masks=(), dib_size=40,
              image_data_size=None, sig=b'BM', planes=1, reserved=0):
    """Assemble a BMP by hand; rows are given in file order."""
    row_size = (width * bpp // 8 + 3) & ~3
    pixels = b''.join(r + bytes(row_size - len(r)) for r in rows)
    if image_data_size is None:
        image_data_size = len(pixels)
    dib = struct.pack('<IiiHHIIiiII', dib_size, width, height, planes, bpp, compression,
                      image_data_size, 2835, 2835, 0, 0)
    dib += struct.pack('<%dI' % len(masks), *masks)
    if dib_size > 40:
        dib += bytes(dib_size - len(dib))
    offset = 14 + len(dib)
    header = sig + struct.pack('<IHHI', offset + len(pixels), reserved, 0, offset)
    return header + dib + pixels


@pytest.fixture
def make_img():
    def _make(w=5, h=4, seed=0):
        img_data = ImgData()
        img_data.set_img(Img(w, h, ImgFormat.ARGB8565, random_pixels(w * h, seed)))
        return img_data
    return _make


@pytest.fixture
def all_elements(make_img):
    """One element of every type, with images where the type has them."""
    return [
        el.Image(x=0, y=0, img_data=make_img(8, 6, 1)),
        el.TimeNum(digit_sets=[0, 0, 1, 1], xys=[el.XY(10 * i, 20) for i in range(4)], unknown=list(range(12))),
        el.DayName(n_type=1, x=5, y=6, img_data=[make_img(3, 2, 10 + i) for i in range(7)]),
        el.BatteryFill(x=1, y=2, img_data=make_img(6, 3, 20), x1=1, y1=1, x2=4, y2=2,
                       unknown0=0xDEADBEEF, unknown1=7,
                       image_data1=make_img(2, 2, 21), image_data2=make_img(2, 2, 22)),
        el.HeartRateNum(digit_set=1, align=2, x=3, y=4),
        el.StepsNum(digit_set=0, align=1, x=30, y=40, unknown=[9] * 18),
        el.KCalNum(digit_set=1, align=0, x=50, y=60, unknown=list(range(11))),
        el.TimeHand(h_type=1, unknown_x=120, unknown_y=120, img_data=make_img(4, 20, 30), x=118, y=20),
        el.DayNum(digit_set=0, align=1, xys=[el.XY(1, 2), el.XY(3, 4)]),
        el.MonthNum(digit_set=1, align=2, xys=[el.XY(5, 6), el.XY(7, 8)]),
        el.BarDisplay(b_type=6, count=3, x=10, y=200, img_data=[make_img(5, 2, 40 + i) for i in range(3)]),
        el.Weather(count=2, x=100, y=100, img_data=[make_img(4, 4, 50 + i) for i in range(2)]),
        el.Unknown29(unknown=1),
        el.Dash(img_data=make_img(3, 1, 60)),
    ]


@pytest.fixture
def sample_face(make_img, all_elements):
    digits = [DigitSet([make_img(4, 6, 100 + 10 * n + i) for i in range(10)], unknown=n) for n in range(2)]
    return Face(
        api_ver=4,
        unknown=0x0102,
        preview_img_data=make_img(12, 10, 99),
        digits=digits,
        elements=all_elements + [el.Image(x=40, y=50, img_data=make_img(7, 5, 2))],
    )


@pytest.fixture
def sample_face_bin(sample_face):
    return sample_face.to_bin()
