import json
import logging
import struct

import pytest

from facen import elements as el
from facen.assets import AssetFolder, DumpFormat
from facen.digits import DIGITS_HEADER_SIZE, DigitSet
from facen.errors import DigitIndexError, ElementSizeError, FaceFormatError, UnknownElementError
from facen.face import HEADER_SIZE, WATCHFACE_JSON, Face
from facen.img_data import ImgData
from facen.pixels import ImgFormat
from facen.util import get_u16, get_u32


def empty_face_bin(e_offset=HEADER_SIZE):
    return struct.pack('<HHIHHHH', 1, 0, 0, 0, 0, 0, e_offset) + b'\x00\x00'


class TestFromBin:

    def test_empty_element_list(self):
        face = Face.from_bin(empty_face_bin())
        assert face.api_ver == 1
        assert face.digits == []
        assert face.elements == []
        assert face.preview_img_data.w == 0

    def test_header_fields(self, sample_face, sample_face_bin):
        buf = sample_face_bin
        assert get_u16(buf, 0) == 4
        assert get_u16(buf, 2) == 0x0102
        assert get_u16(buf, 8) == 12
        assert get_u16(buf, 10) == 10
        assert get_u16(buf, 12) == HEADER_SIZE
        assert get_u16(buf, 14) == HEADER_SIZE + 2 + 2 * DIGITS_HEADER_SIZE
        assert get_u16(buf, HEADER_SIZE) == 0x0101
        assert buf[HEADER_SIZE + 2] == 0
        assert buf[HEADER_SIZE + 2 + DIGITS_HEADER_SIZE] == 1

    def test_round_trip(self, sample_face, sample_face_bin):
        face = Face.from_bin(sample_face_bin)
        assert face.api_ver == sample_face.api_ver
        assert face.unknown == sample_face.unknown
        assert face.preview_img_data == sample_face.preview_img_data
        assert face.digits == sample_face.digits
        assert face.elements == sample_face.elements
        assert face.to_bin() == sample_face_bin

    def test_blob_alignment(self, sample_face, sample_face_bin):
        header_size = sample_face.header_size()
        assert sample_face_bin[header_size:(header_size + 3) & ~3] == bytes(-header_size % 4)
        assert len(sample_face_bin) % 4 == 0
        face = Face.from_bin(sample_face_bin)
        offsets = [get_u32(sample_face_bin, 4)]
        for digit_set in range(2):
            base = HEADER_SIZE + 2 + digit_set * DIGITS_HEADER_SIZE + 1
            offsets += [get_u32(sample_face_bin, base + 8 * i) for i in range(10)]
        assert all(o % 4 == 0 for o in offsets)
        assert all(o >= header_size for o in offsets)
        assert len(face.elements) == len(sample_face.elements)

    def test_preview_comes_last(self, sample_face_bin):
        preview_offset = get_u32(sample_face_bin, 4)
        first_digit = get_u32(sample_face_bin, HEADER_SIZE + 3)
        assert preview_offset > first_digit

    def test_no_digits(self, make_img):
        face = Face(api_ver=2, elements=[el.Image(img_data=make_img(3, 3))], preview_img_data=make_img(2, 2))
        buf = face.to_bin()
        assert get_u16(buf, 12) == 0
        assert get_u16(buf, 14) == HEADER_SIZE
        assert face.digits_header_size() == 0
        assert Face.from_bin(buf).elements == face.elements

    def test_digit_set_numbering(self, sample_face_bin):
        buf = bytearray(sample_face_bin)
        buf[HEADER_SIZE + 2 + DIGITS_HEADER_SIZE] = 0
        with pytest.raises(DigitIndexError):
            Face.from_bin(bytes(buf))

    def test_bad_sentinel_is_logged(self, sample_face_bin, caplog):
        buf = bytearray(sample_face_bin)
        buf[HEADER_SIZE] = 0x02
        with caplog.at_level(logging.WARNING, logger='facen'):
            face = Face.from_bin(bytes(buf))
        assert len(face.digits) == 2
        assert '0x0102' in caplog.text

    def test_unknown_element(self):
        buf = struct.pack('<HHIHHHH', 1, 0, 0, 0, 0, 0, HEADER_SIZE) + b'\x01\x63\x00\x00'
        with pytest.raises(UnknownElementError):
            Face.from_bin(buf)

    def test_truncated(self, sample_face_bin):
        with pytest.raises(FaceFormatError):
            Face.from_bin(sample_face_bin[:200])
        with pytest.raises(FaceFormatError):
            Face.from_bin(b'\x01\x00')


class TestToBin:

    def test_header_size(self, sample_face):
        elements_size = sum(e.bin_size() for e in sample_face.elements)
        assert sample_face.header_size() == HEADER_SIZE + 2 + 2 * DIGITS_HEADER_SIZE + elements_size + 2

    def test_count_mismatch(self, make_img):
        bar = el.BarDisplay(count=3, img_data=[make_img(2, 2)] * 2)
        with pytest.raises(ElementSizeError):
            Face(elements=[bar]).to_bin()

    def test_digit_set_needs_ten_images(self, make_img):
        face = Face(digits=[DigitSet([make_img(2, 2)] * 9)])
        with pytest.raises(FaceFormatError):
            face.to_bin()

    def test_image_without_rows(self):
        face = Face(elements=[el.Dash(img_data=ImgData(w=3, h=2, file_name='dash_0.bmp'))])
        with pytest.raises(FaceFormatError):
            face.to_bin()

    def test_api_ver_out_of_range(self):
        with pytest.raises(FaceFormatError):
            Face(api_ver=0x10000).to_bin()

    def test_empty_face(self):
        buf = Face(api_ver=1).to_bin()
        assert get_u16(buf, 12) == 0
        assert get_u16(buf, 14) == HEADER_SIZE
        assert buf[HEADER_SIZE:] == bytes(4)
        # the empty preview sits at the start of the empty blob
        assert get_u32(buf, 4) == 20
        assert Face.from_bin(buf).elements == []


class TestImages:

    def test_order(self, sample_face):
        imgs = list(sample_face.images())
        assert imgs[0] is sample_face.preview_img_data
        assert imgs[1:21] == sample_face.digits[0].img_data + sample_face.digits[1].img_data
        assert len(imgs) == 1 + 20 + sum(len(e.images()) for e in sample_face.elements)

    def test_file_names(self, sample_face):
        sample_face.generate_file_names()
        names = [img.file_name for img in sample_face.images()]
        assert len(set(names)) == len(names)
        assert names[0] == 'preview.bmp'
        assert names[1] == 'digit_0_0.bmp'
        assert names[20] == 'digit_1_9.bmp'
        assert 'image_0.bmp' in names
        assert 'image_1.bmp' in names
        assert 'day_name_0_6.bmp' in names
        assert 'battery_fill_0_2.bmp' in names
        assert 'time_hand_0.bmp' in names
        assert 'dash_0.bmp' in names

    def test_file_names_keep_existing(self, sample_face):
        sample_face.preview_img_data.file_name = 'cover.png'
        sample_face.generate_file_names(DumpFormat.RAW, overwrite=False)
        assert sample_face.preview_img_data.file_name == 'cover.png'
        assert sample_face.digits[0].img_data[0].file_name == 'digit_0_0.raw'

    @pytest.mark.parametrize('fmt', [DumpFormat.BMP, DumpFormat.BIN, DumpFormat.RAW, DumpFormat.PNG])
    def test_dump_and_rebuild(self, tmp_path, sample_face, sample_face_bin, fmt):
        folder = AssetFolder(tmp_path)
        face = Face.from_bin(sample_face_bin)
        face.generate_file_names(fmt)
        total = len(list(face.images()))
        assert face.write_imgs(folder, fmt) == total
        face.save_json(str(tmp_path))

        rebuilt = Face.load_json(str(tmp_path))
        assert rebuilt.read_imgs(folder) == total
        assert rebuilt.to_bin() == sample_face_bin

    def test_missing_image_is_skipped(self, tmp_path, sample_face, caplog):
        folder = AssetFolder(tmp_path)
        sample_face.generate_file_names()
        sample_face.write_imgs(folder)
        (tmp_path / 'dash_0.bmp').unlink()
        face = Face.load_json(sample_face.save_json(str(tmp_path)))
        with caplog.at_level(logging.WARNING, logger='facen'):
            count = face.read_imgs(folder)
        assert count == len(list(face.images())) - 1
        assert 'dash_0.bmp' in caplog.text

    def test_missing_image_is_stored_empty(self, tmp_path, sample_face):
        folder = AssetFolder(tmp_path)
        sample_face.generate_file_names()
        sample_face.write_imgs(folder)
        (tmp_path / 'dash_0.bmp').unlink()
        face = Face.load_json(sample_face.save_json(str(tmp_path)))
        face.read_imgs(folder)

        parsed = Face.from_bin(face.to_bin())
        dash = parsed.elements[13]
        assert isinstance(dash, el.Dash)
        assert (dash.img_data.w, dash.img_data.h) == (0, 0)
        for img in parsed.images():
            img.to_img().convert_format(ImgFormat.ARGB8565)
        assert parsed.preview_img_data.to_bin() == sample_face.preview_img_data.to_bin()
        assert parsed.elements[-1].img_data.to_bin() == sample_face.elements[-1].img_data.to_bin()

    @pytest.mark.parametrize('fmt', list(DumpFormat))
    def test_empty_preview_dump_and_rebuild(self, tmp_path, fmt):
        original = Face(api_ver=1).to_bin()
        folder = AssetFolder(tmp_path)
        face = Face.from_bin(original)
        face.generate_file_names(fmt)
        assert face.write_imgs(folder, fmt) == 1
        face.save_json(str(tmp_path))

        rebuilt = Face.load_json(str(tmp_path))
        assert rebuilt.read_imgs(folder) == 1
        assert rebuilt.to_bin() == original


class TestJson:

    def test_save_to_folder(self, tmp_path, sample_face):
        sample_face.generate_file_names()
        path = sample_face.save_json(str(tmp_path))
        assert path == str(tmp_path / WATCHFACE_JSON)
        d = json.loads((tmp_path / WATCHFACE_JSON).read_text())
        assert d['api_ver'] == 4
        assert d['type_str'] == 'facen watchface'
        assert d['preview_img_data'] == {'w': 12, 'h': 10, 'file_name': 'preview.bmp'}
        assert len(d['digits']) == 2
        assert d['digits'][1]['unknown'] == 1
        assert [e['e_type'] for e in d['elements']][:3] == ['image', 'time_num', 'day_name']

    def test_save_to_file(self, tmp_path, sample_face):
        path = str(tmp_path / 'face.json')
        assert sample_face.save_json(path) == path
        face = Face.load_json(path)
        assert face.to_dict() == sample_face.to_dict()

    def test_bad_json(self, tmp_path):
        (tmp_path / WATCHFACE_JSON).write_text('{"api_ver": ')
        with pytest.raises(FaceFormatError):
            Face.load_json(str(tmp_path))

    def test_unknown_element_name(self):
        with pytest.raises(FaceFormatError):
            Face.from_dict({'elements': [{'e_type': 'sundial'}]})

    def test_summary(self, sample_face):
        lines = sample_face.summary()
        assert 'api_ver          4' in lines
        assert 'digits.len       2' in lines
        assert lines[-1] == 'element 14: e_type 0 (image), 1 image(s)'
