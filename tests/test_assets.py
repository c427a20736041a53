import logging

import pytest

from facen.assets import AssetFolder, DumpFormat, gen_name, sane_file_name
from facen.errors import AssetError


class TestSaneFileName:

    @pytest.mark.parametrize('name', ['preview.bmp', 'digit_0_9.png', 'a b.raw', 'con.bmp', 'COM10'])
    def test_accepted(self, name):
        assert sane_file_name(name)

    @pytest.mark.parametrize('name', [
        None, '', '../x.bmp', 'a/b.bmp', 'a\\b.bmp', 'a:b', 'what?.bmp', 'x*', '"q"', 'a|b', '<x>',
        'tab\there', 'trailing.', 'trailing ', 'CON', 'nul', 'Lpt3', 'com1',
    ])
    def test_rejected(self, name):
        assert not sane_file_name(name)


class TestDumpFormat:

    @pytest.mark.parametrize('name, fmt', [
        ('a.bmp', DumpFormat.BMP), ('a.BMP', DumpFormat.BMP), ('a.png', DumpFormat.PNG),
        ('a.raw', DumpFormat.RAW), ('a.bin', DumpFormat.BIN),
    ])
    def test_from_file_name(self, name, fmt):
        assert DumpFormat.from_file_name(name) == fmt

    def test_unknown_extension_is_bmp(self, caplog):
        with caplog.at_level(logging.WARNING, logger='facen'):
            assert DumpFormat.from_file_name('picture.gif') == DumpFormat.BMP
        assert 'picture.gif' in caplog.text

    def test_gen_name(self):
        assert gen_name('preview') == 'preview.bmp'
        assert gen_name('day_name', [0, 3]) == 'day_name_0_3.bmp'
        assert gen_name('digit', [1, 2], DumpFormat.RAW) == 'digit_1_2.raw'


class TestAssetFolder:

    def test_write_read(self, tmp_path):
        folder = AssetFolder(tmp_path / 'dump')
        folder.create()
        folder.create()
        folder.write('a.bin', b'abc')
        assert folder.read('a.bin') == b'abc'
        assert (tmp_path / 'dump' / 'a.bin').read_bytes() == b'abc'

    def test_missing_file(self, tmp_path):
        with pytest.raises(AssetError):
            AssetFolder(tmp_path).read('nothing.bmp')

    def test_unsafe_name(self, tmp_path):
        folder = AssetFolder(tmp_path)
        with pytest.raises(AssetError):
            folder.write('../escape.bmp', b'')
        assert not (tmp_path.parent / 'escape.bmp').exists()

    def test_write_to_missing_folder(self, tmp_path):
        with pytest.raises(AssetError):
            AssetFolder(tmp_path / 'not_made').write('a.bin', b'')
