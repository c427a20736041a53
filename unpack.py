#!/usr/bin/env python3

"""
Mo Young / Da Fit "new" (FaceN) watch face - dump tool

Reads a binary watch face, writes every image to a folder together with
watchface.json describing the layout. Edit either, then rebuild the face
with gen_face.py.

Check the `main` function for arguments list
"""
from __future__ import annotations

import argparse
import logging
import os

from facen import AssetFolder, DumpFormat, Face, FaceError
from facen.log import debug_level_to_log_level, logger_config

DEFAULT_DUMP_FOLDER = 'dump'

g_logger = logging.getLogger('facen.unpack')


def unpack_face(file_path, dump_folder, fmt=DumpFormat.BMP, *, progress=True):
    """
    Dump a watch face file.

    :param file_path: binary watch face
    :param dump_folder: output folder, created if missing
    :param fmt: image file format
    :return: (Face, path of watchface.json)
    """
    with open(file_path, 'rb') as in_f:
        fdata = in_f.read()
    face = Face.from_bin(fdata)
    g_logger.info('[%s] %d digit sets, %d elements', os.path.basename(file_path), len(face.digits), len(face.elements))

    folder = AssetFolder(dump_folder)
    folder.create()
    face.generate_file_names(fmt)
    written = face.write_imgs(folder, fmt, progress=progress)
    json_path = face.save_json(folder.path)
    g_logger.info('Saved %d images and [%s]', written, json_path)
    return face, json_path


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='unpack.py',
        description='Dump a "new" Mo Young / Da Fit binary watch face to a folder of images and watchface.json.'
    )
    parser.add_argument('file', help='Binary watch face file')
    parser.add_argument('-o', '--out', default=DEFAULT_DUMP_FOLDER, help='Dump folder (default: %(default)s)')
    parser.add_argument('--format', default=DumpFormat.BMP.value, choices=[f.value for f in DumpFormat],
                        help='Image file format: bmp, png, raw (decompressed ARGB8565) or bin (compressed) (default: %(default)s)')
    parser.add_argument('--check', action='store_true', help='Only parse the file and print what is in it')
    parser.add_argument('--debug', type=int, nargs='?', const=3, default=1, help='Print more debug info. Range 0 to 3.')
    parser.add_argument('--log-file', default=None, help='Log file (default: log/runtime.log)')
    parser.add_argument('--no-progress', action='store_true', help='Hide the progress bar')

    args = parser.parse_args(argv)
    logger_config(args.log_file, debug_level_to_log_level(args.debug))

    src = os.path.abspath(args.file)
    if not os.path.isfile(src):
        raise SystemExit(f'File not found: {src}')

    try:
        if args.check:
            with open(src, 'rb') as in_f:
                face = Face.from_bin(in_f.read())
        else:
            print('\n====Dumping watch face [%s] to [%s]...' % (src, args.out))
            face, _ = unpack_face(src, args.out, DumpFormat(args.format), progress=not args.no_progress)
    except FaceError as e:
        g_logger.error('[%s] %s', src, e)
        raise SystemExit(2)

    if args.check or args.debug >= 3:
        for line in face.summary():
            print(line)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
