#!/usr/bin/env python3

"""
Mo Young / Da Fit "new" (FaceN) watch face - generator

Rebuilds a binary watch face from a folder made by unpack.py: watchface.json
plus the image files it names. Images that are missing keep whatever the
JSON model holds (nothing, for a fresh load).

Check the `cli_main` function for arguments list
"""
from __future__ import annotations

import argparse
import logging
import os

from facen import AssetFolder, Face, FaceError
from facen.face import WATCHFACE_JSON
from facen.log import debug_level_to_log_level, logger_config

g_logger = logging.getLogger('facen.gen_face')


def gen_face(src_dir, out_path, *, progress=True):
    """
    Generate a single watch face from a source folder.

    Parameters
    ----------
    src_dir : str
        Folder containing watchface.json + image files.
    out_path : str
        Output watch face file.
    progress : bool
        Show a progress bar while reading images.

    Returns
    -------
    (Face, int)
        The face that was written and the file size.
    """
    face = Face.load_json(src_dir)
    read = face.read_imgs(AssetFolder(src_dir), progress=progress)
    total = sum(1 for _ in face.images())
    if read != total:
        g_logger.warning('Only %d of %d images were read from [%s]', read, total, src_dir)

    bin_data = face.to_bin()
    with open(out_path, 'wb') as out_f:
        out_f.write(bin_data)
    g_logger.info('[%s] %d bytes, %d elements', out_path, len(bin_data), len(face.elements))
    return face, len(bin_data)


def cli_main(argv=None):
    parser = argparse.ArgumentParser(
        prog='gen_face.py',
        description='Generate a "new" Mo Young / Da Fit binary watch face from a dump folder.'
    )
    parser.add_argument('src', metavar='source-dir', help='Folder containing %s and the images' % WATCHFACE_JSON)
    parser.add_argument('-o', '--out', default=None, help='Output file (default: <source-dir>.bin in the current directory)')
    parser.add_argument('--debug', type=int, nargs='?', const=3, default=1, help='Print more debug info. Range 0 to 3.')
    parser.add_argument('--log-file', default=None, help='Log file (default: log/runtime.log)')
    parser.add_argument('--no-progress', action='store_true', help='Hide the progress bar')

    args = parser.parse_args(argv)
    logger_config(args.log_file, debug_level_to_log_level(args.debug))

    src_dir = os.path.abspath(args.src)
    if not os.path.isdir(src_dir):
        raise NotADirectoryError(f'Source is not a directory: {src_dir}')

    out_path = os.path.abspath(args.out or os.path.basename(src_dir) + '.bin')
    out_dir = os.path.dirname(out_path)
    os.makedirs(out_dir, exist_ok=True)

    print('\n====Start generating watch face [%s]...' % out_path)
    try:
        gen_face(src_dir, out_path, progress=not args.no_progress)
    except FileNotFoundError as e:
        g_logger.error('Failed to read %s: %s', WATCHFACE_JSON, e)
        raise SystemExit(2)
    except FaceError as e:
        g_logger.error('[%s] %s', src_dir, e)
        raise SystemExit(2)
    print('====Watch face done [%s]\n' % out_path)
    return 0


if __name__ == '__main__':
    raise SystemExit(cli_main())
