#    This script is part of nglseg.
#    Copyright (C) 2020 The nglseg developers
#
#    This program is free software: you can redistribute it and/or modify
#    it under the terms of the GNU General Public License as published by
#    the Free Software Foundation, either version 3 of the License, or
#    (at your option) any later version.
#
#    This program is distributed in the hope that it will be useful,
#    but WITHOUT ANY WARRANTY; without even the implied warranty of
#    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#    GNU General Public License for more details.

"""Convert between file names, zip archives and segment ids.

Segment ids are unique integers. There are about 8E8 in the FFN1
skeletonisation of FAFB but the ids can still be larger than 2**31, so
they are handled as Python ints (or ``uint64`` arrays) throughout.

Each segment has been skeletonised, however this usually results in
multiple skeleton fragments which have been written out as separate SWC
files named ``<segment id>.<fragment>.swc``. Each segment id is mapped onto
a zip file by dividing by a divisor and discarding the remainder. Peter
Li's data release of 2018-10-02 switched the divisor from 1E5 to 1E6.
"""

import os
import re

import pandas as pd

from typing import Optional, Tuple, Union

from . import config, utils

# Set up logging
logger = config.get_logger(__name__)

# Largest zip stem seen with the 1E6 divisor is ~2E4; with 1E5 it's ~2E5
_STEM_THRESHOLD = 50000


def _filename_pattern(ext: str) -> 're.Pattern':
    return re.compile(r'^(\d+)(?:\.(\d+))?\.' + re.escape(ext.lstrip('.')) + '$',
                      flags=re.IGNORECASE)


def parse_filename(x: Union[str, os.PathLike],
                   ext: str = 'swc') -> Tuple[Optional[int], Optional[int]]:
    """Parse segment id and fragment from a file name.

    Parameters
    ----------
    x :     str | pathlib.Path
            File name (or path) of the form ``<segment id>[.<fragment>].<ext>``.
    ext :   str
            The expected file extension. Case-insensitive.

    Returns
    -------
    (segment, fragment)
            Fragment is ``None`` if the file name doesn't have one. Both are
            ``None`` if the file name doesn't match.

    Examples
    --------
    >>> from nglseg import parse_filename
    >>> parse_filename("10001654273.1.swc")
    (10001654273, 1)
    >>> parse_filename("/path/to/10001654273.SWC")
    (10001654273, None)
    >>> parse_filename("not-a-file.txt")
    (None, None)

    """
    m = _filename_pattern(ext).match(os.path.basename(str(x)))
    if not m:
        return None, None

    segment, fragment = m.groups()
    return int(segment), (int(fragment) if fragment is not None else None)


def swc2segmentid(x, include_fragment: bool = False):
    """Convert SWC file name(s) into segment id(s).

    Parameters
    ----------
    x :                 str | iterable of str
                        SWC file name(s) ``<segment id>[.<fragment>].swc``.
    include_fragment :  bool
                        Whether to include the sub identifier of the
                        skeleton fragment.

    Returns
    -------
    int | None
                        For a single file name. ``None`` if it doesn't match.
    pandas.Series
                        For multiple file names (nullable ``UInt64``;
                        non-matching names are ``<NA>``).
    pandas.DataFrame
                        For multiple file names and ``include_fragment=True``:
                        columns "segment" and "fragment".

    Examples
    --------
    >>> from nglseg import swc2segmentid
    >>> swc2segmentid("10001654273.1.swc")
    10001654273
    >>> swc2segmentid(["10001654273.%d.swc" % i for i in range(3)],
    ...               include_fragment=True).fragment.tolist()
    [0, 1, 2]

    """
    if not utils.is_iterable(x) or isinstance(x, os.PathLike):
        seg, frag = parse_filename(x, ext='swc')
        return (seg, frag) if include_fragment else seg

    parsed = [parse_filename(f, ext='swc') for f in x]
    df = pd.DataFrame(parsed, columns=['segment', 'fragment'],
                      dtype=object).astype('UInt64')

    if include_fragment:
        return df

    return df.segment


def segmentid2zip(x,
                  divisor: Optional[int] = None,
                  settings: Optional['config.ServiceConfig'] = None):
    """Convert segment id(s) to the zip file(s) that contain them.

    Parameters
    ----------
    x :         int | str | iterable
                Segment id(s).
    divisor :   int, optional
                Divisor mapping segment ids onto zip files. If not provided,
                will use ``settings.zip_divisor``, infer it from the zip files
                in ``settings.skelziproot`` or fall back to 1E6.
    settings :  nglseg.ServiceConfig, optional
                Settings to use. Defaults to ``ServiceConfig.from_env()``.

    Returns
    -------
    str | list of str

    Examples
    --------
    >>> from nglseg import segmentid2zip
    >>> segmentid2zip(10001654273, divisor=1e6)
    '10001.zip'
    >>> segmentid2zip(["10001654273", "10951626347"], divisor=1e5)
    ['100016.zip', '109516.zip']

    """
    divisor = _resolve_divisor(divisor, settings)

    if utils.is_iterable(x):
        return [f'{_as_int(i) // divisor}.zip' for i in x]
    return f'{_as_int(x) // divisor}.zip'


def zip2segmentstem(x: Union[str, os.PathLike]) -> int:
    """Convert a zip file to the initial part of the segment id.

    Examples
    --------
    >>> from nglseg import zip2segmentstem
    >>> zip2segmentstem('/path/to/10001.zip')
    10001

    """
    return int(os.path.splitext(os.path.basename(str(x)))[0])


def find_zip_divisor(path: Union[str, os.PathLike]) -> int:
    """Infer the segment id divisor from the zip files in a folder.

    Parameters
    ----------
    path :      str | pathlib.Path
                Folder containing the zipped skeletons, i.e. files named
                ``<segment stem>.zip``.

    Returns
    -------
    int
                1E5 for releases before 2018-10-02, 1E6 for later ones.

    Raises
    ------
    SetupError
                If the folder does not exist or has no zip files.

    """
    if not os.path.isdir(path):
        raise utils.SetupError(f'Skeleton zip folder not found: {path}')

    stems = [zip2segmentstem(f) for f in os.listdir(path)
             if re.match(r'^\d+\.zip$', f, flags=re.IGNORECASE)]
    if not stems:
        raise utils.SetupError(f'No segment zip files found in {path}')

    divisor = int(1e5) if max(stems) >= _STEM_THRESHOLD else int(1e6)
    logger.debug(f'Using divisor {divisor} for zip files in {path}')
    return divisor


def _resolve_divisor(divisor, cfg) -> int:
    if divisor:
        return int(divisor)

    if cfg is None:
        cfg = config.ServiceConfig.from_env()

    if cfg.zip_divisor:
        return int(cfg.zip_divisor)
    if cfg.skelziproot:
        return find_zip_divisor(cfg.skelziproot)
    return config.DEFAULT_ZIP_DIVISOR


def _as_int(x) -> int:
    """Segment id as int. Floats are accepted if they are whole numbers."""
    if isinstance(x, float):
        if not x.is_integer():
            raise ValueError(f'Segment id must be a whole number, got {x}')
        return int(x)
    return int(x)
