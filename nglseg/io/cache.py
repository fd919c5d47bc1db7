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

import os
import tempfile

from typing import Callable, Dict, Iterable, Optional, Union

from .. import config, utils

# Set up logging
logger = config.get_logger(__name__)

#: Signature of a fetch capability: ``fetch(segment_id, filepath)`` must
#: write the artifact for ``segment_id`` to ``filepath`` or raise.
Fetcher = Callable[[str, str], None]


def artifact_path(savedir: Union[str, os.PathLike],
                  segment_id: Union[str, int],
                  ext: str = 'obj') -> str:
    """Return the path of the artifact file for a given segment.

    Files are named ``<segment id>.<ext>``. Other tools rely on this
    convention to find out which segments have already been fetched.

    Examples
    --------
    >>> from nglseg.io import artifact_path
    >>> artifact_path('/tmp/meshes', 720575940623979522)
    '/tmp/meshes/720575940623979522.obj'

    """
    return os.path.join(str(savedir), f'{segment_id}.{ext.lstrip(".")}')


def make_savedir(savedir: Optional[Union[str, os.PathLike]] = None) -> str:
    """Make sure a directory exists.

    Parameters
    ----------
    savedir :   str | pathlib.Path, optional
                Directory. Will be created (including parents) if it does
                not exist. If None, a new unique directory is created in the
                system's temporary folder. This directory is *not* removed
                automatically.

    Returns
    -------
    str
                Path to the directory.

    Raises
    ------
    SetupError
                If the directory can not be created.

    """
    try:
        if savedir is None:
            return tempfile.mkdtemp(prefix='nglseg_')
        os.makedirs(savedir, exist_ok=True)
    except OSError as e:
        raise utils.SetupError(f'Unable to create directory {savedir}: {e}') from e
    return str(savedir)


def fetch_artifacts(ids: Iterable[Union[str, int]],
                    fetch: Fetcher,
                    savedir: Optional[Union[str, os.PathLike]] = None,
                    ext: str = 'obj',
                    force: bool = False,
                    omit_failures: bool = True,
                    progress: bool = True) -> Dict[str, str]:
    """Fetch one artifact (e.g. a mesh file) per segment id into a directory.

    Segments for which the file already exists are skipped. Hence calling
    this again with the same directory only fetches what is missing, e.g.
    after an interrupted download.

    Segments are fetched one at a time in the order given.

    Parameters
    ----------
    ids :           iterable of str | int
                    Segment ids. Duplicates are dropped.
    fetch :         callable
                    ``fetch(segment_id, filepath)`` writes the artifact for
                    ``segment_id`` to ``filepath`` or raises an exception.
                    ``segment_id`` is passed as string.
    savedir :       str | pathlib.Path, optional
                    Directory to save the files to. Will be created if it
                    does not exist. If None, a new temporary directory is
                    created (and kept).
    ext :           str
                    File extension of the artifacts.
    force :         bool
                    If True, will fetch artifacts even if the file already
                    exists.
    omit_failures : bool
                    If True (default), failed fetches are logged, skipped and
                    not included in the output. If False, the first failure
                    raises a :class:`~nglseg.utils.FetchError`.
    progress :      bool
                    Whether to show a progress bar.

    Returns
    -------
    dict
                    Maps segment id (str) to file path, in the order of
                    ``ids``. Segments that failed to fetch are omitted.

    Raises
    ------
    SetupError
                    If ``savedir`` can not be created.
    FetchError
                    If a fetch fails and ``omit_failures=False``.

    Notes
    -----
    Only the presence of a file is checked. A file left behind by a fetch
    that was interrupted half-way through writing counts as fetched.

    Examples
    --------
    >>> from nglseg.io import fetch_artifacts
    >>> def fetch(seg, filepath):
    ...     with open(filepath, 'w') as f:
    ...         f.write(seg)
    >>> files = fetch_artifacts(['1', '2'], fetch, savedir=tmp_dir, progress=False)
    >>> list(files)
    ['1', '2']

    """
    if not callable(fetch):
        raise TypeError(f'`fetch` must be callable, got "{type(fetch)}"')

    savedir = make_savedir(savedir)

    ids = utils.unique_ordered(str(i) for i in utils.make_iterable(ids, force_type=object))

    # Paths are determined up front: this is the tentative manifest
    files: Dict[str, Optional[str]] = {i: artifact_path(savedir, i, ext) for i in ids}

    n_cached = n_failed = 0
    for seg in config.tqdm(ids,
                           desc='Downloading',
                           disable=config.pbar_hide or not progress,
                           leave=config.pbar_leave):
        if not force and os.path.exists(files[seg]):
            n_cached += 1
            continue

        if not omit_failures:
            _fetch_one(fetch, seg, files[seg])
            continue

        try:
            _fetch_one(fetch, seg, files[seg])
        except utils.FetchError as e:
            cause = f': {e.__cause__}' if e.__cause__ is not None else ''
            logger.warning(f'{e}{cause}')
            files[seg] = None
            n_failed += 1

    logger.info(f'Fetched {len(ids) - n_cached - n_failed} of {len(ids)} '
                f'segments to {savedir} ({n_cached} already present, '
                f'{n_failed} failed)')

    return {k: v for k, v in files.items() if v is not None}


def _fetch_one(fetch: Fetcher, seg: str, filepath: str) -> None:
    """Run fetch capability and wrap its errors in FetchError."""
    try:
        fetch(seg, filepath)
    except utils.FetchError:
        raise
    except Exception as e:
        raise utils.FetchError(f'Failed to fetch segment {seg}',
                               segment_id=seg) from e
