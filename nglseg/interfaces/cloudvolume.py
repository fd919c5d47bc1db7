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

import importlib.util
import os
import tempfile

from textwrap import dedent
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Union

from .. import config, core, utils
from ..io import fetch_artifacts, make_savedir, read_mesh
from ..ngl import ngl_segments

err_msg = dedent("""
      Failed to import `cloudvolume` library. Please install using pip:

            pip install cloud-volume -U

      or install nglseg with the "cloudvolume" extra.
      """)

try:
    import cloudvolume as cv
except ImportError:
    cv = None

logger = config.get_logger(__name__)

#: Mesh formats CloudVolume can write
MESH_FORMATS = ('obj', 'ply', 'precomputed')


def dracopy_available(action: str = 'warning') -> bool:
    """Check if the DracoPy module (required to decode FlyWire meshes) is installed.

    Parameters
    ----------
    action :    "warning" | "raise" | "none"
                What to do if DracoPy is missing.

    """
    utils.eval_param(action, name='action',
                     allowed_values=('warning', 'raise', 'none'))
    available = importlib.util.find_spec('DracoPy') is not None
    if not available:
        msg = ('The DracoPy module is required to parse FlyWire meshes. '
               'This should normally work: pip3 install DracoPy')
        if action == 'raise':
            raise utils.SetupError(msg)
        elif action == 'warning':
            logger.warning(msg)
    return available


class CloudVolumeMeshFetcher:
    """Fetch capability that saves meshes via CloudVolume.

    Parameters
    ----------
    url :           str
                    Segmentation source, e.g.
                    ``graphene://https://prod.flywire-daf.com/segmentation/1.0/fly_v31``.
    file_format :   "obj" | "ply" | "precomputed"
                    Format to save meshes in.
    **kwargs
                    Passed to ``cloudvolume.CloudVolume``.

    Raises
    ------
    SetupError
                    If cloudvolume is not installed, no URL was provided or
                    CloudVolume could not be initialized (e.g. because of
                    missing credentials).

    Examples
    --------
    >>> fetch = CloudVolumeMeshFetcher('graphene://https://...')  # doctest: +SKIP
    >>> fetch('720575940623979522', '720575940623979522.obj')     # doctest: +SKIP

    """

    def __init__(self, url: str, file_format: str = 'obj', **kwargs):
        if not cv:
            raise utils.SetupError(err_msg)
        if not url:
            raise utils.SetupError('No segmentation source: please provide '
                                   '`cloudvolume_url` or set the '
                                   'NGLSEG_CLOUDVOLUME_URL environment variable.')
        utils.eval_param(file_format, name='file_format',
                         allowed_values=MESH_FORMATS)

        dracopy_available('warning')

        self.url = url
        self.file_format = file_format

        defaults = dict(use_https=True, progress=False)
        defaults.update(kwargs)
        try:
            self.vol = cv.CloudVolume(url, **defaults)
        except Exception as e:
            raise utils.SetupError(f'Unable to initialize CloudVolume for {url}: {e}') from e

    def __repr__(self):
        return f'{type(self).__name__}(url={self.url!r}, file_format={self.file_format!r})'

    def __call__(self, segment_id: Union[str, int], filepath: str) -> None:
        self.vol.mesh.save(int(segment_id), filepath=filepath,
                           file_format=self.file_format)


def _get_url(cloudvolume_url: Optional[str],
             settings: Optional[config.ServiceConfig]) -> Optional[str]:
    if cloudvolume_url:
        return cloudvolume_url
    if settings is None:
        settings = config.ServiceConfig.from_env()
    return settings.cloudvolume_url


def cloudvolume_save_obj(segments: Iterable[Union[str, int]],
                         savedir: Optional[Union[str, os.PathLike]] = None,
                         omit_failures: bool = True,
                         force: bool = False,
                         cloudvolume_url: Optional[str] = None,
                         settings: Optional[config.ServiceConfig] = None,
                         fetcher: Optional[Callable[[str, str], None]] = None,
                         progress: bool = True,
                         **kwargs) -> Dict[str, str]:
    """Save meshes for given segments as ``<segment id>.obj`` files.

    Meshes that already exist in ``savedir`` are not downloaded again
    (unless ``force=True``).

    Parameters
    ----------
    segments :          str | int | iterable
                        Segment id(s) to fetch.
    savedir :           str | pathlib.Path, optional
                        Directory to save meshes to. Will be created if it
                        doesn't exist. If not provided, a new temporary
                        directory is created (and kept).
    omit_failures :     bool
                        If True, segments for which the download failed are
                        skipped. If False, the first failure raises.
    force :             bool
                        If True, fetch meshes even if the file already exists.
    cloudvolume_url :   str, optional
                        Segmentation source. If not provided, will use
                        ``settings.cloudvolume_url``.
    settings :          nglseg.ServiceConfig, optional
                        Settings to use. Defaults to ``ServiceConfig.from_env()``.
    fetcher :           callable, optional
                        Use this instead of CloudVolume to fetch meshes:
                        ``fetcher(segment_id, filepath)``.
    progress :          bool
                        Whether to show a progress bar.
    **kwargs
                        Passed to ``cloudvolume.CloudVolume``.

    Returns
    -------
    dict
                        Maps segment id to obj file.

    """
    if fetcher is None:
        fetcher = CloudVolumeMeshFetcher(_get_url(cloudvolume_url, settings),
                                         file_format='obj', **kwargs)

    return fetch_artifacts(segments, fetch=fetcher, savedir=savedir, ext='obj',
                           force=force, omit_failures=omit_failures,
                           progress=progress)


def read_cloudvolume_meshes(x: Any,
                            savedir: Optional[Union[str, os.PathLike]] = None,
                            cloudvolume_url: Optional[str] = None,
                            settings: Optional[config.ServiceConfig] = None,
                            fetcher: Optional[Callable[[str, str], None]] = None,
                            loader: Optional[Callable[[Sequence[str]], Any]] = None,
                            omit_failures: bool = True,
                            force: bool = False,
                            **kwargs) -> 'core.MeshList':
    """Read meshes from a chunked graph (graphene) server via CloudVolume.

    You may use this to fetch meshes from https://flywire.ai. It uses the
    serverless Python client `CloudVolume` for reading data in Neuroglancer
    compatible formats.

    You will need to set up some kind of authentication in order to fetch
    data. See https://github.com/seung-lab/cloud-volume#chunkedgraph-secretjson
    for how to get a token and where to save it.

    Parameters
    ----------
    x :                 int | str | list-like | pathlib.Path | dict
                        Segment ids or a Neuroglancer scene (URL, JSON file,
                        JSON text or dict). Hidden segments of a scene are
                        not fetched. See :func:`nglseg.ngl_segments`.
    savedir :           str | pathlib.Path, optional
                        Directory in which obj files will be stored. If not
                        specified, a temporary directory will be created
                        and removed at the end of the call.
    cloudvolume_url :   str, optional
                        Segmentation source. If not provided, will use
                        ``settings.cloudvolume_url``.
    settings :          nglseg.ServiceConfig, optional
                        Settings to use. Defaults to ``ServiceConfig.from_env()``.
    fetcher :           callable, optional
                        Use this instead of CloudVolume to fetch meshes:
                        ``fetcher(segment_id, filepath)``.
    loader :            callable, optional
                        Turns a list of files into a list of mesh objects
                        (one per file, same order). Defaults to
                        :func:`nglseg.read_mesh`.
    omit_failures :     bool
                        If True (default), segments whose mesh failed to
                        download are skipped.
    force :             bool
                        If True, fetch meshes even if they are already in
                        ``savedir``.
    **kwargs
                        Passed to ``cloudvolume.CloudVolume``.

    Returns
    -------
    MeshList
                        One :class:`~nglseg.SegmentMesh` per segment, labeled
                        with the segment id. Empty if no mesh could be
                        fetched.

    Examples
    --------
    >>> import nglseg
    >>> cfg = nglseg.ServiceConfig(cloudvolume_url='graphene://https://...')  # doctest: +SKIP
    >>> pmn1 = nglseg.read_cloudvolume_meshes("720575940623979522",           # doctest: +SKIP
    ...                                       settings=cfg)
    >>> # Read sample KCs from a FlyWire (short) URL
    >>> u = "https://ngl.flywire.ai/?json_url=https://globalv1.flywire-daf.com/nglstate/6230669436911616"
    >>> kcs = nglseg.read_cloudvolume_meshes(u, settings=cfg)               # doctest: +SKIP

    """
    segments = ngl_segments(x, as_text=True, include_hidden=False)

    if fetcher is None:
        fetcher = CloudVolumeMeshFetcher(_get_url(cloudvolume_url, settings),
                                         file_format='obj', **kwargs)

    if savedir is None:
        with tempfile.TemporaryDirectory(prefix='nglseg_') as tmpdir:
            return _fetch_and_load(segments, tmpdir, fetcher, loader,
                                   omit_failures=omit_failures, force=force)

    savedir = make_savedir(savedir)
    return _fetch_and_load(segments, savedir, fetcher, loader,
                           omit_failures=omit_failures, force=force)


def _fetch_and_load(segments, savedir, fetcher, loader,
                    omit_failures, force) -> 'core.MeshList':
    logger.info('Downloading meshes')
    files = cloudvolume_save_obj(segments, savedir=savedir, fetcher=fetcher,
                                 omit_failures=omit_failures, force=force)

    if not files:
        logger.warning('No meshes could be fetched')
        return core.MeshList([])

    logger.info('Parsing downloaded meshes')
    if loader is None:
        meshes = read_mesh(list(files.values()))
    else:
        meshes = loader(list(files.values()))

    meshes = core.MeshList(meshes)
    if len(meshes) != len(files):
        raise ValueError(f'Loader returned {len(meshes)} objects for '
                         f'{len(files)} files')

    # Label each mesh with the segment it came from
    for seg, m in zip(files, meshes):
        m.id = seg

    return meshes
