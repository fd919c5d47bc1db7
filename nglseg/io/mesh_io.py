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

import glob
import os
import re

import trimesh as tm

from typing import Iterable, List, Optional, Union
from typing_extensions import Literal

from .. import config, utils, core
from ..ids import parse_filename

# Set up logging
logger = config.get_logger(__name__)

# Mesh extensions supported by trimesh
MESH_LOAD_EXT = tuple(tm.exchange.load.mesh_loaders.keys())


def read_mesh(f: Union[str, os.PathLike, Iterable],
              errors: Literal["raise", "log", "ignore"] = "raise",
              limit: Optional[Union[int, str]] = None,
              **kwargs) -> 'core.MeshObject':
    """Load mesh file(s) into SegmentMesh/MeshList.

    This is a thin wrapper around `trimesh.load_mesh` which supports most
    commonly used formats (obj, ply, stl, etc.). Meshes are labeled with the
    segment id parsed from the file name (e.g. ``720575940623979522.obj``);
    files not named by segment id use the file name without extension.

    Parameters
    ----------
    f :                 str | pathlib.Path | iterable
                        Filename(s) or folder. If folder should include file
                        extension (e.g. `my/dir/*.ply`) otherwise all
                        mesh files in the folder will be read.
    errors :            "raise" | "log" | "ignore"
                        If "log" or "ignore", errors will not be raised and the
                        mesh will be skipped. Can result in empty output.
    limit :             int | str, optional
                        When reading from a folder:
                         - if an integer, will read only the first `limit`
                           mesh files
                         - if a string, will interpret it as filename (regex)
                           pattern and only read files that match
    **kwargs
                        Keyword arguments passed to [`nglseg.SegmentMesh`][].
                        You can use this to e.g. set the units on the meshes.

    Returns
    -------
    SegmentMesh
                        If `f` is a single file.
    MeshList
                        If `f` is a folder or a list of files.

    Examples
    --------
    Read a single file:

    >>> m = nglseg.read_mesh('720575940623979522.obj')          # doctest: +SKIP

    Read all e.g. .obj files in a directory:

    >>> ml = nglseg.read_mesh('/some/directory/*.obj')          # doctest: +SKIP

    """
    utils.eval_param(errors, name="errors",
                     allowed_values=("raise", "log", "ignore"))

    if isinstance(f, (str, os.PathLike)) and os.path.isfile(f):
        return _read_single(f, errors=errors, **kwargs)

    files = _find_files(f, limit=limit)

    meshes = []
    for fp in config.tqdm(files,
                          desc='Reading',
                          disable=config.pbar_hide or len(files) <= 1,
                          leave=config.pbar_leave):
        m = _read_single(fp, errors=errors, **kwargs)
        if m is not None:
            meshes.append(m)

    return core.MeshList(meshes)


def _find_files(f, limit=None) -> List[str]:
    """Turn folder/glob/list into a list of files."""
    if utils.is_iterable(f) and not isinstance(f, os.PathLike):
        files = []
        for e in f:
            files += [e] if os.path.isfile(e) else _find_files(e)
        return [str(fp) for fp in files]

    f = str(f)
    if os.path.isdir(f):
        files = sorted(os.path.join(f, fp) for fp in os.listdir(f)
                       if fp.split('.')[-1].lower() in MESH_LOAD_EXT)
    elif any(c in f for c in "*?["):
        files = sorted(fp for fp in glob.glob(f) if os.path.isfile(fp))
    else:
        raise FileNotFoundError(f'"{f}" is neither a file nor a folder')

    if isinstance(limit, int):
        files = files[:limit]
    elif isinstance(limit, str):
        files = [fp for fp in files if re.search(limit, os.path.basename(fp))]

    return files


def _read_single(fp: Union[str, os.PathLike],
                 errors: str = "raise",
                 **kwargs) -> Optional['core.SegmentMesh']:
    """Read a single mesh file."""
    fname = os.path.basename(str(fp))
    file_type = fname.split('.')[-1].lower()

    try:
        mesh = tm.load_mesh(str(fp), file_type=file_type)
    except Exception as e:
        if errors == "raise":
            raise utils.ReadError(f"Error reading {fname}. See above traceback "
                                  "for details.") from e
        elif errors == "log":
            logger.exception(f"Failed to read {fname}", exc_info=True)
        return None

    seg, _ = parse_filename(fname, ext=file_type)
    if seg is None:
        seg = fname[:-(len(file_type) + 1)]

    attrs = dict(id=seg, file=fname, origin=str(fp))
    attrs.update(kwargs)
    return core.SegmentMesh(mesh, **attrs)
