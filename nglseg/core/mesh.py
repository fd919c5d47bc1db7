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

import copy
import os

import numpy as np
import trimesh as tm

from typing import Any, Optional

from .. import config, utils

__all__ = ["SegmentMesh"]

# Set up logging
logger = config.get_logger(__name__)


class SegmentMesh:
    """Mesh of a single segment labeled with its segment id.

    Parameters
    ----------
    x :             mesh-like | tuple | dictionary | filepath | None
                    Data to construct the mesh from:
                     - any object that has `.vertices` and `.faces`
                       properties (e.g. a trimesh.Trimesh)
                     - a tuple `(vertices, faces)`
                     - a dictionary `{"vertices": (N, 3), "faces": (M, 3)}`
                     - filepath to a file that can be read by `trimesh.load`
                     - `None` will initialize an empty mesh
    id :            str | int, optional
                    Segment id. Stored as string.
    name :          str, optional
                    Name of the mesh. Defaults to the id.
    units :         str, optional
                    Units of the vertex coordinates, e.g. "nm".
    process :       bool
                    If True (default), will let trimesh merge duplicate
                    vertices and remove NaN/infinite values.
    **metadata
                    Any additional data to attach to the mesh.

    Examples
    --------
    >>> import trimesh as tm
    >>> from nglseg import SegmentMesh
    >>> m = SegmentMesh(tm.creation.box(), id=720575940623979522)
    >>> m.id
    '720575940623979522'
    >>> m.n_faces
    12

    """

    vertices: np.ndarray
    faces: np.ndarray

    #: Attributes used for summaries
    SUMMARY_PROPS = ["type", "id", "name", "units", "n_vertices", "n_faces"]

    def __init__(self,
                 x: Any,
                 id: Optional[Any] = None,
                 name: Optional[str] = None,
                 units: Optional[str] = None,
                 process: bool = True,
                 **metadata):
        if isinstance(x, SegmentMesh):
            self.__dict__.update(x.copy().__dict__)
            vertices, faces = x.vertices, x.faces
        elif hasattr(x, "faces") and hasattr(x, "vertices"):
            vertices, faces = x.vertices, x.faces
        elif isinstance(x, dict):
            if "faces" not in x or "vertices" not in x:
                raise ValueError('Dictionary must contain "vertices" and "faces"')
            vertices, faces = x["vertices"], x["faces"]
        elif isinstance(x, (str, os.PathLike)) and os.path.isfile(x):
            m = tm.load_mesh(x)
            vertices, faces = m.vertices, m.faces
            metadata.setdefault('file', os.path.basename(str(x)))
        elif isinstance(x, type(None)):
            # Empty mesh
            vertices, faces = np.zeros((0, 3)), np.zeros((0, 3), dtype=int)
        elif isinstance(x, tuple):
            if len(x) != 2:
                raise utils.ConstructionError("Expect tuple to be two arrays: "
                                              "(vertices, faces)")
            vertices, faces = x
        else:
            raise utils.ConstructionError(
                f'Unable to construct SegmentMesh from "{type(x)}"'
            )

        vertices = np.asarray(vertices, dtype=float).reshape(-1, 3)
        faces = np.asarray(faces, dtype=int).reshape(-1, 3)

        if process and vertices.shape[0]:
            _trimesh = tm.Trimesh(vertices, faces, process=True)
            vertices, faces = _trimesh.vertices, _trimesh.faces

        self.vertices = vertices
        self.faces = faces

        if id is not None or '_id' not in self.__dict__:
            self.id = id
        if name is not None or '_name' not in self.__dict__:
            self.name = name
        if units is not None or 'units' not in self.__dict__:
            self.units = units

        for k, v in metadata.items():
            try:
                setattr(self, k, v)
            except AttributeError:
                raise AttributeError(f"Unable to set mesh's `{k}` attribute.")

    def __str__(self):
        return self.__repr__()

    def __repr__(self):
        return (f'<{self.type} id={self.id!r} name={self.name!r} '
                f'n_vertices={self.n_vertices} n_faces={self.n_faces}>')

    def __len__(self):
        return self.n_vertices

    @property
    def type(self) -> str:
        """Type of the object."""
        return 'nglseg.SegmentMesh'

    @property
    def id(self) -> Optional[str]:
        """Segment id (as string) or None."""
        return self.__dict__.get('_id')

    @id.setter
    def id(self, value):
        self._id = str(value) if value is not None else None

    @property
    def name(self) -> Optional[str]:
        """Name of the mesh. Falls back to the id."""
        name = self.__dict__.get('_name')
        return name if name is not None else self.id

    @name.setter
    def name(self, value):
        self._name = value

    @property
    def n_vertices(self) -> int:
        """Number of vertices."""
        return self.vertices.shape[0]

    @property
    def n_faces(self) -> int:
        """Number of faces."""
        return self.faces.shape[0]

    @property
    def bbox(self) -> np.ndarray:
        """Bounding box as (3, 2) array of min/max per axis."""
        if not self.n_vertices:
            return np.full((3, 2), np.nan)
        return np.vstack((self.vertices.min(axis=0),
                          self.vertices.max(axis=0))).T

    @property
    def trimesh(self) -> tm.Trimesh:
        """Trimesh representation of the mesh."""
        return tm.Trimesh(vertices=self.vertices, faces=self.faces,
                          process=False)

    @property
    def is_empty(self) -> bool:
        """True if mesh has no vertices."""
        return self.n_vertices == 0

    def copy(self, deepcopy: bool = False) -> 'SegmentMesh':
        """Return a copy of the mesh.

        Parameters
        ----------
        deepcopy :  bool
                    If False, metadata attributes will only be shallow
                    copied. Vertices and faces are always copied.

        """
        x = self.__class__.__new__(self.__class__)
        x.__dict__.update(copy.deepcopy(self.__dict__) if deepcopy
                          else copy.copy(self.__dict__))
        x.vertices = self.vertices.copy()
        x.faces = self.faces.copy()
        return x

    def summary(self) -> dict:
        """Summary of this mesh."""
        return {p: getattr(self, p, None) for p in self.SUMMARY_PROPS}
