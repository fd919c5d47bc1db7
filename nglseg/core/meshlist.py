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

import re

import numpy as np
import pandas as pd

from typing import Iterable, Iterator, List, Optional, Union

from .. import config, utils
from .mesh import SegmentMesh

__all__ = ["MeshList"]

# Set up logging
logger = config.get_logger(__name__)


class MeshList:
    """Ordered collection of :class:`~nglseg.SegmentMesh`.

    Parameters
    ----------
    x :                 SegmentMesh | MeshList | list | None
                        Data to construct the list from. Anything that is
                        not already a SegmentMesh is passed to
                        ``SegmentMesh(x, **kwargs)``.
    make_copy :         bool, optional
                        If True, meshes are copied before being assigned to
                        the MeshList.
    **kwargs
                        Passed to the constructor of SegmentMesh.

    Examples
    --------
    >>> import trimesh as tm
    >>> from nglseg import MeshList, SegmentMesh
    >>> ml = MeshList([SegmentMesh(tm.creation.box(), id=1),
    ...                SegmentMesh(tm.creation.icosphere(subdivisions=2), id=2)])
    >>> len(ml)
    2
    >>> ml.idx['2'].n_faces
    320

    """

    meshes: List[SegmentMesh]

    def __init__(self,
                 x: Union[Iterable[Union[SegmentMesh, 'MeshList']],
                          'MeshList',
                          SegmentMesh,
                          None] = None,
                 make_copy: bool = False,
                 **kwargs):
        if isinstance(x, MeshList):
            # Changes to the new list must not propagate back
            meshes = [m for m in x.meshes]
        elif isinstance(x, type(None)):
            meshes = []
        elif utils.is_iterable(x) and not isinstance(x, (dict, tuple)):
            meshes = []
            for e in x:
                if isinstance(e, MeshList):
                    meshes += e.meshes
                else:
                    meshes.append(e)
        else:
            meshes = [x]

        for i, m in enumerate(meshes):
            if not isinstance(m, SegmentMesh):
                meshes[i] = SegmentMesh(m, **kwargs)
            elif make_copy:
                meshes[i] = m.copy()

        self.meshes = meshes

        # Add ID-based indexer
        self.idx = _IdIndexer(self)

    @property
    def ids(self) -> np.ndarray:
        """Segment ids of the meshes in this list."""
        return np.array([m.id for m in self.meshes], dtype=object)

    @property
    def empty(self) -> bool:
        """Return True if MeshList is empty."""
        return len(self.meshes) == 0

    def __str__(self):
        return self.__repr__()

    def __repr__(self):
        string = f'{type(self).__name__} containing {len(self)} meshes'
        if not self.empty:
            string += '\n' + str(self.summary())
        return string

    def __iter__(self) -> Iterator[SegmentMesh]:
        return iter(self.meshes)

    def __len__(self):
        return len(self.meshes)

    def __contains__(self, x):
        return x in self.meshes

    def __getitem__(self, key):
        if utils.is_iterable(key):
            key = list(key)
            if all([isinstance(k, (bool, np.bool_)) for k in key]):
                if len(key) != len(self.meshes):
                    raise IndexError('boolean index did not match indexed '
                                     f'MeshList; dimension is {len(self.meshes)}'
                                     ' but corresponding boolean dimension is '
                                     f'{len(key)}')
                subset = [m for m, k in zip(self.meshes, key) if k]
            else:
                subset = [self.meshes[i] for i in key]
        elif isinstance(key, str):
            subset = [m for m in self.meshes if re.fullmatch(key, str(m.name))]

            # For indexing by name, we expect a match
            if not subset:
                raise AttributeError('MeshList does not contain mesh(es) '
                                     f'with name: "{key}"')
        elif isinstance(key, (int, np.integer, slice)):
            subset = self.meshes[key]
        else:
            raise NotImplementedError(f'Indexing MeshList by {type(key)} not implemented')

        if isinstance(subset, SegmentMesh):
            return subset

        return self.__class__(subset)

    def __add__(self, to_add):
        """Implement addition."""
        if isinstance(to_add, SegmentMesh):
            return self.__class__(self.meshes + [to_add])
        elif isinstance(to_add, MeshList):
            return self.__class__(self.meshes + to_add.meshes)
        elif utils.is_iterable(to_add):
            return self.__class__(self.meshes + list(to_add))
        return NotImplemented

    def __eq__(self, other):
        if not isinstance(other, MeshList):
            return NotImplemented
        return (len(self) == len(other)
                and all(a is b for a, b in zip(self.meshes, other.meshes)))

    def append(self, v: Union[SegmentMesh, 'MeshList']):
        """Add mesh(es) to this MeshList."""
        if isinstance(v, MeshList):
            self.meshes += v.meshes
        elif isinstance(v, SegmentMesh):
            self.meshes.append(v)
        else:
            raise TypeError(f'Unable to append data of type "{type(v)}" to MeshList')

    def copy(self) -> 'MeshList':
        """Return copy of this MeshList (meshes are copied too)."""
        return self.__class__(self.meshes, make_copy=True)

    def summary(self, N: Optional[int] = None) -> pd.DataFrame:
        """Get summary over all meshes in this MeshList.

        Parameters
        ----------
        N :     int, optional
                If given, will only summarize the first N meshes.

        Returns
        -------
        pandas DataFrame

        """
        meshes = self.meshes[:N] if N else self.meshes
        return pd.DataFrame([m.summary() for m in meshes],
                            columns=SegmentMesh.SUMMARY_PROPS)


class _IdIndexer():
    """ID-based indexer for MeshLists to access their meshes by segment ID."""

    def __init__(self, meshlist):
        self.ml = meshlist

    def __getitem__(self, ids):
        # Track if a single mesh was requested
        single = not utils.is_iterable(ids)

        # Turn into list and force strings
        ids = [str(i) for i in utils.make_iterable(ids, force_type=object)]

        # Note we account for the fact we might have duplicate IDs in the list
        map = {}
        for m in self.ml:
            map[str(m.id)] = map.get(str(m.id), []) + [m]

        # Get selection
        sel = [map.get(i, []) for i in ids]

        # Check for missing IDs
        miss = [i for i, k in zip(ids, sel) if len(k) == 0]
        if miss:
            raise ValueError(f'No mesh(es) found for ID(s): {", ".join(miss)}')

        # Check for duplicate Ids in query IDs or in resulting selection
        dupl = [i for i, k in zip(ids, sel) if len(k) > 1]
        if dupl or len(set(ids)) < len(ids):
            logger.warning('Selection contains duplicate IDs.')

        # Flatten selection
        sel = [m for l in sel for m in l]

        if single and len(sel) == 1:
            return sel[0]
        else:
            return self.ml.__class__(sel)
