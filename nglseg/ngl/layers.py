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

import enum
import json
import os

import numpy as np
import pandas as pd

from typing import Any, Dict, List, Optional, Tuple

from .. import config, utils
from .decode import decode_scene

# Set up logging
logger = config.get_logger(__name__)


class SceneRefKind(enum.Enum):
    """The shapes in which a scene (or its segments) can be referenced."""

    #: numbers, e.g. ``[10950626347, 10952282491]``
    NUMERIC = 'numeric'
    #: strings that are all decimal ids, e.g. ``["10950626347"]``
    LITERAL_IDS = 'literal_ids'
    #: a single ``http(s)://`` URL embedding/referencing a scene
    URL = 'url'
    #: path to a JSON file on disk
    FILE = 'file'
    #: JSON text (also a list of lines of JSON text)
    RAW_JSON = 'raw_json'
    #: an already parsed scene (dict)
    PARSED = 'parsed'


def classify_scene_ref(x: Any) -> SceneRefKind:
    """Work out what kind of scene reference ``x`` is.

    Parameters
    ----------
    x :     int | str | pathlib.Path | dict | list-like
            The scene reference.

    Returns
    -------
    SceneRefKind

    Raises
    ------
    FormatError
            If ``x`` can not be a scene reference at all (e.g. ``None``
            or a list of mixed types).
    FileNotFoundError
            If ``x`` is a ``pathlib.Path`` (or other path-like object) that
            does not exist. A ``str`` naming a missing file can not be told
            apart from JSON text: it is classified as ``RAW_JSON`` and
            fails later with a ``DecodeError``.

    Examples
    --------
    >>> from nglseg.ngl import classify_scene_ref
    >>> classify_scene_ref([10950626347, 10952282491])
    <SceneRefKind.NUMERIC: 'numeric'>
    >>> classify_scene_ref(['10950626347', '10952282491'])
    <SceneRefKind.LITERAL_IDS: 'literal_ids'>
    >>> classify_scene_ref('https://ngl.flywire.ai/?json_url=https://x.org/1')
    <SceneRefKind.URL: 'url'>
    >>> classify_scene_ref('{"layers": []}')
    <SceneRefKind.RAW_JSON: 'raw_json'>
    >>> classify_scene_ref({'layers': []})
    <SceneRefKind.PARSED: 'parsed'>

    """
    if isinstance(x, dict):
        return SceneRefKind.PARSED

    if isinstance(x, os.PathLike):
        if not os.path.isfile(x):
            raise FileNotFoundError(f'Scene file not found: {x}')
        return SceneRefKind.FILE

    if isinstance(x, (bool, np.bool_)):
        raise utils.FormatError(f'Unable to extract segment information from {x!r}')

    if isinstance(x, (int, np.integer)):
        return SceneRefKind.NUMERIC

    if isinstance(x, (str, np.str_)):
        return _classify_text(str(x))

    if utils.is_iterable(x) and not isinstance(x, dict):
        values = list(x)

        if not len(values):
            return SceneRefKind.LITERAL_IDS

        if utils.is_numeric(values, bool_numeric=False):
            return SceneRefKind.NUMERIC

        if all(utils.is_id_string(v) for v in values):
            return SceneRefKind.LITERAL_IDS

        if all(isinstance(v, (str, np.str_)) for v in values):
            if len(values) == 1:
                return _classify_text(str(values[0]))
            return SceneRefKind.RAW_JSON

    raise utils.FormatError(f'Unable to extract segment information from '
                            f'input of type "{type(x)}"')


def _classify_text(x: str) -> SceneRefKind:
    if utils.is_id_string(x):
        return SceneRefKind.LITERAL_IDS
    if utils.is_url(x):
        return SceneRefKind.URL
    if utils.is_existing_file(x):
        return SceneRefKind.FILE
    # Anything else we'll try to parse as JSON
    return SceneRefKind.RAW_JSON


def _as_text(x: Any) -> str:
    """Collapse a str or a list of lines into a single str."""
    if isinstance(x, (str, np.str_)):
        return str(x)
    return '\n'.join(str(v) for v in x)


def read_scene(x: Any,
               kind: Optional[SceneRefKind] = None,
               session=None) -> Dict[str, Any]:
    """Turn a scene reference into a parsed scene (dict).

    Parameters
    ----------
    x :         str | pathlib.Path | dict | list of str
                URL, path to JSON file, JSON text or parsed scene.
    kind :      SceneRefKind, optional
                If already known. Will be inferred otherwise.
    session :   requests.Session, optional
                Passed to :func:`nglseg.ngl.decode_scene`.

    Returns
    -------
    dict

    Raises
    ------
    DecodeError
                If the text/file/URL does not contain valid JSON.
    FormatError
                If the decoded value is not a dictionary.

    """
    if kind is None:
        kind = classify_scene_ref(x)

    if kind is SceneRefKind.PARSED:
        scene = x
    elif kind is SceneRefKind.URL:
        scene = decode_scene(_as_text(x).strip(), session=session)
    elif kind is SceneRefKind.FILE:
        path = x if isinstance(x, os.PathLike) else _as_text(x)
        with open(path, 'r', encoding='utf-8') as f:
            try:
                scene = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise utils.DecodeError(f'Unable to parse {path} as JSON: {e}') from e
    elif kind is SceneRefKind.RAW_JSON:
        scene = decode_scene(_as_text(x), session=session)
    elif kind in (SceneRefKind.NUMERIC, SceneRefKind.LITERAL_IDS):
        # A bare id (or list thereof) does not describe a scene
        scene = None
    else:
        raise ValueError(f'Unexpected scene reference kind: {kind}')

    if not isinstance(scene, dict):
        raise utils.FormatError('Unable to extract segment information from '
                                f'{type(scene).__name__}')

    return scene


def ngl_layers(x: Any, session=None) -> Optional[Any]:
    """Extract the layers from a Neuroglancer scene.

    Parameters
    ----------
    x :         str | pathlib.Path | dict | list of str
                A scene: either as URL, path to a JSON file, raw JSON
                text or an already parsed dictionary.
    session :   requests.Session, optional
                Used to fetch scenes from state servers.

    Returns
    -------
    list | dict | None
                The ``layers`` entry: a list of layers for current
                Neuroglancer states, a dict keyed by layer name for legacy
                states, or ``None`` if the scene has no layers.

    Examples
    --------
    >>> from nglseg.ngl import ngl_layers
    >>> ngl_layers({'layers': [{'name': 'seg', 'type': 'segmentation'}]})
    [{'name': 'seg', 'type': 'segmentation'}]
    >>> ngl_layers('{"position": [0, 0, 0]}') is None
    True

    """
    scene = read_scene(x, session=session)
    return scene.get('layers')


def iter_layers(layers: Any) -> List[Tuple[str, Dict[str, Any]]]:
    """Normalize layers into a list of ``(name, layer)`` tuples.

    Layers without a name are called ``layer <N>`` (1-based).
    """
    if layers is None:
        return []

    if isinstance(layers, dict):
        items = [(str(k), v) for k, v in layers.items()]
    elif isinstance(layers, (list, tuple)):
        items = []
        for i, l in enumerate(layers):
            name = l.get('name') if isinstance(l, dict) else None
            items.append((name if name else f'layer {i + 1}', l))
    else:
        raise utils.FormatError(f'Unexpected type for layers: "{type(layers)}"')

    # Anything that isn't a dict can't carry segments or sources
    return [(n, l if isinstance(l, dict) else {}) for n, l in items]


def _layer_source(layer: Dict[str, Any]) -> Optional[str]:
    """Get the source of a layer as string (or None)."""
    source = layer.get('source')
    # Newer states can have {"url": ...} or a list of those
    if isinstance(source, list):
        source = source[0] if source else None
    if isinstance(source, dict):
        source = source.get('url')
    return source


def ngl_layer_summary(x: Any, session=None) -> pd.DataFrame:
    """Summarize the layers of a Neuroglancer scene.

    Parameters
    ----------
    x :         str | pathlib.Path | dict
                A scene. See :func:`nglseg.ngl_layers` for details.

    Returns
    -------
    pandas.DataFrame
                One row per layer with columns ``name``, ``source``,
                ``type`` and ``n`` (1-based position of the layer).

    Examples
    --------
    >>> from nglseg.ngl import ngl_layer_summary
    >>> scene = {'layers': [{'name': 'em', 'type': 'image', 'source': 'precomputed://em'},
    ...                     {'name': 'seg', 'type': 'segmentation'}]}
    >>> ngl_layer_summary(scene)['type'].tolist()
    ['image', 'segmentation']

    """
    return _layer_table(iter_layers(ngl_layers(x, session=session)))


def _layer_table(layers: List[Tuple[str, Dict[str, Any]]]) -> pd.DataFrame:
    return pd.DataFrame([[name, _layer_source(l), l.get('type'), i + 1]
                         for i, (name, l) in enumerate(layers)],
                        columns=['name', 'source', 'type', 'n'])


def ngl_segmentation(x: Any, session=None) -> Optional[Dict[str, Any]]:
    """Find the segmentation layer of a Neuroglancer scene.

    Parameters
    ----------
    x :         str | pathlib.Path | dict
                A scene. See :func:`nglseg.ngl_layers` for details.

    Returns
    -------
    dict | None
                The first layer with a source whose type contains "seg"
                (e.g. "segmentation" or "segmentation_with_graph"). ``None``
                if there is no such layer.

    Examples
    --------
    >>> from nglseg.ngl import ngl_segmentation
    >>> scene = {'layers': [{'type': 'image', 'source': 'precomputed://em'},
    ...                     {'type': 'segmentation', 'source': 'graphene://seg'}]}
    >>> ngl_segmentation(scene)['source']
    'graphene://seg'

    """
    layers = iter_layers(ngl_layers(x, session=session))
    summary = _layer_table(layers)

    # Remove any layers without defined sources
    summary = summary[summary['source'].notnull()]
    is_seg = summary['type'].fillna('').astype(str).str.contains('seg')
    if not is_seg.any():
        return None

    return layers[summary.loc[is_seg, 'n'].values[0] - 1][1]
