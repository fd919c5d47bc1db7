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

import numpy as np

from typing import Any, Dict, List

from .. import config, utils
from .layers import SceneRefKind, classify_scene_ref, read_scene, iter_layers

# Set up logging
logger = config.get_logger(__name__)

# Newer Neuroglancer versions mark hidden segments with a leading "!"
HIDDEN_PREFIX = '!'


def ngl_segments(x: Any,
                 as_text: bool = False,
                 include_hidden: bool = True,
                 session=None) -> np.ndarray:
    """Turn diverse inputs into Neuroglancer segment ids.

    Parameters
    ----------
    x :                 int | str | list-like | pathlib.Path | dict
                        Either the segment ids themselves (numbers or
                        strings of decimal digits) or a Neuroglancer scene:
                        a scene URL (which embeds or points to a JSON scene
                        specification), the path to a JSON file, raw JSON
                        text or a dictionary from parsing any of the above.
    as_text :           bool
                        Whether to return segment ids as strings rather
                        than numbers.
    include_hidden :    bool
                        Whether to include hidden segments (``hiddenSegments``
                        or, in newer scenes, segments prefixed with "!").
    session :           requests.Session, optional
                        Used to fetch scenes from state servers.

    Returns
    -------
    numpy.ndarray
                        Of ``str`` if ``as_text=True``; otherwise of
                        ``uint64`` (or unchanged if ``x`` was numeric).

    Raises
    ------
    DecodeError
                        If ``x`` is text/file/URL without valid JSON.
    FormatError
                        If the decoded scene is not a dictionary or if the
                        selected segments are not all decimal ids.
    ResolutionError
                        If the scene has no layers, no layer with segments
                        or more than one layer with segments.

    Examples
    --------
    No change:

    >>> from nglseg import ngl_segments
    >>> ngl_segments([10950626347, 10952282491, 13307888342])
    array([10950626347, 10952282491, 13307888342])

    Just turns these into numbers:

    >>> ngl_segments(["10950626347", "10952282491", "13307888342"])
    array([10950626347, 10952282491, 13307888342], dtype=uint64)

    Extract from a scene:

    >>> scene = {'layers': [{'type': 'image', 'source': 'precomputed://em'},
    ...                     {'type': 'segmentation',
    ...                      'segments': ['1', '2'],
    ...                      'hiddenSegments': ['3']}]}
    >>> ngl_segments(scene, as_text=True, include_hidden=False)
    array(['1', '2'], dtype='<U1')

    From a URL, a file on disk or the clipboard:

    >>> ngl_segments('<ngl-scene-url>')                         # doctest: +SKIP
    >>> ngl_segments('/path/to/scene.json')                     # doctest: +SKIP
    >>> ngl_segments(pyperclip.paste())                         # doctest: +SKIP

    """
    kind = classify_scene_ref(x)

    if kind is SceneRefKind.NUMERIC:
        ids = utils.make_iterable(x)
        return _numeric_to_text(ids) if as_text else ids

    if kind is SceneRefKind.LITERAL_IDS:
        ids = [str(v).strip() for v in utils.make_iterable(x, force_type=object)]
        return _format_ids(ids, as_text)

    layers = read_scene(x, kind=kind, session=session).get('layers')
    if layers is None:
        raise utils.ResolutionError('Cannot find layers entry')

    # Layer names are not guaranteed to be unique: keep position
    segs = [(i, name, _layer_segments(l, name, include_hidden=include_hidden))
            for i, (name, l) in enumerate(iter_layers(layers))]
    populated = [(i, name, s) for i, name, s in segs if len(s)]

    if len(populated) == 0:
        raise utils.ResolutionError('Sorry. No segments entry in this scene!')
    if len(populated) > 1:
        labels = _layer_labels(populated)
        raise utils.ResolutionError('Sorry. More than one layer with segments '
                                    'in this scene:\n' + '\n'.join(labels),
                                    layers=labels)

    _, name, ids = populated[0]
    logger.debug(f'Found {len(ids)} segments in layer "{name}"')

    return _format_ids(ids, as_text)


def _layer_labels(populated) -> List[str]:
    """Layer names, with position added where names collide."""
    names = [name for _, name, _ in populated]
    return [f'{name} (layer {i + 1})' if names.count(name) > 1 else name
            for i, name, _ in populated]


def _layer_segments(layer: Dict[str, Any],
                    name: str,
                    include_hidden: bool) -> List[str]:
    """Collect the (unique) segments of a single layer."""
    visible, hidden = [], []
    for s in _as_list(layer.get('segments')):
        s = str(s).strip()
        if s.startswith(HIDDEN_PREFIX):
            hidden.append(s[len(HIDDEN_PREFIX):].strip())
        else:
            visible.append(s)

    if include_hidden:
        hidden += [str(s).strip() for s in _as_list(layer.get('hiddenSegments'))]
        segs = visible + hidden
    else:
        segs = visible

    for s in segs:
        if not utils.is_id_string(s):
            raise utils.FormatError(f'Invalid segment id {s!r} in layer "{name}"')

    return utils.unique_ordered(segs)


def _as_list(x: Any) -> list:
    if x is None:
        return []
    if utils.is_iterable(x) and not isinstance(x, dict):
        return list(x)
    return [x]


def _format_ids(ids: List[str], as_text: bool) -> np.ndarray:
    """Turn list of id strings into array of str or uint64."""
    if as_text:
        return np.array(ids, dtype=str)
    # Going via int() keeps ids > 2**53 exact
    return np.array([int(i) for i in ids], dtype=np.uint64)


def _numeric_to_text(ids: np.ndarray) -> np.ndarray:
    """Turn numeric ids into str without decimal points."""
    out = []
    for i in ids.tolist():
        if isinstance(i, float) and i.is_integer():
            i = int(i)
        out.append(str(i))
    return np.array(out, dtype=str)
