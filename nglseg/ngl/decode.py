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

import json
import requests

from typing import Any, Optional, Union
from urllib.parse import parse_qs, unquote, urlparse

from .. import config, utils

# Set up logging
logger = config.get_logger(__name__)

# Seconds to wait for a state server to answer
STATE_TIMEOUT = 30


def decode_scene(x: str,
                 session: Optional[requests.Session] = None
                 ) -> Union[dict, list]:
    """Decode a Neuroglancer scene from a URL or raw JSON text.

    Parameters
    ----------
    x :         str
                Either a URL (``http(s)://...``) or JSON text. URLs can
                embed the scene in two ways:

                 - ``https://ngl.flywire.ai/?json_url=<state url>`` points
                   to a state server from which the JSON is fetched
                 - ``https://neuroglancer-demo.appspot.com/#!{...}`` carries
                   the (percent-encoded) JSON in the fragment; the fragment
                   may also be the URL of a JSON file (``#!https://...``)

    session :   requests.Session, optional
                Session used to fetch remote states. Use this to provide
                authentication headers or retries.

    Returns
    -------
    dict
                The parsed scene.

    Raises
    ------
    DecodeError
                If ``x`` is neither valid JSON nor a URL yielding valid
                JSON.

    Examples
    --------
    >>> from nglseg.ngl import decode_scene
    >>> scene = decode_scene('{"layers": [{"type": "segmentation", "segments": ["1"]}]}')
    >>> scene['layers'][0]['segments']
    ['1']
    >>> u = 'https://neuroglancer-demo.appspot.com/#!%7B%22layers%22:%5B%5D%7D'
    >>> decode_scene(u)
    {'layers': []}

    """
    if not isinstance(x, str):
        raise TypeError(f'Expected str, got "{type(x)}"')

    if utils.is_url(x):
        return _decode_url(x.strip(), session=session)

    return _parse_json(x, what='JSON text')


def _decode_url(url: str, session: Optional[requests.Session] = None):
    """Extract the scene embedded in (or referenced by) a URL."""
    parsed = urlparse(url)

    query = parse_qs(parsed.query)
    if 'json_url' in query:
        return fetch_state(query['json_url'][0], session=session)

    fragment = unquote(parsed.fragment)
    if fragment.startswith('!'):
        fragment = fragment[1:]

    if fragment.startswith('{'):
        return _parse_json(fragment, what=f'fragment of {url}')

    if utils.is_url(fragment):
        return fetch_state(fragment, session=session)

    raise utils.DecodeError(f'Unable to find a scene in URL: {url}')


def fetch_state(url: str,
                session: Optional[requests.Session] = None) -> Any:
    """Fetch and parse a JSON state from a state server.

    Parameters
    ----------
    url :       str
                URL of the JSON state.
    session :   requests.Session, optional
                Session to use for the request.

    Returns
    -------
    dict

    """
    logger.debug(f'Fetching Neuroglancer state from {url}')
    get = session.get if session is not None else requests.get
    try:
        r = get(url, timeout=STATE_TIMEOUT)
        r.raise_for_status()
    except requests.RequestException as e:
        raise utils.DecodeError(f'Failed to fetch scene from {url}: {e}') from e

    return _parse_json(r.text, what=f'state at {url}')


def _parse_json(text: str, what: str = 'input'):
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise utils.DecodeError(f'Unable to parse {what} as JSON: {e}') from e
