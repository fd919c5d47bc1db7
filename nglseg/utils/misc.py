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
import re

from typing import Any, Optional

from .. import config

# Set up logging
logger = config.get_logger(__name__)

URL_PATTERN = re.compile(r'^https?://', flags=re.IGNORECASE)


def is_url(x: Any) -> bool:
    """Return True if ``x`` is a string that looks like a http(s) URL.

    Examples
    --------
    >>> from nglseg.utils import is_url
    >>> is_url('www.google.com')
    False
    >>> is_url('http://www.google.com')
    True
    >>> is_url('gs://bucket/segmentation')
    False

    """
    return isinstance(x, str) and bool(URL_PATTERN.match(x.strip()))


def is_existing_file(x: Any) -> bool:
    """Return True if ``x`` is a str or path pointing to an existing file.

    Long strings (e.g. raw JSON) are rejected without asking the file
    system.
    """
    if isinstance(x, os.PathLike):
        return os.path.isfile(x)
    if not isinstance(x, str) or '\n' in x or len(x) > 4096:
        return False
    try:
        return os.path.isfile(x)
    except (OSError, ValueError):
        return False


def is_jupyter() -> bool:
    """Test if nglseg is run in a Jupyter notebook.

    Examples
    --------
    >>> from nglseg.utils import is_jupyter
    >>> # If run outside a Jupyter environment
    >>> is_jupyter()
    False

    """
    return config.is_jupyter()


def set_loggers(level: str = 'INFO'):
    """Set levels for all associated module loggers.

    Examples
    --------
    >>> from nglseg.utils import set_loggers
    >>> from nglseg import config
    >>> # Get current level
    >>> lvl = config.logger.level
    >>> # Set new level
    >>> set_loggers('INFO')
    >>> # Revert to old level
    >>> set_loggers(lvl)

    """
    config.logger.setLevel(level)


def set_pbars(hide: Optional[bool] = None,
              leave: Optional[bool] = None,
              jupyter: Optional[bool] = None) -> None:
    """Set global progress bar behaviors.

    Parameters
    ----------
    hide :      bool, optional
                Set to True to hide all progress bars.
    leave :     bool, optional
                Set to False to clear progress bars after they have finished.
    jupyter :   bool, optional
                Set to False to force using of classic tqdm even if in
                Jupyter environment.

    Returns
    -------
    Nothing

    Examples
    --------
    >>> from nglseg.utils import set_pbars
    >>> # Hide progress bars after finishing
    >>> set_pbars(leave=False)
    >>> # Never show progress bars
    >>> set_pbars(hide=True)
    >>> # Never use Jupyter widget progress bars
    >>> set_pbars(jupyter=False)

    """
    if isinstance(hide, bool):
        config.pbar_hide = hide

    if isinstance(leave, bool):
        config.pbar_leave = leave

    if isinstance(jupyter, bool):
        if jupyter:
            if not is_jupyter():
                logger.error('No Jupyter environment detected.')
            else:
                config.tqdm = config.tqdm_notebook
        else:
            config.tqdm = config.tqdm_classic

    return
