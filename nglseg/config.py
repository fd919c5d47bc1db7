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

import logging
import os

from typing import Optional, Union

logger = logging.getLogger('nglseg')


def default_logging():
    """Add a formatted stream handler to the ``nglseg`` logger.

    Called by default when nglseg is imported for the first time.
    To prevent this behaviour, set an environment variable:
    ``NGLSEG_SKIP_LOG_SETUP=True``.
    """
    logger.setLevel(logging.INFO)
    if len(logger.handlers) == 0:
        sh = logging.StreamHandler()
        sh.setLevel(logging.DEBUG)
        # Create formatter and add it to the handlers
        formatter = logging.Formatter(
            '%(levelname)-5s : %(message)s (%(name)s)')
        sh.setFormatter(formatter)
        logger.addHandler(sh)


def remove_log_handlers():
    """Remove all handlers from the ``nglseg`` logger.

    It may be preferable to skip nglseg' default log handler being added in the
    first place.
    Do this by setting an environment variable before the first import:
    ``NGLSEG_SKIP_LOG_SETUP=True``.
    """
    logger.handlers.clear()


skip_log_setup = os.environ.get('NGLSEG_SKIP_LOG_SETUP', '').lower() == 'true'
if not skip_log_setup:
    default_logging()


def get_logger(name: str):
    if skip_log_setup:
        return logging.getLogger(name)
    return logger


# Default settings for progress bars
pbar_hide = False
pbar_leave = False

# Set to true to hide progress bars e.g. on CI
headless = os.environ.get('NGLSEG_HEADLESS', 'False').lower() == 'true'
if headless:
    logger.info('Running in headless mode.')
    pbar_hide = True

# Peter Li's FFN1 skeleton release of 2018-10-02 switched from 1e5 to 1e6
DEFAULT_ZIP_DIVISOR = int(1e6)


class ServiceConfig:
    """Settings for the remote segmentation services.

    Pass an instance explicitly to the functions that talk to a service
    (e.g. :func:`nglseg.read_cloudvolume_meshes`) or that map ids to
    files (:func:`nglseg.segmentid2zip`).

    Parameters
    ----------
    cloudvolume_url :   str, optional
                        Segmentation source for CloudVolume, e.g.
                        ``graphene://https://.../segmentation/table/fly_v31``.
    skelziproot :       str, optional
                        Folder containing zipped FFN1 skeletons.
    zip_divisor :       int, optional
                        Divisor mapping segment ids onto zip files. If not
                        given, will be inferred from ``skelziproot``.

    Examples
    --------
    >>> from nglseg.config import ServiceConfig
    >>> cfg = ServiceConfig(zip_divisor=100000)
    >>> cfg.zip_divisor
    100000

    """

    def __init__(self,
                 cloudvolume_url: Optional[str] = None,
                 skelziproot: Optional[str] = None,
                 zip_divisor: Optional[Union[int, float]] = None):
        self.cloudvolume_url = cloudvolume_url
        self.skelziproot = skelziproot
        self.zip_divisor = int(zip_divisor) if zip_divisor else None

    def __repr__(self):
        return (f'{type(self).__name__}(cloudvolume_url={self.cloudvolume_url!r}, '
                f'skelziproot={self.skelziproot!r}, '
                f'zip_divisor={self.zip_divisor!r})')

    def __eq__(self, other):
        if not isinstance(other, ServiceConfig):
            return NotImplemented
        return vars(self) == vars(other)

    @classmethod
    def from_env(cls, environ=None) -> 'ServiceConfig':
        """Build settings from ``NGLSEG_*`` environment variables."""
        environ = os.environ if environ is None else environ
        divisor = environ.get('NGLSEG_ZIP_DIVISOR') or None
        return cls(cloudvolume_url=environ.get('NGLSEG_CLOUDVOLUME_URL') or None,
                   skelziproot=environ.get('NGLSEG_SKELZIPROOT') or None,
                   zip_divisor=float(divisor) if divisor else None)


def _type_of_script():
    """Returns context in which nglseg is run. """
    try:
        ipy_str = str(type(get_ipython()))  # type: ignore
        if 'zmqshell' in ipy_str:
            return 'jupyter'
        if 'terminal' in ipy_str:
            return 'ipython'
    except NameError:
        return 'terminal'


def is_jupyter():
    """Test if nglseg is run in a Jupyter notebook."""
    return _type_of_script() == 'jupyter'


# Here, we import tqdm and determine whether we use classic notebook tbars
from tqdm.notebook import tqdm as tqdm_notebook
from tqdm import tqdm as tqdm_classic

# Keep this because `tqdm_notebook` is only a wrapper (type "function")
tqdm_class = tqdm_classic

if is_jupyter():
    tqdm = tqdm_notebook
else:
    tqdm = tqdm_classic
