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

from .__version__ import __version__, __version_vector__

from . import config
from .config import ServiceConfig
from .core import *
from .ids import (parse_filename, swc2segmentid, segmentid2zip,
                  zip2segmentstem, find_zip_divisor)
from .interfaces import *
from .io import *
from .ngl import *
from .utils import *
from .utils.exceptions import (NglsegError, DecodeError, FormatError,
                               ResolutionError, FetchError, SetupError)
