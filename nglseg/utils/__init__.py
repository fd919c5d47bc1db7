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

from .iterables import make_iterable, is_iterable, unique_ordered
from .misc import (is_jupyter, set_loggers, set_pbars, is_url,
                   is_existing_file)
from .eval import eval_param, is_numeric, is_id_string
from .exceptions import (NglsegError, DecodeError, FormatError,
                         ResolutionError, FetchError, SetupError,
                         ConstructionError, ReadError)

__all__ = ['set_loggers', 'set_pbars']
