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

from typing import Optional, Sequence


class NglsegError(Exception):
    """Base class for errors raised by nglseg."""
    pass


class DecodeError(NglsegError, ValueError):
    """Input is neither valid JSON nor a URL that yields valid JSON."""
    pass


class FormatError(NglsegError, ValueError):
    """Decoded scene is not a structure we can extract layers from."""
    pass


class ResolutionError(NglsegError, ValueError):
    """Unable to resolve a scene into one unambiguous set of segment ids.

    Parameters
    ----------
    msg :       str
                Error message.
    layers :    list of str, optional
                Names of the layers that carry segments. Empty if no
                layer has segments; more than one entry if the scene is
                ambiguous.

    """

    def __init__(self, msg: str, layers: Optional[Sequence[str]] = None):
        super().__init__(msg)
        self.layers = list(layers) if layers is not None else []


class FetchError(NglsegError, RuntimeError):
    """Failed to fetch an artifact for a given segment."""

    def __init__(self, msg: str, segment_id: Optional[str] = None):
        super().__init__(msg)
        self.segment_id = segment_id


class SetupError(NglsegError, RuntimeError):
    """Failed to set up a directory or a remote service connection."""
    pass


class ConstructionError(NglsegError, TypeError):
    """Unable to construct a mesh object from the given data."""
    pass


class ReadError(NglsegError, IOError):
    """Failed to read a file from disk."""
    pass
