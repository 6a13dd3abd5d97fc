# Copyright (C) 2005  Michael Urman
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""id3kit reads, modifies and rewrites ID3 tags in place.

::

    import id3kit

    with id3kit.Open("song.mp3") as f:
        print(f.tags.title, f.tags.artist)
        f.tags.title = "New Title"

ID3v2.2, 2.3 and 2.4 tags are read and written in the version they
were found in, ID3v1 tags are used if there is no ID3v2 tag. Frames
this library doesn't understand are kept as they are.
"""

from ._util import ID3KitError
from ._file import ID3Bytes, ID3File, Open

version = (1, 0, 0)
"""Version tuple."""

version_string = ".".join(map(str, version))
"""Version string."""

__all__ = ["ID3KitError", "ID3File", "ID3Bytes", "Open", "version",
           "version_string"]
