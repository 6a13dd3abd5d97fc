# Copyright (C) 2005  Michael Urman
#               2006  Lukas Lalinsky
#               2013  Christoph Reiter
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""ID3v2 reading and writing.

This is based off of the following references:

* http://id3.org/id3v2.4.0-structure
* http://id3.org/id3v2.4.0-frames
* http://id3.org/id3v2.3.0
* http://id3.org/id3v2-00
* http://id3.org/ID3v1

Frames are kept in the order they were read or added and the tag keeps
track of its own size, so it can be written back into the space it
came from, using up padding before growing.

Since this file's documentation is a little unwieldy, you are probably
interested in the :class:`ID3Tags` class to start with.
"""

from ._frames import (
    COMMON_FRAMES,
    DataFrame,
    DescTextFrame,
    Frame,
    Frames_2_2,
    Frames_2_3,
    Frames_2_4,
    FrameType,
    IdFrame,
    ImageFrame,
    ImageFrame22,
    TextFrame,
    UnsynchTextFrame,
    get_frame_type,
    is_text_frame,
)
from ._id3v1 import GENRES, ID3v1Tags
from ._specs import (
    Encoding,
    decode_text,
    encode_text,
    encoded_diff,
    find_terminator,
    index_for_name,
    name_for_index,
)
from ._tags import (
    HEADER_SIZE,
    LATEST_VERSION,
    ID3Header,
    ID3Tags,
    ID3VersionConfig,
    get_version_config,
)
from ._util import (
    BitOverflowError,
    BitPaddedInt,
    EncodingError,
    ID3JunkFrameError,
    ID3NoHeaderError,
    ID3UnsupportedVersionError,
    InvalidLengthError,
    error,
    norm_bytes,
    norm_int,
    synch_bytes,
    synch_int,
)

__all__ = [
    "ID3Tags", "ID3v1Tags", "ID3Header", "Frame", "FrameType", "Encoding",
    "error",
]
