# Copyright (C) 2005  Michael Urman
#               2013  Christoph Reiter
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Binding tags to the storage they were read from.

Writing a tag back never moves audio data towards the start of the
file: a tag that shrank keeps its old footprint as padding, a tag that
outgrew its footprint pushes everything after it back. None of this is
atomic, if writing fails the file has to be restored from elsewhere.
"""

from __future__ import annotations

import logging
import os
from io import BytesIO

from ._util import convert_error, insert_bytes, insert_bytes_in_memory
from .id3 import LATEST_VERSION, ID3Tags, ID3v1Tags, error
from .id3._id3v1 import TAG_SIZE
from .id3._tags import HEADER_SIZE

logger = logging.getLogger(__name__)


def _load(fileobj):
    """Returns (tags, original_size) for the best tag found in fileobj.

    original_size is the number of bytes the tag occupies at the start
    of the file, 0 if there is no ID3v2 tag.
    """

    fileobj.seek(0, 0)
    tags = ID3Tags.parse(fileobj)
    if tags is not None:
        return tags, HEADER_SIZE + tags.size

    tags = ID3v1Tags.parse(fileobj)
    if tags is not None:
        return tags, 0

    logger.debug("no tag found, starting with an empty ID3v2.%d tag",
                 LATEST_VERSION)
    return ID3Tags(LATEST_VERSION), 0


def _render(tags: ID3Tags, original_size: int) -> tuple[bytes, int]:
    """Returns the complete tag data including padding and how many
    bytes have to be inserted in front of the audio data for it."""

    tags._pad_to(original_size - HEADER_SIZE)
    data = bytes(tags) + b"\x00" * tags.padding
    if len(data) != HEADER_SIZE + tags.size:
        raise error("tag size accounting is off: %d != %d" % (
            len(data), HEADER_SIZE + tags.size))
    return data, max(len(data) - original_size, 0)


class _TaggedStorage:

    tags: ID3Tags | ID3v1Tags
    original_size: int

    @property
    def dirty(self) -> bool:
        return self.tags.dirty

    def _check_tags(self):
        if not isinstance(self.tags, (ID3Tags, ID3v1Tags)):
            raise error("unknown tag version: %r" % type(self.tags))

    def _committed(self, tags):
        if isinstance(tags, ID3Tags):
            self.original_size = HEADER_SIZE + tags.size
        tags._dirty = False

    def pprint(self) -> str:
        return self.tags.pprint()


class ID3File(_TaggedStorage):
    """ID3File(filething)

    A file with an ID3v2 or ID3v1 tag, opened for reading and writing.

    If the file has an ID3v2 tag it is used, otherwise an ID3v1 tag,
    otherwise a new empty ID3v2.3 tag is created which gets written in
    front of the file if it is modified.

    ::

        with ID3File("song.mp3") as f:
            f.tags.title = "Hello World"

    Arguments:
        filething: a path or a file object opened "rb+". File objects
            passed in are not closed by close().
        buffer_size (int): chunk size for moving data if mmap can't be
            used

    Attributes:
        tags (ID3Tags or ID3v1Tags)
        original_size (int): bytes taken by the ID3v2 tag in the file
    """

    @convert_error(IOError, error)
    def __init__(self, filething, buffer_size: int = 2 ** 16):
        if isinstance(filething, (str, bytes, os.PathLike)):
            self.filename = filething
            self._fileobj = open(filething, "rb+")
            self._owned = True
        else:
            self.filename = getattr(filething, "name", None)
            self._fileobj = filething
            self._owned = False
        self._buffer_size = buffer_size

        try:
            self.tags, self.original_size = _load(self._fileobj)
        except BaseException:
            self._release()
            raise

    def _release(self):
        if self._owned:
            self._fileobj.close()

    @convert_error(IOError, error)
    def save(self):
        """Writes the tag if it was modified.

        Raises:
            id3kit.id3.error: on I/O errors or for unknown tag types.
                The file might be left partially written.
        """

        self._check_tags()
        if not self.tags.dirty:
            return

        fileobj = self._fileobj
        if isinstance(self.tags, ID3v1Tags):
            fileobj.seek(-TAG_SIZE, 2)
            fileobj.write(bytes(self.tags))
        else:
            data, grow = _render(self.tags, self.original_size)
            fileobj.seek(0, 2)
            # nothing to move if the old tag reached the end of the file
            if grow and self.original_size < fileobj.tell():
                logger.debug("growing tag in %r by %d bytes",
                             self.filename, grow)
                insert_bytes(fileobj, grow, self.original_size,
                             BUFFER_SIZE=self._buffer_size)
            fileobj.seek(0, 0)
            fileobj.write(data)
        fileobj.flush()

        self._committed(self.tags)

    def close(self):
        """Saves any modifications and closes the file, even if saving
        fails."""

        try:
            self.save()
        finally:
            self._release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


class ID3Bytes(_TaggedStorage):
    """ID3Bytes(data)

    Like ID3File, but for a complete file held in memory.

    ::

        f = ID3Bytes(data)
        f.tags.artist = "Someone"
        data = f.update_edits_into_bytes()
    """

    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.tags, self.original_size = _load(BytesIO(self.data))

    def update_edits_into_bytes(self) -> bytes:
        """Returns the data with all modifications of the tag applied.

        Raises:
            id3kit.id3.error: for unknown tag types
        """

        self._check_tags()
        if not self.tags.dirty:
            return self.data

        if isinstance(self.tags, ID3v1Tags):
            self.data = self.data[:-TAG_SIZE] + bytes(self.tags)
        else:
            tag_data, grow = _render(self.tags, self.original_size)
            data = self.data
            if grow and self.original_size < len(data):
                data = insert_bytes_in_memory(data, grow, self.original_size)
            self.data = tag_data + data[len(tag_data):]

        self._committed(self.tags)
        return self.data


Open = ID3File
