# Copyright (C) 2006  Joe Wreschnig
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Utility classes for id3kit.

You should not rely on the interfaces here being stable. They are
intended for internal use in id3kit only.
"""

from __future__ import annotations

import logging
from functools import wraps

logger = logging.getLogger(__name__)


class ID3KitError(Exception):
    """Base class for all custom exceptions in id3kit"""

    __module__ = "id3kit"


def convert_error(exc_src, exc_dest):
    """A decorator for reraising exceptions with a different type.
    Mostly useful for IOError.

    Args:
        exc_src (type): The source exception type
        exc_dest (type): The target exception type.
    """

    def wrap(func):

        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except exc_dest:
                raise
            except exc_src as err:
                raise exc_dest(err) from err

        return wrapper

    return wrap


def insert_bytes(fobj, size: int, offset: int, BUFFER_SIZE: int = 2 ** 16):
    """Insert size bytes of empty space starting at offset.

    fobj must be an open file object, open rb+ or
    equivalent. id3kit tries to use mmap to resize the file, but
    falls back to a significantly slower method if mmap fails.

    Raises:
        IOError
    """

    assert 0 < size
    assert 0 <= offset

    fobj.seek(0, 2)
    filesize = fobj.tell()
    movesize = filesize - offset
    if movesize < 0:
        raise ValueError("offset %d beyond end of file (%d)" % (
            offset, filesize))

    fobj.write(b'\x00' * size)
    fobj.flush()

    try:
        import mmap
        fileno = fobj.fileno()
        map = mmap.mmap(fileno, filesize + size)
        try:
            map.move(offset + size, offset, movesize)
        finally:
            map.close()
    except (ValueError, EnvironmentError, ImportError, AttributeError):
        # handle broken mmap scenarios and file objects without a fileno
        logger.debug("mmap move failed, falling back to chunked copy")
        fobj.seek(filesize, 0)
        while movesize:
            # At the start of this loop, fobj is pointing at the end
            # of the data we need to move, which is of movesize length.
            thismove = min(BUFFER_SIZE, movesize)
            # Seek back however much we're going to read this frame.
            fobj.seek(-thismove, 1)
            nextpos = fobj.tell()
            # Read it, so we're back at the end.
            data = fobj.read(thismove)
            # Seek back to where we need to write it.
            fobj.seek(-thismove + size, 1)
            # Write it.
            fobj.write(data)
            # And seek back to the end of the unmoved data.
            fobj.seek(nextpos)
            movesize -= thismove

    fobj.flush()


def insert_bytes_in_memory(data: bytes, size: int, offset: int) -> bytes:
    """Like insert_bytes(), but returns a new, larger copy of data.

    The inserted gap is zero filled, everything from offset on is moved
    back by size bytes.
    """

    assert 0 < size
    assert 0 <= offset

    if offset > len(data):
        raise ValueError("offset %d beyond end of data (%d)" % (
            offset, len(data)))

    out = bytearray(len(data) + size)
    out[:offset] = data[:offset]
    out[offset + size:] = data[offset:]
    return bytes(out)


def read_full(fileobj, size: int) -> bytes:
    """Like fileobj.read but raises IOError if not all requested data is
    returned.

    Raises:
        IOError
    """

    if size < 0:
        raise ValueError("size must not be negative")

    data = fileobj.read(size)
    if len(data) != size:
        raise IOError
    return data
