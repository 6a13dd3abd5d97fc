# Copyright (C) 2005  Michael Urman
#               2013  Christoph Reiter
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

import logging
import struct
from typing import Callable, NamedTuple

from id3kit._util import read_full

from ._frames import (
    COMMON_FRAMES,
    FRAME_TYPES,
    Frame,
    FrameType,
    TextFrame,
    get_frame_type,
    is_text_frame,
)
from ._specs import Encoding
from ._util import (
    ID3NoHeaderError,
    ID3UnsupportedVersionError,
    error,
    norm_bytes,
    norm_int,
    synch_bytes,
    synch_int,
)

logger = logging.getLogger(__name__)

HEADER_SIZE = 10
FRAME_HEADER_SIZE = 10
V22_FRAME_HEADER_SIZE = 6

LATEST_VERSION = 3
"""The ID3v2 major version used for newly created tags"""


class ID3Header:
    """The 10 byte header in front of every ID3v2 tag.

    Raises:
        ID3NoHeaderError: no ID3v2 tag at the current position
        ID3UnsupportedVersionError: not ID3v2.2, 2.3 or 2.4
        BitOverflowError: the size is not a valid synch-safe integer
    """

    def __init__(self, fileobj=None):
        self.version = LATEST_VERSION
        self.revision = 0
        self.flags = 0
        self.size = 0

        if fileobj is None:
            return

        try:
            data = read_full(fileobj, HEADER_SIZE)
        except IOError:
            raise ID3NoHeaderError("too small for an ID3v2 header") from None

        id3, vmaj, vrev, flags, size = struct.unpack('>3sBBB4s', data)
        if id3 != b'ID3':
            raise ID3NoHeaderError("%r doesn't start with an ID3 tag" % id3)

        if vmaj not in FRAME_TYPES:
            raise ID3UnsupportedVersionError("ID3v2.%d not supported" % vmaj)

        self.version = vmaj
        self.revision = vrev
        self.flags = flags
        self.size = synch_int(size)

    f_unsynch = property(lambda s: bool(s.flags & 0x80))
    f_compression = property(
        lambda s: s.version == 2 and bool(s.flags & 0x40))
    f_extended = property(lambda s: s.version >= 3 and bool(s.flags & 0x40))
    f_experimental = property(
        lambda s: s.version >= 3 and bool(s.flags & 0x20))

    def _skip_extended(self, fileobj) -> int:
        """Reads past the extended header and clears its flag.

        Returns the number of bytes skipped.
        """

        try:
            data = read_full(fileobj, 4)
            if self.version == 4:
                # the v2.4 size includes itself
                skip = synch_int(data) - 4
            else:
                skip = norm_int(data)
            if skip < 0:
                raise error("invalid extended header size")
            read_full(fileobj, skip)
        except IOError:
            raise error("truncated extended header") from None

        self.flags &= ~0x40
        return 4 + skip

    def __bytes__(self) -> bytes:
        return b"ID3" + struct.pack('>BBB', self.version, self.revision,
                                    self.flags) + synch_bytes(self.size)

    def __repr__(self):
        return "<%s version=2.%d.%d flags=%#04x size=%d>" % (
            type(self).__name__, self.version, self.revision, self.flags,
            self.size)


def read_frame_v22(data: bytes) -> tuple[Frame | None, bytes]:
    """Parses one ID3v2.2 frame from the start of data.

    Returns the frame and the data following it, or (None, data) if
    no more frames can be read.
    """

    if len(data) < V22_FRAME_HEADER_SIZE:
        return None, data

    frame_id = data[:3].strip(b"\x00").decode("latin-1")
    size = norm_int(data[3:6])
    return _read_frame_payload(
        2, frame_id, size, 0, 0, data[V22_FRAME_HEADER_SIZE:])


def _read_frame_v23_v24(version: int, data: bytes,
                        size_int: Callable[[bytes], int]):
    if len(data) < FRAME_HEADER_SIZE:
        return None, data

    frame_id = data[:4].strip(b"\x00").decode("latin-1")
    try:
        size = size_int(data[4:8])
    except error as e:
        logger.debug("invalid size for frame %r: %s", frame_id, e)
        return None, data
    status_flags, format_flags = bytearray(data[8:10])
    return _read_frame_payload(
        version, frame_id, size, status_flags, format_flags,
        data[FRAME_HEADER_SIZE:])


def read_frame_v23(data: bytes) -> tuple[Frame | None, bytes]:
    """Like read_frame_v22, the size is a normal 32 bit integer"""

    return _read_frame_v23_v24(3, data, norm_int)


def read_frame_v24(data: bytes) -> tuple[Frame | None, bytes]:
    """Like read_frame_v22, the size is a synch-safe integer"""

    return _read_frame_v23_v24(4, data, synch_int)


def _read_frame_payload(version, frame_id, size, status_flags,
                        format_flags, data):
    if not frame_id:
        # padding
        return None, data

    if size > len(data):
        logger.debug("frame %r truncated (%d of %d bytes)",
                     frame_id, len(data), size)
        return None, data

    frame_type = get_frame_type(version, frame_id)
    frame = frame_type.frame_class._fromData(
        frame_type, status_flags, format_flags, data[:size])
    return frame, data[size:]


def save_frame_v22(frame: Frame) -> bytes:
    framedata = bytes(frame)
    return (frame.id.encode("latin-1")[:3].ljust(3, b"\x00") +
            norm_bytes(len(framedata), width=3) + framedata)


def save_frame_v23(frame: Frame) -> bytes:
    framedata = bytes(frame)
    return (frame.id.encode("latin-1")[:4].ljust(4, b"\x00") +
            norm_bytes(len(framedata)) +
            struct.pack('>BB', frame.status_flags, frame.format_flags) +
            framedata)


def save_frame_v24(frame: Frame) -> bytes:
    framedata = bytes(frame)
    return (frame.id.encode("latin-1")[:4].ljust(4, b"\x00") +
            synch_bytes(len(framedata)) +
            struct.pack('>BB', frame.status_flags, frame.format_flags) +
            framedata)


class ID3VersionConfig(NamedTuple):
    """Everything that differs between the ID3v2 major versions"""

    frame_types: dict[str, FrameType]
    common_frames: dict[str, FrameType]
    frame_header_size: int
    read_frame: Callable[[bytes], tuple[Frame | None, bytes]]
    save_frame: Callable[[Frame], bytes]


VERSION_CONFIGS: dict[int, ID3VersionConfig] = {
    2: ID3VersionConfig(FRAME_TYPES[2], COMMON_FRAMES[2],
                        V22_FRAME_HEADER_SIZE, read_frame_v22,
                        save_frame_v22),
    3: ID3VersionConfig(FRAME_TYPES[3], COMMON_FRAMES[3],
                        FRAME_HEADER_SIZE, read_frame_v23, save_frame_v23),
    4: ID3VersionConfig(FRAME_TYPES[4], COMMON_FRAMES[4],
                        FRAME_HEADER_SIZE, read_frame_v24, save_frame_v24),
}


def get_version_config(version: int) -> ID3VersionConfig:
    """Raises ID3UnsupportedVersionError"""

    try:
        return VERSION_CONFIGS[version]
    except KeyError:
        raise ID3UnsupportedVersionError(
            "ID3v2.%d not supported" % version) from None


class ID3Tags:
    """An ID3v2 tag: a header, an ordered list of frames and padding.

    ::

        tag = ID3Tags(version=4)
        tag.title = "Hello"
        tag.add_frames(tag.new_frame("COMM", text="World"))
        data = bytes(tag)

    Any size change goes through the tag, so the declared size stays
    equal to the size of all frames including their headers plus the
    padding. Frames have to be modified through set_frame_text() and
    set_frame_encoding() for this to hold.

    Arguments:
        version (int): the ID3v2 major version, 2, 3 or 4

    Raises:
        ID3UnsupportedVersionError
    """

    def __init__(self, version: int = LATEST_VERSION):
        self._config = get_version_config(version)
        self._header = ID3Header()
        self._header.version = version
        self._frames: list[Frame] = []
        self._padding = 0
        self._dirty = False

    @classmethod
    def parse(cls, fileobj) -> ID3Tags | None:
        """Parses an ID3v2 tag at the current position of fileobj.

        Returns None if there is no readable tag. On success fileobj
        is positioned right after the tag.
        """

        start = fileobj.tell()
        try:
            header = ID3Header(fileobj)
        except error as e:
            logger.debug("no ID3v2 tag: %s", e)
            return None

        self = cls(header.version)
        self._header = header

        remaining = header.size
        extended = 0
        if header.f_extended:
            try:
                extended = header._skip_extended(fileobj)
            except error as e:
                logger.debug("no ID3v2 tag: %s", e)
                return None
            if extended > header.size:
                logger.debug("no ID3v2 tag: extended header (%d) larger "
                             "than the tag (%d)", extended, header.size)
                return None
            remaining -= extended

        data = fileobj.read(max(remaining, 0))
        while remaining > 0:
            frame, data = self._config.read_frame(data)
            if frame is None:
                break
            self._frames.append(frame)
            remaining -= self._config.frame_header_size + frame.size

        # a skipped extended header turns into padding
        self._padding = max(remaining, 0) + extended
        fileobj.seek(start + HEADER_SIZE + header.size)
        return self

    @property
    def version(self) -> str:
        """The ID3 version as a string, e.g. '2.3.0'"""

        return "2.%d.%d" % (self._header.version, self._header.revision)

    @property
    def major_version(self) -> int:
        return self._header.version

    @property
    def header(self) -> ID3Header:
        return self._header

    @property
    def size(self) -> int:
        """The size of the tag without its header, including padding"""

        return self._header.size

    @property
    def real_size(self) -> int:
        """The size of all frames including their headers"""

        return self._header.size - self._padding

    @property
    def padding(self) -> int:
        return self._padding

    @property
    def dirty(self) -> bool:
        """If the tag was modified since it was loaded"""

        return self._dirty

    @property
    def frame_header_size(self) -> int:
        return self._config.frame_header_size

    def _change_size(self, diff: int) -> None:
        # growing eats padding first, shrinking only ever adds padding
        left = self._padding - diff
        if left < 0:
            self._padding = 0
            self._header.size += -left
        else:
            self._padding = left

        self._dirty = True

    def _pad_to(self, size: int) -> None:
        """Adds padding until the tag is at least size bytes large"""

        if size > self._header.size:
            self._padding += size - self._header.size
            self._header.size = size

    def _footprint(self, frame: Frame) -> int:
        return self._config.frame_header_size + frame.size

    def frame_type(self, frame_id: str) -> FrameType:
        """The frame type for frame_id in this tag's version"""

        return get_frame_type(self._header.version, frame_id)

    def new_frame(self, frame_id: str, **kwargs) -> Frame:
        """Create a frame for this tag's version. Text frames default
        to UTF-8. The frame still has to be added with add_frames().
        """

        frame_type = self.frame_type(frame_id)
        if issubclass(frame_type.frame_class, TextFrame):
            kwargs.setdefault("encoding", Encoding.UTF8)
        return frame_type.frame_class(frame_type, **kwargs)

    def all_frames(self) -> list[Frame]:
        """All frames, in order"""

        return list(self._frames)

    def frames(self, frame_id: str) -> list[Frame]:
        """All frames with the given ID, in order"""

        return [f for f in self._frames if f.id == frame_id]

    def frame(self, frame_id: str) -> Frame | None:
        """The first frame with the given ID or None"""

        for f in self._frames:
            if f.id == frame_id:
                return f
        return None

    def add_frames(self, *frames: Frame) -> None:
        for frame in frames:
            self._change_size(self._footprint(frame))
            self._frames.append(frame)

    def _remove(self, match: Callable[[Frame], bool]) -> list[Frame]:
        removed = [f for f in self._frames if match(f)]
        if not removed:
            return []

        self._frames = [f for f in self._frames if not match(f)]
        self._change_size(-sum(self._footprint(f) for f in removed))
        return removed

    def delete_frames(self, frame_id: str) -> list[Frame]:
        """Delete all frames with the given ID and return them"""

        return self._remove(lambda f: f.id == frame_id)

    def delete_frame(self, frame: Frame) -> list[Frame]:
        """Delete the given frame instance and return what was removed"""

        return self._remove(lambda f: f is frame)

    def set_frame_text(self, frame: Frame, text: str) -> None:
        """Replace the text of a text frame in this tag.

        Raises EncodingError
        """

        self._change_size(frame.set_text(text))

    def set_frame_encoding(self, frame: Frame, encoding: int) -> None:
        """Re-encode a text frame in this tag.

        Raises EncodingError
        """

        self._change_size(frame.set_encoding(encoding))

    def _text_frame(self, name: str) -> Frame | None:
        for frame in self.frames(self._config.common_frames[name].id):
            if is_text_frame(frame):
                return frame
        return None

    def _get_text(self, name: str) -> str:
        frame = self._text_frame(name)
        if frame is None:
            return ""
        return frame.text

    def _set_text(self, name: str, text: str) -> None:
        frame = self._text_frame(name)
        if frame is not None:
            self.set_frame_encoding(frame, Encoding.UTF8)
            self.set_frame_text(frame, text)
        else:
            frame_type = self._config.common_frames[name]
            self.add_frames(frame_type.frame_class(
                frame_type, encoding=Encoding.UTF8, text=text))

    title = property(lambda s: s._get_text("Title"),
                     lambda s, v: s._set_text("Title", v))
    artist = property(lambda s: s._get_text("Artist"),
                      lambda s, v: s._set_text("Artist", v))
    album = property(lambda s: s._get_text("Album"),
                     lambda s, v: s._set_text("Album", v))
    year = property(lambda s: s._get_text("Year"),
                    lambda s, v: s._set_text("Year", v))
    genre = property(lambda s: s._get_text("Genre"),
                     lambda s, v: s._set_text("Genre", v))

    @property
    def length(self) -> int:
        """The length from the length frame, -1 if missing or invalid"""

        try:
            return int(self._get_text("Length"), 10)
        except ValueError:
            return -1

    @length.setter
    def length(self, value: int):
        self._set_text("Length", "%d" % value)

    @property
    def comments(self) -> list[str]:
        """All comment frames as text, in order"""

        frame_id = self._config.common_frames["Comments"].id
        return [str(f) for f in self.frames(frame_id)]

    def __bytes__(self) -> bytes:
        """The header followed by all frames. Padding is not included.

        Raises EncodingError
        """

        save_frame = self._config.save_frame
        return bytes(self._header) + b"".join(
            save_frame(f) for f in self._frames)

    def pprint(self) -> str:
        """Human readable summary of the tag and all frames"""

        frames = sorted(f.pprint() for f in self._frames)
        return "\n".join(["ID3v%s size=%d padding=%d" % (
            self.version, self.size, self._padding)] + frames)

    def __repr__(self):
        return "<%s version=%s frames=%d size=%d padding=%d>" % (
            type(self).__name__, self.version, len(self._frames),
            self.size, self._padding)
