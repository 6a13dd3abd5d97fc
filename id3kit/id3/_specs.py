# Copyright (C) 2005  Michael Urman
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Callable, NamedTuple

from ._util import EncodingError

if TYPE_CHECKING:
    from ._frames import Frame


class Encoding(IntEnum):
    """Text Encoding"""

    LATIN1 = 0
    """ISO-8859-1"""

    UTF16 = 1
    """UTF-16 with BOM"""

    UTF16BE = 2
    """UTF-16BE without BOM"""

    UTF8 = 3
    """UTF-8"""


BOM_LE = b"\xff\xfe"
BOM_BE = b"\xfe\xff"


def _decode_utf16(data: bytes) -> str:
    if data[:2] == BOM_LE:
        return data[2:].decode("utf-16-le")
    elif data[:2] == BOM_BE:
        return data[2:].decode("utf-16-be")
    # no BOM, the standard says big endian
    return data.decode("utf-16-be")


def _encode_utf16(text: str) -> bytes:
    return BOM_LE + text.encode("utf-16-le")


class EncodingInfo(NamedTuple):
    name: str
    null_length: int
    decode: Callable[[bytes], str]
    encode: Callable[[str], bytes]


ENCODINGS: tuple[EncodingInfo, ...] = (
    EncodingInfo("ISO-8859-1", 1,
                 lambda d: d.decode("latin-1"),
                 lambda s: s.encode("latin-1")),
    EncodingInfo("UTF-16", 2, _decode_utf16, _encode_utf16),
    EncodingInfo("UTF-16BE", 2,
                 lambda d: d.decode("utf-16-be"),
                 lambda s: s.encode("utf-16-be")),
    EncodingInfo("UTF-8", 1,
                 lambda d: d.decode("utf-8"),
                 lambda s: s.encode("utf-8")),
)
"""The ID3v2 text encodings, indexed by their encoding byte"""


def _info(index: int) -> EncodingInfo:
    if not 0 <= index < len(ENCODINGS):
        index = 0
    return ENCODINGS[index]


def name_for_index(index: int) -> str:
    """The encoding name for an encoding byte, ISO-8859-1 if unknown"""

    return _info(index).name


def null_length_for_index(index: int) -> int:
    return _info(index).null_length


def index_for_name(name: str) -> Encoding:
    """The encoding byte for an encoding name, LATIN1 if unknown"""

    for index, info in enumerate(ENCODINGS):
        if info.name == name:
            return Encoding(index)
    return Encoding.LATIN1


def decode_text(index: int, data: bytes) -> str:
    """Raises EncodingError"""

    info = _info(index)
    try:
        return info.decode(data)
    except UnicodeError as e:
        raise EncodingError("%s: %s" % (info.name, e)) from e


def encode_text(index: int, text: str) -> bytes:
    """Raises EncodingError"""

    info = _info(index)
    try:
        return info.encode(text)
    except UnicodeError as e:
        raise EncodingError("%s: %s" % (info.name, e)) from e


def find_terminator(data: bytes, index: int) -> tuple[int, int]:
    """Returns the offset of the first null terminator of the encoding
    in data and the offset right after it, or (-1, -1).

    Multi byte terminators only count if they are aligned to their
    own length relative to the start of data.
    """

    width = null_length_for_index(index)
    null = b"\x00" * width
    for at in range(0, len(data) - width + 1, width):
        if data[at:at + width] == null:
            return at, at + width
    return -1, -1


def encoded_diff(new_index: int, new_text: str,
                 old_index: int, old_text: str) -> int:
    """The change in byte length when old_text encoded with old_index
    gets replaced by new_text encoded with new_index.

    Raises EncodingError
    """

    return (len(encode_text(new_index, new_text)) -
            len(encode_text(old_index, old_text)))


class SpecError(Exception):
    pass


class Spec:

    def __init__(self, name: str, default=None):
        self.name = name
        self.default = default

    def __hash__(self):
        raise TypeError("Spec objects are unhashable")

    def read(self, frame: Frame, data: bytes) -> tuple[object, bytes]:
        """
        Returns:
            (value: object, left_data: bytes)
        Raises:
            SpecError
        """

        raise NotImplementedError

    def write(self, frame: Frame, value) -> bytes:
        """
        Returns:
            bytes: The serialized data
        Raises:
            EncodingError
        """

        raise NotImplementedError

    def validate(self, frame: Frame, value):
        """
        Returns:
            the validated value
        Raises:
            ValueError
            TypeError
        """

        return value


class ByteSpec(Spec):

    def __init__(self, name: str, default: int = 0):
        super().__init__(name, default)

    def read(self, frame, data):
        return bytearray(data)[0], data[1:]

    def write(self, frame, value):
        return bytes([value])

    def validate(self, frame, value):
        if not 0 <= value <= 255:
            raise ValueError("%s out of range: %r" % (self.name, value))
        return value


class EncodingSpec(ByteSpec):

    def __init__(self, name: str, default: Encoding = Encoding.UTF8):
        super().__init__(name, default)

    def read(self, frame, data):
        enc, data = super().read(frame, data)
        if enc not in list(Encoding):
            raise SpecError('Invalid Encoding: %r' % enc)
        return Encoding(enc), data

    def validate(self, frame, value):
        if value not in list(Encoding):
            raise ValueError('Invalid Encoding: %r' % value)
        return Encoding(value)


class StringSpec(Spec):
    """A fixed size Latin-1 payload."""

    def __init__(self, name: str, length: int, default: str | None = None):
        if default is None:
            default = "XXX"[:length].ljust(length)
        super().__init__(name, default)
        self.len = length

    def read(self, frame, data):
        if len(data) < self.len:
            raise SpecError("%s truncated" % self.name)
        return data[:self.len].decode("latin-1"), data[self.len:]

    def write(self, frame, value):
        try:
            return value.encode("latin-1").ljust(self.len, b"\x00")[:self.len]
        except UnicodeError as e:
            raise EncodingError(e) from e

    def validate(self, frame, value):
        if not isinstance(value, str):
            raise TypeError("%s has to be str" % self.name)
        if len(value) != self.len:
            raise ValueError(
                'Invalid StringSpec[%d] data: %r' % (self.len, value))
        return value


class Latin1TextSpec(Spec):
    """Null terminated Latin-1 text."""

    def __init__(self, name: str, default: str = ""):
        super().__init__(name, default)

    def read(self, frame, data):
        at = data.find(b"\x00")
        if at == -1:
            raise SpecError("%s not null terminated" % self.name)
        return data[:at].decode("latin-1"), data[at + 1:]

    def write(self, frame, value):
        try:
            return value.encode("latin-1") + b"\x00"
        except UnicodeError as e:
            raise EncodingError(e) from e


class TextStyle(NamedTuple):
    """How a text field was stored, so it can be written back the same way.

    bom is the UTF-16 byte order mark the field started with, empty if
    it had none. terminated is set for trailing text which ended in a
    null terminator.
    """

    bom: bytes = BOM_LE
    terminated: bool = False


DEFAULT_STYLE = TextStyle()


class EncodedTextSpec(Spec):
    """Null terminated text in the encoding of the frame."""

    def __init__(self, name: str, default: str = ""):
        super().__init__(name, default)

    def style(self, frame: Frame) -> TextStyle:
        return frame._text_styles.get(self.name, DEFAULT_STYLE)

    def _decode(self, frame, data, terminated=False):
        bom = BOM_LE
        if frame.encoding == Encoding.UTF16:
            bom = data[:2] if data[:2] in (BOM_LE, BOM_BE) else b""
        try:
            value = decode_text(frame.encoding, data)
        except EncodingError as e:
            raise SpecError(e) from e
        frame._text_styles[self.name] = TextStyle(bom, terminated)
        return value

    def encode(self, frame: Frame, value: str) -> bytes:
        """The encoded value without terminator, in the stored style.

        Raises EncodingError
        """

        bom = self.style(frame).bom
        if frame.encoding == Encoding.UTF16 and bom != BOM_LE:
            try:
                return bom + value.encode("utf-16-be")
            except UnicodeError as e:
                raise EncodingError("UTF-16: %s" % e) from e
        return encode_text(frame.encoding, value)

    def read(self, frame, data):
        at, after = find_terminator(data, frame.encoding)
        if at == -1:
            raise SpecError("%s not null terminated" % self.name)
        return self._decode(frame, data[:at]), data[after:]

    def write(self, frame, value):
        return (self.encode(frame, value) +
                b"\x00" * null_length_for_index(frame.encoding))

    def validate(self, frame, value):
        if not isinstance(value, str):
            raise TypeError("%s has to be str" % self.name)
        return value


class TrailingTextSpec(EncodedTextSpec):
    """Text in the encoding of the frame spanning the rest of the
    payload. One aligned null terminator at the end is dropped."""

    def read(self, frame, data):
        width = null_length_for_index(frame.encoding)
        terminated = (len(data) >= width and len(data) % width == 0 and
                      data.endswith(b"\x00" * width))
        if terminated:
            data = data[:-width]
        return self._decode(frame, data, terminated), b""

    def write(self, frame, value):
        data = self.encode(frame, value)
        if self.style(frame).terminated:
            data += b"\x00" * null_length_for_index(frame.encoding)
        return data


class BinaryDataSpec(Spec):

    def __init__(self, name: str, default: bytes = b""):
        super().__init__(name, default)

    def read(self, frame, data):
        return data, b""

    def write(self, frame, value):
        return bytes(value)

    def validate(self, frame, value):
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError("%s has to be bytes" % self.name)
        return bytes(value)
