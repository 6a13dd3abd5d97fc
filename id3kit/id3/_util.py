# Copyright (C) 2005  Michael Urman
#               2013  Christoph Reiter
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of version 2 of the GNU General Public License as
# published by the Free Software Foundation.

from __future__ import annotations

from id3kit._util import ID3KitError

BYTES_PER_INT = 4
SYNCH_BITS = 7
NORM_BITS = 8


class error(ID3KitError):
    pass


class ID3NoHeaderError(error, ValueError):
    pass


class ID3UnsupportedVersionError(error, NotImplementedError):
    pass


class ID3JunkFrameError(error, ValueError):
    pass


class InvalidLengthError(error, ValueError):
    """More bytes than fit into a 32 bit integer"""


class BitOverflowError(error, ValueError):
    """A byte uses more bits than the integer convention allows"""


class EncodingError(error, ValueError):
    """Text could not be encoded or decoded with the selected encoding"""


class BitPaddedInt(int):
    """An integer read from big endian bytes carrying only `bits`
    significant bits each.

    With bits=7 this is the synch-safe integer used for tag and v2.4
    frame sizes, with bits=8 a plain big endian integer.

    ::

        BitPaddedInt(b'\\x00\\x00\\x02\\x01') == 257
        BitPaddedInt(b'\\x00\\x00\\x02\\x01', bits=8) == 513
    """

    bits: int

    def __new__(cls, value: bytes | int, bits: int = SYNCH_BITS):
        if isinstance(value, int):
            numeric_value = value
        elif isinstance(value, (bytes, bytearray)):
            if len(value) > BYTES_PER_INT:
                raise InvalidLengthError(
                    "byte integer: invalid length %d" % len(value))
            numeric_value = 0
            for byte in bytearray(value):
                if bits < NORM_BITS and byte >= (1 << bits):
                    raise BitOverflowError(
                        "byte integer: %#04x exceeds %d bits" % (byte, bits))
                numeric_value = (numeric_value << bits) | byte
        else:
            raise TypeError("expected bytes or int, got %r" % type(value))

        self = int.__new__(cls, numeric_value)
        self.bits = bits
        return self

    def as_str(self, width: int = BYTES_PER_INT) -> bytes:
        return self.to_str(self, self.bits, width)

    @staticmethod
    def to_str(value: int, bits: int = SYNCH_BITS,
               width: int = BYTES_PER_INT) -> bytes:
        """Encode value into exactly width bytes, most significant first.

        Raises:
            ValueError: if value is negative or too large
        """

        if value < 0:
            raise ValueError("Negative value %d" % value)

        mask = (1 << bits) - 1
        bytes_ = bytearray(width)
        for index in range(width - 1, -1, -1):
            bytes_[index] = value & mask
            value >>= bits
        if value:
            raise ValueError('Value too wide (>%d bytes)' % width)
        return bytes(bytes_)


def synch_int(data: bytes) -> int:
    return BitPaddedInt(data, bits=SYNCH_BITS)


def norm_int(data: bytes) -> int:
    return BitPaddedInt(data, bits=NORM_BITS)


def synch_bytes(value: int, width: int = BYTES_PER_INT) -> bytes:
    return BitPaddedInt.to_str(value, bits=SYNCH_BITS, width=width)


def norm_bytes(value: int, width: int = BYTES_PER_INT) -> bytes:
    return BitPaddedInt.to_str(value, bits=NORM_BITS, width=width)
