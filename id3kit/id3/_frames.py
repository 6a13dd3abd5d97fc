# Copyright (C) 2005  Michael Urman
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

import logging
from typing import NamedTuple

from ._specs import (
    BinaryDataSpec,
    ByteSpec,
    EncodedTextSpec,
    Encoding,
    EncodingSpec,
    Latin1TextSpec,
    SpecError,
    StringSpec,
    TextStyle,
    TrailingTextSpec,
    encode_text,
    encoded_diff,
    null_length_for_index,
)
from ._util import (
    EncodingError,
    ID3JunkFrameError,
    ID3UnsupportedVersionError,
)

logger = logging.getLogger(__name__)


class FrameType(NamedTuple):
    """What a frame ID means in a given ID3v2 version.

    Shared by every frame with that ID.
    """

    id: str
    description: str
    frame_class: type[Frame]


class Frame:
    """Fundamental unit of ID3 data.

    ID3 tags are split into frames. Each frame has a potentially
    different structure, described by the specs in `_framespec`.
    """

    _framespec: list = []

    def __init__(self, frame_type: FrameType, status_flags: int = 0,
                 format_flags: int = 0, **kwargs):
        self.frame_type = frame_type
        self.status_flags = status_flags
        self.format_flags = format_flags
        self._text_styles: dict[str, TextStyle] = {}

        for spec in self._framespec:
            if spec.name in kwargs:
                setattr(self, spec.name, kwargs.pop(spec.name))
            else:
                self._setattr(spec.name, spec.default)
        if kwargs:
            raise TypeError("unexpected keyword arguments: %s" %
                            ", ".join(sorted(kwargs)))

    def __setattr__(self, name, value):
        for checker in self._framespec:
            if checker.name == name:
                self._setattr(name, checker.validate(self, value))
                return
        super().__setattr__(name, value)

    def _setattr(self, name, value):
        self.__dict__[name] = value

    @property
    def id(self) -> str:
        """ID3v2 three or four character frame ID"""

        return self.frame_type.id

    @property
    def size(self) -> int:
        """Size of the serialized payload, without the frame header"""

        return len(self._writeData())

    def __bytes__(self) -> bytes:
        return self._writeData()

    def __eq__(self, other):
        if not isinstance(other, Frame):
            return NotImplemented
        return (type(self) is type(other) and self.id == other.id and
                self._writeData() == other._writeData())

    def __hash__(self):
        raise TypeError("Frame objects are unhashable")

    def __repr__(self):
        kw = ["%s=%r" % (spec.name, getattr(self, spec.name))
              for spec in self._framespec]
        return '%s(%r, %s)' % (type(self).__name__, self.id, ', '.join(kw))

    def __str__(self):
        return "[unrepresentable data]"

    def pprint(self) -> str:
        """Return a human-readable representation of the frame."""

        return "%s=%s" % (self.id, self)

    def _readData(self, data: bytes) -> bytes:
        """Raises ID3JunkFrameError; Returns leftover data"""

        for reader in self._framespec:
            if not data and not isinstance(
                    reader, (BinaryDataSpec, TrailingTextSpec)):
                raise ID3JunkFrameError("no data left for %s" % reader.name)
            try:
                value, data = reader.read(self, data)
            except SpecError as e:
                raise ID3JunkFrameError(e) from e
            self._setattr(reader.name, value)

        return data

    def _writeData(self) -> bytes:
        """Raises EncodingError"""

        return b"".join(writer.write(self, getattr(self, writer.name))
                        for writer in self._framespec)

    @classmethod
    def _fromData(cls, frame_type: FrameType, status_flags: int,
                  format_flags: int, data: bytes) -> Frame:
        """Construct a frame from its raw payload.

        Payloads which don't parse, have leftover data or would not
        serialize to the same length are kept as opaque DataFrame.
        """

        frame = cls(frame_type, status_flags, format_flags)
        if cls is DataFrame:
            frame.data = data
            return frame

        try:
            if frame._readData(data):
                raise ID3JunkFrameError("trailing data")
            if frame.size != len(data):
                raise ID3JunkFrameError("payload doesn't round-trip")
        except (ID3JunkFrameError, EncodingError) as e:
            logger.debug("keeping %s frame as data: %s", frame_type.id, e)
            return DataFrame(frame_type, status_flags, format_flags,
                             data=data)
        return frame


class DataFrame(Frame):
    """Opaque payload, used for all frames without a known structure."""

    _framespec = [
        BinaryDataSpec('data'),
    ]

    def __str__(self):
        return "<%d bytes>" % len(self.data)


class IdFrame(Frame):
    """Unique file identifier, an owner URL and up to 64 bytes of
    identifier data."""

    _framespec = [
        Latin1TextSpec('owner'),
        BinaryDataSpec('identifier'),
    ]

    def __str__(self):
        return "%s: %r" % (self.owner, self.identifier)


class TextFrame(Frame):
    """Text strings.

    Text frames have a 'text' attribute and an 'encoding' attribute;
    0 for ISO-8859-1, 1 UTF-16, 2 for UTF-16BE, and 3 for UTF-8.

    Changing either through set_text() or set_encoding() returns the
    change in payload size, which the owning tag has to account for.
    """

    _framespec = [
        EncodingSpec('encoding'),
        TrailingTextSpec('text'),
    ]

    def __str__(self):
        return self.text

    def set_text(self, text: str) -> int:
        """Replace the text, returning the payload size difference.

        Raises EncodingError, in which case nothing is changed.
        """

        diff = encoded_diff(self.encoding, text, self.encoding, self.text)
        self.text = text
        return diff

    def set_encoding(self, encoding: int) -> int:
        """Re-encode all text fields, returning the payload size
        difference.

        Raises EncodingError, in which case nothing is changed.
        """

        encoding = Encoding(encoding)
        if encoding == self.encoding:
            return 0

        diff = 0
        styles = {}
        for spec in self._framespec:
            if not isinstance(spec, EncodedTextSpec):
                continue
            value = getattr(self, spec.name)
            terminated = spec.style(self).terminated
            diff += (len(encode_text(encoding, value)) -
                     len(spec.encode(self, value)))
            if terminated or not isinstance(spec, TrailingTextSpec):
                diff += (null_length_for_index(encoding) -
                         null_length_for_index(self.encoding))
            # a new encoding gets a fresh BOM
            styles[spec.name] = TextStyle(terminated=terminated)
        self._text_styles = styles
        self.encoding = encoding
        return diff


class DescTextFrame(TextFrame):
    """User defined text, a description and the text itself."""

    _framespec = [
        EncodingSpec('encoding'),
        EncodedTextSpec('description'),
        TrailingTextSpec('text'),
    ]

    def __str__(self):
        return "%s: %s" % (self.description, self.text)


class UnsynchTextFrame(DescTextFrame):
    """Comments and unsynchronised lyrics.

    These have a three letter ISO language code in 'language', a
    'description' and a block of plain text in 'text'.
    """

    _framespec = [
        EncodingSpec('encoding'),
        StringSpec('language', length=3, default="eng"),
        EncodedTextSpec('description'),
        TrailingTextSpec('text'),
    ]

    def __str__(self):
        return "%s\t%s:\n%s" % (self.language, self.description, self.text)


class ImageFrame(Frame):
    """Attached picture.

    The 'mime_type' attribute holds the image MIME type, 'picture_type'
    the ID3 picture type byte (3 is the front cover) and 'data' the
    image itself.
    """

    _framespec = [
        EncodingSpec('encoding'),
        Latin1TextSpec('mime_type', default="image/"),
        ByteSpec('picture_type', default=3),
        EncodedTextSpec('description'),
        BinaryDataSpec('data'),
    ]

    def __str__(self):
        return "%s\t%s: <%d bytes>" % (
            self.mime_type, self.description, len(self.data))


class ImageFrame22(ImageFrame):
    """ID3v2.2 attached picture, with a three letter image format
    ('PNG' or 'JPG') instead of a MIME type."""

    _framespec = [
        EncodingSpec('encoding'),
        StringSpec('mime_type', length=3, default="JPG"),
        ByteSpec('picture_type', default=3),
        EncodedTextSpec('description'),
        BinaryDataSpec('data'),
    ]


def is_text_frame(frame: Frame) -> bool:
    """If the frame carries text which can be read and replaced"""

    return isinstance(frame, TextFrame)


def _build(entries):
    return {id_: FrameType(id_, desc, cls) for id_, desc, cls in entries}


_FRAMES_V23_V24 = [
    ("AENC", "Audio encryption", DataFrame),
    ("APIC", "Attached picture", ImageFrame),
    ("COMM", "Comments", UnsynchTextFrame),
    ("COMR", "Commercial frame", DataFrame),
    ("ENCR", "Encryption method registration", DataFrame),
    ("ETCO", "Event timing codes", DataFrame),
    ("GEOB", "General encapsulated object", DataFrame),
    ("GRID", "Group identification registration", DataFrame),
    ("LINK", "Linked information", DataFrame),
    ("MCDI", "Music CD identifier", DataFrame),
    ("MLLT", "MPEG location lookup table", DataFrame),
    ("OWNE", "Ownership frame", DataFrame),
    ("PRIV", "Private frame", DataFrame),
    ("PCNT", "Play counter", DataFrame),
    ("POPM", "Popularimeter", DataFrame),
    ("POSS", "Position synchronisation frame", DataFrame),
    ("RBUF", "Recommended buffer size", DataFrame),
    ("RVRB", "Reverb", DataFrame),
    ("SYLT", "Synchronized lyric/text", DataFrame),
    ("SYTC", "Synchronized tempo codes", DataFrame),
    ("TALB", "Album/Movie/Show title", TextFrame),
    ("TBPM", "BPM (beats per minute)", TextFrame),
    ("TCOM", "Composer", TextFrame),
    ("TCON", "Content type", TextFrame),
    ("TCOP", "Copyright message", TextFrame),
    ("TDLY", "Playlist delay", TextFrame),
    ("TENC", "Encoded by", TextFrame),
    ("TEXT", "Lyricist/Text writer", TextFrame),
    ("TFLT", "File type", TextFrame),
    ("TIT1", "Content group description", TextFrame),
    ("TIT2", "Title/songname/content description", TextFrame),
    ("TIT3", "Subtitle/Description refinement", TextFrame),
    ("TKEY", "Initial key", TextFrame),
    ("TLAN", "Language(s)", TextFrame),
    ("TLEN", "Length", TextFrame),
    ("TMED", "Media type", TextFrame),
    ("TOAL", "Original album/movie/show title", TextFrame),
    ("TOFN", "Original filename", TextFrame),
    ("TOLY", "Original lyricist(s)/text writer(s)", TextFrame),
    ("TOPE", "Original artist(s)/performer(s)", TextFrame),
    ("TOWN", "File owner/licensee", TextFrame),
    ("TPE1", "Lead performer(s)/Soloist(s)", TextFrame),
    ("TPE2", "Band/orchestra/accompaniment", TextFrame),
    ("TPE3", "Conductor/performer refinement", TextFrame),
    ("TPE4", "Interpreted, remixed, or otherwise modified by", TextFrame),
    ("TPOS", "Part of a set", TextFrame),
    ("TPUB", "Publisher", TextFrame),
    ("TRCK", "Track number/Position in set", TextFrame),
    ("TRSN", "Internet radio station name", TextFrame),
    ("TRSO", "Internet radio station owner", TextFrame),
    ("TSRC", "ISRC (international standard recording code)", TextFrame),
    ("TSSE", "Software/Hardware and settings used for encoding",
     TextFrame),
    ("TXXX", "User defined text information frame", DescTextFrame),
    ("UFID", "Unique file identifier", IdFrame),
    ("USER", "Terms of use", DataFrame),
    ("USLT", "Unsychronized lyric/text transcription", UnsynchTextFrame),
    ("WCOM", "Commercial information", DataFrame),
    ("WCOP", "Copyright/Legal information", DataFrame),
    ("WOAF", "Official audio file webpage", DataFrame),
    ("WOAR", "Official artist/performer webpage", DataFrame),
    ("WOAS", "Official audio source webpage", DataFrame),
    ("WORS", "Official internet radio station homepage", DataFrame),
    ("WPAY", "Payment", DataFrame),
    ("WPUB", "Publishers official webpage", DataFrame),
    ("WXXX", "User defined URL link frame", DataFrame),
]

Frames_2_3: dict[str, FrameType] = _build(_FRAMES_V23_V24 + [
    ("EQUA", "Equalization", DataFrame),
    ("IPLS", "Involved people list", DataFrame),
    ("RVAD", "Relative volume adjustment", DataFrame),
    ("TDAT", "Date", TextFrame),
    ("TIME", "Time", TextFrame),
    ("TORY", "Original release year", TextFrame),
    ("TRDA", "Recording dates", TextFrame),
    ("TSIZ", "Size", TextFrame),
    ("TYER", "Year", TextFrame),
])
"""All ID3v2.3 frames, keyed by frame ID."""

Frames_2_4: dict[str, FrameType] = _build(_FRAMES_V23_V24 + [
    ("ASPI", "Audio seek point index", DataFrame),
    ("EQU2", "Equalisation (2)", DataFrame),
    ("RVA2", "Relative volume adjustment (2)", DataFrame),
    ("SEEK", "Seek frame", DataFrame),
    ("SIGN", "Signature frame", DataFrame),
    ("TDEN", "Encoding time", TextFrame),
    ("TDOR", "Original release time", TextFrame),
    ("TDRC", "Recording time", TextFrame),
    ("TDRL", "Release time", TextFrame),
    ("TDTG", "Tagging time", TextFrame),
    ("TIPL", "Involved people list", TextFrame),
    ("TMCL", "Musician credits list", TextFrame),
    ("TMOO", "Mood", TextFrame),
    ("TPRO", "Produced notice", TextFrame),
    ("TSOA", "Album sort order", TextFrame),
    ("TSOP", "Performer sort order", TextFrame),
    ("TSOT", "Title sort order", TextFrame),
    ("TSST", "Set subtitle", TextFrame),
])
"""All ID3v2.4 frames, keyed by frame ID."""

Frames_2_2: dict[str, FrameType] = _build([
    ("BUF", "Recommended buffer size", DataFrame),
    ("CNT", "Play counter", DataFrame),
    ("COM", "Comments", UnsynchTextFrame),
    ("CRA", "Audio encryption", DataFrame),
    ("CRM", "Encrypted meta frame", DataFrame),
    ("ETC", "Event timing codes", DataFrame),
    ("EQU", "Equalization", DataFrame),
    ("GEO", "General encapsulated object", DataFrame),
    ("IPL", "Involved people list", DataFrame),
    ("LNK", "Linked information", DataFrame),
    ("MCI", "Music CD Identifier", DataFrame),
    ("MLL", "MPEG location lookup table", DataFrame),
    ("PIC", "Attached picture", ImageFrame22),
    ("POP", "Popularimeter", DataFrame),
    ("REV", "Reverb", DataFrame),
    ("RVA", "Relative volume adjustment", DataFrame),
    ("SLT", "Synchronized lyric/text", DataFrame),
    ("STC", "Synced tempo codes", DataFrame),
    ("TAL", "Album/Movie/Show title", TextFrame),
    ("TBP", "BPM (Beats Per Minute)", TextFrame),
    ("TCM", "Composer", TextFrame),
    ("TCO", "Content type", TextFrame),
    ("TCR", "Copyright message", TextFrame),
    ("TDA", "Date", TextFrame),
    ("TDY", "Playlist delay", TextFrame),
    ("TEN", "Encoded by", TextFrame),
    ("TFT", "File type", TextFrame),
    ("TIM", "Time", TextFrame),
    ("TKE", "Initial key", TextFrame),
    ("TLA", "Language(s)", TextFrame),
    ("TLE", "Length", TextFrame),
    ("TMT", "Media type", TextFrame),
    ("TOA", "Original artist(s)/performer(s)", TextFrame),
    ("TOF", "Original filename", TextFrame),
    ("TOL", "Original Lyricist(s)/text writer(s)", TextFrame),
    ("TOR", "Original release year", TextFrame),
    ("TOT", "Original album/Movie/Show title", TextFrame),
    ("TP1", "Lead artist(s)/Lead performer(s)/Soloist(s)/Performing group",
     TextFrame),
    ("TP2", "Band/Orchestra/Accompaniment", TextFrame),
    ("TP3", "Conductor/Performer refinement", TextFrame),
    ("TP4", "Interpreted, remixed, or otherwise modified by", TextFrame),
    ("TPA", "Part of a set", TextFrame),
    ("TPB", "Publisher", TextFrame),
    ("TRC", "ISRC (International Standard Recording Code)", TextFrame),
    ("TRD", "Recording dates", TextFrame),
    ("TRK", "Track number/Position in set", TextFrame),
    ("TSI", "Size", TextFrame),
    ("TSS", "Software/hardware and settings used for encoding",
     TextFrame),
    ("TT1", "Content group description", TextFrame),
    ("TT2", "Title/Songname/Content description", TextFrame),
    ("TT3", "Subtitle/Description refinement", TextFrame),
    ("TXT", "Lyricist/text writer", TextFrame),
    ("TXX", "User defined text information frame", DescTextFrame),
    ("TYE", "Year", TextFrame),
    ("UFI", "Unique file identifier", IdFrame),
    ("ULT", "Unsychronized lyric/text transcription", UnsynchTextFrame),
    ("WAF", "Official audio file webpage", DataFrame),
    ("WAR", "Official artist/performer webpage", DataFrame),
    ("WAS", "Official audio source webpage", DataFrame),
    ("WCM", "Commercial information", DataFrame),
    ("WCP", "Copyright/Legal information", DataFrame),
    ("WPB", "Publishers official webpage", DataFrame),
    ("WXX", "User defined URL link frame", DataFrame),
])
"""All ID3v2.2 frames, keyed by frame ID."""


COMMON_NAMES = ("Title", "Artist", "Album", "Year", "Genre", "Length",
                "Comments")


def _common(frames, ids):
    return {name: frames[id_] for name, id_ in zip(COMMON_NAMES, ids)}


COMMON_FRAMES: dict[int, dict[str, FrameType]] = {
    2: _common(Frames_2_2,
               ["TT2", "TP1", "TAL", "TYE", "TCO", "TLE", "COM"]),
    3: _common(Frames_2_3,
               ["TIT2", "TPE1", "TALB", "TYER", "TCON", "TLEN", "COMM"]),
    4: _common(Frames_2_4,
               ["TIT2", "TPE1", "TALB", "TDRC", "TCON", "TLEN", "COMM"]),
}
"""Semantic field name to frame type, per major version."""

FRAME_TYPES: dict[int, dict[str, FrameType]] = {
    2: Frames_2_2,
    3: Frames_2_3,
    4: Frames_2_4,
}


def get_frame_type(version: int, frame_id: str) -> FrameType:
    """The frame type for frame_id in an ID3v2.<version> tag.

    Unknown IDs get a synthetic type which keeps the payload as is.

    Raises ID3UnsupportedVersionError
    """

    try:
        frames = FRAME_TYPES[version]
    except KeyError:
        raise ID3UnsupportedVersionError(
            "ID3v2.%d not supported" % version) from None

    try:
        return frames[frame_id]
    except KeyError:
        return FrameType(frame_id, "Unknown frame", DataFrame)
