# Copyright (C) 2005  Michael Urman
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

from __future__ import annotations

import logging
import struct

from ._util import error

logger = logging.getLogger(__name__)

TAG_SIZE = 128

GENRES = [
    "Blues", "Classic Rock", "Country", "Dance", "Disco", "Funk", "Grunge",
    "Hip-Hop", "Jazz", "Metal", "New Age", "Oldies", "Other", "Pop", "R&B",
    "Rap", "Reggae", "Rock", "Techno", "Industrial", "Alternative", "Ska",
    "Death Metal", "Pranks", "Soundtrack", "Euro-Techno", "Ambient",
    "Trip-Hop", "Vocal", "Jazz+Funk", "Fusion", "Trance", "Classical",
    "Instrumental", "Acid", "House", "Game", "Sound Clip", "Gospel", "Noise",
    "Alt. Rock", "Bass", "Soul", "Punk", "Space", "Meditative",
    "Instrumental Pop", "Instrumental Rock", "Ethnic", "Gothic", "Darkwave",
    "Techno-Industrial", "Electronic", "Pop-Folk", "Eurodance", "Dream",
    "Southern Rock", "Comedy", "Cult", "Gangsta Rap", "Top 40",
    "Christian Rap", "Pop/Funk", "Jungle", "Native American", "Cabaret",
    "New Wave", "Psychedelic", "Rave", "Showtunes", "Trailer", "Lo-Fi",
    "Tribal", "Acid Punk", "Acid Jazz", "Polka", "Retro", "Musical",
    "Rock & Roll", "Hard Rock", "Folk", "Folk-Rock", "National Folk",
    "Swing", "Fast-Fusion", "Bebop", "Latin", "Revival", "Celtic",
    "Bluegrass", "Avantgarde", "Gothic Rock", "Progressive Rock",
    "Psychedelic Rock", "Symphonic Rock", "Slow Rock", "Big Band", "Chorus",
    "Easy Listening", "Acoustic", "Humour", "Speech", "Chanson", "Opera",
    "Chamber Music", "Sonata", "Symphony", "Booty Bass", "Primus",
    "Porn Groove", "Satire", "Slow Jam", "Club", "Tango", "Samba",
    "Folklore", "Ballad", "Power Ballad", "Rhythmic Soul", "Freestyle",
    "Duet", "Punk Rock", "Drum Solo", "A Cappella", "Euro-House",
    "Dance Hall", "Goa", "Drum & Bass", "Club-House", "Hardcore", "Terror",
    "Indie", "BritPop", "Afro-Punk", "Polsk Punk", "Beat",
    "Christian Gangsta Rap", "Heavy Metal", "Black Metal", "Crossover",
    "Contemporary Christian", "Christian Rock", "Merengue", "Salsa",
    "Thrash Metal", "Anime", "JPop", "Synthpop", "Abstract", "Art Rock",
    "Baroque", "Bhangra", "Big Beat", "Breakbeat", "Chillout", "Downtempo",
    "Dub", "EBM", "Eclectic", "Electro", "Electroclash", "Emo",
    "Experimental", "Garage", "Global", "IDM", "Illbient", "Industro-Goth",
    "Jam Band", "Krautrock", "Leftfield", "Lounge", "Math Rock",
    "New Romantic", "Nu-Breakz", "Post-Punk", "Post-Rock", "Psytrance",
    "Shoegaze", "Space Rock", "Trop Rock", "World Music", "Neoclassical",
    "Audiobook", "Audio Theatre", "Neue Deutsche Welle", "Podcast",
    "Indie Rock", "G-Funk", "Dubstep", "Garage Rock", "Psybient",
]
"""ID3v1 genres, indexed by the genre byte"""

NO_GENRE = 255


def _field(data: bytes) -> str:
    return data.split(b"\x00", 1)[0].strip().decode("latin-1")


def _pack(text: str, length: int) -> bytes:
    return text.encode("latin-1", "replace")[:length].ljust(length, b"\x00")


class ID3v1Tags:
    """The fixed 128 byte ID3v1/ID3v1.1 tag at the end of a file.

    It has no frames, only the fixed fields. Setting a field marks the
    tag dirty, values get truncated to their field length and
    characters outside of Latin-1 get replaced when writing.
    """

    version = "1.0"
    size = TAG_SIZE
    padding = 0

    def __init__(self):
        self._title = ""
        self._artist = ""
        self._album = ""
        self._year = ""
        self._comment = ""
        self._track = 0
        self._genre = NO_GENRE
        self._dirty = False

    @classmethod
    def parse(cls, fileobj) -> ID3v1Tags | None:
        """Parses the ID3v1 tag at the end of fileobj, None if there
        isn't one."""

        try:
            fileobj.seek(-TAG_SIZE, 2)
        except (IOError, ValueError):
            logger.debug("no ID3v1 tag: file too small")
            return None

        data = fileobj.read(TAG_SIZE)
        if len(data) != TAG_SIZE or not data.startswith(b"TAG"):
            return None

        tag, title, artist, album, year, comment, genre = struct.unpack(
            "3s30s30s30s4s30sB", data)

        self = cls()
        self._title = _field(title)
        self._artist = _field(artist)
        self._album = _field(album)
        self._year = _field(year)
        # ID3v1.1 puts a track number in the last comment byte
        if comment[-2] == 0 and comment[-1] != 0:
            self._track = comment[-1]
            comment = comment[:-2]
        self._comment = _field(comment)
        self._genre = genre
        return self

    def _setter(name):
        def set_value(self, value):
            setattr(self, name, value)
            self._dirty = True
        return set_value

    title = property(lambda s: s._title, _setter("_title"))
    artist = property(lambda s: s._artist, _setter("_artist"))
    album = property(lambda s: s._album, _setter("_album"))
    year = property(lambda s: s._year, _setter("_year"))
    track = property(lambda s: s._track, _setter("_track"))

    del _setter

    @property
    def genre(self) -> str:
        """The genre name, empty if unset or unknown"""

        if self._genre < len(GENRES):
            return GENRES[self._genre]
        return ""

    @genre.setter
    def genre(self, value: str):
        try:
            self._genre = GENRES.index(value)
        except ValueError:
            self._genre = NO_GENRE
        self._dirty = True

    @property
    def length(self) -> int:
        """Always -1, ID3v1 has no length field"""

        return -1

    @property
    def comments(self) -> list[str]:
        if self._comment:
            return [self._comment]
        return []

    @property
    def dirty(self) -> bool:
        return self._dirty

    def all_frames(self):
        return []

    def frames(self, frame_id):
        return []

    def frame(self, frame_id):
        return None

    def delete_frames(self, frame_id):
        return []

    def delete_frame(self, frame):
        return []

    def add_frames(self, *frames):
        raise error("ID3v1 tags don't have frames")

    def __bytes__(self) -> bytes:
        if self._track:
            comment = _pack(self._comment, 28) + b"\x00" + bytes(
                [self._track & 0xFF])
        else:
            comment = _pack(self._comment, 30)
        return b"".join([
            b"TAG",
            _pack(self._title, 30),
            _pack(self._artist, 30),
            _pack(self._album, 30),
            _pack(self._year, 4),
            comment,
            bytes([self._genre]),
        ])

    def pprint(self) -> str:
        return "ID3v%s title=%s artist=%s album=%s year=%s genre=%s" % (
            self.version, self._title, self._artist, self._album,
            self._year, self.genre)

    def __repr__(self):
        return "<%s title=%r artist=%r>" % (
            type(self).__name__, self._title, self._artist)
