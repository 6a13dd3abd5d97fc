from io import BytesIO

from id3kit.id3 import (
    DataFrame,
    Encoding,
    EncodingError,
    ID3Header,
    ID3NoHeaderError,
    ID3Tags,
    ID3UnsupportedVersionError,
    TextFrame,
    UnsynchTextFrame,
    get_version_config,
    norm_bytes,
    synch_bytes,
)
from id3kit.id3._tags import read_frame_v22, read_frame_v23, read_frame_v24
from tests import TestCase


def frame_v22(frame_id, payload):
    return frame_id + norm_bytes(len(payload), width=3) + payload


def frame_v23(frame_id, payload, flags=b"\x00\x00"):
    return frame_id + norm_bytes(len(payload)) + flags + payload


def frame_v24(frame_id, payload, flags=b"\x00\x00"):
    return frame_id + synch_bytes(len(payload)) + flags + payload


def make_tag(version, frames, padding=0, flags=0, extended=b""):
    body = extended + b"".join(frames) + b"\x00" * padding
    return (b"ID3" + bytes([version, 0, flags]) + synch_bytes(len(body)) +
            body)


def parse(data):
    return ID3Tags.parse(BytesIO(data))


TIT2_ABC = frame_v23(b"TIT2", b"\x03abc")


class TID3Header(TestCase):

    def test_read(self):
        header = ID3Header(BytesIO(b"ID3\x04\x00\x80\x00\x00\x02\x01"))
        self.assertEqual(header.version, 4)
        self.assertEqual(header.revision, 0)
        self.assertEqual(header.size, 257)
        self.assertTrue(header.f_unsynch)
        self.assertFalse(header.f_extended)

    def test_roundtrip(self):
        data = b"ID3\x03\x01\x20\x00\x00\x02\x01"
        header = ID3Header(BytesIO(data))
        self.assertTrue(header.f_experimental)
        self.assertEqual(bytes(header), data)

    def test_no_header(self):
        self.assertRaises(ID3NoHeaderError, ID3Header, BytesIO(b"TAG" * 5))
        self.assertRaises(ID3NoHeaderError, ID3Header, BytesIO(b"ID3"))

    def test_unsupported(self):
        self.assertRaises(ID3UnsupportedVersionError, ID3Header,
                          BytesIO(b"ID3\x05\x00\x00\x00\x00\x00\x00"))
        self.assertRaises(ID3UnsupportedVersionError, ID3Header,
                          BytesIO(b"ID3\x01\x00\x00\x00\x00\x00\x00"))

    def test_v22_compression_flag(self):
        header = ID3Header(BytesIO(b"ID3\x02\x00\x40\x00\x00\x00\x00"))
        self.assertTrue(header.f_compression)
        self.assertFalse(header.f_extended)

    def test_empty(self):
        header = ID3Header()
        self.assertEqual(header.version, 3)
        self.assertEqual(bytes(header), b"ID3\x03\x00\x00\x00\x00\x00\x00")


class TReadFrame(TestCase):

    def test_v22(self):
        frame, rest = read_frame_v22(frame_v22(b"TT2", b"\x00ab") + b"xx")
        self.assertEqual(frame.id, "TT2")
        self.assertEqual(frame.text, "ab")
        self.assertEqual(rest, b"xx")

    def test_v23_normal_size(self):
        payload = b"\x00" + b"a" * 199
        data = frame_v23(b"TIT2", payload)
        self.assertEqual(data[4:8], b"\x00\x00\x00\xc8")
        frame, rest = read_frame_v23(data)
        self.assertEqual(frame.text, "a" * 199)
        self.assertEqual(rest, b"")

    def test_v24_synchsafe_size(self):
        payload = b"\x00" + b"a" * 199
        data = frame_v24(b"TIT2", payload)
        self.assertEqual(data[4:8], b"\x00\x00\x01\x48")
        frame, rest = read_frame_v24(data)
        self.assertEqual(frame.text, "a" * 199)

    def test_v24_bad_synchsafe_size(self):
        data = b"TIT2\x00\x00\x00\x80\x00\x00" + b"\x00" * 128
        self.assertEqual(read_frame_v24(data), (None, data))

    def test_padding(self):
        self.assertIs(read_frame_v23(b"\x00" * 20)[0], None)

    def test_short(self):
        self.assertEqual(read_frame_v23(b"TIT2"), (None, b"TIT2"))
        self.assertEqual(read_frame_v22(b"TT2"), (None, b"TT2"))

    def test_truncated(self):
        data = frame_v23(b"TIT2", b"\x00abcdef")[:-2]
        self.assertEqual(read_frame_v23(data), (None, data[10:]))

    def test_save_sizes(self):
        for version, header_size in [(2, 6), (3, 10), (4, 10)]:
            config = get_version_config(version)
            self.assertEqual(config.frame_header_size, header_size)
            frame_id = "TT2" if version == 2 else "TIT2"
            tag = ID3Tags(version)
            frame = tag.new_frame(frame_id, text="abc")
            data = config.save_frame(frame)
            self.assertEqual(len(data), header_size + frame.size)
            parsed, rest = config.read_frame(data)
            self.assertEqual(parsed, frame)
            self.assertEqual(rest, b"")

    def test_save_v24_large(self):
        frame = ID3Tags(4).new_frame("TIT2", text="a" * 199)
        self.assertEqual(
            get_version_config(4).save_frame(frame)[4:8],
            b"\x00\x00\x01\x48")
        frame = ID3Tags(3).new_frame("TIT2", text="a" * 199)
        self.assertEqual(
            get_version_config(3).save_frame(frame)[4:8],
            b"\x00\x00\x00\xc8")


class TParse(TestCase):

    def test_no_tag(self):
        self.assertIs(parse(b"\xff\xfb" + b"\x00" * 100), None)
        self.assertIs(parse(b""), None)
        self.assertIs(parse(b"ID3\x05\x00\x00\x00\x00\x00\x00"), None)

    def test_bad_tag_size(self):
        self.assertIs(parse(b"ID3\x03\x00\x00\x00\x00\x00\x80"), None)

    def test_v23(self):
        data = make_tag(3, [TIT2_ABC], padding=20)
        fileobj = BytesIO(data + b"audio")
        tag = ID3Tags.parse(fileobj)
        self.assertEqual(fileobj.tell(), len(data))
        self.assertEqual(tag.version, "2.3.0")
        self.assertEqual(tag.major_version, 3)
        self.assertEqual(tag.size, 34)
        self.assertEqual(tag.real_size, 14)
        self.assertEqual(tag.padding, 20)
        self.assertEqual(tag.title, "abc")
        self.assertFalse(tag.dirty)

    def test_v22(self):
        data = make_tag(2, [frame_v22(b"TT2", b"\x00ab"),
                            frame_v22(b"TP1", b"\x00cd")], padding=3)
        tag = parse(data)
        self.assertEqual(tag.frame_header_size, 6)
        self.assertEqual(tag.real_size, 18)
        self.assertEqual(tag.padding, 3)
        self.assertEqual(tag.title, "ab")
        self.assertEqual(tag.artist, "cd")

    def test_v24(self):
        data = make_tag(4, [frame_v24(b"TIT2", b"\x03" + b"x" * 200),
                            frame_v24(b"TDRC", b"\x032001")])
        tag = parse(data)
        self.assertEqual(tag.title, "x" * 200)
        self.assertEqual(tag.year, "2001")
        self.assertEqual(tag.padding, 0)

    def test_truncated_frame_becomes_padding(self):
        data = make_tag(3, [TIT2_ABC, b"TALB\x00\x00\x01\x00\x00\x00abc"])
        tag = parse(data)
        self.assertEqual([f.id for f in tag.all_frames()], ["TIT2"])
        self.assertEqual(tag.real_size, 14)
        self.assertEqual(tag.padding, 13)
        self.assertEqual(tag.size, 27)

    def test_tag_larger_than_data(self):
        data = make_tag(3, [TIT2_ABC], padding=100)[:30]
        tag = parse(data)
        self.assertEqual(tag.title, "abc")
        self.assertEqual(tag.size, 114)
        self.assertEqual(tag.padding, 100)

    def test_unknown_frame_preserved(self):
        unknown = frame_v23(b"XYZW", b"\x01\x02\x03", flags=b"\x40\x00")
        data = make_tag(3, [unknown, TIT2_ABC], padding=5)
        tag = parse(data)
        frame = tag.frame("XYZW")
        self.assertTrue(isinstance(frame, DataFrame))
        self.assertEqual(frame.status_flags, 0x40)
        self.assertEqual(bytes(tag) + b"\x00" * tag.padding, data)

    def test_junk_frame_preserved(self):
        data = make_tag(3, [frame_v23(b"TIT2", b"\x07abc")])
        tag = parse(data)
        self.assertTrue(isinstance(tag.frame("TIT2"), DataFrame))
        self.assertEqual(tag.title, "")
        self.assertEqual(bytes(tag), data)

    def test_extended_header_v23(self):
        extended = b"\x00\x00\x00\x06" + b"\x00" * 6
        data = make_tag(3, [TIT2_ABC], padding=4, flags=0x40,
                        extended=extended)
        tag = parse(data)
        self.assertEqual(tag.title, "abc")
        self.assertFalse(tag.header.f_extended)
        self.assertEqual(tag.padding, 14)
        self.assertEqual(tag.size, tag.real_size + tag.padding)
        self.assertEqual(len(bytes(tag)) + tag.padding, len(data))

    def test_extended_header_v24(self):
        extended = b"\x00\x00\x00\x06\x01\x00"
        data = make_tag(4, [frame_v24(b"TIT2", b"\x03abc")], flags=0x40,
                        extended=extended)
        tag = parse(data)
        self.assertEqual(tag.title, "abc")
        self.assertEqual(tag.padding, 6)

    def test_truncated_extended_header(self):
        data = make_tag(3, [], flags=0x40, extended=b"\x00\x00\x01\x00")
        self.assertIs(parse(data), None)

    def test_extended_header_larger_than_tag(self):
        extended = b"\x00\x00\x00\x10" + b"\x00" * 16
        data = (b"ID3\x03\x00\x40" + synch_bytes(4) + extended +
                TIT2_ABC)
        self.assertIs(parse(data), None)

    def test_extended_header_filling_tag(self):
        extended = b"\x00\x00\x00\x06" + b"\x00" * 6
        tag = parse(make_tag(3, [], flags=0x40, extended=extended))
        self.assertEqual(tag.all_frames(), [])
        self.assertEqual(tag.padding, 10)
        self.assertEqual(tag.size, 10)

    def test_roundtrip(self):
        data = make_tag(3, [
            TIT2_ABC,
            frame_v23(b"COMM", b"\x00engdesc\x00text"),
            frame_v23(b"APIC", b"\x00image/png\x00\x03\x00PNG"),
            frame_v23(b"PRIV", b"owner\x00\xff"),
        ], padding=7)
        tag = parse(data)
        self.assertEqual(len(tag.all_frames()), 4)
        self.assertEqual(bytes(tag) + b"\x00" * tag.padding, data)


class TID3Tags(TestCase):

    def test_empty(self):
        tag = ID3Tags()
        self.assertEqual(tag.version, "2.3.0")
        self.assertEqual(tag.size, 0)
        self.assertEqual(tag.padding, 0)
        self.assertEqual(tag.all_frames(), [])
        self.assertEqual(tag.title, "")
        self.assertEqual(tag.length, -1)
        self.assertEqual(tag.comments, [])
        self.assertFalse(tag.dirty)
        self.assertEqual(bytes(tag), b"ID3\x03\x00\x00\x00\x00\x00\x00")

    def test_unsupported_version(self):
        self.assertRaises(ID3UnsupportedVersionError, ID3Tags, 5)

    def test_new_frame(self):
        tag = ID3Tags(4)
        frame = tag.new_frame("TIT2", text="a")
        self.assertTrue(isinstance(frame, TextFrame))
        self.assertEqual(frame.encoding, Encoding.UTF8)
        self.assertEqual(tag.all_frames(), [])
        frame = tag.new_frame("TIT2", encoding=Encoding.LATIN1)
        self.assertEqual(frame.encoding, Encoding.LATIN1)
        frame = tag.new_frame("PRIV", data=b"x")
        self.assertTrue(isinstance(frame, DataFrame))

    def test_add_frames(self):
        tag = ID3Tags()
        a = tag.new_frame("TIT2", text="abc")
        b = tag.new_frame("TPE1", text="d")
        tag.add_frames(a, b)
        self.assertEqual(tag.all_frames(), [a, b])
        self.assertEqual(tag.size, 14 + 12)
        self.assertEqual(tag.padding, 0)
        self.assertTrue(tag.dirty)
        self.assertEqual(len(bytes(tag)), 10 + tag.size)

    def test_add_uses_padding(self):
        tag = parse(make_tag(3, [TIT2_ABC], padding=20))
        tag.add_frames(tag.new_frame("TPE1", text="ab"))
        self.assertEqual(tag.size, 34)
        self.assertEqual(tag.padding, 7)

    def test_frames_order(self):
        tag = ID3Tags()
        first = tag.new_frame("COMM", text="1")
        second = tag.new_frame("COMM", text="2")
        tag.add_frames(first, tag.new_frame("TIT2"), second)
        self.assertEqual(tag.frames("COMM"), [first, second])
        self.assertIs(tag.frame("COMM"), first)
        self.assertIs(tag.frame("TALB"), None)
        self.assertEqual(tag.frames("TALB"), [])
        self.assertEqual(tag.comments, ["eng\t:\n1", "eng\t:\n2"])

    def test_delete_frames(self):
        tag = parse(make_tag(3, [TIT2_ABC, frame_v23(b"TPE1", b"\x03de")],
                             padding=2))
        removed = tag.delete_frames("TIT2")
        self.assertEqual([f.id for f in removed], ["TIT2"])
        self.assertEqual(tag.size, 29)
        self.assertEqual(tag.real_size, 13)
        self.assertEqual(tag.padding, 16)
        self.assertTrue(tag.dirty)
        self.assertEqual(tag.delete_frames("TIT2"), [])

    def test_delete_frame_by_identity(self):
        tag = ID3Tags()
        first = tag.new_frame("COMM", text="same")
        second = tag.new_frame("COMM", text="same")
        tag.add_frames(first, second)
        self.assertEqual(first, second)
        self.assertEqual(tag.delete_frame(second), [second])
        self.assertEqual(len(tag.frames("COMM")), 1)
        self.assertIs(tag.frame("COMM"), first)
        self.assertEqual(tag.delete_frame(second), [])

    def test_delete_missing_not_dirty(self):
        tag = parse(make_tag(3, [TIT2_ABC]))
        tag.delete_frames("TALB")
        self.assertFalse(tag.dirty)

    def test_set_frame_text(self):
        tag = parse(make_tag(3, [TIT2_ABC], padding=2))
        frame = tag.frame("TIT2")
        tag.set_frame_text(frame, "abcdef")
        self.assertEqual(tag.padding, 0)
        self.assertEqual(tag.size, 17)
        self.assertEqual(len(bytes(tag)), 10 + tag.real_size)
        tag.set_frame_text(frame, "a")
        self.assertEqual(tag.padding, 5)
        self.assertEqual(tag.size, 17)

    def test_set_frame_text_error(self):
        tag = parse(make_tag(3, [frame_v23(b"TIT2", b"\x00abc")]))
        frame = tag.frame("TIT2")
        self.assertRaises(EncodingError, tag.set_frame_text, frame, "€")
        self.assertFalse(tag.dirty)
        self.assertEqual(frame.text, "abc")

    def test_set_frame_encoding(self):
        tag = ID3Tags()
        frame = tag.new_frame("TIT2", encoding=Encoding.LATIN1, text="ab")
        tag.add_frames(frame)
        tag.set_frame_encoding(frame, Encoding.UTF16)
        self.assertEqual(tag.size, 10 + 1 + 6)
        self.assertEqual(len(bytes(tag)), 10 + tag.size)

    def test_padding_policy(self):
        tag = parse(make_tag(3, [TIT2_ABC], padding=20))
        tag.title = "abc" + "x" * 5
        self.assertEqual(tag.size, 34)
        self.assertEqual(tag.padding, 15)
        tag.title = "abc" + "x" * 35
        self.assertEqual(tag.padding, 0)
        self.assertEqual(tag.size, 49)
        tag.title = ""
        self.assertEqual(tag.size, 49)
        self.assertEqual(tag.padding, 38)

    def test_size_invariant(self):
        tag = parse(make_tag(3, [TIT2_ABC], padding=4))
        tag.artist = "someone"
        tag.album = "somewhere"
        tag.delete_frames("TIT2")
        tag.genre = "Rock"
        tag.length = 12345
        self.assertEqual(tag.size, tag.real_size + tag.padding)
        self.assertEqual(len(bytes(tag)), 10 + tag.real_size)


class TSemanticFields(TestCase):

    def test_set_creates_frames(self):
        tag = ID3Tags(3)
        tag.title = "t"
        tag.artist = "a"
        tag.album = "b"
        tag.year = "2000"
        tag.genre = "Rock"
        self.assertEqual(
            [f.id for f in tag.all_frames()],
            ["TIT2", "TPE1", "TALB", "TYER", "TCON"])
        self.assertTrue(all(f.encoding == Encoding.UTF8
                            for f in tag.all_frames()))
        self.assertEqual(
            (tag.title, tag.artist, tag.album, tag.year, tag.genre),
            ("t", "a", "b", "2000", "Rock"))

    def test_v24_year(self):
        tag = ID3Tags(4)
        tag.year = "2004"
        self.assertEqual(tag.frame("TDRC").text, "2004")
        self.assertIs(tag.frame("TYER"), None)

    def test_v22(self):
        tag = ID3Tags(2)
        tag.title = "abc"
        self.assertEqual(tag.frame("TT2").text, "abc")
        self.assertEqual(tag.size, 6 + 4)
        self.assertEqual(bytes(tag)[10:], b"TT2\x00\x00\x04\x03abc")

    def test_set_reencodes(self):
        tag = parse(make_tag(3, [frame_v23(b"TIT2", b"\x00ab")]))
        tag.title = "\u20ac"
        frame = tag.frame("TIT2")
        self.assertEqual(frame.encoding, Encoding.UTF8)
        self.assertEqual(bytes(frame), b"\x03\xe2\x82\xac")
        self.assertEqual(len(bytes(tag)), 10 + tag.real_size)
        self.assertEqual(len(tag.frames("TIT2")), 1)

    def test_set_same_marks_dirty(self):
        tag = parse(make_tag(3, [TIT2_ABC]))
        tag.title = "abc"
        self.assertTrue(tag.dirty)
        self.assertEqual(tag.size, 14)

    def test_opaque_frame_ignored(self):
        tag = parse(make_tag(3, [frame_v23(b"TIT2", b"\x07abc")]))
        self.assertEqual(tag.title, "")
        tag.title = "new"
        self.assertEqual(len(tag.frames("TIT2")), 2)
        self.assertEqual(tag.title, "new")

    def test_length(self):
        tag = ID3Tags()
        tag.length = 1234
        self.assertEqual(tag.frame("TLEN").text, "1234")
        self.assertEqual(tag.length, 1234)

    def test_length_invalid(self):
        tag = parse(make_tag(3, [frame_v23(b"TLEN", b"\x00abc")]))
        self.assertEqual(tag.length, -1)

    def test_comments(self):
        tag = parse(make_tag(3, [
            frame_v23(b"COMM", b"\x00engdesc\x00text"),
            frame_v23(b"COMM", b"\x00deu\x00other"),
        ]))
        self.assertEqual(tag.comments, ["eng\tdesc:\ntext", "deu\t:\nother"])
        self.assertTrue(isinstance(tag.frame("COMM"), UnsynchTextFrame))

    def test_comments_utf16_empty_description(self):
        data = make_tag(3, [
            frame_v23(b"COMM", b"\x01eng\x00\x00\xff\xfeh\x00i\x00")])
        tag = parse(data)
        self.assertEqual(tag.comments, ["eng\t:\nhi"])
        self.assertEqual(bytes(tag), data)

    def test_set_utf16_without_bom(self):
        tag = parse(make_tag(3, [frame_v23(b"TIT2", b"\x01\x00a\x00b")]))
        self.assertEqual(tag.title, "ab")
        tag.title = "new"
        self.assertEqual(len(tag.frames("TIT2")), 1)
        self.assertEqual(tag.title, "new")
        self.assertEqual(len(bytes(tag)), 10 + tag.real_size)

    def test_terminated_text(self):
        data = make_tag(3, [frame_v23(b"TIT2", b"\x03abc\x00")])
        tag = parse(data)
        self.assertEqual(tag.title, "abc")
        self.assertEqual(bytes(tag), data)
        tag.title = "abcd"
        self.assertEqual(tag.frame("TIT2").size, 6)
        self.assertEqual(len(bytes(tag)), 10 + tag.size)

    def test_pprint(self):
        tag = ID3Tags()
        tag.title = "abc"
        self.assertEqual(tag.pprint(), "ID3v2.3.0 size=14 padding=0\n"
                                       "TIT2=abc")
        self.assertTrue("frames=1" in repr(tag))
