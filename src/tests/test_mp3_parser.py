import unittest

from mp3_fixtures import (FRAME_LEN, MONO_HEADER, MPEG2_HEADER, RESERVED_HEADER,
                      STEREO_HEADER, frame, frames)

from mp3core.errors import FrameSyncError, InvalidFrameError, NoValidFramesError
from mp3core.mp3_parser import (JOINT_STEREO, LAYER_I, LAYER_III, MONO, MPEG1, MPEG2,
                                MPEG_RESERVED, STEREO, Frame, end_of_last_valid_frame,
                                frame_offsets, frame_start_offset,
                                frame_start_offset_backward)


class TestFrame(unittest.TestCase):

    def test_mpeg1_layer3_header(self):
        """A 128 kbps 44.1 kHz stereo header decodes to the expected values."""
        fr = Frame.parse(STEREO_HEADER, 0)
        self.assertEqual(fr.version, MPEG1)
        self.assertEqual(fr.layer, LAYER_III)
        self.assertEqual(fr.crc_protected, 1)
        self.assertEqual(fr.bitrate, 128000)
        self.assertEqual(fr.sample_rate, 44100)
        self.assertEqual(fr.channel_mode, STEREO)
        self.assertEqual(fr.frame_length, 144 * 128000 // 44100)
        self.assertEqual(fr.frame_length, FRAME_LEN)
        self.assertEqual(fr.xing_offset, 36)
        self.assertEqual(fr.samples_per_frame, 1152)

    def test_padding_adds_a_byte(self):
        """The padding bit adds one byte to the frame length."""
        fr = Frame.parse(bytes([0xFF, 0xFB, 0x92, 0x00]), 0)
        self.assertEqual(fr.padding, 1)
        self.assertEqual(fr.frame_length, FRAME_LEN + 1)

    def test_mono_xing_offset(self):
        """Mono MPEG1 frames carry 17 bytes of side info."""
        fr = Frame.parse(MONO_HEADER, 0)
        self.assertEqual(fr.channel_mode, MONO)
        self.assertEqual(fr.xing_offset, 21)

    def test_mpeg2(self):
        """MPEG2 halves the sample rate and uses the 72 coefficient."""
        fr = Frame.parse(MPEG2_HEADER, 0)
        self.assertEqual(fr.version, MPEG2)
        self.assertEqual(fr.channel_mode, JOINT_STEREO)
        self.assertEqual(fr.sample_rate, 22050)
        self.assertEqual(fr.bitrate, 64000)
        self.assertEqual(fr.frame_length, 72 * 64000 // 22050)
        self.assertEqual(fr.xing_offset, 21)
        self.assertEqual(fr.samples_per_frame, 576)

    def test_layer1_length(self):
        """Layer I lengths are counted in 4 byte slots."""
        # MPEG1 Layer I, 32 kbps, 44100 Hz
        fr = Frame.parse(bytes([0xFF, 0xFF, 0x10, 0x00]), 0)
        self.assertEqual(fr.layer, LAYER_I)
        self.assertEqual(fr.bitrate, 32000)
        self.assertEqual(fr.frame_length, ((12 * 32000) // 44100) * 4)
        self.assertEqual(fr.samples_per_frame, 384)

    def test_32khz_table_value(self):
        """Frequency index 2 uses the table value 32100."""
        fr = Frame.parse(bytes([0xFF, 0xFB, 0x98, 0x00]), 0)
        self.assertEqual(fr.sample_rate, 32100)

    def test_reserved_fields_have_no_length(self):
        """Reserved or free fields leave the frame length unknown."""
        fr = Frame.parse(RESERVED_HEADER, 0)
        self.assertEqual(fr.version, MPEG_RESERVED)
        with self.assertRaises(InvalidFrameError):
            fr.sample_rate
        self.assertIsNone(fr.frame_length_or_none)

        free = Frame.parse(bytes([0xFF, 0xFB, 0x00, 0x00]), 0)
        with self.assertRaises(InvalidFrameError):
            free.bitrate
        bad = Frame.parse(bytes([0xFF, 0xFB, 0xF0, 0x00]), 0)
        self.assertIsNone(bad.frame_length_or_none)
        bad_freq = Frame.parse(bytes([0xFF, 0xFB, 0x9C, 0x00]), 0)
        self.assertIsNone(bad_freq.frame_length_or_none)
        reserved_layer = Frame.parse(bytes([0xFF, 0xF9, 0x90, 0x00]), 0)
        self.assertIsNone(reserved_layer.layer)
        self.assertIsNone(reserved_layer.frame_length_or_none)

    def test_requires_sync(self):
        """Parsing fails without 11 sync bits or a full header."""
        with self.assertRaises(FrameSyncError):
            Frame.parse(b"\xff\x1b\x90\x00", 0)
        with self.assertRaises(FrameSyncError):
            Frame.parse(b"\xff\xfb\x90", 0)

    def test_parse_finds_first_sync(self):
        """Without an offset the first sync is parsed."""
        fr = Frame.parse(b"\x00\x01" + MONO_HEADER + bytes(10))
        self.assertEqual(fr.channel_mode, MONO)
        with self.assertRaises(NoValidFramesError):
            Frame.parse(bytes(16))


class TestScanner(unittest.TestCase):

    def test_forward_skips_false_sync(self):
        """0xFF bytes without sync bits after them are skipped."""
        data = b"\x00\xff\x00\xff\x1f" + STEREO_HEADER + bytes(8)
        self.assertEqual(frame_start_offset(data), 5)
        self.assertEqual(frame_start_offset(data, 6), None)

    def test_forward_needs_a_full_header(self):
        """A sync too close to the end is not reported."""
        self.assertIsNone(frame_start_offset(bytes(10) + b"\xff\xfb\x90"))
        self.assertEqual(frame_start_offset(bytes(10) + STEREO_HEADER), 10)

    def test_backward(self):
        """Backward scanning finds the closest sync at or before the offset."""
        data = frame() + b"\xff\x00" + frame() + bytes(3)
        self.assertEqual(frame_start_offset_backward(data), FRAME_LEN + 2)
        self.assertEqual(frame_start_offset_backward(data, FRAME_LEN + 1), 0)
        self.assertIsNone(frame_start_offset_backward(bytes(20)))

    def test_frame_offsets(self):
        """Back-to-back frames are listed with the end of the last one."""
        scan = frame_offsets(frames(3))
        self.assertEqual(scan.offsets, [0, FRAME_LEN, 2 * FRAME_LEN])
        self.assertEqual(scan.data_end, 3 * FRAME_LEN)
        self.assertEqual(len(scan), 3)

    def test_frame_offsets_resyncs_past_unknown_length(self):
        """The walk steps past a frame of unknown length and resyncs."""
        data = frames(2) + RESERVED_HEADER + bytes(6) + frame() + bytes(5)
        scan = frame_offsets(data)
        self.assertEqual(scan.offsets, [0, FRAME_LEN, 2 * FRAME_LEN, 2 * FRAME_LEN + 10])
        self.assertEqual(scan.data_end, 3 * FRAME_LEN + 10)

    def test_unknown_length_does_not_move_data_end(self):
        """Frames of unknown length are counted but leave data_end alone."""
        data = frames(2) + RESERVED_HEADER + bytes(30)
        scan = frame_offsets(data)
        self.assertEqual(len(scan), 3)
        self.assertEqual(scan.data_end, 2 * FRAME_LEN)

    def test_data_end_defaults_to_buffer_length(self):
        """With no computable length data_end is the buffer length."""
        data = RESERVED_HEADER + bytes(20)
        self.assertEqual(frame_offsets(data).data_end, len(data))

    def test_end_of_last_valid_frame(self):
        """Trailing undecodable syncs are passed over."""
        data = frames(2) + b"\xff\xe0\x00\x00" + b"junk"
        self.assertEqual(end_of_last_valid_frame(data), 2 * FRAME_LEN)

    def test_end_of_last_valid_frame_fails_without_frames(self):
        """Buffers with no decodable frame raise NoValidFramesError."""
        with self.assertRaises(NoValidFramesError):
            end_of_last_valid_frame(RESERVED_HEADER + bytes(50))
        with self.assertRaises(NoValidFramesError):
            end_of_last_valid_frame(b"")


if __name__ == "__main__":
    unittest.main()
