import struct

import pytest

from bmpcodec import BMPParser, BmpDescriptor, DecodeConfig, decode
from bmpcodec.exceptions import (
    BMPDecodeError,
    MalformedHeaderError,
    DataSizeMismatchError,
    InvalidPaletteSizeError,
    InvalidDataOffsetError,
)

from tests.builders import build_bmp, palette_bytes


def test_palette_single_pixel():
    data = build_bmp(
        1, 1, 8, [b'\x00'],
        colors_used=1, palette=bytes((10, 20, 30, 0)),
    )
    pixels, descriptor = decode(data)
    assert pixels == bytes([30, 20, 10])
    assert descriptor == BmpDescriptor(width=1, height=1, channels=3)


def test_direct_bitfields_single_pixel():
    data = build_bmp(
        1, 1, 32, [struct.pack('<I', 0x11223344)],
        dib_size=56, compression=3,
        masks=(0x00FF0000, 0x0000FF00, 0x000000FF, 0xFF000000),
    )
    pixels, descriptor = decode(data)
    assert pixels == bytes([0x22, 0x33, 0x44, 0x11])
    assert descriptor.channels == 4


def test_empty_buffer():
    with pytest.raises(MalformedHeaderError):
        decode(b'')


def test_bad_magic():
    data = build_bmp(1, 1, 24, [b'\x00\x00\x00'], signature=b'XX')
    with pytest.raises(MalformedHeaderError):
        decode(data)


@pytest.mark.parametrize("delta", [-1, 1])
def test_file_size_off_by_one(delta):
    data = build_bmp(1, 1, 24, [b'\x00\x00\x00'])
    data = build_bmp(1, 1, 24, [b'\x00\x00\x00'], file_size=len(data) + delta)
    with pytest.raises(MalformedHeaderError):
        decode(data)


def test_declared_size_mismatch():
    data = build_bmp(2, 2, 24, [b'\x00' * 6] * 2, declared_size=12)
    with pytest.raises(DataSizeMismatchError):
        decode(data)


def test_declared_size_matching():
    data = build_bmp(2, 2, 24, [b'\x00' * 6] * 2, declared_size=16)
    _, descriptor = decode(data)
    assert descriptor == BmpDescriptor(2, 2, 3)


def test_truncated_pixel_data():
    data = build_bmp(2, 2, 24, [], pixel_data=b'\x00' * 12)
    with pytest.raises(MalformedHeaderError):
        decode(data)


def test_24_bit_rows_are_flipped_and_unpadded():
    # Stored bottom row first; each row is 6 bytes padded to 8
    bottom = bytes([1, 2, 3, 4, 5, 6])
    top = bytes([7, 8, 9, 10, 11, 12])
    data = build_bmp(2, 2, 24, [bottom, top])
    pixels, descriptor = decode(data)
    assert descriptor == BmpDescriptor(2, 2, 3)
    assert pixels == bytes([9, 8, 7, 12, 11, 10, 3, 2, 1, 6, 5, 4])


def test_32_bit_without_masks_is_rgb():
    data = build_bmp(1, 1, 32, [bytes([0x44, 0x33, 0x22, 0x11])])
    pixels, descriptor = decode(data)
    assert descriptor.channels == 3
    assert pixels == bytes([0x22, 0x33, 0x44])


def test_32_bit_alpha_bitfields_after_info_header():
    data = build_bmp(
        1, 1, 32, [bytes([0x01, 0x02, 0x03, 0x80])],
        compression=6, trailing_masks=(0x00FF0000, 0x0000FF00, 0x000000FF, 0xFF000000),
    )
    pixels, descriptor = decode(data)
    assert descriptor.channels == 4
    assert pixels == bytes([0x03, 0x02, 0x01, 0x80])


def test_16_bit_default_rgb555():
    row = struct.pack('<HH', 0x7C00, 0x7FFF)
    data = build_bmp(2, 1, 16, [row])
    pixels, descriptor = decode(data)
    assert descriptor.channels == 3
    assert pixels == bytes([255, 0, 0, 255, 255, 255])


def test_16_bit_rgb565_bitfields():
    row = struct.pack('<HH', 0x07E0, 0x0010)
    data = build_bmp(
        2, 1, 16, [row],
        compression=3, trailing_masks=(0xF800, 0x07E0, 0x001F),
    )
    pixels, _ = decode(data)
    assert pixels == bytes([0, 255, 0, 0, 0, 16 * 255 // 31])


def test_16_bit_argb1555():
    row = struct.pack('<H', 0x8000 | 0x001F)
    data = build_bmp(
        1, 1, 16, [row],
        dib_size=56, compression=3, masks=(0x7C00, 0x03E0, 0x001F, 0x8000),
    )
    pixels, descriptor = decode(data)
    assert descriptor.channels == 4
    assert pixels == bytes([0, 0, 255, 255])


def test_missing_color_channel_is_left_zero():
    row = struct.pack('<H', 0xFFFF)
    data = build_bmp(
        1, 1, 16, [row],
        dib_size=52, compression=3, masks=(0xF800, 0x07E0, 0, 0),
    )
    pixels, descriptor = decode(data)
    assert descriptor.channels == 3
    assert pixels == bytes([255, 255, 0])


def test_ten_bit_channels_keep_high_bits():
    # 2-10-10-10 layout, red at full scale, green at half, blue at zero
    value = (0x3FF << 20) | (0x200 << 10)
    data = build_bmp(
        1, 1, 32, [struct.pack('<I', value)],
        dib_size=56, compression=3, masks=(0x3FF00000, 0x000FFC00, 0x000003FF, 0),
    )
    pixels, descriptor = decode(data)
    assert descriptor.channels == 3
    assert pixels == bytes([255, 0x80, 0])


def test_1_bit_palette():
    # Width 10: two bytes per stored row; leftmost pixel in the high bit
    colors = [(0, 0, 0), (255, 255, 255)]
    bottom = bytes([0b10000000, 0b01000000])
    top = bytes([0b00000001, 0b00000000])
    data = build_bmp(
        10, 2, 1, [bottom, top],
        colors_used=2, palette=palette_bytes(colors),
    )
    pixels, descriptor = decode(data)
    assert descriptor == BmpDescriptor(10, 2, 3)
    white = bytes([255, 255, 255])
    black = bytes([0, 0, 0])
    expected_top = black * 7 + white + black * 2
    expected_bottom = white + black * 8 + white
    assert pixels == expected_top + expected_bottom


def test_2_bit_palette():
    colors = [(1, 1, 1), (2, 2, 2), (3, 3, 3), (4, 4, 4)]
    data = build_bmp(
        4, 1, 2, [bytes([0b00011011])],
        colors_used=4, palette=palette_bytes(colors),
    )
    pixels, _ = decode(data)
    assert pixels == bytes([1, 1, 1, 2, 2, 2, 3, 3, 3, 4, 4, 4])


def test_4_bit_palette():
    colors = [(i * 10, i * 10 + 1, i * 10 + 2) for i in range(16)]
    data = build_bmp(
        3, 1, 4, [bytes([0xF0, 0x70])],
        colors_used=16, palette=palette_bytes(colors),
    )
    pixels, _ = decode(data)
    assert pixels == bytes([150, 151, 152, 0, 1, 2, 70, 71, 72])


def test_palette_after_legacy_core_header_needs_colors():
    data = build_bmp(1, 1, 8, [b'\x00'], dib_size=12, palette=b'\x00' * 4)
    with pytest.raises(InvalidPaletteSizeError):
        decode(data)


@pytest.mark.parametrize("colors_used", [0, 257])
def test_invalid_palette_size(colors_used):
    data = build_bmp(1, 1, 8, [b'\x00'], colors_used=colors_used, palette=b'\x00' * 4)
    with pytest.raises(InvalidPaletteSizeError):
        decode(data)


def test_implicit_palette_config():
    colors = [(9, 8, 7), (6, 5, 4)]
    data = build_bmp(1, 1, 1, [b'\x80'], colors_used=0, palette=palette_bytes(colors))
    with pytest.raises(InvalidPaletteSizeError):
        decode(data)
    pixels, _ = decode(data, DecodeConfig(implicit_palette=True))
    assert pixels == bytes([6, 5, 4])


def test_palette_index_beyond_palette():
    data = build_bmp(1, 1, 8, [b'\x05'], colors_used=2, palette=b'\x00' * 8)
    with pytest.raises(InvalidPaletteSizeError):
        decode(data)


def test_pixel_data_overlapping_palette():
    # Offset points into the 4-entry palette
    data = build_bmp(
        1, 1, 8, [b'\x00'],
        colors_used=4, palette=b'\x00' * 16, data_offset=14 + 40 + 8,
    )
    with pytest.raises(InvalidDataOffsetError):
        decode(data)


def test_pixel_data_overlapping_legacy_masks():
    data = build_bmp(
        1, 1, 16, [b'\x00\x00'],
        compression=3, trailing_masks=(0xF800, 0x07E0, 0x001F), data_offset=14 + 40 + 4,
    )
    with pytest.raises(InvalidDataOffsetError):
        decode(data)


def test_pixel_data_after_gap():
    data = build_bmp(1, 1, 24, [bytes([1, 2, 3])], data_offset=100)
    pixels, _ = decode(data)
    assert pixels == bytes([3, 2, 1])


def test_all_decode_errors_share_base_class():
    with pytest.raises(BMPDecodeError):
        decode(b'BM')


def test_parser_class_reads_file(tmp_path):
    data = build_bmp(1, 1, 24, [bytes([1, 2, 3])])
    path = tmp_path / "pixel.bmp"
    path.write_bytes(data)

    parser = BMPParser(file_path=str(path))
    assert parser.parse()['BMP:ImageWidth'] == 1
    assert parser.decode() == (bytes([3, 2, 1]), BmpDescriptor(1, 1, 3))

    assert BMPParser(file_data=data).decode()[0] == bytes([3, 2, 1])

    with pytest.raises(ValueError):
        BMPParser()
