import pytest

from bmpcodec.bmp_header import CanonicalDibHeader, DibVariant
from bmpcodec.masks import resolve_channel, resolve_masks


@pytest.mark.parametrize("mask, shift, bit_mask", [
    (0x00FF0000, 16, 0xFF),
    (0x0000FF00, 8, 0xFF),
    (0x000000FF, 0, 0xFF),
    (0xFF000000, 24, 0xFF),
    (0x7C00, 10, 0x1F),
    (0x03E0, 5, 0x1F),
    (0x001F, 0, 0x1F),
    (0xF800, 11, 0x1F),
    (0x07E0, 5, 0x3F),
    (0x8000, 15, 0x01),
    (0x0F00, 8, 0x0F),
])
def test_resolve_channel(mask, shift, bit_mask):
    channel = resolve_channel(mask)
    assert channel.shift == shift
    assert channel.bit_mask == bit_mask
    assert channel.present


def test_wide_channel_keeps_most_significant_bits():
    # 10-bit red in a 2-10-10-10 layout
    channel = resolve_channel(0x3FF00000)
    assert channel.shift == 22
    assert channel.bit_mask == 0xFF
    assert channel.extract(0x3FF00000) == 255
    assert channel.extract(0x00300000) == 0

    assert resolve_channel(0xFFFFFFFF).shift == 24


def test_absent_channel():
    channel = resolve_channel(0)
    assert not channel.present
    assert channel.bit_mask == 0
    assert channel.scale is None


def test_width_and_scale_for_all_contiguous_masks():
    for width in range(1, 33):
        for shift in range(0, 33 - width):
            mask = ((1 << width) - 1) << shift
            channel = resolve_channel(mask)
            assert 1 <= channel.bit_mask.bit_length() <= 8
            assert channel.scale * channel.bit_mask == pytest.approx(255.0)


def test_extract_expands_to_full_range():
    red555 = resolve_channel(0x7C00)
    assert red555.extract(0x7C00) == 255
    assert red555.extract(0x4000) == 16 * 255 // 31
    assert red555.extract(0x03FF) == 0

    alpha1 = resolve_channel(0x8000)
    assert alpha1.extract(0x8000) == 255
    assert alpha1.extract(0x7FFF) == 0


def test_resolve_masks_from_header():
    header = CanonicalDibHeader(
        variant=DibVariant.V3,
        header_size=56,
        width=1,
        height=1,
        planes=1,
        bits_per_pixel=32,
        red_mask=0x00FF0000,
        green_mask=0x0000FF00,
        blue_mask=0x000000FF,
        alpha_mask=0xFF000000,
    )
    masks = resolve_masks(header)
    assert masks.has_alpha
    assert [c.shift for c in masks.present_channels()] == [16, 8, 0, 24]


def test_resolve_masks_without_alpha():
    header = CanonicalDibHeader(
        variant=DibVariant.INFO,
        header_size=40,
        width=1,
        height=1,
        planes=1,
        bits_per_pixel=16,
        red_mask=0x7C00,
        green_mask=0x03E0,
        blue_mask=0x001F,
    )
    masks = resolve_masks(header)
    assert not masks.has_alpha
    assert len(masks.present_channels()) == 3
