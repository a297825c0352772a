"""Unit conversions between pixels, EMUs, inches and twips."""

from ..constants import EMU_PER_INCH, EMU_PER_PIXEL, PIXELS_PER_INCH, TWIPS_PER_INCH


def pixels_to_emu(pixels: int) -> int:
    """Convert pixels at 96 DPI to English Metric Units."""
    return int(pixels) * EMU_PER_PIXEL


def emu_to_pixels(emu: int) -> int:
    """Convert EMUs to pixels, rounding half up."""
    if emu <= 0:
        return 0
    return (int(emu) + EMU_PER_PIXEL // 2) // EMU_PER_PIXEL


def inches_to_emu(inches: float) -> int:
    return int(inches * EMU_PER_INCH)


def inches_to_pixels(inches: float) -> int:
    return int(inches * PIXELS_PER_INCH)


def inches_to_twips(inches: float) -> int:
    return int(round(inches * TWIPS_PER_INCH))
