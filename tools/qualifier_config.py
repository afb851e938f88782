#!/usr/bin/env python3
"""
qualifier_config.py - Resource configuration record (ResTable_config)

Holds the decoded device/locale/display/platform state produced by the
qualifier decoder, together with the masks and values of its bit-packed
words and the fixed 64-byte wire form read by resource table tooling.

Packed words:
    screen_layout   layout direction (0xC0) | long (0x30) | size (0x0F)
    screen_layout2  round (0x03)
    color_mode      hdr (0x0C) | wide color gamut (0x03)
    ui_mode         night (0x30) | type (0x0F)
    input_flags     nav hidden (0x0C) | keys hidden (0x03)

Every sub-field write goes through set_bits(), which clears the sub-field's
mask before or-ing in the new value, so writes never disturb siblings.

Binary Format (64 bytes, little-endian):
    size(4) imsi(4) locale(4) screenType(4) input(4) screenSize(4)
    version(4) screenConfig(4) screenSizeDp(4) localeScript(4)
    localeVariant(8) screenConfig2(4) localeScriptWasComputed(1)
    localeNumberingSystem(8) pad(3)

Usage:
    from qualifier_config import ResTableConfig, LayoutDir, MASK_LAYOUTDIR

    config = ResTableConfig()
    config.set_screen_layout(MASK_LAYOUTDIR, LayoutDir.RTL)
    wire = config.to_bytes()
    assert ResTableConfig.from_bytes(wire) == config
"""

import struct
from dataclasses import dataclass, fields
from enum import IntEnum
from typing import Any, Dict, Optional


# MNC 0 is a real network code, but 0 already means "unspecified".
MNC_ZERO = 0xFFFF

MAX_U16 = 0xFFFF


class Orientation(IntEnum):
    ANY = 0
    PORT = 1
    LAND = 2
    SQUARE = 3


class Touchscreen(IntEnum):
    ANY = 0
    NOTOUCH = 1
    STYLUS = 2
    FINGER = 3


class Density(IntEnum):
    """Named density buckets (dots per inch)."""
    DEFAULT = 0
    LOW = 120
    MEDIUM = 160
    TV = 213
    HIGH = 240
    XHIGH = 320
    XXHIGH = 480
    XXXHIGH = 640
    ANY = 0xFFFE
    NONE = 0xFFFF


class Keyboard(IntEnum):
    ANY = 0
    NOKEYS = 1
    QWERTY = 2
    TWELVEKEY = 3


class Navigation(IntEnum):
    ANY = 0
    NONAV = 1
    DPAD = 2
    TRACKBALL = 3
    WHEEL = 4


# input_flags
MASK_KEYSHIDDEN = 0x03
MASK_NAVHIDDEN = 0x0C
SHIFT_NAVHIDDEN = 2


class KeysHidden(IntEnum):
    ANY = 0x00
    NO = 0x01
    YES = 0x02
    SOFT = 0x03


class NavHidden(IntEnum):
    ANY = 0x00
    NO = 0x01 << SHIFT_NAVHIDDEN
    YES = 0x02 << SHIFT_NAVHIDDEN


# screen_layout
MASK_SCREENSIZE = 0x0F
MASK_SCREENLONG = 0x30
SHIFT_SCREENLONG = 4
MASK_LAYOUTDIR = 0xC0
SHIFT_LAYOUTDIR = 6


class ScreenSize(IntEnum):
    ANY = 0x00
    SMALL = 0x01
    NORMAL = 0x02
    LARGE = 0x03
    XLARGE = 0x04


class ScreenLong(IntEnum):
    ANY = 0x00
    NO = 0x01 << SHIFT_SCREENLONG
    YES = 0x02 << SHIFT_SCREENLONG


class LayoutDir(IntEnum):
    ANY = 0x00
    LTR = 0x01 << SHIFT_LAYOUTDIR
    RTL = 0x02 << SHIFT_LAYOUTDIR


# screen_layout2
MASK_SCREENROUND = 0x03


class ScreenRound(IntEnum):
    ANY = 0x00
    NO = 0x01
    YES = 0x02


# color_mode
MASK_WIDE_COLOR_GAMUT = 0x03
MASK_HDR = 0x0C
SHIFT_HDR = 2


class WideColorGamut(IntEnum):
    ANY = 0x00
    NO = 0x01
    YES = 0x02


class Hdr(IntEnum):
    ANY = 0x00
    NO = 0x01 << SHIFT_HDR
    YES = 0x02 << SHIFT_HDR


# ui_mode
MASK_UI_MODE_TYPE = 0x0F
MASK_UI_MODE_NIGHT = 0x30
SHIFT_UI_MODE_NIGHT = 4


class UiModeType(IntEnum):
    ANY = 0x00
    NORMAL = 0x01
    DESK = 0x02
    CAR = 0x03
    TELEVISION = 0x04
    APPLIANCE = 0x05
    WATCH = 0x06
    VR_HEADSET = 0x07


class UiModeNight(IntEnum):
    ANY = 0x00
    NO = 0x01 << SHIFT_UI_MODE_NIGHT
    YES = 0x02 << SHIFT_UI_MODE_NIGHT


# Unspecified values for the plain integer fields
SCREENWIDTH_ANY = 0
SCREENHEIGHT_ANY = 0
SDKVERSION_ANY = 0
MINORVERSION_ANY = 0


# Wire layout, one group per 32-bit union of ResTable_config
CONFIG_STRUCT = struct.Struct(
    '<I'        # size
    'HH'        # mcc, mnc
    '2s2s'      # language, country
    'BBH'       # orientation, touchscreen, density
    'BBBx'      # keyboard, navigation, inputFlags, pad
    'HH'        # screenWidth, screenHeight
    'HH'        # sdkVersion, minorVersion
    'BBH'       # screenLayout, uiMode, smallestScreenWidthDp
    'HH'        # screenWidthDp, screenHeightDp
    '4s'        # localeScript
    '8s'        # localeVariant
    'BBxx'      # screenLayout2, colorMode, pad
    'B'         # localeScriptWasComputed
    '8s'        # localeNumberingSystem
    'xxx'
)
CONFIG_SIZE = CONFIG_STRUCT.size  # 64

# Records written before the locale numbering system existed stop here.
CONFIG_MIN_SIZE = 52


def set_bits(word: int, mask: int, value: int) -> int:
    """Replace the sub-field selected by mask inside a packed word."""
    return (word & ~mask) | (value & mask)


def pack_language_or_region(code: Optional[str], base: str) -> bytes:
    """Pack a 2 or 3 character code into its 2-byte wire form.

    Two-character codes are stored verbatim. Three-character codes are
    reduced to 5-bit offsets from ``base`` and packed with the high bit of
    the first byte set.

    Raises:
        ValueError: the code is longer than 3 characters, is not ASCII, or
            a 3 character code has a character outside base..base+31.
    """
    if not code:
        return b'\x00\x00'

    raw = _ascii(code, 'Code')
    if len(raw) <= 2:
        return raw.ljust(2, b'\x00')
    if len(raw) > 3:
        raise ValueError(f"Code '{code}' is longer than 3 characters")

    origin = ord(base)
    offsets = [c - origin for c in raw]
    if any(not 0 <= c <= 0x1F for c in offsets):
        raise ValueError(f"Code '{code}' cannot be packed relative to '{base}'")
    first, second, third = offsets

    return bytes([
        0x80 | (third << 2) | (second >> 3),
        ((second << 5) | first) & 0xFF,
    ])


def unpack_language_or_region(data: bytes, base: str) -> Optional[str]:
    """Inverse of pack_language_or_region(); returns None for zero bytes."""
    if data[0] & 0x80:
        origin = ord(base)
        first = data[1] & 0x1F
        second = ((data[1] & 0xE0) >> 5) + ((data[0] & 0x03) << 3)
        third = (data[0] & 0x7C) >> 2
        return ''.join(chr(origin + c) for c in (first, second, third))

    if data[0]:
        return data[:2].rstrip(b'\x00').decode('ascii', errors='replace')

    return None


def _ascii(value: str, what: str) -> bytes:
    try:
        return value.encode('ascii')
    except UnicodeEncodeError:
        raise ValueError(f"{what} '{value}' is not ASCII") from None


def _pack_text(value: Optional[str], width: int, what: str) -> bytes:
    if not value:
        return b''
    raw = _ascii(value, what)
    if len(raw) > width:
        raise ValueError(f"{what} '{value}' is longer than {width} characters")
    return raw


def _unpack_text(data: bytes) -> Optional[str]:
    text = data.split(b'\x00', 1)[0]
    if not text:
        return None
    return text.decode('ascii', errors='replace')


@dataclass
class ResTableConfig:
    """Decoded resource configuration.

    Every field starts at its "unspecified" value and is only overwritten
    by a qualifier that names it.
    """
    mcc: int = 0
    mnc: int = 0

    language: Optional[str] = None
    region: Optional[str] = None
    locale_script: Optional[str] = None
    locale_variant: Optional[str] = None

    orientation: int = Orientation.ANY
    touchscreen: int = Touchscreen.ANY
    density: int = Density.DEFAULT

    keyboard: int = Keyboard.ANY
    navigation: int = Navigation.ANY
    input_flags: int = 0

    screen_width: int = SCREENWIDTH_ANY
    screen_height: int = SCREENHEIGHT_ANY

    sdk_version: int = SDKVERSION_ANY
    minor_version: int = MINORVERSION_ANY

    screen_layout: int = 0
    ui_mode: int = 0
    smallest_screen_width_dp: int = 0

    screen_width_dp: int = 0
    screen_height_dp: int = 0

    screen_layout2: int = 0
    color_mode: int = 0

    # Packed word setters

    def set_screen_layout(self, mask: int, value: int) -> None:
        self.screen_layout = set_bits(self.screen_layout, mask, value)

    def set_screen_layout2(self, mask: int, value: int) -> None:
        self.screen_layout2 = set_bits(self.screen_layout2, mask, value)

    def set_color_mode(self, mask: int, value: int) -> None:
        self.color_mode = set_bits(self.color_mode, mask, value)

    def set_ui_mode(self, mask: int, value: int) -> None:
        self.ui_mode = set_bits(self.ui_mode, mask, value)

    def set_input_flags(self, mask: int, value: int) -> None:
        self.input_flags = set_bits(self.input_flags, mask, value)

    # Sub-field views

    @property
    def layout_direction(self) -> int:
        return self.screen_layout & MASK_LAYOUTDIR

    @property
    def screen_layout_size(self) -> int:
        return self.screen_layout & MASK_SCREENSIZE

    @property
    def screen_layout_long(self) -> int:
        return self.screen_layout & MASK_SCREENLONG

    @property
    def screen_round(self) -> int:
        return self.screen_layout2 & MASK_SCREENROUND

    @property
    def wide_color_gamut(self) -> int:
        return self.color_mode & MASK_WIDE_COLOR_GAMUT

    @property
    def hdr(self) -> int:
        return self.color_mode & MASK_HDR

    @property
    def ui_mode_type(self) -> int:
        return self.ui_mode & MASK_UI_MODE_TYPE

    @property
    def ui_mode_night(self) -> int:
        return self.ui_mode & MASK_UI_MODE_NIGHT

    @property
    def keys_hidden(self) -> int:
        return self.input_flags & MASK_KEYSHIDDEN

    @property
    def nav_hidden(self) -> int:
        return self.input_flags & MASK_NAVHIDDEN

    def is_default(self) -> bool:
        """True when no field differs from the unspecified record."""
        return self == ResTableConfig()

    def to_dict(self, include_defaults: bool = True) -> Dict[str, Any]:
        """Plain dict of the record fields (ints and strings only)."""
        default = ResTableConfig()
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if not include_defaults and value == getattr(default, f.name):
                continue
            result[f.name] = int(value) if isinstance(value, int) else value
        return result

    def to_bytes(self) -> bytes:
        """Encode the record to the 64-byte ResTable_config layout.

        Raises:
            ValueError: a locale field does not fit its wire width.
        """
        return CONFIG_STRUCT.pack(
            CONFIG_SIZE,
            self.mcc, self.mnc,
            pack_language_or_region(self.language, 'a'),
            pack_language_or_region(self.region, '0'),
            self.orientation, self.touchscreen, self.density,
            self.keyboard, self.navigation, self.input_flags,
            self.screen_width, self.screen_height,
            self.sdk_version, self.minor_version,
            self.screen_layout, self.ui_mode, self.smallest_screen_width_dp,
            self.screen_width_dp, self.screen_height_dp,
            _pack_text(self.locale_script, 4, 'Locale script'),
            _pack_text(self.locale_variant, 8, 'Locale variant'),
            self.screen_layout2, self.color_mode,
            0,
            b'',
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> 'ResTableConfig':
        """Decode a record from its wire form.

        Accepts any record at least CONFIG_MIN_SIZE bytes long; fields past
        the end of a short record keep their defaults.
        """
        if len(data) < CONFIG_MIN_SIZE:
            raise ValueError(f"Need at least {CONFIG_MIN_SIZE} bytes, got {len(data)}")

        size = struct.unpack_from('<I', data)[0]
        if size < CONFIG_MIN_SIZE or size > len(data):
            raise ValueError(f"Invalid record size {size} for {len(data)} bytes")

        padded = bytes(data[:size]).ljust(CONFIG_SIZE, b'\x00')[:CONFIG_SIZE]
        (_, mcc, mnc, language, country,
         orientation, touchscreen, density,
         keyboard, navigation, input_flags,
         screen_width, screen_height,
         sdk_version, minor_version,
         screen_layout, ui_mode, smallest_screen_width_dp,
         screen_width_dp, screen_height_dp,
         locale_script, locale_variant,
         screen_layout2, color_mode,
         _, _) = CONFIG_STRUCT.unpack(padded)

        return cls(
            mcc=mcc,
            mnc=mnc,
            language=unpack_language_or_region(language, 'a'),
            region=unpack_language_or_region(country, '0'),
            locale_script=_unpack_text(locale_script),
            locale_variant=_unpack_text(locale_variant),
            orientation=orientation,
            touchscreen=touchscreen,
            density=density,
            keyboard=keyboard,
            navigation=navigation,
            input_flags=input_flags,
            screen_width=screen_width,
            screen_height=screen_height,
            sdk_version=sdk_version,
            minor_version=minor_version,
            screen_layout=screen_layout,
            ui_mode=ui_mode,
            smallest_screen_width_dp=smallest_screen_width_dp,
            screen_width_dp=screen_width_dp,
            screen_height_dp=screen_height_dp,
            screen_layout2=screen_layout2,
            color_mode=color_mode,
        )

    def to_hex(self) -> str:
        return self.to_bytes().hex().upper()
