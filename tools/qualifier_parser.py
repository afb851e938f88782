#!/usr/bin/env python3
"""
qualifier_parser.py - Resource qualifier descriptor decoder

Decodes a hyphen-delimited qualifier descriptor (the suffix of a resource
directory name such as ``values-en-rUS-ldrtl-sw600dp-v21``) into a
ResTableConfig record.

Grammar:
    The descriptor is lowercased and split on '-'. Qualifier categories are
    tried in a fixed order, each exactly once, against the token at the
    cursor. A category that recognizes the token writes its fields and
    advances the cursor; otherwise the next category sees the same token.
    The descriptor is valid only if every token has been consumed once all
    categories have had their turn, so qualifiers must appear in canonical
    order and at most once each.

    mcc, mnc, locale, layout direction, smallest width, width, height,
    screen size, long, round, wide color gamut, hdr, orientation,
    ui mode type, ui mode night, density, touchscreen, keys hidden,
    keyboard, nav hidden, navigation, screen size in pixels, version

    The token "any" resets a category to its unspecified value.

Usage:
    from qualifier_parser import decode_descriptor, DecodeError

    config = decode_descriptor('en-rUS-ldrtl-sw600dp-v21')
    config.language                  # 'en'
    config.smallest_screen_width_dp  # 600

    python tools/qualifier_parser.py en-rUS-v21
    python tools/qualifier_parser.py port-hdpi --json
    python tools/qualifier_parser.py sw600dp --hex
"""

import argparse
import json
import re
import sys
from typing import Callable, Dict, List, Optional, Sequence

from qualifier_config import (
    ResTableConfig, MNC_ZERO, MAX_U16,
    Orientation, Touchscreen, Density, Keyboard, Navigation,
    KeysHidden, NavHidden, ScreenSize, ScreenLong, LayoutDir,
    ScreenRound, WideColorGamut, Hdr, UiModeType, UiModeNight,
    MASK_KEYSHIDDEN, MASK_NAVHIDDEN, MASK_SCREENSIZE, MASK_SCREENLONG,
    MASK_LAYOUTDIR, MASK_SCREENROUND, MASK_WIDE_COLOR_GAMUT, MASK_HDR,
    MASK_UI_MODE_TYPE, MASK_UI_MODE_NIGHT,
    SCREENWIDTH_ANY, SCREENHEIGHT_ANY, SDKVERSION_ANY, MINORVERSION_ANY,
)
from qualifier_locale import LocaleValue, LocaleError


WILDCARD = 'any'

MCC_PATTERN = re.compile(r'mcc([0-9]+)')
MNC_PATTERN = re.compile(r'mnc([0-9]+)')
SMALLEST_SCREEN_WIDTH_PATTERN = re.compile(r'sw([0-9]+)dp')
SCREEN_WIDTH_PATTERN = re.compile(r'w([0-9]+)dp')
SCREEN_HEIGHT_PATTERN = re.compile(r'h([0-9]+)dp')
DENSITY_PATTERN = re.compile(r'([0-9]+)dpi')
SCREEN_SIZE_PATTERN = re.compile(r'([0-9]+)x([0-9]+)')
VERSION_PATTERN = re.compile(r'v([0-9]+)')


class DecodeError(ValueError):
    """Descriptor is not a valid qualifier sequence."""

    def __init__(self, descriptor: str, token: Optional[str] = None,
                 reason: Optional[str] = None):
        message = f"Unrecognized descriptor '{descriptor}'"
        if token is not None:
            message += f" at '{token}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.descriptor = descriptor
        self.token = token
        self.reason = reason


def tokenize(descriptor: str) -> List[str]:
    """Lowercase and split a descriptor into its non-empty tokens."""
    return [part for part in descriptor.lower().split('-') if part]


def parse_u16(digits: str) -> Optional[int]:
    """Parse a run of ASCII digits; None if it does not fit 16 bits."""
    significant = digits.lstrip('0')
    if len(significant) > 5:
        return None
    value = int(significant or '0')
    return value if value <= MAX_U16 else None


# =============================================================================
# Category matchers
# =============================================================================

class QualifierMatcher:
    """One qualifier category of the descriptor grammar."""

    name = 'qualifier'

    def attempt(self, tokens: Sequence[str], pos: int,
                config: ResTableConfig) -> int:
        """Try the token(s) at pos; return how many were consumed (0 = none)."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class TokenMatcher(QualifierMatcher):
    """A category that is always expressed by exactly one token."""

    def attempt(self, tokens: Sequence[str], pos: int,
                config: ResTableConfig) -> int:
        return 1 if self.match(tokens[pos], config) else 0

    def match(self, token: str, config: ResTableConfig) -> bool:
        raise NotImplementedError


class FieldMatcher(TokenMatcher):
    """
    Named values written to a plain field or a packed sub-field.

    With a mask the value is written through the record's set_<field>()
    method, which clears the mask first; without one the field is assigned.
    """

    def __init__(self, name: str, field: str, values: Dict[str, int],
                 wildcard: int, mask: Optional[int] = None):
        self.name = name
        self.field = field
        self.values = dict(values)
        self.values[WILDCARD] = wildcard
        self.mask = mask

    def store(self, config: ResTableConfig, value: int) -> None:
        if self.mask is None:
            setattr(config, self.field, int(value))
        else:
            getattr(config, f'set_{self.field}')(self.mask, int(value))

    def match(self, token: str, config: ResTableConfig) -> bool:
        value = self.values.get(token)
        if value is None:
            return False
        self.store(config, value)
        return True


class NumberMatcher(FieldMatcher):
    """Named values plus a numeric pattern whose group(1) is the value."""

    def __init__(self, name: str, field: str, pattern: re.Pattern,
                 wildcard: int, values: Optional[Dict[str, int]] = None,
                 convert: Optional[Callable[[int], Optional[int]]] = None):
        super().__init__(name, field, values or {}, wildcard)
        self.pattern = pattern
        self.convert = convert

    def match(self, token: str, config: ResTableConfig) -> bool:
        if super().match(token, config):
            return True

        m = self.pattern.fullmatch(token)
        if not m:
            return False

        value = parse_u16(m.group(1))
        if value is None:
            return False
        if self.convert is not None:
            value = self.convert(value)
            if value is None:
                return False
        self.store(config, value)
        return True


class ScreenSizeMatcher(TokenMatcher):
    """<width>x<height> in pixels; width must not be smaller than height."""

    name = 'screen_size'

    def match(self, token: str, config: ResTableConfig) -> bool:
        if token == WILDCARD:
            config.screen_width = SCREENWIDTH_ANY
            config.screen_height = SCREENHEIGHT_ANY
            return True

        m = SCREEN_SIZE_PATTERN.fullmatch(token)
        if not m:
            return False

        width, height = parse_u16(m.group(1)), parse_u16(m.group(2))
        if width is None or height is None or width < height:
            return False

        config.screen_width = width
        config.screen_height = height
        return True


class VersionMatcher(TokenMatcher):
    """v<sdk>; the minor version is always reset to 0."""

    name = 'version'

    def match(self, token: str, config: ResTableConfig) -> bool:
        if token == WILDCARD:
            config.sdk_version = SDKVERSION_ANY
            config.minor_version = MINORVERSION_ANY
            return True

        m = VERSION_PATTERN.fullmatch(token)
        if not m:
            return False

        sdk = parse_u16(m.group(1))
        if sdk is None:
            return False

        config.sdk_version = sdk
        config.minor_version = 0
        return True


class LocaleMatcher(QualifierMatcher):
    """Locale in legacy (en-rUS) or modified BCP 47 (b+en+US) form."""

    name = 'locale'

    def attempt(self, tokens: Sequence[str], pos: int,
                config: ResTableConfig) -> int:
        locale = LocaleValue()
        consumed = locale.init_from_parts(tokens, pos)
        if consumed:
            locale.write_to(config)
        return consumed


def _mnc_value(value: int) -> Optional[int]:
    # 0xFFFF is the stored form of mnc0
    if value == MNC_ZERO:
        return None
    return MNC_ZERO if value == 0 else value


def default_matchers() -> List[QualifierMatcher]:
    """The qualifier categories in canonical descriptor order."""
    return [
        NumberMatcher('mcc', 'mcc', MCC_PATTERN, wildcard=0),
        NumberMatcher('mnc', 'mnc', MNC_PATTERN, wildcard=0, convert=_mnc_value),
        LocaleMatcher(),
        FieldMatcher('layout_direction', 'screen_layout', {
            'ldltr': LayoutDir.LTR,
            'ldrtl': LayoutDir.RTL,
        }, wildcard=LayoutDir.ANY, mask=MASK_LAYOUTDIR),
        NumberMatcher('smallest_screen_width_dp', 'smallest_screen_width_dp',
                      SMALLEST_SCREEN_WIDTH_PATTERN, wildcard=SCREENWIDTH_ANY),
        NumberMatcher('screen_width_dp', 'screen_width_dp',
                      SCREEN_WIDTH_PATTERN, wildcard=SCREENWIDTH_ANY),
        NumberMatcher('screen_height_dp', 'screen_height_dp',
                      SCREEN_HEIGHT_PATTERN, wildcard=SCREENHEIGHT_ANY),
        FieldMatcher('screen_layout_size', 'screen_layout', {
            'small': ScreenSize.SMALL,
            'normal': ScreenSize.NORMAL,
            'large': ScreenSize.LARGE,
            'xlarge': ScreenSize.XLARGE,
        }, wildcard=ScreenSize.ANY, mask=MASK_SCREENSIZE),
        FieldMatcher('screen_layout_long', 'screen_layout', {
            'long': ScreenLong.YES,
            'notlong': ScreenLong.NO,
        }, wildcard=ScreenLong.ANY, mask=MASK_SCREENLONG),
        FieldMatcher('screen_round', 'screen_layout2', {
            'round': ScreenRound.YES,
            'notround': ScreenRound.NO,
        }, wildcard=ScreenRound.ANY, mask=MASK_SCREENROUND),
        FieldMatcher('wide_color_gamut', 'color_mode', {
            'widecg': WideColorGamut.YES,
            'nowidecg': WideColorGamut.NO,
        }, wildcard=WideColorGamut.ANY, mask=MASK_WIDE_COLOR_GAMUT),
        FieldMatcher('hdr', 'color_mode', {
            'highdr': Hdr.YES,
            'lowdr': Hdr.NO,
        }, wildcard=Hdr.ANY, mask=MASK_HDR),
        FieldMatcher('orientation', 'orientation', {
            'port': Orientation.PORT,
            'land': Orientation.LAND,
            'square': Orientation.SQUARE,
        }, wildcard=Orientation.ANY),
        FieldMatcher('ui_mode_type', 'ui_mode', {
            'desk': UiModeType.DESK,
            'car': UiModeType.CAR,
            'television': UiModeType.TELEVISION,
            'appliance': UiModeType.APPLIANCE,
            'watch': UiModeType.WATCH,
            'vrheadset': UiModeType.VR_HEADSET,
        }, wildcard=UiModeType.ANY, mask=MASK_UI_MODE_TYPE),
        FieldMatcher('ui_mode_night', 'ui_mode', {
            'night': UiModeNight.YES,
            'notnight': UiModeNight.NO,
        }, wildcard=UiModeNight.ANY, mask=MASK_UI_MODE_NIGHT),
        NumberMatcher('density', 'density', DENSITY_PATTERN,
                      wildcard=Density.DEFAULT, values={
                          'anydpi': Density.ANY,
                          'nodpi': Density.NONE,
                          'ldpi': Density.LOW,
                          'mdpi': Density.MEDIUM,
                          'tvdpi': Density.TV,
                          'hdpi': Density.HIGH,
                          'xhdpi': Density.XHIGH,
                          'xxhdpi': Density.XXHIGH,
                          'xxxhdpi': Density.XXXHIGH,
                      }),
        FieldMatcher('touchscreen', 'touchscreen', {
            'notouch': Touchscreen.NOTOUCH,
            'stylus': Touchscreen.STYLUS,
            'finger': Touchscreen.FINGER,
        }, wildcard=Touchscreen.ANY),
        FieldMatcher('keys_hidden', 'input_flags', {
            'keysexposed': KeysHidden.NO,
            'keyshidden': KeysHidden.YES,
            'keyssoft': KeysHidden.SOFT,
        }, wildcard=KeysHidden.ANY, mask=MASK_KEYSHIDDEN),
        FieldMatcher('keyboard', 'keyboard', {
            'nokeys': Keyboard.NOKEYS,
            'qwerty': Keyboard.QWERTY,
            '12key': Keyboard.TWELVEKEY,
        }, wildcard=Keyboard.ANY),
        FieldMatcher('nav_hidden', 'input_flags', {
            'navexposed': NavHidden.NO,
            'navhidden': NavHidden.YES,
        }, wildcard=NavHidden.ANY, mask=MASK_NAVHIDDEN),
        FieldMatcher('navigation', 'navigation', {
            'nonav': Navigation.NONAV,
            'dpad': Navigation.DPAD,
            'trackball': Navigation.TRACKBALL,
            'wheel': Navigation.WHEEL,
        }, wildcard=Navigation.ANY),
        ScreenSizeMatcher(),
        VersionMatcher(),
    ]


# =============================================================================
# Decoder
# =============================================================================

class DescriptorDecoder:
    """
    Decodes qualifier descriptors into ResTableConfig records.

    The decoder holds no per-call state; one instance can be shared.
    """

    def __init__(self, matchers: Optional[List[QualifierMatcher]] = None):
        self.matchers = matchers if matchers is not None else default_matchers()

    def decode(self, descriptor: str) -> ResTableConfig:
        """
        Decode a descriptor.

        Returns:
            A new ResTableConfig; unmentioned categories keep their defaults.

        Raises:
            DecodeError: a token is out of order, repeated or unknown, or a
                locale tag is malformed.
        """
        tokens = tokenize(descriptor)
        config = ResTableConfig()
        pos = 0

        for matcher in self.matchers:
            if pos >= len(tokens):
                break
            try:
                pos += matcher.attempt(tokens, pos, config)
            except LocaleError as e:
                raise DecodeError(descriptor, tokens[pos], e.reason) from e

        if pos < len(tokens):
            raise DecodeError(descriptor, tokens[pos])

        self.apply_version_for_compatibility(config)
        return config

    def apply_version_for_compatibility(self, config: ResTableConfig) -> None:
        """Hook run on every successfully decoded record. Does nothing here."""

    def is_valid(self, descriptor: str) -> bool:
        try:
            self.decode(descriptor)
        except DecodeError:
            return False
        return True


_DEFAULT_DECODER = DescriptorDecoder()


# Convenience functions
def decode_descriptor(descriptor: str) -> ResTableConfig:
    """Decode a descriptor with the canonical qualifier order."""
    return _DEFAULT_DECODER.decode(descriptor)


def is_valid_descriptor(descriptor: str) -> bool:
    """True when the descriptor decodes without error."""
    return _DEFAULT_DECODER.is_valid(descriptor)


def format_config(config: ResTableConfig) -> str:
    """One line per non-default field, for console output."""
    values = config.to_dict(include_defaults=False)
    if not values:
        return "  (default configuration)"

    lines = []
    for key, value in values.items():
        if isinstance(value, int) and key in ('screen_layout', 'screen_layout2',
                                              'color_mode', 'ui_mode', 'input_flags'):
            lines.append(f"  {key}: 0x{value:02X}")
        else:
            lines.append(f"  {key}: {value}")
    return '\n'.join(lines)


def main():
    parser = argparse.ArgumentParser(
        description='Decode resource qualifier descriptors'
    )
    parser.add_argument('descriptors', nargs='+',
                        help='Qualifier descriptors, e.g. en-rUS-land-v21')
    output = parser.add_mutually_exclusive_group()
    output.add_argument('--json', action='store_true',
                        help='Output decoded records as JSON')
    output.add_argument('--hex', action='store_true',
                        help='Output the binary record as hex')
    args = parser.parse_args()

    decoder = DescriptorDecoder()
    results = {}
    failed = 0

    for descriptor in args.descriptors:
        try:
            config = decoder.decode(descriptor)
        except DecodeError as e:
            print(f"Error: {e}", file=sys.stderr)
            results[descriptor] = None
            failed += 1
            continue

        if args.json:
            results[descriptor] = config.to_dict()
        elif args.hex:
            print(f"{descriptor}: {config.to_hex()}")
        else:
            print(f"{descriptor}:")
            print(format_config(config))

    if args.json:
        print(json.dumps(results, indent=2))

    sys.exit(1 if failed else 0)


if __name__ == '__main__':
    main()
