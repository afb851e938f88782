#!/usr/bin/env python3
"""
qualifier_locale.py - Locale qualifier parsing

Resolves the locale portion of a resource qualifier descriptor. Two forms
are accepted:

Legacy form (1 or 2 tokens):
    en          language only
    en-rUS      language + region ("r" followed by a 2 character region)

Modified BCP 47 form (always 1 token, subtags joined with '+'):
    b+en                    language
    b+en+US                 language + region
    b+sr+Latn               language + script
    b+de+1996               language + variant (numeric 4 character variant)
    b+sr+Latn+RS            language + script + region
    b+en+US+POSIX           language + region + variant
    b+sr+Latn+RS+variant    language + script + region + variant

Usage:
    from qualifier_locale import LocaleValue

    locale = LocaleValue()
    consumed = locale.init_from_parts(['en', 'rus', 'v21'], 0)  # -> 2
    locale.write_to(config)
"""

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from qualifier_config import ResTableConfig


BCP47_PREFIX = 'b+'

LEGACY_LANGUAGE = re.compile(r'[a-z]{2,3}')

# "car" is a UI mode type, never a language.
RESERVED_LANGUAGES = frozenset({'car'})

# b+ subtag shapes that fit their fields in the binary record
SUBTAG_PATTERNS = {
    'language': re.compile(r'[a-z]{2,3}'),
    'region': re.compile(r'[a-z]{2}|[0-9]{3}'),
    'script': re.compile(r'[a-z]{4}'),
    'variant': re.compile(r'[0-9a-z]{4,8}'),
}

# Legacy region tokens are "r" followed by two letters or digits.
LEGACY_REGION = re.compile(r'r[a-z0-9]{2}')


class LocaleError(ValueError):
    """A b+ locale tag that cannot be split into valid subtags."""

    def __init__(self, tag: str, reason: str):
        super().__init__(f"Malformed locale tag '{tag}': {reason}")
        self.tag = tag
        self.reason = reason


@dataclass
class LocaleValue:
    """Locale fields gathered from one or two descriptor tokens."""
    language: Optional[str] = None
    region: Optional[str] = None
    script: Optional[str] = None
    variant: Optional[str] = None

    def set_language(self, chars: str) -> None:
        self.language = chars.strip().lower()

    def set_region(self, chars: str) -> None:
        self.region = chars.strip().upper()

    def set_script(self, chars: str) -> None:
        self.script = chars[:1].upper() + chars[1:].lower()

    def set_variant(self, chars: str) -> None:
        self.variant = chars.strip()

    @property
    def is_empty(self) -> bool:
        return not (self.language or self.region or self.script or self.variant)

    def init_from_parts(self, parts: Sequence[str], pos: int = 0) -> int:
        """
        Parse the locale starting at parts[pos].

        Returns:
            Number of tokens consumed; 0 when parts[pos] is not a locale.

        Raises:
            LocaleError: parts[pos] is a b+ tag with a bad subtag layout.
        """
        if pos >= len(parts):
            return 0

        part = parts[pos]
        if part.startswith(BCP47_PREFIX):
            self._init_from_bcp47(part)
            return 1

        if not LEGACY_LANGUAGE.fullmatch(part) or part in RESERVED_LANGUAGES:
            return 0

        self.set_language(part)
        consumed = 1

        if pos + 1 < len(parts):
            region_part = parts[pos + 1]
            if LEGACY_REGION.fullmatch(region_part):
                self.set_region(region_part[1:])
                consumed += 1

        return consumed

    def _init_from_bcp47(self, tag: str) -> None:
        subtags = tag[len(BCP47_PREFIX):].lower().split('+')

        if any(not s for s in subtags):
            raise LocaleError(tag, "empty subtag")

        count = len(subtags)
        if count == 1:
            self._set_checked(tag, 'language', subtags[0])

        elif count == 2:
            self._set_checked(tag, 'language', subtags[0])
            second = subtags[1]
            # The second subtag is a region, a script or a variant.
            if len(second) in (2, 3):
                self._set_checked(tag, 'region', second)
            elif len(second) == 4 and not '0' <= second[0] <= '9':
                self._set_checked(tag, 'script', second)
            elif 4 <= len(second) <= 8:
                self._set_checked(tag, 'variant', second)
            else:
                raise LocaleError(tag, f"subtag '{second}' has invalid length {len(second)}")

        elif count == 3:
            self._set_checked(tag, 'language', subtags[0])
            second, third = subtags[1], subtags[2]
            if len(second) == 4:
                self._set_checked(tag, 'script', second)
            elif len(second) in (2, 3):
                self._set_checked(tag, 'region', second)
            else:
                raise LocaleError(tag, f"subtag '{second}' is neither script nor region")

            # Region after a script, otherwise a variant.
            if len(third) >= 4:
                self._set_checked(tag, 'variant', third)
            else:
                self._set_checked(tag, 'region', third)

        elif count == 4:
            self._set_checked(tag, 'language', subtags[0])
            self._set_checked(tag, 'script', subtags[1])
            self._set_checked(tag, 'region', subtags[2])
            self._set_checked(tag, 'variant', subtags[3])

        else:
            raise LocaleError(tag, f"expected 1-4 subtags, got {count}")

    def _set_checked(self, tag: str, kind: str, subtag: str) -> None:
        """Store a b+ subtag, rejecting values the binary record cannot hold."""
        if not SUBTAG_PATTERNS[kind].fullmatch(subtag):
            raise LocaleError(tag, f"{kind} subtag '{subtag}' is not valid")
        getattr(self, f'set_{kind}')(subtag)

    def write_to(self, config: ResTableConfig) -> None:
        """Copy the locale fields onto a configuration record."""
        config.language = self.language
        config.region = self.region
        config.locale_script = self.script
        config.locale_variant = self.variant
