"""
Tests for locale qualifier parsing (legacy and modified BCP 47 forms).
"""

import pytest

from qualifier_config import ResTableConfig
from qualifier_locale import LocaleValue, LocaleError


def parse(*parts, pos=0):
    locale = LocaleValue()
    consumed = locale.init_from_parts(list(parts), pos)
    return locale, consumed


class TestLegacyLocale:
    """Tests for the en / en-rUS form."""

    def test_language_only(self):
        locale, consumed = parse('en')
        assert consumed == 1
        assert locale.language == 'en'
        assert locale.region is None

    def test_three_letter_language(self):
        locale, consumed = parse('fil')
        assert consumed == 1
        assert locale.language == 'fil'

    def test_language_and_region(self):
        locale, consumed = parse('en', 'rus')
        assert consumed == 2
        assert locale.language == 'en'
        assert locale.region == 'US'

    def test_numeric_region_token(self):
        locale, consumed = parse('es', 'r41')
        assert consumed == 2
        assert locale.region == '41'

    def test_following_token_not_a_region(self):
        locale, consumed = parse('en', 'land')
        assert consumed == 1
        assert locale.region is None

    def test_r_token_wrong_length(self):
        locale, consumed = parse('en', 'round')
        assert consumed == 1
        assert locale.region is None

    def test_car_is_not_a_language(self):
        locale, consumed = parse('car')
        assert consumed == 0
        assert locale.is_empty

    def test_non_alpha_token(self):
        _, consumed = parse('v21')
        assert consumed == 0

    def test_too_long_token(self):
        _, consumed = parse('land')
        assert consumed == 0

    def test_single_letter(self):
        _, consumed = parse('e')
        assert consumed == 0

    def test_starts_at_position(self):
        locale, consumed = parse('mcc310', 'de', 'rat', pos=1)
        assert consumed == 2
        assert locale.language == 'de'
        assert locale.region == 'AT'

    def test_position_past_end(self):
        _, consumed = parse('en', pos=1)
        assert consumed == 0


class TestBcp47Locale:
    """Tests for the b+ form."""

    def test_language_only(self):
        locale, consumed = parse('b+en')
        assert consumed == 1
        assert locale.language == 'en'

    def test_long_language(self):
        locale, _ = parse('b+haw')
        assert locale.language == 'haw'

    def test_language_region(self):
        locale, consumed = parse('b+en+us')
        assert consumed == 1
        assert locale.language == 'en'
        assert locale.region == 'US'

    def test_numeric_region(self):
        locale, _ = parse('b+es+419')
        assert locale.region == '419'

    def test_language_script(self):
        locale, _ = parse('b+sr+latn')
        assert locale.script == 'Latn'
        assert locale.variant is None

    def test_numeric_four_char_subtag_is_variant(self):
        locale, _ = parse('b+de+1996')
        assert locale.variant == '1996'
        assert locale.script is None

    def test_long_variant(self):
        locale, _ = parse('b+ca+valencia')
        assert locale.variant == 'valencia'

    def test_second_subtag_too_long(self):
        with pytest.raises(LocaleError, match="invalid length"):
            parse('b+en+abcdefghi')

    def test_second_subtag_too_short(self):
        with pytest.raises(LocaleError):
            parse('b+en+a')

    def test_script_then_region(self):
        locale, _ = parse('b+sr+latn+rs')
        assert locale.script == 'Latn'
        assert locale.region == 'RS'

    def test_region_then_variant(self):
        locale, _ = parse('b+en+us+posix')
        assert locale.region == 'US'
        assert locale.variant == 'posix'

    def test_three_subtags_bad_second(self):
        with pytest.raises(LocaleError, match="neither script nor region"):
            parse('b+en+latnx+us')

    def test_four_subtags(self):
        locale, consumed = parse('b+sr+latn+rs+ekavsk')
        assert consumed == 1
        assert locale.language == 'sr'
        assert locale.script == 'Latn'
        assert locale.region == 'RS'
        assert locale.variant == 'ekavsk'

    def test_too_many_subtags(self):
        with pytest.raises(LocaleError, match="expected 1-4 subtags"):
            parse('b+sr+latn+rs+a+b')

    def test_empty_subtag(self):
        with pytest.raises(LocaleError, match="empty subtag"):
            parse('b+en++us')

    def test_trailing_separator(self):
        with pytest.raises(LocaleError, match="empty subtag"):
            parse('b+en+us+')

    def test_bare_prefix(self):
        with pytest.raises(LocaleError):
            parse('b+')

    def test_only_one_token_consumed(self):
        locale, consumed = parse('b+en+us', 'rgb')
        assert consumed == 1
        assert locale.region == 'US'

    def test_error_carries_tag(self):
        with pytest.raises(LocaleError) as excinfo:
            parse('b+en+a')
        assert excinfo.value.tag == 'b+en+a'


class TestBcp47WireLimits:
    """Tests for b+ subtags that would not fit the binary record."""

    @pytest.mark.parametrize('tag', [
        'b+english',
        'b+e',
        'b+e1',
        'b+engl+us',
    ])
    def test_language_too_long_or_not_letters(self, tag):
        with pytest.raises(LocaleError, match="language subtag"):
            parse(tag)

    def test_script_must_be_four_letters(self):
        with pytest.raises(LocaleError, match="script subtag 'latinx'"):
            parse('b+sr+latinx+rs+ekavsk')

    def test_script_with_digit(self):
        with pytest.raises(LocaleError, match="script subtag"):
            parse('b+sr+l4tn')

    def test_variant_too_long(self):
        with pytest.raises(LocaleError, match="variant subtag 'posixvariant'"):
            parse('b+en+us+posixvariant')
        with pytest.raises(LocaleError, match="variant subtag"):
            parse('b+sr+latn+rs+posixvariant')

    def test_eight_character_variant_accepted(self):
        locale, _ = parse('b+sr+latn+rs+posixvar')
        assert locale.variant == 'posixvar'

    def test_three_letter_region_rejected(self):
        with pytest.raises(LocaleError, match="region subtag 'usa'"):
            parse('b+en+usa')

    def test_mixed_region_rejected(self):
        with pytest.raises(LocaleError, match="region subtag"):
            parse('b+es+4a')

    def test_single_character_region_after_script(self):
        with pytest.raises(LocaleError, match="region subtag 'x'"):
            parse('b+sr+latn+x')

    def test_legacy_region_must_be_letters_or_digits(self):
        locale, consumed = parse('en', 'r_1')
        assert consumed == 1
        assert locale.region is None


class TestNormalization:
    """Tests for the case rules applied on write."""

    def test_language_lowercased(self):
        locale = LocaleValue()
        locale.set_language(' EN ')
        assert locale.language == 'en'

    def test_region_uppercased(self):
        locale = LocaleValue()
        locale.set_region('us ')
        assert locale.region == 'US'

    def test_script_title_cased(self):
        locale = LocaleValue()
        locale.set_script('hANS')
        assert locale.script == 'Hans'

    def test_variant_case_preserved(self):
        locale = LocaleValue()
        locale.set_variant(' POSIX ')
        assert locale.variant == 'POSIX'

    def test_write_to(self):
        locale, _ = parse('b+sr+latn+rs')
        config = ResTableConfig()
        locale.write_to(config)
        assert config.language == 'sr'
        assert config.region == 'RS'
        assert config.locale_script == 'Latn'
        assert config.locale_variant is None
