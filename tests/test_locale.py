"""Tests for PocketPulse.settings.locale currency formatting."""
import unittest

from PocketPulse.settings import lib
from PocketPulse.settings import locale
from tests.base import BaseTestCase, mute_ui_signals


class LocaleHelperTests(unittest.TestCase):
    def test_currency_from_locale(self):
        self.assertEqual(locale.get_currency_from_locale('en_IN'), 'INR')
        self.assertEqual(locale.get_currency_from_locale('en_GB'), 'GBP')
        self.assertEqual(locale.get_currency_from_locale('de_DE'), 'EUR')
        self.assertEqual(locale.get_currency_from_locale('xx_ZZ'), 'INR')
        self.assertEqual(locale.get_currency_from_locale('en'), 'INR')
        self.assertEqual(locale.get_currency_from_locale(''), 'INR')

    def test_format_fallback(self):
        self.assertEqual(locale.format_fallback(12.5), '₹12.50')
        self.assertEqual(locale.format_fallback(0), '₹0.00')
        self.assertEqual(locale.format_fallback(3.14159, '$'), '$3.14')

    def test_format_currency_value_en_in(self):
        result = locale.format_currency_value(1234.5, 'en_IN', 'INR')
        self.assertIn('₹', result)
        self.assertIn('1,234.50', result)

    def test_format_currency_value_grouping_follows_locale(self):
        self.assertIn('1,00,000.00', locale.format_currency_value(100000, 'en_IN', 'INR'))
        self.assertIn('100,000.00', locale.format_currency_value(100000, 'en_US', 'USD'))

    def test_unknown_locale_falls_back(self):
        self.assertEqual(locale.format_currency_value(12.5, 'xx_ZZ', 'INR'), '₹12.50')
        self.assertEqual(locale.format_currency_value(12.5, 'not a locale'), '₹12.50')
        self.assertEqual(locale.format_currency_value(12.5, 'xx_ZZ', 'INR', '€'), '€12.50')


class ConfiguredFormattingTests(BaseTestCase):
    def test_format_amount_uses_settings(self):
        self.assertIn('₹', locale.format_amount(5000))
        self.assertIn('5,000.00', locale.format_amount(5000))

        with mute_ui_signals():
            lib.settings['locale'] = 'en_US'
            lib.settings['currency'] = 'USD'
        result = locale.format_amount(5000)
        self.assertIn('$', result)
        self.assertIn('5,000.00', result)

    def test_format_amount_falls_back_to_configured_symbol(self):
        with mute_ui_signals():
            lib.settings['locale'] = 'xx_ZZ'
            lib.settings['fallback_symbol'] = 'Rs.'
        self.assertEqual(locale.format_amount(7.1), 'Rs.7.10')

    def test_format_signed_amount(self):
        income = locale.format_signed_amount(5000, 'income')
        expense = locale.format_signed_amount(120.5, 'expense')
        self.assertTrue(income.startswith('+ '))
        self.assertTrue(expense.startswith('- '))
        self.assertIn('120.50', expense)


if __name__ == '__main__':
    unittest.main()
