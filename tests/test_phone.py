from django.test import SimpleTestCase

from apps.core.phone import (
    format_kenyan_phone,
    is_kenyan_mobile,
    normalize_kenyan_phone,
    to_msisdn,
)


class NormalizeKenyanPhoneTests(SimpleTestCase):

    def test_accepted_spellings(self):
        for raw in ('0712345678', '712345678', '254712345678', '+254712345678',
                    '+254 712 345 678', '0712-345-678', '(0712) 345678'):
            with self.subTest(raw=raw):
                self.assertEqual(normalize_kenyan_phone(raw), '+254712345678')

    def test_new_safaricom_range(self):
        self.assertEqual(normalize_kenyan_phone('0110 123 456'), '+254110123456')

    def test_nairobi_landline(self):
        self.assertEqual(normalize_kenyan_phone('020 123 4567'), '+254201234567')
        self.assertFalse(is_kenyan_mobile('020 123 4567'))

    def test_rejected(self):
        for raw in ('', None, '12345', '0812345678', '+255712345678', '07123456789', 'phone'):
            with self.subTest(raw=raw):
                self.assertIsNone(normalize_kenyan_phone(raw))

    def test_display_and_msisdn(self):
        self.assertEqual(format_kenyan_phone('0712345678'), '+254 712 345 678')
        self.assertEqual(format_kenyan_phone('garbage'), 'garbage')
        self.assertEqual(to_msisdn('0712 345 678'), '254712345678')
        self.assertIsNone(to_msisdn('123'))
