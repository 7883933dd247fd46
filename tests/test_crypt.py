#! /usr/bin/env python
# encoding: utf-8
# A part of pdfrev
# Copyright (C) 2017  Jon Lund Steffensen
# MIT license -- See LICENSE.txt for details

'''
The standard security handler.

Run from the directory above like so:
python -m pytest tests/test_crypt.py
'''

import unittest

from pdfrev import (PdfDocument, PdfPasswordError,
                    PdfUnsupportedSecurityError, PdfSecurityError)
from pdfrev.crypt import (StandardSecurityHandler, encode_permissions,
                          decode_permissions, pad_password)

from pdfmaker import make_pdf, simple_objects, simple_pdf

DOC_ID = b'0123456789abcdef'


def handler(opassword='owner', upassword='user', perms=-4):
    result = StandardSecurityHandler(b'', b'', perms, DOC_ID)
    result.O = result.compute_o(opassword, upassword)
    result.U = result.compute_u(upassword)
    return result


def locked_pdf(**prefs):
    doc = PdfDocument(fdata=simple_pdf(2))
    doc.set_prefs('owner', 'user', **prefs)
    return doc.clean_output()


class TestPermissions(unittest.TestCase):

    def test_roundtrip(self):
        for flags in ((True, False, True, False), (False, True, False, True),
                      (True,) * 4, (False,) * 4):
            self.assertEqual(decode_permissions(encode_permissions(*flags)),
                             flags)

    def test_values(self):
        self.assertEqual(encode_permissions(), -4)
        self.assertEqual(encode_permissions(False, False, False, False), -64)
        self.assertEqual(decode_permissions(-12), (True, False, True, True))


class TestHandler(unittest.TestCase):

    def test_pad_password(self):
        self.assertEqual(len(pad_password(None)), 32)
        self.assertEqual(pad_password('abc')[:4], b'abc\x28')
        self.assertEqual(pad_password(b'x' * 40), b'x' * 32)

    def test_passwords(self):
        h = handler()
        self.assertFalse(h.check_pass(None, 'wrong'))
        self.assertFalse(h.check_pass('wrong', 'user'))
        self.assertTrue(h.check_pass(None, 'user'))
        self.assertTrue(h.check_pass('owner', 'user'))
        self.assertEqual(h.upassword, 'user')

    def test_crypt(self):
        h = handler()
        self.assertRaises(PdfSecurityError, h.crypt, b'data', 1, 0)
        h.check_pass(None, 'user')
        data = b'Some secret text'
        ciphered = h.encrypt(data, 5, 0)
        self.assertNotEqual(ciphered, data)
        self.assertEqual(len(ciphered), len(data))
        self.assertEqual(h.decrypt(ciphered, 5, 0), data)
        self.assertNotEqual(h.encrypt(data, 6, 0), ciphered)
        self.assertNotEqual(h.encrypt(data, 5, 1), ciphered)
        self.assertEqual(h.crypt(data, None, None), data)

    def test_encryption_dictionary_untouched(self):
        h = handler()
        h.check_pass(None, 'user')
        h.encrypt_objnum = 9
        self.assertEqual(h.crypt(b'data', 9, 0), b'data')


class TestDocuments(unittest.TestCase):

    def test_unencrypted_prefs(self):
        doc = PdfDocument(fdata=simple_pdf(1))
        self.assertFalse(doc.is_encrypted())
        self.assertEqual(doc.get_prefs(),
                         (None, None, True, True, True, True))
        self.assertTrue(doc.can_modify())

    def test_set_prefs_and_reopen(self):
        fdata = locked_pdf(modify_ok=False, add_ok=False)
        self.assertNotIn(b'(Page 1)', fdata)
        self.assertIn(b'/Encrypt', fdata)

        doc = PdfDocument(fdata=fdata, upassword='user')
        self.assertTrue(doc.is_encrypted())
        self.assertEqual(doc.num_pages(), 2)
        self.assertIn(b'(Page 2)', doc.get_page_content(2))
        self.assertEqual(doc.get_prefs(),
                         (None, 'user', True, False, True, False))
        self.assertTrue(doc.can_print())
        self.assertFalse(doc.can_add())

        doc = PdfDocument(fdata=fdata, opassword='owner', upassword='user')
        self.assertEqual(doc.get_font_names(1), ['F1'])

    def test_strings_encrypted(self):
        objects = simple_objects(1)
        objects[6] = b'<< /Title (Secret title) >>'
        doc = PdfDocument(fdata=make_pdf(objects))
        doc.set_prefs('owner', 'user')
        fdata = doc.clean_output()
        self.assertNotIn(b'Secret title', fdata)
        doc = PdfDocument(fdata=fdata, upassword='user')
        self.assertEqual(doc.get_object_value(6).Title, b'Secret title')

    def test_incremental_save_of_encrypted(self):
        doc = PdfDocument(fdata=locked_pdf(), upassword='user')
        doc.set_page_content(1, b'BT (Changed) Tj ET')
        fdata = doc.output()
        self.assertEqual(len(doc.revisions), 2)
        doc = PdfDocument(fdata=fdata, upassword='user')
        self.assertEqual(doc.get_page_content(1), b'BT (Changed) Tj ET')
        self.assertIn(b'(Page 2)', doc.get_page_content(2))

    def test_wrong_passwords(self):
        fdata = locked_pdf()
        self.assertRaises(PdfPasswordError, PdfDocument, fdata=fdata)
        self.assertRaises(PdfPasswordError, PdfDocument, fdata=fdata,
                          upassword='nope')
        self.assertRaises(PdfPasswordError, PdfDocument, fdata=fdata,
                          opassword='nope', upassword='user')

    def test_prompt(self):
        fdata = locked_pdf()
        attempts = []

        def prompt(attempt):
            attempts.append(attempt)
            return (None, 'user') if attempt == 2 else (None, 'guess')

        doc = PdfDocument(fdata=fdata, prompt=prompt)
        self.assertEqual(attempts, [1, 2])
        self.assertEqual(doc.get_prefs()[1], 'user')

        del attempts[:]
        self.assertRaises(PdfPasswordError, PdfDocument, fdata=fdata,
                          prompt=lambda attempt: attempts.append(attempt) or
                          (None, 'guess'), max_attempts=2)
        self.assertEqual(attempts, [1])

    def test_unsupported(self):
        objects = simple_objects(1)
        objects[6] = (b'<< /Filter /Standard /V 2 /R 3 /Length 128 '
                      b'/O <00> /U <00> /P -4 >>')
        fdata = make_pdf(objects, b'/Root 1 0 R /Encrypt 6 0 R '
                                  b'/ID [<00112233> <00112233>]')
        self.assertRaises(PdfUnsupportedSecurityError, PdfDocument,
                          fdata=fdata)
        objects[6] = b'<< /Filter /Other /V 1 >>'
        fdata = make_pdf(objects, b'/Root 1 0 R /Encrypt 6 0 R')
        self.assertRaises(PdfUnsupportedSecurityError, PdfDocument,
                          fdata=fdata)


def main():
    unittest.main()


if __name__ == '__main__':
    main()
