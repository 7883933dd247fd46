#! /usr/bin/env python
# encoding: utf-8
# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

'''
Incremental and clean saves.

Run from the directory above like so:
python -m pytest tests/test_save.py
'''

import io
import os
import shutil
import tempfile
import unittest

from pdfrev import PdfDocument, PdfReader, PdfDict, PdfName, PdfNumber
from pdfrev.pdfwriter import PdfWriter, format_node
from pdfrev.objects import PdfString, PdfArray, PdfReference

from pdfmaker import make_pdf, simple_objects, simple_pdf


def reparse(doc):
    return PdfDocument(fdata=doc.fdata)


class TestIncrementalSave(unittest.TestCase):

    def test_nothing_to_save(self):
        fdata = simple_pdf(2)
        doc = PdfDocument(fdata=fdata)
        self.assertFalse(doc.save())
        self.assertEqual(doc.output(), fdata)

    def test_save_appends(self):
        fdata = simple_pdf(2)
        doc = PdfDocument(fdata=fdata)
        font = doc.get_object_value(3)
        font.BaseFont = PdfName.Courier
        doc.mark_changed(font)
        self.assertTrue(doc.save())
        self.assertTrue(doc.fdata.startswith(fdata))
        self.assertEqual(len(doc.revisions), 2)
        self.assertEqual(doc.generation(3), 1)
        self.assertIn(b'3 1 obj', doc.fdata[len(fdata):])

        again = reparse(doc)
        self.assertEqual(len(again.revisions), 2)
        self.assertEqual(again.get_object_value(3).BaseFont, '/Courier')
        self.assertEqual(again.trailer.Prev, str(doc.revisions[1]))

    def test_every_object_survives(self):
        doc = PdfDocument(fdata=simple_pdf(3))
        doc.set_page_content(2, b'0 0 m 100 100 l S')
        doc.append_page_content(3, b'1 0 0 RG')
        doc.output()
        again = reparse(doc)
        self.assertEqual(again.objnums(), doc.objnums())
        for objnum in doc.objnums():
            self.assertEqual(again.get_object_value(objnum),
                             doc.get_object_value(objnum))

    def test_save_is_stable(self):
        doc = PdfDocument(fdata=simple_pdf(2))
        doc.get_object_value(3).BaseFont = PdfName.Times
        doc.mark_changed(3)
        first = doc.output()
        self.assertEqual(doc.output(), first)
        self.assertFalse(doc.save())

    def test_deleted_objects_are_freed(self):
        doc = PdfDocument(fdata=simple_pdf(3))
        doc.delete_page(2)
        doc.output()
        again = reparse(doc)
        self.assertEqual(again.num_pages(), 2)
        self.assertIn(6, again.free)
        self.assertIn(7, again.free)
        self.assertIsNone(again.dereference(6))

    def test_write_to_file(self):
        doc = PdfDocument(fdata=simple_pdf(1))
        stream = io.BytesIO()
        doc.output(stream)
        self.assertEqual(stream.getvalue(), doc.fdata)

        tmpdir = tempfile.mkdtemp()
        try:
            fname = os.path.join(tmpdir, 'out.pdf')
            doc.output(fname)
            self.assertEqual(PdfDocument(fname).num_pages(), 1)
        finally:
            shutil.rmtree(tmpdir)


class TestCleanSave(unittest.TestCase):

    def test_single_revision(self):
        doc = PdfDocument(fdata=simple_pdf(2))
        doc.set_page_content(1, b'BT ET')
        doc.output()
        self.assertEqual(len(doc.revisions), 2)

        fdata = doc.clean_output()
        self.assertEqual(fdata.count(b'startxref'), 1)
        self.assertNotIn(b'/Prev', fdata)
        again = PdfDocument(fdata=fdata)
        self.assertEqual(len(again.revisions), 1)
        self.assertEqual(again.num_pages(), 2)
        self.assertEqual(again.get_page_content(1), b'BT ET')
        self.assertEqual(again.generation(1), 0)

    def test_preserve_order(self):
        doc = PdfDocument(fdata=simple_pdf(2))
        doc.preserve_order()
        fdata = doc.clean_output()
        positions = [fdata.find(b'\n%d 0 obj' % x) for x in range(1, 8)]
        self.assertEqual(positions, sorted(positions))

    def test_hybrid_trailer_dropped(self):
        doc = PdfDocument(fdata=make_pdf(simple_objects(1),
                                         b'/Root 1 0 R /XRefStm 12345'))
        self.assertEqual(doc.trailer.XRefStm, '12345')
        fdata = doc.clean_output()
        self.assertNotIn(b'/XRefStm', fdata)
        again = PdfDocument(fdata=fdata)
        self.assertIsNone(again.trailer.XRefStm)
        self.assertEqual(again.num_pages(), 1)


class TestNewDocument(unittest.TestCase):

    def test_empty_document(self):
        doc = PdfDocument()
        self.assertEqual(doc.num_pages(), 0)
        self.assertTrue(doc.needs_save())
        fdata = doc.output()
        self.assertTrue(fdata.startswith(b'%PDF-1.4'))
        again = PdfDocument(fdata=fdata)
        self.assertEqual(again.num_pages(), 0)
        self.assertEqual(again.pages_root.Type, '/Pages')

    def test_new_objects(self):
        doc = PdfReader()
        first = doc.append_object(PdfDict(Type=PdfName.Catalog))
        self.assertEqual(first, 1)
        self.assertEqual(doc.versions[1], -1)
        self.assertEqual(doc.generation(1), 0)


class TestFormatting(unittest.TestCase):

    def test_dict_order(self):
        d = PdfDict(Type=PdfName.Page, Subtype=PdfName.Form,
                    B=PdfNumber(2), A=PdfNumber(1))
        self.assertEqual(format_node(d),
                         b'<</Type /Page /Subtype /Form /A 1 /B 2>>')

    def test_plain_values(self):
        self.assertEqual(format_node([1, 2.5, True, None]),
                         b'[1 2.5 true null]')
        self.assertEqual(format_node(PdfString(b'a(b)', hexstring=True)),
                         b'<61286229>')
        self.assertEqual(format_node(PdfString(b'a(b)')), b'(a\\(b\\))')

    def test_reference_generation(self):
        doc = PdfReader()
        doc.versions[7] = 3
        writer = PdfWriter(doc)
        self.assertEqual(writer.format_obj(PdfReference(7)), b'7 3 R')
        self.assertEqual(format_node(PdfReference(7)), b'7 0 R')

    def test_long_arrays_wrap(self):
        data = format_node(PdfArray(PdfNumber(x) for x in range(100)))
        self.assertTrue(all(len(x) <= 66 for x in data.split(b'\n')))


def main():
    unittest.main()


if __name__ == '__main__':
    main()
