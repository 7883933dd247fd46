#! /usr/bin/env python
# encoding: utf-8
# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
#                    2017 Henddher Pedroza, Illinois
# MIT license -- See LICENSE.txt for details

'''
Stream filters.

Run from the directory above like so:
python -m pytest tests/test_filters.py
'''

import base64
import zlib
import unittest

from pdfrev import PdfDict, PdfName, PdfNumber, PdfArray, PdfFilterError
from pdfrev.uncompress import flate_png, decode_data, uncompress, paeth
from pdfrev.compress import compress, encode_data
from pdfrev.errors import log


def create_data(nc=1, nr=1, bpc=8, ncolors=1, filter_type=0):
    ''' Rows of increasing byte values, each row prefixed
        by its PNG filter byte.  Returns the raw rows too.
    '''
    pixel_size = (bpc * ncolors + 7) // 8
    data = bytearray()
    rows = []
    for r in range(nr):
        data.append(filter_type if r > 0 else 0)
        row = bytes(r * nc * pixel_size + c for c in range(nc * pixel_size))
        rows.append(row)
        data.extend(row)
    return bytes(data), rows


class TestPNG(unittest.TestCase):

    def test_none_filter(self):
        data, rows = create_data(nc=5, nr=7, ncolors=4)
        self.assertEqual(flate_png(data, 5, 4, 8), b''.join(rows))

    def test_sub_filter(self):
        data = bytes([1, 10, 1, 1, 1])
        self.assertEqual(flate_png(data, 4), bytes([10, 11, 12, 13]))
        # With 2 byte pixels, each byte adds to the one two back
        self.assertEqual(flate_png(data, 2, 2), bytes([10, 1, 11, 2]))

    def test_up_filter(self):
        data = bytes([0, 1, 2, 3, 2, 1, 1, 1, 2, 255, 255, 255])
        self.assertEqual(flate_png(data, 3),
                         bytes([1, 2, 3, 2, 3, 4, 1, 2, 3]))

    def test_average_filter(self):
        data = bytes([0, 10, 20, 3, 1, 1])
        self.assertEqual(flate_png(data, 2), bytes([10, 20, 6, 14]))

    def test_paeth_filter(self):
        self.assertEqual(paeth(10, 20, 10), 20)
        self.assertEqual(paeth(20, 10, 10), 20)
        self.assertEqual(paeth(10, 10, 20), 10)
        data = bytes([0, 10, 20, 4, 1, 1])
        self.assertEqual(flate_png(data, 2), bytes([10, 20, 11, 21]))

    def test_bad_filter(self):
        self.assertRaises(PdfFilterError, flate_png, bytes([7, 1]), 1)

    def test_predictor_stream(self):
        data, rows = create_data(nc=6, nr=4)
        parms = PdfDict(Predictor=PdfNumber(12), Columns=PdfNumber(6))
        result, filters, _ = decode_data(zlib.compress(data),
                                         PdfName.FlateDecode, parms)
        self.assertEqual(filters, [])
        self.assertEqual(result, b''.join(rows))
        parms.Predictor = PdfNumber(2)
        self.assertRaises(PdfFilterError, decode_data, zlib.compress(data),
                          PdfName.FlateDecode, parms)


class TestDecode(unittest.TestCase):

    def test_chain(self):
        data = b'Hello, world ' * 10
        encoded = encode_data(encode_data(data, 'FlateDecode'),
                              PdfName.ASCIIHexDecode)
        result, filters, parms = decode_data(
            encoded, PdfArray([PdfName.AHx, PdfName.Fl]))
        self.assertEqual(result, data)
        self.assertEqual(filters, [])

    def test_ascii85(self):
        data = b'Man is distinguished'
        encoded = b'<~' + base64.a85encode(data) + b'~>'
        result, filters, parms = decode_data(encoded, PdfName.ASCII85Decode)
        self.assertEqual(result, data)

    def test_runlength(self):
        encoded = bytes([2]) + b'abc' + bytes([254]) + b'x' + bytes([128])
        result, filters, parms = decode_data(encoded, PdfName.RL)
        self.assertEqual(result, b'abcxxx')

    def test_unknown_filter_left_alone(self):
        encoded = encode_data(b'abc', PdfName.ASCIIHexDecode)
        result, filters, parms = decode_data(
            encoded, PdfArray([PdfName.ASCIIHexDecode, PdfName.DCTDecode]),
            PdfArray([None, PdfDict(Quality=PdfNumber(1))]))
        self.assertEqual(result, b'abc')
        self.assertEqual(filters, [PdfName.DCTDecode])
        self.assertEqual(parms[0].Quality, '1')

    def test_corrupt(self):
        self.assertRaises(PdfFilterError, decode_data, b'not zlib',
                          PdfName.FlateDecode)
        self.assertRaises(PdfFilterError, decode_data, b'4G', PdfName.AHx)


class TestStreamObjects(unittest.TestCase):

    def test_compress_uncompress(self):
        obj = PdfDict()
        obj.stream = b'0 0 m 10 10 l S\n' * 20
        original = obj.stream
        compress([obj])
        self.assertEqual(obj.Filter, PdfName.FlateDecode)
        self.assertEqual(int(obj.Length), len(obj.stream))
        self.assertTrue(uncompress([obj]))
        self.assertEqual(obj.stream, original)
        self.assertIsNone(obj.Filter)

    def test_short_data_not_compressed(self):
        obj = PdfDict()
        obj.stream = b'q Q'
        compress([obj])
        self.assertIsNone(obj.Filter)

    def test_prepend_filter(self):
        obj = PdfDict(Filter=PdfName.DCTDecode)
        obj.stream = b'\xff\xd8 image'
        compress([obj], PdfName.ASCIIHexDecode)
        self.assertEqual(obj.Filter, [PdfName.ASCIIHexDecode,
                                      PdfName.DCTDecode])
        self.assertFalse(uncompress([obj]))
        self.assertEqual(obj.Filter, [PdfName.DCTDecode])
        self.assertEqual(obj.stream, b'\xff\xd8 image')

    def test_filter_warnings(self):
        def image():
            obj = PdfDict(Filter=PdfName.DCTDecode)
            obj.stream = b'\xff\xd8'
            return obj

        # Each call reports again unless given a set to share
        for attempt in range(2):
            with self.assertLogs('pdfrev', 'WARNING') as logs:
                self.assertFalse(uncompress([image(), image()]))
            self.assertEqual(len(logs.output), 1)
        warnings = set()
        uncompress([image()], warnings=warnings)
        self.assertEqual(len(warnings), 1)
        with self.assertLogs('pdfrev', 'DEBUG') as logs:
            uncompress([image()], warnings=warnings)
            log.debug('done')
        self.assertEqual(len(logs.output), 1)


def main():
    unittest.main()


if __name__ == '__main__':
    main()
