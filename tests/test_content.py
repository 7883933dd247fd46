#! /usr/bin/env python
# encoding: utf-8
# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

'''
Content stream parsing, validation and output.

Run from the directory above like so:
python -m pytest tests/test_content.py
'''

import unittest

from pdfrev import (ContentTree, PdfInlineImage, PdfName, PdfParseError,
                    PdfValidationWarning)


def parse(content):
    return ContentTree(content).parse()


class TestParse(unittest.TestCase):

    def test_flat(self):
        tree = parse(b'0 0 m 100 100 l S')
        self.assertEqual([x.name for x in tree], ['m', 'l', 'S'])
        self.assertEqual([x.value for x in tree.blocks[1].args], [100, 100])
        self.assertEqual(tree.depth(), 0)

    def test_nesting(self):
        for depth in (1, 5, 50):
            tree = parse(b'q ' * depth + b'0 g ' + b'Q ' * depth)
            self.assertEqual(tree.depth(), depth)
            self.assertEqual(len(list(tree.walk())), depth + 1)

    def test_blocks(self):
        tree = parse(b'q BT /F1 12 Tf (Hi) Tj ET 1 0 0 RG Q 0 g')
        outer, gray = tree.blocks
        self.assertEqual(outer.kind, 'block')
        self.assertEqual(outer.end, 'Q')
        self.assertEqual([x.name for x in outer.value], ['BT', 'RG'])
        self.assertEqual([x.name for x in outer.value[0].value],
                         ['Tf', 'Tj'])
        self.assertEqual(gray.kind, 'op')
        self.assertEqual([x.name for x in tree.walk()],
                         ['q', 'BT', 'Tf', 'Tj', 'RG', 'g'])

    def test_marked_content(self):
        tree = parse(b'/Span << /ActualText (x) >> BDC (y) Tj EMC')
        block, = tree.blocks
        self.assertEqual(block.name, 'BDC')
        self.assertEqual(block.end, 'EMC')
        self.assertEqual(block.args[1].ActualText, b'x')

    def test_operators_with_odd_names(self):
        tree = parse(b"BT T* (a) ' 1 2 (b) \" [(c) -250 (d)] TJ ET 0 0 1 "
                     b"0 0 1 cm f*")
        self.assertEqual([x.name for x in tree.walk()],
                         ['BT', 'T*', "'", '"', 'TJ', 'cm', 'f*'])

    def test_unmatched_blocks(self):
        for content in (b'q 0 g', b'q BT ET', b'BT q ET Q', b'Q', b'q ET Q'):
            self.assertRaises(PdfParseError, parse, content)

    def test_stray_operands(self):
        self.assertRaises(PdfParseError, parse, b'0 g 1 2')
        self.assertRaises(PdfParseError, parse, b'BT 1 ET')

    def test_error_location(self):
        try:
            parse(b'q\n0 g\nET')
        except PdfParseError as s:
            self.assertEqual(s.offset, 6)
        else:
            self.fail('Wrong block ending not detected')

    def test_no_references(self):
        tree = parse(b'1 0 0 1 0 0 cm')
        self.assertEqual(len(tree.blocks[0].args), 6)


class TestInlineImages(unittest.TestCase):

    content = b'q BI /W 2 /H 1 /CS /G /BPC 8 /F /AHx ID\nABCD>\nEI Q'

    def test_inline_image(self):
        tree = parse(self.content)
        op, = tree.blocks[0].value
        self.assertEqual(op.name, 'BI')
        image, = op.args
        self.assertTrue(isinstance(image, PdfInlineImage))
        self.assertEqual(image.Width, '2')
        self.assertEqual(image.ColorSpace, PdfName.DeviceGray)
        self.assertEqual(image.Filter, PdfName.ASCIIHexDecode)
        self.assertEqual(image.Subtype, PdfName.Image)
        self.assertEqual(image.stream, b'ABCD>')
        self.assertEqual(tree.find_images(), [image])

    def test_binary_data(self):
        data = b'\x00EI\xff(\x01Q'
        tree = parse(b'BI /W 7 /H 1 /BPC 8 /CS /G ID ' + data + b' EI')
        self.assertEqual(tree.blocks[0].args[0].stream, data)

    def test_empty_data(self):
        tree = parse(b'q BI /W 0 /H 0 /BPC 8 /CS /G ID\nEI Q 0 g')
        block, gray = tree.blocks
        image, = block.value[0].args
        self.assertEqual(image.stream, b'')
        self.assertEqual(gray.name, 'g')

    def test_rewrite(self):
        tree = parse(self.content)
        output = tree.to_bytes()
        self.assertIn(b'BI /BPC 8 /CS /G /F /AHx /H 1 /W 2 ID\n', output)
        again = parse(output)
        self.assertEqual(again.blocks[0].value[0].args,
                         tree.blocks[0].value[0].args)


class TestValidate(unittest.TestCase):

    def test_valid(self):
        tree = parse(b'q 1 0 0 1 10 10 cm BT /F1 12 Tf (x) Tj ET Q '
                     b'/Im1 Do 0.5 0 0 1 k 1 2 3 4 5 scn')
        self.assertTrue(tree.validate())
        self.assertEqual(tree.validation_errors, [])

    def test_invalid(self):
        tree = parse(b'BT /F1 Tf (x) 5 Tj ET 1.5 J (a) g 1 2 foo')
        self.assertFalse(tree.validate())
        errors = tree.validation_errors
        self.assertEqual([x.operator for x in errors], ['Tf', 'Tj', 'J', 'g'])
        self.assertTrue(all(isinstance(x, PdfValidationWarning)
                            for x in errors))
        self.assertIn('Wrong number of arguments', str(errors[0]))

    def test_find_images(self):
        tree = parse(b'q /Im1 Do Q /Im2 Do')
        self.assertEqual(tree.find_images(), ['/Im1', '/Im2'])


class TestOutput(unittest.TestCase):

    def test_to_bytes(self):
        tree = parse(b'q   1 0 0 1 5 5 cm\n BT /F1 12 Tf [(a\\)b) -20] TJ '
                     b'ET Q')
        self.assertEqual(tree.to_bytes(),
                         b'q\n1 0 0 1 5 5 cm\nBT\n/F1 12 Tf\n'
                         b'[(a\\)b) -20] TJ\nET\nQ\n')

    def test_reparse(self):
        content = (b'/P << /MCID 0 >> BDC q 0.5 g 0 0 10 10 re f Q EMC '
                   b'BT <00ff> Tj ET')
        tree = parse(content)
        again = parse(tree.to_bytes())
        self.assertEqual(again.to_bytes(), tree.to_bytes())
        self.assertEqual([x.name for x in again.walk()],
                         [x.name for x in tree.walk()])


def main():
    unittest.main()


if __name__ == '__main__':
    main()
