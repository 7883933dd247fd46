# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

'''
String widths from the /Widths array of a font dictionary.

Fonts without a /Widths array (the standard 14 fonts, mostly)
have no metrics here; their strings get a rough guess of 0.2 text
space units per character.
'''

from .objects import PdfDict, PdfName
from .errors import log


class FontMetrics(object):
    ''' Width lookups for the fonts of one document.  doc may be
        None, for content that is not attached to a document.
    '''

    guess = 0.2

    def __init__(self, doc=None):
        self.doc = doc
        self.resolve = doc is not None and doc.resolve or (lambda x: x)
        self.warn = doc is not None and doc.warn or log.warning

    def get_font_metrics(self, properties, fontname):
        ''' Find the font dictionary named fontname (with or without
            its slash).  properties may be a page's name table, a
            /Resources dictionary or a /Font dictionary.
        '''
        resolve = self.resolve
        if properties is None or fontname is None:
            return None
        if fontname.startswith('/'):
            fontname = fontname[1:]
        if isinstance(properties, PdfDict) and properties.Font is not None:
            properties = resolve(properties.Font)
        if not isinstance(properties, dict):
            return None
        font = properties.get(fontname)
        if font is None:
            font = properties.get(PdfName(fontname))
        font = resolve(font)
        if isinstance(font, PdfDict) and font.Type == PdfName.Font:
            return font
        return None

    def missing_width(self, fontdict):
        descriptor = self.resolve(fontdict.FontDescriptor)
        if isinstance(descriptor, PdfDict):
            width = self.resolve(descriptor.MissingWidth)
            if width is not None:
                return width.value
        return 0

    def glyph_widths(self, fontdict, text):
        ''' The width of each byte of text, in text space units
            for a one point font.
        '''
        text = bytes(text)
        resolve = self.resolve
        widths = fontdict is not None and resolve(fontdict.Widths)
        if not isinstance(widths, list):
            return [0.0] * len(text)
        first = resolve(fontdict.FirstChar)
        first = int(first) if first is not None else 0
        last = resolve(fontdict.LastChar)
        last = int(last) if last is not None else first + len(widths) - 1
        last = min(last, first + len(widths) - 1)
        missing = None
        result = []
        for code in text:
            if first <= code <= last:
                width = resolve(widths[code - first]).value
            else:
                if missing is None:
                    missing = self.missing_width(fontdict)
                width = missing
            result.append(width / 1000.0)
        return result

    def string_width(self, fontdict, text):
        if not text:
            return 0
        width = sum(self.glyph_widths(fontdict, text))
        if width == 0:
            self.warn('No width information for font; guessing the '
                      'width of %r', bytes(text[:20]))
            width = len(text) * self.guess
        return width
