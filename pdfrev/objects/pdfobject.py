# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details


class PdfObject(str):
    ''' A PdfObject is a textual representation of any PDF file object
        other than an array, dict, name, string or reference.  The
        text is kept exactly as it was read, so that it is written
        back out unchanged.
    '''
    kind = None
    objnum = None
    gennum = None

    def __repr__(self):
        return '%s(%s)' % (type(self).__name__, str.__repr__(self))


class PdfNumber(PdfObject):
    ''' A PDF integer or real.  It may be built from the token
        text, or from a Python int or float.
    '''
    kind = 'number'

    def __new__(cls, value):
        if isinstance(value, bool):
            value = int(value)
        if isinstance(value, float):
            if value == int(value):
                value = '%d' % value
            else:
                value = ('%.9f' % value).rstrip('0').rstrip('.')
                if value == '-0':
                    value = '0'
        elif isinstance(value, int):
            value = '%d' % value
        return str.__new__(cls, value)

    @property
    def value(self):
        text = str.__str__(self)
        try:
            return int(text)
        except ValueError:
            if text.startswith(('+-', '-+', '--', '++')):
                text = text[1:]
            return float(text)

    def __int__(self):
        return int(self.value)

    def __float__(self):
        return float(self.value)


class PdfBoolean(PdfObject):
    kind = 'boolean'

    def __new__(cls, value):
        if not isinstance(value, str):
            value = value and 'true' or 'false'
        return str.__new__(cls, value)

    @property
    def value(self):
        return self == 'true'


class PdfNull(PdfObject):
    kind = 'null'

    def __new__(cls, value='null'):
        return str.__new__(cls, 'null')

    value = None
