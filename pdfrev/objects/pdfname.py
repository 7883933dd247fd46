# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

import re

# Characters that cannot appear literally in a name token
_special = '\x00 \t\f\r\n()<>{}[]/%#'

_escape = re.compile('[%s]' % re.escape(_special)).sub
_unescape = re.compile(r'#([0-9A-Fa-f]{2})').sub


def _hexchar(match):
    return '#%02X' % ord(match.group(0))


def _unhexchar(match):
    return chr(int(match.group(1), 16))


class BasePdfName(str):
    ''' A name is an identifier that starts with a slash.

        The string itself is the decoded name, and that is what
        compares equal as a dictionary key.  When the file form
        of the name differs from it (because it has #xx escapes,
        or because it needs them) the file form is kept in the
        "encoded" attribute, and that is what gets written out.
    '''

    kind = 'label'
    encoded = None
    objnum = None
    gennum = None

    def __new__(cls, name, pre_encoded=True, new=str.__new__):
        ''' pre_encoded names come from a file and may hold
            #xx escapes; other names are plain text that may
            need them.
        '''
        body = name[1:]
        if body.isalnum():
            return new(cls, name)
        if pre_encoded:
            encoded = name
            if '#' in body:
                name = '/' + _unescape(_unhexchar, body)
        else:
            encoded = '/' + _escape(_hexchar, body)
        self = new(cls, name)
        if encoded != name:
            self.encoded = encoded
        return self

    def __repr__(self):
        return 'PdfName(%s)' % str.__repr__(self[1:])

    @property
    def value(self):
        return self[1:]


class PdfNameFactory(object):
    ''' PdfName.FooBar and PdfName('FooBar') both give "/FooBar".
    '''

    def __getattr__(self, name):
        if name.startswith('__'):
            raise AttributeError(name)
        return BasePdfName('/' + name, False)

    def __call__(self, name):
        return BasePdfName('/' + name, False)


PdfName = PdfNameFactory()
