# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

'''
Turns tokens into PDF objects.

PdfParser reads the primitive value grammar (numbers, names,
strings, hex strings, arrays, dictionaries, references, booleans
and null), plus the "N G obj ... endobj" wrapper and stream data
for top-level objects.  Strings and streams are decrypted as they
are read when a security handler is supplied.
'''

import re

from .tokens import PdfTokens
from .objects import (BasePdfName, PdfDict, PdfArray, PdfString, PdfStream,
                      PdfNumber, PdfBoolean, PdfNull, PdfReference,
                      PdfIndirect)
from .errors import log


class PdfParser(object):
    ''' Parse PDF values out of a PdfTokens instance.

        objnum and gennum identify the indirect object being
        parsed (they are set by parse_object()), and are recorded
        on every node built, and used to decrypt strings and streams.

        store, when given, is used to look up an indirect /Length.
        allow_refs is turned off for content streams, which have
        no references.
    '''

    isnumber = re.compile(br'[+-]*(?:\d+\.?\d*|\.\d+)$').match
    endstream = re.compile(br'[\x00 \t\f\r\n]*endstream').match

    def __init__(self, source, objnum=None, gennum=None, crypt=None,
                 store=None, allow_refs=True):
        if not isinstance(source, PdfTokens):
            source = PdfTokens(source)
        self.tokens = source
        self.objnum = objnum
        self.gennum = gennum
        self.crypt = crypt
        self.store = store
        self.allow_refs = allow_refs

    def own(self, node):
        if self.objnum is not None:
            node.objnum = self.objnum
            node.gennum = self.gennum
        return node

    def decrypt(self, data):
        crypt = self.crypt
        if crypt is None or self.objnum is None:
            return data
        return crypt.decrypt(data, self.objnum, self.gennum)

    def parse_any(self, token=None):
        ''' Read the next value.  If token is given, it is
            the (already consumed) first token of the value.
        '''
        tokens = self.tokens
        if token is None:
            token = tokens.next()
            if token is None:
                tokens.exception('Unexpected end of data')
        firstch = token[:1]
        if firstch == b'/':
            return self.own(BasePdfName(token.decode('latin-1')))
        if token == b'<<':
            return self.read_dict()
        if firstch == b'[':
            return self.read_array()
        if firstch in (b'(', b'<'):
            if firstch == b'<' and token[-1:] != b'>':
                tokens.exception('Invalid hex string')
            string = PdfString.from_token(token)
            if self.crypt is not None:
                string = PdfString(self.decrypt(string), string.hexstring)
            return self.own(string)
        if token in (b'true', b'false'):
            return self.own(PdfBoolean(token.decode('ascii')))
        if token == b'null':
            return self.own(PdfNull())
        if self.isnumber(token):
            if self.allow_refs and token.isdigit():
                ref = self.read_reference(token)
                if ref is not None:
                    return ref
            return self.own(PdfNumber(token.decode('ascii')))
        tokens.exception('Unexpected token')

    def read_reference(self, token):
        ''' Look ahead for "G R" after an object number.
            Returns None (leaving the position alone) if
            this is just an integer.
        '''
        tokens = self.tokens
        floc, tokstart = tokens.floc, tokens.tokstart
        gen = tokens.next()
        if gen is not None and gen.isdigit() and tokens.next() == b'R':
            return self.own(PdfReference(int(token)))
        tokens.floc, tokens.tokstart = floc, tokstart

    def read_array(self):
        tokens = self.tokens
        result = self.own(PdfArray())
        while 1:
            token = tokens.next()
            if token == b']':
                return result
            if token is None:
                tokens.exception('Unterminated array')
            result.append(self.parse_any(token))

    def read_dict(self):
        tokens = self.tokens
        result = self.own(PdfDict())
        while 1:
            token = tokens.next()
            if token == b'>>':
                return result
            if token is None:
                tokens.exception('Unterminated dictionary')
            if token[:1] != b'/':
                tokens.exception('Expected PDF /name object')
            key = BasePdfName(token.decode('latin-1'))
            value = self.parse_any()
            result[key] = value

    def stream_length(self, obj):
        ''' The declared length of a stream, following an
            indirect /Length through the store.  None if
            there is no usable value.
        '''
        length = obj.Length
        if length is None:
            length = obj.L
        if isinstance(length, PdfReference):
            store = self.store
            if store is None:
                return None
            length = store.get_object_value(length)
        if not isinstance(length, PdfNumber):
            return None
        length = length.value
        if length != int(length) or length < 0:
            return None
        return int(length)

    def read_stream(self, obj):
        ''' Read stream data for obj.  The tokenizer is positioned
            just past the "stream" keyword.

            An explicit /Length is used when it lands on the
            endstream keyword.  Otherwise the data is taken to run up
            to the first "endstream", with one end of line removed;
            that is a best guess for binary data which happens to
            contain that word.
        '''
        tokens = self.tokens
        fdata = tokens.fdata
        startstream = tokens.floc
        if fdata[startstream:startstream + 2] == b'\r\n':
            startstream += 2
        elif fdata[startstream:startstream + 1] in (b'\n', b'\r'):
            startstream += 1
        else:
            tokens.warning('stream keyword not followed by end of line')

        length = self.stream_length(obj)
        endstream = None
        if length is not None:
            endstream = startstream + length
            match = self.endstream(fdata, endstream, tokens.endloc)
            if match is None:
                tokens.floc = endstream
                tokens.warning('Incorrect /Length (%s) for stream', length)
                endstream = None
            else:
                tokens.floc = match.end()
        if endstream is None:
            endstream = fdata.find(b'endstream', startstream, tokens.endloc)
            if endstream < 0:
                tokens.floc = startstream
                tokens.exception('Could not find endstream')
            tokens.floc = endstream + 9
            if fdata[endstream - 2:endstream] == b'\r\n':
                endstream -= 2
            elif fdata[endstream - 1:endstream] in (b'\n', b'\r'):
                endstream -= 1
            endstream = max(endstream, startstream)

        data = self.decrypt(fdata[startstream:endstream])
        obj._stream = self.own(PdfStream(data))

    def parse_object(self):
        ''' Parse "N G obj <value> endobj", including
            any stream data.  Returns a PdfIndirect.
        '''
        tokens = self.tokens
        num, gen, keyword = tokens.multiple(3)
        if not (keyword == b'obj' and num is not None and num.isdigit() and
                gen is not None and gen.isdigit()):
            tokens.exception('Expected "N G obj"')
        self.objnum, self.gennum = int(num), int(gen)
        value = self.parse_any()
        token = tokens.next()
        if token == b'stream':
            if not isinstance(value, PdfDict):
                tokens.exception('stream data without a dictionary')
            self.read_stream(value)
            token = tokens.next()
        if token != b'endobj':
            tokens.warning('Expected endobj')
        return PdfIndirect(value, self.objnum, self.gennum)


def parse_value(data, **kwargs):
    ''' Convenience function to parse a single value
        from a byte string.
    '''
    parser = PdfParser(PdfTokens(data), **kwargs)
    result = parser.parse_any()
    if parser.tokens.next() is not None:
        log.warning('Extra data after PDF value')
    return result
