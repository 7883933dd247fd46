# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

'''
A tokenizer for PDF files and content streams.

In general, documentation used was "PDF reference",
sixth edition, for PDF version 1.7, dated November 2006.

The tokenizer works on the raw bytes of the document and
hands back raw byte tokens; PdfParser decides what they mean.
Unlike a generator-based tokenizer, the current position can
be read and reset at any time, which the parser uses for
lookahead and to find the start of stream data.
'''

import re
from .errors import log, PdfParseError


def linepos(fdata, loc):
    line = fdata.count(b'\n', 0, loc) + 1
    line += fdata.count(b'\r', 0, loc) - fdata.count(b'\r\n', 0, loc)
    col = loc - max(fdata.rfind(b'\n', 0, loc), fdata.rfind(b'\r', 0, loc))
    return line, col


class PdfTokens(object):

    # Table 3.1, page 50 of reference, defines whitespace
    eol = b'\n\r'
    whitespace = b'\x00 \t\f' + eol

    # Text on page 50 defines delimiter characters
    # Escape the ]
    delimiters = br'()<>{}[\]/%'

    # "normal" stuff is all but delimiters or whitespace.
    p_normal = br'[^%s%s]+' % (whitespace, delimiters)

    p_comment = br'\%%[^%s]*' % eol

    # A hex string.  This one's easy.
    p_hex_string = br'\<[%s0-9A-Fa-f]*\>' % whitespace

    p_dictdelim = br'\<\<|\>\>'
    p_name = br'/[^%s%s]*' % (delimiters, whitespace)

    p_catchall = br'[^%s]' % whitespace

    pattern = b'|'.join([p_normal, p_name, p_hex_string, p_dictdelim,
                         p_comment, p_catchall])
    findtok = re.compile(br'[%s]*(%s)' % (whitespace, pattern),
                         re.DOTALL).match
    findparen = re.compile(br'[\\()]').search
    skipspace = re.compile(br'[%s]*' % whitespace).match

    def __init__(self, fdata, startloc=0, endloc=None, verbose=True):
        self.fdata = fdata
        self.endloc = len(fdata) if endloc is None else min(endloc,
                                                            len(fdata))
        self.floc = self.tokstart = startloc
        self.msgs_dumped = None if verbose else set()

    def next(self):
        ''' Return the next token (as bytes), or None at the end
            of the data.  Comments are skipped.  floc is left
            pointing just past the token, and tokstart at its
            beginning.
        '''
        fdata, endloc, findtok = self.fdata, self.endloc, self.findtok
        while 1:
            match = findtok(fdata, self.floc, endloc)
            if match is None:
                self.tokstart = self.skip_whitespace()
                return None
            start, end = match.span(1)
            token = match.group(1)
            firstch = token[:1]
            if firstch == b'%':
                self.floc = end
                continue
            self.tokstart = start
            if firstch == b'(':
                end = self.literal_end(start)
                token = fdata[start:end]
            self.floc = end
            return token

    def __iter__(self):
        return self

    def __next__(self):
        token = self.next()
        if token is None:
            raise StopIteration
        return token

    def peek(self):
        ''' Return the next token without consuming it.
        '''
        floc, tokstart = self.floc, self.tokstart
        token = self.next()
        self.floc, self.tokstart = floc, tokstart
        return token

    def multiple(self, count):
        ''' Retrieve multiple tokens
        '''
        return [self.next() for i in range(count)]

    def skip_whitespace(self):
        ''' Advance past whitespace (but not comments) and
            return the new position.
        '''
        self.floc = self.skipspace(self.fdata, self.floc, self.endloc).end()
        return self.floc

    def literal_end(self, start):
        ''' Find the end of a literal string.  Unescaped
            parentheses nest; a backslash protects the byte after it.
        '''
        fdata, endloc, findparen = self.fdata, self.endloc, self.findparen
        nest = 1
        loc = start + 1
        while 1:
            match = findparen(fdata, loc, endloc)
            if match is None:
                self.tokstart = start
                self.floc = endloc
                self.exception('Unterminated literal string')
            loc = match.end()
            ch = match.group()
            if ch == b'\\':
                loc += 1
            elif ch == b'(':
                nest += 1
            else:
                nest -= 1
                if not nest:
                    return loc

    def context(self, begin=None, end=None):
        ''' A short excerpt of the data at the current token
        '''
        if begin is None:
            begin, end = self.tokstart, self.floc
        if end is None or end <= begin:
            end = begin + 20
        tok = self.fdata[begin:end].rstrip()
        if len(tok) > 30:
            tok = tok[:26] + b' ...'
        return tok

    def msg(self, msg, *arg):
        dumped = self.msgs_dumped
        if dumped is not None:
            if msg in dumped:
                return
            dumped.add(msg)
        if arg:
            msg %= arg
        fdata = self.fdata
        begin, end = self.tokstart, self.floc
        if begin >= len(fdata):
            return '%s (filepos %s past EOF %s)' % (msg, begin, len(fdata))
        line, col = linepos(fdata, begin)
        if end > begin:
            return ('%s (filepos=%d, line=%d, col=%d, token=%r)' %
                    (msg, begin, line, col, self.context()))
        return '%s (filepos=%d, line=%d, col=%d)' % (msg, begin, line, col)

    def warning(self, *arg):
        s = self.msg(*arg)
        if s:
            log.warning(s)

    def error(self, *arg):
        s = self.msg(*arg)
        if s:
            log.error(s)

    def exception(self, *arg):
        self.msgs_dumped = None
        raise PdfParseError(self.msg(*arg), self.tokstart, self.context())
