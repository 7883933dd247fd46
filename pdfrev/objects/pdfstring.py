# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

"""
PDF strings and stream data

PDF strings are byte strings.  In a file they are written either
as literal strings enclosed in parentheses, or as hexadecimal
strings enclosed in angle brackets.  Once read, a PdfString holds
the decoded (and, for encrypted documents, decrypted) bytes, and
remembers which of the two forms it came from so that it can be
written back out the same way.

Literal strings
===============

Section 3.2.3 of the PDF 1.7 reference describes literal strings:

  - A backslash followed by one of "nrtbf" is a line feed, carriage
    return, tab, backspace or form feed.
  - A backslash followed by "(", ")" or another backslash is that
    character.
  - One to three octal digits following the backslash are the
    numeric value of the encoded byte.
  - A backslash followed by an end of line is a line continuation;
    both are discarded.
  - A backslash followed by anything else is discarded, and the
    character is kept.
  - Balanced unescaped parentheses are part of the string.

When writing, the string is broken into runs of at most maxstr
bytes joined by backslash-newline continuations, so that no output
line gets unreasonably long.

Text strings
============

The individual characters of a text string can all be considered to
be Unicode; Adobe specifies two different ways to encode these
characters into a string of bytes: PDFDocEncoding (a one byte per
character mapping similar to Latin-1), or UTF-16-BE with a leading
byte order mark.  This module registers a pdfdocencoding codec with
the codecs module, and PdfString.to_unicode() / from_unicode()
pick between the two.
"""

import re
import codecs
import binascii


def find_pdfdocencoding(encoding):
    """ This function conforms to the codec module registration
        protocol.  It defers calculating data structures until
        a pdfdocencoding encode or decode is required.

        PDFDocEncoding is described in the PDF 1.7 reference manual.
    """

    if encoding != 'pdfdocencoding':
        return

    # Create the decoding map based on the table in section D.2 of the
    # PDF 1.7 manual

    # Start off with the characters with 1:1 correspondence
    decoding_map = set(range(0x20, 0x7F)) | set(range(0xA1, 0x100))
    decoding_map.update((0x09, 0x0A, 0x0D))
    decoding_map.remove(0xAD)
    decoding_map = dict((x, x) for x in decoding_map)

    # Add in the special Unicode characters
    decoding_map.update(zip(range(0x18, 0x20), (
            0x02D8, 0x02C7, 0x02C6, 0x02D9, 0x02DD, 0x02DB, 0x02DA, 0x02DC)))
    decoding_map.update(zip(range(0x80, 0x9F), (
            0x2022, 0x2020, 0x2021, 0x2026, 0x2014, 0x2013, 0x0192, 0x2044,
            0x2039, 0x203A, 0x2212, 0x2030, 0x201E, 0x201C, 0x201D, 0x2018,
            0x2019, 0x201A, 0x2122, 0xFB01, 0xFB02, 0x0141, 0x0152, 0x0160,
            0x0178, 0x017D, 0x0131, 0x0142, 0x0153, 0x0161, 0x017E)))
    decoding_map[0xA0] = 0x20AC

    # Make the encoding map from the decoding map
    encoding_map = codecs.make_encoding_map(decoding_map)

    # Not every PDF producer follows the spec, so conform to Postel's law
    # and interpret encoded strings if at all possible.  In particular, they
    # might have nulls and form-feeds, judging by random code snippets
    # floating around the internet.
    decoding_map.update(((x, x) for x in range(0x18)))

    def encode(input, errors='strict'):
        return codecs.charmap_encode(input, errors, encoding_map)

    def decode(input, errors='strict'):
        return codecs.charmap_decode(input, errors, decoding_map)

    return codecs.CodecInfo(encode, decode, name='pdfdocencoding')

codecs.register(find_pdfdocencoding)


class PdfString(bytes):
    """ A PdfString holds the decoded bytes of a PDF string.
        hexstring records whether it was (or should be)
        written as <hex> rather than as a (literal).
    """
    hexstring = False
    objnum = None
    gennum = None

    # The byte order mark, and unicode that could be
    # wrongly encoded into the byte order mark by the
    # pdfdocencoding codec.
    bytes_bom = codecs.BOM_UTF16_BE
    bad_pdfdoc_prefix = bytes_bom.decode('latin-1')

    # Used by decode_literal; filled in on first use
    unescape_dict = None
    unescape_func = None

    def __new__(cls, value=b'', hexstring=False):
        self = bytes.__new__(cls, value)
        if hexstring:
            self.hexstring = True
        return self

    @property
    def kind(self):
        return self.hexstring and 'hexstring' or 'string'

    @property
    def value(self):
        return bytes(self)

    def __repr__(self):
        return 'PdfString(%s%s)' % (bytes.__repr__(bytes(self)),
                                    self.hexstring and ', hexstring=True'
                                    or '')

    @classmethod
    def init_unescapes(cls):
        """ Sets up the unescape attributes for decode_literal
        """
        unescape_pattern = br'\\([0-7]{1,3}|\r\n|.)'
        unescape_func = re.compile(unescape_pattern, re.DOTALL).split
        cls.unescape_func = unescape_func

        unescape_dict = dict(((bytes([x]), bytes([x])) for x in range(0x100)))
        unescape_dict.update(zip((bytes([x]) for x in b'nrtbf'),
                                 (bytes([x]) for x in b'\n\r\t\b\f')))
        unescape_dict[b'\r'] = b''
        unescape_dict[b'\n'] = b''
        unescape_dict[b'\r\n'] = b''
        for i in range(0o10):
            unescape_dict[b'%01o' % i] = bytes([i])
        for i in range(0o100):
            unescape_dict[b'%02o' % i] = bytes([i])
        for i in range(0o400):
            unescape_dict[b'%03o' % i] = bytes([i])
        cls.unescape_dict = unescape_dict
        return unescape_func

    @classmethod
    def decode_literal(cls, token):
        """ Decode a PDF literal string token, which is enclosed
            in parentheses (), into its bytes.

            Many documents never need their strings decoded, so defer
            creating data structures to do so until the first string
            is decoded.  Octal escapes of more than 8 bits wrap.
        """
        result = (cls.unescape_func or cls.init_unescapes())(token[1:-1])
        if len(result) == 1:
            return result[0]
        unescape_dict = cls.unescape_dict
        for index in range(1, len(result), 2):
            code = result[index]
            if code[:1].isdigit() and code not in unescape_dict:
                result[index] = bytes([int(code, 8) & 0xFF])
            else:
                result[index] = unescape_dict[code]
        return b''.join(result)

    @staticmethod
    def decode_hex(token):
        """ Decode a PDF hexadecimal-encoded string token, which
            is enclosed in angle brackets <>.  An odd number of
            digits means a truncated trailing 0.
        """
        hexstr = b''.join(token[1:-1].split())
        if len(hexstr) % 2:
            hexstr += b'0'
        return binascii.unhexlify(hexstr)

    @classmethod
    def from_token(cls, token):
        """ Build a PdfString from a raw literal or hex token.
        """
        if token[:1] == b'(':
            return cls(cls.decode_literal(token))
        return cls(cls.decode_hex(token), hexstring=True)

    def to_bytes(self):
        return bytes(self)

    def to_unicode(self):
        """ Decode a PDF string to a unicode string.

            There are two Unicode storage methods used -- either
            UTF16_BE, or something called PDFDocEncoding, which
            is defined in the PDF spec.  The determination of
            which decoding method to use is done by examining the
            first two bytes for the byte order marker.
        """
        raw = bytes(self)
        if raw[:2] == self.bytes_bom:
            return raw[2:].decode('utf-16-be')
        return raw.decode('pdfdocencoding')

    @classmethod
    def from_unicode(cls, source, text_encoding='auto'):
        """ Encode a unicode string into a PdfString, preferring
            pdfdocencoding (one byte per character) and falling back
            to UTF-16-BE with a byte order mark, which is written
            as a hex string.
        """
        if text_encoding not in ('auto', 'pdfdocencoding', 'utf16'):
            raise ValueError('Invalid text_encoding value: %s'
                             % text_encoding)
        if text_encoding != 'utf16':
            force_pdfdoc = text_encoding == 'pdfdocencoding'
            if source.startswith(cls.bad_pdfdoc_prefix):
                if force_pdfdoc:
                    raise UnicodeError('Prefix of string %r cannot be encoded '
                                       'in pdfdocencoding' % source[:20])
            else:
                try:
                    raw = source.encode('pdfdocencoding')
                except UnicodeError:
                    if force_pdfdoc:
                        raise
                else:
                    return cls(raw)
        return cls(cls.bytes_bom + source.encode('utf-16-be'), hexstring=True)

    @classmethod
    def encode(cls, source):
        """ Build a PdfString from either bytes or unicode.
        """
        if isinstance(source, str):
            return cls.from_unicode(source)
        return cls(source)


class PdfStream(bytes):
    """ The raw (decrypted but still filtered) data of a stream.
        It is attached to its dictionary as the "stream" attribute.
    """
    kind = 'stream'
    objnum = None
    gennum = None

    @property
    def value(self):
        return bytes(self)

    def __repr__(self):
        return 'PdfStream(%d bytes)' % len(self)


_escapes = {b'\\': b'\\\\', b'(': b'\\(', b')': b'\\)',
            b'\n': b'\\n', b'\r': b'\\r', b'\t': b'\\t', b'\f': b'\\f'}
_escape = re.compile(br'[\\()\n\r\t\f]').sub


def format_literal(data, maxstr=None):
    """ Format bytes as a PDF literal string, split into
        runs of at most maxstr bytes.
    """
    def escape(chunk, lookup=_escapes.__getitem__):
        return _escape(lambda match: lookup(match.group()), chunk)

    data = bytes(data)
    if maxstr and len(data) > maxstr:
        chunks = (data[i:i + maxstr] for i in range(0, len(data), maxstr))
        return b'(' + b'\\\n'.join(escape(x) for x in chunks) + b')'
    return b'(' + escape(data) + b')'


def format_hex(data):
    return b'<' + binascii.hexlify(bytes(data)).upper() + b'>'
