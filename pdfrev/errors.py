# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

'''
PDF Exceptions and error handling
'''

import logging


fmt = logging.Formatter('[%(levelname)s] %(filename)s:%(lineno)d %(message)s')

handler = logging.StreamHandler()
handler.setFormatter(fmt)

log = logging.getLogger('pdfrev')
log.setLevel(logging.WARNING)
log.addHandler(handler)


class PdfError(Exception):
    "Abstract base class of exceptions thrown by this module"

    def __init__(self, msg):
        Exception.__init__(self, msg)
        self.msg = msg

    def __str__(self):
        return self.msg


class PdfParseError(PdfError):
    ''' Error thrown by parser/tokenizer.

        offset is the byte position of the offending token
        (when known), and context is a short excerpt of the
        data found there.
    '''

    def __init__(self, msg, offset=None, context=None):
        PdfError.__init__(self, msg)
        self.offset = offset
        self.context = context


class PdfReferenceError(PdfError):
    "Object number not present in the cross-reference index"


class PdfOutputError(PdfError):
    "Error thrown by PDF writer"


class PdfNotImplementedError(PdfError):
    "Error thrown on missing features"


class PdfFilterError(PdfError):
    "Unsupported or corrupt stream compression filter"


class PdfSecurityError(PdfError):
    "Error thrown by the security handler"


class PdfUnsupportedSecurityError(PdfSecurityError):
    "The document uses an encryption scheme we do not handle"


class PdfPasswordError(PdfSecurityError):
    "The supplied passwords did not open the document"


class PdfValidationWarning(UserWarning):
    ''' A content stream operator with the wrong number
        or kind of operands.  These are collected, not raised.
    '''

    def __init__(self, msg, operator=None):
        UserWarning.__init__(self, msg)
        self.msg = msg
        self.operator = operator

    def __str__(self):
        return self.msg
