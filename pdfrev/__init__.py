# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

from .pdfwriter import PdfWriter
from .pdfreader import PdfReader
from .document import PdfDocument
from .content import ContentTree, ContentOp, ContentBlock, PdfInlineImage
from .graphics import GraphicsState, TextRenderer, TextRunRecorder
from .fontmetrics import FontMetrics
from .objects import (PdfObject, PdfName, PdfArray, PdfDict, PdfString,
                      PdfStream, PdfNumber, PdfBoolean, PdfNull,
                      PdfReference, PdfIndirect)
from .tokens import PdfTokens
from .errors import (PdfError, PdfParseError, PdfReferenceError,
                     PdfOutputError, PdfNotImplementedError,
                     PdfFilterError, PdfSecurityError,
                     PdfUnsupportedSecurityError, PdfPasswordError,
                     PdfValidationWarning)

__version__ = '0.1'

__all__ = """PdfWriter PdfReader PdfDocument ContentTree ContentOp
             ContentBlock PdfInlineImage GraphicsState TextRenderer
             TextRunRecorder FontMetrics PdfObject PdfName PdfArray
             PdfDict PdfString PdfStream PdfNumber PdfBoolean PdfNull
             PdfReference PdfIndirect PdfTokens PdfError PdfParseError
             PdfReferenceError PdfOutputError PdfNotImplementedError
             PdfFilterError PdfSecurityError PdfUnsupportedSecurityError
             PdfPasswordError PdfValidationWarning""".split()
