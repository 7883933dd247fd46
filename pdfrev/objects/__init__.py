# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

'''
Objects that can occur in PDF files.  The most important
objects are arrays and dicts.  Top-level objects are wrapped
in a PdfIndirect, and dicts could have an associated stream.

Every node class carries a "kind" attribute naming the PDF
primitive it represents, and objnum/gennum attributes naming
the indirect object that owns it (None for loose values).
'''
from .pdfname import PdfName, BasePdfName
from .pdfdict import PdfDict
from .pdfarray import PdfArray
from .pdfobject import PdfObject, PdfNumber, PdfBoolean, PdfNull
from .pdfstring import PdfString, PdfStream
from .pdfindirect import PdfIndirect, PdfReference

__all__ = """PdfName BasePdfName PdfDict PdfArray PdfObject
             PdfNumber PdfBoolean PdfNull PdfString PdfStream
             PdfIndirect PdfReference""".split()
