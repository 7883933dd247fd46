# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details


class PdfArray(list):
    ''' A PdfArray maps the PDF file array object into a Python list.
        References inside the array are left as PdfReference
        objects; the document resolves them on request.
    '''
    kind = 'array'
    objnum = None
    gennum = None

    def __init__(self, source=()):
        list.__init__(self, source)

    def __repr__(self):
        return 'PdfArray(%s)' % list.__repr__(self)
