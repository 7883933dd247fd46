# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details


class PdfReference(int):
    ''' A reference to an indirect object ("N G R" in the file).

        The integer value is the object number of the target.
        A reference never holds the target itself; the document
        that owns it looks it up.  As with every other node,
        objnum and gennum name the object the reference lives in.
    '''
    kind = 'reference'
    objnum = None
    gennum = None

    @property
    def target(self):
        return int(self)

    def __repr__(self):
        return 'PdfReference(%d)' % self


class PdfIndirect(object):
    ''' A top-level indirect object ("N G obj ... endobj").
        It wraps exactly one child value.
    '''
    kind = 'object'

    def __init__(self, value, objnum=None, gennum=0):
        self.value = value
        self.objnum = objnum
        self.gennum = gennum

    def __repr__(self):
        return 'PdfIndirect(%r, %s, %s)' % (self.value, self.objnum,
                                            self.gennum)

    def __eq__(self, other):
        return isinstance(other, PdfIndirect) and self.value == other.value

    def __ne__(self, other):
        return not self == other

    __hash__ = object.__hash__
