# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

'''
The PdfWriter class serializes a document's pending changes.

An incremental save appends the changed objects to the end of
the existing file data, followed by a new cross-reference section
and a trailer that points back at the previous one.  A clean save
first marks every object as changed and throws away the old file
data, so that the result is a single fresh revision.

Strings and streams are encrypted on the way out when the
document has a security handler.
'''

from .objects import (PdfName, BasePdfName, PdfDict, PdfObject, PdfNumber,
                      PdfBoolean, PdfNull, PdfString, PdfReference,
                      PdfIndirect)
from .objects.pdfstring import format_literal, format_hex
from .errors import PdfOutputError, log

MAX_STRING = 65


def user_fmt(obj, isinstance=isinstance):
    ''' Turn a plain Python value into the matching PDF node.
        This function may be replaced by the user for
        specialized formatting requirements.
    '''
    if obj is None:
        return PdfNull()
    if isinstance(obj, bool):
        return PdfBoolean(obj)
    if isinstance(obj, (int, float)):
        # PDFs don't handle exponent notation
        return PdfNumber(obj)
    if isinstance(obj, (str, bytes)):
        return PdfString.encode(obj)
    raise PdfOutputError('Cannot serialize %s object %r' %
                         (type(obj).__name__, obj))


class PdfWriter(object):
    ''' Writes the changed objects of a document (a PdfReader,
        normally a PdfDocument) onto the end of its file data.
    '''

    def __init__(self, doc=None, maxstr=None):
        self.doc = doc
        self.crypt = doc is not None and doc.crypt or None
        self.maxstr = (maxstr or doc is not None and doc.maxstr or
                       MAX_STRING)

    def generation(self, objnum):
        doc = self.doc
        return doc is not None and doc.generation(objnum) or 0

    def format_array(self, myarray, formatter):
        # Format array data into semi-readable ASCII
        maxstr = self.maxstr
        if sum(len(x) + 1 for x in myarray) <= maxstr:
            return formatter % b' '.join(myarray)
        bigarray = []
        count = maxstr + 1
        for x in myarray:
            lenx = len(x) + 1
            count += lenx
            if count > maxstr:
                subarray = []
                bigarray.append(subarray)
                count = lenx
            subarray.append(x)
        return formatter % b'\n'.join(b' '.join(x) for x in bigarray)

    def format_obj(self, obj, objnum=None, gennum=None):
        ''' Format one value as bytes.  objnum and gennum are
            those of the indirect object being written, and
            key the string encryption.
        '''
        if isinstance(obj, PdfIndirect):
            obj = obj.value
        if isinstance(obj, PdfReference):
            return b'%d %d R' % (obj, self.generation(obj))
        if isinstance(obj, PdfString):
            crypt = self.crypt
            data = bytes(obj)
            if crypt is not None:
                data = crypt.encrypt(data, objnum, gennum)
            if obj.hexstring:
                return format_hex(data)
            return format_literal(data, self.maxstr)
        if isinstance(obj, BasePdfName):
            return (obj.encoded or obj).encode('latin-1')
        if isinstance(obj, PdfObject):
            return obj.encode('latin-1')
        if isinstance(obj, PdfDict):
            myarray = []
            for key in self.dict_keys(obj):
                myarray.append(self.format_obj(key))
                myarray.append(self.format_obj(obj[key], objnum, gennum))
            return self.format_array(myarray, b'<<%s>>')
        if isinstance(obj, list):
            return self.format_array([self.format_obj(x, objnum, gennum)
                                      for x in obj], b'[%s]')
        if isinstance(obj, dict):
            return self.format_obj(PdfDict(obj), objnum, gennum)
        return self.format_obj(user_fmt(obj), objnum, gennum)

    @staticmethod
    def dict_keys(obj, first=(PdfName.Type, PdfName.Subtype)):
        ''' /Type and /Subtype first, then the rest in sorted order
        '''
        keys = [x for x in first if x in obj]
        keys += sorted((x for x in obj if x not in first),
                       key=lambda x: x.encoded or x)
        return keys

    def format_indirect(self, objnum, gennum):
        ''' Format "N G obj ... endobj" for a top-level object,
            including its stream, if any.
        '''
        doc = self.doc
        obj = doc.dereference(objnum)
        if obj is None:
            raise PdfOutputError('Object %d is marked changed but '
                                 'does not exist' % objnum)
        value = obj.value
        stream = getattr(value, 'stream', None)
        if stream is not None:
            data = bytes(stream)
            if doc.crypt is not None:
                data = doc.crypt.encrypt(data, objnum, gennum)
            length = value.Length
            if isinstance(length, PdfReference):
                length = doc.resolve(length)
            if (not isinstance(length, PdfNumber) or
                    length.value != len(data)):
                value.Length = PdfNumber(len(data))
        result = [b'%d %d obj\n' % (objnum, gennum),
                  self.format_obj(value, objnum, gennum)]
        if stream is not None:
            result += [b'\nstream\n', data, b'\nendstream']
        result.append(b'\nendobj\n')
        return b''.join(result)

    def write_order(self, objnums):
        doc = self.doc
        objnums = sorted(objnums)
        order = doc.order
        if order:
            position = dict((x, i) for i, x in enumerate(order))
            total = len(order)
            objnums.sort(key=lambda x: position.get(x, x + total))
        return objnums

    def xref_rows(self, newxref):
        ''' The cross-reference entries for a new revision: object 0,
            the objects just written, and a free list.  For the first
            revision of a file, every unused number is on the free list;
            after that, only objects deleted since the last save are.
        '''
        doc = self.doc
        rows = dict((objnum, b'%010d %05d n \n' %
                     (offset, doc.generation(objnum)))
                    for objnum, offset in newxref.items())
        if doc.startxref:
            free = sorted(x for x in doc.deleted if x not in rows)
        else:
            free = [x for x in range(1, doc.maxobj + 1)
                    if x not in rows and x not in doc.xref]
        links = free + [0]
        rows[0] = b'%010d 65535 f \n' % links[0]
        for objnum, nextfree in zip(free, links[1:]):
            gen = min(doc.deleted.get(objnum, 0) + 1, 65535)
            rows[objnum] = b'%010d %05d f \n' % (nextfree, gen)
        return rows

    def format_xref(self, rows):
        ''' Group the rows into contiguous subsections
        '''
        keys = sorted(rows)
        result = [b'xref\n']
        start = 0
        while start < len(keys):
            end = start + 1
            while end < len(keys) and keys[end] == keys[end - 1] + 1:
                end += 1
            result.append(b'%d %d\n' % (keys[start], end - start))
            result.extend(rows[x] for x in keys[start:end])
            start = end
        return b''.join(result)

    def save(self):
        ''' Append the changed objects and a new revision.
            Returns False if there was nothing to do.
        '''
        doc = self.doc
        if not doc.needs_save():
            return False

        doc.delinearize()
        doc.endxref = None
        chunks = [doc.fdata or
                  b'%%PDF-%s\n%%\xe2\xe3\xcf\xd3\n' % doc.version.encode()]
        pos = len(chunks[0])

        changed = [x for x in self.write_order(set(doc.changes) |
                                               set(doc.xref))
                   if x in doc.changes]
        doc.order = None
        versions = doc.versions
        for objnum in changed:
            versions[objnum] = min(versions.get(objnum, -1) + 1, 65535)

        newxref = {}
        for objnum in changed:
            gennum = versions[objnum]
            data = self.format_indirect(objnum, gennum)
            newxref[objnum] = pos
            chunks.append(data)
            pos += len(data)
            doc.set_objnum(doc.objcache[objnum], objnum, gennum)

        if chunks[-1][-1:] not in (b'\r', b'\n'):
            chunks.append(b'\n')
            pos += 1
        startxref = pos

        chunks.append(self.format_xref(self.xref_rows(newxref)))

        trailer = doc.trailer
        trailer.Size = PdfNumber(doc.maxobj + 1)
        trailer.Prev = doc.startxref and PdfNumber(doc.startxref) or None
        chunks.append(b'trailer\n%s\nstartxref\n%d\n%%%%EOF\n' %
                      (self.format_obj(trailer), startxref))

        doc.fdata = b''.join(chunks)
        doc.xref.update(newxref)
        doc.free.difference_update(newxref)
        doc.free.update(doc.deleted)
        doc.deleted.clear()
        doc.changes.difference_update(changed)
        doc.startxref = startxref
        doc.revisions.insert(0, startxref)
        log.debug('Saved %d objects; new cross-reference at %d',
                  len(changed), startxref)
        return True

    def clean_save(self):
        ''' Rewrite the whole document as a single revision
        '''
        self.doc.clean()
        return self.save()


def format_node(node, crypt=None, objnum=None, gennum=None,
                maxstr=MAX_STRING):
    ''' Format a single value, outside of any document.
        Strings are encrypted with crypt, if given, using the
        key for objnum and gennum.
    '''
    writer = PdfWriter(None, maxstr)
    writer.crypt = crypt
    return writer.format_obj(node, objnum, gennum)
