# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# Copyright (C) 2012-2015 Nerijus Mika
# MIT license -- See LICENSE.txt for details

'''
The PdfReader class reads an entire PDF file into memory and
keeps track of its objects.

It is the object store for a document: it indexes the objects
through the chain of cross-reference sections, parses (and
decrypts) them lazily on first access, and keeps the set of
objects that have been changed since the document was last
saved.  Saving is done by PdfWriter.

Objects are addressed by object number.  A PdfReference holds
only the number of its target; resolve() follows it.
'''
import copy
import re

from .errors import (PdfParseError, PdfNotImplementedError,
                     PdfReferenceError, log)
from .tokens import PdfTokens
from .pdfparser import PdfParser
from .pdfwriter import PdfWriter, MAX_STRING
from .crypt import StandardSecurityHandler
from .objects import (PdfDict, PdfArray, PdfString, PdfStream,
                      PdfReference, PdfIndirect)


class PdfReader(object):
    ''' The object store.

        Keyword arguments:

          fname         -- a path, or a readable file object
          fdata         -- the whole document, as bytes
          opassword     -- owner password, for encrypted documents
          upassword     -- user password, for encrypted documents
          prompt        -- callable(attempt) returning a new
                           (opassword, upassword) pair after a failed
                           password check, or None to give up
          max_attempts  -- how many times prompt will be tried
          verbose       -- log problems found in the document
          maxstr        -- longest run of string data the writer
                           puts on one line

        With neither fname nor fdata, the store starts out empty.
    '''

    findstartxref = re.compile(br'startxref\s+(\d+)\s*(%%EOF)?').match
    findheader = re.compile(br'%PDF-(\d+\.\d+)').search
    xrefrow = re.compile(br'(\d{10}) (\d{5}) ([nf])[\x00 \t\f\r\n]{0,2}').match
    skipspace = re.compile(br'[\x00 \t\f\r\n]*').match

    def __init__(self, fname=None, fdata=None, opassword=None,
                 upassword=None, prompt=None, max_attempts=3, verbose=True,
                 maxstr=MAX_STRING):
        if fname is not None:
            if fdata is not None:
                raise TypeError('Cannot set both fname and fdata')
            if hasattr(fname, 'read'):
                fdata = fname.read()
            else:
                with open(fname, 'rb') as f:
                    fdata = f.read()

        self.verbose = verbose
        self.maxstr = maxstr
        self.xref = {}
        self.versions = {}
        self.free = set()
        self.deleted = {}
        self.endxref = None
        self.objcache = {}
        self.changes = set()
        self.revisions = []
        self.order = None
        self.delinearized = False
        self.maxobj = 0
        self.startxref = None
        self.crypt = None
        self.ID = b''
        self.trailer = PdfDict()
        self.version = '1.4'
        self.fdata = b''

        if fdata is not None:
            self.fdata = bytes(fdata)
            self.load(opassword, upassword, prompt, max_attempts)

    def warn(self, msg, *args):
        (log.warning if self.verbose else log.debug)(msg, *args)

    # Loading

    def load(self, opassword=None, upassword=None, prompt=None,
             max_attempts=3):
        fdata = self.fdata
        match = self.findheader(fdata, 0, 1024)
        if match is None:
            raise PdfParseError('Invalid PDF header: %s' %
                                repr(fdata[:20]), 0, fdata[:20])
        self.version = match.group(1).decode('ascii')

        self.startxref = self.findxref()
        self.parse_xref_chain(self.startxref)
        trailer = self.trailer
        if trailer.Root is None:
            raise PdfParseError('No /Root in PDF trailer', self.startxref)

        ids = self.resolve(trailer.ID)
        if isinstance(ids, list):
            self.ID = b''.join(bytes(self.resolve(x)) for x in ids
                               if isinstance(self.resolve(x), PdfString))

        if trailer.Encrypt is not None:
            self.crypt = StandardSecurityHandler.from_document(
                self, opassword, upassword, prompt, max_attempts)
            # Anything read so far was read without decryption
            encrypt_objnum = self.crypt.encrypt_objnum
            for objnum in list(self.objcache):
                if objnum != encrypt_objnum:
                    del self.objcache[objnum]

    def findxref(self):
        ''' Find the location of the last cross-reference section
        '''
        fdata = self.fdata
        loc = fdata.rfind(b'startxref')
        match = loc >= 0 and self.findstartxref(fdata, loc)
        if not match:
            raise PdfParseError('Did not find "startxref" at end of file',
                                max(loc, 0), fdata[-30:])
        if match.group(2) is None:
            log.warning('No %%%%EOF marker after startxref')
        elif fdata[match.end():].strip(b'\x00 \t\f\r\n'):
            log.warning('Extra data after %%%%EOF marker')
        return int(match.group(1))

    def parse_xref_chain(self, offset):
        ''' Read every cross-reference section, newest first,
            following the /Prev links.
        '''
        seen = set()
        trailer = None
        while offset is not None:
            if offset in seen:
                raise PdfParseError('Circular /Prev chain in cross-reference',
                                    offset)
            seen.add(offset)
            self.revisions.append(offset)
            section_trailer = self.parse_xref(offset)
            if trailer is None:
                trailer = section_trailer
            prev = section_trailer.Prev
            offset = int(prev) if prev is not None else None
        self.trailer = trailer

    def parse_xref(self, offset):
        ''' Parse one classic cross-reference section and its
            trailer.  Entries already known from a newer revision
            are skipped.
        '''
        fdata = self.fdata
        if not 0 <= offset < len(fdata):
            raise PdfParseError('Cross-reference offset %d is outside '
                                'the file' % offset, offset)
        tokens = PdfTokens(fdata, offset, verbose=self.verbose)
        token = tokens.next()
        if token != b'xref':
            if token is not None and token.isdigit():
                raise PdfNotImplementedError(
                    'Cross-reference streams are not supported')
            tokens.exception('Expected "xref" keyword')

        xref, versions, free = self.xref, self.versions, self.free
        xrefrow = self.xrefrow
        maxobj = self.maxobj
        while 1:
            startobj = tokens.next()
            if startobj == b'trailer':
                break
            count = tokens.next()
            if not (startobj is not None and startobj.isdigit() and
                    count is not None and count.isdigit()):
                tokens.exception('Invalid cross-reference subsection header')
            startobj, count = int(startobj), int(count)
            loc = self.skipspace(fdata, tokens.floc).end()
            for objnum in range(startobj, startobj + count):
                match = xrefrow(fdata, loc)
                if match is None:
                    raise PdfParseError(
                        'Invalid cross-reference record for object %d' %
                        objnum, loc, fdata[loc:loc + 20])
                loc = match.end()
                maxobj = max(maxobj, objnum)
                if objnum in xref or objnum in free:
                    continue
                position, generation, status = match.groups()
                if status == b'n':
                    xref[objnum] = int(position)
                    versions[objnum] = int(generation)
                else:
                    free.add(objnum)
            tokens.floc = loc

        trailer = PdfParser(tokens, store=self).parse_any()
        if not isinstance(trailer, PdfDict):
            tokens.exception('Expected trailer dictionary')
        if trailer.XRefStm is not None:
            self.warn('Ignoring cross-reference stream in hybrid file')
        self.maxobj = maxobj
        return trailer

    def build_endxref(self):
        ''' Each object's parse is bounded by the start of the
            next object in file order.
        '''
        total = len(self.fdata)
        offsets = sorted((offset, objnum)
                         for (objnum, offset) in self.xref.items())
        endxref = {}
        for index, (offset, objnum) in enumerate(offsets):
            end = total
            if index + 1 < len(offsets):
                end = offsets[index + 1][0]
                if end <= offset:
                    end = total
            endxref[objnum] = end
        self.endxref = endxref
        return endxref

    def load_object(self, objnum):
        offset = self.xref[objnum]
        endxref = self.endxref or self.build_endxref()
        tokens = PdfTokens(self.fdata, offset, endxref.get(objnum),
                           verbose=self.verbose)
        obj = PdfParser(tokens, crypt=self.crypt, store=self).parse_object()
        if obj.objnum != objnum:
            self.warn('Expected object %d at offset %d, found object %d',
                      objnum, offset, obj.objnum)
            self.set_objnum(obj, objnum, obj.gennum)
        return obj

    # Lookup

    def dereference(self, key, pagenum=None):
        ''' Return the PdfIndirect for an object number, loading
            and caching it on first use.  Unknown numbers are
            logged, and give None.  (pagenum is used by
            PdfDocument to look up named resources.)
        '''
        objnum = int(key)
        obj = self.objcache.get(objnum)
        if obj is None:
            if objnum not in self.xref:
                self.warn('Object %d is not in the cross-reference index',
                          objnum)
                return None
            obj = self.objcache[objnum] = self.load_object(objnum)
        return obj

    def resolve(self, node):
        ''' Follow references (and unwrap indirect objects)
            until a direct value is found.
        '''
        for count in range(100):
            if isinstance(node, PdfReference):
                node = self.dereference(node)
            elif isinstance(node, PdfIndirect):
                node = node.value
            else:
                return node
        self.warn('Reference loop detected')

    def get_object_value(self, objnum):
        return self.resolve(PdfReference(objnum))

    def require(self, objnum):
        ''' dereference(), but raise PdfReferenceError
            for an unknown object.
        '''
        obj = self.dereference(objnum)
        if obj is None:
            raise PdfReferenceError('Object %s not found' % objnum)
        return obj

    def generation(self, objnum):
        return max(self.versions.get(int(objnum), 0), 0)

    def objnums(self):
        return sorted(set(self.xref) | set(self.objcache))

    def cache_objects(self):
        for objnum in list(self.xref):
            self.dereference(objnum)

    # Walking the object graph

    def traverse(self, node, func, follow=False):
        ''' Call func on node and everything inside it.  With
            follow, references are followed too (each object
            at most once).
        '''
        seen = set()
        stack = [node]
        while stack:
            node = stack.pop()
            if node is None:
                continue
            func(node)
            if isinstance(node, PdfIndirect):
                if node.objnum is not None:
                    seen.add(node.objnum)
                stack.append(node.value)
            elif isinstance(node, PdfDict):
                stack.extend(node.values())
            elif isinstance(node, list):
                stack.extend(node)
            elif follow and isinstance(node, PdfReference):
                if int(node) not in seen:
                    seen.add(int(node))
                    stack.append(self.dereference(node))

    def replace_items(self, node, func, follow=False):
        ''' Call func(value) on every item inside the containers
            in node; when it returns something other than None,
            that replaces the item.
        '''
        def visit(container):
            if isinstance(container, PdfDict):
                for key, value in list(container.items()):
                    value = func(value)
                    if value is not None:
                        container[key] = value
            elif isinstance(container, list):
                for index, value in enumerate(container):
                    value = func(value)
                    if value is not None:
                        container[index] = value
            elif isinstance(container, PdfIndirect):
                value = func(container.value)
                if value is not None:
                    container.value = value
        self.traverse(node, visit, follow)

    def set_objnum(self, node, objnum, gennum):
        ''' Record the owning object on every node in node
        '''
        def visit(node):
            if not hasattr(type(node), 'kind'):
                return
            node.objnum = objnum
            node.gennum = gennum
            if isinstance(node, PdfDict) and node.stream is not None:
                node.stream.objnum = objnum
                node.stream.gennum = gennum
        self.traverse(node, visit)

    def get_ref_list(self, node):
        ''' Every object number reachable from node
        '''
        result = set()

        def visit(node):
            if isinstance(node, PdfReference):
                result.add(int(node))
        self.traverse(node, visit, True)
        return sorted(result)

    def change_ref_keys(self, node, mapping, follow=False):
        ''' Renumber the references in node according to mapping
        '''
        def remap(value):
            if isinstance(value, PdfReference) and int(value) in mapping:
                newref = PdfReference(mapping[int(value)])
                newref.objnum, newref.gennum = value.objnum, value.gennum
                return newref
        self.replace_items(node, remap, follow)

    @staticmethod
    def copy_object(node):
        ''' A deep copy of a node.  Stream data and leaf values
            are copied too, so that ownership can be changed.
        '''
        copy_object = PdfReader.copy_object
        if isinstance(node, PdfIndirect):
            return PdfIndirect(copy_object(node.value), node.objnum,
                               node.gennum)
        if isinstance(node, PdfDict):
            result = PdfDict()
            for key, value in node.items():
                result[key] = copy_object(value)
            if node.stream is not None:
                result._stream = PdfStream(node.stream)
            result.objnum, result.gennum = node.objnum, node.gennum
            return result
        if isinstance(node, list):
            result = PdfArray(copy_object(x) for x in node)
            result.objnum, result.gennum = node.objnum, node.gennum
            return result
        return copy.copy(node)

    # Changing things

    def mark_changed(self, node):
        ''' Mark the object that owns node (or the
            object number node) as needing to be saved.
        '''
        objnum = node if isinstance(node, int) else node.objnum
        if objnum is not None:
            self.changes.add(int(objnum))

    def new_objnum(self):
        self.maxobj = objnum = self.maxobj + 1
        self.versions[objnum] = -1
        return objnum

    def append_object(self, node, source=None, follow=False):
        ''' Add a new object, and return its number.

            With a source document, node is an object number
            in that document, and the object is copied; follow
            also copies everything it references.
        '''
        objnum = self.new_objnum()
        self.replace_object(objnum, node, source, follow)
        return objnum

    def replace_object(self, objnum, node, source=None, follow=False):
        ''' Set object objnum to node.  Returns a mapping of
            source object numbers to their new numbers here.
        '''
        mapping = {}
        if source is not None:
            srcnum = int(node)
            original = source.dereference(srcnum)
            if original is None:
                raise PdfReferenceError('Object %d not found in source '
                                        'document' % srcnum)
            node = self.copy_object(original)
            mapping[srcnum] = objnum
        elif follow:
            log.warning('Cannot follow references of an object '
                        'without a source document')
            follow = False

        if not isinstance(node, PdfIndirect):
            node = PdfIndirect(node)
        node.objnum = objnum
        self.set_objnum(node, objnum, self.generation(objnum))
        self.objcache[objnum] = node
        self.changes.add(objnum)
        self.deleted.pop(objnum, None)
        self.maxobj = max(self.maxobj, objnum)

        if follow:
            for oldnum in source.get_ref_list(original):
                if (oldnum not in mapping and
                        source.dereference(oldnum) is not None):
                    mapping[oldnum] = self.append_object(oldnum, source)
            for newnum in set(mapping.values()):
                self.change_ref_keys(self.dereference(newnum), mapping)
        return mapping

    def delete_object(self, objnum):
        objnum = int(objnum)
        if objnum in self.xref:
            self.deleted[objnum] = self.generation(objnum)
        for table in (self.versions, self.objcache, self.xref):
            table.pop(objnum, None)
        self.changes.discard(objnum)
        self.endxref = None

    def cleanse(self):
        ''' Delete every object that cannot be reached from
            the trailer.
        '''
        keep = set(self.get_ref_list(self.trailer))
        for objnum in self.objnums():
            if objnum not in keep:
                self.delete_object(objnum)

    def preserve_order(self):
        ''' Write objects in their current file order on the next save
        '''
        self.order = [objnum for (offset, objnum) in
                      sorted((y, x) for (x, y) in self.xref.items())]

    def first_object(self):
        if self.order:
            return self.order[0]
        if self.xref:
            return min(self.xref.items(), key=lambda x: x[1])[0]

    def is_linearized(self):
        objnum = self.first_object()
        if objnum is None:
            return False
        obj = self.resolve(PdfReference(objnum))
        return isinstance(obj, PdfDict) and obj.Linearized is not None

    def delinearize(self):
        ''' Drop the linearization dictionary; incremental
            updates make it wrong anyway.
        '''
        if self.delinearized:
            return
        if self.is_linearized():
            self.delete_object(self.first_object())
        self.delinearized = True

    def clean(self):
        ''' Prepare for a full rewrite: load everything, mark
            everything changed, and forget the old file data.
        '''
        self.cache_objects()
        self.delinearize()
        for objnum in self.xref:
            self.changes.add(objnum)
            self.versions[objnum] = -1
        self.xref = {}
        self.free = set()
        self.deleted = {}
        self.endxref = None
        self.startxref = None
        self.revisions = []
        self.fdata = b''
        self.trailer.Prev = None
        self.trailer.XRefStm = None

    def needs_save(self):
        return bool(self.changes or self.deleted)

    # Saving

    def save(self):
        ''' Append changed objects as a new revision
        '''
        return PdfWriter(self).save()

    def clean_save(self):
        ''' Rewrite the document as one revision
        '''
        return PdfWriter(self).clean_save()

    def output(self, fname=None):
        ''' Save, then write the whole document to fname (a
            path or a writable file object).  Without fname,
            the document is returned as bytes.
        '''
        self.save()
        return self.write(fname)

    def clean_output(self, fname=None):
        self.clean_save()
        return self.write(fname)

    def write(self, fname=None):
        fdata = self.fdata
        if fname is None:
            return fdata
        if hasattr(fname, 'write'):
            fname.write(fdata)
        else:
            with open(fname, 'wb') as f:
                f.write(fdata)
        return fdata
