# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

'''
PdfDocument adds the page-level view of a document to the
object store: the page tree, page content streams, named
resources and fonts, form fields, string replacement, stream
filters and the security preferences.

Pages are numbered from 1.
'''

import os
import re

from .pdfreader import PdfReader
from .crypt import StandardSecurityHandler, encode_permissions
from .uncompress import decode_data, uncompress
from .compress import encode_data, compress
from .errors import PdfParseError, PdfFilterError, log
from .objects import (PdfDict, PdfArray, PdfName, PdfNumber, PdfString,
                      PdfReference, PdfIndirect)

DEFAULT_MEDIABOX = (0, 0, 612, 792)


class PdfDocument(PdfReader):
    ''' A whole document.  See PdfReader for the constructor
        arguments.  With neither a file name nor file data, a new
        document with an empty page tree is created.
    '''

    def __init__(self, fname=None, fdata=None, **kw):
        PdfReader.__init__(self, fname, fdata, **kw)
        self.pagecache = {}
        self.names = {}
        self.filter_warnings = set()
        if fname is None and fdata is None:
            self.new_document()
        pages = self.pages_root
        if not isinstance(pages, PdfDict):
            raise PdfParseError('Document catalog has no /Pages tree')
        self.page_count = int(self.resolve(pages.Count) or 0)

    def new_document(self):
        pages = self.append_object(PdfDict(Type=PdfName.Pages,
                                           Kids=PdfArray(),
                                           Count=PdfNumber(0)))
        root = self.append_object(PdfDict(Type=PdfName.Catalog,
                                          Pages=PdfReference(pages)))
        self.trailer = PdfDict(Root=PdfReference(root))

    @property
    def root(self):
        return self.resolve(self.trailer.Root)

    @property
    def pages_root(self):
        root = self.root
        return root is not None and self.resolve(root.Pages) or None

    def dereference(self, key, pagenum=None):
        ''' As PdfReader.dereference, but a key of the form '/Name'
            looks up a named resource of page pagenum (or of the
            whole document, if pagenum is None).
        '''
        if isinstance(key, str) and key.startswith('/'):
            value = self.build_name_table(pagenum).get(key[1:])
            if value is None:
                return None
            if not isinstance(value, PdfReference):
                return PdfIndirect(value)
            key = value
        return PdfReader.dereference(self, key)

    # The page tree

    def num_pages(self):
        return self.page_count

    def page_path(self, pagenum):
        ''' Find a page in the page tree.  Returns a list of
            (pagesnode, kids, index) tuples from the root down
            to the page's parent, and the page dictionary itself.
        '''
        if not 1 <= pagenum <= self.page_count:
            log.warning('Invalid page number requested: %s', pagenum)
            return None, None
        node = self.pages_root
        nodestart = 1
        path = []
        while node.Type == PdfName.Pages:
            kids = self.resolve(node.Kids)
            if not isinstance(kids, list) or not kids:
                raise PdfParseError('Corrupt page tree: /Kids is empty '
                                    'or not an array')
            if len(path) > 100:
                raise PdfParseError('Corrupt page tree: too deep')
            for index, kid in enumerate(kids):
                sub = self.resolve(kid)
                if index == len(kids) - 1:
                    break
                if isinstance(sub, PdfDict) and sub.Type == PdfName.Pages:
                    count = int(self.resolve(sub.Count) or 0)
                    if nodestart + count - 1 >= pagenum:
                        break
                    nodestart += count
                else:
                    if pagenum == nodestart:
                        break
                    nodestart += 1
            path.append((node, kids, index))
            node = sub
            if not isinstance(node, PdfDict):
                raise PdfParseError('Corrupt page tree: kid %s of page '
                                    'node is not a dictionary' % index)
        if not path:
            raise PdfParseError('Corrupt page tree: root is not a '
                                '/Pages node')
        return path, node

    def get_page(self, pagenum):
        page = self.pagecache.get(pagenum)
        if page is None:
            path, page = self.page_path(pagenum)
            if page is not None:
                self.pagecache[pagenum] = page
        return page

    def get_page_objnum(self, pagenum):
        path, page = self.page_path(pagenum)
        if page is None:
            return None
        node, kids, index = path[-1]
        if isinstance(kids[index], PdfReference):
            return int(kids[index])
        return page.objnum

    def inherited(self, page, key):
        ''' Look up an inheritable page attribute, following /Parent
        '''
        for count in range(100):
            if page is None:
                break
            value = page.get(key)
            if value is not None:
                return self.resolve(value)
            page = self.resolve(page.Parent)

    def get_page_dimensions(self, pagenum):
        ''' The inherited /MediaBox of a page, as a list of numbers
        '''
        box = self.inherited(self.get_page(pagenum), PdfName.MediaBox)
        if not isinstance(box, list) or len(box) != 4:
            return list(DEFAULT_MEDIABOX)
        return [self.resolve(x).value for x in box]

    def decache_pages(self):
        self.pagecache = {}
        self.names = {}

    def adjust_count(self, node, delta):
        ''' Add delta to the /Count of a pages node, which may
            be stored in an object of its own.
        '''
        count = node.Count
        if isinstance(count, PdfReference):
            obj = self.require(count)
            obj.value = PdfNumber(int(self.resolve(obj.value)) + delta)
            self.set_objnum(obj, int(count), self.generation(count))
            self.mark_changed(int(count))
        else:
            node.Count = PdfNumber(int(count or 0) + delta)
            self.mark_changed(node)

    # Page contents

    def get_page_content(self, pagenum):
        ''' The decoded content streams of a page, joined together
        '''
        page = self.get_page(pagenum)
        if page is None or page.Contents is None:
            return b''
        contents = self.resolve(page.Contents)
        if not isinstance(contents, list):
            contents = [contents]
        result = []
        for part in contents:
            part = self.resolve(part)
            if isinstance(part, PdfDict):
                result.append(self.decode_stream(part))
            elif part is not None:
                raise PdfParseError('Unexpected content type %s for page '
                                    '%d contents' % (type(part).__name__,
                                                     pagenum))
        return b'\n'.join(result)

    def set_page_content(self, pagenum, content):
        ''' Replace the contents of a page with a new Flate stream.
            A single existing content object is reused.
        '''
        page = self.get_page(pagenum)
        stream = self.create_stream_object(content, PdfName.FlateDecode)
        if isinstance(page.Contents, PdfReference):
            self.replace_object(int(page.Contents), stream)
        else:
            key = self.append_object(stream)
            page.Contents = PdfReference(key)
            self.mark_changed(self.get_page_objnum(pagenum))

    def append_page_content(self, pagenum, content):
        page = self.get_page(pagenum)
        objnum = self.get_page_objnum(pagenum)
        key = self.append_object(self.create_stream_object(
            content, PdfName.FlateDecode))
        streamref = PdfReference(key)
        contents = page.Contents
        if contents is None:
            page.Contents = streamref
        elif isinstance(contents, list):
            contents.append(streamref)
        elif isinstance(contents, PdfReference):
            target = self.resolve(contents)
            if isinstance(target, list):
                target.append(streamref)
                self.mark_changed(int(contents))
            else:
                page.Contents = PdfArray([contents, streamref])
        else:
            raise PdfParseError('Unsupported /Contents type %s on page %d'
                                % (type(contents).__name__, pagenum))
        self.mark_changed(objnum)

    def get_page_content_tree(self, pagenum, verbose=False):
        ''' The content of a page as a parsed ContentTree, with the
            page's named resources and media box attached.
        '''
        from .content import ContentTree
        from .fontmetrics import FontMetrics

        if self.get_page(pagenum) is None:
            return None
        refs = dict(doc=self,
                    properties=self.build_name_table(pagenum),
                    mediabox=self.get_page_dimensions(pagenum),
                    fontmetrics=FontMetrics(self))
        tree = ContentTree(self.get_page_content(pagenum), refs, verbose)
        return tree.parse()

    def uninline_images(self, pagenum=None):
        ''' Move the inline images of a page (or of every page)
            into image XObjects named Im1, Im2, ..., drawn with Do.
            Returns the number of images moved.
        '''
        from .content import ContentOp, PdfInlineImage

        if pagenum is None:
            return sum(self.uninline_images(x)
                       for x in range(1, self.page_count + 1))
        tree = self.get_page_content_tree(pagenum)
        if tree is None:
            return 0
        used = set(self.build_name_table(pagenum))
        count = 0
        stack = [tree.blocks]
        while stack:
            nodes = stack.pop()
            for index, node in enumerate(nodes):
                if node.kind == 'block':
                    stack.append(node.value)
                    continue
                if (node.name != 'BI' or len(node.args) != 1 or
                        not isinstance(node.args[0], PdfInlineImage)):
                    continue
                image = node.args[0]
                xobject = PdfDict(image, Type=PdfName.XObject)
                xobject.stream = bytes(image.stream or b'')
                number = 1
                while 'Im%d' % number in used:
                    number += 1
                name = 'Im%d' % number
                used.add(name)
                self.page_add_name(pagenum, name, self.append_object(xobject))
                nodes[index] = ContentOp('Do', [PdfName(name)])
                count += 1
        if count:
            self.set_page_content(pagenum, tree.to_bytes())
        return count

    # Deleting, duplicating and merging pages

    def delete_page(self, pagenum):
        ''' Remove one page.  The last page of a document
            cannot be deleted.
        '''
        result = self.delete_page_internal(pagenum)
        if result:
            self.cleanse()
        return result

    def delete_pages(self, *ranges):
        for pagenum in sorted(set(self.range_to_list(*ranges)),
                              reverse=True):
            if not self.delete_page_internal(pagenum):
                return False
        self.cleanse()
        return True

    def extract_pages(self, *ranges):
        ''' Delete every page except the ones given
        '''
        keep = set(self.range_to_list(*ranges))
        unwanted = [x for x in range(1, self.page_count + 1)
                    if x not in keep]
        if not keep:
            log.warning('No pages selected to keep')
            return False
        return not unwanted or self.delete_pages(*unwanted)

    def delete_page_internal(self, pagenum):
        if self.page_count <= 1:
            log.warning('Cannot delete the only page of a document')
            return False
        path, page = self.page_path(pagenum)
        if page is None:
            return False
        objnum = self.get_page_objnum(pagenum)

        for node, kids, index in path:
            self.adjust_count(node, -1)

        # Remove the page, then any intermediate node left empty
        depth = len(path) - 1
        while depth >= 0:
            node, kids, index = path[depth]
            del kids[index]
            self.mark_changed(kids)
            self.mark_changed(node)
            if kids or not depth:
                break
            parent, parentkids, parentindex = path[depth - 1]
            if isinstance(parentkids[parentindex], PdfReference):
                self.delete_object(parentkids[parentindex])
            depth -= 1

        if objnum is not None:
            self.delete_object(objnum)
        self.page_count -= 1
        self.decache_pages()
        return True

    def duplicate_page(self, pagenum, leave_blank=False):
        ''' Insert a copy of a page right after it.  With
            leave_blank, the copy has no content (and the document
            is incomplete until set_page_content() is called).
        '''
        page = self.get_page(pagenum)
        if page is None:
            return None
        objnum = self.get_page_objnum(pagenum)
        newobjnum = self.append_object(objnum, self)
        newpage = self.get_object_value(newobjnum)
        newpage.Contents = None

        parent = self.resolve(page.Parent)
        kids = self.resolve(parent.Kids)
        refs = [isinstance(x, PdfReference) and int(x) for x in kids]
        index = refs.index(objnum) if objnum in refs else len(kids) - 1
        kids.insert(index + 1, PdfReference(newobjnum))
        self.mark_changed(kids)
        while isinstance(parent, PdfDict):
            self.adjust_count(parent, 1)
            parent = self.resolve(parent.Parent)
        self.page_count += 1
        self.decache_pages()

        if not leave_blank:
            self.set_page_content(pagenum + 1,
                                  self.get_page_content(pagenum))
        return newobjnum

    def append_pdf(self, other, prepend=False):
        ''' Add all the pages of another document after (or,
            with prepend, before) the pages of this one.  Returns the
            object number of the copied page tree.
        '''
        root = self.root
        oldkey = int(root.Pages)
        otherkey = int(other.root.Pages)

        key = self.new_objnum()
        mapping = self.replace_object(key, otherkey, other, True)
        subpages = self.get_object_value(key)

        kids = prepend and (key, oldkey) or (oldkey, key)
        newpages = PdfDict(Type=PdfName.Pages,
                           Kids=PdfArray(PdfReference(x) for x in kids),
                           Count=PdfNumber(self.page_count +
                                           other.num_pages()))
        newkey = self.append_object(newpages)
        root.Pages = PdfReference(newkey)
        self.mark_changed(root)
        for node in (self.get_object_value(oldkey), subpages):
            node.Parent = PdfReference(newkey)
            self.mark_changed(node)

        self.merge_fields(other, mapping)
        self.page_count += other.num_pages()
        self.decache_pages()
        return key

    def prepend_pdf(self, other):
        return self.append_pdf(other, True)

    def merge_fields(self, other, mapping):
        ''' Carry the form fields of a merged document over
        '''
        form = other.resolve(other.root.AcroForm)
        fields = form and other.resolve(form.Fields)
        if not fields:
            return
        newfields = [PdfReference(mapping[int(x)]) for x in fields
                     if isinstance(x, PdfReference) and int(x) in mapping]
        form = self.resolve(self.root.AcroForm)
        mainfields = form and self.resolve(form.Fields)
        if mainfields is None:
            log.warning('Form fields of the appended document dropped; '
                        'this document has no form')
            return
        mainfields.extend(newfields)
        self.mark_changed(mainfields)

    # Form fields

    def walk_form_fields(self, kids=None, prefix=''):
        ''' Yield (full name, prefix, field dictionary) for the form fields
            under kids (by default, the whole form), parents before
            their children.  Full names join the /T of each level
            with dots.
        '''
        if kids is None:
            form = self.root is not None and self.resolve(self.root.AcroForm)
            kids = form and self.resolve(form.Fields)
        for kid in kids or ():
            field = self.resolve(kid)
            if not isinstance(field, PdfDict):
                log.warning('Form field is not a dictionary: %r', kid)
                continue
            title = self.resolve(field.T)
            name = prefix + (title.to_unicode() if isinstance(title, PdfString)
                             else '(no name)')
            yield name, prefix, field
            children = self.resolve(field.Kids)
            if children:
                for item in self.walk_form_fields(children, name + '.'):
                    yield item

    def get_form_field(self, name):
        ''' The field dictionary with the given full name (or
            alternate /TU name), or None.
        '''
        for fullname, prefix, field in self.walk_form_fields():
            alternate = self.resolve(field.TU)
            if fullname == name or (isinstance(alternate, PdfString) and
                                    alternate.to_unicode() == name):
                return field

    def get_form_field_list(self, parentname=None):
        ''' The full names of the form fields (below parentname, if
            given).  A field with an alternate name is followed by
            "<alternate> (alternate name)".
        '''
        if parentname:
            parent = self.get_form_field(parentname)
            if parent is None or parent.Kids is None:
                return []
            fields = self.walk_form_fields(self.resolve(parent.Kids),
                                           parentname + '.')
        else:
            fields = self.walk_form_fields()
        result = []
        for name, prefix, field in fields:
            result.append(name)
            alternate = self.resolve(field.TU)
            if isinstance(alternate, PdfString):
                result.append('%s%s (alternate name)' %
                              (prefix, alternate.to_unicode()))
        return result

    # Named resources and fonts

    def get_properties(self, pagenum):
        ''' The (inherited) /Resources dictionary of a page
        '''
        return self.inherited(self.get_page(pagenum), PdfName.Resources)

    def build_name_table(self, pagenum=None):
        ''' Map resource names (without the slash) to their values,
            for the XObjects and fonts of a page and its ancestors.
            A page's own names hide those of its ancestors.

            With pagenum None, the table covers every object in
            the document that has a /Name.
        '''
        names = self.names.get(pagenum)
        if names is not None:
            return names
        names = {}
        if pagenum is None:
            self.cache_objects()
            for objnum, obj in self.objcache.items():
                value = obj.value
                if isinstance(value, PdfDict) and value.Name is not None:
                    names[self.resolve(value.Name).value] = \
                        PdfReference(objnum)
        else:
            page = self.get_page(pagenum)
            for count in range(100):
                if page is None:
                    break
                resources = self.resolve(page.Resources)
                if isinstance(resources, PdfDict):
                    for key in (PdfName.XObject, PdfName.Font):
                        table = self.resolve(resources.get(key))
                        if isinstance(table, PdfDict):
                            for name, value in table.items():
                                names.setdefault(name.value, value)
                page = self.resolve(page.Parent)
        self.names[pagenum] = names
        return names

    def is_font(self, node):
        node = self.resolve(node)
        return isinstance(node, PdfDict) and node.Type == PdfName.Font

    def get_font(self, pagenum, fontname):
        if fontname.startswith('/'):
            fontname = fontname[1:]
        font = self.build_name_table(pagenum).get(fontname)
        if self.is_font(font):
            return self.resolve(font)

    def get_font_names(self, pagenum):
        return sorted(name for (name, value) in
                      self.build_name_table(pagenum).items()
                      if self.is_font(value))

    def get_fonts(self, pagenum):
        names = self.build_name_table(pagenum)
        return [self.resolve(names[x]) for x in self.get_font_names(pagenum)]

    def get_font_by_base_name(self, pagenum, basename):
        ''' The font of a page whose /BaseFont is basename
            (e.g. 'Helvetica'), or None.
        '''
        if basename.startswith('/'):
            basename = basename[1:]
        names = self.build_name_table(pagenum)
        for name in sorted(names):
            font = self.resolve(names[name])
            if not self.is_font(font):
                continue
            base = self.resolve(font.BaseFont)
            if base is not None and base.value == basename:
                return font

    def set_name(self, node, name):
        ''' Give a dictionary object a /Name, so that it shows up in
            the document-wide name table.  node may be an object
            number.  Returns True if the name was set.
        '''
        if isinstance(node, int):
            node = PdfReference(node)
        value = self.resolve(node)
        if not name or not isinstance(value, PdfDict):
            return False
        if name.startswith('/'):
            name = name[1:]
        value.Name = PdfName(name)
        self.mark_changed(node if isinstance(node, int) else value)
        self.names = {}
        return True

    def remove_name(self, node):
        if isinstance(node, int):
            node = PdfReference(node)
        value = self.resolve(node)
        if not isinstance(value, PdfDict) or value.Name is None:
            return False
        value.Name = None
        self.mark_changed(node if isinstance(node, int) else value)
        self.names = {}
        return True

    def page_add_name(self, pagenum, name, objnum):
        ''' Add an XObject named name to a page's own resources.
            Inherited resources are copied onto the page first.
        '''
        page = self.get_page(pagenum)
        pageobj = self.get_page_objnum(pagenum)
        if page.Resources is None:
            inherited = self.inherited(page, PdfName.Resources)
            resources = PdfDict(inherited) if inherited else PdfDict()
            xobjects = resources.XObject
            if isinstance(xobjects, PdfDict):
                resources.XObject = PdfDict(xobjects)
            page.Resources = resources
        resources = self.resolve(page.Resources)
        xobjects = self.resolve(resources.XObject)
        if not isinstance(xobjects, PdfDict):
            xobjects = resources.XObject = PdfDict()
        xobjects[PdfName(name)] = PdfReference(objnum)
        self.mark_changed(resources)
        self.mark_changed(xobjects)
        self.mark_changed(pageobj)
        self.names = {}

    # Strings

    def change_string(self, node, changes):
        ''' Replace text in every string inside node.  changes maps
            a needle (bytes, or a compiled regular expression) to
            its replacement bytes.  Objects whose strings change are
            marked for saving.
        '''
        def replace(value):
            if not isinstance(value, PdfString):
                return None
            data = bytes(value)
            for needle, replacement in changes.items():
                if isinstance(needle, str):
                    needle = needle.encode('latin-1')
                if isinstance(replacement, str):
                    replacement = replacement.encode('latin-1')
                if hasattr(needle, 'sub'):
                    data = needle.sub(replacement, data)
                else:
                    data = data.replace(needle, replacement)
            if data == value:
                return None
            result = PdfString(data, value.hexstring)
            result.objnum, result.gennum = value.objnum, value.gennum
            self.mark_changed(value)
            return result

        self.replace_items(node, replace)

    def change_strings(self, changes):
        for objnum in self.objnums():
            obj = self.dereference(objnum)
            if obj is not None:
                self.change_string(obj, changes)

    # Security

    def is_encrypted(self):
        return self.crypt is not None

    def get_prefs(self):
        ''' (owner password, user password, print, modify, copy, add)
        '''
        crypt = self.crypt
        if crypt is None:
            return (None, None, True, True, True, True)
        return (crypt.opassword, crypt.upassword) + crypt.permissions()

    def set_prefs(self, opassword, upassword, print_ok=True, modify_ok=True,
                  copy_ok=True, add_ok=True):
        ''' Encrypt the document with new passwords and permissions.
            Every object is rewritten, so save with clean_save().
        '''
        perms = encode_permissions(print_ok, modify_ok, copy_ok, add_ok)
        StandardSecurityHandler.set_passwords(self, opassword, upassword,
                                              perms)

    def can_print(self):
        return self.get_prefs()[2]

    def can_modify(self):
        return self.get_prefs()[3]

    def can_copy(self):
        return self.get_prefs()[4]

    def can_add(self):
        return self.get_prefs()[5]

    def create_id(self):
        ''' Make a new random document ID.  The first half of an
            existing ID is kept.
        '''
        if self.ID:
            self.ID = self.ID[:16] + os.urandom(16)
        else:
            self.ID = os.urandom(32)
        self.trailer.ID = PdfArray([PdfString(self.ID[:16], hexstring=True),
                                    PdfString(self.ID[16:32],
                                              hexstring=True)])
        return self.ID

    # Stream filters

    def decode_stream(self, dictnode):
        ''' The decoded data of a stream, leaving the stream
            itself alone.  Data that cannot be decoded is
            returned as far as it could be.
        '''
        data = dictnode.stream
        if data is None:
            return b''
        try:
            data, filters, parms = decode_data(
                data, dictnode.Filter, dictnode.DecodeParms or dictnode.DP,
                self.resolve)
        except PdfFilterError as s:
            log.error('%s; using undecoded stream data', s)
            return bytes(data)
        if filters:
            log.warning('Cannot decode stream filter %s', filters[0])
        return bytes(data)

    def decode_object(self, objnum):
        ''' Remove the filters from a stream object for good
        '''
        value = self.get_object_value(objnum)
        if not isinstance(value, PdfDict) or value.Filter is None:
            return False
        result = uncompress([value], self.resolve, self.filter_warnings)
        self.mark_changed(int(objnum))
        return result

    def decode_all(self, node):
        ''' Remove the filters from every stream in node and in
            everything it references.  Returns True if every
            stream could be decoded.
        '''
        streams = []

        def visit(value):
            if isinstance(value, PdfDict) and value.Filter is not None:
                streams.append(value)

        self.traverse(self.dereference(node) if isinstance(node, int)
                      else node, visit, follow=True)
        ok = True
        for value in streams:
            if value.stream is None:
                continue
            ok = uncompress([value], self.resolve,
                            self.filter_warnings) and ok
            self.mark_changed(value)
        return ok

    def encode_object(self, objnum, filtername=PdfName.FlateDecode):
        value = self.get_object_value(objnum)
        if not isinstance(value, PdfDict) or value.stream is None:
            return False
        before = value.stream
        compress([value], filtername)
        if value.stream is before:
            return False
        self.mark_changed(int(objnum))
        return True

    def create_stream_object(self, content, filtername=None):
        ''' A new stream dictionary for content.  It is not
            added to the document; use append_object() for that.
        '''
        result = PdfDict()
        if isinstance(content, str):
            content = content.encode('latin-1')
        if filtername is None:
            result.stream = content
        else:
            if not filtername.startswith('/'):
                filtername = PdfName(filtername)
            result.stream = encode_data(content, filtername)
            result.Filter = filtername
        return result

    # Page ranges

    def range_to_list(self, *ranges):
        ''' Turn page ranges such as '1-3,5', '4-' or '-2' (or
            plain numbers) into a list of page numbers, clipped to
            the pages of the document.  No ranges means every page.
            A descending range gives its pages in reverse.
        '''
        first, last = 1, self.page_count
        specs = []
        for item in ranges:
            if item is None:
                continue
            specs += re.findall(r'[\d\-]+',
                                re.sub(r'[^\d\-,]', '', str(item)))
        if not specs:
            return list(range(first, last + 1))
        result = []
        for spec in specs:
            if '-' in spec:
                start, end = spec.split('-', 1)[0], spec.rsplit('-', 1)[1]
                start = int(start) if start else first - 1
                end = int(end) if end else last + 1
                if (start < first and end < first or
                        start > last and end > last):
                    continue
                start = min(max(start, first), last)
                end = min(max(end, first), last)
                if start > end:
                    result.extend(range(start, end - 1, -1))
                else:
                    result.extend(range(start, end + 1))
            elif first <= int(spec) <= last:
                result.append(int(spec))
        return result
