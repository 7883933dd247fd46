# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

from .pdfname import PdfName, BasePdfName
from .pdfobject import PdfNumber
from .pdfstring import PdfStream
from ..errors import PdfParseError


class PdfDict(dict):
    ''' A PDF dictionary.  Keys are PdfName instances ("/Type").

        Attribute access is a shortcut for names that are valid
        Python identifiers: d.Type is d['/Type'].  Storing None,
        either way, removes the key.  References stored as values
        are returned as they are; the document resolves them.

        A few attributes live on the object rather than in the
        dictionary:

            stream   the stream payload (decrypted, still encoded);
                     assigning it keeps /Length in step
            _stream  the same payload, leaving /Length alone
            objnum,  the indirect object that owns this one
            gennum

        So d.stream is the payload, and d[PdfName('stream')] would be a
        dictionary entry of that name.
    '''
    kind = 'dictionary'
    stream = None
    objnum = None
    gennum = None

    _special = dict(stream=('stream', True),
                    _stream=('stream', False),
                    objnum=('objnum', False),
                    gennum=('gennum', False),
                    )

    def __setitem__(self, name, value, setter=dict.__setitem__,
                    BasePdfName=BasePdfName, isinstance=isinstance):
        if not isinstance(name, BasePdfName):
            raise PdfParseError('Dict key %s is not a PdfName' % repr(name))
        if value is not None:
            setter(self, name, value)
        elif name in self:
            del self[name]

    def __init__(self, *args, **kw):
        if args:
            if len(args) == 1:
                args = args[0]
            self.update(args)
            if isinstance(args, PdfDict):
                self._stream = args.stream
        for key, value in kw.items():
            setattr(self, key, value)

    def update(self, *args, **kw):
        for key, value in dict(*args, **kw).items():
            self[key] = value

    def __getattr__(self, name, PdfName=PdfName):
        ''' If the attribute doesn't exist on the dictionary object,
            try to slap a '/' in front of it and get it out
            of the actual dictionary itself.
        '''
        if name.startswith('__'):
            raise AttributeError(name)
        return self.get(PdfName(name))

    def __setattr__(self, name, value, special=_special.get,
                    PdfName=PdfName, vars=vars):
        ''' Set an attribute on the dictionary.  Handle the keywords
            stream, _stream, objnum and gennum specially.
        '''
        info = special(name)
        if info is None:
            self[PdfName(name)] = value
        else:
            name, setlen = info
            if name == 'stream' and value is not None:
                if not isinstance(value, PdfStream):
                    value = PdfStream(value)
                value.objnum = vars(self).get('objnum')
                value.gennum = vars(self).get('gennum')
            vars(self)[name] = value
            if setlen:
                notnone = value is not None
                self.Length = notnone and PdfNumber(len(value)) or None

    def __eq__(self, other):
        return (dict.__eq__(self, other) and
                self.stream == getattr(other, 'stream', None))

    def __ne__(self, other):
        return not self == other

    __hash__ = None

    def __repr__(self):
        if self.stream is None:
            return 'PdfDict(%s)' % dict.__repr__(self)
        return 'PdfDict(%s, stream=%d bytes)' % (dict.__repr__(self),
                                                 len(self.stream))

    def copy(self):
        return type(self)(self)
