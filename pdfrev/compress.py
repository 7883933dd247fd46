# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

'''
Stream encoders.  Flate (zlib) is the one that matters;
ASCIIHex is there for callers that want 7-bit clean output.
'''

import zlib
import binascii

from .objects import PdfName, PdfArray, PdfNull
from .uncompress import streamobjects, as_list
from .errors import PdfFilterError


def flate_encode(data):
    return zlib.compress(data)


def ascii_hex_encode(data):
    return binascii.hexlify(data).upper() + b'>'


encoders = {
    PdfName.FlateDecode: flate_encode,
    PdfName.ASCIIHexDecode: ascii_hex_encode,
}


def encode_data(data, filtername):
    ''' Encode data with the named filter (with or without
        the leading slash).
    '''
    if not filtername.startswith('/'):
        filtername = PdfName(filtername)
    encoder = encoders.get(filtername)
    if encoder is None:
        raise PdfFilterError('Cannot encode with filter %s' % filtername)
    return encoder(bytes(data))


def compress(mylist, filtername=PdfName.FlateDecode):
    ''' Encode, in place, the stream objects in mylist.  A new
        filter is put in front of any filters already there.
    '''
    for obj in streamobjects(mylist):
        if filtername == PdfName.FlateDecode and obj.Filter is not None:
            continue
        oldstr = obj.stream
        newstr = encode_data(oldstr, filtername)
        if filtername == PdfName.FlateDecode and len(newstr) >= len(oldstr):
            continue
        filters = as_list(obj.Filter)
        obj.stream = newstr
        if filters:
            parms = as_list(obj.DecodeParms)
            obj.Filter = PdfArray([filtername] + filters)
            if parms:
                obj.DecodeParms = PdfArray([PdfNull()] + parms)
        else:
            obj.Filter = filtername
