# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# Copyright (C) 2012-2015 Nerijus Mika
# MIT license -- See LICENSE.txt for details
'''
A small subset of decompression filters: Flate (with PNG
predictors), ASCIIHex, ASCII85 and RunLength.

Filters which are not handled here (DCT, CCITTFax, JBIG2, ...)
are left alone; the stream keeps its raw data and its /Filter.
'''
import re
import zlib
import base64
import binascii

from .objects import PdfDict, PdfName, PdfArray
from .errors import log, PdfFilterError


def streamobjects(mylist, isinstance=isinstance, PdfDict=PdfDict):
    for obj in mylist:
        if isinstance(obj, PdfDict) and obj.stream is not None:
            yield obj


def flate_decode(data, parms):
    dco = zlib.decompressobj()
    try:
        data = dco.decompress(data)
    except zlib.error as s:
        raise PdfFilterError('Flate decode failed: %s' % s)
    if dco.unused_data.strip():
        log.warning('Unconsumed compression data: %s',
                    repr(dco.unused_data[:20]))
    if isinstance(parms, PdfDict):
        predictor = int(parms.Predictor or 1)
        if 10 <= predictor <= 15:
            data = flate_png(data, int(parms.Columns or 1),
                             int(parms.Colors or 1),
                             int(parms.BitsPerComponent or 8))
        elif predictor != 1:
            raise PdfFilterError('Unsupported flatedecode predictor %s' %
                                 repr(predictor))
    return data


def ascii_hex_decode(data, parms):
    data = re.sub(br'\s+', b'', data)
    end = data.find(b'>')
    if end >= 0:
        data = data[:end]
    if len(data) % 2:
        data += b'0'
    try:
        return binascii.unhexlify(data)
    except (binascii.Error, ValueError) as s:
        raise PdfFilterError('ASCIIHex decode failed: %s' % s)


def ascii85_decode(data, parms):
    data = re.sub(br'\s+', b'', data)
    if data.startswith(b'<~'):
        data = data[2:]
    end = data.find(b'~>')
    if end >= 0:
        data = data[:end]
    try:
        return base64.a85decode(data)
    except ValueError as s:
        raise PdfFilterError('ASCII85 decode failed: %s' % s)


def runlength_decode(data, parms):
    result = bytearray()
    index, size = 0, len(data)
    while index < size:
        length = data[index]
        index += 1
        if length == 128:
            break
        if length < 128:
            result += data[index:index + length + 1]
            index += length + 1
        else:
            result += data[index:index + 1] * (257 - length)
            index += 1
    return bytes(result)


decoders = {
    PdfName.FlateDecode: flate_decode,
    PdfName.Fl: flate_decode,
    PdfName.ASCIIHexDecode: ascii_hex_decode,
    PdfName.AHx: ascii_hex_decode,
    PdfName.ASCII85Decode: ascii85_decode,
    PdfName.A85: ascii85_decode,
    PdfName.RunLengthDecode: runlength_decode,
    PdfName.RL: runlength_decode,
}


def paeth(left, up, up_left):
    p = left + up - up_left
    pa, pb, pc = abs(p - left), abs(p - up), abs(p - up_left)
    if pa <= pb and pa <= pc:
        return left
    if pb <= pc:
        return up
    return up_left


def flate_png(data, columns=1, colors=1, bpc=8):
    ''' PNG prediction is used to make certain kinds of data
        more compressible.  Before the compression, each data
        byte is either left the same, or is set to be a delta
        from the previous byte, or is set to be a delta from
        the previous row.  This selection is done on a per-row
        basis, and is indicated by a compression type byte
        prepended to each row of data.
    '''
    rowbytes = (columns * colors * bpc + 7) // 8
    pixel = (colors * bpc + 7) // 8
    rowlen = rowbytes + 1
    data = bytearray(data)
    if len(data) % rowlen:
        data.extend(bytes(rowlen - len(data) % rowlen))
    result = bytearray()
    prior = bytearray(rowbytes)
    for start in range(0, len(data), rowlen):
        filter_type = data[start]
        row = data[start + 1:start + rowlen]
        if filter_type == 1:
            for i in range(pixel, rowbytes):
                row[i] = (row[i] + row[i - pixel]) & 0xFF
        elif filter_type == 2:
            for i in range(rowbytes):
                row[i] = (row[i] + prior[i]) & 0xFF
        elif filter_type == 3:
            for i in range(rowbytes):
                left = row[i - pixel] if i >= pixel else 0
                row[i] = (row[i] + ((left + prior[i]) >> 1)) & 0xFF
        elif filter_type == 4:
            for i in range(rowbytes):
                if i >= pixel:
                    left, up_left = row[i - pixel], prior[i - pixel]
                else:
                    left = up_left = 0
                row[i] = (row[i] + paeth(left, prior[i], up_left)) & 0xFF
        elif filter_type:
            raise PdfFilterError('Unsupported PNG filter %d' % filter_type)
        result += row
        prior = row
    return bytes(result)


def as_list(value):
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    return [value]


def decode_data(data, filters, parms=None, resolve=None):
    ''' Run data through the list of filters.  Returns the
        decoded data, and the filters (and their parameters)
        that could not be applied, so the caller can leave them
        on the stream.  Raises PdfFilterError on corrupt data.
    '''
    resolve = resolve or (lambda x: x)
    filters = [resolve(x) for x in as_list(resolve(filters))]
    parms = [resolve(x) for x in as_list(resolve(parms))]
    parms += [None] * (len(filters) - len(parms))
    while filters:
        decoder = decoders.get(filters[0])
        if decoder is None:
            break
        data = decoder(bytes(data), parms[0])
        del filters[0], parms[0]
    return data, filters, parms[:len(filters)]


def uncompress(mylist, resolve=None, warnings=None):
    ''' Decode, in place, the stream objects in mylist.
        Returns True if everything could be decoded.  Each
        unusable filter is reported once per warnings set.
    '''
    if warnings is None:
        warnings = set()
    ok = True
    for obj in streamobjects(mylist):
        if obj.Filter is None:
            continue
        try:
            data, filters, parms = decode_data(
                obj.stream, obj.Filter, obj.DecodeParms or obj.DP, resolve)
        except PdfFilterError as s:
            log.error('%s; leaving stream data undecoded', s)
            ok = False
            continue
        if filters:
            msg = 'Not decompressing: cannot use filter %s' % filters[0]
            if msg not in warnings:
                warnings.add(msg)
                log.warning(msg)
            ok = False
        obj.stream = data
        obj.Filter = filters and PdfArray(filters) or None
        obj.DecodeParms = obj.DP = None
        if filters and any(x is not None for x in parms):
            obj.DecodeParms = PdfArray(x or PdfDict() for x in parms)
    return ok
