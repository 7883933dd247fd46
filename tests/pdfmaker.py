# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

'''
Builds small PDF files in memory for the tests, with correct
cross-reference offsets.  Objects are given as a dict of
object number to the bytes between "N 0 obj" and "endobj".
'''

import re

HEADER = b'%PDF-1.4\n%\xe2\xe3\xcf\xd3\n'

findstartxref = re.compile(br'startxref\s+(\d+)').findall


def stream(data, extra=b''):
    return (b'<< /Length %d %s>>\nstream\n%s\nendstream' %
            (len(data), extra, data))


def _body(objects, pos):
    chunks = []
    offsets = {}
    for objnum in sorted(objects):
        chunk = b'%d 0 obj\n%s\nendobj\n' % (objnum, objects[objnum])
        offsets[objnum] = pos
        chunks.append(chunk)
        pos += len(chunk)
    return b''.join(chunks), offsets, pos


def _trailer(size, trailer, startxref):
    return (b'trailer\n<< /Size %d %s >>\nstartxref\n%d\n%%%%EOF\n' %
            (size, trailer, startxref))


def make_pdf(objects, trailer=b'/Root 1 0 R'):
    ''' A complete single-revision file
    '''
    body, offsets, startxref = _body(objects, len(HEADER))
    size = max(offsets) + 1
    rows = [b'xref\n0 %d\n' % size, b'0000000000 65535 f \n']
    for objnum in range(1, size):
        if objnum in offsets:
            rows.append(b'%010d 00000 n \n' % offsets[objnum])
        else:
            rows.append(b'0000000000 00001 f \n')
    return (HEADER + body + b''.join(rows) +
            _trailer(size, trailer, startxref))


def last_startxref(fdata):
    return int(findstartxref(fdata)[-1])


def add_revision(fdata, objects, trailer=b'/Root 1 0 R', free=(),
                 size=None):
    ''' Append an incremental update redefining objects (and
        freeing the object numbers in free)
    '''
    prev = last_startxref(fdata)
    body, offsets, startxref = _body(objects, len(fdata))
    rows = dict((x, b'%010d 00000 n \n' % y) for (x, y) in offsets.items())
    rows.update((x, b'0000000000 00001 f \n') for x in free)
    result = [b'xref\n']
    for objnum in sorted(rows):
        result.append(b'%d 1\n' % objnum)
        result.append(rows[objnum])
    if size is None:
        size = max(rows) + 1
    trailer = b'%s /Prev %d' % (trailer, prev)
    return (fdata + body + b''.join(result) +
            _trailer(size, trailer, startxref))


def simple_objects(numpages=3):
    ''' A catalog (1), a page tree (2), a font (3), and for each
        page a page object and a content stream, numbered from 4.
    '''
    kids = b' '.join(b'%d 0 R' % (4 + 2 * i) for i in range(numpages))
    widths = b' '.join([b'600'] * 26)
    objects = {
        1: b'<< /Type /Catalog /Pages 2 0 R >>',
        2: (b'<< /Type /Pages /Kids [%s] /Count %d '
            b'/MediaBox [0 0 612 792] '
            b'/Resources << /Font << /F1 3 0 R >> >> >>' % (kids, numpages)),
        3: (b'<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica '
            b'/FirstChar 65 /LastChar 90 /Widths [%s] >>' % widths),
    }
    for i in range(numpages):
        objects[4 + 2 * i] = (b'<< /Type /Page /Parent 2 0 R /Contents '
                              b'%d 0 R >>' % (5 + 2 * i))
        objects[5 + 2 * i] = stream(b'BT /F1 12 Tf 72 720 Td (Page %d) Tj ET'
                                    % (i + 1))
    return objects


def simple_pdf(numpages=3):
    return make_pdf(simple_objects(numpages))
