# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

'''
Page content streams.

A content stream is a sequence of operators, each preceded by
its operands.  Some operators open a block which a matching
operator closes (q/Q, BT/ET, ...).  ContentTree parses a stream
into a list of ContentOp and ContentBlock nodes, where a block
holds its children in .value.

Operands are ordinary PDF values (no references are possible).
Inline images (BI ... ID ... EI) become a single ContentOp named
BI whose one operand is a PdfInlineImage: a dictionary with its
abbreviated keys expanded, and the image data as its stream.
'''

import re

from .tokens import PdfTokens
from .pdfparser import PdfParser
from .pdfwriter import format_node
from .graphics import GraphicsState
from .objects import PdfDict, PdfName, BasePdfName, PdfStream
from .errors import PdfValidationWarning, log

BLOCK_ENDINGS = {
    'q': 'Q',
    'BT': 'ET',
    'BDC': 'EMC',
    'BMC': 'EMC',
    'BX': 'EX',
}
BLOCK_ENDS = frozenset(BLOCK_ENDINGS.values())

# Operand types for each operator.  None means any number of operands.
OPERATORS = {
    'b': (), 'B': (), 'b*': (), 'B*': (),
    'BDC': ('label', 'dictionary|label'),
    'BI': ('image',),
    'BMC': ('label',),
    'BT': (),
    'BX': (),
    'c': ('number',) * 6,
    'cm': ('number',) * 6,
    'CS': ('label',),
    'cs': ('label',),
    'd': ('array', 'number'),
    'd0': ('number',) * 2,
    'd1': ('number',) * 6,
    'Do': ('label',),
    'DP': ('label', 'dictionary|label'),
    'F': (), 'f': (), 'f*': (),
    'G': ('number',),
    'g': ('number',),
    'gs': ('label',),
    'h': (),
    'i': ('number',),
    'j': ('integer',),
    'J': ('integer',),
    'K': ('number',) * 4,
    'k': ('number',) * 4,
    'l': ('number',) * 2,
    'm': ('number',) * 2,
    'M': ('number',),
    'MP': ('label',),
    'n': (),
    'q': (),
    're': ('number',) * 4,
    'RG': ('number',) * 3,
    'rg': ('number',) * 3,
    'ri': ('label',),
    's': (), 'S': (),
    'SC': None, 'sc': None, 'SCN': None, 'scn': None,
    'sh': ('label',),
    'T*': (),
    'Tc': ('number',),
    'TD': ('number',) * 2,
    'Td': ('number',) * 2,
    'Tf': ('label', 'number'),
    'TJ': ('array',),
    'Tj': ('string',),
    'TL': ('number',),
    'Tm': ('number',) * 6,
    'Tr': ('integer',),
    'Ts': ('number',),
    'Tw': ('number',),
    'Tz': ('number',),
    'v': ('number',) * 4,
    'w': ('number',),
    'W': (), 'W*': (),
    'y': ('number',) * 4,
    "'": ('string',),
    '"': ('number', 'number', 'string'),
}

# Inline image abbreviations
INLINE_KEYS = dict(
    BPC='BitsPerComponent', CS='ColorSpace', D='Decode', DP='DecodeParms',
    F='Filter', H='Height', IM='ImageMask', I='Interpolate', W='Width',
    L='Length')
INLINE_FILTERS = dict(
    AHx='ASCIIHexDecode', A85='ASCII85Decode', CCF='CCITTFaxDecode',
    DCT='DCTDecode', Fl='FlateDecode', LZW='LZWDecode', RL='RunLengthDecode')
INLINE_COLORSPACES = dict(
    G='DeviceGray', RGB='DeviceRGB', CMYK='DeviceCMYK', I='Indexed')


def _reverse(mapping):
    return dict((y, x) for (x, y) in mapping.items())


def _convert_names(value, mapping):
    if isinstance(value, BasePdfName):
        return PdfName(mapping.get(value.value, value.value))
    if isinstance(value, list):
        return type(value)(_convert_names(x, mapping) for x in value)
    return value


class PdfInlineImage(PdfDict):
    ''' The dictionary (with full key names) and data of an
        inline image.
    '''
    kind = 'image'

    def abbreviated(self):
        ''' (key, value) pairs as they are written in a content stream
        '''
        keys = _reverse(INLINE_KEYS)
        values = {PdfName.Filter: _reverse(INLINE_FILTERS),
                  PdfName.ColorSpace: _reverse(INLINE_COLORSPACES)}
        for key, value in sorted(self.items()):
            if key in (PdfName.Type, PdfName.Subtype):
                continue
            if key in values:
                value = _convert_names(value, values[key])
            yield PdfName(keys.get(key.value, key.value)), value


class ContentOp(object):
    ''' One operator with its operands.  After a traversal,
        gs holds the graphics state in effect just before it.
    '''
    kind = 'op'
    gs = None

    def __init__(self, name, args=None):
        self.name = name
        self.args = args if args is not None else []

    def __repr__(self):
        return '%s(%r, %r)' % (type(self).__name__, self.name, self.args)


class ContentBlock(ContentOp):
    ''' A block-opening operator, the nodes inside the block
        (value) and the name of the closing operator (end).
    '''
    kind = 'block'

    def __init__(self, name, args=None, value=None, end=None):
        ContentOp.__init__(self, name, args)
        self.value = value if value is not None else []
        self.end = end or BLOCK_ENDINGS.get(name)

    def __repr__(self):
        return 'ContentBlock(%r, %r, %r)' % (self.name, self.args,
                                             self.value)


def operand(node):
    ''' The Python value handed to a graphics state handler
    '''
    if isinstance(node, PdfDict):
        return node
    if isinstance(node, list):
        return [operand(x) for x in node]
    return node.value


class ContentTree(object):
    ''' The parsed content of a page.

        refs is handed to the graphics state on traversal; see
        GraphicsState.  With verbose, parse and validation
        problems are logged.
    '''

    isoperator = re.compile(br'[A-Za-z\'"][\w*]*$').match
    nonoperators = frozenset([b'true', b'false', b'null'])
    find_ei = re.compile(br'[\x00\t\n\f\r ]EI(?=[\x00\t\n\f\r ]|$)').search

    def __init__(self, content, refs=None, verbose=False):
        if isinstance(content, str):
            content = content.encode('latin-1')
        self.content = bytes(content)
        self.refs = refs if refs is not None else {}
        self.verbose = verbose
        self.blocks = []
        self.validation_errors = []

    def __iter__(self):
        return iter(self.blocks)

    def parse(self):
        ''' Build the tree.  Returns self.  Raises PdfParseError for
            badly nested blocks, and for operands with no operator.
        '''
        tokens = PdfTokens(self.content, verbose=self.verbose)
        parser = PdfParser(tokens, allow_refs=False)
        isoperator, nonoperators = self.isoperator, self.nonoperators
        blocks = []
        stack = []
        operands = []
        current = blocks
        while 1:
            token = tokens.next()
            if token is None:
                break
            if not isoperator(token) or token in nonoperators:
                operands.append(parser.parse_any(token))
                continue
            name = token.decode('latin-1')
            if name in BLOCK_ENDS:
                if not stack:
                    tokens.exception('Unexpected block ending %s', name)
                if stack[-1].end != name:
                    tokens.exception('Wrong block ending (expected %s, '
                                     'got %s)', stack[-1].end, name)
                if operands:
                    tokens.exception('%d unused operands before %s',
                                     len(operands), name)
                stack.pop()
                current = stack[-1].value if stack else blocks
                continue
            if name == 'BI':
                operands.append(self.read_inline_image(tokens, parser))
                node = ContentOp(name, operands)
            elif name in BLOCK_ENDINGS:
                node = ContentBlock(name, operands)
            else:
                node = ContentOp(name, operands)
            operands = []
            current.append(node)
            if node.kind == 'block':
                stack.append(node)
                current = node.value
        if stack:
            tokens.exception('End of content with %d open block(s) '
                             '(innermost %s)', len(stack), stack[-1].name)
        if operands:
            tokens.exception('%d unprocessed operands at end of content',
                             len(operands))
        self.blocks = blocks
        return self

    def read_inline_image(self, tokens, parser):
        ''' Read the rest of an inline image, after BI
        '''
        image = PdfInlineImage()
        while 1:
            token = tokens.next()
            if token is None:
                tokens.exception('Unterminated inline image')
            if token == b'ID':
                break
            if token[:1] != b'/':
                tokens.exception('Expected inline image key')
            key = BasePdfName(token.decode('latin-1')).value
            key = PdfName(INLINE_KEYS.get(key, key))
            value = parser.parse_any()
            if key == PdfName.Filter:
                value = _convert_names(value, INLINE_FILTERS)
            elif key == PdfName.ColorSpace:
                value = _convert_names(value, INLINE_COLORSPACES)
            image[key] = value
        image.Type = PdfName.XObject
        image.Subtype = PdfName.Image

        fdata, endloc = tokens.fdata, tokens.endloc
        # The whitespace after ID may also be the one before EI
        start = min(tokens.floc + 1, endloc)
        match = self.find_ei(fdata, tokens.floc, endloc)
        if match is None:
            tokens.warning('Inline image without EI')
            end = tokens.floc = endloc
        else:
            end = match.start()
            start = min(start, end)
            tokens.floc = match.end()
        image._stream = PdfStream(fdata[start:end])
        return image

    def walk(self, blocks=None):
        ''' Every node in the tree, parents before children
        '''
        stack = [iter(blocks if blocks is not None else self.blocks)]
        while stack:
            for node in stack[-1]:
                yield node
                if node.kind == 'block':
                    stack.append(iter(node.value))
                    break
            else:
                stack.pop()

    def depth(self):
        ''' How deeply the blocks are nested
        '''
        result = 0
        stack = [(x, 1) for x in self.blocks if x.kind == 'block']
        while stack:
            node, level = stack.pop()
            result = max(result, level)
            stack.extend((x, level + 1) for x in node.value
                         if x.kind == 'block')
        return result

    # Validation

    @staticmethod
    def check_operand(arg, types):
        for kind in types.split('|'):
            if kind == 'integer':
                if arg.kind == 'number' and re.match(r'\d+$', arg):
                    return True
            elif kind == 'string':
                if arg.kind in ('string', 'hexstring'):
                    return True
            elif arg.kind == kind:
                return True
        return False

    def check_node(self, node):
        ''' A message describing what is wrong with a node's
            operands, or None.
        '''
        syntax = OPERATORS.get(node.name)
        if syntax is None:
            return None
        if len(node.args) != len(syntax):
            return ('Wrong number of arguments to %r (got %d instead of %d)'
                    % (node.name, len(node.args), len(syntax)))
        for arg, types in zip(node.args, syntax):
            if not self.check_operand(arg, types):
                return ('Expected %r argument for %r (got %s)' %
                        (types, node.name, arg.kind))
        return None

    def validate(self):
        ''' Check every operator against its operand types.
            Problems are collected in validation_errors.
        '''
        errors = []
        for node in self.walk():
            msg = self.check_node(node)
            if msg is not None:
                errors.append(PdfValidationWarning(msg, node.name))
                if self.verbose:
                    log.warning(msg)
        self.validation_errors = errors
        return not errors

    # Traversal

    def traverse(self, gs, blocks=None):
        ''' Walk the tree, applying each operator to a clone of the
            graphics state.  A block's final state carries on after
            it, except for q/Q, which restores the state.  Returns
            the final state.
        '''
        if blocks is None:
            blocks = self.blocks
        stack = []
        nodes = iter(blocks)
        while 1:
            node = next(nodes, None)
            if node is None:
                if not stack:
                    return gs
                block, saved, nodes = stack.pop()
                if block.name == 'q':
                    gs = saved
                continue
            node.gs = gs
            handler = gs.handler(node.name)
            if handler is not None:
                msg = self.check_node(node)
                if msg is None:
                    gs = gs.clone()
                    handler(gs, *[operand(x) for x in node.args])
                else:
                    log.warning('Ignoring %s operator: %s', node.name, msg)
            if node.kind == 'block':
                stack.append((node, gs, nodes))
                nodes = iter(node.value)

    def compute_gs(self, skip_text=False):
        return self.traverse(GraphicsState(self.refs, skip_text=skip_text))

    def render(self, renderer):
        ''' Traverse with a renderer (see graphics.TextRenderer),
            and return the renderer.
        '''
        self.traverse(GraphicsState(self.refs, renderer))
        return renderer

    def find_images(self):
        ''' The names of XObjects drawn with Do, and the inline
            images, in content order.
        '''
        result = []
        for node in self.walk():
            if node.name == 'Do' and node.args:
                result.append(node.args[0])
            elif node.name == 'BI':
                result.extend(x for x in node.args
                              if isinstance(x, PdfInlineImage))
        return result

    # Output

    def to_bytes(self, blocks=None):
        ''' Flatten the tree back into a content stream.  The
            original spacing is not kept.
        '''
        result = []
        stack = []
        nodes = iter(blocks if blocks is not None else self.blocks)
        while 1:
            node = next(nodes, None)
            if node is None:
                if not stack:
                    return b''.join(result)
                block, nodes = stack.pop()
                result.append(block.end.encode('latin-1') + b'\n')
                continue
            if node.name == 'BI':
                result.append(self.format_inline_image(node))
                continue
            for arg in node.args:
                result.append(format_node(arg) + b' ')
            result.append(node.name.encode('latin-1') + b'\n')
            if node.kind == 'block':
                stack.append((node, nodes))
                nodes = iter(node.value)

    @staticmethod
    def format_inline_image(node):
        result = []
        for arg in node.args:
            if not isinstance(arg, PdfInlineImage):
                result.append(format_node(arg) + b' ')
                continue
            result.append(b'BI')
            for key, value in arg.abbreviated():
                result.append(b' ' + format_node(key) + b' ' +
                              format_node(value))
            result.append(b' ID\n' + bytes(arg.stream or b'') + b'\nEI\n')
        return b''.join(result)
