# A part of pdfrev
# Copyright (C) 2006-2015 Patrick Maupin, Austin, Texas
# MIT license -- See LICENSE.txt for details

'''
The graphics state of a page at each step of its content stream.

A GraphicsState is a value object.  ContentTree.traverse() clones
it before applying each operator, so that the state recorded on a
node is never changed by what comes after it, and so that q/Q
can restore a saved state just by going back to an older object.

Matrices are 6-tuples (a, b, c, d, e, f) in the usual PDF row
vector convention: a point (x, y) maps to

    (a*x + c*y + e, b*x + d*y + f)

Text rendering is handed to a renderer object with one method,
render_text(gs, text, width), called for every string shown,
before the text position is advanced past it.
'''

import copy

from .fontmetrics import FontMetrics

IDENTITY = (1, 0, 0, 1, 0, 0)

PATH_OPERATORS = frozenset('m l h c v y re'.split())
PAINT_OPERATORS = frozenset('S s F f f* B B* b b* n'.split())
TEXT_SHOW_OPERATORS = frozenset(['TJ', 'Tj', "'", '"'])


def apply_matrix(m1, m2):
    ''' The product m1 . m2: transform by m1, then by m2.
    '''
    a1, b1, c1, d1, e1, f1 = m1
    a2, b2, c2, d2, e2, f2 = m2
    return (a1 * a2 + b1 * c2,
            a1 * b2 + b1 * d2,
            c1 * a2 + d1 * c2,
            c1 * b2 + d1 * d2,
            e1 * a2 + f1 * c2 + e2,
            e1 * b2 + f1 * d2 + f2)


def dot(m, x, y):
    a, b, c, d, e, f = m
    return (a * x + c * y + e, b * x + d * y + f)


def node_type(node):
    ''' block, path, paint, text or op
    '''
    name = node.name
    if node.kind == 'block':
        return 'block'
    if name in PATH_OPERATORS:
        return 'path'
    if name in PAINT_OPERATORS:
        return 'paint'
    if name.startswith('T') or name in TEXT_SHOW_OPERATORS:
        return 'text'
    return 'op'


class TextRenderer(object):
    ''' The default renderer: draws nothing.  Set per_character
        to get one render_text call for each byte of text.
    '''
    per_character = False

    def render_text(self, gs, text, width):
        pass


class TextRunRecorder(TextRenderer):
    ''' Remembers each string shown, with its width and the
        device coordinates of its starting point.
    '''

    def __init__(self):
        self.runs = []

    def render_text(self, gs, text, width):
        x, y = gs.text_to_device(0, 0)
        self.runs.append((text, width, x, y))


class GraphicsState(object):
    ''' The state of the graphics (and, unless skip_text is set,
        text) machinery.

        refs is shared by every clone: it can hold the document
        (doc), the page's named resources (properties), its
        media box (mediabox) and a FontMetrics (fontmetrics).
    '''

    def __init__(self, refs=None, renderer=None, skip_text=False):
        refs = refs if refs is not None else {}
        self.refs = refs
        self.renderer = renderer if renderer is not None else TextRenderer()
        self.handlers = skip_text and GRAPHICS_HANDLERS or ALL_HANDLERS
        self.fontmetrics = (refs.get('fontmetrics') or
                            FontMetrics(refs.get('doc')))

        self.cm = IDENTITY          # current transformation matrix
        self.w = 1                  # line width
        self.J = 0                  # line cap
        self.j = 0                  # line join
        self.M = 0                  # miter limit
        self.da = ()                # dash array
        self.dp = 0                 # dash phase
        self.ri = None              # rendering intent
        self.i = 0                  # flatness
        self.G = self.g = None      # colours: stroke, then fill
        self.RG = self.rg = None
        self.K = self.k = None
        self.Device = self.device = 'DeviceGray'

        self.Tm = IDENTITY          # text matrix
        self.Tlm = IDENTITY         # text line matrix
        self.Tc = 0                 # character spacing
        self.Tw = 0                 # word spacing
        self.Tz = 1                 # horizontal scaling
        self.TL = 0                 # leading
        self.Tf = None              # font name
        self.Tfs = None             # font size
        self.Tr = 0                 # render mode
        self.Ts = 0                 # rise
        self.wm = 0                 # writing mode; 1 is vertical
        self.font = None            # font dictionary

        self.moved = (0, 0)
        self.start = (0, 0)
        self.last = (0, 0)
        self.current = (0, 0)

    def clone(self):
        new = copy.copy(self)
        new.moved = (0, 0)
        return new

    def handler(self, name):
        return self.handlers.get(name)

    # Coordinates

    def user_to_device(self, x, y):
        x, y = dot(self.cm, x, y)
        box = self.refs.get('mediabox') or (0, 0)
        return x - box[0], y - box[1]

    def text_to_user(self, x, y):
        return dot(self.Tm, x, y)

    def text_to_device(self, x, y):
        return self.user_to_device(*self.text_to_user(x, y))

    def text_line_to_user(self, x, y):
        return dot(self.Tlm, x, y)

    def text_line_to_device(self, x, y):
        return self.user_to_device(*self.text_line_to_user(x, y))

    def get_coords(self, node):
        ''' Device coordinates (x1, y1, x2, y2) of the segment drawn
            by a path or text showing operator.
        '''
        if node.name in PATH_OPERATORS or node.name in TEXT_SHOW_OPERATORS:
            return self.user_to_device(*self.last) + \
                self.user_to_device(*self.current)
        return (None, None, None, None)

    # General graphics state

    def op_cm(self, a, b, c, d, e, f):
        self.cm = apply_matrix((a, b, c, d, e, f), self.cm)

    def op_d(self, array, phase):
        self.da = tuple(array)
        self.dp = phase

    def op_g(self, gray):
        self.g = (gray,)
        self.device = 'DeviceGray'

    def op_G(self, gray):
        self.G = (gray,)
        self.Device = 'DeviceGray'

    def op_rg(self, r, g, b):
        self.rg = (r, g, b)
        self.device = 'DeviceRGB'

    def op_RG(self, r, g, b):
        self.RG = (r, g, b)
        self.Device = 'DeviceRGB'

    def op_k(self, c, m, y, k):
        self.k = (c, m, y, k)
        self.device = 'DeviceCMYK'

    def op_K(self, c, m, y, k):
        self.K = (c, m, y, k)
        self.Device = 'DeviceCMYK'

    def op_cs(self, name):
        self.device = name

    def op_CS(self, name):
        self.Device = name

    # Paths

    def op_m(self, x, y):
        self.start = self.last = self.current = (x, y)

    def op_l(self, x, y):
        self.last, self.current = self.current, (x, y)

    def op_h(self):
        self.last, self.current = self.current, self.start

    def op_c(self, x1, y1, x2, y2, x3, y3):
        self.last, self.current = self.current, (x3, y3)

    def op_vy(self, x1, y1, x2, y2):
        self.last, self.current = self.current, (x2, y2)

    def op_re(self, x, y, width, height):
        self.start = self.last = self.current = (x, y)

    # Text

    def op_BT(self):
        self.Tm = self.Tlm = IDENTITY

    def op_Tf(self, fontname, size):
        self.Tf = fontname
        self.Tfs = size
        self.font = self.fontmetrics.get_font_metrics(
            self.refs.get('properties'), fontname)
        self.wm = 0

    def op_Tz(self, scale):
        self.Tz = scale / 100.0

    def op_Td(self, x, y):
        self.Tm = self.Tlm = apply_matrix((1, 0, 0, 1, x, y), self.Tlm)

    def op_TD(self, x, y):
        self.TL = -y
        self.op_Td(x, y)

    def op_Tstar(self):
        self.op_Td(0, -self.TL)

    def op_Tm(self, a, b, c, d, e, f):
        self.Tm = self.Tlm = (a, b, c, d, e, f)

    def advance(self, tx, ty):
        self.moved = (self.moved[0] + tx, self.moved[1] + ty)
        self.Tm = apply_matrix((1, 0, 0, 1, tx, ty), self.Tm)

    def show_text(self, text):
        ''' Render one string and move past it.  In vertical
            mode, or for a renderer that asks for it, each byte
            is rendered (and advanced past) on its own.
        '''
        per_character = getattr(self.renderer, 'per_character', False)
        if self.wm == 1 or per_character:
            parts = [text[i:i + 1] for i in range(len(text))]
        else:
            parts = [text]
        size = self.Tfs or 0
        for part in parts:
            width = self.fontmetrics.string_width(self.font, part)
            self.renderer.render_text(self, part, width)
            spacing = self.Tc * len(part) + self.Tw * bytes(part).count(b' ')
            if self.wm == 0:
                self.advance((width * size + spacing) * self.Tz, 0)
            else:
                self.advance(0, width * size + spacing)

    def op_Tj(self, text):
        self.last = self.text_to_user(0, 0)
        self.show_text(text)
        self.current = self.text_to_user(0, 0)

    def op_TJ(self, array):
        self.last = self.text_to_user(0, 0)
        size = self.Tfs or 0
        for item in array:
            if isinstance(item, (int, float)):
                distance = -item / 1000.0 * size
                if self.wm == 0:
                    self.advance(distance * self.Tz, 0)
                else:
                    self.advance(0, distance)
            else:
                self.show_text(item)
        self.current = self.text_to_user(0, 0)

    def op_quote(self, text):
        self.last = self.text_to_user(0, 0)
        self.op_Tstar()
        self.show_text(text)
        self.current = self.text_to_user(0, 0)

    def op_doublequote(self, wordspace, charspace, text):
        self.Tw = wordspace
        self.Tc = charspace
        self.op_quote(text)


def _setter(name):
    def setter(gs, value):
        setattr(gs, name, value)
    return setter


GRAPHICS_HANDLERS = dict(
    cm=GraphicsState.op_cm,
    d=GraphicsState.op_d,
    g=GraphicsState.op_g,
    G=GraphicsState.op_G,
    rg=GraphicsState.op_rg,
    RG=GraphicsState.op_RG,
    k=GraphicsState.op_k,
    K=GraphicsState.op_K,
    cs=GraphicsState.op_cs,
    CS=GraphicsState.op_CS,
    m=GraphicsState.op_m,
    l=GraphicsState.op_l,
    h=GraphicsState.op_h,
    c=GraphicsState.op_c,
    v=GraphicsState.op_vy,
    y=GraphicsState.op_vy,
    re=GraphicsState.op_re,
)
GRAPHICS_HANDLERS.update((x, _setter(x)) for x in 'w J j M ri i'.split())

ALL_HANDLERS = dict(GRAPHICS_HANDLERS)
ALL_HANDLERS.update({
    'BT': GraphicsState.op_BT,
    'Tf': GraphicsState.op_Tf,
    'Tz': GraphicsState.op_Tz,
    'Td': GraphicsState.op_Td,
    'TD': GraphicsState.op_TD,
    'T*': GraphicsState.op_Tstar,
    'Tm': GraphicsState.op_Tm,
    'Tj': GraphicsState.op_Tj,
    'TJ': GraphicsState.op_TJ,
    "'": GraphicsState.op_quote,
    '"': GraphicsState.op_doublequote,
})
ALL_HANDLERS.update((x, _setter(x)) for x in 'Tc TL Tr Ts Tw'.split())
