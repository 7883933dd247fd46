# A part of pdfrev
# Copyright (C) 2017  Jon Lund Steffensen
# MIT license -- See LICENSE.txt for details

'''
The standard security handler, classic revision (/V 1, /R 2).

Key derivation uses MD5, and strings and streams are ciphered
with RC4 under a per-object key.  RC4 is its own inverse, so the
same operation encrypts and decrypts.
'''

import hashlib
import struct

from Crypto.Cipher import ARC4

from .objects import PdfDict, PdfName, PdfNumber, PdfString, PdfReference
from .errors import (log, PdfSecurityError, PdfUnsupportedSecurityError,
                     PdfPasswordError)

_PASSWORD_PAD = bytes.fromhex(
    '28bf4e5e4e758a4164004e56fffa0108'
    '2e2e00b6d0683e802f0ca9fe6453697a')

# Bits 0 and 1 are reserved and must be 0; bits 2-5 are
# print, modify, copy and add; everything else must be 1.
_PERMISSION_BITS = (1 << 2, 1 << 3, 1 << 4, 1 << 5)
_PERMISSION_BASE = 0xFFFFFFFF & ~(3 | sum(_PERMISSION_BITS))


def pad_password(password):
    ''' Pad or truncate a password to 32 bytes (Algorithm 2, step 1)
    '''
    if password is None:
        password = b''
    elif isinstance(password, str):
        password = password.encode('latin-1')
    return (password + _PASSWORD_PAD)[:32]


def rc4(key, data):
    return ARC4.new(key).encrypt(data)


def encode_permissions(print_ok=True, modify_ok=True, copy_ok=True,
                       add_ok=True):
    ''' Pack the four permission flags into the signed 32-bit /P value.
    '''
    perms = _PERMISSION_BASE
    for flag, bit in zip((print_ok, modify_ok, copy_ok, add_ok),
                         _PERMISSION_BITS):
        if flag:
            perms |= bit
    return struct.unpack('<i', struct.pack('<I', perms))[0]


def decode_permissions(perms):
    ''' Unpack a /P value into (print, modify, copy, add)
    '''
    perms = int(perms) & 0xFFFFFFFF
    return tuple(bool(perms & bit) for bit in _PERMISSION_BITS)


def permission_bytes(perms):
    ''' The /P value as it goes into the key hash: four bytes,
        little-endian, whatever the host byte order.
    '''
    return struct.pack('<I', int(perms) & 0xFFFFFFFF)


class StandardSecurityHandler(object):
    ''' Security context for one opened document.

        O, U and ID are bytes, P is the integer permission
        value, and encrypt_objnum is the number of the encryption
        dictionary object, which is never ciphered.  Nothing here
        changes once the passwords have been verified, except the
        cache of per-object keys.
    '''

    def __init__(self, O, U, P, ID, encrypt_objnum=None):
        self.O = bytes(O)
        self.U = bytes(U)
        self.P = int(P)
        self.ID = bytes(ID or b'')
        self.encrypt_objnum = encrypt_objnum
        self.code = None
        self.opassword = None
        self.upassword = None
        self.keycache = {}

    @classmethod
    def from_document(cls, doc, opassword=None, upassword=None, prompt=None,
                      max_attempts=3):
        ''' Build the handler for doc from its /Encrypt dictionary
            and check the passwords.

            If prompt is given, it is called as prompt(attempt) after
            each failure, and should return a new (opassword, upassword)
            pair, or None to give up.
        '''
        encrypt = doc.trailer.Encrypt
        encrypt_objnum = None
        if isinstance(encrypt, PdfReference):
            encrypt_objnum = int(encrypt)
        encrypt = doc.resolve(encrypt)
        if not isinstance(encrypt, PdfDict):
            raise PdfSecurityError('Invalid /Encrypt entry in trailer')
        if encrypt.Filter != PdfName.Standard:
            raise PdfUnsupportedSecurityError(
                'Unsupported encryption filter %s' % encrypt.Filter)
        version = encrypt.V
        if version is None or int(doc.resolve(version)) != 1:
            raise PdfUnsupportedSecurityError(
                'Unsupported encryption version %s' % version)
        missing = [x for x in ('O', 'U', 'P')
                   if encrypt.get(PdfName(x)) is None]
        if missing:
            raise PdfSecurityError('Encryption dictionary is missing /%s'
                                   % ', /'.join(missing))

        self = cls(doc.resolve(encrypt.O), doc.resolve(encrypt.U),
                   int(doc.resolve(encrypt.P)), doc.ID, encrypt_objnum)

        attempt = 0
        while not self.check_pass(opassword, upassword):
            attempt += 1
            credentials = None
            if prompt is not None and attempt < max_attempts:
                credentials = prompt(attempt)
            if credentials is None:
                raise PdfPasswordError('Incorrect password(s); '
                                       'cannot open the document')
            opassword, upassword = credentials
        return self

    def compute_hash(self, password):
        ''' The file key for a password (Algorithm 2)
        '''
        hasher = hashlib.md5()
        hasher.update(pad_password(password))
        hasher.update(self.O)
        hasher.update(permission_bytes(self.P))
        hasher.update(self.ID[:16])
        return hasher.digest()[:5]

    def compute_o(self, opassword, upassword):
        ''' The /O value (Algorithm 3)
        '''
        key = hashlib.md5(pad_password(opassword)).digest()[:5]
        return rc4(key, pad_password(upassword))

    def compute_u(self, upassword):
        ''' The /U value (Algorithm 4).  It depends on /O,
            so /O has to be set first.
        '''
        return rc4(self.compute_hash(upassword), _PASSWORD_PAD)

    def check_pass(self, opassword, upassword):
        ''' Recompute /O and /U from the candidate passwords and
            compare with the stored values.  Without an owner
            password only /U is checked.  On success, the file
            key is derived from the user password.
        '''
        if upassword is None:
            upassword = b''
        if (opassword is not None and
                self.compute_o(opassword, upassword) != self.O):
            log.debug('Owner password check failed')
            return False
        if self.compute_u(upassword) != self.U:
            log.debug('User password check failed')
            return False
        self.opassword = opassword
        self.upassword = upassword
        self.code = self.compute_hash(upassword)
        self.keycache = {}
        return True

    def compute_key(self, objnum, gennum):
        ''' The RC4 key for one object (Algorithm 1)
        '''
        cachekey = objnum, gennum
        key = self.keycache.get(cachekey)
        if key is None:
            hasher = hashlib.md5(self.code)
            hasher.update(struct.pack('<I', objnum & 0xFFFFFFFF)[:3])
            hasher.update(struct.pack('<I', gennum & 0xFFFFFFFF)[:2])
            key = self.keycache[cachekey] = hasher.digest()[:10]
        return key

    def crypt(self, data, objnum, gennum):
        ''' Encrypt or decrypt data belonging to an object.
            Loose values (objnum None) and the encryption
            dictionary itself are passed through unchanged.
        '''
        if objnum is None or objnum == self.encrypt_objnum or not data:
            return data
        if self.code is None:
            raise PdfSecurityError('Passwords have not been verified')
        return rc4(self.compute_key(objnum, gennum or 0), bytes(data))

    encrypt = decrypt = crypt

    def permissions(self):
        return decode_permissions(self.P)

    @classmethod
    def set_passwords(cls, doc, opassword, upassword, perms=None):
        ''' Encrypt doc with new passwords and permissions.

            Every object is marked changed (all strings and streams
            need to be ciphered again with the new key), so the
            document has to be written out with a full save.
        '''
        if perms is None:
            perms = encode_permissions()
        if opassword is None:
            opassword = upassword
        doc.clean()

        trailer = doc.trailer
        if trailer.ID is None or not doc.ID:
            doc.create_id()

        self = cls(b'', b'', perms, doc.ID)
        self.O = self.compute_o(opassword, upassword)
        self.U = self.compute_u(upassword)

        encrypt = PdfDict(
            Filter=PdfName.Standard,
            V=PdfNumber(1),
            R=PdfNumber(2),
            P=PdfNumber(perms),
            O=PdfString(self.O, hexstring=True),
            U=PdfString(self.U, hexstring=True),
        )
        old = trailer.Encrypt
        if isinstance(old, PdfReference):
            objnum = int(old)
            doc.replace_object(objnum, encrypt)
        else:
            objnum = doc.append_object(encrypt)
            trailer.Encrypt = PdfReference(objnum)
        self.encrypt_objnum = objnum

        if not self.check_pass(opassword, upassword):
            raise PdfSecurityError('Internal error: new passwords '
                                   'do not verify')
        doc.crypt = self
        return self
