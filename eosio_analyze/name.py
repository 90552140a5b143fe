"""Codec for the 64-bit base32 identifiers used for accounts, actions and permissions.

Twelve symbols of five bits each are packed from the most significant end, and an optional thirteenth symbol uses the remaining four bits.
"""

NAME_CHARMAP = '.12345abcdefghijklmnopqrstuvwxyz'
NAME_MAX_LENGTH = 13


def _char_to_symbol(c):
    i = NAME_CHARMAP.find(c)
    if i < 0 or c == '':
        raise ValueError('invalid name character "{}"'.format(c))
    return i


def str_to_name(s):
    """Encode a name string to its integer value.

    :param s: Name string
    :type s: str
    :raises ValueError: Name is too long or contains invalid characters
    :rtype: int
    :returns: Name value
    """
    if len(s) > NAME_MAX_LENGTH:
        raise ValueError('name "{}" longer than {} characters'.format(s, NAME_MAX_LENGTH))
    v = 0
    for i in range(NAME_MAX_LENGTH):
        c = 0
        if i < len(s):
            c = _char_to_symbol(s[i])
        if i < 12:
            v |= (c & 0x1f) << (64 - 5 * (i + 1))
        else:
            if c > 0x0f:
                raise ValueError('invalid last character in name "{}"'.format(s))
            v |= c
    return v


def name_to_str(v):
    """Decode an integer name value to its string form.

    :param v: Name value
    :type v: int
    :rtype: str
    :returns: Name string, trailing dots removed
    """
    if v < 0 or v >= 1 << 64:
        raise ValueError('name value {} out of range'.format(v))
    r = ['.'] * NAME_MAX_LENGTH
    for i in range(NAME_MAX_LENGTH):
        if i == 0:
            r[12] = NAME_CHARMAP[v & 0x0f]
            v >>= 4
        else:
            r[12 - i] = NAME_CHARMAP[v & 0x1f]
            v >>= 5
    return ''.join(r).rstrip('.')
