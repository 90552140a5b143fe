DUMP_WIDTH = 16


def _printable(b):
    if b >= 0x20 and b < 0x7f:
        return chr(b)
    return '.'


def hexdump(data, width=DUMP_WIDTH):
    """Render bytes as offset, hex and ascii columns, one row per width bytes.

    :param data: Bytes to render
    :type data: bytes
    :rtype: str
    :returns: Dump, newline terminated; empty string for empty input
    """
    half = width // 2
    lines = []
    for offset in range(0, len(data), width):
        chunk = data[offset:offset+width]
        cols = ['{:02x}'.format(b) for b in chunk]
        hx = ' '.join(cols[:half])
        if len(cols) > half:
            hx += '  ' + ' '.join(cols[half:])
        lines.append('{:08x}  {}  |{}|\n'.format(
            offset,
            hx.ljust(width * 3),
            ''.join([_printable(b) for b in chunk]),
            ))
    return ''.join(lines)
