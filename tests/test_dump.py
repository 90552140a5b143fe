# local imports
from eosio_analyze.dump import hexdump


def test_hexdump_short():
    s = hexdump(b'AB\x00')
    assert s.startswith('00000000  41 42 00 ')
    assert s.endswith('  |AB.|\n')
    assert len(s) == 10 + 48 + 2 + 5 + 1


def test_hexdump_rows():
    s = hexdump(bytes(range(0x41, 0x41 + 17)))
    lines = s.splitlines()
    assert len(lines) == 2
    assert lines[0].startswith('00000000  41 42 43 44 45 46 47 48  49 4a')
    assert lines[0].endswith('|ABCDEFGHIJKLMNOP|')
    assert lines[1].startswith('00000010  51 ')
    assert lines[1].endswith('|Q|')


def test_hexdump_empty():
    assert hexdump(b'') == ''
