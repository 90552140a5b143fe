# external imports
import pytest

# local imports
from eosio_analyze.name import (
        str_to_name,
        name_to_str,
        )


def test_name_known_value():
    assert str_to_name('eosio') == 6138663577826885632
    assert name_to_str(6138663577826885632) == 'eosio'


def test_name_empty():
    assert str_to_name('') == 0
    assert name_to_str(0) == ''


@pytest.mark.parametrize(
        'name',
        [
            'eosio.token',
            'alice',
            'a.b.c',
            '12345abcdefgh',
            'zzzzzzzzzzzzj',
            ],
        )
def test_name_roundtrip(name):
    assert name_to_str(str_to_name(name)) == name


@pytest.mark.parametrize(
        'name',
        [
            'Alice',
            'alice6',
            'abcdefghijklmn',
            'zzzzzzzzzzzzk',
            ],
        )
def test_name_invalid(name):
    with pytest.raises(ValueError):
        str_to_name(name)
