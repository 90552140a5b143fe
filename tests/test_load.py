# standard imports
import json

# external imports
import pytest

# local imports
from eosio_analyze.load import load_packed
from eosio_analyze.error import UnpackError
from tests.fixtures_transaction import (
        EXPIRATION,
        transfer_data,
        )


def test_load_json_packed(
        transfer_trx,
        ):
    trx = load_packed(json.dumps(transfer_trx.asdict()))
    assert trx.id() == transfer_trx.id()


def test_load_json_signed():
    o = {
        'expiration': EXPIRATION,
        'ref_block_num': 1,
        'ref_block_prefix': 2,
        'actions': [
            {
                'account': 'eosio.token',
                'name': 'transfer',
                'authorization': [
                    {'actor': 'alice', 'permission': 'active'},
                    ],
                'data': transfer_data().hex(),
                },
            ],
        'signatures': [],
        'context_free_data': ['0xabcd'],
        }
    trx = load_packed(json.dumps(o).encode('utf-8'))
    stx = trx.unpack()
    assert stx.transaction.ref_block_prefix == 2
    assert stx.transaction.actions[0].data == transfer_data()
    assert stx.context_free_data == [b'\xab\xcd']


def test_load_hex(
        transfer_trx,
        ):
    s = '0x' + transfer_trx.to_bytes().hex() + '\n'
    trx = load_packed(s)
    assert trx.id() == transfer_trx.id()


def test_load_binary(
        transfer_trx,
        ):
    trx = load_packed(transfer_trx.to_bytes())
    assert trx.id() == transfer_trx.id()


@pytest.mark.parametrize(
        'content',
        [
            '{"foo": 1}',
            '{bad',
            '[]',
            '{"expiration": "2018-06-15T19:17:47", "actions": [{"account": "Alice", "name": "x"}]}',
            '{"expiration": "2018-06-15T19:17:47", "actions": [{"account": "alice", "name": "x", "data": "0xabc"}]}',
            'abc',
            '',
            ],
        )
def test_load_invalid(content):
    with pytest.raises(UnpackError):
        load_packed(content)
