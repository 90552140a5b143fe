# standard imports
import hashlib
import calendar
import datetime
import struct

# external imports
import pytest

# local imports
from eosio_analyze.transaction import (
        Compression,
        PackedTransaction,
        Transaction,
        to_compression,
        )
from eosio_analyze.error import UnpackError
from tests.fixtures_transaction import (
        EXPIRATION,
        WIRE_SIGNATURE,
        make_action,
        make_packed,
        make_transaction,
        transfer_data,
        )


def test_transaction_header_layout():
    tx = make_transaction([])
    b = tx.to_bytes()
    expire = calendar.timegm(datetime.datetime(2018, 6, 15, 19, 17, 47).timetuple())
    assert b[:4] == struct.pack('<I', expire)
    assert b[4:6] == struct.pack('<H', 1234)
    assert b[6:10] == struct.pack('<I', 0xdeadbeef)
    # empty net, cpu, delay, context free actions, actions and extensions
    assert b[10:] == b'\x00' * 6


def test_transaction_roundtrip():
    act = make_action('eosio.token', 'transfer', transfer_data())
    tx = make_transaction([act])
    tx_decoded = Transaction.from_bytes(tx.to_bytes())
    assert tx_decoded.asdict() == tx.asdict()
    assert tx_decoded.expiration.strftime('%Y-%m-%dT%H:%M:%S') == EXPIRATION
    assert str(tx_decoded.actions[0].authorization[0]) == 'alice@active'


def test_packed_unpack(
        transfer_trx,
        ):
    stx = transfer_trx.unpack()
    assert stx.signatures == [WIRE_SIGNATURE]
    assert stx.context_free_data == []
    assert len(stx.transaction.actions) == 1
    act = stx.transaction.actions[0]
    assert act.account == 'eosio.token'
    assert act.name == 'transfer'
    assert act.data == transfer_data()
    assert stx.transaction.ref_block_prefix == 0xdeadbeef


def test_unpack_once(
        transfer_trx,
        ):
    assert transfer_trx.unpack() is transfer_trx.unpack()


def test_id():
    act = make_action('eosio.token', 'transfer', transfer_data())
    trx = make_packed([act])
    h = hashlib.sha256(trx.packed_trx).hexdigest()
    assert trx.id() == h

    trx_zlib = make_packed([act], compression=Compression.ZLIB)
    assert trx_zlib.packed_trx != trx.packed_trx
    assert trx_zlib.id() == h


def test_zlib():
    act = make_action('eosio.token', 'transfer', transfer_data())
    trx = make_packed([act], context_free_data=[b'\x01\x02', b''], compression='zlib')
    assert trx.compression_name() == 'zlib'
    stx = trx.unpack()
    assert stx.context_free_data == [b'\x01\x02', b'']
    assert stx.transaction.actions[0].data == transfer_data()


def test_dict_roundtrip(
        transfer_trx,
        ):
    o = transfer_trx.asdict()
    assert o['compression'] == 'none'
    trx = PackedTransaction.from_dict(o)
    assert trx.id() == transfer_trx.id()
    assert trx.unpack().transaction.asdict() == transfer_trx.unpack().transaction.asdict()


def test_wire_roundtrip(
        transfer_trx,
        ):
    trx = PackedTransaction.from_bytes(transfer_trx.to_bytes())
    assert trx.signatures == [WIRE_SIGNATURE]
    assert trx.packed_trx == transfer_trx.packed_trx
    assert trx.compression == Compression.NONE


def test_compression():
    assert to_compression('none') == Compression.NONE
    assert to_compression(1) == Compression.ZLIB
    with pytest.raises(UnpackError):
        to_compression('lzma')
    with pytest.raises(UnpackError):
        to_compression(2)


def test_unpack_malformed(
        transfer_trx,
        ):
    trx = PackedTransaction(packed_trx=b'\x01\x02')
    with pytest.raises(UnpackError):
        trx.unpack()

    trx = PackedTransaction(packed_trx=transfer_trx.packed_trx, compression='zlib')
    with pytest.raises(UnpackError):
        trx.unpack()

    trx = PackedTransaction(packed_trx=transfer_trx.packed_trx, compression=7)
    assert trx.compression_name() == 'unknown (7)'
    with pytest.raises(UnpackError):
        trx.unpack()

    trx = PackedTransaction(packed_trx=transfer_trx.packed_trx, packed_context_free_data=b'\x05')
    with pytest.raises(UnpackError):
        trx.unpack()


def test_from_dict_invalid():
    with pytest.raises(UnpackError):
        PackedTransaction.from_dict({'signatures': []})

    with pytest.raises(UnpackError):
        PackedTransaction.from_dict({'packed_trx': 'xyz'})


def test_from_bytes_invalid():
    with pytest.raises(UnpackError):
        PackedTransaction.from_bytes(b'\x01\x00')
