# external imports
import pytest

# local imports
from eosio_analyze.action import (
        AbiCache,
        ActionKind,
        decode_action,
        resolve,
        )
from eosio_analyze.builtin import builtin_abi
from eosio_analyze.error import (
        TruncatedDataError,
        UnknownTypeError,
        )
from eosio_analyze.abi import Abi
from tests.fixtures_abi import DEMO_ACCOUNT
from tests.fixtures_transaction import (
        make_action,
        setabi_data,
        setcode_data,
        transfer_data,
        )


def test_abi_cache_precedence(
        demo_abi,
        ):
    abis = AbiCache()
    assert 'eosio.token' in abis
    assert DEMO_ACCOUNT not in abis
    assert not abis.installed('eosio.token')

    abis.add('eosio.token', demo_abi)
    assert abis.get('eosio.token') is demo_abi
    assert abis.installed('eosio.token')


def test_abi_cache_empty_seed():
    abis = AbiCache(seed={})
    assert 'eosio' not in abis
    act = make_action('eosio.token', 'transfer', transfer_data())
    (kind, abi, type_name) = resolve(act, abis)
    assert kind == ActionKind.OPAQUE


def test_resolve_system_actions():
    abis = AbiCache(seed={})
    act = make_action('eosio', 'setcode', setcode_data(b'\x00asm'))
    (kind, abi, type_name) = resolve(act, abis)
    assert kind == ActionKind.SET_CODE
    assert abi is builtin_abi('eosio')
    assert type_name == 'setcode'

    act = make_action('eosio', 'setabi', b'')
    (kind, abi, type_name) = resolve(act, abis)
    assert kind == ActionKind.SET_ABI

    act = make_action('eosio', 'newaccount', b'')
    (kind, abi, type_name) = resolve(act, abis)
    assert kind == ActionKind.OPAQUE


def test_decode_setcode():
    r = decode_action(make_action('eosio', 'setcode', setcode_data(b'\x00asm')), AbiCache())
    assert r.ok()
    assert r.kind == ActionKind.SET_CODE
    assert r.value['account'] == 'alice'
    assert r.value['code'] == b'\x00asm'
    assert r.source == 'preloaded'


def test_decode_contract():
    r = decode_action(make_action('eosio.token', 'transfer', transfer_data()), AbiCache())
    assert r.ok()
    assert r.kind == ActionKind.CONTRACT
    assert r.type_name == 'transfer'
    assert r.source == 'preloaded'
    assert r.value == {
        'from': 'alice',
        'to': 'bob',
        'quantity': '1.0000 EOS',
        'memo': 'thanks',
        }


def test_decode_installed(
        demo_abi,
        demo_payload,
        ):
    abis = AbiCache()
    act = make_action(DEMO_ACCOUNT, 'hi', demo_payload)
    r = decode_action(act, abis)
    assert r.kind == ActionKind.OPAQUE
    assert r.value == demo_payload

    abis.add(DEMO_ACCOUNT, demo_abi)
    r = decode_action(act, abis)
    assert r.kind == ActionKind.CONTRACT
    assert r.source == 'transaction'
    assert r.value['user'] == 'bob'
    assert r.value['times'] == 2


def test_decode_undeclared_action():
    r = decode_action(make_action('eosio.token', 'mint', b'\x01'), AbiCache())
    assert r.ok()
    assert r.kind == ActionKind.OPAQUE
    assert r.value == b'\x01'


def test_decode_truncated():
    data = transfer_data()[:-3]
    r = decode_action(make_action('eosio.token', 'transfer', data), AbiCache())
    assert not r.ok()
    assert r.kind == ActionKind.CONTRACT
    assert isinstance(r.error, TruncatedDataError)
    assert r.value == None


def test_decode_bad_schema():
    abis = AbiCache()
    abis.add(DEMO_ACCOUNT, Abi.from_dict({'actions': [{'name': 'hi', 'type': 'nope'}]}))
    r = decode_action(make_action(DEMO_ACCOUNT, 'hi', b'\x00'), abis)
    assert not r.ok()
    assert isinstance(r.error, UnknownTypeError)
