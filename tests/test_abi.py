# standard imports
import os
import json
import tempfile

# external imports
import pytest

# local imports
from eosio_analyze.abi import (
        Abi,
        interpret,
        )
from eosio_analyze.builtin import (
        builtin_abi,
        builtin_accounts,
        load_abi_dir,
        transaction_abi,
        )
from eosio_analyze.error import (
        DecodeError,
        SchemaError,
        TruncatedDataError,
        )


def test_abi_interpret(
        demo_abi_bytes,
        ):
    abi = interpret(demo_abi_bytes)
    assert abi.version == 'eosio::abi/1.1'
    assert len(abi.structs) == 2
    assert len(abi.actions) == 1
    assert len(abi.tables) == 0
    assert abi.action_type('hi') == 'hi'
    assert abi.action_type('bye') == None
    assert abi.summary() == 'eosio::abi/1.1, 2 structs, 1 action, 0 tables'


def test_abi_roundtrip(
        demo_abi,
        ):
    abi = interpret(demo_abi.to_bytes())
    assert abi.asdict() == demo_abi.asdict()
    assert Abi.from_bytes(abi.to_bytes()).to_bytes() == demo_abi.to_bytes()


def test_abi_without_variants():
    data = b'\x0eeosio::abi/1.0' + b'\x00' * 7
    abi = interpret(data)
    assert abi.version == 'eosio::abi/1.0'
    assert abi.variants == []
    assert abi.summary() == 'eosio::abi/1.0, 0 structs, 0 actions, 0 tables'


def test_abi_truncated(
        demo_abi_bytes,
        ):
    with pytest.raises(TruncatedDataError):
        interpret(demo_abi_bytes[:10])

    with pytest.raises(DecodeError):
        interpret(demo_abi_bytes[:-2])


def test_abi_from_dict_invalid():
    with pytest.raises(SchemaError):
        Abi.from_dict({'structs': [{'fields': []}]})


def test_abi_resolve():
    abi = builtin_abi('eosio')
    assert abi.resolve('account_name') == 'name'
    assert abi.resolve('name') == 'name'
    assert abi.struct('setcode') != None


def test_builtin():
    assert builtin_accounts() == ['eosio', 'eosio.token', 'eosio.msig']
    for account in builtin_accounts():
        abi = builtin_abi(account)
        assert interpret(abi.to_bytes()).asdict() == abi.asdict()

    token = builtin_abi('eosio.token')
    assert token.action_type('transfer') == 'transfer'
    assert token.table('accounts') != None

    assert transaction_abi().struct('packed_transaction') != None

    with pytest.raises(KeyError):
        builtin_abi('foo')


def test_load_abi_dir(
        demo_abi,
        ):
    d = tempfile.mkdtemp()
    f = open(os.path.join(d, 'hello.abi.json'), 'w')
    json.dump(demo_abi.asdict(), f)
    f.close()
    f = open(os.path.join(d, 'broken.abi.json'), 'w')
    f.write('{"structs": [{}]}')
    f.close()
    f = open(os.path.join(d, 'README'), 'w')
    f.write('not an abi')
    f.close()

    abis = load_abi_dir(d)
    assert list(abis.keys()) == ['hello']
    assert abis['hello'].asdict() == demo_abi.asdict()
