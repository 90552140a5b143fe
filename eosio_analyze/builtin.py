# standard imports
import os
import logging

# local imports
from eosio_analyze.abi import (
        Abi,
        data_dir,
        )
from eosio_analyze.error import SchemaError

logg = logging.getLogger(__name__)

SYSTEM_ACCOUNT = 'eosio'

# contract accounts with an abi shipped in package data
BUILTIN_ACCOUNTS = [
    SYSTEM_ACCOUNT,
    'eosio.token',
    'eosio.msig',
    ]

ABI_FILE_SUFFIX = '.abi.json'

__loaded = {}


def __load(name):
    abi = __loaded.get(name)
    if abi == None:
        path = os.path.join(data_dir, name + ABI_FILE_SUFFIX)
        abi = Abi.from_file(path)
        logg.debug('loaded builtin {} from {}'.format(abi, path))
        __loaded[name] = abi
    return abi


def transaction_abi():
    """Schema of the transaction envelope: actions, headers, signed and packed transactions.
    """
    return __load('transaction')


def builtin_accounts():
    return list(BUILTIN_ACCOUNTS)


def builtin_abi(account):
    """ABI shipped with the package for the given contract account.

    :param account: Contract account name
    :type account: str
    :raises KeyError: No builtin ABI for account
    :rtype: eosio_analyze.abi.Abi
    """
    if account not in BUILTIN_ACCOUNTS:
        raise KeyError('no builtin abi for account "{}"'.format(account))
    return __load(account)


def load_abi_dir(path):
    """Load contract ABIs from a directory of <account>.abi.json files.

    Files that cannot be parsed are skipped with a warning.

    :param path: Directory to scan
    :type path: str
    :rtype: dict
    :returns: Contract account name to ABI
    """
    abis = {}
    for filename in sorted(os.listdir(path)):
        if not filename.endswith(ABI_FILE_SUFFIX):
            continue
        account = filename[:-len(ABI_FILE_SUFFIX)]
        try:
            abis[account] = Abi.from_file(os.path.join(path, filename))
        except (SchemaError, ValueError) as e:
            logg.warning('skipping abi file {}: {}'.format(filename, e))
            continue
        logg.info('loaded abi for {} from {}'.format(account, filename))
    return abis
