# standard imports
import enum
import logging

# local imports
from eosio_analyze.codec import decode
from eosio_analyze.builtin import (
        SYSTEM_ACCOUNT,
        builtin_abi,
        builtin_accounts,
        )
from eosio_analyze.error import DecodeError

logg = logging.getLogger(__name__)


@enum.unique
class ActionKind(enum.Enum):
    """How an action payload is interpreted in a report

    - SET_CODE: system action installing contract code
    - SET_ABI: system action installing a contract ABI
    - CONTRACT: payload resolvable with a known ABI for the action's account
    - OPAQUE: no schema for the payload, shown as raw bytes
    """
    SET_CODE = 'setcode'
    SET_ABI = 'setabi'
    CONTRACT = 'contract'
    OPAQUE = 'opaque'


SYSTEM_ACTIONS = {
    'setcode': ActionKind.SET_CODE,
    'setabi': ActionKind.SET_ABI,
    }


class AbiCache:
    """ABIs available to resolve action payloads during a single report pass.

    ABIs installed during the pass take precedence over the seeded ones.

    :param seed: Account name to ABI mapping to start from; builtin ABIs are used if None
    :type seed: dict
    """
    def __init__(self, seed=None):
        if seed == None:
            seed = {}
            for account in builtin_accounts():
                seed[account] = builtin_abi(account)
        self.__seed = dict(seed)
        self.__installed = {}


    def add(self, account, abi):
        logg.debug('abi for {} installed in pass: {}'.format(account, abi))
        self.__installed[account] = abi


    def get(self, account):
        abi = self.__installed.get(account)
        if abi == None:
            abi = self.__seed.get(account)
        return abi


    def installed(self, account):
        return account in self.__installed


    def __contains__(self, account):
        return self.get(account) != None


class DecodedAction:
    """Result of interpreting an action payload.

    :param kind: Interpretation applied
    :type kind: ActionKind
    :param action: Action the payload belongs to
    :type action: eosio_analyze.transaction.Action
    :param type_name: Struct the payload was decoded as, None for opaque payloads
    :type type_name: str
    :param value: Decoded payload, or raw bytes for opaque payloads
    :param error: Decode error, if decoding failed
    :type error: eosio_analyze.error.DecodeError
    """
    def __init__(self, kind, action, type_name=None, value=None, error=None, source=None):
        self.kind = kind
        self.action = action
        self.type_name = type_name
        self.value = value
        self.error = error
        self.source = source


    def ok(self):
        return self.error == None


def resolve(action, abis):
    """Determine how the payload of an action is to be decoded.

    :param action: Action to resolve
    :type action: eosio_analyze.transaction.Action
    :param abis: ABIs known in the current pass
    :type abis: AbiCache
    :rtype: tuple
    :returns: ActionKind, ABI and payload type name; ABI and type are None for opaque payloads
    """
    if action.account == SYSTEM_ACCOUNT and action.name in SYSTEM_ACTIONS:
        return (SYSTEM_ACTIONS[action.name], builtin_abi(SYSTEM_ACCOUNT), action.name,)

    abi = abis.get(action.account)
    if abi != None:
        type_name = abi.action_type(action.name)
        if type_name != None:
            return (ActionKind.CONTRACT, abi, type_name,)
        logg.debug('abi for {} does not declare action {}'.format(action.account, action.name))

    return (ActionKind.OPAQUE, None, None,)


def decode_action(action, abis):
    """Resolve and decode an action payload.

    Decode errors are captured on the result instead of being raised.

    :rtype: DecodedAction
    """
    (kind, abi, type_name) = resolve(action, abis)
    if kind == ActionKind.OPAQUE:
        return DecodedAction(kind, action, value=action.data)

    source = 'preloaded'
    if kind == ActionKind.CONTRACT and abis.installed(action.account):
        source = 'transaction'
    try:
        value = decode(action.data, type_name, abi)
    except DecodeError as e:
        logg.warning('could not decode {} payload as {}: {}'.format(action, type_name, e))
        return DecodedAction(kind, action, type_name=type_name, error=e, source=source)

    return DecodedAction(kind, action, type_name=type_name, value=value, source=source)
