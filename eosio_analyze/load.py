# standard imports
import json
import logging

# local imports
from eosio_analyze.codec import hex_to_bytes
from eosio_analyze.transaction import (
        PackedTransaction,
        SignedTransaction,
        )
from eosio_analyze.error import (
        EncodeError,
        UnpackError,
        )

logg = logging.getLogger(__name__)


def __load_json(o):
    if not isinstance(o, dict):
        raise UnpackError('expected a json object, got {}'.format(type(o).__name__))
    if 'packed_trx' in o:
        logg.debug('input is json packed transaction')
        return PackedTransaction.from_dict(o)
    if 'expiration' in o:
        logg.debug('input is json signed transaction')
        try:
            stx = SignedTransaction.from_dict(o)
        except (KeyError, ValueError, TypeError) as e:
            raise UnpackError('invalid signed transaction: {}'.format(e))
        try:
            return PackedTransaction.from_signed(stx, compression=o.get('compression', 'none'))
        except EncodeError as e:
            raise UnpackError('cannot pack signed transaction: {}'.format(e))
    raise UnpackError('json object is neither a packed nor a signed transaction')


def load_packed(content):
    """Create a packed transaction from whatever form the input has.

    Recognized forms are a json packed transaction, a json signed transaction with hex action data, hex text of the wire form and the raw wire form.

    :param content: Input
    :type content: bytes or str
    :raises UnpackError: Input is not recognized as a transaction
    :rtype: eosio_analyze.transaction.PackedTransaction
    """
    if isinstance(content, str):
        content = content.encode('utf-8')

    text = None
    try:
        text = content.decode('utf-8').strip()
    except UnicodeDecodeError:
        pass

    if text != None and text[:1] in ['{', '[']:
        try:
            o = json.loads(text)
        except ValueError as e:
            raise UnpackError('invalid json input: {}'.format(e))
        return __load_json(o)

    if text:
        try:
            data = hex_to_bytes(''.join(text.split()))
            logg.debug('input is hex wire transaction')
            return PackedTransaction.from_bytes(data)
        except ValueError:
            pass

    logg.debug('input is binary wire transaction')
    return PackedTransaction.from_bytes(content)
