# standard imports
import enum
import logging
import hashlib
import datetime
import zlib

# local imports
from eosio_analyze.codec import (
        decode,
        encode,
        hex_to_bytes,
        TIME_FORMAT,
        )
from eosio_analyze.builtin import transaction_abi
from eosio_analyze.error import (
        DecodeError,
        UnpackError,
        )

logg = logging.getLogger(__name__)


@enum.unique
class Compression(enum.IntEnum):
    """Compression applied to the packed transaction and context free data
    """
    NONE = 0
    ZLIB = 1


def to_compression(v):
    """Parse compression given either as its integer wire value or its lowercase name.

    :raises UnpackError: Unknown compression
    :rtype: Compression
    """
    try:
        if isinstance(v, str):
            return Compression[v.upper()]
        return Compression(v)
    except (KeyError, ValueError):
        raise UnpackError('unknown compression {!r}'.format(v))


def parse_time(v):
    if isinstance(v, datetime.datetime):
        if v.tzinfo == None:
            return v.replace(tzinfo=datetime.timezone.utc)
        return v
    s = v.rstrip('Z').split('.')[0]
    return datetime.datetime.strptime(s, TIME_FORMAT).replace(tzinfo=datetime.timezone.utc)


class Authorization:

    def __init__(self, actor, permission):
        self.actor = actor
        self.permission = permission


    def asdict(self):
        return {
            'actor': self.actor,
            'permission': self.permission,
            }


    @classmethod
    def from_dict(cls, o):
        return cls(o['actor'], o['permission'])


    def __str__(self):
        return '{}@{}'.format(self.actor, self.permission)


class Action:
    """A single contract invocation inside a transaction.

    :param account: Contract account that owns the action
    :type account: str
    :param name: Action name within the contract
    :type name: str
    :param authorization: Permission levels authorizing the action, in signing order
    :type authorization: list of Authorization
    :param data: Serialized action payload
    :type data: bytes
    """
    def __init__(self, account, name, authorization=None, data=b''):
        self.account = account
        self.name = name
        self.authorization = list(authorization or [])
        self.data = bytes(data)


    def asdict(self):
        return {
            'account': self.account,
            'name': self.name,
            'authorization': [a.asdict() for a in self.authorization],
            'data': self.data,
            }


    @classmethod
    def from_dict(cls, o):
        return cls(
            o['account'],
            o['name'],
            authorization=[Authorization.from_dict(a) for a in o.get('authorization', [])],
            data=hex_to_bytes(o.get('data', b'')),
            )


    def __str__(self):
        return '{}::{}'.format(self.account, self.name)


class Transaction:
    """Transaction header and action lists.

    :param expiration: Time after which the transaction can no longer be included in a block
    :type expiration: datetime.datetime
    """
    def __init__(self, expiration, ref_block_num=0, ref_block_prefix=0, max_net_usage_words=0, max_cpu_usage_ms=0, delay_sec=0, context_free_actions=None, actions=None, transaction_extensions=None):
        self.expiration = parse_time(expiration)
        self.ref_block_num = ref_block_num
        self.ref_block_prefix = ref_block_prefix
        self.max_net_usage_words = max_net_usage_words
        self.max_cpu_usage_ms = max_cpu_usage_ms
        self.delay_sec = delay_sec
        self.context_free_actions = list(context_free_actions or [])
        self.actions = list(actions or [])
        self.transaction_extensions = list(transaction_extensions or [])


    def asdict(self):
        return {
            'expiration': self.expiration.strftime(TIME_FORMAT),
            'ref_block_num': self.ref_block_num,
            'ref_block_prefix': self.ref_block_prefix,
            'max_net_usage_words': self.max_net_usage_words,
            'max_cpu_usage_ms': self.max_cpu_usage_ms,
            'delay_sec': self.delay_sec,
            'context_free_actions': [a.asdict() for a in self.context_free_actions],
            'actions': [a.asdict() for a in self.actions],
            'transaction_extensions': self.transaction_extensions,
            }


    @classmethod
    def from_dict(cls, o):
        return cls(
            o['expiration'],
            ref_block_num=o.get('ref_block_num', 0),
            ref_block_prefix=o.get('ref_block_prefix', 0),
            max_net_usage_words=o.get('max_net_usage_words', 0),
            max_cpu_usage_ms=o.get('max_cpu_usage_ms', 0),
            delay_sec=o.get('delay_sec', 0),
            context_free_actions=[Action.from_dict(a) for a in o.get('context_free_actions', [])],
            actions=[Action.from_dict(a) for a in o.get('actions', [])],
            transaction_extensions=[{'type': e['type'], 'data': hex_to_bytes(e['data'])} for e in o.get('transaction_extensions', [])],
            )


    def to_bytes(self):
        return encode(self.asdict(), 'transaction', transaction_abi())


    @classmethod
    def from_bytes(cls, data):
        o = decode(data, 'transaction', transaction_abi())
        return cls.from_dict(o)


class SignedTransaction:

    def __init__(self, transaction, signatures=None, context_free_data=None):
        self.transaction = transaction
        self.signatures = list(signatures or [])
        self.context_free_data = list(context_free_data or [])


    @classmethod
    def from_dict(cls, o):
        return cls(
            Transaction.from_dict(o),
            signatures=o.get('signatures', []),
            context_free_data=[hex_to_bytes(d) for d in o.get('context_free_data', [])],
            )


class PackedTransaction:
    """Outermost form of a transaction as it is submitted to a node.

    Unpacking is done once; later calls return the same SignedTransaction.

    :param signatures: Signatures over the transaction, kept opaque
    :type signatures: list of str
    :param compression: Compression of the packed fields, as integer or name
    :type compression: int or str
    :param packed_context_free_data: Serialized, possibly compressed, list of context free data blobs
    :type packed_context_free_data: bytes
    :param packed_trx: Serialized, possibly compressed, transaction
    :type packed_trx: bytes
    """
    def __init__(self, signatures=None, compression=Compression.NONE, packed_context_free_data=b'', packed_trx=b''):
        self.signatures = list(signatures or [])
        self.compression = compression
        self.packed_context_free_data = bytes(packed_context_free_data)
        self.packed_trx = bytes(packed_trx)
        self.__signed = None


    def __inflate(self, data):
        if to_compression(self.compression) == Compression.ZLIB:
            try:
                return zlib.decompress(data)
            except zlib.error as e:
                raise UnpackError('zlib decompression failed: {}'.format(e))
        return data


    def compression_name(self):
        try:
            return to_compression(self.compression).name.lower()
        except UnpackError:
            return 'unknown ({})'.format(self.compression)


    def unpacked_trx(self):
        return self.__inflate(self.packed_trx)


    def id(self):
        """Transaction id, the sha256 of the uncompressed transaction bytes.

        :raises UnpackError: Transaction bytes cannot be decompressed
        :rtype: str
        :returns: Hex digest
        """
        return hashlib.sha256(self.unpacked_trx()).hexdigest()


    def unpack(self):
        """Decode the signed transaction carried by the packed fields.

        :raises UnpackError: Decompression or decoding failed
        :rtype: SignedTransaction
        """
        if self.__signed != None:
            return self.__signed

        try:
            tx = Transaction.from_bytes(self.unpacked_trx())
        except DecodeError as e:
            raise UnpackError('cannot decode transaction: {}'.format(e))

        context_free_data = []
        if len(self.packed_context_free_data) > 0:
            try:
                context_free_data = decode(self.__inflate(self.packed_context_free_data), 'bytes[]')
            except DecodeError as e:
                raise UnpackError('cannot decode context free data: {}'.format(e))

        logg.debug('unpacked transaction with {} actions, {} context free actions'.format(len(tx.actions), len(tx.context_free_actions)))
        self.__signed = SignedTransaction(tx, self.signatures, context_free_data)
        return self.__signed


    def asdict(self):
        return {
            'signatures': self.signatures,
            'compression': self.compression_name(),
            'packed_context_free_data': self.packed_context_free_data.hex(),
            'packed_trx': self.packed_trx.hex(),
            }


    def to_bytes(self):
        o = {
            'signatures': self.signatures,
            'compression': int(to_compression(self.compression)),
            'packed_context_free_data': self.packed_context_free_data,
            'packed_trx': self.packed_trx,
            }
        return encode(o, 'packed_transaction', transaction_abi())


    @classmethod
    def from_dict(cls, o):
        """Create from the JSON form, with hex encoded packed fields.

        :raises UnpackError: Required fields missing or not valid hex
        """
        try:
            return cls(
                signatures=o.get('signatures', []),
                compression=o.get('compression', Compression.NONE),
                packed_context_free_data=hex_to_bytes(o.get('packed_context_free_data', '')),
                packed_trx=hex_to_bytes(o['packed_trx']),
                )
        except (KeyError, ValueError, TypeError) as e:
            raise UnpackError('invalid packed transaction: {}'.format(e))


    @classmethod
    def from_bytes(cls, data):
        """Create from the wire form.

        :raises UnpackError: Bytes do not hold a packed transaction
        """
        try:
            o = decode(data, 'packed_transaction', transaction_abi())
        except DecodeError as e:
            raise UnpackError('cannot decode packed transaction: {}'.format(e))
        return cls(
            signatures=o['signatures'],
            compression=o['compression'],
            packed_context_free_data=o['packed_context_free_data'],
            packed_trx=o['packed_trx'],
            )


    @classmethod
    def from_signed(cls, stx, compression=Compression.NONE):
        compression = to_compression(compression)
        packed_trx = stx.transaction.to_bytes()
        packed_context_free_data = b''
        if len(stx.context_free_data) > 0:
            packed_context_free_data = encode(stx.context_free_data, 'bytes[]')
        if compression == Compression.ZLIB:
            packed_trx = zlib.compress(packed_trx)
            if len(packed_context_free_data) > 0:
                packed_context_free_data = zlib.compress(packed_context_free_data)
        return cls(
            signatures=stx.signatures,
            compression=compression,
            packed_context_free_data=packed_context_free_data,
            packed_trx=packed_trx,
            )
