# standard imports
import io
import json
import logging
import hashlib
import datetime

# local imports
from eosio_analyze.abi import interpret
from eosio_analyze.action import (
        ActionKind,
        AbiCache,
        decode_action,
        )
from eosio_analyze.codec import jsonable
from eosio_analyze.dump import hexdump
from eosio_analyze.transaction import PackedTransaction
from eosio_analyze.error import (
        DecodeError,
        SchemaError,
        TruncatedDataError,
        UnpackError,
        )

logg = logging.getLogger(__name__)

DEFAULT_MARKERS = [
    'SYS',
    'EOS',
    ]

BANNER_WIDTH = 69
DISPLAY_TIME_FORMAT = '%Y-%m-%d %H:%M:%S UTC'


def error_class(e):
    """Short description of the class of a decode error, for inline report notes.
    """
    if isinstance(e, TruncatedDataError):
        return 'truncated data'
    if isinstance(e, SchemaError):
        return 'schema error'
    return 'malformed data'


def format_delta(delta):
    seconds = int(delta.total_seconds())
    if seconds < 0:
        return 'expired {} ago'.format(datetime.timedelta(seconds=-seconds))
    return 'in {}'.format(datetime.timedelta(seconds=seconds))


def sha256_hex(data):
    h = hashlib.sha256()
    h.update(data)
    return h.hexdigest()


class Analyzer:
    """Builds a human-readable report of a transaction in a single pass.

    The analyzer is the context of the pass; it owns the output buffer and the ABIs learned from setabi actions along the way. Use one analyzer per transaction.

    :param verbose: Include byte dumps and ABI JSON in the report
    :type verbose: bool
    :param markers: Strings to look for in contract code
    :type markers: list of str
    :param now: Analysis time used for relative expiration, current time if None
    :type now: datetime.datetime
    :param abis: Account name to ABI mapping to seed the pass with, builtin ABIs if None
    :type abis: dict
    """
    def __init__(self, verbose=False, markers=None, now=None, abis=None, writer=None):
        self.verbose = verbose
        self.markers = list(DEFAULT_MARKERS)
        if markers != None:
            self.markers = list(markers)
        self.now = now
        self.abis = AbiCache(seed=abis)
        self.writer = writer
        if self.writer == None:
            self.writer = io.StringIO()
        self.error = None


    def write_line(self, s=''):
        self.writer.write(s + '\n')


    def write_verbose_line(self, s=''):
        if self.verbose:
            self.write_line(s)


    def write_dump(self, data):
        if self.verbose:
            self.write_line('({} bytes)'.format(len(data)))
            self.writer.write(hexdump(data))


    def write_banner(self, title):
        rule = '-' * BANNER_WIDTH
        self.write_line()
        self.write_line(rule)
        self.write_line(' {} '.format(title).center(BANNER_WIDTH, '-'))
        self.write_line(rule)
        self.write_line()


    def report(self):
        return self.writer.getvalue()


    def analyze_packed(self, trx):
        """Report on a packed transaction and everything it contains.

        :param trx: Transaction to report on
        :type trx: eosio_analyze.transaction.PackedTransaction
        :raises UnpackError: Transaction envelope cannot be unpacked; the report holds everything written up to that point
        """
        self.write_banner('PACKED TRANSACTION')
        try:
            self.write_line('Transaction ID: {}'.format(trx.id()))
        except UnpackError as e:
            self.write_line('Transaction ID: unavailable ({})'.format(e))
        self.write_line('Signatures: {}'.format(len(trx.signatures)))
        for signature in trx.signatures:
            self.write_line('  {}'.format(signature))
        self.write_line('Compression: {}'.format(trx.compression_name()))
        self.write_line('Packed context free data length: {}'.format(len(trx.packed_context_free_data)))
        self.write_dump(trx.packed_context_free_data)
        self.write_line('Packed transaction data length: {}'.format(len(trx.packed_trx)))
        self.write_dump(trx.packed_trx)

        self.write_banner('SIGNED TRANSACTION')
        try:
            stx = trx.unpack()
        except UnpackError as e:
            logg.error('cannot unpack transaction: {}'.format(e))
            self.write_line('Could not unpack transaction: {}'.format(e))
            self.error = e
            raise

        self.__analyze_signed_body(stx)


    def analyze_signed_transaction(self, stx):
        self.write_banner('SIGNED TRANSACTION')
        self.__analyze_signed_body(stx)


    def __analyze_signed_body(self, stx):
        self.write_line('Number of signatures: {}'.format(len(stx.signatures)))
        self.write_line('Number of context-free data blobs (on Transaction): {}'.format(len(stx.context_free_data)))
        for idx, blob in enumerate(stx.context_free_data):
            self.write_line('{}. Blob length: {}'.format(idx + 1, len(blob)))
            self.write_dump(blob)
        self.analyze_transaction(stx.transaction)


    def analyze_transaction(self, tx):
        self.write_banner('TRANSACTION HEADER')

        now = self.now
        if now == None:
            now = datetime.datetime.now(datetime.timezone.utc)
        elif now.tzinfo == None:
            now = now.replace(tzinfo=datetime.timezone.utc)
        self.write_line('Expiration: {} ({}, analysis time: {})'.format(
            tx.expiration.strftime(DISPLAY_TIME_FORMAT),
            format_delta(tx.expiration - now),
            now.strftime(DISPLAY_TIME_FORMAT),
            ))
        self.write_line('Reference block number: {}'.format(tx.ref_block_num))
        self.write_line('Reference block prefix: {:x}'.format(tx.ref_block_prefix))
        self.write_line('Maximum net usage words (of 8 bytes, 0 = unlimited): {}'.format(tx.max_net_usage_words))
        self.write_line('Maximum CPU usage in milliseconds (0 = unlimited): {}'.format(tx.max_cpu_usage_ms))
        self.write_line('Number of seconds to delay transaction (cancellable during that time): {}'.format(tx.delay_sec))
        self.write_line('Transaction extensions: {}'.format(len(tx.transaction_extensions)))

        self.write_banner('ACTIONS')

        self.write_line('Context-free actions: {}'.format(len(tx.context_free_actions)))
        for idx, act in enumerate(tx.context_free_actions):
            self.analyze_action(idx, act)

        self.write_line()

        self.write_line('Actions: {}'.format(len(tx.actions)))
        for idx, act in enumerate(tx.actions):
            self.analyze_action(idx, act)


    def analyze_action(self, idx, act):
        """Report on a single action. Decode failures are written inline and never raised.

        :param idx: Zero-based position of the action in its list
        :type idx: int
        :param act: Action
        :type act: eosio_analyze.transaction.Action
        """
        auths = ', '.join([str(auth) for auth in act.authorization])
        self.write_line('{}. Action {}::{}, authorized by: {}'.format(idx + 1, act.account, act.name, auths))

        r = decode_action(act, self.abis)
        if not r.ok():
            self.write_line('Could not decode payload as {} ({}): {}'.format(r.type_name, error_class(r.error), r.error))
            self.__opaque(act.data)
        elif r.kind == ActionKind.SET_CODE:
            self.__set_code(r.value)
        elif r.kind == ActionKind.SET_ABI:
            self.__set_abi(r.value)
        elif r.kind == ActionKind.CONTRACT:
            self.write_line('Payload {} ({} abi): {}'.format(r.type_name, r.source, json.dumps(jsonable(r.value))))
        else:
            self.__opaque(act.data)

        self.write_line()


    def __opaque(self, data):
        self.write_line('Opaque payload: {} bytes, SHA256: {}'.format(len(data), sha256_hex(data)))
        self.write_dump(data)


    def __set_code(self, o):
        code = o['code']
        self.write_line('Set code for account: {}'.format(o['account']))
        self.write_line('VM type/version: {}/{}'.format(o['vmtype'], o['vmversion']))
        self.write_line('Code length: {}'.format(len(code)))
        self.write_line("Code's SHA256: {}".format(sha256_hex(code)))
        for marker in self.markers:
            self.write_line("Contains the string '{}' (heuristic): {}".format(marker, marker.encode('utf-8') in code))
        self.write_dump(code)


    def __set_abi(self, o):
        self.write_line('Set ABI for account: {}'.format(o['account']))
        self.write_line('ABI length: {}'.format(len(o['abi'])))
        try:
            abi = interpret(o['abi'])
        except DecodeError as e:
            logg.warning('cannot decode abi for {}: {}'.format(o['account'], e))
            self.write_line('Could not decode ABI ({}): {}'.format(error_class(e), e))
            return

        self.write_line('ABI: {}'.format(abi.summary()))
        self.abis.add(o['account'], abi)
        self.write_verbose_line('JSON representation of the ABI:')
        self.write_verbose_line(json.dumps(jsonable(abi.asdict()), indent=2))


def analyze(trx, verbose=False, markers=None, now=None, abis=None):
    """Run a report pass over a packed transaction.

    :param trx: Transaction, in packed form or as wire bytes
    :type trx: eosio_analyze.transaction.PackedTransaction or bytes
    :rtype: tuple
    :returns: Report text, and the fatal UnpackError or None
    """
    analyzer = Analyzer(verbose=verbose, markers=markers, now=now, abis=abis)
    try:
        if isinstance(trx, (bytes, bytearray)):
            trx = PackedTransaction.from_bytes(trx)
        analyzer.analyze_packed(trx)
    except UnpackError as e:
        if analyzer.error == None:
            analyzer.write_line('Could not unpack transaction: {}'.format(e))
        return (analyzer.report(), e,)
    return (analyzer.report(), None,)
