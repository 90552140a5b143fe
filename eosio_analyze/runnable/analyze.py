#!python3

# standard imports
import sys
import logging
import argparse

# local imports
import eosio_analyze.cli
from eosio_analyze.builtin import (
        builtin_abi,
        load_abi_dir,
        )
from eosio_analyze.load import load_packed
from eosio_analyze.report import analyze
from eosio_analyze.error import UnpackError
from eosio_analyze.version import __version_string__

logging.basicConfig(level=logging.WARNING)
logg = logging.getLogger()

arg_flags = eosio_analyze.cli.argflag_local_report
argparser = eosio_analyze.cli.ArgumentParser(description="""
Print a human-readable report of a packed transaction.

# Examples
eosio-analyze trx.json # json packed or signed transaction
eosio-analyze --dump trx.hex # hex wire form, with byte dumps and ABI JSON
cat trx.bin | eosio-analyze # binary wire form from stdin
""", formatter_class=argparse.RawTextHelpFormatter)
argparser.add_argument('--version', action='version', version=__version_string__)
argparser.add_argument('input', type=str, nargs='?', default='-', help='file holding the transaction, stdin if omitted or "-"')
argparser.process_local_flags(arg_flags)
args = argparser.parse_args()

if args.vv:
    logging.getLogger().setLevel(logging.DEBUG)
elif args.v:
    logging.getLogger().setLevel(logging.INFO)

extra_args = {
    'input': '_INPUT',
    }
config = eosio_analyze.cli.Config.from_args(args, arg_flags, extra_args=extra_args)


def load_abis(config):
    abis = {}
    for account in (config.get('ABI_BUILTIN') or '').split(','):
        account = account.strip()
        if account == '':
            continue
        try:
            abis[account] = builtin_abi(account)
        except KeyError as e:
            logg.warning('ignoring builtin abi setting: {}'.format(e))
    abi_dir = config.get('ABI_DIR')
    if abi_dir:
        abis.update(load_abi_dir(abi_dir))
    return abis


def main():
    src = config.get('_INPUT')
    if src == '-':
        content = sys.stdin.buffer.read()
    else:
        f = open(src, 'rb')
        content = f.read()
        f.close()

    try:
        trx = load_packed(content)
    except UnpackError as e:
        logg.critical('cannot load transaction from {}: {}'.format(src, e))
        sys.exit(1)

    markers = []
    for marker in (config.get('REPORT_MARKERS') or '').split(','):
        marker = marker.strip()
        if marker != '':
            markers.append(marker)

    (report, err) = analyze(trx, verbose=config.true('REPORT_VERBOSE'), markers=markers, abis=load_abis(config))
    sys.stdout.write(report)
    if err != None:
        sys.exit(1)


if __name__ == '__main__':
    main()
