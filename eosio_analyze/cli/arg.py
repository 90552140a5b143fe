# standard imports
import os
import argparse

# local imports
from .base import AnalyzeFlag


class ArgumentParser(argparse.ArgumentParser):

    def __init__(self, *args, **kwargs):
        super(ArgumentParser, self).__init__(*args, **kwargs)
        self.add_argument('-c', '--config', dest='c', type=str, help='config override directory')
        self.add_argument('--env-prefix', default=os.environ.get('CONFINI_ENV_PREFIX'), dest='env_prefix', type=str, help='environment prefix for variables to overwrite configuration')
        self.add_argument('-v', action='store_true', help='be verbose')
        self.add_argument('-vv', action='store_true', help='be more verbose')


    def process_local_flags(self, local_arg_flags):
        if local_arg_flags & AnalyzeFlag.REPORT:
            self.add_argument('--dump', action='store_true', help='include byte dumps and ABI JSON in the report')
            self.add_argument('--marker', dest='marker', type=str, action='append', help='string to look for in contract code, may be repeated (replaces configured markers)')
        if local_arg_flags & AnalyzeFlag.ABI:
            self.add_argument('--abi-dir', dest='abi_dir', type=str, help='directory of <account>.abi.json files used to decode action payloads')
