# standard imports
import os
import logging

# external imports
import confini

# local imports
from .base import AnalyzeFlag

script_dir = os.path.dirname(os.path.realpath(__file__))

logg = logging.getLogger(__name__)


class Config(confini.Config):

    default_config_dir = os.path.join(script_dir, '..', 'data', 'config')

    @classmethod
    def from_args(cls, args, local_arg_flags, extra_args={}, default_config_dir=None):
        if default_config_dir == None:
            default_config_dir = cls.default_config_dir

        override_dirs = []
        if getattr(args, 'c', None) != None:
            override_dirs.append(args.c)

        config = cls(default_config_dir, getattr(args, 'env_prefix', None), override_dirs=override_dirs)
        config.process()

        local_args_override = {}
        if local_arg_flags & AnalyzeFlag.REPORT:
            if getattr(args, 'dump'):
                local_args_override['REPORT_VERBOSE'] = '1'
            markers = getattr(args, 'marker')
            if markers != None:
                local_args_override['REPORT_MARKERS'] = ','.join(markers)
        if local_arg_flags & AnalyzeFlag.ABI:
            abi_dir = getattr(args, 'abi_dir')
            if abi_dir != None:
                local_args_override['ABI_DIR'] = abi_dir
        config.dict_override(local_args_override, 'local cli args')

        for k in extra_args.keys():
            config.add(getattr(args, k), extra_args[k], exists_ok=True)

        logg.debug('config loaded:\n{}'.format(config))

        return config
