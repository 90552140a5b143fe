# standard imports
import enum


class AnalyzeFlag(enum.IntEnum):

    # report - nibble 1
    REPORT = 1

    # abi - nibble 2
    ABI = 16


argflag_local_report = AnalyzeFlag.REPORT | AnalyzeFlag.ABI
