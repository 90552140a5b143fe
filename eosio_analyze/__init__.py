"""Decoding and human-readable reports of signed, packed transactions

"""

from .abi import (
        Abi,
        interpret,
        )
from .codec import (
        decode,
        encode,
        )
from .transaction import (
        Action,
        Authorization,
        Compression,
        PackedTransaction,
        SignedTransaction,
        Transaction,
        )
from .report import (
        Analyzer,
        analyze,
        )
