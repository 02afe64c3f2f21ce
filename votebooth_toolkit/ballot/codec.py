"""
Leaf codec: a leaf is the int256 two's-complement encoding of a voter's
signed, 10^18-scaled vote weight on one motion.
"""

from decimal import Decimal, InvalidOperation, localcontext
from typing import Union

from eth_abi import decode, encode
from eth_abi.exceptions import EncodingError

from votebooth_toolkit.shared.constants import BoothConstants
from votebooth_toolkit.shared.exceptions import LeafEncodingError
from votebooth_toolkit.smt.tree import LeafLike, to_leaf_bytes

# int256 magnitudes run to 78 digits; keep Decimal scaling exact
_PRECISION = 100


def encode_leaf(amount: int) -> bytes:
    """Signed amount -> 32-byte leaf"""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise LeafEncodingError(
            f"Leaf amount must be an int, got {type(amount).__name__}"
        )
    try:
        return encode(["int256"], [amount])
    except EncodingError as e:
        raise LeafEncodingError(
            f"Amount {amount} does not fit a signed 256-bit leaf: {e}"
        )


def decode_leaf(leaf: LeafLike) -> int:
    """32-byte leaf -> signed amount (every 32-byte value decodes)"""
    return decode(["int256"], to_leaf_bytes(leaf))[0]


def to_fixed_point(value: Union[int, str, Decimal]) -> int:
    """
    Convert a decimal vote weight (e.g. "2.5", -1) to its 10^18-scaled int.

    Raises:
        ValueError: more than 18 decimals or not a number
    """
    try:
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            scaled = Decimal(str(value)).scaleb(
                BoothConstants.FIXED_POINT_DECIMALS
            )
    except InvalidOperation:
        raise ValueError(f"Not a decimal amount: {value!r}")
    if not scaled.is_finite() or scaled != scaled.to_integral_value():
        raise ValueError(
            f"Amount {value} has more than "
            f"{BoothConstants.FIXED_POINT_DECIMALS} decimals"
        )
    return int(scaled)


def from_fixed_point(amount: int) -> Decimal:
    """10^18-scaled int -> exact Decimal"""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(amount).scaleb(-BoothConstants.FIXED_POINT_DECIMALS)
