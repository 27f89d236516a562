"""
Off-chain derivation of Pangolin pair addresses.

PangolinFactory deploys every pair with CREATE2, salted by the sorted token
addresses, so the address of a pair is known before (and without) asking the
factory. The derivation below must stay byte-for-byte identical to
``PangolinFactory.createPair`` / ``PangolinLibrary.pairFor``:

    salt = keccak256(abi.encodePacked(token0, token1))
    pair = keccak256(0xff ++ factory ++ salt ++ init_code_hash)[12:]
"""

import typing

from eth_typing import ChecksumAddress
from eth_utils import decode_hex, is_hex_address, keccak, to_canonical_address, to_checksum_address

from deployment.constants import PANGOLIN_PAIR_INIT_CODE_HASH

CREATE2_PREFIX = b"\xff"


class InvalidPairError(ValueError):
    """Raised when two tokens cannot form a pair."""


def _validate_token(token: str) -> ChecksumAddress:
    if not is_hex_address(token):
        raise InvalidPairError(f"'{token}' is not a valid token address")
    if int(token, 16) == 0:
        raise InvalidPairError("Zero address cannot be part of a pair")
    return to_checksum_address(token)


def sort_tokens(token_a: str, token_b: str) -> typing.Tuple[ChecksumAddress, ChecksumAddress]:
    """Put lower address first, as the factory does."""
    token_a = _validate_token(token_a)
    token_b = _validate_token(token_b)
    if token_a == token_b:
        raise InvalidPairError(f"Identical tokens cannot form a pair: {token_a}")
    if int(token_a, 16) < int(token_b, 16):
        return token_a, token_b
    return token_b, token_a


class PairKey(typing.NamedTuple):
    """Unordered token pair, stored in canonical (sorted) order."""

    token0: ChecksumAddress
    token1: ChecksumAddress

    @classmethod
    def from_tokens(cls, token_a: str, token_b: str) -> "PairKey":
        return cls(*sort_tokens(token_a, token_b))

    @property
    def salt(self) -> bytes:
        return keccak(to_canonical_address(self.token0) + to_canonical_address(self.token1))


def _init_code_hash_bytes(init_code_hash: typing.Union[str, bytes]) -> bytes:
    if isinstance(init_code_hash, str):
        init_code_hash = decode_hex(init_code_hash)
    if len(init_code_hash) != 32:
        raise ValueError(f"Init code hash must be 32 bytes, got {len(init_code_hash)}")
    return init_code_hash


def pair_for(
    factory: str,
    token_a: str,
    token_b: str,
    init_code_hash: typing.Union[str, bytes] = PANGOLIN_PAIR_INIT_CODE_HASH,
) -> ChecksumAddress:
    """
    Computes the address of the pair ``factory`` creates for ``token_a`` and ``token_b``.

    :param factory: Factory contract address
    :param token_a: One of the pair tokens; order does not matter
    :param token_b: The other pair token
    :param init_code_hash: keccak256 of the pair creation code the factory deploys
    :return: Pair contract address (checksummed)
    """
    if not is_hex_address(factory):
        raise InvalidPairError(f"'{factory}' is not a valid factory address")
    pair_key = PairKey.from_tokens(token_a, token_b)
    preimage = (
        CREATE2_PREFIX
        + to_canonical_address(factory)
        + pair_key.salt
        + _init_code_hash_bytes(init_code_hash)
    )
    return to_checksum_address(keccak(preimage)[12:])


class PairAddressResolver:
    """Resolves pair addresses for factories sharing one pair bytecode."""

    def __init__(self, init_code_hash: typing.Union[str, bytes] = PANGOLIN_PAIR_INIT_CODE_HASH):
        self.init_code_hash = _init_code_hash_bytes(init_code_hash)

    def resolve(self, factory: str, token_a: str, token_b: str) -> ChecksumAddress:
        return pair_for(factory, token_a, token_b, init_code_hash=self.init_code_hash)
