"""Address type lookup from the base58check version byte."""
from typing import Optional

import base58

PUBKEYHASH = 'pubkeyhash'
SCRIPTHASH = 'scripthash'

# Version bytes for mainnet and testnet/regtest
VERSION_TYPES = {
    0x3a: PUBKEYHASH,
    0x32: SCRIPTHASH,
    0x78: PUBKEYHASH,
    0x6e: SCRIPTHASH,
}

def address_type(address: str) -> Optional[str]:
    """Return 'pubkeyhash' or 'scripthash', or None if the address is not a known base58 address."""
    try:
        payload = base58.b58decode_check(address)
    except ValueError:
        return None
    if len(payload) != 21:
        return None
    return VERSION_TYPES.get(payload[0])
