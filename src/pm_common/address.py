"""Deterministic storage addresses.

address = sha256(program_id, tag, *seeds), each part length-prefixed so that
("ab", "c") and ("a", "bc") never collide. The program identity comes from
settings.PROGRAM_ID; two deployments with different identities never share
addresses.
"""

import hashlib

from src.pm_common.enums import AddressTag, Side


def derive_address(program_id: str, tag: AddressTag, *seeds: str) -> str:
    if not program_id:
        raise ValueError("program_id must be non-empty")
    h = hashlib.sha256()
    for part in (program_id, tag.value, *seeds):
        raw = part.encode("utf-8")
        h.update(len(raw).to_bytes(4, "big"))
        h.update(raw)
    return h.hexdigest()


def market_address(program_id: str, creator: str) -> str:
    return derive_address(program_id, AddressTag.MARKET, creator)


def position_address(program_id: str, market: str, owner: str) -> str:
    return derive_address(program_id, AddressTag.POSITION, market, owner)


def vault_address(program_id: str, market: str, side: Side) -> str:
    tag = AddressTag.YES_VAULT if side is Side.YES else AddressTag.NO_VAULT
    return derive_address(program_id, tag, market)
