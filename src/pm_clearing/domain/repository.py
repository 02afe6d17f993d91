"""Value-transfer ledger Protocol.

Two authorities can move value:
  - the owner of a holding account (`transfer`), used when a bettor pays in;
  - the custodian of a pool vault (`transfer_as_custodian`), where the
    custodian is the market record's own address.

Both return False when the movement cannot happen (unknown account, wrong
authority, insufficient balance). A False return may leave a half-applied
movement inside the current transaction; the caller must roll back.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import TransferReference


class TransferLedgerProtocol(Protocol):
    async def open_vault(self, db: AsyncSession, vault: str, custodian: str) -> None: ...

    async def transfer(
        self,
        db: AsyncSession,
        source: str,
        destination: str,
        amount: int,
        authority: str,
        reference_type: TransferReference,
        reference_id: str,
    ) -> bool: ...

    async def transfer_as_custodian(
        self,
        db: AsyncSession,
        vault: str,
        destination: str,
        amount: int,
        custodian: str,
        reference_type: TransferReference,
        reference_id: str,
    ) -> bool: ...
