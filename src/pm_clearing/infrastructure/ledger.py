"""HoldingLedger: SQL implementation of TransferLedgerProtocol.

Balances live in holding_accounts; every movement appends a debit and a
credit row to ledger_entries within the caller's transaction.
A participant's holding account is addressed by the participant identity
and owned by it; pool vaults are owned by their market's address.
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import LedgerEntryType, TransferReference
from src.pm_common.errors import InternalError

logger = logging.getLogger(__name__)

_OPEN_VAULT_SQL = text("""
    INSERT INTO holding_accounts (address, owner, balance)
    VALUES (:address, :owner, 0)
    ON CONFLICT (address) DO NOTHING
""")

_DEBIT_SQL = text("""
    UPDATE holding_accounts
    SET balance = balance - :amount,
        updated_at = NOW()
    WHERE address = :address AND owner = :authority AND balance >= :amount
    RETURNING balance
""")

_CREDIT_SQL = text("""
    UPDATE holding_accounts
    SET balance = balance + :amount,
        updated_at = NOW()
    WHERE address = :address
    RETURNING balance
""")

_INSERT_LEDGER_SQL = text("""
    INSERT INTO ledger_entries
        (account, entry_type, amount, balance_after, reference_type, reference_id)
    VALUES (:account, :entry_type, :amount, :balance_after, :reference_type, :reference_id)
    RETURNING id
""")


async def write_ledger(
    account: str,
    entry_type: LedgerEntryType,
    amount: int,
    balance_after: int,
    reference_type: TransferReference,
    reference_id: str,
    db: AsyncSession,
) -> None:
    """Insert one row into ledger_entries within the caller's transaction."""
    result = await db.execute(
        _INSERT_LEDGER_SQL,
        {
            "account": account,
            "entry_type": entry_type.value,
            "amount": amount,
            "balance_after": balance_after,
            "reference_type": reference_type.value,
            "reference_id": reference_id,
        },
    )
    if result.fetchone() is None:
        raise InternalError(f"Ledger insert returned no rows for account {account}")


class HoldingLedger:
    async def open_vault(self, db: AsyncSession, vault: str, custodian: str) -> None:
        await db.execute(_OPEN_VAULT_SQL, {"address": vault, "owner": custodian})

    async def transfer(
        self,
        db: AsyncSession,
        source: str,
        destination: str,
        amount: int,
        authority: str,
        reference_type: TransferReference,
        reference_id: str,
    ) -> bool:
        return await self._move(
            db, source, destination, amount, authority, reference_type, reference_id
        )

    async def transfer_as_custodian(
        self,
        db: AsyncSession,
        vault: str,
        destination: str,
        amount: int,
        custodian: str,
        reference_type: TransferReference,
        reference_id: str,
    ) -> bool:
        # Same SQL path: the vault's owner column *is* the custodian, so the
        # debit only succeeds when the market asserts its own authority.
        return await self._move(
            db, vault, destination, amount, custodian, reference_type, reference_id
        )

    async def _move(
        self,
        db: AsyncSession,
        source: str,
        destination: str,
        amount: int,
        authority: str,
        reference_type: TransferReference,
        reference_id: str,
    ) -> bool:
        if amount <= 0 or source == destination:
            return False

        debit = (
            await db.execute(
                _DEBIT_SQL, {"address": source, "authority": authority, "amount": amount}
            )
        ).fetchone()
        if debit is None:
            logger.info(
                "Debit rejected: source=%s authority=%s amount=%d", source, authority, amount
            )
            return False

        credit = (
            await db.execute(_CREDIT_SQL, {"address": destination, "amount": amount})
        ).fetchone()
        if credit is None:
            logger.info("Credit rejected: unknown destination=%s", destination)
            return False

        await write_ledger(
            source, LedgerEntryType.TRANSFER_DEBIT, -amount, int(debit.balance),
            reference_type, reference_id, db,
        )
        await write_ledger(
            destination, LedgerEntryType.TRANSFER_CREDIT, amount, int(credit.balance),
            reference_type, reference_id, db,
        )
        return True
