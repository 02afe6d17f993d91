"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class Outcome(str, Enum):
    """Market outcome. YES, NO and REFUNDED are terminal."""

    PENDING = "PENDING"
    YES = "YES"
    NO = "NO"
    # No operation in this engine writes REFUNDED; an administrative path may.
    REFUNDED = "REFUNDED"

    @property
    def is_terminal(self) -> bool:
        return self is not Outcome.PENDING


class Side(str, Enum):
    YES = "YES"
    NO = "NO"

    def as_outcome(self) -> Outcome:
        return Outcome.YES if self is Side.YES else Outcome.NO


class AddressTag(str, Enum):
    """Namespace tags for derived storage addresses."""

    MARKET = "market"
    POSITION = "userpos"
    YES_VAULT = "yes_vault"
    NO_VAULT = "no_vault"


class LedgerEntryType(str, Enum):
    TRANSFER_DEBIT = "TRANSFER_DEBIT"
    TRANSFER_CREDIT = "TRANSFER_CREDIT"


class TransferReference(str, Enum):
    """What a ledger movement was for; stored as ledger_entries.reference_type."""

    BET = "BET"
    SWEEP = "SWEEP"
    PAYOUT = "PAYOUT"
    REFUND = "REFUND"
