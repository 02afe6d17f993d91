"""Account-constraint guards run at the top of every settlement operation.

Each guard raises an AppError and never mutates. Order inside an
operation: signer, record authenticity, identity (keeper / owner), then
the lifecycle state checks in pm_market / pm_position.
"""

from src.pm_common.address import market_address, position_address
from src.pm_common.errors import (
    AddressMismatchError,
    InvalidCredentialsError,
    InvalidKeeperError,
    UnauthorizedError,
)
from src.pm_market.domain.models import Market
from src.pm_position.domain.models import Position


def require_signer(caller: str | None) -> str:
    if not caller:
        raise InvalidCredentialsError()
    return caller


def verify_market_address(program_id: str, market: Market) -> None:
    """A loaded market must sit at the address derived from its creator."""
    if market_address(program_id, market.creator) != market.address:
        raise AddressMismatchError("market", market.address)


def verify_position_address(program_id: str, market: Market, position: Position) -> None:
    """A loaded position must belong to `market` and sit at its derived address."""
    if position.market_ref != market.address:
        raise AddressMismatchError("position", position.address)
    if position_address(program_id, market.address, position.owner) != position.address:
        raise AddressMismatchError("position", position.address)


def require_keeper(market: Market, caller: str) -> None:
    if caller != market.keeper:
        raise InvalidKeeperError(caller)


def require_position_owner(position: Position, caller: str) -> None:
    if caller != position.owner:
        raise UnauthorizedError()
