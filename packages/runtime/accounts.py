from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from packages.common.config import AccountConfig
from packages.common.numeric import D
from packages.common.types import Symbol
from packages.runtime.ports import Account, AccountLookup

ZERO = Decimal(0)


class StaticAccountBook:
    """
    In-memory AccountLookup over a snapshot of accounts.

    Trade account selection:
      - the account whose name matches trade_account_name (case-insensitive)
      - else the only account, if there is exactly one
      - else None
    The same trade account serves every symbol.
    """

    def __init__(self, accounts: Sequence[Account], *, trade_account_name: str = "trade"):
        self._accounts = tuple(accounts)
        self.trade_account_name = trade_account_name

    @classmethod
    def from_config(cls, accounts: Iterable[AccountConfig]) -> "StaticAccountBook":
        return cls(
            [
                Account(account_id=a.account_id, name=a.name, balances=dict(a.balances))
                for a in accounts
            ]
        )

    @property
    def accounts(self) -> tuple[Account, ...]:
        return self._accounts

    def get_account(self, symbol: str) -> Optional[Account]:
        wanted = self.trade_account_name.lower()
        for a in self._accounts:
            if a.name.lower() == wanted:
                return a
        if len(self._accounts) == 1:
            return self._accounts[0]
        return None

    def balance(self, account: Account, currency: str) -> Decimal:
        return D(account.balances.get(currency.upper(), ZERO))


def has_enough(balance: Decimal, amount: Decimal, minimum_balance_after: Decimal = ZERO) -> bool:
    """balance - amount must still leave minimum_balance_after on the account."""
    amount = D(amount)
    minimum_balance_after = D(minimum_balance_after)
    if amount < 0:
        raise ValueError(f"amount must be >= 0 (got {amount})")
    if minimum_balance_after < 0:
        raise ValueError(f"minimum_balance_after must be >= 0 (got {minimum_balance_after})")
    return D(balance) - amount - minimum_balance_after >= 0


def _check(
    lookup: AccountLookup,
    pair: Symbol,
    currency: str,
    amount: Decimal,
    minimum_balance_after: Decimal,
    account: Optional[Account],
) -> bool:
    acct = account if account is not None else lookup.get_account(pair.value)
    if acct is None:
        return False
    return has_enough(lookup.balance(acct, currency), amount, minimum_balance_after)


def can_buy(
    lookup: AccountLookup,
    pair: Symbol,
    amount: Decimal,
    minimum_balance_after: Decimal = ZERO,
    account: Optional[Account] = None,
) -> bool:
    # Buying spends the quote currency (USDT for BTC/USDT)
    return _check(lookup, pair, pair.quote, amount, minimum_balance_after, account)


def can_sell(
    lookup: AccountLookup,
    pair: Symbol,
    amount: Decimal,
    minimum_balance_after: Decimal = ZERO,
    account: Optional[Account] = None,
) -> bool:
    # Selling spends the base currency (BTC for BTC/USDT)
    return _check(lookup, pair, pair.base, amount, minimum_balance_after, account)
