"""Coin economy: upload bonuses and premium download charges."""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager

from noteshare.core.exceptions import InsufficientFundsError, ValidationError
from noteshare.core.models import User
from noteshare.core.settings import Settings
from noteshare.db import KeyedLock, Repositories
from noteshare.db.locks import user_key

logger = logging.getLogger(__name__)


class CoinEconomy:
    """Balance adjustments, each serialized on the affected user keys."""

    def __init__(self, repos: Repositories, locks: KeyedLock, settings: Settings) -> None:
        self.repos = repos
        self.locks = locks
        self.settings = settings

    # ------------------------------------------------------------------
    def transaction(self, *user_ids: int) -> AbstractAsyncContextManager[None]:
        """Hold the balance locks of ``user_ids`` for a multi-step section."""
        return self.locks.hold(*(user_key(uid) for uid in user_ids))

    async def balance(self, user_id: int) -> int:
        user = await self.repos.users.get(user_id)
        return user.coins

    async def award_upload_bonus(self, user_id: int, is_premium: bool) -> User:
        async with self.transaction(user_id):
            return await self.credit_upload_bonus(user_id, is_premium)

    async def credit_upload_bonus(self, user_id: int, is_premium: bool) -> User:
        """Lock-free body of :meth:`award_upload_bonus`; hold the user key."""

        bonus = (
            self.settings.premium_upload_bonus
            if is_premium
            else self.settings.free_upload_bonus
        )
        user = await self.repos.users.adjust_coins(user_id, bonus)
        logger.info(
            "Upload bonus credited",
            extra={"user_id": user_id, "bonus": bonus, "coins": user.coins},
        )
        return user

    async def charge_for_premium_download(
        self, buyer_id: int, seller_id: int, price: int
    ) -> User:
        """Debit ``price`` from the buyer and credit the seller.

        Fails with :class:`InsufficientFundsError` and changes nothing when the
        buyer cannot pay. Returns the buyer's updated record.
        """

        async with self.transaction(buyer_id, seller_id):
            return await self.settle(buyer_id, seller_id, price)

    async def settle(self, buyer_id: int, seller_id: int, price: int) -> User:
        """Lock-free body of :meth:`charge_for_premium_download`.

        Callers must already be inside ``transaction(buyer_id, seller_id)``.
        """

        if price < 0:
            raise ValidationError("price must not be negative")
        buyer = await self.repos.users.get(buyer_id)
        seller = await self.repos.users.get(seller_id)
        if buyer.coins < price:
            logger.warning(
                "Premium charge rejected",
                extra={"buyer_id": buyer_id, "required": price, "available": buyer.coins},
            )
            raise InsufficientFundsError(required=price, available=buyer.coins)
        self.repos.users.transfer(buyer, seller, price)
        logger.info(
            "Premium charge settled",
            extra={"buyer_id": buyer_id, "seller_id": seller_id, "price": price},
        )
        return await self.repos.users.get(buyer_id)


__all__ = ["CoinEconomy"]
