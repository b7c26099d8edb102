"""
polycache — Stampede Protection

Probabilistic early expiration. Near the end of an item's life a fraction
of reads is told the item already expired, so repopulation is spread out
over several readers instead of all of them missing at the same instant.

See:
- https://en.wikipedia.org/wiki/Cache_stampede#Probabilistic_early_expiration
- http://www.vldb.org/pvldb/vol8/p886-vattani.pdf

With the defaults (beta=3, delta=10%) an item stored with a 60s TTL and
read 1000 times at each point of its life expires early roughly as follows:

    TTL left | elapsed | early expirations
    -------- | ------- | -----------------
    25s      | 58%     | 0%
    15s      | 75%     | 5%
    6s       | 90%     | 34%
    3s       | 95%     | 65%
"""

from __future__ import annotations

import logging
import math
import random
from datetime import datetime, timedelta

from ..errors import InvalidConfigurationError
from .item import LATEST_EXPIRY, Item

logger = logging.getLogger(__name__)

DEFAULT_BETA = 3
DEFAULT_DELTA = 10

BETA_RANGE = (1, 10)
DELTA_RANGE = (1, 100)


def _validate_int(setting: str, value: object, bounds: tuple[int, int]) -> int:
    low, high = bounds
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise InvalidConfigurationError(setting, value, f"An integer between {low} and {high}")
    return value


class StampedeProtection:
    """
    Early-expiration policy for one cache instance.

    Disabled until enable() is called.
    """

    def __init__(
        self,
        enabled: bool = False,
        beta: int = DEFAULT_BETA,
        delta: int = DEFAULT_DELTA,
        random_source: random.Random | None = None,
    ):
        self.enabled = enabled
        self.beta = _validate_int("beta", beta, BETA_RANGE)
        self.delta = _validate_int("delta", delta, DELTA_RANGE)
        self._random = random_source or random.Random()

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def set_beta(self, beta: int) -> None:
        """
        Set the early expiration scale.

        Raise it (up to 10) to increase the chance of early expiration.
        """
        self.beta = _validate_int("beta", beta, BETA_RANGE)

    def set_delta(self, delta: int) -> None:
        """
        Set the percentage of the TTL during which data may expire early.

        Raise it (up to 100) to start early expiration sooner.
        """
        self.delta = _validate_int("delta", delta, DELTA_RANGE)

    def skew_seconds(self, original_ttl: int) -> int:
        """
        Draw a random, non-positive expiry skew for an item.

        skew = floor(ln(1 + beta * 0.4) * (delta / 100 * ttl) * ln(r)), r in (0, 1]
        """
        beta = math.log1p(self.beta * 0.4)
        delta = (self.delta / 100) * original_ttl
        r = self._random.randint(1, 100) / 100

        return math.floor(beta * delta * math.log(r))

    def effective_now(self, item: Item, now: datetime) -> datetime:
        """
        Return the time point an item's validity should be judged at.

        Args:
            item: Item read from storage
            now: Real current time

        Returns:
            `now`, or a later time point if the item was picked for early expiration
        """
        ttl = item.ttl()

        # no ttl was stored with the item
        if not ttl:
            return now

        if not self.enabled:
            return now

        # expiry was clamped on write, there is no later instant to skew towards
        if item.expiry == LATEST_EXPIRY:
            return now

        skew = self.skew_seconds(ttl)
        if skew:
            logger.debug(
                "Stampede protection skewed read time by %ds",
                -skew,
                extra={"original_ttl": ttl, "skew_seconds": skew},
            )

        try:
            return now - timedelta(seconds=skew)
        except OverflowError:
            return LATEST_EXPIRY

    def settings(self) -> dict[str, int | bool]:
        return {"enabled": self.enabled, "beta": self.beta, "delta": self.delta}
