"""Provider fallback chain.

An ordered list of fetch strategies for one query type, tried in priority
order:

1. Each strategy either returns records or counts as failed. Raised
   exceptions and empty results are both failures; they are logged and
   never propagated.
2. The first non-empty result wins. Later strategies are not invoked.
3. If every strategy fails, the optional fixture stage returns a fixed,
   locally defined dataset. Without a fixture the chain returns [].

The chain trades fidelity for availability: with a fixture configured the
orchestrator always has something to return and cache.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Generic, Hashable, Optional, Sequence, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

P = TypeVar("P")
R = TypeVar("R")
M = TypeVar("M", bound=BaseModel)


class FetchStrategy(ABC, Generic[P, R]):
    """One way of obtaining records for a query."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable source name for logging."""
        ...

    @abstractmethod
    async def fetch(self, params: P) -> list[R]:
        """Attempt the query.

        Returns:
            The records found. An empty list means "nothing here, try the
            next source". Raising has the same effect.
        """
        ...


@dataclass
class ChainResult(Generic[R]):
    """Records produced by a chain and the strategy that produced them."""

    records: list[R] = field(default_factory=list)
    source: Optional[str] = None

    @property
    def from_fixture(self) -> bool:
        return self.source == FixtureStrategy.NAME


class FixtureStrategy(FetchStrategy[P, M]):
    """Always-available local dataset, selected by a key derived from params.

    Records are copied on every fetch so callers cannot mutate the fixture.
    """

    NAME = "fixture"

    def __init__(
        self,
        records_by_key: dict[Hashable, Sequence[M]],
        key_fn: Callable[[P], Hashable],
    ) -> None:
        self._records_by_key = records_by_key
        self._key_fn = key_fn

    @property
    def name(self) -> str:
        return self.NAME

    async def fetch(self, params: P) -> list[M]:
        records = self._records_by_key.get(self._key_fn(params), ())
        return [record.model_copy(deep=True) for record in records]


class FallbackChain(Generic[P, R]):
    """Tries strategies in order until one yields a non-empty result."""

    def __init__(
        self,
        strategies: Sequence[FetchStrategy[P, R]],
        fixture: Optional[FetchStrategy[P, R]] = None,
        label: str = "chain",
    ) -> None:
        self._strategies = list(strategies)
        self._fixture = fixture
        self._label = label

    async def run(self, params: P) -> ChainResult[R]:
        for strategy in self._strategies:
            records = await self._attempt(strategy, params)
            if records:
                logger.info(
                    f"[CHAIN] {self._label}: {len(records)} records from {strategy.name}"
                )
                return ChainResult(records=records, source=strategy.name)

        if self._fixture is None:
            logger.info(f"[CHAIN] {self._label}: all sources empty, returning no results")
            return ChainResult()

        records = await self._fixture.fetch(params)
        logger.warning(
            f"[CHAIN] {self._label}: all sources failed, using {self._fixture.name} "
            f"({len(records)} records)"
        )
        return ChainResult(records=records, source=self._fixture.name)

    async def _attempt(self, strategy: FetchStrategy[P, R], params: P) -> list[R]:
        try:
            return list(await strategy.fetch(params) or [])
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                f"[CHAIN] {self._label}: {strategy.name} failed: {type(e).__name__}: {e}"
            )
            return []
