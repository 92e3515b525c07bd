"""Concurrent fan-out across source adapters under a single deadline."""

from __future__ import annotations

import asyncio
import time
from datetime import datetime

from knowledge_federation.config.settings import Settings
from knowledge_federation.exceptions import AdapterError, FanOutTimeout, QueryCancelled
from knowledge_federation.models.domain import (
    AdapterFilter,
    CandidateItem,
    ChatContext,
    FanOutResult,
    IntentTag,
    utc_now,
)
from knowledge_federation.observability.logger import get_logger
from knowledge_federation.protocols.source_adapter import SourceAdapter
from knowledge_federation.retrieval.filters import (
    build_filter,
    filter_for_source,
    select_adapters,
)

logger = get_logger("fan_out")


class FanOutCoordinator:
    def __init__(self, adapters: list[SourceAdapter], settings: Settings) -> None:
        self._adapters = list(adapters)
        self._settings = settings

    @property
    def adapters(self) -> list[SourceAdapter]:
        return list(self._adapters)

    async def gather(
        self,
        query: str,
        intents: list[IntentTag],
        context: ChatContext | None = None,
        cancel: asyncio.Event | None = None,
        now: datetime | None = None,
    ) -> FanOutResult:
        """Invoke the selected adapters concurrently and union their items.

        Adapter failures become empty results. Adapters still running at the
        deadline are cancelled and omitted. If ``cancel`` is set before the
        fan-out finishes, everything collected so far is discarded and
        QueryCancelled is raised.
        """
        now = now or utc_now()
        selected = select_adapters(self._adapters, context)
        base_filter = build_filter(intents, context, now, self._settings)

        tasks: list[tuple[SourceAdapter, asyncio.Task]] = [
            (
                adapter,
                asyncio.create_task(
                    self._search_one(
                        adapter, query, filter_for_source(base_filter, adapter.source_type)
                    )
                ),
            )
            for adapter in selected
        ]
        pending = {task for _, task in tasks}
        cancel_waiter = asyncio.create_task(cancel.wait()) if cancel is not None else None

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._settings.fan_out_deadline_ms / 1000

        try:
            while pending:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                waiting = (pending | {cancel_waiter}) if cancel_waiter else pending
                done, _ = await asyncio.wait(
                    waiting, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
                )
                if cancel_waiter is not None and cancel_waiter in done:
                    logger.info("fan_out_cancelled", query=query, pending=len(pending))
                    raise QueryCancelled(f"query superseded: {query!r}")
                pending -= done
        finally:
            leftovers = list(pending)
            if cancel_waiter is not None:
                leftovers.append(cancel_waiter)
            for task in leftovers:
                task.cancel()
            await asyncio.gather(*leftovers, return_exceptions=True)

        if cancel is not None and cancel.is_set():
            raise QueryCancelled(f"query superseded: {query!r}")

        result = FanOutResult(items=[])
        for adapter, task in tasks:
            if task in pending:
                result.timed_out.append(adapter.name)
                continue
            if task.cancelled():
                # The adapter cancelled itself; the fan-out did not.
                logger.warning("adapter_cancelled", adapter=adapter.name)
                result.failed.append(adapter.name)
                result.errors.append(AdapterError(adapter.name, "search was cancelled"))
                continue
            outcome = task.result()
            if isinstance(outcome, AdapterError):
                result.failed.append(adapter.name)
                result.errors.append(outcome)
                continue
            result.items.extend(outcome)

        if result.timed_out:
            timeout = FanOutTimeout(
                f"deadline {self._settings.fan_out_deadline_ms}ms exceeded by "
                + ", ".join(result.timed_out)
            )
            result.errors.append(timeout)
            logger.warning(
                "adapter_timed_out",
                adapters=result.timed_out,
                deadline_ms=self._settings.fan_out_deadline_ms,
            )

        logger.info(
            "fan_out_complete",
            selected=len(selected),
            items=len(result.items),
            failed=len(result.failed),
            timed_out=len(result.timed_out),
        )
        return result

    @staticmethod
    async def _search_one(
        adapter: SourceAdapter, query: str, filter: AdapterFilter | None
    ) -> list[CandidateItem] | AdapterError:
        start = time.monotonic()
        try:
            items = await adapter.search(query, filter)
        except Exception as e:
            logger.warning("adapter_failed", adapter=adapter.name, error=str(e))
            if isinstance(e, AdapterError):
                return e
            return AdapterError(adapter.name, str(e))

        logger.debug(
            "adapter_searched",
            adapter=adapter.name,
            items=len(items),
            duration_ms=round((time.monotonic() - start) * 1000, 2),
        )
        return list(items)
