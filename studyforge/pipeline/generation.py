"""Concurrent multi-chunk generation.

Responsibilities:
- Fan out one collaborator call per generation unit and join them all.
- Absorb per-unit failures so sibling units still contribute items.
- Stitch results in unit order, deduplicate, force difficulty, and trim.

Key types:
- `GenerationOrchestrator`: fan-out/fan-in coordinator.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Sequence

from ..errors import CollaboratorError, ErrorKind
from ..llm.generator import ContentGenerator
from ..llm.prompts import PromptLibrary
from ..llm.retry import RetryPolicy
from ..models.content import ContentKind, GeneratedItem, parse_item
from ..models.datatypes import GenerationOutcome, GenerationUnit
from ..telemetry.logger import log_event
from ..text.similarity import SimilarityDeduplicator


@dataclass(frozen=True, slots=True)
class _UnitResult:
    """Items or failure produced by one generation unit."""

    index: int
    items: tuple[GeneratedItem, ...] = ()
    error: Exception | None = None


class GenerationOrchestrator:
    """Run generation units concurrently and merge their items."""

    def __init__(
        self,
        retry_policy: RetryPolicy | None = None,
        deduplicator: SimilarityDeduplicator | None = None,
        prompts: PromptLibrary | None = None,
    ) -> None:
        self.retry_policy = retry_policy or RetryPolicy()
        self.deduplicator = deduplicator or SimilarityDeduplicator()
        self.prompts = prompts or PromptLibrary()

    async def generate(
        self,
        units: Sequence[GenerationUnit],
        generator: ContentGenerator,
        requested_total: int,
        *,
        kind: ContentKind,
        difficulty: str,
    ) -> GenerationOutcome:
        """Generate, merge, and trim items for all units.

        A single unit is called once without deduplication, and its failure
        propagates. With several units each failure is logged and the unit
        contributes no items.
        """

        if not units:
            return GenerationOutcome(items=(), requested_total=requested_total)

        if len(units) == 1:
            items = await asyncio.to_thread(
                self._generate_unit, units[0], generator, kind, difficulty
            )
            final = self._force_difficulty(items, difficulty)[:requested_total]
            self._log_shortfall(len(final), requested_total)
            return GenerationOutcome(items=tuple(final), requested_total=requested_total)

        results = await self._fan_out(units, generator, kind, difficulty)

        merged: list[GeneratedItem] = []
        failed: list[int] = []
        for result in sorted(results, key=lambda item: item.index):
            if result.error is not None:
                failed.append(result.index)
                continue
            merged.extend(result.items)

        deduplicated = self.deduplicator.dedupe(merged)
        final = self._force_difficulty(deduplicated, difficulty)[:requested_total]
        self._log_shortfall(len(final), requested_total)
        return GenerationOutcome(
            items=tuple(final),
            requested_total=requested_total,
            failed_unit_indices=tuple(failed),
            duplicates_removed=len(merged) - len(deduplicated),
        )

    async def _fan_out(
        self,
        units: Sequence[GenerationUnit],
        generator: ContentGenerator,
        kind: ContentKind,
        difficulty: str,
    ) -> list[_UnitResult]:
        """Run every non-empty unit in one task group and collect per-unit results."""

        tasks: list[asyncio.Task[_UnitResult]] = []
        async with asyncio.TaskGroup() as group:
            for position, unit in enumerate(units):
                if unit.budget <= 0:
                    continue
                tasks.append(
                    group.create_task(
                        self._run_unit(position, unit, generator, kind, difficulty)
                    )
                )
        return [task.result() for task in tasks]

    async def _run_unit(
        self,
        position: int,
        unit: GenerationUnit,
        generator: ContentGenerator,
        kind: ContentKind,
        difficulty: str,
    ) -> _UnitResult:
        """Run one unit in a worker thread; failures become a result, never a raise."""

        try:
            items = await asyncio.to_thread(
                self._generate_unit, unit, generator, kind, difficulty
            )
        except Exception as exc:
            log_event(
                "WARNING",
                "generate",
                "unit_failed",
                unit=position,
                chunk=unit.chunk.index,
                error_type=type(exc).__name__,
                error_kind=_error_kind_label(exc),
            )
            return _UnitResult(index=position, error=exc)
        return _UnitResult(index=position, items=tuple(items))

    def _generate_unit(
        self,
        unit: GenerationUnit,
        generator: ContentGenerator,
        kind: ContentKind,
        difficulty: str,
    ) -> list[GeneratedItem]:
        """Call the collaborator under the retry policy and parse its payloads."""

        prompt = self.prompts.system_prompt(kind, unit.budget, difficulty)
        payloads = self.retry_policy.call(
            lambda: generator.generate(
                prompt=prompt,
                source_text=unit.chunk.text,
                budget=unit.budget,
                difficulty=difficulty,
            ),
            operation=f"generate-{kind.value}",
        )
        if not isinstance(payloads, list):
            raise CollaboratorError(
                "Generator must return a list of item payloads.",
                kind=ErrorKind.CONTRACT_VIOLATION,
            )
        return [parse_item(kind, payload) for payload in payloads]

    @staticmethod
    def _force_difficulty(
        items: Sequence[GeneratedItem], difficulty: str
    ) -> list[GeneratedItem]:
        return [item.with_difficulty(difficulty) for item in items]

    @staticmethod
    def _log_shortfall(produced: int, requested_total: int) -> None:
        if produced < requested_total:
            log_event(
                "WARNING",
                "generate",
                "shortfall",
                produced=produced,
                requested=requested_total,
            )


def _error_kind_label(error: Exception) -> str:
    if isinstance(error, CollaboratorError):
        return error.kind.value
    return "unclassified"
