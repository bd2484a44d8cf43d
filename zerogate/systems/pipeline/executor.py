"""
ZeroGate — Validator Executor

Runs validator callables for a batch of verification points with a
bounded worker pool and a per-call timeout.

Every outcome is data: a validator that raises, times out, or returns
something other than a TestResult yields a failing TestResult whose
error_details carry the reason. Nothing a validator does can escape
as an exception or stall its layer past the timeout.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping, Sequence

import structlog

from zerogate.errors import ValidatorError
from zerogate.primitives.common import utc_now
from zerogate.systems.pipeline.types import TestResult, Validator, VerificationMetadata
from zerogate.systems.registry.types import VerificationPointDefinition

logger = structlog.get_logger().bind(system="zerogate.pipeline.executor")

DEFAULT_MAX_CONCURRENCY = 16
DEFAULT_VALIDATOR_TIMEOUT_S = 30.0


def metadata_for(definition: VerificationPointDefinition) -> VerificationMetadata:
    return VerificationMetadata(
        category=definition.category,
        subcategory=definition.subcategory,
        criticality=definition.criticality,
        layer=definition.layer,
    )


class ValidatorExecutor:
    """
    Scatter/gather over validators with at most max_concurrency in flight.

    The semaphore is created per batch so one executor can serve
    concurrent pipeline runs without their limits bleeding together.
    """

    def __init__(
        self,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        timeout_s: float = DEFAULT_VALIDATOR_TIMEOUT_S,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        if timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
        self._max_concurrency = max_concurrency
        self._timeout_s = timeout_s
        self._log = logger

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    async def run_batch(
        self,
        definitions: Sequence[VerificationPointDefinition],
        validators: Mapping[str, Validator],
    ) -> list[TestResult]:
        """Run one validator per definition. Results keep definition order."""
        if not definitions:
            return []

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def run_one(definition: VerificationPointDefinition) -> TestResult:
            async with semaphore:
                return await self.run_one(definition, validators.get(definition.id))

        return list(await asyncio.gather(*(run_one(d) for d in definitions)))

    async def run_one(
        self,
        definition: VerificationPointDefinition,
        validator: Validator | None,
    ) -> TestResult:
        start = time.monotonic()
        try:
            if validator is None:
                raise ValidatorError(f"No validator bound for {definition.id}")
            try:
                outcome = await asyncio.wait_for(validator(), timeout=self._timeout_s)
            except TimeoutError as exc:
                raise ValidatorError(
                    f"Validator timed out after {self._timeout_s}s"
                ) from exc
            if not isinstance(outcome, TestResult):
                raise ValidatorError(
                    f"Validator returned {type(outcome).__name__}, expected TestResult"
                )
        except Exception as exc:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            self._log.warning(
                "validator_failed",
                verification_id=definition.id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return TestResult(
                passed=False,
                verification_id=definition.id,
                timestamp=utc_now(),
                execution_time_ms=elapsed_ms,
                error_details=str(exc) or type(exc).__name__,
                metadata=metadata_for(definition),
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        return outcome.model_copy(
            update={
                "verification_id": definition.id,
                "execution_time_ms": elapsed_ms,
                "metadata": metadata_for(definition),
            }
        )
