"""
Batch Executor

Fans out a list of ``[method, url, options?]`` entries as concurrent tasks on
the session loop and joins on all of them. Results land in slots indexed by
input position, so output order never depends on completion order. Entries
are parsed and their options decoded on the coordinating thread; workers see
only plain values.
"""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Union

from ..exceptions import BatchItemShapeError, HttpModuleError
from ..host import HostTable, to_string_arg
from ..logging import LoggingTimer, get_logger
from .dispatcher import perform_request
from .options import decode_options
from .session import Session
from .structs import BatchOutcome, RequestDirectives, Response

PerformFn = Callable[[str, str, RequestDirectives], Awaitable[Response]]


@dataclass(frozen=True)
class BatchRequest:
    """One well-formed batch entry."""
    index: int
    method: str
    url: str
    directives: RequestDirectives


BatchEntry = Union[BatchRequest, BatchItemShapeError]


def _is_table(value: Any) -> bool:
    return isinstance(value, (HostTable, Mapping, list, tuple))


def _positional(item: Any, position: int) -> Any:
    """1-based positional field of a table-like batch entry."""
    if isinstance(item, HostTable):
        return item.raw_get(position)
    if isinstance(item, Mapping):
        return item.get(position)
    return item[position - 1] if position <= len(item) else None


def batch_items(requests: Any) -> List[Any]:
    """Entries of the batch argument; anything that is not a table is an empty batch."""
    if isinstance(requests, HostTable):
        return requests.array()
    if isinstance(requests, (list, tuple)):
        return list(requests)
    if isinstance(requests, Mapping):
        items = []
        index = 1
        while index in requests:
            items.append(requests[index])
            index += 1
        return items
    return []


def parse_batch(requests: Any) -> List[BatchEntry]:
    """
    Validate each entry independently.

    Non-table entries become BatchItemShapeError in their slot; a missing or
    non-table options field is treated as empty options.
    """
    entries: List[BatchEntry] = []
    for index, item in enumerate(batch_items(requests)):
        if not _is_table(item):
            entries.append(BatchItemShapeError())
            continue
        entries.append(BatchRequest(
            index=index,
            method=to_string_arg(_positional(item, 1)),
            url=to_string_arg(_positional(item, 2)),
            directives=decode_options(_positional(item, 3)),
        ))
    return entries


async def execute_batch(entries: List[BatchEntry], perform: PerformFn) -> BatchOutcome:
    """
    Run every well-formed entry concurrently and wait for all of them.

    Args:
        entries: Output of parse_batch
        perform: Coroutine performing one request, raising HttpModuleError on failure

    Returns:
        BatchOutcome with exactly one of response/error set per slot
    """
    count = len(entries)
    responses: List[Any] = [None] * count
    errors: List[Any] = [None] * count

    async def run(request: BatchRequest) -> None:
        try:
            responses[request.index] = await perform(request.method, request.url, request.directives)
        except HttpModuleError as e:
            errors[request.index] = str(e)

    tasks = []
    for index, entry in enumerate(entries):
        if isinstance(entry, BatchItemShapeError):
            errors[index] = str(entry)
            continue
        tasks.append(asyncio.ensure_future(run(entry)))

    if tasks:
        results = await asyncio.gather(*tasks, return_exceptions=True)
        # Join first, then surface anything that is not a request failure
        for result in results:
            if isinstance(result, BaseException):
                raise result

    return BatchOutcome(responses=responses, errors=errors)


class BatchExecutor:
    """Synchronous batch entry point bound to one session."""

    def __init__(self, session: Session):
        self.session = session
        self.logger = get_logger('hosthttp.batch')

    async def _perform(self, method: str, url: str, directives: RequestDirectives) -> Response:
        return await perform_request(self.session, method, url, directives)

    async def _execute(self, entries: List[BatchEntry]) -> BatchOutcome:
        outcome = await execute_batch(entries, self._perform)
        self.session.record_batch()
        return outcome

    def execute(self, requests: Any) -> BatchOutcome:
        entries = parse_batch(requests)
        with LoggingTimer(self.logger, "batch", size=len(entries)):
            outcome = self.session.run(self._execute(entries))

        failures = sum(1 for error in outcome.errors if error is not None)
        self.logger.debug("Batch completed", size=len(entries), failures=failures)
        if failures:
            self.logger.counter("batch_failures", failures)
        return outcome
