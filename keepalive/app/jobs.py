from starlette.concurrency import run_in_threadpool

from .errors import HistoryBackingUnavailable
from .history import AppendOutcome, HistoryStore, RunRecord
from .runner import KeepAliveRunner, RunResult


async def keep_alive(runner: KeepAliveRunner, history: HistoryStore, source: str) -> RunResult:
    """Run the checks once and record the outcome in the history log."""
    result = await runner.run(source)
    record = RunRecord.from_result(result.success, result.messages)
    # store backends do blocking I/O
    outcome = await run_in_threadpool(history.append, record)
    if outcome is AppendOutcome.DEGRADED_NOOP and history.configured:
        result.failures.append(HistoryBackingUnavailable.category)
    return result
