"""RunQuotaResetUseCase and QuotaResetScheduler with an in-memory token store."""

import asyncio
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import pytest

from fakes import InMemorySystemTokenRepository
from notifyhub.application.dtos.system_token import QuotaResetRunResult, SystemTokenResult
from notifyhub.application.use_cases import RunQuotaResetUseCase
from notifyhub.domain.exceptions import QuotaResetInProgressException
from notifyhub.infrastructure.scheduler import QuotaResetScheduler

NOW = datetime(2024, 6, 20, 12, tzinfo=UTC)


def _token(token_id: str, created_at: datetime, calls: int = 5, last_reset_at=None) -> SystemTokenResult:
    return SystemTokenResult(
        id=token_id,
        max_calls=10,
        calls=calls,
        total_calls=calls,
        failed_calls=0,
        total_failed_calls=0,
        scopes=[],
        expires_at=None,
        last_reset_at=last_reset_at,
        requester_id=None,
        requester_identifier=None,
        description=None,
        created_at=created_at,
    )


@pytest.fixture
def repo() -> InMemorySystemTokenRepository:
    return InMemorySystemTokenRepository()


def _scope(repo: InMemorySystemTokenRepository):
    @asynccontextmanager
    async def scope():
        yield repo

    return scope


async def test_resets_only_tokens_past_their_period(repo) -> None:
    repo.put(_token("due", datetime(2024, 5, 1, tzinfo=UTC)))
    repo.put(_token("fresh", datetime(2024, 6, 1, tzinfo=UTC)))
    repo.put(
        _token(
            "already",
            datetime(2024, 1, 15, tzinfo=UTC),
            calls=2,
            last_reset_at=datetime(2024, 6, 15, tzinfo=UTC),
        )
    )

    result = await RunQuotaResetUseCase(_scope(repo)).run(now=NOW)

    assert result == QuotaResetRunResult(tokens_scanned=3, tokens_reset=1, error_count=0)
    due = repo.rows["due"].token
    assert due.calls == 0
    assert due.total_calls == 5
    assert due.last_reset_at == datetime(2024, 6, 1, tzinfo=UTC)
    assert repo.rows["fresh"].token.calls == 5
    assert repo.rows["already"].token.calls == 2


async def test_second_run_in_same_period_changes_nothing(repo) -> None:
    repo.put(_token("t1", datetime(2024, 3, 10, tzinfo=UTC)))
    use_case = RunQuotaResetUseCase(_scope(repo))
    first = await use_case.run(now=NOW)
    second = await use_case.run(now=NOW)
    assert first.tokens_reset == 1
    assert second.tokens_reset == 0
    assert repo.rows["t1"].token.last_reset_at == datetime(2024, 6, 10, tzinfo=UTC)


async def test_pages_through_all_tokens(repo) -> None:
    for day in range(1, 8):
        repo.put(_token(f"t{day}", datetime(2024, 4, day, tzinfo=UTC)))
    result = await RunQuotaResetUseCase(_scope(repo), batch_size=3).run(now=NOW)
    assert result.tokens_scanned == 7
    assert result.tokens_reset == 7


async def test_per_token_failure_does_not_stop_the_batch(repo) -> None:
    repo.put(_token("a", datetime(2024, 4, 1, tzinfo=UTC)))
    repo.put(_token("b", datetime(2024, 4, 2, tzinfo=UTC)))
    repo.put(_token("c", datetime(2024, 4, 3, tzinfo=UTC)))
    repo.fail_reset_for = {"b"}
    result = await RunQuotaResetUseCase(_scope(repo)).run(now=NOW)
    assert result.tokens_reset == 2
    assert result.error_count == 1
    assert repo.rows["c"].token.calls == 0


async def test_failed_batch_commit_is_counted_and_run_continues(repo) -> None:
    for day in range(1, 5):
        repo.put(_token(f"t{day}", datetime(2024, 4, day, tzinfo=UTC)))
    commits = 0

    @asynccontextmanager
    async def flaky_scope():
        nonlocal commits
        yield repo
        commits += 1
        if commits == 1:
            raise RuntimeError("commit failed")

    result = await RunQuotaResetUseCase(flaky_scope, batch_size=2).run(now=NOW)
    assert result.failed_batches == 1
    assert result.tokens_scanned == 4
    # Only the batch that committed is reported as reset.
    assert result.tokens_reset == 2


async def test_listing_failure_ends_the_run() -> None:
    class BrokenRepo(InMemorySystemTokenRepository):
        async def list_reset_candidates(self, offset, limit):
            raise RuntimeError("db down")

    result = await RunQuotaResetUseCase(_scope(BrokenRepo())).run(now=NOW)
    assert result == QuotaResetRunResult(
        tokens_scanned=0, tokens_reset=0, error_count=0, failed_batches=1
    )


def test_batch_size_must_be_positive(repo) -> None:
    with pytest.raises(ValueError):
        RunQuotaResetUseCase(_scope(repo), batch_size=0)


# ---- scheduler ----


class _SlowUseCase:
    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.runs = 0

    async def run(self) -> QuotaResetRunResult:
        self.runs += 1
        self.started.set()
        await self.release.wait()
        return QuotaResetRunResult(tokens_scanned=1, tokens_reset=1, error_count=0)


async def test_scheduler_never_overlaps_runs() -> None:
    use_case = _SlowUseCase()
    scheduler = QuotaResetScheduler(lambda: use_case, interval_seconds=3600)

    first = asyncio.create_task(scheduler.run_once())
    await use_case.started.wait()
    assert scheduler.is_running
    assert await scheduler.run_once() is None
    with pytest.raises(QuotaResetInProgressException):
        await scheduler.trigger()

    use_case.release.set()
    result = await first
    assert result is not None and result.tokens_reset == 1
    assert use_case.runs == 1
    assert scheduler.last_result == result
    assert not scheduler.is_running


async def test_scheduler_start_runs_immediately_and_stops() -> None:
    use_case = _SlowUseCase()
    use_case.release.set()
    scheduler = QuotaResetScheduler(lambda: use_case, interval_seconds=3600)
    scheduler.start()
    await asyncio.wait_for(use_case.started.wait(), timeout=1)
    assert scheduler.is_started
    await scheduler.stop()
    assert not scheduler.is_started
    assert use_case.runs == 1


async def test_scheduler_loop_survives_a_failed_run() -> None:
    calls = 0
    done = asyncio.Event()

    class Failing:
        async def run(self):
            nonlocal calls
            calls += 1
            if calls >= 2:
                done.set()
            raise RuntimeError("boom")

    scheduler = QuotaResetScheduler(lambda: Failing(), interval_seconds=0.01)
    scheduler.start()
    await asyncio.wait_for(done.wait(), timeout=1)
    await scheduler.stop()
    assert calls >= 2
