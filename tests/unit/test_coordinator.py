"""
Test suite for the inference coordinator.

Verifies:
- Unavailable backend short-circuits (no session, no backend call)
- Successful generation returns backend text
- Backend failures surface as BackendFailureError with the cause chained
- Sessions are fresh per call and released on every exit path
- Concurrent generations never overlap and run in arrival order
- Optional timeout bounds a hung backend
"""

import asyncio
import time

import pytest

from inference import (
    BackendFailureError,
    InferenceCoordinator,
    ModelUnavailableError,
    ServiceError,
    StubModelBackend,
    UnavailableReason,
)


class RecordingBackend(StubModelBackend):
    """Stub that records when each generation starts and ends."""

    def __init__(self, delay_s: float = 0.02):
        super().__init__()
        self.delay_s = delay_s
        self.intervals = []
        self.active = 0
        self.max_active = 0
        self.session_ids = []

    async def generate(self, session, prompt):
        self.session_ids.append(session.session_id)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        start = time.perf_counter()
        await asyncio.sleep(self.delay_s)
        end = time.perf_counter()
        self.active -= 1
        self.intervals.append((start, end, prompt))
        return f"echo: {prompt}"


class BlockingBackend(StubModelBackend):
    """Stub that waits until released."""

    def __init__(self):
        super().__init__(response="done")
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def generate(self, session, prompt):
        self.entered.set()
        await self.release.wait()
        return self.response


class HangingAvailabilityBackend(StubModelBackend):
    """Readiness query never answers while ``hang`` is set."""

    def __init__(self):
        super().__init__()
        self.hang = True
        self.hanging = asyncio.Event()

    async def availability(self):
        if self.hang:
            self.hanging.set()
            await asyncio.Event().wait()
        return await super().availability()


class NonTextBackend(StubModelBackend):
    async def generate(self, session, prompt):
        return {"content": "not a string"}


class TestUnavailable:
    """Test the availability short-circuit."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reason", list(UnavailableReason))
    async def test_no_session_and_no_backend_call(self, reason):
        backend = StubModelBackend(unavailable_reason=reason)
        coordinator = InferenceCoordinator(backend)

        with pytest.raises(ModelUnavailableError) as exc_info:
            await coordinator.generate("Hello")

        assert backend.sessions_opened == 0
        assert backend.prompts == []
        assert exc_info.value.reason == await coordinator.oracle.diagnostic_message()

    @pytest.mark.asyncio
    async def test_unavailable_is_a_503_service_error(self):
        coordinator = InferenceCoordinator(StubModelBackend(unavailable_reason="model_not_ready"))

        with pytest.raises(ServiceError) as exc_info:
            await coordinator.generate("Hello")

        assert exc_info.value.status_code == 503
        assert exc_info.value.reason == "Model is downloading or not ready yet"


class TestGenerate:
    """Test the happy path and backend failures."""

    @pytest.mark.asyncio
    async def test_returns_backend_text(self):
        backend = StubModelBackend(response="Hi there!")
        coordinator = InferenceCoordinator(backend)

        assert await coordinator.generate("Hello") == "Hi there!"
        assert backend.prompts == ["Hello"]

    @pytest.mark.asyncio
    async def test_fresh_session_per_call(self):
        backend = RecordingBackend(delay_s=0)
        coordinator = InferenceCoordinator(backend)

        await coordinator.generate("one")
        await coordinator.generate("two")

        assert backend.sessions_opened == 2
        assert backend.sessions_closed == 2
        assert len(set(backend.session_ids)) == 2

    @pytest.mark.asyncio
    async def test_backend_error_is_wrapped(self):
        cause = RuntimeError("GPU fell over")
        backend = StubModelBackend(error=cause)
        coordinator = InferenceCoordinator(backend)

        with pytest.raises(BackendFailureError) as exc_info:
            await coordinator.generate("Hello")

        assert exc_info.value.__cause__ is cause
        assert not isinstance(exc_info.value, ServiceError)

    @pytest.mark.asyncio
    async def test_session_released_after_backend_error(self):
        backend = StubModelBackend(error=ValueError("malformed output"))
        coordinator = InferenceCoordinator(backend)

        with pytest.raises(BackendFailureError):
            await coordinator.generate("Hello")

        assert backend.sessions_opened == 1
        assert backend.sessions_closed == 1
        assert coordinator.busy is False

    @pytest.mark.asyncio
    async def test_non_text_output_is_a_backend_failure(self):
        coordinator = InferenceCoordinator(NonTextBackend())

        with pytest.raises(BackendFailureError):
            await coordinator.generate("Hello")

    @pytest.mark.asyncio
    async def test_coordinator_recovers_after_failure(self):
        backend = StubModelBackend(response="ok", error=RuntimeError("once"))
        coordinator = InferenceCoordinator(backend)

        with pytest.raises(BackendFailureError):
            await coordinator.generate("first")

        backend.error = None
        assert await coordinator.generate("second") == "ok"


class TestTimeoutAndCancellation:
    """Test bounded waits and release on cancellation."""

    @pytest.mark.asyncio
    async def test_timeout_raises_backend_failure(self):
        backend = RecordingBackend(delay_s=1.0)
        coordinator = InferenceCoordinator(backend, timeout_s=0.05)

        with pytest.raises(BackendFailureError) as exc_info:
            await coordinator.generate("slow")

        assert isinstance(exc_info.value.__cause__, asyncio.TimeoutError)
        assert backend.sessions_closed == 1
        assert coordinator.busy is False

    @pytest.mark.asyncio
    async def test_none_timeout_means_unbounded(self):
        coordinator = InferenceCoordinator(StubModelBackend())
        assert coordinator.timeout_s is None
        assert coordinator.oracle.timeout_s is None

    @pytest.mark.parametrize("timeout_s", [0, -1, -0.5])
    def test_non_positive_timeout_rejected(self, timeout_s):
        with pytest.raises(ValueError):
            InferenceCoordinator(StubModelBackend(), timeout_s=timeout_s)

    @pytest.mark.asyncio
    async def test_hanging_availability_query_is_bounded(self):
        """A stalled readiness query must not hold the lock forever."""
        backend = HangingAvailabilityBackend()
        coordinator = InferenceCoordinator(backend, timeout_s=0.05)

        with pytest.raises(ModelUnavailableError) as exc_info:
            await asyncio.wait_for(coordinator.generate("Hello"), timeout=1.0)

        assert exc_info.value.reason == "Model is unavailable for unknown reason"
        assert backend.sessions_opened == 0
        assert coordinator.busy is False

    @pytest.mark.asyncio
    async def test_queued_call_proceeds_after_hanging_availability(self):
        backend = HangingAvailabilityBackend()
        coordinator = InferenceCoordinator(backend, timeout_s=0.05)

        first = asyncio.create_task(coordinator.generate("first"))
        await asyncio.wait_for(backend.hanging.wait(), timeout=1.0)
        backend.hang = False
        second = await asyncio.wait_for(coordinator.generate("second"), timeout=1.0)

        with pytest.raises(ModelUnavailableError):
            await first
        assert second == "This is a stubbed response."

    @pytest.mark.asyncio
    async def test_cancelled_task_releases_session_and_lock(self):
        backend = BlockingBackend()
        coordinator = InferenceCoordinator(backend)

        task = asyncio.create_task(coordinator.generate("Hello"))
        await backend.entered.wait()
        assert coordinator.busy is True

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert backend.sessions_closed == 1
        assert coordinator.busy is False


class TestSerialization:
    """Test mutual exclusion around the backend."""

    @pytest.mark.asyncio
    async def test_concurrent_calls_never_overlap(self):
        backend = RecordingBackend(delay_s=0.02)
        coordinator = InferenceCoordinator(backend)

        results = await asyncio.gather(*(coordinator.generate(f"p{i}") for i in range(5)))

        assert results == [f"echo: p{i}" for i in range(5)]
        assert backend.max_active == 1

        intervals = sorted(backend.intervals)
        for (_, prev_end, _), (next_start, _, _) in zip(intervals, intervals[1:]):
            assert prev_end <= next_start

    @pytest.mark.asyncio
    async def test_calls_served_in_arrival_order(self):
        backend = RecordingBackend(delay_s=0.01)
        coordinator = InferenceCoordinator(backend)

        await asyncio.gather(*(coordinator.generate(f"p{i}") for i in range(4)))

        assert [prompt for _, _, prompt in backend.intervals] == ["p0", "p1", "p2", "p3"]

    @pytest.mark.asyncio
    async def test_availability_reads_while_generating(self):
        """The oracle is not behind the lock."""
        backend = BlockingBackend()
        coordinator = InferenceCoordinator(backend)

        task = asyncio.create_task(coordinator.generate("Hello"))
        await backend.entered.wait()

        assert await asyncio.wait_for(coordinator.oracle.is_available(), timeout=1.0) is True

        backend.release.set()
        assert await task == "done"
