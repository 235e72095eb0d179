import asyncio

import pytest

from demo_steps import DemoStep, NoRollbackStep, RecordingStep
from seqtask.domain.errors import (
    StepNotPendingError,
    StepNotSuccessError,
    StepRollbackUnsupportedError,
    ValidationError,
)
from seqtask.domain.states import StepStatus


def _record_statuses(step) -> list:
    seen: list = []
    step.on("status", lambda s: seen.append(s.status))
    return seen


@pytest.mark.asyncio
async def test_run_one_step_with_wait_before_action():
    step = DemoStep({"value": "demo", "roll": 0})
    waiter = asyncio.create_task(step.wait())
    assert step.to_json() == {"key": "step1", "status": "init", "value": "demo", "roll": 0}

    step.status = StepStatus.PENDING  # only pending steps can run
    assert step.to_json() == {"key": "step1", "status": "pending", "value": "demo", "roll": 0}

    data = await step.action()
    assert data == {"data": "demo world!"}
    assert step.to_json() == {"key": "step1", "status": "success", "value": "demo", "roll": 1}

    assert await step.cancel() is True
    assert step.to_json() == {"key": "step1", "status": "init", "value": "demo", "roll": 0}
    assert await waiter == {"data": "demo world!"}


@pytest.mark.asyncio
async def test_wait_after_done_and_rolled_back():
    step = DemoStep({"value": "demo", "roll": 0})
    step.status = StepStatus.PENDING
    await step.action()
    await step.cancel()
    assert step.status is StepStatus.INIT

    assert await step.wait() == {"data": "demo world!"}
    # settled once; a second wait does not re-run anything
    assert await step.wait() == {"data": "demo world!"}
    assert step.payload["roll"] == 0


@pytest.mark.asyncio
async def test_failed_action_then_cancel_is_rejected():
    step = DemoStep({"value": "error", "roll": 0})
    step.status = StepStatus.PENDING

    with pytest.raises(RuntimeError, match="action error"):
        await step.action()
    assert step.to_json() == {"key": "step1", "status": "failure", "value": "error", "roll": 0}

    with pytest.raises(StepNotSuccessError) as exc:
        await step.cancel()
    assert str(exc.value) == "TaskStep not in success state"
    assert step.status is StepStatus.FAILURE


@pytest.mark.asyncio
async def test_action_requires_pending():
    step = DemoStep({"value": "demo", "roll": 0})
    seen = _record_statuses(step)

    with pytest.raises(StepNotPendingError) as exc:
        await step.action()
    assert str(exc.value) == "TaskStep not in pending state"
    assert exc.value.code == "STEP_NOT_PENDING"
    assert step.status is StepStatus.INIT
    assert seen == []


@pytest.mark.asyncio
async def test_status_sequence_and_action_event():
    step = DemoStep({"value": "demo", "roll": 0})
    seen = _record_statuses(step)
    actions: list = []
    step.on("action", lambda s, data: actions.append((s.status, data)))

    step.status = StepStatus.PENDING
    await step.action()

    assert seen == [StepStatus.PENDING, StepStatus.RUNNING, StepStatus.SUCCESS]
    # emitted before the step is marked successful
    assert actions == [(StepStatus.RUNNING, {"data": "demo world!"})]


@pytest.mark.asyncio
async def test_already_complete_skips_action_handler():
    # left RUNNING by a previous process after its side effect happened
    step = DemoStep({"value": "demo", "roll": 1}, status="running")
    assert step.interrupted
    seen = _record_statuses(step)
    actions: list = []
    step.on("action", lambda s, data: actions.append(data))

    step.status = StepStatus.PENDING
    assert await step.action() is None

    assert step.payload["roll"] == 1
    assert seen == [StepStatus.PENDING, StepStatus.SUCCESS]
    assert actions == []
    assert not step.interrupted
    assert await step.wait() is None


@pytest.mark.asyncio
async def test_wait_rejects_when_action_fails():
    step = DemoStep({"value": "error", "roll": 0})
    waiter = asyncio.create_task(step.wait())
    step.status = StepStatus.PENDING

    with pytest.raises(RuntimeError):
        await step.action()
    with pytest.raises(RuntimeError, match="action error"):
        await waiter
    # later waiters see the same outcome
    with pytest.raises(RuntimeError, match="action error"):
        await step.wait()

    # once seen, the failure stays even if a retry succeeds
    step.payload["value"] = "demo"
    step.status = StepStatus.PENDING
    assert await step.action() == {"data": "demo world!"}
    with pytest.raises(RuntimeError, match="action error"):
        await step.wait()


@pytest.mark.asyncio
async def test_retry_success_replaces_unseen_failure():
    step = DemoStep({"value": "error", "roll": 0})
    step.status = StepStatus.PENDING
    with pytest.raises(RuntimeError, match="action error"):
        await step.action()

    step.payload["value"] = "demo"
    step.status = StepStatus.PENDING
    assert await step.action() == {"data": "demo world!"}

    assert await step.wait() == {"data": "demo world!"}
    assert await step.wait() == {"data": "demo world!"}


@pytest.mark.asyncio
async def test_wait_on_step_rebuilt_as_success():
    step = DemoStep.from_json({"key": "step1", "status": "success", "value": "demo", "roll": 1})
    assert step.is_done()

    assert await asyncio.wait_for(step.wait(), timeout=1.0) is None
    assert await step.cancel() is True
    assert await step.wait() is None


@pytest.mark.asyncio
async def test_pre_validation_failure_marks_failure(call_log):
    class BrokenCheck(RecordingStep):
        KEY = "broken_check"

        async def handle_pre_validation(self):
            raise LookupError("state unavailable")

    step = BrokenCheck({"label": "a"}, log=call_log)
    step.status = StepStatus.PENDING

    with pytest.raises(LookupError):
        await step.action()
    assert step.status is StepStatus.FAILURE
    assert call_log == []
    with pytest.raises(LookupError):
        await step.wait()


@pytest.mark.asyncio
async def test_cancel_requires_rollback_support(call_log):
    step = NoRollbackStep({"label": "x"}, log=call_log)
    step.status = StepStatus.PENDING
    await step.action()

    with pytest.raises(StepRollbackUnsupportedError) as exc:
        await step.cancel()
    assert str(exc.value) == "TaskStep does not support rollback"
    assert step.status is StepStatus.SUCCESS
    assert ("cancel", "x") not in call_log


@pytest.mark.asyncio
async def test_cancel_handler_error_marks_failure():
    step = DemoStep({"value": "cancel_error", "roll": 0})
    seen = _record_statuses(step)
    step.status = StepStatus.PENDING
    await step.action()

    with pytest.raises(RuntimeError, match="cancel error"):
        await step.cancel()
    assert step.to_json() == {"key": "step1", "status": "failure", "value": "cancel_error", "roll": 1}
    assert seen[-2:] == [StepStatus.ROLLBACK, StepStatus.FAILURE]


@pytest.mark.asyncio
async def test_partial_compensation_returns_to_init(call_log):
    step = RecordingStep({"label": "p", "cancel_result": False}, log=call_log)
    step.status = StepStatus.PENDING
    await step.action()

    assert await step.cancel() is False
    assert step.status is StepStatus.INIT


@pytest.mark.asyncio
async def test_round_trip_reproduces_result():
    step = DemoStep({"value": "demo", "roll": 0})
    step.status = StepStatus.PENDING
    first = await step.action()
    await step.cancel()
    assert step.payload == {"value": "demo", "roll": 0}

    step.status = StepStatus.PENDING
    assert await step.action() == first
    assert step.payload == {"value": "demo", "roll": 1}


def test_from_json_owns_its_payload():
    source = {"key": "step1", "status": "success", "value": "demo", "roll": 1, "tags": ["a"]}
    step = DemoStep.from_json(source)

    assert step.status is StepStatus.SUCCESS
    assert step.to_json() == source
    step.payload["tags"].append("b")
    assert source["tags"] == ["a"]


def test_from_json_rejects_other_key():
    with pytest.raises(ValidationError) as exc:
        DemoStep.from_json({"key": "other", "status": "init"})
    assert exc.value.details == {"expected": "step1", "key": "other"}


def test_listener_error_propagates_from_status_write():
    step = DemoStep({"value": "demo", "roll": 0})

    def boom(s):
        raise RuntimeError("listener failed")

    step.on("status", boom)
    with pytest.raises(RuntimeError, match="listener failed"):
        step.status = StepStatus.PENDING
    # the write itself happened before listeners ran
    assert step.status is StepStatus.PENDING

    step.off("status", boom)
    step.status = StepStatus.INIT
    assert step.listener_count("status") == 0
