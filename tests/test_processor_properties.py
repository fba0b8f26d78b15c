"""
Property-based tests for the domain processor.

A fake availability checker decides verdicts from the domain name and yields
to the event loop a few times per check, so checks genuinely interleave.
"""

import asyncio
import string
from io import StringIO

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_sweep.audit_logger import AuditLogger
from domain_sweep.config import CheckerConfig
from domain_sweep.enums import LogLevel, ProcessorEvent, ProcessorState, TaskState
from domain_sweep.exceptions import AlreadyEndedError, NetworkError
from domain_sweep.processor import DomainProcessor


class FakeChecker:
    """
    Availability checker for tests.

    Names starting with "free" are available, names starting with "fail"
    raise NetworkError, everything else is taken.
    """

    def __init__(self, steps: int = 3) -> None:
        self.steps = steps
        self.active = 0
        self.max_active = 0
        self.checked: list[str] = []

    async def is_available(self, domain: str) -> bool:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            for _ in range(self.steps):
                await asyncio.sleep(0)
            self.checked.append(domain)
            if domain.startswith("fail"):
                raise NetworkError(code="timeout", message=f"timeout for {domain}")
            return domain.startswith("free")
        finally:
            self.active -= 1


def make_processor(concurrency: int = 30, steps: int = 3, logger=None):
    checker = FakeChecker(steps)
    processor = DomainProcessor(
        config=CheckerConfig(concurrency=concurrency),
        checker=checker,
        logger=logger,
    )
    return processor, checker


def name_strategy() -> st.SearchStrategy[str]:
    prefix = st.sampled_from(["free", "fail", "taken"])
    label = st.text(alphabet=string.ascii_letters + string.digits, min_size=1, max_size=6)
    return st.builds(lambda p, l: f"{p}{l}.com", prefix, label)


async def run_batch(processor: DomainProcessor, names: list[str]) -> None:
    for name in names:
        processor.add(name)
    processor.end()
    await processor.wait_ended()


class TestDeduplicationProperty:
    """
    Property 1: Each distinct domain (case-insensitively) is checked once.
    """

    @given(names=st.lists(name_strategy(), max_size=30), data=st.data())
    @settings(max_examples=50)
    def test_duplicates_are_counted_not_checked(self, names: list[str], data) -> None:
        """
        *For any* list of names including case variants, size SHALL be the
        number of distinct lowercase names and duplicated the remainder.
        """
        variants = [data.draw(st.sampled_from([n, n.upper(), n.lower()])) for n in names]
        submitted = names + variants
        distinct = {n.lower() for n in submitted}

        async def scenario():
            processor, checker = make_processor()
            await run_batch(processor, submitted)
            return processor, checker

        processor, checker = asyncio.run(scenario())

        assert processor.size == len(distinct)
        assert processor.duplicated == len(submitted) - len(distinct)
        assert sorted(checker.checked) == sorted(distinct)

    def test_case_variant_is_a_duplicate(self) -> None:
        async def scenario():
            processor, _ = make_processor()
            await run_batch(processor, ["Example.COM", "example.com"])
            return processor

        processor = asyncio.run(scenario())

        assert processor.size == 1
        assert processor.duplicated == 1
        assert processor.get_task("EXAMPLE.com").domain == "example.com"


class TestCountersProperty:
    """
    Property 2: Counters are consistent once the processor has ended.
    """

    @given(names=st.lists(name_strategy(), max_size=40), concurrency=st.integers(1, 8))
    @settings(max_examples=50)
    def test_counters_at_completion(self, names: list[str], concurrency: int) -> None:
        """
        *For any* batch, at END finished SHALL equal size and
        succeeded + failed SHALL equal finished.
        """
        async def scenario():
            processor, _ = make_processor(concurrency=concurrency)
            await run_batch(processor, names)
            return processor

        processor = asyncio.run(scenario())
        distinct = {n.lower() for n in names}
        failing = {n for n in distinct if n.startswith("fail")}

        assert processor.finished == processor.size == len(distinct)
        assert processor.succeeded + processor.failed == processor.finished
        assert processor.failed == len(failing)
        assert processor.pending == 0
        assert processor.running == 0
        assert processor.state == ProcessorState.ENDED

    @given(names=st.lists(name_strategy(), min_size=1, max_size=20, unique_by=str.lower))
    @settings(max_examples=30)
    def test_task_states(self, names: list[str]) -> None:
        async def scenario():
            processor, _ = make_processor()
            await run_batch(processor, names)
            return processor

        processor = asyncio.run(scenario())

        for name in names:
            task = processor.get_task(name)
            if name.lower().startswith("fail"):
                assert task.state == TaskState.FAILED
                assert isinstance(task.error, NetworkError)
            else:
                assert task.state == TaskState.SUCCEEDED
                assert task.available is name.lower().startswith("free")


class TestConcurrencyBoundProperty:
    """
    Property 3: No more than `concurrency` checks run at the same time.
    """

    @given(
        count=st.integers(min_value=0, max_value=60),
        concurrency=st.integers(min_value=1, max_value=10),
        steps=st.integers(min_value=1, max_value=5),
    )
    @settings(max_examples=50)
    def test_running_never_exceeds_concurrency(self, count: int, concurrency: int, steps: int) -> None:
        observed: list[int] = []

        async def scenario():
            processor, checker = make_processor(concurrency=concurrency, steps=steps)
            processor.on(ProcessorEvent.NEXT, lambda d, a: observed.append(processor.running))
            await run_batch(processor, [f"taken{i}.com" for i in range(count)])
            return checker

        checker = asyncio.run(scenario())

        assert checker.max_active <= concurrency
        assert all(running <= concurrency for running in observed)
        if count >= concurrency:
            assert checker.max_active == concurrency

    def test_scheduling_starts_immediately(self) -> None:
        async def scenario():
            processor, _ = make_processor(concurrency=2)
            for i in range(5):
                processor.add(f"taken{i}.com")
            snapshot = (processor.running, processor.pending)
            processor.end()
            await processor.wait_ended()
            return snapshot

        assert asyncio.run(scenario()) == (2, 3)


class TestEndEventProperty:
    """
    Property 4: END is emitted exactly once, asynchronously, after all work.
    """

    @given(names=st.lists(name_strategy(), max_size=20))
    @settings(max_examples=50)
    def test_end_emitted_once_after_all_results(self, names: list[str]) -> None:
        events: list[str] = []

        async def scenario():
            processor, _ = make_processor(concurrency=3)
            processor.on(ProcessorEvent.NEXT, lambda d, a: events.append("next"))
            processor.on(ProcessorEvent.FAILED, lambda d, e: events.append("failed"))
            processor.on(ProcessorEvent.END, lambda: events.append("end"))
            await run_batch(processor, names)
            processor.end()
            for _ in range(5):
                await asyncio.sleep(0)

        asyncio.run(scenario())

        distinct = {n.lower() for n in names}
        assert events.count("end") == 1
        assert events[-1] == "end"
        assert len(events) == len(distinct) + 1

    def test_end_on_empty_processor_is_not_synchronous(self) -> None:
        events: list[str] = []

        async def scenario():
            processor, _ = make_processor()
            processor.on(ProcessorEvent.END, lambda: events.append("end"))
            processor.end()
            during = list(events)
            await processor.wait_ended()
            return during

        during = asyncio.run(scenario())

        assert during == []
        assert events == ["end"]

    def test_idle_precedes_end(self) -> None:
        events: list[str] = []

        async def scenario():
            processor, _ = make_processor()
            processor.on(ProcessorEvent.IDLE, lambda: events.append("idle"))
            processor.on(ProcessorEvent.END, lambda: events.append("end"))
            await run_batch(processor, ["free1.com"])

        asyncio.run(scenario())

        assert events == ["idle", "end"]

    def test_wait_ended_after_end(self) -> None:
        async def scenario():
            processor, _ = make_processor()
            await run_batch(processor, ["taken.com"])
            await processor.wait_ended()
            return processor.state

        assert asyncio.run(scenario()) == ProcessorState.ENDED

    def test_context_manager_ends(self) -> None:
        async def scenario():
            async with make_processor()[0] as processor:
                processor.add("free.com")
            return processor

        processor = asyncio.run(scenario())

        assert processor.state == ProcessorState.ENDED
        assert processor.succeeded == 1


class TestAlreadyEndedProperty:
    """
    Property 5: Adding to an ended processor raises AlreadyEndedError.
    """

    def test_add_after_end_raises(self) -> None:
        async def scenario():
            processor, _ = make_processor()
            await run_batch(processor, ["taken.com"])
            with pytest.raises(AlreadyEndedError):
                processor.add("another.com")
            return processor

        processor = asyncio.run(scenario())
        assert processor.size == 1

    def test_add_after_end_on_idle_processor_raises(self) -> None:
        async def scenario():
            processor, _ = make_processor()
            processor.end()
            with pytest.raises(AlreadyEndedError):
                processor.add("late.com")
            await processor.wait_ended()

        asyncio.run(scenario())

    def test_add_while_draining_is_accepted(self) -> None:
        async def scenario():
            processor, _ = make_processor(concurrency=1)
            processor.add("taken1.com")
            processor.end()
            assert processor.state == ProcessorState.CLOSING
            processor.add("taken2.com")
            await processor.wait_ended()
            return processor

        processor = asyncio.run(scenario())
        assert processor.finished == 2


class TestOutsideLoopProperty:
    """
    Property 6: A rejected add outside the event loop changes nothing.
    """

    @given(names=st.lists(name_strategy(), min_size=1, max_size=5))
    @settings(max_examples=20)
    def test_add_without_running_loop_leaves_no_task(self, names: list[str]) -> None:
        processor, checker = make_processor()

        for name in names:
            with pytest.raises(RuntimeError):
                processor.add(name)

        assert processor.size == 0
        assert processor.pending == 0
        assert processor.duplicated == 0
        assert processor.task_state(names[0]) is None

        asyncio.run(run_batch(processor, names[:1]))

        assert processor.size == 1
        assert processor.finished == 1
        assert processor.duplicated == 0
        assert checker.checked == [names[0].lower()]


class TestFailureIsolationProperty:
    """
    Property 7: A failing check or listener does not stop the others.
    """

    @given(names=st.lists(name_strategy(), min_size=1, max_size=20))
    @settings(max_examples=50)
    def test_failures_are_isolated(self, names: list[str]) -> None:
        failed: dict[str, Exception] = {}
        verdicts: dict[str, bool] = {}

        async def scenario():
            processor, _ = make_processor(concurrency=4)
            processor.on(ProcessorEvent.FAILED, lambda d, e: failed.__setitem__(d, e))
            processor.on(ProcessorEvent.NEXT, lambda d, a: verdicts.__setitem__(d, a))
            await run_batch(processor, names)

        asyncio.run(scenario())

        distinct = {n.lower() for n in names}
        assert set(failed) == {n for n in distinct if n.startswith("fail")}
        assert set(verdicts) == {n for n in distinct if not n.startswith("fail")}
        assert all(isinstance(e, NetworkError) for e in failed.values())

    def test_listener_error_is_logged(self) -> None:
        output = StringIO()
        logger = AuditLogger(output_format="json", output_stream=output)
        verdicts: list[str] = []

        def broken_listener(domain: str, available: bool) -> None:
            raise RuntimeError("listener failed")

        async def scenario():
            processor, _ = make_processor(concurrency=1, logger=logger)
            processor.on(ProcessorEvent.NEXT, broken_listener)
            processor.on(ProcessorEvent.NEXT, lambda d, a: verdicts.append(d))
            await run_batch(processor, ["free1.com", "taken2.com"])
            return processor

        processor = asyncio.run(scenario())

        assert verdicts == ["free1.com", "taken2.com"]
        assert processor.succeeded == 2
        errors = [e for e in logger.entries if e.level == LogLevel.ERROR]
        assert len(errors) == 2
        assert errors[0].data["error_type"] == "RuntimeError"

    def test_listener_error_without_logger_goes_to_loop(self) -> None:
        contexts: list[dict] = []

        def broken_listener(domain: str) -> None:
            raise RuntimeError("listener failed")

        async def scenario():
            asyncio.get_running_loop().set_exception_handler(lambda loop, ctx: contexts.append(ctx))
            processor, _ = make_processor()
            processor.on(ProcessorEvent.ADD, broken_listener)
            await run_batch(processor, ["taken.com"])
            return processor

        processor = asyncio.run(scenario())

        assert processor.finished == 1
        assert len(contexts) == 1
        assert isinstance(contexts[0]["exception"], RuntimeError)


class TestListenerRegistrationProperty:
    """
    Property 8: Listeners can be chained and removed.
    """

    def test_on_and_off(self) -> None:
        added: list[str] = []
        taken: list[str] = []

        async def scenario():
            processor, _ = make_processor()
            listener = added.append
            processor.on(ProcessorEvent.ADD, listener).on(ProcessorEvent.TAKEN, taken.append)
            processor.add("taken1.com")
            processor.off(ProcessorEvent.ADD, listener)
            processor.add("taken2.com")
            processor.end()
            await processor.wait_ended()

        asyncio.run(scenario())

        assert added == ["taken1.com"]
        assert sorted(taken) == ["taken1.com", "taken2.com"]

    def test_available_and_taken_follow_next(self) -> None:
        events: list[tuple] = []

        async def scenario():
            processor, _ = make_processor()
            processor.on(ProcessorEvent.NEXT, lambda d, a: events.append(("next", d, a)))
            processor.on(ProcessorEvent.AVAILABLE, lambda d: events.append(("available", d)))
            processor.on(ProcessorEvent.TAKEN, lambda d: events.append(("taken", d)))
            await run_batch(processor, ["free.com"])

        asyncio.run(scenario())

        assert events == [("next", "free.com", True), ("available", "free.com")]
