import pytest

from ai.errors import TerminalProviderError, TransientProviderError
from ai.image_fetcher import ImageFetcher
from conftest import FakeEngine, SleepRecorder


class _QuotaError(Exception):
    status_code = 429


def _scripted(outcomes):
    outcomes = list(outcomes)

    def behavior(prompt, aspect_ratio):
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome
    return behavior


def test_gives_up_after_three_rate_limited_attempts():
    engine = FakeEngine(image_behavior=_scripted([TransientProviderError("429")] * 3))
    sleeps = SleepRecorder()
    fetcher = ImageFetcher(engine, sleep=sleeps, jitter=lambda: 0.5)

    assert fetcher.fetch("a rocket") == ""
    assert len(engine.image_calls) == 3
    # 2**attempt seconds plus jitter, no wait after the last attempt
    assert sleeps.calls == [2.5, 4.5]


def test_succeeds_on_second_attempt():
    engine = FakeEngine(image_behavior=_scripted([_QuotaError("slow down"), "data:image/png;base64,QUJD"]))
    sleeps = SleepRecorder()
    fetcher = ImageFetcher(engine, sleep=sleeps, jitter=lambda: 0.0)

    assert fetcher.fetch("a rocket", "square") == "data:image/png;base64,QUJD"
    assert engine.image_calls == [("a rocket", "square"), ("a rocket", "square")]
    assert sleeps.calls == [2.0]


def test_quota_message_counts_as_rate_limit():
    engine = FakeEngine(image_behavior=_scripted([RuntimeError("RESOURCE_EXHAUSTED: quota"), "data:image/png;base64,eA=="]))
    fetcher = ImageFetcher(engine, sleep=SleepRecorder(), jitter=lambda: 0.0)

    assert fetcher.fetch("a star") == "data:image/png;base64,eA=="
    assert len(engine.image_calls) == 2


def test_terminal_error_is_not_retried():
    engine = FakeEngine(image_behavior=_scripted([TerminalProviderError("content policy")]))
    sleeps = SleepRecorder()
    fetcher = ImageFetcher(engine, sleep=sleeps)

    assert fetcher.fetch("a rocket") == ""
    assert len(engine.image_calls) == 1
    assert sleeps.calls == []


@pytest.mark.parametrize("max_retries", [1, 5])
def test_attempt_ceiling_follows_max_retries(max_retries):
    engine = FakeEngine(image_behavior=_scripted([TransientProviderError("429")] * max_retries))
    fetcher = ImageFetcher(engine, sleep=SleepRecorder(), jitter=lambda: 0.0)

    assert fetcher.fetch("a rocket", max_retries=max_retries) == ""
    assert len(engine.image_calls) == max_retries


def test_terminal_error_after_a_rate_limit_stops_retrying():
    engine = FakeEngine(image_behavior=_scripted([_QuotaError("slow down"), TerminalProviderError("content policy")]))
    sleeps = SleepRecorder()
    fetcher = ImageFetcher(engine, sleep=sleeps, jitter=lambda: 0.0)

    assert fetcher.fetch("a rocket") == ""
    assert len(engine.image_calls) == 2
    assert sleeps.calls == [2.0]


@pytest.mark.parametrize("error", [ValueError("bad size"), KeyError("data")])
def test_fetch_never_raises(error):
    engine = FakeEngine(image_behavior=_scripted([error]))
    fetcher = ImageFetcher(engine, sleep=SleepRecorder())

    assert fetcher.fetch("a rocket") == ""


def test_jitter_is_drawn_for_each_wait():
    draws = iter([0.25, 0.75])
    engine = FakeEngine(image_behavior=_scripted([_QuotaError("a"), _QuotaError("b"), "data:image/png;base64,eA=="]))
    sleeps = SleepRecorder()
    fetcher = ImageFetcher(engine, sleep=sleeps, jitter=lambda: next(draws))

    assert fetcher.fetch("a rocket") == "data:image/png;base64,eA=="
    assert sleeps.calls == [2.25, 4.75]
