import pytest

from project_migrate.runners.poller import MAX_DELAY, JobPoller, delay_for_attempt


@pytest.mark.parametrize("attempt,expected", [(1, 2), (2, 4), (3, 8), (4, 10), (5, 10), (20, 10)])
def test_delay_for_attempt(attempt, expected):
    assert delay_for_attempt(attempt) == expected


def test_wait_backs_off_until_job_is_finished():
    states = iter([{"status": "waiting"}] * 5 + [{"status": "success", "isFinished": True}])
    sleeps = []
    fetched = []

    def fetch_job(job_id):
        fetched.append(job_id)
        return next(states)

    job = JobPoller(sleep=sleeps.append).wait(fetch_job, "42")

    assert job == {"status": "success", "isFinished": True}
    assert sleeps == [2, 4, 8, 10, 10]
    assert fetched == ["42"] * 6


def test_wait_returns_finished_job_without_sleeping():
    sleeps = []

    job = JobPoller(sleep=sleeps.append).wait(lambda job_id: {"isFinished": True}, "1")

    assert job == {"isFinished": True}
    assert sleeps == []


def test_wait_uses_custom_finished_check():
    states = iter([{"status": "processing"}, {"status": "error"}])
    sleeps = []

    job = JobPoller(sleep=sleeps.append).wait(
        lambda job_id: next(states),
        "1",
        is_finished=lambda job: job["status"] == "error",
    )

    assert job == {"status": "error"}
    assert sleeps == [2]


def test_delay_never_exceeds_cap():
    assert all(delay_for_attempt(attempt) <= MAX_DELAY for attempt in range(1, 50))
