# tests/test_tasks.py

import pytest

import tasks
from exceptions import ConfigurationError, NotificationError
from tasks import CompletionScheduler, build_notification, complete_job


def _running_job(repository, payload=None):
    job_id = repository.insert("send-email", payload, "High")
    repository.update_status(job_id, "running")
    return job_id


def test_complete_job_marks_completed_and_records_webhook_success(repository, stub_notifier):
    job_id = _running_job(repository, payload={"to": "a@b.com"})

    assert complete_job(job_id, notifier=stub_notifier) == "success"

    job = repository.get_by_id(job_id)
    assert job["status"] == "completed"
    assert job["completedAt"] is not None
    assert job["webhookStatus"] == "success"

    [sent] = stub_notifier.sent
    assert sent["jobId"] == job_id
    assert sent["taskName"] == "send-email"
    assert sent["status"] == "completed"
    assert sent["priority"] == "High"
    assert sent["payload"] == {"to": "a@b.com"}
    assert sent["completedAt"] == job["completedAt"].isoformat()


@pytest.mark.parametrize("error", [
    NotificationError("Webhook failed: 500", status_code=500),
    ConfigurationError("Webhook URL missing"),
])
def test_webhook_failure_keeps_job_completed(repository, make_stub_notifier, error):
    job_id = _running_job(repository)

    assert complete_job(job_id, notifier=make_stub_notifier(error=error)) == "failed"

    job = repository.get_by_id(job_id)
    assert job["status"] == "completed"
    assert job["webhookStatus"] == "failed"


def test_default_notifier_without_url_records_failure(repository):
    job_id = _running_job(repository)

    assert tasks.webhook_notifier.url is None
    complete_job(job_id)

    assert repository.get_by_id(job_id)["webhookStatus"] == "failed"


def test_complete_job_skips_jobs_that_are_not_running(repository, stub_notifier):
    job_id = repository.insert("never-run", None, "Low")

    assert complete_job(job_id, notifier=stub_notifier) is None

    job = repository.get_by_id(job_id)
    assert job["status"] == "pending"
    assert job["completedAt"] is None
    assert stub_notifier.sent == []


def test_complete_job_logs_unexpected_errors_instead_of_raising(repository):
    class BrokenNotifier:
        def notify(self, payload):
            raise RuntimeError("boom")

    job_id = _running_job(repository)

    assert complete_job(job_id, notifier=BrokenNotifier()) is None
    assert repository.get_by_id(job_id)["status"] == "completed"


def test_build_notification_without_completion_time():
    job = {"id": 3, "taskName": "t", "priority": "Low", "payload": None, "completedAt": None}

    assert build_notification(job) == {
        "jobId": 3,
        "taskName": "t",
        "status": "completed",
        "priority": "Low",
        "payload": None,
        "completedAt": None,
    }


def test_celery_task_runs_completion_in_process(repository, stub_notifier, monkeypatch):
    monkeypatch.setattr(tasks, "webhook_notifier", stub_notifier)
    job_id = _running_job(repository)

    assert tasks.complete_job_task(job_id) == "success"
    assert repository.get_by_id(job_id)["status"] == "completed"


# --- CompletionScheduler ---

def test_timer_scheduler_runs_completion_after_delay(monkeypatch):
    completed = []
    monkeypatch.setattr(tasks, "complete_job", lambda job_id: completed.append(job_id))
    scheduler = CompletionScheduler(delay=0.05, runner="timer")

    scheduler.schedule(7)
    assert scheduler.in_flight() == [7]
    scheduler.wait(timeout=2)

    assert completed == [7]
    assert scheduler.in_flight() == []


def test_celery_scheduler_queues_task_with_countdown(monkeypatch):
    queued = []

    class FakeTask:
        def apply_async(self, args=None, countdown=None):
            queued.append((args, countdown))

    monkeypatch.setattr(tasks, "complete_job_task", FakeTask())
    scheduler = CompletionScheduler(delay=3.0, runner="celery")

    scheduler.schedule(11)

    assert queued == [([11], 3.0)]
    assert scheduler.in_flight() == []


def test_unknown_runner_is_rejected():
    with pytest.raises(ConfigurationError, match="Unknown JOB_RUNNER"):
        CompletionScheduler(runner="cron")
