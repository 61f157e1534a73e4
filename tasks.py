# tasks.py

from celery import Celery
import logging
import threading
import traceback

from database import SessionLocal
from models import STATUS_COMPLETED, STATUS_RUNNING, WEBHOOK_FAILED, WEBHOOK_SUCCESS
from config import (
    CELERY_BROKER_URL, COMPLETION_DELAY_SECONDS, JOB_RUNNER, LOG_LEVEL,
    WEBHOOK_TIMEOUT_SECONDS, WEBHOOK_URL,
)
from exceptions import ConfigurationError, NotificationError
from services import JobRepository, WebhookNotifier

celery = Celery('tasks', broker=CELERY_BROKER_URL, backend=CELERY_BROKER_URL)
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(message)s")

webhook_notifier = WebhookNotifier(WEBHOOK_URL, timeout=WEBHOOK_TIMEOUT_SECONDS)


def build_notification(job: dict) -> dict:
    completed_at = job.get("completedAt")
    return {
        "jobId": job["id"],
        "taskName": job["taskName"],
        "status": STATUS_COMPLETED,
        "priority": job["priority"],
        "payload": job.get("payload"),
        "completedAt": completed_at.isoformat() if completed_at else None,
    }


def complete_job(job_id: int, notifier=None, session_factory=SessionLocal):
    """
    Finishes a running job: marks it completed, sends the webhook and records
    the webhook outcome. Nothing here is raised to a caller; the original run
    request has already been answered, so failures are logged and persisted.
    """
    notifier = notifier or webhook_notifier
    db = session_factory()

    try:
        repository = JobRepository(db)
        if not repository.update_status(job_id, STATUS_COMPLETED, is_terminal=True, expected_status=STATUS_RUNNING):
            logging.warning(f"Job {job_id} is no longer running, skipping completion")
            return None
        logging.info(f"✅ Job {job_id} completed")

        job = repository.get_by_id(job_id)
        try:
            notifier.notify(build_notification(job))
            webhook_status = WEBHOOK_SUCCESS
        except (NotificationError, ConfigurationError) as e:
            logging.warning(f"Webhook for job {job_id} not delivered: {e}")
            webhook_status = WEBHOOK_FAILED

        repository.update_webhook_status(job_id, webhook_status)
        return webhook_status

    except Exception as e:
        logging.error(f"❌ Background completion failed for job {job_id}. Error: {e}")
        traceback.print_exc()
        return None
    finally:
        db.close()


@celery.task(name="tasks.complete_job")
def complete_job_task(job_id: int):
    """Celery entry point for the deferred completion (JOB_RUNNER=celery)."""
    return complete_job(job_id)


class CompletionScheduler:
    """
    Runs complete_job for a job after a fixed delay.

    With the "timer" runner the pending completion only lives in this process:
    a restart before it fires leaves the job in "running". The "celery" runner
    queues it on the broker instead, where it survives API restarts.
    """

    RUNNERS = ("timer", "celery")

    def __init__(self, delay: float = COMPLETION_DELAY_SECONDS, runner: str = JOB_RUNNER):
        if runner not in self.RUNNERS:
            raise ConfigurationError(f"Unknown JOB_RUNNER '{runner}', expected one of {', '.join(self.RUNNERS)}")
        self.delay = delay
        self.runner = runner
        self._timers = {}
        self._lock = threading.Lock()

    def schedule(self, job_id: int) -> None:
        if self.runner == "celery":
            complete_job_task.apply_async(args=[job_id], countdown=self.delay)
            logging.info(f"Job {job_id} completion queued on celery (in {self.delay}s)")
            return

        timer = threading.Timer(self.delay, self._fire, args=(job_id,))
        timer.daemon = True
        with self._lock:
            self._timers[job_id] = timer
        timer.start()

    def _fire(self, job_id: int) -> None:
        try:
            complete_job(job_id)
        finally:
            with self._lock:
                self._timers.pop(job_id, None)

    def in_flight(self) -> list:
        """Ids of jobs whose completion timer has not finished yet."""
        with self._lock:
            return sorted(self._timers)

    def wait(self, timeout=None) -> None:
        with self._lock:
            timers = list(self._timers.values())
        for timer in timers:
            timer.join(timeout)


scheduler = CompletionScheduler()


def get_scheduler() -> CompletionScheduler:
    return scheduler
