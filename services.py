"""
Service classes for the Job Tracker backend.
Contains JobRepository, WebhookNotifier and JobLifecycleController.
"""

import json
import logging
import requests
from sqlalchemy.orm import Session

from exceptions import (
    ConfigurationError,
    InvalidStateError,
    NotFoundError,
    NotificationError,
    ValidationError,
)
from models import (
    Job,
    STATUS_PENDING,
    STATUS_RUNNING,
    WEBHOOK_PENDING,
    utcnow,
)


def job_to_dict(job: Job) -> dict:
    """Converts a job row into its API representation."""
    return {
        "id": job.id,
        "taskName": job.task_name,
        "payload": json.loads(job.payload) if job.payload is not None else None,
        "priority": job.priority,
        "status": job.status,
        "webhookStatus": job.webhook_status,
        "createdAt": job.created_at,
        "updatedAt": job.updated_at,
        "completedAt": job.completed_at,
    }


class JobRepository:
    """The only component that reads and writes job rows."""

    def __init__(self, db: Session):
        self.db = db

    def insert(self, task_name: str, payload, priority: str) -> int:
        job = Job(
            task_name=task_name,
            payload=json.dumps(payload) if payload is not None else None,
            priority=priority,
            status=STATUS_PENDING,
            webhook_status=WEBHOOK_PENDING,
        )
        self.db.add(job)
        self.db.commit()
        self.db.refresh(job)
        return job.id

    def list_all(self, status=None, priority=None) -> list:
        query = self.db.query(Job)
        if status:
            query = query.filter(Job.status == status)
        if priority:
            query = query.filter(Job.priority == priority)
        return [job_to_dict(job) for job in query.order_by(Job.id).all()]

    def get_by_id(self, job_id: int):
        job = self.db.query(Job).filter(Job.id == job_id).first()
        return job_to_dict(job) if job else None

    def update_status(self, job_id: int, status: str, is_terminal: bool = False, expected_status=None) -> int:
        """
        Sets the job status and refreshes updatedAt; terminal updates also stamp completedAt.
        With expected_status the write only happens if the row still has that status.
        Returns the number of rows changed.
        """
        now = utcnow()
        values = {Job.status: status, Job.updated_at: now}
        if is_terminal:
            values[Job.completed_at] = now

        query = self.db.query(Job).filter(Job.id == job_id)
        if expected_status is not None:
            query = query.filter(Job.status == expected_status)
        rows = query.update(values, synchronize_session=False)
        self.db.commit()
        return rows

    def update_webhook_status(self, job_id: int, webhook_status: str) -> int:
        rows = (
            self.db.query(Job)
            .filter(Job.id == job_id)
            .update({Job.webhook_status: webhook_status, Job.updated_at: utcnow()}, synchronize_session=False)
        )
        self.db.commit()
        return rows

    def update_fields(self, job_id: int, task_name: str, priority: str, exclude_status=None) -> int:
        """Returns rows affected; 0 means no matching job (or the job had exclude_status)."""
        query = self.db.query(Job).filter(Job.id == job_id)
        if exclude_status is not None:
            query = query.filter(Job.status != exclude_status)
        rows = query.update(
            {Job.task_name: task_name, Job.priority: priority, Job.updated_at: utcnow()},
            synchronize_session=False,
        )
        self.db.commit()
        return rows

    def delete_by_id(self, job_id: int) -> int:
        rows = self.db.query(Job).filter(Job.id == job_id).delete(synchronize_session=False)
        self.db.commit()
        return rows


class WebhookNotifier:
    """Sends a single completion notification to the configured webhook."""

    def __init__(self, url=None, timeout: float = 5.0):
        self.url = url
        self.timeout = timeout

    def notify(self, payload: dict) -> None:
        if not self.url:
            raise ConfigurationError("Webhook URL missing")

        try:
            response = requests.post(self.url, json=payload, timeout=self.timeout, allow_redirects=False)
            response.raise_for_status()
        except requests.RequestException as e:
            status_code = e.response.status_code if e.response is not None else None
            raise NotificationError(f"Webhook failed: {e}", status_code=status_code) from e

        # Redirects are not followed, so anything outside 2xx is undelivered
        if not 200 <= response.status_code < 300:
            raise NotificationError(
                f"Webhook failed: unexpected status {response.status_code}", status_code=response.status_code
            )

        logging.info(f"📬 Webhook delivered for job {payload.get('jobId')} ({response.status_code})")


def _is_blank(value) -> bool:
    return not isinstance(value, str) or not value.strip()


class JobLifecycleController:
    """Enforces the job state machine and hands runs to the completion scheduler."""

    def __init__(self, repository: JobRepository, scheduler):
        self.repository = repository
        self.scheduler = scheduler

    def create(self, task_name, payload, priority) -> int:
        if _is_blank(task_name) or _is_blank(priority):
            raise ValidationError("taskName and priority are required")

        job_id = self.repository.insert(task_name, payload, priority)
        logging.info(f"✨ Job {job_id} created: '{task_name}' ({priority})")
        return job_id

    def list_jobs(self, status=None, priority=None) -> list:
        return self.repository.list_all(status=status, priority=priority)

    def get(self, job_id: int) -> dict:
        job = self.repository.get_by_id(job_id)
        if job is None:
            raise NotFoundError()
        return job

    def run(self, job_id: int) -> None:
        """
        Moves a pending job to running and schedules its completion.
        The completion (and webhook) happen after this returns; callers poll for them.
        """
        job = self.get(job_id)
        if job["status"] != STATUS_PENDING:
            raise InvalidStateError(f"Job already {job['status']}", status=job["status"])

        claimed = self.repository.update_status(job_id, STATUS_RUNNING, expected_status=STATUS_PENDING)
        if not claimed:
            # Another run request got there first
            current = self.get(job_id)["status"]
            raise InvalidStateError(f"Job already {current}", status=current)

        try:
            self.scheduler.schedule(job_id)
        except Exception as e:
            # Nothing will complete the job, so hand it back to pending
            logging.error(f"❌ Could not schedule completion for job {job_id}. Error: {e}")
            self.repository.update_status(job_id, STATUS_PENDING, expected_status=STATUS_RUNNING)
            raise
        logging.info(f"🏃 Job {job_id} started")

    def update(self, job_id: int, task_name, priority) -> None:
        if _is_blank(task_name) or _is_blank(priority):
            raise ValidationError("taskName and priority are required")

        rows = self.repository.update_fields(job_id, task_name, priority, exclude_status=STATUS_RUNNING)
        if rows == 0:
            job = self.get(job_id)
            raise InvalidStateError("Cannot edit a running job", status=job["status"])

    def delete(self, job_id: int) -> None:
        job = self.get(job_id)
        if job["status"] == STATUS_RUNNING:
            raise InvalidStateError("Cannot delete a running job", status=job["status"])

        self.repository.delete_by_id(job_id)
        logging.info(f"🗑️ Job {job_id} deleted")
