# tests/conftest.py

import os
import sys
import tempfile

# Add the parent directory to the Python path so we can import from it
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Settings are read at import time, so point them at a throwaway database first
_db_dir = tempfile.mkdtemp(prefix="job-tracker-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'jobs.db')}"
os.environ["COMPLETION_DELAY_SECONDS"] = "0.5"
os.environ["JOB_RUNNER"] = "timer"
os.environ.pop("WEBHOOK_URL", None)

import pytest

from database import SessionLocal
from init_db import init_database
from models import Job
from services import JobRepository

init_database()


def _clear_jobs():
    db = SessionLocal()
    try:
        db.query(Job).delete()
        db.commit()
    finally:
        db.close()


@pytest.fixture(autouse=True)
def clean_jobs():
    from tasks import scheduler

    _clear_jobs()
    yield
    scheduler.wait(timeout=5)
    _clear_jobs()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repository(db):
    return JobRepository(db)


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from main import app

    with TestClient(app) as test_client:
        yield test_client


class RecordingScheduler:
    """Stands in for CompletionScheduler and only records what was scheduled."""

    def __init__(self):
        self.scheduled = []

    def schedule(self, job_id):
        self.scheduled.append(job_id)


class StubNotifier:
    def __init__(self, error=None):
        self.error = error
        self.sent = []

    def notify(self, payload):
        self.sent.append(payload)
        if self.error:
            raise self.error


@pytest.fixture
def recording_scheduler():
    return RecordingScheduler()


@pytest.fixture
def stub_notifier():
    return StubNotifier()


@pytest.fixture
def make_stub_notifier():
    return StubNotifier
