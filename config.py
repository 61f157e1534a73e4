"""
Configuration file for the Job Tracker backend.
Contains all global constants, read once from the process environment.
"""

import os

# --- Server ---
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "5000"))
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
    if origin.strip()
]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Database ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./jobs.db")

# --- Job execution ---
# Simulated work duration between "running" and "completed"
COMPLETION_DELAY_SECONDS = float(os.getenv("COMPLETION_DELAY_SECONDS", "3.0"))
# "timer" runs completions in-process, "celery" hands them to a worker
JOB_RUNNER = os.getenv("JOB_RUNNER", "timer").lower()
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")

# --- Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL") or None
WEBHOOK_TIMEOUT_SECONDS = float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "5.0"))
