"""
Pydantic models for request and response bodies of the Job Tracker API.
"""

from datetime import datetime
from pydantic import BaseModel
from typing import Any, Optional


class JobCreate(BaseModel):
    """Request model for creating a job. Required fields are checked by the controller."""
    taskName: Optional[str] = None
    payload: Optional[Any] = None
    priority: Optional[str] = None


class JobUpdate(BaseModel):
    """Request model for editing a job's name and priority."""
    taskName: Optional[str] = None
    priority: Optional[str] = None


class JobOut(BaseModel):
    """A job as returned by the API."""
    id: int
    taskName: str
    payload: Optional[Any] = None
    priority: str
    status: str  # "pending" | "running" | "completed"
    webhookStatus: Optional[str] = None  # "pending" | "success" | "failed"
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    completedAt: Optional[datetime] = None


class JobCreatedResponse(BaseModel):
    """Response when a job has been created."""
    message: str
    jobId: int


class MessageResponse(BaseModel):
    message: str
