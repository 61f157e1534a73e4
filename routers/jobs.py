"""
Router for job endpoints.
Handles creating, listing, running, editing and deleting jobs.
"""

import logging
from typing import Annotated, List, Optional
from fastapi import APIRouter, HTTPException, Depends, Path
from sqlalchemy.orm import Session

from database import get_db
from exceptions import InvalidStateError, NotFoundError, ValidationError
from schemas import JobCreate, JobUpdate, JobOut, JobCreatedResponse, MessageResponse
from services import JobLifecycleController, JobRepository
from tasks import CompletionScheduler, get_scheduler


# Create the router
router = APIRouter(prefix="/jobs", tags=["jobs"])

# Ids must fit in a signed 64-bit database INTEGER
JobId = Annotated[int, Path(ge=1, le=2**63 - 1)]


def get_controller(
    db: Session = Depends(get_db),
    scheduler: CompletionScheduler = Depends(get_scheduler),
) -> JobLifecycleController:
    return JobLifecycleController(JobRepository(db), scheduler)


def _client_error(e: Exception) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


def _server_error(message: str, e: Exception) -> HTTPException:
    logging.error(f"{message}: {e}")
    return HTTPException(status_code=500, detail={"message": message, "error": str(e)})


@router.post("", status_code=201, response_model=JobCreatedResponse)
def create_job(request: JobCreate, controller: JobLifecycleController = Depends(get_controller)):
    """Creates a pending job."""
    try:
        job_id = controller.create(request.taskName, request.payload, request.priority)
    except ValidationError as e:
        raise _client_error(e)
    except Exception as e:
        raise _server_error("Failed to create job", e)

    return {"message": "Job created successfully", "jobId": job_id}


@router.get("", response_model=List[JobOut])
def list_jobs(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    controller: JobLifecycleController = Depends(get_controller),
):
    """Lists jobs, optionally filtered by status and/or priority."""
    try:
        return controller.list_jobs(status=status, priority=priority)
    except Exception as e:
        raise _server_error("Failed to fetch jobs", e)


@router.get("/{job_id}", response_model=JobOut)
def get_job(job_id: JobId, controller: JobLifecycleController = Depends(get_controller)):
    try:
        return controller.get(job_id)
    except NotFoundError as e:
        raise _client_error(e)
    except Exception as e:
        raise _server_error("Failed to fetch job", e)


@router.post("/{job_id}/run", response_model=MessageResponse)
def run_job(job_id: JobId, controller: JobLifecycleController = Depends(get_controller)):
    """
    Starts a pending job. The job completes in the background after a delay,
    so clients poll GET /jobs/{job_id} for the final status and webhookStatus.
    """
    try:
        controller.run(job_id)
    except (NotFoundError, InvalidStateError) as e:
        raise _client_error(e)
    except Exception as e:
        raise _server_error("Failed to run job", e)

    return {"message": "Job started"}


@router.patch("/{job_id}", response_model=MessageResponse)
def update_job(job_id: JobId, request: JobUpdate, controller: JobLifecycleController = Depends(get_controller)):
    """Edits taskName and priority of a job that is not running."""
    try:
        controller.update(job_id, request.taskName, request.priority)
    except (ValidationError, NotFoundError, InvalidStateError) as e:
        raise _client_error(e)
    except Exception as e:
        raise _server_error("Update failed", e)

    return {"message": "Job updated successfully"}


@router.delete("/{job_id}", response_model=MessageResponse)
def delete_job(job_id: JobId, controller: JobLifecycleController = Depends(get_controller)):
    try:
        controller.delete(job_id)
    except (NotFoundError, InvalidStateError) as e:
        raise _client_error(e)
    except Exception as e:
        raise _server_error("Failed to delete job", e)

    return {"message": "Job deleted successfully"}
