"""Scheduler job control endpoints."""

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from api.dependencies import require_admin

router = APIRouter()

VALID_JOBS = ["daily_results", "bozo_annotation", "daily_odds", "weekly_reminders"]


class JobStatus(BaseModel):
    """Status of a scheduled job."""

    job_id: str
    name: str
    last_status: str
    run_count: int = 0
    last_run: Optional[str] = None
    next_run: Optional[str] = None
    error: Optional[str] = None


class JobsStatusResponse(BaseModel):
    """Response for all jobs status."""

    scheduler_running: bool
    jobs: list[JobStatus]


def _get_scheduler(request: Request, job_id: str):
    scheduler = request.app.state.app_state.scheduler
    if not scheduler:
        raise HTTPException(status_code=503, detail="Scheduler not initialized")

    if job_id not in VALID_JOBS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid job ID. Must be one of: {VALID_JOBS}",
        )
    return scheduler


@router.get("/jobs/status", response_model=JobsStatusResponse)
async def get_jobs_status(request: Request) -> dict[str, Any]:
    """
    Get status of all scheduled jobs.

    Returns last run time, next run time, and status for each job.
    """
    scheduler = request.app.state.app_state.scheduler

    if not scheduler:
        return {
            "scheduler_running": False,
            "jobs": [],
        }

    jobs = []
    for job_id, status in scheduler.get_job_status().items():
        jobs.append(
            JobStatus(
                job_id=job_id,
                name=status.get("name", job_id),
                last_status=status.get("last_status", "pending"),
                run_count=status.get("run_count", 0),
                last_run=status.get("last_run").isoformat() if status.get("last_run") else None,
                next_run=status.get("next_run").isoformat() if status.get("next_run") else None,
                error=status.get("last_error"),
            )
        )

    return {
        "scheduler_running": scheduler.is_running,
        "jobs": jobs,
    }


@router.post("/jobs/{job_id}/trigger", dependencies=[Depends(require_admin)])
async def trigger_job(request: Request, job_id: str) -> dict[str, Any]:
    """
    Manually trigger a job to run immediately.

    Args:
        job_id: ID of the job to trigger (daily_results, bozo_annotation, etc.)
    """
    scheduler = _get_scheduler(request, job_id)

    if not scheduler.trigger_job(job_id):
        raise HTTPException(status_code=404, detail=f"Job '{job_id}' not scheduled")

    return {
        "success": True,
        "job_id": job_id,
        "message": f"Job '{job_id}' triggered successfully",
        "triggered_at": datetime.now().isoformat(),
    }


@router.post("/jobs/{job_id}/pause", dependencies=[Depends(require_admin)])
async def pause_job(request: Request, job_id: str) -> dict[str, Any]:
    """Pause one job until it is resumed."""
    scheduler = _get_scheduler(request, job_id)

    if not scheduler.pause_job(job_id):
        raise HTTPException(status_code=404, detail=f"Job '{job_id}' not scheduled")

    return {
        "success": True,
        "message": f"Job '{job_id}' paused",
        "paused_at": datetime.now().isoformat(),
    }


@router.post("/jobs/{job_id}/resume", dependencies=[Depends(require_admin)])
async def resume_job(request: Request, job_id: str) -> dict[str, Any]:
    scheduler = _get_scheduler(request, job_id)

    if not scheduler.resume_job(job_id):
        raise HTTPException(status_code=404, detail=f"Job '{job_id}' not scheduled")

    return {
        "success": True,
        "message": f"Job '{job_id}' resumed",
        "resumed_at": datetime.now().isoformat(),
    }
