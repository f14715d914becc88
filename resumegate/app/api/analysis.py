"""Analysis API endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from resumegate.app.middleware.rate_limit import resolve_identity
from resumegate.app.services.analysis_gateway import AnalysisGateway, AnalysisKind, AnalysisOutcome

router = APIRouter(prefix="/api", tags=["analysis"])


class JobMatchRequest(BaseModel):
    """Request body for job matching.

    Fields are optional at this layer so that missing values are reported
    by the gateway as ``invalid_input`` rather than a framework 422.
    """
    model_config = ConfigDict(populate_by_name=True)

    resume_data: Any = Field(default=None, alias="resumeData")
    job_description: Any = Field(default=None, alias="jobDescription")


class ResumeOptimizeRequest(BaseModel):
    """Request body for resume optimization."""
    model_config = ConfigDict(populate_by_name=True)

    resume_text: Any = Field(default=None, alias="resumeText")
    job_description: Any = Field(default=None, alias="jobDescription")


def get_analysis_gateway(request: Request) -> AnalysisGateway:
    """Get the gateway built in the application lifespan."""
    return request.app.state.analysis_gateway


def get_identity(request: Request) -> str:
    """Get the rate limit identity for the caller."""
    return resolve_identity(request, request.app.state.analysis_gateway.config)


def _render(outcome: AnalysisOutcome) -> JSONResponse:
    return JSONResponse(
        content=outcome.result.to_payload(),
        headers={"X-Cache": "HIT" if outcome.cache_hit else "MISS"},
    )


@router.post("/job-match")
async def job_match(
    body: JobMatchRequest,
    gateway: AnalysisGateway = Depends(get_analysis_gateway),
    identity: str = Depends(get_identity),
) -> JSONResponse:
    """Score a resume against a job description.

    Returns the match score, present and missing keywords, and suggestions
    for the skills, experience, education and projects sections.
    """
    outcome = await gateway.run(
        AnalysisKind.JOB_MATCH, body.resume_data, body.job_description, identity
    )
    return _render(outcome)


@router.post("/resume-optimize")
async def resume_optimize(
    body: ResumeOptimizeRequest,
    gateway: AnalysisGateway = Depends(get_analysis_gateway),
    identity: str = Depends(get_identity),
) -> JSONResponse:
    """Return sectioned advice for optimizing a resume for a job."""
    outcome = await gateway.run(
        AnalysisKind.RESUME_OPTIMIZE, body.resume_text, body.job_description, identity
    )
    return _render(outcome)
