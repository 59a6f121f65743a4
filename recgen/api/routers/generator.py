from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ...core.errors import ArtifactValidationError, ArtifactWriteError, RecordingInputError
from ...core.settings import FrameworkPaths
from ...generators.jira_requirements import generate_from_jira_story, render_requirement_feature
from ...sources.jira import fetch_jira_story
from ...services.framework_service import analyze_framework, validate_test_structure
from ...services.generation_service import GenerationService


router = APIRouter(prefix="/generator", tags=["generator"])


class PreviewRequest(BaseModel):
    recording: str = Field(..., description="Recorded Playwright code (Java or Python codegen output).")
    featureName: str = Field(..., description="Feature name; sanitised into the Java class name.")
    pageUrl: str = Field("", description="URL of the recorded page; stored as PAGE_PATH.")
    story: str = Field("", description="Story id used for tags and @story javadoc.")
    frameworkRoot: str | None = Field(None, description="Root of the framework repo; defaults to FRAMEWORK_ROOT or cwd")


class RecordingRequest(BaseModel):
    recordingPath: str = Field(..., description="Path to a recording file readable by the server.")
    featureName: str
    pageUrl: str = ""
    story: str = ""
    frameworkRoot: str | None = Field(None, description="Root of the framework repo; defaults to FRAMEWORK_ROOT or cwd")


def _paths(framework_root: str | None) -> FrameworkPaths:
    explicit = (framework_root or "").strip()
    if explicit and not Path(explicit).expanduser().is_dir():
        raise HTTPException(status_code=404, detail=f"Framework root not found: {explicit}")
    return FrameworkPaths.resolve(explicit or None)


@router.get("/framework")
async def get_framework(frameworkRoot: str | None = None) -> dict:
    return analyze_framework(_paths(frameworkRoot)).to_dict()


@router.get("/structure/{test_name}")
async def get_structure(test_name: str, frameworkRoot: str | None = None) -> dict:
    return validate_test_structure(test_name, _paths(frameworkRoot)).to_dict()


@router.post("/preview")
async def preview(req: PreviewRequest) -> dict:
    """Render the three artifacts for a recording without writing them."""
    service = GenerationService(_paths(req.frameworkRoot))
    try:
        report = service.preview_from_text(req.recording, req.featureName, req.pageUrl, req.story)
    except ArtifactValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return report.to_dict()


@router.post("/recording")
async def generate_from_recording(req: RecordingRequest) -> dict:
    service = GenerationService(_paths(req.frameworkRoot))
    try:
        report = service.generate_from_recording(req.recordingPath, req.featureName, req.pageUrl, req.story)
    except RecordingInputError as exc:
        status = 404 if "not found" in str(exc) else 400
        raise HTTPException(status_code=status, detail=str(exc)) from exc
    except ArtifactValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ArtifactWriteError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return report.to_dict()


@router.get("/jira/{issue_key}")
async def requirement_from_jira(issue_key: str, autoDetect: bool = True, frameworkRoot: str | None = None) -> dict:
    paths = _paths(frameworkRoot)
    try:
        requirement = generate_from_jira_story(
            issue_key, auto_detect=autoDetect, fetch=lambda key: fetch_jira_story(key, paths))
    except RuntimeError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    payload = requirement.to_dict()
    payload["draftFeature"] = render_requirement_feature(requirement)
    return payload
