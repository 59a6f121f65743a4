from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from ..core.errors import ArtifactWriteError
from ..core.settings import FrameworkPaths, PropKeys
from ..generators.artifact_emitter import (
    FEATURE,
    PAGE_OBJECT,
    STEP_DEFINITIONS,
    ArtifactEmitter,
    GeneratedArtifactSet,
    LoginPageObject,
    parse_login_page_object,
    validate_artifact_set,
)
from ..generators.locator_resolver import LocatorResolver
from ..generators.method_namer import MethodNamer, sanitize_class_name
from ..recorder.action_extractor import extract_actions, load_recording
from ..recorder.models import RecordedAction

logger = logging.getLogger(__name__)


def extract_path_from_url(url: Optional[str], base_url: Optional[str] = None) -> str:
    """Return the page path relative to the configured base URL.

    Relative paths and non-HTTP values are returned unchanged.
    """
    value = (url or "").strip()
    if not value:
        return ""
    if value.startswith("/") or not value.lower().startswith(("http://", "https://")):
        return value
    base = (base_url or "").strip().rstrip("/")
    if base and value.startswith(base):
        path = value[len(base):]
        return path if path.startswith("/") or not path else "/" + path
    parsed = urlparse(value)
    path = parsed.path or ""
    if parsed.query:
        path += "?" + parsed.query
    if parsed.fragment:
        path += "#" + parsed.fragment
    return path if path != "/" else ""


def detect_login_page_object(pages_dir: Path, exclude: Optional[str] = None) -> Optional[LoginPageObject]:
    """Find an existing page object that can log in with configured credentials."""
    if not pages_dir.is_dir():
        return None
    candidates = sorted(pages_dir.glob("*.java"), key=lambda p: (0 if "login" in p.stem.lower() else 1, p.name))
    for path in candidates:
        if path.stem == exclude:
            continue
        try:
            source = path.read_text(encoding="utf-8", errors="ignore")
        except OSError as exc:
            logger.debug("Skipping unreadable page object %s: %s", path, exc)
            continue
        login = parse_login_page_object(path.stem, source)
        if login is not None:
            logger.info("Found login page object: %s", path.name)
            return login
    return None


@dataclass
class ArtifactWrite:
    artifact: str
    path: str
    status: str

    def to_dict(self) -> Dict[str, Any]:
        return {"artifact": self.artifact, "path": self.path, "status": self.status}


@dataclass
class GenerationReport:
    class_name: str
    artifacts: GeneratedArtifactSet
    actions: List[RecordedAction]
    writes: List[ArtifactWrite] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def page_object_skipped(self) -> bool:
        return self.artifacts.page_object_source is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "className": self.class_name,
            "artifacts": self.artifacts.to_dict(),
            "actions": [a.to_dict() for a in self.actions],
            "writes": [w.to_dict() for w in self.writes],
            "warnings": list(self.warnings),
            "pageObjectSkipped": self.page_object_skipped,
        }


class GenerationService:
    """Runs extraction, resolution, naming and emission against a framework tree."""

    def __init__(self, paths: Optional[FrameworkPaths] = None) -> None:
        self.paths = paths or FrameworkPaths.resolve()

    def preview_from_text(self, recording_text: str, feature_name: str, page_url: str = "",
                          story: str = "") -> GenerationReport:
        """Render and validate all artifacts without writing anything."""
        class_name = sanitize_class_name(feature_name)
        actions = extract_actions(recording_text)
        LocatorResolver().resolve_actions(actions)
        MethodNamer().assign(actions)

        base_url = self.paths.properties().get(PropKeys.URL, default="")
        page_path = extract_path_from_url(page_url, base_url)
        page_object_exists = self.paths.page_object_path(class_name).exists()
        login_page = detect_login_page_object(self.paths.pages_dir, exclude=class_name)

        artifacts = ArtifactEmitter().emit(
            actions,
            class_name,
            story=(story or "").strip(),
            page_path=page_path,
            login_page=login_page,
            include_page_object=not page_object_exists,
        )
        validate_artifact_set(artifacts)

        warnings = [a.stability_warning for a in actions if a.stability_warning]
        warnings.extend(f"Pending step stub added: {p}" for p in artifacts.stubs_added)
        report = GenerationReport(class_name, artifacts, actions, warnings=warnings)
        if page_object_exists:
            report.writes.append(ArtifactWrite(
                PAGE_OBJECT, str(self.paths.page_object_path(class_name)), "skipped"))
        return report

    def generate_from_recording(self, recording_file: str | Path, feature_name: str,
                                page_url: str = "", story: str = "") -> GenerationReport:
        """Generate and write the page object, feature file and step definitions.

        Raises:
            RecordingInputError: The recording path is missing or unreadable.
            ArtifactValidationError: A rendered artifact is malformed; nothing is written.
            ArtifactWriteError: Writing failed; files written before it stay on disk.
        """
        text = load_recording(recording_file)
        report = self.preview_from_text(text, feature_name, page_url, story)
        artifacts = report.artifacts
        class_name = report.class_name

        targets = [
            (PAGE_OBJECT, self.paths.page_object_path(class_name), artifacts.page_object_source),
            (FEATURE, self.paths.feature_path(class_name), artifacts.feature_file_source),
            (STEP_DEFINITIONS, self.paths.step_definition_path(class_name), artifacts.step_definition_source),
        ]
        for artifact, path, content in targets:
            if content is None:
                continue
            _write_artifact(artifact, path, content)
            report.writes.append(ArtifactWrite(artifact, str(path), "written"))
            logger.info("Wrote %s: %s", artifact, path)
        return report


def _write_artifact(artifact: str, path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ArtifactWriteError(artifact, path, str(exc)) from exc
