from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.settings import FrameworkPaths, PropKeys

logger = logging.getLogger(__name__)

_METHOD = re.compile(r"public\s+static\s+\w+\s+(\w+)\s*\(")
_SCENARIO = re.compile(r"^\s*Scenario(?: Outline)?:\s*(.+?)\s*$", re.MULTILINE)


def _as_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"true", "yes", "1", "on"}


def _as_int(key: str, value: Optional[str]) -> int:
    try:
        return int((value or "").strip())
    except ValueError:
        if value:
            logger.warning("Property %s is not a number: %r", key, value)
        return 0


@dataclass
class FrameworkInfo:
    """Settings and existing artifacts of the target test framework."""

    root: str
    base_url: Optional[str] = None
    browser: Optional[str] = None
    headless: bool = False
    recording_enabled: bool = False
    screenshot_enabled: bool = False
    default_timeout: int = 0
    retry_count: int = 0
    jira_enabled: bool = False
    jira_base_url: Optional[str] = None
    jira_project_key: Optional[str] = None
    page_objects: Dict[str, List[str]] = field(default_factory=dict)
    features: Dict[str, List[str]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root": self.root,
            "baseUrl": self.base_url,
            "browser": self.browser,
            "headless": self.headless,
            "recordingEnabled": self.recording_enabled,
            "screenshotEnabled": self.screenshot_enabled,
            "defaultTimeout": self.default_timeout,
            "retryCount": self.retry_count,
            "jiraEnabled": self.jira_enabled,
            "jiraBaseUrl": self.jira_base_url,
            "jiraProjectKey": self.jira_project_key,
            "pageObjects": self.page_objects,
            "features": self.features,
        }

    def summary_lines(self) -> List[str]:
        lines = [
            f"Base URL: {self.base_url or '-'}",
            f"Browser: {self.browser or '-'}",
            f"Headless: {self.headless}",
            f"Recording: {'Enabled' if self.recording_enabled else 'Disabled'}",
            f"Screenshots: {'Enabled' if self.screenshot_enabled else 'Disabled'}",
            f"Timeout: {self.default_timeout}ms",
            f"Retry Count: {self.retry_count}",
            f"Page objects: {len(self.page_objects)}",
            f"Features: {len(self.features)}",
        ]
        if self.jira_enabled:
            lines.append(f"JIRA: {self.jira_base_url} (project {self.jira_project_key or '-'})")
        return lines


@dataclass
class StructureReport:
    """Which of the three artifacts exist for a test name."""

    test_name: str
    page_object_path: str
    page_object_exists: bool
    feature_path: str
    feature_exists: bool
    step_definition_path: str
    step_definition_exists: bool

    @property
    def is_valid(self) -> bool:
        return self.page_object_exists and self.feature_exists and self.step_definition_exists

    @property
    def missing_files(self) -> List[str]:
        checks = [
            (self.page_object_exists, self.page_object_path),
            (self.feature_exists, self.feature_path),
            (self.step_definition_exists, self.step_definition_path),
        ]
        return [path for exists, path in checks if not exists]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "testName": self.test_name,
            "isValid": self.is_valid,
            "pageObjectExists": self.page_object_exists,
            "pageObjectPath": self.page_object_path,
            "featureExists": self.feature_exists,
            "featurePath": self.feature_path,
            "stepDefinitionExists": self.step_definition_exists,
            "stepDefinitionPath": self.step_definition_path,
            "missingFiles": self.missing_files,
        }


def _list_page_objects(pages_dir: Path) -> Dict[str, List[str]]:
    found: Dict[str, List[str]] = {}
    if not pages_dir.is_dir():
        return found
    for path in sorted(pages_dir.glob("*.java")):
        source = path.read_text(encoding="utf-8", errors="ignore")
        found[path.stem] = _METHOD.findall(source)
    return found


def _list_features(features_dir: Path) -> Dict[str, List[str]]:
    found: Dict[str, List[str]] = {}
    if not features_dir.is_dir():
        return found
    for path in sorted(features_dir.rglob("*.feature")):
        source = path.read_text(encoding="utf-8", errors="ignore")
        found[path.stem] = _SCENARIO.findall(source)
    return found


def analyze_framework(paths: Optional[FrameworkPaths] = None) -> FrameworkInfo:
    paths = paths or FrameworkPaths.resolve()
    props = paths.properties()
    jira_props = paths.jira_properties()
    if not props.exists():
        logger.warning("Framework configuration not found at %s", props.path)

    def prop(key: str) -> Optional[str]:
        return props.get(key, default="") or None

    jira_base_url = jira_props.get(PropKeys.JIRA_BASE_URL, default="") or os.getenv("JIRA_BASE_URL") or None
    return FrameworkInfo(
        root=str(paths.root),
        base_url=prop(PropKeys.URL),
        browser=prop(PropKeys.BROWSER),
        headless=_as_bool(prop(PropKeys.HEADLESS)),
        recording_enabled=_as_bool(prop(PropKeys.RECORD)),
        screenshot_enabled=_as_bool(prop(PropKeys.SCREENSHOTS)),
        default_timeout=_as_int(PropKeys.TIMEOUT, prop(PropKeys.TIMEOUT)),
        retry_count=_as_int(PropKeys.RETRY_COUNT, prop(PropKeys.RETRY_COUNT)),
        jira_enabled=jira_base_url is not None,
        jira_base_url=jira_base_url,
        jira_project_key=(jira_props.get(PropKeys.JIRA_PROJECT_KEY, default="")
                          or os.getenv("JIRA_PROJECT_KEY") or None),
        page_objects=_list_page_objects(paths.pages_dir),
        features=_list_features(paths.features_dir),
    )


def validate_test_structure(test_name: str, paths: Optional[FrameworkPaths] = None) -> StructureReport:
    """Check that the page object, feature and step definitions exist for ``test_name``.

    Feature files are accepted under the class name or its lower-case form.
    """
    paths = paths or FrameworkPaths.resolve()
    page = paths.page_object_path(test_name)
    feature = paths.feature_path(test_name)
    if not feature.exists():
        lowered = paths.features_dir / f"{test_name.lower()}.feature"
        if lowered.exists():
            feature = lowered
    steps = paths.step_definition_path(test_name)
    return StructureReport(
        test_name=test_name,
        page_object_path=str(page),
        page_object_exists=page.exists(),
        feature_path=str(feature),
        feature_exists=feature.exists(),
        step_definition_path=str(steps),
        step_definition_exists=steps.exists(),
    )
