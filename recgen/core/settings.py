"""Framework layout and `.properties` configuration access.

The generated artifacts target a Java Playwright/Cucumber framework whose
runtime settings live in Java properties files under ``src/test/resources``.
This module locates that framework on disk and reads (or updates) those files
so the generator can pick up the base URL, credentials and JIRA settings the
framework itself uses.
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

PAGES_RELATIVE = Path("src/main/java/pages")
FEATURES_RELATIVE = Path("src/test/java/features")
STEP_DEFS_RELATIVE = Path("src/test/java/stepDefs")
PROPERTIES_RELATIVE = Path("src/test/resources/configurations.properties")
JIRA_PROPERTIES_RELATIVE = Path("src/test/resources/jiraConfigurations.properties")


class PropKeys:
    """Property names understood by the target framework."""

    USERNAME = "Username"
    PASSWORD = "Password"
    BROWSER = "Browser"
    URL = "URL"
    HEADLESS = "Headless"
    RECORD = "Record"
    SCREENSHOTS = "TakeScreenShots"
    TIMEOUT = "Timeout"
    RETRY_COUNT = "RetryCount"
    VERSION = "Version"
    PASS_COMMENT = "PassComment"
    FAIL_COMMENT = "FailComment"
    JIRA_INTEGRATION = "JIRA_Integration"
    JIRA_BASE_URL = "JIRA_BASE_URL"
    JIRA_PROJECT_KEY = "PROJECT_KEY"


_KEY_VALUE = re.compile(r"^((?:\\.|[^=:\s\\])+)\s*(?:[=:]\s*|\s+|$)(.*)$")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "f": "\f"}


def _unescape(text: str) -> str:
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), text)


def _logical_lines(text: str):
    pending = ""
    for raw in text.splitlines():
        line = raw.lstrip()
        if not pending and (not line or line[0] in "#!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending += line[:-1]
            continue
        yield pending + line
        pending = ""
    if pending:
        yield pending


def parse_properties(text: str) -> Dict[str, str]:
    """Parse Java ``.properties`` content into a plain dict."""
    values: Dict[str, str] = {}
    for line in _logical_lines(text):
        match = _KEY_VALUE.match(line)
        if not match:
            continue
        values[_unescape(match.group(1))] = _unescape(match.group(2).rstrip())
    return values


class PropertiesFile:
    """Lazy reader/writer for a single ``.properties`` file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._values: Optional[Dict[str, str]] = None

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Dict[str, str]:
        if self._values is None:
            if self.exists():
                self._values = parse_properties(self.path.read_text(encoding="utf-8", errors="ignore"))
            else:
                logger.debug("Properties file not found: %s", self.path)
                self._values = {}
        return self._values

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return a property value; keys match exactly first, then case-insensitively."""
        values = self.load()
        if key in values:
            return values[key].strip()
        lowered = key.lower()
        for name, value in values.items():
            if name.lower() == lowered:
                return value.strip()
        if default is None:
            logger.warning("Property '%s' not found in %s", key, self.path.name)
        return default

    def get_required(self, key: str) -> str:
        value = self.get(key, default="")
        if not value:
            raise RuntimeError(f"Required property '{key}' is missing from {self.path}")
        return value

    def set(self, key: str, value: str) -> None:
        """Update (or append) a property and write the file back."""
        lines = self.path.read_text(encoding="utf-8").splitlines() if self.exists() else []
        pattern = re.compile(rf"^\s*{re.escape(key)}\s*[=:\s]")
        replaced = False
        for index, line in enumerate(lines):
            if pattern.match(line):
                lines[index] = f"{key}={value}"
                replaced = True
                break
        if not replaced:
            lines.append(f"{key}={value}")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        self._values = None

    def mentions(self, *words: str) -> bool:
        """True when any key or value contains one of ``words`` (case-insensitive)."""
        blob = " ".join(f"{k} {v}" for k, v in self.load().items()).lower()
        return any(word.lower() in blob for word in words)


@dataclass
class FrameworkPaths:
    """Locations of generated artifacts inside the target framework."""

    root: Path

    @classmethod
    def resolve(cls, project_root: str | Path | None = None) -> "FrameworkPaths":
        explicit = str(project_root).strip() if project_root else ""
        if not explicit:
            explicit = (os.getenv("FRAMEWORK_ROOT") or "").strip()
        root = Path(explicit).expanduser() if explicit else Path.cwd()
        return cls(root=root.resolve())

    @property
    def pages_dir(self) -> Path:
        return self.root / PAGES_RELATIVE

    @property
    def features_dir(self) -> Path:
        return self.root / FEATURES_RELATIVE

    @property
    def step_defs_dir(self) -> Path:
        return self.root / STEP_DEFS_RELATIVE

    def page_object_path(self, class_name: str) -> Path:
        return self.pages_dir / f"{class_name}.java"

    def feature_path(self, class_name: str) -> Path:
        return self.features_dir / f"{class_name}.feature"

    def step_definition_path(self, class_name: str) -> Path:
        return self.step_defs_dir / f"{class_name}Steps.java"

    def properties(self) -> PropertiesFile:
        return PropertiesFile(self.root / PROPERTIES_RELATIVE)

    def jira_properties(self) -> PropertiesFile:
        return PropertiesFile(self.root / JIRA_PROPERTIES_RELATIVE)
