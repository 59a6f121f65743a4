import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import requests
from requests.auth import HTTPBasicAuth
from dotenv import load_dotenv

from ..core.settings import FrameworkPaths, PropKeys

load_dotenv()  # Loads .env from current working directory (framework root expected)

JIRA_DEBUG = os.getenv("JIRA_DEBUG", "0").lower() in {"1", "true", "yes"}
BUG_LABEL = "BugByAutomationFailure"

_ENV_TO_PROPERTY = {
    "JIRA_EMAIL": "JIRA_EMAIL",
    "JIRA_API_TOKEN": "JIRA_API_TOKEN",
    "JIRA_BASE_URL": PropKeys.JIRA_BASE_URL,
    "JIRA_PROJECT_KEY": PropKeys.JIRA_PROJECT_KEY,
}


def _settings(paths: Optional[FrameworkPaths] = None) -> Dict[str, Optional[str]]:
    """Jira settings from the environment, falling back to jiraConfigurations.properties."""
    props = (paths or FrameworkPaths.resolve()).jira_properties()
    values: Dict[str, Optional[str]] = {}
    for env_key, prop_key in _ENV_TO_PROPERTY.items():
        values[env_key] = os.getenv(env_key) or props.get(prop_key, default="") or None
    values["JIRA_ACCEPTANCE_FIELD"] = os.getenv("JIRA_ACCEPTANCE_FIELD") or None
    return values


def _validate_env(settings: Dict[str, Optional[str]], required: Iterable[str] = ("JIRA_EMAIL", "JIRA_API_TOKEN", "JIRA_BASE_URL")) -> None:
    missing = [name for name in required if not settings.get(name)]
    if missing:
        raise RuntimeError(
            "Missing Jira environment variables: " + ", ".join(missing) +
            ". Set them in a .env file, the process environment or jiraConfigurations.properties."
        )


def _debug(msg: str) -> None:
    if JIRA_DEBUG:
        print(f"[JIRA] {msg}")


class JiraEndpointUnavailable(RuntimeError):
    """Raised when a Jira REST path is disabled or removed."""


@dataclass
class JiraStory:
    key: str
    summary: str
    description: str = ""
    issue_type: str = "Story"
    priority: str = "Medium"
    status: str = ""
    acceptance_criteria: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "summary": self.summary,
            "description": self.description,
            "issueType": self.issue_type,
            "priority": self.priority,
            "status": self.status,
            "acceptanceCriteria": list(self.acceptance_criteria),
        }


def adf_to_text(node: Any) -> str:
    """Flatten an Atlassian Document Format node (or plain string) to text."""
    if node is None:
        return ""
    if isinstance(node, str):
        return node
    if isinstance(node, list):
        return "".join(adf_to_text(child) for child in node)
    node_type = node.get("type")
    if node_type == "text":
        return node.get("text", "")
    if node_type == "hardBreak":
        return "\n"
    inner = adf_to_text(node.get("content", []))
    if node_type == "listItem":
        return "- " + inner.strip() + "\n"
    if node_type in {"paragraph", "heading", "codeBlock", "blockquote"}:
        return inner.rstrip() + "\n"
    return inner


def adf_document(text: str) -> Dict[str, Any]:
    """Wrap plain text as an ADF document, one paragraph per line."""
    lines = text.splitlines() or [""]
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {"type": "paragraph", "content": [{"type": "text", "text": line}] if line else []}
            for line in lines
        ],
    }


_CRITERIA_HEADING = re.compile(r"^\s*(?:h\d\.\s*|#+\s*)?\**acceptance criteria\**\s*:?\s*$", re.IGNORECASE)
_OTHER_HEADING = re.compile(r"^\s*(?:h\d\.\s+|#+\s+|[A-Z][A-Za-z ]{2,40}:\s*$)")
_BULLET = re.compile(r"^\s*(?:[-*•]|\d+[.)]|AC\d*[:.)-])\s*")
_GHERKIN = re.compile(r"^\s*(Given|When|Then|And|But)\b", re.IGNORECASE)


def parse_acceptance_criteria(text: str) -> List[str]:
    """Pull acceptance criteria out of a story description.

    Prefers an explicit "Acceptance Criteria" section (one criterion per
    bullet or numbered line, with Gherkin continuation lines folded into the
    preceding criterion). Without a section, loose Given/When/Then lines form a
    single criterion.
    """
    lines = (text or "").splitlines()
    start = next((i for i, line in enumerate(lines) if _CRITERIA_HEADING.match(line)), None)
    if start is None:
        gherkin = [line.strip() for line in lines if _GHERKIN.match(line)]
        return ["\n".join(gherkin)] if gherkin else []

    criteria: List[str] = []
    for line in lines[start + 1:]:
        if not line.strip():
            continue
        if _OTHER_HEADING.match(line) and not _GHERKIN.match(line) and not _BULLET.match(line):
            break
        cleaned = _BULLET.sub("", line).strip()
        if not cleaned:
            continue
        if criteria and _GHERKIN.match(cleaned) and not re.match(r"^\s*Given\b", cleaned, re.IGNORECASE) \
                and _GHERKIN.match(criteria[-1].splitlines()[0]):
            criteria[-1] += "\n" + cleaned
        else:
            criteria.append(cleaned)
    return criteria


def _request(method: str, path: str, settings: Dict[str, Optional[str]], expected: Iterable[int],
             **kwargs: Any) -> requests.Response:
    auth = HTTPBasicAuth(settings["JIRA_EMAIL"], settings["JIRA_API_TOKEN"])  # type: ignore[arg-type]
    url = f"{settings['JIRA_BASE_URL'].rstrip('/')}{path}"  # type: ignore[union-attr]
    headers = {"Accept": "application/json"}
    headers.update(kwargs.pop("headers", {}))
    _debug(f"{method} {url}")
    try:
        response = requests.request(method, url, headers=headers, auth=auth, timeout=30, **kwargs)
    except requests.RequestException as exc:  # noqa: BLE001
        raise RuntimeError(f"Jira request network error: {exc}") from exc
    if response.status_code in {404, 410} and 404 not in expected:
        raise JiraEndpointUnavailable(f"{path} unavailable (HTTP {response.status_code}).")
    if response.status_code not in expected:
        snippet = response.text[:500].replace("\n", " ")
        raise RuntimeError(f"Jira request failed {response.status_code}: {snippet}")
    return response


def fetch_jira_story(issue_key: str, paths: Optional[FrameworkPaths] = None) -> JiraStory:
    """Fetch a single issue and flatten it into a JiraStory.

    Raises:
        RuntimeError: When required settings are missing, the issue does not exist or HTTP errors occur.
    """
    settings = _settings(paths)
    _validate_env(settings)
    fields = ["summary", "description", "issuetype", "priority", "status"]
    acceptance_field = settings.get("JIRA_ACCEPTANCE_FIELD")
    if acceptance_field:
        fields.append(acceptance_field)
    try:
        response = _request("GET", f"/rest/api/3/issue/{issue_key}", settings, expected={200},
                            params={"fields": ",".join(fields)})
    except JiraEndpointUnavailable as exc:
        raise RuntimeError(f"Jira issue {issue_key} not found") from exc

    data = response.json()
    issue_fields = data.get("fields") or {}
    description = adf_to_text(issue_fields.get("description")).strip()
    criteria: List[str] = []
    if acceptance_field and issue_fields.get(acceptance_field):
        criteria = parse_acceptance_criteria(
            "Acceptance Criteria\n" + adf_to_text(issue_fields.get(acceptance_field))
        )
    if not criteria:
        criteria = parse_acceptance_criteria(description)
    _debug(f"Fetched {issue_key} with {len(criteria)} acceptance criteria")
    return JiraStory(
        key=data.get("key", issue_key),
        summary=issue_fields.get("summary") or "",
        description=description,
        issue_type=(issue_fields.get("issuetype") or {}).get("name") or "Story",
        priority=(issue_fields.get("priority") or {}).get("name") or "Medium",
        status=(issue_fields.get("status") or {}).get("name") or "",
        acceptance_criteria=criteria,
    )


def add_comment(issue_key: str, text: str, paths: Optional[FrameworkPaths] = None) -> None:
    settings = _settings(paths)
    _validate_env(settings)
    _request("POST", f"/rest/api/3/issue/{issue_key}/comment", settings, expected={200, 201},
             json={"body": adf_document(text)})
    _debug(f"Comment added to {issue_key}")


def update_description(issue_key: str, text: str, paths: Optional[FrameworkPaths] = None) -> None:
    settings = _settings(paths)
    _validate_env(settings)
    _request("PUT", f"/rest/api/3/issue/{issue_key}", settings, expected={200, 204},
             json={"fields": {"description": adf_document(text)}})


def attach_file(issue_key: str, file_path: str | Path, paths: Optional[FrameworkPaths] = None) -> None:
    settings = _settings(paths)
    _validate_env(settings)
    attachment = Path(file_path)
    if not attachment.is_file():
        raise RuntimeError(f"Attachment not found: {attachment}")
    with attachment.open("rb") as handle:
        _request("POST", f"/rest/api/3/issue/{issue_key}/attachments", settings, expected={200},
                 headers={"X-Atlassian-Token": "no-check"},
                 files={"file": (attachment.name, handle)})


def create_bug(summary: str, description: str, attachment: str | Path | None = None,
               paths: Optional[FrameworkPaths] = None) -> str:
    """Create a Bug in the configured project and return its key."""
    settings = _settings(paths)
    _validate_env(settings, ("JIRA_EMAIL", "JIRA_API_TOKEN", "JIRA_BASE_URL", "JIRA_PROJECT_KEY"))
    payload = {
        "fields": {
            "project": {"key": settings["JIRA_PROJECT_KEY"]},
            "summary": summary,
            "description": adf_document(description),
            "labels": [BUG_LABEL],
            "issuetype": {"name": "Bug"},
        }
    }
    response = _request("POST", "/rest/api/3/issue", settings, expected={201}, json=payload)
    key = response.json().get("key")
    if not key:
        raise RuntimeError("Jira did not return a key for the created bug")
    if attachment:
        attach_file(key, attachment, paths)
    return key


def report_test_result(issue_key: str, failed: bool, paths: Optional[FrameworkPaths] = None) -> str:
    """Comment the run outcome on a test issue using the framework's configured wording."""
    paths = paths or FrameworkPaths.resolve()
    settings = _settings(paths)
    _validate_env(settings)
    _request("GET", f"/rest/api/3/issue/{issue_key}", settings, expected={200}, params={"fields": "status"})

    props = paths.properties()
    version = props.get(PropKeys.VERSION, default="")
    if failed:
        comment = props.get(PropKeys.FAIL_COMMENT, default="") or "Test failed"
    else:
        comment = props.get(PropKeys.PASS_COMMENT, default="") or "Test passed"
    text = f"{comment} {version}".strip()
    add_comment(issue_key, text, paths)
    return text
