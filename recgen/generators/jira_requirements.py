"""Derive a test requirement (elements, scenarios, verification) from a JIRA story.

This is the story-first path: instead of a recording, the summary,
description and acceptance criteria of an issue are analysed with keyword
rules to suggest page elements and Gherkin scenarios. The result can be
rendered as a draft feature file.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..sources.jira import JiraStory, fetch_jira_story
from .artifact_emitter import normalize_feature_step
from .method_namer import sanitize_class_name

logger = logging.getLogger(__name__)

# (pattern, element name, action, description) in detection order.
ELEMENT_RULES = [
    (r"username|user name|userid|user id", "Username Field", "type", "Enter username"),
    (r"password|pwd", "Password Field", "type", "Enter password"),
    (r"email|e-mail", "Email Field", "type", "Enter email address"),
    (r"first name|firstname", "First Name Field", "type", "Enter first name"),
    (r"last name|lastname", "Last Name Field", "type", "Enter last name"),
    (r"phone|telephone|mobile", "Phone Field", "type", "Enter phone number"),
    (r"address", "Address Field", "type", "Enter address"),
    (r"search", "Search Field", "type", "Enter search query"),
    (r"login button|sign in|signin", "Login Button", "click", "Click login button"),
    (r"submit button|submit form", "Submit Button", "click", "Submit form"),
    (r"save button|save", "Save Button", "click", "Save changes"),
    (r"cancel button|cancel", "Cancel Button", "click", "Cancel action"),
    (r"delete button|remove", "Delete Button", "click", "Delete item"),
    (r"register button|signup|sign up", "Register Button", "click", "Register account"),
    (r"checkbox|check box|remember me", "Checkbox", "click", "Toggle checkbox"),
    (r"dropdown|drop down|select|combo", "Dropdown", "select", "Select from dropdown"),
]

_STORY_TYPES = re.compile(r"story|feature", re.IGNORECASE)
_BUG_TYPES = re.compile(r"bug|defect", re.IGNORECASE)
_HIGH_PRIORITY = re.compile(r"high|critical|blocker", re.IGNORECASE)
_TOP_PRIORITY = re.compile(r"critical|blocker", re.IGNORECASE)
_UI_TEXT = re.compile(r"\bui\b|user interface|layout|design|button|field|form")
_PERFORMANCE_TEXT = re.compile(r"performance|speed|fast|slow|timeout|load time")
_GHERKIN_LINE = re.compile(r"^(given|when|then|and)\b", re.IGNORECASE)


@dataclass
class PageElement:
    name: str
    action: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "action": self.action, "description": self.description}


@dataclass
class Scenario:
    name: str
    steps: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "steps": list(self.steps)}


@dataclass
class VerificationOptions:
    functional: bool = False
    ui: bool = False
    performance: bool = False
    logging: bool = False
    performance_threshold: int = 3000

    def to_dict(self) -> Dict[str, Any]:
        return {
            "functional": self.functional,
            "ui": self.ui,
            "performance": self.performance,
            "logging": self.logging,
            "performanceThreshold": self.performance_threshold,
        }


@dataclass
class TestRequirement:
    test_name: str
    description: str
    jira_key: Optional[str] = None
    elements: List[PageElement] = field(default_factory=list)
    scenarios: List[Scenario] = field(default_factory=list)
    verification: VerificationOptions = field(default_factory=VerificationOptions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "testName": self.test_name,
            "description": self.description,
            "jiraKey": self.jira_key,
            "elements": [e.to_dict() for e in self.elements],
            "scenarios": [s.to_dict() for s in self.scenarios],
            "verification": self.verification.to_dict(),
        }


def detect_ui_elements(story_text: str, issue_type: str) -> List[PageElement]:
    text = (story_text or "").lower()
    elements = [
        PageElement(name, action, description)
        for pattern, name, action, description in ELEMENT_RULES
        if re.search(pattern, text)
    ]
    if not elements:
        if _STORY_TYPES.search(issue_type or ""):
            elements = [
                PageElement("Main Action Button", "click", "Primary action button"),
                PageElement("Input Field", "type", "Primary input field"),
            ]
        elif _BUG_TYPES.search(issue_type or ""):
            elements = [PageElement("Affected Element", "click", "Element with bug")]
    return elements


def generate_detailed_steps(criterion: str, elements: List[PageElement]) -> List[str]:
    """Steps for one acceptance criterion; existing Gherkin lines are kept verbatim."""
    steps = [line.strip() for line in criterion.splitlines() if _GHERKIN_LINE.match(line.strip())]
    if steps:
        return steps

    steps = ["Given user is on the application page", "And the page is fully loaded"]
    if elements:
        for element in elements:
            if element.action == "type":
                steps.append(f"When user enters valid data in {element.name}")
            elif element.action == "click":
                steps.append(f"And user clicks on {element.name}")
            elif element.action == "select":
                steps.append(f"And user selects value from {element.name}")
    else:
        steps.append(f'When user performs actions for "{criterion}"')

    index = criterion.lower().find("should")
    expected = criterion[index + len("should"):].strip() if index >= 0 else ""
    steps.append(f"Then the system should {expected or 'complete successfully'}")
    steps.append("And no errors should be displayed")
    return steps


def generate_edge_case_scenarios(issue_type: str, elements: List[PageElement]) -> List[Scenario]:
    scenarios: List[Scenario] = []
    if any(e.action == "type" for e in elements):
        scenarios.append(Scenario("Verify validation with empty fields", [
            "Given user is on the application page",
            "When user leaves required fields empty",
            "And user attempts to proceed",
            "Then appropriate validation messages should be displayed",
            "And the action should not proceed",
        ]))
        scenarios.append(Scenario("Verify validation with invalid data", [
            "Given user is on the application page",
            "When user enters invalid data in fields",
            "And user attempts to proceed",
            "Then validation errors should be displayed",
            "And invalid fields should be highlighted",
        ]))
    if _STORY_TYPES.search(issue_type or ""):
        scenarios.append(Scenario("Verify UI responsiveness", [
            "Given user is on the application page",
            "When the page loads",
            "Then all elements should be visible",
            "And the layout should be proper",
            "And no visual glitches should occur",
        ]))
    scenarios.append(Scenario("Verify error handling", [
        "Given user is on the application page",
        "When an error condition occurs",
        "Then appropriate error message should be displayed",
        "And user should be able to recover",
        "And application should remain stable",
    ]))
    return scenarios


def generate_default_scenarios(summary: str, elements: List[PageElement]) -> List[Scenario]:
    scenarios = [Scenario(f"Verify {summary} - Happy Path", [
        "Given user is on the application page",
        "And all prerequisites are met",
        "When user performs the main action",
        "Then the action should complete successfully",
        "And expected result should be displayed",
    ])]
    if elements:
        steps = ["Given user is on the application page"]
        steps.extend(f"When user interacts with {e.name}" for e in elements)
        steps.extend(["Then all elements should respond correctly", "And no errors should occur"])
        scenarios.append(Scenario("Verify all UI elements are functional", steps))
    return scenarios


def suggest_verification(issue_type: str, priority: str, story_text: str) -> VerificationOptions:
    text = (story_text or "").lower()
    options = VerificationOptions(functional=True)
    options.ui = bool(_UI_TEXT.search(text) or _STORY_TYPES.search(issue_type or ""))
    if _HIGH_PRIORITY.search(priority or "") or _PERFORMANCE_TEXT.search(text):
        options.performance = True
        options.performance_threshold = 2000 if _TOP_PRIORITY.search(priority or "") else 3000
    options.logging = bool(_BUG_TYPES.search(issue_type or "") or _HIGH_PRIORITY.search(priority or ""))
    return options


def _scenario_name(criterion: str) -> str:
    first_line = criterion.splitlines()[0] if criterion else criterion
    return "Verify " + (first_line[:50] + "..." if len(first_line) > 50 else first_line)


def build_requirement(story: JiraStory, auto_detect: bool = True) -> TestRequirement:
    description = (
        f"{story.summary}\n\nJIRA Story: {story.key}\n"
        f"Generated from: {story.issue_type}\nPriority: {story.priority}"
    )
    requirement = TestRequirement(
        test_name=sanitize_class_name(story.summary),
        description=description,
        jira_key=story.key,
    )
    story_text = "\n".join([story.summary, story.description, *story.acceptance_criteria])

    if auto_detect:
        requirement.elements = detect_ui_elements(story_text, story.issue_type)
        requirement.verification = suggest_verification(story.issue_type, story.priority, story_text)
        logger.info("Detected %d UI elements in %s", len(requirement.elements), story.key)

    if story.acceptance_criteria:
        for criterion in story.acceptance_criteria:
            requirement.scenarios.append(
                Scenario(_scenario_name(criterion), generate_detailed_steps(criterion, requirement.elements))
            )
        if auto_detect:
            requirement.scenarios.extend(generate_edge_case_scenarios(story.issue_type, requirement.elements))
    else:
        logger.warning("No acceptance criteria on %s; generating default scenarios", story.key)
        requirement.scenarios.extend(generate_default_scenarios(story.summary, requirement.elements))
    return requirement


def generate_from_jira_story(
    issue_key: str,
    auto_detect: bool = True,
    fetch: Callable[[str], JiraStory] = fetch_jira_story,
) -> TestRequirement:
    """Fetch ``issue_key`` and turn it into a TestRequirement.

    Raises:
        RuntimeError: When the story cannot be fetched.
    """
    story = fetch(issue_key)
    logger.info("Fetched %s: %s (%s, %s)", story.key, story.summary, story.issue_type, story.priority)
    return build_requirement(story, auto_detect=auto_detect)


def render_requirement_feature(requirement: TestRequirement) -> str:
    """Render a draft feature file with one scenario per requirement scenario."""
    tags = " ".join(f"@{t}" for t in (requirement.jira_key, requirement.test_name) if t)
    lines = [tags, f"Feature: {requirement.test_name}"]
    for description_line in requirement.description.splitlines():
        lines.append(f"  {description_line}".rstrip())
    for scenario in requirement.scenarios:
        lines.extend(["", f"  Scenario: {scenario.name}"])
        lines.extend(f"    {normalize_feature_step(step)}" for step in scenario.steps)
    return "\n".join(lines) + "\n"
