"""Render the page object, feature file and step definitions for a recording.

The three artifacts are generated from the same named action list, so every
feature step has exactly one matching step definition and every step
definition delegates to an existing page-object method. After rendering, a
reconciliation pass compares the feature's phrases with the annotated
phrases in the step definitions and appends pending stubs for anything
missing.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from ..core.errors import ArtifactValidationError
from ..recorder.models import ActionKind, RecordedAction
from .locator_resolver import LocatorRung, priority_comment
from .method_namer import unique_name

logger = logging.getLogger(__name__)

PAGE_OBJECT = "PageObject"
FEATURE = "Feature"
STEP_DEFINITIONS = "StepDefinitions"

PAGE_OBJECT_IMPORTS = (
    "import com.microsoft.playwright.Page;",
    "import configs.loadProps;",
    "import configs.TimeoutConfig;",
    "import java.util.logging.Logger;",
)

LOGIN_USERNAME_STEP = "User enters valid username from configuration"
LOGIN_PASSWORD_STEP = "User enters valid password from configuration"
LOGIN_SUBMIT_STEP = "User clicks on Sign In button"
FINAL_STEP = "page should be updated"

_USERNAME_HINTS = ("username", "user name", "userid", "user id", "email", "login")
_SUBMIT_HINTS = ("signin", "sign in", "sign-in", "login", "log in", "logon")

_FEATURE_STEP = re.compile(r"^\s*(Given|When|Then|And|But)\s+(.+?)\s*$", re.MULTILINE)
_DEFINED_STEP = re.compile(r'@(?:Given|When|Then|And|But)\("((?:[^"\\]|\\.)*)"\)')
_QUOTED = re.compile(r'"[^"]*"')
_CUCUMBER_SPECIAL = re.compile(r"([(){}/\\])")
_GIVEN_SHAPE = re.compile(r"^(user is|page is|application is|system is|browser is|data is)", re.IGNORECASE)
_WHEN_SHAPE = re.compile(
    r"^(user (clicks?|enters?|types?|selects?|submits?|navigates?|tries?|makes?|completes?|checks?|presses?)"
    r"|multiple users)",
    re.IGNORECASE,
)


def java_string(text: Optional[str]) -> str:
    """Escape ``text`` for use inside a Java string literal."""
    return (
        (text or "")
        .replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def _java_unescape(text: str) -> str:
    return re.sub(r"\\(.)", lambda m: {"n": "\n", "r": "\r", "t": "\t"}.get(m.group(1), m.group(1)), text)


def cucumber_expression(phrase: str) -> str:
    """Turn a concrete feature phrase into a Cucumber expression.

    Quoted arguments become ``{string}``; characters with special meaning in
    Cucumber expressions are escaped in the literal parts.
    """
    parts = _QUOTED.split(phrase)
    return "{string}".join(_CUCUMBER_SPECIAL.sub(r"\\\1", part) for part in parts)


def _comparable(expression: str) -> str:
    """Normalise a phrase or expression so feature text and annotations compare equal."""
    text = _QUOTED.sub("{string}", expression)
    text = re.sub(r"\\([(){}/\\])", r"\1", text)
    return re.sub(r"\s+", " ", text).strip()


def normalize_feature_step(line: str) -> str:
    """Tidy a generated step line (whitespace, doubled quotes, trailing punctuation, keyword)."""
    step = re.sub(r"\s+", " ", line).strip()
    step = step.replace('""', '"')
    step = re.sub(r"[\s.!?]+$", "", step)
    if not re.match(r"^(Given|When|Then|And|But)\s", step):
        step = "When " + step
    return step


@dataclass
class LoginPageObject:
    """An existing page object that can perform a configuration-driven login."""

    class_name: str
    username_method: str = "enterUsername"
    password_method: str = "enterPassword"
    submit_method: Optional[str] = None


def parse_login_page_object(class_name: str, source: str) -> Optional[LoginPageObject]:
    """Return a LoginPageObject when ``source`` exposes username and password entry methods."""
    methods = set(re.findall(r"public\s+static\s+void\s+(\w+)\s*\(", source or ""))
    if "enterUsername" not in methods or "enterPassword" not in methods:
        return None
    submit = None
    for method in sorted(methods):
        if re.match(r"click\w*(SignIn|Signin|Login|LogIn|Submit)\w*$", method):
            submit = method
            break
    return LoginPageObject(class_name=class_name, submit_method=submit)


def _login_text(action: RecordedAction) -> str:
    return " ".join(
        part for part in (action.raw_locator, action.readable_name, action.element_phrase) if part
    ).lower()


def find_login_block(actions: List[RecordedAction], with_submit: bool = True) -> Dict[int, str]:
    """Locate the recorded login sequence.

    Returns ``{sequence_id: role}`` with roles ``username``, ``password`` and
    ``submit``. Only a password fill paired with an earlier username/email
    fill counts, and the next click after the password must look like a
    sign-in. A second password fill before that click (confirm, repeat)
    marks a registration form, which is not a login. Empty when the
    recording has no such block.
    """
    for index, action in enumerate(actions):
        if action.kind != ActionKind.FILL or not _is_password_fill(action):
            continue
        username = None
        for earlier in reversed(actions[:index]):
            if earlier.kind == ActionKind.FILL and any(h in _login_text(earlier) for h in _USERNAME_HINTS):
                username = earlier
                break
        if username is None:
            continue
        submit = _login_submit(actions[index + 1:])
        if submit is None:
            continue
        block = {username.sequence_id: "username", action.sequence_id: "password"}
        if with_submit:
            block[submit.sequence_id] = "submit"
        return block
    return {}


def _is_password_fill(action: RecordedAction) -> bool:
    return action.kind == ActionKind.FILL and "password" in _login_text(action)


def _login_submit(following: List[RecordedAction]) -> Optional[RecordedAction]:
    for later in following:
        if _is_password_fill(later):
            return None
        if later.kind != ActionKind.CLICK:
            continue
        if any(h in _login_text(later) for h in _SUBMIT_HINTS):
            return later
        return None
    return None


@dataclass
class EmissionSession:
    """Names already emitted into one artifact."""

    artifact: str
    locators: Set[str] = field(default_factory=set)
    constant_names: Set[str] = field(default_factory=set)
    method_names: Set[str] = field(default_factory=set)
    step_phrases: Set[str] = field(default_factory=set)
    lines: List[str] = field(default_factory=list)

    def add(self, *lines: str) -> None:
        self.lines.extend(lines)

    def claim_phrase(self, phrase: str) -> bool:
        key = _comparable(phrase).lower()
        if key in self.step_phrases:
            return False
        self.step_phrases.add(key)
        return True

    def claim_method(self, name: str) -> bool:
        if name in self.method_names:
            return False
        self.method_names.add(name)
        return True

    def render(self) -> str:
        return "\n".join(self.lines) + "\n"


@dataclass
class GeneratedArtifactSet:
    class_name: str
    story: str
    page_object_source: Optional[str]
    feature_file_source: str
    step_definition_source: str
    stubs_added: List[str] = field(default_factory=list)
    login_reused: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "className": self.class_name,
            "story": self.story,
            "pageObject": self.page_object_source,
            "featureFile": self.feature_file_source,
            "stepDefinitions": self.step_definition_source,
            "stubsAdded": list(self.stubs_added),
            "loginReused": self.login_reused,
        }


# --- page object -----------------------------------------------------------

def ensure_required_imports(source: str) -> str:
    missing = [imp for imp in PAGE_OBJECT_IMPORTS if imp not in source]
    if not missing:
        return source
    logger.info("Adding missing page-object imports: %s", ", ".join(missing))
    match = re.search(r"^package\s+[\w.]+;\s*$", source, re.MULTILINE)
    block = "\n".join(missing)
    if match:
        return source[:match.end()] + "\n\n" + block + source[match.end():]
    return block + "\n" + source


def ensure_navigate_method(source: str, class_name: str) -> str:
    if f"navigateTo{class_name}(" in source:
        return source
    logger.info("Adding missing navigateTo%s method", class_name)
    method = "\n".join([
        f"    public static void navigateTo{class_name}(Page page) {{",
        f'        log.info("Navigating to {class_name} page");',
        '        String fullUrl = loadProps.getProperty("URL") + PAGE_PATH;',
        "        navigateToUrl(fullUrl);",
        "    }",
    ])
    return _insert_before_closing_brace(source, method)


def promote_method_visibility(source: str) -> str:
    return re.sub(r"\bprotected\s+static\s+void\b", "public static void", source)


def _insert_before_closing_brace(source: str, block: str) -> str:
    end = source.rstrip().rfind("}")
    if end == -1:
        return source.rstrip() + "\n" + block + "\n"
    head = source[:end].rstrip("\n")
    return head + "\n\n" + block + "\n" + source[end:]


def _log_locator_summary(class_name: str, actions: List[RecordedAction]) -> None:
    static_ids = sum(1 for a in actions if a.locator_rung == LocatorRung.STATIC_ID)
    labels = sum(1 for a in actions if (a.raw_locator or "").startswith("label="))
    texts = sum(1 for a in actions if (a.raw_locator or "").startswith("text="))
    logger.info(
        "%s locators: %d total, %d static id, %d label, %d text",
        class_name, len(actions), static_ids, labels, texts,
    )


def render_page_object(
    actions: List[RecordedAction],
    class_name: str,
    story: str = "",
    page_path: str = "",
) -> str:
    session = EmissionSession(PAGE_OBJECT)
    session.add("package pages;", "")
    session.add(*PAGE_OBJECT_IMPORTS)
    session.add(
        "",
        "/**",
        f" * Page Object for {class_name}",
        " * Auto-generated from Playwright recording",
    )
    if story:
        session.add(f" * @story {story}")
    session.add(
        " */",
        f"public class {class_name} extends BasePage {{",
        "",
        f"    private static final Logger log = Logger.getLogger({class_name}.class.getName());",
        f'    private static final String PAGE_PATH = "{java_string(page_path)}";',
        "",
    )

    elements = [a for a in actions if a.kind != ActionKind.NAVIGATE and a.resolved_locator]
    for action in elements:
        if action.resolved_locator in session.locators or action.element_constant_name in session.constant_names:
            continue
        session.locators.add(action.resolved_locator)
        session.constant_names.add(action.element_constant_name)
        comment = priority_comment(action.locator_rung or LocatorRung.CSS, action.dynamic_id)
        session.add(
            f"    // {action.readable_name} - {comment}",
            f'    private static final String {action.element_constant_name} = "{java_string(action.resolved_locator)}";',
            "",
        )
    _log_locator_summary(class_name, elements)

    session.claim_method(f"navigateTo{class_name}")
    session.add(
        f"    public static void navigateTo{class_name}(Page page) {{",
        f'        log.info("Navigating to {class_name} page");',
        '        String fullUrl = loadProps.getProperty("URL") + PAGE_PATH;',
        "        navigateToUrl(fullUrl);",
        "    }",
    )

    for action in elements:
        if not session.claim_method(action.method_name):
            continue
        session.add("", *_page_method(action))

    session.add("}")
    source = session.render()
    source = ensure_required_imports(source)
    source = ensure_navigate_method(source, class_name)
    return promote_method_visibility(source)


def _page_method(action: RecordedAction) -> List[str]:
    constant = action.element_constant_name
    name = action.method_name
    label = action.element_phrase or action.readable_name
    if action.kind == ActionKind.FILL:
        signature = f"public static void {name}(Page page, String text)"
        body = [f'log.info("Entering text into {label}");', f"enterText({constant}, text);"]
    elif action.kind == ActionKind.SELECT:
        signature = f"public static void {name}(Page page, String option)"
        body = [f'log.info("Selecting option from {label}");',
                f"selectDropDownValueByText({constant}, option);"]
    elif action.kind == ActionKind.PRESS:
        signature = f"public static void {name}(Page page)"
        body = [f'log.info("Pressing key on {label}");',
                f'page.locator({constant}).press("{java_string(action.value)}");']
    elif action.kind == ActionKind.CHECK:
        signature = f"public static void {name}(Page page)"
        body = [f'log.info("Checking {label}");', f"clickOnElement({constant});"]
    else:
        signature = f"public static void {name}(Page page)"
        body = [f'log.info("Clicking on {label}");', f"clickOnElement({constant});"]
    body.append("TimeoutConfig.waitShort();")
    return [f"    {signature} {{"] + [f"        {line}" for line in body] + ["    }"]


# --- feature file ----------------------------------------------------------

@dataclass
class _PlannedStep:
    keyword: str
    phrase: str
    action: Optional[RecordedAction] = None
    login_role: Optional[str] = None
    column: Optional[str] = None


def _column_for(action: RecordedAction, columns: Dict[str, str]) -> str:
    """Examples column for the action's element, unique per distinct element phrase."""
    key = action.element_phrase or action.readable_name or ""
    if key not in columns:
        base = re.sub(r"[^a-z0-9]", "", (action.element_phrase or action.readable_name).lower()) or "value"
        columns[key] = unique_name(base, set(columns.values()), action.sequence_id)
    return columns[key]


def _plan_steps(
    actions: List[RecordedAction],
    login_block: Dict[int, str],
) -> List[_PlannedStep]:
    """Decide the ordered action steps shared by the feature and step definitions."""
    planned: List[_PlannedStep] = []
    seen: Set[str] = set()
    columns: Dict[str, str] = {}
    when_used = False
    login_phrases = {
        "username": LOGIN_USERNAME_STEP,
        "password": LOGIN_PASSWORD_STEP,
        "submit": LOGIN_SUBMIT_STEP,
    }
    for action in actions:
        if action.kind == ActionKind.NAVIGATE:
            continue
        role = login_block.get(action.sequence_id)
        column = None
        if role:
            phrase = login_phrases[role]
        elif action.kind == ActionKind.FILL:
            column = _column_for(action, columns)
            phrase = f'user enters "<{column}>" into {action.element_phrase}'
        elif action.kind == ActionKind.SELECT:
            column = _column_for(action, columns)
            phrase = f'user selects "<{column}>" from {action.element_phrase}'
        else:
            phrase = action.step_text
        key = _comparable(phrase).lower()
        if key in seen:
            continue
        seen.add(key)
        if not when_used and (role or action.kind == ActionKind.CLICK):
            keyword = "When"
            when_used = True
        else:
            keyword = "And"
        planned.append(_PlannedStep(keyword, phrase, action, role, column))
    return planned


def _escape_cell(value: Optional[str]) -> str:
    return (value or "").replace("\\", "\\\\").replace("|", "\\|").replace("\n", " ")


def render_feature(
    planned: List[_PlannedStep],
    class_name: str,
    story: str = "",
    login_reused: bool = False,
) -> str:
    session = EmissionSession(FEATURE)
    columns: List[Tuple[str, str]] = []
    for step in planned:
        if step.column and step.column not in {c for c, _ in columns}:
            columns.append((step.column, step.action.value if step.action else ""))

    tags = " ".join(f"@{t}" for t in (re.sub(r"\s+", "", story or ""), class_name) if t)
    session.add(tags, f"Feature: {class_name} Test", "  Auto-generated from Playwright recording", "")
    if columns:
        session.add(f"  Scenario Outline: Complete {class_name} workflow")
    elif login_reused:
        session.add(f"  Scenario: Complete {class_name} workflow with existing login")
    else:
        session.add(f"  Scenario: Complete {class_name} workflow")

    lines = [f"Given user navigates to {class_name} page"]
    lines.extend(f"{step.keyword} {step.phrase}" for step in planned)
    lines.append(f"Then {FINAL_STEP}")
    for line in lines:
        step = normalize_feature_step(line)
        if session.claim_phrase(step.split(" ", 1)[1]):
            session.add(f"    {step}")

    if columns:
        session.add(
            "",
            "    Examples:",
            "      | " + " | ".join(c for c, _ in columns) + " |",
            "      | " + " | ".join(_escape_cell(v) for _, v in columns) + " |",
        )
    return session.render()


# --- step definitions ------------------------------------------------------

def render_step_definitions(
    planned: List[_PlannedStep],
    class_name: str,
    story: str = "",
    login_page: Optional[LoginPageObject] = None,
) -> str:
    session = EmissionSession(STEP_DEFINITIONS)
    uses_login = login_page is not None and any(s.login_role for s in planned)
    session.add("package stepDefs;", "", "import configs.browserSelector;")
    if uses_login:
        session.add("import configs.loadProps;")
    session.add("import io.cucumber.java.en.*;", f"import pages.{class_name};")
    if uses_login and login_page.class_name != class_name:
        session.add(f"import pages.{login_page.class_name};")
    session.add("", "/**", f" * Step Definitions for {class_name}", " * Auto-generated from Playwright recording")
    if story:
        session.add(f" * @story {story}")
    session.add(" */", f"public class {class_name}Steps extends browserSelector {{")

    navigate_phrase = f"user navigates to {class_name} page"
    session.claim_phrase(navigate_phrase)
    session.claim_method(f"navigateTo{class_name}Page")
    session.add(
        "",
        f'    @Given("{cucumber_expression(navigate_phrase)}")',
        f"    public void navigateTo{class_name}Page() {{",
        f"        {class_name}.navigateTo{class_name}(page);",
        "    }",
    )

    for step in planned:
        if not session.claim_phrase(step.phrase):
            continue
        if step.login_role:
            block = _login_step_method(step, login_page)
        else:
            block = _action_step_method(step, class_name)
        method_name = re.search(r"public void (\w+)\(", block[1]).group(1)
        if not session.claim_method(method_name):
            logger.warning("Duplicate step method %s skipped", method_name)
            continue
        session.add("", *block)

    session.claim_phrase(FINAL_STEP)
    session.add(
        "",
        f'    @Then("{FINAL_STEP}")',
        "    public void verifyPageUpdated() {",
        "        page.waitForLoadState();",
        "    }",
        "}",
    )
    return session.render()


def _action_step_method(step: _PlannedStep, class_name: str) -> List[str]:
    action = step.action
    annotation = f'    @{step.keyword}("{java_string(cucumber_expression(step.phrase))}")'
    if action.kind == ActionKind.FILL:
        return [
            annotation,
            f"    public void {action.method_name}(String text) {{",
            f"        {class_name}.{action.method_name}(page, text);",
            "    }",
        ]
    if action.kind == ActionKind.SELECT:
        return [
            annotation,
            f"    public void {action.method_name}(String option) {{",
            f"        {class_name}.{action.method_name}(page, option);",
            "    }",
        ]
    return [
        annotation,
        f"    public void {action.method_name}() {{",
        f"        {class_name}.{action.method_name}(page);",
        "    }",
    ]


def _login_step_method(step: _PlannedStep, login_page: LoginPageObject) -> List[str]:
    login = login_page.class_name
    annotation = f'    @{step.keyword}("{step.phrase}")'
    if step.login_role == "username":
        return [
            annotation,
            "    public void enterValidUsernameFromConfiguration() {",
            "        String username = loadProps.getProperty(loadProps.PropKeys.USERNAME);",
            f"        {login}.{login_page.username_method}(page, username);",
            "    }",
        ]
    if step.login_role == "password":
        return [
            annotation,
            "    public void enterValidPasswordFromConfiguration() {",
            "        String password = loadProps.getProperty(loadProps.PropKeys.PASSWORD);",
            f"        {login}.{login_page.password_method}(page, password);",
            "    }",
        ]
    return [
        annotation,
        "    public void clickSignInButton() {",
        f"        {login}.{login_page.submit_method}(page);",
        "    }",
    ]


# --- reconciliation --------------------------------------------------------

def feature_step_phrases(feature_source: str) -> List[str]:
    return [m.group(2) for m in _FEATURE_STEP.finditer(feature_source or "")]


def defined_step_phrases(step_source: str) -> List[str]:
    return [_java_unescape(m.group(1)) for m in _DEFINED_STEP.finditer(step_source or "")]


def step_keyword_for(phrase: str) -> str:
    if _GIVEN_SHAPE.match(phrase):
        return "Given"
    if _WHEN_SHAPE.match(phrase):
        return "When"
    return "Then"


def stub_method_name(phrase: str, used: Set[str]) -> str:
    words = re.findall(r"[A-Za-z0-9]+", _QUOTED.sub(" ", phrase))[:5]
    name = "".join(w.capitalize() for w in words)
    name = (name[:1].lower() + name[1:]) if name else "pendingStep"
    if name[0].isdigit():
        name = "step" + name
    base, suffix = name, 2
    while name in used:
        name = f"{base}{suffix}"
        suffix += 1
    used.add(name)
    return name


def reconcile_step_definitions(feature_source: str, step_source: str) -> Tuple[str, List[str]]:
    """Append pending stubs for feature phrases without a step definition.

    Returns the (possibly) updated step-definition source and the phrases
    that were stubbed.
    """
    defined = {_comparable(p).lower() for p in defined_step_phrases(step_source)}
    used_methods = set(re.findall(r"public\s+void\s+(\w+)\s*\(", step_source))
    stubs: List[str] = []
    added: List[str] = []
    for phrase in feature_step_phrases(feature_source):
        key = _comparable(phrase).lower()
        if key in defined:
            continue
        defined.add(key)
        expression = cucumber_expression(phrase)
        args = ", ".join(f"String arg{i}" for i in range(1, expression.count("{string}") + 1))
        method = stub_method_name(phrase, used_methods)
        stubs.append("\n".join([
            f'    @{step_keyword_for(phrase)}("{java_string(expression)}")',
            f"    public void {method}({args}) {{",
            f'        throw new io.cucumber.java.PendingException("Step not implemented: {java_string(phrase)}");',
            "    }",
        ]))
        added.append(phrase)
        logger.warning("No step definition for '%s'; added pending stub %s", phrase, method)
    if not stubs:
        return step_source, added
    return _insert_before_closing_brace(step_source, "\n\n".join(stubs)), added


# --- validation ------------------------------------------------------------

def validate_artifact(kind: str, text: Optional[str]) -> None:
    """Raise ArtifactValidationError when ``text`` is not a well-formed artifact of ``kind``."""
    if not text or not text.strip():
        raise ArtifactValidationError(kind, "content is empty")
    if kind == PAGE_OBJECT:
        if "package pages;" not in text:
            raise ArtifactValidationError(kind, "missing 'package pages;'")
        if "extends BasePage" not in text:
            raise ArtifactValidationError(kind, "class does not extend BasePage")
        for match in re.finditer(r"static\s+final\s+String\s+(\w+)\s*(;|=\s*\"\"\s*;)", text):
            if match.group(1) != "PAGE_PATH":
                raise ArtifactValidationError(kind, f"locator constant {match.group(1)} has no value")
    elif kind == FEATURE:
        if "Feature:" not in text:
            raise ArtifactValidationError(kind, "missing 'Feature:' header")
        outline = "Scenario Outline:" in text
        if not outline and "Scenario:" not in text:
            raise ArtifactValidationError(kind, "missing 'Scenario:' or 'Scenario Outline:' header")
        if outline:
            _validate_examples(kind, text)
    elif kind == STEP_DEFINITIONS:
        if "package stepDefs;" not in text:
            raise ArtifactValidationError(kind, "missing 'package stepDefs;'")
        if "extends browserSelector" not in text:
            raise ArtifactValidationError(kind, "class does not extend browserSelector")
    else:
        raise ArtifactValidationError(kind, "unknown artifact kind")


def _validate_examples(kind: str, text: str) -> None:
    after = text.split("Examples:", 1)
    if len(after) < 2:
        raise ArtifactValidationError(kind, "Scenario Outline has no Examples table")
    rows = [line.strip() for line in after[1].splitlines() if line.strip().startswith("|")]
    if len(rows) < 2:
        raise ArtifactValidationError(kind, "Examples table needs a header and at least one row")
    header = {cell.strip() for cell in rows[0].strip("|").split("|")}
    placeholders = set(re.findall(r"<([^<>\s]+)>", after[0]))
    missing = sorted(placeholders - header)
    if missing:
        raise ArtifactValidationError(kind, f"Examples table is missing column(s): {', '.join(missing)}")


def validate_artifact_set(artifacts: GeneratedArtifactSet) -> None:
    if artifacts.page_object_source is not None:
        validate_artifact(PAGE_OBJECT, artifacts.page_object_source)
    validate_artifact(FEATURE, artifacts.feature_file_source)
    validate_artifact(STEP_DEFINITIONS, artifacts.step_definition_source)


class ArtifactEmitter:
    """Builds a GeneratedArtifactSet from named actions."""

    def emit(
        self,
        actions: List[RecordedAction],
        class_name: str,
        story: str = "",
        page_path: str = "",
        login_page: Optional[LoginPageObject] = None,
        include_page_object: bool = True,
    ) -> GeneratedArtifactSet:
        login_block: Dict[int, str] = {}
        if login_page is not None:
            login_block = find_login_block(actions, with_submit=login_page.submit_method is not None)
            if login_block:
                logger.info("Reusing %s for the recorded login steps", login_page.class_name)
        page_actions = [a for a in actions if a.sequence_id not in login_block]

        page_object = None
        if include_page_object:
            page_object = render_page_object(page_actions, class_name, story, page_path)
        else:
            logger.info("Page object %s already exists; not regenerating it", class_name)

        planned = _plan_steps(actions, login_block)
        feature = render_feature(planned, class_name, story, login_reused=bool(login_block))
        steps = render_step_definitions(planned, class_name, story, login_page if login_block else None)
        steps, stubs = reconcile_step_definitions(feature, steps)

        return GeneratedArtifactSet(
            class_name=class_name,
            story=story,
            page_object_source=page_object,
            feature_file_source=feature,
            step_definition_source=steps,
            stubs_added=stubs,
            login_reused=bool(login_block),
        )
