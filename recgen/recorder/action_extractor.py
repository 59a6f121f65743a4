"""Turn recorded Playwright code into an ordered list of RecordedAction.

Recordings come from ``playwright codegen`` (Java or Python target) or from
older scripts using the direct ``page.click("sel")`` call style. Every line is
tested against an ordered rule table; the first rule that matches produces
exactly one action.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from ..core.errors import RecordingInputError
from .models import ActionKind, RecordedAction

logger = logging.getLogger(__name__)

SMALL_RECORDING_BYTES = 100
SKIPPED_PREFIXES = ("//", "#", "import ", "package ", "from ")

# A double-quoted string literal with backslash escapes.
_STR = r'"((?:[^"\\]|\\.)*)"'
# Trailing accessor options: Java option builders or Python keyword args.
_OPTS = r'(?:,\s*(?:new\s+Page\.\w+\(\)(?:\.\w+\([^()]*\))*|\w+=\w+))?'

_ROLE_JAVA = rf'page\.getByRole\(AriaRole\.\w+,\s*new\s+Page\.GetByRoleOptions\(\)\.setName\({_STR}\)(?:\.\w+\([^()]*\))*\)'
_ROLE_PY = rf'page\.get_by_role\("[\w-]+",\s*name={_STR}(?:,\s*\w+=\w+)*\)'

_ACTION_SUFFIXES = {
    ActionKind.CLICK: r'\.click\(',
    ActionKind.FILL: rf'\.fill\({_STR}',
    ActionKind.SELECT: rf'\.(?:selectOption|select_option)\({_STR}',
    ActionKind.CHECK: r'\.check\(',
    ActionKind.PRESS: rf'\.press\({_STR}',
}


@dataclass(frozen=True)
class ExtractionRule:
    """A single recognisable line shape."""

    name: str
    pattern: re.Pattern
    kind: ActionKind
    prefix: str = ""
    locator_group: Optional[int] = 1
    value_group: Optional[int] = None


def _accessor_rules(name: str, accessor: str, prefixes: Dict[ActionKind, str]) -> List[ExtractionRule]:
    rules = []
    for kind, prefix in prefixes.items():
        suffix = _ACTION_SUFFIXES[kind]
        rules.append(ExtractionRule(
            name=f"{name}-{kind.value}",
            pattern=re.compile(accessor + suffix),
            kind=kind,
            prefix=prefix,
            value_group=2 if kind in (ActionKind.FILL, ActionKind.SELECT, ActionKind.PRESS) else None,
        ))
    return rules


def _build_rules() -> List[ExtractionRule]:
    rules: List[ExtractionRule] = [
        ExtractionRule("navigate", re.compile(rf'page\.(?:navigate|goto)\({_STR}'),
                       ActionKind.NAVIGATE, locator_group=None, value_group=1),
    ]

    # Locator chains: page.locator("sel").<action>(...)
    rules.extend(_accessor_rules("locator", rf'page\.locator\({_STR}\)', {
        ActionKind.CLICK: "",
        ActionKind.FILL: "",
        ActionKind.SELECT: "",
        ActionKind.CHECK: "",
        ActionKind.PRESS: "",
    }))

    # Semantic accessors collapse into shorthand locators.
    for role_accessor in (_ROLE_JAVA, _ROLE_PY):
        rules.extend(_accessor_rules("role", role_accessor, {
            ActionKind.CLICK: "text=",
            ActionKind.CHECK: "text=",
            ActionKind.FILL: "label=",
            ActionKind.PRESS: "label=",
            ActionKind.SELECT: "label=",
        }))
    rules.extend(_accessor_rules("text", rf'page\.(?:getByText|get_by_text)\({_STR}{_OPTS}\)', {
        ActionKind.CLICK: "text=",
        ActionKind.CHECK: "text=",
    }))
    rules.extend(_accessor_rules("placeholder", rf'page\.(?:getByPlaceholder|get_by_placeholder)\({_STR}{_OPTS}\)', {
        ActionKind.FILL: "placeholder=",
        ActionKind.CLICK: "placeholder=",
        ActionKind.PRESS: "placeholder=",
    }))
    rules.extend(_accessor_rules("label", rf'page\.(?:getByLabel|get_by_label)\({_STR}{_OPTS}\)', {
        ActionKind.CLICK: "label=",
        ActionKind.FILL: "label=",
        ActionKind.PRESS: "label=",
        ActionKind.CHECK: "label=",
        ActionKind.SELECT: "label=",
    }))

    # Direct call style: page.click("sel"), page.fill("sel", "text") ...
    rules.extend([
        ExtractionRule("legacy-click", re.compile(rf'page\.click\({_STR}'), ActionKind.CLICK),
        ExtractionRule("legacy-fill", re.compile(rf'page\.fill\({_STR},\s*{_STR}'),
                       ActionKind.FILL, value_group=2),
        ExtractionRule("legacy-select", re.compile(rf'page\.(?:selectOption|select_option)\({_STR},\s*{_STR}'),
                       ActionKind.SELECT, value_group=2),
        ExtractionRule("legacy-check", re.compile(rf'page\.check\({_STR}'), ActionKind.CHECK),
        ExtractionRule("legacy-press", re.compile(rf'page\.press\({_STR},\s*{_STR}'),
                       ActionKind.PRESS, value_group=2),
    ])
    return rules


EXTRACTION_RULES: List[ExtractionRule] = _build_rules()


def _unquote(literal: str) -> str:
    return re.sub(r'\\(.)', r'\1', literal)


def load_recording(path: str | Path | None) -> str:
    """Read a recording file, raising RecordingInputError when it cannot be used."""
    if path is None or not str(path).strip():
        raise RecordingInputError("Recording file path is empty")
    recording = Path(path).expanduser()
    if not recording.exists():
        raise RecordingInputError(f"Recording file not found: {recording}")
    if not recording.is_file():
        raise RecordingInputError(f"Recording path is not a file: {recording}")
    try:
        text = recording.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise RecordingInputError(f"Recording file is not readable: {recording} ({exc})") from exc

    size = len(text.encode("utf-8"))
    if size == 0:
        logger.warning("Recording file is empty: %s (falling back to a navigation-only scenario)", recording)
    elif size < SMALL_RECORDING_BYTES:
        logger.warning("Recording file is very small (%d bytes) and may be incomplete: %s", size, recording)
    return text


def match_line(line: str) -> Optional[tuple[ExtractionRule, re.Match]]:
    """Return the first rule matching ``line`` and its match object."""
    for rule in EXTRACTION_RULES:
        match = rule.pattern.search(line)
        if match:
            return rule, match
    return None


def extract_actions(text: str) -> List[RecordedAction]:
    """Extract actions from recording text in recording order.

    Input with no recognisable actions yields a single navigation action so
    the downstream stages always have something to render.
    """
    actions: List[RecordedAction] = []
    for line_no, raw_line in enumerate((text or "").splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith(SKIPPED_PREFIXES):
            continue
        found = match_line(line)
        if not found:
            continue
        rule, match = found
        locator = None
        if rule.locator_group is not None:
            locator = rule.prefix + _unquote(match.group(rule.locator_group))
        value = _unquote(match.group(rule.value_group)) if rule.value_group is not None else None
        action = RecordedAction(
            sequence_id=len(actions) + 1,
            kind=rule.kind,
            raw_locator=locator,
            value=value,
        )
        logger.debug("Line %d matched %s -> %s %r", line_no, rule.name, rule.kind.value, locator)
        actions.append(action)

    if not actions:
        logger.warning("No actions recognised in recording; using a single navigation action")
        actions.append(RecordedAction(sequence_id=1, kind=ActionKind.NAVIGATE, raw_locator=None, value=""))
    else:
        logger.info("Extracted %d actions from recording", len(actions))
    return actions


def extract_actions_from_file(path: str | Path) -> List[RecordedAction]:
    return extract_actions(load_recording(path))
