"""Method names, constant names and Gherkin phrases for recorded actions."""
from __future__ import annotations

import logging
import re
import time
from typing import Dict, List, Optional, Set, Tuple

from ..recorder.models import ActionKind, RecordedAction

logger = logging.getLogger(__name__)

RESERVED_NAME = "value"


def constant_name_for(readable_name: str) -> str:
    """``FirstName`` -> ``FIRST_NAME``."""
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", readable_name or "").upper()
    name = re.sub(r"[^A-Z0-9_]", "_", name).strip("_")
    if not name:
        return "ELEMENT"
    if name[0].isdigit():
        return "ELEMENT_" + name
    return name


def phrase_name(readable_name: str) -> str:
    """``FirstName`` -> ``first name``."""
    return re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", readable_name or "").lower().strip()


def step_text_for(kind: ActionKind, element: str) -> str:
    """Gherkin phrase for an action; ``element`` may be a readable name or a phrase."""
    name = phrase_name(element) or "element"
    return {
        ActionKind.CLICK: f"user clicks on {name}",
        ActionKind.FILL: f"user enters text into {name}",
        ActionKind.SELECT: f"user selects option from {name}",
        ActionKind.CHECK: f"user checks {name}",
        ActionKind.PRESS: f"user presses key on {name}",
        ActionKind.NAVIGATE: "user navigates to page",
    }[kind]


def method_name_for(kind: ActionKind, readable_name: str, sequence_id: int) -> str:
    """Return the page-object method name for one action.

    Never returns ``value``; unusable names fall back to
    ``performAction<sequence_id>``.
    """
    name = (readable_name or "").strip()
    if kind == ActionKind.NAVIGATE:
        return "navigateTo"
    if not name or name.lower() == RESERVED_NAME:
        logger.warning("Action %d has no usable element name; using performAction%d", sequence_id, sequence_id)
        return f"performAction{sequence_id}"

    lowered = name.lower()
    if kind == ActionKind.CLICK:
        method = f"click{name}"
    elif kind == ActionKind.FILL:
        if "search" in lowered:
            method = "search" + name.replace("Search", "")
        elif "email" in lowered:
            method = "enterEmail"
        elif "password" in lowered:
            method = "enterPassword"
        elif "username" in lowered:
            method = "enterUsername"
        else:
            method = f"enter{name}"
    elif kind == ActionKind.SELECT:
        method = f"select{name}"
    elif kind == ActionKind.CHECK:
        if "toggle" in lowered or "switch" in lowered:
            method = "toggle" + name.replace("Toggle", "").replace("Switch", "")
        else:
            method = f"check{name}"
    else:
        method = f"pressKeyOn{name}"

    if not method or method.lower() == RESERVED_NAME:
        logger.warning("Generated method name '%s' is reserved; using performAction%d", method, sequence_id)
        return f"performAction{sequence_id}"
    return method


def unique_name(base: str, used: Set[str], sequence_id: int, sep: str = "") -> str:
    if base not in used:
        return base
    suffix = sequence_id
    while f"{base}{sep}{suffix}" in used:
        suffix += 1
    return f"{base}{sep}{suffix}"


class MethodNamer:
    """Assigns names that stay unique across one generated artifact set.

    A repeated locator reuses the names given to its first occurrence; a
    different element that would collide gets a numeric suffix. The element
    phrase used in step text gets the same treatment so that each phrase maps
    to exactly one method.
    """

    def __init__(self) -> None:
        self._constants: Dict[str, str] = {}
        self._phrases: Dict[str, str] = {}
        self._methods: Dict[Tuple[ActionKind, str], str] = {}
        self._used_constants: Set[str] = set()
        self._used_phrases: Set[str] = set()
        self._used_methods: Set[str] = set()

    def assign(self, actions: List[RecordedAction]) -> List[RecordedAction]:
        for action in actions:
            if action.kind == ActionKind.NAVIGATE:
                action.method_name = method_name_for(action.kind, action.readable_name, action.sequence_id)
                action.step_text = step_text_for(action.kind, action.readable_name)
                continue
            locator = action.resolved_locator or action.raw_locator or ""
            action.element_constant_name = self._constant_for(locator, action)
            action.element_phrase = self._phrase_for(locator, action)
            action.method_name = self._method_for(locator, action)
            action.step_text = step_text_for(action.kind, action.element_phrase)
        return actions

    def _constant_for(self, locator: str, action: RecordedAction) -> str:
        existing = self._constants.get(locator)
        if existing:
            return existing
        name = unique_name(constant_name_for(action.readable_name), self._used_constants, action.sequence_id)
        self._constants[locator] = name
        self._used_constants.add(name)
        return name

    def _phrase_for(self, locator: str, action: RecordedAction) -> str:
        existing = self._phrases.get(locator)
        if existing:
            return existing
        phrase = unique_name(phrase_name(action.readable_name) or "element", self._used_phrases,
                         action.sequence_id, sep=" ")
        self._phrases[locator] = phrase
        self._used_phrases.add(phrase)
        return phrase

    def _method_for(self, locator: str, action: RecordedAction) -> str:
        key = (action.kind, locator)
        existing = self._methods.get(key)
        if existing:
            return existing
        base = method_name_for(action.kind, action.readable_name, action.sequence_id)
        name = unique_name(base, self._used_methods, action.sequence_id)
        if name != base:
            logger.debug("Method name %s already taken; using %s", base, name)
        self._methods[key] = name
        self._used_methods.add(name)
        return name


JAVA_KEYWORDS = frozenset("""
    abstract assert boolean break byte case catch char class const continue default do double else enum
    extends final finally float for goto if implements import instanceof int interface long native new
    package private protected public return short static strictfp super switch synchronized this throw
    throws transient try void volatile while true false null record var yield sealed permits
""".split())


def sanitize_class_name(feature_name: Optional[str]) -> str:
    """Turn a free-form feature name into a valid Java class name.

    Word boundaries and existing camel humps are kept (``user login`` and
    ``userLogin`` both become ``UserLogin``). Names that cannot be made valid
    fall back to ``TestFeature<millis>``.
    """
    raw = (feature_name or "").strip()
    words = re.split(r"[^A-Za-z0-9]+", re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", raw))
    name = "".join(w[:1].upper() + w[1:] for w in words if w)
    if name and not name[0].isalpha():
        name = "Test" + name
    if not name or not re.fullmatch(r"[A-Za-z][A-Za-z0-9_]*", name) or name in JAVA_KEYWORDS:
        fallback = f"TestFeature{int(time.time() * 1000)}"
        logger.warning("Feature name %r is not usable as a class name; using %s", feature_name, fallback)
        return fallback
    return name
