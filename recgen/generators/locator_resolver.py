"""Readable names and stability-ranked locators for recorded selectors.

Every recorded selector is rewritten into the most stable form we can infer,
following a fixed ladder:

1. static id (any syntax) -> tag-union XPath on ``@id``
2. relative XPath, kept as-is
3. absolute XPath, kept as-is
4. label / name / placeholder / text shorthands -> attribute or text XPath
5. class name -> ``contains(@class, ...)`` XPath
6. anything else is passed through as CSS

Ids that look generated (GUIDs, long hashes, timestamps) are never promoted
to rung 1.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterable, List, Optional

from ..recorder.models import RecordedAction

logger = logging.getLogger(__name__)


class LocatorRung(IntEnum):
    STATIC_ID = 1
    RELATIVE_XPATH = 2
    ABSOLUTE_XPATH = 3
    LABEL_NAME = 4
    CLASS_NAME = 5
    CSS = 6


GENERIC_ELEMENTS = (
    "div", "span", "a", "p", "li", "ul", "ol", "td", "tr", "th",
    "section", "article", "aside", "nav", "header", "footer", "main",
)

# Form labels whose input ids follow the framework's naming convention.
LABEL_TO_ID: Dict[str, str] = {
    "Username": "Username",
    "Password": "Password",
    "First Name": "FirstName",
    "Last Name": "LastName",
    "Mobile Phone Number": "MobilePhoneNumber",
    "Email": "Email",
    "Phone": "Phone",
    "Address": "Address",
    "City": "City",
    "State": "State",
    "Zip Code": "ZipCode",
    "Country": "Country",
}

SHORTHAND_PREFIXES = ("text=", "placeholder=", "label=")

_GUID = re.compile(r"[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}", re.IGNORECASE)
_LONG_TOKEN = re.compile(r"[A-Za-z0-9]{20,}")
_TIMESTAMP = re.compile(r"\d{13,}")
_NUMERIC_TAIL = re.compile(r"[_-]\d{8,}$")

_ID_PATTERNS = (
    re.compile(r"""(?<!["'=/])#([A-Za-z][\w-]*)"""),
    re.compile(r"""@id\s*=\s*['"]([^'"]+)['"]"""),
    re.compile(r"""\[id\s*=\s*['"]?([^'"\]]+)['"]?\]"""),
    re.compile(r"""(?:^|\s)id=['"]?([^\s'"\]]+)"""),
)
_TEXT_PAYLOAD = re.compile(r""":has-text\([^)]*\)|"[^"]*"|'[^']*'""")
_ID_SUFFIX = re.compile(r"[-_](btn|button|input|field|link|txt|id)$", re.IGNORECASE)
_TRAILING_WIDGET = re.compile(r"\s+(button|btn|input|field|link|checkbox|radio)$", re.IGNORECASE)
_ROLE_NAME = re.compile(r"""role=\w+.*?name\s*=\s*["']?([^"'\]]+)""")
_HAS_TEXT = re.compile(r""":has-text\(\s*["']?([^"')]+)""")
_XPATH_TEXT = re.compile(
    r"""(?:text\(\)|normalize-space\((?:text\(\)|\.)?\))\s*=\s*['"]([^'"]+)['"]"""
    r"""|contains\(\s*(?:text\(\)|\.)\s*,\s*['"]([^'"]+)['"]"""
)
_NAME_ATTR = re.compile(r"""(?<![\w-])name\s*=\s*(?:["']([^"']+)["']|([^"'\]\s]+))""")
_PLACEHOLDER_ATTR = re.compile(r"""(?<![\w-])placeholder\s*=\s*["']([^"']+)["']""")
_CLASS_ATTR = re.compile(r"""class\s*=\s*["']([^"']+)["']""")
_CSS_CLASS = re.compile(r"""\.(-?[A-Za-z_][\w-]*)""")
_TEST_ID = re.compile(r"""data-test-?id\s*=\s*["']([^"']+)["']""")

# Attribute/text sources for readable names, most descriptive first.
_NAME_FINDERS = (
    _ROLE_NAME,
    _HAS_TEXT,
    _NAME_ATTR,
    _PLACEHOLDER_ATTR,
    re.compile(r"""aria-label\s*=\s*["']([^"']+)["']"""),
    re.compile(r"""(?<![\w-])title\s*=\s*["']([^"']+)["']"""),
    re.compile(r"""(?<![\w-])value\s*=\s*["']([^"']+)["']"""),
    _XPATH_TEXT,
)


def xpath_literal(text: str) -> str:
    """Quote ``text`` as an XPath string literal, using concat() when it holds both quote kinds."""
    if "'" not in text:
        return f"'{text}'"
    if '"' not in text:
        return f'"{text}"'
    parts = []
    for part in text.split("'"):
        parts.append(f"'{part}'")
        parts.append('"' + "'" + '"')
    parts.pop()
    return "concat(" + ", ".join(parts) + ")"


def to_union_xpath(candidates: Iterable[str]) -> str:
    seen = set()
    uniq = []
    for c in candidates:
        if c and c not in seen:
            seen.add(c)
            uniq.append(c)
    return " | ".join(uniq)


def is_dynamic_id(value: Optional[str]) -> bool:
    """True when an id looks machine-generated and unlikely to survive a redeploy."""
    if not value:
        return False
    if _GUID.fullmatch(value):
        return True
    if _LONG_TOKEN.fullmatch(value) and any(ch.isdigit() for ch in value):
        return True
    if _TIMESTAMP.search(value):
        return True
    return bool(_NUMERIC_TAIL.search(value))


def is_overly_generic_selector(selector: str) -> Optional[str]:
    """Return the container tag when the selector is just a bare generic element."""
    s = selector.strip()
    for tag in GENERIC_ELEMENTS:
        if s == tag or re.match(rf"^//{tag}\s*[\[/]?\s*$", s):
            return tag
    return None


def find_id(selector: str) -> Optional[str]:
    """Return the first id found in ``selector`` (CSS, XPath, attribute or ``id=`` form)."""
    css_id, attribute_ids = _ID_PATTERNS[0], _ID_PATTERNS[1:]
    match = css_id.search(_TEXT_PAYLOAD.sub(" ", selector))
    if match:
        return match.group(1).strip()
    for pattern in attribute_ids:
        match = pattern.search(selector)
        if match:
            return match.group(1).strip()
    return None


def extract_static_id(selector: str) -> Optional[str]:
    if selector.startswith(SHORTHAND_PREFIXES):
        return None
    ident = find_id(selector)
    if ident and not is_dynamic_id(ident):
        return ident
    return None


def to_pascal_case(text: str) -> str:
    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", text)
    return "".join(word[:1].upper() + word[1:].lower() for word in spaced.split())


def _clean_name(candidate: str) -> str:
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", candidate)
    text = re.sub(r"[^A-Za-z0-9\s]", " ", text)
    text = re.sub(r"\s+", " ", text).strip()
    text = _TRAILING_WIDGET.sub("", text).strip()
    if not text:
        return "Element"
    name = to_pascal_case(text)
    if name[0].isdigit():
        return "Number" + name
    return name


def _first_group(match: Optional[re.Match]) -> Optional[str]:
    if not match:
        return None
    for group in match.groups():
        if group:
            return group
    return None


def extract_readable_name(selector: Optional[str]) -> str:
    """Derive a PascalCase element name from a raw selector."""
    if not selector or not selector.strip():
        return "Element"
    s = selector.strip()

    for prefix in SHORTHAND_PREFIXES:
        if s.startswith(prefix):
            return _clean_name(s[len(prefix):].strip().strip("\"'"))

    ident = extract_static_id(s)
    if ident:
        return _clean_name(_ID_SUFFIX.sub("", ident))

    is_xpath = s.startswith(("/", "(/"))
    for finder in _NAME_FINDERS:
        found = _first_group(finder.search(s))
        if found:
            return _clean_name(found)

    if not is_xpath:
        css_class = _CSS_CLASS.search(s)
        if css_class:
            return _clean_name(css_class.group(1).replace("-", " ").replace("_", " "))
    class_attr = _CLASS_ATTR.search(s)
    if class_attr and class_attr.group(1).split():
        return _clean_name(class_attr.group(1).split()[0])

    test_id = _TEST_ID.search(s)
    if test_id:
        return _clean_name(test_id.group(1))
    return _clean_name(s)


@dataclass
class LocatorResolution:
    raw_locator: str
    readable_name: str
    resolved_locator: str
    rung: LocatorRung
    dynamic_id: bool = False
    warning: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "rawLocator": self.raw_locator,
            "readableName": self.readable_name,
            "resolvedLocator": self.resolved_locator,
            "rung": int(self.rung),
            "dynamicId": self.dynamic_id,
            "warning": self.warning,
        }


def _id_union(ident: str) -> str:
    lit = xpath_literal(ident)
    return to_union_xpath(f"//{tag}[@id={lit}]" for tag in ("input", "button", "textarea", "select", "*"))


def _label_union(label: str) -> str:
    mapped = LABEL_TO_ID.get(label)
    if mapped:
        lit = xpath_literal(mapped)
        return to_union_xpath(f"//{tag}[@id={lit}]" for tag in ("input", "textarea", "select"))
    lit = xpath_literal(label)
    return to_union_xpath(
        f"//label[normalize-space(text())={lit}]/..//{tag}" for tag in ("input", "textarea", "select")
    )


def _name_union(name: str) -> str:
    lit = xpath_literal(name)
    return to_union_xpath(
        f"//{tag}[@name={lit}]" for tag in ("input", "textarea", "select", "button", "*")
    )


def _placeholder_union(placeholder: str) -> str:
    lit = xpath_literal(placeholder)
    return to_union_xpath(f"//{tag}[@placeholder={lit}]" for tag in ("input", "textarea"))


def _text_union(text: str) -> str:
    lit = xpath_literal(text)
    return to_union_xpath(
        f"//{tag}[normalize-space(text())={lit}]" for tag in ("button", "a", "*")
    )


def priority_comment(rung: int, dynamic_id: bool = False) -> str:
    """Label describing which rung produced a locator, used in page-object comments."""
    rung = LocatorRung(rung)
    if dynamic_id and rung in (LocatorRung.RELATIVE_XPATH, LocatorRung.ABSOLUTE_XPATH):
        return "Priority 3: XPath (Dynamic ID downgraded)"
    return {
        LocatorRung.STATIC_ID: "Priority 1: Static ID",
        LocatorRung.RELATIVE_XPATH: "Priority 2: Relative XPath",
        LocatorRung.ABSOLUTE_XPATH: "Priority 3: Absolute XPath",
        LocatorRung.LABEL_NAME: "Priority 4: Label/Name",
        LocatorRung.CLASS_NAME: "Priority 5: Class name",
        LocatorRung.CSS: "Priority 6: CSS",
    }[rung]


class LocatorResolver:
    """Resolves raw selectors; results are cached so repeats are identical."""

    def __init__(self) -> None:
        self._cache: Dict[str, LocatorResolution] = {}

    def resolve(self, raw_locator: str) -> LocatorResolution:
        cached = self._cache.get(raw_locator)
        if cached is not None:
            return cached
        resolution = self._resolve(raw_locator)
        if resolution.warning:
            logger.warning(resolution.warning)
        self._cache[raw_locator] = resolution
        return resolution

    def resolve_actions(self, actions: List[RecordedAction]) -> List[RecordedAction]:
        for action in actions:
            if action.raw_locator is None:
                continue
            resolution = self.resolve(action.raw_locator)
            action.readable_name = resolution.readable_name
            action.resolved_locator = resolution.resolved_locator
            action.locator_rung = int(resolution.rung)
            action.dynamic_id = resolution.dynamic_id
            action.stability_warning = resolution.warning
        return actions

    def _resolve(self, raw_locator: str) -> LocatorResolution:
        s = (raw_locator or "").strip()
        readable = extract_readable_name(s)

        def result(locator: str, rung: LocatorRung, dynamic: bool = False,
                   warning: Optional[str] = None) -> LocatorResolution:
            return LocatorResolution(raw_locator, readable, locator, rung, dynamic, warning)

        if not s:
            return result(raw_locator, LocatorRung.CSS, warning="Empty locator left unchanged")

        tag = is_overly_generic_selector(s)
        if tag:
            return result(
                f"{tag} >> visible=true",
                LocatorRung.CSS,
                warning=f"Selector '{s}' matches any <{tag}>; narrowed to visible elements only",
            )

        dynamic = False
        if not s.startswith(SHORTHAND_PREFIXES):
            ident = find_id(s)
            if ident and not is_dynamic_id(ident):
                return result(_id_union(ident), LocatorRung.STATIC_ID)
            dynamic = bool(ident)
        warning = f"Dynamic id in '{s}' skipped; locator may be unstable" if dynamic else None

        if s.startswith(("//", "(//")):
            return result(s, LocatorRung.RELATIVE_XPATH, dynamic, warning)
        if s.startswith("/"):
            return result(s, LocatorRung.ABSOLUTE_XPATH, dynamic, warning)

        if s.startswith("label="):
            return result(_label_union(s[len("label="):].strip().strip("\"'")), LocatorRung.LABEL_NAME)
        if s.startswith("placeholder="):
            return result(_placeholder_union(s[len("placeholder="):].strip().strip("\"'")), LocatorRung.LABEL_NAME)
        if s.startswith("text="):
            return result(_text_union(s[len("text="):].strip().strip("\"'")), LocatorRung.LABEL_NAME)

        role_name = _ROLE_NAME.search(s)
        if role_name:
            return result(_text_union(role_name.group(1).strip()), LocatorRung.LABEL_NAME, dynamic, warning)
        name = _first_group(_NAME_ATTR.search(s))
        if name:
            return result(_name_union(name), LocatorRung.LABEL_NAME, dynamic, warning)
        placeholder = _PLACEHOLDER_ATTR.search(s)
        if placeholder:
            return result(_placeholder_union(placeholder.group(1)), LocatorRung.LABEL_NAME, dynamic, warning)

        css_class = _CSS_CLASS.match(s)
        class_attr = _CLASS_ATTR.search(s)
        if class_attr and not class_attr.group(1).split():
            class_attr = None
        if css_class or class_attr:
            first = css_class.group(1) if css_class else class_attr.group(1).split()[0]
            return result(
                f"//*[contains(@class, {xpath_literal(first)})]",
                LocatorRung.CLASS_NAME, dynamic, warning,
            )

        return result(s, LocatorRung.CSS, dynamic, warning)
