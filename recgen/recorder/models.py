"""Data types shared by the extraction, resolution and naming stages."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ActionKind(str, Enum):
    CLICK = "click"
    FILL = "fill"
    SELECT = "select"
    CHECK = "check"
    PRESS = "press"
    NAVIGATE = "navigate"

    @property
    def takes_argument(self) -> bool:
        """Fill and select steps receive their value from the scenario."""
        return self in (ActionKind.FILL, ActionKind.SELECT)


@dataclass
class RecordedAction:
    """One user interaction captured in a recording.

    ``sequence_id`` follows recording order and is only used to make
    generated names unique. The resolved/naming fields start empty and are
    filled in by the resolver and the method namer.
    """

    sequence_id: int
    kind: ActionKind
    raw_locator: Optional[str] = None
    value: Optional[str] = None
    resolved_locator: Optional[str] = None
    readable_name: str = ""
    element_constant_name: str = ""
    method_name: str = ""
    element_phrase: str = ""
    step_text: str = ""
    locator_rung: Optional[int] = None
    dynamic_id: bool = False
    stability_warning: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sequenceId": self.sequence_id,
            "kind": self.kind.value,
            "rawLocator": self.raw_locator,
            "value": self.value,
            "resolvedLocator": self.resolved_locator,
            "readableName": self.readable_name,
            "elementConstantName": self.element_constant_name,
            "methodName": self.method_name,
            "elementPhrase": self.element_phrase,
            "stepText": self.step_text,
            "locatorRung": self.locator_rung,
            "dynamicId": self.dynamic_id,
            "stabilityWarning": self.stability_warning,
        }
