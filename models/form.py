"""
Form definition model.

The host builds the packaging-slip scan form as a FormDefinition and lets
subscribers add fields to it before it is rendered. Rendering is the host's
concern; this model only records which fields exist, their options and their
initial data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class FormField:
    """A single field of a form definition."""

    name: str
    field_type: str
    """Widget kind, e.g. 'text', 'email' or 'choice'."""

    options: Dict[str, Any] = field(default_factory=dict)
    data: Any = None

    def set_data(self, value: Any) -> "FormField":
        self.data = value
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.field_type,
            "options": dict(self.options),
            "data": self.data,
        }


class FormDefinition:
    """
    Ordered, mutable collection of form fields.

    Adding a field under an existing name replaces it, keeping its position.
    """

    def __init__(self, name: str):
        self.name = name
        self._fields: Dict[str, FormField] = {}

    def add(self, name: str, field_type: str, **options: Any) -> "FormDefinition":
        self._fields[name] = FormField(name=name, field_type=field_type, options=options)
        return self

    def get(self, name: str) -> FormField:
        """Return a field by name. Raises KeyError if it was never added."""
        return self._fields[name]

    def has(self, name: str) -> bool:
        return name in self._fields

    @property
    def field_names(self) -> List[str]:
        return list(self._fields)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "fields": [f.to_dict() for f in self._fields.values()],
        }
