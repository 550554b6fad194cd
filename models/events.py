"""
Event payloads delivered by the host.

EVENT_STATUS_SHIPPED fires when a packaging slip is scanned as shipped.
EVENT_FORM_BUILDER fires while the scan form is being assembled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .form import FormDefinition
from .label import LabelDocument
from .packaging_slip import PackagingSlip


EVENT_STATUS_SHIPPED = "packaging_slip.status_changed.shipped"
EVENT_FORM_BUILDER = "packaging_slip.form_builder"


@dataclass
class PackagingSlipStatusChangedEvent:
    """A packaging slip changed status, with the form data the operator submitted."""

    packaging_slip: PackagingSlip
    submitted_data: Dict[str, Any] = field(default_factory=dict)
    delivered_label: Optional[LabelDocument] = None
    """Set by the label dispatcher once a label has been mailed."""


@dataclass
class FormBuilderEvent:
    """
    The scan form is being built.

    Subscribers add fields to `form` and list their names in
    `additional_widgets` so the host renders them.
    """

    form: FormDefinition
    additional_widgets: List[str] = field(default_factory=list)

    def add_widget(self, name: str) -> None:
        if name not in self.additional_widgets:
            self.additional_widgets.append(name)
