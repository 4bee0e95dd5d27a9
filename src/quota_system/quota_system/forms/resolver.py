"""Reference resolution for dynamic form fields.

Form submissions store foreign keys as raw document ids. This module is the
single translation point between those raw ids and the resolved
``{id, display[, metadata]}`` projection shown to users. Nothing outside this
module should need to know whether a stored value was already resolved.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence, Union

from ..core.enums import ReferenceShape
from .model import FieldDefinition, FormSubmission

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedRef:
    id: str
    display: str
    metadata: Optional[dict] = None

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"id": self.id, "display": self.display}
        if self.metadata is not None:
            out["metadata"] = self.metadata
        return out


@dataclass(frozen=True)
class Unresolved:
    """A reference whose target document does not exist (or was never looked up)."""

    id: str

    @property
    def display(self) -> str:
        return self.id

    def to_dict(self) -> dict:
        return {"id": self.id, "display": self.id}


Reference = Union[ResolvedRef, Unresolved]


class SubmissionLookup(Protocol):
    def get_by_id(self, form_name: str, submission_id: str) -> Optional[FormSubmission]:
        ...

    def get_many(self, form_name: str, submission_ids: Sequence[str]) -> dict[str, FormSubmission]:
        ...


def _is_raw_id(value: Any) -> bool:
    return isinstance(value, (str, int)) and not isinstance(value, bool) and str(value).strip() != ""


def is_resolved(value: Any) -> bool:
    return isinstance(value, dict) and "id" in value and "display" in value


def as_reference(value: Any) -> Optional[Reference]:
    """Read a stored field value back as a reference variant."""

    if isinstance(value, dict) and value.get("id") is not None:
        ref_id = str(value["id"])
        display = value.get("display")
        if display in (None, ""):
            return Unresolved(ref_id)
        return ResolvedRef(id=ref_id, display=str(display), metadata=value.get("metadata"))
    if _is_raw_id(value):
        return Unresolved(str(value))
    return None


def render_reference(ref: Reference, *, in_list: bool) -> Any:
    """Serialize a reference for storage or output.

    A missing single reference keeps its raw id so the caller can show it
    as-is; inside a list every entry must be an object, so the id doubles as
    the display text.
    """

    if isinstance(ref, ResolvedRef):
        return ref.to_dict()
    return ref.to_dict() if in_list else ref.id


def project(doc: FormSubmission, field: FieldDefinition) -> ResolvedRef:
    data = doc.form_data or {}
    if field.foreign_fields:
        parts = [str(data.get(name)) for name in field.foreign_fields if data.get(name)]
        return ResolvedRef(
            id=doc.submission_id,
            display=" ".join(parts) or doc.submission_id,
            metadata={name: data.get(name) for name in field.foreign_fields},
        )

    display = data.get(field.foreign_field) if field.foreign_field else None
    return ResolvedRef(
        id=doc.submission_id,
        display=str(display) if display not in (None, "") else doc.submission_id,
    )


class ReferenceResolver:
    def __init__(self, submissions: SubmissionLookup):
        self._submissions = submissions

    def resolve_ids(self, ids: Sequence[str], field: FieldDefinition) -> dict[str, Reference]:
        """Batch-resolve raw ids against the field's foreign form in one query."""

        wanted = [str(i) for i in ids if _is_raw_id(i)]
        if not wanted or not field.foreign_form_name:
            return {i: Unresolved(i) for i in wanted}

        docs = self._submissions.get_many(field.foreign_form_name, wanted)
        out: dict[str, Reference] = {}
        for ref_id in wanted:
            doc = docs.get(ref_id)
            if doc is None:
                logger.warning(
                    "Dangling reference %s in field %s (form %s)", ref_id, field.name, field.foreign_form_name
                )
                out[ref_id] = Unresolved(ref_id)
            else:
                out[ref_id] = project(doc, field)
        return out

    def resolve_value(self, value: Any, field: Optional[FieldDefinition]) -> Any:
        """Resolve one stored value; plain fields and resolved values pass through."""

        shape = field.reference_shape if field else None
        if shape is None:
            return value

        if shape in (ReferenceShape.SINGLE, ReferenceShape.ENHANCED_SINGLE):
            if is_resolved(value) or not _is_raw_id(value):
                return value
            doc = self._submissions.get_by_id(field.foreign_form_name, str(value))
            if doc is None:
                logger.warning(
                    "Dangling reference %s in field %s (form %s)", value, field.name, field.foreign_form_name
                )
                return render_reference(Unresolved(str(value)), in_list=False)
            return project(doc, field).to_dict()

        if not isinstance(value, list):
            return value

        refs = self.resolve_ids([v for v in value if _is_raw_id(v)], field)
        out: list[Any] = []
        for item in value:
            if _is_raw_id(item):
                out.append(render_reference(refs[str(item)], in_list=True))
            else:
                out.append(item)
        return out

    def resolve_document(self, data: dict, fields: Sequence[FieldDefinition]) -> dict:
        """Return a copy of ``data`` with every reference field resolved."""

        by_name = {f.name: f for f in fields}
        return {key: self.resolve_value(value, by_name.get(key)) for key, value in (data or {}).items()}
