from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from urllib.parse import unquote

from ..core.enums import FieldType, ReferenceShape
from ..core.exceptions import ValidationError

_SINGLE_REFERENCE_TYPES = {FieldType.SELECT, FieldType.SELECT_AUTOCOMPLETE, FieldType.RADIO}


@dataclass(frozen=True)
class FieldOption:
    value: str
    label: str
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: dict) -> "FieldOption":
        return cls(value=str(raw.get("value", "")), label=str(raw.get("label", "")), name=raw.get("name"))

    def to_dict(self) -> dict:
        out = {"value": self.value, "label": self.label}
        if self.name is not None:
            out["name"] = self.name
        return out


@dataclass(frozen=True)
class FieldDefinition:
    """A single field of a versioned form schema."""

    name: str
    type: FieldType
    label: str = ""
    required: bool = False
    foreign_form_name: Optional[str] = None
    foreign_field: Optional[str] = None
    foreign_fields: tuple[str, ...] = ()
    options: tuple[FieldOption, ...] = ()
    items: tuple[FieldOption, ...] = ()

    @classmethod
    def from_dict(cls, raw: dict) -> "FieldDefinition":
        foreign_form_name = raw.get("foreignFormName")
        return cls(
            name=str(raw.get("name", "")),
            type=FieldType.parse(str(raw.get("type", "text"))),
            label=str(raw.get("label") or ""),
            required=bool(raw.get("required", False)),
            # Older schemas stored URL-encoded form names.
            foreign_form_name=unquote(foreign_form_name) if foreign_form_name else None,
            foreign_field=raw.get("foreignField") or None,
            foreign_fields=tuple(raw.get("foreignFields") or ()),
            options=tuple(FieldOption.from_dict(o) for o in raw.get("options") or ()),
            items=tuple(FieldOption.from_dict(i) for i in raw.get("items") or ()),
        )

    def to_dict(self) -> dict:
        out: dict[str, Any] = {
            "name": self.name,
            "type": self.type.value,
            "label": self.label,
            "required": self.required,
        }
        if self.foreign_form_name:
            out["foreignFormName"] = self.foreign_form_name
        if self.foreign_field:
            out["foreignField"] = self.foreign_field
        if self.foreign_fields:
            out["foreignFields"] = list(self.foreign_fields)
        if self.options:
            out["options"] = [o.to_dict() for o in self.options]
        if self.items:
            out["items"] = [i.to_dict() for i in self.items]
        return out

    def validate(self) -> None:
        if not self.name:
            raise ValidationError("Field name is required")
        if self.foreign_form_name and bool(self.foreign_field) == bool(self.foreign_fields):
            raise ValidationError(
                f"Field '{self.name}' must declare exactly one of foreignField or foreignFields"
            )
        if self.type == FieldType.RADIO and not self.foreign_form_name and not self.items:
            raise ValidationError(f"Items are required when type is \"radio\" (field '{self.name}')")

    @property
    def reference_shape(self) -> Optional[ReferenceShape]:
        """How this field references another form, or None for plain fields."""

        if not self.foreign_form_name:
            return None
        if self.type in _SINGLE_REFERENCE_TYPES and self.foreign_field:
            return ReferenceShape.SINGLE
        if self.type == FieldType.MULTIPLE_SELECT and self.foreign_field:
            return ReferenceShape.MULTI
        if self.type == FieldType.ENHANCED_SELECT and self.foreign_fields:
            return ReferenceShape.ENHANCED_SINGLE
        if self.type == FieldType.ENHANCED_MULTIPLE_SELECT and self.foreign_fields:
            return ReferenceShape.ENHANCED_MULTI
        return None


@dataclass(frozen=True)
class FormSection:
    section_id: str
    name: str
    fields: tuple[FieldDefinition, ...] = ()

    @classmethod
    def from_dict(cls, raw: dict) -> "FormSection":
        return cls(
            section_id=str(raw.get("id", "")),
            name=str(raw.get("name", "")),
            fields=tuple(FieldDefinition.from_dict(f) for f in raw.get("fields") or ()),
        )

    def to_dict(self) -> dict:
        return {"id": self.section_id, "name": self.name, "fields": [f.to_dict() for f in self.fields]}


@dataclass(frozen=True)
class FormSchema:
    form_name: str
    sections: tuple[FormSection, ...] = ()
    version: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, form_name: str, raw: dict) -> "FormSchema":
        return cls(
            form_name=form_name,
            sections=tuple(FormSection.from_dict(s) for s in raw.get("sections") or ()),
            version=raw.get("version"),
            description=raw.get("description"),
        )

    def to_dict(self) -> dict:
        return {
            "formName": self.form_name,
            "version": self.version,
            "description": self.description,
            "sections": [s.to_dict() for s in self.sections],
        }

    @property
    def fields(self) -> list[FieldDefinition]:
        return [f for s in self.sections for f in s.fields]

    def field(self, name: str) -> Optional[FieldDefinition]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def validate(self) -> None:
        seen: set[str] = set()
        for f in self.fields:
            f.validate()
            if f.name in seen:
                raise ValidationError(f"Duplicate field name '{f.name}'")
            seen.add(f.name)


@dataclass(frozen=True)
class FormSubmission:
    submission_id: str
    form_name: str
    form_data: dict = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.submission_id,
            "formName": self.form_name,
            "formData": self.form_data,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
