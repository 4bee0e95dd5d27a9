from __future__ import annotations

from enum import Enum


class FieldType(str, Enum):
    """Field types understood by the form schema registry."""

    TEXT = "text"
    EMAIL = "email"
    PASSWORD = "password"
    SWITCH = "switch"
    SELECT = "select"
    ENHANCED_SELECT = "enhancedSelect"
    SELECT_AUTOCOMPLETE = "selectAutocomplete"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    TEXTAREA = "textarea"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    FILE = "file"
    NUMBER = "number"
    TEL = "tel"
    URL = "url"
    MULTIPLE_SELECT = "multipleSelect"
    ENHANCED_MULTIPLE_SELECT = "enhancedMultipleSelect"
    ATTENDANCE = "attendance"
    ATTENDANCE_HISTORY = "attendanceHistory"

    @classmethod
    def parse(cls, value: str) -> "FieldType":
        try:
            return cls(value)
        except ValueError:
            return cls.TEXT


class ReferenceShape(str, Enum):
    """How a foreign-key field stores and projects its value."""

    SINGLE = "single"
    MULTI = "multi"
    ENHANCED_SINGLE = "enhancedSingle"
    ENHANCED_MULTI = "enhancedMulti"


class BulkItemStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
