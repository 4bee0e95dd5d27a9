from __future__ import annotations

import logging
from typing import Optional

from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from .model import FieldDefinition, FormSchema, FormSubmission
from .repository import FormSchemaRepository, SubmissionRepository
from .resolver import ReferenceResolver

logger = logging.getLogger(__name__)


class FormSubmissionService:
    """Schema registry plus the submission pipeline that feeds reservations."""

    def __init__(
        self,
        schemas: FormSchemaRepository,
        submissions: SubmissionRepository,
        resolver: ReferenceResolver,
    ):
        self._schemas = schemas
        self._submissions = submissions
        self._resolver = resolver

    def register_schema(self, form_name: str, raw: dict) -> FormSchema:
        form_name = require_non_empty(form_name, "Form name")
        schema = FormSchema.from_dict(form_name, raw)
        schema.validate()
        self._schemas.save(schema)
        logger.info("Form schema %s registered (%d fields)", form_name, len(schema.fields))
        return schema

    def get_schema(self, form_name: str) -> FormSchema:
        schema = self._schemas.get(form_name)
        if not schema:
            raise NotFoundError(f"Form '{form_name}' not found")
        return schema

    def fields_for(self, form_name: str) -> list[FieldDefinition]:
        schema = self._schemas.get(form_name)
        return schema.fields if schema else []

    def field_for(self, form_name: str, field_name: str) -> Optional[FieldDefinition]:
        schema = self._schemas.get(form_name)
        return schema.field(field_name) if schema else None

    def create_submission(self, form_name: str, form_data: dict) -> FormSubmission:
        form_name = require_non_empty(form_name, "Form name")
        if not isinstance(form_data, dict):
            raise ValidationError("formData must be an object")

        resolved = self._resolver.resolve_document(form_data, self.fields_for(form_name))
        submission = self._submissions.create(form_name, resolved)
        logger.info("Submission %s created for form %s", submission.submission_id, form_name)
        return submission

    def update_submission(self, submission_id: str, form_data: dict) -> FormSubmission:
        if not isinstance(form_data, dict):
            raise ValidationError("formData must be an object")
        existing = self._submissions.find(submission_id)
        if existing is None:
            raise NotFoundError("Form not found")

        resolved = self._resolver.resolve_document(form_data, self.fields_for(existing.form_name))
        updated = self._submissions.update(submission_id, resolved)
        if updated is None:
            raise NotFoundError("Form not found")
        logger.info("Submission %s updated for form %s", submission_id, existing.form_name)
        return updated

    def delete_submission(self, submission_id: str) -> FormSubmission:
        deleted = self._submissions.delete(submission_id)
        if deleted is None:
            raise NotFoundError("Form not found")
        logger.info("Submission %s deleted from form %s", submission_id, deleted.form_name)
        return deleted

    def list_submissions(self, form_name: str) -> list[FormSubmission]:
        fields = self.fields_for(form_name)
        out: list[FormSubmission] = []
        for sub in self._submissions.list_for_form(form_name):
            out.append(
                FormSubmission(
                    submission_id=sub.submission_id,
                    form_name=sub.form_name,
                    form_data=self._resolver.resolve_document(sub.form_data, fields),
                    created_at=sub.created_at,
                    updated_at=sub.updated_at,
                )
            )
        return out

    def select_options(self, form_name: str, field_name: str) -> list[dict]:
        """Value/label pairs used to populate reference pickers."""

        field_name = require_non_empty(field_name, "Field name")
        out: list[dict] = []
        for sub in self._submissions.list_for_form(form_name):
            label = (sub.form_data or {}).get(field_name)
            if label in (None, ""):
                continue
            out.append({"value": sub.submission_id, "label": str(label)})
        return out
