from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import FormSchema, FormSubmission


class FormSchemaRepository(Protocol):
    def get(self, form_name: str) -> Optional[FormSchema]:
        raise NotImplementedError

    def save(self, schema: FormSchema) -> None:
        """Insert or replace the schema stored under schema.form_name."""

        raise NotImplementedError


class SubmissionRepository(Protocol):
    def get_by_id(self, form_name: str, submission_id: str) -> Optional[FormSubmission]:
        raise NotImplementedError

    def get_many(self, form_name: str, submission_ids: Sequence[str]) -> dict[str, FormSubmission]:
        """Batch lookup keyed by submission id; missing ids are simply absent."""

        raise NotImplementedError

    def list_for_form(self, form_name: str) -> Sequence[FormSubmission]:
        raise NotImplementedError

    def create(self, form_name: str, form_data: dict) -> FormSubmission:
        raise NotImplementedError

    def find(self, submission_id: str) -> Optional[FormSubmission]:
        """Lookup by id alone, whatever form the submission belongs to."""

        raise NotImplementedError

    def update(self, submission_id: str, form_data: dict) -> Optional[FormSubmission]:
        """Replace the stored form data; None when the submission does not exist."""

        raise NotImplementedError

    def delete(self, submission_id: str) -> Optional[FormSubmission]:
        raise NotImplementedError
