from __future__ import annotations

import pytest

from src.quota_system.quota_system.core.exceptions import ValidationError
from src.quota_system.quota_system.forms.model import FieldDefinition, FormSchema
from src.quota_system.quota_system.forms.resolver import (
    ReferenceResolver,
    ResolvedRef,
    Unresolved,
    as_reference,
    render_reference,
)

PERSONNEL_FORM = "Personnel"


def _field(**raw) -> FieldDefinition:
    return FieldDefinition.from_dict({"name": "ref", "foreignFormName": PERSONNEL_FORM, **raw})


@pytest.fixture
def resolver(submissions) -> ReferenceResolver:
    return ReferenceResolver(submissions)


def test_single_reference_resolves_to_display(resolver, add_person):
    pid = add_person("Dana", "Levi")
    field = _field(type="select", foreignField="firstName")

    assert resolver.resolve_value(pid, field) == {"id": pid, "display": "Dana"}


def test_single_reference_missing_keeps_raw_id(resolver):
    field = _field(type="selectAutocomplete", foreignField="firstName")

    assert resolver.resolve_value("999", field) == "999"


def test_multi_reference_batches_and_defaults_dangling_display(resolver, submissions, add_person):
    a = add_person("Dana", "Levi")
    b = add_person("Omer", "Katz")
    field = _field(type="multipleSelect", foreignField="lastName")

    out = resolver.resolve_value([a, "404", b], field)

    assert out == [
        {"id": a, "display": "Levi"},
        {"id": "404", "display": "404"},
        {"id": b, "display": "Katz"},
    ]
    assert submissions.get_many_calls == 1


def test_enhanced_select_joins_non_empty_fields_in_declared_order(resolver, add_person):
    pid = add_person("Dana", "Levi", rank="")
    field = _field(type="enhancedSelect", foreignFields=["rank", "firstName", "lastName"])

    out = resolver.resolve_value(pid, field)

    assert out["display"] == "Dana Levi"
    assert out["metadata"] == {"rank": "", "firstName": "Dana", "lastName": "Levi"}


def test_enhanced_multiple_select_carries_metadata_per_item(resolver, add_person):
    a = add_person("Dana", "Levi", rank="Sgt")
    field = _field(type="enhancedMultipleSelect", foreignFields=["rank", "lastName"])

    (item,) = resolver.resolve_value([a], field)

    assert item == {"id": a, "display": "Sgt Levi", "metadata": {"rank": "Sgt", "lastName": "Levi"}}


def test_resolving_twice_is_a_no_op(resolver, add_person):
    pid = add_person("Dana", "Levi")
    single = _field(type="select", foreignField="firstName")
    multi = _field(type="multipleSelect", foreignField="firstName")

    once = resolver.resolve_value(pid, single)
    assert resolver.resolve_value(once, single) == once

    many = resolver.resolve_value([pid], multi)
    assert resolver.resolve_value(many, multi) == many


def test_document_keys_without_schema_field_pass_through(resolver, add_person):
    pid = add_person("Dana", "Levi")
    fields = [_field(type="select", foreignField="firstName")]

    out = resolver.resolve_document({"ref": pid, "unknown": "x", "count": 3}, fields)

    assert out == {"ref": {"id": pid, "display": "Dana"}, "unknown": "x", "count": 3}


def test_reference_field_without_foreign_field_is_plain(resolver):
    field = FieldDefinition.from_dict({"name": "ref", "type": "select"})

    assert field.reference_shape is None
    assert resolver.resolve_value("7", field) == "7"


def test_dangling_reference_logs_warning(resolver, caplog):
    field = _field(type="multipleSelect", foreignField="firstName")

    with caplog.at_level("WARNING"):
        resolver.resolve_value(["404"], field)

    assert "Dangling reference 404" in caplog.text


def test_stored_values_read_back_as_reference_variants():
    assert as_reference("12") == Unresolved("12")
    assert as_reference({"id": 12, "display": "Dana"}) == ResolvedRef(id="12", display="Dana")
    assert as_reference({"id": "12", "display": ""}) == Unresolved("12")
    assert as_reference(None) is None


def test_render_reference_fallback_depends_on_container():
    assert render_reference(Unresolved("5"), in_list=False) == "5"
    assert render_reference(Unresolved("5"), in_list=True) == {"id": "5", "display": "5"}


def test_schema_rejects_both_foreign_field_and_foreign_fields():
    schema = FormSchema.from_dict(
        "X",
        {
            "sections": [
                {
                    "id": "s",
                    "name": "s",
                    "fields": [
                        {
                            "name": "ref",
                            "type": "enhancedSelect",
                            "foreignFormName": PERSONNEL_FORM,
                            "foreignField": "firstName",
                            "foreignFields": ["firstName"],
                        }
                    ],
                }
            ]
        },
    )

    with pytest.raises(ValidationError):
        schema.validate()


def test_url_encoded_foreign_form_name_is_decoded():
    field = FieldDefinition.from_dict(
        {"name": "ref", "type": "select", "foreignFormName": "Reserve%20Days%20Management", "foreignField": "x"}
    )

    assert field.foreign_form_name == "Reserve Days Management"
