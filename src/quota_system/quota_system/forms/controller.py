from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import json_body
from ..common.validators import require_non_empty
from ..container import Container


def register(app: Flask, container: Container) -> None:
    forms = container.form_service

    @app.route("/formSchema/<form_name>", methods=["PUT"], endpoint="form_schema_save")
    def form_schema_save(form_name: str):
        schema = forms.register_schema(form_name, json_body())
        return jsonify({"data": schema.to_dict()}), 200

    @app.route("/formSchema/<form_name>", methods=["GET"], endpoint="form_schema_get")
    def form_schema_get(form_name: str):
        return jsonify({"data": forms.get_schema(form_name).to_dict()}), 200

    @app.route("/formSubmission", methods=["POST"], endpoint="form_submission_create")
    def form_submission_create():
        body = json_body()
        submission = forms.create_submission(body.get("formName"), body.get("formData"))
        return jsonify({"form": submission.to_dict()}), 201

    @app.route("/formSubmission/update", methods=["POST"], endpoint="form_submission_update")
    def form_submission_update():
        body = json_body()
        submission_id = require_non_empty(str(body.get("id") or ""), "id")
        submission = forms.update_submission(submission_id, body.get("formData"))
        return jsonify({"form": submission.to_dict()}), 200

    @app.route("/formSubmission/<submission_id>", methods=["DELETE"], endpoint="form_submission_delete")
    def form_submission_delete(submission_id: str):
        return jsonify({"forms": forms.delete_submission(submission_id).to_dict()}), 200

    @app.route("/formSubmission/select", methods=["GET"], endpoint="form_submission_select")
    def form_submission_select():
        form_name = request.args.get("formName") or ""
        field_name = request.args.get("fieldName") or ""
        return jsonify(forms.select_options(form_name, field_name)), 200

    @app.route("/formSubmission/<form_name>", methods=["GET"], endpoint="form_submission_list")
    def form_submission_list(form_name: str):
        items = forms.list_submissions(form_name)
        return jsonify({"forms": [s.to_dict() for s in items]}), 200
