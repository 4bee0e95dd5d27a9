from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_iso_date
from ..common.http import bulk_status, json_body
from ..common.validators import (
    optional_iso_date,
    require_actor,
    require_bounded_range,
    require_date_order,
    require_iso_date,
    require_notes,
    require_positive_int,
    require_quota,
)
from ..container import Container
from ..core.constants import DELETE_ALL_CONFIRM_HEADER, DELETE_ALL_CONFIRM_TOKEN
from ..core.exceptions import AuthorizationError, ValidationError
from .model import NewQuota, QuotaUpdate


def _quota_update(body: dict) -> QuotaUpdate:
    quota = require_quota(body["quota"]) if body.get("quota") is not None else None
    notes = require_notes(body.get("notes"))
    if quota is None and notes is None:
        raise ValidationError("Nothing to update: provide quota or notes")
    return QuotaUpdate(quota=quota, notes=notes)


def _range_label(start, end) -> str:
    return f"{format_iso_date(start)} to {format_iso_date(end or start)}"


def register(app: Flask, container: Container) -> None:
    quotas = container.quota_service
    settings = container.settings

    @app.route("/quota", methods=["GET"], endpoint="quota_list")
    def quota_list():
        start = optional_iso_date(request.args.get("startDate"), "Start date")
        end = optional_iso_date(request.args.get("endDate"), "End date")
        if start and end:
            require_date_order(start, end)
        page = require_positive_int(request.args.get("page"), "Page", 1)
        limit = require_positive_int(request.args.get("limit"), "Limit", settings.default_page_limit)

        return jsonify(quotas.list_page(start=start, end=end, page=page, limit=limit).to_dict()), 200

    @app.route("/quota/<int:quota_id>", methods=["GET"], endpoint="quota_get")
    def quota_get(quota_id: int):
        return jsonify({"data": quotas.get_by_id(quota_id).to_dict()}), 200

    @app.route("/quota/range/<start>/<end>", methods=["GET"], endpoint="quota_range")
    def quota_range(start: str, end: str):
        start_date = require_iso_date(start, "Start date")
        end_date = require_iso_date(end, "End date")
        require_bounded_range(start_date, end_date)
        return jsonify({"data": [q.to_dict() for q in quotas.list_range(start_date, end_date)]}), 200

    @app.route("/quota", methods=["POST"], endpoint="quota_create")
    def quota_create():
        body = json_body()
        created = quotas.create(
            day=require_iso_date(body.get("date")),
            quota=require_quota(body.get("quota")),
            notes=require_notes(body.get("notes")),
            created_by=require_actor(body.get("createdBy"), "Created by"),
        )
        return jsonify({"message": "Quota created successfully", "data": created.to_dict()}), 201

    @app.route("/quota/range", methods=["POST"], endpoint="quota_create_range")
    def quota_create_range():
        body = json_body()
        start = require_iso_date(body.get("startDate"), "Start date")
        end = optional_iso_date(body.get("endDate"), "End date")
        require_bounded_range(start, end or start)

        result = quotas.create_range(
            start=start,
            end=end,
            quota=require_quota(body.get("quota")),
            notes=require_notes(body.get("notes")),
            created_by=require_actor(body.get("createdBy"), "Created by"),
        )
        return (
            jsonify(
                {
                    "message": f"Quotas set for {_range_label(start, end)}",
                    "data": {
                        "quotas": [q.to_dict() for q in result.quotas],
                        "count": result.count,
                        "created": result.created,
                        "updated": result.updated,
                    },
                }
            ),
            201,
        )

    @app.route("/quota/bulk", methods=["POST"], endpoint="quota_bulk_create")
    def quota_bulk_create():
        items = json_body().get("quotas")
        if not isinstance(items, list) or not items:
            raise ValidationError("quotas must be a non-empty array")

        new_quotas = []
        for item in items:
            if not isinstance(item, dict):
                raise ValidationError("Each quota must be an object")
            new_quotas.append(
                NewQuota(
                    day=require_iso_date(item.get("date")),
                    quota=require_quota(item.get("quota")),
                    notes=require_notes(item.get("notes")),
                    created_by=require_actor(item.get("createdBy"), "Created by"),
                )
            )

        result = quotas.bulk_create(new_quotas)
        status = bulk_status(result.success_count, result.error_count)
        body = {"results": [r.to_dict() for r in result.results], "summary": result.summary()}
        return jsonify(body), 201 if status == 200 else status

    @app.route("/quota/<int:quota_id>", methods=["PUT"], endpoint="quota_update")
    def quota_update(quota_id: int):
        updated = quotas.update_by_id(quota_id, _quota_update(json_body()))
        return jsonify({"message": "Quota updated successfully", "data": updated.to_dict()}), 200

    @app.route("/quota/date/<day>", methods=["PUT"], endpoint="quota_update_by_date")
    def quota_update_by_date(day: str):
        updated = quotas.update_by_date(require_iso_date(day), _quota_update(json_body()))
        return jsonify({"message": "Quota updated successfully", "data": updated.to_dict()}), 200

    @app.route("/quota/bulk", methods=["PUT"], endpoint="quota_bulk_update")
    def quota_bulk_update():
        items = json_body().get("updates")
        if not isinstance(items, list) or not items:
            raise ValidationError("updates must be a non-empty array")

        updates = []
        for item in items:
            if not isinstance(item, dict) or not isinstance(item.get("id"), int) or isinstance(item.get("id"), bool):
                raise ValidationError("Each update must carry an integer id")
            updates.append((item["id"], _quota_update(item)))

        result = quotas.bulk_update(updates)
        body = {"results": [r.to_dict() for r in result.results], "summary": result.summary()}
        return jsonify(body), bulk_status(result.success_count, result.error_count)

    @app.route("/quota/range/<start>/<end>", methods=["PUT"], endpoint="quota_update_range")
    def quota_update_range(start: str, end: str):
        start_date = require_iso_date(start, "Start date")
        end_date = require_iso_date(end, "End date")
        require_bounded_range(start_date, end_date)

        matched, modified = quotas.update_range(start=start_date, end=end_date, changes=_quota_update(json_body()))
        return (
            jsonify(
                {
                    "message": f"Quotas updated for {_range_label(start_date, end_date)}",
                    "data": {"matchedCount": matched, "modifiedCount": modified},
                }
            ),
            200,
        )

    @app.route("/quota/<int:quota_id>", methods=["DELETE"], endpoint="quota_delete")
    def quota_delete(quota_id: int):
        deleted = quotas.delete_by_id(quota_id)
        return jsonify({"message": "Quota deleted successfully", "data": deleted.to_dict()}), 200

    @app.route("/quota/date/<day>", methods=["DELETE"], endpoint="quota_delete_by_date")
    def quota_delete_by_date(day: str):
        deleted = quotas.delete_by_date(require_iso_date(day))
        return jsonify({"message": "Quota deleted successfully", "data": deleted.to_dict()}), 200

    @app.route("/quota/bulk", methods=["DELETE"], endpoint="quota_bulk_delete")
    def quota_bulk_delete():
        ids = json_body().get("ids")
        if not isinstance(ids, list) or not ids or not all(isinstance(i, int) and not isinstance(i, bool) for i in ids):
            raise ValidationError("ids must be a non-empty array of integers")

        count = quotas.bulk_delete(ids)
        return jsonify({"message": f"{count} quotas deleted successfully", "data": {"deletedCount": count}}), 200

    @app.route("/quota/range", methods=["DELETE"], endpoint="quota_delete_range")
    def quota_delete_range():
        body = json_body()
        start = require_iso_date(body.get("startDate"), "Start date")
        end = optional_iso_date(body.get("endDate"), "End date")
        require_bounded_range(start, end or start)

        count = quotas.delete_range(start=start, end=end)
        return (
            jsonify(
                {
                    "message": f"{count} quotas deleted successfully",
                    "data": {"deletedCount": count, "dateRange": _range_label(start, end)},
                }
            ),
            200,
        )

    @app.route("/quota/all/confirm", methods=["DELETE"], endpoint="quota_delete_all")
    def quota_delete_all():
        if request.headers.get(DELETE_ALL_CONFIRM_HEADER) != DELETE_ALL_CONFIRM_TOKEN:
            raise AuthorizationError("Confirmation token required for this operation")

        count = quotas.delete_all()
        return (
            jsonify(
                {
                    "message": f"ALL {count} quotas deleted successfully",
                    "data": {"deletedCount": count},
                    "warning": "This operation cannot be undone",
                }
            ),
            200,
        )
