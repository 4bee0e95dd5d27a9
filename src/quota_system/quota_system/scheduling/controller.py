from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_iso_date
from ..common.validators import require_bounded_range, require_iso_date
from ..container import Container


def register(app: Flask, container: Container) -> None:
    scheduling = container.scheduling_service

    @app.route("/quota/date/<day>", methods=["GET"], endpoint="quota_with_occupancy")
    def quota_with_occupancy(day: str):
        snapshot = scheduling.quota_with_occupancy(require_iso_date(day))
        return jsonify({"data": snapshot.to_dict()}), 200

    @app.route("/quota/occupancy/range/<start>/<end>", methods=["GET"], endpoint="quota_occupancy_range")
    def quota_occupancy_range(start: str, end: str):
        start_date = require_iso_date(start, "Start date")
        end_date = require_iso_date(end, "End date")
        require_bounded_range(start_date, end_date)

        if request.args.get("occupancyOnly") == "true":
            counts = scheduling.occupancy_range(start_date, end_date)
            return jsonify({"data": {format_iso_date(d): n for d, n in counts.items()}}), 200

        snapshots, summary = scheduling.quotas_with_occupancy_for_range(start_date, end_date)
        return jsonify({"data": [s.to_dict() for s in snapshots], "summary": summary.to_dict()}), 200

    @app.route("/quota/employees/<day>", methods=["GET"], endpoint="quota_employees")
    def quota_employees(day: str):
        roster = scheduling.roster_for_date(require_iso_date(day))
        return jsonify({"data": roster.to_dict()}), 200
