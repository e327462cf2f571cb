'''
JSON web service for the shift calendar.
The endpoints parse the request, call the repository and the accounting functions in services,
and send JSON back. Validation problems are 400s, store failures 500s; messages are static.
'''

import logging
from functools import wraps

from flask import Blueprint, Flask, current_app, jsonify, request

from config import APP_TITLE, DEBUG, SQL_ECHO, configure_logging, database_url, warn_if_sqlite_in_hosting
from domain import Settings, ShiftTimeTable, ShiftType, StorageError, ValidationError, parse_iso_date, parse_year_month
from italian_holidays import holidays_for_year
from repository import ShiftRepository
from services import weekly_progress, week_range, yearly_summary

shifts_blueprint = Blueprint("shift_calendar_api", __name__)

logger = logging.getLogger(__name__)


def addHeaders(resp):
    if 'Content-Type' not in resp.headers or resp.headers['Content-Type'].startswith('text/html'):
        resp.headers['Content-Type'] = 'application/json; charset=utf-8'
    return resp

shifts_blueprint.after_request(addHeaders)


def logAndAbort(error_msg, ret_status=500):
    logger.error(error_msg)
    return jsonify({"message": error_msg}), ret_status


def handles_errors(invalid_msg, failure_msg):
    """
    Turn domain exceptions raised by the wrapped endpoint into the HTTP error contract.
    """
    def decorator(wrapped_function):
        @wraps(wrapped_function)
        def function_interceptor(*args, **kwargs):
            try:
                return wrapped_function(*args, **kwargs)
            except ValidationError as e:
                logger.debug("Rejected request to %s: %s", request.path, e)
                return logAndAbort(invalid_msg, 400)
            except StorageError:
                return logAndAbort(failure_msg, 500)
        return function_interceptor
    return decorator


def repo() -> ShiftRepository:
    return current_app.extensions["shift_repository"]


@shifts_blueprint.route("/api/shifts/<year>/<month>", methods=["GET"])
@handles_errors("Invalid year or month", "Failed to fetch shifts")
def svc_get_shifts(year, month):
    year, month = parse_year_month(year, month)
    return jsonify([s.to_dict() for s in repo().list_month(year, month)])


@shifts_blueprint.route("/api/shifts/date/<shift_date>", methods=["GET"])
@handles_errors("Invalid date", "Failed to fetch shift")
def svc_get_shift_by_date(shift_date):
    shift = repo().get(parse_iso_date(shift_date))
    return jsonify(shift.to_dict() if shift else None)


@shifts_blueprint.route("/api/shifts", methods=["POST"])
@handles_errors("Invalid shift data", "Failed to save shift")
def svc_create_update_shift():
    """
    Create or replace the shift for a date. Body is {"date": "YYYY-MM-DD", "type": "<shift type>"}.
    """
    info = request.get_json(silent=True)
    if not isinstance(info, dict):
        raise ValidationError("Shift payload must be a JSON object")
    missing_keys = {"date", "type"} - info.keys()
    if missing_keys:
        raise ValidationError(f"Shift payload is missing {sorted(missing_keys)}")
    shift = repo().upsert(parse_iso_date(info["date"]), ShiftType.parse(info["type"]))
    return jsonify(shift.to_dict())


@shifts_blueprint.route("/api/shifts/date/<shift_date>", methods=["DELETE"])
@handles_errors("Invalid date", "Failed to delete shift")
def svc_delete_shift_by_date(shift_date):
    repo().delete_by_date(parse_iso_date(shift_date))
    return jsonify({"success": True})


@shifts_blueprint.route("/api/settings", methods=["GET"])
@handles_errors("Invalid settings", "Failed to fetch settings")
def svc_get_settings():
    return jsonify(repo().current_settings().to_dict())


@shifts_blueprint.route("/api/settings", methods=["PUT"])
@handles_errors("Invalid settings data", "Failed to update settings")
def svc_update_settings():
    """
    Replace the settings. shiftTimes travels as JSON text; a missing weeklyTargetHours keeps the stored one.
    """
    info = request.get_json(silent=True)
    if not isinstance(info, dict) or not isinstance(info.get("shiftTimes"), str):
        raise ValidationError("Settings payload needs shiftTimes as JSON text")
    current = repo().current_settings()
    settings = Settings(
        weekly_target_hours=info.get("weeklyTargetHours", current.weekly_target_hours),
        shift_times=ShiftTimeTable.from_json(info["shiftTimes"]),
    )
    return jsonify(repo().save_settings(settings).to_dict())


@shifts_blueprint.route("/api/stats/<year>", methods=["GET"])
@handles_errors("Invalid year", "Failed to compute statistics")
def svc_get_yearly_stats(year):
    year, _ = parse_year_month(year, 1)
    summary = yearly_summary(year, repo().list_year(year), repo().current_settings())
    return jsonify(summary.to_dict())


@shifts_blueprint.route("/api/stats/week/<reference_date>", methods=["GET"])
@handles_errors("Invalid date", "Failed to compute statistics")
def svc_get_weekly_progress(reference_date):
    reference = parse_iso_date(reference_date)
    shifts = repo().list_in_range(*week_range(reference))
    return jsonify(weekly_progress(reference, shifts, repo().current_settings()).to_dict())


@shifts_blueprint.route("/api/holidays/<year>", methods=["GET"])
@handles_errors("Invalid year", "Failed to compute holidays")
def svc_get_holidays(year):
    year, _ = parse_year_month(year, 1)
    return jsonify([{"name": h.name, "date": h.date.isoformat()} for h in sorted(holidays_for_year(year))])


def create_app(repository=None):
    """Application factory; builds the repository from the environment unless one is given."""
    configure_logging(DEBUG)
    app = Flask("shift_calendar")
    app.debug = DEBUG
    if repository is None:
        url = database_url()
        warn_if_sqlite_in_hosting(url)
        repository = ShiftRepository(url, echo=SQL_ECHO)
    app.extensions["shift_repository"] = repository
    app.register_blueprint(shifts_blueprint)
    logger.info("%s API initialization complete", APP_TITLE)
    return app
