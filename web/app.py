"""Flask JSON API for the fuel log."""

from datetime import date
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from loguru import logger

from fuellog import (
    Advisor,
    FuelType,
    LogbookStore,
    MonthlySummary,
    NotFound,
    ProcessedFuelEntry,
    ReminderDue,
    ReminderType,
    StoreUnavailable,
    ValidationError,
    add_fuel_entry,
    complete_reminder,
    create_reminder,
    delete_fuel_entry,
    delete_reminder,
    edit_fuel_entry,
    edit_reminder,
    new_fuel_entry,
)
from fuellog.config import Settings, configure_logging, load_settings

# JSON field name -> keyword accepted by edit_reminder
REMINDER_FIELDS = {
    "name": "name",
    "type": "type",
    "isRecurring": "is_recurring",
    "recurringKmInterval": "recurring_km_interval",
    "lastCompletionKm": "last_completion_km",
    "kmValue": "km_value",
    "recurringDaysInterval": "recurring_days_interval",
    "lastCompletionDate": "last_completion_date",
    "dateValue": "date_value",
}

ENTRY_FIELDS = {
    "date": "date",
    "totalValue": "total_value",
    "pricePerLiter": "price_per_liter",
    "kmEnd": "km_end",
    "fuelType": "fuel_type",
    "notes": "notes",
}


def entry_json(e: ProcessedFuelEntry) -> Dict[str, Any]:
    return {
        "id": e.id,
        "date": e.entry.date,
        "totalValue": e.total_value,
        "pricePerLiter": e.price_per_liter,
        "kmEnd": e.km_end,
        "fuelType": e.fuel_type.value,
        "notes": e.notes,
        "liters": e.liters,
        "kmStart": e.km_start,
        "distance": e.distance,
        "avgKmpl": e.avg_kmpl,
    }


def reminder_json(svc: ReminderDue) -> Dict[str, Any]:
    r = svc.reminder
    return {
        "id": r.id,
        "name": r.name,
        "type": r.type.value,
        "isRecurring": r.is_recurring,
        "recurringKmInterval": r.recurring_km_interval,
        "lastCompletionKm": r.last_completion_km,
        "kmValue": r.km_value,
        "recurringDaysInterval": r.recurring_days_interval,
        "lastCompletionDate": r.last_completion_date,
        "dateValue": r.date_value,
        "status": svc.status.name.lower(),
        "due": svc.is_due,
        "dueKm": svc.due_km,
        "dueDate": svc.due_date,
        "kmRemaining": svc.km_remaining,
        "daysRemaining": svc.days_remaining,
    }


def _json_body() -> Dict[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def _rename(body: Dict[str, Any], fields: Dict[str, str]) -> Dict[str, Any]:
    unknown = set(body) - set(fields) - {"id"}
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
    changes = {fields[k]: v for k, v in body.items() if k in fields}
    if "id" in body:
        changes["id"] = body["id"]
    return changes


def _fuel_type(value) -> FuelType:
    try:
        return FuelType.parse(value)
    except ValueError as e:
        raise ValidationError(str(e))


def _reminder_type(value) -> ReminderType:
    try:
        return ReminderType.parse(value)
    except ValueError:
        raise ValidationError(f"Invalid reminder type: {value!r}")


def _month(value: str):
    try:
        year_str, month_str = value.split("-")
        year, month = int(year_str), int(month_str)
    except ValueError:
        raise ValidationError(f"Month must be YYYY-MM, got {value!r}")
    if not 1 <= month <= 12:
        raise ValidationError(f"Month out of range: {value!r}")
    return year, month


def _number_arg(name: str) -> Optional[float]:
    value = request.args.get(name)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        raise ValidationError(f"{name} must be a number, got {value!r}")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[LogbookStore] = None,
    advisor: Optional[Advisor] = None,
) -> Flask:
    """Build the Flask app. Collaborators default to ones built from settings."""
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config["STORE"] = store or LogbookStore(settings.data_dir)
    app.config["ADVISOR"] = advisor or Advisor.from_settings(settings)

    def get_store() -> LogbookStore:
        return app.config["STORE"]

    @app.errorhandler(ValidationError)
    def handle_validation(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(NotFound)
    def handle_not_found(e):
        return jsonify({"error": str(e), "kind": e.kind, "id": e.item_id}), 404

    @app.errorhandler(StoreUnavailable)
    def handle_store(e):
        return jsonify({"error": str(e)}), 503

    @app.route("/api/<scope>/entries", methods=["GET"])
    def list_entries(scope: str):
        """Processed fill-ups, oldest first."""
        logbook = get_store().load(scope)
        return jsonify([entry_json(e) for e in logbook.processed_entries])

    @app.route("/api/<scope>/entries", methods=["POST"])
    def add_entry(scope: str):
        body = _json_body()
        changes = _rename(body, ENTRY_FIELDS)
        missing = [k for k in ("totalValue", "pricePerLiter", "kmEnd") if k not in body]
        if missing:
            raise ValidationError(f"Missing fields: {', '.join(missing)}")

        logbook = get_store().load(scope)
        entry = new_fuel_entry(
            date=changes.get("date") or date.today().isoformat(),
            total_value=changes["total_value"],
            price_per_liter=changes["price_per_liter"],
            km_end=changes["km_end"],
            fuel_type=_fuel_type(changes.get("fuel_type", FuelType.GASOLINE)),
            notes=changes.get("notes") or "",
            entry_id=changes.get("id"),
        )
        entries = add_fuel_entry(logbook.fuel_entries, entry)
        get_store().save(scope, fuel_entries=entries)
        logger.info("Added fuel entry {} to {}", entry.id, scope)
        return jsonify({"id": entry.id}), 201

    @app.route("/api/<scope>/entries/<entry_id>", methods=["PUT"])
    def update_entry(scope: str, entry_id: str):
        changes = _rename(_json_body(), ENTRY_FIELDS)
        if "fuel_type" in changes:
            changes["fuel_type"] = _fuel_type(changes["fuel_type"])
        logbook = get_store().load(scope)
        entries = edit_fuel_entry(logbook.fuel_entries, entry_id, **changes)
        get_store().save(scope, fuel_entries=entries)
        return jsonify({"id": entry_id})

    @app.route("/api/<scope>/entries/<entry_id>", methods=["DELETE"])
    def remove_entry(scope: str, entry_id: str):
        logbook = get_store().load(scope)
        entries = delete_fuel_entry(logbook.fuel_entries, entry_id)
        get_store().save(scope, fuel_entries=entries)
        return "", 204

    @app.route("/api/<scope>/monthly")
    def monthly(scope: str):
        """Chart series: one point per month with entries, oldest first."""
        logbook = get_store().load(scope)
        return jsonify([s.to_series_point() for s in logbook.monthly_summaries])

    @app.route("/api/<scope>/stats")
    def stats(scope: str):
        logbook = get_store().load(scope)
        s = logbook.stats
        return jsonify(
            {
                "entryCount": s.entry_count,
                "totalSpend": s.total_spend,
                "totalLiters": s.total_liters,
                "totalDistance": s.total_distance,
                "avgKmpl": s.avg_kmpl,
                "avgPricePerLiter": s.avg_price_per_liter,
                "currentMileage": logbook.current_mileage,
            }
        )

    @app.route("/api/<scope>/reminders", methods=["GET"])
    def list_reminders(scope: str):
        """Reminders with their due status, most urgent first."""
        logbook = get_store().load(scope)
        return jsonify([reminder_json(s) for s in logbook.get_reminder_status()])

    @app.route("/api/<scope>/reminders", methods=["POST"])
    def add_reminder(scope: str):
        body = _json_body()
        _rename(body, REMINDER_FIELDS)
        is_recurring = body.get("isRecurring", True)
        kind = _reminder_type(body.get("type", "km"))
        if kind == ReminderType.KM:
            interval = body.get("recurringKmInterval")
            anchor = body.get("lastCompletionKm")
            target = body.get("kmValue")
        else:
            interval = body.get("recurringDaysInterval")
            anchor = body.get("lastCompletionDate")
            target = body.get("dateValue")

        logbook = get_store().load(scope)
        reminders, reminder = create_reminder(
            logbook.reminders,
            name=body.get("name"),
            reminder_type=kind,
            is_recurring=is_recurring,
            interval=interval,
            anchor=anchor,
            target=target,
            current_mileage=logbook.current_mileage,
            reminder_id=body.get("id"),
        )
        get_store().save(scope, reminders=reminders)
        return jsonify({"id": reminder.id}), 201

    @app.route("/api/<scope>/reminders/<reminder_id>", methods=["PUT"])
    def update_reminder(scope: str, reminder_id: str):
        changes = _rename(_json_body(), REMINDER_FIELDS)
        logbook = get_store().load(scope)
        reminders = edit_reminder(logbook.reminders, reminder_id, **changes)
        get_store().save(scope, reminders=reminders)
        return jsonify({"id": reminder_id})

    @app.route("/api/<scope>/reminders/<reminder_id>/complete", methods=["POST"])
    def finish_reminder(scope: str, reminder_id: str):
        logbook = get_store().load(scope)
        before = len(logbook.reminders)
        reminders = complete_reminder(logbook.reminders, reminder_id, logbook.current_mileage)
        get_store().save(scope, reminders=reminders)
        return jsonify({"id": reminder_id, "removed": len(reminders) < before})

    @app.route("/api/<scope>/reminders/<reminder_id>", methods=["DELETE"])
    def remove_reminder(scope: str, reminder_id: str):
        logbook = get_store().load(scope)
        reminders = delete_reminder(logbook.reminders, reminder_id)
        get_store().save(scope, reminders=reminders)
        return "", 204

    @app.route("/api/<scope>/summary/<month>")
    def month_summary(scope: str, month: str):
        """AI summary for one month. Never fails on advisor problems."""
        year, month_num = _month(month)
        logbook = get_store().load(scope)
        entries = logbook.get_month_entries(year, month_num)
        label = MonthlySummary(year=year, month=month_num).display_name
        advisor = app.config["ADVISOR"]
        return jsonify(
            {"month": month, "available": advisor.available, "text": advisor.summarize_month(entries, label)}
        )

    @app.route("/api/<scope>/trip")
    def trip(scope: str):
        distance = _number_arg("distance")
        if distance is None:
            raise ValidationError("distance is required")
        avg = _number_arg("avgKmpl")
        if avg is None:
            avg = get_store().load(scope).stats.avg_kmpl
            if avg is None:
                raise ValidationError("No consumption data yet; pass avgKmpl")
        advisor = app.config["ADVISOR"]
        return jsonify({"available": advisor.available, "text": advisor.estimate_trip(distance, avg)})

    return app


if __name__ == "__main__":
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    create_app().run(debug=True, host="0.0.0.0", port=5001)
