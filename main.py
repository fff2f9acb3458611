"""
SugarWOD Lift Progression v1.0
Serverless endpoint that turns a SugarWOD workout export into per-lift
strength progression normalized to a chosen rep count.
"""

import logging
import os
from typing import Optional

import functions_framework
from flask import Request, jsonify

from liftlog.entry_builder import EntryBuilder, NoEntriesError
from liftlog.consolidator import consolidate_same_day
from liftlog.progression import group_by_lift, summarize, target_rep_choices


def get_log_level() -> int:
    level = logging.getLevelName(os.environ.get("LOG_LEVEL", "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


logging.basicConfig(level=get_log_level())
logger = logging.getLogger(__name__)

# Initialize services (singleton pattern for Cloud Functions)
entry_builder = EntryBuilder()


def get_default_target_reps() -> int:
    try:
        value = int(os.environ.get("DEFAULT_TARGET_REPS", "1"))
    except ValueError:
        return 1
    return value if value > 0 else 1


def parse_target_reps(raw: Optional[str]) -> Optional[int]:
    """
    Parse the target_reps query argument.

    Args:
        raw: Query string value, possibly missing.

    Returns:
        Positive rep count, the configured default if missing, or None if invalid.
    """
    if raw is None or raw == "":
        return get_default_target_reps()
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value > 0 else None


def read_csv_payload(request: Request) -> Optional[str]:
    """
    Extract the CSV text from an upload or a raw body.

    Raises:
        ValueError: If the uploaded file is not a .csv file.
    """
    upload = request.files.get("file")
    if upload is not None:
        if not (upload.filename or "").lower().endswith(".csv"):
            raise ValueError("Please upload a .csv file.")
        return upload.read().decode("utf-8-sig", errors="replace")

    body = request.get_data(as_text=True)
    return body or None


def build_progression(csv_text: str, target_reps: int, lift: Optional[str] = None) -> dict:
    """
    Run the full pipeline over an export.

    Args:
        csv_text: Contents of the SugarWOD CSV export.
        target_reps: Rep count every point is normalized to.
        lift: Restrict the output to this lift.

    Returns:
        JSON-ready dict with the export summary and per-lift points.

    Raises:
        NoEntriesError: If the export holds no usable lift data.
    """
    entries = entry_builder.parse_csv(csv_text)
    groups = group_by_lift(entries)

    lift_names = groups.lift_names
    if lift:
        lift_names = [name for name in lift_names if name == lift]

    lifts = []
    for name in lift_names:
        points = consolidate_same_day(groups.entries_by_lift[name], target_reps)
        lifts.append({
            "lift": name,
            "rep_options": groups.rep_options[name],
            "target_rep_choices": target_rep_choices(groups.rep_options[name]),
            "target_reps": target_reps,
            "points": [p.to_dict() for p in points],
        })

    return {
        "status": "ok",
        "summary": summarize(entries).to_dict(),
        "lifts": lifts,
    }


@functions_framework.http
def handle_export_upload(request: Request):
    """
    Main entry point for export uploads.

    Workflow:
    1. Read the CSV from a multipart "file" field or the raw body
    2. Build lift entries (row filtering, set details, rep extraction)
    3. Group entries by lift, chronologically
    4. Consolidate same-day entries at the requested target rep count
    """
    try:
        target_reps = parse_target_reps(request.args.get("target_reps"))
        if target_reps is None:
            return jsonify({
                "status": "error",
                "message": "target_reps must be a positive integer"
            }), 400

        try:
            csv_text = read_csv_payload(request)
        except ValueError as e:
            return jsonify({"status": "error", "message": str(e)}), 400

        if not csv_text:
            return jsonify({"status": "error", "message": "No CSV payload"}), 400

        result = build_progression(csv_text, target_reps, request.args.get("lift"))
        return jsonify(result), 200

    except NoEntriesError as e:
        return jsonify({"status": "error", "message": e.message}), 422
    except Exception as e:
        logger.exception("Failed to process export")
        return jsonify({"status": "error", "message": str(e)}), 500
