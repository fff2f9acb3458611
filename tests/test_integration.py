"""End-to-end integration tests for the export-to-progression pipeline."""

import csv
import io
import json
import logging

import pytest
from flask import Flask, request

import main
from liftlog.consolidator import consolidate_same_day
from liftlog.entry_builder import EntryBuilder, NO_ENTRIES_MESSAGE
from liftlog.progression import group_by_lift

HEADER = [
    "date", "title", "description", "best_result_raw", "best_result_display",
    "score_type", "barbell_lift", "set_details", "notes", "rx_or_scaled", "pr",
]


def to_csv(rows):
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(HEADER)
    for row in rows:
        writer.writerow([row.get(col, "") for col in HEADER])
    return buffer.getvalue()


def set_details(*loads):
    return json.dumps([{"load": load, "success": True} for load in loads])


@pytest.fixture
def export_csv():
    """A small export mixing lifts, schedule rows and a timed WOD."""
    return to_csv([
        {"date": "6/1/2024", "title": "Class Times"},
        {
            "date": "5/15/2024", "title": "Deadlift 5x3", "description": "Build up",
            "best_result_raw": "315", "score_type": "Load", "barbell_lift": "Deadlift",
            "set_details": set_details(275, 315), "notes": "felt good", "pr": "PR",
        },
        {
            "date": "6/1/2024", "title": "Back Squat", "description": "#1: 8 reps #2: 6 reps",
            "best_result_raw": "205", "score_type": "Load", "barbell_lift": "Back Squat",
            "set_details": set_details(185, 205),
        },
        {
            "date": "6/1/2024", "title": "Back Squat", "description": "Find a heavy single",
            "best_result_raw": "300", "score_type": "Load", "barbell_lift": "Back Squat",
            "set_details": set_details(300), "pr": "PR",
        },
        {
            "date": "6/2/2024", "title": "Fran", "description": "21-15-9 thrusters",
            "best_result_raw": "245", "score_type": "Time",
        },
        {
            "date": "6/3/2024", "title": "Deadlift 6-5-4-3-2-1",
            "best_result_raw": "185", "score_type": "Load", "barbell_lift": "Deadlift",
            "set_details": set_details(95, 115, 135, 155, 175, 185),
        },
    ])


@pytest.fixture
def app():
    return Flask(__name__)


class TestPipeline:
    """Tests the pipeline from CSV text to consolidated points."""

    def test_entries_from_export(self, export_csv):
        entries = EntryBuilder().parse_csv(export_csv)

        assert [(e.lift, e.date, e.reps) for e in entries] == [
            ("Deadlift", "5/15/2024", 3),
            ("Back Squat", "6/1/2024", 6),
            ("Back Squat", "6/1/2024", 1),
            ("Deadlift", "6/3/2024", 1),
        ]
        assert entries[0].set_loads == (275, 315)
        assert entries[3].set_loads == (95, 115, 135, 155, 175, 185)

    def test_same_day_squats_merge(self, export_csv):
        groups = group_by_lift(EntryBuilder().parse_csv(export_csv))
        points = consolidate_same_day(groups.entries_by_lift["Back Squat"], target_reps=1)

        assert len(points) == 1
        # 205 x 6 -> 246; the 300 single wins
        assert points[0].normalized_load == 300
        assert [p.normalized_load for p in points[0].all_points] == [246, 300]
        assert points[0].is_pr is True
        assert points[0].is_exact is True

    def test_shared_entries_support_several_targets(self, export_csv):
        entries = EntryBuilder().parse_csv(export_csv)
        squats = group_by_lift(entries).entries_by_lift["Back Squat"]

        at_one = consolidate_same_day(squats, target_reps=1)
        at_six = consolidate_same_day(squats, target_reps=6)

        assert at_one[0].normalized_load == 300
        # 300 x 1 -> 310 1RM -> 258 at 6 reps, beats the exact 205
        assert at_six[0].normalized_load == 258
        assert squats[0].max_load == 205


class TestHandleExportUpload:
    """Tests the HTTP entry point with Flask request contexts."""

    def test_raw_body(self, app, export_csv):
        with app.test_request_context("/", method="POST", data=export_csv):
            response, status = main.handle_export_upload(request)

        assert status == 200
        data = response.get_json()
        assert data["status"] == "ok"
        assert [lift["lift"] for lift in data["lifts"]] == ["Deadlift", "Back Squat"]
        assert data["summary"]["total_sessions"] == 4
        assert data["summary"]["total_prs"] == 2

        deadlift = data["lifts"][0]
        assert deadlift["rep_options"] == [1, 3]
        assert deadlift["target_rep_choices"] == [1, 2, 3, 5]
        assert [p["date"] for p in deadlift["points"]] == ["5/15/2024", "6/3/2024"]

    def test_multipart_upload_with_filters(self, app, export_csv):
        data = {"file": (io.BytesIO(export_csv.encode("utf-8")), "workouts.csv")}
        with app.test_request_context(
            "/",
            method="POST",
            data=data,
            content_type="multipart/form-data",
            query_string={"lift": "Back Squat", "target_reps": "3"},
        ):
            response, status = main.handle_export_upload(request)

        assert status == 200
        lifts = response.get_json()["lifts"]
        assert len(lifts) == 1
        assert lifts[0]["target_reps"] == 3
        point = lifts[0]["points"][0]
        assert point["merged_count"] == 2
        assert point["is_pr"] is True

    def test_rejects_non_csv_upload(self, app, export_csv):
        data = {"file": (io.BytesIO(export_csv.encode("utf-8")), "workouts.xlsx")}
        with app.test_request_context(
            "/", method="POST", data=data, content_type="multipart/form-data"
        ):
            response, status = main.handle_export_upload(request)

        assert status == 400
        assert response.get_json()["message"] == "Please upload a .csv file."

    @pytest.mark.parametrize("target", ["0", "-2", "three"])
    def test_rejects_bad_target_reps(self, app, export_csv, target):
        with app.test_request_context(
            "/", method="POST", data=export_csv, query_string={"target_reps": target}
        ):
            response, status = main.handle_export_upload(request)

        assert status == 400

    def test_missing_payload(self, app):
        with app.test_request_context("/", method="POST"):
            response, status = main.handle_export_upload(request)

        assert status == 400

    def test_no_lift_data_is_reported(self, app):
        csv_text = to_csv([
            {"date": "6/2/2024", "title": "Fran", "best_result_raw": "245", "score_type": "Time"},
        ])
        with app.test_request_context("/", method="POST", data=csv_text):
            response, status = main.handle_export_upload(request)

        assert status == 422
        assert response.get_json()["message"] == NO_ENTRIES_MESSAGE

    def test_default_target_from_environment(self, app, export_csv, monkeypatch):
        monkeypatch.setenv("DEFAULT_TARGET_REPS", "5")
        with app.test_request_context("/", method="POST", data=export_csv):
            response, status = main.handle_export_upload(request)

        assert status == 200
        assert response.get_json()["lifts"][0]["target_reps"] == 5

    def test_unexpected_error_returns_500(self, app, export_csv, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(main, "build_progression", boom)
        with app.test_request_context("/", method="POST", data=export_csv):
            response, status = main.handle_export_upload(request)

        assert status == 500
        assert response.get_json()["message"] == "disk on fire"


class TestConfiguration:
    """Tests environment-driven settings of the entry point."""

    @pytest.mark.parametrize("value,expected", [
        ("DEBUG", logging.DEBUG),
        ("warning", logging.WARNING),
        ("verbose", logging.INFO),
        ("", logging.INFO),
    ])
    def test_log_level(self, monkeypatch, value, expected):
        monkeypatch.setenv("LOG_LEVEL", value)
        assert main.get_log_level() == expected

    def test_log_level_default(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert main.get_log_level() == logging.INFO
