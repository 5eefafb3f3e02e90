from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from housemeet import models, scoring, services


class MeetFixtureMixin:
    def _make_meet(self):
        self.red = models.House.objects.create(name="Phoenix", color="red")
        self.blue = models.House.objects.create(name="Griffin", color="blue")
        self.empty = models.House.objects.create(name="Dragon", color="green")
        self.avery = models.Participant.objects.create(name="Avery", house=self.red, age=14, gender="female")
        self.blake = models.Participant.objects.create(name="Blake", house=self.red, age=15, gender="male")
        self.casey = models.Participant.objects.create(name="Casey", house=self.blue, age=14, gender="female")
        self.devon = models.Participant.objects.create(name="Devon", house=self.blue, age=13, gender="male")
        self.freestyle = models.Event.objects.create(
            name="50m Freestyle",
            category="Freestyle",
            distance="50m",
            gender=models.Event.Gender.MIXED,
            age_group="Open",
            event_order=1,
        )
        self.backstroke = models.Event.objects.create(
            name="50m Backstroke",
            category="Backstroke",
            distance="50m",
            age_group="Open",
            event_order=2,
        )


class ServicesLogicTests(TestCase):
    def test_parse_time_variants(self):
        self.assertEqual(services.parse_time("65.23"), Decimal("65.230"))
        self.assertEqual(services.parse_time("1:05.23"), Decimal("65.230"))
        self.assertEqual(services.parse_time(42), Decimal("42.000"))
        self.assertIsNone(services.parse_time(""))
        self.assertIsNone(services.parse_time(None))
        with self.assertRaises(ValueError):
            services.parse_time("invalid")
        with self.assertRaises(ValueError):
            services.parse_time("1:2:3")

    def test_parse_time_rejects_non_finite_and_oversized_values(self):
        for value in ("NaN", "Infinity", "-inf", "sNaN", float("nan"), "12345678", "16666:40", Decimal("1E+30")):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    services.parse_time(value)
        self.assertEqual(services.parse_time("999999.999"), Decimal("999999.999"))

    def test_parse_time_keeps_non_positive_values(self):
        self.assertEqual(services.parse_time("0"), Decimal("0.000"))
        self.assertEqual(services.parse_time("-2.5"), Decimal("-2.500"))

    def test_format_time(self):
        self.assertEqual(services.format_time(Decimal("65.23")), "1:05.23")
        self.assertEqual(services.format_time(Decimal("59.1")), "59.10")
        self.assertEqual(services.format_time(None), "N/A")

    def test_ordinal(self):
        self.assertEqual(
            [services.ordinal(value) for value in (1, 2, 3, 4, 11, 12, 13, 21, 22, 101)],
            ["1st", "2nd", "3rd", "4th", "11th", "12th", "13th", "21st", "22nd", "101st"],
        )
        self.assertEqual(services.ordinal(None), "N/A")


class SubmitResultsTests(MeetFixtureMixin, TestCase):
    def setUp(self):
        self._make_meet()

    def test_submission_stores_positions_and_points(self):
        stored = services.submit_event_results(
            self.freestyle,
            [
                {"participant_id": self.avery.pk, "elapsed_time": Decimal("65.23"), "status": "completed"},
                {"participant_id": self.casey.pk, "status": "disqualified"},
                {"participant_id": self.blake.pk, "elapsed_time": Decimal("69.12"), "status": "completed"},
                {"participant_id": self.devon.pk, "status": "did_not_start"},
            ],
        )
        self.assertEqual(
            [(row.participant_id, row.position, row.points) for row in stored],
            [
                (self.avery.pk, 1, 4),
                (self.casey.pk, None, 0),
                (self.blake.pk, 2, 3),
                (self.devon.pk, None, 0),
            ],
        )
        self.assertEqual(models.Result.objects.filter(event=self.freestyle).count(), 4)

    def test_resubmission_replaces_previous_rows(self):
        services.submit_event_results(
            self.freestyle,
            [
                {"participant_id": self.avery.pk, "elapsed_time": "30.0", "status": "completed"},
                {"participant_id": self.blake.pk, "elapsed_time": "31.0", "status": "completed"},
                {"participant_id": self.casey.pk, "elapsed_time": "32.0", "status": "completed"},
            ],
        )
        services.submit_event_results(
            self.freestyle,
            [{"participant_id": self.devon.pk, "elapsed_time": "29.0", "status": "completed"}],
        )
        rows = list(models.Result.objects.filter(event=self.freestyle))
        self.assertEqual([(row.participant_id, row.position, row.points) for row in rows], [(self.devon.pk, 1, 4)])

    def test_resubmission_leaves_other_events_alone(self):
        services.submit_event_results(
            self.backstroke,
            [{"participant_id": self.avery.pk, "elapsed_time": "40.0", "status": "completed"}],
        )
        services.submit_event_results(self.freestyle, [])
        self.assertEqual(models.Result.objects.filter(event=self.backstroke).count(), 1)
        self.assertFalse(models.Result.objects.filter(event=self.freestyle).exists())

    def test_submission_is_audited(self):
        services.submit_event_results(
            self.freestyle,
            [{"participant_id": self.avery.pk, "elapsed_time": "30.0", "status": "completed"}],
        )
        log = models.AuditLog.objects.get(action="event_results_submit")
        self.assertEqual(log.payload["event_id"], self.freestyle.pk)
        self.assertEqual(log.payload["results"], 1)
        self.assertEqual(log.payload["finishers"], 1)

    def test_invalid_outcome_keeps_existing_rows(self):
        services.submit_event_results(
            self.freestyle,
            [{"participant_id": self.avery.pk, "elapsed_time": "30.0", "status": "completed"}],
        )
        with self.assertRaises(scoring.OutcomeValidationError):
            services.submit_event_results(self.freestyle, [{"participant_id": self.blake.pk}])
        self.assertEqual(models.Result.objects.filter(event=self.freestyle).count(), 1)

    def test_broadcast_runs_after_commit(self):
        with patch.object(services, "broadcast_standings") as broadcast:
            with self.captureOnCommitCallbacks(execute=True):
                services.submit_event_results(self.freestyle, [])
        broadcast.assert_called_once_with(event_id=self.freestyle.pk)

    def test_rescore_restores_positions(self):
        services.submit_event_results(
            self.freestyle,
            [
                {"participant_id": self.avery.pk, "elapsed_time": "30.0", "status": "completed"},
                {"participant_id": self.blake.pk, "elapsed_time": "30.0", "status": "completed"},
                {"participant_id": self.casey.pk, "elapsed_time": "31.0", "status": "completed"},
            ],
        )
        models.Result.objects.filter(event=self.freestyle).update(position=None, points=0)
        services.rescore_event(self.freestyle)
        rows = models.Result.objects.filter(event=self.freestyle).order_by("participant__name")
        self.assertEqual([(row.position, row.points) for row in rows], [(1, 4), (1, 4), (3, 2)])
        log = models.AuditLog.objects.get(action="event_results_rescore")
        self.assertEqual(log.payload["changed"], 3)

    def test_rescore_reads_results_after_taking_the_event_lock(self):
        services.submit_event_results(
            self.freestyle,
            [{"participant_id": self.avery.pk, "elapsed_time": "30.0", "status": "completed"}],
        )
        real_lock = services._lock_event
        calls = []

        def submission_lands_while_waiting(event):
            # A submission for the same event commits before the lock is granted.
            if not calls:
                models.Result.objects.filter(event=event).delete()
                models.Result.objects.create(
                    event=event,
                    participant=self.blake,
                    time_seconds=Decimal("29.000"),
                    status="completed",
                    position=1,
                    points=4,
                )
            calls.append(event.pk)
            real_lock(event)

        with patch.object(services, "_lock_event", side_effect=submission_lands_while_waiting):
            services.rescore_event(self.freestyle)
        rows = list(models.Result.objects.filter(event=self.freestyle))
        self.assertEqual([(row.participant_id, row.position) for row in rows], [(self.blake.pk, 1)])

    def test_rescore_broadcasts_after_commit(self):
        with patch.object(services, "broadcast_standings") as broadcast:
            with self.captureOnCommitCallbacks(execute=True):
                services.rescore_event(self.freestyle)
        broadcast.assert_called_once_with(event_id=self.freestyle.pk)


class StandingsServiceTests(MeetFixtureMixin, TestCase):
    def setUp(self):
        self._make_meet()

    def test_house_total_spans_events_and_empty_house_is_zero(self):
        services.submit_event_results(
            self.freestyle,
            [
                {"participant_id": self.avery.pk, "elapsed_time": "30.0", "status": "completed"},
                {"participant_id": self.casey.pk, "elapsed_time": "31.0", "status": "completed"},
            ],
        )
        services.submit_event_results(
            self.backstroke,
            [
                {"participant_id": self.blake.pk, "elapsed_time": "40.0", "status": "completed"},
                {"participant_id": self.devon.pk, "elapsed_time": "39.0", "status": "completed"},
            ],
        )
        standings = services.load_standings()
        totals = [(row.name, row.total_points) for row in standings.houses]
        self.assertEqual(totals, [("Griffin", 7), ("Phoenix", 7), ("Dragon", 0)])

    def test_empty_meet_lists_every_house(self):
        standings = services.load_standings()
        self.assertEqual({row.name for row in standings.houses}, {"Phoenix", "Griffin", "Dragon"})
        self.assertTrue(all(row.total_points == 0 for row in standings.houses))

    def test_totals_follow_edits(self):
        services.submit_event_results(
            self.freestyle,
            [{"participant_id": self.avery.pk, "elapsed_time": "30.0", "status": "completed"}],
        )
        services.submit_event_results(
            self.freestyle,
            [{"participant_id": self.avery.pk, "status": "disqualified"}],
        )
        totals = {row.name: row.total_points for row in services.load_standings().houses}
        self.assertEqual(totals["Phoenix"], 0)

    def test_deleting_house_removes_its_results(self):
        services.submit_event_results(
            self.freestyle,
            [{"participant_id": self.avery.pk, "elapsed_time": "30.0", "status": "completed"}],
        )
        self.red.delete()
        self.assertFalse(models.Result.objects.exists())
        self.assertNotIn("Phoenix", [row.name for row in services.load_standings().houses])

    def test_broadcast_sends_house_totals(self):
        layer = get_channel_layer()
        channel = async_to_sync(layer.new_channel)()
        async_to_sync(layer.group_add)(services.SCOREBOARD_GROUP, channel)
        services.broadcast_standings(event_id=self.freestyle.pk)
        message = async_to_sync(layer.receive)(channel)
        self.assertEqual(message["type"], "broadcast")
        self.assertEqual(message["event"]["type"], "STANDINGS_UPDATED")
        self.assertEqual(message["event"]["event_id"], self.freestyle.pk)
        self.assertEqual(len(message["event"]["houses"]), 3)
        async_to_sync(layer.group_discard)(services.SCOREBOARD_GROUP, channel)


class LaneAssignmentTests(MeetFixtureMixin, TestCase):
    def setUp(self):
        self._make_meet()

    def test_assign_and_move_lanes(self):
        services.assign_lanes(
            self.freestyle,
            [{"participant_id": self.avery.pk, "lane": 1}, {"participant_id": self.casey.pk, "lane": 2}],
        )
        services.assign_lanes(self.freestyle, [{"participant_id": self.blake.pk, "lane": 1}])
        lanes = {row.lane: row.participant_id for row in self.freestyle.lanes.all()}
        self.assertEqual(lanes, {1: self.blake.pk, 2: self.casey.pk})

    def test_lane_out_of_range(self):
        with self.assertRaises(services.LaneAssignmentError):
            services.assign_lanes(self.freestyle, [{"participant_id": self.avery.pk, "lane": 11}])

    def test_duplicate_lane(self):
        with self.assertRaises(services.LaneAssignmentError):
            services.assign_lanes(
                self.freestyle,
                [{"participant_id": self.avery.pk, "lane": 3}, {"participant_id": self.blake.pk, "lane": 3}],
            )


class ManagementCommandTests(TestCase):
    def test_demo_data_and_rescore(self):
        call_command("housemeet_demo_data", "--no-output", "--per-house", "2")
        self.assertEqual(models.House.objects.count(), 4)
        self.assertEqual(models.Participant.objects.count(), 8)
        self.assertEqual(models.Result.objects.count(), 8 * models.Event.objects.count())
        before = list(models.Result.objects.order_by("event_id", "participant_id").values_list("position", "points"))
        call_command("housemeet_rescore")
        after = list(models.Result.objects.order_by("event_id", "participant_id").values_list("position", "points"))
        self.assertEqual(before, after)

    def test_rescore_unknown_event(self):
        with self.assertRaises(CommandError):
            call_command("housemeet_rescore", "404")

    def test_rescore_reports_counts(self):
        services.seed_demo_meet(swimmers_per_house=1)
        out = StringIO()
        call_command("housemeet_rescore", stdout=out)
        self.assertIn("Rescored 16 results across 4 events.", out.getvalue())
