import csv
import io
from unittest import mock

from asgiref.sync import async_to_sync
from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase
from django.urls import reverse

from housemeet import models, services
from housemeet.consumers import ScoreboardConsumer


def _rows(response):
    return list(csv.reader(io.StringIO(response.content.decode())))


class CsvExportTests(TestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username="coach", password="password")
        self.phoenix = models.House.objects.create(name="Phoenix", color="red")
        self.griffin = models.House.objects.create(name="Griffin", color="blue")
        self.avery = models.Participant.objects.create(name="Avery", house=self.phoenix, gender="female")
        self.casey = models.Participant.objects.create(name="Casey", house=self.griffin, gender="female")
        self.event = models.Event.objects.create(
            name="100m Freestyle",
            category="Freestyle",
            distance="100m",
            age_group="U14",
            event_order=1,
        )
        services.submit_event_results(
            self.event,
            [
                {"participant_id": self.casey.pk, "status": "did_not_finish"},
                {"participant_id": self.avery.pk, "elapsed_time": "65.23", "status": "completed"},
            ],
        )

    def test_login_required(self):
        resp = self.client.get(reverse("housemeet:export-results-csv"))
        self.assertEqual(resp.status_code, 302)

    def test_results_export(self):
        self.client.force_login(self.user)
        resp = self.client.get(reverse("housemeet:export-results-csv"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "text/csv")
        self.assertIn("attachment;", resp["Content-Disposition"])
        header, first, second = _rows(resp)
        self.assertEqual(header[0], "Position")
        self.assertEqual(first[:4], ["1st", "Avery", "Phoenix", "100m Freestyle"])
        self.assertEqual(first[8:11], ["1:05.23", "4", "Completed"])
        self.assertEqual(second[0], "N/A")
        self.assertEqual(second[8], "N/A")

    def test_standings_export(self):
        self.client.force_login(self.user)
        resp = self.client.get(reverse("housemeet:export-standings-csv"))
        self.assertEqual(resp.status_code, 200)
        rows = _rows(resp)
        self.assertEqual(rows[0], ["House standings"])
        self.assertEqual(rows[2][:3], ["1", "Phoenix", "4"])
        self.assertEqual(rows[3][:3], ["2", "Griffin", "0"])
        flat = [cell for row in rows for cell in row]
        self.assertIn("Top performers", flat)
        self.assertIn("Avery", flat)


class ScoreboardConsumerTests(SimpleTestCase):
    def test_broadcast_forwards_payload(self):
        consumer = ScoreboardConsumer()
        payload = {"type": "STANDINGS_UPDATED", "event_id": 3, "houses": []}
        with mock.patch.object(consumer, "send_json", new=mock.AsyncMock()) as send_json:
            async_to_sync(consumer.broadcast)({"type": "broadcast", "event": payload})
        send_json.assert_awaited_once_with(payload)
