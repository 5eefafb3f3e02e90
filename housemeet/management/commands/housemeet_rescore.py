from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from housemeet import models, services


class Command(BaseCommand):
    """Recompute positions and points from the outcomes already stored."""

    help = "Re-resolve stored results for all events or the given event ids."

    def add_arguments(self, parser):
        parser.add_argument("event_ids", nargs="*", type=int, help="Limit rescoring to these event ids")

    def handle(self, *args, **options):
        event_ids = options["event_ids"]
        events = models.Event.objects.all()
        if event_ids:
            events = events.filter(pk__in=event_ids)
            missing = sorted(set(event_ids) - set(events.values_list("pk", flat=True)))
            if missing:
                raise CommandError(f"Unknown event ids: {', '.join(str(pk) for pk in missing)}")

        total = 0
        for event in events:
            total += len(services.rescore_event(event))
        self.stdout.write(self.style.SUCCESS(f"Rescored {total} results across {events.count()} events."))
