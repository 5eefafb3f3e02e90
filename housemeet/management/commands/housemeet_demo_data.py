from __future__ import annotations

from django.core.management.base import BaseCommand

from housemeet import services


class Command(BaseCommand):
    help = "Seed demo houses, events, participants and results"

    def add_arguments(self, parser):
        parser.add_argument("--per-house", type=int, default=3, help="Participants created per house")
        parser.add_argument("--seed", type=int, default=2024, help="Random seed for generated times")
        parser.add_argument("--no-output", action="store_true", help="Suppress success output")

    def handle(self, *args, **options):
        summary = services.seed_demo_meet(
            swimmers_per_house=options["per_house"],
            seed=options["seed"],
        )
        if not options["no_output"]:
            self.stdout.write(
                self.style.SUCCESS(
                    "Seeded {houses} houses, {participants} participants, "
                    "{events} events and {results} results.".format(**summary)
                )
            )
