"""
Management command to create an API key for the member lookup endpoint.

The secret is printed once and cannot be recovered afterwards.
Usage: python manage.py create_api_key "Partner name" [--expires-in-days 365]
"""

from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from apps.api_keys.services import generate_api_key
from apps.core.exceptions import ValidationError


class Command(BaseCommand):
    help = "Create an API key and print its secret once"

    def add_arguments(self, parser):
        parser.add_argument("name", type=str, help="Display name for the key")
        parser.add_argument(
            "--expires-in-days",
            type=int,
            default=None,
            help="Expire the key after N days (default: never)",
        )

    def handle(self, *args, **options):
        expires_at = None
        if options["expires_in_days"] is not None:
            if options["expires_in_days"] <= 0:
                raise CommandError("--expires-in-days must be positive")
            expires_at = timezone.now() + timedelta(days=options["expires_in_days"])

        try:
            generated = generate_api_key(name=options["name"], expires_at=expires_at)
        except ValidationError as e:
            raise CommandError(str(e)) from None

        self.stdout.write(self.style.SUCCESS(f"Created API key {generated.api_key.id}"))
        self.stdout.write(f"Name: {generated.api_key.name}")
        if expires_at:
            self.stdout.write(f"Expires: {expires_at.isoformat()}")
        self.stdout.write("")
        self.stdout.write("Secret (shown only once):")
        self.stdout.write(generated.secret)
