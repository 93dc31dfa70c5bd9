"""
Management command to export an organization's members to a file.

Usage: python manage.py export_members <organization_id> [--format xlsx] [--output path]
"""

from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from apps.core.exceptions import PersistenceError, ValidationError
from apps.members.export import CONTENT_TYPES, export_members
from apps.organizations.models import Organization


class Command(BaseCommand):
    help = "Export an organization's members (decrypted) to CSV or XLSX"

    def add_arguments(self, parser):
        parser.add_argument("organization_id", type=int, help="Organization ID")
        parser.add_argument(
            "--format",
            dest="file_format",
            choices=sorted(CONTENT_TYPES),
            default="csv",
            help="Output format (default: csv)",
        )
        parser.add_argument(
            "--output",
            type=str,
            default=None,
            help="Output path (default: generated filename in the current directory)",
        )
        parser.add_argument(
            "--include-inactive",
            action="store_true",
            help="Include inactive members",
        )

    def handle(self, *args, **options):
        try:
            organization = Organization.objects.get(pk=options["organization_id"])
        except Organization.DoesNotExist:
            raise CommandError(f"Organization {options['organization_id']} not found") from None

        try:
            export = export_members(
                organization,
                file_format=options["file_format"],
                include_inactive=options["include_inactive"],
            )
        except (ValidationError, PersistenceError) as e:
            raise CommandError(f"Export failed: {e}") from None

        output = Path(options["output"] or export.filename)
        output.write_bytes(export.content)
        self.stdout.write(
            self.style.SUCCESS(f"Exported {export.row_count} members to {output}")
        )
