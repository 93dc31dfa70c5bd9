"""
Management command to sync an organization's members from a file.

Usage: python manage.py import_members <organization_id> members.xlsx [--dry-run]
"""

from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from apps.core.exceptions import NotFoundError, PersistenceError, ValidationError
from apps.imports.parsing import read_member_file
from apps.imports.services import import_member_file, plan_sync, prepare_rows
from apps.members.store import MemberStore
from apps.organizations.models import Organization


class Command(BaseCommand):
    help = "Replace an organization's member list with the contents of a CSV/XLSX/XLS file"

    def add_arguments(self, parser):
        parser.add_argument("organization_id", type=int, help="Organization ID")
        parser.add_argument("path", type=str, help="Path to the member file")
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would change without writing",
        )

    def handle(self, *args, **options):
        try:
            organization = Organization.objects.get(pk=options["organization_id"])
        except Organization.DoesNotExist:
            raise CommandError(f"Organization {options['organization_id']} not found") from None

        path = Path(options["path"])
        if not path.is_file():
            raise CommandError(f"File not found: {path}")
        content = path.read_bytes()

        if options["dry_run"]:
            self._dry_run(organization, path.name, content)
            return

        try:
            result = import_member_file(organization, path.name, content)
        except (ValidationError, NotFoundError, PersistenceError) as e:
            raise CommandError(f"Import failed: {e}") from None

        for error in result.errors:
            self.stdout.write(self.style.WARNING(error))
        if result.error_count > len(result.errors):
            self.stdout.write(f"... and {result.error_count - len(result.errors)} more")

        self.stdout.write(
            self.style.SUCCESS(
                f"Imported {result.rows_imported} rows into {organization.name}: "
                f"{result.rows_added} added, {result.rows_updated} updated, "
                f"{result.rows_deleted} deleted, {result.error_count} rejected"
            )
        )

    def _dry_run(self, organization: Organization, filename: str, content: bytes) -> None:
        try:
            prepared = prepare_rows(read_member_file(filename, content))
        except ValidationError as e:
            raise CommandError(f"Import failed: {e}") from None

        plan = plan_sync(MemberStore().load_for_sync(organization.pk), prepared.members)
        for error in prepared.errors:
            self.stdout.write(self.style.WARNING(error))
        self.stdout.write(
            f"[DRY RUN] {organization.name}: {len(prepared.members)} valid rows, "
            f"would add {len(plan.to_add)}, update {plan.flag_changes}, "
            f"delete {len(plan.to_delete)}"
        )
