# accounts/management/commands/seed_permissions.py

from django.core.management.base import BaseCommand

from accounts.models import Permission
from accounts.permission_defaults import PERMISSION_NAMES, all_permission_codes
from accounts.permissions import grant_defaults_to_all_memberships


class Command(BaseCommand):
    help = "Seed permission codes and grant role defaults to memberships without grants"

    def add_arguments(self, parser):
        parser.add_argument(
            "--skip-grants",
            action="store_true",
            help="Only create Permission rows, do not touch memberships.",
        )

    def handle(self, *args, **options):
        created = 0
        updated = 0

        for code in sorted(all_permission_codes()):
            _, was_created = Permission.objects.update_or_create(
                code=code,
                defaults={
                    "name": PERMISSION_NAMES.get(code, code),
                    "module": code.split(".")[0],
                },
            )
            if was_created:
                created += 1
            else:
                updated += 1

        self.stdout.write(self.style.SUCCESS(f"Permissions: created {created}, updated {updated}."))

        if not options["skip_grants"]:
            summary = grant_defaults_to_all_memberships()
            self.stdout.write(self.style.SUCCESS(
                f"Memberships updated: {summary['memberships_updated']}, "
                f"permissions granted: {summary['permissions_granted']}."
            ))
