from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from testrequests.choices import Role
from testrequests.models import UserRole
from testrequests.workflows import normalize_role


class Command(BaseCommand):
    help = "Grant (or with --revoke, remove) a workflow role for a user"

    def add_arguments(self, parser):
        parser.add_argument("username")
        parser.add_argument("role", help="TESTER, DOCTOR or ADMIN")
        parser.add_argument("--revoke", action="store_true", help="Remove the role instead")

    def handle(self, *args, **options):
        role = normalize_role(options["role"])
        if role not in Role.values:
            raise CommandError(f"Unknown role: {options['role']}. Use one of {', '.join(Role.values)}")

        User = get_user_model()
        try:
            user = User.objects.get(username=options["username"])
        except User.DoesNotExist:
            raise CommandError(f"No such user: {options['username']}")

        if options["revoke"]:
            deleted, _ = UserRole.objects.filter(user=user, role=role).delete()
            self.stdout.write(f"Revoked {role} from {user.username}" if deleted else f"{user.username} did not hold {role}")
            return

        _, created = UserRole.objects.get_or_create(user=user, role=role)
        self.stdout.write(f"Granted {role} to {user.username}" if created else f"{user.username} already holds {role}")
