from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from configurator.models import SavedConfiguration


class Command(BaseCommand):
    help = (
        "Clear saved configurations. Use --all to delete every configuration, "
        "--user <username> for one user's, or --anonymous for those without "
        "an owner. Use --yes to skip confirmation."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--all",
            action="store_true",
            dest="all",
            help="Delete all saved configurations",
        )
        parser.add_argument(
            "--user",
            type=str,
            dest="username",
            help="Delete configurations for username",
        )
        parser.add_argument(
            "--anonymous",
            action="store_true",
            help="Delete configurations with no owner",
        )
        parser.add_argument(
            "--yes",
            action="store_true",
            dest="yes",
            help="Confirm without prompt",
        )

    def handle(self, *args, **options):
        if not (options["all"] or options["username"] or options["anonymous"]):
            raise CommandError("Provide --all, --anonymous or --user <username>")

        if options["all"]:
            qs = SavedConfiguration.objects.all()
        elif options["anonymous"]:
            qs = SavedConfiguration.objects.filter(user__isnull=True)
        else:
            User = get_user_model()
            try:
                user = User.objects.get(username=options["username"])
            except User.DoesNotExist:
                raise CommandError(f'User "{options["username"]}" does not exist')
            qs = SavedConfiguration.objects.filter(user=user)

        count = qs.count()
        if count == 0:
            self.stdout.write("No configurations to delete.")
            return

        if not options["yes"]:
            confirm = input(
                f"About to delete {count} configuration(s). Type YES to confirm: "
            )
            if confirm != "YES":
                self.stdout.write("Aborted.")
                return

        qs.delete()
        self.stdout.write(self.style.SUCCESS(f"Deleted {count} configuration(s)."))
