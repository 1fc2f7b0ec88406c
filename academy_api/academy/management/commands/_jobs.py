# management/commands/_jobs.py

"""
Shared plumbing for the billing job commands.

Each command runs one job from academy.services synchronously and prints the
job's counters, mirroring what the matching /api/cron/ endpoint returns.
"""

from datetime import datetime

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone


class JobCommand(BaseCommand):
    job_class = None
    takes_datetime = False

    def add_arguments(self, parser):
        parser.add_argument(
            '--date', type=str, default=None,
            help='Run as if today were this date (YYYY-MM-DD)'
        )

    def parse_date(self, value):
        try:
            return datetime.strptime(value, '%Y-%m-%d').date()
        except ValueError:
            raise CommandError(f"Invalid --date '{value}', expected YYYY-MM-DD")

    def build_job(self, options):
        if not options['date']:
            return self.job_class()

        run_date = self.parse_date(options['date'])
        if self.takes_datetime:
            now = timezone.make_aware(datetime.combine(run_date, timezone.localtime().time()))
            return self.job_class(now=now)
        return self.job_class(today=run_date)

    def handle(self, *args, **options):
        job = self.build_job(options)
        name = self.job_class.__name__

        self.stdout.write(self.style.MIGRATE_HEADING(f"Running {name}"))
        result = job.run()

        for key, value in result.items():
            self.stdout.write(f"  {key}: {value}")

        if result.get('errors'):
            self.stderr.write(self.style.WARNING(f"{name} finished with {result['errors']} error(s)"))
        else:
            self.stdout.write(self.style.SUCCESS(f"{name} completed"))
