from academy.services import ReminderSender

from ._jobs import JobCommand


class Command(JobCommand):
    help = 'Send fee and subscription due-date reminders'
    job_class = ReminderSender
    takes_datetime = True
