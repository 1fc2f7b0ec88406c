from academy.services import SubscriptionExpiryChecker

from ._jobs import JobCommand


class Command(JobCommand):
    help = 'Expire overdue subscriptions and warn admins before expiry'
    job_class = SubscriptionExpiryChecker
    takes_datetime = True
