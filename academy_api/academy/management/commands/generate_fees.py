from academy.services import FeeGenerator

from ._jobs import JobCommand


class Command(JobCommand):
    help = 'Generate fees from active fee definitions for the current period'
    job_class = FeeGenerator
