from academy.services import EnrollmentFeeGenerator

from ._jobs import JobCommand


class Command(JobCommand):
    help = 'Generate monthly fees for active course enrollments'
    job_class = EnrollmentFeeGenerator
