from academy.services import SalaryGenerator

from ._jobs import JobCommand


class Command(JobCommand):
    help = 'Generate monthly salaries for monthly-paid teachers'
    job_class = SalaryGenerator
