"""
Scheduled billing jobs.

Each job walks its eligible records once, isolating failures per record so a
single bad row never halts the batch, and returns a dict of counters that the
cron endpoints and management commands report back to the caller.

Repeated invocations are safe: every job checks for the record it is about to
create before creating it, and fees are additionally protected by the
(fee_definition, month, year) unique constraint.
"""

import logging
from datetime import date, timedelta

from django.db import IntegrityError, transaction
from django.utils import timezone

from .billing import compute_due_date, should_generate_fee
from .models import Account, AdminSettings, Assignment, Fee, FeeDefinition, Notification, Salary, Subscription
from .notifications import already_notified_today, notify, notify_parents, publish

logger = logging.getLogger(__name__)

WARNING_WINDOW = timedelta(days=7)
ENROLLMENT_FEE_DUE_DAY = 5
SALARY_DUE_DAY = 25

EXPIRED_TITLE = 'Subscription Expired'
EXPIRING_SOON_TITLE = 'Subscription Expiring Soon'


def format_date(value):
    return value.strftime("%B %d, %Y") if value else "N/A"


# =============================================================================
# FEE GENERATION FROM DEFINITIONS
# =============================================================================

class FeeGenerator:
    """Materializes fees from active fee definitions for the current period."""

    def __init__(self, today=None):
        self.today = today or timezone.localdate()

    def run(self):
        definitions = FeeDefinition.objects.filter(is_active=True).select_related('student', 'admin')

        generated = 0
        skipped = 0
        errors = 0
        total = 0

        for definition in definitions:
            total += 1
            try:
                if self.generate_for_definition(definition):
                    generated += 1
                else:
                    skipped += 1
            except Exception:
                logger.exception(f"Error generating fee for definition {definition.pk}")
                errors += 1

        logger.info(
            f"Fee generation for {self.today}: {generated} generated, "
            f"{skipped} skipped, {errors} errors, {total} definitions"
        )

        return {
            'generated': generated,
            'skipped': skipped,
            'errors': errors,
            'total': total,
        }

    def generate_for_definition(self, definition):
        """Returns the new Fee, or None when nothing was due for this period."""
        has_existing_fee = False
        if definition.fee_type == FeeDefinition.ONCE:
            has_existing_fee = definition.fees.exists()

        if not should_generate_fee(definition, self.today, has_existing_fee):
            return None

        if Fee.objects.filter(
            fee_definition=definition,
            month=self.today.month,
            year=self.today.year,
        ).exists():
            logger.debug(f"Fee for definition {definition.pk} already exists for {self.today:%m/%Y}")
            return None

        due_date = compute_due_date(definition, self.today)

        try:
            with transaction.atomic():
                fee = Fee.objects.create(
                    student=definition.student,
                    course=definition.course,
                    fee_definition=definition,
                    title=definition.title,
                    description=definition.description,
                    amount=definition.amount,
                    currency=definition.currency,
                    due_date=due_date,
                    month=self.today.month,
                    year=self.today.year,
                    is_recurring=definition.fee_type != FeeDefinition.ONCE,
                    status=Fee.PENDING,
                )
        except IntegrityError:
            # A concurrent run created the same period first
            logger.info(f"Fee for definition {definition.pk} was generated concurrently, skipping")
            return None

        notify_parents(
            definition.student,
            Notification.FEE_DUE,
            'New Fee Due',
            f'A new fee "{definition.title}" of {definition.currency} {definition.amount} '
            f'is due for {definition.student.name} on {format_date(due_date)}',
            sender=definition.admin,
        )

        logger.info(f"Generated fee {fee.pk} for definition {definition.pk}")
        return fee


# =============================================================================
# SUBSCRIPTION EXPIRY
# =============================================================================

class SubscriptionExpiryChecker:
    """Expires overdue subscriptions and warns admins ahead of expiry."""

    def __init__(self, now=None):
        self.now = now or timezone.now()

    def run(self):
        result = {
            'subscriptionsExpired': 0,
            'adminsDisabled': 0,
            'warningsSent': 0,
            'errors': 0,
        }

        expired = list(
            Subscription.objects.filter(
                status=Subscription.ACTIVE,
                end_date__lt=self.now,
            ).select_related('admin')
        )

        for subscription in expired:
            try:
                with transaction.atomic():
                    admin_disabled = self.expire(subscription)
            except Exception:
                logger.exception(f"Error processing expired subscription {subscription.pk}")
                result['errors'] += 1
                continue

            result['subscriptionsExpired'] += 1
            if admin_disabled:
                result['adminsDisabled'] += 1

        expiring = list(
            Subscription.objects.filter(
                status=Subscription.ACTIVE,
                end_date__gte=self.now,
                end_date__lte=self.now + WARNING_WINDOW,
            ).select_related('admin')
        )

        for subscription in expiring:
            try:
                if self.warn(subscription):
                    result['warningsSent'] += 1
            except Exception:
                logger.exception(f"Error sending warning for subscription {subscription.pk}")
                result['errors'] += 1

        result['totalExpiredSubscriptions'] = len(expired)
        result['totalExpiringSubscriptions'] = len(expiring)

        logger.info(f"Subscription check: {result}")
        return result

    def expire(self, subscription):
        """Marks the subscription expired; returns True if its admin was disabled."""
        subscription.status = Subscription.EXPIRED
        subscription.save(update_fields=['status'])

        admin = subscription.admin
        if not admin.is_active:
            return False

        disable_tenant(admin)

        publish(
            Notification.SUBSCRIPTION_DUE,
            EXPIRED_TITLE,
            f"Your subscription has expired on {format_date(subscription.end_date)}. "
            f"Your account has been disabled. Please contact support to renew your subscription.",
            sender=admin,
            receiver=admin,
        )

        logger.warning(f"Subscription {subscription.pk} expired, admin {admin.pk} disabled")
        return True

    def warn(self, subscription):
        admin = subscription.admin
        if already_notified_today(admin, Notification.SUBSCRIPTION_DUE, EXPIRING_SOON_TITLE, self.now):
            return False

        notify(
            Notification.SUBSCRIPTION_DUE,
            EXPIRING_SOON_TITLE,
            f"Your subscription will expire on {format_date(subscription.end_date)}. "
            f"Please renew to avoid service interruption.",
            sender=admin,
            receiver=admin,
        )
        return True


def disable_tenant(admin):
    """Deactivates a tenant admin and every account it owns."""
    admin.is_active = False
    admin.save(update_fields=['is_active'])
    return Account.objects.filter(
        admin=admin,
        role__in=Account.DEPENDENT_ROLES,
    ).update(is_active=False)


def enable_tenant(admin):
    admin.is_active = True
    admin.save(update_fields=['is_active'])
    return Account.objects.filter(admin=admin).update(is_active=True)


# =============================================================================
# ENROLLMENT FEES & SALARIES
# =============================================================================

class EnrollmentFeeGenerator:
    """Monthly fees for active course enrollments that carry a monthly fee."""

    def __init__(self, today=None):
        self.today = today or timezone.localdate()

    def run(self):
        assignments = Assignment.objects.filter(
            is_active=True,
            monthly_fee__gt=0,
        ).select_related('student', 'student__admin', 'course')

        fees_created = 0
        errors = 0
        total = 0

        for assignment in assignments:
            total += 1
            try:
                if self.generate_for_assignment(assignment):
                    fees_created += 1
            except Exception:
                logger.exception(f"Error creating fee for assignment {assignment.pk}")
                errors += 1

        return {
            'feesCreated': fees_created,
            'errors': errors,
            'totalAssignments': total,
        }

    def generate_for_assignment(self, assignment):
        month = self.today.month
        year = self.today.year

        if Fee.objects.filter(
            student=assignment.student,
            course=assignment.course,
            month=month,
            year=year,
            is_recurring=True,
        ).exists():
            return None

        due_date = date(year, month, ENROLLMENT_FEE_DUE_DAY)
        course_name = assignment.course.name

        with transaction.atomic():
            fee = Fee.objects.create(
                student=assignment.student,
                course=assignment.course,
                title=f"{course_name} - Monthly Fee",
                description=f"Monthly fee for {course_name} subject - {month}/{year}",
                amount=assignment.monthly_fee,
                currency=assignment.currency,
                due_date=due_date,
                month=month,
                year=year,
                is_recurring=True,
            )

        notify_parents(
            assignment.student,
            Notification.FEE_DUE,
            'Monthly Fee Generated',
            f"Monthly fee of {assignment.currency} {assignment.monthly_fee} for {course_name} "
            f"has been generated for {assignment.student.name}. Due date: {format_date(due_date)}",
            sender=assignment.student.admin,
        )
        return fee


class SalaryGenerator:
    """Monthly salaries for active teachers on a monthly pay rate."""

    def __init__(self, today=None):
        self.today = today or timezone.localdate()

    def run(self):
        teachers = Account.objects.filter(
            role=Account.TEACHER,
            is_active=True,
            pay_rate__gt=0,
            pay_type='monthly',
        ).select_related('admin')

        salaries_created = 0
        errors = 0
        total = 0

        for teacher in teachers:
            total += 1
            try:
                if self.generate_for_teacher(teacher):
                    salaries_created += 1
            except Exception:
                logger.exception(f"Error creating salary for teacher {teacher.pk}")
                errors += 1

        return {
            'salariesCreated': salaries_created,
            'errors': errors,
            'totalTeachers': total,
        }

    def generate_for_teacher(self, teacher):
        month = self.today.month
        year = self.today.year
        admin = teacher.admin

        if admin is None:
            logger.warning(f"Teacher {teacher.pk} has no admin, skipping salary")
            return None

        if Salary.objects.filter(teacher=teacher, month=month, year=year, is_recurring=True).exists():
            return None

        due_date = date(year, month, SALARY_DUE_DAY)
        currency = default_currency(admin)

        with transaction.atomic():
            salary = Salary.objects.create(
                teacher=teacher,
                title=f"Monthly Salary - {month}/{year}",
                description=f"Monthly salary for {teacher.name} - {month}/{year}",
                amount=teacher.pay_rate,
                currency=currency,
                due_date=due_date,
                month=month,
                year=year,
                is_recurring=True,
            )

        publish(
            Notification.SALARY_PAID,
            'Monthly Salary Generated',
            f"Monthly salary of {currency} {teacher.pay_rate} has been generated for {teacher.name}. "
            f"Due date: {format_date(due_date)}",
            sender=admin,
            receiver=admin,
        )
        publish(
            Notification.SALARY_PAID,
            'Salary Due',
            f"Your monthly salary of {currency} {teacher.pay_rate} is due on {format_date(due_date)}",
            sender=admin,
            receiver=teacher,
        )
        return salary


def default_currency(admin):
    currency = AdminSettings.objects.filter(admin=admin).values_list('default_currency', flat=True).first()
    return currency or 'USD'


# =============================================================================
# REMINDERS
# =============================================================================

class ReminderSender:
    """Due-date reminders for pending fees and expiring subscriptions."""

    def __init__(self, now=None):
        self.now = now or timezone.now()

    def run(self):
        today = timezone.localdate(self.now)

        upcoming_fees = list(
            Fee.objects.filter(
                status=Fee.PENDING,
                due_date__gte=today,
                due_date__lte=today + WARNING_WINDOW,
            ).select_related('student', 'student__admin')
        )

        for fee in upcoming_fees:
            notify_parents(
                fee.student,
                Notification.FEE_DUE,
                'Fee Due Reminder',
                f'Reminder: Fee "{fee.title}" of {fee.currency} {fee.amount} for {fee.student.name} '
                f'is due on {format_date(fee.due_date)}',
                sender=fee.student.admin,
            )

        upcoming_subscriptions = list(
            Subscription.objects.filter(
                status=Subscription.ACTIVE,
                end_date__gte=self.now,
                end_date__lte=self.now + WARNING_WINDOW,
            ).select_related('admin')
        )

        for subscription in upcoming_subscriptions:
            publish(
                Notification.SUBSCRIPTION_DUE,
                'Subscription Renewal Reminder',
                f"Reminder: Your {subscription.plan.lower()} subscription of {subscription.currency} "
                f"{subscription.amount} expires on {format_date(subscription.end_date)}. "
                f"Please renew to continue using the service.",
                sender=None,
                receiver=subscription.admin,
            )

        return {
            'feeReminders': len(upcoming_fees),
            'subscriptionReminders': len(upcoming_subscriptions),
        }
