import logging
from decimal import Decimal

from django.contrib.auth.hashers import check_password
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import MethodNotAllowed
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from .authentication import (
    CronApiKeyAuthentication,
    CronSecretAuthentication,
    IsAdmin,
    IsAdminOrDeveloper,
    IsDeveloper,
    IsParentOrStudent,
)
from .billing import plan_end_date
from .models import Account, Course, Fee, FeeDefinition, Notification, ParentStudent, Salary, Subscription
from .notifications import notify
from .pdf_report import generate_fee_report_pdf
from .serializers import (
    AdminStatusSerializer,
    FeeDefinitionCreateSerializer,
    FeeDefinitionSerializer,
    FeeDefinitionUpdateSerializer,
    FeePaySerializer,
    FeeRevertSerializer,
    FeeSerializer,
    FeeVerifySerializer,
    LoginSerializer,
    NotificationReadSerializer,
    NotificationSerializer,
    SalaryPaySerializer,
    SalarySerializer,
    SubscriptionExtendSerializer,
    SubscriptionPaySerializer,
    SubscriptionSerializer,
    SubscriptionVerifySerializer,
)
from .services import (
    EnrollmentFeeGenerator,
    FeeGenerator,
    ReminderSender,
    SalaryGenerator,
    SubscriptionExpiryChecker,
    default_currency,
    disable_tenant,
    enable_tenant,
    format_date,
)

logger = logging.getLogger(__name__)


def get_current_account(request):
    user_id = request.auth.get("user_id") if request.auth else None
    if not user_id:
        return None
    return Account.objects.filter(pk=user_id, is_active=True).first()


def children_of(parent):
    return ParentStudent.objects.filter(parent=parent).values_list('student_id', flat=True)


# Login View
class LoginView(APIView):
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        email = serializer.validated_data['email']
        password = serializer.validated_data['password']

        account = Account.objects.filter(email__iexact=email).first()
        if not account or not check_password(password, account.password):
            return Response({'detail': 'Invalid email or password'}, status=status.HTTP_401_UNAUTHORIZED)

        if not account.is_active:
            return Response({'detail': 'Account is disabled'}, status=status.HTTP_403_FORBIDDEN)

        payload = {
            'user_id': account.pk,
            'role': account.role,
            'name': account.name,
        }

        refresh = RefreshToken()
        for k, v in payload.items():
            refresh[k] = v

        access = refresh.access_token
        for k, v in payload.items():
            access[k] = v

        return Response({
            'refresh': str(refresh),
            'access': str(access),
            'role': account.role,
        }, status=status.HTTP_200_OK)


# =============================================================================
# CRON ENDPOINTS
# =============================================================================

class CronView(APIView):
    """
    Base for scheduler-triggered batch jobs.

    Only POST is served, and the method is checked before the shared secret so
    a wrong verb never reaches authentication. Subclasses implement run() and
    return the job's counters.
    """
    permission_classes = [IsAuthenticated]
    success_message = None

    def initial(self, request, *args, **kwargs):
        if request.method != 'POST':
            raise MethodNotAllowed(request.method)
        super().initial(request, *args, **kwargs)

    def run(self):
        raise NotImplementedError

    def post(self, request):
        try:
            result = self.run()
        except Exception:
            logger.exception(f"Cron job {self.__class__.__name__} failed")
            return Response({'message': 'Internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({'message': self.success_message, **result}, status=status.HTTP_200_OK)


# Generate Fees From Definitions View
class GenerateFeesView(CronView):
    authentication_classes = [CronSecretAuthentication]
    success_message = 'Fee generation completed successfully'

    def run(self):
        return FeeGenerator(today=timezone.localdate()).run()


# Check Subscriptions View
class CheckSubscriptionsView(CronView):
    authentication_classes = [CronApiKeyAuthentication]
    success_message = 'Subscription check completed'

    def run(self):
        return SubscriptionExpiryChecker(now=timezone.now()).run()


# Generate Monthly Enrollment Fees View
class GenerateMonthlyFeesView(CronView):
    authentication_classes = [CronApiKeyAuthentication]
    success_message = 'Monthly fee generation completed'

    def run(self):
        return EnrollmentFeeGenerator(today=timezone.localdate()).run()


# Generate Monthly Salaries View
class GenerateMonthlySalariesView(CronView):
    authentication_classes = [CronApiKeyAuthentication]
    success_message = 'Monthly salary generation completed'

    def run(self):
        return SalaryGenerator(today=timezone.localdate()).run()


# Reminders View
class RemindersView(CronView):
    authentication_classes = [CronApiKeyAuthentication]
    success_message = 'Reminders sent successfully'

    def run(self):
        return ReminderSender(now=timezone.now()).run()


# =============================================================================
# FEE DEFINITIONS
# =============================================================================

# Fee Definition List/Create View
class FeeDefinitionListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        account = get_current_account(request)
        if not account:
            return Response({"detail": "Authentication failed."}, status=status.HTTP_401_UNAUTHORIZED)

        definitions = FeeDefinition.objects.select_related('student', 'course').annotate(fee_count=Count('fees'))

        if account.role == Account.ADMIN:
            definitions = definitions.filter(admin=account)
        elif account.role == Account.PARENT:
            definitions = definitions.filter(student_id__in=children_of(account))
        elif account.role == Account.STUDENT:
            definitions = definitions.filter(student=account)
        else:
            return Response({"detail": "Access denied"}, status=status.HTTP_403_FORBIDDEN)

        serializer = FeeDefinitionSerializer(definitions.order_by('-created_at'), many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    def post(self, request):
        account = get_current_account(request)
        if not account or account.role != Account.ADMIN:
            return Response({"detail": "Only admins can create fee definitions"}, status=status.HTTP_403_FORBIDDEN)

        serializer = FeeDefinitionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        student = Account.objects.filter(pk=data['student_id'], role=Account.STUDENT, admin=account).first()
        if not student:
            return Response(
                {"detail": "Student not found or not under your administration"},
                status=status.HTTP_404_NOT_FOUND
            )

        course = None
        if data.get('course_id'):
            course = Course.objects.filter(pk=data['course_id'], admin=account).first()
            if not course:
                return Response({"detail": "Course not found"}, status=status.HTTP_404_NOT_FOUND)

        definition = FeeDefinition.objects.create(
            student=student,
            course=course,
            admin=account,
            title=data['title'],
            description=data.get('description') or None,
            amount=data['amount'],
            currency=data.get('currency') or default_currency(account),
            fee_type=data['fee_type'],
            generation_day=data['generation_day'],
            start_date=data['start_date'],
            end_date=data.get('end_date'),
        )

        # Materialize the first fee straight away when it is already due
        first_fee = FeeGenerator(today=timezone.localdate()).generate_for_definition(definition)

        response_data = FeeDefinitionSerializer(definition).data
        response_data['first_fee'] = FeeSerializer(first_fee).data if first_fee else None
        return Response(response_data, status=status.HTTP_201_CREATED)


# Fee Definition Update/Delete View
class FeeDefinitionDetailView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def get_definition(self, request, pk):
        account = get_current_account(request)
        if not account:
            return None
        return FeeDefinition.objects.filter(pk=pk, admin=account).select_related('student', 'course').first()

    def put(self, request, pk):
        definition = self.get_definition(request, pk)
        if not definition:
            return Response({"detail": "Fee definition not found or access denied"}, status=status.HTTP_404_NOT_FOUND)

        serializer = FeeDefinitionUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        for field, value in serializer.validated_data.items():
            setattr(definition, field, value)

        if definition.end_date and definition.end_date < definition.start_date:
            return Response({"end_date": ["End date cannot be before the start date."]}, status=status.HTTP_400_BAD_REQUEST)

        definition.save()
        return Response(FeeDefinitionSerializer(definition).data, status=status.HTTP_200_OK)

    def delete(self, request, pk):
        definition = self.get_definition(request, pk)
        if not definition:
            return Response({"detail": "Fee definition not found or access denied"}, status=status.HTTP_404_NOT_FOUND)

        if definition.fees.filter(status=Fee.PAID).exists():
            # Paid fees are kept, so retire the definition instead
            definition.is_active = False
            definition.save(update_fields=['is_active'])
            return Response(
                {"detail": "Fee definition has paid fees and was deactivated instead of deleted"},
                status=status.HTTP_200_OK
            )

        definition.delete()
        return Response({"detail": "Fee definition deleted successfully"}, status=status.HTTP_200_OK)


# =============================================================================
# FEES
# =============================================================================

# Fee List View
class FeeListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        account = get_current_account(request)
        if not account:
            return Response({"detail": "Authentication failed."}, status=status.HTTP_401_UNAUTHORIZED)

        fees = Fee.objects.select_related('student', 'course')

        if account.role == Account.ADMIN:
            fees = fees.filter(student__admin=account)
        elif account.role == Account.PARENT:
            fees = fees.filter(student_id__in=children_of(account))
        elif account.role == Account.STUDENT:
            fees = fees.filter(student=account)
        elif account.role != Account.DEVELOPER:
            return Response({"detail": "Access denied"}, status=status.HTTP_403_FORBIDDEN)

        fee_status = request.query_params.get("status")
        month = request.query_params.get("month")
        year = request.query_params.get("year")

        if fee_status:
            fees = fees.filter(status=fee_status.upper())
        if month and month.isdigit():
            fees = fees.filter(month=int(month))
        if year and year.isdigit():
            fees = fees.filter(year=int(year))

        serializer = FeeSerializer(fees.order_by('-due_date'), many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)


# Fee Pay View
class FeePayView(APIView):
    permission_classes = [IsAuthenticated, IsParentOrStudent]

    def post(self, request):
        account = get_current_account(request)
        if not account:
            return Response({"detail": "Forbidden"}, status=status.HTTP_403_FORBIDDEN)

        serializer = FeePaySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        fee = Fee.objects.filter(pk=data['fee_id']).select_related('student', 'student__admin').first()
        if not fee:
            return Response({"detail": "Fee not found"}, status=status.HTTP_404_NOT_FOUND)

        is_student_paying_self = account.role == Account.STUDENT and fee.student_id == account.pk
        is_linked_parent = (
            account.role == Account.PARENT
            and ParentStudent.objects.filter(parent=account, student_id=fee.student_id).exists()
        )
        if not (is_student_paying_self or is_linked_parent):
            return Response({"detail": "Not authorized to pay this fee"}, status=status.HTTP_403_FORBIDDEN)

        if fee.status in (Fee.PAID, Fee.CANCELLED):
            return Response({"detail": f"Fee is already {fee.status.lower()}"}, status=status.HTTP_400_BAD_REQUEST)

        if fee.status == Fee.PROCESSING:
            return Response({"detail": "Payment already submitted"}, status=status.HTTP_400_BAD_REQUEST)

        fee.paid_amount = data.get('amount')
        fee.paid_date = data.get('paid_date') or timezone.now()
        fee.payment_details = data.get('payment_details') or None
        fee.payment_proof = data.get('payment_proof') or None
        fee.paid_by = account
        fee.status = Fee.PROCESSING
        fee.save()

        admin = fee.student.admin
        if admin:
            notify(
                Notification.PAYMENT_PROCESSING,
                'Fee Payment Submitted',
                f"A fee payment for {fee.title} has been submitted by {account.name}.",
                sender=account,
                receiver=admin,
            )

        logger.info(f"Fee {fee.pk} payment submitted by account {account.pk}")
        return Response(FeeSerializer(fee).data, status=status.HTTP_200_OK)


def find_managed_fee(account, fee_id):
    fees = Fee.objects.filter(pk=fee_id).select_related('student')
    if account.role == Account.ADMIN:
        fees = fees.filter(student__admin=account)
    return fees.first()


def clear_payment(fee):
    fee.status = Fee.PENDING
    fee.paid_amount = None
    fee.paid_date = None
    fee.payment_details = None
    fee.payment_proof = None
    fee.paid_by = None
    fee.processed_date = timezone.now()


# Fee Verify View
class FeeVerifyView(APIView):
    permission_classes = [IsAuthenticated, IsAdminOrDeveloper]

    def post(self, request):
        account = get_current_account(request)
        if not account:
            return Response({"detail": "Forbidden"}, status=status.HTTP_403_FORBIDDEN)

        serializer = FeeVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        fee = find_managed_fee(account, serializer.validated_data['fee_id'])
        if not fee:
            return Response({"detail": "Fee not found"}, status=status.HTTP_404_NOT_FOUND)

        if fee.status != Fee.PROCESSING:
            return Response(
                {"detail": "Only payments in processing can be verified or rejected"},
                status=status.HTTP_400_BAD_REQUEST
            )

        payer = fee.paid_by

        if serializer.validated_data['approve']:
            fee.status = Fee.PAID
            fee.processed_date = timezone.now()
            fee.save()
            if payer:
                notify(
                    Notification.PAYMENT_VERIFIED,
                    'Fee Payment Verified',
                    f"Your fee payment for {fee.title} has been verified.",
                    sender=account,
                    receiver=payer,
                )
        else:
            clear_payment(fee)
            fee.save()
            if payer:
                notify(
                    Notification.SYSTEM_ALERT,
                    'Fee Payment Rejected',
                    f"Your fee payment for {fee.title} was rejected. Please review details and resubmit.",
                    sender=account,
                    receiver=payer,
                )

        logger.info(f"Fee {fee.pk} set to {fee.status} by account {account.pk}")
        return Response(FeeSerializer(fee).data, status=status.HTTP_200_OK)


# Fee Revert View
class FeeRevertView(APIView):
    permission_classes = [IsAuthenticated, IsAdminOrDeveloper]

    def post(self, request):
        account = get_current_account(request)
        if not account:
            return Response({"detail": "Forbidden"}, status=status.HTTP_403_FORBIDDEN)

        serializer = FeeRevertSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        fee = find_managed_fee(account, serializer.validated_data['fee_id'])
        if not fee:
            return Response({"detail": "Fee not found"}, status=status.HTTP_404_NOT_FOUND)

        clear_payment(fee)
        fee.save()

        logger.info(f"Fee {fee.pk} reverted to PENDING by account {account.pk}")
        return Response(FeeSerializer(fee).data, status=status.HTTP_200_OK)


# Fee Report View
class FeeReportView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    OUTSTANDING_STATUSES = [Fee.PENDING, Fee.PROCESSING, Fee.OVERDUE]

    def get(self, request):
        account = get_current_account(request)
        if not account:
            return Response({"detail": "Authentication failed."}, status=status.HTTP_401_UNAUTHORIZED)

        month = request.query_params.get('month')
        year = request.query_params.get('year')

        fees = Fee.objects.filter(student__admin=account)
        if month and month.isdigit():
            fees = fees.filter(month=int(month))
        if year and year.isdigit():
            fees = fees.filter(year=int(year))

        by_status = {
            row['status']: row
            for row in fees.values('status').annotate(count=Count('id'), total=Sum('amount'))
        }

        totals = fees.aggregate(
            total_billed=Sum('amount', filter=~Q(status=Fee.CANCELLED)),
            total_collected=Sum('amount', filter=Q(status=Fee.PAID)),
            total_outstanding=Sum('amount', filter=Q(status__in=self.OUTSTANDING_STATUSES)),
        )
        total_billed = totals['total_billed'] or Decimal('0.00')
        total_collected = totals['total_collected'] or Decimal('0.00')
        total_outstanding = totals['total_outstanding'] or Decimal('0.00')
        collection_rate = (total_collected / total_billed * 100) if total_billed else Decimal('0')

        status_rows = []
        for code, label in Fee.STATUS_CHOICES:
            row = by_status.get(code, {})
            status_rows.append({
                "status": code,
                "label": label,
                "count": row.get('count', 0),
                "total": float(row.get('total') or 0),
            })

        # PDF download
        if request.query_params.get('download') == 'pdf':
            summary_data = [
                ["Total Billed", f"{total_billed:,.2f}"],
                ["Total Collected", f"{total_collected:,.2f}"],
                ["Total Outstanding", f"{total_outstanding:,.2f}"],
                ["Collection Rate %", f"{collection_rate:.2f}"],
            ]
            summary_data += [[f"{row['label']} Fees", row['count']] for row in status_rows]

            fee_data = [["Student", "Fee", "Due Date", "Amount", "Status"]]
            for fee in fees.select_related('student').order_by('student__name', 'due_date'):
                fee_data.append([
                    fee.student.name,
                    fee.title,
                    format_date(fee.due_date),
                    f"{fee.currency} {fee.amount:,.2f}",
                    fee.status,
                ])

            return generate_fee_report_pdf(
                summary_data,
                fee_data,
                month or "All",
                year or "All",
                account.name,
            )

        return Response({
            "total_billed": float(total_billed),
            "total_collected": float(total_collected),
            "total_outstanding": float(total_outstanding),
            "collection_rate": round(float(collection_rate), 2),
            "by_status": status_rows,
        }, status=status.HTTP_200_OK)


# =============================================================================
# SALARIES
# =============================================================================

# Salary List View
class SalaryListView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        account = get_current_account(request)
        if not account:
            return Response({"detail": "Authentication failed."}, status=status.HTTP_401_UNAUTHORIZED)

        salaries = Salary.objects.select_related('teacher')

        if account.role == Account.ADMIN:
            salaries = salaries.filter(teacher__admin=account)
        elif account.role == Account.TEACHER:
            salaries = salaries.filter(teacher=account)
        else:
            return Response({"detail": "Access denied"}, status=status.HTTP_403_FORBIDDEN)

        salary_status = request.query_params.get("status")
        if salary_status:
            salaries = salaries.filter(status=salary_status.upper())

        serializer = SalarySerializer(salaries.order_by('-due_date'), many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)


# Salary Pay View
class SalaryPayView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request):
        account = get_current_account(request)
        if not account:
            return Response({"detail": "Forbidden"}, status=status.HTTP_403_FORBIDDEN)

        serializer = SalaryPaySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        salary = Salary.objects.filter(
            pk=serializer.validated_data['salary_id'],
            teacher__admin=account
        ).select_related('teacher').first()
        if not salary:
            return Response({"detail": "Salary not found or access denied"}, status=status.HTTP_404_NOT_FOUND)

        if salary.status == Salary.PAID:
            return Response({"detail": "Salary is already paid"}, status=status.HTTP_400_BAD_REQUEST)

        if salary.status == Salary.CANCELLED:
            return Response({"detail": "Cannot pay a cancelled salary"}, status=status.HTTP_400_BAD_REQUEST)

        salary.status = Salary.PAID
        salary.paid_date = timezone.now()
        salary.paid_by = account
        salary.save(update_fields=['status', 'paid_date', 'paid_by'])

        notify(
            Notification.SALARY_PAID,
            'Salary Paid',
            f'Your salary "{salary.title}" of {salary.currency} {salary.amount} has been paid.',
            sender=account,
            receiver=salary.teacher,
        )

        logger.info(f"Salary {salary.pk} paid by admin {account.pk}")
        return Response(SalarySerializer(salary).data, status=status.HTTP_200_OK)


# =============================================================================
# SUBSCRIPTIONS
# =============================================================================

# Subscription List View
class SubscriptionListView(APIView):
    permission_classes = [IsAuthenticated, IsAdminOrDeveloper]

    def get(self, request):
        account = get_current_account(request)
        if not account:
            return Response({"detail": "Authentication failed."}, status=status.HTTP_401_UNAUTHORIZED)

        subscriptions = Subscription.objects.select_related('admin').order_by('-created_at')
        if account.role == Account.ADMIN:
            subscriptions = subscriptions.filter(admin=account)

        return Response(SubscriptionSerializer(subscriptions, many=True).data, status=status.HTTP_200_OK)


# Subscription Pay View
class SubscriptionPayView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]

    def post(self, request):
        account = get_current_account(request)
        if not account:
            return Response({"detail": "Forbidden"}, status=status.HTTP_403_FORBIDDEN)

        serializer = SubscriptionPaySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        subscription = Subscription.objects.filter(pk=data['subscription_id'], admin=account).first()
        if not subscription:
            return Response({"detail": "Subscription not found or access denied"}, status=status.HTTP_404_NOT_FOUND)

        if subscription.status == Subscription.ACTIVE:
            return Response({"detail": "Subscription is already paid"}, status=status.HTTP_400_BAD_REQUEST)

        subscription.paid_amount = data['paid_amount']
        subscription.paid_date = timezone.now()
        subscription.payment_details = data.get('payment_details') or None
        subscription.payment_proof = data.get('payment_proof') or None
        subscription.paid_by = account
        subscription.status = Subscription.PROCESSING
        subscription.save()

        for developer in Account.objects.filter(role=Account.DEVELOPER):
            notify(
                Notification.PAYMENT_PROCESSING,
                'Subscription Payment Submitted',
                f"{account.name} has submitted a payment of {subscription.currency} {data['paid_amount']} "
                f"for their {subscription.plan.lower()} subscription. Please verify and confirm.",
                sender=account,
                receiver=developer,
            )

        return Response(SubscriptionSerializer(subscription).data, status=status.HTTP_200_OK)


# Subscription Verify View
class SubscriptionVerifyView(APIView):
    permission_classes = [IsAuthenticated, IsDeveloper]

    def post(self, request):
        account = get_current_account(request)
        if not account:
            return Response({"detail": "Forbidden"}, status=status.HTTP_403_FORBIDDEN)

        serializer = SubscriptionVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        approved = serializer.validated_data['approved']

        subscription = Subscription.objects.filter(
            pk=serializer.validated_data['subscription_id']
        ).select_related('admin').first()
        if not subscription:
            return Response({"detail": "Subscription not found"}, status=status.HTTP_404_NOT_FOUND)

        if subscription.status != Subscription.PROCESSING:
            return Response({"detail": "Subscription is not in processing status"}, status=status.HTTP_400_BAD_REQUEST)

        now = timezone.now()
        admin = subscription.admin

        with transaction.atomic():
            subscription.status = Subscription.ACTIVE if approved else Subscription.PENDING
            subscription.processed_date = now

            if approved:
                subscription.end_date = plan_end_date(subscription.plan, now)
                # Re-enable tenants disabled for non-payment, not those a developer disabled
                if not admin.is_active and not admin.disabled_by_developer:
                    enable_tenant(admin)

            subscription.save()

        plan = subscription.plan.lower()
        if approved:
            notify(
                Notification.SUBSCRIPTION_PAID,
                'Subscription Payment Verified',
                f"Your {plan} subscription payment has been verified and approved. Your subscription is now active.",
                sender=account,
                receiver=admin,
            )
        else:
            notify(
                Notification.PAYMENT_PROCESSING,
                'Subscription Payment Rejected',
                f"Your {plan} subscription payment has been rejected. Please contact support or resubmit payment.",
                sender=account,
                receiver=admin,
            )

        logger.info(f"Subscription {subscription.pk} set to {subscription.status} by developer {account.pk}")
        return Response(SubscriptionSerializer(subscription).data, status=status.HTTP_200_OK)


# Subscription Extend View
class SubscriptionExtendView(APIView):
    permission_classes = [IsAuthenticated, IsDeveloper]

    def post(self, request):
        account = get_current_account(request)
        if not account:
            return Response({"detail": "Forbidden"}, status=status.HTTP_403_FORBIDDEN)

        serializer = SubscriptionExtendSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        admin = Account.objects.filter(pk=data['admin_id'], role=Account.ADMIN).first()
        if not admin:
            return Response({"detail": "Admin not found"}, status=status.HTTP_404_NOT_FOUND)

        now = timezone.now()
        current = Subscription.objects.filter(
            admin=admin,
            status=Subscription.ACTIVE
        ).order_by('-created_at').first()

        base = current.end_date if current and current.end_date and current.end_date > now else now
        new_end_date = plan_end_date(data['plan'], base)

        with transaction.atomic():
            if current:
                current.plan = data['plan']
                current.end_date = new_end_date
                current.paid_date = now
                current.paid_by = account
                current.payment_details = data.get('payment_details') or current.payment_details
                current.save()
                subscription = current
            else:
                subscription = Subscription.objects.create(
                    admin=admin,
                    plan=data['plan'],
                    amount=data['amount'],
                    currency=data['currency'],
                    start_date=now,
                    end_date=new_end_date,
                    status=Subscription.ACTIVE,
                    paid_amount=data['amount'],
                    paid_date=now,
                    paid_by=account,
                    payment_details=data.get('payment_details') or None,
                    processed_date=now,
                )

            if not admin.is_active and not admin.disabled_by_developer:
                enable_tenant(admin)

        notify(
            Notification.SUBSCRIPTION_PAID,
            'Subscription Extended',
            f"Your subscription has been extended until "
            f"{format_date(new_end_date) if new_end_date else 'lifetime'}",
            sender=account,
            receiver=admin,
        )

        return Response(SubscriptionSerializer(subscription).data, status=status.HTTP_200_OK)


# =============================================================================
# TENANT ADMINS
# =============================================================================

# Admin Enable/Disable View
class AdminStatusView(APIView):
    """
    Developer switch for a tenant admin.

    Disabling marks the admin as disabled by a developer, so paying or
    verifying a subscription will not bring it back. Enabling clears that
    mark and restarts the admin's latest subscription from today.
    """
    permission_classes = [IsAuthenticated, IsDeveloper]

    def post(self, request):
        account = get_current_account(request)
        if not account:
            return Response({"detail": "Forbidden"}, status=status.HTTP_403_FORBIDDEN)

        serializer = AdminStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        enable = serializer.validated_data['enable']

        admin = Account.objects.filter(pk=serializer.validated_data['admin_id'], role=Account.ADMIN).first()
        if not admin:
            return Response({"detail": "Admin not found"}, status=status.HTTP_404_NOT_FOUND)

        subscription_extended = False

        with transaction.atomic():
            admin.disabled_by_developer = not enable
            admin.save(update_fields=['disabled_by_developer'])

            if enable:
                enable_tenant(admin)
                latest = Subscription.objects.filter(admin=admin).order_by('-created_at').first()
                if latest:
                    latest.status = Subscription.ACTIVE
                    latest.end_date = plan_end_date(latest.plan, timezone.now())
                    latest.save(update_fields=['status', 'end_date'])
                    subscription_extended = True
            else:
                disable_tenant(admin)
                Subscription.objects.filter(admin=admin, status=Subscription.ACTIVE).update(
                    status=Subscription.EXPIRED
                )

        logger.warning(f"Admin {admin.pk} {'enabled' if enable else 'disabled'} by developer {account.pk}")
        return Response({
            "detail": f"Admin {'enabled' if enable else 'disabled'} successfully",
            "subscription_extended": subscription_extended,
        }, status=status.HTTP_200_OK)


# =============================================================================
# NOTIFICATIONS
# =============================================================================

# Notification List View
class NotificationListView(APIView):
    permission_classes = [IsAuthenticated]

    LIMIT = 50

    def get(self, request):
        account = get_current_account(request)
        if not account:
            return Response({"detail": "Authentication failed."}, status=status.HTTP_401_UNAUTHORIZED)

        notifications = Notification.objects.filter(receiver=account).select_related('sender')
        unread_count = notifications.filter(is_read=False).count()

        return Response({
            "notifications": NotificationSerializer(notifications[:self.LIMIT], many=True).data,
            "unread_count": unread_count,
        }, status=status.HTTP_200_OK)

    def put(self, request):
        account = get_current_account(request)
        if not account:
            return Response({"detail": "Authentication failed."}, status=status.HTTP_401_UNAUTHORIZED)

        serializer = NotificationReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        updated = Notification.objects.filter(
            pk=serializer.validated_data['notification_id'],
            receiver=account
        ).update(is_read=True)

        if updated == 0:
            return Response({"detail": "Notification not found"}, status=status.HTTP_404_NOT_FOUND)

        return Response({"detail": "Notification marked as read"}, status=status.HTTP_200_OK)
