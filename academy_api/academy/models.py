from django.db import models


class Account(models.Model):
    DEVELOPER = 'DEVELOPER'
    ADMIN = 'ADMIN'
    TEACHER = 'TEACHER'
    PARENT = 'PARENT'
    STUDENT = 'STUDENT'

    ROLE_CHOICES = [
        (DEVELOPER, 'Developer'),
        (ADMIN, 'Admin'),
        (TEACHER, 'Teacher'),
        (PARENT, 'Parent'),
        (STUDENT, 'Student'),
    ]

    # Roles owned by a tenant admin and disabled along with it
    DEPENDENT_ROLES = [TEACHER, PARENT, STUDENT]

    PAY_TYPE_CHOICES = [
        ('monthly', 'Monthly'),
        ('hourly', 'Hourly'),
    ]

    name = models.CharField(max_length=100)
    email = models.EmailField(unique=True)
    password = models.CharField(max_length=128)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES)
    admin = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='managed_accounts'
    )
    is_active = models.BooleanField(default=True)
    disabled_by_developer = models.BooleanField(default=False)
    pay_rate = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    pay_type = models.CharField(max_length=10, choices=PAY_TYPE_CHOICES, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.name} ({self.role})"


class AdminSettings(models.Model):
    admin = models.OneToOneField(Account, on_delete=models.CASCADE, related_name='settings')
    default_currency = models.CharField(max_length=3, default='USD')


class Course(models.Model):
    name = models.CharField(max_length=100)
    admin = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='courses')

    def __str__(self):
        return self.name


class Assignment(models.Model):
    student = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='assignments')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='assignments')
    monthly_fee = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=3, default='USD')
    is_active = models.BooleanField(default=True)


class ParentStudent(models.Model):
    parent = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='parent_links')
    student = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='student_parents')

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['parent', 'student'], name='unique_parent_student'),
        ]


class FeeDefinition(models.Model):
    ONCE = 'ONCE'
    MONTHLY = 'MONTHLY'
    BIMONTHLY = 'BIMONTHLY'
    QUARTERLY = 'QUARTERLY'
    HALF_YEARLY = 'HALF_YEARLY'
    YEARLY = 'YEARLY'

    FEE_TYPE_CHOICES = [
        (ONCE, 'Once'),
        (MONTHLY, 'Monthly'),
        (BIMONTHLY, 'Every two months'),
        (QUARTERLY, 'Quarterly'),
        (HALF_YEARLY, 'Half yearly'),
        (YEARLY, 'Yearly'),
    ]

    title = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='USD')
    fee_type = models.CharField(max_length=12, choices=FEE_TYPE_CHOICES)
    generation_day = models.PositiveSmallIntegerField()
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    student = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='fee_definitions')
    course = models.ForeignKey(Course, on_delete=models.SET_NULL, null=True, blank=True, related_name='fee_definitions')
    admin = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='owned_fee_definitions')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.title} ({self.fee_type})"


class Fee(models.Model):
    PENDING = 'PENDING'
    PROCESSING = 'PROCESSING'
    PAID = 'PAID'
    OVERDUE = 'OVERDUE'
    CANCELLED = 'CANCELLED'

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (PROCESSING, 'Processing'),
        (PAID, 'Paid'),
        (OVERDUE, 'Overdue'),
        (CANCELLED, 'Cancelled'),
    ]

    student = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='fees')
    course = models.ForeignKey(Course, on_delete=models.SET_NULL, null=True, blank=True, related_name='fees')
    fee_definition = models.ForeignKey(
        FeeDefinition,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='fees'
    )
    title = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='USD')
    due_date = models.DateField()
    month = models.PositiveSmallIntegerField()
    year = models.PositiveSmallIntegerField()
    is_recurring = models.BooleanField(default=False)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING)
    paid_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    paid_date = models.DateTimeField(null=True, blank=True)
    paid_by = models.ForeignKey(
        Account,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='fees_paid'
    )
    payment_details = models.TextField(null=True, blank=True)
    payment_proof = models.URLField(max_length=500, null=True, blank=True)
    processed_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            # One materialized fee per definition and billing period
            models.UniqueConstraint(
                fields=['fee_definition', 'month', 'year'],
                name='unique_fee_per_definition_period'
            ),
        ]

    def __str__(self):
        return f"{self.title} {self.month}/{self.year}"


class Salary(models.Model):
    PENDING = 'PENDING'
    PAID = 'PAID'
    CANCELLED = 'CANCELLED'

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (PAID, 'Paid'),
        (CANCELLED, 'Cancelled'),
    ]

    teacher = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='salaries')
    title = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='USD')
    due_date = models.DateField()
    month = models.PositiveSmallIntegerField()
    year = models.PositiveSmallIntegerField()
    is_recurring = models.BooleanField(default=False)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING)
    paid_date = models.DateTimeField(null=True, blank=True)
    paid_by = models.ForeignKey(
        Account,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='salaries_paid'
    )
    created_at = models.DateTimeField(auto_now_add=True)


class Subscription(models.Model):
    MONTHLY = 'MONTHLY'
    YEARLY = 'YEARLY'
    LIFETIME = 'LIFETIME'

    PLAN_CHOICES = [
        (MONTHLY, 'Monthly'),
        (YEARLY, 'Yearly'),
        (LIFETIME, 'Lifetime'),
    ]

    PENDING = 'PENDING'
    PROCESSING = 'PROCESSING'
    ACTIVE = 'ACTIVE'
    EXPIRED = 'EXPIRED'
    CANCELLED = 'CANCELLED'

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (PROCESSING, 'Processing'),
        (ACTIVE, 'Active'),
        (EXPIRED, 'Expired'),
        (CANCELLED, 'Cancelled'),
    ]

    admin = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='subscriptions')
    plan = models.CharField(max_length=10, choices=PLAN_CHOICES)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='USD')
    start_date = models.DateTimeField()
    end_date = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING)
    paid_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    paid_date = models.DateTimeField(null=True, blank=True)
    paid_by = models.ForeignKey(
        Account,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='subscriptions_paid'
    )
    payment_details = models.TextField(null=True, blank=True)
    payment_proof = models.URLField(max_length=500, null=True, blank=True)
    processed_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.admin.name} {self.plan} ({self.status})"


class Notification(models.Model):
    FEE_DUE = 'FEE_DUE'
    PAYMENT_PROCESSING = 'PAYMENT_PROCESSING'
    PAYMENT_VERIFIED = 'PAYMENT_VERIFIED'
    SALARY_PAID = 'SALARY_PAID'
    SUBSCRIPTION_DUE = 'SUBSCRIPTION_DUE'
    SUBSCRIPTION_PAID = 'SUBSCRIPTION_PAID'
    SYSTEM_ALERT = 'SYSTEM_ALERT'

    TYPE_CHOICES = [
        (FEE_DUE, 'Fee due'),
        (PAYMENT_PROCESSING, 'Payment processing'),
        (PAYMENT_VERIFIED, 'Payment verified'),
        (SALARY_PAID, 'Salary'),
        (SUBSCRIPTION_DUE, 'Subscription due'),
        (SUBSCRIPTION_PAID, 'Subscription paid'),
        (SYSTEM_ALERT, 'System alert'),
    ]

    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    title = models.CharField(max_length=200)
    message = models.TextField()
    sender = models.ForeignKey(
        Account,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_notifications'
    )
    receiver = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='notifications')
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
