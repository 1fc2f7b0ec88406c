from rest_framework import serializers

from .models import Account, Fee, FeeDefinition, Notification, Salary, Subscription


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class AccountSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Account
        fields = ['id', 'name', 'email', 'role']


class FeeDefinitionSerializer(serializers.ModelSerializer):
    student = AccountSummarySerializer(read_only=True)
    course_name = serializers.CharField(source='course.name', read_only=True, default=None)
    fee_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = FeeDefinition
        fields = [
            'id', 'title', 'description', 'amount', 'currency', 'fee_type',
            'generation_day', 'start_date', 'end_date', 'is_active',
            'student', 'course', 'course_name', 'fee_count', 'created_at',
        ]


class FeeDefinitionCreateSerializer(serializers.Serializer):
    student_id = serializers.IntegerField()
    course_id = serializers.IntegerField(required=False, allow_null=True)
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    currency = serializers.CharField(max_length=3, required=False, allow_blank=True)
    fee_type = serializers.ChoiceField(choices=FeeDefinition.FEE_TYPE_CHOICES)
    generation_day = serializers.IntegerField(min_value=1, max_value=31)
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True)

    def validate(self, attrs):
        end_date = attrs.get('end_date')
        if end_date and end_date < attrs['start_date']:
            raise serializers.ValidationError({"end_date": "End date cannot be before the start date."})
        return attrs


class FeeDefinitionUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200, required=False)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    currency = serializers.CharField(max_length=3, required=False)
    fee_type = serializers.ChoiceField(choices=FeeDefinition.FEE_TYPE_CHOICES, required=False)
    generation_day = serializers.IntegerField(min_value=1, max_value=31, required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)


class FeeSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source='student.name', read_only=True)
    course_name = serializers.CharField(source='course.name', read_only=True, default=None)

    class Meta:
        model = Fee
        fields = [
            'id', 'student', 'student_name', 'course', 'course_name', 'fee_definition',
            'title', 'description', 'amount', 'currency', 'due_date', 'month', 'year',
            'is_recurring', 'status', 'paid_amount', 'paid_date', 'paid_by',
            'payment_details', 'payment_proof', 'processed_date', 'created_at',
        ]


class FeePaySerializer(serializers.Serializer):
    fee_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)
    paid_date = serializers.DateTimeField(required=False, allow_null=True)
    payment_details = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    payment_proof = serializers.URLField(max_length=500, required=False, allow_blank=True, allow_null=True)


class FeeVerifySerializer(serializers.Serializer):
    fee_id = serializers.IntegerField()
    approve = serializers.BooleanField()


class FeeRevertSerializer(serializers.Serializer):
    fee_id = serializers.IntegerField()


class SubscriptionSerializer(serializers.ModelSerializer):
    admin = AccountSummarySerializer(read_only=True)

    class Meta:
        model = Subscription
        fields = [
            'id', 'admin', 'plan', 'amount', 'currency', 'start_date', 'end_date',
            'status', 'paid_amount', 'paid_date', 'payment_details', 'payment_proof',
            'processed_date', 'created_at',
        ]


class SubscriptionPaySerializer(serializers.Serializer):
    subscription_id = serializers.IntegerField()
    paid_amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    payment_details = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    payment_proof = serializers.URLField(max_length=500, required=False, allow_blank=True, allow_null=True)


class SubscriptionVerifySerializer(serializers.Serializer):
    subscription_id = serializers.IntegerField()
    approved = serializers.BooleanField()


class SubscriptionExtendSerializer(serializers.Serializer):
    admin_id = serializers.IntegerField()
    plan = serializers.ChoiceField(choices=Subscription.PLAN_CHOICES)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    currency = serializers.CharField(max_length=3)
    payment_details = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class NotificationSerializer(serializers.ModelSerializer):
    sender = AccountSummarySerializer(read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'type', 'title', 'message', 'sender', 'is_read', 'created_at']


class NotificationReadSerializer(serializers.Serializer):
    notification_id = serializers.IntegerField()


class SalarySerializer(serializers.ModelSerializer):
    teacher = AccountSummarySerializer(read_only=True)

    class Meta:
        model = Salary
        fields = [
            'id', 'teacher', 'title', 'description', 'amount', 'currency', 'due_date',
            'month', 'year', 'is_recurring', 'status', 'paid_date', 'paid_by', 'created_at',
        ]


class SalaryPaySerializer(serializers.Serializer):
    salary_id = serializers.IntegerField()


class AdminStatusSerializer(serializers.Serializer):
    admin_id = serializers.IntegerField()
    enable = serializers.BooleanField()
