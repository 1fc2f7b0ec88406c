from django.contrib import admin
from django.utils.crypto import get_random_string
from django.contrib.auth.hashers import make_password
from .models import (
    Account,
    AdminSettings,
    Assignment,
    Course,
    Fee,
    FeeDefinition,
    Notification,
    ParentStudent,
    Salary,
    Subscription,
)

@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'role', 'admin', 'is_active', 'disabled_by_developer')
    list_filter = ('role', 'is_active')
    search_fields = ('name', 'email')
    fields = ('name', 'email', 'password', 'role', 'admin', 'is_active', 'disabled_by_developer', 'pay_rate', 'pay_type')

    def save_model(self, request, obj, form, change):
        if not change or 'password' in form.changed_data:
            raw_password = form.cleaned_data.get('password') or get_random_string(length=8)
            obj.password = make_password(raw_password)
        super().save_model(request, obj, form, change)

@admin.register(FeeDefinition)
class FeeDefinitionAdmin(admin.ModelAdmin):
    list_display = ('title', 'student', 'fee_type', 'amount', 'currency', 'generation_day', 'start_date', 'end_date', 'is_active')
    list_filter = ('fee_type', 'is_active')

@admin.register(Fee)
class FeeAdmin(admin.ModelAdmin):
    list_display = ('title', 'student', 'amount', 'currency', 'due_date', 'month', 'year', 'status')
    list_filter = ('status', 'year', 'month')

@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ('admin', 'plan', 'amount', 'currency', 'start_date', 'end_date', 'status')
    list_filter = ('status', 'plan')

@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('type', 'title', 'receiver', 'is_read', 'created_at')
    list_filter = ('type', 'is_read')

admin.site.register([AdminSettings, Course, Assignment, ParentStudent, Salary])
