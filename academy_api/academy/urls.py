from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from . import views

urlpatterns = [
    # Auth
    path('auth/login', views.LoginView.as_view(), name='login'),
    path('auth/refresh', TokenRefreshView.as_view(), name='token-refresh'),

    # Scheduler-triggered jobs
    path('cron/generate-fees', views.GenerateFeesView.as_view(), name='cron-generate-fees'),
    path('cron/check-subscriptions', views.CheckSubscriptionsView.as_view(), name='cron-check-subscriptions'),
    path('cron/generate-monthly-fees', views.GenerateMonthlyFeesView.as_view(), name='cron-generate-monthly-fees'),
    path('cron/generate-monthly-salaries', views.GenerateMonthlySalariesView.as_view(), name='cron-generate-monthly-salaries'),
    path('cron/reminders', views.RemindersView.as_view(), name='cron-reminders'),

    # Fees
    path('fees', views.FeeListView.as_view(), name='fee-list'),
    path('fees/definitions', views.FeeDefinitionListView.as_view(), name='fee-definition-list'),
    path('fees/definitions/<int:pk>', views.FeeDefinitionDetailView.as_view(), name='fee-definition-detail'),
    path('fees/pay', views.FeePayView.as_view(), name='fee-pay'),
    path('fees/verify', views.FeeVerifyView.as_view(), name='fee-verify'),
    path('fees/revert', views.FeeRevertView.as_view(), name='fee-revert'),
    path('fees/report', views.FeeReportView.as_view(), name='fee-report'),

    # Salaries
    path('salaries', views.SalaryListView.as_view(), name='salary-list'),
    path('salaries/pay', views.SalaryPayView.as_view(), name='salary-pay'),

    # Subscriptions
    path('subscriptions', views.SubscriptionListView.as_view(), name='subscription-list'),
    path('subscriptions/pay', views.SubscriptionPayView.as_view(), name='subscription-pay'),
    path('subscriptions/verify', views.SubscriptionVerifyView.as_view(), name='subscription-verify'),
    path('subscriptions/extend', views.SubscriptionExtendView.as_view(), name='subscription-extend'),

    # Tenant admins
    path('users/enable-admin', views.AdminStatusView.as_view(), name='admin-status'),

    # Notifications
    path('notifications', views.NotificationListView.as_view(), name='notification-list'),
]
