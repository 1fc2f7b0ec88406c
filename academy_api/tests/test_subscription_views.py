from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from academy.models import Account, Notification, Subscription
from academy.notifications import notify

pytestmark = pytest.mark.django_db


@pytest.fixture
def subscription(admin):
    return Subscription.objects.create(
        admin=admin,
        plan=Subscription.MONTHLY,
        amount=Decimal('49.00'),
        currency='USD',
        start_date=timezone.now(),
        status=Subscription.PENDING,
    )


@pytest.fixture
def disabled_tenant(admin, student, parent):
    Account.objects.filter(pk__in=[admin.pk, student.pk, parent.pk]).update(is_active=False)
    admin.refresh_from_db()
    return admin


class TestSubscriptionPayment:
    def test_admin_submits_payment(self, client_for, admin, developer, subscription):
        response = client_for(admin).post(
            '/api/subscriptions/pay', {'subscription_id': subscription.pk, 'paid_amount': '49.00'}, format='json'
        )

        assert response.status_code == 200
        subscription.refresh_from_db()
        assert subscription.status == Subscription.PROCESSING
        assert subscription.paid_by == admin
        assert Notification.objects.filter(receiver=developer, type=Notification.PAYMENT_PROCESSING).exists()

    def test_active_subscription_cannot_be_paid(self, client_for, admin, subscription):
        subscription.status = Subscription.ACTIVE
        subscription.save()

        response = client_for(admin).post(
            '/api/subscriptions/pay', {'subscription_id': subscription.pk, 'paid_amount': '49.00'}, format='json'
        )

        assert response.status_code == 400

    def test_approval_activates_and_reenables_tenant(self, client_for, developer, subscription, disabled_tenant,
                                                     student):
        subscription.status = Subscription.PROCESSING
        subscription.save()

        response = client_for(developer).post(
            '/api/subscriptions/verify', {'subscription_id': subscription.pk, 'approved': True}, format='json'
        )

        assert response.status_code == 200
        subscription.refresh_from_db()
        assert subscription.status == Subscription.ACTIVE
        assert subscription.end_date > timezone.now() + timedelta(days=27)
        assert Account.objects.get(pk=disabled_tenant.pk).is_active
        assert Account.objects.get(pk=student.pk).is_active
        assert Notification.objects.filter(receiver=disabled_tenant, type=Notification.SUBSCRIPTION_PAID).exists()

    def test_approval_keeps_developer_disabled_tenant_off(self, client_for, developer, subscription, disabled_tenant):
        disabled_tenant.disabled_by_developer = True
        disabled_tenant.save()
        subscription.status = Subscription.PROCESSING
        subscription.save()

        client_for(developer).post(
            '/api/subscriptions/verify', {'subscription_id': subscription.pk, 'approved': True}, format='json'
        )

        assert not Account.objects.get(pk=disabled_tenant.pk).is_active

    def test_rejection_returns_to_pending(self, client_for, developer, admin, subscription):
        subscription.status = Subscription.PROCESSING
        subscription.save()

        response = client_for(developer).post(
            '/api/subscriptions/verify', {'subscription_id': subscription.pk, 'approved': False}, format='json'
        )

        assert response.status_code == 200
        subscription.refresh_from_db()
        assert subscription.status == Subscription.PENDING
        assert Notification.objects.filter(receiver=admin, title='Subscription Payment Rejected').exists()

    def test_only_developers_verify(self, client_for, admin, subscription):
        response = client_for(admin).post(
            '/api/subscriptions/verify', {'subscription_id': subscription.pk, 'approved': True}, format='json'
        )

        assert response.status_code == 403


class TestSubscriptionExtend:
    def test_extends_from_current_end_date(self, client_for, developer, admin):
        end_date = timezone.now() + timedelta(days=10)
        current = Subscription.objects.create(
            admin=admin, plan=Subscription.MONTHLY, amount=Decimal('49'), start_date=timezone.now(),
            end_date=end_date, status=Subscription.ACTIVE,
        )

        response = client_for(developer).post('/api/subscriptions/extend', {
            'admin_id': admin.pk, 'plan': Subscription.YEARLY, 'amount': '490.00', 'currency': 'USD',
        }, format='json')

        assert response.status_code == 200
        current.refresh_from_db()
        assert current.plan == Subscription.YEARLY
        assert current.end_date.year == end_date.year + 1
        assert Subscription.objects.filter(admin=admin).count() == 1

    def test_creates_subscription_and_reenables_tenant(self, client_for, developer, disabled_tenant):
        response = client_for(developer).post('/api/subscriptions/extend', {
            'admin_id': disabled_tenant.pk, 'plan': Subscription.LIFETIME, 'amount': '999.00', 'currency': 'USD',
        }, format='json')

        assert response.status_code == 200
        subscription = Subscription.objects.get(admin=disabled_tenant)
        assert subscription.status == Subscription.ACTIVE
        assert subscription.end_date is None
        assert Account.objects.get(pk=disabled_tenant.pk).is_active


class TestNotifications:
    def test_lists_own_notifications_with_unread_count(self, client_for, admin, parent):
        notify(Notification.SYSTEM_ALERT, 'Hello', 'First', sender=admin, receiver=parent)
        notify(Notification.SYSTEM_ALERT, 'Again', 'Second', sender=admin, receiver=parent)
        notify(Notification.SYSTEM_ALERT, 'Elsewhere', 'Not yours', sender=parent, receiver=admin)

        response = client_for(parent).get('/api/notifications')

        assert response.status_code == 200
        body = response.json()
        assert body['unread_count'] == 2
        assert {n['title'] for n in body['notifications']} == {'Hello', 'Again'}

    def test_mark_as_read(self, client_for, admin, parent):
        notice = notify(Notification.SYSTEM_ALERT, 'Hello', 'First', sender=admin, receiver=parent)

        response = client_for(parent).put('/api/notifications', {'notification_id': notice.pk}, format='json')

        assert response.status_code == 200
        notice.refresh_from_db()
        assert notice.is_read

    def test_cannot_mark_someone_elses_notification(self, client_for, admin, parent):
        notice = notify(Notification.SYSTEM_ALERT, 'Hello', 'First', sender=parent, receiver=admin)

        response = client_for(parent).put('/api/notifications', {'notification_id': notice.pk}, format='json')

        assert response.status_code == 404

    def test_disabled_account_is_rejected(self, client_for, disabled_tenant):
        response = client_for(disabled_tenant).get('/api/notifications')

        assert response.status_code == 401


class TestAdminStatus:
    def test_developer_disables_tenant(self, client_for, developer, admin, student, teacher):
        active = Subscription.objects.create(
            admin=admin, plan=Subscription.MONTHLY, amount=Decimal('49'), start_date=timezone.now(),
            end_date=timezone.now() + timedelta(days=20), status=Subscription.ACTIVE,
        )

        response = client_for(developer).post(
            '/api/users/enable-admin', {'admin_id': admin.pk, 'enable': False}, format='json'
        )

        assert response.status_code == 200
        admin.refresh_from_db()
        assert not admin.is_active
        assert admin.disabled_by_developer
        assert not Account.objects.get(pk=student.pk).is_active
        assert not Account.objects.get(pk=teacher.pk).is_active
        active.refresh_from_db()
        assert active.status == Subscription.EXPIRED

    def test_developer_disabled_tenant_stays_off_after_payment_approval(self, client_for, developer, admin,
                                                                         student, subscription):
        client_for(developer).post('/api/users/enable-admin', {'admin_id': admin.pk, 'enable': False}, format='json')
        subscription.status = Subscription.PROCESSING
        subscription.save()

        response = client_for(developer).post(
            '/api/subscriptions/verify', {'subscription_id': subscription.pk, 'approved': True}, format='json'
        )

        assert response.status_code == 200
        subscription.refresh_from_db()
        assert subscription.status == Subscription.ACTIVE
        assert not Account.objects.get(pk=admin.pk).is_active
        assert not Account.objects.get(pk=student.pk).is_active

    def test_developer_enables_tenant_and_restarts_subscription(self, client_for, developer, admin, student,
                                                                subscription):
        client_for(developer).post('/api/users/enable-admin', {'admin_id': admin.pk, 'enable': False}, format='json')

        response = client_for(developer).post(
            '/api/users/enable-admin', {'admin_id': admin.pk, 'enable': True}, format='json'
        )

        assert response.status_code == 200
        assert response.json()['subscription_extended'] is True
        admin.refresh_from_db()
        assert admin.is_active
        assert not admin.disabled_by_developer
        assert Account.objects.get(pk=student.pk).is_active
        subscription.refresh_from_db()
        assert subscription.status == Subscription.ACTIVE
        assert subscription.end_date > timezone.now() + timedelta(days=27)

    def test_only_developers_switch_admins(self, client_for, admin):
        response = client_for(admin).post(
            '/api/users/enable-admin', {'admin_id': admin.pk, 'enable': False}, format='json'
        )

        assert response.status_code == 403
        assert Account.objects.get(pk=admin.pk).is_active

    def test_unknown_admin(self, client_for, developer, student):
        response = client_for(developer).post(
            '/api/users/enable-admin', {'admin_id': student.pk, 'enable': True}, format='json'
        )

        assert response.status_code == 404
