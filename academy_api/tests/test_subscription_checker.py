from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from academy.models import Account, Notification, Subscription
from academy.services import EXPIRED_TITLE, EXPIRING_SOON_TITLE, SubscriptionExpiryChecker

pytestmark = pytest.mark.django_db


@pytest.fixture
def make_subscription(admin):
    def _make(end_date, status=Subscription.ACTIVE, owner=None, plan=Subscription.MONTHLY):
        return Subscription.objects.create(
            admin=owner or admin,
            plan=plan,
            amount=Decimal('49.00'),
            currency='USD',
            start_date=timezone.now() - timedelta(days=30),
            end_date=end_date,
            status=status,
        )

    return _make


def test_expired_subscription_disables_the_tenant(make_subscription, make_account, admin, student, parent, teacher):
    other_admin = make_account(Account.ADMIN)
    other_student = make_account(Account.STUDENT, admin=other_admin)
    developer = make_account(Account.DEVELOPER)
    subscription = make_subscription(timezone.now() - timedelta(days=1))

    result = SubscriptionExpiryChecker().run()

    assert result['subscriptionsExpired'] == 1
    assert result['adminsDisabled'] == 1
    assert result['errors'] == 0
    assert result['totalExpiredSubscriptions'] == 1

    subscription.refresh_from_db()
    assert subscription.status == Subscription.EXPIRED
    for account in (admin, student, parent, teacher):
        account.refresh_from_db()
        assert not account.is_active
    for account in (other_admin, other_student, developer):
        account.refresh_from_db()
        assert account.is_active

    notice = Notification.objects.get(receiver=admin, title=EXPIRED_TITLE)
    assert notice.type == Notification.SUBSCRIPTION_DUE
    assert notice.sender == admin


def test_already_disabled_admin_is_not_counted(make_subscription, admin):
    admin.is_active = False
    admin.save()
    subscription = make_subscription(timezone.now() - timedelta(days=1))

    result = SubscriptionExpiryChecker().run()

    subscription.refresh_from_db()
    assert subscription.status == Subscription.EXPIRED
    assert result['subscriptionsExpired'] == 1
    assert result['adminsDisabled'] == 0
    assert not Notification.objects.filter(title=EXPIRED_TITLE).exists()


def test_expired_subscriptions_are_not_reprocessed(make_subscription):
    make_subscription(timezone.now() - timedelta(days=1))
    checker = SubscriptionExpiryChecker()

    checker.run()
    second = checker.run()

    assert second['subscriptionsExpired'] == 0
    assert second['totalExpiredSubscriptions'] == 0
    assert Notification.objects.filter(title=EXPIRED_TITLE).count() == 1


def test_lifetime_and_inactive_subscriptions_never_expire(make_subscription, admin):
    make_subscription(None, plan=Subscription.LIFETIME)
    make_subscription(timezone.now() - timedelta(days=10), status=Subscription.PENDING)

    result = SubscriptionExpiryChecker().run()

    assert result['subscriptionsExpired'] == 0
    admin.refresh_from_db()
    assert admin.is_active


def test_warning_sent_once_per_day(make_subscription, admin):
    make_subscription(timezone.now() + timedelta(days=3))

    first = SubscriptionExpiryChecker().run()
    second = SubscriptionExpiryChecker().run()

    assert first['warningsSent'] == 1
    assert first['totalExpiringSubscriptions'] == 1
    assert second['warningsSent'] == 0
    assert Notification.objects.filter(receiver=admin, title=EXPIRING_SOON_TITLE).count() == 1


def test_no_warning_outside_the_window(make_subscription):
    make_subscription(timezone.now() + timedelta(days=8))

    result = SubscriptionExpiryChecker().run()

    assert result['warningsSent'] == 0
    assert result['totalExpiringSubscriptions'] == 0


def test_one_failing_subscription_does_not_halt_the_batch(make_subscription, make_account, monkeypatch):
    make_subscription(timezone.now() - timedelta(days=1))
    broken_admin = make_account(Account.ADMIN)
    broken = make_subscription(timezone.now() - timedelta(days=2), owner=broken_admin)

    original_expire = SubscriptionExpiryChecker.expire

    def expire(self, subscription):
        if subscription.pk == broken.pk:
            raise RuntimeError('boom')
        return original_expire(self, subscription)

    monkeypatch.setattr(SubscriptionExpiryChecker, 'expire', expire)

    result = SubscriptionExpiryChecker().run()

    assert result['subscriptionsExpired'] == 1
    assert result['errors'] == 1
    broken.refresh_from_db()
    assert broken.status == Subscription.ACTIVE
