from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from academy.models import Account, Fee, FeeDefinition, Subscription
from academy.services import FeeGenerator

pytestmark = pytest.mark.django_db

GENERATE_FEES_URL = '/api/cron/generate-fees'
CHECK_SUBSCRIPTIONS_URL = '/api/cron/check-subscriptions'


class TestGenerateFeesEndpoint:
    def test_rejects_missing_secret(self, api_client):
        response = api_client.post(GENERATE_FEES_URL)

        assert response.status_code == 401
        assert response.json() == {'detail': 'Unauthorized'}

    def test_rejects_wrong_secret(self, api_client, make_definition):
        make_definition(fee_type=FeeDefinition.ONCE, start_date=date(2024, 1, 1))

        response = api_client.post(GENERATE_FEES_URL, HTTP_AUTHORIZATION='Bearer not-the-secret')

        assert response.status_code == 401
        assert not Fee.objects.exists()

    def test_rejects_user_token(self, client_for, admin):
        response = client_for(admin).post(GENERATE_FEES_URL)

        assert response.status_code == 401

    @pytest.mark.parametrize('header', ['Bearer \u00e9', 'Bearer cl\u00e9-secret'])
    def test_rejects_non_ascii_secret(self, api_client, header):
        response = api_client.post(GENERATE_FEES_URL, HTTP_AUTHORIZATION=header)

        assert response.status_code == 401
        assert response.json() == {'detail': 'Unauthorized'}

    def test_only_post_is_allowed(self, api_client):
        response = api_client.get(GENERATE_FEES_URL, HTTP_AUTHORIZATION='Bearer test-cron-secret')
        assert response.status_code == 405

        # Method is checked before the secret
        response = api_client.put(GENERATE_FEES_URL)
        assert response.status_code == 405

    def test_runs_generation(self, api_client, make_definition):
        make_definition(fee_type=FeeDefinition.ONCE, start_date=date(2024, 1, 1))
        make_definition(start_date=timezone.localdate() + timedelta(days=40))

        response = api_client.post(GENERATE_FEES_URL, HTTP_AUTHORIZATION='Bearer test-cron-secret')

        assert response.status_code == 200
        assert response.json() == {
            'message': 'Fee generation completed successfully',
            'generated': 1,
            'skipped': 1,
            'errors': 0,
            'total': 2,
        }

    def test_unexpected_failure_returns_500(self, api_client, monkeypatch):
        def run(self):
            raise RuntimeError('database unavailable')

        monkeypatch.setattr(FeeGenerator, 'run', run)

        response = api_client.post(GENERATE_FEES_URL, HTTP_AUTHORIZATION='Bearer test-cron-secret')

        assert response.status_code == 500
        assert response.json() == {'message': 'Internal server error'}


class TestApiKeyEndpoints:
    def test_check_subscriptions_requires_api_key(self, api_client):
        assert api_client.post(CHECK_SUBSCRIPTIONS_URL).status_code == 401
        assert api_client.post(CHECK_SUBSCRIPTIONS_URL, HTTP_X_API_KEY='wrong').status_code == 401

    def test_rejects_non_ascii_api_key(self, api_client):
        response = api_client.post(CHECK_SUBSCRIPTIONS_URL, HTTP_X_API_KEY='cl\u00e9')

        assert response.status_code == 401
        assert response.json() == {'detail': 'Unauthorized'}

    def test_check_subscriptions(self, api_client, admin, student):
        Subscription.objects.create(
            admin=admin, plan=Subscription.MONTHLY, amount=Decimal('49'), start_date=timezone.now(),
            end_date=timezone.now() - timedelta(hours=1), status=Subscription.ACTIVE,
        )

        response = api_client.post(CHECK_SUBSCRIPTIONS_URL, HTTP_X_API_KEY='test-cron-api-key')

        assert response.status_code == 200
        body = response.json()
        assert body['message'] == 'Subscription check completed'
        assert body['subscriptionsExpired'] == 1
        assert body['adminsDisabled'] == 1
        assert body['warningsSent'] == 0
        assert body['totalExpiredSubscriptions'] == 1
        assert body['totalExpiringSubscriptions'] == 0
        assert not Account.objects.get(pk=student.pk).is_active

    @pytest.mark.parametrize('url,message,keys', [
        ('/api/cron/generate-monthly-fees', 'Monthly fee generation completed',
         {'feesCreated', 'errors', 'totalAssignments'}),
        ('/api/cron/generate-monthly-salaries', 'Monthly salary generation completed',
         {'salariesCreated', 'errors', 'totalTeachers'}),
        ('/api/cron/reminders', 'Reminders sent successfully',
         {'feeReminders', 'subscriptionReminders'}),
    ])
    def test_monthly_jobs(self, api_client, url, message, keys):
        assert api_client.get(url, HTTP_X_API_KEY='test-cron-api-key').status_code == 405

        response = api_client.post(url, HTTP_X_API_KEY='test-cron-api-key')

        assert response.status_code == 200
        body = response.json()
        assert body.pop('message') == message
        assert set(body) == keys
