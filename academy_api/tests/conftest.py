from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth.hashers import make_password
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from academy.models import Account, AdminSettings, FeeDefinition, ParentStudent


@pytest.fixture
def make_account(db):
    counter = {'n': 0}

    def _make(role, admin=None, **kwargs):
        counter['n'] += 1
        defaults = {
            'name': f"{role.title()} {counter['n']}",
            'email': f"{role.lower()}{counter['n']}@example.com",
            'password': make_password('secret123'),
        }
        defaults.update(kwargs)
        return Account.objects.create(role=role, admin=admin, **defaults)

    return _make


@pytest.fixture
def developer(make_account):
    return make_account(Account.DEVELOPER)


@pytest.fixture
def admin(make_account):
    account = make_account(Account.ADMIN)
    AdminSettings.objects.create(admin=account, default_currency='EUR')
    return account


@pytest.fixture
def student(make_account, admin):
    return make_account(Account.STUDENT, admin=admin)


@pytest.fixture
def parent(make_account, admin, student):
    account = make_account(Account.PARENT, admin=admin)
    ParentStudent.objects.create(parent=account, student=student)
    return account


@pytest.fixture
def teacher(make_account, admin):
    return make_account(Account.TEACHER, admin=admin, pay_rate=Decimal('1500.00'), pay_type='monthly')


@pytest.fixture
def make_definition(admin, student):
    def _make(**kwargs):
        defaults = {
            'title': 'Tuition',
            'amount': Decimal('100.00'),
            'currency': 'USD',
            'fee_type': FeeDefinition.MONTHLY,
            'generation_day': 5,
            'start_date': date(2024, 1, 5),
            'student': student,
            'admin': admin,
        }
        defaults.update(kwargs)
        return FeeDefinition.objects.create(**defaults)

    return _make


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    """An APIClient carrying a JWT access token for the given account."""

    def _client(account):
        payload = {'user_id': account.pk, 'role': account.role, 'name': account.name}
        access = RefreshToken().access_token
        for k, v in payload.items():
            access[k] = v
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        return api_client

    return _client
