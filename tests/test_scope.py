import pytest
from django.contrib.auth.models import AnonymousUser

from crm.models import SalesProfile
from crm.services.scope import Requester, requester_for, resolve_salesperson


def test_anonymous_user_is_not_admin():
    assert requester_for(AnonymousUser()) == Requester(is_admin=False)
    assert requester_for(None) == Requester(is_admin=False)


@pytest.mark.django_db
def test_requester_from_sales_profile(sales_user):
    requester = requester_for(sales_user)
    assert requester.is_admin is False
    assert requester.spp_code == "SPP01"
    assert requester.user_id == str(sales_user.pk)


@pytest.mark.django_db
def test_superuser_without_profile_is_admin(django_user_model):
    user = django_user_model.objects.create_superuser("root", email="", password="pw-root-123")
    requester = requester_for(user)
    assert requester.is_admin is True
    assert requester.spp_code is None


@pytest.mark.django_db
def test_blank_spp_code_is_none(django_user_model):
    user = django_user_model.objects.create_user(username="x", password="pw-x-12345")
    SalesProfile.objects.create(user=user, spp_code="")
    assert requester_for(user).spp_code is None


def test_non_admin_always_sees_own_code():
    requester = Requester(is_admin=False, spp_code="SPP01")
    assert resolve_salesperson(requester, "SPP99") == "SPP01"
    assert resolve_salesperson(requester, "all") == "SPP01"
    assert resolve_salesperson(Requester(is_admin=False), "SPP99") is None


@pytest.mark.parametrize("selected, expected", [(None, None), ("", None), ("all", None), ("SPP07", "SPP07")])
def test_admin_selection(selected, expected):
    assert resolve_salesperson(Requester(is_admin=True, spp_code="ADM"), selected) == expected


@pytest.mark.django_db
def test_backend_user_id_is_preferred(django_user_model):
    user = django_user_model.objects.create_user(username="linked", password="pw-linked-1")
    SalesProfile.objects.create(user=user, spp_code="SPP07", backend_user_id="0b7e-uuid")
    assert requester_for(user).user_id == "0b7e-uuid"
