import importlib

import pytest
from django.contrib.auth import get_user_model

from core.apps import _create_admin_user
from crm.models import SalesProfile

pytestmark = pytest.mark.django_db


def test_health_check_is_public(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.content == b"ok"


def test_root_redirects_to_dashboard(client, sales_user):
    client.force_login(sales_user)
    resp = client.get("/")
    assert resp.status_code == 302
    assert resp.url == "/dashboard/"


def test_dashboard_requires_login(client):
    resp = client.get("/dashboard/")
    assert resp.status_code == 302
    assert resp.url.startswith("/admin/login/")

    resp = client.get("/dashboard/", HTTP_ACCEPT="application/json")
    assert resp.status_code == 401


def test_dashboard_reports_backend_errors(client, sales_user):
    client.force_login(sales_user)
    resp = client.get("/dashboard/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["mtd_summary"] is None
    assert body["turnover"] is None
    assert body["errors"] == ["Supabase is not configured", "Supabase is not configured"]


def test_dashboard_with_backend(client, sales_user, fake_supabase):
    fake_supabase.rpc_results["get_daily_sales_mtd"] = []
    fake_supabase.rpc_results["get_sales_target_amount"] = 100
    fake_supabase.rpc_results["get_accurate_monthly_turnover"] = []
    client.force_login(sales_user)
    body = client.get("/dashboard/").json()
    assert body["errors"] == []
    assert body["mtd_summary"]["target_amount"] == 100
    assert body["turnover"]["total_turnover"] == 0


def test_admin_user_created_when_password_configured(settings):
    settings.SALESDESK_ADMIN_PASSWORD = "pw-admin-123"
    _create_admin_user(sender=None)
    _create_admin_user(sender=None)

    user = get_user_model().objects.get(username="admin")
    assert user.is_superuser
    assert user.check_password("pw-admin-123")
    assert SalesProfile.objects.get(user=user).role == SalesProfile.ROLE_ADMIN


def test_admin_user_not_created_without_password(settings):
    settings.SALESDESK_ADMIN_PASSWORD = ""
    _create_admin_user(sender=None)
    assert not get_user_model().objects.filter(username="admin").exists()


def test_settings_default_to_production(monkeypatch):
    for name in ("DJANGO_DEBUG", "DJANGO_SECRET_KEY", "DJANGO_ALLOWED_HOSTS"):
        monkeypatch.delenv(name, raising=False)

    import salesdesk.settings as settings_mod
    try:
        importlib.reload(settings_mod)
        assert settings_mod.DEBUG is False
        assert settings_mod.ALLOWED_HOSTS == ["localhost", "127.0.0.1"]
        assert not settings_mod.SECRET_KEY.startswith("django-insecure")
        assert not hasattr(settings_mod, "SUPABASE_URL")

        monkeypatch.setenv("DJANGO_DEBUG", "1")
        importlib.reload(settings_mod)
        assert settings_mod.SECRET_KEY == "django-insecure-salesdesk-dev-key"
    finally:
        monkeypatch.undo()
        importlib.reload(settings_mod)
