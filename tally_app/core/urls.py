from django.urls import path

from core import (
    views_admin,
    views_auth,
    views_health,
    views_public,
    views_staff,
)

urlpatterns = [
    path("api/auth/session", views_auth.auth_session, name="auth-session"),
    path("api/auth/login", views_auth.auth_login, name="auth-login"),
    path("api/auth/logout", views_auth.auth_logout, name="auth-logout"),
    path("api/auth/heartbeat", views_auth.auth_heartbeat, name="auth-heartbeat"),

    path("api/staff/submit", views_staff.staff_submit, name="staff-submit"),
    path("api/staff/live", views_staff.staff_live, name="staff-live"),
    path("api/staff/unit-init", views_staff.staff_unit_init, name="staff-unit-init"),

    path("api/public/results", views_public.public_results, name="public-results"),
    path(
        "api/public/results.<str:export_format>",
        views_public.public_results_export,
        name="public-results-export",
    ),
    path("api/public/chart-data", views_public.public_chart_data, name="public-chart-data"),
    path("api/public/audit-feed", views_public.public_audit_feed, name="public-audit-feed"),
    path("api/candidates", views_public.candidates_list, name="candidates-list"),
    path("api/units", views_public.units_list, name="units-list"),

    path("api/admin/config", views_admin.admin_config, name="admin-config"),

    path("healthz", views_health.healthz, name="healthz"),
    path("readyz", views_health.readyz, name="readyz"),
]
