"""API routes for the CRM app."""

from django.urls import path

from .views import (
    AdminNotificationView,
    BatchDeleteItemsView,
    BatchUpdateItemsView,
    ClaimLetterView,
    ContactSearchView,
    CurrentWeekView,
    CustomerDetailView,
    CustomerListView,
    CustomerRequestDetailView,
    CustomerRequestEmailView,
    CustomerRequestListView,
    CustomerRequestPdfView,
    CustomerRequestStatusView,
    DocumentDeleteView,
    DocumentDownloadView,
    DocumentListView,
    FollowUpNotificationView,
    ItemsExportView,
    ItemsStockSyncView,
    LeadCenterView,
    LeadDetailView,
    LeadSearchView,
    LeadStatsView,
    MTDExportView,
    MTDReportView,
    ProfileListView,
    ProfileUpdateView,
    SyncValidationView,
    TurnoverView,
    WeekDetailView,
    WeekListView,
)

urlpatterns = [
    path("reports/mtd/", MTDReportView.as_view(), name="mtd_report"),
    path("reports/mtd/export/", MTDExportView.as_view(), name="mtd_export"),
    path("reports/turnover/", TurnoverView.as_view(), name="turnover"),
    path("weeks/current/", CurrentWeekView.as_view(), name="current_week"),
    path("weeks/<int:year>/", WeekListView.as_view(), name="weeks"),
    path("weeks/<int:year>/<int:week>/", WeekDetailView.as_view(), name="week_detail"),
    path("items/batch-update/", BatchUpdateItemsView.as_view(), name="items_batch_update"),
    path("items/batch-delete/", BatchDeleteItemsView.as_view(), name="items_batch_delete"),
    path("items/export/", ItemsExportView.as_view(), name="items_export"),
    path("items/stock-sync/", ItemsStockSyncView.as_view(), name="items_stock_sync"),
    path("items/stock-sync/validate/", SyncValidationView.as_view(), name="items_stock_sync_validate"),
    path("customers/", CustomerListView.as_view(), name="customers"),
    path("customers/<str:code>/", CustomerDetailView.as_view(), name="customer_detail"),
    path("contacts/", ContactSearchView.as_view(), name="contacts"),
    path("customer-requests/", CustomerRequestListView.as_view(), name="customer_requests"),
    path(
        "customer-requests/<str:request_id>/",
        CustomerRequestDetailView.as_view(),
        name="customer_request_detail",
    ),
    path(
        "customer-requests/<str:request_id>/status/",
        CustomerRequestStatusView.as_view(),
        name="customer_request_status",
    ),
    path(
        "customer-requests/<str:request_id>/email/",
        CustomerRequestEmailView.as_view(),
        name="customer_request_email",
    ),
    path(
        "customer-requests/<str:request_id>/pdf/",
        CustomerRequestPdfView.as_view(),
        name="customer_request_pdf",
    ),
    path("leads/", LeadSearchView.as_view(), name="leads"),
    path("leads/center/", LeadCenterView.as_view(), name="lead_center"),
    path("leads/center/stats/", LeadStatsView.as_view(), name="lead_center_stats"),
    path("leads/<str:lead_id>/", LeadDetailView.as_view(), name="lead_detail"),
    path("documents/", DocumentListView.as_view(), name="documents"),
    path("documents/delete/", DocumentDeleteView.as_view(), name="documents_delete"),
    path("documents/download/<path:path>", DocumentDownloadView.as_view(), name="document_download"),
    path("claims/letter/", ClaimLetterView.as_view(), name="claim_letter"),
    path("admin/profiles/", ProfileListView.as_view(), name="profiles"),
    path("admin/profiles/<str:user_id>/", ProfileUpdateView.as_view(), name="profile_update"),
    path("notifications/follow-up/", FollowUpNotificationView.as_view(), name="follow_up_notification"),
    path("notifications/admin/", AdminNotificationView.as_view(), name="admin_notification"),
]
