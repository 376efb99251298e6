from .admin import AdminNotificationView, FollowUpNotificationView, ProfileListView, ProfileUpdateView
from .customers import (
    ContactSearchView,
    CustomerDetailView,
    CustomerListView,
    CustomerRequestDetailView,
    CustomerRequestEmailView,
    CustomerRequestListView,
    CustomerRequestPdfView,
    CustomerRequestStatusView,
)
from .documents import ClaimLetterView, DocumentDeleteView, DocumentDownloadView, DocumentListView
from .items import (
    BatchDeleteItemsView,
    BatchUpdateItemsView,
    ItemsExportView,
    ItemsStockSyncView,
    SyncValidationView,
)
from .leads import LeadCenterView, LeadDetailView, LeadSearchView, LeadStatsView
from .reports import CurrentWeekView, MTDExportView, MTDReportView, TurnoverView, WeekDetailView, WeekListView

__all__ = [
    "AdminNotificationView",
    "BatchDeleteItemsView",
    "BatchUpdateItemsView",
    "ClaimLetterView",
    "ContactSearchView",
    "CurrentWeekView",
    "CustomerDetailView",
    "CustomerListView",
    "CustomerRequestDetailView",
    "CustomerRequestEmailView",
    "CustomerRequestListView",
    "CustomerRequestPdfView",
    "CustomerRequestStatusView",
    "DocumentDeleteView",
    "DocumentDownloadView",
    "DocumentListView",
    "FollowUpNotificationView",
    "ItemsExportView",
    "ItemsStockSyncView",
    "LeadCenterView",
    "LeadDetailView",
    "LeadSearchView",
    "LeadStatsView",
    "MTDExportView",
    "MTDReportView",
    "ProfileListView",
    "ProfileUpdateView",
    "SyncValidationView",
    "TurnoverView",
    "WeekDetailView",
    "WeekListView",
]
