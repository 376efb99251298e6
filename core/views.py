from django.http import HttpResponse, JsonResponse
from django.utils import timezone

from crm.exceptions import ServiceError
from crm.services import mtd_service, turnover_service
from crm.services.scope import requester_for, resolve_salesperson


def health_check(request):
    return HttpResponse("ok")


def dashboard(request):
    """Return the current month's MTD summary and turnover as JSON.

    A failing backend call leaves its section empty and reports the error
    instead of failing the whole dashboard.
    """

    requester = requester_for(request.user)
    today = timezone.localdate()
    data = {"year": today.year, "month": today.month, "errors": []}

    try:
        report = mtd_service.get_mtd_report(requester, today.year, today.month, today=today)
        data["mtd_summary"] = report.as_dict()["summary"]
    except ServiceError as exc:
        data["mtd_summary"] = None
        data["errors"].append(str(exc))

    try:
        data["turnover"] = turnover_service.get_turnover_overview(
            requester, today.replace(month=1, day=1), today, resolve_salesperson(requester)
        )
    except ServiceError as exc:
        data["turnover"] = None
        data["errors"].append(str(exc))

    return JsonResponse(data)
