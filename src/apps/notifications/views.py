from datetime import timedelta

from django.conf import settings
from django.contrib.auth.decorators import login_required
from django.core.paginator import Paginator
from django.http import HttpResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.views.decorators.http import require_POST

from .models import Notification


def _group_by_age(notifications):
    today = timezone.localdate()
    yesterday = today - timedelta(days=1)
    week_start = today - timedelta(days=7)

    grouped = {
        "today": [],
        "yesterday": [],
        "this_week": [],
        "older": [],
    }
    for note in notifications:
        note_date = timezone.localtime(note.created_at).date()
        if note_date == today:
            grouped["today"].append(note)
        elif note_date == yesterday:
            grouped["yesterday"].append(note)
        elif note_date >= week_start:
            grouped["this_week"].append(note)
        else:
            grouped["older"].append(note)
    return grouped


@login_required
def notification_list(request):
    notifications = Notification.objects.filter(recipient=request.user).order_by(
        "-created_at"
    )
    paginator = Paginator(notifications, settings.CITADEL_PAGE_SIZE)
    page = paginator.get_page(request.GET.get("page"))
    return render(
        request,
        "notifications/notification_list.html",
        {"page_obj": page, "grouped": _group_by_age(page.object_list)},
    )


@login_required
def notification_go(request, pk: int):
    notification = get_object_or_404(Notification, pk=pk, recipient=request.user)
    if not notification.is_read:
        notification.is_read = True
        notification.save(update_fields=["is_read"])
    return redirect(notification.link or "notifications:list")


@login_required
@require_POST
def mark_all_read(request):
    Notification.objects.filter(recipient=request.user, is_read=False).update(is_read=True)
    return redirect("notifications:list")


@login_required
def notification_count(request):
    count = Notification.objects.filter(recipient=request.user, is_read=False).count()
    return HttpResponse(str(count), content_type="text/plain")
