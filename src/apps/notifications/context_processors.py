from .models import Notification


def notifications_unread(request):
    user = getattr(request, "user", None)
    if not user or not user.is_authenticated:
        return {"notifications_unread_count": 0}
    return {
        "notifications_unread_count": Notification.objects.filter(
            recipient=user, is_read=False
        ).count()
    }
