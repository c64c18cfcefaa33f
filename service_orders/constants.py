from django.db.models import TextChoices


class ServiceOrderStatus(TextChoices):
    PENDING = "pending", "Pending"
    SCHEDULED = "scheduled", "Scheduled"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED = "completed", "Completed"
    PAYMENT_ORDER_CREATED = "payment_order_created", "Payment Order Created"
    CANCELLED = "cancelled", "Cancelled"
