from django.apps import AppConfig
from django.conf import settings


class DICoreConfig(AppConfig):
    name = "di_core"
    verbose_name = "Dependency injection"

    def ready(self) -> None:
        from di_core import containers

        container = containers.AppContainer()
        container.config.from_dict(
            {
                "CALENDAR_RECURRENCE_MAX_SPAN_DAYS": settings.CALENDAR_RECURRENCE_MAX_SPAN_DAYS,
            }
        )

        # Only modules declaring `Provide` markers need wiring
        container.wire(
            modules=[
                "calendar_events.views",
                "calendar_events.services.calendar_event_service",
            ],
        )

        containers.container = container
