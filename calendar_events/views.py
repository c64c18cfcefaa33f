from typing import Annotated, NoReturn

from django.http import Http404

from dependency_injector.wiring import Provide, inject
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from calendar_events.constants import UpdateScope
from calendar_events.exceptions import CalendarEventError, OccurrenceNotFoundError
from calendar_events.filtersets import CalendarEventFilterSet
from calendar_events.models import CalendarEvent
from calendar_events.serializers import (
    CalendarEventCompleteSerializer,
    CalendarEventCreateSerializer,
    CalendarEventDeletionResultSerializer,
    CalendarEventSerializer,
    CalendarEventUpdateSerializer,
)
from calendar_events.services.calendar_event_service import CalendarEventService
from common.utils.view_utils import ServiceBackedModelViewSet


SCOPE_PARAMETER = OpenApiParameter(
    name="scope",
    type=str,
    enum=UpdateScope.values,
    required=False,
    description="Occurrences of a recurring series affected by the change. Defaults to `single`.",
)


def raise_calendar_event_error(error: CalendarEventError) -> NoReturn:
    if isinstance(error, OccurrenceNotFoundError):
        raise Http404(str(error)) from error
    raise ValidationError({"non_field_errors": [str(error)], "code": error.code}) from error


@extend_schema_view(
    list=extend_schema(summary="List calendar events"),
    retrieve=extend_schema(summary="Retrieve calendar event"),
)
class CalendarEventViewSet(ServiceBackedModelViewSet):
    """
    ViewSet for managing calendar events and recurring series.
    """

    filterset_class = CalendarEventFilterSet
    queryset = CalendarEvent.objects.all()
    serializer_class = CalendarEventSerializer
    lookup_value_converter = "int"
    http_method_names = ("get", "post", "patch", "delete", "head", "options")

    def get_queryset(self):
        return super().get_queryset().with_participants()

    @inject
    def list(
        self,
        request,
        *args,
        calendar_event_service: Annotated[
            CalendarEventService, Provide["calendar_event_service"]
        ],
        **kwargs,
    ):
        filterset = self.filterset_class(data=request.query_params, request=request)
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)

        queryset = calendar_event_service.list_events(
            self.get_organization(), filterset.to_list_filters()
        )
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        serializer = self.get_serializer(queryset, many=True)
        return Response(serializer.data)

    @extend_schema(
        summary="Create calendar event",
        description=(
            "Create a calendar event. When `recurring_config` is given, a recurring series is "
            "created and the list of its occurrences is returned."
        ),
        request=CalendarEventCreateSerializer,
        responses={201: CalendarEventSerializer(many=True)},
    )
    @inject
    def create(
        self,
        request,
        *args,
        calendar_event_service: Annotated[
            CalendarEventService, Provide["calendar_event_service"]
        ],
        **kwargs,
    ):
        serializer = CalendarEventCreateSerializer(
            data=request.data, context=self.get_serializer_context()
        )
        serializer.is_valid(raise_exception=True)

        try:
            created = calendar_event_service.create_event(
                self.get_organization(), request.user, serializer.to_input_data()
            )
        except CalendarEventError as e:
            raise_calendar_event_error(e)

        return Response(
            self.get_serializer(created, many=isinstance(created, list)).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        summary="Update calendar event",
        description="Update a calendar event and, depending on `scope`, other occurrences of its series.",
        parameters=[SCOPE_PARAMETER],
        request=CalendarEventUpdateSerializer,
        responses={200: CalendarEventSerializer},
    )
    @inject
    def update(
        self,
        request,
        *args,
        calendar_event_service: Annotated[
            CalendarEventService, Provide["calendar_event_service"]
        ],
        **kwargs,
    ):
        serializer = CalendarEventUpdateSerializer(
            data=request.data, partial=True, context=self.get_serializer_context()
        )
        serializer.is_valid(raise_exception=True)

        try:
            event = calendar_event_service.update_event(
                self.get_organization(),
                request.user,
                int(self.kwargs["pk"]),
                serializer.to_update_data(),
                scope=request.query_params.get("scope"),
            )
        except CalendarEventError as e:
            raise_calendar_event_error(e)

        if event is None:
            raise Http404("Calendar event not found.")
        return Response(self.get_serializer(event).data)

    @extend_schema(
        summary="Delete calendar event",
        description="Delete a calendar event and, depending on `scope`, other occurrences of its series.",
        parameters=[SCOPE_PARAMETER],
        responses={200: CalendarEventDeletionResultSerializer},
    )
    @inject
    def destroy(
        self,
        request,
        *args,
        calendar_event_service: Annotated[
            CalendarEventService, Provide["calendar_event_service"]
        ],
        **kwargs,
    ):
        try:
            result = calendar_event_service.delete_event(
                self.get_organization(),
                request.user,
                int(self.kwargs["pk"]),
                scope=request.query_params.get("scope"),
            )
        except CalendarEventError as e:
            raise_calendar_event_error(e)

        return Response(CalendarEventDeletionResultSerializer(result).data)

    @extend_schema(
        summary="Complete calendar event",
        description="Mark a calendar event as completed, completing its linked service order.",
        request=CalendarEventCompleteSerializer,
        responses={200: CalendarEventSerializer},
    )
    @action(
        methods=["POST"],
        detail=True,
        url_path="complete",
        url_name="complete",
    )
    @inject
    def complete(
        self,
        request,
        pk,
        calendar_event_service: Annotated[
            CalendarEventService, Provide["calendar_event_service"]
        ],
    ):
        serializer = CalendarEventCompleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            event = calendar_event_service.complete_event(
                self.get_organization(),
                request.user,
                int(pk),
                notes=serializer.validated_data.get("notes"),
            )
        except CalendarEventError as e:
            raise_calendar_event_error(e)

        return Response(self.get_serializer(event).data)
