from django.http import Http404

from rest_framework import mixins
from rest_framework.viewsets import GenericViewSet

from organizations.models import Organization, OrganizationMembership


class OrganizationScopedViewMixin:
    """
    Resolves the tenant of the authenticated user and scopes the viewset queryset to it.
    """

    def get_organization(self) -> Organization:
        user = self.request.user
        try:
            return user.organization_membership.organization
        except (OrganizationMembership.DoesNotExist, AttributeError) as e:
            raise Http404("Organization not found for the user.") from e

    def get_queryset(self):
        organization = self.get_organization()
        return super().get_queryset().filter_by_organization(organization.id)


class FilterOnlyOnListMixin:
    def filter_queryset(self, queryset):
        if self.action != "list":
            return queryset
        return super().filter_queryset(queryset)


class ServiceBackedModelViewSet(
    OrganizationScopedViewMixin,
    FilterOnlyOnListMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.ListModelMixin,
    mixins.DestroyModelMixin,
    GenericViewSet,
):
    """
    A viewset for tenant-owned models whose writes are delegated to a service layer.
    Subclasses override `create`, `update` and `destroy` to call their service; reads
    are served straight from the tenant-scoped queryset.
    """

    pass
