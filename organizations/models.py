from django.conf import settings
from django.db import models

from common.models import BaseModel
from organizations.managers import BaseOrganizationModelManager


class Organization(BaseModel):
    """
    Represents a field service company. Every tenant-owned record points to one.
    """

    name = models.CharField(max_length=255)

    def __str__(self):
        return self.name


class OrganizationMembership(BaseModel):
    """
    Represents a membership of a user in an organization.
    The membership decides which tenant the user's requests operate on.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="organization_membership",
    )
    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="memberships",
    )

    def __str__(self):
        return f"{self.user} in {self.organization}"


class OrganizationModel(BaseModel):
    """
    Represents a model that is owned by an organization.
    Queries should always be scoped with `filter_by_organization`.
    """

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="The organization this model is associated with. Queries should use the `organization` field.",
    )

    objects: BaseOrganizationModelManager = BaseOrganizationModelManager()

    class Meta:
        abstract = True
