from django.db import models

from organizations.models import OrganizationModel


class Customer(OrganizationModel):
    """
    A customer that receives field service visits.
    """

    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone_number = models.CharField(max_length=30, blank=True)

    def __str__(self):
        return self.name
