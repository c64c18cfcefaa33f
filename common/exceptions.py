class CommonError(Exception):
    """Base exception for common app errors"""

    pass


class OrganizationRequiredError(CommonError, ValueError):
    def __init__(self, message="`organization` is required to create an instance."):
        super().__init__(message)


class OrganizationUpdateError(CommonError, ValueError):
    def __init__(self, message="`organization` cannot be updated."):
        super().__init__(message)
