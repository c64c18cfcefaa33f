from typing import TypedDict

from rest_framework.viewsets import GenericViewSet, ModelViewSet, ViewSet, ViewSetMixin


class RouteDict(TypedDict):
    """
    A router registration entry: the URL prefix, the viewset mounted on it and its basename.
    """

    regex: str
    viewset: type[GenericViewSet] | type[ViewSet] | type[ModelViewSet] | type[ViewSetMixin]
    basename: str
