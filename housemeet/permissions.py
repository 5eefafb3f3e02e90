"""Role checks for the house meet API."""

from __future__ import annotations

from rest_framework import permissions

ADMINISTRATORS_GROUP = "Administrators"
OFFICIALS_GROUP = "Officials"


def _in_group(user, *names: str) -> bool:
    return user.groups.filter(name__in=names).exists()


def is_administrator(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    return user.is_superuser or user.is_staff or _in_group(user, ADMINISTRATORS_GROUP)


def is_official(user) -> bool:
    """Officials and administrators may record results."""

    if is_administrator(user):
        return True
    return bool(user and user.is_authenticated and _in_group(user, OFFICIALS_GROUP))


class IsAdministratorOrReadOnly(permissions.BasePermission):
    message = "Only administrators can change meet setup."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_administrator(request.user)


class IsOfficialOrReadOnly(permissions.BasePermission):
    message = "Only officials can submit results."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_official(request.user)
