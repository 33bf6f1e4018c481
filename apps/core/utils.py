"""
Helper utilities for role scoping and request inspection
"""


def scope_to_user(queryset, user, field='agent'):
    """
    Restrict a queryset to the rows the user may see:
    - Manager / superuser: everything
    - Agent: rows where `field` points at the user

    `field` may traverse relations, e.g. 'lead__agent' for documents.

    Returns:
        QuerySet (empty for anonymous users)
    """
    if user is None or not user.is_authenticated:
        return queryset.none()

    if user.is_manager():
        return queryset

    return queryset.filter(**{field: user})


def is_ajax(request):
    """True when the request was sent with X-Requested-With: XMLHttpRequest"""
    return request.headers.get('X-Requested-With') == 'XMLHttpRequest'
