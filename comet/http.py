"""
Request/response helpers shared by the JSON views.
"""

import json

from django.core.paginator import Paginator
from django.http import JsonResponse


class BadRequest(ValueError):
    pass


def json_body(request):
    """
    Payload of a JSON request, falling back to form fields.

    Raises:
        BadRequest: Body is not valid JSON or not an object
    """
    if request.content_type == 'application/json':
        if not request.body:
            return {}
        try:
            data = json.loads(request.body)
        except json.JSONDecodeError:
            raise BadRequest("Invalid JSON body")
        if not isinstance(data, dict):
            raise BadRequest("JSON body must be an object")
        return data
    return request.POST.dict()


def text_field(data, key, default='', strip=True):
    """
    String value of ``key``. Missing or null gives ``default``.

    Raises:
        BadRequest: Value is present but not a string
    """
    value = data.get(key, default)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise BadRequest(f"{key} must be a string")
    return value.strip() if strip else value


def list_field(data, key, default=None):
    value = data.get(key, default)
    if value is None:
        return []
    if not isinstance(value, list):
        raise BadRequest(f"{key} must be a list")
    return value


def int_field(data, key):
    """Integer value of ``key`` or None when missing. Digit strings are accepted."""
    value = data.get(key)
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise BadRequest(f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequest(f"{key} must be an integer")


TRUE_STRINGS = ('true', '1', 'yes', 'on')
FALSE_STRINGS = ('false', '0', 'no', 'off', '')


def bool_field(data, key, default=False):
    """
    Boolean value of ``key``. Form posts send strings, so "false" and "0" are False.

    Raises:
        BadRequest: Value is not a boolean or a recognised boolean string
    """
    value = data.get(key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    raise BadRequest(f"{key} must be true or false")


def error(message, status=400):
    return JsonResponse({"error": message}, status=status)


def paginate(request, queryset, serialize, per_page=10):
    paginator = Paginator(queryset, per_page)
    page = paginator.get_page(request.GET.get('page'))
    return {
        "results": [serialize(obj) for obj in page.object_list],
        "page": page.number,
        "num_pages": paginator.num_pages,
        "count": paginator.count,
        "has_next": page.has_next(),
    }
