# core/pagination.py

# Import math because the page count rounds up.
import math

# Import settings from django.conf because page sizes are configurable.
from django.conf import settings

# Import ValidationError because a page or limit below one is a client error.
from .exceptions import ValidationError

DEFAULT_PAGE = 1


def _parse_positive(raw, default, name):
    # Missing or non-numeric values fall back to the default
    if raw in (None, ''):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    if value < 1:
        raise ValidationError(f'{name} must be at least 1')
    return value


"""
Reads 'page' and 'limit' from a query dict. 'page' defaults to 1,
'limit' defaults to MESSAGING_DEFAULT_PAGE_SIZE and is capped at
MESSAGING_MAX_PAGE_SIZE.
"""
def get_page_params(query):
    page = _parse_positive(query.get('page'), DEFAULT_PAGE, 'page')
    limit = _parse_positive(query.get('limit'), settings.MESSAGING_DEFAULT_PAGE_SIZE, 'limit')
    return page, min(limit, settings.MESSAGING_MAX_PAGE_SIZE)


def page_bounds(page, limit):
    offset = (page - 1) * limit
    return offset, offset + limit


def build_pagination(page, limit, total):
    return {
        'currentPage': page,
        'totalPages': math.ceil(total / limit) if limit else 0,
        'totalItems': total,
        'hasNextPage': page * limit < total,
        'hasPrevPage': page > 1,
        'limit': limit,
    }
