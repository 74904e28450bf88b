"""Query-string pagination and sorting helpers for list endpoints."""

from flask import current_app, request


def get_pagination_params() -> tuple:
    """
    Read page/per_page from the request, clamped to configured limits.

    Returns:
        tuple: (page, per_page)
    """
    default_size = current_app.config.get('ITEMS_PER_PAGE', 20)
    max_size = current_app.config.get('MAX_ITEMS_PER_PAGE', 100)

    page = max(1, request.args.get('page', 1, type=int) or 1)
    per_page = request.args.get('per_page', default_size, type=int) or default_size
    per_page = min(max_size, max(1, per_page))
    return page, per_page


def get_sort_params(allowed_fields: list, default_field: str = 'created_at') -> tuple:
    """
    Read sort_by/sort_order from the request.

    Unknown fields fall back to the default; order defaults to descending.

    Returns:
        tuple: (sort_by, sort_order)
    """
    sort_by = request.args.get('sort_by')
    if sort_by not in allowed_fields:
        sort_by = default_field
    sort_order = 'asc' if request.args.get('sort_order') == 'asc' else 'desc'
    return sort_by, sort_order


def paginate_query(cursor, query: str, count_query: str, params: list,
                   order_by: str, page: int, per_page: int) -> dict:
    """
    Run a listing query and its count, returning the standard page dict.

    Args:
        cursor: Database cursor
        query: SELECT without ORDER/LIMIT
        count_query: Matching COUNT(*) AS total query
        params: Shared filter parameters
        order_by: ORDER BY clause body
        page: 1-based page number
        per_page: Items per page

    Returns:
        dict: {items, total, page, per_page, pages}
    """
    cursor.execute(count_query, params)
    total = cursor.fetchone()['total']

    cursor.execute(
        f'{query} ORDER BY {order_by} LIMIT ? OFFSET ?',
        list(params) + [per_page, (page - 1) * per_page]
    )
    items = [dict(row) for row in cursor.fetchall()]

    return {
        'items': items,
        'total': total,
        'page': page,
        'per_page': per_page,
        'pages': (total + per_page - 1) // per_page
    }
