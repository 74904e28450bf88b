"""
Standardized API response helpers.

Provides consistent JSON response format across all API endpoints:

    Success:    {"success": true, "data": {...}, "message": "..."}
    Paginated:  {"success": true, "data": [...], "pagination": {...}}
    Error:      {"success": false, "error": "message", "conflicts": [...]}

Usage:
    from utils.api_response import api_success, api_error

    return api_success(data=booking, message='Booking created', status=201)
    return api_error('Booking not found', status=404)
"""

from flask import jsonify
from typing import Any


def api_success(
    data: Any = None,
    message: str | None = None,
    status: int = 200,
    **extra_fields: Any
) -> tuple:
    """
    Build a standardized success JSON response.

    Args:
        data: Optional payload to include as 'data' key.
        message: Optional success message.
        status: HTTP status code (default 200).
        **extra_fields: Additional top-level fields to include in the response.

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': True}

    if data is not None:
        response['data'] = data

    if message:
        response['message'] = message

    if extra_fields:
        response.update(extra_fields)

    return jsonify(response), status


def api_paginated(result: dict, message: str | None = None) -> tuple:
    """
    Build a paginated list response from a model listing result.

    Args:
        result: dict with items, total, page, per_page, pages

    Returns:
        Tuple of (Response, status_code)
    """
    return api_success(
        data=result['items'],
        message=message,
        pagination={
            'page': result['page'],
            'per_page': result['per_page'],
            'total': result['total'],
            'pages': result['pages'],
        }
    )


def api_error(error: str, status: int = 400, **extra_fields: Any) -> tuple:
    """
    Build a standardized error JSON response.

    Args:
        error: Error message.
        status: HTTP status code (default 400).
        **extra_fields: Additional top-level fields (e.g., conflicts).

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': False, 'error': error}

    # Merge extra fields for additional error context
    if extra_fields:
        response.update(extra_fields)

    return jsonify(response), status
