"""
Health check route.
"""

from flask import current_app, jsonify


def register_routes(bp):
    """Register health routes on the blueprint."""

    @bp.route('/health')
    def health_check():
        """
        Health check endpoint.

        Returns:
            JSON with status and version
        """
        return jsonify({
            'status': 'ok',
            'version': current_app.config.get('APP_VERSION', '1.0.0'),
            'app': current_app.config.get('APP_NAME', 'BillboardOps')
        })
