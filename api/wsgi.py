# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
WSGI entry point.

Exposes the application as ``app`` for gunicorn and serverless hosts.
"""

from app import create_app

app = create_app()

if __name__ == "__main__":
    # Local development server
    app.run(host="0.0.0.0", port=app.config_obj.port, debug=app.config_obj.debug)
