# SPDX-License-Identifier: Apache-2.0

"""
Middleware package for request processing.

This package contains middleware components for error rendering, request
validation, optional caller identity and CORS.
"""
