# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for CityBeatFlow.

This package contains pure business logic functions with no side effects.
"""
