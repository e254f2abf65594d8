# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - Record store, email delivery and the issue workflow.
"""

from .mongodb import MongoDBService, DuplicateRecordError

__all__ = [
    "MongoDBService",
    "DuplicateRecordError"
]
