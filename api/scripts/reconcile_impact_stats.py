#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Raise NGO impact counters to at least what the issue collection shows.

Repairs counters left behind when the second write of an NGO claim or a
solved transition failed.
"""

import sys
import os
import logging

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import AppConfig
from services.mongodb import MongoDBService
from services.notifications import NotificationDispatcher, ReporterNotifier
from services.claims import ClaimCoordinator

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main():
    config = AppConfig.from_env()
    mongodb_service = MongoDBService(config.mongodb_uri, config.mongodb_db)
    try:
        # No emails are sent while reconciling
        notifier = ReporterNotifier(mongodb_service, NotificationDispatcher())
        reconciled = ClaimCoordinator(mongodb_service, notifier).reconcile_all()
        logger.info(f"Reconciled impact stats for {reconciled} NGO(s)")
    except Exception as e:
        logger.error(f"Reconciliation failed: {e}")
        sys.exit(1)
    finally:
        mongodb_service.close_connection()


if __name__ == "__main__":
    main()
