#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Flag pending issues older than the escalation threshold.

Meant to run from cron; issues already flagged are left alone.
"""

import sys
import os
import logging

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import AppConfig
from services.mongodb import MongoDBService
from services.escalation import EscalationScanner

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main():
    config = AppConfig.from_env()
    mongodb_service = MongoDBService(config.mongodb_uri, config.mongodb_db)
    try:
        scanner = EscalationScanner(mongodb_service, config.escalation_days)
        escalated = scanner.escalate_overdue()
        logger.info(f"Escalated {len(escalated)} overdue issue(s)")
    except Exception as e:
        logger.error(f"Escalation run failed: {e}")
        sys.exit(1)
    finally:
        mongodb_service.close_connection()


if __name__ == "__main__":
    main()
