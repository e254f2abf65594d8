"""
Health Check Service

Reports on the record store, the notification pipeline and basic process
metrics.
"""

import os
import time
import psutil
from datetime import datetime
from typing import Dict, Any, List
from opentelemetry import trace

from services.mongodb import MongoDBService
from services.notifications import NotificationDispatcher

tracer = trace.get_tracer(__name__)

SERVICE_NAME = "citybeatflow-api"
SERVICE_VERSION = "1.0.0"


class HealthCheckService:
    """Service for system health monitoring."""

    def __init__(self, mongodb_service: MongoDBService, dispatcher: NotificationDispatcher,
                 environment: str = 'development'):
        self.mongodb_service = mongodb_service
        self.dispatcher = dispatcher
        self.environment = environment

    def get_comprehensive_health(self) -> Dict[str, Any]:
        """Health of every dependency plus system metrics."""
        with tracer.start_as_current_span("health.comprehensive_check") as span:
            start_time = time.time()

            mongodb_health = self._check_mongodb_health()
            mail_health = self._check_mail_health()

            overall_status = self._determine_overall_status([
                mongodb_health["status"],
                mail_health["status"]
            ])
            response_time_ms = round((time.time() - start_time) * 1000, 2)

            span.set_attributes({
                "health.overall_status": overall_status,
                "health.response_time_ms": response_time_ms,
                "health.mongodb_status": mongodb_health["status"]
            })

            return {
                "status": overall_status,
                "service": SERVICE_NAME,
                "version": SERVICE_VERSION,
                "environment": self.environment,
                "timestamp": datetime.utcnow().isoformat() + "Z",
                "response_time_ms": response_time_ms,
                "dependencies": {
                    "mongodb": mongodb_health,
                    "mail": mail_health
                },
                "system_metrics": self._get_system_metrics()
            }

    def _check_mongodb_health(self) -> Dict[str, Any]:
        with tracer.start_as_current_span("health.mongodb_check") as span:
            start_time = time.time()
            health_info = self.mongodb_service.health_check()
            health_info["response_time_ms"] = round((time.time() - start_time) * 1000, 2)
            health_info["last_check"] = datetime.utcnow().isoformat() + "Z"
            span.set_attribute("mongodb.status", health_info["status"])
            return health_info

    def _check_mail_health(self) -> Dict[str, Any]:
        """Email is optional: an unconfigured transport reports as disabled, not unhealthy."""
        return {
            "status": "healthy" if self.dispatcher.enabled else "disabled",
            "queued": self.dispatcher.queued
        }

    def _get_system_metrics(self) -> Dict[str, Any]:
        """Get basic process and host metrics."""
        try:
            process = psutil.Process(os.getpid())
            memory = psutil.virtual_memory()

            return {
                "cpu_percent": psutil.cpu_percent(interval=None),
                "memory": {
                    "used_mb": round(memory.used / 1024 / 1024, 2),
                    "total_mb": round(memory.total / 1024 / 1024, 2),
                    "percent": memory.percent
                },
                "process": {
                    "rss_mb": round(process.memory_info().rss / 1024 / 1024, 2),
                    "uptime_seconds": round(time.time() - process.create_time(), 2),
                    "threads": process.num_threads()
                }
            }
        except Exception as e:
            return {"error": f"Failed to get system metrics: {str(e)}"}

    @staticmethod
    def _determine_overall_status(statuses: List[str]) -> str:
        """The store is required; other dependencies only degrade the service."""
        if statuses and statuses[0] == "unhealthy":
            return "unhealthy"
        if any(s == "unhealthy" for s in statuses[1:]):
            return "degraded"
        return "healthy"
