# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request and response utilities shared by the route blueprints.
"""

from flask import request, jsonify
from typing import Any, Dict, Iterable, Optional, Type
import logging

from models.base import BaseDocument

logger = logging.getLogger(__name__)


class RequestParser:
    """Utility for extracting request data."""

    @staticmethod
    def get_query_param(name: str) -> Optional[str]:
        """Stripped query parameter, or None when absent or blank."""
        value = request.args.get(name)
        if value is None:
            return None
        value = value.strip()
        return value or None


class ResponseBuilder:
    """Renders stored records through their entity models."""

    @staticmethod
    def record(model_class: Type[BaseDocument], record: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if record is None:
            return None
        return model_class.model_validate(record).to_response()

    @staticmethod
    def records(model_class: Type[BaseDocument], records: Iterable[Dict[str, Any]]) -> list:
        return [model_class.model_validate(r).to_response() for r in records]

    @classmethod
    def json(cls, model_class: Type[BaseDocument], record: Optional[Dict[str, Any]], status_code: int = 200):
        return jsonify(cls.record(model_class, record)), status_code

    @classmethod
    def json_list(cls, model_class: Type[BaseDocument], records: Iterable[Dict[str, Any]]):
        return jsonify(cls.records(model_class, records))
