# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request validation middleware using Pydantic models.
Validated request structs are passed to route handlers as ``payload``.
"""

from functools import wraps
from flask import request
from typing import Type, Callable, Dict, Any, List
from pydantic import BaseModel, ValidationError
from opentelemetry import trace
import logging

from middleware.error_handler import ValidationException

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


def format_validation_errors(validation_error: ValidationError) -> List[Dict[str, Any]]:
    """
    Format Pydantic validation errors for API response.

    Args:
        validation_error: Pydantic ValidationError

    Returns:
        List of formatted error dictionaries
    """
    errors = []

    for error in validation_error.errors():
        field_path = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field_path,
            "message": error["msg"],
            "type": error["type"]
        })

    return errors


def summarize_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """One-line message naming the first offending field."""
    if not errors:
        return "Invalid request body"
    first = errors[0]
    missing = [e["field"] for e in errors if e["type"] == "missing"]
    if missing:
        return f"{', '.join(missing)} required"
    return f"{first['field']}: {first['message']}" if first["field"] else first["message"]


def parse_model(model_class: Type[BaseModel], data: Dict[str, Any]) -> BaseModel:
    """Validate a dict against a model, raising ValidationException on failure."""
    try:
        return model_class.model_validate(data)
    except ValidationError as e:
        validation_errors = format_validation_errors(e)
        logger.warning(
            "Request validation failed",
            extra={
                "model": model_class.__name__,
                "path": request.path,
                "method": request.method,
                "errors": validation_errors
            }
        )
        raise ValidationException(summarize_validation_errors(validation_errors), validation_errors)


def validate_json(model_class: Type[BaseModel]) -> Callable:
    """
    Decorator to validate the JSON request body against a Pydantic model.

    A missing or non-object body is validated as an empty object, so required
    fields are reported by name.
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated_function(*args, **kwargs):
            with tracer.start_as_current_span("validation.validate_json_body") as span:
                span.set_attributes({
                    "validation.model": model_class.__name__,
                    "http.method": request.method,
                    "http.path": request.path
                })

                json_data = request.get_json(silent=True)
                if not isinstance(json_data, dict):
                    json_data = {}

                try:
                    payload = parse_model(model_class, json_data)
                except ValidationException:
                    span.set_attribute("validation.result", "validation_error")
                    raise

                span.set_attribute("validation.result", "success")

            return f(*args, payload=payload, **kwargs)

        return decorated_function
    return decorator
