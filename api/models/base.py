# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base document models with common fields and serialization helpers.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model whose wire and storage keys are camelCase."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        alias_generator=to_camel,
        populate_by_name=True,
        # Use enum values instead of enum objects
        use_enum_values=True,
        validate_assignment=True
    )


class BaseDocument(CamelModel):
    """Base for records persisted in the store."""

    id: Optional[str] = Field(None, description="Store identifier")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    def to_document(self) -> Dict[str, Any]:
        """Storage representation; the store assigns id and timestamps."""
        return self.model_dump(
            by_alias=True,
            exclude={'id', 'created_at', 'updated_at'}
        )

    def to_response(self) -> Dict[str, Any]:
        """JSON-ready representation with camelCase keys."""
        return self.model_dump(mode='json', by_alias=True)
