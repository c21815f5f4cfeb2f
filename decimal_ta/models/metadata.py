"""
Descriptors for indicator parameters and outputs.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple


class ParamType(Enum):
    """Accepted parameter types."""
    INTEGER = "integer"
    DECIMAL = "decimal"
    ENUM = "enum"
    BOOLEAN = "boolean"


class OutputType(Enum):
    SINGLE_VALUE = "single_value"
    MULTI_VALUE = "multi_value"


@dataclass(frozen=True)
class ParamDescriptor:
    """Describes one accepted option of an indicator."""
    name: str
    type: ParamType
    description: str
    default: Any = None
    required: bool = False
    min: Optional[Any] = None
    max: Optional[Any] = None
    options: Optional[Tuple[str, ...]] = None
    exclusive_min: bool = False
    nullable: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "default": self.default,
            "required": self.required,
            "min": self.min,
            "max": self.max,
            "options": list(self.options) if self.options else None,
            "description": self.description,
        }


@dataclass(frozen=True)
class OutputDescriptor:
    """Describes the shape of an indicator's result value."""
    type: OutputType
    description: str
    fields: Tuple[str, ...] = ()
    example: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "fields": list(self.fields),
            "description": self.description,
            "example": self.example,
        }
