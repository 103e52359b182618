"""
Type mapping utilities for converting Python annotations to index field types.
"""

import types
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Type, Union, get_args, get_origin

from search_builder.schema.fields import FieldType


class TypeMapper:
    """Maps Python types to search index field types."""

    # Scalar annotations
    PYTHON_TYPE_MAP: Dict[Type, FieldType] = {
        str: FieldType.TEXT,
        int: FieldType.NUMERIC,
        float: FieldType.NUMERIC,
        bool: FieldType.TAG,
        # Dates are stored as ISO-8601 strings, so they match exactly
        date: FieldType.TAG,
        datetime: FieldType.TAG,
    }

    # Element types of list annotations
    SEQUENCE_ITEM_MAP: Dict[Type, FieldType] = {
        str: FieldType.TAG,
    }

    @classmethod
    def get_field_type(cls, annotation: Any) -> Optional[FieldType]:
        """
        Get the index field type for a Python annotation.

        Args:
            annotation: Type annotation, e.g. `str`, `Optional[int]`, `List[str]`

        Returns:
            Matching FieldType, or None when the annotation cannot be indexed
        """
        annotation = cls._unwrap_optional(annotation)
        origin = get_origin(annotation)

        if origin in (list, tuple, set, frozenset):
            args = get_args(annotation)
            if not args:
                return None
            return cls.SEQUENCE_ITEM_MAP.get(args[0])

        if isinstance(annotation, type) and issubclass(annotation, Enum):
            return FieldType.TAG

        return cls.PYTHON_TYPE_MAP.get(annotation)

    @staticmethod
    def _unwrap_optional(annotation: Any) -> Any:
        """Strip `Optional[...]` so `Optional[int]` maps like `int`."""
        if get_origin(annotation) in (Union, types.UnionType):
            args = [arg for arg in get_args(annotation) if arg is not type(None)]
            if len(args) == 1:
                return args[0]
        return annotation
