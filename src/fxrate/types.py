"""Shared types for the storage layer."""

from typing import Any

Row = dict[str, Any]
Params = tuple | list | dict
