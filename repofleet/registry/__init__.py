"""Repository registry — abstract store plus JSON-file and PostgREST backends."""

from .base import RepositoryRegistry
from .json_file import JsonFileRegistry
from .postgrest import PostgrestRegistry

__all__ = ["JsonFileRegistry", "PostgrestRegistry", "RepositoryRegistry"]
