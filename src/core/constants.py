"""Core constants used across JSON store modules.

This module centralizes payload keys and file-format literals.
Keeping values here avoids magic strings in codec and IO logic.
"""

from __future__ import annotations

IDENTIFIER_KEY = "persistent_identifier"
ATTRIBUTES_KEY = "attributes"
RELATIONSHIPS_KEY = "relationships"
STORE_IDENTIFIER_KEY = "store_identifier"
ENTITY_NAME_KEY = "entity_name"
PRIMARY_KEY_KEY = "primary_key"
DOCUMENT_ENCODING = "utf-8"
DOCUMENT_INDENT = 2
TEMP_FILE_SUFFIX = ".tmp"
