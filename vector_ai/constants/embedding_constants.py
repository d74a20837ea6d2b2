"""
Embedding Constants

Table/column names and defaults shared by the table and embedding endpoints.
"""

# Supporting table that stores every generated embedding
EMBEDDINGS_TABLE_NAME = "vector_embeddings"

# JSON column added to source tables to hold each row's latest vector
EMBEDDINGS_COLUMN_NAME = "embeddings"

# row_id used for schema-level embeddings in vector_embeddings
SCHEMA_ROW_ID = "__schema__"

# Fields checked, in order, when describing a row in its embedding text
DESCRIPTIVE_FIELDS = ["name", "title", "username", "email", "description"]

# Long string values are cut to this many characters in row embedding text
ROW_VALUE_PREVIEW_LENGTH = 100

# Pagination defaults
DEFAULT_TABLE_LIMIT = 10
DEFAULT_SAMPLE_LIMIT = 5
DEFAULT_EMBEDDINGS_LIMIT = 10
DEFAULT_ALL_EMBEDDINGS_LIMIT = 20
MAX_PAGE_LIMIT = 1000
