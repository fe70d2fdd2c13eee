"""Templates for generated information documents.

Templates use ``str.format`` placeholders. A custom template file may use
any subset of TEMPLATE_FIELDS.
"""

TEMPLATE_FIELDS = (
    "title",
    "kind",
    "qualified_name",
    "description",
    "creator",
    "created",
    "columns",
    "history",
    "dependencies",
    "definition_link",
)

DEFAULT_INFO_TEMPLATE = """# {title}

{description}

## Columns

{columns}

## Change history

{history}

## Dependencies

{dependencies}
"""

COLUMNS_HEADER = """Name|Type|Length|Precision|Scale|Collation|Nullable|Identity
--|--|--|--|--|--|--|--"""

HISTORY_HEADER = """User|Date|Comment
--|--|--"""

DEPENDENCIES_HEADER = """DB|Schema|Table/View
--|--|--"""
