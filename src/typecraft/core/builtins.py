"""
Built-in types that may be referenced without a DSL declaration.

They are reached through imports, e.g. ``use uuid.UUID``. The generator
decides how each one is validated and (de)serialized.
"""

BUILTIN_TYPES = frozenset(
    {
        "uuid.UUID",
        "datetime.datetime",
        "datetime.date",
        "decimal.Decimal",
    }
)


def is_builtin(fqcn: str) -> bool:
    return fqcn in BUILTIN_TYPES
