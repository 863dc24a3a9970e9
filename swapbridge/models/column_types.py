"""Column Types — persistence-boundary conversions for domain values.

Invariants:
    - DelimitedList stores an ordered list[str] as "a,b,c" and reads it back in order
    - An empty list is stored as NULL; NULL and "" both read back as []
    - Items containing the delimiter are rejected on write (never silently split)
"""

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator


class DelimitedList(TypeDecorator):
    """Ordered list of strings serialized to a delimited TEXT column."""

    impl = Text
    cache_ok = True

    def __init__(self, delimiter: str = ",", *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.delimiter = delimiter

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        items = list(value)
        for item in items:
            if self.delimiter in item:
                raise ValueError(
                    f"List item {item!r} contains delimiter {self.delimiter!r}",
                )
        return self.delimiter.join(items) or None

    def process_result_value(self, value, dialect):
        if not value:
            return []
        return value.split(self.delimiter)
