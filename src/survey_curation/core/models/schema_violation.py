"""
Schema violations reported by the SchemaValidator.
"""

from typing import Literal, Union

from pydantic import BaseModel


class MissingColumn(BaseModel):
    """An expected column is absent from the table."""

    kind: Literal["MissingColumn"] = "MissingColumn"
    column: str

    def __str__(self) -> str:
        return f"MissingColumn({self.column})"


class WrongType(BaseModel):
    """A column's declared type does not belong to the expected type class."""

    kind: Literal["WrongType"] = "WrongType"
    column: str
    expected: str
    observed: str

    def __str__(self) -> str:
        return f"WrongType({self.column}: expected {self.expected}, observed {self.observed})"


SchemaViolation = Union[MissingColumn, WrongType]
