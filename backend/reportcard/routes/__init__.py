"""HTTP controllers grouped by area.

Controllers are thin: they accept requests, delegate to services and
convert the returned ORM rows into response schemas explicitly (so
eagerly loaded relations are serialized too).
"""

from typing import Iterable, List, Type, TypeVar

from pydantic import BaseModel

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def read_all(schema: Type[SchemaT], rows: Iterable) -> List[SchemaT]:
    return [schema.model_validate(row) for row in rows]
