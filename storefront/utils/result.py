# storefront/utils/result.py
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STOCK_CONFLICT = "stock_conflict"
    PERSISTENCE = "persistence"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    message: str
    kind: ErrorKind = ErrorKind.PERSISTENCE


#albo wartosc albo powod bledu, bez wyjatkow miedzy warstwami
Result = Union[Ok[T], Err]
