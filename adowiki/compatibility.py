"""
Collect Azure DevOps wiki pages as searchable documents.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import dataclasses
import sys
from typing import Any, ClassVar, Protocol, TypeVar

if sys.version_info >= (3, 12):
    from typing import override as override  # noqa: F401
else:
    from typing_extensions import override as override  # noqa: F401


class DataclassInstance(Protocol):
    __dataclass_fields__: ClassVar[dict[str, dataclasses.Field[Any]]]


D = TypeVar("D", bound=DataclassInstance)


def merged(target: D, source: D) -> D:
    """
    Fills in each field of a data-class left unset with the value of the same field in another instance.

    A field counts as unset when it is `None` or an empty list. Always creates and returns a new data-class instance.
    """

    updates = {f.name: getattr(source, f.name) for f in dataclasses.fields(target) if getattr(target, f.name) in (None, [])}
    return dataclasses.replace(target, **updates)
