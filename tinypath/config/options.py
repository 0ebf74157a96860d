"""Per-call option models.

Each I/O call takes an explicit, frozen options model. Unknown fields are a
construction error rather than being silently ignored, and every field has
a defined default (ambient defaults come from :mod:`tinypath.config.defaults`).
"""

from __future__ import annotations

import os
import re
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import InvalidArgument
from . import defaults

M = TypeVar("M", bound="_Options")


class Binmode(Enum):
    """Encoding/transformation applied to file content."""

    DEFAULT = "default"  # host ambient encoding, universal newlines
    RAW = "raw"  # bytes passthrough
    UTF8 = "utf8"  # strict UTF-8, no newline translation

    @classmethod
    def parse(cls, value: Any) -> "Binmode":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidArgument(f"binmode must be a string or Binmode, got {type(value).__name__}")
        key = value.strip().lower()
        try:
            return cls(_BINMODE_SPELLINGS[key])
        except KeyError:
            raise InvalidArgument(f"unsupported binmode: {value!r}") from None

    @property
    def is_binary(self) -> bool:
        return self is Binmode.RAW

    def open_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``open()`` in this mode (mode letter excluded)."""
        if self is Binmode.RAW:
            return {}
        if self is Binmode.UTF8:
            return {"encoding": "utf-8", "errors": "strict", "newline": ""}
        return {}


_BINMODE_SPELLINGS = {
    "": "default",
    "default": "default",
    "raw": "raw",
    ":raw": "raw",
    ":unix": "raw",
    "utf8": "utf8",
    "utf-8": "utf8",
    ":utf8": "utf8",
    ":encoding(utf-8)": "utf8",
    ":raw:encoding(utf-8)": "utf8",
}


def _ambient_binmode() -> Binmode:
    return Binmode.parse(defaults.IO.binmode)


class _Options(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class ReadOptions(_Options):
    binmode: Binmode = Field(default_factory=_ambient_binmode)

    @field_validator("binmode", mode="before")
    @classmethod
    def _parse_binmode(cls, v: Any) -> Binmode:
        return Binmode.parse(v)


class LinesOptions(ReadOptions):
    count: Optional[int] = None
    chomp: bool = False

    @field_validator("count")
    @classmethod
    def _nonzero(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v == 0:
            raise ValueError("count must be a non-zero integer")
        return v


class WriteOptions(ReadOptions):
    fsync: bool = Field(default_factory=lambda: defaults.IO.fsync)


class IterOptions(_Options):
    recurse: bool = False
    follow_symlinks: bool = False


class TreeOptions(_Options):
    safe: bool = True
    mode: int = 0o777


class TempOptions(_Options):
    template: str = Field(
        default_factory=lambda: defaults.TEMP.template,
        validation_alias=AliasChoices("template", "TEMPLATE"),
    )
    suffix: str = ""
    dir: Optional[str] = None
    tmpdir: Optional[bool] = None

    @field_validator("template")
    @classmethod
    def _template(cls, v: str) -> str:
        if "/" in v or "\\" in v:
            raise ValueError("template must be a single path component")
        if not re.search(r"X{4,}$", v):
            raise ValueError("template must end with at least four 'X' characters")
        return v

    @field_validator("suffix")
    @classmethod
    def _suffix(cls, v: str) -> str:
        if "/" in v or "\\" in v:
            raise ValueError("suffix must not contain path separators")
        return v

    @field_validator("dir", mode="before")
    @classmethod
    def _dir(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        try:
            raw = os.fspath(v)
        except TypeError as exc:
            raise ValueError("dir must be path-like") from exc
        if not raw:
            raise ValueError("dir must not be empty")
        return raw


def build_options(
    model: Type[M], options: Optional[Any] = None, overrides: Optional[Mapping[str, Any]] = None
) -> M:
    """Return a validated ``model`` instance from an instance/mapping plus keyword overrides.

    Raises:
        InvalidArgument: If a field is unknown or fails validation
    """
    if isinstance(options, model) and not overrides:
        return options
    data: Dict[str, Any] = {}
    if isinstance(options, BaseModel):
        data.update(options.model_dump(exclude_unset=True))
    elif isinstance(options, Mapping):
        data.update(options)
    elif options is not None:
        raise InvalidArgument(f"options must be a {model.__name__} or a mapping")
    if overrides:
        data.update(overrides)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidArgument(f"invalid {model.__name__}: {e}") from e


__all__ = [
    "Binmode",
    "ReadOptions",
    "LinesOptions",
    "WriteOptions",
    "IterOptions",
    "TreeOptions",
    "TempOptions",
    "build_options",
]
