"""
Schemata to help validation of input.

This code is based on: https://github.com/carbonplan/xarray-schema

which has the following MIT license:

    MIT License

    Copyright (c) 2021 carbonplan

    Permission is hereby granted, free of charge, to any person obtaining a copy
    of this software and associated documentation files (the "Software"), to deal
    in the Software without restriction, including without limitation the rights
    to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
    copies of the Software, and to permit persons to whom the Software is
    furnished to do so, subject to the following conditions:

    The above copyright notice and this permission notice shall be included in all
    copies or substantial portions of the Software.

    THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
    IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
    FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
    AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
    LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
    OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
    SOFTWARE.

Here the schemata validate numpy arrays (raster cell values) and pandas
columns (feature table attributes) instead of xarray objects.
"""

import abc
from enum import Enum
from typing import Any, Iterable

import numpy as np
import pandas as pd
from numpy.typing import DTypeLike  # noqa: F401

from geofund.errors import SchemaError

_TEMPORAL = ("date", "datetime", "datetime64", "time")


class ColumnType(Enum):
    """Semantic type of a feature table attribute column."""

    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    STRING = "string"
    DATETIME = "datetime"

    @classmethod
    def infer(cls, column: pd.Series) -> "ColumnType":
        if isinstance(column.dtype, pd.CategoricalDtype):
            return cls.CATEGORICAL
        if pd.api.types.is_datetime64_any_dtype(column.dtype):
            return cls.DATETIME
        if pd.api.types.is_numeric_dtype(column.dtype):
            return cls.NUMERIC
        # Object columns of datetime.date, datetime.time or Timestamp values
        if pd.api.types.infer_dtype(column, skipna=True) in _TEMPORAL:
            return cls.DATETIME
        return cls.STRING


class BaseSchema(abc.ABC):
    @abc.abstractmethod
    def validate(self, obj: Any, **kwargs) -> None:
        pass

    def __or__(self, other):
        """
        This allows us to write:

        DTypeSchema(np.integer) | DTypeSchema(np.floating)

        And get a SchemaUnion back.
        """
        return SchemaUnion(self, other)


class SchemaUnion:
    """
    Succesful validation only requires a single succes.

    Used to validate multiple options.
    """

    def __init__(self, *args):
        ntypes = len(set(type(arg) for arg in args))
        if ntypes > 1:
            raise TypeError("schemata in a union should have the same type")
        self.schemata = tuple(args)

    def validate(self, obj: Any, **kwargs):
        errors = []
        for schema in self.schemata:
            try:
                schema.validate(obj, **kwargs)
            except SchemaError as e:
                errors.append(e)

        if len(errors) == len(self.schemata):  # All schemata failed
            message = "\n\t" + "\n\t".join(str(error) for error in errors)
            raise SchemaError(f"No option succeeded:{message}")

    def __or__(self, other):
        return SchemaUnion(*self.schemata, other)


class DTypeSchema(BaseSchema):
    def __init__(self, dtype: DTypeLike) -> None:
        if dtype in [
            np.floating,
            np.integer,
            np.signedinteger,
            np.unsignedinteger,
            np.generic,
        ]:
            self.dtype = dtype
        else:
            self.dtype = np.dtype(dtype)

    def validate(self, obj: np.ndarray, **kwargs) -> None:
        if not np.issubdtype(obj.dtype, self.dtype):
            raise SchemaError(f"dtype {obj.dtype} != {self.dtype}")


class NdimSchema(BaseSchema):
    def __init__(self, ndim: int) -> None:
        self.ndim = ndim

    def validate(self, obj: np.ndarray, **kwargs) -> None:
        if obj.ndim != self.ndim:
            raise SchemaError(f"number of dimensions {obj.ndim} != {self.ndim}")


class ColumnTypeSchema(BaseSchema):
    """
    Validate that a pandas column holds values of a semantic type.

    STRING columns may contain missing values, but every present value must
    be a ``str``.
    """

    def __init__(self, column_type: ColumnType) -> None:
        self.column_type = ColumnType(column_type)

    def validate(self, obj: pd.Series, **kwargs) -> None:
        name = kwargs.get("name", obj.name)
        if self.column_type == ColumnType.STRING:
            present = obj[obj.notna()]
            wrong = [v for v in present if not isinstance(v, str)]
            if wrong:
                raise SchemaError(
                    f"column {name!r} is declared {self.column_type.value}, but"
                    f" contains non-string values such as {wrong[0]!r}"
                )
            return

        actual = ColumnType.infer(obj)
        if actual != self.column_type:
            raise SchemaError(
                f"column {name!r} is declared {self.column_type.value}, but has"
                f" dtype {obj.dtype} ({actual.value})"
            )


class ColumnsSchema(BaseSchema):
    """
    Validate the column names of a DataFrame against the declared names.
    """

    def __init__(self, columns: Iterable[str], allow_extra_keys: bool = False):
        self.columns = tuple(columns)
        self.allow_extra_keys = allow_extra_keys

    def validate(self, obj: pd.DataFrame, **kwargs) -> None:
        actual = list(obj.columns)
        missing_keys = set(self.columns) - set(actual)
        if missing_keys:
            raise SchemaError(f"columns missing from attributes: {sorted(missing_keys)}")

        if not self.allow_extra_keys:
            extra_keys = set(actual) - set(self.columns)
            if extra_keys:
                raise SchemaError(
                    f"attributes have undeclared columns: {sorted(extra_keys)}"
                )


class LengthSchema(BaseSchema):
    """
    Validate that the object has as many rows as the keyword argument named
    ``other``.
    """

    def __init__(self, other: str) -> None:
        self.other = other

    def validate(self, obj: Any, **kwargs) -> None:
        other_obj = kwargs[self.other]
        if len(obj) != len(other_obj):
            raise SchemaError(
                f"number of rows {len(obj)} does not match number of rows of"
                f" {self.other}: {len(other_obj)}"
            )
