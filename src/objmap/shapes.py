"""Shape classification for declared types."""

import array
import decimal
import enum
import fractions
import functools
import types
from typing import Literal

Shape = Literal["opaque", "exact", "dynamic"]
OPAQUE_BASE_TYPES: tuple[type, ...] = (
    enum.Enum,
    bool,
    int,
    float,
    complex,
    decimal.Decimal,
    fractions.Fraction,
    str,
    bytes,
    list,
    bytearray,
    array.array,
    memoryview,
    range,
)
CALLABLE_TYPES: tuple[type, ...] = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.MethodWrapperType,
    types.WrapperDescriptorType,
    types.MethodDescriptorType,
    functools.partial,
)
_TPFLAGS_BASETYPE: int = 1 << 10


def is_opaque_type(declared_type: type) -> bool:
    """Report whether values of ``declared_type`` carry no mappable members.

    :param declared_type: Declared type.
    :returns: ``True`` for enums, numbers, text, arrays and callables.
    """
    if issubclass(declared_type, OPAQUE_BASE_TYPES) is True:
        return True
    return issubclass(declared_type, CALLABLE_TYPES)


def allows_subclasses(declared_type: type) -> bool:
    """Report whether the interpreter lets ``declared_type`` be subclassed.

    :param declared_type: Declared type.
    :returns: ``False`` only for builtin types without the base-type flag.
    """
    return declared_type.__flags__ & _TPFLAGS_BASETYPE != 0


def is_final_type(declared_type: type) -> bool:
    """Report whether ``declared_type`` cannot have a different runtime type.

    Builtin types without the base-type flag cannot be subclassed; classes
    decorated with :func:`typing.final` opt in explicitly, although the
    interpreter does not stop a subclass from being defined.

    :param declared_type: Declared type.
    :returns: ``True`` when no subclass can exist.
    """
    if vars(declared_type).get("__final__", False) is True:
        return True
    return allows_subclasses(declared_type) is False


def classify_shape(declared_type: type) -> Shape:
    """Choose the mapper construction strategy for ``declared_type``.

    :param declared_type: Declared type.
    :returns: ``"opaque"``, ``"exact"`` or ``"dynamic"``.
    """
    if is_opaque_type(declared_type) is True:
        return "opaque"
    if is_final_type(declared_type) is True:
        return "exact"
    return "dynamic"
