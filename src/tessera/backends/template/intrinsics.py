"""Intrinsic functions and pseudo-parameters of the template backend."""

from __future__ import annotations

from typing import Any

from tessera.model.intrinsic import (
    Intrinsic,
    build_interpolated_string,
    create_pseudo_parameters,
    default_interpolation_serializer,
)

PSEUDO_PREFIX = "Template::"

PSEUDO = create_pseudo_parameters(
    {
        "account_id": "Template::AccountId",
        "region": "Template::Region",
        "stack_name": "Template::StackName",
        "partition": "Template::Partition",
    }
)

_interpolate = default_interpolation_serializer(
    lambda logical_name, attribute: "${" + f"{logical_name}.{attribute}" + "}",
    lambda ref_name: "${" + ref_name + "}",
)


class Sub(Intrinsic):
    """String interpolation rendered as ``{"Fn::Sub": "..."}``.

    Literal parts and values alternate; values may be attribute references,
    pseudo-parameters or plain values.
    """

    def __init__(self, parts: list[str], values: list[Any]):
        self.parts = parts
        self.values = values

    def to_json(self) -> dict[str, str]:
        return {"Fn::Sub": build_interpolated_string(self.parts, self.values, _interpolate)}


def sub(*pieces: Any) -> Sub:
    """Build a :class:`Sub` from alternating literal strings and values.

    >>> sub("arn:", PSEUDO["partition"], ":s3:::", "logs").to_json()
    {'Fn::Sub': 'arn:${Template::Partition}:s3:::logs'}
    """
    parts: list[str] = [""]
    values: list[Any] = []
    for piece in pieces:
        if isinstance(piece, str):
            parts[-1] += piece
        else:
            values.append(piece)
            parts.append("")
    return Sub(parts, values)


__all__ = ["PSEUDO", "PSEUDO_PREFIX", "Sub", "sub"]
