"""
Tests for value classification, intrinsics and cross-backend outputs.
"""

from __future__ import annotations

import pytest

from tessera.core.errors import SerializationError
from tessera.model import (
    BackendOutput,
    Composite,
    PseudoParameter,
    ValueKind,
    build_interpolated_string,
    classify,
    create_pseudo_parameters,
    default_interpolation_serializer,
    output,
)
from tessera.model.kinds import is_entity, is_resource
from tessera.model.outputs import OUTPUT_MARKER


class TestClassify:
    def test_every_kind(self, bucket_type, policy_type):
        """Each model value falls into exactly one kind."""
        bucket = bucket_type()
        instance = Composite(lambda: {"b": bucket_type()}, "C")()
        assert classify(bucket) is ValueKind.RESOURCE
        assert classify(policy_type()) is ValueKind.PROPERTY
        assert classify(bucket.arn) is ValueKind.ATTR_REF
        assert classify(PseudoParameter("Template::Region")) is ValueKind.INTRINSIC
        assert classify(instance) is ValueKind.COMPOSITE
        assert classify(output(bucket.arn, "bucket_arn")) is ValueKind.OUTPUT
        assert classify({"a": 1}) is ValueKind.PLAIN
        assert classify("text") is ValueKind.PLAIN

    def test_helpers(self, bucket_type, policy_type):
        """is_entity covers both kinds, is_resource only resources."""
        assert is_entity(policy_type())
        assert not is_resource(policy_type())
        assert is_resource(bucket_type())
        assert not is_entity(bucket_type().arn)


class TestIntrinsics:
    def test_pseudo_parameters(self):
        """Pseudo-parameters render as refs."""
        pseudo = create_pseudo_parameters({"region": "Template::Region"})
        assert pseudo["region"].to_json() == {"Ref": "Template::Region"}
        assert str(pseudo["region"]) == "${Template::Region}"

    def test_interpolation(self, bucket_type):
        """Attribute refs, pseudo refs and plain values are interleaved with literals."""
        bucket = bucket_type()
        bucket.arn.resolve("logs")
        serialize = default_interpolation_serializer(
            lambda name, attr: "${" + f"{name}.{attr}" + "}",
            lambda ref: "${" + ref + "}",
        )
        rendered = build_interpolated_string(
            ["arn=", " region=", " port=", ""],
            [bucket.arn, PseudoParameter("Template::Region"), 443],
            serialize,
        )
        assert rendered == "arn=${logs.Arn} region=${Template::Region} port=443"

    def test_interpolating_unresolved_ref_raises(self, bucket_type):
        """Unresolved references cannot be interpolated."""
        serialize = default_interpolation_serializer(lambda n, a: "", lambda r: "")
        with pytest.raises(SerializationError):
            serialize(bucket_type().arn)

    def test_interpolating_entity_raises(self, bucket_type):
        """Entities must be referenced through an attribute."""
        serialize = default_interpolation_serializer(lambda n, a: "", lambda r: "")
        with pytest.raises(SerializationError, match="use one of its attributes"):
            serialize(bucket_type())


class TestBackendOutput:
    def test_explicit_output(self, bucket_type):
        """Explicit outputs copy the reference's handle, backend and attribute."""
        bucket = bucket_type()
        item = output(bucket.arn, "shared_arn")
        assert item.source_handle == bucket.handle
        assert item.source_backend == "test"
        assert item.source_attribute == "Arn"
        assert item.source_entity == ""
        assert item.to_json() == {OUTPUT_MARKER: "shared_arn"}

    def test_auto_output(self, bucket_type):
        """Automatic outputs are named {entity}_{attribute}."""
        item = BackendOutput.auto(bucket_type().arn, "logs")
        assert item.output_name == "logs_Arn"
        assert item.source_entity == "logs"
