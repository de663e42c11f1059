"""
Tests for declarable entities, attribute references and the arena.
"""

from __future__ import annotations

import pytest

from tessera.core.errors import SerializationError
from tessera.model import (
    AttrRef,
    ChildProject,
    EntityArena,
    EntityKind,
    Property,
    Resource,
    create_property,
    create_resource,
)


class TestDeclarable:
    def test_generated_constructor(self, bucket_type):
        """Keyword props and a props mapping are merged."""
        bucket = bucket_type({"Versioning": True}, BucketName="logs")
        assert isinstance(bucket, Resource)
        assert bucket.kind is EntityKind.RESOURCE
        assert bucket.backend == "test"
        assert bucket.entity_type == "Test::Bucket"
        assert bucket.props == {"Versioning": True, "BucketName": "logs"}
        assert bucket_type.TYPE == "Test::Bucket"
        assert bucket_type.__name__ == "Bucket"

    def test_attribute_accessors(self, bucket_type):
        """Declared attributes are AttrRefs carrying the parent handle."""
        bucket = bucket_type()
        ref = bucket.arn
        assert isinstance(ref, AttrRef)
        assert ref.parent_handle == bucket.handle
        assert ref.parent_backend == "test"
        assert ref.attribute == "Arn"
        assert bucket.arn is ref

    def test_unknown_attribute(self, bucket_type):
        """Undeclared attributes raise AttributeError."""
        with pytest.raises(AttributeError, match="no attribute 'missing'"):
            bucket_type().missing

    def test_attr_lookup_by_backend_name(self, bucket_type):
        """attr() accepts the accessor or the backend attribute name."""
        bucket = bucket_type()
        assert bucket.attr("name") is bucket.attr("BucketName")
        with pytest.raises(KeyError):
            bucket.attr("Nope")

    def test_handles_are_unique(self, bucket_type):
        """Equal props never make two entities the same."""
        first, second = bucket_type(BucketName="x"), bucket_type(BucketName="x")
        assert first.handle != second.handle
        assert first.arn.parent_handle != second.arn.parent_handle

    def test_property_kind(self, policy_type):
        """Property constructors produce property-kind entities."""
        policy = policy_type(Effect="Allow")
        assert isinstance(policy, Property)
        assert policy.kind is EntityKind.PROPERTY
        assert policy.attributes == {}

    def test_factories(self):
        """create_resource / create_property take explicit backend and type."""
        resource = create_resource("template", "Storage::Bucket", ["Arn"], {"BucketName": "a"})
        prop = create_property("template", "Storage::Rule", {"Days": 3})
        assert resource.Arn.attribute == "Arn"
        assert prop.props == {"Days": 3}

    def test_props_are_copied(self):
        """The entity owns its property bag."""
        source = {"BucketName": "a"}
        resource = create_resource("template", "Storage::Bucket", props=source)
        source["BucketName"] = "b"
        assert resource.props == {"BucketName": "a"}

    def test_child_project_attributes(self, tmp_path):
        """Child outputs become attributes in the backend's format."""
        child = ChildProject(
            "template",
            "Template::Stack",
            tmp_path / "network",
            outputs=["vpc_id"],
            attribute_format="Outputs.{}",
        )
        assert child.vpc_id.attribute == "Outputs.vpc_id"
        assert child.output_names == ["vpc_id"]
        assert child.build_result is None


class TestAttrRef:
    def test_unresolved_to_json_raises(self, bucket_type):
        """An unresolved reference cannot be serialized."""
        with pytest.raises(SerializationError, match="unresolved"):
            bucket_type().arn.to_json()

    def test_resolved_to_json(self, bucket_type):
        """After resolution the reference names its parent."""
        ref = bucket_type().arn
        ref.resolve("logs")
        assert ref.is_resolved
        assert ref.to_json() == {"__attr_ref": {"entity": "logs", "attribute": "Arn"}}
        assert repr(ref) == "AttrRef(logs.Arn)"


class TestEntityArena:
    def test_indexes_entities_only(self, bucket_type):
        """Plain values in the namespace are not indexed."""
        bucket = bucket_type()
        arena = EntityArena.from_namespace({"bucket": bucket, "setting": 3})
        assert len(arena) == 1
        assert bucket.handle in arena
        assert arena.get(bucket.handle) is bucket
        assert arena.name_of(bucket.handle) == "bucket"

    def test_first_name_wins(self, bucket_type):
        """An entity under two names keeps the first."""
        bucket = bucket_type()
        arena = EntityArena.from_namespace({"first": bucket, "second": bucket})
        assert arena.name_of(bucket.handle) == "first"

    def test_miss_is_none(self):
        """Unknown handles are a plain lookup miss."""
        arena = EntityArena()
        assert arena.get(-1) is None
        assert arena.name_of(-1) is None
