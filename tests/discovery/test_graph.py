"""
Tests for dependency graph construction.
"""

from __future__ import annotations

from tessera.discovery.graph import build_dependency_graph
from tessera.discovery.resolve import resolve
from tessera.model import PseudoParameter, output


def _graph(entities):
    arena = resolve(entities)
    return build_dependency_graph(entities, arena)


class TestBuildDependencyGraph:
    def test_attr_ref_edge(self, bucket_type, function_type):
        """Referencing another resource's attribute adds an edge."""
        bucket = bucket_type()
        func = function_type(BucketArn=bucket.arn)
        assert _graph({"logs": bucket, "handler": func}) == {"logs": set(), "handler": {"logs"}}

    def test_resource_value_edge(self, bucket_type, function_type):
        """Using a resource directly as a value adds an edge."""
        bucket = bucket_type()
        func = function_type(Bucket=bucket)
        assert _graph({"logs": bucket, "handler": func})["handler"] == {"logs"}

    def test_own_attribute_no_edge(self, function_type):
        """A reference to one's own attribute is not a dependency."""
        func = function_type()
        func.props["Self"] = func.arn
        assert _graph({"handler": func})["handler"] == set()

    def test_self_value_edge(self, function_type):
        """The root met again as a value is a self-edge."""
        func = function_type()
        func.props["Nested"] = {"again": func}
        assert _graph({"handler": func})["handler"] == {"handler"}

    def test_property_entities_are_inlined(self, bucket_type, function_type, policy_type):
        """Property entities add no edge themselves but their contents do."""
        bucket = bucket_type()
        policy = policy_type(Target=bucket.arn)
        func = function_type(Policy=policy)
        graph = _graph({"logs": bucket, "policy": policy, "handler": func})
        assert graph["handler"] == {"logs"}
        assert graph["policy"] == {"logs"}

    def test_edges_point_at_resources_only(self, function_type, policy_type):
        """A namespaced property entity is a node but never an edge target."""
        policy = policy_type(Effect="Allow")
        func = function_type(Policy=policy)
        graph = _graph({"policy": policy, "handler": func})
        assert graph == {"policy": set(), "handler": set()}

    def test_leaves(self, bucket_type, function_type):
        """Intrinsics and cross-backend outputs end the scan."""
        bucket = bucket_type()
        func = function_type(Region=PseudoParameter("Template::Region"), Shared=output(bucket.arn, "x"))
        assert _graph({"logs": bucket, "handler": func})["handler"] == set()

    def test_nested_containers(self, bucket_type, function_type):
        """Lists, tuples, sets and dicts are descended into."""
        first, second, third = bucket_type(), bucket_type(), bucket_type()
        func = function_type(Items=[{"a": first.arn}, (second,)], Refs=frozenset({third.name}))
        func.props["More"] = [[{"deep": [third.arn]}]]
        graph = _graph({"one": first, "two": second, "three": third, "handler": func})
        assert graph["handler"] == {"one", "two", "three"}

    def test_shared_subobject_scanned_per_root(self, bucket_type, function_type):
        """Each root has its own visited set."""
        bucket = bucket_type()
        shared = {"arn": bucket.arn}
        first, second = function_type(Env=shared), function_type(Env=shared)
        graph = _graph({"logs": bucket, "f1": first, "f2": second})
        assert graph["f1"] == {"logs"}
        assert graph["f2"] == {"logs"}

    def test_cyclic_object_graph_terminates(self, bucket_type, function_type):
        """Cyclic containers do not loop forever."""
        bucket = bucket_type()
        loop: list = [bucket.arn]
        loop.append(loop)
        func = function_type(Loop=loop)
        assert _graph({"logs": bucket, "handler": func})["handler"] == {"logs"}

    def test_mutual_dependency(self, bucket_type, function_type):
        """Entities referencing each other produce a two-node cycle in the graph."""
        bucket = bucket_type()
        func = function_type(Bucket=bucket.arn)
        bucket.props["Notify"] = func.arn
        graph = _graph({"logs": bucket, "handler": func})
        assert graph == {"logs": {"handler"}, "handler": {"logs"}}
