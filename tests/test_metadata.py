"""
Metadata Registry: storage, accumulation, deferred publication, freezing.
"""

import pytest

from ardea.faults import MetadataFrozenError
from ardea.metadata import MetadataRegistry


# ============================================================================
# Storage
# ============================================================================

class TestStorage:

    def test_get_default(self, registry):
        class Target:
            pass

        assert registry.get(Target, "prefix") is None
        assert registry.get(Target, "prefix", "/") == "/"
        assert registry.has(Target, "prefix") is False

    def test_set_and_get(self, registry):
        class Target:
            pass

        registry.set(Target, "prefix", "/users")
        assert registry.get(Target, "prefix") == "/users"
        assert registry.has(Target, "prefix") is True

    def test_entries_are_per_target(self, registry):
        class A:
            pass

        class B:
            pass

        registry.set(A, "tag", "a")
        assert registry.get(B, "tag") is None

    def test_append_accumulates(self, registry):
        def handler():
            pass

        registry.append(handler, "items", 1)
        values = registry.append(handler, "items", 2)
        assert values == [1, 2]
        assert registry.get(handler, "items") == [1, 2]

    def test_keys_hide_internal_entries(self, registry):
        class Target:
            def method(self):
                pass

        registry.set(Target, "prefix", "/x")
        registry.publish(Target)
        assert registry.keys(Target) == ["prefix"]


# ============================================================================
# Deferred Publication
# ============================================================================

class TestDeferredPublication:

    def test_publish_runs_in_definition_order(self, registry):
        seen = []

        class Target:
            def first(self):
                pass

            def second(self):
                pass

        registry.defer(Target.second, lambda owner: seen.append(("second", owner)))
        registry.defer(Target.first, lambda owner: seen.append(("first", owner)))

        registry.publish(Target)

        assert seen == [("first", Target), ("second", Target)]

    def test_publish_runs_once(self, registry):
        calls = []

        class Target:
            def method(self):
                pass

        registry.defer(Target.method, lambda owner: calls.append(owner))
        registry.publish(Target)
        registry.publish(Target)

        assert calls == [Target]
        assert registry.is_published(Target)

    def test_aliased_method_publishes_once(self, registry):
        calls = []

        class Target:
            def method(self):
                pass

            alias = method

        registry.defer(Target.method, lambda owner: calls.append(owner))
        registry.publish(Target)

        assert calls == [Target]

    def test_publish_sees_metadata_written_after_defer(self, registry):
        """Decorators applied above the route decorator are still visible."""
        class Target:
            def method(self):
                pass

        captured = []
        registry.defer(Target.method, lambda owner: captured.append(registry.get(Target.method, "public")))
        registry.set(Target.method, "public", True)

        registry.publish(Target)
        assert captured == [True]

    def test_publish_unwraps_static_methods(self, registry):
        seen = []

        def helper():
            pass

        registry.defer(helper, lambda owner: seen.append(owner))

        class Target:
            run = staticmethod(helper)

        registry.publish(Target)
        assert seen == [Target]

    def test_nested_classes_are_skipped(self, registry):
        class Target:
            class Inner:
                pass

        registry.publish(Target)
        assert registry.is_published(Target)


# ============================================================================
# Freezing
# ============================================================================

class TestFreezing:

    def test_frozen_target_rejects_writes(self, registry):
        class Target:
            pass

        registry.set(Target, "prefix", "/a")
        registry.freeze(Target)

        with pytest.raises(MetadataFrozenError) as exc:
            registry.set(Target, "prefix", "/b")

        assert registry.get(Target, "prefix") == "/a"
        assert exc.value.code == "METADATA_FROZEN"
        assert exc.value.is_fatal

    def test_frozen_target_still_readable(self, registry):
        class Target:
            pass

        registry.freeze(Target)
        assert registry.is_frozen(Target)
        assert registry.get(Target, "anything", 1) == 1

    def test_unhashable_target_is_never_frozen(self):
        assert MetadataRegistry().is_frozen([]) is False
