"""
Tests for the block registry and config builder.
"""

import pytest

from pyblocks.domains.prf import create_prf_registry, default_registry, zero
from pyblocks.domains.registry import BlockRegistry, define_block
from pyblocks.types import BlockType


async def _rule(block, inputs, ctx):
    return 0


class TestBlockRegistry:
    def test_prf_registry_holds_every_type(self):
        registry = create_prf_registry()
        assert set(registry.types()) == set(BlockType)
        assert len(registry) == 7
        assert registry.frozen

    def test_default_registry_is_shared(self):
        assert default_registry() is default_registry()

    def test_frozen_registry_rejects_registration(self):
        with pytest.raises(ValueError, match="frozen"):
            create_prf_registry().register(zero)

    def test_duplicate_registration(self):
        registry = BlockRegistry().register(zero)
        with pytest.raises(ValueError, match="already registered"):
            registry.register(zero)

    def test_lookup_and_get(self):
        registry = BlockRegistry().register(zero)
        assert BlockType.ZERO in registry
        assert registry.lookup(BlockType.SUCCESSOR) is None
        with pytest.raises(KeyError):
            registry.get(BlockType.SUCCESSOR)

    def test_descriptions(self):
        registry = default_registry()
        assert registry.get(BlockType.ZERO).description == "Ignores inputs. Returns 0."
        assert "smallest non-negative" in registry.get(BlockType.MINIMIZATION).description
        assert registry.get(BlockType.CUSTOM).description is None


class TestBlockConfigBuilder:
    def test_build(self):
        config = (define_block(BlockType.MINIMIZATION)
                  .slot("f", input_descriptor_index=2, input_mod=1)
                  .num_value("k", default=3, min=1)
                  .evaluate(_rule)
                  .check(lambda block: [])
                  .description("test")
                  .build())

        assert config.type == BlockType.MINIMIZATION
        assert [s.name for s in config.children] == ["f"]
        assert config.children[0].input_mod == 1
        assert config.num_values[0].make_value().value == 3
        assert config.dynamic_children is None
        assert config.description == "test"

    def test_rule_and_check_required(self):
        with pytest.raises(ValueError, match="evaluation rule"):
            define_block(BlockType.ZERO).check(lambda block: []).build()
        with pytest.raises(ValueError, match="validator"):
            define_block(BlockType.ZERO).evaluate(_rule).build()
