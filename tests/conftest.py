"""
Pytest configuration for pyblocks tests.

Provides:
- Hypothesis profiles (select with HYPOTHESIS_PROFILE=ci)
- Builders for the block trees used throughout the suite
- A small helper for waiting on a StepController from inside asyncio tests
"""

import asyncio
import os

import pytest

from pyblocks.arity import propagate_input_count
from pyblocks.domains.prf import BASE_CASE, CUSTOM_FUNCTION, RECURSIVE_CASE
from pyblocks.tree import create_block, set_depth, set_num_value
from pyblocks.types import BlockType

# =============================================================================
# Hypothesis Configuration
# =============================================================================

try:
    from hypothesis import settings

    settings.register_profile("default", max_examples=50, deadline=None, print_blob=True)
    settings.register_profile("ci", max_examples=200, deadline=None, print_blob=True)
    settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))

except ImportError:
    pass  # hypothesis not installed, property tests skip themselves


# =============================================================================
# Block Builders
# =============================================================================

def zero():
    return create_block(BlockType.ZERO)


def succ():
    return create_block(BlockType.SUCCESSOR)


def proj(i):
    block = create_block(BlockType.PROJECTION)
    set_num_value(block, "i", i)
    return block


def comp(f, *gs):
    """Composition f(g1, ..., gm); pass None to leave a slot empty"""
    block = create_block(BlockType.COMPOSITION)
    set_num_value(block, "m", len(gs))
    block.slot("f").block = f
    for index, g in enumerate(gs, start=1):
        block.slot(f"g{index}").block = g
    return block


def prim_rec(base, recursive):
    block = create_block(BlockType.PRIMITIVE_RECURSION)
    block.slot(BASE_CASE).block = base
    block.slot(RECURSIVE_CASE).block = recursive
    return block


def mu(f):
    block = create_block(BlockType.MINIMIZATION)
    block.slot("f").block = f
    return block


def custom(name, body=None):
    block = create_block(BlockType.CUSTOM, name=name)
    block.slot(CUSTOM_FUNCTION).block = body
    return block


def rooted(block, input_count):
    """Finish a hand-built tree: propagate arity and number the depths"""
    propagate_input_count(block, input_count)
    set_depth(block)
    return block


# -----------------------------------------------------------------------------
# Classic functions
# -----------------------------------------------------------------------------

def addition():
    """add(x, n) = x + n"""
    return rooted(prim_rec(proj(1), comp(succ(), proj(3))), 2)


def multiplication():
    """mul(x, n) = x * n, built on add(z, x)"""
    add = prim_rec(proj(1), comp(succ(), proj(3)))
    return rooted(prim_rec(zero(), comp(add, proj(3), proj(1))), 2)


def predecessor():
    """pred(n) = max(n - 1, 0)"""
    return rooted(prim_rec(zero(), proj(1)), 1)


def monus():
    """monus(x, n) = max(x - n, 0)"""
    pred = prim_rec(zero(), proj(1))
    return rooted(prim_rec(proj(1), comp(pred, proj(3))), 2)


def identity_search():
    """mu n. monus(x, n) = 0, which is x"""
    pred = prim_rec(zero(), proj(1))
    return rooted(mu(prim_rec(proj(1), comp(pred, proj(3)))), 1)


@pytest.fixture
def add_tree():
    return addition()


@pytest.fixture
def mul_tree():
    return multiplication()


# =============================================================================
# Async Helpers
# =============================================================================

async def wait_until(predicate, limit=10_000):
    """Yield to the event loop until predicate() holds"""
    for _ in range(limit):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("Condition not reached")
