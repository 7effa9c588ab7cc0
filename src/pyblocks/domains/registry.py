"""
pyblocks Block Registry
Central table of per-type block behaviour

Each BlockType maps to one BlockConfig holding its slot layout, numeric
parameters, evaluation rule and validator. Registries are frozen once
populated so the table cannot drift at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, TYPE_CHECKING

from pyblocks.types import Block, BlockType, NumValue, Slot

if TYPE_CHECKING:
    from pyblocks.evaluator import EvalContext


#==============================================================================
# Function Signatures
#==============================================================================

# async rule(block, inputs, ctx) -> int; ctx.evaluate() recurses into children
BlockRule = Callable[[Block, List[int], "EvalContext"], Awaitable[int]]

# check(block) -> list of human-readable messages
BlockCheck = Callable[[Block], List[str]]

# dynamic_children(block) -> slot layout derived from the block's parameters
SlotLayout = Callable[[Block], List["SlotSpec"]]

InputDescriptor = Callable[[int], str]


#==============================================================================
# Layout Specifications
#==============================================================================

@dataclass(frozen=True)
class SlotSpec:
    """Template for one child slot of a block type"""
    name: str
    input_descriptor_index: int = 0
    input_set: Optional[int] = None
    input_mod: Optional[int] = None

    def make_slot(self, block: Optional[Block] = None) -> Slot:
        """Instantiate an (optionally occupied) slot from this template"""
        return Slot(
            name=self.name,
            block=block,
            input_descriptor_index=self.input_descriptor_index,
            input_set=self.input_set,
            input_mod=self.input_mod,
        )


@dataclass(frozen=True)
class NumValueSpec:
    """Template for a named integer parameter"""
    name: str
    default: int
    min: int = 0

    def make_value(self) -> NumValue:
        return NumValue(name=self.name, value=self.default, min=self.min)


#==============================================================================
# Block Config
#==============================================================================

@dataclass(frozen=True)
class BlockConfig:
    """
    Behaviour of one block type.

    Attributes:
        type: The block type this entry describes
        children: Static slot layout
        num_values: Numeric parameters with defaults and minimums
        evaluate: Evaluation rule
        check_for_errors: Type-specific validator
        dynamic_children: Optional layout function replacing `children`
        description: Help text shown for the block
    """
    type: BlockType
    children: Tuple[SlotSpec, ...]
    num_values: Tuple[NumValueSpec, ...]
    evaluate: BlockRule
    check_for_errors: BlockCheck
    dynamic_children: Optional[SlotLayout] = None
    description: Optional[str] = None

    def layout(self, block: Block) -> List[SlotSpec]:
        """The slot layout a block of this type should currently have"""
        if self.dynamic_children is not None:
            return self.dynamic_children(block)
        return list(self.children)


#==============================================================================
# Block Registry
#==============================================================================

class BlockRegistry:
    """
    Registry mapping block types to their configs.

    Populate with register(), then freeze(); a frozen registry rejects
    further registrations.
    """

    def __init__(self) -> None:
        self._configs: Dict[BlockType, BlockConfig] = {}
        self._frozen = False

    def register(self, config: BlockConfig) -> "BlockRegistry":
        """
        Register a block config.

        Raises:
            ValueError: If the type is already registered or the registry is frozen
        """
        if self._frozen:
            raise ValueError("Block registry is frozen")
        if config.type in self._configs:
            raise ValueError(f"Block type {config.type.value} already registered")
        self._configs[config.type] = config
        return self

    def register_all(self, configs: List[BlockConfig]) -> "BlockRegistry":
        for config in configs:
            self.register(config)
        return self

    def freeze(self) -> "BlockRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, block_type: BlockType) -> Optional[BlockConfig]:
        return self._configs.get(block_type)

    def get(self, block_type: BlockType) -> BlockConfig:
        """
        Get a config, raising if the type is unknown.

        Raises:
            KeyError: If the type is not registered
        """
        config = self.lookup(block_type)
        if config is None:
            raise KeyError(f"Block type {block_type.value} not registered")
        return config

    def types(self) -> List[BlockType]:
        return list(self._configs)

    def __len__(self) -> int:
        return len(self._configs)

    def __contains__(self, block_type: object) -> bool:
        return block_type in self._configs


#==============================================================================
# Block Config Builder
#==============================================================================

class BlockConfigBuilder:
    """
    Fluent builder for block configs.

    Example:
        zero = (define_block(BlockType.ZERO)
                .evaluate(_zero_rule)
                .check(_no_errors)
                .description("Ignores inputs. Returns 0.")
                .build())
    """

    def __init__(self, block_type: BlockType) -> None:
        self._type = block_type
        self._children: List[SlotSpec] = []
        self._num_values: List[NumValueSpec] = []
        self._evaluate: Optional[BlockRule] = None
        self._check: Optional[BlockCheck] = None
        self._dynamic: Optional[SlotLayout] = None
        self._description: Optional[str] = None

    def slot(
        self,
        name: str,
        input_descriptor_index: int = 0,
        input_set: Optional[int] = None,
        input_mod: Optional[int] = None,
    ) -> "BlockConfigBuilder":
        self._children.append(SlotSpec(name, input_descriptor_index, input_set, input_mod))
        return self

    def num_value(self, name: str, default: int, min: int = 0) -> "BlockConfigBuilder":
        self._num_values.append(NumValueSpec(name, default, min))
        return self

    def dynamic_slots(self, fn: SlotLayout) -> "BlockConfigBuilder":
        self._dynamic = fn
        return self

    def evaluate(self, fn: BlockRule) -> "BlockConfigBuilder":
        self._evaluate = fn
        return self

    def check(self, fn: BlockCheck) -> "BlockConfigBuilder":
        self._check = fn
        return self

    def description(self, text: str) -> "BlockConfigBuilder":
        self._description = text
        return self

    def build(self) -> BlockConfig:
        """
        Build the config.

        Raises:
            ValueError: If the evaluation rule or validator is missing
        """
        if self._evaluate is None:
            raise ValueError(f"Block {self._type.value} missing evaluation rule")
        if self._check is None:
            raise ValueError(f"Block {self._type.value} missing validator")

        return BlockConfig(
            type=self._type,
            children=tuple(self._children),
            num_values=tuple(self._num_values),
            evaluate=self._evaluate,
            check_for_errors=self._check,
            dynamic_children=self._dynamic,
            description=self._description,
        )


def define_block(block_type: BlockType) -> BlockConfigBuilder:
    """Start building a block config"""
    return BlockConfigBuilder(block_type)


#==============================================================================
# Input Descriptors
#==============================================================================

def _describe_x(input_count: int) -> str:
    return ", ".join(f"x{i}" for i in range(1, input_count + 1))


def _describe_g(input_count: int) -> str:
    return ", ".join(f"g{i}" for i in range(1, input_count + 1))


def _describe_n(input_count: int) -> str:
    names = [f"x{i}" for i in range(1, input_count)]
    return ", ".join(names + ["n"])


def _describe_recur_yz(input_count: int) -> str:
    names = [f"x{i}" for i in range(1, input_count - 1)]
    return ", ".join(names + ["y", "z"])


INPUT_DESCRIPTORS: Tuple[InputDescriptor, ...] = (
    _describe_x,
    _describe_g,
    _describe_n,
    _describe_recur_yz,
)


def describe_slot_inputs(slot: Slot, parent_input_count: int) -> str:
    """Render the input names a slot's occupant receives, e.g. "x1, y, z" """
    from pyblocks.arity import get_input_count_of_slot

    index = slot.input_descriptor_index
    if not 0 <= index < len(INPUT_DESCRIPTORS):
        index = 0
    return INPUT_DESCRIPTORS[index](get_input_count_of_slot(slot, parent_input_count))
