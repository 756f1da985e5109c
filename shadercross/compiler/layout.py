"""Memory layout annotation of uniform blocks."""

from loguru import logger

from shadercross.compiler.constants import STD140_LAYOUT
from shadercross.compiler.ir import IntermediateProgram


def annotate_layouts(program: IntermediateProgram) -> int:
    """Add the ``std140`` packing layout to every uniform block.

    Existing layout entries are kept; a block already marked ``std140`` is
    left untouched.

    Returns:
        Number of blocks that received the annotation
    """
    count = 0
    for block in program.uniform_blocks():
        if not block.layout.has(STD140_LAYOUT):
            block.layout.add(STD140_LAYOUT)
            count += 1
    logger.debug(f"Added {STD140_LAYOUT} layout to {count} uniform blocks")
    return count
