"""Storage qualifier rewriting for the legacy-style ES dialects."""

from loguru import logger

from shadercross.compiler.ir import IntermediateProgram, PipelineStage, Qualifier


def rewrite_qualifiers(program: IntermediateProgram, stage: PipelineStage) -> int:
    """Replace generic ``in``/``out`` markers on top-level variables.

    ``in`` becomes ``attribute`` in a vertex shader and ``varying`` elsewhere;
    ``out`` always becomes ``varying``. The replacement keeps the qualifier's
    position and never adds a second copy.

    Args:
        program: Program to rewrite in place
        stage: Pipeline stage of the program

    Returns:
        Number of qualifiers replaced
    """
    input_replacement = (
        Qualifier.ATTRIBUTE if stage == PipelineStage.VERTEX else Qualifier.VARYING
    )
    replacements = {
        Qualifier.INPUT: input_replacement,
        Qualifier.OUTPUT: Qualifier.VARYING,
    }

    count = 0
    for variable in program.variables():
        rewritten: list[Qualifier] = []
        for qualifier in variable.qualifiers:
            new = replacements.get(qualifier, qualifier)
            if new is not qualifier:
                count += 1
            if new not in rewritten:
                rewritten.append(new)
        variable.qualifiers = rewritten

    logger.debug(f"Rewrote {count} storage qualifiers for {stage.name} stage")
    return count
