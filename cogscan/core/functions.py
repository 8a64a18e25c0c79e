"""Locating the declared name of a function definition."""

from typing import Optional

from cogscan.core.nodes import AstNode, NodeKind

# Identifiers below these nodes never name the function being defined:
# return types, ``A::`` qualifiers, parameters and the body itself.
_NON_NAME_ANCESTORS = (
    NodeKind.DECL_SPECIFIER_SEQ,
    NodeKind.NESTED_NAME_SPECIFIER,
    NodeKind.PARAMETERS_AND_QUALIFIERS,
    NodeKind.FUNCTION_BODY,
)


def find_function_identifier(
    definition: AstNode,
    previous: Optional[AstNode] = None,
) -> Optional[AstNode]:
    """
    Return the identifier node that names ``definition``.

    Falls back to ``previous`` when the definition has no usable
    identifier (operators, conversion functions, malformed input).
    """
    for identifier in definition.descendants([NodeKind.IDENTIFIER]):
        if _within_definition(identifier, definition):
            return identifier
    return previous


def _within_definition(identifier: AstNode, definition: AstNode) -> bool:
    node = identifier.parent
    while node is not None and node is not definition:
        if node.kind in _NON_NAME_ANCESTORS:
            return False
        node = node.parent
    return True


def function_name(definition: AstNode) -> str:
    """Display name of a function definition, including any scope qualifier."""
    identifier = find_function_identifier(definition)
    if identifier is None:
        return "<anonymous>"
    declarator = identifier.parent
    if declarator is not None and any(
        child.kind is NodeKind.NESTED_NAME_SPECIFIER for child in declarator.children
    ):
        return "".join(declarator.text().split())
    return identifier.value or "<anonymous>"
