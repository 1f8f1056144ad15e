"""
AST Node Serialization.

Renders detached LibCST nodes (expressions, decorators, statements) back to
source text, for log messages and diagnostics.
"""

import libcst as cst

# A dummy module used as a context to render detached nodes.
_RENDER_CTX = cst.parse_module("")


def capture_node_source(node: cst.CSTNode) -> str:
  """
  Renders a LibCST node into its Python source code string representation.

  This handles both original nodes (which might carry whitespace info)
  and constructed nodes (detached from the original tree).

  Args:
      node: The CST node to serialise.

  Returns:
      str: The Python code string.
  """
  try:
    return _RENDER_CTX.code_for_node(node)
  except Exception:
    # Partially constructed nodes cannot always be rendered.
    return f"<Unrepresentable Node: {type(node).__name__}>"

