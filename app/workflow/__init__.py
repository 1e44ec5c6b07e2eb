"""LangGraph workflow for social image generation."""

def create_image_graph():
    """Lazy import to avoid circular import with app.agents."""
    from app.workflow.graph import create_image_graph as _create
    return _create()

__all__ = ["create_image_graph"]
