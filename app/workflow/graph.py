"""Compiled LangGraph: Prompt -> Image -> Alt text -> Store -> END. A node failure aborts the run before Store."""
from langgraph.graph import START, END
from langgraph.graph import StateGraph

from app.workflow.state import ImageWorkflowState
from app.agents.image_prompt import image_prompt_agent
from app.agents.image_generator import image_generator_agent
from app.agents.alt_text import alt_text_agent
from app.agents.image_store import image_store_agent


def create_image_graph():
    """Build and compile the social image graph."""
    builder = StateGraph(ImageWorkflowState)

    builder.add_node("compose_prompt", image_prompt_agent)
    builder.add_node("generate_image", image_generator_agent)
    builder.add_node("alt_text", alt_text_agent)
    builder.add_node("store_image", image_store_agent)

    builder.add_edge(START, "compose_prompt")
    builder.add_edge("compose_prompt", "generate_image")
    builder.add_edge("generate_image", "alt_text")
    builder.add_edge("alt_text", "store_image")
    builder.add_edge("store_image", END)

    return builder.compile()
