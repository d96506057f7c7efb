"""
Pipeline graph construction.

Builds the graph that sequences parsing -> searching -> transforming ->
generating -> validating. Every node routes through route_next_step,
so a recorded fatal failure ends the run at whichever step raised it.
"""

from typing import Awaitable, Callable, Dict, Any, Mapping

from langgraph.graph import StateGraph, END

from research_pipeline.graph.router import route_next_step
from research_pipeline.graph.state import PipelineGraphState
from research_pipeline.shared.contracts.pipeline import PIPELINE_ORDER, Step


PipelineNode = Callable[[PipelineGraphState], Awaitable[Dict[str, Any]]]


def create_pipeline_graph(nodes: Mapping[Step, PipelineNode]):
    """
    Create and compile the pipeline graph.

    The graph structure is:
        Entry -> route_next_step
          -> "parsing"      -> parse node     -> route_next_step
          -> "searching"    -> search node    -> route_next_step
          -> "transforming" -> transform node -> route_next_step
          -> "generating"   -> report node    -> route_next_step
          -> "validating"   -> validate node  -> route_next_step
          -> "end"          -> END

    Args:
        nodes: Node callable for each working step

    Returns:
        Compiled LangGraph application ready for execution.
    """
    missing = [step.value for step in PIPELINE_ORDER if step not in nodes]
    if missing:
        raise ValueError(f"Missing pipeline nodes: {missing}")

    graph = StateGraph(PipelineGraphState)

    for step in PIPELINE_ORDER:
        graph.add_node(step.value, nodes[step])

    path_map = {step.value: step.value for step in PIPELINE_ORDER}
    path_map["end"] = END

    # Conditional entry point - start from wherever state requires
    graph.set_conditional_entry_point(route_next_step, path_map)

    for step in PIPELINE_ORDER:
        graph.add_conditional_edges(step.value, route_next_step, path_map)

    app = graph.compile()

    return app
