# rx_reminder/agent/graph.py
from functools import lru_cache

from langgraph.graph import START, END, StateGraph
from langgraph.checkpoint.sqlite import SqliteSaver

from rx_reminder.agent.state import AgentState
from rx_reminder.agent.nodes import extract_node, review_node, schedule_node
from rx_reminder.db.db_config import get_sqlite_connection

def build_graph() -> StateGraph:
    builder = StateGraph(AgentState)

    builder.add_node("extract", extract_node)
    builder.add_node("review", review_node)
    builder.add_node("schedule", schedule_node)

    builder.add_edge(START, "extract")
    builder.add_edge("extract", "review")
    builder.add_edge("review", "schedule")
    builder.add_edge("schedule", END)
    return builder

@lru_cache(maxsize=1)
def get_graph():
    # compiled lazily so importing the API does not open the database
    memory = SqliteSaver(get_sqlite_connection())
    return build_graph().compile(checkpointer=memory)
