from .graph_node_model import GraphNodeModel

__all__ = ["GraphNodeModel"]
