from .barrier import CompletionBarrier
from .fanout import copy_to_many
from .tree import copy_tree

__all__ = ["CompletionBarrier", "copy_to_many", "copy_tree"]
