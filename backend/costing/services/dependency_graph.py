"""
Recipe dependency graph.

Edges point from a recipe to the base recipes it uses. Base recipes can be
nested, so nothing in the data model prevents A -> B -> A; the graph is
checked with a depth-first search before a recipe is saved.
"""
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Set

from costing.models import RecipeItem, ItemType

WHITE, GRAY, BLACK = 0, 1, 2


class DependencyGraph:

    def __init__(self, edges: Optional[Mapping[int, Iterable[int]]] = None):
        self._edges: Dict[int, Set[int]] = defaultdict(set)
        for recipe_id, sub_ids in (edges or {}).items():
            self._edges[recipe_id].update(sub_ids)

    @classmethod
    def for_tenant(cls, tenant) -> "DependencyGraph":
        """Build the graph from every recipe line of the tenant that uses a base recipe."""
        pairs = RecipeItem.objects.filter(
            recipe__tenant=tenant,
            recipe__is_active=True,
            item_type=ItemType.RECIPE,
        ).values_list('recipe_id', 'sub_recipe_id')

        edges = defaultdict(set)
        for recipe_id, sub_id in pairs:
            edges[recipe_id].add(sub_id)
        return cls(edges)

    def sub_recipes_of(self, recipe_id) -> Set[int]:
        return set(self._edges.get(recipe_id, ()))

    def dependents_of(self, recipe_id) -> Set[int]:
        """Recipes that use ``recipe_id`` directly."""
        return {parent for parent, subs in self._edges.items() if recipe_id in subs}

    def _nodes(self) -> Set[int]:
        nodes = set(self._edges)
        for subs in self._edges.values():
            nodes.update(subs)
        return nodes

    def find_cycle(self) -> Optional[List[int]]:
        """
        Return one cycle as a path (first node repeated at the end), or None.

        Iterative DFS with the usual white/gray/black colouring: reaching a
        gray node means we walked back into the current path.
        """
        color = {node: WHITE for node in self._nodes()}

        for start in sorted(color):
            if color[start] != WHITE:
                continue

            path = [start]
            stack = [iter(sorted(self._edges.get(start, ())))]
            color[start] = GRAY

            while stack:
                child = next(stack[-1], None)
                if child is None:
                    color[path.pop()] = BLACK
                    stack.pop()
                    continue

                if color.get(child, WHITE) == GRAY:
                    return path[path.index(child):] + [child]
                if color.get(child, WHITE) == WHITE:
                    color[child] = GRAY
                    path.append(child)
                    stack.append(iter(sorted(self._edges.get(child, ()))))

        return None

    def would_create_cycle(self, recipe_id, sub_recipe_ids: Iterable[int]) -> Optional[List[int]]:
        """
        Check whether giving ``recipe_id`` exactly ``sub_recipe_ids`` as base
        recipe lines would close a cycle. Returns the offending path or None.

        A new recipe (``recipe_id`` None) has no dependents and cannot close
        a cycle.
        """
        if recipe_id is None:
            return None

        edges = {node: set(subs) for node, subs in self._edges.items()}
        edges[recipe_id] = set(sub_recipe_ids)

        return DependencyGraph(edges)._path_back_to(recipe_id)

    def _path_back_to(self, target) -> Optional[List[int]]:
        """Path target -> ... -> target if one exists."""
        stack = [(target, [target])]
        seen = set()

        while stack:
            node, path = stack.pop()
            for child in sorted(self._edges.get(node, ())):
                if child == target:
                    return path + [target]
                if child not in seen:
                    seen.add(child)
                    stack.append((child, path + [child]))
        return None
