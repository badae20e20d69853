"""
DocPilot Question Dependency Graph

Directed graph of `depends_on` edges between questions of one template.

Validation rules (checked when a pack is loaded):
- every depends_on target exists
- no question depends on itself
- the target is asked before the dependent (earlier step, or earlier in
  the same step)
- the graph is acyclic

Usage:
    graph = DependencyGraph.from_template(template)
    errors = graph.validate()
    graph.dependents_of("has-ugc")   # -> ["has-livestream"]
"""
from __future__ import annotations

from dataclasses import dataclass, field

from ..models import InterviewTemplate


@dataclass
class DependencyGraph:
    """Edges point from a question to the question it depends on."""
    order: list[str] = field(default_factory=list)
    edges: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_template(cls, template: InterviewTemplate) -> DependencyGraph:
        graph = cls()
        for question in template.iter_questions():
            graph.order.append(question.id)
            if question.depends_on is not None:
                graph.edges[question.id] = question.depends_on.question_id
        return graph

    def dependents_of(self, question_id: str) -> list[str]:
        """Questions whose visibility is controlled by `question_id` (in template order)."""
        return [q for q in self.order if self.edges.get(q) == question_id]

    def find_cycle(self) -> list[str]:
        """Return one dependency cycle as a list of ids, or [] if acyclic."""
        for start in self.order:
            path = [start]
            current = start
            while current in self.edges:
                current = self.edges[current]
                if current in path:
                    return path[path.index(current):] + [current]
                path.append(current)
        return []

    def validate(self) -> list[str]:
        """Return human-readable errors; empty when the graph is sound."""
        errors: list[str] = []
        position = {qid: i for i, qid in enumerate(self.order)}

        for dependent in self.order:
            target = self.edges.get(dependent)
            if target is None:
                continue
            if target == dependent:
                errors.append(f"Question '{dependent}' depends on itself")
            elif target not in position:
                errors.append(
                    f"Question '{dependent}' depends on non-existent question '{target}'"
                )
            elif position[target] > position[dependent]:
                errors.append(
                    f"Question '{dependent}' depends on '{target}', which is asked later"
                )

        cycle = self.find_cycle()
        if cycle:
            errors.append("Dependency cycle: " + " -> ".join(cycle))
        return errors
