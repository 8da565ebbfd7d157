"""Priority-ordered formatting engine."""

from __future__ import annotations

import logging
from typing import Iterable

from mdtidy.exceptions import FormatError
from mdtidy.rules import Rule, default_rules
from mdtidy.schemas import Document, FormatterConfig, Node
from mdtidy.schemas.nodes import walk

logger = logging.getLogger(__name__)


class FormattingEngine:
    """Apply formatting rules to a document tree in place.

    Rules are kept sorted by priority, highest first; rules with equal
    priority keep their registration order. For each node only the first
    rule that claims its kind runs.
    """

    def __init__(self, rules: Iterable[Rule] | None = None) -> None:
        self._rules: list[Rule] = []
        for rule in default_rules() if rules is None else rules:
            self.register(rule)

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules)

    def register(self, rule: Rule) -> None:
        """Add a rule, keeping the list ordered by descending priority."""
        self._rules.append(rule)
        # sort() is stable, so ties stay in registration order.
        self._rules.sort(key=lambda r: -r.priority)

    def rule_for(self, node: Node) -> Rule | None:
        """Return the rule that would format ``node``, if any."""
        for rule in self._rules:
            if rule.applies_to(node):
                return rule
        return None

    def format(self, document: Document, config: FormatterConfig | None = None) -> None:
        """Run one pre-order pass over ``document``.

        Raises:
            FormatError: A rule failed; the tree may be partially mutated and
                must not be rendered.
        """
        cfg = config or FormatterConfig()
        for node in walk(document):
            rule = self.rule_for(node)
            if rule is None:
                continue
            try:
                rule.apply(node, cfg)
            except FormatError:
                raise
            except Exception as exc:
                raise FormatError(f"rule {rule.name!r} failed on {node.kind} node: {exc}") from exc
        logger.debug("Formatted document", extra={"blocks": len(document.children)})
