"""Bucket free functions into display categories by keyword."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

DEFAULT_CATEGORY = "General"


class FunctionClassifier:
    """Map a function name to a display category.

    Resource patterns are tried first, in order; a pattern contained in the
    name is itself the category. Keyword categories come next, in
    declaration order with keywords in list order. Names matching nothing
    fall into ``General``.
    """

    def __init__(
        self,
        keywords: Mapping[str, Sequence[str]] | None = None,
        resources: Sequence[str] = (),
    ):
        self._keywords = dict(keywords or {})
        self._resources = [r for r in resources if r]

    def category(self, function_name: str) -> str:
        for resource in self._resources:
            if resource in function_name:
                return resource
        for category, keywords in self._keywords.items():
            for keyword in keywords:
                if keyword and keyword in function_name:
                    return category
        return DEFAULT_CATEGORY

    def bucket_name(self, function_name: str) -> str:
        return f"{self.category(function_name)}Functions"
