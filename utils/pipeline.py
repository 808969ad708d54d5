"""
A small request pipeline: an ordered list of handlers that share one
RequestContext.

Each handler receives the context and may fill it in. Raising stops the
pipeline and the exception reaches the caller; returning anything other
than None also stops it and that value becomes the pipeline's result (the
same contract as Flask's before_request hooks).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional


@dataclass
class RequestContext:
    request: Any
    token: Optional[str] = None
    user: Any = None
    extras: Dict[str, Any] = field(default_factory=dict)


Handler = Callable[[RequestContext], Any]


class Pipeline:

    def __init__(self, *handlers: Handler):
        self._handlers: List[Handler] = list(handlers)

    def use(self, handler: Handler) -> "Pipeline":
        self._handlers.append(handler)
        return self

    def __len__(self):
        return len(self._handlers)

    def run(self, ctx: RequestContext) -> Any:
        for handler in self._handlers:
            result = handler(ctx)
            if result is not None:
                return result
        return None
