"""Call tracing middleware for pipeline stages.

``traced`` wraps a callable and logs compact projections of its arguments and
result at DEBUG level. Projections are supplied explicitly through
``TraceOptions`` so large states are never dumped wholesale.
"""

from __future__ import annotations

import functools
import json
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, ParamSpec, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

DEFAULT_MAX_JSON = 2000

_max_json = DEFAULT_MAX_JSON


def configure_tracing(max_json: int) -> None:
    global _max_json  # noqa: PLW0603
    _max_json = max_json if max_json > 0 else DEFAULT_MAX_JSON


@dataclass(frozen=True)
class TraceOptions:
    tag: str | None = None
    pick_args: Callable[[Sequence[Any]], Any] | None = None
    arg_indices: Sequence[int] | None = None
    pick_result: Callable[[Any], Any] | None = None
    max_len: int | None = None


def _default(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(by_alias=True)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    return str(obj)


def clip_json(obj: Any, max_len: int | None = None) -> str:
    try:
        text = json.dumps(obj, default=_default, ensure_ascii=False)
    except (TypeError, ValueError):
        text = str(obj)
    max_len = max_len or _max_json
    if len(text) > max_len:
        return f"{text[:max_len]} ...(+{len(text) - max_len})"
    return text


def traced(options: TraceOptions | str | None = None) -> Callable[[Callable[P, R]], Callable[P, R]]:
    opts = TraceOptions(tag=options) if isinstance(options, str) else (options or TraceOptions())

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        name = opts.tag or func.__name__

        def arg_view(args: Sequence[Any]) -> Any:
            if opts.pick_args is not None:
                return opts.pick_args(args)
            if opts.arg_indices:
                return [args[i] for i in opts.arg_indices if i < len(args)]
            return list(args)

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("enter %s: args=%s", name, clip_json(arg_view(args), opts.max_len))
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.debug("error %s: +%dms %s", name, (time.perf_counter() - started) * 1000, e)
                raise
            if logger.isEnabledFor(logging.DEBUG):
                view = opts.pick_result(result) if opts.pick_result is not None else result
                logger.debug(
                    "exit  %s: +%dms out=%s", name, (time.perf_counter() - started) * 1000, clip_json(view, opts.max_len)
                )
            return result

        return wrapper

    return decorator
