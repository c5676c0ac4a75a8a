"""
Request lifecycle shared by engine adapters.

before_handle -> handler -> after_handle, with every exception routed to
the configured error hook.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Optional

from ..context import Context
from .base import ErrorHook, RouteRegistration

logger = logging.getLogger("ardea.engine")


async def maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def handle_request(
    registration: RouteRegistration,
    ctx: Context,
    error_hook: Optional[ErrorHook] = None,
) -> Any:
    """
    Run one request through a registered route.

    Returns whatever should be sent back: a pre-handler's early result,
    the (possibly post-processed) handler result, or the error hook's
    translation of a raised exception. Without an error hook exceptions
    propagate to the engine.
    """
    config = registration.config
    ctx.route = registration

    try:
        for hook in config.before_handle:
            early = await maybe_await(hook(ctx))
            if early is not None:
                return early

        result = await maybe_await(registration.handler(ctx))

        if config.after_handle is not None and not config.streaming:
            replaced = await maybe_await(config.after_handle(ctx, result))
            if replaced is not None:
                result = replaced

        return result

    except Exception as error:
        if error_hook is None:
            raise
        logger.debug(
            f"Routing {type(error).__name__} from {registration.method.upper()} "
            f"{registration.path} to error hook"
        )
        return await maybe_await(error_hook(ctx, error))
