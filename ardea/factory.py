"""
Application Factory

Assembles a root module into a configured engine:

    before_start callbacks -> CORS -> plugins -> docs -> error hook
    -> every listed controller/socket initializer, in list order
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from .application import ApplicationContext
from .config import CreateOptions
from .controller.decorators import INITIALIZE_KEY
from .engine.base import Engine
from .engine.lifecycle import maybe_await
from .faults import BootFault, InvalidModuleFault, MissingInitializerFault
from .module import module_controllers

logger = logging.getLogger("ardea.factory")

Options = Union[CreateOptions, Mapping[str, Any], None]


class ArdeaFactory:
    """
    Entry point for building an application.

    Example:
        @Module(controllers=[UsersController])
        class AppModule:
            pass

        app = await ArdeaFactory.create(AppModule, {
            "cors": True,
            "swagger": {"title": "Users API"},
            "auth": bearer_auth(tokens.verify),
            "response": envelope_response,
            "error": http_error_handler,
        })
        app.listen(port=8000)
    """

    @staticmethod
    async def create(
        root_module: type,
        options: Options = None,
        *,
        engine: Optional[Engine] = None,
        context: Optional[ApplicationContext] = None,
        exit_on_fault: bool = True,
    ) -> Engine:
        """
        Build the application and return the configured engine.

        Args:
            root_module: Class decorated with ``@Module``
            options: ``CreateOptions`` or a plain mapping of the same fields
            engine: Engine to configure (defaults to a new StarletteEngine)
            context: Application context (defaults to a fresh container
                     over the default metadata registry)
            exit_on_fault: Turn boot faults into ``SystemExit(1)``; when
                           False the fault propagates

        Raises:
            SystemExit: A wiring fault aborted assembly
        """
        try:
            return await ArdeaFactory._assemble(root_module, options, engine, context)
        except BootFault as fault:
            logger.critical(f"Application assembly failed: {fault}")
            if not exit_on_fault:
                raise
            raise SystemExit(1) from fault

    @staticmethod
    async def _assemble(
        root_module: type,
        options: Options,
        engine: Optional[Engine],
        context: Optional[ApplicationContext],
    ) -> Engine:
        opts = CreateOptions.from_mapping(options)
        context = context or ApplicationContext()

        if engine is None:
            from .engine.asgi import StarletteEngine
            engine = StarletteEngine()

        logger.info(f"Starting Ardea application {root_module.__name__}")

        for callback in opts.before_start:
            await maybe_await(callback())

        if opts.cors:
            engine.use(engine.cors_plugin(_plugin_config(opts.cors)))

        for plugin in opts.plugins:
            engine.use(plugin)

        if opts.swagger:
            engine.use(engine.docs_plugin(_plugin_config(opts.swagger)))

        if opts.error is not None:
            engine.on_error(opts.error)

        controllers = module_controllers(root_module, context.registry)
        if controllers is None:
            raise InvalidModuleFault(root_module)

        for cls in controllers:
            initialize = context.registry.get(cls, INITIALIZE_KEY)
            if initialize is None:
                raise MissingInitializerFault(root_module, cls)
            await initialize(engine, context, auth=opts.auth, response=opts.response)

        logger.info(f"Ardea application {root_module.__name__} assembled ({len(controllers)} declarations)")
        return engine


def _plugin_config(value: Any) -> dict:
    return dict(value) if isinstance(value, Mapping) else {}


async def create_app(root_module: type, options: Options = None, **kwargs: Any) -> Engine:
    """Shorthand for ``ArdeaFactory.create``."""
    return await ArdeaFactory.create(root_module, options, **kwargs)
