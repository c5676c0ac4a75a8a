"""
Small application used by the CLI tests.
"""

from typing import Annotated

from ardea import ApiTag, Controller, Get, Module, Param, Post, Public, Websocket, Message
from ardea.auth import bearer_auth


@Controller("/books")
@ApiTag("Books")
class BooksController:
    @Get()
    @Public()
    def index(self):
        return []

    @Get("/:id")
    def show(self, id: Annotated[str, Param("id")]):
        return {"id": id}

    @Post()
    def create(self):
        return {}

    @Get("/feed")
    @Public()
    async def feed(self):
        yield {}


@Websocket("/chat")
class ChatSocket:
    @Message()
    def received(self, ws, message):
        pass


@Module(controllers=[BooksController, ChatSocket])
class AppModule:
    pass


class NotAModule:
    pass


OPTIONS = {
    "auth": bearer_auth(lambda token: None),
}
