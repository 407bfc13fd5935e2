"""
Sample business logic for apigen.

Generate the handlers next to this file and serve them with any ASGI server:

    apigen examples/myapi/api.py examples/myapi/api_handlers.py

    # api_handlers.create_app(MyApi(), api_handlers.my_api_serve_http)
"""

import threading
from dataclasses import dataclass
from http import HTTPStatus
from typing import Annotated


class ApiError(Exception):
    def __init__(self, http_status, message):
        super().__init__(message)
        self.http_status = http_status


STATUS_USER = 0
STATUS_MODERATOR = 10
STATUS_ADMIN = 20


class RWLock:
    """Many readers or one writer."""

    def __init__(self):
        self._cond = threading.Condition()
        self._readers = 0
        self._writing = False

    def acquire_read(self):
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True

    def release_write(self):
        with self._cond:
            self._writing = False
            self._cond.notify_all()


@dataclass
class ProfileParams:
    login: Annotated[str, "apivalidator:required"]


@dataclass
class CreateParams:
    login: Annotated[str, "apivalidator:required,min=10"]
    name: Annotated[str, "apivalidator:paramname=full_name"]
    status: Annotated[str, "apivalidator:enum=user|moderator|admin,default=user"]
    age: Annotated[int, "apivalidator:min=0,max=128"]


@dataclass
class User:
    id: int
    login: str
    full_name: str
    status: int


@dataclass
class NewUser:
    id: int


class MyApi:
    def __init__(self):
        self.statuses = {
            "user": STATUS_USER,
            "moderator": STATUS_MODERATOR,
            "admin": STATUS_ADMIN,
        }
        self.users = {
            "vantonyuk": User(id=42, login="vantonyuk", full_name="Vyacheslav Antonyuk", status=STATUS_ADMIN),
        }
        self.next_id = 43
        self.lock = RWLock()

    # apigen:api {"url": "/user/profile", "auth": false}
    def profile(self, ctx, params: ProfileParams) -> User:
        if params.login == "bad_user":
            raise ApiError(HTTPStatus.INTERNAL_SERVER_ERROR, "bad user")

        self.lock.acquire_read()
        try:
            user = self.users.get(params.login)
        finally:
            self.lock.release_read()

        if user is None:
            raise ApiError(HTTPStatus.NOT_FOUND, "user not exist")
        return user

    # apigen:api {"url": "/user/create", "auth": true, "method": "POST"}
    def create(self, ctx, params: CreateParams) -> NewUser:
        if params.login == "bad_username":
            raise ApiError(HTTPStatus.INTERNAL_SERVER_ERROR, "bad user")

        self.lock.acquire_write()
        try:
            if params.login in self.users:
                raise ApiError(HTTPStatus.CONFLICT, f"user {params.login} exist")

            user_id = self.next_id
            self.next_id += 1
            self.users[params.login] = User(
                id=user_id,
                login=params.login,
                full_name=params.name,
                status=self.statuses[params.status],
            )
        finally:
            self.lock.release_write()

        return NewUser(id=user_id)


class OtherApi:

    # apigen:api {"url": "/user/create", "auth": true, "method": "POST"}
    def create(self, ctx, params: "OtherCreateParams") -> "OtherUser":
        return OtherUser(id=12, login=params.username, full_name=params.name, level=params.level)


@dataclass
class OtherCreateParams:
    username: Annotated[str, "apivalidator:required,min=3"]
    name: Annotated[str, "apivalidator:paramname=account_name"]
    cls: Annotated[str, "apivalidator:enum=warrior|sorcerer|rouge,default=warrior"]
    level: Annotated[int, "apivalidator:min=1,max=50"]


@dataclass
class OtherUser:
    id: int
    login: str
    full_name: str
    level: int
