from __future__ import annotations

import logging
import operator
import time
from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import quote

import httpx

from persistence import keypath

from .events import Callback, EventName, EventRegistry
from .types import (
    BackupsResult,
    ErrorEvent,
    GetAllResult,
    GetResult,
    MutationResult,
    TableResult,
    TablesResult,
)

logger = logging.getLogger(__name__)

AUTH_HEADER = "auth"


@dataclass
class _Reply:
    ok: bool
    code: int
    url: str
    body: Any


def normalize_url(url: str) -> str:
    if "://" not in url:
        url = "http://" + url.lstrip("/")
    if not url.endswith("/"):
        url += "/"
    return url


def _is_number(value: Any) -> bool:
    # bool is subclass of int in Python
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _index_of(array: list[Any], value: Any) -> int:
    for i, item in enumerate(array):
        if item == value and isinstance(item, bool) == isinstance(value, bool):
            return i
    return -1


class DatabaseClient:
    """
    Remote client for an EveDB server.

    HTTP failures never raise: they are delivered to "error" callbacks as
    `{code, message}` and the call returns its failure shape.

    Compound mutators (push/remove/shift/pop/unshift/add/sub/multi/divide)
    are a `get` followed by a `set`. Nothing makes the pair atomic; a write
    to the same key by someone else in between is silently overwritten.
    """

    def __init__(
        self,
        url: str,
        auth: str,
        *,
        http: httpx.AsyncClient | None = None,
        truthy_existence: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.url = normalize_url(url)
        self.auth = auth
        self.truthy_existence = truthy_existence
        self._owns_http = http is None
        self._http = http if http is not None else httpx.AsyncClient(timeout=timeout)
        self._events = EventRegistry()

    async def __aenter__(self) -> "DatabaseClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # -------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------
    def on(self, event: EventName, callback: Callback | None = None) -> Any:
        return self._events.on(event, callback)

    def off(self, event: EventName, callback: Callback) -> None:
        self._events.off(event, callback)

    def _emit(self, event: EventName, payload: Any) -> None:
        self._events.emit(event, payload)

    # -------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------
    def _url_for(self, route: str, *names: str) -> str:
        # Table names and backup ids are single path segments.
        parts = [route.strip("/")] + [quote(n, safe="") for n in names]
        path = "/".join(p for p in parts if p)
        return self.url + path + ("/" if route.endswith("/") and not names else "")

    async def _request(
        self,
        method: str,
        route: str,
        *names: str,
        params: dict[str, str] | None = None,
        body: Any = None,
    ) -> _Reply:
        url = self._url_for(route, *names)
        headers = {"Accept": "application/json", AUTH_HEADER: self.auth}
        try:
            response = await self._http.request(
                method,
                url,
                params=params,
                json=body,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %r", method, url, e)
            self._emit("error", ErrorEvent(code=0, message=str(e) or type(e).__name__))
            return _Reply(ok=False, code=0, url=url, body=None)

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_success:
            return _Reply(ok=True, code=response.status_code, url=str(response.url), body=payload)

        message = response.reason_phrase
        if isinstance(payload, dict) and isinstance(payload.get("message"), str):
            message = payload["message"]
        self._emit("error", ErrorEvent(code=response.status_code, message=message))
        return _Reply(ok=False, code=response.status_code, url=str(response.url), body=payload)

    def _error_shape(self, reply: _Reply) -> dict[str, Any]:
        if isinstance(reply.body, dict) and "code" in reply.body and "message" in reply.body:
            return reply.body
        return {"code": reply.code, "message": "Request failed"}

    # -------------------------------------------------------------------
    # Whole-database reads
    # -------------------------------------------------------------------
    async def get_all(self) -> GetAllResult:
        """Every table and every backup."""
        reply = await self._request("GET", "")
        result = GetAllResult(code=reply.code, url=reply.url, data=reply.body if reply.ok else None)
        if reply.ok:
            self._emit("getAll", result)
        return result

    async def get_tables(self) -> TablesResult:
        reply = await self._request("GET", "table/")
        data = reply.body.get("data", {}) if reply.ok and isinstance(reply.body, dict) else {}
        result = TablesResult(code=reply.code, url=reply.url, tables=list(data), data=data)
        if reply.ok:
            self._emit("getTables", result)
        return result

    async def get_backups(self) -> BackupsResult:
        reply = await self._request("GET", "backup/")
        data = reply.body.get("data", {}) if reply.ok and isinstance(reply.body, dict) else {}
        result = BackupsResult(code=reply.code, url=reply.url, backups=list(data), data=data)
        if reply.ok:
            self._emit("getBackups", result)
        return result

    async def ping(self) -> float:
        """Round-trip latency to the server, in milliseconds."""
        start = time.perf_counter()
        await self._request("GET", "")
        return (time.perf_counter() - start) * 1000

    # -------------------------------------------------------------------
    # Backups
    # -------------------------------------------------------------------
    async def backup_create(self) -> dict[str, Any]:
        reply = await self._request("POST", "backup/", body={"method": "create"})
        if not reply.ok:
            return self._error_shape(reply)
        self._emit("backupCreate", reply.body)
        return reply.body

    async def backup_get(self, backup_id: str, table: str | None = None) -> dict[str, Any]:
        params = {"table": table} if table else None
        reply = await self._request("GET", "backup", backup_id, params=params)
        if not reply.ok:
            return self._error_shape(reply)
        self._emit("backupGet", reply.body)
        return reply.body

    async def backup_restore(self, backup_id: str, table: str | None = None) -> dict[str, Any]:
        if not backup_id:
            error = ErrorEvent(code=400, message="You must give a id to restore")
            self._emit("error", error)
            return dict(error)
        body: dict[str, Any] = {"method": "restore"}
        if table:
            body["table"] = table
        reply = await self._request("POST", "backup", backup_id, body=body)
        if not reply.ok:
            return self._error_shape(reply)
        self._emit("backupRestore", reply.body)
        return reply.body

    async def backup_delete(self, backup_id: str, table: str | None = None) -> dict[str, Any]:
        """Delete a backup, one table of it, or every backup when `backup_id` is "all"."""
        if backup_id == "all":
            reply = await self._request("DELETE", "backup/")
        else:
            params = {"table": table} if table else None
            reply = await self._request("DELETE", "backup", backup_id, params=params)
        if not reply.ok:
            return self._error_shape(reply)
        self._emit("backupDelete", reply.body)
        return reply.body

    # -------------------------------------------------------------------
    # Tables and keys
    # -------------------------------------------------------------------
    async def exists(self, table: str) -> bool:
        reply = await self._request("GET", "table/")
        if not reply.ok or not isinstance(reply.body, dict):
            return False
        return table in (reply.body.get("data") or {})

    async def has(self, key: str, table: str) -> bool:
        reply = await self._request("GET", "table", table)
        if not reply.ok or not isinstance(reply.body, dict):
            return False
        return keypath.value_present(keypath.get(reply.body, key), self.truthy_existence)

    async def set(self, key: str, value: Any, table: str) -> TableResult:
        reply = await self._request("POST", "table", table, body={"id": key, "value": value})
        if not reply.ok or not isinstance(reply.body, dict):
            return TableResult(table=None, data=None, success=False)
        result = TableResult(table=reply.body.get("table"), data=reply.body.get("data"), success=True)
        self._emit("set", result)
        return result

    async def get_table(self, table: str) -> TableResult:
        reply = await self._request("GET", "table", table)
        if not reply.ok:
            return TableResult(table=table, data=None, success=False)
        result = TableResult(table=table, data=reply.body, success=True)
        self._emit("getTable", result)
        return result

    async def get(self, key: str, table: str) -> GetResult:
        reply = await self._request("GET", "table", table, params={"id": key})
        if not reply.ok or not isinstance(reply.body, dict):
            return GetResult(table=table, id=key, value=None, success=False, code=reply.code)
        result = GetResult(table=table, id=key, value=reply.body.get("value"), success=True)
        self._emit("get", result)
        return result

    async def delete_table(self, table: str) -> dict[str, Any]:
        reply = await self._request("DELETE", "table", table)
        if not reply.ok:
            return {"table": table, "data": None, "success": False}
        self._emit("delete", reply.body)
        return reply.body

    async def delete(self, key: str, table: str) -> dict[str, Any]:
        reply = await self._request("DELETE", "table", table, body={"id": key})
        if not reply.ok:
            return {"table": table, "data": None, "success": False}
        self._emit("delete", reply.body)
        return reply.body

    # -------------------------------------------------------------------
    # Compound mutators: one get, then one set. Not atomic.
    # -------------------------------------------------------------------
    @staticmethod
    def _result(table: str, key: str, old: Any, new: Any, success: bool) -> MutationResult:
        return MutationResult(table=table, id=key, old=old, new=new, success=success)

    def _present(self, value: Any) -> bool:
        if self.truthy_existence:
            return keypath.is_truthy(value)
        return value is not None

    async def _mutate_array(
        self,
        event: EventName,
        key: str,
        table: str,
        mutate: Callable[[list[Any]], None],
    ) -> MutationResult:
        got = await self.get(key, table)
        if not got["success"] and got.get("code") != 404:
            # Read failed for another reason than "absent": do not write blind.
            return self._result(table, key, None, None, False)

        current = got["value"] if self._present(got["value"]) else []
        if not isinstance(current, list):
            return self._result(table, key, current, None, False)

        old = list(current)
        mutate(current)
        setted = await self.set(key, current, table)
        if not setted["success"]:
            return self._result(table, key, None, None, False)

        result = self._result(table, key, old, current, True)
        self._emit(event, result)
        return result

    async def push(self, key: str, value: Any, table: str) -> MutationResult:
        return await self._mutate_array("push", key, table, lambda a: a.append(value))

    async def remove(self, key: str, value: Any, table: str) -> MutationResult:
        def _remove(array: list[Any]) -> None:
            idx = _index_of(array, value)
            if idx > -1:
                del array[idx]

        return await self._mutate_array("remove", key, table, _remove)

    async def shift(self, key: str, table: str) -> MutationResult:
        def _shift(array: list[Any]) -> None:
            if array:
                del array[0]

        return await self._mutate_array("shift", key, table, _shift)

    async def pop(self, key: str, table: str) -> MutationResult:
        def _pop(array: list[Any]) -> None:
            if array:
                array.pop()

        return await self._mutate_array("pop", key, table, _pop)

    async def unshift(self, key: str, value: Any, table: str) -> MutationResult:
        return await self._mutate_array("unshift", key, table, lambda a: a.insert(0, value))

    async def _arithmetic(
        self,
        event: EventName,
        key: str,
        value: Any,
        table: str,
        op: Callable[[Any, Any], Any],
    ) -> MutationResult:
        got = await self.get(key, table)
        n = got["value"]
        # A stored 0 reads as missing under truthy existence, so it fails here too.
        if not _is_number(n) or not self._present(n) or not _is_number(value):
            return self._result(table, key, None, None, False)
        try:
            computed = op(n, value)
        except ZeroDivisionError:
            return self._result(table, key, n, None, False)

        setted = await self.set(key, computed, table)
        if not setted["success"]:
            return self._result(table, key, n, None, False)

        result = self._result(table, key, n, computed, True)
        self._emit(event, result)
        return result

    async def add(self, key: str, value: Any, table: str) -> MutationResult:
        return await self._arithmetic("add", key, value, table, operator.add)

    async def sub(self, key: str, value: Any, table: str) -> MutationResult:
        return await self._arithmetic("sub", key, value, table, operator.sub)

    async def multi(self, key: str, value: Any, table: str) -> MutationResult:
        return await self._arithmetic("multi", key, value, table, operator.mul)

    async def divide(self, key: str, value: Any, table: str) -> MutationResult:
        return await self._arithmetic("divide", key, value, table, operator.truediv)
