import json
import logging
import os
import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol, Sequence, Tuple, Any

import requests
from requests.auth import HTTPBasicAuth

from peerless.domain.config import Config
from peerless.domain.names import sanitize
from peerless.domain.torrent import (
    BASIC_FIELDS,
    DirectoryInfo,
    RemoteItem,
    SessionInfo,
    SessionStats,
)
from peerless.external.errors import (
    ProtocolError,
    SessionError,
    TransportError,
    error_for_status,
)

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Transmission-Session-Id"
CONFLICT_STATUS = 409
HTTP_TIMEOUT = 30.0
MAX_CONFLICT_RETRIES = 1


@dataclass
class RpcResponse:
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def session_id(self) -> Optional[str]:
        wanted = SESSION_HEADER.lower()
        for (key, value) in self.headers.items():
            if key.lower() == wanted:
                return value or None
        return None


class RpcTransport(Protocol):
    host: str
    port: int

    def send(self, body: bytes, session_id: Optional[str] = None) -> RpcResponse:
        raise NotImplementedError


class RequestsTransport(RpcTransport):
    """POSTs to the Transmission RPC endpoint. HTTP statuses are returned as-is,
    only failures without a response are raised (as TransportError)."""

    def __init__(
        self,
        config: Config,
        session: Optional[requests.Session] = None,
        timeout: float = HTTP_TIMEOUT,
    ):
        self.host = config.host
        self.port = config.port
        self.url = config.rpc_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.auth = HTTPBasicAuth(config.user, config.password) if config.user else None

    def send(self, body: bytes, session_id: Optional[str] = None) -> RpcResponse:
        headers = {}
        if body:
            headers["Content-Type"] = "application/json"
        if session_id:
            headers[SESSION_HEADER] = session_id
        try:
            response = self.session.post(
                self.url,
                data=body,
                headers=headers,
                auth=self.auth,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError.connection(self.host, self.port, e) from e
        return RpcResponse(response.status_code, response.headers, response.content)


def rpc_request(method: str, arguments: Optional[Mapping[str, Any]] = None) -> Mapping:
    request: dict = {"method": method}
    if arguments:
        request["arguments"] = dict(arguments)
    return request


class SessionManager:
    """Owns the Transmission session id.

    The id is fetched lazily by a handshake and reused until Transmission answers
    409, at which point it is replaced and the request is sent once more.
    Reading a cached id takes no lock; the handshake and the replacement of a
    rejected id run under one lock so concurrent callers share a single fetch.
    """

    def __init__(self, transport: RpcTransport):
        self.transport = transport
        self._session_id: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def host(self) -> str:
        return self.transport.host

    @property
    def port(self) -> int:
        return self.transport.port

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    def get_session_id(self) -> str:
        session_id = self._session_id
        if session_id is not None:
            return session_id
        with self._lock:
            if self._session_id is None:
                self._session_id = self._handshake()
            return self._session_id

    def _handshake(self) -> str:
        response = self.transport.send(b"")
        status = response.status_code
        if status >= 400 and status != CONFLICT_STATUS:
            raise error_for_status(status, self.host, self.port)
        session_id = response.session_id
        if session_id is None:
            raise SessionError.missing_token(self.host, self.port, status)
        logger.debug(f"acquired session id from {self.host}:{self.port}")
        return session_id

    def _renew(self, rejected: str, offered: Optional[str]) -> str:
        with self._lock:
            current = self._session_id
            if current is not None and current != rejected:
                # another caller already replaced it
                return current
            self._session_id = None
            self._session_id = offered or self._handshake()
            return self._session_id

    def do_authenticated_request(self, request: Mapping) -> Mapping:
        body = json.dumps(request).encode("utf-8")
        session_id = self.get_session_id()
        response = self.transport.send(body, session_id)
        for _ in range(MAX_CONFLICT_RETRIES):
            if response.status_code != CONFLICT_STATUS:
                break
            logger.info(
                f"session id rejected by {self.host}:{self.port}, retrying once"
            )
            session_id = self._renew(session_id, response.session_id)
            response = self.transport.send(body, session_id)
        if response.status_code == CONFLICT_STATUS:
            raise SessionError.repeated_conflict(self.host, self.port)
        if response.status_code >= 400:
            raise error_for_status(response.status_code, self.host, self.port)
        payload = self._decode(response)
        result = payload.get("result")
        if result != "success":
            raise ProtocolError.for_result(
                str(result), self.host, self.port, response.status_code
            )
        return payload

    def _decode(self, response: RpcResponse) -> Mapping:
        try:
            payload = json.loads(response.body)
        except ValueError as e:
            raise TransportError.malformed(
                self.host, self.port, response.status_code, e
            ) from e
        if not isinstance(payload, Mapping):
            raise TransportError.malformed(
                self.host,
                self.port,
                response.status_code,
                ValueError("response is not a JSON object"),
            )
        return payload


def join_remote_path(download_dir: str, name: str) -> str:
    return os.path.normpath(os.path.join(download_dir, name))


class TransmissionApi(Protocol):
    def list_items(self, fields: Sequence[str] = BASIC_FIELDS) -> Sequence[RemoteItem]:
        raise NotImplementedError

    def list_all_paths(self) -> Sequence[str]:
        raise NotImplementedError

    def list_directories(self) -> Sequence[DirectoryInfo]:
        raise NotImplementedError

    def get_session_info(self) -> SessionInfo:
        raise NotImplementedError

    def get_session_stats(self) -> Tuple[SessionStats, SessionStats]:
        raise NotImplementedError


class TransmissionClient(TransmissionApi):
    def __init__(self, session: SessionManager):
        self.session = session

    def _call(self, method: str, arguments: Optional[Mapping] = None) -> Mapping:
        payload = self.session.do_authenticated_request(rpc_request(method, arguments))
        result = payload.get("arguments")
        if result is None:
            return {}
        if not isinstance(result, Mapping):
            raise self._malformed(f"{method} arguments are not a JSON object")
        return result

    def _malformed(self, reason: str) -> TransportError:
        return TransportError.malformed(
            self.session.host, self.session.port, 200, ValueError(reason)
        )

    def list_items(self, fields: Sequence[str] = BASIC_FIELDS) -> Sequence[RemoteItem]:
        arguments = self._call("torrent-get", {"fields": list(fields)})
        torrents = arguments.get("torrents") or []
        if not isinstance(torrents, list):
            raise self._malformed("torrents is not a JSON array")
        items = []
        for torrent in torrents:
            if not isinstance(torrent, Mapping):
                raise self._malformed("torrent entry is not a JSON object")
            item = RemoteItem.from_rpc(torrent)
            if not item.name or not item.download_dir:
                logger.warning(f"skipping torrent without name or location: {item.id}")
                continue
            items.append(item)
        logger.debug(f"fetched {len(items)} torrents")
        return items

    def list_all_paths(self) -> Sequence[str]:
        paths = [
            sanitize(join_remote_path(item.download_dir, item.name))
            for item in self.list_items()
        ]
        return sorted(paths)

    def list_directories(self) -> Sequence[DirectoryInfo]:
        counts = Counter(item.download_dir for item in self.list_items())
        directories = [
            DirectoryInfo(sanitize(path), count) for (path, count) in counts.items()
        ]
        return sorted(directories, key=lambda directory: directory.path)

    def get_session_info(self) -> SessionInfo:
        return SessionInfo.from_rpc(self._call("session-get"))

    def get_session_stats(self) -> Tuple[SessionStats, SessionStats]:
        arguments = self._call("session-stats")
        return (
            SessionStats.from_rpc(arguments.get("current-stats")),
            SessionStats.from_rpc(arguments.get("cumulative-stats")),
        )


def transmission_factory(config: Config) -> TransmissionClient:
    transport = RequestsTransport(config)
    return TransmissionClient(SessionManager(transport))
