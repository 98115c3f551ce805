"""
Controller API connections.

The controller speaks JSON RPC over a websocket. Each frame names a
facade, its version and a request; replies carry the same request-id.
A Connection is opened per API call and closed straight after.
"""

import itertools
import json
import logging
import ssl
from typing import Any

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.sync.client import ClientConnection, connect

from jujuform.config import ProviderConfig
from jujuform.errors import APIError, ControllerConnectionError

logger = logging.getLogger(__name__)

CLIENT_VERSION = "3.1.0"
ADMIN_FACADE_VERSION = 3

# Controller certificates are issued for this name, not the address
CONTROLLER_SERVER_NAME = "juju-apiserver"

_REDACTED_PARAMS = {"credentials", "password", "macaroons"}


class Connection:
    """
    One authenticated RPC session with a controller.

    Example:
        with Connection.open("10.0.0.10:17070", config) as conn:
            result = conn.rpc("Cloud", 7, "Clouds")
    """

    def __init__(self, websocket: ClientConnection, address: str, timeout: float = 30.0):
        self._ws = websocket
        self.address = address
        self._timeout = timeout
        self._request_ids = itertools.count(1)

    @classmethod
    def open(cls, address: str, config: ProviderConfig) -> "Connection":
        """
        Connect to one controller address and log in.

        Raises:
            ControllerConnectionError: If the websocket cannot be established
            APIError: If the controller rejects the login
        """
        uri = f"wss://{address}/api"
        logger.debug("Connecting to controller at %s", uri)
        try:
            websocket = connect(
                uri,
                ssl=_ssl_context(config.ca_certificate),
                server_hostname=CONTROLLER_SERVER_NAME if config.ca_certificate else None,
                open_timeout=config.timeout,
                max_size=None,
            )
        except (OSError, TimeoutError, WebSocketException) as e:
            raise ControllerConnectionError(f"cannot connect to {address}: {e}") from e

        conn = cls(websocket, address, timeout=config.timeout)
        try:
            conn.login(config.username, config.password)
        except Exception:
            conn.close()
            raise
        return conn

    def login(self, username: str, password: str) -> dict[str, Any]:
        return self.rpc(
            "Admin",
            ADMIN_FACADE_VERSION,
            "Login",
            {
                "auth-tag": f"user-{username}",
                "credentials": password,
                "client-version": CLIENT_VERSION,
            },
        )

    def rpc(
        self,
        facade: str,
        version: int,
        request: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Send one request and wait for its reply.

        Returns:
            The reply's "response" object

        Raises:
            APIError: If the controller replies with an error
            ControllerConnectionError: If the connection drops, times out or
                sends back something other than a JSON object
        """
        request_id = next(self._request_ids)
        frame = {
            "request-id": request_id,
            "type": facade,
            "version": version,
            "request": request,
            "params": params or {},
        }
        logger.debug("-> %s", json.dumps(_redact(frame)))

        try:
            self._ws.send(json.dumps(frame))
            raw = self._ws.recv(timeout=self._timeout)
        except (ConnectionClosed, TimeoutError) as e:
            raise ControllerConnectionError(
                f"{facade}.{request} on {self.address}: {e}"
            ) from e

        try:
            reply = json.loads(raw)
        except ValueError as e:
            raise ControllerConnectionError(
                f"{facade}.{request} on {self.address}: malformed reply: {e}"
            ) from e
        if not isinstance(reply, dict):
            raise ControllerConnectionError(
                f"{facade}.{request} on {self.address}: "
                f"expected a JSON object, got {type(reply).__name__}"
            )

        logger.debug("<- %s", json.dumps(reply))

        if reply.get("request-id") != request_id:
            raise ControllerConnectionError(
                f"{facade}.{request}: reply for request {reply.get('request-id')}, "
                f"expected {request_id}"
            )
        if reply.get("error"):
            raise APIError.from_reply(
                {"message": reply["error"], "code": reply.get("error-code")}
            )
        return reply.get("response") or {}

    def close(self) -> None:
        self._ws.close()

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Connection(address='{self.address}')"


class ConnectionFactory:
    """Opens connections against the first reachable controller address."""

    def __init__(self, config: ProviderConfig):
        self.config = config

    def get_connection(self) -> Connection:
        """
        Open an authenticated connection.

        Addresses are tried in order until one accepts the websocket. A
        rejected login is raised straight away and the remaining addresses
        are not tried, since every address belongs to the same controller.

        Raises:
            ControllerConnectionError: If no address accepts a connection
            APIError: If the controller rejects the login
        """
        failures = []
        for address in self.config.controller_addresses:
            try:
                return Connection.open(address, self.config)
            except ControllerConnectionError as e:
                logger.warning("%s", e)
                failures.append(str(e))

        raise ControllerConnectionError(
            "unable to connect to any controller address: " + "; ".join(failures)
        )


def _ssl_context(ca_certificate: str | None) -> ssl.SSLContext:
    if ca_certificate:
        return ssl.create_default_context(cadata=ca_certificate)
    return ssl.create_default_context()


def _redact(frame: dict[str, Any]) -> dict[str, Any]:
    params = frame.get("params") or {}
    if not _REDACTED_PARAMS & params.keys():
        return frame
    redacted = {k: ("***" if k in _REDACTED_PARAMS else v) for k, v in params.items()}
    return {**frame, "params": redacted}
