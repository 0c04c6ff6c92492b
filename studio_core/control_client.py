"""
Authenticated client for the Lightning control-plane REST API.

Every call is blocking; the tray runtime runs them on worker threads via
``studio_core.request_runner``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import requests
from requests.auth import HTTPBasicAuth

from studio_shared.studio_status import StudioStatus, Target, normalize_status
from studio_tray.studio_tray import logger as app_logger

DEFAULT_BASE_URL = os.environ.get("LIGHTNING_API_BASE_URL", "https://lightning.ai/v1")
DEFAULT_TIMEOUT_SECONDS = 15
GENERIC_ERROR_MESSAGE = "An error occurred with the request"
MISSING_CREDENTIALS_MESSAGE = "Lightning API credentials are not set. Please check the Settings."

_LOGGER = app_logger.get_logger()


class ControlClientError(RuntimeError):
    """Base class for failures talking to the control plane."""


class AuthError(ControlClientError):
    """Credentials are missing or were rejected (HTTP 401/403)."""


class NotFoundError(ControlClientError):
    """No studio matches the requested name."""


class RemoteError(ControlClientError):
    """Any other non-2xx response, transport failure or malformed payload."""

    def __init__(self, code: Optional[int], message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Credentials:
    user_id: str = ""
    api_key: str = ""
    teamspace_id: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.user_id and self.api_key and self.teamspace_id)


class StudioControlClient:
    """Thin wrapper over the cloudspace endpoints of one teamspace."""

    def __init__(
        self,
        credentials: Credentials,
        *,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    # ------------------------------------------------------------------#
    # Lookup
    # ------------------------------------------------------------------#

    def resolve_target(self, name: str) -> Target:
        payload = self._request("GET", self._cloudspaces_path(), params={"name": name})
        cloudspaces = _cloudspace_list(payload)
        if not cloudspaces:
            raise NotFoundError(f"Studio not found: {name}")
        return _to_target(cloudspaces[0], fallback_name=name)

    def list_targets(self) -> List[Target]:
        payload = self._request("GET", self._cloudspaces_path())
        targets = []
        for entry in _cloudspace_list(payload):
            try:
                targets.append(_to_target(entry))
            except RemoteError as exc:
                _LOGGER.warning("Skipping malformed cloudspace entry: {}", exc)
        return targets

    # ------------------------------------------------------------------#
    # Status
    # ------------------------------------------------------------------#

    def get_status(self, target: Target) -> StudioStatus:
        document = self._request("GET", self._cloudspace_path(target, "codestatus"))
        status = normalize_status(document)
        _LOGGER.debug("Studio {} reported status {}", target.label, status.value)
        return status

    def get_machine(self, target: Target) -> str:
        config = self._request("GET", self._cloudspace_path(target, "codeconfig"))
        compute_config = config.get("computeConfig")
        if not isinstance(compute_config, Mapping) or not isinstance(compute_config.get("name"), str):
            raise RemoteError(None, "Failed to retrieve compute configuration")
        return compute_config["name"]

    # ------------------------------------------------------------------#
    # Mutations
    # ------------------------------------------------------------------#

    def switch_machine(self, target: Target, machine_type: str) -> None:
        _LOGGER.info("Switching studio {} to {}", target.label, machine_type)
        self._request(
            "PUT",
            self._cloudspace_path(target, "codeconfig"),
            body=_compute_config_body(machine_type),
        )

    def start(self, target: Target, machine_type: str) -> None:
        _LOGGER.info("Starting studio {} on {}", target.label, machine_type)
        self._request(
            "POST",
            self._cloudspace_path(target, "start"),
            body=_compute_config_body(machine_type),
        )

    def stop(self, target: Target) -> None:
        _LOGGER.info("Stopping studio {}", target.label)
        self._request("POST", self._cloudspace_path(target, "stop"), body={})

    # ------------------------------------------------------------------#
    # Transport
    # ------------------------------------------------------------------#

    def _cloudspaces_path(self) -> str:
        return f"/projects/{self.credentials.teamspace_id}/cloudspaces"

    def _cloudspace_path(self, target: Target, action: str) -> str:
        return f"{self._cloudspaces_path()}/{target.id}/{action}"

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not self.credentials.is_complete:
            raise AuthError(MISSING_CREDENTIALS_MESSAGE)

        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json"}
        if body is not None:
            headers["Content-Type"] = "application/json"

        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=body,
                headers=headers,
                auth=HTTPBasicAuth(self.credentials.user_id, self.credentials.api_key),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise RemoteError(None, f"Request to control plane failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            message = _error_message(response)
            _LOGGER.debug("{} {} failed with {}: {}", method, path, response.status_code, message)
            if response.status_code in (401, 403):
                raise AuthError(message)
            raise RemoteError(response.status_code, message)

        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteError(response.status_code, "Control plane returned malformed JSON") from exc
        if not isinstance(payload, dict):
            raise RemoteError(response.status_code, "Control plane returned an unexpected payload")
        return payload


def _compute_config_body(machine_type: str) -> Dict[str, Any]:
    # Spot capacity is never requested.
    return {"computeConfig": {"name": machine_type, "spot": False}}


def _cloudspace_list(payload: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    cloudspaces = payload.get("cloudspaces")
    if not isinstance(cloudspaces, list):
        return []
    return [entry for entry in cloudspaces if isinstance(entry, Mapping)]


def _to_target(entry: Mapping[str, Any], *, fallback_name: str = "") -> Target:
    studio_id = entry.get("id")
    if not isinstance(studio_id, str) or not studio_id:
        raise RemoteError(None, "Cloudspace entry has no id")
    name = entry.get("name") or fallback_name or studio_id
    display_name = entry.get("displayName") or ""
    return Target(id=studio_id, name=str(name), display_name=str(display_name))


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return GENERIC_ERROR_MESSAGE
    if isinstance(payload, dict) and isinstance(payload.get("message"), str) and payload["message"]:
        return payload["message"]
    return GENERIC_ERROR_MESSAGE
