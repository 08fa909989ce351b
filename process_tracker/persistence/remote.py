"""Remote storage backend: one JSON document in a JSONBin bin."""

import logging

import httpx

from ..processes.contracts import AppState
from .contracts import ConfigurationError, PersistenceAdapter, PersistenceError

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "TU_API_KEY_VA_AQUI"
PLACEHOLDER_BIN_ID = "EL_ID_DE_TU_BIN_VA_AQUI"


class JsonBinAdapter(PersistenceAdapter):
    """Fetches and overwrites the whole state document over HTTPS."""

    BASE_URL = "https://api.jsonbin.io/v3"
    TIMEOUT = 30

    NOT_CONFIGURED = "API Key o Bin ID no configurados."
    FETCH_FAILED = "No se pudieron obtener los datos. Verifica tus claves de API y el ID del Bin."

    def __init__(
        self,
        bin_id: str,
        api_key: str,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.bin_id = bin_id
        self.api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else self.TIMEOUT
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(
            self.api_key
            and self.bin_id
            and self.api_key != PLACEHOLDER_API_KEY
            and self.bin_id != PLACEHOLDER_BIN_ID
        )

    @property
    def bin_url(self) -> str:
        return f"{self.base_url}/b/{self.bin_id}"

    def load(self) -> AppState:
        """GET the latest document version; 404 means first run."""
        if not self.is_configured:
            raise ConfigurationError(self.NOT_CONFIGURED)

        try:
            with self._client() as client:
                response = client.get(f"{self.bin_url}/latest", headers=self._headers())
        except httpx.HTTPError as e:
            logger.warning(f"JsonBin: fetch failed: {e}")
            raise PersistenceError(self.FETCH_FAILED) from e

        if response.status_code == 404:
            logger.info(f"JsonBin: bin {self.bin_id} not found, starting empty")
            return AppState()
        if not response.is_success:
            logger.warning(f"JsonBin: fetch returned HTTP {response.status_code}")
            raise PersistenceError(self.FETCH_FAILED)

        try:
            data = response.json()
        except ValueError as e:
            raise PersistenceError(self.FETCH_FAILED) from e
        record = data.get("record") if isinstance(data, dict) else None
        if not isinstance(record, dict):
            return AppState()
        try:
            return AppState.from_dict(record)
        except (KeyError, ValueError, TypeError) as e:
            raise PersistenceError(f"Stored document is malformed: {e}") from e

    def save(self, state: AppState) -> None:
        """PUT the whole document. Skipped with a warning when unconfigured."""
        if not self.is_configured:
            logger.warning("JsonBin: API key or bin id not configured, changes not saved remotely")
            return

        headers = {"Content-Type": "application/json", **self._headers()}
        try:
            with self._client() as client:
                response = client.put(self.bin_url, json=state.to_dict(), headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"JsonBin: save failed: {e}")
            raise PersistenceError(f"No se pudieron guardar los datos: {e}") from e

        if not response.is_success:
            detail = self._error_message(response)
            logger.warning(f"JsonBin: save returned HTTP {response.status_code}: {detail}")
            raise PersistenceError(f"No se pudieron guardar los datos: {detail}")

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self._transport)

    def _headers(self) -> dict[str, str]:
        return {"X-Master-Key": self.api_key}

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return f"HTTP {response.status_code}"
