from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from app.config import Settings, get_settings
from wallet.encoding import Submission

logger = logging.getLogger(__name__)


class WalletGatewayError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class WalletRejectedError(WalletGatewayError):
    """The provider will never complete this operation."""


@dataclass(frozen=True)
class WalletResult:
    tx_hash: str | None = None
    user_op_hash: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> "WalletResult":
        payload = payload or {}
        return cls(
            tx_hash=payload.get("txHash") or None,
            user_op_hash=payload.get("userOpHash") or None,
        )


class WalletGatewayClient:
    """
    HTTP client for the custodial wallet provider:
    - auth: client credentials -> bearer token
    - resolver: telegram id -> smart account address
    - kernel/tx: submit an instruction
    - kernel/txStatus: resolve a userOpHash into a transaction hash
    """

    def __init__(self, settings: Settings | None = None, session: requests.Session | None = None):
        self.settings = settings or get_settings()
        self.http = session or requests

    def _user_id(self, tg_id: str) -> str:
        return f"{self.settings.wallet_user_prefix}:{tg_id}"

    def _post(self, url: str, payload: dict[str, Any], *, headers: dict[str, str] | None = None) -> dict[str, Any]:
        try:
            resp = self.http.post(
                url,
                json=payload,
                headers=headers,
                timeout=self.settings.wallet_timeout_s,
            )
        except requests.RequestException as e:
            raise WalletGatewayError(f"wallet request to {url} failed: {e}") from e

        if resp.status_code == self.settings.wallet_non_retryable_status:
            raise WalletRejectedError(
                f"wallet provider rejected request: {resp.status_code} {resp.text}",
                status_code=resp.status_code,
            )
        if resp.status_code >= 400:
            raise WalletGatewayError(
                f"wallet provider error: {resp.status_code} {resp.text}",
                status_code=resp.status_code,
            )

        try:
            return resp.json() or {}
        except ValueError as e:
            raise WalletGatewayError(f"invalid JSON from {url}") from e

    def access_token(self) -> str:
        body = self._post(
            self.settings.wallet_auth_url,
            {
                "client_id": self.settings.wallet_client_id,
                "client_secret": self.settings.wallet_client_secret,
            },
        )
        token = body.get("access_token")
        if not token:
            raise WalletGatewayError("wallet auth response missing access_token")
        return token

    def resolve_address(self, tg_id: str) -> str:
        body = self._post(self.settings.wallet_resolver_url, {"userIds": self._user_id(tg_id)})
        try:
            return body["users"][0]["accountAddress"]
        except (KeyError, IndexError, TypeError) as e:
            raise WalletGatewayError(f"resolver returned no address for {tg_id}") from e

    def submit(self, submission: Submission) -> WalletResult:
        token = self.access_token()
        payload = {
            "userId": self._user_id(submission.sender_tg_id),
            "chain": submission.chain_name,
            "to": submission.to,
            "value": submission.value,
            "data": submission.data,
            "delegatecall": submission.delegatecall,
            "auth": "",
        }
        logger.info("wallet submit sender=%s chain=%s", submission.sender_tg_id, submission.chain_name)
        body = self._post(
            self.settings.wallet_tx_url,
            payload,
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
        )
        return WalletResult.from_payload(body)

    def tx_status(self, user_op_hash: str) -> WalletResult:
        token = self.access_token()
        body = self._post(
            self.settings.wallet_tx_status_url,
            {"userOpHash": user_op_hash},
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
        )
        return WalletResult.from_payload(body)
