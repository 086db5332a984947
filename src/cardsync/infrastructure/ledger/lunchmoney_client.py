"""HTTP client for the Lunch Money v2 API."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import httpx

from cardsync.domain.ledger.exceptions import (
    LedgerFailureKind,
    LedgerTagError,
    LedgerWriteError,
    classify_ledger_failure,
)
from cardsync.domain.ledger.ports import LedgerPort
from cardsync.domain.ledger.value_objects import BatchInsertResult, LedgerTransaction
from cardsync.domain.shared.value_objects import SecureString

logger = logging.getLogger(__name__)

TAG_EXISTS_STATUSES = (400, 409)


class LunchMoneyClient(LedgerPort):
    """Ledger adapter writing tags and transactions to Lunch Money."""

    def __init__(
        self,
        base_url: str,
        token: SecureString,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers={
                    "Authorization": f"Bearer {self._token.get_value()}",
                    "Content-Type": "application/json",
                },
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    async def ensure_tag(self, name: str) -> int:
        client = await self._get_client()
        try:
            response = await client.post("/tags", json={"name": name})
        except httpx.HTTPError as e:
            raise LedgerTagError(
                LedgerFailureKind.SERVICE_UNAVAILABLE,
                tag_name=name,
                detail=str(e) or type(e).__name__,
            ) from e

        if response.is_success:
            body = self._decode(response, tag_name=name)
            tag_id = _tag_id(body, name)
            logger.info("Created tag %s (id %d)", name, tag_id)
            return tag_id

        if response.status_code in TAG_EXISTS_STATUSES:
            logger.info("Tag %s may already exist, looking it up", name)
            tag_id = await self._find_tag(name)
            if tag_id is not None:
                return tag_id

        raise LedgerTagError(
            classify_ledger_failure(response.status_code),
            tag_name=name,
            status_code=response.status_code,
            detail=response.text[:200] or None,
        )

    async def _find_tag(self, name: str) -> Optional[int]:
        client = await self._get_client()
        try:
            response = await client.get("/tags")
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Could not list tags: %s", e)
            return None

        body = self._decode(response, tag_name=name)
        tags = body.get("tags", []) if isinstance(body, dict) else body
        for tag in tags or []:
            if isinstance(tag, dict) and tag.get("name") == name:
                return _tag_id(tag, name)
        return None

        body = self._decode(response)
        tags = body.get("tags", []) if isinstance(body, dict) else body
        for tag in tags or []:
            if isinstance(tag, dict) and tag.get("name") == name:
                return int(tag["id"])
        return None

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def insert_transactions(
        self,
        transactions: Sequence[LedgerTransaction],
        apply_rules: bool = True,
        skip_duplicates: bool = True,
    ) -> BatchInsertResult:
        client = await self._get_client()
        payload = {
            "transactions": [tx.to_payload() for tx in transactions],
            "apply_rules": apply_rules,
            "skip_duplicates": skip_duplicates,
        }
        try:
            response = await client.post("/transactions", json=payload)
        except httpx.HTTPError as e:
            raise LedgerWriteError(
                LedgerFailureKind.SERVICE_UNAVAILABLE,
                detail=str(e) or type(e).__name__,
            ) from e

        if not response.is_success:
            logger.warning(
                "Lunch Money returned %d: %s",
                response.status_code,
                response.text[:200] if response.text else "no body",
            )
            failure = classify_ledger_failure(response.status_code)
            detail = None
            if failure in (
                LedgerFailureKind.BAD_REQUEST,
                LedgerFailureKind.CLIENT_ERROR,
            ):
                detail = response.text[:500] or None
            raise LedgerWriteError(
                failure,
                status_code=response.status_code,
                detail=detail,
            )

        body = self._decode(response)
        if isinstance(body, dict) and body.get("error"):
            raise LedgerWriteError(
                LedgerFailureKind.BAD_REQUEST,
                status_code=response.status_code,
                detail=str(body["error"]),
            )
        return parse_insert_response(body, response.status_code)

    @staticmethod
    def _decode(response: httpx.Response, tag_name: Optional[str] = None) -> Any:
        try:
            return response.json()
        except ValueError as e:
            if tag_name is not None:
                raise LedgerTagError(
                    LedgerFailureKind.MALFORMED_RESPONSE,
                    tag_name=tag_name,
                    status_code=response.status_code,
                ) from e
            raise LedgerWriteError(
                LedgerFailureKind.MALFORMED_RESPONSE,
                status_code=response.status_code,
            ) from e


def _tag_id(tag: Any, name: str) -> int:
    """Read the numeric id of a tag object from the ledger."""
    value = tag.get("id") if isinstance(tag, dict) else None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise LedgerTagError(
            LedgerFailureKind.MALFORMED_RESPONSE,
            tag_name=name,
            detail=f"tag without a usable id: {str(tag)[:100]}",
        ) from e


def parse_insert_response(body: Any, status_code: int = 201) -> BatchInsertResult:
    """Count inserted and skipped transactions in an insert response.

    The v2 API answers ``{transactions: [...], skipped_duplicates: [...]}``;
    the older ``{ids: [...]}`` shape has no skipped list.
    """
    if isinstance(body, dict):
        if "transactions" in body or "skipped_duplicates" in body:
            return BatchInsertResult(
                inserted=len(body.get("transactions") or []),
                skipped=len(body.get("skipped_duplicates") or []),
                status_code=status_code,
            )
        if "ids" in body:
            return BatchInsertResult(
                inserted=len(body.get("ids") or []),
                skipped=0,
                status_code=status_code,
            )
    logger.warning("Unrecognized insert response: %s", str(body)[:200])
    return BatchInsertResult(
        inserted=0,
        skipped=0,
        status_code=status_code,
        recognized=False,
    )
