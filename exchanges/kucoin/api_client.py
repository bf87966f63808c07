"""
KuCoin REST API Client

This module provides an async HTTP client for the authenticated KuCoin REST API.
It handles:
- Request signing (HMAC-SHA256, API key version 3)
- One HTTP round trip per call through a shared aiohttp session
- Typed response parsing into our Pydantic schemas
- Error classification (transport / HTTP status / serialization)

Failures are raised to the caller and never retried: a signature is bound to
the timestamp it was computed with.

API Documentation:
    https://www.kucoin.com/docs

Usage:
    credentials = Credentials(key, secret, passphrase)
    async with KucoinAPIClient(credentials) as client:
        order = SpotOrderRequest.new(TradeType.MARKET, "BTC-USDT", Side.BUY).with_funds(100)
        result = await client.place_order(order)
        print(result.data.order_id)
"""

import aiohttp
import asyncio
import threading
import time
from typing import List, Optional, Type, TypeVar
from urllib.parse import quote

from pydantic import BaseModel, ValidationError
from yarl import URL

from core.config import Settings, settings
from core.errors import HTTPStatusError, RequestValidationError, SerializationError, TransportError
from core.logging import get_logger, log_api_request, log_api_response
from core.schemas import (
    ApiResponse,
    BatchOrderRequest,
    Deposit,
    DepositList,
    DepositQuery,
    KucoinRequest,
    SpotCancelRequest,
    SpotCanceledData,
    SpotOrderData,
    SpotOrderRequest,
    SpotOrderResult,
    SubAccountApiData,
    SubAccountApiRequest,
    SubAccountBalance,
    SubAccountList,
    TransferData,
    TransferRequest,
    WithdrawData,
    WithdrawRequest,
)
from core.utils.time import get_timestamp_ms
from .auth import Credentials, build_headers


M = TypeVar("M", bound=BaseModel)

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"})


def normalize_method(method: str) -> str:
    """
    Upper-case and check an HTTP verb.

    Raises:
        ValueError: If the verb is not a standard HTTP method
    """
    verb = method.upper() if isinstance(method, str) else None
    if verb not in HTTP_METHODS:
        raise ValueError(f"Invalid HTTP method: {method!r}")
    return verb


def serialize_request(request: KucoinRequest) -> str:
    """
    Serialize a request model into its JSON body.

    Raises:
        SerializationError: If the model cannot be encoded
    """
    try:
        return request.to_json()
    except (ValueError, TypeError) as e:
        raise SerializationError(f"Could not serialize {type(request).__name__}: {e}") from e


class KucoinAPIClient:
    """
    Async signing client for the KuCoin REST API

    Attributes:
        base_url: KuCoin API base URL (no trailing slash)
        timeout: Total request timeout in seconds
        key_version: Value of the KC-API-KEY-VERSION header
        session: Shared aiohttp ClientSession (created by `async with`)
        logger: Logger instance for debugging

    Example:
        >>> async with KucoinAPIClient(Credentials(key, secret, passphrase)) as client:
        ...     balance = await client.get_sub_account_balance("63743f07e0c5230001761d08")

    Notes:
        - The session is shared by every call and is safe for concurrent use
        - Each call takes its own credential snapshot and its own timestamp
        - Path and body are passed per call; nothing request-specific is stored
          on the client
    """

    def __init__(
        self,
        credentials: Credentials,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        key_version: Optional[str] = None,
    ):
        """
        Initialize the KuCoin API client.

        Args:
            credentials: API key, secret and passphrase
            base_url: Override for the API host (defaults to KUCOIN_BASE_URL)
            timeout: Override for the request timeout (defaults to REQUEST_TIMEOUT)
            key_version: Override for KC-API-KEY-VERSION (defaults to KUCOIN_KEY_VERSION)
        """
        self.base_url = (base_url or settings.kucoin_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.key_version = key_version if key_version is not None else settings.kucoin_key_version
        self.logger = get_logger(__name__)
        self.session: Optional[aiohttp.ClientSession] = None
        self._credentials = credentials
        self._credentials_lock = threading.Lock()

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "KucoinAPIClient":
        """Build a client entirely from environment / .env settings."""
        config = config or settings
        return cls(
            Credentials.from_settings(config),
            base_url=config.kucoin_base_url,
            timeout=config.request_timeout,
            key_version=config.kucoin_key_version,
        )

    # ============================================
    # Context Manager for Session Management
    # ============================================

    async def __aenter__(self):
        self.session = aiohttp.ClientSession()
        self.logger.debug("KucoinAPIClient session created")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("KucoinAPIClient session closed")

    # ============================================
    # Credential Management
    # ============================================

    def set_credentials(self, credentials: Credentials) -> "KucoinAPIClient":
        """
        Replace the credentials used for all subsequent calls.

        The swap is atomic: a signing step in progress keeps the snapshot it
        already took, and the next call uses the new credentials.
        """
        with self._credentials_lock:
            self._credentials = credentials
        self.logger.info("KuCoin credentials replaced")
        return self

    def _credentials_snapshot(self) -> Credentials:
        with self._credentials_lock:
            return self._credentials

    # ============================================
    # Signing Dispatcher
    # ============================================

    async def send(self, method: str, path: str, body: str, response_model: Type[M]) -> M:
        """
        Sign and send one request, then parse the response.

        Args:
            method: HTTP method (case-insensitive, must be a standard verb)
            path: Request path including any query string
            body: Pre-serialized JSON body, or "" for bodyless requests
            response_model: Pydantic model the response body is validated into

        Returns:
            Instance of `response_model`

        Raises:
            ValueError: If `method` is not a valid HTTP verb
            RuntimeError: If the session is not open
            TransportError: On connection failure or timeout
            HTTPStatusError: On a 4xx/5xx response (body is not parsed)
            SerializationError: If the response does not match `response_model`
        """
        method = normalize_method(method)

        if not self.session:
            raise RuntimeError("Client session not initialized. Use 'async with' statement.")

        body = body or ""
        # Path is already encoded and must reach the wire exactly as signed
        url = URL(f"{self.base_url}{path}", encoded=True)
        log_api_request(method, path, len(body))

        started = time.monotonic()
        try:
            # Timestamp is taken right before the request goes out
            headers = build_headers(
                self._credentials_snapshot(),
                get_timestamp_ms(),
                method,
                path,
                body,
                key_version=self.key_version,
            )
            async with self.session.request(
                method,
                url,
                headers=headers,
                data=body.encode("utf-8"),
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                status = resp.status
                raw = await resp.read()

        except asyncio.TimeoutError as e:
            self.logger.error(f"Timeout on {method} {path}")
            raise TransportError(f"Timeout on {method} {path}") from e

        except aiohttp.ClientError as e:
            self.logger.error(f"Request failed on {method} {path}: {e}")
            raise TransportError(f"Request failed on {method} {path}: {e}") from e

        log_api_response(method, path, status, time.monotonic() - started)

        if status >= 400:
            text = raw.decode("utf-8", errors="replace")
            self.logger.warning(f"HTTP {status} on {method} {path}: {text}")
            raise HTTPStatusError(status, text, path)

        try:
            return response_model.model_validate_json(raw)
        except ValidationError as e:
            self.logger.error(f"Unexpected response on {method} {path}: {e.error_count()} validation error(s)")
            raise SerializationError(
                f"Response for {method} {path} does not match {response_model.__name__}: {e}"
            ) from e

    # ============================================
    # Deposits
    # ============================================

    async def get_deposit_history(self, query: Optional[DepositQuery] = None) -> ApiResponse[DepositList]:
        """
        Fetch one page of deposit history.

        Args:
            query: Filter (currency, status, time window, paging); all deposits if None

        KuCoin Endpoint:
            GET /api/v1/deposits?<query>

        Example:
            >>> query = DepositQuery(currency="SOL").with_status(DepositStatus.SUCCESS)
            >>> page = await client.get_deposit_history(query)
            >>> print(page.data.total_num)
        """
        query = query or DepositQuery()
        query_string = query.to_query_string()
        path = "/api/v1/deposits"
        if query_string:
            path = f"{path}?{query_string}"

        self.logger.info(f"Fetching deposit history ({query_string or 'no filter'})")
        return await self.send("GET", path, "", ApiResponse[DepositList])

    async def find_deposit(self, tx_id: str, query: Optional[DepositQuery] = None) -> Optional[Deposit]:
        """
        Look up a deposit by its on-chain transaction hash.

        Only the page selected by `query` is searched.

        Returns:
            The matching Deposit, or None if it is not on that page
        """
        page = await self.get_deposit_history(query)
        if page.data is None:
            return None

        for item in page.data.items:
            if item.wallet_tx_id == tx_id:
                return item

        self.logger.debug(f"No deposit found for tx {tx_id}")
        return None

    # ============================================
    # Spot Trading (HF)
    # ============================================

    async def place_order(self, order: SpotOrderRequest) -> ApiResponse[SpotOrderData]:
        """
        Place a single spot order.

        KuCoin Endpoint:
            POST /api/v1/hf/orders

        Returns:
            Envelope with orderId/clientOid; `data` is None if the order was refused

        Raises:
            RequestValidationError: If the order's size/price/funds don't fit its type
        """
        order.validate_order()
        body = serialize_request(order)

        self.logger.info(f"Placing {order.trade_type.value} {order.side.value} order on {order.symbol}")
        return await self.send("POST", "/api/v1/hf/orders", body, ApiResponse[SpotOrderData])

    async def place_multi_orders(self, batch: BatchOrderRequest) -> ApiResponse[List[SpotOrderResult]]:
        """
        Place several spot orders in one request.

        KuCoin Endpoint:
            POST /api/v1/hf/orders/multi

        Returns:
            Envelope with one SpotOrderResult per order (check `success` on each)
        """
        if not batch.order_list:
            raise RequestValidationError("Batch order request contains no orders")
        for order in batch.order_list:
            order.validate_order()
        body = serialize_request(batch)

        self.logger.info(f"Placing batch of {len(batch.order_list)} orders")
        return await self.send("POST", "/api/v1/hf/orders/multi", body, ApiResponse[List[SpotOrderResult]])

    async def cancel_partial_order(self, request: SpotCancelRequest) -> ApiResponse[SpotCanceledData]:
        """
        Cancel part of an open spot order.

        KuCoin Endpoint:
            DELETE /api/v1/hf/orders/cancel/{orderId}?symbol=...&cancelSize=...
        """
        path = f"/api/v1/hf/orders/cancel/{quote(request.order_id, safe='')}?{request.to_query_string()}"

        self.logger.info(f"Cancelling {request.cancel_size} of order {request.order_id} on {request.symbol}")
        return await self.send("DELETE", path, "", ApiResponse[SpotCanceledData])

    # ============================================
    # Universal Transfer
    # ============================================

    async def transfer(self, request: TransferRequest) -> ApiResponse[TransferData]:
        """
        Move funds between account types or between master and sub-accounts.

        KuCoin Endpoint:
            POST /api/v3/accounts/universal-transfer

        Raises:
            MissingIsolatedTagError: If an isolated side lacks its symbol tag
                (raised before any request is sent)
        """
        request.validate_tags()
        body = serialize_request(request)

        self.logger.info(
            f"Transferring {request.amount} {request.currency} "
            f"{request.from_account_type.value} -> {request.to_account_type.value}"
        )
        return await self.send("POST", "/api/v3/accounts/universal-transfer", body, ApiResponse[TransferData])

    # ============================================
    # Sub-Accounts
    # ============================================

    async def add_sub_account_api(self, request: SubAccountApiRequest) -> ApiResponse[SubAccountApiData]:
        """
        Create an API key for a sub-account.

        KuCoin Endpoint:
            POST /api/v1/sub/api-key
        """
        body = serialize_request(request)

        self.logger.info(f"Creating API key for sub-account {request.sub_name}")
        return await self.send("POST", "/api/v1/sub/api-key", body, ApiResponse[SubAccountApiData])

    async def get_sub_accounts(self) -> ApiResponse[SubAccountList]:
        """
        List sub-account summaries.

        KuCoin Endpoint:
            GET /api/v2/sub/user
        """
        self.logger.info("Fetching sub-account list")
        return await self.send("GET", "/api/v2/sub/user", "", ApiResponse[SubAccountList])

    async def get_sub_account_balance(self, user_id: str) -> ApiResponse[SubAccountBalance]:
        """
        Fetch balances of one sub-account.

        KuCoin Endpoint:
            GET /api/v1/sub-accounts/{subUserId}
        """
        path = f"/api/v1/sub-accounts/{quote(user_id, safe='')}"

        self.logger.info(f"Fetching balance for sub-account {user_id}")
        return await self.send("GET", path, "", ApiResponse[SubAccountBalance])

    # ============================================
    # Withdrawals
    # ============================================

    async def withdraw(self, request: WithdrawRequest) -> ApiResponse[WithdrawData]:
        """
        Submit a withdrawal.

        KuCoin Endpoint:
            POST /api/v3/withdrawals
        """
        body = serialize_request(request)

        self.logger.info(f"Withdrawing {request.amount} {request.currency} ({request.withdraw_type.value})")
        return await self.send("POST", "/api/v3/withdrawals", body, ApiResponse[WithdrawData])
