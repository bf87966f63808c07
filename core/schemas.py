"""
KuCoin Data Schemas

This module defines Pydantic models for every request and response the client
exchanges with the KuCoin REST API.

Key Principles:
    - Every response is wrapped in the same envelope: {code, msg, data}.
      ApiResponse[T] models it, with `data` optional because KuCoin omits it
      (or sends null) on many error codes.
    - Request models are immutable. They are built with a constructor or a
      `new()` class method, then refined with `with_*` methods that each return
      a NEW value. No builder state is ever shared between tasks.
    - JSON field names are camelCase on the wire, snake_case in Python.
    - Amounts are sent as plain decimal strings ("100", "0.5").

Models:
    Envelope:  ApiResponse
    Deposits:  DepositQuery, Deposit, DepositList
    Spot:      SpotOrderRequest, BatchOrderRequest, SpotCancelRequest,
               SpotOrderData, SpotOrderResult, SpotCanceledData
    Transfer:  TransferRequest, TransferData
    Sub-acct:  SubAccountApiRequest, SubAccountApiData, SubAccountList,
               SubAccountSummary, SubAccountBalance, AccountBalance
    Withdraw:  WithdrawRequest, WithdrawData
"""

import uuid
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Generic, List, Optional, Tuple, TypeVar, Union
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic.alias_generators import to_camel

from core.errors import MissingIsolatedTagError, RequestValidationError
from core.utils.time import datetime_to_timestamp, get_timestamp_ms, to_utc_datetime


T = TypeVar("T")

Amount = Union[str, int, float, Decimal]
Millis = Union[int, datetime]

SUCCESS_CODE = "200000"


def format_amount(value: Amount) -> str:
    """
    Render an amount as a plain decimal string.

    Examples:
        >>> format_amount(100.0)
        '100'
        >>> format_amount("0.50")
        '0.5'

    Raises:
        RequestValidationError: If the value is not a finite number
    """
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise RequestValidationError(f"Invalid amount: {value!r}")

    if not number.is_finite():
        raise RequestValidationError(f"Invalid amount: {value!r}")

    return format(number.normalize(), "f")


def _to_millis(value: Millis) -> int:
    if isinstance(value, datetime):
        return datetime_to_timestamp(value, milliseconds=True)
    return int(value)


def _new_client_oid() -> str:
    return str(uuid.uuid4())


# ============================================
# Base Models
# ============================================

class KucoinModel(BaseModel):
    """Base for response models: camelCase aliases, unknown fields ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KucoinRequest(BaseModel):
    """
    Base for request models.

    Frozen: every `with_*` method goes through model_copy() and returns a new
    instance, leaving the original untouched.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_json(self) -> str:
        """Serialize to the camelCase JSON body, omitting unset fields."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


# ============================================
# Response Envelope
# ============================================

class ApiResponse(BaseModel, Generic[T]):
    """
    Generic KuCoin response envelope.

    Attributes:
        code: Business status code ("200000" means success)
        msg: Error message (usually only present on failure)
        data: Payload; None when absent or null

    Example:
        >>> ApiResponse[TransferData].model_validate_json('{"code":"200000","data":null}').data
        None
    """

    code: str
    msg: Optional[str] = None
    data: Optional[T] = None

    @property
    def is_success(self) -> bool:
        return self.code == SUCCESS_CODE


# ============================================
# Enums
# ============================================

class DepositStatus(str, Enum):
    FAILURE = "FAILURE"
    PROCESSING = "PROCESSING"
    SUCCESS = "SUCCESS"
    TRM_MGT_REJECTED = "TRM_MGT_REJECTED"
    WAIT_TRM_MGT = "WAIT_TRM_MGT"


class Side(str, Enum):
    BUY = "buy"
    SELL = "sell"


class TradeType(str, Enum):
    """Limit orders need price and size; market orders need size or funds."""

    LIMIT = "limit"
    MARKET = "market"


class Stp(str, Enum):
    """Self Trade Prevention strategy."""

    CN = "CN"
    CO = "CO"
    CB = "CB"
    DC = "DC"


class TimeInForce(str, Enum):
    GTC = "GTC"
    GTT = "GTT"
    IOC = "IOC"
    FOK = "FOK"


class AccountType(str, Enum):
    MAIN = "MAIN"
    TRADE = "TRADE"
    CONTRACT = "CONTRACT"
    MARGIN = "MARGIN"
    ISOLATED = "ISOLATED"
    MARGIN_V2 = "MARGIN_V2"
    ISOLATED_V2 = "ISOLATED_V2"

    @property
    def is_isolated(self) -> bool:
        return self in (AccountType.ISOLATED, AccountType.ISOLATED_V2)


class TransferType(str, Enum):
    INTERNAL = "INTERNAL"
    PARENT_TO_SUB = "PARENT_TO_SUB"
    SUB_TO_PARENT = "SUB_TO_PARENT"


class Expire(str, Enum):
    """Sub-account API key lifetime in days."""

    NEVER = "-1"
    DAYS_30 = "30"
    DAYS_90 = "90"
    DAYS_180 = "180"
    DAYS_360 = "360"


class WithdrawType(str, Enum):
    ADDRESS = "ADDRESS"
    UID = "UID"
    MAIL = "MAIL"
    PHONE = "PHONE"


class FeeDeductType(str, Enum):
    """
    INTERNAL: fees are deducted from the withdrawal amount
    EXTERNAL: fees are deducted from the main account
    """

    INTERNAL = "INTERNAL"
    EXTERNAL = "EXTERNAL"


# ============================================
# Deposits
# ============================================

class DepositQuery(KucoinRequest):
    """
    Filter for GET /api/v1/deposits.

    Unset fields are left out of the query string; without `status` the
    exchange returns every status.

    Example:
        >>> query = DepositQuery(currency="SOL").with_status(DepositStatus.SUCCESS).with_page_size(20)
        >>> query.to_query_string()
        'currency=SOL&status=SUCCESS&pageSize=20'
    """

    currency: Optional[str] = None
    status: Optional[DepositStatus] = None
    current_page: Optional[int] = None
    page_size: Optional[int] = None
    start_at: Optional[int] = None
    end_at: Optional[int] = None

    def with_status(self, status: DepositStatus) -> "DepositQuery":
        return self.model_copy(update={"status": DepositStatus(status)})

    def with_current_page(self, page: int) -> "DepositQuery":
        if page < 1:
            raise RequestValidationError(f"current_page must be >= 1, got {page}")
        return self.model_copy(update={"current_page": page})

    def with_page_size(self, size: int) -> "DepositQuery":
        if not 10 <= size <= 500:
            raise RequestValidationError(f"page_size must be between 10 and 500, got {size}")
        return self.model_copy(update={"page_size": size})

    def with_start_at(self, start_at: Millis) -> "DepositQuery":
        """Start of the window, in milliseconds or as a datetime."""
        return self.model_copy(update={"start_at": _to_millis(start_at)})

    def with_end_at(self, end_at: Millis) -> "DepositQuery":
        """End of the window, in milliseconds or as a datetime."""
        return self.model_copy(update={"end_at": _to_millis(end_at)})

    def to_query_string(self) -> str:
        params = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        if params.get("currency") == "":
            del params["currency"]
        return urlencode(params)


class Deposit(KucoinModel):
    """A single deposit record. Every field is optional on the wire."""

    address: Optional[str] = None
    amount: Optional[str] = None
    arrears: Optional[bool] = None
    chain: Optional[str] = None
    created_at: Optional[int] = None
    currency: Optional[str] = None
    fee: Optional[str] = None
    is_inner: Optional[bool] = None
    memo: Optional[str] = None
    remark: Optional[str] = None
    status: Optional[DepositStatus] = None
    updated_at: Optional[int] = None
    wallet_tx_id: Optional[str] = None

    @property
    def created_time(self) -> Optional[datetime]:
        """`created_at` as a UTC datetime."""
        if self.created_at is None:
            return None
        return to_utc_datetime(self.created_at)


class DepositList(KucoinModel):
    current_page: int
    page_size: int
    total_num: int
    total_page: int
    items: List[Deposit] = Field(default_factory=list)


# ============================================
# Spot Trading
# ============================================

class SpotOrderRequest(KucoinRequest):
    """
    Spot (HF) order payload for POST /api/v1/hf/orders.

    Use `SpotOrderRequest.new()` so a unique clientOid is assigned.

    Example:
        >>> order = (
        ...     SpotOrderRequest.new(TradeType.MARKET, "BTC-USDT", Side.BUY)
        ...     .with_funds(100)
        ...     .with_remark("syndicate")
        ... )
    """

    client_oid: Optional[str] = None
    side: Side
    symbol: str
    trade_type: TradeType = Field(alias="type")
    price: Optional[str] = None
    size: Optional[str] = None
    funds: Optional[str] = None
    time_in_force: Optional[TimeInForce] = None
    post_only: Optional[bool] = None
    hidden: Optional[bool] = None
    iceberg: Optional[bool] = None
    visible_size: Optional[str] = None
    remark: Optional[str] = None
    tags: Optional[str] = None
    stp: Optional[Stp] = None
    cancel_after: Optional[int] = None
    allow_max_time_window: Optional[int] = None
    client_timestamp: Optional[int] = None

    @classmethod
    def new(cls, trade_type: TradeType, symbol: str, side: Side) -> "SpotOrderRequest":
        return cls(
            client_oid=_new_client_oid(),
            trade_type=TradeType(trade_type),
            symbol=symbol,
            side=Side(side),
        )

    def with_size(self, size: Amount) -> "SpotOrderRequest":
        """Quantity in base currency. Required for limit orders."""
        return self.model_copy(update={"size": format_amount(size)})

    def with_price(self, price: Amount) -> "SpotOrderRequest":
        """Required for limit orders."""
        return self.model_copy(update={"price": format_amount(price)})

    def with_funds(self, funds: Amount) -> "SpotOrderRequest":
        """Amount of quote currency to spend, for market orders."""
        return self.model_copy(update={"funds": format_amount(funds)})

    def with_time_in_force(self, time_in_force: TimeInForce) -> "SpotOrderRequest":
        return self.model_copy(update={"time_in_force": TimeInForce(time_in_force)})

    def with_post_only(self, post_only: bool = True) -> "SpotOrderRequest":
        return self.model_copy(update={"post_only": post_only})

    def with_hidden(self, hidden: bool = True) -> "SpotOrderRequest":
        return self.model_copy(update={"hidden": hidden})

    def with_iceberg(self, iceberg: bool = True) -> "SpotOrderRequest":
        return self.model_copy(update={"iceberg": iceberg})

    def with_visible_size(self, visible_size: Amount) -> "SpotOrderRequest":
        return self.model_copy(update={"visible_size": format_amount(visible_size)})

    def with_remark(self, remark: str) -> "SpotOrderRequest":
        if len(remark) > 20:
            raise RequestValidationError("remark cannot exceed 20 characters")
        return self.model_copy(update={"remark": remark})

    def with_tags(self, tags: str) -> "SpotOrderRequest":
        if len(tags) > 20:
            raise RequestValidationError("tags cannot exceed 20 characters")
        return self.model_copy(update={"tags": tags})

    def with_stp(self, stp: Stp) -> "SpotOrderRequest":
        return self.model_copy(update={"stp": Stp(stp)})

    def with_cancel_after(self, seconds: int) -> "SpotOrderRequest":
        """Only honoured with GTT time-in-force; -1 disables auto-cancel."""
        return self.model_copy(update={"cancel_after": seconds})

    def with_time_window(self, allow_max_time_window: int, client_timestamp: Optional[int] = None) -> "SpotOrderRequest":
        """
        Fail the order if the gateway receives it later than
        client_timestamp + allow_max_time_window milliseconds.
        """
        if client_timestamp is None:
            client_timestamp = int(get_timestamp_ms())
        return self.model_copy(update={
            "allow_max_time_window": allow_max_time_window,
            "client_timestamp": client_timestamp,
        })

    def validate_order(self) -> None:
        """
        Check the size/price/funds combination for the order type.

        Raises:
            RequestValidationError: On a combination the exchange would reject
        """
        if self.trade_type == TradeType.LIMIT:
            if self.price is None or self.size is None:
                raise RequestValidationError(f"Limit order on {self.symbol} requires both price and size")
        elif (self.size is None) == (self.funds is None):
            raise RequestValidationError(f"Market order on {self.symbol} requires exactly one of size or funds")


class BatchOrderRequest(KucoinRequest):
    """
    Payload for POST /api/v1/hf/orders/multi.

    Example:
        >>> batch = BatchOrderRequest().add_order(btc_order).add_order(sol_order)
    """

    order_list: Tuple[SpotOrderRequest, ...] = ()

    def add_order(self, order: SpotOrderRequest) -> "BatchOrderRequest":
        return self.model_copy(update={"order_list": self.order_list + (order,)})


class SpotCancelRequest(KucoinRequest):
    """Partial cancel of an HF spot order (sent as path + query, no body)."""

    order_id: str
    symbol: str
    cancel_size: str

    @classmethod
    def new(cls, order_id: str, cancel_size: Amount, symbol: str) -> "SpotCancelRequest":
        return cls(order_id=order_id, symbol=symbol, cancel_size=format_amount(cancel_size))

    def to_query_string(self) -> str:
        return urlencode({"symbol": self.symbol, "cancelSize": self.cancel_size})


class SpotOrderData(KucoinModel):
    order_id: str
    client_oid: Optional[str] = None


class SpotOrderResult(KucoinModel):
    """Per-order outcome inside a batch placement."""

    success: bool
    order_id: Optional[str] = None
    client_oid: Optional[str] = None
    fail_msg: Optional[str] = None


class SpotCanceledData(KucoinModel):
    order_id: str
    cancel_size: str


# ============================================
# Universal Transfer
# ============================================

class TransferRequest(KucoinRequest):
    """
    Payload for POST /api/v3/accounts/universal-transfer.

    ISOLATED / ISOLATED_V2 sides need a symbol tag (e.g. "BTC-USDT");
    `validate_tags()` enforces it before anything is sent.
    """

    client_oid: str
    currency: str
    amount: str
    transfer_type: TransferType = Field(alias="type")
    from_account_type: AccountType
    to_account_type: AccountType
    from_account_tag: Optional[str] = None
    to_account_tag: Optional[str] = None
    from_user_id: Optional[str] = None
    to_user_id: Optional[str] = None

    @classmethod
    def new(
        cls,
        currency: str,
        amount: Amount,
        from_account_type: AccountType,
        to_account_type: AccountType,
        transfer_type: TransferType,
    ) -> "TransferRequest":
        return cls(
            client_oid=_new_client_oid(),
            currency=currency,
            amount=format_amount(amount),
            from_account_type=AccountType(from_account_type),
            to_account_type=AccountType(to_account_type),
            transfer_type=TransferType(transfer_type),
        )

    def with_from_account_tag(self, symbol: str) -> "TransferRequest":
        return self.model_copy(update={"from_account_tag": symbol})

    def with_to_account_tag(self, symbol: str) -> "TransferRequest":
        return self.model_copy(update={"to_account_tag": symbol})

    def with_from_user_id(self, user_id: str) -> "TransferRequest":
        """Required when moving funds from a sub-account to the master account."""
        return self.model_copy(update={"from_user_id": user_id})

    def with_to_user_id(self, user_id: str) -> "TransferRequest":
        """Required when moving funds from the master account to a sub-account."""
        return self.model_copy(update={"to_user_id": user_id})

    def validate_tags(self) -> None:
        """
        Raises:
            MissingIsolatedTagError: If an isolated side has no account tag
        """
        if self.from_account_type.is_isolated and not self.from_account_tag:
            raise MissingIsolatedTagError("Sender")
        if self.to_account_type.is_isolated and not self.to_account_tag:
            raise MissingIsolatedTagError("Receiver")


class TransferData(KucoinModel):
    order_id: str


# ============================================
# Sub-Accounts
# ============================================

MAX_IP_WHITELIST = 20


class SubAccountApiRequest(KucoinRequest):
    """
    Payload for POST /api/v1/sub/api-key (create a sub-account API key).

    Example:
        >>> request = (
        ...     SubAccountApiRequest.new("user01", "vip", "pass4567")
        ...     .with_permission("General,Spot")
        ...     .add_ip_whitelist("10.0.0.1")
        ... )
    """

    sub_name: str
    remark: str
    passphrase: str = Field(repr=False)
    permission: Optional[str] = None
    ip_whitelist: Optional[str] = None
    expire: Optional[Expire] = None

    @classmethod
    def new(cls, name: str, remark: str, passphrase: str) -> "SubAccountApiRequest":
        if not 7 <= len(passphrase) <= 32 or " " in passphrase:
            raise RequestValidationError("Sub-account passphrase must be 7-32 characters without spaces")
        if not 1 <= len(remark) <= 24:
            raise RequestValidationError("Sub-account remark must be 1-24 characters")
        return cls(sub_name=name, remark=remark, passphrase=passphrase)

    def with_expire(self, expire: Expire) -> "SubAccountApiRequest":
        return self.model_copy(update={"expire": Expire(expire)})

    def with_permission(self, permission: str) -> "SubAccountApiRequest":
        """Comma-separated subset of General, Spot, Futures, Margin, Unified, InnerTransfer."""
        return self.model_copy(update={"permission": permission})

    def add_ip_whitelist(self, ip: str) -> "SubAccountApiRequest":
        """Append one IP to the comma-separated whitelist (max 20 entries)."""
        ips = self.ip_whitelist.split(",") if self.ip_whitelist else []
        if len(ips) >= MAX_IP_WHITELIST:
            raise RequestValidationError(f"IP whitelist is limited to {MAX_IP_WHITELIST} entries")
        ips.append(ip)
        return self.model_copy(update={"ip_whitelist": ",".join(ips)})


class SubAccountApiData(KucoinModel):
    """Created sub-account API key. Secrets stay wrapped in SecretStr."""

    sub_name: str
    remark: str
    api_key: str
    api_secret: SecretStr
    api_version: int
    passphrase: SecretStr
    permission: str
    ip_whitelist: Optional[str] = None
    created_at: int


class SubAccountSummary(KucoinModel):
    user_id: str
    uid: Optional[int] = None
    sub_name: str
    status: Optional[int] = None
    account_type: Optional[int] = Field(default=None, alias="type")
    access: Optional[str] = None
    created_at: Optional[int] = None
    remarks: Optional[str] = None


class SubAccountList(KucoinModel):
    current_page: int
    page_size: int
    total_num: int
    total_page: int
    items: List[SubAccountSummary] = Field(default_factory=list)


class AccountBalance(KucoinModel):
    currency: str
    balance: Optional[str] = None
    available: Optional[str] = None
    holds: Optional[str] = None
    base_currency: Optional[str] = None
    base_currency_price: Optional[str] = None
    base_amount: Optional[str] = None
    tag: Optional[str] = None


class SubAccountBalance(KucoinModel):
    sub_user_id: str
    sub_name: str
    main_accounts: List[AccountBalance] = Field(default_factory=list)
    trade_accounts: List[AccountBalance] = Field(default_factory=list)
    margin_accounts: List[AccountBalance] = Field(default_factory=list)
    trade_hf_accounts: List[AccountBalance] = Field(default_factory=list, alias="tradeHFAccounts")


# ============================================
# Withdrawals
# ============================================

class WithdrawRequest(KucoinRequest):
    """
    Payload for POST /api/v3/withdrawals.

    Note:
        UID/MAIL/PHONE withdrawals are rate limited by the exchange to
        3 per 10 seconds and 50 per 24 hours.
    """

    currency: str
    to_address: str
    amount: str
    withdraw_type: WithdrawType
    chain: Optional[str] = None
    memo: Optional[str] = None
    is_inner: Optional[bool] = None
    remark: Optional[str] = None
    fee_deduct_type: Optional[FeeDeductType] = None

    @classmethod
    def new(cls, currency: str, to_address: str, amount: Amount, withdraw_type: WithdrawType) -> "WithdrawRequest":
        return cls(
            currency=currency,
            to_address=to_address,
            amount=format_amount(amount),
            withdraw_type=WithdrawType(withdraw_type),
        )

    def with_chain(self, chain: str) -> "WithdrawRequest":
        """Chain id, e.g. "eth" or "trx"."""
        return self.model_copy(update={"chain": chain})

    def with_memo(self, memo: str) -> "WithdrawRequest":
        return self.model_copy(update={"memo": memo})

    def as_inner(self, is_inner: bool = True) -> "WithdrawRequest":
        return self.model_copy(update={"is_inner": is_inner})

    def with_remark(self, remark: str) -> "WithdrawRequest":
        return self.model_copy(update={"remark": remark})

    def with_fee_deduct_type(self, fee_deduct_type: FeeDeductType) -> "WithdrawRequest":
        return self.model_copy(update={"fee_deduct_type": FeeDeductType(fee_deduct_type)})


class WithdrawData(KucoinModel):
    withdrawal_id: str
