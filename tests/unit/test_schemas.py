"""
Unit Tests for KuCoin Schemas

These tests verify that:
- Request models are immutable and each `with_*` call returns a new value
- Bodies serialize to camelCase JSON with unset fields omitted
- Local validation rejects malformed requests
- Response models decode KuCoin payloads

Run with:
    pytest tests/unit/test_schemas.py -v
"""

import json
import uuid
from datetime import datetime, timezone
from typing import List

import pytest
from pydantic import ValidationError

from core.errors import MissingIsolatedTagError, RequestValidationError
from core.schemas import (
    AccountType,
    ApiResponse,
    BatchOrderRequest,
    Deposit,
    DepositList,
    DepositQuery,
    DepositStatus,
    Expire,
    FeeDeductType,
    Side,
    SpotCancelRequest,
    SpotOrderRequest,
    SpotOrderResult,
    Stp,
    SubAccountApiData,
    SubAccountApiRequest,
    SubAccountList,
    TimeInForce,
    TradeType,
    TransferRequest,
    TransferType,
    WithdrawRequest,
    WithdrawType,
    format_amount,
)


# ============================================
# Amount Formatting
# ============================================

class TestFormatAmount:
    """Tests for format_amount"""

    @pytest.mark.parametrize("value, expected", [
        (100.0, "100"),
        (100, "100"),
        ("0.50", "0.5"),
        (0.00001, "0.00001"),
        ("1.25", "1.25"),
    ])
    def test_plain_decimal_strings(self, value, expected):
        assert format_amount(value) == expected

    @pytest.mark.parametrize("value", ["abc", float("nan"), float("inf")])
    def test_invalid_amounts_raise(self, value):
        with pytest.raises(RequestValidationError):
            format_amount(value)


# ============================================
# Response Envelope
# ============================================

class TestApiResponse:
    """Tests for the generic envelope"""

    def test_missing_data_is_none(self):
        result = ApiResponse[DepositList].model_validate_json('{"code":"400001","msg":"Invalid"}')

        assert result.data is None
        assert result.msg == "Invalid"
        assert result.is_success is False

    def test_null_data_is_none(self):
        result = ApiResponse[DepositList].model_validate_json('{"code":"200000","data":null}')

        assert result.data is None
        assert result.is_success is True

    def test_list_payload(self):
        """Verify the batch order envelope decodes per-order results"""
        payload = json.dumps({
            "code": "200000",
            "data": [
                {"orderId": "1", "clientOid": "a", "success": True},
                {"success": False, "failMsg": "Balance insufficient!"},
            ],
        })

        result = ApiResponse[List[SpotOrderResult]].model_validate_json(payload)

        assert result.data[0].success is True
        assert result.data[1].fail_msg == "Balance insufficient!"
        assert result.data[1].order_id is None


# ============================================
# Deposits
# ============================================

class TestDepositQuery:
    """Tests for DepositQuery"""

    def test_with_methods_return_new_instances(self):
        """Verify transformations don't mutate the original"""
        base = DepositQuery(currency="SOL")
        filtered = base.with_status(DepositStatus.SUCCESS)

        assert base.status is None
        assert filtered.status == DepositStatus.SUCCESS
        assert filtered is not base

    def test_query_is_frozen(self):
        query = DepositQuery(currency="SOL")

        with pytest.raises(ValidationError):
            query.currency = "BTC"

    def test_query_string_omits_unset_fields(self):
        query = DepositQuery(currency="SOL").with_status(DepositStatus.SUCCESS).with_page_size(20)

        assert query.to_query_string() == "currency=SOL&status=SUCCESS&pageSize=20"

    def test_empty_currency_is_dropped(self):
        assert DepositQuery(currency="").to_query_string() == ""

    def test_datetime_window_converted_to_millis(self):
        start = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        query = DepositQuery().with_start_at(start).with_end_at(1704114000000)

        assert query.start_at == 1704110400000
        assert query.end_at == 1704114000000
        assert query.to_query_string() == "startAt=1704110400000&endAt=1704114000000"

    @pytest.mark.parametrize("size", [0, 9, 501])
    def test_page_size_bounds(self, size):
        with pytest.raises(RequestValidationError):
            DepositQuery().with_page_size(size)

    def test_current_page_must_be_positive(self):
        with pytest.raises(RequestValidationError):
            DepositQuery().with_current_page(0)


class TestDeposit:
    """Tests for Deposit response model"""

    def test_parses_kucoin_record(self):
        record = {
            "currency": "XRP",
            "chain": "xrp",
            "status": "SUCCESS",
            "address": "rNFugeoj3ZN8Wv6xhuLegUBBPXKCyWLRkB",
            "memo": "1919537769",
            "isInner": False,
            "amount": "20.50000000",
            "fee": "0.00000000",
            "walletTxId": "2C24A6D5B3E7D5B6AA6534025B9B107AC910309A98825BF5581E25BEC94AD83B",
            "createdAt": 1713429174000,
            "updatedAt": 1713429174000,
            "remark": "",
            "arrears": False,
        }

        deposit = Deposit.model_validate(record)

        assert deposit.status == DepositStatus.SUCCESS
        assert deposit.wallet_tx_id.startswith("2C24A6")
        assert deposit.created_time == datetime(2024, 4, 18, 8, 32, 54, tzinfo=timezone.utc)

    def test_created_time_none_when_absent(self):
        assert Deposit().created_time is None


# ============================================
# Spot Orders
# ============================================

class TestSpotOrderRequest:
    """Tests for SpotOrderRequest"""

    def test_new_assigns_uuid_client_oid(self):
        order = SpotOrderRequest.new(TradeType.MARKET, "BTC-USDT", Side.BUY)

        uuid.UUID(order.client_oid)
        assert order.client_oid != SpotOrderRequest.new(TradeType.MARKET, "BTC-USDT", Side.BUY).client_oid

    def test_chained_setters_build_full_limit_order(self):
        order = (
            SpotOrderRequest.new(TradeType.LIMIT, "BTC-USDT", Side.SELL)
            .with_price(65000.5)
            .with_size("0.001")
            .with_time_in_force(TimeInForce.GTT)
            .with_cancel_after(600)
            .with_stp(Stp.CN)
            .with_post_only()
            .with_hidden(False)
        )

        body = json.loads(order.to_json())

        assert body["type"] == "limit"
        assert body["side"] == "sell"
        assert body["price"] == "65000.5"
        assert body["size"] == "0.001"
        assert body["timeInForce"] == "GTT"
        assert body["cancelAfter"] == 600
        assert body["stp"] == "CN"
        assert body["postOnly"] is True
        assert body["hidden"] is False
        assert "funds" not in body

    def test_iceberg_fields(self):
        body = json.loads(
            SpotOrderRequest.new(TradeType.LIMIT, "ETH-USDT", Side.BUY)
            .with_iceberg()
            .with_visible_size(0.1)
            .to_json()
        )

        assert body["iceberg"] is True
        assert body["visibleSize"] == "0.1"

    def test_setters_do_not_mutate(self):
        base = SpotOrderRequest.new(TradeType.MARKET, "BTC-USDT", Side.BUY)
        funded = base.with_funds(10)

        assert base.funds is None
        assert funded.funds == "10"
        assert funded.client_oid == base.client_oid

    def test_time_window_sets_client_timestamp(self):
        order = SpotOrderRequest.new(TradeType.MARKET, "BTC-USDT", Side.BUY).with_time_window(10, 1700000000000)
        body = json.loads(order.to_json())

        assert body["allowMaxTimeWindow"] == 10
        assert body["clientTimestamp"] == 1700000000000

    def test_time_window_defaults_to_now(self):
        order = SpotOrderRequest.new(TradeType.MARKET, "BTC-USDT", Side.BUY).with_time_window(10)

        assert order.client_timestamp > 1_700_000_000_000

    @pytest.mark.parametrize("setter", ["with_remark", "with_tags"])
    def test_remark_and_tags_length_limit(self, setter):
        order = SpotOrderRequest.new(TradeType.MARKET, "BTC-USDT", Side.BUY)

        with pytest.raises(RequestValidationError):
            getattr(order, setter)("x" * 21)

    def test_validate_limit_requires_price_and_size(self):
        order = SpotOrderRequest.new(TradeType.LIMIT, "BTC-USDT", Side.BUY).with_price(1)

        with pytest.raises(RequestValidationError):
            order.validate_order()

        order.with_size(1).validate_order()

    def test_validate_market_requires_exactly_one_of_size_or_funds(self):
        order = SpotOrderRequest.new(TradeType.MARKET, "BTC-USDT", Side.BUY)

        with pytest.raises(RequestValidationError):
            order.validate_order()
        with pytest.raises(RequestValidationError):
            order.with_size(1).with_funds(1).validate_order()

        order.with_funds(1).validate_order()
        order.with_size(1).validate_order()


class TestSpotCancelRequest:
    """Tests for SpotCancelRequest"""

    def test_new_takes_order_id_size_then_symbol(self):
        request = SpotCancelRequest.new("6717422bd51c29000775ea03", 0.5, "BTC-USDT")

        assert request.order_id == "6717422bd51c29000775ea03"
        assert request.cancel_size == "0.5"
        assert request.symbol == "BTC-USDT"
        assert request.to_query_string() == "symbol=BTC-USDT&cancelSize=0.5"


class TestBatchOrderRequest:
    """Tests for BatchOrderRequest"""

    def test_add_order_returns_new_batch(self):
        empty = BatchOrderRequest()
        one = empty.add_order(SpotOrderRequest.new(TradeType.MARKET, "BTC-USDT", Side.BUY).with_funds(1))

        assert empty.order_list == ()
        assert len(one.order_list) == 1

    def test_serializes_as_order_list(self):
        batch = BatchOrderRequest().add_order(
            SpotOrderRequest.new(TradeType.MARKET, "BTC-USDT", Side.BUY).with_funds(1)
        )

        body = json.loads(batch.to_json())

        assert list(body) == ["orderList"]
        assert body["orderList"][0]["type"] == "market"


# ============================================
# Transfers
# ============================================

class TestTransferRequest:
    """Tests for TransferRequest"""

    def test_internal_transfer_body(self):
        request = TransferRequest.new("BTC", 1.0, AccountType.MAIN, AccountType.TRADE, TransferType.INTERNAL)

        body = json.loads(request.to_json())

        assert body["clientOid"] == request.client_oid
        assert body["currency"] == "BTC"
        assert body["amount"] == "1"
        assert body["type"] == "INTERNAL"
        assert "fromUserId" not in body

    def test_parent_to_sub_body(self):
        request = (
            TransferRequest.new("USDT", "25", AccountType.MAIN, AccountType.MAIN, TransferType.PARENT_TO_SUB)
            .with_to_user_id("63743f07e0c5230001761d08")
        )

        body = json.loads(request.to_json())

        assert body["type"] == "PARENT_TO_SUB"
        assert body["toUserId"] == "63743f07e0c5230001761d08"

    @pytest.mark.parametrize("from_type, to_type, side", [
        (AccountType.ISOLATED, AccountType.MAIN, "Sender"),
        (AccountType.ISOLATED_V2, AccountType.MAIN, "Sender"),
        (AccountType.MAIN, AccountType.ISOLATED, "Receiver"),
        (AccountType.TRADE, AccountType.ISOLATED_V2, "Receiver"),
    ])
    def test_missing_isolated_tag(self, from_type, to_type, side):
        request = TransferRequest.new("USDT", 1, from_type, to_type, TransferType.INTERNAL)

        with pytest.raises(MissingIsolatedTagError) as exc_info:
            request.validate_tags()

        assert exc_info.value.side == side
        assert isinstance(exc_info.value, RequestValidationError)

    def test_tagged_isolated_transfer_is_valid(self):
        request = (
            TransferRequest.new("USDT", 1, AccountType.ISOLATED, AccountType.ISOLATED_V2, TransferType.INTERNAL)
            .with_from_account_tag("BTC-USDT")
            .with_to_account_tag("ETH-USDT")
        )

        request.validate_tags()

    def test_non_isolated_transfer_needs_no_tag(self):
        TransferRequest.new("USDT", 1, AccountType.MARGIN, AccountType.MARGIN_V2, TransferType.INTERNAL).validate_tags()


# ============================================
# Sub-Accounts
# ============================================

class TestSubAccountApiRequest:
    """Tests for SubAccountApiRequest"""

    def test_basic_request(self):
        request = SubAccountApiRequest.new("myuser", "remark", "pass1234")

        assert request.sub_name == "myuser"
        assert request.passphrase == "pass1234"
        assert request.ip_whitelist is None

    def test_ip_whitelist_is_comma_joined(self):
        request = (
            SubAccountApiRequest.new("u", "r", "pass1234")
            .add_ip_whitelist("192.168.1.1")
            .add_ip_whitelist("10.0.0.1")
        )

        assert request.ip_whitelist == "192.168.1.1,10.0.0.1"

    def test_ip_whitelist_limit(self):
        request = SubAccountApiRequest.new("u", "r", "pass1234")
        for i in range(20):
            request = request.add_ip_whitelist(f"10.0.0.{i}")

        with pytest.raises(RequestValidationError):
            request.add_ip_whitelist("10.0.1.1")

    def test_full_chain_body(self):
        request = (
            SubAccountApiRequest.new("user", "remark", "pass1234")
            .with_permission("General,Spot")
            .with_expire(Expire.DAYS_90)
            .add_ip_whitelist("1.1.1.1")
        )

        body = json.loads(request.to_json())

        assert body == {
            "subName": "user",
            "remark": "remark",
            "passphrase": "pass1234",
            "permission": "General,Spot",
            "ipWhitelist": "1.1.1.1",
            "expire": "90",
        }

    def test_repr_hides_passphrase(self):
        assert "pass1234" not in repr(SubAccountApiRequest.new("user", "remark", "pass1234"))

    @pytest.mark.parametrize("passphrase", ["short", "has space in it", "x" * 33])
    def test_passphrase_rules(self, passphrase):
        with pytest.raises(RequestValidationError):
            SubAccountApiRequest.new("user", "remark", passphrase)

    def test_remark_length(self):
        with pytest.raises(RequestValidationError):
            SubAccountApiRequest.new("user", "r" * 25, "pass1234")


class TestSubAccountResponses:
    """Tests for sub-account response models"""

    def test_api_key_response_keeps_secrets_wrapped(self):
        payload = {
            "subName": "AAAAAAAAAA0007",
            "remark": "remark",
            "apiKey": "630325e0e750870001829864",
            "apiSecret": "110f31fc-61c5-4baf-a29f-3f19a62bbf5d",
            "apiVersion": 3,
            "passphrase": "passphrase",
            "permission": "General",
            "createdAt": 1661150688000,
        }

        data = SubAccountApiData.model_validate(payload)

        assert data.api_secret.get_secret_value() == "110f31fc-61c5-4baf-a29f-3f19a62bbf5d"
        assert "110f31fc" not in repr(data)
        assert data.ip_whitelist is None

    def test_sub_account_list(self):
        payload = {
            "currentPage": 1,
            "pageSize": 10,
            "totalNum": 1,
            "totalPage": 1,
            "items": [{
                "userId": "63743f07e0c5230001761d08",
                "uid": 169579801,
                "subName": "testapi6",
                "status": 2,
                "type": 0,
                "access": "All",
                "createdAt": 1668562696000,
                "remarks": "remarks",
            }],
        }

        data = SubAccountList.model_validate(payload)

        assert data.items[0].sub_name == "testapi6"
        assert data.items[0].account_type == 0


# ============================================
# Withdrawals
# ============================================

class TestWithdrawRequest:
    """Tests for WithdrawRequest"""

    def test_full_chain_body(self):
        request = (
            WithdrawRequest.new("USDT", "addr", 10.5, WithdrawType.ADDRESS)
            .with_chain("trx")
            .with_memo("123")
            .as_inner()
            .with_remark("payout")
            .with_fee_deduct_type(FeeDeductType.INTERNAL)
        )

        body = json.loads(request.to_json())

        assert body == {
            "currency": "USDT",
            "toAddress": "addr",
            "amount": "10.5",
            "withdrawType": "ADDRESS",
            "chain": "trx",
            "memo": "123",
            "isInner": True,
            "remark": "payout",
            "feeDeductType": "INTERNAL",
        }

    def test_uid_withdraw(self):
        body = json.loads(WithdrawRequest.new("USDT", "12345678", 1, WithdrawType.UID).to_json())

        assert body["withdrawType"] == "UID"
        assert "chain" not in body
