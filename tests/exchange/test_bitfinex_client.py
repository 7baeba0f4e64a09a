from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pytest
import requests

from bfxrest.config import get_settings
from bfxrest.exchange import BitfinexClient, BitfinexEndpoint, OrderRequest, normalize_currency, normalize_symbol
from bfxrest.utils.exceptions import (
    CredentialError,
    ExchangeError,
    InvalidParameterError,
    PayloadTooLargeError,
    SchemaViolationError,
)
from bfxrest.utils.time_utils import NonceClock

BASE_URL = "https://api.bitfinex.com/v1"
SYMBOLS_BODY = b'["btcusd","ltcusd","ethusd","ethbtc"]'


@dataclass
class DummyResponse:
    status_code: int = 200
    json_payload: Any = None
    text: str = ""
    content: bytes = b""
    json_raises: bool = False

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(response=self)  # type: ignore[arg-type]

    def json(self) -> Any:
        if self.json_raises:
            raise ValueError("invalid json")
        return self.json_payload


class DummySession:
    def __init__(self, responses: List[DummyResponse]) -> None:
        self._responses = responses
        self.calls: List[Dict[str, Any]] = []

    def request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Any = None,
    ) -> DummyResponse:
        if not self._responses:
            raise AssertionError("예상치 못한 추가 호출이 발생했습니다.")
        self.calls.append(
            {
                "method": method,
                "url": url,
                "params": params,
                "headers": headers or {},
                "timeout": timeout,
            }
        )
        return self._responses.pop(0)

    def close(self) -> None:  # pragma: no cover - 외부 세션에서는 호출되지 않음
        pass


def _symbols_response() -> DummyResponse:
    return DummyResponse(content=SYMBOLS_BODY)


def _decoded_payload(call: Dict[str, Any]) -> Dict[str, Any]:
    return json.loads(base64.b64decode(call["headers"]["X-BFX-PAYLOAD"]))


@pytest.fixture
def private_client_factory(fixed_time):
    def _factory(responses: List[DummyResponse]) -> tuple[BitfinexClient, DummySession]:
        session = DummySession(responses)
        client = BitfinexClient(
            base_url=BASE_URL,
            session=session,
            api_key="test-key",
            api_secret="test-secret",
            clock=NonceClock(fixed_time),
        )
        client._sleep = lambda _: None  # type: ignore[assignment]
        return client, session

    return _factory


def test_normalize_helpers() -> None:
    assert normalize_symbol("BTC-USD") == "btcusd"
    assert normalize_symbol("eth/btc") == "ethbtc"
    assert normalize_symbol(" ltc_usd ") == "ltcusd"
    assert normalize_currency(" usd ") == "USD"


def test_public_get_basic_flow() -> None:
    session = DummySession([DummyResponse(json_payload=[{"pair": "btcusd"}])])
    client = BitfinexClient(base_url=BASE_URL, session=session)

    payload = client.get_symbol_details()

    assert payload == [{"pair": "btcusd"}]
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://api.bitfinex.com/v1/symbols_details"
    assert call["headers"]["User-Agent"].startswith("bfxrest/")
    assert "X-BFX-APIKEY" not in call["headers"]
    assert call["timeout"] == 30.0


def test_public_get_passes_query_params() -> None:
    session = DummySession([_symbols_response(), DummyResponse(json_payload={"bids": [], "asks": []})])
    client = BitfinexClient(base_url=BASE_URL, session=session)

    client.get_order_book("BTC-USD", limit_bids=5, limit_asks=10, group=False)

    call = session.calls[1]
    assert call["url"] == "https://api.bitfinex.com/v1/book/btcusd"
    assert call["params"] == {"limit_bids": 5, "limit_asks": 10, "group": 0}


def test_public_get_retries_on_http_status() -> None:
    responses = [
        DummyResponse(status_code=429, text="too many requests"),
        DummyResponse(json_payload=[]),
    ]
    session = DummySession(responses)
    client = BitfinexClient(base_url=BASE_URL, session=session)
    delays: list[float] = []
    client._sleep = delays.append  # type: ignore[assignment]

    assert client.get(BitfinexEndpoint.SYMBOL_DETAILS) == []
    assert len(session.calls) == 2
    assert delays == [0.5]


def test_public_get_gives_up_after_max_retries() -> None:
    responses = [DummyResponse(status_code=503, text="unavailable") for _ in range(3)]
    session = DummySession(responses)
    client = BitfinexClient(base_url=BASE_URL, session=session, max_retries=2)
    client._sleep = lambda _: None  # type: ignore[assignment]

    with pytest.raises(ExchangeError, match="HTTP 503"):
        client.get_symbol_details()
    assert len(session.calls) == 3


def test_network_error_is_wrapped() -> None:
    class FailingSession(DummySession):
        def request(self, *args: Any, **kwargs: Any) -> DummyResponse:
            self.calls.append(kwargs)
            raise requests.ConnectionError("boom")

    session = FailingSession([])
    client = BitfinexClient(base_url=BASE_URL, session=session, max_retries=1)
    client._sleep = lambda _: None  # type: ignore[assignment]

    with pytest.raises(ExchangeError, match="네트워크 오류"):
        client.get_symbol_details()
    assert len(session.calls) == 2


def test_private_request_signing(private_client_factory) -> None:
    client, session = private_client_factory([DummyResponse(json_payload=[{"currency": "usd"}])])

    balances = client.get_balances()

    assert balances == [{"currency": "usd"}]
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://api.bitfinex.com/v1/balances"
    headers = call["headers"]
    assert headers["X-BFX-APIKEY"] == "test-key"
    assert _decoded_payload(call) == {"request": "/v1/balances", "nonce": "1700000000000"}
    expected_signature = hmac.new(
        b"test-secret",
        headers["X-BFX-PAYLOAD"].encode("ascii"),
        hashlib.sha384,
    ).hexdigest()
    assert headers["X-BFX-SIGNATURE"] == expected_signature


def test_private_requests_use_increasing_nonces(private_client_factory) -> None:
    client, session = private_client_factory([DummyResponse(json_payload=[]), DummyResponse(json_payload=[])])

    client.get_active_orders()
    client.get_active_orders()

    nonces = [int(_decoded_payload(call)["nonce"]) for call in session.calls]
    assert nonces[1] > nonces[0]
    assert session.calls[0]["headers"]["X-BFX-SIGNATURE"] != session.calls[1]["headers"]["X-BFX-SIGNATURE"]


def test_private_post_is_not_retried(private_client_factory) -> None:
    client, session = private_client_factory(
        [DummyResponse(status_code=503, text="unavailable"), DummyResponse(json_payload={})]
    )

    with pytest.raises(ExchangeError, match="HTTP 503"):
        client.cancel_all_orders()
    assert len(session.calls) == 1


def test_secret_never_reaches_headers_or_logs(private_client_factory, caplog) -> None:
    client, session = private_client_factory([DummyResponse(json_payload={})])
    caplog.set_level(logging.DEBUG)

    client.get_key_info()

    assert "test-secret" not in json.dumps(session.calls[0]["headers"])
    assert "test-secret" not in caplog.text
    assert "test-secret" not in repr(client.credentials)


def test_get_symbols_decodes_into_set() -> None:
    session = DummySession([DummyResponse(content=b'["btcusd","ethusd","btcusd"]')])
    client = BitfinexClient(base_url=BASE_URL, session=session)

    symbols = client.get_symbols()

    assert symbols == frozenset({"btcusd", "ethusd"})
    assert session.calls[0]["url"] == "https://api.bitfinex.com/v1/symbols"


def test_get_symbols_propagates_schema_violation() -> None:
    session = DummySession([DummyResponse(content=b'["btcusd", 1]')])
    client = BitfinexClient(base_url=BASE_URL, session=session)

    with pytest.raises(SchemaViolationError) as exc:
        client.get_symbols()
    assert exc.value.offset == 11


def test_symbol_whitelist_is_loaded_once() -> None:
    session = DummySession(
        [_symbols_response(), DummyResponse(json_payload={"mid": "1"}), DummyResponse(json_payload={})]
    )
    client = BitfinexClient(base_url=BASE_URL, session=session)

    client.get_ticker("BTC-USD")
    client.get_stats("ethbtc")

    assert [call["url"] for call in session.calls] == [
        "https://api.bitfinex.com/v1/symbols",
        "https://api.bitfinex.com/v1/pubticker/btcusd",
        "https://api.bitfinex.com/v1/stats/ethbtc",
    ]


def test_unknown_symbol_is_rejected_before_request() -> None:
    session = DummySession([_symbols_response()])
    client = BitfinexClient(base_url=BASE_URL, session=session)

    with pytest.raises(InvalidParameterError) as exc:
        client.get_ticker("dogeusd")

    assert exc.value.parameter == "symbol"
    assert len(session.calls) == 1


def test_unknown_currency_is_rejected() -> None:
    session = DummySession([])
    client = BitfinexClient(base_url=BASE_URL, session=session)

    with pytest.raises(InvalidParameterError):
        client.get_funding_book("DOGE")
    assert session.calls == []


def test_private_call_without_credentials() -> None:
    session = DummySession([])
    client = BitfinexClient(base_url=BASE_URL, session=session)

    with pytest.raises(ExchangeError):
        client.get_balances()
    assert session.calls == []


def test_single_key_is_rejected() -> None:
    with pytest.raises(CredentialError):
        BitfinexClient(base_url=BASE_URL, session=DummySession([]), api_key="test-key")


def test_set_keys_enables_private_calls(fixed_time) -> None:
    session = DummySession([DummyResponse(json_payload=[])])
    client = BitfinexClient(base_url=BASE_URL, session=session, clock=NonceClock(fixed_time))
    assert client.credentials is None

    client.set_keys("new-key", "new-secret")
    client.get_balances()

    assert session.calls[0]["headers"]["X-BFX-APIKEY"] == "new-key"
    with pytest.raises(CredentialError):
        client.set_keys("new-key", "")


def test_http_error_uses_message_field(private_client_factory) -> None:
    client, _ = private_client_factory(
        [DummyResponse(status_code=400, json_payload={"message": "Invalid order: not enough balance"})]
    )

    with pytest.raises(ExchangeError, match="not enough balance"):
        client.cancel_order(42)


def test_error_payload_raises(private_client_factory) -> None:
    client, _ = private_client_factory([DummyResponse(json_payload={"error": "ERR_RATE_LIMIT"})])

    with pytest.raises(ExchangeError, match="ERR_RATE_LIMIT"):
        client.get_summary()


def test_invalid_json_response_raises() -> None:
    session = DummySession([DummyResponse(json_raises=True, text="<html>")])
    client = BitfinexClient(base_url=BASE_URL, session=session)

    with pytest.raises(ExchangeError, match="JSON"):
        client.get_symbol_details()


def test_new_order_fields(private_client_factory) -> None:
    client, session = private_client_factory([_symbols_response(), DummyResponse(json_payload={"id": 1})])

    client.new_order("BTCUSD", "0.5", 20000, "Buy", "exchange limit", is_hidden=True)

    payload = _decoded_payload(session.calls[1])
    assert payload["request"] == "/v1/order/new"
    assert payload["symbol"] == "btcusd"
    assert payload["amount"] == "0.5"
    assert payload["price"] == "20000"
    assert payload["side"] == "buy"
    assert payload["type"] == "exchange limit"
    assert payload["is_hidden"] is True
    assert payload["ocoorder"] is False


def test_new_order_rejects_unknown_type(private_client_factory) -> None:
    client, session = private_client_factory([_symbols_response()])

    with pytest.raises(InvalidParameterError) as exc:
        client.new_order("btcusd", 1, 1, "buy", "iceberg")
    assert exc.value.parameter == "type"
    assert len(session.calls) == 1


def test_new_orders_payload(private_client_factory) -> None:
    client, session = private_client_factory([_symbols_response(), DummyResponse(json_payload={"order_ids": []})])
    orders = [
        OrderRequest("btcusd", "0.01", "20000", "buy", "exchange limit"),
        OrderRequest("ETH-USD", 2, "1500.5", "sell", "limit"),
    ]

    client.new_orders(orders)

    payload = _decoded_payload(session.calls[1])
    assert payload["request"] == "/v1/order/new/multi"
    assert payload["payload"] == [
        {"symbol": "btcusd", "amount": "0.01", "price": "20000", "side": "buy", "type": "exchange limit"},
        {"symbol": "ethusd", "amount": "2", "price": "1500.5", "side": "sell", "type": "limit"},
    ]


def test_new_orders_requires_at_least_one_order(private_client_factory) -> None:
    client, _ = private_client_factory([])

    with pytest.raises(InvalidParameterError):
        client.new_orders([])


def test_oversized_payload_is_rejected_before_request(fixed_time) -> None:
    session = DummySession([])
    client = BitfinexClient(
        base_url=BASE_URL,
        session=session,
        api_key="test-key",
        api_secret="test-secret",
        clock=NonceClock(fixed_time),
        max_payload_size=64,
    )

    with pytest.raises(PayloadTooLargeError):
        client.cancel_orders(list(range(100)))
    assert session.calls == []


def test_transfer_and_deposit_fields(private_client_factory) -> None:
    client, session = private_client_factory([DummyResponse(json_payload=[]), DummyResponse(json_payload={})])

    client.transfer("1.25", "usd", "exchange", "trading")
    client.new_deposit("bitcoin", "exchange", renew=True)

    transfer = _decoded_payload(session.calls[0])
    assert transfer == {
        "request": "/v1/transfer",
        "nonce": "1700000000000",
        "amount": "1.25",
        "currency": "USD",
        "walletfrom": "exchange",
        "walletto": "trading",
    }
    deposit = _decoded_payload(session.calls[1])
    assert deposit["method"] == "bitcoin"
    assert deposit["wallet_name"] == "exchange"
    assert deposit["renew"] == 1


def test_withdraw_requires_address(private_client_factory) -> None:
    client, session = private_client_factory([DummyResponse(json_payload=[{"status": "success"}])])

    with pytest.raises(InvalidParameterError) as exc:
        client.withdraw("bitcoin", "exchange", "0.1")
    assert exc.value.parameter == "address"

    client.withdraw("bitcoin", "exchange", "0.1", address="1BoatSLRHtKNngkdXEeobR76b53LETtpyT")
    payload = _decoded_payload(session.calls[0])
    assert payload["withdraw_type"] == "bitcoin"
    assert payload["walletselected"] == "exchange"
    assert payload["address"] == "1BoatSLRHtKNngkdXEeobR76b53LETtpyT"


def test_wire_withdraw_requires_bank_details(private_client_factory) -> None:
    client, session = private_client_factory([])

    with pytest.raises(InvalidParameterError) as exc:
        client.withdraw("wire", "deposit", "100", account_number="123", bank_name="Bank")
    assert exc.value.parameter == "bank_address"
    assert session.calls == []


def test_history_until_defaults_to_current_nonce(private_client_factory) -> None:
    client, session = private_client_factory([DummyResponse(json_payload=[])])

    client.get_balance_history("usd", since=100, wallet="exchange")

    payload = _decoded_payload(session.calls[0])
    assert payload["currency"] == "USD"
    assert payload["since"] == "100"
    assert payload["until"] == "1700000000000"
    assert payload["wallet"] == "exchange"
    assert int(payload["nonce"]) > int(payload["until"])


def test_settings_fallback_from_environment(monkeypatch, fixed_time) -> None:
    monkeypatch.setenv("BFX_API_KEY", "env-key")
    monkeypatch.setenv("BFX_API_SECRET", "env-secret")
    monkeypatch.setenv("BFX_REST_BASE_URL", "https://example.test/v1/")
    monkeypatch.setenv("BFX_TIMEOUT", "5")
    get_settings.cache_clear()

    session = DummySession([DummyResponse(json_payload=[])])
    client = BitfinexClient(session=session, clock=NonceClock(fixed_time))
    client.get_balances()

    call = session.calls[0]
    assert client.base_url == "https://example.test/v1"
    assert call["url"] == "https://example.test/v1/balances"
    assert call["timeout"] == 5.0
    assert call["headers"]["X-BFX-APIKEY"] == "env-key"
    assert _decoded_payload(call)["request"] == "/v1/balances"
