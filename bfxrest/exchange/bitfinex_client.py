"""Bitfinex REST API(v1) 클라이언트."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlparse

import requests
from requests import Response, Session

from ..config import get_settings
from ..utils.converters import NumberLike, decimal_string
from ..utils.exceptions import ExchangeError, InvalidParameterError
from ..utils.logger import get_logger
from ..utils.set_decoder import StringSetDecoder
from ..utils.time_utils import NonceClock
from .auth import AuthenticatedRequestBuilder, Credentials, KeyMaterial, PayloadEncoder
from .whitelists import (
    CURRENCIES,
    DEPOSIT_METHODS,
    OFFER_DIRECTIONS,
    ORDER_SIDES,
    ORDER_TYPES,
    WALLET_NAMES,
    require_member,
)

JsonMapping = Mapping[str, Any]
Headers = Mapping[str, str]
Timeout = Union[float, Tuple[float, float]]

DEFAULT_USER_AGENT = "bfxrest/0.1"
DEFAULT_BACKOFF_FACTOR = 0.5
RETRY_STATUS_CODES: Tuple[int, ...] = (429, 500, 502, 503, 504)

logger = get_logger(__name__)


def normalize_symbol(symbol: str) -> str:
    """거래쌍 심볼을 Bitfinex 형식(소문자, 구분자 없음)으로 정규화한다."""
    return symbol.strip().lower().replace("-", "").replace("_", "").replace("/", "")


def normalize_currency(currency: str) -> str:
    return currency.strip().upper()


class HttpMethod(str, Enum):
    """지원하는 HTTP 메서드."""

    GET = "GET"
    POST = "POST"


class BitfinexEndpoint(str, Enum):
    """Bitfinex REST API v1 엔드포인트."""

    # Public
    TICKER = "/pubticker/{symbol}"
    STATS = "/stats/{symbol}"
    FUNDING_BOOK = "/lendbook/{currency}"
    ORDER_BOOK = "/book/{symbol}"
    TRADES = "/trades/{symbol}"
    LENDS = "/lends/{currency}"
    SYMBOLS = "/symbols"
    SYMBOL_DETAILS = "/symbols_details"

    # Account
    ACCOUNT_INFOS = "/account_infos"
    ACCOUNT_FEES = "/account_fees"
    SUMMARY = "/summary"
    DEPOSIT_NEW = "/deposit/new"
    KEY_INFO = "/key_info"
    MARGIN_INFOS = "/margin_infos"
    BALANCES = "/balances"
    TRANSFER = "/transfer"
    WITHDRAW = "/withdraw"

    # Orders
    ORDER_NEW = "/order/new"
    ORDER_NEW_MULTI = "/order/new/multi"
    ORDER_CANCEL = "/order/cancel"
    ORDER_CANCEL_MULTI = "/order/cancel/multi"
    ORDER_CANCEL_ALL = "/order/cancel/all"
    ORDER_CANCEL_REPLACE = "/order/cancel/replace"
    ORDER_STATUS = "/order/status"
    ORDERS = "/orders"
    ORDERS_HISTORY = "/orders/hist"

    # Positions
    POSITIONS = "/positions"
    POSITION_CLAIM = "/position/claim"
    POSITION_CLOSE = "/position/close"

    # History
    HISTORY = "/history"
    HISTORY_MOVEMENTS = "/history/movements"
    MY_TRADES = "/mytrades"

    # Margin funding
    OFFER_NEW = "/offer/new"
    OFFER_CANCEL = "/offer/cancel"
    OFFER_STATUS = "/offer/status"
    CREDITS = "/credits"
    OFFERS = "/offers"
    OFFERS_HISTORY = "/offers/hist"
    MY_TRADES_FUNDING = "/mytrades_funding"
    TAKEN_FUNDS = "/taken_funds"
    UNUSED_TAKEN_FUNDS = "/unused_taken_funds"
    TOTAL_TAKEN_FUNDS = "/total_taken_funds"
    FUNDING_CLOSE = "/funding/close"


@dataclass(frozen=True)
class OrderRequest:
    """다중 주문(``/order/new/multi``) 항목."""

    symbol: str
    amount: NumberLike
    price: NumberLike
    side: str
    order_type: str

    def to_fields(self) -> dict[str, str]:
        return {
            "symbol": self.symbol,
            "amount": decimal_string(self.amount),
            "price": decimal_string(self.price),
            "side": self.side,
            "type": self.order_type,
        }


class BitfinexClient:
    """Bitfinex REST API 호출을 담당하는 기본 클라이언트.

    공개 엔드포인트는 GET, 인증 엔드포인트는 서명된 ``X-BFX-*`` 헤더를 붙인 POST 로
    호출한다. 재시도는 멱등한 공개 GET 요청에만 적용된다.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        session: Optional[Session] = None,
        timeout: Optional[Timeout] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        api_key: Optional[KeyMaterial] = None,
        api_secret: Optional[KeyMaterial] = None,
        max_retries: Optional[int] = None,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        retry_statuses: Sequence[int] = RETRY_STATUS_CODES,
        clock: Optional[NonceClock] = None,
        decoder: Optional[StringSetDecoder] = None,
        max_payload_size: Optional[int] = None,
    ) -> None:
        settings = get_settings().bitfinex

        self._base_url = (base_url or settings.rest_base_url).rstrip("/")
        self._path_prefix = urlparse(self._base_url).path.rstrip("/")
        self._timeout: Timeout = timeout if timeout is not None else settings.timeout
        self._session: Session = session or requests.Session()
        self._owns_session = session is None
        self._default_headers: dict[str, str] = {
            "Accept": "application/json",
            "User-Agent": user_agent,
        }
        resolved_retries = settings.max_retries if max_retries is None else max_retries
        self._max_retries = max(0, resolved_retries)
        self._backoff_factor = max(0.0, backoff_factor)
        self._retry_statuses = tuple(set(int(code) for code in retry_statuses))
        self._clock = clock or NonceClock()
        self._decoder = decoder or StringSetDecoder()
        self._encoder = PayloadEncoder(max_payload_size or settings.max_payload_size)
        self._logger = logger
        self._sleep = time.sleep
        self._symbols: Optional[frozenset[str]] = None

        resolved_api_key = api_key or (settings.api_key.get_secret_value() if settings.api_key else None)
        resolved_api_secret = api_secret or (
            settings.api_secret.get_secret_value() if settings.api_secret else None
        )
        self._auth: Optional[AuthenticatedRequestBuilder] = None
        if resolved_api_key or resolved_api_secret:
            # 키가 하나라도 주어지면 둘 다 유효해야 한다.
            self._auth = AuthenticatedRequestBuilder(
                Credentials.create(resolved_api_key, resolved_api_secret),
                encoder=self._encoder,
            )

    @property
    def base_url(self) -> str:
        """REST API 기본 URL."""

        return self._base_url

    @property
    def session(self) -> Session:
        """내부 HTTP 세션."""

        return self._session

    @property
    def credentials(self) -> Optional[Credentials]:
        """설정된 인증 정보. ``repr`` 에 시크릿은 나타나지 않는다."""

        return self._auth.credentials if self._auth else None

    def set_keys(self, api_key: KeyMaterial, api_secret: KeyMaterial) -> None:
        """API 키와 시크릿을 함께 교체한다."""

        credentials = Credentials.create(api_key, api_secret)
        if self._auth is None:
            self._auth = AuthenticatedRequestBuilder(credentials, encoder=self._encoder)
        else:
            self._auth.replace_credentials(credentials)

    def close(self) -> None:
        """세션을 종료한다."""

        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "BitfinexClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - 컨텍스트 관리자 편의 기능
        self.close()

    # ------------------------------------------------------------------
    # 내부 유틸리티
    # ------------------------------------------------------------------
    def _resolve_endpoint_path(
        self,
        endpoint: Union[BitfinexEndpoint, str],
        path_params: Optional[Mapping[str, Any]],
    ) -> str:
        if isinstance(endpoint, BitfinexEndpoint):
            path_template = endpoint.value
        else:
            path_template = str(endpoint)
        if not path_template.startswith("/"):
            path_template = f"/{path_template}"

        try:
            return path_template.format(**(path_params or {}))
        except KeyError as exc:
            missing_key = exc.args[0]
            raise ValueError(f"경로 변수 '{missing_key}'가 누락되었습니다: {path_template}") from exc

    def _merge_headers(self, extra_headers: Optional[Headers]) -> dict[str, str]:
        merged = dict(self._default_headers)
        if extra_headers:
            merged.update(extra_headers)
        return merged

    def _signed_headers(self, path: str, fields: Optional[JsonMapping]) -> dict[str, str]:
        if self._auth is None:
            raise ExchangeError("Bitfinex API 키/시크릿을 설정한 뒤 호출해야 합니다.")
        body: dict[str, Any] = {
            "request": f"{self._path_prefix}{path}",
            "nonce": str(self._clock.next_nonce()),
        }
        body.update(fields or {})
        return self._auth.build(body).as_headers()

    def _sleep_backoff(self, attempt: int) -> None:
        if self._backoff_factor <= 0:
            return
        delay = self._backoff_factor * (2 ** attempt)
        self._sleep(delay)

    def _is_retryable_status(self, status_code: int) -> bool:
        return status_code in self._retry_statuses

    def _raise_for_api_error(self, payload: Any) -> None:
        if not isinstance(payload, Mapping):
            return
        error = payload.get("error")
        if not error:
            return
        message = payload.get("message")
        detail = f"{error} ({message})" if message else str(error)
        raise ExchangeError(f"Bitfinex API 오류: {detail}")

    # ------------------------------------------------------------------
    # 공개 메서드
    # ------------------------------------------------------------------
    def request(
        self,
        method: Union[HttpMethod, str],
        endpoint: Union[BitfinexEndpoint, str],
        *,
        params: Optional[JsonMapping] = None,
        fields: Optional[JsonMapping] = None,
        headers: Optional[Headers] = None,
        path_params: Optional[Mapping[str, Any]] = None,
        timeout: Optional[Timeout] = None,
        return_json: bool = True,
        private: bool = False,
    ) -> Any:
        method_value = method.value if isinstance(method, HttpMethod) else str(method).upper()
        path = self._resolve_endpoint_path(endpoint, path_params)
        url = f"{self._base_url}{path}"
        request_params = dict(params) if params else None
        # 주문 등 인증 요청은 중복 실행될 수 있으므로 재시도하지 않는다.
        max_retries = self._max_retries if method_value == "GET" and not private else 0

        for attempt in range(max_retries + 1):
            merged_headers = self._merge_headers(headers)
            if private:
                merged_headers.update(self._signed_headers(path, fields))

            self._logger.debug("%s %s 요청 (시도 %d)", method_value, path, attempt + 1)
            try:
                response = self._session.request(
                    method=method_value,
                    url=url,
                    params=request_params,
                    headers=merged_headers,
                    timeout=timeout or self._timeout,
                )
            except requests.RequestException as exc:
                if attempt >= max_retries:
                    raise ExchangeError(f"Bitfinex API 호출 중 네트워크 오류가 발생했습니다: {exc}") from exc
                self._logger.warning("네트워크 오류로 재시도합니다 (%s %s): %s", method_value, path, exc)
                self._sleep_backoff(attempt)
                continue

            if self._is_retryable_status(response.status_code) and attempt < max_retries:
                self._logger.warning(
                    "HTTP %s 응답으로 재시도합니다 (%s %s)", response.status_code, method_value, path
                )
                self._sleep_backoff(attempt)
                continue

            result = self._handle_response(response, to_json=return_json)
            if return_json:
                self._raise_for_api_error(result)
            return result

        raise ExchangeError("재시도 한도를 초과했습니다.")

    def _handle_response(self, response: Response, *, to_json: bool) -> Any:
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            status_code = response.status_code
            detail = response.text
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, Mapping) and body.get("message"):
                detail = str(body["message"])
            raise ExchangeError(f"Bitfinex API 호출 실패: HTTP {status_code} - {detail}") from exc

        if to_json:
            try:
                return response.json()
            except ValueError as exc:
                raise ExchangeError("Bitfinex API 응답 JSON 디코딩 실패") from exc
        return response

    def get(
        self,
        endpoint: Union[BitfinexEndpoint, str],
        *,
        params: Optional[JsonMapping] = None,
        headers: Optional[Headers] = None,
        path_params: Optional[Mapping[str, Any]] = None,
        timeout: Optional[Timeout] = None,
        return_json: bool = True,
    ) -> Any:
        return self.request(
            HttpMethod.GET,
            endpoint,
            params=params,
            headers=headers,
            path_params=path_params,
            timeout=timeout,
            return_json=return_json,
        )

    def post(
        self,
        endpoint: Union[BitfinexEndpoint, str],
        *,
        fields: Optional[JsonMapping] = None,
        headers: Optional[Headers] = None,
        path_params: Optional[Mapping[str, Any]] = None,
        timeout: Optional[Timeout] = None,
        return_json: bool = True,
    ) -> Any:
        """인증이 필요한 POST 요청."""
        return self.request(
            HttpMethod.POST,
            endpoint,
            fields=fields,
            headers=headers,
            path_params=path_params,
            timeout=timeout,
            return_json=return_json,
            private=True,
        )

    # ------------------------------------------------------------------
    # 허용 목록 검증
    # ------------------------------------------------------------------
    @property
    def symbols(self) -> frozenset[str]:
        """거래 가능한 심볼 집합. 처음 접근할 때 ``/symbols`` 에서 불러온다."""
        if self._symbols is None:
            self._symbols = self.get_symbols()
        return self._symbols

    def refresh_symbols(self) -> frozenset[str]:
        self._symbols = self.get_symbols()
        return self._symbols

    def _require_symbol(self, symbol: str) -> str:
        return require_member("symbol", normalize_symbol(symbol), self.symbols)

    def _require_currency(self, currency: str) -> str:
        return require_member("currency", normalize_currency(currency), CURRENCIES)

    def _require_order(self, symbol: str, side: str, order_type: str) -> tuple[str, str, str]:
        return (
            self._require_symbol(symbol),
            require_member("side", side.lower(), ORDER_SIDES),
            require_member("type", order_type.lower(), ORDER_TYPES),
        )

    def _until(self, until: int) -> str:
        return str(until or self._clock.next_nonce())

    # ------------------------------------------------------------------
    # 공개 엔드포인트
    # ------------------------------------------------------------------
    def get_symbols(self) -> frozenset[str]:
        """``/symbols`` 응답을 스키마 검증 후 문자열 집합으로 디코딩한다."""
        response = self.get(BitfinexEndpoint.SYMBOLS, return_json=False)
        return self._decoder.decode(response.content)

    def get_symbol_details(self) -> Any:
        return self.get(BitfinexEndpoint.SYMBOL_DETAILS)

    def get_ticker(self, symbol: str) -> JsonMapping:
        return self.get(BitfinexEndpoint.TICKER, path_params={"symbol": self._require_symbol(symbol)})

    def get_stats(self, symbol: str) -> Any:
        return self.get(BitfinexEndpoint.STATS, path_params={"symbol": self._require_symbol(symbol)})

    def get_funding_book(self, currency: str, *, limit_bids: int = 50, limit_asks: int = 50) -> JsonMapping:
        return self.get(
            BitfinexEndpoint.FUNDING_BOOK,
            path_params={"currency": self._require_currency(currency)},
            params={"limit_bids": limit_bids, "limit_asks": limit_asks},
        )

    def get_order_book(
        self,
        symbol: str,
        *,
        limit_bids: int = 50,
        limit_asks: int = 50,
        group: bool = True,
    ) -> JsonMapping:
        return self.get(
            BitfinexEndpoint.ORDER_BOOK,
            path_params={"symbol": self._require_symbol(symbol)},
            params={"limit_bids": limit_bids, "limit_asks": limit_asks, "group": int(group)},
        )

    def get_trades(self, symbol: str, *, since: int = 0, limit_trades: int = 50) -> Any:
        return self.get(
            BitfinexEndpoint.TRADES,
            path_params={"symbol": self._require_symbol(symbol)},
            params={"timestamp": since, "limit_trades": limit_trades},
        )

    def get_lends(self, currency: str, *, since: int = 0, limit_lends: int = 50) -> Any:
        return self.get(
            BitfinexEndpoint.LENDS,
            path_params={"currency": self._require_currency(currency)},
            params={"timestamp": since, "limit_lends": limit_lends},
        )

    # ------------------------------------------------------------------
    # 인증 엔드포인트 - 계정
    # ------------------------------------------------------------------
    def get_account_info(self) -> Any:
        return self.post(BitfinexEndpoint.ACCOUNT_INFOS)

    def get_account_fees(self) -> Any:
        return self.post(BitfinexEndpoint.ACCOUNT_FEES)

    def get_summary(self) -> Any:
        return self.post(BitfinexEndpoint.SUMMARY)

    def get_key_info(self) -> Any:
        return self.post(BitfinexEndpoint.KEY_INFO)

    def get_margin_info(self) -> Any:
        return self.post(BitfinexEndpoint.MARGIN_INFOS)

    def get_balances(self) -> Any:
        return self.post(BitfinexEndpoint.BALANCES)

    def new_deposit(self, method: str, wallet_name: str, *, renew: bool = False) -> Any:
        fields = {
            "method": require_member("method", method, DEPOSIT_METHODS),
            "wallet_name": require_member("wallet_name", wallet_name, WALLET_NAMES),
            "renew": int(renew),
        }
        return self.post(BitfinexEndpoint.DEPOSIT_NEW, fields=fields)

    def transfer(self, amount: NumberLike, currency: str, wallet_from: str, wallet_to: str) -> Any:
        fields = {
            "amount": decimal_string(amount),
            "currency": self._require_currency(currency),
            "walletfrom": require_member("walletfrom", wallet_from, WALLET_NAMES),
            "walletto": require_member("walletto", wallet_to, WALLET_NAMES),
        }
        return self.post(BitfinexEndpoint.TRANSFER, fields=fields)

    def withdraw(self, withdraw_type: str, wallet: str, amount: NumberLike, **details: Any) -> Any:
        """출금 요청. 은행 송금(``wire``)은 계좌 정보, 그 외 방식은 ``address`` 가 필요하다."""
        if withdraw_type == "wire":
            required: Iterable[str] = (
                "account_number",
                "bank_name",
                "bank_address",
                "bank_city",
                "bank_country",
            )
        else:
            require_member("withdraw_type", withdraw_type, DEPOSIT_METHODS)
            required = ("address",)
        for name in required:
            if not details.get(name):
                raise InvalidParameterError(name, details.get(name))

        fields: dict[str, Any] = {
            "withdraw_type": withdraw_type,
            "walletselected": require_member("walletselected", wallet, WALLET_NAMES),
            "amount": decimal_string(amount),
        }
        fields.update({key: value for key, value in details.items() if value not in (None, "")})
        return self.post(BitfinexEndpoint.WITHDRAW, fields=fields)

    # ------------------------------------------------------------------
    # 인증 엔드포인트 - 주문
    # ------------------------------------------------------------------
    def new_order(
        self,
        symbol: str,
        amount: NumberLike,
        price: NumberLike,
        side: str,
        order_type: str,
        *,
        is_hidden: bool = False,
        is_postonly: bool = False,
        use_all_available: bool = False,
        ocoorder: bool = False,
        buy_price_oco: NumberLike = 0,
    ) -> Any:
        symbol, side, order_type = self._require_order(symbol, side, order_type)
        fields = {
            "symbol": symbol,
            "amount": decimal_string(amount),
            "price": decimal_string(price),
            "side": side,
            "type": order_type,
            "is_hidden": is_hidden,
            "is_postonly": is_postonly,
            "use_all_available": use_all_available,
            "ocoorder": ocoorder,
            "buy_price_oco": decimal_string(buy_price_oco),
        }
        return self.post(BitfinexEndpoint.ORDER_NEW, fields=fields)

    def new_orders(self, orders: Sequence[OrderRequest]) -> Any:
        if not orders:
            raise InvalidParameterError("orders", list(orders))
        payload = []
        for order in orders:
            symbol, side, order_type = self._require_order(order.symbol, order.side, order.order_type)
            payload.append(
                OrderRequest(symbol, order.amount, order.price, side, order_type).to_fields()
            )
        return self.post(BitfinexEndpoint.ORDER_NEW_MULTI, fields={"payload": payload})

    def cancel_order(self, order_id: int) -> Any:
        return self.post(BitfinexEndpoint.ORDER_CANCEL, fields={"order_id": int(order_id)})

    def cancel_orders(self, order_ids: Sequence[int]) -> Any:
        if not order_ids:
            raise InvalidParameterError("order_ids", list(order_ids))
        return self.post(
            BitfinexEndpoint.ORDER_CANCEL_MULTI,
            fields={"order_ids": [int(order_id) for order_id in order_ids]},
        )

    def cancel_all_orders(self) -> Any:
        return self.post(BitfinexEndpoint.ORDER_CANCEL_ALL)

    def replace_order(
        self,
        order_id: int,
        symbol: str,
        amount: NumberLike,
        price: NumberLike,
        side: str,
        order_type: str,
        *,
        is_hidden: bool = False,
        use_remaining: bool = False,
    ) -> Any:
        symbol, side, order_type = self._require_order(symbol, side, order_type)
        fields = {
            "order_id": int(order_id),
            "symbol": symbol,
            "amount": decimal_string(amount),
            "price": decimal_string(price),
            "side": side,
            "type": order_type,
            "is_hidden": is_hidden,
            "use_all_available": use_remaining,
        }
        return self.post(BitfinexEndpoint.ORDER_CANCEL_REPLACE, fields=fields)

    def get_order_status(self, order_id: int) -> Any:
        return self.post(BitfinexEndpoint.ORDER_STATUS, fields={"order_id": int(order_id)})

    def get_active_orders(self) -> Any:
        return self.post(BitfinexEndpoint.ORDERS)

    def get_orders_history(self, limit: int = 50) -> Any:
        return self.post(BitfinexEndpoint.ORDERS_HISTORY, fields={"limit": limit})

    # ------------------------------------------------------------------
    # 인증 엔드포인트 - 포지션
    # ------------------------------------------------------------------
    def get_active_positions(self) -> Any:
        return self.post(BitfinexEndpoint.POSITIONS)

    def claim_position(self, position_id: int, amount: NumberLike) -> Any:
        fields = {"position_id": int(position_id), "amount": decimal_string(amount)}
        return self.post(BitfinexEndpoint.POSITION_CLAIM, fields=fields)

    def close_position(self, position_id: int) -> Any:
        return self.post(BitfinexEndpoint.POSITION_CLOSE, fields={"position_id": int(position_id)})

    # ------------------------------------------------------------------
    # 인증 엔드포인트 - 내역
    # ------------------------------------------------------------------
    def get_balance_history(
        self,
        currency: str,
        *,
        since: int = 0,
        until: int = 0,
        limit: int = 500,
        wallet: str = "",
    ) -> Any:
        fields: dict[str, Any] = {
            "currency": self._require_currency(currency),
            "since": str(since),
            "until": self._until(until),
            "limit": limit,
        }
        if wallet:
            fields["wallet"] = require_member("wallet", wallet, WALLET_NAMES)
        return self.post(BitfinexEndpoint.HISTORY, fields=fields)

    def get_deposit_withdrawal_history(
        self,
        currency: str,
        *,
        method: str = "",
        since: int = 0,
        until: int = 0,
        limit: int = 500,
    ) -> Any:
        fields: dict[str, Any] = {"currency": self._require_currency(currency)}
        if method:
            fields["method"] = require_member("method", method, DEPOSIT_METHODS | {"wire"})
        fields.update({"since": str(since), "until": self._until(until), "limit": limit})
        return self.post(BitfinexEndpoint.HISTORY_MOVEMENTS, fields=fields)

    def get_past_trades(
        self,
        symbol: str,
        *,
        timestamp: int = 0,
        until: int = 0,
        limit_trades: int = 500,
        reverse: bool = False,
    ) -> Any:
        fields = {
            "symbol": self._require_symbol(symbol),
            "timestamp": str(timestamp),
            "until": self._until(until),
            "limit_trades": limit_trades,
            "reverse": int(reverse),
        }
        return self.post(BitfinexEndpoint.MY_TRADES, fields=fields)

    # ------------------------------------------------------------------
    # 인증 엔드포인트 - 마진 펀딩
    # ------------------------------------------------------------------
    def new_offer(
        self,
        currency: str,
        amount: NumberLike,
        rate: NumberLike,
        period: int,
        direction: str,
    ) -> Any:
        fields = {
            "currency": self._require_currency(currency),
            "amount": decimal_string(amount),
            "rate": decimal_string(rate),
            "period": int(period),
            "direction": require_member("direction", direction, OFFER_DIRECTIONS),
        }
        return self.post(BitfinexEndpoint.OFFER_NEW, fields=fields)

    def cancel_offer(self, offer_id: int) -> Any:
        return self.post(BitfinexEndpoint.OFFER_CANCEL, fields={"offer_id": int(offer_id)})

    def get_offer_status(self, offer_id: int) -> Any:
        return self.post(BitfinexEndpoint.OFFER_STATUS, fields={"offer_id": int(offer_id)})

    def get_active_credits(self) -> Any:
        return self.post(BitfinexEndpoint.CREDITS)

    def get_offers(self) -> Any:
        return self.post(BitfinexEndpoint.OFFERS)

    def get_offers_history(self, limit: int = 50) -> Any:
        return self.post(BitfinexEndpoint.OFFERS_HISTORY, fields={"limit": limit})

    def get_funding_trades(self, currency: str, *, until: int = 0, limit_trades: int = 50) -> Any:
        # 이 엔드포인트는 통화 코드를 "symbol" 필드로 받는다.
        fields = {
            "symbol": self._require_currency(currency),
            "until": until,
            "limit_trades": limit_trades,
        }
        return self.post(BitfinexEndpoint.MY_TRADES_FUNDING, fields=fields)

    def get_taken_funds(self) -> Any:
        return self.post(BitfinexEndpoint.TAKEN_FUNDS)

    def get_unused_taken_funds(self) -> Any:
        return self.post(BitfinexEndpoint.UNUSED_TAKEN_FUNDS)

    def get_total_taken_funds(self) -> Any:
        return self.post(BitfinexEndpoint.TOTAL_TAKEN_FUNDS)

    def close_funding(self, swap_id: int) -> Any:
        return self.post(BitfinexEndpoint.FUNDING_CLOSE, fields={"swap_id": int(swap_id)})


__all__ = [
    "BitfinexClient",
    "BitfinexEndpoint",
    "DEFAULT_USER_AGENT",
    "HttpMethod",
    "OrderRequest",
    "RETRY_STATUS_CODES",
    "normalize_currency",
    "normalize_symbol",
]
