"""Bitfinex REST API(v1) 클라이언트 바인딩."""

__version__ = "0.1.0"
