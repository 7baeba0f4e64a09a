"""공통 유틸리티: 예외, 로깅, nonce 시계, JSON 스트리밍 디코더."""
