"""패키지에 포함된 JSON 스키마 리소스."""
