"""Tests for junction.config: RouterConfig frozen dataclass."""

import pytest

from junction.config import RouterConfig


class TestRouterConfig:
    def test_defaults(self) -> None:
        cfg = RouterConfig()

        assert cfg.debug is False
        assert cfg.json_ensure_ascii is False
        assert cfg.default_content_type == "text/html; charset=utf-8"
        assert cfg.max_content_length == 16 * 1024 * 1024
        assert cfg.memoize_rules is True

    def test_override(self) -> None:
        cfg = RouterConfig(debug=True, max_content_length=1024)

        assert cfg.debug is True
        assert cfg.max_content_length == 1024

    def test_frozen(self) -> None:
        cfg = RouterConfig()
        with pytest.raises(AttributeError):
            cfg.debug = True  # type: ignore[misc]
