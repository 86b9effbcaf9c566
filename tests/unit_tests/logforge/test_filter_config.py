"""
过滤配置单元测试

测试 PassIfMatch / PassOnAnyOf / Custom 编译为过滤表达式后的行为。
"""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from logforge.filters import Reject, match_kv
from logforge.types import (
    Custom,
    FilterConfig,
    PassIfMatch,
    PassOnAnyOf,
    Severity,
    always_pass_on_severity_at_least,
    default_filter_config,
)

CONFIG_ADAPTER = TypeAdapter(FilterConfig)


class TestPassIfMatch:
    """PassIfMatch 测试"""

    def test_accepts_matching_record_at_or_above_severity(self) -> None:
        """满足键值对且级别达标的记录应通过"""
        spec = PassIfMatch.new([("key1", "value1")], Severity.TRACE).to_filter_spec()
        for severity in Severity:
            assert spec.evaluate(severity, {"key1": "value1"})

    def test_rejects_record_missing_pair_regardless_of_severity(self) -> None:
        """缺少键值对的记录无论级别都应被拒绝"""
        spec = PassIfMatch.new([("key1", "value1")], Severity.TRACE).to_filter_spec()
        for severity in Severity:
            assert not spec.evaluate(severity, {})
            assert not spec.evaluate(severity, {"key1": "other"})

    def test_all_pairs_must_match(self) -> None:
        """所有键值对都必须匹配"""
        spec = PassIfMatch.new([("a", "1"), ("b", "2")], Severity.DEBUG).to_filter_spec()
        assert spec.evaluate(Severity.DEBUG, {"a": "1", "b": "2"})
        assert not spec.evaluate(Severity.DEBUG, {"a": "1"})

    def test_severity_threshold(self) -> None:
        """低于最低级别的记录应被拒绝"""
        spec = PassIfMatch.new([("a", "1")], Severity.WARNING).to_filter_spec()
        assert not spec.evaluate(Severity.INFO, {"a": "1"})

    def test_new_renders_pairs_as_strings(self) -> None:
        """new() 将键值转为字符串"""
        entry = PassIfMatch.new([("port", 8080)], Severity.INFO)
        assert entry.keys_and_values == (("port", "8080"),)


class TestPassOnAnyOf:
    """PassOnAnyOf 测试"""

    def _config(self) -> PassOnAnyOf:
        return PassOnAnyOf(
            always_pass_on_severity_at_least=Severity.INFO,
            passes=(PassIfMatch.new([("key1", "value1")], Severity.DEBUG),),
        )

    def test_exception_passes_below_threshold(self) -> None:
        """匹配例外规则的 Debug 记录即使低于 Info 也应通过"""
        spec = self._config().to_filter_spec()
        assert spec.evaluate(Severity.DEBUG, {"key1": "value1"})

    def test_non_matching_record_below_threshold_rejected(self) -> None:
        """不匹配例外规则的 Debug 记录应被拒绝"""
        spec = self._config().to_filter_spec()
        assert not spec.evaluate(Severity.DEBUG, {})

    def test_threshold_passes_everything_above(self) -> None:
        """达到阈值的记录无条件通过"""
        spec = self._config().to_filter_spec()
        assert spec.evaluate(Severity.INFO, {})
        assert spec.evaluate(Severity.CRITICAL, {"key1": "other"})

    def test_exception_own_threshold_applies(self) -> None:
        """例外规则自身的级别下限仍然生效"""
        spec = self._config().to_filter_spec()
        assert not spec.evaluate(Severity.TRACE, {"key1": "value1"})

    def test_default_passes_info_and_above(self) -> None:
        """默认配置放行 Info 及以上"""
        config = default_filter_config()
        assert config == PassOnAnyOf(always_pass_on_severity_at_least=Severity.INFO, passes=())
        spec = config.to_filter_spec()
        assert spec.evaluate(Severity.INFO, {})
        assert not spec.evaluate(Severity.DEBUG, {})

    def test_always_pass_shortcut(self) -> None:
        """快捷构造仅按级别过滤"""
        config = always_pass_on_severity_at_least(Severity.DEBUG)
        assert config.passes == ()
        assert config.to_filter_spec().evaluate(Severity.DEBUG, {})


class TestFilterConfigUnion:
    """FilterConfig 标签联合测试"""

    def test_custom_is_used_verbatim(self) -> None:
        """Custom 原样使用其表达式"""
        spec = match_kv("a", "1") | Reject()
        assert Custom(filter_spec=spec).to_filter_spec() == spec

    def test_validates_both_shapes(self) -> None:
        """两种形态均可从映射解析"""
        on_any = CONFIG_ADAPTER.validate_python(
            {
                "type": "PassOnAnyOf",
                "always_pass_on_severity_at_least": "warning",
                "passes": [{"keys_and_values": [["system", "db"]], "severity_at_least": "trace"}],
            }
        )
        custom = CONFIG_ADAPTER.validate_python(
            {"type": "Custom", "filter_spec": {"type": "LevelAtLeast", "severity": "error"}}
        )
        assert isinstance(on_any, PassOnAnyOf)
        assert on_any.passes[0].keys_and_values == (("system", "db"),)
        assert isinstance(custom, Custom)

    def test_unknown_severity_literal_rejected(self) -> None:
        """未知级别字面量应校验失败"""
        with pytest.raises(ValidationError, match="bogus"):
            CONFIG_ADAPTER.validate_python(
                {"type": "PassOnAnyOf", "always_pass_on_severity_at_least": "bogus"}
            )
