"""
进程级注册单元测试

测试全局默认 logger 与标准库 logging 转发。
"""

from __future__ import annotations

import logging
import threading

from logforge.enums import Severity
from logforge.interceptors import RedirectStdLibHandler, set_stdlib_logger, unset_stdlib_logger
from logforge.pipeline import compose
from logforge.registry import get_global_logger, set_global_logger
from logforge.types import always_pass_on_severity_at_least

EVERYTHING = always_pass_on_severity_at_least(Severity.TRACE)


class TestGlobalLogger:
    """全局 logger 测试"""

    def test_fallback_discards(self) -> None:
        """未设置时返回丢弃一切的 logger"""
        logger = get_global_logger()
        logger.critical("nowhere")
        assert not logger.pipeline.kv_filter.accepts(Severity.CRITICAL, {}, {})

    def test_last_writer_wins(self, sink) -> None:
        """最后一次设置生效"""
        first, _ = compose(sink, 0, EVERYTHING)
        second, _ = compose(sink, 0, EVERYTHING)
        set_global_logger(first)
        previous = set_global_logger(second)
        assert previous is first
        assert get_global_logger() is second

    def test_concurrent_sets(self, sink) -> None:
        """并发设置后全局 logger 为其中之一"""
        loggers = [compose(sink, 0, EVERYTHING).logger for _ in range(8)]
        threads = [threading.Thread(target=set_global_logger, args=(lg,)) for lg in loggers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert any(get_global_logger() is lg for lg in loggers)

    def test_emits_through_global(self, sink) -> None:
        """通过全局 logger 输出"""
        logger, _ = compose(sink, 0, EVERYTHING)
        set_global_logger(logger)
        get_global_logger().info("via global")
        assert sink.messages == ["via global"]


class TestStdlibBridge:
    """标准库转发测试"""

    def test_forwards_stdlib_records(self, sink) -> None:
        """标准库记录转入 logforge logger，保留 logger 名称"""
        logger, _ = compose(sink, 0, EVERYTHING)
        set_stdlib_logger(logger)
        logging.getLogger("thirdparty.client").warning("retrying %s", "request")
        record = sink.records[-1]
        assert record.message == "retrying request"
        assert record.severity is Severity.WARNING
        assert record.fields["logger"] == "thirdparty.client"
        assert record.fields["module"].startswith(f"{__name__}:")

    def test_exc_info_is_rendered(self, sink) -> None:
        """异常信息被格式化"""
        logger, _ = compose(sink, 0, EVERYTHING)
        set_stdlib_logger(logger)
        try:
            raise KeyError("missing")
        except KeyError:
            logging.getLogger("thirdparty").exception("lookup failed")
        record = sink.records[-1]
        assert record.severity is Severity.ERROR
        assert "KeyError" in record.fields["exception"]

    def test_filter_still_applies(self, sink) -> None:
        """logforge 的过滤器对转发记录同样生效"""
        logger, _ = compose(sink, 0, always_pass_on_severity_at_least(Severity.WARNING))
        set_stdlib_logger(logger)
        logging.getLogger("thirdparty").info("quiet")
        assert sink.records == []

    def test_replaces_previous_handler(self, sink) -> None:
        """再次设置时替换之前的处理器"""
        first, _ = compose(sink, 0, EVERYTHING)
        second, _ = compose(sink, 0, EVERYTHING)
        old = set_stdlib_logger(first)
        new = set_stdlib_logger(second)
        handlers = [h for h in logging.getLogger().handlers if isinstance(h, RedirectStdLibHandler)]
        assert old not in handlers
        assert new in handlers
        assert new.target is second

    def test_unset_restores_root_level(self, sink) -> None:
        """移除转发后恢复根 logger 原有级别"""
        root = logging.getLogger()
        original = root.level
        try:
            root.setLevel(logging.WARNING)
            first, _ = compose(sink, 0, EVERYTHING)
            second, _ = compose(sink, 0, EVERYTHING)
            set_stdlib_logger(first)
            set_stdlib_logger(second, level=logging.INFO)
            assert root.level == logging.INFO
            unset_stdlib_logger()
            assert root.level == logging.WARNING
            assert not any(isinstance(h, RedirectStdLibHandler) for h in root.handlers)
        finally:
            root.setLevel(original)
