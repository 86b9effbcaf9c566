"""
终端装饰器单元测试

测试探测链回退（不切换输出流）与 with_record 的作用域释放语义。
"""

from __future__ import annotations

import io
import sys

import pytest

from logforge.decorators import (
    DecoratorUnavailable,
    PlainDecorator,
    RecordDecorator,
    TermDecorator,
    plain_probe,
    resolve_decorator,
    terminal_probe,
)
from logforge.drains import Record
from logforge.enums import Destination, Severity


class FakeTTY(io.StringIO):
    def isatty(self) -> bool:
        return True


def failing_probe(destination, stream):
    raise DecoratorUnavailable("forced failure")


RECORD = Record(severity=Severity.INFO, fields={"event": "hello"})


class TestResolveDecorator:
    """探测链测试"""

    def test_fallback_keeps_stdout(self, capsys) -> None:
        """终端探测失败时仍写入 stdout（纯文本）"""
        decorator = resolve_decorator(Destination.STDOUT, probes=[failing_probe, plain_probe])
        assert isinstance(decorator, PlainDecorator)
        assert decorator.stream is sys.stdout
        decorator.with_record(RECORD, lambda out: out.write("hello", "message"))
        captured = capsys.readouterr()
        assert captured.out == "hello\n"
        assert captured.err == ""

    def test_fallback_keeps_stderr(self, capsys) -> None:
        """请求 stderr 时回退后仍写入 stderr"""
        decorator = resolve_decorator(Destination.STDERR, probes=[failing_probe])
        assert isinstance(decorator, PlainDecorator)
        decorator.with_record(RECORD, lambda out: out.write("oops"))
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "oops\n"

    def test_first_success_wins(self, monkeypatch) -> None:
        """第一个成功的探测胜出"""
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        stream = FakeTTY()
        decorator = resolve_decorator(
            Destination.STDOUT, probes=[failing_probe, terminal_probe, plain_probe], stream=stream
        )
        assert isinstance(decorator, TermDecorator)
        assert decorator.colored

    def test_default_chain_on_non_tty_is_plain(self) -> None:
        """非终端流使用纯文本装饰器"""
        decorator = resolve_decorator(Destination.STDOUT, stream=io.StringIO())
        assert isinstance(decorator, PlainDecorator)
        assert not decorator.colored


class TestTerminalProbe:
    """终端能力探测测试"""

    def test_no_color_disables(self, monkeypatch) -> None:
        """NO_COLOR 设置时不可用"""
        monkeypatch.setenv("NO_COLOR", "1")
        with pytest.raises(DecoratorUnavailable):
            terminal_probe(Destination.STDOUT, FakeTTY())

    def test_dumb_terminal_disables(self, monkeypatch) -> None:
        """TERM=dumb 时不可用"""
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        with pytest.raises(DecoratorUnavailable):
            terminal_probe(Destination.STDOUT, FakeTTY())

    def test_tty_enables_colors(self, monkeypatch) -> None:
        """交互终端上输出带颜色，且每段都被复位"""
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        stream = FakeTTY()
        decorator = terminal_probe(Destination.STDOUT, stream)
        decorator.with_record(RECORD, lambda out: out.write("hello", "info"))
        assert stream.getvalue() == "\x1b[32mhello\x1b[0m\n"


class TestWithRecord:
    """with_record 作用域测试"""

    def test_failed_callback_writes_nothing(self) -> None:
        """回调抛出异常时流中不留任何部分输出"""
        stream = FakeTTY()
        decorator = TermDecorator(Destination.STDOUT, stream)

        def explode(out: RecordDecorator) -> None:
            out.write("partial", "error")
            raise ValueError("formatting failed")

        with pytest.raises(ValueError):
            decorator.with_record(RECORD, explode)
        assert stream.getvalue() == ""

    def test_record_buffer_released_on_failure(self, monkeypatch) -> None:
        """无论成功与否都释放记录缓冲"""
        released = []
        original = RecordDecorator.release

        def spy(self) -> None:
            released.append(self.getvalue())
            original(self)

        monkeypatch.setattr(RecordDecorator, "release", spy)
        decorator = PlainDecorator(Destination.STDOUT, io.StringIO())
        decorator.with_record(RECORD, lambda out: out.write("ok"))

        def explode(out: RecordDecorator) -> None:
            raise RuntimeError("x")

        with pytest.raises(RuntimeError):
            decorator.with_record(RECORD, explode)
        assert released == ["ok", ""]

    def test_plain_ignores_styles(self) -> None:
        """纯文本装饰器忽略样式"""
        stream = io.StringIO()
        PlainDecorator(Destination.STDOUT, stream).with_record(RECORD, lambda out: out.write("hi", "error"))
        assert stream.getvalue() == "hi\n"
