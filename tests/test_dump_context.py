"""End-to-end tests for parsing a goroutine dump out of program output."""
import io

import pytest
from overrides import overrides

from gostack import DumpParseError, RootsConfig, UnexpectedLineError, parse_dump, parse_dump_text
from gostack.root_resolver import FileOracle


PANIC_OUTPUT = (
    'panic: oh no\n'
    '\n'
    'goroutine 1 [running]:\n'
    'main.crash(0xc000012345, 0x2, ...)\n'
    '\t/build/gopath/src/example.com/app/main.go:12 +0x39\n'
    'main.main()\n'
    '\t/build/gopath/src/example.com/app/main.go:7 +0x20\n'
    '\n'
    'goroutine 6 [chan receive, 3 minutes, locked to thread]:\n'
    'runtime.gopark(0x1, 0x2, 0x3)\n'
    '\t/build/goroot/src/runtime/proc.go:363 +0xd6\n'
    'main.worker(0x1)\n'
    '\t/build/gopath/src/example.com/app/worker.go:20 +0x55\n'
    'created by main.main\n'
    '\t/build/gopath/src/example.com/app/main.go:6 +0x1a\n'
    'exit status 2\n'
)


class FakeFileOracle(FileOracle):

    def __init__(self, files):
        self.files = set(files)

    @overrides
    def is_file(self, path: str) -> bool:
        return path in self.files


def test_parse_panic_output():
    context, passthrough = parse_dump_text(PANIC_OUTPUT, guess_paths=False)
    assert passthrough == 'panic: oh no\n\nexit status 2\n'
    assert [g.id for g in context.goroutines] == [1, 6]
    assert context.workspace_roots is None
    assert context.stdlib_root == ''

    first, second = context.goroutines
    assert first.first
    assert not second.first
    assert first.state == 'running'
    assert first.created_by is None
    crash = first.stack.calls[0]
    assert [arg.value for arg in crash.args.values] == [0xc000012345, 2]
    assert crash.args.elided
    assert crash.src_name == 'main.go'
    assert crash.line == 12
    assert crash.local_src_path is None

    assert second.signature.sleep_min == 3
    assert second.signature.locked
    assert [call.func.raw for call in second.stack.calls] == ['runtime.gopark', 'main.worker']
    assert second.created_by.full_src_line == '/build/gopath/src/example.com/app/main.go:6'


def test_parse_with_root_guessing():
    oracle = FakeFileOracle([
        '/usr/lib/go/src/runtime/proc.go',
        '/home/me/go/src/example.com/app/main.go',
    ])
    config = RootsConfig('/usr/lib/go', ['/home/me/go'])
    context, _ = parse_dump_text(PANIC_OUTPUT, config=config, oracle=oracle)
    assert context.stdlib_root == '/build/goroot'
    assert context.workspace_roots == {'/build/gopath': '/home/me/go'}
    assert context.local_stdlib_root == '/usr/lib/go'
    assert context.local_workspace_roots == ['/home/me/go']

    gopark = context.goroutines[1].stack.calls[0]
    assert gopark.is_stdlib
    assert gopark.local_src_path == '/usr/lib/go/src/runtime/proc.go'
    worker = context.goroutines[1].stack.calls[1]
    assert not worker.is_stdlib
    assert worker.src_path == '/build/gopath/src/example.com/app/worker.go'
    assert worker.local_src_path == '/home/me/go/src/example.com/app/worker.go'


def test_no_dump_is_passed_through_unchanged():
    text = 'starting server\r\nlistening on :8080\nno trailing newline'
    context, passthrough = parse_dump_text(text, guess_paths=False)
    assert context is None
    assert passthrough == text


def test_crlf_dump():
    text = PANIC_OUTPUT.replace('\n', '\r\n')
    context, passthrough = parse_dump_text(text, guess_paths=False)
    assert passthrough == 'panic: oh no\r\n\r\nexit status 2\r\n'
    assert [g.id for g in context.goroutines] == [1, 6]
    assert context.goroutines[1].created_by.line == 6


def test_dump_without_final_newline():
    text = 'goroutine 1 [running]:\nmain.main()\n\t/src/main.go:3 +0x1'
    context, passthrough = parse_dump_text(text, guess_paths=False)
    assert passthrough == ''
    assert context.goroutines[0].stack.calls[0].line == 3


def test_parse_error_keeps_partial_result():
    text = (
        'log line\n'
        'goroutine 1 [running]:\n'
        'main.main()\n'
        '\t/src/main.go:3\n'
        '\n'
        'goroutine 2 [running]:\n'
        'not a call\n'
        'never read\n'
    )
    out = io.StringIO()
    with pytest.raises(UnexpectedLineError) as excinfo:
        parse_dump(io.StringIO(text), out, guess_paths=False)
    assert isinstance(excinfo.value, DumpParseError)
    assert out.getvalue() == 'log line\n'
    context = excinfo.value.context
    assert [g.id for g in context.goroutines] == [1, 2]
    assert context.goroutines[1].stack.calls == []
    assert excinfo.value.line == 'not a call\n'


def test_unavailable_goroutine():
    text = (
        'goroutine 1 [running]:\n'
        '\tgoroutine running on other thread; stack unavailable\n'
        '\n'
    )
    context, _ = parse_dump_text(
        text, config=RootsConfig(None, ['/gopath']), oracle=FakeFileOracle([]))
    calls = context.goroutines[0].stack.calls
    assert len(calls) == 1
    assert calls[0].src_path == '<unavailable>'
    assert calls[0].local_src_path == '<unavailable>'
    assert context.workspace_roots == {}
