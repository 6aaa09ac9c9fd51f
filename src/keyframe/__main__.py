## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘
#
# keyframe — A tiny scripting language executed straight from its token stream.
#

import sys
import time
import traceback
from pathlib import Path
from dataclasses import dataclass

import click

from .types import Diagnostic, ExecutionResult
from .errors import KeyframeError, KeyframeParseError, KeyframeIncompleteParse
from .parser import format_parse_error_context
from .runtime import Runtime
from .formatting import write_without_ansi, format_value, format_diagnostic, show_tokens, show_memory


@dataclass(frozen=True)
class RuntimeConfig:
    verbose: int
    validate: bool
    ignore: bool
    stats: bool
    plain: bool
    tokens: bool
    memory: bool
    max_depth: int


@dataclass
class ExecutionItem:
    source: str
    filename: str


_BANNERS = {
    Diagnostic.SYNTAX: 'SYNTAX ERROR.',
    Diagnostic.TYPE: 'TYPE ERROR.',
    Diagnostic.NAME: 'NAME ERROR.',
    Diagnostic.RUNTIME: 'RUNTIME ERROR.',
}


class KeyframeRunner:
    def __init__(self, config: RuntimeConfig):
        self.verbose = config.verbose
        self.validate = config.validate
        self.ignore = config.ignore
        self.stats_enabled = config.stats
        self.plain = config.plain
        self.show_tokens = config.tokens
        self.show_memory = config.memory

        if self.plain:
            writer = write_without_ansi(sys.stdout.write)
            sys.stdout.write, sys.stderr.write = writer, writer

        self.filename = None
        self.runtime = Runtime(verbosity=config.verbose, max_depth=config.max_depth,
                               writer=self._write_output, reporter=self._report_diagnostic)
        self.start_time = time.time()
        self.failure = False
        self.executed_items = 0

    def _write_output(self, text: str) -> None:
        print(text)

    def _report_diagnostic(self, diag: Diagnostic) -> None:
        print(f'\033[30;43m {_BANNERS.get(diag.kind, "ERROR.")} \033[0m {format_diagnostic(diag, self.filename)}', file=sys.stderr)

    def _maybe_fatal_error(self, message: str, detail: str, exc_type: str = None, context: str = '', is_repl: bool = False) -> None:
        header = detail if not exc_type else f"{detail} (Exception: \033[33m{exc_type}\033[0m)"
        print(f'\033[30;43m {message} \033[0m {header}\n{context}', file=sys.stderr)
        if not is_repl and not self.ignore: sys.exit(1)

    def _handle_exception(self, exc, filename: str, source: str, is_repl: bool = False) -> bool:
        if isinstance(exc, KeyframeParseError):
            if is_repl and isinstance(exc, KeyframeIncompleteParse): return True
            context = format_parse_error_context(filename, exc.line, exc.column, exc.token, source=source)
            context += f"\n\033[90m{str(exc)}\033[0m\n"
            self._maybe_fatal_error("SYNTAX ERROR.", f"Parsing `\033[97m{filename}\033[0m` caused a problem!", type(exc).__name__, context, is_repl)
        elif isinstance(exc, KeyframeError):
            detail = f"`\033[97m{filename}\033[0m` line {exc.kf_line}: {exc}"
            self._maybe_fatal_error("RUNTIME ERROR.", detail, type(exc).__name__, '', is_repl)
        elif isinstance(exc, Exception):
            print(f'\033[30;43m INTERNAL ERROR. \033[0m Executing `\033[97m{filename}\033[0m` crashed the interpreter! (Exception: \033[33m{type(exc).__name__}\033[0m)', file=sys.stderr)
            traceback.print_exc()
            if not is_repl and not self.ignore: sys.exit(1)
        self.failure = self.failure or not is_repl
        return False

    def execute_items(self, items: list[ExecutionItem]) -> None:
        for item in items:
            self._execute_script(item.source, item.filename)
            if self.failure and not self.ignore: break

    def _execute_script(self, source: str, filename: str, is_repl: bool = False, print_result: bool = False) -> ExecutionResult | None:
        self.filename = filename
        try:
            tokens = self.runtime.check(source, filename) if self.validate or is_repl else self.runtime.tokenize(source)
            if self.show_tokens: show_tokens(tokens)
            result = self.runtime.execute(tokens)
            if result.status == ExecutionResult.ERROR and not is_repl:
                self.failure = True
            elif print_result and result.status == ExecutionResult.RETURN:
                print("\033[90m>>>\033[0m", format_value(result.value))
        except (KeyframeError, Exception) as exc:
            if self._handle_exception(exc, filename, source, is_repl=is_repl): raise
            return None
        self.executed_items += 1
        return result

    def repl(self) -> None:
        if sys.platform != "win32": import readline

        print('keyframe - Scripting language REPL; type Ctrl+C to exit.')
        source = ""

        while True:
            try:
                prompt = "\033[36m<<< \033[0m" if not source.strip() else "\033[36m... \033[0m"
                line = input(prompt)
                if len(line.strip()) == 0 and not source: continue
                if line.strip() in ('quit', 'exit'): break
                source += line + "\n"

                try:
                    self._execute_script(source, '<REPL>', is_repl=True, print_result=True)
                    source = ""
                except KeyframeIncompleteParse:
                    pass

            except (KeyboardInterrupt, EOFError):
                print(""); break

    def finalize(self) -> int:
        if self.show_memory:
            show_memory(self.runtime.library)
        if self.stats_enabled and self.executed_items > 0:
            elapsed_time = time.time() - self.start_time
            print(f"\n\033[97m\033[48;5;30m STATISTICS. \033[0m")
            print(f"step\t\033[97m{self.runtime.steps:,}\033[0m")
            print(f"time\t\033[97m{elapsed_time:.3f}s\033[0m")
        return 1 if self.failure else 0


def _inline_command_source(index: int, command: str) -> ExecutionItem:
    return ExecutionItem(command.rstrip() + '\n', f'<INPUT_{index}>')


def _parse_dev_tokens(tokens: list[str]) -> list[tuple[str, Path | str | None]]:
    actions: list[tuple[str, Path | str | None]] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token == '--':
            index += 1
            continue
        if token in ('-c', '--command'):
            index += 1
            if index >= len(tokens):
                raise click.BadParameter("Missing inline code after -c/--command option.")
            actions.append(('command', tokens[index]))
            index += 1
            continue
        if token.startswith('-c=') or token.startswith('--command='):
            _, value = token.split('=', 1)
            if value == '':
                raise click.BadParameter("Empty code supplied to command option.")
            actions.append(('command', value))
            index += 1
            continue
        if token in ('-r', '--repl'):
            actions.append(('repl', None))
            index += 1
            continue
        if token.startswith('-'):
            raise click.BadParameter(f"Unknown option `{token}`.")
        path = Path(token)
        if not path.exists():
            raise click.BadParameter(f"File `{token}` not found.")
        if path.suffix != '.kf':
            raise click.BadParameter(f"Expected `.kf` source file, got `{token}`.")
        actions.append(('file', path))
        index += 1
    return actions


@click.group(invoke_without_command=True, context_settings={'ignore_unknown_options': True, 'allow_extra_args': True})
@click.option('--verbose', '-v', default=0, count=True, help='Trace every statement; twice to also show expression values.')
@click.option('--validate', is_flag=True, help='Check the whole program is well-formed before executing it.')
@click.option('--ignore', '-i', is_flag=True, help='Ignore errors and continue executing.')
@click.option('--stats', is_flag=True, help='Display execution statistics (e.g., number of steps).')
@click.option('--plain', '-p', is_flag=True, help='Strip ANSI color codes and redirect stderr to stdout.')
@click.option('--tokens', is_flag=True, help='Print the token sequence of each program before running it.')
@click.option('--memory', is_flag=True, help='Print all variables and functions in memory at exit.')
@click.option('--max-depth', default=64, type=click.IntRange(min=1), show_default=True, help='Maximum nesting of blocks and function calls.')
@click.pass_context
def cli(ctx: click.Context, verbose: int, validate: bool, ignore: bool, stats: bool, plain: bool,
        tokens: bool, memory: bool, max_depth: int) -> None:
    ctx.ensure_object(dict)
    ctx.obj['config'] = RuntimeConfig(verbose=verbose, validate=validate, ignore=ignore, stats=stats, plain=plain,
                                      tokens=tokens, memory=memory, max_depth=max_depth)


@cli.command('run-file')
@click.argument('script', type=click.File('r', encoding='utf-8'))
@click.pass_context
def run_file(ctx: click.Context, script) -> None:
    runner = KeyframeRunner(ctx.obj['config'])
    runner.execute_items((ExecutionItem(script.read(), script.name or '<STDIN>'),))
    ctx.exit(runner.finalize())


@cli.command('run-dev', context_settings={'ignore_unknown_options': True, 'allow_extra_args': True})
@click.argument('tokens', nargs=-1)
@click.pass_context
def run_dev(ctx: click.Context, tokens: tuple[str, ...]) -> None:
    runner = KeyframeRunner(ctx.obj['config'])
    actions = _parse_dev_tokens(list(tokens))

    command_index = 1
    for action, payload in actions:
        if action == 'file':
            runner.execute_items((ExecutionItem(payload.read_text(encoding='utf-8'), str(payload)),))
        elif action == 'command':
            item = _inline_command_source(command_index, payload)
            runner._execute_script(item.source, item.filename, is_repl=False, print_result=True)
            command_index += 1
        elif action == 'repl':
            runner.repl()
        else:
            raise NotImplementedError
        if runner.failure and not runner.ignore: break

    if not actions:
        runner.repl()
    ctx.exit(runner.finalize())


@cli.command('run-repl')
@click.pass_context
def run_repl(ctx: click.Context) -> None:
    runner = KeyframeRunner(ctx.obj['config'])
    runner.repl()
    ctx.exit(runner.finalize())


def main(argv: list[str] | None = None) -> None:
    a = list(sys.argv[1:] if argv is None else argv)
    flags = ('--verbose', '--validate', '--ignore', '--stats', '--plain', '--tokens', '--memory', '-i', '-p')
    g = [t for t in a if t in flags or t.startswith('-v') or t.startswith('--max-depth=')]
    r = [t for t in a if t not in g]
    pos = [t for t in r if not t.startswith('-')]
    has_dev_opt = any(t in ('-c', '-r', '--repl') or t.startswith('--command') or t.startswith('-c=') for t in r)

    if len(r) == 0:
        # No args: if stdin has data, treat as file '-', else REPL
        cmd, tail = ('run-file', ['-']) if not sys.stdin.isatty() else ('run-repl', [])
    elif r == ['-'] or (len(r) >= 2 and r[0] == '-f' and r[1] == '-'):
        cmd, tail = 'run-file', ['-']
    elif r == ['--repl']:
        cmd, tail = 'run-repl', []
    elif len(pos) == 1 and not has_dev_opt and pos[0].endswith('.kf') and Path(pos[0]).exists():
        cmd, tail = 'run-file', [pos[0]]
    else:
        cmd, tail = 'run-dev', r

    cli.main(args=[*g, cmd, *tail], prog_name='keyframe')


if __name__ == "__main__":
    main()
