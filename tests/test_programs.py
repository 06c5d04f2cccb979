import json
import logging
from pathlib import Path

import pytest

from matex.__main__ import main, configure_logging
from matex.interpreter import run_file, parse_program, Runtime
from matex.values import Number

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def run_example(capsys, name):
    main([str(EXAMPLES / name)])
    return capsys.readouterr().out.strip()


def test_program_1(capsys):
    assert run_example(capsys, 'program_1.matex') == '6'


def test_program_2(capsys):
    assert run_example(capsys, 'program_2.matex') == '5'


def test_program_3(capsys):
    assert run_example(capsys, 'program_3.matex') == '5 * x'


def test_program_4(capsys):
    assert run_example(capsys, 'program_4.matex') == '11'


def test_program_5(capsys):
    assert run_example(capsys, 'program_5.matex') == '12'


def test_program_6(capsys):
    assert run_example(capsys, 'program_6.matex') == '120'


def test_program_7(capsys):
    assert run_example(capsys, 'program_7.matex') == 'x^4'


def test_program_8(capsys):
    assert run_example(capsys, 'program_8.matex') == '-1'


def test_program_9(capsys):
    assert run_example(capsys, 'program_9.matex') == 'x^6'


def test_run_file():
    assert run_file(EXAMPLES / 'program_1.matex') == Number(6)


def test_runtime_error_exits_with_status_1(tmp_path, capsys):
    program = tmp_path / 'bad.matex'
    program.write_text('x = true + 1\n', encoding='utf-8')
    with pytest.raises(SystemExit) as exc:
        main([str(program)])
    assert exc.value.code == 1
    assert 'Runtime error: TypeMismatch' in capsys.readouterr().err


def test_parse_error_exits_with_status_1(tmp_path, capsys):
    program = tmp_path / 'bad.matex'
    program.write_text('1 +\n', encoding='utf-8')
    with pytest.raises(SystemExit) as exc:
        main([str(program)])
    assert exc.value.code == 1
    assert 'Parse error: UnexpectedEndOfStream' in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit):
        main([str(tmp_path / 'missing.matex')])
    assert 'not found' in capsys.readouterr().err


def test_unit_result_prints_nothing(tmp_path, capsys):
    program = tmp_path / 'define.matex'
    program.write_text('f(a) = a\n', encoding='utf-8')
    main([str(program)])
    assert capsys.readouterr().out == ''


def test_emit_and_run_ast(tmp_path, capsys):
    program = tmp_path / 'program.matex'
    program.write_text((EXAMPLES / 'program_6.matex').read_text(encoding='utf-8'), encoding='utf-8')
    main(['--emit-ast', str(program)])
    ast_path = Path(capsys.readouterr().out.strip())
    assert ast_path == tmp_path / 'program.matex.ast.json'
    data = json.loads(ast_path.read_text(encoding='utf-8'))
    assert data['type'] == 'Program'
    assert data['body'][0]['type'] == 'FunctionDefinition'
    main(['--ast', str(ast_path)])
    assert capsys.readouterr().out.strip() == '120'


def test_max_depth_flag(tmp_path, capsys):
    program = tmp_path / 'deep.matex'
    program.write_text('1+(1+(1+(1+(1+1))))\n', encoding='utf-8')
    with pytest.raises(SystemExit):
        main(['--max-depth', '3', str(program)])
    assert 'RecursionLimitExceeded' in capsys.readouterr().err


def test_verbose_writes_debug_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(['-vv', str(EXAMPLES / 'program_1.matex')])
    configure_logging(0)
    debug = (tmp_path / 'debug.txt').read_text(encoding='utf-8')
    assert 'matex.interpreter' in debug
    assert 'DEBUG' in debug


def test_configure_logging_levels(tmp_path):
    debug_file = str(tmp_path / 'debug.txt')
    logger = logging.getLogger('matex')
    try:
        configure_logging(1, debug_file)
        assert logger.level == logging.INFO
        configure_logging(3, debug_file)
        assert logger.level == logging.DEBUG
        assert len([h for h in logger.handlers if h.get_name() == 'matex-debug']) == 1
    finally:
        configure_logging(0)
    assert logger.level == logging.WARNING
    assert not [h for h in logger.handlers if h.get_name() == 'matex-debug']


def test_program_state_carries_over():
    runtime = Runtime()
    runtime.run(parse_program('double(a) = 2 * a'))
    assert runtime.run(parse_program('double(21)')) == Number(42)


def test_long_program(tmp_path, capsys):
    program = tmp_path / 'long.matex'
    program.write_text('+'.join(['x'] * 1000) + '\n', encoding='utf-8')
    main([str(program)])
    assert capsys.readouterr().out.strip() == '1000 * x'


def test_long_program_through_ast_file(tmp_path, capsys):
    program = tmp_path / 'long.matex'
    program.write_text('+'.join(['1'] * 500) + '\n', encoding='utf-8')
    main(['--emit-ast', str(program)])
    ast_path = capsys.readouterr().out.strip()
    main(['--ast', ast_path])
    assert capsys.readouterr().out.strip() == '500'


def test_too_deep_program_is_a_runtime_error(tmp_path, capsys):
    program = tmp_path / 'deep.matex'
    program.write_text('-' * 1500 + '1\n', encoding='utf-8')
    with pytest.raises(SystemExit) as exc:
        main([str(program)])
    assert exc.value.code == 1
    assert 'Runtime error: RecursionLimitExceeded' in capsys.readouterr().err
