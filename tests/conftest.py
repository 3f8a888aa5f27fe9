import stat
import sys
from collections.abc import Callable
from pathlib import Path

import pytest


def _add_src_to_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_add_src_to_path()


_PRELUDE = r'''
import os
import re
import sys
import time
from pathlib import Path

RECORD_DIR = {record_dir!r}

if sys.argv[1:] != ["-l"]:
    sys.exit(64)


def read_source():
    source = sys.stdin.read()
    if RECORD_DIR:
        Path(RECORD_DIR, str(os.getpid())).write_text(source, encoding="utf-8")
    return source
'''

# Line-oriented stand-in for `php -l`: statements end with `;`, methods with
# visibility modifiers only parse inside a class, braces must balance, HTML
# entities are parse errors.
PHP_LIKE_BODY = r'''
def php_like(source):
    if not source.startswith("<?php"):
        return 0
    function = re.compile(
        r"^((?:public|protected|private|static)\s+)*function\s+\w+\s*\(.*\)\s*\{$"
    )
    stack = ["top"]
    for raw in source[len("<?php"):].split("\n"):
        line = raw.split("//", 1)[0].strip()
        if not line:
            continue
        if re.search(r"&(?:amp|lt|gt|quot|#\d+);", line):
            return 255
        match = function.match(line)
        if line.startswith("class ") and line.endswith("{"):
            if stack[-1] != "top":
                return 255
            stack.append("class")
        elif match:
            if match.group(1) and stack[-1] != "class":
                return 255
            stack.append("function")
        elif line == "}":
            if len(stack) == 1:
                return 255
            stack.pop()
        elif line.endswith(";"):
            if stack[-1] == "class":
                return 255
        else:
            return 255
    return 0 if stack == ["top"] else 255
'''

FAKE_CHECKERS: dict[str, str] = {
    "php_like": PHP_LIKE_BODY + "\nsource = read_source()\nsys.exit(php_like(source))\n",
    "hang": "\nsource = read_source()\ntime.sleep(60)\n",
    "hang_plain": (
        "\nsource = read_source()\n"
        "if 'class Foo {' in source:\n"
        "    time.sleep(2)\n"
        "    sys.exit(0)\n"
        "time.sleep(60)\n"
    ),
    "hang_on_marker": (
        PHP_LIKE_BODY
        + "\nsource = read_source()\n"
        "if 'hang();' in source:\n"
        "    time.sleep(60)\n"
        "sys.exit(php_like(source))\n"
    ),
    "exit_early": "\nsys.exit(0)\n",
}


@pytest.fixture
def record_dir(tmp_path: Path) -> Path:
    path = tmp_path / "invocations"
    path.mkdir()
    return path


@pytest.fixture
def make_checker(tmp_path: Path, record_dir: Path) -> Callable[..., Path]:
    """Write an executable fake checker script and return its path."""

    def _make(kind: str, record: bool = True) -> Path:
        script = tmp_path / f"fake_{kind}"
        prelude = _PRELUDE.format(record_dir=str(record_dir) if record else "")
        script.write_text(
            f"#!{sys.executable}\n{prelude}{FAKE_CHECKERS[kind]}", encoding="utf-8"
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make

